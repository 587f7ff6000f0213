"""Alerting failures. Raised inside the alert layer, reported to the user by the dispatcher."""


class AlertError(Exception):
    """Base class for alert failures."""


class NoContactError(AlertError):
    def __init__(self):
        super().__init__("No emergency contact configured")


class SmsPermissionError(AlertError):
    def __init__(self):
        super().__init__("Cannot send SMS: permission denied")


class InvalidPhoneNumberError(AlertError):
    def __init__(self, number: str):
        self.number = number
        super().__init__(f"Invalid phone number: {number}")
