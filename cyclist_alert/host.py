"""
Detection session host.

Runs the classifier synchronously on the sample thread while alert dispatch
runs on a separate thread with its own asyncio event loop.
"""

import asyncio
import logging
import threading

from .alerts.client import AsyncSmsClient
from .alerts.dispatcher import AlertDispatcher, log_notification
from .config.settings import Settings, get_settings
from .detectors.fall_classifier import ClassifierConfig, FallClassifier
from .detectors.types import AccelerationSample, FallEvent
from .events.manager import FallEventManager
from .location import LocationTracker
from .preferences import EmergencyContact, PreferencesStore
from .sensors.source import SampleSource

logger = logging.getLogger(__name__)


class AsyncEventProcessor:
    """Runs event processing in a separate thread with its own event loop."""

    def __init__(self, event_manager: FallEventManager, shutdown_timeout: float = 30.0):
        self.event_manager = event_manager
        self.shutdown_timeout = shutdown_timeout
        self.loop: asyncio.AbstractEventLoop | None = None
        self.thread: threading.Thread | None = None
        self._task: asyncio.Task | None = None
        self._ready = threading.Event()

    def start(self):
        """Start the async processor in a separate thread."""
        self._ready.clear()
        self.thread = threading.Thread(target=self._run_event_loop, daemon=False)
        self.thread.start()
        self._ready.wait(timeout=5)
        logger.info("Async event processor thread started")

    def _run_event_loop(self):
        """Run the event loop in thread."""
        self.loop = asyncio.new_event_loop()
        asyncio.set_event_loop(self.loop)

        try:
            self.loop.run_until_complete(self._serve())
        except Exception as e:
            logger.error(f"Event processor error: {e}", exc_info=True)
        finally:
            self.loop.close()

    async def _serve(self):
        self._task = asyncio.create_task(self.event_manager.process_events())
        self._ready.set()
        try:
            await self._task
        except asyncio.CancelledError:
            pass
        finally:
            await self.event_manager.dispatcher.client.close()

    async def _shutdown(self):
        await self.event_manager.stop(timeout=self.shutdown_timeout)
        if self._task:
            self._task.cancel()

    def submit(self, event: FallEvent) -> bool:
        """Hand an event to the manager from any thread (non-blocking)."""
        if not self.is_running:
            logger.error("Event processor not running, dropping fall event")
            return False
        self.loop.call_soon_threadsafe(self.event_manager.trigger_fall, event)
        return True

    @property
    def is_running(self) -> bool:
        return (
            self.thread is not None
            and self.thread.is_alive()
            and self.loop is not None
            and not self.loop.is_closed()
        )

    def stop(self):
        """Drain queued events, then stop the event loop thread."""
        if self.is_running:
            future = asyncio.run_coroutine_threadsafe(self._shutdown(), self.loop)
            try:
                future.result(timeout=self.shutdown_timeout + 5)
            except TimeoutError:
                logger.warning("Timed out waiting for event processor shutdown")

        if self.thread:
            self.thread.join(timeout=30)
            logger.info("Async event processor thread stopped")


class CyclistAlertSystem:
    """
    Wires SampleSource → FallClassifier → FallEventManager → AlertDispatcher.

    A detection session lasts from start() to stop(). Each session gets a
    fresh classifier, so the cooldown does not survive a stop. The
    sensitivity factor does survive and is reapplied on the next start.
    """

    def __init__(
        self,
        settings: Settings | None = None,
        client: AsyncSmsClient | None = None,
        notify=log_notification,
        dry_run: bool = False,
    ):
        """
        Initialize system components.

        Args:
            settings: Settings instance (defaults to get_settings())
            client: SMS client override (defaults to one built from settings)
            notify: Callback receiving user-facing messages
            dry_run: Log alert messages instead of sending them
        """
        self.settings = settings or get_settings()
        self.sensitivity = self.settings.FALL_SENSITIVITY

        self.preferences = PreferencesStore(self.settings.PREFERENCES_PATH)
        self.location = LocationTracker(initial=self.preferences.load_location())

        self.client = client or AsyncSmsClient(
            endpoint=self.settings.SMS_GATEWAY_URL,
            api_key=self.settings.API_KEY,
            sender_id=self.settings.SMS_SENDER_ID,
            timeout=self.settings.API_TIMEOUT,
            retry_attempts=self.settings.API_RETRY_ATTEMPTS,
            retry_delays=self.settings.API_RETRY_DELAYS,
        )
        self.dispatcher = AlertDispatcher(
            client=self.client,
            location=self.location,
            contact_provider=self.current_contact,
            sms_enabled=self.settings.SMS_ENABLED,
            country_code=self.settings.DEFAULT_COUNTRY_CODE,
            notify=notify,
            dry_run=dry_run,
        )
        self.event_manager: FallEventManager | None = None
        self.processor: AsyncEventProcessor | None = None

        self.classifier: FallClassifier | None = None
        self.running = False
        self._source: SampleSource | None = None

        logger.info("All components initialized successfully")

    def current_contact(self) -> EmergencyContact | None:
        """Saved contact, falling back to the one from settings."""
        contact = self.preferences.load_contact()
        if contact is None and self.settings.CONTACT_NUMBER.strip():
            contact = EmergencyContact(
                self.settings.CONTACT_NAME or "Unknown", self.settings.CONTACT_NUMBER
            )
        return contact

    def set_contact(self, name: str, number: str) -> EmergencyContact:
        contact = EmergencyContact(name, number)
        self.preferences.save_contact(contact)
        return contact

    def on_location(self, latitude: float, longitude: float, timestamp_ms: int | None = None):
        """Location callback: update the tracker and persist the fix."""
        point = self.location.update(latitude, longitude, timestamp_ms)
        try:
            self.preferences.save_location(point)
        except OSError as e:
            logger.warning(f"Could not persist location: {e}")

    def adjust_sensitivity(self, factor: float):
        self.sensitivity = factor
        if self.classifier is not None:
            self.classifier.adjust_sensitivity(factor)

    def start(self):
        """Begin a detection session."""
        if self.running:
            return
        self.classifier = FallClassifier(
            ClassifierConfig(
                low_threshold=self.settings.LOW_THRESHOLD,
                min_interval_ms=self.settings.MIN_INTERVAL_MS,
            )
        )
        self.classifier.adjust_sensitivity(self.sensitivity)

        # asyncio queues are bound to one loop, so each session gets its own
        self.event_manager = FallEventManager(self.dispatcher)
        self.processor = AsyncEventProcessor(self.event_manager)
        self.processor.start()
        self.running = True
        logger.info("Fall detection ON")

    def on_sample(self, sample: AccelerationSample) -> FallEvent | None:
        """Sensor callback: classify one sample and hand off any event."""
        if not self.running or self.classifier is None:
            return None
        event = self.classifier.observe(sample)
        if event is not None:
            self.processor.submit(event)
        return event

    def run(self, source: SampleSource) -> int:
        """
        Feed every sample from ``source`` through the session.

        Blocks until the source is exhausted or stop() is called, then
        stops the session.

        Returns:
            Number of fall events detected
        """
        self._source = source
        self.start()
        detected = 0
        try:
            for sample in source:
                if not self.running:
                    break
                if self.on_sample(sample) is not None:
                    detected += 1
        finally:
            self.stop()
        return detected

    def stop(self):
        """End the session: stop sampling, drain alerts, drop classifier state."""
        if not self.running:
            return
        self.running = False
        logger.info("=" * 80)
        logger.info("Shutting down detection session...")
        logger.info("=" * 80)

        if self._source is not None:
            self._source.close()
            self._source = None

        logger.info(f"Samples processed: {self.classifier.samples_seen}")
        self.processor.stop()
        self.event_manager.log_statistics()
        self.classifier = None
        logger.info("Fall detection OFF")
