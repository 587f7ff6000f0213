"""Unit tests for the location tracker and persisted preferences."""

from cyclist_alert import EmergencyContact, GeoPoint, LocationTracker, PreferencesStore


class TestLocationTracker:
    def test_unknown_until_first_fix(self):
        tracker = LocationTracker()
        point = tracker.current()

        assert not tracker.has_fix
        assert point.is_unknown
        assert (point.latitude, point.longitude) == (0.0, 0.0)

    def test_update_replaces_fix(self):
        tracker = LocationTracker()
        tracker.update(-12.05, -77.04, 1000)
        tracker.update(-12.06, -77.05, 2000)

        assert tracker.current() == GeoPoint(-12.06, -77.05, 2000)
        assert tracker.updates == 2
        assert tracker.has_fix

    def test_seeded_with_initial_fix(self):
        tracker = LocationTracker(initial=GeoPoint(1.5, 2.5))

        assert tracker.current().latitude == 1.5
        assert tracker.updates == 0


class TestPreferencesStore:
    def test_missing_file_is_empty(self, tmp_path):
        store = PreferencesStore(tmp_path / "prefs.json")

        assert store.load_contact() is None
        assert store.load_location() is None

    def test_contact_round_trip(self, tmp_path):
        store = PreferencesStore(tmp_path / "nested" / "prefs.json")
        store.save_contact(EmergencyContact("Ana", "987 654 321"))

        assert store.load_contact() == EmergencyContact("Ana", "987 654 321")

    def test_location_does_not_clobber_contact(self, tmp_path):
        store = PreferencesStore(tmp_path / "prefs.json")
        store.save_contact(EmergencyContact("Ana", "987654321"))
        store.save_location(GeoPoint(-12.0, -77.0, 5000))

        assert store.load_contact().name == "Ana"
        assert store.load_location() == GeoPoint(-12.0, -77.0, 5000)

    def test_contact_without_name(self, tmp_path):
        path = tmp_path / "prefs.json"
        path.write_text('{"contact_number": "987654321"}')

        assert PreferencesStore(path).load_contact() == EmergencyContact("Unknown", "987654321")

    def test_blank_number_is_no_contact(self, tmp_path):
        path = tmp_path / "prefs.json"
        path.write_text('{"contact_name": "Ana", "contact_number": "  "}')

        assert PreferencesStore(path).load_contact() is None

    def test_corrupt_file_treated_as_empty(self, tmp_path):
        path = tmp_path / "prefs.json"
        path.write_text("{not json")
        store = PreferencesStore(path)

        assert store.load_contact() is None

        store.save_contact(EmergencyContact("Luis", "912345678"))
        assert store.load_contact().number == "912345678"
