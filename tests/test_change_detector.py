from wallet_monitor.modules.balances import change_detector
from wallet_monitor.modules.balances.models import to_major_units


class TestChangeDetector:
    def test_first_observation_is_a_change(self):
        assert change_detector.has_changed(None, 0) is True
        assert change_detector.has_changed(None, 12345) is True

    def test_equal_balances_are_not_a_change(self):
        assert change_detector.has_changed(100, 100) is False

    def test_different_balances_are_a_change(self):
        assert change_detector.has_changed(100, 150) is True
        assert change_detector.has_changed(150, 100) is True

    def test_delta_is_signed(self):
        assert change_detector.delta(100, 150) == 50
        assert change_detector.delta(150, 100) == -50
        assert change_detector.delta(None, 150) == 0

    def test_major_units_conversion(self):
        assert to_major_units(12345) == 123.45
        assert to_major_units(-545) == -5.45
        assert to_major_units(0) == 0.0
