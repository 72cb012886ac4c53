"""Tests for the kiosk scan cooldown."""

from datetime import datetime, timedelta, timezone

import pytest

from timekeeping.exceptions import DuplicateScanError
from timekeeping.services import ScanCooldown

T0 = datetime(2024, 3, 4, 0, 0, tzinfo=timezone.utc)


class TestScanCooldown:
    """Test per-employee cooldown windows."""

    def test_first_scan_allowed(self):
        ScanCooldown(60).check("EMP-001", T0)

    def test_rescan_within_window_rejected(self):
        cooldown = ScanCooldown(60)
        cooldown.mark("EMP-001", T0)

        with pytest.raises(DuplicateScanError) as exc_info:
            cooldown.check("EMP-001", T0 + timedelta(seconds=20))

        assert exc_info.value.employee_id == "EMP-001"
        assert exc_info.value.retry_after_seconds == 40

    def test_retry_after_rounds_up(self):
        cooldown = ScanCooldown(60)
        cooldown.mark("EMP-001", T0)

        with pytest.raises(DuplicateScanError) as exc_info:
            cooldown.check("EMP-001", T0 + timedelta(seconds=59, milliseconds=500))

        assert exc_info.value.retry_after_seconds == 1

    def test_window_expires(self):
        cooldown = ScanCooldown(60)
        cooldown.mark("EMP-001", T0)
        cooldown.check("EMP-001", T0 + timedelta(seconds=60))

    def test_other_employees_unaffected(self):
        cooldown = ScanCooldown(60)
        cooldown.mark("EMP-001", T0)
        cooldown.check("EMP-002", T0 + timedelta(seconds=1))

    def test_clear(self):
        cooldown = ScanCooldown(60)
        cooldown.mark("EMP-001", T0)
        cooldown.clear()
        cooldown.check("EMP-001", T0)
