"""
Unit tests for date utilities
"""

import pytest
from datetime import datetime, timedelta, timezone

from utils.date_utils import utc_now, now_millis, to_iso_string


@pytest.mark.unit
class TestDateUtils:
    """Test date utility functions"""

    def test_utc_now_is_naive_utc(self):
        """Test utc_now returns a naive datetime close to the current UTC time"""
        now = utc_now()
        assert now.tzinfo is None
        reference = datetime.now(timezone.utc).replace(tzinfo=None)
        assert abs(reference - now) < timedelta(seconds=5)

    def test_now_millis(self):
        assert abs(now_millis() - datetime.now(timezone.utc).timestamp() * 1000) < 5000

    def test_to_iso_string_millisecond_precision(self):
        """Test ISO output keeps milliseconds and ends with Z"""
        value = datetime(2024, 1, 2, 3, 4, 5, 678901)
        assert to_iso_string(value) == "2024-01-02T03:04:05.678Z"

    def test_to_iso_string_zero_millis(self):
        assert to_iso_string(datetime(2024, 1, 1)) == "2024-01-01T00:00:00.000Z"

    def test_to_iso_string_converts_aware_values(self):
        """Test timezone-aware values are converted to UTC"""
        tz = timezone(timedelta(hours=8))
        value = datetime(2024, 1, 1, 8, 0, 0, tzinfo=tz)
        assert to_iso_string(value) == "2024-01-01T00:00:00.000Z"

    def test_to_iso_string_none(self):
        assert to_iso_string(None) is None
