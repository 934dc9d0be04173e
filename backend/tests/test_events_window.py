from datetime import datetime, timedelta, timezone

import pytest

from clubhub.core.errors import ValidationError
from clubhub.services.events import as_utc, validate_window


def test_naive_datetimes_are_treated_as_utc():
    naive = datetime(2026, 6, 1, 9, 30)
    assert as_utc(naive) == datetime(2026, 6, 1, 9, 30, tzinfo=timezone.utc)


def test_aware_datetimes_are_converted():
    plus_one = timezone(timedelta(hours=1))
    assert as_utc(datetime(2026, 6, 1, 10, 30, tzinfo=plus_one)) == datetime(2026, 6, 1, 9, 30, tzinfo=timezone.utc)


def test_window_must_be_ordered():
    start = datetime(2026, 6, 1, 9, tzinfo=timezone.utc)
    validate_window(start, start + timedelta(minutes=1))
    with pytest.raises(ValidationError):
        validate_window(start, start)
    with pytest.raises(ValidationError):
        validate_window(start, start - timedelta(hours=1))


def test_window_compares_across_offsets():
    start = datetime(2026, 6, 1, 10, tzinfo=timezone(timedelta(hours=2)))
    # 09:00 UTC ends after 08:00 UTC start
    validate_window(start, datetime(2026, 6, 1, 9, tzinfo=timezone.utc))
