"""
Тесты для общего ядра: интервал времени и утилиты.
"""
from datetime import datetime, timedelta, timezone

import pytest
from pydantic import ValidationError

from booking_calendar.shared_kernel import (
    TimeInterval,
    same_identity,
    to_utc,
    truncate_to_minute,
)
from factories import at


def interval(start_hour, start_minute, end_hour, end_minute=0) -> TimeInterval:
    return TimeInterval(start=at(start_hour, start_minute), end=at(end_hour, end_minute))


CASES = [
    # (a, b, ожидаемое пересечение)
    (interval(10, 0, 11), interval(11, 0, 12), False),  # касание
    (interval(10, 0, 12), interval(10, 30, 11), True),  # вложенность
    (interval(10, 0, 11), interval(10, 0, 11), True),  # совпадение
    (interval(10, 0, 11), interval(12, 0, 13), False),  # не пересекаются
    (interval(10, 0, 11), interval(10, 30, 11, 30), True),  # частично справа
    (interval(10, 30, 11, 30), interval(10, 0, 11), True),  # частично слева
]


class TestTimeInterval:
    """Тесты для TimeInterval."""

    @pytest.mark.parametrize("a, b, expected", CASES)
    def test_overlap_is_symmetric(self, a, b, expected):
        assert a.overlaps(b) is expected
        assert b.overlaps(a) is expected

    def test_touching_intervals_do_not_overlap(self):
        a, b = interval(10, 0, 11), interval(11, 0, 12)

        assert not a.overlaps(b)
        assert a.touches(b)
        assert b.touches(a)

    def test_end_must_be_after_start(self):
        with pytest.raises(ValidationError, match="Конец интервала"):
            TimeInterval(start=at(11), end=at(10))

        with pytest.raises(ValidationError):
            TimeInterval(start=at(10), end=at(10))

    def test_contains_is_half_open(self):
        a = interval(10, 0, 11)

        assert a.contains(at(10))
        assert a.contains(at(10, 59))
        assert not a.contains(at(11))

    def test_duration(self):
        assert interval(10, 0, 11, 30).duration == timedelta(minutes=90)

    def test_naive_datetimes_are_treated_as_utc(self):
        a = TimeInterval(start=datetime(2024, 6, 1, 10), end=datetime(2024, 6, 1, 11))

        assert a.start == at(10)
        assert a.start.tzinfo is not None


def test_to_utc_converts_aware_values():
    plus_three = timezone(timedelta(hours=3))
    value = datetime(2024, 6, 1, 12, 0, tzinfo=plus_three)

    assert to_utc(value) == at(9)
    assert to_utc(value).utcoffset() == timedelta(0)


def test_truncate_to_minute():
    value = datetime(2024, 6, 1, 10, 15, 42, 123456, tzinfo=timezone.utc)

    assert truncate_to_minute(value) == at(10, 15)


def test_same_identity_compares_string_form():
    assert same_identity(5, "5")
    assert not same_identity(5, 6)
    assert not same_identity(None, None)
    assert not same_identity(None, 1)


def test_public_utilities():
    import booking_calendar.shared_kernel as kernel

    assert "now" not in kernel.__all__
    assert {"same_identity", "to_utc", "truncate_to_minute"} <= set(kernel.__all__)
