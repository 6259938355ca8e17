"""
Tests for half-open date ranges.
"""

import pytest
from datetime import date, datetime, timedelta

from models.date_range import DateRange, overlaps, parse_date
from models.exceptions import InvalidDate, InvalidRange


def make_range(start, end):
    return DateRange.parse(start, end)


class TestParseDate:
    """Tests for YYYY-MM-DD parsing."""

    def test_parse_string(self):
        assert parse_date('2025-06-01') == date(2025, 6, 1)

    def test_parse_strips_whitespace(self):
        assert parse_date(' 2025-06-01 ') == date(2025, 6, 1)

    def test_date_and_datetime_pass_through(self):
        assert parse_date(date(2025, 6, 1)) == date(2025, 6, 1)
        assert parse_date(datetime(2025, 6, 1, 14, 30)) == date(2025, 6, 1)

    @pytest.mark.parametrize('value', ['', None, '01/06/2025', '2025-13-01', 'tomorrow', 20250601])
    def test_invalid_values(self, value):
        with pytest.raises(InvalidDate):
            parse_date(value)

    @pytest.mark.parametrize('value', ['2025-6-1', '2025-06-1', '2025-6-01', '25-06-01', '2025-06-01T00:00'])
    def test_requires_zero_padded_iso(self, value):
        with pytest.raises(InvalidDate):
            parse_date(value)

    def test_invalid_date_keeps_field(self):
        with pytest.raises(InvalidDate) as excinfo:
            parse_date('nope', 'start')
        assert excinfo.value.field == 'start'
        assert 'start' in str(excinfo.value)


class TestDateRange:
    """Tests for range construction."""

    def test_valid_range(self):
        date_range = make_range('2025-06-01', '2025-06-05')
        assert date_range.start == date(2025, 6, 1)
        assert date_range.end == date(2025, 6, 5)
        assert date_range.nights == 4

    def test_one_night(self):
        assert make_range('2025-06-01', '2025-06-02').nights == 1

    def test_empty_range_rejected(self):
        """A same-day range books no night."""
        with pytest.raises(InvalidRange):
            make_range('2025-06-01', '2025-06-01')

    def test_reversed_range_rejected(self):
        with pytest.raises(InvalidRange):
            make_range('2025-06-05', '2025-06-01')

    def test_invalid_date_before_range_check(self):
        with pytest.raises(InvalidDate):
            make_range('2025-06-05', 'bad')

    def test_range_errors_are_value_errors(self):
        with pytest.raises(ValueError):
            make_range('2025-06-05', '2025-06-01')

    def test_immutable(self):
        date_range = make_range('2025-06-01', '2025-06-05')
        with pytest.raises(AttributeError):
            date_range.start = date(2025, 1, 1)

    def test_coerce(self):
        date_range = make_range('2025-06-01', '2025-06-05')
        assert DateRange.coerce(date_range) is date_range
        assert DateRange.coerce(('2025-06-01', '2025-06-05')) == date_range

    def test_equality_and_hash(self):
        first = make_range('2025-06-01', '2025-06-05')
        second = make_range('2025-06-01', '2025-06-05')
        assert first == second
        assert len({first, second}) == 1

    def test_isoformat(self):
        assert make_range('2025-06-01', '2025-06-05').isoformat() == ('2025-06-01', '2025-06-05')

    def test_str(self):
        assert str(make_range('2025-06-01', '2025-06-05')) == '[2025-06-01, 2025-06-05)'


class TestOverlaps:
    """Tests for the overlap predicate."""

    @pytest.mark.parametrize('first, second, expected', [
        (('2025-06-01', '2025-06-05'), ('2025-06-03', '2025-06-08'), True),
        (('2025-06-01', '2025-06-05'), ('2025-06-02', '2025-06-03'), True),
        (('2025-06-01', '2025-06-05'), ('2025-06-01', '2025-06-05'), True),
        (('2025-06-01', '2025-06-05'), ('2025-05-20', '2025-06-02'), True),
        (('2025-06-01', '2025-06-05'), ('2025-06-05', '2025-06-10'), False),
        (('2025-06-01', '2025-06-05'), ('2025-05-25', '2025-06-01'), False),
        (('2025-06-01', '2025-06-05'), ('2025-07-01', '2025-07-05'), False),
    ])
    def test_overlap_is_symmetric(self, first, second, expected):
        a = make_range(*first)
        b = make_range(*second)
        assert overlaps(a, b) is expected
        assert overlaps(b, a) is expected
        assert a.overlaps(b) is expected

    def test_touching_ranges_never_overlap(self):
        """Checkout day may be the next check-in day."""
        stay = make_range('2025-06-01', '2025-06-05')
        for days in range(1, 10):
            after = DateRange(stay.end, stay.end + timedelta(days=days))
            before = DateRange(stay.start - timedelta(days=days), stay.start)
            assert not overlaps(stay, after)
            assert not overlaps(before, stay)
