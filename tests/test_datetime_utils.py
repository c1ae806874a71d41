"""Tests for day-granularity datetime helpers."""

from datetime import date, datetime

from todo_md.utils.datetime import (
    diff_in_whole_days,
    is_same_calendar_day,
    parse_iso_date,
    parse_iso_datetime,
    shift_by_days,
    to_date_string,
    to_iso_string,
    truncate_to_date,
)


class TestDateMath:
    """Diff, shift, truncate and same-day checks."""

    def test_diff_sign_follows_b_minus_a(self):
        assert diff_in_whole_days(date(2018, 1, 1), date(2018, 1, 11)) == 10
        assert diff_in_whole_days(date(2018, 1, 11), date(2018, 1, 1)) == -10

    def test_diff_ignores_time_of_day(self):
        late = datetime(2018, 1, 1, 23, 30)
        early = datetime(2018, 1, 2, 0, 15)
        assert diff_in_whole_days(late, early) == 1
        assert diff_in_whole_days(datetime(2018, 1, 1, 1), datetime(2018, 1, 1, 22)) == 0

    def test_diff_across_year(self):
        assert diff_in_whole_days(date(2019, 12, 31), date(2020, 3, 1)) == 61

    def test_shift_by_days(self):
        assert shift_by_days(date(2018, 1, 1), 30) == date(2018, 1, 31)
        assert shift_by_days(date(2018, 1, 1), -1) == date(2017, 12, 31)
        assert shift_by_days(datetime(2018, 1, 1, 8), 1) == datetime(2018, 1, 2, 8)

    def test_truncate_to_date(self):
        assert truncate_to_date(datetime(2018, 5, 6, 7, 8, 9)) == date(2018, 5, 6)
        assert truncate_to_date(date(2018, 5, 6)) == date(2018, 5, 6)

    def test_is_same_calendar_day(self):
        assert is_same_calendar_day(datetime(2018, 1, 1, 0, 0), datetime(2018, 1, 1, 23, 59))
        assert not is_same_calendar_day(datetime(2018, 1, 1, 23, 59), datetime(2018, 1, 2, 0, 0))


class TestParsing:
    """Strict ISO parsing and formatting."""

    def test_parse_iso_date(self):
        assert parse_iso_date("2020-04-30") == date(2020, 4, 30)

    def test_parse_iso_date_rejects_malformed(self):
        assert parse_iso_date("2020-4-30") is None
        assert parse_iso_date("2020-02-30") is None
        assert parse_iso_date("2020-04-30T10:00:00") is None
        assert parse_iso_date("tomorrow") is None
        assert parse_iso_date("٢٠٢٠-٠٤-٣٠") is None

    def test_parse_iso_datetime_rejects_non_ascii_digits(self):
        assert parse_iso_datetime("2020-04-30T٠٩:11:17") is None

    def test_parse_iso_datetime(self):
        assert parse_iso_datetime("2020-04-30T09:11:17") == datetime(2020, 4, 30, 9, 11, 17)
        assert parse_iso_datetime("2020-04-30") == datetime(2020, 4, 30)
        assert parse_iso_datetime("2020-04-30T25:00:00") is None

    def test_formatting(self):
        moment = datetime(2020, 4, 30, 9, 11, 17)
        assert to_date_string(moment) == "2020-04-30"
        assert to_iso_string(moment) == "2020-04-30"
        assert to_iso_string(moment, include_time=True) == "2020-04-30T09:11:17"
        assert to_iso_string(None) is None
