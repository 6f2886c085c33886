"""Tests for ScheduleCalculator."""
from datetime import date, timedelta

import pytest

from django_course_pricing.context import CourseContext
from django_course_pricing.schedule import ScheduleCalculator
from django_course_pricing.weekdays import WeekdayTable


def monday_course(total_sessions=4, holidays=None, **overrides):
    """Course running on Mondays from Monday 1 January 2024."""
    values = {
        'product_id': '1',
        'variation_id': '2',
        'total_sessions': total_sessions,
        'start_date': '2024-01-01',
        'holidays': holidays or [],
        'weekday': 1,
    }
    values.update(overrides)
    return CourseContext(**values)


@pytest.fixture
def calculator():
    return ScheduleCalculator(weekday_table=WeekdayTable(), search_window_weeks=2)


class TestResolveWeekday:
    """Test suite for weekday resolution."""

    def test_numeric_weekday_used_directly(self, calculator):
        assert calculator.resolve_weekday(monday_course()) == 1

    def test_label_resolved_when_weekday_missing(self, calculator):
        context = monday_course(weekday=0, weekday_label='Mittwoch')
        assert calculator.resolve_weekday(context) == 3

    def test_unresolved_label_yields_zero(self, calculator):
        context = monday_course(weekday=0, weekday_label='sometimes')
        assert calculator.resolve_weekday(context) == 0


class TestEndDate:
    """Test suite for end date projection."""

    def test_four_mondays_without_holidays(self, calculator):
        """Four Mondays from 2024-01-01 end on 2024-01-22."""
        assert calculator.end_date(monday_course(4)) == date(2024, 1, 22)

    def test_holiday_on_course_day_extends_course(self, calculator):
        """A Monday holiday pushes the end date one week later."""
        context = monday_course(4, holidays=['2024-01-08'])
        assert calculator.end_date(context) == date(2024, 1, 29)

    def test_holiday_on_other_weekday_is_irrelevant(self, calculator):
        context = monday_course(4, holidays=['2024-01-09', '2024-01-14'])
        assert calculator.end_date(context) == date(2024, 1, 22)

    def test_start_date_not_on_course_day(self, calculator):
        """Sessions begin on the first matching weekday on or after the start date."""
        context = monday_course(3, start_date='2024-01-03')
        assert calculator.end_date(context) == date(2024, 1, 22)

    def test_end_date_is_nth_matching_non_holiday_day(self, calculator):
        holidays = ['2024-01-15', '2024-02-05', '2024-01-17']
        context = monday_course(6, holidays=holidays)

        day = context.start_date
        found = []
        while len(found) < 6:
            if day.isoweekday() == 1 and day not in context.holidays:
                found.append(day)
            day += timedelta(days=1)

        assert calculator.end_date(context) == found[-1]

    def test_end_date_absent_without_weekday(self, calculator):
        assert calculator.end_date(monday_course(weekday=0)) is None

    def test_end_date_absent_without_start_date(self, calculator):
        assert calculator.end_date(monday_course(start_date=None)) is None

    def test_end_date_absent_without_sessions(self, calculator):
        assert calculator.end_date(monday_course(0)) is None


class TestTotalSessions:
    """Test suite for total session counting."""

    def test_counts_configured_sessions(self, calculator):
        assert calculator.total_sessions(monday_course(10)) == 10

    def test_holidays_do_not_reduce_count(self, calculator):
        context = monday_course(10, holidays=['2024-01-08', '2024-01-15'])
        assert calculator.total_sessions(context) == 10

    def test_zero_sessions(self, calculator):
        assert calculator.total_sessions(monday_course(0)) == 0

    def test_unscheduled_course_returns_configured_count(self, calculator):
        assert calculator.total_sessions(monday_course(7, weekday=0)) == 7
        assert calculator.total_sessions(monday_course(7, start_date=None)) == 7

    def test_search_window_caps_walk(self, calculator):
        """When holidays exhaust the window, the sessions actually found are returned."""
        # Two sessions -> 28-day window (1-28 January); three Monday holidays leave only the 22nd
        context = monday_course(2, holidays=['2024-01-01', '2024-01-08', '2024-01-15'])

        assert calculator.total_sessions(context) == 1
        assert calculator.end_date(context) == date(2024, 1, 22)

    def test_wider_window_finds_all_sessions(self):
        calculator = ScheduleCalculator(weekday_table=WeekdayTable(), search_window_weeks=4)
        context = monday_course(2, holidays=['2024-01-01', '2024-01-08', '2024-01-15'])

        assert calculator.total_sessions(context) == 2
        assert calculator.end_date(context) == date(2024, 1, 29)

    def test_window_setting_used_by_default(self, settings):
        settings.COURSE_PRICING_SEARCH_WINDOW_WEEKS = 5
        assert ScheduleCalculator().search_window_weeks == 5


class TestRemainingSessions:
    """Test suite for remaining session counting."""

    def test_zero_sessions_configured(self, calculator):
        assert calculator.remaining_sessions(monday_course(0), date(2024, 1, 10)) == 0

    def test_before_start_all_sessions_remain(self, calculator):
        assert calculator.remaining_sessions(monday_course(4), date(2023, 12, 1)) == 4

    def test_on_start_date_all_sessions_remain(self, calculator):
        assert calculator.remaining_sessions(monday_course(4), date(2024, 1, 1)) == 4

    def test_mid_course(self, calculator):
        """On Wednesday 10 January, the 15th and 22nd remain."""
        assert calculator.remaining_sessions(monday_course(4), date(2024, 1, 10)) == 2

    def test_session_day_counts_as_remaining(self, calculator):
        assert calculator.remaining_sessions(monday_course(4), date(2024, 1, 22)) == 1

    def test_after_end_nothing_remains(self, calculator):
        assert calculator.remaining_sessions(monday_course(4), date(2024, 1, 23)) == 0

    def test_missing_start_date_fails_open(self, calculator):
        context = monday_course(4, start_date=None)
        assert calculator.remaining_sessions(context, date(2030, 1, 1)) == 4

    def test_unresolved_weekday_fails_open(self, calculator):
        context = monday_course(4, weekday=0, weekday_label='unknown')
        assert calculator.remaining_sessions(context, date(2030, 1, 1)) == 4

    def test_no_projectable_end_date_fails_open(self, calculator):
        """If the window holds no session at all, the full term is treated as remaining."""
        context = monday_course(1, holidays=['2024-01-01', '2024-01-08'])

        assert calculator.end_date(context) is None
        assert calculator.remaining_sessions(context, date(2024, 1, 5)) == 1

    def test_holiday_skipped_in_remaining_count(self, calculator):
        context = monday_course(4, holidays=['2024-01-15'])
        # Remaining from 10 January: 22nd and 29th (15th is a holiday)
        assert calculator.remaining_sessions(context, date(2024, 1, 10)) == 2

    def test_irrelevant_holidays_do_not_change_remaining(self, calculator):
        base = monday_course(6)
        with_holidays = monday_course(6, holidays=['2024-01-02', '2024-01-20', '2024-02-01'])

        day = date(2023, 12, 25)
        while day <= date(2024, 2, 20):
            assert (
                calculator.remaining_sessions(base, day)
                == calculator.remaining_sessions(with_holidays, day)
            )
            day += timedelta(days=1)


class TestConservation:
    """Remaining plus elapsed sessions always add up to the configured total."""

    @pytest.mark.parametrize('holidays', [
        [],
        ['2024-01-08'],
        ['2024-01-15', '2024-01-29', '2024-01-31'],
    ])
    def test_remaining_plus_elapsed_equals_total(self, calculator, holidays):
        context = monday_course(8, holidays=holidays)
        end = calculator.end_date(context)

        day = context.start_date
        while day <= end:
            remaining = calculator.remaining_sessions(context, day)
            elapsed = calculator.sessions_elapsed(context, day)
            assert remaining + elapsed == context.total_sessions, day
            day += timedelta(days=1)

    def test_elapsed_before_start_is_zero(self, calculator):
        assert calculator.sessions_elapsed(monday_course(4), date(2023, 12, 31)) == 0

    def test_elapsed_after_end_is_total(self, calculator):
        assert calculator.sessions_elapsed(monday_course(4), date(2024, 3, 1)) == 4
