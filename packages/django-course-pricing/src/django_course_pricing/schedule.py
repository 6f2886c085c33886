"""Schedule calculations for recurring weekly courses.

All operations are pure date arithmetic over a CourseContext:
- Sessions happen on one ISO weekday, starting at the course start date
- A holiday on the course weekday skips that slot and pushes the end date
  one occurrence later; holidays on other weekdays have no effect
- Every walk is capped at total_sessions * 7 * search_window_weeks days,
  so no call can loop forever on a pathological holiday list
- Missing start dates or unresolved weekdays fail open: the full term is
  treated as remaining
"""
import logging
from datetime import date, timedelta
from typing import Iterator, Optional

from django_course_pricing.conf import get_search_window_weeks
from django_course_pricing.context import CourseContext
from django_course_pricing.weekdays import Weekday, WeekdayTable

logger = logging.getLogger(__name__)

ONE_DAY = timedelta(days=1)


class ScheduleCalculator:
    """
    Session counting and end date projection for a CourseContext.

    Usage:
        calculator = ScheduleCalculator()
        calculator.end_date(context)                       # date(2024, 1, 22)
        calculator.remaining_sessions(context, date.today())
    """

    def __init__(self, weekday_table: Optional[WeekdayTable] = None, search_window_weeks: Optional[int] = None):
        self.weekday_table = weekday_table or WeekdayTable.from_settings()
        if search_window_weeks is None:
            search_window_weeks = get_search_window_weeks()
        self.search_window_weeks = max(1, int(search_window_weeks))

    def resolve_weekday(self, context: CourseContext) -> int:
        """Return the ISO weekday (1-7) sessions recur on, or 0 if unknown."""
        if 1 <= context.weekday <= 7:
            return context.weekday
        return int(self.weekday_table.resolve(context.weekday_label))

    def max_days(self, context: CourseContext) -> int:
        """Upper bound on the number of days any walk over this context may visit."""
        return context.total_sessions * 7 * self.search_window_weeks

    def session_dates(self, context: CourseContext) -> Iterator[date]:
        """
        Yield session dates from the start date until the term is complete.

        Stops early, without error, when the search window runs out before
        total_sessions sessions were found.
        """
        weekday = self.resolve_weekday(context)
        if context.total_sessions <= 0 or context.start_date is None or weekday == Weekday.UNKNOWN:
            return

        current = context.start_date
        found = 0
        limit = self.max_days(context)
        for _ in range(limit):
            if found >= context.total_sessions:
                return
            if current.isoweekday() == weekday and not context.is_holiday(current):
                found += 1
                yield current
            current += ONE_DAY

        if found < context.total_sessions:
            logger.debug(
                "Search window of %s days exhausted for course %s: found %s of %s sessions",
                limit, context.canonical_id, found, context.total_sessions,
            )

    def total_sessions(self, context: CourseContext) -> int:
        """
        Count the sessions the course actually delivers.

        Equal to context.total_sessions unless the search window runs out.
        Without a start date or weekday there is nothing to walk, and the
        configured count is returned as-is.
        """
        if context.total_sessions <= 0:
            return 0
        if context.start_date is None or self.resolve_weekday(context) == Weekday.UNKNOWN:
            return context.total_sessions
        return sum(1 for _ in self.session_dates(context))

    def end_date(self, context: CourseContext) -> Optional[date]:
        """Return the date of the last counted session, or None if it cannot be projected."""
        last = None
        for last in self.session_dates(context):
            pass
        return last

    def remaining_sessions(self, context: CourseContext, as_of: date) -> int:
        """
        Count sessions on or after as_of that still have to take place.

        Returns:
            0 if the course has no sessions or is already over,
            context.total_sessions if it has not started or cannot be scheduled,
            otherwise the matching non-holiday days in [as_of, end_date],
            clamped to [0, total_sessions].
        """
        total = context.total_sessions
        if total <= 0:
            return 0

        weekday = self.resolve_weekday(context)
        if context.start_date is None or weekday == Weekday.UNKNOWN:
            logger.debug(
                "Course %s has no start date or weekday; treating all %s sessions as remaining",
                context.canonical_id, total,
            )
            return total

        if as_of < context.start_date:
            return total

        end = self.end_date(context)
        if end is None:
            return total
        if as_of > end:
            return 0

        remaining = 0
        current = as_of
        while current <= end:
            if current.isoweekday() == weekday and not context.is_holiday(current):
                remaining += 1
            current += ONE_DAY

        return max(0, min(remaining, total))

    def sessions_elapsed(self, context: CourseContext, as_of: date) -> int:
        """Count sessions that took place strictly before as_of."""
        return sum(1 for day in self.session_dates(context) if day < as_of)
