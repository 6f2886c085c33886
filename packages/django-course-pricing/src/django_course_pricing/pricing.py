"""Pro-rated course pricing.

Pricing rules, applied in order:
1. No configured sessions -> base price, guard "missing_total_sessions"
2. Course starts after as_of -> base price, guard "future_start"
3. Per-session rate set and sessions remain -> rate * remaining
4. Otherwise scale the base price by remaining / total, never upwards
5. The price is never negative

All amounts are Decimal, rounded half-up to two places.
"""
import logging
from dataclasses import dataclass
from datetime import date
from decimal import ROUND_HALF_UP, Decimal
from enum import Enum
from typing import Optional

from django_course_pricing.context import CourseContext
from django_course_pricing.schedule import ScheduleCalculator

logger = logging.getLogger(__name__)

CENTS = Decimal('0.01')
ZERO = Decimal('0')


class Guard(str, Enum):
    """Short-circuit condition that bypassed normal pro-rating."""

    NONE = 'none'
    MISSING_TOTAL_SESSIONS = 'missing_total_sessions'
    FUTURE_START = 'future_start'


def round_price(amount: Decimal) -> Decimal:
    """Round to two decimal places, halves away from zero."""
    return amount.quantize(CENTS, rounding=ROUND_HALF_UP)


def _parse_hint(value) -> Optional[int]:
    """Return a remaining-sessions hint as an int, or None when unusable."""
    try:
        return int(value)
    except (TypeError, ValueError, OverflowError):
        return None


@dataclass(frozen=True)
class PriceQuote:
    """Outcome of one price calculation."""

    price: Decimal
    remaining_sessions: int
    guard: Guard = Guard.NONE
    hint_mismatch: bool = False

    @property
    def guard_triggered(self) -> bool:
        return self.guard is not Guard.NONE


class PricingCalculator:
    """
    Turns schedule facts into a price.

    Usage:
        pricing = PricingCalculator(ScheduleCalculator())
        quote = pricing.calculate(context, date(2024, 3, 1))
        quote.price   # Decimal('120.00')
        quote.guard   # Guard.NONE
    """

    def __init__(self, schedule: Optional[ScheduleCalculator] = None):
        self.schedule = schedule or ScheduleCalculator()

    def check_guard(self, context: CourseContext, as_of: date) -> Guard:
        """Return the guard that applies to this context on as_of, if any."""
        if context.total_sessions <= 0:
            return Guard.MISSING_TOTAL_SESSIONS
        if context.start_date is not None and as_of < context.start_date:
            return Guard.FUTURE_START
        return Guard.NONE

    def calculate(
        self,
        context: CourseContext,
        as_of: date,
        remaining_hint: Optional[int] = None,
    ) -> PriceQuote:
        """
        Price a course as of the given date.

        Args:
            context: The course configuration
            as_of: The date the customer is buying on
            remaining_hint: A remaining-sessions value computed earlier by the
                caller. It is only compared against the fresh computation;
                the computed value is always used.

        Returns:
            PriceQuote with the price, remaining sessions and any guard
        """
        guard = self.check_guard(context, as_of)
        if guard is Guard.MISSING_TOTAL_SESSIONS:
            return PriceQuote(price=max(ZERO, context.base_price), remaining_sessions=0, guard=guard)
        if guard is Guard.FUTURE_START:
            return PriceQuote(
                price=max(ZERO, context.base_price),
                remaining_sessions=context.total_sessions,
                guard=guard,
            )

        remaining = self.schedule.remaining_sessions(context, as_of)

        hint_mismatch = remaining_hint is not None and _parse_hint(remaining_hint) != remaining
        if hint_mismatch:
            logger.warning(
                "Remaining sessions hint %s for course %s disagrees with computed value %s on %s; using computed value",
                remaining_hint, context.canonical_id, remaining, as_of.isoformat(),
            )

        if context.session_rate > 0 and remaining > 0:
            price = round_price(context.session_rate * remaining)
        else:
            price = self._proportional_price(context, remaining)

        return PriceQuote(
            price=max(ZERO, price),
            remaining_sessions=remaining,
            guard=Guard.NONE,
            hint_mismatch=hint_mismatch,
        )

    def _proportional_price(self, context: CourseContext, remaining: int) -> Decimal:
        """Scale the base price by the share of sessions still to come."""
        if remaining <= 0:
            return ZERO

        total = self.schedule.total_sessions(context)
        if total <= 0 or remaining >= total:
            return context.base_price
        return round_price(context.base_price * remaining / total)


def remaining_sessions_note(remaining: int) -> str:
    """Short label shown next to a pro-rated course price."""
    if remaining <= 0:
        return ''
    return f"{remaining} Weeks Remaining"
