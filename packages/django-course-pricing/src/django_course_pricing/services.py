"""Course pricing services.

CoursePricingService is the stable entry point for hosts:
- calculate_price, calculate_remaining_sessions, calculate_end_date and
  calculate_total_sessions each build a fresh CourseContext
- Prices are memoized in an explicit PriceCache keyed by canonical id,
  content signature and as-of date
- CalculationStats counts cache hits, computations and fired guards
- as_of defaults to today in the configured Django timezone

recalculate_end_dates() writes projected end dates back to course metadata.
"""
import logging
from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from typing import List, Optional

from django.db import transaction
from django.db.models import Q
from django.utils import timezone

from django_course_pricing.cache import CalculationStats, PriceCache
from django_course_pricing.context import CourseContext, DateLike, parse_iso_date
from django_course_pricing.models import CourseListing, MetaKey
from django_course_pricing.pricing import Guard, PricingCalculator, remaining_sessions_note
from django_course_pricing.repository import CourseMetaRepository
from django_course_pricing.schedule import ScheduleCalculator

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CourseSummary:
    """Everything a host needs to display or persist for one course variation."""

    canonical_id: str
    as_of: date
    remaining_sessions: int
    total_sessions: int
    end_date: Optional[date]
    price: Decimal
    guard: Guard
    note: str


def resolve_as_of(as_of: DateLike = None) -> date:
    """Return as_of as a date, defaulting to today in the configured timezone."""
    parsed = parse_iso_date(as_of)
    return parsed if parsed is not None else timezone.localdate()


class CoursePricingService:
    """
    Facade over repository, schedule, pricing and cache.

    Usage:
        service = CoursePricingService()
        service.calculate_price('100', '101', as_of='2024-03-01')   # Decimal('120.00')
        service.calculate_end_date('100', '101')                    # date of the last session
        service.stats.snapshot()

        # One cache per request
        service = CoursePricingService(cache=PriceCache.scoped())
    """

    def __init__(
        self,
        repository: Optional[CourseMetaRepository] = None,
        schedule: Optional[ScheduleCalculator] = None,
        pricing: Optional[PricingCalculator] = None,
        cache: Optional[PriceCache] = None,
        stats: Optional[CalculationStats] = None,
    ):
        self.repository = repository or CourseMetaRepository()
        self.schedule = schedule or ScheduleCalculator(weekday_table=self.repository.weekday_table)
        self.pricing = pricing or PricingCalculator(self.schedule)
        self.cache = cache if cache is not None else PriceCache()
        self.stats = stats if stats is not None else CalculationStats()

    def build_context(self, product_id, variation_id, base_price=None) -> CourseContext:
        """Build a context from the current store contents."""
        # Stored metadata may have changed since the last call
        self.repository.reset()
        return self.repository.build_context(product_id, variation_id, base_price=base_price)

    def calculate_price(
        self,
        product_id,
        variation_id,
        as_of: DateLike = None,
        base_price=None,
        remaining_hint: Optional[int] = None,
    ) -> Decimal:
        """
        Return the price a customer owes for a course variation on as_of.

        Args:
            product_id: Host id of the product
            variation_id: Host id of the variation
            as_of: Purchase date (date or YYYY-MM-DD); defaults to today
            base_price: Known list price, saves a lookup
            remaining_hint: Remaining sessions the caller computed earlier;
                checked but never trusted

        Returns:
            Non-negative Decimal rounded to two places

        Raises:
            InvalidDateError: If as_of is not a valid YYYY-MM-DD date
        """
        as_of = resolve_as_of(as_of)
        context = self.build_context(product_id, variation_id, base_price=base_price)
        return self.price_for_context(context, as_of, remaining_hint=remaining_hint)

    def price_for_context(
        self,
        context: CourseContext,
        as_of: date,
        remaining_hint: Optional[int] = None,
    ) -> Decimal:
        """Return the memoized price for an already built context."""
        key = context.cache_key(as_of)
        cached = self.cache.get(key)
        if cached is not None:
            self.stats.record_hit(context.canonical_id)
            return cached

        quote = self.pricing.calculate(context, as_of, remaining_hint=remaining_hint)
        self.cache.set(key, quote.price)
        self.stats.record_computation(
            context.canonical_id,
            guard=quote.guard.value if quote.guard_triggered else None,
        )
        if quote.guard_triggered:
            logger.debug(
                "Guard %s fired for course %s on %s; charging %s",
                quote.guard.value, context.canonical_id, as_of.isoformat(), quote.price,
            )
        return quote.price

    def calculate_remaining_sessions(self, product_id, variation_id, as_of: DateLike = None) -> int:
        """Return the sessions still to take place on or after as_of."""
        as_of = resolve_as_of(as_of)
        context = self.build_context(product_id, variation_id)
        return self.schedule.remaining_sessions(context, as_of)

    def calculate_total_sessions(self, product_id, variation_id) -> int:
        """Return the number of sessions the course delivers."""
        context = self.build_context(product_id, variation_id)
        return self.schedule.total_sessions(context)

    def calculate_end_date(self, product_id, variation_id) -> Optional[date]:
        """Return the date of the last session, or None if it cannot be projected."""
        context = self.build_context(product_id, variation_id)
        return self.schedule.end_date(context)

    def describe_course(self, product_id, variation_id, as_of: DateLike = None) -> CourseSummary:
        """Compute every schedule fact and the price for one variation in one pass."""
        as_of = resolve_as_of(as_of)
        context = self.build_context(product_id, variation_id)
        guard = self.pricing.check_guard(context, as_of)
        if guard is Guard.MISSING_TOTAL_SESSIONS:
            remaining = 0
        else:
            remaining = self.schedule.remaining_sessions(context, as_of)

        return CourseSummary(
            canonical_id=context.canonical_id,
            as_of=as_of,
            remaining_sessions=remaining,
            total_sessions=self.schedule.total_sessions(context),
            end_date=self.schedule.end_date(context),
            price=self.price_for_context(context, as_of),
            guard=guard,
            note=remaining_sessions_note(remaining),
        )


# =============================================================================
# BATCH END DATE RECALCULATION
# =============================================================================

@dataclass(frozen=True)
class EndDateUpdate:
    """One variation whose stored end date changed."""

    variation_id: str
    previous: Optional[str]
    end_date: Optional[date]


def recalculate_end_dates(
    service: Optional[CoursePricingService] = None,
    dry_run: bool = False,
) -> List[EndDateUpdate]:
    """
    Recompute and store the projected end date of every course variation.

    A variation counts as a course when it, or its parent product, carries
    a total sessions value. The end date is written to the course_end_date
    meta as YYYY-MM-DD and removed when it cannot be projected.

    Args:
        service: Service whose repository and schedule to use
        dry_run: Report changes without writing them

    Returns:
        List of EndDateUpdate for variations whose stored value changed
    """
    service = service or CoursePricingService()
    updates = []

    variations = (
        CourseListing.objects
        .variations()
        .filter(
            Q(meta__key=MetaKey.TOTAL_SESSIONS)
            | Q(parent__meta__key=MetaKey.TOTAL_SESSIONS)
        )
        .select_related('parent')
        .distinct()
        .order_by('external_id')
    )

    with transaction.atomic():
        for variation in variations:
            product_id = variation.parent.external_id
            end_date = service.calculate_end_date(product_id, variation.external_id)

            previous = variation.get_meta(MetaKey.END_DATE)
            new_value = end_date.isoformat() if end_date else None
            if previous == new_value:
                continue

            updates.append(EndDateUpdate(
                variation_id=variation.external_id,
                previous=previous,
                end_date=end_date,
            ))
            if dry_run:
                continue

            if new_value is None:
                variation.delete_meta(MetaKey.END_DATE)
            else:
                variation.set_meta(MetaKey.END_DATE, new_value)
            logger.info(
                "Stored end date %s for course variation %s (was %s)",
                new_value, variation.external_id, previous,
            )

    return updates
