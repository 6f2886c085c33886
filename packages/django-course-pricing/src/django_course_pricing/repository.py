"""Course metadata repository.

Builds CourseContext objects from CourseListing/CourseMeta rows:
- Missing optional values default (0 sessions, no holidays, unknown weekday)
  and never raise
- A variation without its own value for a key inherits the parent product's
- Malformed stored values are logged and treated as missing
- Canonical identity collapses translated copies of a variation onto the
  default-language listing so they share price cache entries
- Metadata is loaded per product in batches; repeated lookups in the same
  repository hit memory instead of the database
"""
import logging
from dataclasses import dataclass
from decimal import Decimal, InvalidOperation
from typing import Any, Callable, Dict, Iterable, List, Optional

from django_course_pricing.conf import get_canonical_id_resolver, get_default_language
from django_course_pricing.context import CourseContext, parse_iso_date, to_decimal
from django_course_pricing.exceptions import InvalidDateError
from django_course_pricing.models import INHERITED_KEYS, CourseListing, CourseMeta, MetaKey
from django_course_pricing.weekdays import WeekdayTable

logger = logging.getLogger(__name__)

CanonicalIdResolver = Callable[[str], Optional[str]]


def normalize_id(value) -> str:
    """Turn a host identifier into the string form used throughout the engine."""
    if value is None or value == 0:
        return ''
    return str(value).strip()


def default_canonical_id_resolver(external_id: str) -> str:
    """
    Resolve a listing to its copy in the default language.

    Follows translation_of to the original listing. If the original itself
    is not in the default language, a sibling translation that is wins.
    Listings without translation links resolve to themselves.
    """
    listing = (
        CourseListing.objects
        .select_related('translation_of')
        .filter(external_id=external_id)
        .first()
    )
    if listing is None:
        return external_id

    default_language = get_default_language()
    if listing.language and listing.language == default_language:
        return listing.external_id

    root = listing.translation_of or listing
    if not default_language or root.language in ('', default_language):
        return root.external_id

    match = root.translations.filter(language=default_language).first()
    return match.external_id if match is not None else root.external_id


@dataclass(frozen=True)
class _ListingInfo:
    price: Decimal
    parent_id: str


class CourseMetaRepository:
    """
    Reads course configuration and produces CourseContext objects.

    Usage:
        repository = CourseMetaRepository()
        context = repository.build_context('100', '101')

        # Inject a translation layer
        repository = CourseMetaRepository(resolve_canonical_id=my_plugin.original_id)
    """

    def __init__(
        self,
        resolve_canonical_id: Optional[CanonicalIdResolver] = None,
        weekday_table: Optional[WeekdayTable] = None,
    ):
        self.resolve_canonical_id = (
            resolve_canonical_id
            or get_canonical_id_resolver()
            or default_canonical_id_resolver
        )
        self.weekday_table = weekday_table or WeekdayTable.from_settings()
        self._listings: Dict[str, Optional[_ListingInfo]] = {}
        self._meta: Dict[str, Dict[str, Any]] = {}
        self._primed_products: set = set()
        self._canonical_ids: Dict[str, str] = {}

    # -------------------------------------------------------------------------
    # Batch loading
    # -------------------------------------------------------------------------

    def reset(self) -> None:
        """Forget everything loaded so far."""
        self._listings.clear()
        self._meta.clear()
        self._primed_products.clear()
        self._canonical_ids.clear()

    def primed_ids(self) -> List[str]:
        """Return the ids whose metadata is loaded (testing/debug only)."""
        return sorted(self._listings)

    def prime(self, ids: Iterable) -> None:
        """Load listings and metadata for any of the given ids not yet loaded."""
        wanted = {normalize_id(i) for i in ids}
        uncached = sorted(i for i in wanted if i and i not in self._listings)
        if not uncached:
            return

        for external_id in uncached:
            self._listings[external_id] = None
            self._meta[external_id] = {}

        listings = (
            CourseListing.objects
            .filter(external_id__in=uncached)
            .select_related('parent')
        )
        for listing in listings:
            self._listings[listing.external_id] = _ListingInfo(
                price=listing.price,
                parent_id=listing.parent.external_id if listing.parent else '',
            )

        rows = (
            CourseMeta.objects
            .filter(listing__external_id__in=uncached)
            .values_list('listing__external_id', 'key', 'value')
        )
        for external_id, key, value in rows:
            self._meta[external_id][key] = value

    def prime_product(self, product_id) -> None:
        """Load a product and all of its variations in one batch."""
        product_id = normalize_id(product_id)
        if not product_id or product_id in self._primed_products:
            return
        self._primed_products.add(product_id)

        children = CourseListing.objects.filter(
            parent__external_id=product_id,
        ).values_list('external_id', flat=True)
        self.prime([product_id, *children])

    # -------------------------------------------------------------------------
    # Lookups
    # -------------------------------------------------------------------------

    def canonical_id(self, subject_id) -> str:
        """Return the cache identity for a listing, or '' when there is none."""
        subject_id = normalize_id(subject_id)
        if not subject_id:
            return ''
        if subject_id not in self._canonical_ids:
            resolved = normalize_id(self.resolve_canonical_id(subject_id))
            self._canonical_ids[subject_id] = resolved or subject_id
        return self._canonical_ids[subject_id]

    def get_meta(self, subject_id, key: str, default=None, fallback_id: str = ''):
        """
        Return a raw metadata value for a listing.

        Falls back to the listing's parent (or fallback_id when the listing
        is not in the catalog) for keys variations inherit.
        """
        subject_id = normalize_id(subject_id)
        self.prime([subject_id])
        value = self._meta.get(subject_id, {}).get(key)
        if not _is_blank(value) or key not in INHERITED_KEYS:
            return default if _is_blank(value) else value

        info = self._listings.get(subject_id)
        parent_id = info.parent_id if info is not None and info.parent_id else normalize_id(fallback_id)
        if not parent_id or parent_id == subject_id:
            return default

        self.prime([parent_id])
        value = self._meta.get(parent_id, {}).get(key)
        if not _is_blank(value):
            logger.debug("Course %s inherits %s from parent %s", subject_id, key, parent_id)
            return value
        return default

    def get_base_price(self, subject_id) -> Decimal:
        """Return the listed price, or 0 when the listing is unknown."""
        subject_id = normalize_id(subject_id)
        if not subject_id:
            return Decimal('0')
        self.prime([subject_id])
        info = self._listings.get(subject_id)
        return info.price if info is not None else Decimal('0')

    def build_context(self, product_id, variation_id, base_price=None) -> CourseContext:
        """
        Build a CourseContext for a product/variation pair.

        Args:
            product_id: Host id of the product
            variation_id: Host id of the variation (may be empty)
            base_price: Known list price; skips the price lookup when given

        Returns:
            A fully defaulted CourseContext
        """
        product_id = normalize_id(product_id)
        variation_id = normalize_id(variation_id)
        subject_id = variation_id or product_id
        canonical_id = self.canonical_id(subject_id)

        self.prime_product(product_id)
        self.prime([product_id, variation_id, canonical_id])

        fallback_id = product_id if subject_id != product_id else ''

        def meta(key):
            return self.get_meta(subject_id, key, fallback_id=fallback_id)

        if base_price is None:
            price = self.get_base_price(subject_id)
        else:
            price = _as_decimal(base_price, 'base_price', subject_id)

        label = meta(MetaKey.COURSE_DAY)
        label = '' if label is None else str(label)

        return CourseContext(
            product_id=product_id,
            variation_id=variation_id,
            canonical_id=canonical_id,
            base_price=price,
            total_sessions=_as_int(meta(MetaKey.TOTAL_SESSIONS), MetaKey.TOTAL_SESSIONS, subject_id),
            session_rate=_as_decimal(meta(MetaKey.SESSION_RATE), MetaKey.SESSION_RATE, subject_id),
            start_date=_as_date(meta(MetaKey.START_DATE), MetaKey.START_DATE, subject_id),
            holidays=_as_holidays(meta(MetaKey.HOLIDAY_DATES), subject_id),
            weekday=int(self.weekday_table.resolve(label)),
            weekday_label=label,
        )


# =============================================================================
# VALUE PARSING
# =============================================================================

def _is_blank(value) -> bool:
    return value is None or value == '' or value == []


def _as_int(value, key: str, subject_id: str) -> int:
    if _is_blank(value):
        return 0
    try:
        number = int(Decimal(str(value).strip()))
    except (InvalidOperation, ValueError, TypeError):
        logger.warning("Ignoring non-numeric %s=%r for course %s", key, value, subject_id)
        return 0
    return max(0, number)


def _as_decimal(value, key: str, subject_id: str) -> Decimal:
    if _is_blank(value):
        return Decimal('0')
    try:
        amount = to_decimal(str(value).strip())
    except (InvalidOperation, ValueError, TypeError):
        logger.warning("Ignoring non-numeric %s=%r for course %s", key, value, subject_id)
        return Decimal('0')
    if not amount.is_finite() or amount < 0:
        logger.warning("Ignoring out-of-range %s=%r for course %s", key, value, subject_id)
        return Decimal('0')
    return amount


def _as_date(value, key: str, subject_id: str):
    try:
        return parse_iso_date(value)
    except InvalidDateError:
        logger.warning("Ignoring malformed %s=%r for course %s", key, value, subject_id)
        return None


def _as_holidays(value, subject_id: str) -> List:
    if _is_blank(value):
        return []
    if not isinstance(value, (list, tuple)):
        logger.warning("Ignoring non-list holiday dates %r for course %s", value, subject_id)
        return []
    holidays = []
    for item in value:
        day = _as_date(item, MetaKey.HOLIDAY_DATES, subject_id)
        if day is not None:
            holidays.append(day)
    return holidays
