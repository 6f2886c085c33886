"""Course context value object.

A CourseContext is an immutable snapshot of everything that affects the
schedule and price of one course variation. It is built fresh for each
calculation and never mutated afterwards, so it is safe to share between
threads and to use as the basis of a cache key.
"""

import hashlib
import json
import re
from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from typing import FrozenSet, Iterable, Optional, Union

from django_course_pricing.exceptions import InvalidDateError
from django_course_pricing.weekdays import normalize_label


ISO_DATE_RE = re.compile(r'^\d{4}-\d{2}-\d{2}$')

DateLike = Union[date, str, None]


def parse_iso_date(value: DateLike) -> Optional[date]:
    """
    Parse a strict YYYY-MM-DD string into a date.

    None and empty strings mean "absent" and return None. date objects are
    returned as plain dates. Anything else that is not a real calendar date in
    YYYY-MM-DD form raises InvalidDateError; no partial parsing is attempted.
    """
    if value is None or value == '':
        return None
    if isinstance(value, date):
        # datetime is a date subclass; keep only the calendar part
        return date(value.year, value.month, value.day)
    if not isinstance(value, str) or not ISO_DATE_RE.match(value):
        raise InvalidDateError(f"Expected an ISO YYYY-MM-DD date, got {value!r}")
    try:
        return date.fromisoformat(value)
    except ValueError as exc:
        raise InvalidDateError(f"Not a calendar date: {value!r}") from exc


def to_decimal(value) -> Decimal:
    """Normalize a numeric input to Decimal via str() to avoid float noise."""
    if value is None or value == '':
        return Decimal('0')
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


def _canonical_amount(value: Decimal) -> str:
    """Render an amount so that 200, 200.0 and 200.00 compare equal."""
    return format(value.normalize(), 'f')


@dataclass(frozen=True)
class CourseContext:
    """
    Immutable pricing configuration for one course variation.

    Usage:
        context = CourseContext(
            product_id='100',
            variation_id='101',
            base_price=Decimal('200.00'),
            total_sessions=10,
            session_rate=Decimal('20.00'),
            start_date='2024-01-01',
            holidays=['2024-01-08'],
            weekday=1,
        )
        context.cache_key(date(2024, 1, 15))
    """

    product_id: str = ''
    variation_id: str = ''
    canonical_id: str = ''
    base_price: Decimal = Decimal('0')
    total_sessions: int = 0
    session_rate: Decimal = Decimal('0')
    start_date: Optional[date] = None
    holidays: FrozenSet[date] = field(default_factory=frozenset)
    weekday: int = 0
    weekday_label: str = ''

    def __post_init__(self):
        """Normalize inputs. Uses object.__setattr__ because dataclass is frozen."""
        product_id = '' if self.product_id in (None, 0) else str(self.product_id)
        variation_id = '' if self.variation_id in (None, 0) else str(self.variation_id)
        canonical_id = '' if self.canonical_id in (None, 0) else str(self.canonical_id)
        object.__setattr__(self, 'product_id', product_id)
        object.__setattr__(self, 'variation_id', variation_id)
        object.__setattr__(self, 'canonical_id', canonical_id or variation_id or product_id)

        object.__setattr__(self, 'base_price', to_decimal(self.base_price))
        object.__setattr__(self, 'session_rate', to_decimal(self.session_rate))
        object.__setattr__(self, 'total_sessions', max(0, int(self.total_sessions or 0)))
        object.__setattr__(self, 'start_date', parse_iso_date(self.start_date))
        object.__setattr__(self, 'holidays', self._normalize_holidays(self.holidays))

        weekday = int(self.weekday or 0)
        object.__setattr__(self, 'weekday', weekday if 1 <= weekday <= 7 else 0)
        object.__setattr__(self, 'weekday_label', self.weekday_label or '')

    @staticmethod
    def _normalize_holidays(holidays: Optional[Iterable[DateLike]]) -> FrozenSet[date]:
        if not holidays:
            return frozenset()
        if isinstance(holidays, (str, date)):
            holidays = [holidays]
        parsed = (parse_iso_date(day) for day in holidays)
        return frozenset(day for day in parsed if day is not None)

    @property
    def has_schedule(self) -> bool:
        """True when a start date and a weekday are both known."""
        return self.start_date is not None and self.weekday > 0

    def is_holiday(self, day: date) -> bool:
        """Check whether no session takes place on the given day."""
        return day in self.holidays

    @property
    def content_signature(self) -> str:
        """
        Deterministic hash of all pricing-relevant fields.

        Contexts with equal signatures produce equal schedules and prices
        for any as-of date, regardless of how their inputs were ordered.
        """
        payload = {
            'base_price': _canonical_amount(self.base_price),
            'total_sessions': self.total_sessions,
            'session_rate': _canonical_amount(self.session_rate),
            'start_date': self.start_date.isoformat() if self.start_date else None,
            'holidays': sorted(day.isoformat() for day in self.holidays),
            'weekday': self.weekday,
        }
        if not self.weekday:
            # The schedule falls back to the label when no weekday number is set
            payload['weekday_label'] = normalize_label(self.weekday_label)
        encoded = json.dumps(payload, sort_keys=True, separators=(',', ':'))
        return hashlib.sha256(encoded.encode('utf-8')).hexdigest()

    def cache_key(self, as_of: date) -> str:
        """Build the price cache key for this context on the given date."""
        return '|'.join([
            self.canonical_id,
            self.content_signature,
            as_of.isoformat(),
        ])
