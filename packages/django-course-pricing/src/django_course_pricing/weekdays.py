"""ISO weekdays and the label lookup table used to resolve course days.

Course variations carry their weekday as a free-text, locale-dependent
label ("Monday", "lundi", "Montag"). The table below maps those labels to
ISO weekday numbers. Sites add their own labels through the
COURSE_PRICING_WEEKDAY_LABELS setting or by passing a WeekdayTable.
"""

from enum import IntEnum
from typing import Mapping, Optional


class Weekday(IntEnum):
    """ISO weekday numbers. UNKNOWN marks an unresolved course day."""

    UNKNOWN = 0
    MONDAY = 1
    TUESDAY = 2
    WEDNESDAY = 3
    THURSDAY = 4
    FRIDAY = 5
    SATURDAY = 6
    SUNDAY = 7


DEFAULT_WEEKDAY_LABELS = {
    # English
    'monday': Weekday.MONDAY,
    'tuesday': Weekday.TUESDAY,
    'wednesday': Weekday.WEDNESDAY,
    'thursday': Weekday.THURSDAY,
    'friday': Weekday.FRIDAY,
    'saturday': Weekday.SATURDAY,
    'sunday': Weekday.SUNDAY,
    # French
    'lundi': Weekday.MONDAY,
    'mardi': Weekday.TUESDAY,
    'mercredi': Weekday.WEDNESDAY,
    'jeudi': Weekday.THURSDAY,
    'vendredi': Weekday.FRIDAY,
    'samedi': Weekday.SATURDAY,
    'dimanche': Weekday.SUNDAY,
    # German
    'montag': Weekday.MONDAY,
    'dienstag': Weekday.TUESDAY,
    'mittwoch': Weekday.WEDNESDAY,
    'donnerstag': Weekday.THURSDAY,
    'freitag': Weekday.FRIDAY,
    'samstag': Weekday.SATURDAY,
    'sonntag': Weekday.SUNDAY,
}


def normalize_label(label) -> str:
    """Lower-case and trim a weekday label for lookup."""
    if label is None:
        return ''
    return str(label).strip().lower()


class WeekdayTable:
    """
    Label to ISO weekday lookup.

    Usage:
        table = WeekdayTable({'lunes': 1})
        table.resolve('Lunes')    # Weekday.MONDAY
        table.resolve('Montag')   # Weekday.MONDAY (built-in)
        table.resolve('someday')  # Weekday.UNKNOWN
    """

    def __init__(self, extra_labels: Optional[Mapping[str, int]] = None, include_defaults: bool = True):
        self._labels = dict(DEFAULT_WEEKDAY_LABELS) if include_defaults else {}
        for label, day in (extra_labels or {}).items():
            self._labels[normalize_label(label)] = Weekday(int(day))

    @classmethod
    def from_settings(cls) -> 'WeekdayTable':
        """Build the table from the built-in labels plus COURSE_PRICING_WEEKDAY_LABELS."""
        from django_course_pricing.conf import get_extra_weekday_labels

        return cls(get_extra_weekday_labels())

    def resolve(self, label) -> Weekday:
        """Return the ISO weekday for a label, or Weekday.UNKNOWN."""
        if isinstance(label, int) and not isinstance(label, bool):
            return Weekday(label) if 1 <= label <= 7 else Weekday.UNKNOWN
        return self._labels.get(normalize_label(label), Weekday.UNKNOWN)

    def __contains__(self, label) -> bool:
        return normalize_label(label) in self._labels

    def __len__(self) -> int:
        return len(self._labels)
