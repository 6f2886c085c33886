"""Django Course Pricing configuration.

All settings can be overridden in your Django settings.py. They are read
on every call so that override_settings works in tests.

Example:
    # settings.py
    COURSE_PRICING_SEARCH_WINDOW_WEEKS = 3
    COURSE_PRICING_WEEKDAY_LABELS = {'lunes': 1, 'martes': 2}
    COURSE_PRICING_CANONICAL_ID_RESOLVER = 'myshop.i18n.original_variation_id'
"""

from django.conf import settings
from django.utils.module_loading import import_string


DEFAULT_SEARCH_WINDOW_WEEKS = 2


def get_setting(name: str, default=None):
    """Get a setting with COURSE_PRICING_ prefix."""
    if not settings.configured:
        return default
    return getattr(settings, f"COURSE_PRICING_{name}", default)


def get_search_window_weeks() -> int:
    """Number of weeks per session the day walk may cover before giving up."""
    weeks = int(get_setting('SEARCH_WINDOW_WEEKS', DEFAULT_SEARCH_WINDOW_WEEKS))
    return max(1, weeks)


def get_extra_weekday_labels() -> dict:
    """Site-specific weekday labels merged into the built-in table."""
    return dict(get_setting('WEEKDAY_LABELS', None) or {})


def get_default_language() -> str:
    """Language whose listings act as the canonical copy of a course."""
    language = get_setting('DEFAULT_LANGUAGE', None)
    if not language and settings.configured:
        language = getattr(settings, 'LANGUAGE_CODE', '')
    return language or ''


def get_canonical_id_resolver():
    """Return the configured canonical id resolver callable, or None."""
    resolver = get_setting('CANONICAL_ID_RESOLVER', None)
    if isinstance(resolver, str):
        return import_string(resolver)
    return resolver


# =============================================================================
# DEFAULT SETTINGS REFERENCE
# =============================================================================

# COURSE_PRICING_SEARCH_WINDOW_WEEKS = 2  # Walk cap: total_sessions * 7 * N days
# COURSE_PRICING_WEEKDAY_LABELS = {}  # Extra label -> ISO weekday (1-7) entries
# COURSE_PRICING_CANONICAL_ID_RESOLVER = None  # Dotted path to resolve_canonical_id(id)
# COURSE_PRICING_DEFAULT_LANGUAGE = None  # Falls back to LANGUAGE_CODE
