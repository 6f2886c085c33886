"""Django Course Pricing - session scheduling and pro-rated pricing for recurring courses.

Provides:
- CourseContext: Immutable snapshot of a course variation's pricing configuration
- ScheduleCalculator: Weekday walks for total/remaining sessions and end dates
- PricingCalculator: Pro-rated price with guard semantics
- CoursePricingService: Facade with an explicit, injectable price cache

Usage:
    INSTALLED_APPS = [
        ...
        'django_course_pricing',
    ]

    from django_course_pricing.services import CoursePricingService

    service = CoursePricingService()
    price = service.calculate_price(product_id, variation_id)

See conf.py for all configuration options.
"""

__version__ = "0.1.0"

__all__ = [
    "CourseContext",
    "CoursePricingError",
    "CoursePricingService",
    "Guard",
    "InvalidDateError",
    "PriceCache",
    "PriceQuote",
    "PricingCalculator",
    "ScheduleCalculator",
    "Weekday",
]


def __getattr__(name):
    """Lazy imports to prevent AppRegistryNotReady errors."""
    if name == "CourseContext":
        from .context import CourseContext

        return CourseContext
    if name in ("CoursePricingError", "InvalidDateError"):
        from . import exceptions

        return getattr(exceptions, name)
    if name == "CoursePricingService":
        from .services import CoursePricingService

        return CoursePricingService
    if name in ("Guard", "PriceQuote", "PricingCalculator"):
        from . import pricing

        return getattr(pricing, name)
    if name == "PriceCache":
        from .cache import PriceCache

        return PriceCache
    if name == "ScheduleCalculator":
        from .schedule import ScheduleCalculator

        return ScheduleCalculator
    if name == "Weekday":
        from .weekdays import Weekday

        return Weekday
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
