"""Exceptions for django-course-pricing."""


class CoursePricingError(Exception):
    """Base exception for course pricing errors."""
    pass


class InvalidDateError(CoursePricingError, ValueError):
    """Raised when a date string is not a valid ISO YYYY-MM-DD calendar date."""
    pass
