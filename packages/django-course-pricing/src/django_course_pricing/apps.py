"""Django Course Pricing app configuration."""

from django.apps import AppConfig


class DjangoCoursePricingConfig(AppConfig):
    """Configuration for django-course-pricing app."""

    name = "django_course_pricing"
    verbose_name = "Course Pricing"
    default_auto_field = "django.db.models.BigAutoField"
