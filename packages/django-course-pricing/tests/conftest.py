"""Pytest configuration for django-course-pricing tests."""
from decimal import Decimal

import django
import pytest
from django.conf import settings


def pytest_configure():
    """Configure Django settings for pytest."""
    if not settings.configured:
        settings.configure(
            DEBUG=True,
            SECRET_KEY='test-secret-key-do-not-use-in-production',
            DATABASES={
                'default': {
                    'ENGINE': 'django.db.backends.sqlite3',
                    'NAME': ':memory:',
                }
            },
            INSTALLED_APPS=[
                'django.contrib.contenttypes',
                'django.contrib.auth',
                'django_course_pricing',
            ],
            DEFAULT_AUTO_FIELD='django.db.models.BigAutoField',
            LANGUAGE_CODE='en',
            USE_TZ=True,
            TIME_ZONE='Europe/Zurich',
        )
    django.setup()


@pytest.fixture
def make_course(db):
    """
    Factory creating a product with one course variation.

    Meta values are stored on the variation unless product_meta is given.
    """
    from django_course_pricing.models import CourseListing, MetaKey

    counter = {'n': 0}

    def _make(
        total_sessions=10,
        session_rate='0',
        start_date='2024-01-01',
        holidays=None,
        course_day='Monday',
        price=Decimal('200.00'),
        product_meta=None,
        **listing_kwargs,
    ):
        counter['n'] += 1
        n = counter['n']
        product = CourseListing.objects.create(external_id=f'p{n}', price=price)
        variation = CourseListing.objects.create(
            external_id=f'v{n}',
            parent=product,
            price=price,
            **listing_kwargs,
        )
        values = {
            MetaKey.TOTAL_SESSIONS: total_sessions,
            MetaKey.SESSION_RATE: session_rate,
            MetaKey.START_DATE: start_date,
            MetaKey.HOLIDAY_DATES: holidays if holidays is not None else [],
            MetaKey.COURSE_DAY: course_day,
        }
        for key, value in values.items():
            if value is not None:
                variation.set_meta(key, value)
        for key, value in (product_meta or {}).items():
            product.set_meta(key, value)
        return product, variation

    return _make
