"""Course listing and metadata models.

These models are the key/value metadata store the pricing engine reads
from. A CourseListing is a product or one of its variations; a CourseMeta
row holds one configuration value for a listing, stored as JSON.
"""

from django.db import models


class MetaKey(models.TextChoices):
    """Metadata keys understood by the course pricing engine."""

    START_DATE = 'course_start_date', 'Start date'
    TOTAL_SESSIONS = 'course_total_sessions', 'Total sessions'
    SESSION_RATE = 'course_session_rate', 'Per-session rate'
    HOLIDAY_DATES = 'course_holiday_dates', 'Holiday dates'
    COURSE_DAY = 'course_day', 'Course day'
    END_DATE = 'course_end_date', 'Projected end date'


# Keys a variation inherits from its parent product when it has no value of its own
INHERITED_KEYS = (
    MetaKey.START_DATE,
    MetaKey.TOTAL_SESSIONS,
    MetaKey.SESSION_RATE,
    MetaKey.HOLIDAY_DATES,
    MetaKey.COURSE_DAY,
)


class CourseListingQuerySet(models.QuerySet):
    """Custom queryset for CourseListing model."""

    def variations(self):
        """Return only variations."""
        return self.filter(parent__isnull=False)


class CourseListing(models.Model):
    """
    A course product or variation in the host catalog.

    Usage:
        product = CourseListing.objects.create(external_id='100', price=Decimal('200.00'))
        variation = CourseListing.objects.create(
            external_id='101',
            parent=product,
            price=Decimal('200.00'),
        )
        variation.set_meta(MetaKey.TOTAL_SESSIONS, 10)
    """

    external_id = models.CharField(
        max_length=64,
        unique=True,
        help_text="Identifier of the product or variation in the host catalog",
    )
    parent = models.ForeignKey(
        'self',
        on_delete=models.CASCADE,
        null=True,
        blank=True,
        related_name='variations',
        help_text="Parent product, set for variations only",
    )
    language = models.CharField(
        max_length=16,
        blank=True,
        default='',
        help_text="Language code of this listing, blank when untranslated",
    )
    translation_of = models.ForeignKey(
        'self',
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='translations',
        help_text="Default-language listing this one is a translation of",
    )
    price = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        default=0,
        help_text="Undiscounted list price",
    )
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    objects = CourseListingQuerySet.as_manager()

    class Meta:
        app_label = 'django_course_pricing'
        ordering = ['external_id']

    def __str__(self):
        return self.external_id

    @property
    def is_variation(self) -> bool:
        return self.parent_id is not None

    def get_meta(self, key: str, default=None):
        """Return a single metadata value, or default when unset."""
        row = self.meta.filter(key=key).first()
        return row.value if row is not None else default

    def set_meta(self, key: str, value) -> 'CourseMeta':
        """Create or replace a metadata value."""
        row, _ = CourseMeta.objects.update_or_create(
            listing=self,
            key=str(key),
            defaults={'value': value},
        )
        return row

    def delete_meta(self, key: str) -> int:
        """Remove a metadata value. Returns the number of rows deleted."""
        deleted, _ = self.meta.filter(key=key).delete()
        return deleted


class CourseMeta(models.Model):
    """One configuration value of a course listing."""

    listing = models.ForeignKey(
        CourseListing,
        on_delete=models.CASCADE,
        related_name='meta',
    )
    key = models.CharField(
        max_length=64,
        db_index=True,
        help_text="Metadata key, see MetaKey",
    )
    value = models.JSONField(
        null=True,
        blank=True,
        help_text="Raw value as supplied by the catalog",
    )
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        app_label = 'django_course_pricing'
        constraints = [
            models.UniqueConstraint(
                fields=['listing', 'key'],
                name='course_meta_unique_listing_key',
            ),
        ]

    def __str__(self):
        return f"{self.listing_id}:{self.key}"
