# Generated manually for standalone django-course-pricing package

import django.db.models.deletion
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name="CourseListing",
            fields=[
                (
                    "id",
                    models.BigAutoField(
                        auto_created=True,
                        primary_key=True,
                        serialize=False,
                        verbose_name="ID",
                    ),
                ),
                (
                    "external_id",
                    models.CharField(
                        help_text="Identifier of the product or variation in the host catalog",
                        max_length=64,
                        unique=True,
                    ),
                ),
                (
                    "language",
                    models.CharField(
                        blank=True,
                        default="",
                        help_text="Language code of this listing, blank when untranslated",
                        max_length=16,
                    ),
                ),
                (
                    "price",
                    models.DecimalField(
                        decimal_places=2,
                        default=0,
                        help_text="Undiscounted list price",
                        max_digits=12,
                    ),
                ),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                (
                    "parent",
                    models.ForeignKey(
                        blank=True,
                        help_text="Parent product, set for variations only",
                        null=True,
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="variations",
                        to="django_course_pricing.courselisting",
                    ),
                ),
                (
                    "translation_of",
                    models.ForeignKey(
                        blank=True,
                        help_text="Default-language listing this one is a translation of",
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="translations",
                        to="django_course_pricing.courselisting",
                    ),
                ),
            ],
            options={
                "ordering": ["external_id"],
            },
        ),
        migrations.CreateModel(
            name="CourseMeta",
            fields=[
                (
                    "id",
                    models.BigAutoField(
                        auto_created=True,
                        primary_key=True,
                        serialize=False,
                        verbose_name="ID",
                    ),
                ),
                (
                    "key",
                    models.CharField(
                        db_index=True,
                        help_text="Metadata key, see MetaKey",
                        max_length=64,
                    ),
                ),
                (
                    "value",
                    models.JSONField(
                        blank=True,
                        help_text="Raw value as supplied by the catalog",
                        null=True,
                    ),
                ),
                ("updated_at", models.DateTimeField(auto_now=True)),
                (
                    "listing",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="meta",
                        to="django_course_pricing.courselisting",
                    ),
                ),
            ],
        ),
        migrations.AddConstraint(
            model_name="coursemeta",
            constraint=models.UniqueConstraint(
                fields=("listing", "key"),
                name="course_meta_unique_listing_key",
            ),
        ),
    ]
