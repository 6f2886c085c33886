"""Management command to recompute stored course end dates."""

from django.core.management.base import BaseCommand

from django_course_pricing.services import recalculate_end_dates


class Command(BaseCommand):
    help = 'Recompute the projected end date of every course variation and store it in course metadata'

    def add_arguments(self, parser):
        parser.add_argument(
            '--dry-run',
            action='store_true',
            help='Show which end dates would change without writing them'
        )

    def handle(self, *args, **options):
        dry_run = options['dry_run']
        updates = recalculate_end_dates(dry_run=dry_run)

        for update in updates:
            new_value = update.end_date.isoformat() if update.end_date else 'none'
            self.stdout.write(
                f'  - {update.variation_id}: {update.previous or "none"} -> {new_value}'
            )

        if dry_run:
            self.stdout.write(f'Would update {len(updates)} course end dates')
        else:
            self.stdout.write(
                self.style.SUCCESS(f'Updated {len(updates)} course end dates')
            )
