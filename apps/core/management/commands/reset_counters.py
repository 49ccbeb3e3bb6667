"""
-------------------------------------------------------------------------
System: KMJ Billing System
Management command to reset periodic counters whose period has rolled over
Usage: python manage.py reset_counters [--dry-run]

Intended to run from cron shortly after midnight.
-------------------------------------------------------------------------
"""
import logging

from django.core.management.base import BaseCommand, CommandError
from django.utils import timezone

from apps.core.exceptions import StorageUnavailableException
from apps.core.models import Counter, ResetFrequency

logger = logging.getLogger(__name__)


class Command(BaseCommand):
    help = 'Reset daily/monthly/yearly counters that are due'
    
    def add_arguments(self, parser):
        parser.add_argument(
            '--dry-run',
            action='store_true',
            help='Show which counters are due without resetting them'
        )
    
    def handle(self, *args, **options):
        now = timezone.now()
        
        if options['dry_run']:
            due = [
                counter for counter in
                Counter.objects.exclude(reset_frequency=ResetFrequency.NEVER)
                if counter.is_reset_due(now)
            ]
            if not due:
                self.stdout.write(self.style.SUCCESS('✓ No counters are due for reset.'))
                return
            for counter in due:
                self.stdout.write(
                    f'  • {counter.name}: {counter.sequence_value} '
                    f'(last reset {counter.last_reset_at})'
                )
            self.stdout.write(
                self.style.WARNING(f'DRY RUN MODE: {len(due)} counter(s) would be reset.')
            )
            return
        
        try:
            reset_names = Counter.check_and_reset_due(now)
        except StorageUnavailableException as e:
            raise CommandError(f'Counter reset failed: {e.message}') from e
        
        if reset_names:
            logger.info(
                f'Scheduled counter reset: {", ".join(reset_names)}',
                extra={'counters': reset_names}
            )
            self.stdout.write(
                self.style.SUCCESS(f'✓ Reset {len(reset_names)} counter(s): {", ".join(reset_names)}')
            )
        else:
            self.stdout.write(self.style.SUCCESS('✓ No counters are due for reset.'))
