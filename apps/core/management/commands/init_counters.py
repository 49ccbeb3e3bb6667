"""
-------------------------------------------------------------------------
System: KMJ Billing System
Management command to create the default sequence counters
Usage: python manage.py init_counters
-------------------------------------------------------------------------
"""
from django.core.management.base import BaseCommand

from apps.core.models import Counter


class Command(BaseCommand):
    help = 'Create the default sequence counters (existing values are kept)'
    
    def handle(self, *args, **options):
        created = Counter.initialize_defaults()
        
        for counter in Counter.objects.all():
            self.stdout.write(
                f'  • {counter.name} ({counter.prefix or "-"}, '
                f'{counter.get_reset_frequency_display()}): {counter.sequence_value}'
            )
        
        if created:
            self.stdout.write(
                self.style.SUCCESS(f'✓ Created {created} counter(s).')
            )
        else:
            self.stdout.write(
                self.style.SUCCESS('✓ All default counters already exist.')
            )
