"""
-------------------------------------------------------------------------
System: KMJ Billing System
Client: Kalloor Muslim Jamaath
Description: Sequence counters. Durable, monotonically increasing
             integers keyed by name, used for receipt numbers.
-------------------------------------------------------------------------
"""
import logging
from datetime import datetime
from typing import Dict, List, Optional, Tuple

from django.core.validators import MinValueValidator
from django.db import DatabaseError, models, transaction
from django.db.models import F
from django.utils import timezone
from django.utils.translation import gettext_lazy as _

from apps.core.exceptions import SequenceUnavailableException
from apps.core.mixins import TimeStampedMixin

logger = logging.getLogger(__name__)


class ResetFrequency(models.TextChoices):
    """How often a counter starts over from zero."""
    NEVER = 'never', _('Never')
    DAILY = 'daily', _('Daily')
    MONTHLY = 'monthly', _('Monthly')
    YEARLY = 'yearly', _('Yearly')


# Receipt numbers are unique for the lifetime of the ledger, so the bill
# sequence must never reset on its own.
DEFAULT_COUNTERS: Dict[str, Dict[str, str]] = {
    'bill': {
        'prefix': 'BILL',
        'description': 'Main bill receipt numbers',
        'reset_frequency': ResetFrequency.NEVER,
    },
    'account_land': {
        'prefix': 'LAN',
        'description': 'Land account receipt numbers',
        'reset_frequency': ResetFrequency.YEARLY,
    },
    'account_madrassa': {
        'prefix': 'MAD',
        'description': 'Madrassa account receipt numbers',
        'reset_frequency': ResetFrequency.YEARLY,
    },
    'account_nercha': {
        'prefix': 'NER',
        'description': 'Nercha account receipt numbers',
        'reset_frequency': ResetFrequency.YEARLY,
    },
    'account_sadhu': {
        'prefix': 'SAD',
        'description': 'Sadhu account receipt numbers',
        'reset_frequency': ResetFrequency.YEARLY,
    },
    'eid_anual': {
        'prefix': 'EID',
        'description': 'Eid/Annual contribution receipt numbers',
        'reset_frequency': ResetFrequency.YEARLY,
    },
    'member_id': {
        'prefix': 'MEM',
        'description': 'Member ID sequence',
        'reset_frequency': ResetFrequency.NEVER,
    },
}


class Counter(TimeStampedMixin):
    """
    Named sequence counter.

    The row for a sequence is the only contended resource in the billing
    core. Every mutation goes through a single locked transaction so
    concurrent callers (across processes and servers) never receive the
    same value.

    Attributes:
        name: Sequence name, e.g. 'bill' or 'account_land'.
        sequence_value: Last value handed out (0 = never used).
        prefix: Optional display prefix for formatted numbers.
        description: What the sequence numbers.
        reset_frequency: never/daily/monthly/yearly.
        last_reset_at: When the counter was created or last reset.
    """

    name = models.CharField(
        max_length=50,
        primary_key=True,
        verbose_name=_('Sequence Name')
    )
    sequence_value = models.PositiveBigIntegerField(
        default=0,
        validators=[MinValueValidator(0)],
        verbose_name=_('Current Value')
    )
    prefix = models.CharField(
        max_length=10,
        blank=True,
        verbose_name=_('Prefix')
    )
    description = models.CharField(
        max_length=255,
        blank=True,
        verbose_name=_('Description')
    )
    reset_frequency = models.CharField(
        max_length=10,
        choices=ResetFrequency.choices,
        default=ResetFrequency.NEVER,
        verbose_name=_('Reset Frequency')
    )
    last_reset_at = models.DateTimeField(
        null=True,
        blank=True,
        verbose_name=_('Last Reset At')
    )

    class Meta:
        db_table = 'counters'
        verbose_name = _('Counter')
        verbose_name_plural = _('Counters')
        ordering = ['name']

    def __str__(self) -> str:
        return f"{self.name} = {self.sequence_value}"

    def format_value(self, value: Optional[int] = None) -> str:
        """Format a value with this counter's prefix, e.g. BILL-000042."""
        if value is None:
            value = self.sequence_value
        if self.prefix:
            return f"{self.prefix}-{value:06d}"
        return f"{value:06d}"

    @staticmethod
    def _creation_defaults(name: str) -> dict:
        defaults = dict(DEFAULT_COUNTERS.get(name, {}))
        defaults['last_reset_at'] = timezone.now()
        return defaults

    @classmethod
    def next_value(cls, name: str) -> int:
        """
        Atomically increment and return the next value of a sequence.

        The sequence is created on first use, so the first call returns 1.

        Args:
            name: Sequence name.

        Returns:
            The new (post-increment) value.

        Raises:
            SequenceUnavailableException: If the database rejects the write.
        """
        try:
            with transaction.atomic():
                counter, _created = cls.objects.select_for_update().get_or_create(
                    name=name,
                    defaults=cls._creation_defaults(name)
                )
                cls.objects.filter(pk=counter.pk).update(
                    sequence_value=F('sequence_value') + 1,
                    updated_at=timezone.now()
                )
                counter.refresh_from_db(fields=['sequence_value'])
        except DatabaseError as exc:
            logger.error(
                f"Counter increment failed for sequence '{name}': {exc}",
                extra={'sequence': name},
                exc_info=True
            )
            raise SequenceUnavailableException(details={'sequence': name}) from exc

        return counter.sequence_value

    @classmethod
    def current_value(cls, name: str) -> int:
        """Return the current value without incrementing (0 if never used)."""
        value = cls.objects.filter(name=name).values_list('sequence_value', flat=True).first()
        return value or 0

    @classmethod
    def _write_value(cls, name: str, value: int, stamp_reset: bool) -> 'Counter':
        if value < 0:
            raise ValueError(_('Counter value cannot be negative.'))

        try:
            with transaction.atomic():
                counter, _created = cls.objects.select_for_update().get_or_create(
                    name=name,
                    defaults=cls._creation_defaults(name)
                )
                counter.sequence_value = value
                update_fields = ['sequence_value', 'updated_at']
                if stamp_reset:
                    counter.last_reset_at = timezone.now()
                    update_fields.append('last_reset_at')
                counter.save(update_fields=update_fields)
        except DatabaseError as exc:
            logger.error(
                f"Counter write failed for sequence '{name}': {exc}",
                extra={'sequence': name, 'value': value},
                exc_info=True
            )
            raise SequenceUnavailableException(details={'sequence': name}) from exc

        return counter

    @classmethod
    def reset(cls, name: str, value: int = 0) -> 'Counter':
        """
        Set a sequence to an explicit value and stamp its reset time.

        Args:
            name: Sequence name (created if missing).
            value: New current value; the next increment returns value + 1.
        """
        counter = cls._write_value(name, value, stamp_reset=True)
        logger.info(
            f"Counter {name} reset to {value}",
            extra={'sequence': name, 'value': value}
        )
        return counter

    @classmethod
    def set_value(cls, name: str, value: int) -> 'Counter':
        """Set a sequence value without recording a reset (data migration)."""
        return cls._write_value(name, value, stamp_reset=False)

    @staticmethod
    def _period_key(moment: datetime, frequency: str) -> Tuple[int, ...]:
        if timezone.is_aware(moment):
            moment = timezone.localtime(moment)
        if frequency == ResetFrequency.DAILY:
            return (moment.year, moment.month, moment.day)
        if frequency == ResetFrequency.MONTHLY:
            return (moment.year, moment.month)
        return (moment.year,)

    def is_reset_due(self, now: Optional[datetime] = None) -> bool:
        """
        Check whether a day/month/year boundary was crossed since last reset.

        Boundaries are evaluated in the configured local time zone.
        """
        if self.reset_frequency == ResetFrequency.NEVER:
            return False
        if self.last_reset_at is None:
            return True
        now = now or timezone.now()
        return (
            self._period_key(now, self.reset_frequency)
            > self._period_key(self.last_reset_at, self.reset_frequency)
        )

    @classmethod
    def check_and_reset_due(cls, now: Optional[datetime] = None) -> List[str]:
        """
        Reset every periodic counter whose period has rolled over.

        Meant to be triggered by an external scheduler (see the
        reset_counters management command). The due check runs on the
        locked row, so overlapping runs reset a counter at most once per
        period.

        Args:
            now: Reference time (default: current time).

        Returns:
            Names of the counters that were reset.
        """
        now = now or timezone.now()
        reset_names = []

        names = list(
            cls.objects.exclude(reset_frequency=ResetFrequency.NEVER).values_list('name', flat=True)
        )
        for name in names:
            try:
                with transaction.atomic():
                    counter = cls.objects.select_for_update().get(pk=name)
                    if not counter.is_reset_due(now):
                        continue
                    cls.reset(name, 0)
            except DatabaseError as exc:
                logger.error(
                    f"Scheduled reset failed for sequence '{name}': {exc}",
                    extra={'sequence': name},
                    exc_info=True
                )
                raise SequenceUnavailableException(details={'sequence': name}) from exc
            reset_names.append(name)

        return reset_names

    @classmethod
    def initialize_defaults(cls) -> int:
        """
        Create the standard sequences if they do not exist yet.

        Existing counters keep their values.

        Returns:
            Number of counters created.
        """
        created_count = 0
        for name in DEFAULT_COUNTERS:
            defaults = cls._creation_defaults(name)
            defaults['sequence_value'] = 0
            _counter, created = cls.objects.get_or_create(name=name, defaults=defaults)
            if created:
                created_count += 1
        return created_count
