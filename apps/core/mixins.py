"""
-------------------------------------------------------------------------
System: KMJ Billing System
Client: Kalloor Muslim Jamaath
Description: Abstract model mixins shared by the registry and the
             billing ledger.
-------------------------------------------------------------------------
"""
import uuid
from typing import Any, Optional

from django.conf import settings
from django.db import models
from django.utils.translation import gettext_lazy as _


class TimeStampedMixin(models.Model):
    """
    Public UUID plus creation and modification timestamps.

    The integer primary key stays internal; the UUID is what external
    callers may hold on to.
    """

    public_id = models.UUIDField(
        default=uuid.uuid4,
        editable=False,
        unique=True,
        db_index=True,
        verbose_name=_('Public ID')
    )
    created_at = models.DateTimeField(
        auto_now_add=True,
        verbose_name=_('Created At')
    )
    updated_at = models.DateTimeField(
        auto_now=True,
        verbose_name=_('Updated At')
    )

    class Meta:
        abstract = True


class AuditLogMixin(TimeStampedMixin):
    """
    Tracks the user who recorded a row and the user who last changed it.

    Attributes:
        created_by: User who entered the record (the collector for a bill).
        updated_by: User behind the most recent change.
    """

    created_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.PROTECT,
        related_name="%(class)s_created",
        null=True,
        blank=True,
        verbose_name=_('Recorded By')
    )
    updated_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.PROTECT,
        related_name="%(class)s_updated",
        null=True,
        blank=True,
        verbose_name=_('Last Changed By')
    )

    class Meta:
        abstract = True

    @property
    def recorded_by_name(self) -> str:
        """Display name of the recording user, falling back to the email."""
        user = self.created_by
        if user is None:
            return ''
        return user.get_full_name() or user.email

    def save_with_user(self, user: Optional[Any] = None, *args, **kwargs) -> None:
        """
        Save while stamping the acting user.

        Partial saves (``update_fields``) always write the audit columns too.
        """
        if user is not None:
            if self._state.adding:
                self.created_by = user
            self.updated_by = user

        update_fields = kwargs.get('update_fields')
        if update_fields is not None:
            kwargs['update_fields'] = {*update_fields, 'updated_by', 'updated_at'}

        self.save(*args, **kwargs)


class StatusMixin(models.Model):
    """Registry rows are switched off, not removed; lookups skip inactive rows."""

    is_active = models.BooleanField(
        default=True,
        verbose_name=_('Active')
    )

    class Meta:
        abstract = True
