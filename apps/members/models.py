"""
-------------------------------------------------------------------------
System: KMJ Billing System
Client: Kalloor Muslim Jamaath
Description: Household member registry. A household is the set of active
             members sharing one Mahal ID (ward/house).
-------------------------------------------------------------------------
"""
from django.db import models
from django.utils.translation import gettext_lazy as _

from apps.core.mixins import StatusMixin, TimeStampedMixin
from apps.users.models import mahal_id_validator


class Relation(models.TextChoices):
    """Relationship of a member to the head of the household."""
    HEAD = 'head', _('The Head of the Household')
    SPOUSE = 'spouse', _('Spouse')
    SON = 'son', _('Son')
    DAUGHTER = 'daughter', _('Daughter')
    FATHER = 'father', _('Father')
    MOTHER = 'mother', _('Mother')
    OTHER = 'other', _('Other')


class Member(TimeStampedMixin, StatusMixin):
    """
    A person registered under a household.
    
    Attributes:
        mahal_id: Household identifier (ward/house).
        name: Full name.
        relation: Relationship to the household head.
        address: Residential address.
        mobile: Phone number.
        is_active: Inactive members are ignored by lookups.
    """
    
    mahal_id = models.CharField(
        max_length=20,
        validators=[mahal_id_validator],
        db_index=True,
        verbose_name=_('Mahal ID'),
        help_text=_('Household identifier, e.g. 1/2.')
    )
    name = models.CharField(
        max_length=200,
        verbose_name=_('Full Name')
    )
    relation = models.CharField(
        max_length=20,
        choices=Relation.choices,
        default=Relation.OTHER,
        verbose_name=_('Relation')
    )
    address = models.TextField(
        blank=True,
        verbose_name=_('Address')
    )
    mobile = models.CharField(
        max_length=20,
        blank=True,
        verbose_name=_('Mobile Number')
    )
    
    class Meta:
        verbose_name = _('Member')
        verbose_name_plural = _('Members')
        ordering = ['mahal_id', 'id']
        indexes = [
            models.Index(fields=['mahal_id', 'is_active'], name='member_household_idx'),
        ]
    
    def __str__(self) -> str:
        return f"{self.name} ({self.mahal_id})"
    
    @property
    def is_head(self) -> bool:
        return self.relation == Relation.HEAD
