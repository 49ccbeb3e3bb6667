"""
-------------------------------------------------------------------------
System: KMJ Billing System
Client: Kalloor Muslim Jamaath
Description: Billing ledger models - Bill (receipt) and its audit trail.
             Bills are financial records: the amount, account and
             receipt number never change once written, and rows are
             never removed (void or soft delete instead).
-------------------------------------------------------------------------
"""
from decimal import Decimal
from typing import Any, Dict, List

from django.conf import settings
from django.core.validators import MaxLengthValidator, MinValueValidator
from django.db import models
from django.db.models import Q
from django.utils import timezone
from django.utils.translation import gettext_lazy as _

from apps.billing.utils import amount_to_words, financial_year_for
from apps.core.exceptions import HardDeleteNotAllowedException, ImmutableFieldException
from apps.core.mixins import AuditLogMixin, TimeStampedMixin
from apps.users.models import mahal_id_validator


class AccountType(models.TextChoices):
    """Account (revenue category) a bill is recorded against."""
    DUA_FRIDAY = 'Dua_Friday', _('Dua Friday')
    DONATION = 'Donation', _('Donation')
    SUNNATH_FEE = 'Sunnath Fee', _('Sunnath Fee')
    MARRIAGE_FEE = 'Marriage Fee', _('Marriage Fee')
    PRODUCT_TURNOVER = 'Product Turnover', _('Product Turnover')
    RENTAL_BASIS = 'Rental_Basis', _('Rental Basis')
    DEVOTIONAL_DEDICATION = 'Devotional Dedication', _('Devotional Dedication')
    DEAD_FEE = 'Dead Fee', _('Dead Fee')
    NEW_MEMBERSHIP = 'New Membership', _('New Membership')
    CERTIFICATE_FEE = 'Certificate Fee', _('Certificate Fee')
    EID_UL_ADHA = 'Eid ul Adha', _('Eid ul Adha')
    EID_AL_FITR = 'Eid al-Fitr', _('Eid al-Fitr')
    MADRASSA = 'Madrassa', _('Madrassa')
    SADHU = 'Sadhu', _('Sadhu')
    LAND = 'Land', _('Land')
    NERCHA = 'Nercha', _('Nercha')


class AccountKind(models.TextChoices):
    """Account variant; decides which sub-categories are allowed."""
    GENERAL = 'general', _('General')
    LAND = 'land', _('Land')
    MADRASSA = 'madrassa', _('Madrassa')
    NERCHA = 'nercha', _('Nercha')
    SADHU = 'sadhu', _('Sadhu')


ACCOUNT_KINDS: Dict[str, str] = {
    AccountType.LAND: AccountKind.LAND,
    AccountType.MADRASSA: AccountKind.MADRASSA,
    AccountType.NERCHA: AccountKind.NERCHA,
    AccountType.SADHU: AccountKind.SADHU,
}

KIND_CATEGORIES: Dict[str, List[str]] = {
    AccountKind.GENERAL: [],
    AccountKind.LAND: [
        'Land & Maintenance',
        'Building & Maintenance',
        'Renovation',
    ],
    AccountKind.MADRASSA: [
        'Admission Fee',
        'Monthly Fee',
        'Anual Fee',
        'Exam Fee',
        'Madrassa Donation',
        'Madrassa Others',
        'Madrassa',
    ],
    AccountKind.NERCHA: [
        'Ramadhan',
        '27_Ravu',
        'Meladhun Nabi',
        'Others',
    ],
    AccountKind.SADHU: [
        'Sadhu Sahayam',
        'Others',
    ],
}


def kind_for_account(account_type: str) -> str:
    """Account kind for an account type (general unless it has sub-categories)."""
    return ACCOUNT_KINDS.get(account_type, AccountKind.GENERAL)


class PaymentMethod(models.TextChoices):
    CASH = 'Cash', _('Cash')
    UPI = 'UPI', _('UPI')
    CARD = 'Card', _('Card')
    BANK_TRANSFER = 'Bank Transfer', _('Bank Transfer')
    CHEQUE = 'Cheque', _('Cheque')


class BillStatus(models.TextChoices):
    """
    Bill lifecycle.

    Workflow: ACTIVE -> VOIDED -> DELETED, or ACTIVE -> DELETED.
    Only ACTIVE bills count towards totals and statistics.
    """
    ACTIVE = 'active', _('Active')
    VOIDED = 'voided', _('Voided')
    DELETED = 'deleted', _('Deleted')


class BillQuerySet(models.QuerySet):
    """QuerySet for bills. Bulk deletion is refused."""

    def active(self) -> 'BillQuerySet':
        return self.filter(status=BillStatus.ACTIVE)

    def for_household(self, mahal_id: str) -> 'BillQuerySet':
        return self.filter(mahal_id=mahal_id)

    def delete(self):
        raise HardDeleteNotAllowedException()

    delete.queryset_only = True


class Bill(AuditLogMixin):
    """
    A payment received from a household, identified by its receipt number.

    Attributes:
        receipt_no: Sequential receipt number (unique, never reused)
        bill_date: When the payment was received
        mahal_id: Paying household (ward/house)
        member_name: Household name at the time of billing
        member_address: Printable address block
        amount: Amount received (> 0, 2 decimals)
        amount_in_words: Amount rendered for the receipt
        account_type: Revenue category
        kind: Account variant derived from account_type
        sub_category: Optional sub-category valid for the kind
        payment_method: Cash, UPI, Card, Bank Transfer or Cheque
        notes: Free text remarks
        financial_year: 'YYYY-YY' derived from bill_date
        status: active, voided or deleted
    """

    IMMUTABLE_FIELDS = (
        'receipt_no', 'amount', 'account_type', 'kind', 'sub_category',
        'mahal_id', 'financial_year', 'bill_date',
    )
    EDITABLE_FIELDS = ('notes', 'payment_method')

    receipt_no = models.PositiveBigIntegerField(
        unique=True,
        editable=False,
        verbose_name=_('Receipt Number'),
        help_text=_('Sequential receipt number. Assigned once, never reused.')
    )
    bill_date = models.DateTimeField(
        default=timezone.now,
        verbose_name=_('Bill Date')
    )
    mahal_id = models.CharField(
        max_length=20,
        validators=[mahal_id_validator],
        verbose_name=_('Mahal ID'),
        help_text=_('Paying household, e.g. 5/10.')
    )
    member_name = models.CharField(
        max_length=200,
        verbose_name=_('Member Name')
    )
    member_address = models.TextField(
        blank=True,
        verbose_name=_('Member Address'),
        help_text=_('Name, address, Mahal ID and phone as printed on the receipt.')
    )
    amount = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        validators=[MinValueValidator(Decimal('0.01'))],
        verbose_name=_('Amount')
    )
    amount_in_words = models.CharField(
        max_length=500,
        blank=True,
        verbose_name=_('Amount in Words')
    )
    account_type = models.CharField(
        max_length=30,
        choices=AccountType.choices,
        verbose_name=_('Account Type')
    )
    kind = models.CharField(
        max_length=10,
        choices=AccountKind.choices,
        default=AccountKind.GENERAL,
        verbose_name=_('Account Kind')
    )
    sub_category = models.CharField(
        max_length=50,
        blank=True,
        verbose_name=_('Sub-category')
    )
    payment_method = models.CharField(
        max_length=20,
        choices=PaymentMethod.choices,
        default=PaymentMethod.CASH,
        verbose_name=_('Payment Method')
    )
    notes = models.TextField(
        blank=True,
        validators=[MaxLengthValidator(500)],
        verbose_name=_('Notes')
    )
    financial_year = models.CharField(
        max_length=7,
        verbose_name=_('Financial Year'),
        help_text=_('April to March, e.g. 2024-25.')
    )
    status = models.CharField(
        max_length=10,
        choices=BillStatus.choices,
        default=BillStatus.ACTIVE,
        verbose_name=_('Status')
    )
    voided_at = models.DateTimeField(
        null=True,
        blank=True,
        verbose_name=_('Voided At')
    )
    voided_by = models.ForeignKey(
        'users.CustomUser',
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name='voided_bills',
        verbose_name=_('Voided By')
    )
    void_reason = models.TextField(
        blank=True,
        verbose_name=_('Void Reason')
    )
    deleted_at = models.DateTimeField(
        null=True,
        blank=True,
        verbose_name=_('Deleted At')
    )
    deleted_by = models.ForeignKey(
        'users.CustomUser',
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name='deleted_bills',
        verbose_name=_('Deleted By')
    )
    delete_reason = models.TextField(
        blank=True,
        verbose_name=_('Delete Reason')
    )

    objects = BillQuerySet.as_manager()

    class Meta:
        verbose_name = _('Bill')
        verbose_name_plural = _('Bills')
        ordering = ['-bill_date', '-id']
        indexes = [
            models.Index(fields=['mahal_id', '-bill_date'], name='bill_household_date_idx'),
            models.Index(fields=['account_type', '-bill_date'], name='bill_account_date_idx'),
            models.Index(fields=['financial_year', 'account_type'], name='bill_fy_account_idx'),
            models.Index(fields=['status'], name='bill_status_idx'),
            models.Index(fields=['bill_date'], name='bill_date_idx'),
        ]
        constraints = [
            models.CheckConstraint(
                condition=Q(amount__gt=0),
                name='bill_amount_positive',
            ),
        ]

    def __str__(self) -> str:
        return f"Receipt {self.receipt_no} - {self.member_name} ({self.mahal_id}) - Rs. {self.amount}"

    @property
    def receipt_label(self) -> str:
        """Printed receipt number, e.g. BILL-2024-000042."""
        prefix = getattr(settings, 'BILL_RECEIPT_PREFIX', 'BILL')
        local_date = timezone.localtime(self.bill_date) if timezone.is_aware(self.bill_date) else self.bill_date
        return f"{prefix}-{local_date.year}-{self.receipt_no:06d}"

    @property
    def is_active(self) -> bool:
        return self.status == BillStatus.ACTIVE

    def save(self, *args, **kwargs) -> None:
        """Derive computed fields on insert and refuse changes to financial fields."""
        if self._state.adding:
            self.kind = kind_for_account(self.account_type)
            self.financial_year = financial_year_for(self.bill_date)
            if not self.amount_in_words:
                self.amount_in_words = amount_to_words(self.amount)
        else:
            original = Bill.objects.filter(pk=self.pk).values(*self.IMMUTABLE_FIELDS).first()
            if original is not None:
                changed = [
                    field for field in self.IMMUTABLE_FIELDS
                    if original[field] != getattr(self, field)
                ]
                if changed:
                    raise ImmutableFieldException(details={'fields': changed})
        super().save(*args, **kwargs)

    def delete(self, *args, **kwargs):
        raise HardDeleteNotAllowedException(details={'receipt_no': self.receipt_no})

    def to_dict(self) -> Dict[str, Any]:
        """Serializable representation for API responses."""
        return {
            'id': self.pk,
            'public_id': str(self.public_id),
            'receipt_no': self.receipt_no,
            'receipt_label': self.receipt_label,
            'bill_date': self.bill_date.isoformat(),
            'mahal_id': self.mahal_id,
            'member_name': self.member_name,
            'member_address': self.member_address,
            'amount': str(self.amount),
            'amount_in_words': self.amount_in_words,
            'account_type': self.account_type,
            'kind': self.kind,
            'sub_category': self.sub_category,
            'payment_method': self.payment_method,
            'notes': self.notes,
            'financial_year': self.financial_year,
            'status': self.status,
            'voided_at': self.voided_at.isoformat() if self.voided_at else None,
            'voided_by': self.voided_by_id,
            'void_reason': self.void_reason,
            'deleted_at': self.deleted_at.isoformat() if self.deleted_at else None,
            'deleted_by': self.deleted_by_id,
            'delete_reason': self.delete_reason,
            'created_by': self.created_by_id,
            'created_at': self.created_at.isoformat() if self.created_at else None,
        }


class BillAudit(TimeStampedMixin):
    """
    Audit trail for bill changes.

    One row per creation, update, void or deletion, written in the same
    transaction as the change.
    """

    class AuditAction(models.TextChoices):
        """Types of audit actions."""
        CREATED = 'CREATED', _('Created')
        UPDATED = 'UPDATED', _('Updated')
        VOIDED = 'VOIDED', _('Voided')
        DELETED = 'DELETED', _('Deleted')

    bill = models.ForeignKey(
        Bill,
        on_delete=models.PROTECT,
        related_name='audit_trail',
        verbose_name=_('Bill')
    )
    action = models.CharField(
        max_length=20,
        choices=AuditAction.choices,
        verbose_name=_('Action')
    )
    old_status = models.CharField(
        max_length=10,
        blank=True,
        verbose_name=_('Old Status')
    )
    new_status = models.CharField(
        max_length=10,
        blank=True,
        verbose_name=_('New Status')
    )
    changed_fields = models.JSONField(
        default=dict,
        blank=True,
        verbose_name=_('Changed Fields')
    )
    changed_by = models.ForeignKey(
        'users.CustomUser',
        on_delete=models.PROTECT,
        related_name='bill_audits',
        verbose_name=_('Changed By')
    )
    changed_at = models.DateTimeField(
        auto_now_add=True,
        verbose_name=_('Changed At')
    )
    remarks = models.TextField(
        blank=True,
        verbose_name=_('Remarks')
    )

    class Meta:
        verbose_name = _('Bill Audit')
        verbose_name_plural = _('Bill Audits')
        ordering = ['-changed_at', '-id']
        indexes = [
            models.Index(fields=['bill', '-changed_at'], name='billaudit_bill_idx'),
            models.Index(fields=['action', '-changed_at'], name='billaudit_action_idx'),
        ]

    def __str__(self) -> str:
        return (
            f"{self.get_action_display()} - "
            f"Receipt {self.bill.receipt_no} - "
            f"{self.changed_by.get_full_name() or self.changed_by.email} - "
            f"{self.changed_at.strftime('%Y-%m-%d %H:%M')}"
        )
