"""
-------------------------------------------------------------------------
System: KMJ Billing System
Client: Kalloor Muslim Jamaath
Description: Forms validating billing API input before it reaches the
             ledger service.
-------------------------------------------------------------------------
"""
from decimal import Decimal
from typing import Any, Dict

from django import forms
from django.utils.translation import gettext_lazy as _

from apps.billing.models import AccountType, PaymentMethod


class BillCreateForm(forms.Form):
    """Input for recording a new bill."""

    mahal_id = forms.CharField(
        max_length=20,
        label=_('Mahal ID'),
        help_text=_('Household, e.g. 5/10.')
    )
    amount = forms.DecimalField(
        max_digits=12,
        decimal_places=2,
        min_value=Decimal('0.01'),
        label=_('Amount')
    )
    account_type = forms.ChoiceField(
        choices=AccountType.choices,
        label=_('Account Type')
    )
    payment_method = forms.ChoiceField(
        choices=PaymentMethod.choices,
        required=False,
        label=_('Payment Method')
    )
    notes = forms.CharField(
        max_length=500,
        required=False,
        label=_('Notes')
    )
    sub_category = forms.CharField(
        max_length=50,
        required=False,
        label=_('Sub-category')
    )

    def clean_payment_method(self) -> str:
        return self.cleaned_data.get('payment_method') or PaymentMethod.CASH


class BillFilterForm(forms.Form):
    """Query string for bill listings and exports."""

    page = forms.IntegerField(required=False, min_value=1)
    limit = forms.IntegerField(required=False, min_value=1)
    sort_by = forms.CharField(required=False, max_length=50)
    sort_order = forms.ChoiceField(
        choices=[('asc', 'asc'), ('desc', 'desc')],
        required=False
    )
    status = forms.CharField(required=False, max_length=10)
    mahal_id = forms.CharField(required=False, max_length=20)
    account_type = forms.CharField(required=False, max_length=30)
    kind = forms.CharField(required=False, max_length=10)
    payment_method = forms.CharField(required=False, max_length=20)
    start_date = forms.DateField(required=False)
    end_date = forms.DateField(required=False)
    min_amount = forms.DecimalField(required=False, max_digits=12, decimal_places=2)
    max_amount = forms.DecimalField(required=False, max_digits=12, decimal_places=2)
    financial_year = forms.CharField(required=False, max_length=7)

    PAGING_FIELDS = ('page', 'limit', 'sort_by', 'sort_order')

    def clean(self) -> Dict[str, Any]:
        cleaned_data = super().clean()
        start_date = cleaned_data.get('start_date')
        end_date = cleaned_data.get('end_date')
        if start_date and end_date and end_date < start_date:
            raise forms.ValidationError(_('End date cannot be before start date.'))
        return cleaned_data

    def get_filters(self) -> Dict[str, Any]:
        """Non-empty filter values, without paging and sorting keys."""
        return {
            key: value for key, value in self.cleaned_data.items()
            if key not in self.PAGING_FIELDS and value not in (None, '')
        }


class BillUpdateForm(forms.Form):
    """Changes to the two editable fields of a bill."""

    notes = forms.CharField(max_length=500, required=False)
    payment_method = forms.ChoiceField(choices=PaymentMethod.choices, required=False)


class BillVoidForm(forms.Form):
    reason = forms.CharField(max_length=500, label=_('Void Reason'))


class BillDeleteForm(forms.Form):
    reason = forms.CharField(max_length=500, required=False, label=_('Delete Reason'))
