"""
-------------------------------------------------------------------------
System: KMJ Billing System
Client: Kalloor Muslim Jamaath
Description: JSON API for the billing ledger. Views parse and validate
             input, call BillingService and translate billing errors to
             HTTP status codes.
-------------------------------------------------------------------------
"""
import json
from typing import Any, Dict

from django.contrib.auth.mixins import LoginRequiredMixin
from django.http import HttpRequest, HttpResponse, JsonResponse
from django.views import View

from apps.billing.forms import (
    BillCreateForm, BillDeleteForm, BillFilterForm, BillUpdateForm, BillVoidForm,
)
from apps.billing.models import Bill
from apps.billing.reports import BillReports
from apps.billing.services import BillingService, serialize_bills
from apps.core.exceptions import KMJException, ValidationException


class BillAPIMixin(LoginRequiredMixin):
    """
    Common behaviour for billing API views.

    Unauthenticated requests get 403 instead of a login redirect, and any
    KMJException becomes a JSON error with the exception's status code.
    """

    raise_exception = True

    def dispatch(self, request: HttpRequest, *args, **kwargs) -> HttpResponse:
        try:
            return super().dispatch(request, *args, **kwargs)
        except KMJException as e:
            return JsonResponse({'success': False, 'error': e.to_dict()}, status=e.http_status)

    def get_payload(self) -> Dict[str, Any]:
        """Request body as a dict, from JSON or form encoding."""
        if self.request.content_type == 'application/json':
            try:
                payload = json.loads(self.request.body or b'{}')
            except (json.JSONDecodeError, UnicodeDecodeError) as e:
                raise ValidationException("Request body is not valid JSON.") from e
            if not isinstance(payload, dict):
                raise ValidationException("Request body must be a JSON object.")
            return payload
        return self.request.POST.dict()

    @staticmethod
    def validate(form) -> Dict[str, Any]:
        if not form.is_valid():
            raise ValidationException(details=form.errors.get_json_data())
        return form.cleaned_data


class BillListCreateView(BillAPIMixin, View):
    """List bills (GET) or record a new bill (POST)."""

    def get(self, request):
        form = BillFilterForm(request.GET)
        cleaned = self.validate(form)

        result = BillingService.list_bills(
            request.user,
            filters=form.get_filters(),
            page=cleaned.get('page') or 1,
            limit=cleaned.get('limit'),
            sort_by=cleaned.get('sort_by') or 'bill_date',
            sort_order=cleaned.get('sort_order') or 'desc',
        )
        return JsonResponse({
            'success': True,
            'bills': serialize_bills(result['bills']),
            'pagination': result['pagination'],
        })

    def post(self, request):
        data = self.validate(BillCreateForm(self.get_payload()))

        bill = BillingService.create_bill(
            request.user,
            mahal_id=data['mahal_id'],
            amount=data['amount'],
            account_type=data['account_type'],
            payment_method=data['payment_method'],
            notes=data['notes'],
            sub_category=data['sub_category'],
        )
        return JsonResponse({'success': True, 'bill': bill.to_dict()}, status=201)


class BillStatsView(BillAPIMixin, View):
    """Dashboard statistics (admin only)."""

    def get(self, request):
        params = request.GET
        stats = BillingService.get_bill_stats(
            request.user,
            start_date=params.get('start_date'),
            end_date=params.get('end_date'),
            financial_year=params.get('financial_year') or None,
        )
        return JsonResponse({'success': True, 'stats': stats})


class BillExportView(BillAPIMixin, View):
    """Export filtered bills as CSV or Excel (admin only)."""

    FORMATS = ('csv', 'xlsx')

    def get(self, request):
        fmt = request.GET.get('format', 'xlsx')
        if fmt not in self.FORMATS:
            raise ValidationException("format must be csv or xlsx.", details={'format': fmt})

        form = BillFilterForm(request.GET)
        self.validate(form)
        bills = BillingService.export_queryset(request.user, form.get_filters())
        return BillReports.export_bills(bills, fmt)


class BillDetailView(BillAPIMixin, View):
    def get(self, request, pk):
        bill = BillingService.get_bill(request.user, pk)
        return JsonResponse({'success': True, 'bill': bill.to_dict()})


class BillByReceiptView(BillAPIMixin, View):
    def get(self, request, receipt_no):
        bill = BillingService.get_bill_by_receipt(request.user, receipt_no)
        return JsonResponse({'success': True, 'bill': bill.to_dict()})


class BillReceiptView(BillAPIMixin, View):
    """Printable receipt payload."""

    def get(self, request, pk):
        receipt = BillingService.get_receipt_data(request.user, pk)
        return JsonResponse({'success': True, 'receipt': receipt})


class MemberBillsView(BillAPIMixin, View):
    """Payment history of one household."""

    def get(self, request, ward, house):
        form = BillFilterForm(request.GET)
        cleaned = self.validate(form)

        history = BillingService.get_member_bills(
            request.user,
            f"{ward}/{house}",
            limit=cleaned.get('limit') or 5,
            page=cleaned.get('page') or 1,
        )
        history['bills'] = serialize_bills(history['bills'])
        return JsonResponse({'success': True, **history})


class BillUpdateView(BillAPIMixin, View):
    """Change notes or payment method (admin only)."""

    def post(self, request, pk):
        payload = self.get_payload()
        payload.pop('csrfmiddlewaretoken', None)
        cleaned = self.validate(BillUpdateForm(payload))

        changes = {
            key: cleaned[key] if key in Bill.EDITABLE_FIELDS else value
            for key, value in payload.items()
        }
        bill = BillingService.update_bill(request.user, pk, **changes)
        return JsonResponse({'success': True, 'bill': bill.to_dict()})


class BillVoidView(BillAPIMixin, View):
    def post(self, request, pk):
        data = self.validate(BillVoidForm(self.get_payload()))
        bill = BillingService.void_bill(request.user, pk, data['reason'])
        return JsonResponse({'success': True, 'bill': bill.to_dict()})


class BillDeleteView(BillAPIMixin, View):
    def post(self, request, pk):
        data = self.validate(BillDeleteForm(self.get_payload()))
        bill = BillingService.delete_bill(request.user, pk, data['reason'])
        return JsonResponse({'success': True, 'bill': bill.to_dict()})
