"""
-------------------------------------------------------------------------
System: KMJ Billing System
Client: Kalloor Muslim Jamaath
Description: Billing ledger service. Creates, queries, updates, voids and
             soft-deletes bills on behalf of an authenticated user.
             Administrators act on every household; members only on
             their own.
-------------------------------------------------------------------------
"""
import math
from datetime import date, datetime
from typing import Any, Dict, Iterable, List, Optional, Tuple

from django.conf import settings
from django.db import DatabaseError, transaction
from django.db.models import Count, Sum
from django.utils import timezone
from django.utils.dateparse import parse_date

from apps.billing.logging import BillingLogger
from apps.billing.models import (
    KIND_CATEGORIES, AccountKind, AccountType, Bill, BillAudit, BillStatus,
    PaymentMethod, kind_for_account,
)
from apps.billing.reports import BillReports
from apps.billing.utils import (
    amount_to_words, financial_year_bounds, money_total, parse_amount, validate_mahal_id,
)
from apps.core.exceptions import (
    BillNotFoundException, HouseholdAccessDeniedException, ImmutableFieldException,
    InvalidAccountTypeException, InvalidAmountException, StorageUnavailableException,
    UnauthorizedRoleException, ValidationException, WorkflowTransitionException,
)
from apps.core.models import Counter
from apps.members.services import MemberRegistry
from apps.users.permissions import require_admin, require_household_access

BILL_SEQUENCE = 'bill'
NOTES_MAX_LENGTH = 500
SORT_ORDERS = ('asc', 'desc')


def _page_size_default() -> int:
    return getattr(settings, 'BILL_PAGE_SIZE', 20)


def _page_size_max() -> int:
    return getattr(settings, 'BILL_MAX_PAGE_SIZE', 100)


def _to_int(value: Any, field: str) -> int:
    try:
        return int(value)
    except (TypeError, ValueError) as exc:
        raise ValidationException(
            f"{field} must be an integer.", details={field: value}
        ) from exc


def _to_date(value: Any, field: str) -> Optional[date]:
    if value in (None, ''):
        return None
    if isinstance(value, datetime):
        return timezone.localtime(value).date() if timezone.is_aware(value) else value.date()
    if isinstance(value, date):
        return value
    parsed = parse_date(str(value))
    if parsed is None:
        raise ValidationException(
            f"{field} must be a date in YYYY-MM-DD format.", details={field: value}
        )
    return parsed


def _paginate(queryset, page: Any, limit: Any) -> Tuple[List[Bill], Dict[str, Any]]:
    """
    Slice a queryset into one page.

    Pages past the end return an empty list rather than an error.
    """
    page = _to_int(page, 'page')
    limit = _to_int(limit, 'limit')
    max_limit = _page_size_max()
    if page < 1:
        raise ValidationException("page must be 1 or greater.", details={'page': page})
    if not 1 <= limit <= max_limit:
        raise ValidationException(
            f"limit must be between 1 and {max_limit}.", details={'limit': limit}
        )

    total = queryset.count()
    total_pages = math.ceil(total / limit) if total else 0
    offset = (page - 1) * limit
    items = list(queryset[offset:offset + limit])

    return items, {
        'current_page': page,
        'total_pages': total_pages,
        'total_bills': total,
        'bills_per_page': limit,
        'has_next_page': page < total_pages,
        'has_prev_page': page > 1,
    }


class BillingService:
    """
    Billing ledger operations.

    Every operation takes the calling user as the identity; role and
    household checks happen here, not in the views.
    """

    # ------------------------------------------------------------------
    # Access checks
    # ------------------------------------------------------------------
    @staticmethod
    def _require_admin(user, operation: str) -> None:
        try:
            require_admin(user)
        except UnauthorizedRoleException:
            BillingLogger.log_access_denied(user, operation)
            raise

    @staticmethod
    def _require_household(user, mahal_id: str, operation: str) -> None:
        try:
            require_household_access(user, mahal_id)
        except HouseholdAccessDeniedException:
            BillingLogger.log_access_denied(user, operation, mahal_id)
            raise

    # ------------------------------------------------------------------
    # Validation
    # ------------------------------------------------------------------
    @staticmethod
    def _validate_account(account_type: str, sub_category: str) -> Tuple[str, str]:
        if account_type not in AccountType.values:
            raise InvalidAccountTypeException(details={'account_type': account_type})

        kind = kind_for_account(account_type)
        sub_category = (sub_category or '').strip()
        if sub_category:
            allowed = KIND_CATEGORIES[kind]
            if sub_category not in allowed:
                raise InvalidAccountTypeException(
                    f"Invalid sub-category for {account_type}.",
                    details={'sub_category': sub_category, 'allowed': allowed}
                )
        return kind, sub_category

    @staticmethod
    def _validate_payment_method(payment_method: str) -> str:
        if payment_method not in PaymentMethod.values:
            raise ValidationException(
                "Invalid payment method.",
                details={'payment_method': payment_method, 'allowed': PaymentMethod.values}
            )
        return payment_method

    @staticmethod
    def _validate_notes(notes: Optional[str]) -> str:
        notes = (notes or '').strip()
        if len(notes) > NOTES_MAX_LENGTH:
            raise ValidationException(
                f"Notes cannot exceed {NOTES_MAX_LENGTH} characters.",
                details={'length': len(notes)}
            )
        return notes

    @staticmethod
    def _get_locked_bill(bill_id: Any) -> Bill:
        try:
            return Bill.objects.select_for_update().get(pk=bill_id)
        except (Bill.DoesNotExist, ValueError, TypeError) as exc:
            raise BillNotFoundException(details={'bill_id': bill_id}) from exc

    @staticmethod
    def _audit(bill: Bill, user, action: str, old_status: str = '',
               changed_fields: Optional[Dict[str, Any]] = None, remarks: str = '') -> BillAudit:
        return BillAudit.objects.create(
            bill=bill,
            action=action,
            old_status=old_status,
            new_status=bill.status,
            changed_fields=changed_fields or {},
            changed_by=user,
            remarks=remarks,
        )

    # ------------------------------------------------------------------
    # Create
    # ------------------------------------------------------------------
    @staticmethod
    def create_bill(
        user,
        mahal_id: str,
        amount: Any,
        account_type: str,
        payment_method: str = PaymentMethod.CASH,
        notes: str = '',
        sub_category: str = ''
    ) -> Bill:
        """
        Record a payment and assign it the next receipt number.

        Input is validated and the caller authorized before the receipt
        counter is touched, so rejected requests never consume a number.

        Args:
            user: Calling user.
            mahal_id: Paying household (ward/house).
            amount: Positive amount with at most 2 decimals.
            account_type: One of AccountType.
            payment_method: One of PaymentMethod (default Cash).
            notes: Optional remarks (max 500 characters).
            sub_category: Optional sub-category valid for the account kind.

        Returns:
            The saved Bill.

        Raises:
            ValidationException: Invalid input (subclasses name the field).
            HouseholdAccessDeniedException: Member billing another household.
            HouseholdNotFoundException: Unknown household.
            StorageUnavailableException: Database failure; safe to retry.
        """
        context = {'user_id': user.pk, 'mahal_id': mahal_id, 'account_type': account_type}
        try:
            mahal_id = validate_mahal_id(mahal_id)
            amount = parse_amount(amount)
            kind, sub_category = BillingService._validate_account(account_type, sub_category)
            payment_method = BillingService._validate_payment_method(payment_method)
            notes = BillingService._validate_notes(notes)
        except ValidationException as e:
            BillingLogger.log_validation_error('create_bill', e, context)
            raise

        BillingService._require_household(user, mahal_id, 'create_bill')
        household = MemberRegistry.lookup_household(mahal_id)

        try:
            with transaction.atomic():
                receipt_no = Counter.next_value(BILL_SEQUENCE)
                bill = Bill(
                    receipt_no=receipt_no,
                    bill_date=timezone.now(),
                    mahal_id=mahal_id,
                    member_name=household.name,
                    member_address=household.composite_address,
                    amount=amount,
                    amount_in_words=amount_to_words(amount),
                    account_type=account_type,
                    kind=kind,
                    sub_category=sub_category,
                    payment_method=payment_method,
                    notes=notes,
                )
                bill.save_with_user(user)
                BillingService._audit(
                    bill, user, BillAudit.AuditAction.CREATED,
                    changed_fields={
                        'receipt_no': receipt_no,
                        'amount': str(amount),
                        'account_type': account_type,
                    }
                )
        except DatabaseError as e:
            BillingLogger.log_error('create_bill', e, context)
            raise StorageUnavailableException(details=context) from e

        BillingLogger.log_bill_created(bill, user)
        return bill

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------
    @staticmethod
    def _filtered_bills(user, filters: Dict[str, Any]):
        """Apply list filters and household scoping."""
        bills = Bill.objects.select_related('created_by')

        status = filters.get('status') or BillStatus.ACTIVE
        if status != 'all':
            if status not in BillStatus.values:
                raise ValidationException("Invalid status filter.", details={'status': status})
            bills = bills.filter(status=status)

        mahal_id = filters.get('mahal_id')
        if mahal_id:
            mahal_id = validate_mahal_id(mahal_id)
        if not user.is_admin():
            mahal_id = mahal_id or user.mahal_id
            BillingService._require_household(user, mahal_id, 'list_bills')
        if mahal_id:
            bills = bills.filter(mahal_id=mahal_id)

        account_type = filters.get('account_type')
        if account_type:
            if account_type not in AccountType.values:
                raise InvalidAccountTypeException(details={'account_type': account_type})
            bills = bills.filter(account_type=account_type)

        kind = filters.get('kind')
        if kind:
            if kind not in AccountKind.values:
                raise ValidationException("Invalid account kind.", details={'kind': kind})
            bills = bills.filter(kind=kind)

        payment_method = filters.get('payment_method')
        if payment_method:
            bills = bills.filter(payment_method=BillingService._validate_payment_method(payment_method))

        start_date = _to_date(filters.get('start_date'), 'start_date')
        if start_date:
            bills = bills.filter(bill_date__date__gte=start_date)
        end_date = _to_date(filters.get('end_date'), 'end_date')
        if end_date:
            bills = bills.filter(bill_date__date__lte=end_date)

        for key, lookup in (('min_amount', 'amount__gte'), ('max_amount', 'amount__lte')):
            value = filters.get(key)
            if value not in (None, ''):
                try:
                    bills = bills.filter(**{lookup: parse_amount(value)})
                except InvalidAmountException as exc:
                    raise ValidationException(
                        f"{key} must be a positive amount.", details={key: value}
                    ) from exc

        financial_year = filters.get('financial_year')
        if financial_year:
            try:
                financial_year_bounds(financial_year)
            except ValueError as exc:
                raise ValidationException(
                    "financial_year must look like 2024-25.",
                    details={'financial_year': financial_year}
                ) from exc
            bills = bills.filter(financial_year=financial_year)

        return bills

    @staticmethod
    def list_bills(
        user,
        filters: Optional[Dict[str, Any]] = None,
        page: int = 1,
        limit: Optional[int] = None,
        sort_by: str = 'bill_date',
        sort_order: str = 'desc'
    ) -> Dict[str, Any]:
        """
        Filtered, sorted, paginated bill listing.

        Members only ever see their own household. Status defaults to
        active; pass status='all' to include voided and deleted bills.

        Returns:
            {'bills': [Bill, ...], 'pagination': {...}}
        """
        filters = filters or {}
        try:
            bills = BillingService._filtered_bills(user, filters)

            sortable = {field.name for field in Bill._meta.concrete_fields}
            if sort_by not in sortable:
                raise ValidationException("Invalid sort field.", details={'sort_by': sort_by})
            if sort_order not in SORT_ORDERS:
                raise ValidationException("Invalid sort order.", details={'sort_order': sort_order})
        except ValidationException as e:
            BillingLogger.log_validation_error('list_bills', e, {'user_id': user.pk, **filters})
            raise

        prefix = '-' if sort_order == 'desc' else ''
        bills = bills.order_by(f'{prefix}{sort_by}', '-id')

        if limit is None:
            limit = _page_size_default()
        items, pagination = _paginate(bills, page, limit)
        return {'bills': items, 'pagination': pagination}

    @staticmethod
    def export_queryset(user, filters: Optional[Dict[str, Any]] = None):
        """Bills matching the list filters, for export (admin only)."""
        BillingService._require_admin(user, 'export_bills')
        return BillingService._filtered_bills(user, filters or {}).order_by('receipt_no')

    @staticmethod
    def get_bill(user, bill_id: Any) -> Bill:
        """
        Fetch one bill by id, in any status.

        Raises:
            BillNotFoundException: If the id does not exist.
            HouseholdAccessDeniedException: Member reading another household.
        """
        try:
            bill = Bill.objects.select_related(
                'created_by', 'voided_by', 'deleted_by'
            ).get(pk=bill_id)
        except (Bill.DoesNotExist, ValueError, TypeError) as exc:
            raise BillNotFoundException(details={'bill_id': bill_id}) from exc

        BillingService._require_household(user, bill.mahal_id, 'get_bill')
        return bill

    @staticmethod
    def get_bill_by_receipt(user, receipt_no: Any) -> Bill:
        """Fetch one bill by receipt number, in any status."""
        try:
            bill = Bill.objects.select_related(
                'created_by', 'voided_by', 'deleted_by'
            ).get(receipt_no=receipt_no)
        except (Bill.DoesNotExist, ValueError, TypeError) as exc:
            raise BillNotFoundException(details={'receipt_no': receipt_no}) from exc

        BillingService._require_household(user, bill.mahal_id, 'get_bill_by_receipt')
        return bill

    @staticmethod
    def get_member_bills(user, mahal_id: str, limit: int = 5, page: int = 1) -> Dict[str, Any]:
        """
        Payment history of one household.

        Returns:
            Dictionary with recent active bills, total_bills,
            total_amount_paid and pagination
        """
        mahal_id = validate_mahal_id(mahal_id)
        BillingService._require_household(user, mahal_id, 'get_member_bills')

        bills = Bill.objects.active().for_household(mahal_id).select_related('created_by')
        totals = bills.aggregate(total_bills=Count('id'), total_amount=Sum('amount'))
        items, pagination = _paginate(bills.order_by('-bill_date', '-id'), page, limit)

        return {
            'mahal_id': mahal_id,
            'bills': items,
            'total_bills': totals['total_bills'],
            'total_amount_paid': money_total(totals['total_amount']),
            'pagination': pagination,
        }

    # ------------------------------------------------------------------
    # Changes
    # ------------------------------------------------------------------
    @staticmethod
    def update_bill(user, bill_id: Any, **changes) -> Bill:
        """
        Change the notes or payment method of a bill (admin only).

        Raises:
            ImmutableFieldException: If any other field is supplied.
            WorkflowTransitionException: If the bill is deleted.
        """
        BillingService._require_admin(user, 'update_bill')

        rejected = sorted(set(changes) - set(Bill.EDITABLE_FIELDS))
        if rejected:
            error = ImmutableFieldException(details={'fields': rejected})
            BillingLogger.log_validation_error('update_bill', error, {'bill_id': bill_id, 'fields': rejected})
            raise error

        cleaned = {}
        if 'notes' in changes:
            cleaned['notes'] = BillingService._validate_notes(changes['notes'])
        if 'payment_method' in changes:
            cleaned['payment_method'] = BillingService._validate_payment_method(changes['payment_method'])

        with transaction.atomic():
            bill = BillingService._get_locked_bill(bill_id)
            if bill.status == BillStatus.DELETED:
                raise WorkflowTransitionException(
                    "Deleted bills cannot be updated.",
                    details={'receipt_no': bill.receipt_no}
                )

            changed = {
                field: {'old': getattr(bill, field), 'new': value}
                for field, value in cleaned.items()
                if getattr(bill, field) != value
            }
            if not changed:
                return bill

            for field in changed:
                setattr(bill, field, cleaned[field])
            bill.save_with_user(user, update_fields=list(changed))
            BillingService._audit(
                bill, user, BillAudit.AuditAction.UPDATED,
                old_status=bill.status, changed_fields=changed
            )

        BillingLogger.log_bill_updated(bill, user, changed)
        return bill

    @staticmethod
    def void_bill(user, bill_id: Any, reason: str) -> Bill:
        """
        Void an active bill (admin only). The bill stays on record.

        Raises:
            ValidationException: If no reason is given.
            WorkflowTransitionException: If the bill is not active.
        """
        BillingService._require_admin(user, 'void_bill')

        reason = (reason or '').strip()
        if not reason:
            raise ValidationException("A reason is required to void a bill.")

        with transaction.atomic():
            bill = BillingService._get_locked_bill(bill_id)
            if bill.status != BillStatus.ACTIVE:
                raise WorkflowTransitionException(
                    f"Only active bills can be voided (bill is {bill.status}).",
                    details={'receipt_no': bill.receipt_no, 'status': bill.status}
                )

            old_status = bill.status
            bill.status = BillStatus.VOIDED
            bill.voided_at = timezone.now()
            bill.voided_by = user
            bill.void_reason = reason
            bill.save_with_user(
                user, update_fields=['status', 'voided_at', 'voided_by', 'void_reason']
            )
            BillingService._audit(
                bill, user, BillAudit.AuditAction.VOIDED,
                old_status=old_status, remarks=reason
            )

        BillingLogger.log_bill_voided(bill, user, reason)
        return bill

    @staticmethod
    def delete_bill(user, bill_id: Any, reason: str = '') -> Bill:
        """
        Soft-delete a bill (admin only). The row is kept for audit.

        Raises:
            WorkflowTransitionException: If the bill is already deleted.
        """
        BillingService._require_admin(user, 'delete_bill')
        reason = (reason or '').strip()

        with transaction.atomic():
            bill = BillingService._get_locked_bill(bill_id)
            if bill.status == BillStatus.DELETED:
                raise WorkflowTransitionException(
                    "Bill is already deleted.",
                    details={'receipt_no': bill.receipt_no}
                )

            old_status = bill.status
            bill.status = BillStatus.DELETED
            bill.deleted_at = timezone.now()
            bill.deleted_by = user
            bill.delete_reason = reason
            bill.save_with_user(
                user, update_fields=['status', 'deleted_at', 'deleted_by', 'delete_reason']
            )
            BillingService._audit(
                bill, user, BillAudit.AuditAction.DELETED,
                old_status=old_status, remarks=reason
            )

        BillingLogger.log_bill_deleted(bill, user, reason)
        return bill

    # ------------------------------------------------------------------
    # Receipts and statistics
    # ------------------------------------------------------------------
    @staticmethod
    def get_receipt_data(user, bill_id: Any) -> Dict[str, Any]:
        """Everything needed to print a receipt."""
        bill = BillingService.get_bill(user, bill_id)
        local_date = timezone.localtime(bill.bill_date)

        return {
            'organization': {
                'name': getattr(settings, 'KMJ_ORGANIZATION_NAME', 'Kalloor Muslim JamaAth'),
                'address': getattr(settings, 'KMJ_ORGANIZATION_ADDRESS', 'Kalloor, Kerala'),
            },
            'receipt_no': bill.receipt_no,
            'receipt_label': bill.receipt_label,
            'date': local_date.strftime('%d %B %Y'),
            'time': local_date.strftime('%I:%M %p'),
            'mahal_id': bill.mahal_id,
            'member_name': bill.member_name,
            'member_address': bill.member_address,
            'amount': str(bill.amount),
            'amount_in_words': bill.amount_in_words,
            'account_type': bill.account_type,
            'sub_category': bill.sub_category,
            'payment_method': bill.payment_method,
            'notes': bill.notes,
            'financial_year': bill.financial_year,
            'collected_by': bill.recorded_by_name,
            'status': bill.status,
        }

    @staticmethod
    def get_bill_stats(
        user,
        start_date: Any = None,
        end_date: Any = None,
        financial_year: Optional[str] = None,
        months: int = 12,
        top: int = 10,
        recent: int = 10
    ) -> Dict[str, Any]:
        """Dashboard statistics over active bills (admin only)."""
        BillingService._require_admin(user, 'get_bill_stats')

        start_date = _to_date(start_date, 'start_date')
        end_date = _to_date(end_date, 'end_date')
        if financial_year:
            try:
                financial_year_bounds(financial_year)
            except ValueError as exc:
                raise ValidationException(
                    "financial_year must look like 2024-25.",
                    details={'financial_year': financial_year}
                ) from exc

        sizes = {}
        for field, value in (('months', months), ('top', top), ('recent', recent)):
            sizes[field] = _to_int(value, field)
            if sizes[field] < 1:
                raise ValidationException(f"{field} must be 1 or greater.", details={field: value})

        return {
            'overview': BillReports.overview(start_date, end_date, financial_year),
            'revenue_by_account': BillReports.revenue_by_account(start_date, end_date, financial_year),
            'monthly_revenue': BillReports.monthly_revenue(sizes['months']),
            'top_households': BillReports.top_households(
                sizes['top'], start_date, end_date, financial_year
            ),
            'recent_bills': BillReports.recent_bills(sizes['recent']),
        }


def serialize_bills(bills: Iterable[Bill]) -> List[Dict[str, Any]]:
    return [bill.to_dict() for bill in bills]
