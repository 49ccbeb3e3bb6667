"""
-------------------------------------------------------------------------
System: KMJ Billing System
Client: Kalloor Muslim Jamaath
Description: Test cases for the billing ledger service
-------------------------------------------------------------------------
"""
from datetime import timedelta
from decimal import Decimal
from unittest import mock

from django.contrib.auth import get_user_model
from django.db import OperationalError
from django.test import TestCase, override_settings
from django.utils import timezone

from apps.billing.models import AccountKind, Bill, BillAudit, BillStatus
from apps.billing.services import BillingService
from apps.billing.utils import financial_year_for
from apps.core.exceptions import (
    BillNotFoundException, HardDeleteNotAllowedException, HouseholdAccessDeniedException,
    HouseholdNotFoundException, ImmutableFieldException, InvalidAccountTypeException,
    InvalidAmountException, InvalidHouseholdIdException, SequenceUnavailableException,
    StorageUnavailableException, UnauthorizedRoleException, ValidationException,
    WorkflowTransitionException,
)
from apps.core.models import Counter
from apps.members.models import Member, Relation
from apps.users.models import UserRole

User = get_user_model()


class BillingTestMixin:
    """Shared fixtures: an admin, two members and their households."""

    def setUp(self):
        self.admin = User.objects.create_user(
            email='admin@kmj.test',
            password='testpass123',
            role=UserRole.ADMIN,
            first_name='Office',
            last_name='Admin'
        )
        self.member = User.objects.create_user(
            email='member@kmj.test',
            password='testpass123',
            mahal_id='5/10'
        )
        self.other_member = User.objects.create_user(
            email='other@kmj.test',
            password='testpass123',
            mahal_id='1/2'
        )
        Member.objects.create(
            mahal_id='5/10',
            name='Abdul Basheer',
            relation=Relation.HEAD,
            address='Sheeja Manzil, Kalloor',
            mobile='7909187497'
        )
        Member.objects.create(
            mahal_id='1/2',
            name='Mohammed Ali',
            relation=Relation.HEAD,
            address='Puthen Veedu, Kalloor',
            mobile='9000000000'
        )

    def create_bill(self, mahal_id='5/10', amount='2500', account_type='Donation', **kwargs):
        return BillingService.create_bill(self.admin, mahal_id, amount, account_type, **kwargs)


class CreateBillTest(BillingTestMixin, TestCase):
    """Test cases for BillingService.create_bill"""

    def test_end_to_end_donation(self):
        """Admin bills household 5/10 and the history reflects it"""
        bill = self.create_bill('5/10', 2500, 'Donation')

        self.assertEqual(bill.receipt_no, 1)
        self.assertEqual(bill.financial_year, financial_year_for())
        self.assertIn('Two Thousand Five Hundred Rupees Only', bill.amount_in_words)
        self.assertEqual(bill.status, BillStatus.ACTIVE)
        self.assertEqual(bill.kind, AccountKind.GENERAL)
        self.assertEqual(bill.created_by, self.admin)
        self.assertEqual(bill.member_name, 'Abdul Basheer')
        self.assertEqual(
            bill.member_address,
            'Abdul Basheer\nSheeja Manzil, Kalloor\nMahal ID: 5/10\nPhone: 7909187497'
        )

        history = BillingService.get_member_bills(self.admin, '5/10')
        self.assertEqual(history['total_amount_paid'], Decimal('2500'))
        self.assertEqual(history['total_bills'], 1)

        audit = BillAudit.objects.get(bill=bill)
        self.assertEqual(audit.action, BillAudit.AuditAction.CREATED)
        self.assertEqual(audit.new_status, BillStatus.ACTIVE)
        self.assertEqual(audit.changed_by, self.admin)

    def test_receipt_numbers_strictly_increase(self):
        receipts = [self.create_bill(amount=100 + i).receipt_no for i in range(5)]

        self.assertEqual(receipts, sorted(set(receipts)))
        self.assertEqual(receipts, [1, 2, 3, 4, 5])
        self.assertEqual(Counter.current_value('bill'), 5)

    def test_receipt_numbers_continue_from_counter(self):
        Counter.reset('bill', 1000)
        self.assertEqual(self.create_bill().receipt_no, 1001)

    def test_receipt_numbers_past_32_bit_range(self):
        Counter.reset('bill', 3_000_000_000)
        bill = self.create_bill()

        bill.refresh_from_db()
        self.assertEqual(bill.receipt_no, 3_000_000_001)
        self.assertEqual(BillingService.get_bill_by_receipt(self.admin, 3_000_000_001), bill)

    def test_amount_stored_exactly(self):
        bill = self.create_bill(amount='1500.50')
        bill.refresh_from_db()

        self.assertEqual(bill.amount, Decimal('1500.50'))
        self.assertEqual(
            bill.amount_in_words,
            'One Thousand Five Hundred Rupees and Fifty Paise Only'
        )

    def test_sub_category_for_land(self):
        bill = self.create_bill(account_type='Land', sub_category='Renovation')

        self.assertEqual(bill.kind, AccountKind.LAND)
        self.assertEqual(bill.sub_category, 'Renovation')

    def test_payment_method_and_notes(self):
        bill = self.create_bill(payment_method='UPI', notes='  Friday collection  ')

        self.assertEqual(bill.payment_method, 'UPI')
        self.assertEqual(bill.notes, 'Friday collection')

    def test_invalid_input_consumes_no_receipt_number(self):
        """Rejected requests leave the counter and the ledger untouched"""
        cases = [
            ({'amount': '0'}, InvalidAmountException),
            ({'amount': '-10'}, InvalidAmountException),
            ({'amount': '10.999'}, InvalidAmountException),
            ({'amount': 'ten'}, InvalidAmountException),
            ({'amount': '12345678901.50'}, InvalidAmountException),
            ({'account_type': 'Zakat'}, InvalidAccountTypeException),
            ({'mahal_id': 'five/ten'}, InvalidHouseholdIdException),
            ({'payment_method': 'Bitcoin'}, ValidationException),
            ({'sub_category': 'Renovation'}, InvalidAccountTypeException),
            ({'account_type': 'Nercha', 'sub_category': 'Renovation'}, InvalidAccountTypeException),
            ({'notes': 'x' * 501}, ValidationException),
        ]
        for overrides, error in cases:
            with self.subTest(overrides=overrides):
                params = {'mahal_id': '5/10', 'amount': '100', 'account_type': 'Donation'}
                params.update(overrides)
                with self.assertRaises(error):
                    BillingService.create_bill(self.admin, **params)

        self.assertEqual(Counter.current_value('bill'), 0)
        self.assertEqual(Bill.objects.count(), 0)

    def test_unknown_household(self):
        with self.assertRaises(HouseholdNotFoundException):
            self.create_bill(mahal_id='9/99')
        self.assertEqual(Counter.current_value('bill'), 0)

    def test_member_bills_own_household(self):
        bill = BillingService.create_bill(self.member, '5/10', '50', 'Dua_Friday')
        self.assertEqual(bill.created_by, self.member)

    def test_member_cannot_bill_other_household(self):
        with self.assertRaises(HouseholdAccessDeniedException):
            BillingService.create_bill(self.member, '1/2', '50', 'Dua_Friday')
        self.assertEqual(Counter.current_value('bill'), 0)

    def test_sequence_failure_is_retryable(self):
        with mock.patch.object(
            Counter, 'next_value', side_effect=SequenceUnavailableException()
        ):
            with self.assertRaises(StorageUnavailableException) as ctx:
                self.create_bill()

        self.assertTrue(ctx.exception.retryable)
        self.assertEqual(Bill.objects.count(), 0)

    def test_write_failure_rolls_back_receipt_number(self):
        with mock.patch.object(
            BillAudit.objects, 'create', side_effect=OperationalError('disk full')
        ):
            with self.assertRaises(StorageUnavailableException):
                self.create_bill()

        self.assertEqual(Bill.objects.count(), 0)
        self.assertEqual(Counter.current_value('bill'), 0)


class BillRecordTest(BillingTestMixin, TestCase):
    """Financial fields never change and rows are never removed"""

    def test_financial_fields_are_immutable(self):
        bill = self.create_bill()

        for field, value in (
            ('amount', Decimal('1.00')),
            ('account_type', 'Land'),
            ('mahal_id', '1/2'),
            ('receipt_no', 99),
        ):
            with self.subTest(field=field):
                fresh = Bill.objects.get(pk=bill.pk)
                setattr(fresh, field, value)
                with self.assertRaises(ImmutableFieldException):
                    fresh.save()

        bill.refresh_from_db()
        self.assertEqual(bill.amount, Decimal('2500.00'))

    def test_hard_delete_refused(self):
        bill = self.create_bill()

        with self.assertRaises(HardDeleteNotAllowedException):
            bill.delete()
        with self.assertRaises(HardDeleteNotAllowedException):
            Bill.objects.all().delete()

        self.assertTrue(Bill.objects.filter(pk=bill.pk).exists())


class QueryBillsTest(BillingTestMixin, TestCase):
    """Test cases for bill lookups and listings"""

    def setUp(self):
        super().setUp()
        self.bill_a = self.create_bill('5/10', '100', 'Donation', payment_method='Cash')
        self.bill_b = self.create_bill('5/10', '300', 'Land', sub_category='Renovation',
                                       payment_method='UPI')
        self.bill_c = self.create_bill('1/2', '200', 'Donation', payment_method='Cheque')

    def test_get_bill(self):
        self.assertEqual(BillingService.get_bill(self.admin, self.bill_a.pk), self.bill_a)
        self.assertEqual(BillingService.get_bill(self.member, self.bill_a.pk), self.bill_a)

    def test_get_bill_not_found(self):
        with self.assertRaises(BillNotFoundException):
            BillingService.get_bill(self.admin, 999999)
        with self.assertRaises(BillNotFoundException):
            BillingService.get_bill_by_receipt(self.admin, 999999)

    def test_get_bill_by_receipt(self):
        bill = BillingService.get_bill_by_receipt(self.admin, self.bill_c.receipt_no)
        self.assertEqual(bill, self.bill_c)

    def test_member_cannot_read_other_household(self):
        with self.assertRaises(HouseholdAccessDeniedException):
            BillingService.get_bill(self.member, self.bill_c.pk)
        with self.assertRaises(HouseholdAccessDeniedException):
            BillingService.get_bill_by_receipt(self.member, self.bill_c.receipt_no)
        with self.assertRaises(HouseholdAccessDeniedException):
            BillingService.get_receipt_data(self.member, self.bill_c.pk)
        with self.assertRaises(HouseholdAccessDeniedException):
            BillingService.get_member_bills(self.member, '1/2')

    def test_admin_lists_everything(self):
        result = BillingService.list_bills(self.admin)

        self.assertEqual(result['pagination']['total_bills'], 3)
        # newest first
        self.assertEqual(result['bills'][0], self.bill_c)

    def test_member_list_is_scoped_to_household(self):
        result = BillingService.list_bills(self.member)

        self.assertEqual({bill.mahal_id for bill in result['bills']}, {'5/10'})
        self.assertEqual(result['pagination']['total_bills'], 2)

    def test_member_cannot_list_other_household(self):
        with self.assertRaises(HouseholdAccessDeniedException):
            BillingService.list_bills(self.member, {'mahal_id': '1/2'})

    def test_member_without_household_cannot_list(self):
        orphan = User.objects.create_user(email='orphan@kmj.test', password='x')
        with self.assertRaises(HouseholdAccessDeniedException):
            BillingService.list_bills(orphan)

    def test_filters(self):
        def receipts(**filters):
            result = BillingService.list_bills(self.admin, filters)
            return sorted(bill.receipt_no for bill in result['bills'])

        self.assertEqual(receipts(mahal_id='1/2'), [self.bill_c.receipt_no])
        self.assertEqual(receipts(account_type='Donation'),
                         [self.bill_a.receipt_no, self.bill_c.receipt_no])
        self.assertEqual(receipts(kind='land'), [self.bill_b.receipt_no])
        self.assertEqual(receipts(payment_method='UPI'), [self.bill_b.receipt_no])
        self.assertEqual(receipts(min_amount='150'),
                         [self.bill_b.receipt_no, self.bill_c.receipt_no])
        self.assertEqual(receipts(max_amount='150'), [self.bill_a.receipt_no])
        self.assertEqual(len(receipts(financial_year=financial_year_for())), 3)
        self.assertEqual(receipts(financial_year='1999-00'), [])

        today = timezone.localdate()
        self.assertEqual(len(receipts(start_date=today, end_date=today)), 3)
        self.assertEqual(len(receipts(start_date=today + timedelta(days=1))), 0)

    def test_invalid_filters(self):
        for filters in (
            {'account_type': 'Zakat'},
            {'kind': 'temple'},
            {'status': 'archived'},
            {'start_date': '31-12-2024'},
            {'min_amount': 'lots'},
            {'financial_year': '2024-26'},
            {'mahal_id': 'x'},
        ):
            with self.subTest(filters=filters):
                with self.assertRaises(ValidationException):
                    BillingService.list_bills(self.admin, filters)

    def test_sorting(self):
        result = BillingService.list_bills(self.admin, sort_by='amount', sort_order='asc')
        self.assertEqual(
            [bill.amount for bill in result['bills']],
            [Decimal('100.00'), Decimal('200.00'), Decimal('300.00')]
        )

        with self.assertRaises(ValidationException):
            BillingService.list_bills(self.admin, sort_by='password')
        with self.assertRaises(ValidationException):
            BillingService.list_bills(self.admin, sort_order='sideways')

    def test_pagination(self):
        for i in range(2):
            self.create_bill(amount=10 + i)

        page = BillingService.list_bills(self.admin, page=3, limit=2)
        self.assertEqual(len(page['bills']), 1)
        self.assertEqual(page['pagination'], {
            'current_page': 3,
            'total_pages': 3,
            'total_bills': 5,
            'bills_per_page': 2,
            'has_next_page': False,
            'has_prev_page': True,
        })

        past_end = BillingService.list_bills(self.admin, page=4, limit=2)
        self.assertEqual(past_end['bills'], [])

    def test_pagination_limits(self):
        with self.assertRaises(ValidationException):
            BillingService.list_bills(self.admin, limit=101)
        with self.assertRaises(ValidationException) as ctx:
            BillingService.list_bills(self.admin, limit=0)
        self.assertEqual(ctx.exception.details, {'limit': 0})
        with self.assertRaises(ValidationException):
            BillingService.list_bills(self.admin, page=0)

        default = BillingService.list_bills(self.admin)
        self.assertEqual(default['pagination']['bills_per_page'], 20)

    def test_status_filter(self):
        BillingService.void_bill(self.admin, self.bill_a.pk, 'Entered twice')

        default = BillingService.list_bills(self.admin)
        voided = BillingService.list_bills(self.admin, {'status': 'voided'})
        everything = BillingService.list_bills(self.admin, {'status': 'all'})

        self.assertNotIn(self.bill_a, default['bills'])
        self.assertEqual(voided['bills'], [self.bill_a])
        self.assertEqual(everything['pagination']['total_bills'], 3)

    def test_member_bills_history(self):
        history = BillingService.get_member_bills(self.member, '5/10')

        self.assertEqual(history['mahal_id'], '5/10')
        self.assertEqual(history['total_bills'], 2)
        self.assertEqual(str(history['total_amount_paid']), '400.00')
        self.assertEqual(history['bills'][0], self.bill_b)

    def test_member_bills_without_history(self):
        Member.objects.create(mahal_id='7/7', name='New Family', relation=Relation.HEAD)
        history = BillingService.get_member_bills(self.admin, '7/7')

        self.assertEqual(history['total_bills'], 0)
        self.assertEqual(str(history['total_amount_paid']), '0.00')
        self.assertEqual(history['bills'], [])

    def test_member_bills_default_limit(self):
        for i in range(6):
            self.create_bill(amount=1 + i)

        history = BillingService.get_member_bills(self.admin, '5/10')

        self.assertEqual(len(history['bills']), 5)
        self.assertEqual(history['total_bills'], 8)
        self.assertTrue(history['pagination']['has_next_page'])

    @override_settings(KMJ_ORGANIZATION_NAME='Test Jamaath', KMJ_ORGANIZATION_ADDRESS='Test Town')
    def test_receipt_data(self):
        receipt = BillingService.get_receipt_data(self.member, self.bill_b.pk)
        local_date = timezone.localtime(self.bill_b.bill_date)

        self.assertEqual(receipt['organization'], {'name': 'Test Jamaath', 'address': 'Test Town'})
        self.assertEqual(receipt['receipt_no'], self.bill_b.receipt_no)
        self.assertEqual(
            receipt['receipt_label'],
            f"BILL-{local_date.year}-{self.bill_b.receipt_no:06d}"
        )
        self.assertEqual(receipt['date'], local_date.strftime('%d %B %Y'))
        self.assertEqual(receipt['time'], local_date.strftime('%I:%M %p'))
        self.assertEqual(receipt['amount'], '300.00')
        self.assertEqual(receipt['amount_in_words'], 'Three Hundred Rupees Only')
        self.assertEqual(receipt['sub_category'], 'Renovation')
        self.assertEqual(receipt['collected_by'], 'Office Admin')
        self.assertEqual(receipt['status'], BillStatus.ACTIVE)


class ChangeBillTest(BillingTestMixin, TestCase):
    """Test cases for update, void and delete"""

    def setUp(self):
        super().setUp()
        self.bill = self.create_bill()

    def test_update_notes_and_payment_method(self):
        bill = BillingService.update_bill(
            self.admin, self.bill.pk, notes='Paid at office', payment_method='Card'
        )

        self.assertEqual(bill.notes, 'Paid at office')
        self.assertEqual(bill.payment_method, 'Card')
        self.assertEqual(bill.updated_by, self.admin)

        audit = bill.audit_trail.get(action=BillAudit.AuditAction.UPDATED)
        self.assertEqual(audit.changed_fields['payment_method'], {'old': 'Cash', 'new': 'Card'})

    def test_update_without_changes_writes_no_audit(self):
        BillingService.update_bill(self.admin, self.bill.pk, payment_method='Cash')
        self.assertFalse(self.bill.audit_trail.filter(action=BillAudit.AuditAction.UPDATED).exists())

    def test_update_rejects_financial_fields(self):
        with self.assertRaises(ImmutableFieldException) as ctx:
            BillingService.update_bill(self.admin, self.bill.pk, amount='1', notes='x')

        self.assertEqual(ctx.exception.details['fields'], ['amount'])
        self.bill.refresh_from_db()
        self.assertEqual(self.bill.notes, '')

    def test_update_validates_values(self):
        with self.assertRaises(ValidationException):
            BillingService.update_bill(self.admin, self.bill.pk, payment_method='Gold')

    def test_update_requires_admin(self):
        with self.assertRaises(UnauthorizedRoleException):
            BillingService.update_bill(self.member, self.bill.pk, notes='mine')

    def test_update_deleted_bill_refused(self):
        BillingService.delete_bill(self.admin, self.bill.pk)
        with self.assertRaises(WorkflowTransitionException):
            BillingService.update_bill(self.admin, self.bill.pk, notes='too late')

    def test_update_missing_bill(self):
        with self.assertRaises(BillNotFoundException):
            BillingService.update_bill(self.admin, 424242, notes='x')

    def test_void_keeps_record_but_drops_it_from_totals(self):
        bill = BillingService.void_bill(self.admin, self.bill.pk, 'Duplicate entry')

        self.assertEqual(bill.status, BillStatus.VOIDED)
        self.assertEqual(bill.voided_by, self.admin)
        self.assertIsNotNone(bill.voided_at)
        self.assertEqual(bill.void_reason, 'Duplicate entry')

        fetched = BillingService.get_bill(self.admin, self.bill.pk)
        self.assertEqual(fetched.status, BillStatus.VOIDED)
        self.assertEqual(fetched.void_reason, 'Duplicate entry')

        self.assertEqual(BillingService.list_bills(self.admin)['bills'], [])
        history = BillingService.get_member_bills(self.admin, '5/10')
        self.assertEqual(str(history['total_amount_paid']), '0.00')
        stats = BillingService.get_bill_stats(self.admin)
        self.assertEqual(stats['overview']['total_revenue'], Decimal('0.00'))

        audit = bill.audit_trail.get(action=BillAudit.AuditAction.VOIDED)
        self.assertEqual(audit.old_status, BillStatus.ACTIVE)
        self.assertEqual(audit.new_status, BillStatus.VOIDED)
        self.assertEqual(audit.remarks, 'Duplicate entry')

    def test_void_requires_reason(self):
        with self.assertRaises(ValidationException):
            BillingService.void_bill(self.admin, self.bill.pk, '   ')

    def test_void_twice_refused(self):
        BillingService.void_bill(self.admin, self.bill.pk, 'Wrong account')
        with self.assertRaises(WorkflowTransitionException):
            BillingService.void_bill(self.admin, self.bill.pk, 'Again')

    def test_void_requires_admin(self):
        with self.assertRaises(UnauthorizedRoleException):
            BillingService.void_bill(self.member, self.bill.pk, 'Mine')

    def test_delete_is_soft(self):
        bill = BillingService.delete_bill(self.admin, self.bill.pk, 'Test entry')

        self.assertEqual(bill.status, BillStatus.DELETED)
        self.assertEqual(bill.deleted_by, self.admin)
        self.assertEqual(bill.delete_reason, 'Test entry')
        self.assertTrue(Bill.objects.filter(pk=self.bill.pk).exists())
        self.assertEqual(BillingService.list_bills(self.admin)['bills'], [])

    def test_delete_voided_bill(self):
        BillingService.void_bill(self.admin, self.bill.pk, 'Wrong account')
        bill = BillingService.delete_bill(self.admin, self.bill.pk)

        self.assertEqual(bill.status, BillStatus.DELETED)
        self.assertEqual(bill.void_reason, 'Wrong account')

    def test_delete_twice_refused(self):
        BillingService.delete_bill(self.admin, self.bill.pk)
        with self.assertRaises(WorkflowTransitionException):
            BillingService.delete_bill(self.admin, self.bill.pk)

    def test_delete_requires_admin(self):
        with self.assertRaises(UnauthorizedRoleException):
            BillingService.delete_bill(self.member, self.bill.pk)

    def test_stats_require_admin(self):
        with self.assertRaises(UnauthorizedRoleException):
            BillingService.get_bill_stats(self.member)

    def test_stats_sizes_must_be_positive(self):
        for kwargs in ({'months': 0}, {'top': -1}, {'recent': 'x'}):
            with self.subTest(**kwargs):
                with self.assertRaises(ValidationException) as ctx:
                    BillingService.get_bill_stats(self.admin, **kwargs)
                self.assertEqual(ctx.exception.details, kwargs)

    def test_stats_shape(self):
        stats = BillingService.get_bill_stats(self.admin, months=3, top=5, recent=5)

        self.assertEqual(
            set(stats),
            {'overview', 'revenue_by_account', 'monthly_revenue', 'top_households', 'recent_bills'}
        )
        self.assertEqual(stats['overview']['total_bills'], 1)
        self.assertEqual(len(stats['monthly_revenue']), 3)
        self.assertEqual(stats['revenue_by_account'][0]['account_type'], 'Donation')
        self.assertEqual(stats['top_households'][0]['mahal_id'], '5/10')
