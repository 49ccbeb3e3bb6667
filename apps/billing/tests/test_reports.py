"""
-------------------------------------------------------------------------
System: KMJ Billing System
Client: Kalloor Muslim Jamaath
Description: Test cases for billing statistics and exports
-------------------------------------------------------------------------
"""
import csv
import io
from datetime import date, datetime
from decimal import Decimal

from django.contrib.auth import get_user_model
from django.test import TestCase
from django.utils import timezone
from openpyxl import load_workbook

from apps.billing.models import Bill, BillStatus
from apps.billing.reports import EXPORT_HEADERS, BillReports

User = get_user_model()


def local(*args):
    return timezone.make_aware(datetime(*args))


class BillReportsTest(TestCase):
    """Test cases for BillReports"""

    @classmethod
    def setUpTestData(cls):
        cls.admin = User.objects.create_user(
            email='admin@kmj.test',
            password='testpass123',
            role='admin',
            first_name='Office',
            last_name='Admin'
        )
        cls.as_of = local(2024, 6, 15, 12, 0)

        cls.receipt = 0
        cls.bills = [
            cls.make_bill('5/10', 'Abdul Basheer', '1000', 'Donation', local(2024, 6, 15, 9, 30)),
            cls.make_bill('5/10', 'Abdul Basheer', '500', 'Land', local(2024, 6, 2, 10, 0)),
            cls.make_bill('1/2', 'Mohammed Ali', '250', 'Donation', local(2024, 4, 20, 18, 0)),
            cls.make_bill('3/7', 'Fathima Beevi', '2000', 'Madrassa', local(2024, 3, 10, 8, 0)),
        ]
        cls.voided = cls.make_bill(
            '1/2', 'Mohammed Ali', '9999', 'Donation', local(2024, 6, 15, 10, 0),
            status=BillStatus.VOIDED
        )

    @classmethod
    def make_bill(cls, mahal_id, name, amount, account_type, when, status=BillStatus.ACTIVE):
        cls.receipt += 1
        return Bill.objects.create(
            receipt_no=cls.receipt,
            bill_date=when,
            mahal_id=mahal_id,
            member_name=name,
            amount=Decimal(amount),
            account_type=account_type,
            status=status,
            created_by=cls.admin,
        )

    def test_derived_fields_on_create(self):
        donation, land, _, madrassa = self.bills

        self.assertEqual(donation.financial_year, '2024-25')
        self.assertEqual(madrassa.financial_year, '2023-24')
        self.assertEqual(land.kind, 'land')
        self.assertEqual(donation.amount_in_words, 'One Thousand Rupees Only')

    def test_overview(self):
        overview = BillReports.overview(as_of=self.as_of)

        self.assertEqual(overview['total_bills'], 4)
        self.assertEqual(overview['total_revenue'], Decimal('3750.00'))
        self.assertEqual(overview['average_amount'], Decimal('937.50'))
        self.assertEqual(overview['today_amount'], Decimal('1000.00'))
        self.assertEqual(overview['month_amount'], Decimal('1500.00'))

    def test_overview_filters(self):
        fy = BillReports.overview(financial_year='2024-25', as_of=self.as_of)
        self.assertEqual(fy['total_bills'], 3)
        self.assertEqual(fy['total_revenue'], Decimal('1750.00'))

        ranged = BillReports.overview(
            start_date=date(2024, 6, 1), end_date=date(2024, 6, 30), as_of=self.as_of
        )
        self.assertEqual(ranged['total_revenue'], Decimal('1500.00'))

    def test_overview_empty(self):
        overview = BillReports.overview(financial_year='1999-00', as_of=self.as_of)

        self.assertEqual(overview['total_bills'], 0)
        self.assertEqual(overview['total_revenue'], Decimal('0.00'))
        self.assertEqual(overview['average_amount'], Decimal('0.00'))

    def test_revenue_by_account(self):
        rows = BillReports.revenue_by_account()

        self.assertEqual(rows, [
            {'account_type': 'Madrassa', 'count': 1, 'revenue': Decimal('2000.00')},
            {'account_type': 'Donation', 'count': 2, 'revenue': Decimal('1250.00')},
            {'account_type': 'Land', 'count': 1, 'revenue': Decimal('500.00')},
        ])

    def test_monthly_revenue_zero_fills(self):
        trend = BillReports.monthly_revenue(months=5, as_of=self.as_of)

        self.assertEqual([row['month'] for row in trend],
                         ['2024-02', '2024-03', '2024-04', '2024-05', '2024-06'])
        by_month = {row['month']: row for row in trend}
        self.assertEqual(by_month['2024-02']['revenue'], Decimal('0.00'))
        self.assertEqual(by_month['2024-03']['revenue'], Decimal('2000.00'))
        self.assertEqual(by_month['2024-05']['count'], 0)
        self.assertEqual(by_month['2024-06']['revenue'], Decimal('1500.00'))
        self.assertEqual(by_month['2024-06']['count'], 2)

    def test_monthly_revenue_crosses_year(self):
        trend = BillReports.monthly_revenue(months=3, as_of=local(2025, 1, 5, 10, 0))
        self.assertEqual([row['month'] for row in trend], ['2024-11', '2024-12', '2025-01'])

    def test_top_households(self):
        rows = BillReports.top_households(limit=2)

        self.assertEqual([row['mahal_id'] for row in rows], ['3/7', '5/10'])
        self.assertEqual(rows[1]['total_amount'], Decimal('1500.00'))
        self.assertEqual(rows[1]['bill_count'], 2)
        self.assertEqual(rows[1]['member_name'], 'Abdul Basheer')

    def test_totals_carry_two_decimal_places(self):
        overview = BillReports.overview(as_of=self.as_of)
        empty = BillReports.overview(financial_year='1999-00', as_of=self.as_of)
        trend = BillReports.monthly_revenue(months=5, as_of=self.as_of)

        self.assertEqual(str(overview['total_revenue']), '3750.00')
        self.assertEqual(str(overview['today_amount']), '1000.00')
        self.assertEqual(str(overview['month_amount']), '1500.00')
        self.assertEqual(str(empty['total_revenue']), '0.00')
        self.assertEqual(
            [str(row['revenue']) for row in BillReports.revenue_by_account()],
            ['2000.00', '1250.00', '500.00']
        )
        self.assertEqual(
            [str(row['revenue']) for row in trend],
            ['0.00', '2000.00', '0.00', '0.00', '1500.00']
        )
        self.assertEqual(
            [str(row['total_amount']) for row in BillReports.top_households(limit=2)],
            ['2000.00', '1500.00']
        )

    def test_recent_bills_skip_voided(self):
        recent = BillReports.recent_bills(limit=3)

        self.assertEqual([row['receipt_no'] for row in recent], [1, 2, 3])

    def test_export_csv(self):
        response = BillReports.export_bills(Bill.objects.order_by('receipt_no'), 'csv')

        self.assertEqual(response['Content-Type'], 'text/csv; charset=utf-8')
        self.assertIn('attachment; filename="bills_', response['Content-Disposition'])

        content = response.content.decode('utf-8-sig')
        rows = list(csv.reader(io.StringIO(content)))
        self.assertEqual(rows[0], EXPORT_HEADERS)
        self.assertEqual(len(rows), 6)
        self.assertEqual(rows[1][0], '1')
        self.assertEqual(rows[1][1], '2024-06-15 09:30')
        self.assertEqual(rows[1][3], '5/10')
        self.assertEqual(rows[5][9], 'Voided')
        self.assertEqual(rows[1][11], 'Office Admin')

    def test_export_excel(self):
        response = BillReports.export_bills(Bill.objects.active().order_by('receipt_no'), 'xlsx')

        self.assertIn('spreadsheetml', response['Content-Type'])
        workbook = load_workbook(io.BytesIO(response.content))
        sheet = workbook['Bills']

        self.assertEqual([cell.value for cell in sheet[1]], EXPORT_HEADERS)
        self.assertEqual(sheet.max_row, 5)
        self.assertEqual(sheet.cell(row=2, column=8).value, 1000.0)
        self.assertTrue(sheet.cell(row=1, column=1).font.bold)

    def test_export_unknown_format(self):
        with self.assertRaises(ValueError):
            BillReports.export_bills(Bill.objects.all(), 'pdf')
