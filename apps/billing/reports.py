"""
-------------------------------------------------------------------------
System: KMJ Billing System
Client: Kalloor Muslim Jamaath
Description: Billing statistics for the admin dashboard and bill
             exports. Only active bills are counted; voided and deleted
             bills never contribute to totals.
-------------------------------------------------------------------------
"""
import csv
from datetime import date, datetime
from typing import Any, Dict, List, Optional

from django.db.models import Count, Max, Sum
from django.db.models.functions import TruncMonth
from django.http import HttpResponse
from django.utils import timezone
from openpyxl import Workbook
from openpyxl.styles import Alignment, Font, PatternFill
from openpyxl.utils import get_column_letter

from apps.billing.models import Bill
from apps.billing.utils import money_total

EXPORT_HEADERS = [
    'Receipt No', 'Bill Date', 'Financial Year', 'Mahal ID', 'Member Name',
    'Account Type', 'Sub-category', 'Amount (Rs)', 'Payment Method',
    'Status', 'Notes', 'Created By',
]


def _local_now(as_of: Optional[datetime] = None) -> datetime:
    as_of = as_of or timezone.now()
    return timezone.localtime(as_of) if timezone.is_aware(as_of) else as_of


class BillReports:
    """
    Billing reports and analytics.

    Provides:
    - Overview totals (overall, today, this month)
    - Revenue by account type
    - Monthly revenue trend
    - Top contributing households
    - Recent bills
    - CSV / Excel export
    """

    @staticmethod
    def active_bills(
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        financial_year: Optional[str] = None
    ):
        """Active bills, optionally limited to a date range or financial year."""
        bills = Bill.objects.active()
        if start_date:
            bills = bills.filter(bill_date__date__gte=start_date)
        if end_date:
            bills = bills.filter(bill_date__date__lte=end_date)
        if financial_year:
            bills = bills.filter(financial_year=financial_year)
        return bills

    @staticmethod
    def overview(
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        financial_year: Optional[str] = None,
        as_of: Optional[datetime] = None
    ) -> Dict[str, Any]:
        """
        Headline figures for the dashboard.

        Args:
            start_date: Optional start date filter
            end_date: Optional end date filter
            financial_year: Optional 'YYYY-YY' filter
            as_of: Reference time for today/month figures (default: now)

        Returns:
            Dictionary with total_bills, total_revenue, average_amount,
            today_amount and month_amount
        """
        totals = BillReports.active_bills(start_date, end_date, financial_year).aggregate(
            total_bills=Count('id'),
            total_revenue=Sum('amount')
        )
        total_bills = totals['total_bills']
        total_revenue = money_total(totals['total_revenue'])
        average = money_total(total_revenue / total_bills if total_bills else None)

        now = _local_now(as_of)
        today_amount = money_total(Bill.objects.active().filter(
            bill_date__date=now.date()
        ).aggregate(total=Sum('amount'))['total'])
        month_amount = money_total(Bill.objects.active().filter(
            bill_date__year=now.year,
            bill_date__month=now.month
        ).aggregate(total=Sum('amount'))['total'])

        return {
            'total_bills': total_bills,
            'total_revenue': total_revenue,
            'average_amount': average,
            'today_amount': today_amount,
            'month_amount': month_amount,
        }

    @staticmethod
    def revenue_by_account(
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        financial_year: Optional[str] = None
    ) -> List[Dict[str, Any]]:
        """Revenue and bill count per account type, highest revenue first."""
        rows = BillReports.active_bills(start_date, end_date, financial_year).values(
            'account_type'
        ).annotate(
            count=Count('id'),
            revenue=Sum('amount')
        ).order_by('-revenue', 'account_type')

        return [
            {
                'account_type': row['account_type'],
                'count': row['count'],
                'revenue': money_total(row['revenue']),
            }
            for row in rows
        ]

    @staticmethod
    def monthly_revenue(months: int = 12, as_of: Optional[datetime] = None) -> List[Dict[str, Any]]:
        """
        Revenue trend for the trailing calendar months.

        Every month in the window is present, oldest first; months without
        bills report zero.

        Args:
            months: Number of months including the current one
            as_of: Reference time (default: now)

        Returns:
            List of {'month': 'YYYY-MM', 'revenue', 'count'}
        """
        now = _local_now(as_of)

        keys = []
        year, month = now.year, now.month
        for _ in range(max(months, 0)):
            keys.append((year, month))
            month -= 1
            if month == 0:
                year, month = year - 1, 12
        keys.reverse()
        if not keys:
            return []

        first_year, first_month = keys[0]
        window_start = datetime(first_year, first_month, 1)
        if timezone.is_aware(now):
            window_start = timezone.make_aware(window_start)

        rows = Bill.objects.active().filter(
            bill_date__gte=window_start,
            bill_date__lte=now
        ).annotate(
            month=TruncMonth('bill_date')
        ).values('month').order_by('month').annotate(
            revenue=Sum('amount'),
            count=Count('id')
        )

        totals = {}
        for row in rows:
            bucket = row['month']
            if isinstance(bucket, datetime) and timezone.is_aware(bucket):
                bucket = timezone.localtime(bucket)
            totals[(bucket.year, bucket.month)] = row

        trend = []
        for key in keys:
            row = totals.get(key)
            trend.append({
                'month': f"{key[0]}-{key[1]:02d}",
                'revenue': money_total(row['revenue'] if row else None),
                'count': row['count'] if row else 0,
            })
        return trend

    @staticmethod
    def top_households(
        limit: int = 10,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        financial_year: Optional[str] = None
    ) -> List[Dict[str, Any]]:
        """Households ranked by total amount paid."""
        rows = BillReports.active_bills(start_date, end_date, financial_year).values(
            'mahal_id'
        ).annotate(
            member_name=Max('member_name'),
            total_amount=Sum('amount'),
            bill_count=Count('id')
        ).order_by('-total_amount', 'mahal_id')[:limit]

        return [
            {
                'mahal_id': row['mahal_id'],
                'member_name': row['member_name'],
                'total_amount': money_total(row['total_amount']),
                'bill_count': row['bill_count'],
            }
            for row in rows
        ]

    @staticmethod
    def recent_bills(limit: int = 10) -> List[Dict[str, Any]]:
        """Latest active bills, newest first."""
        bills = Bill.objects.active().order_by('-bill_date', '-id')[:limit]
        return [
            {
                'id': bill.pk,
                'receipt_no': bill.receipt_no,
                'mahal_id': bill.mahal_id,
                'member_name': bill.member_name,
                'amount': bill.amount,
                'account_type': bill.account_type,
                'bill_date': bill.bill_date,
            }
            for bill in bills
        ]

    @staticmethod
    def _export_row(bill: Bill) -> List[Any]:
        return [
            bill.receipt_no,
            timezone.localtime(bill.bill_date).strftime('%Y-%m-%d %H:%M'),
            bill.financial_year,
            bill.mahal_id,
            bill.member_name,
            bill.account_type,
            bill.sub_category,
            float(bill.amount),
            bill.payment_method,
            bill.get_status_display(),
            bill.notes,
            bill.recorded_by_name,
        ]

    @staticmethod
    def export_bills(bills, fmt: str = 'xlsx') -> HttpResponse:
        """
        Export bills as a downloadable file.

        Args:
            bills: Bill queryset (or iterable) to export
            fmt: 'csv' or 'xlsx'

        Returns:
            HttpResponse with the file as an attachment

        Raises:
            ValueError: For an unknown format
        """
        if fmt == 'csv':
            return BillReports._export_csv(bills)
        if fmt == 'xlsx':
            return BillReports._export_excel(bills)
        raise ValueError(f"Unsupported export format: {fmt!r}")

    @staticmethod
    def _export_csv(bills) -> HttpResponse:
        """Export bills to CSV format."""
        timestamp = timezone.now().strftime('%Y%m%d_%H%M%S')
        filename = f'bills_{timestamp}.csv'

        response = HttpResponse(content_type='text/csv; charset=utf-8')
        response['Content-Disposition'] = f'attachment; filename="{filename}"'

        # UTF-8 BOM for Excel
        response.write('\ufeff')

        writer = csv.writer(response)
        writer.writerow(EXPORT_HEADERS)
        for bill in bills:
            writer.writerow(BillReports._export_row(bill))

        return response

    @staticmethod
    def _export_excel(bills) -> HttpResponse:
        """Export bills to Excel format."""
        wb = Workbook()
        ws = wb.active
        ws.title = "Bills"

        header_fill = PatternFill(start_color='366092', end_color='366092', fill_type='solid')
        header_font = Font(bold=True, color='FFFFFF')

        for col_num, header in enumerate(EXPORT_HEADERS, 1):
            cell = ws.cell(row=1, column=col_num)
            cell.value = header
            cell.fill = header_fill
            cell.font = header_font
            cell.alignment = Alignment(horizontal='center', vertical='center')

        for row_num, bill in enumerate(bills, 2):
            for col_num, value in enumerate(BillReports._export_row(bill), 1):
                ws.cell(row=row_num, column=col_num).value = value

        for col_num in range(1, len(EXPORT_HEADERS) + 1):
            ws.column_dimensions[get_column_letter(col_num)].width = 15

        timestamp = timezone.now().strftime('%Y%m%d_%H%M%S')
        filename = f'bills_{timestamp}.xlsx'

        response = HttpResponse(
            content_type='application/vnd.openxmlformats-officedocument.spreadsheetml.sheet'
        )
        response['Content-Disposition'] = f'attachment; filename="{filename}"'

        wb.save(response)
        return response
