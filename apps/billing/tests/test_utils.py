"""
-------------------------------------------------------------------------
System: KMJ Billing System
Client: Kalloor Muslim Jamaath
Description: Test cases for billing helpers - amount in words,
             financial years and Mahal IDs
-------------------------------------------------------------------------
"""
from datetime import date, datetime, timezone as dt_timezone
from decimal import Decimal

from django.test import SimpleTestCase, override_settings

from apps.billing.utils import (
    amount_to_words, financial_year_bounds, financial_year_for, money_total,
    parse_amount, parse_mahal_id, validate_mahal_id,
)
from apps.core.exceptions import InvalidAmountException, InvalidHouseholdIdException


class AmountToWordsTest(SimpleTestCase):
    """Test cases for amount_to_words"""

    def test_zero(self):
        self.assertEqual(amount_to_words(0), 'Zero')
        self.assertEqual(amount_to_words(Decimal('0.00')), 'Zero')

    def test_receipt_examples(self):
        cases = {
            1: 'One Rupees Only',
            100: 'One Hundred Rupees Only',
            Decimal('1500.50'): 'One Thousand Five Hundred Rupees and Fifty Paise Only',
            100000: 'One Lakh Rupees Only',
            150000: 'One Lakh Fifty Thousand Rupees Only',
            2500: 'Two Thousand Five Hundred Rupees Only',
        }
        for amount, words in cases.items():
            with self.subTest(amount=amount):
                self.assertEqual(amount_to_words(amount), words)

    def test_teens_and_tens(self):
        self.assertEqual(amount_to_words(15), 'Fifteen Rupees Only')
        self.assertEqual(amount_to_words(21), 'Twenty One Rupees Only')
        self.assertEqual(amount_to_words(115), 'One Hundred Fifteen Rupees Only')
        self.assertEqual(amount_to_words(90), 'Ninety Rupees Only')

    def test_crores(self):
        self.assertEqual(
            amount_to_words(12345678),
            'One Crore Twenty Three Lakh Forty Five Thousand Six Hundred Seventy Eight Rupees Only'
        )

    def test_above_ninety_nine_crore(self):
        self.assertEqual(amount_to_words(1000000000), 'One Hundred Crore Rupees Only')
        self.assertEqual(
            amount_to_words(Decimal('2500000000.00')),
            'Two Hundred Fifty Crore Rupees Only'
        )

    def test_paise_only(self):
        self.assertEqual(amount_to_words(Decimal('0.75')), 'Zero Rupees and Seventy Five Paise Only')

    def test_paise_round_half_up(self):
        self.assertEqual(amount_to_words(Decimal('10.005')), 'Ten Rupees and One Paise Only')
        self.assertEqual(amount_to_words(Decimal('10.004')), 'Ten Rupees Only')

    def test_paise_carry_into_rupees(self):
        self.assertEqual(amount_to_words(Decimal('99.995')), 'One Hundred Rupees Only')

    def test_string_and_float_input(self):
        self.assertEqual(
            amount_to_words('250.25'),
            'Two Hundred Fifty Rupees and Twenty Five Paise Only'
        )
        self.assertEqual(
            amount_to_words(1500.5),
            'One Thousand Five Hundred Rupees and Fifty Paise Only'
        )

    def test_rejects_negative_and_non_numeric(self):
        for value in (-1, Decimal('-0.01'), 'abc', '', None, 'NaN'):
            with self.subTest(value=value):
                with self.assertRaises(ValueError):
                    amount_to_words(value)


class ParseAmountTest(SimpleTestCase):
    """Test cases for parse_amount"""

    def test_valid_amounts(self):
        self.assertEqual(parse_amount('100.50'), Decimal('100.50'))
        self.assertEqual(parse_amount(2500), Decimal('2500.00'))
        self.assertEqual(parse_amount('1.500'), Decimal('1.50'))

    def test_invalid_amounts(self):
        for value in ('0', 0, '-5', '1.234', 'abc', None):
            with self.subTest(value=value):
                with self.assertRaises(InvalidAmountException):
                    parse_amount(value)

    def test_amount_must_fit_column(self):
        self.assertEqual(parse_amount('9999999999.99'), Decimal('9999999999.99'))
        for value in ('10000000000', '12345678901.50', Decimal('1E+12')):
            with self.subTest(value=value):
                with self.assertRaises(InvalidAmountException):
                    parse_amount(value)


class MoneyTotalTest(SimpleTestCase):
    """Test cases for money_total"""

    def test_quantizes_to_paise(self):
        self.assertEqual(str(money_total(Decimal('3750'))), '3750.00')
        self.assertEqual(str(money_total(Decimal('1250.5'))), '1250.50')
        self.assertEqual(str(money_total(Decimal('937.505'))), '937.51')

    def test_empty_sum_is_zero(self):
        self.assertEqual(str(money_total(None)), '0.00')


@override_settings(TIME_ZONE='Asia/Kolkata')
class FinancialYearTest(SimpleTestCase):
    """Test cases for financial year helpers"""

    def test_april_boundary(self):
        self.assertEqual(financial_year_for(date(2024, 3, 31)), '2023-24')
        self.assertEqual(financial_year_for(date(2024, 4, 1)), '2024-25')

    def test_january_belongs_to_previous_start_year(self):
        self.assertEqual(financial_year_for(date(2025, 1, 15)), '2024-25')

    def test_century_rollover(self):
        self.assertEqual(financial_year_for(date(1999, 4, 1)), '1999-00')

    def test_aware_datetime_uses_local_time(self):
        # 19:00 UTC on March 31 is 00:30 IST on April 1
        moment = datetime(2024, 3, 31, 19, 0, tzinfo=dt_timezone.utc)
        self.assertEqual(financial_year_for(moment), '2024-25')

    def test_naive_datetime(self):
        self.assertEqual(financial_year_for(datetime(2024, 3, 31, 23, 59)), '2023-24')

    def test_default_is_now(self):
        self.assertRegex(financial_year_for(), r'^\d{4}-\d{2}$')

    def test_bounds(self):
        self.assertEqual(
            financial_year_bounds('2024-25'),
            (date(2024, 4, 1), date(2025, 3, 31))
        )
        self.assertEqual(
            financial_year_bounds('1999-00'),
            (date(1999, 4, 1), date(2000, 3, 31))
        )

    def test_bounds_rejects_malformed_labels(self):
        for label in ('2024-26', '2024', 'abcd-ef', '', None):
            with self.subTest(label=label):
                with self.assertRaises(ValueError):
                    financial_year_bounds(label)


class MahalIdTest(SimpleTestCase):
    """Test cases for Mahal ID parsing"""

    def test_parse(self):
        self.assertEqual(parse_mahal_id('5/10'), (5, 10))
        self.assertEqual(parse_mahal_id(' 1/2 '), (1, 2))

    def test_validate_strips_whitespace(self):
        self.assertEqual(validate_mahal_id(' 5/10 '), '5/10')

    def test_invalid(self):
        for value in ('5-10', '5/', '/10', 'a/b', '5/10/1', '', None):
            with self.subTest(value=value):
                with self.assertRaises(InvalidHouseholdIdException):
                    parse_mahal_id(value)
