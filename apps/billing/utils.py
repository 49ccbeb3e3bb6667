"""
-------------------------------------------------------------------------
System: KMJ Billing System
Client: Kalloor Muslim Jamaath
Description: Billing helpers - amount in words (Indian numbering),
             amount parsing, financial year labels and Mahal ID parsing.
-------------------------------------------------------------------------
"""
import re
from datetime import date, datetime
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Optional, Tuple, Union

from django.utils import timezone

from apps.core.exceptions import InvalidAmountException, InvalidHouseholdIdException

Number = Union[Decimal, int, float, str]

MAHAL_ID_PATTERN = re.compile(r'^(\d+)/(\d+)$')
FINANCIAL_YEAR_PATTERN = re.compile(r'^(\d{4})-(\d{2})$')

ONES = [
    '', 'One', 'Two', 'Three', 'Four', 'Five', 'Six', 'Seven', 'Eight', 'Nine',
    'Ten', 'Eleven', 'Twelve', 'Thirteen', 'Fourteen', 'Fifteen', 'Sixteen',
    'Seventeen', 'Eighteen', 'Nineteen',
]
TENS = [
    '', '', 'Twenty', 'Thirty', 'Forty', 'Fifty', 'Sixty', 'Seventy',
    'Eighty', 'Ninety',
]

CRORE = 10_000_000
LAKH = 100_000
THOUSAND = 1_000
HUNDRED = 100

# Bill.amount is decimal(12, 2)
MAX_AMOUNT = Decimal('10000000000')
PAISE = Decimal('0.01')


def _to_decimal(value: Number) -> Decimal:
    if isinstance(value, bool):
        raise ValueError(f"Not a number: {value!r}")
    try:
        number = Decimal(str(value).strip()) if not isinstance(value, Decimal) else value
    except (InvalidOperation, ValueError) as exc:
        raise ValueError(f"Not a number: {value!r}") from exc
    if not number.is_finite():
        raise ValueError(f"Not a finite number: {value!r}")
    return number


def _two_digits(number: int) -> str:
    if number < 20:
        return ONES[number]
    tens, ones = divmod(number, 10)
    return f"{TENS[tens]} {ONES[ones]}".strip()


def _integer_words(number: int) -> str:
    """Words for a whole number using crore/lakh/thousand/hundred."""
    parts = []

    crores, number = divmod(number, CRORE)
    if crores:
        parts.append(f"{_integer_words(crores)} Crore")

    lakhs, number = divmod(number, LAKH)
    if lakhs:
        parts.append(f"{_two_digits(lakhs)} Lakh")

    thousands, number = divmod(number, THOUSAND)
    if thousands:
        parts.append(f"{_two_digits(thousands)} Thousand")

    hundreds, number = divmod(number, HUNDRED)
    if hundreds:
        parts.append(f"{ONES[hundreds]} Hundred")

    if number:
        parts.append(_two_digits(number))

    return ' '.join(parts)


def amount_to_words(amount: Number) -> str:
    """
    Render a rupee amount in words for printed receipts.

    Rupees are the whole part; paise are the fraction rounded half-up to
    two places (99.995 carries into 100 Rupees).

    Args:
        amount: Non-negative Decimal, int, float or numeric string.

    Returns:
        e.g. "One Lakh Fifty Thousand Rupees Only", or "Zero" for 0.

    Raises:
        ValueError: If the amount is negative or not a number.

    Examples:
        >>> amount_to_words(1500.50)
        'One Thousand Five Hundred Rupees and Fifty Paise Only'
    """
    value = _to_decimal(amount)
    if value < 0:
        raise ValueError(f"Amount cannot be negative: {amount!r}")

    rupees = int(value)
    paise = int(((value - rupees) * 100).quantize(Decimal('1'), rounding=ROUND_HALF_UP))
    if paise == 100:
        rupees += 1
        paise = 0

    if rupees == 0 and paise == 0:
        return 'Zero'

    words = f"{_integer_words(rupees) or 'Zero'} Rupees"
    if paise:
        words += f" and {_two_digits(paise)} Paise"
    return f"{words} Only"


def parse_amount(value: Number) -> Decimal:
    """
    Parse a bill amount: a positive number with at most 2 decimal places.

    Raises:
        InvalidAmountException: If the value is missing, not numeric,
            not positive, has more than 2 decimals or
            does not fit the 12-digit amount column.
    """
    try:
        amount = _to_decimal(value)
    except ValueError as exc:
        raise InvalidAmountException(details={'amount': str(value)}) from exc

    if amount <= 0 or amount.normalize().as_tuple().exponent < -2:
        raise InvalidAmountException(details={'amount': str(value)})
    if amount >= MAX_AMOUNT:
        raise InvalidAmountException(
            f"Amount must be below {MAX_AMOUNT:,}.",
            details={'amount': str(value)}
        )
    return amount.quantize(PAISE)


def money_total(value: Optional[Decimal]) -> Decimal:
    """Quantize a summed amount to paise; an empty sum is 0.00."""
    return (value or Decimal('0')).quantize(PAISE, rounding=ROUND_HALF_UP)


def financial_year_for(value: Optional[Union[date, datetime]] = None) -> str:
    """
    Financial year label for a date (April 1 to March 31).

    Aware datetimes are judged in the configured local time zone.

    Args:
        value: Date or datetime (default: now).

    Returns:
        Label such as '2024-25'.
    """
    if value is None:
        value = timezone.now()
    if isinstance(value, datetime) and timezone.is_aware(value):
        value = timezone.localtime(value)

    start_year = value.year if value.month >= 4 else value.year - 1
    return f"{start_year}-{(start_year + 1) % 100:02d}"


def financial_year_bounds(label: str) -> Tuple[date, date]:
    """
    First and last day of a financial year.

    Raises:
        ValueError: If the label is not 'YYYY-YY' with consecutive years.
    """
    match = FINANCIAL_YEAR_PATTERN.match(label or '')
    if not match:
        raise ValueError(f"Invalid financial year: {label!r}")

    start_year = int(match.group(1))
    if int(match.group(2)) != (start_year + 1) % 100:
        raise ValueError(f"Invalid financial year: {label!r}")

    return date(start_year, 4, 1), date(start_year + 1, 3, 31)


def parse_mahal_id(value: str) -> Tuple[int, int]:
    """
    Split a Mahal ID into (ward, house).

    Raises:
        InvalidHouseholdIdException: If the value is not 'number/number'.
    """
    match = MAHAL_ID_PATTERN.match((value or '').strip())
    if not match:
        raise InvalidHouseholdIdException(details={'mahal_id': value})
    return int(match.group(1)), int(match.group(2))


def validate_mahal_id(value: str) -> str:
    """Return the normalised Mahal ID or raise InvalidHouseholdIdException."""
    parse_mahal_id(value)
    return value.strip()
