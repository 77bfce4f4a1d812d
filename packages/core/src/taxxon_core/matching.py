"""Numeric tolerance and approximate matching primitives.

Extracted document values come from OCR and language-model output, so they
rarely match user-entered values to the cent. These helpers decide when two
amounts or two names should be treated as the same.
"""

from decimal import Decimal, InvalidOperation
from typing import Any

ZERO = Decimal("0")

# Absolute tolerance below SMALL_AMOUNT_LIMIT, relative tolerance above it
NUMERIC_TOLERANCE = Decimal("0.01")
PERCENTAGE_TOLERANCE = Decimal("0.02")
SMALL_AMOUNT_LIMIT = Decimal("100")

# Extracted amounts at or above 10**16 are treated as unreadable
MAX_AMOUNT_EXPONENT = 15

_STRIP_CHARS = str.maketrans("", "", "$, \u00a0")


def to_decimal(value: Any) -> Decimal:
    """Convert a model input to Decimal, routing floats through str()."""
    if isinstance(value, Decimal):
        return value
    if isinstance(value, float):
        return Decimal(str(value))
    return Decimal(value)


def parse_amount(value: Any) -> Decimal:
    """Parse an extracted amount, treating anything unparseable as zero.

    Accepts numbers and numeric strings with currency symbols, thousands
    separators and surrounding whitespace. Booleans, None, NaN, infinities
    and magnitudes far beyond any real amount all become zero.
    """
    if value is None or isinstance(value, bool):
        return ZERO
    if isinstance(value, (int, float, Decimal)):
        try:
            amount = to_decimal(value)
        except (InvalidOperation, ValueError):
            return ZERO
    else:
        text = str(value).translate(_STRIP_CHARS)
        if not text:
            return ZERO
        try:
            amount = Decimal(text)
        except InvalidOperation:
            return ZERO
    if not amount.is_finite() or amount.adjusted() > MAX_AMOUNT_EXPONENT:
        return ZERO
    return amount


def values_match(extracted: Decimal, entered: Decimal) -> bool:
    """Tolerance-based equality for money amounts.

    Exact equality always matches. Amounts under $100 match within one
    cent; larger amounts match within 2% of the larger value.
    """
    if extracted == entered:
        return True

    diff = abs(extracted - entered)
    largest = max(extracted, entered)

    if largest < SMALL_AMOUNT_LIMIT:
        return diff <= NUMERIC_TOLERANCE

    return diff / largest <= PERCENTAGE_TOLERANCE


def names_match(extracted: str, entered: str) -> bool:
    """Case-insensitive containment in either direction; blanks never match."""
    a = (extracted or "").strip().lower()
    b = (entered or "").strip().lower()
    if not a or not b:
        return False
    return a in b or b in a


def format_amount(amount: Decimal) -> str:
    """Format an amount for suggestion text: $50,000 or $1,234.56."""
    if amount == amount.to_integral_value():
        return f"${int(amount):,}"
    return f"${amount:,.2f}"


__all__ = [
    "NUMERIC_TOLERANCE",
    "PERCENTAGE_TOLERANCE",
    "SMALL_AMOUNT_LIMIT",
    "to_decimal",
    "parse_amount",
    "values_match",
    "names_match",
    "format_amount",
]
