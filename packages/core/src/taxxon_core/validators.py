"""Personal information checks and display formatting.

These are form-level checks: they return human-readable messages instead of
raising, so a caller can show every problem at once.
"""

import re
from datetime import date
from typing import Optional

from .models.filing import PersonalInfo

MAX_NAME_LENGTH = 50
MIN_FILING_AGE = 16
MAX_FILING_AGE = 120

POSTAL_CODE_PATTERN = re.compile(r"^[A-Za-z]\d[A-Za-z][ -]?\d[A-Za-z]\d$")
PHONE_PATTERN = re.compile(r"^[\d\s()+-]{10,}$")
EMAIL_PATTERN = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")


def _digits(value: str) -> str:
    return re.sub(r"\D", "", value or "")


def is_valid_sin(sin: str) -> bool:
    """Luhn check on a 9-digit Social Insurance Number. Separators are ignored."""
    digits = _digits(sin)
    if len(digits) != 9:
        return False

    total = 0
    for i, ch in enumerate(digits):
        digit = int(ch)
        if i % 2 == 1:
            digit *= 2
            if digit > 9:
                digit -= 9
        total += digit
    return total % 10 == 0


def format_sin(sin: str) -> str:
    """Format as XXX-XXX-XXX, tolerating partial input."""
    digits = _digits(sin)
    if len(digits) <= 3:
        return digits
    if len(digits) <= 6:
        return f"{digits[:3]}-{digits[3:]}"
    return f"{digits[:3]}-{digits[3:6]}-{digits[6:9]}"


def format_postal_code(postal_code: str) -> str:
    """Format as A1A 1A1, tolerating partial input."""
    cleaned = re.sub(r"\s", "", postal_code or "").upper()
    if len(cleaned) <= 3:
        return cleaned
    return f"{cleaned[:3]} {cleaned[3:6]}"


def _years_before(day: date, years: int) -> date:
    try:
        return day.replace(year=day.year - years)
    except ValueError:  # Feb 29
        return day.replace(year=day.year - years, day=28)


def _check_name(label: str, value: str) -> Optional[str]:
    if not value.strip():
        return f"{label} is required"
    if len(value) > MAX_NAME_LENGTH:
        return f"{label} must be less than {MAX_NAME_LENGTH} characters"
    return None


def validate_personal_info(
    info: PersonalInfo,
    as_of: Optional[date] = None,
) -> list[str]:
    """Return every validation message for the personal-info section.

    Args:
        info: Section to check
        as_of: Reference date for the age check (defaults to today)

    Returns:
        List of messages; empty when the section is complete and valid
    """
    today = as_of or date.today()
    errors: list[str] = []

    for label, value in (("First name", info.first_name), ("Last name", info.last_name)):
        message = _check_name(label, value)
        if message:
            errors.append(message)

    if not info.sin:
        errors.append("Social Insurance Number is required")
    elif not is_valid_sin(info.sin):
        errors.append("Please enter a valid SIN")

    if info.date_of_birth is None:
        errors.append("Date of birth is required")
    else:
        oldest = _years_before(today, MAX_FILING_AGE)
        youngest = _years_before(today, MIN_FILING_AGE)
        if not oldest <= info.date_of_birth <= youngest:
            errors.append(f"You must be at least {MIN_FILING_AGE} years old to file taxes")

    if not info.email:
        errors.append("Email is required")
    elif not EMAIL_PATTERN.match(info.email):
        errors.append("Please enter a valid email")

    if not info.phone:
        errors.append("Phone number is required")
    elif not PHONE_PATTERN.match(info.phone):
        errors.append("Please enter a valid phone number")

    if info.province is None:
        errors.append("Province is required")
    if info.marital_status is None:
        errors.append("Marital status is required")

    address = info.address
    if not address.street.strip():
        errors.append("Street address is required")
    if not address.city.strip():
        errors.append("City is required")
    if address.province is None:
        errors.append("Mailing address province is required")
    if not address.postal_code:
        errors.append("Postal code is required")
    elif not POSTAL_CODE_PATTERN.match(address.postal_code):
        errors.append("Please enter a valid Canadian postal code (e.g., A1A 1A1)")

    return errors


__all__ = [
    "is_valid_sin",
    "format_sin",
    "format_postal_code",
    "validate_personal_info",
]
