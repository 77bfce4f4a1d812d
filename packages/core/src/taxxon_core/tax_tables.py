"""Tax schedules and credit rates for the filing engine.

This module holds the bracket schedules and credit constants used by the
tax calculator. It implements a deliberately simplified subset of the
Canadian rules: five federal brackets, one provincial schedule (Ontario's)
applied to every province, and five non-refundable credits.

Sources:
- Federal rates: https://www.canada.ca/en/revenue-agency/services/tax/individuals/frequently-asked-questions-individuals/canadian-income-tax-rates-individuals-current-previous-years.html
- Ontario rates: https://www.ontario.ca/page/personal-income-tax

Base amounts are the published cumulative figures, rounded to whole
dollars, so tax at a threshold computed from the upper bracket can differ
from the lower bracket's result by up to a couple of dollars.
"""

from decimal import Decimal
from typing import NamedTuple, Optional

from .models.filing import Province


# =============================================================================
# VERSION TRACKING
# =============================================================================

TAX_TABLES_VERSION = "2024"


def get_tax_tables_version() -> str:
    """Return the tax year the tables describe."""
    return TAX_TABLES_VERSION


# =============================================================================
# BRACKETS
# =============================================================================

class TaxBracket(NamedTuple):
    """One bracket: tax = base + (income - lower) * rate, for income above lower."""
    lower: Decimal
    base: Decimal
    rate: Decimal


FEDERAL_BRACKETS: tuple[TaxBracket, ...] = (
    TaxBracket(Decimal("0"), Decimal("0"), Decimal("0.15")),
    TaxBracket(Decimal("55867"), Decimal("8380"), Decimal("0.205")),
    TaxBracket(Decimal("111733"), Decimal("19833"), Decimal("0.26")),
    TaxBracket(Decimal("173205"), Decimal("35816"), Decimal("0.29")),
    TaxBracket(Decimal("246752"), Decimal("57144"), Decimal("0.33")),
)

ONTARIO_BRACKETS: tuple[TaxBracket, ...] = (
    TaxBracket(Decimal("0"), Decimal("0"), Decimal("0.0505")),
    TaxBracket(Decimal("51446"), Decimal("2598"), Decimal("0.0915")),
    TaxBracket(Decimal("102894"), Decimal("7307"), Decimal("0.1116")),
    TaxBracket(Decimal("150000"), Decimal("12563"), Decimal("0.1216")),
    TaxBracket(Decimal("220000"), Decimal("21075"), Decimal("0.1316")),
)


def apply_brackets(income: Decimal, schedule: tuple[TaxBracket, ...]) -> Decimal:
    """Bracket interpolation over an ordered schedule.

    Income exactly at a threshold is taxed in the lower bracket. Zero or
    negative income yields zero tax.

    Example:
        >>> apply_brackets(Decimal("70000"), FEDERAL_BRACKETS)
        Decimal('11277.265')
    """
    if income <= 0:
        return Decimal("0")

    bracket = schedule[0]
    for candidate in schedule[1:]:
        if income <= candidate.lower:
            break
        bracket = candidate

    return bracket.base + (income - bracket.lower) * bracket.rate


def get_federal_schedule() -> tuple[TaxBracket, ...]:
    return FEDERAL_BRACKETS


def get_provincial_schedule(province: Optional[Province] = None) -> tuple[TaxBracket, ...]:
    """Return the provincial schedule for a province of residence.

    Only Ontario's schedule is implemented; every province (and an unset
    province) gets it.
    """
    return ONTARIO_BRACKETS


# =============================================================================
# CREDITS
# =============================================================================

LOWEST_RATE = Decimal("0.15")

BASIC_PERSONAL_AMOUNT = Decimal("15705")

# Donations: first $200 at the lowest rate, the rest at the higher rate
DONATION_LOW_TIER_LIMIT = Decimal("200")
DONATION_LOW_RATE = Decimal("0.15")
DONATION_HIGH_RATE = Decimal("0.29")

# Medical expenses above this share of total income earn the credit
MEDICAL_INCOME_THRESHOLD_RATE = Decimal("0.03")

TUITION_CREDIT_RATE = LOWEST_RATE
STUDENT_LOAN_CREDIT_RATE = LOWEST_RATE


def donation_credit(amount: Decimal) -> Decimal:
    """Two-tier donation credit on one amount."""
    if amount <= 0:
        return Decimal("0")
    low = min(amount, DONATION_LOW_TIER_LIMIT)
    high = max(Decimal("0"), amount - DONATION_LOW_TIER_LIMIT)
    return low * DONATION_LOW_RATE + high * DONATION_HIGH_RATE


# =============================================================================
# INCOME INCLUSION AND DEDUCTION RATES
# =============================================================================

CAPITAL_GAINS_INCLUSION_RATE = Decimal("0.5")

# Flat-rate home office method: $2 per day worked from home
HOME_OFFICE_DAILY_RATE = Decimal("2")
HOME_OFFICE_MAX_DAYS = 250


# =============================================================================
# SUGGESTION HEURISTICS
# =============================================================================
# Used for estimated-impact figures in suggestions only, never in the
# calculation itself.

ASSUMED_MARGINAL_RATE = Decimal("0.25")

RRSP_CONTRIBUTION_LIMIT = Decimal("31560")
RRSP_CONTRIBUTION_RATE = Decimal("0.18")

# Medical credit threshold is the lesser of 3% of net income and this amount
MEDICAL_THRESHOLD_CAP = Decimal("2635")
