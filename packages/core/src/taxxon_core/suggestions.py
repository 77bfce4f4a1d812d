"""Static suggestion rules.

Each rule is a plain function over a SuggestionInput that returns one
suggestion or None. Rules run locally and instantly on every call; all
of them run every time, and the results are ordered high, medium, low
with rule order kept inside a tier.
"""

from decimal import ROUND_HALF_UP, Decimal
from typing import Callable, Optional, Union

import structlog

from .aggregation import SuggestionInput, build_suggestion_input
from .matching import format_amount
from .models.filing import Filing
from .models.suggestions import (
    SuggestionPriority,
    SuggestionType,
    TaxSuggestion,
    sort_by_priority,
)
from .tax_tables import (
    ASSUMED_MARGINAL_RATE,
    DONATION_LOW_TIER_LIMIT,
    HOME_OFFICE_DAILY_RATE,
    HOME_OFFICE_MAX_DAYS,
    MEDICAL_INCOME_THRESHOLD_RATE,
    MEDICAL_THRESHOLD_CAP,
    RRSP_CONTRIBUTION_LIMIT,
    RRSP_CONTRIBUTION_RATE,
)

logger = structlog.get_logger()

SuggestionRule = Callable[[SuggestionInput], Optional[TaxSuggestion]]

ZERO = Decimal("0")

RRSP_INCOME_THRESHOLD = Decimal("30000")
HIGH_DEDUCTION_RATIO = Decimal("0.4")
PROFESSIONAL_DUES_INCOME_THRESHOLD = Decimal("60000")
STUDENT_LOAN_INCOME_THRESHOLD = Decimal("30000")
STUDENT_LOAN_LOW_DEDUCTIONS = Decimal("1000")

DEDUCTIONS_ROUTE = "/file/deductions"


def check_province_set(data: SuggestionInput) -> Optional[TaxSuggestion]:
    if data.province is not None:
        return None
    return TaxSuggestion(
        type=SuggestionType.VALIDATION_ERROR,
        priority=SuggestionPriority.HIGH,
        title="Province Required",
        description="Please set your province of residence to calculate accurate provincial tax.",
        affected_fields=["personalInfo.province"],
        action_label="Set Province",
        action_route="/file/personal-info",
    )


def check_rrsp_opportunity(data: SuggestionInput) -> Optional[TaxSuggestion]:
    """Income over $30,000 with no RRSP contributions claimed."""
    income = data.income.t4_total + data.income.t4a_total + data.income.self_employment_income
    if income <= RRSP_INCOME_THRESHOLD or data.deductions.rrsp_total != 0:
        return None

    max_contribution = min(income * RRSP_CONTRIBUTION_RATE, RRSP_CONTRIBUTION_LIMIT)
    savings = max_contribution * ASSUMED_MARGINAL_RATE
    return TaxSuggestion(
        type=SuggestionType.MISSING_DEDUCTION,
        priority=SuggestionPriority.HIGH,
        title="RRSP Contribution Opportunity",
        description=(
            f"You haven't claimed any RRSP contributions. Based on your income, you may be "
            f"able to contribute up to {format_amount(max_contribution)} and potentially save "
            f"around {format_amount(savings)} in taxes."
        ),
        affected_fields=["deductions.rrspContributions"],
        action_label="Add RRSP",
        action_route=DEDUCTIONS_ROUTE,
        estimated_impact=savings,
    )


def check_home_office_opportunity(data: SuggestionInput) -> Optional[TaxSuggestion]:
    if data.income.t4_total <= 0 or data.deductions.home_office_days != 0:
        return None

    potential = HOME_OFFICE_MAX_DAYS * HOME_OFFICE_DAILY_RATE
    return TaxSuggestion(
        type=SuggestionType.INFO,
        priority=SuggestionPriority.MEDIUM,
        title="Home Office Deduction",
        description=(
            f"If you worked from home during the tax year, you may be able to claim up to "
            f"{format_amount(potential)} using the flat rate method "
            f"({format_amount(HOME_OFFICE_DAILY_RATE)}/day for up to {HOME_OFFICE_MAX_DAYS} days)."
        ),
        affected_fields=["deductions.homeOfficeDays", "deductions.homeOfficeMethod"],
        action_label="Add Home Office",
        action_route=DEDUCTIONS_ROUTE,
        estimated_impact=potential * ASSUMED_MARGINAL_RATE,
    )


def check_high_deduction_ratio(data: SuggestionInput) -> Optional[TaxSuggestion]:
    """Deductions, donations and medical above 40% of income."""
    income = data.income
    deductions = data.deductions
    total_income = (
        income.t4_total + income.t4a_total + income.t4e_total + income.t5_total
        + income.t3_total + income.self_employment_income + income.other_income
    )
    total_deductions = (
        deductions.rrsp_total + deductions.donations_total + deductions.medical_total
        + deductions.childcare_expenses + deductions.moving_expenses
        + deductions.professional_dues
    )
    if total_income <= 0:
        return None

    ratio = total_deductions / total_income
    if ratio <= HIGH_DEDUCTION_RATIO:
        return None

    percent = (ratio * 100).quantize(Decimal("1"), rounding=ROUND_HALF_UP)
    return TaxSuggestion(
        type=SuggestionType.WARNING,
        priority=SuggestionPriority.HIGH,
        title="High Deduction Ratio",
        description=(
            f"Your deductions ({percent}% of income) are higher than typical. Please ensure "
            f"you have documentation to support all claimed deductions."
        ),
        affected_fields=["deductions"],
    )


def check_medical_expense_threshold(data: SuggestionInput) -> Optional[TaxSuggestion]:
    income = data.income.t4_total + data.income.t4a_total + data.income.self_employment_income
    threshold = min(income * MEDICAL_INCOME_THRESHOLD_RATE, MEDICAL_THRESHOLD_CAP)
    medical = data.deductions.medical_total
    if not ZERO < medical < threshold:
        return None
    return TaxSuggestion(
        type=SuggestionType.INFO,
        priority=SuggestionPriority.LOW,
        title="Medical Expense Threshold",
        description=(
            f"Your medical expenses ({format_amount(medical)}) are below the claim threshold "
            f"({format_amount(threshold)}). You won't receive a credit unless your total "
            f"exceeds this amount."
        ),
        affected_fields=["deductions.medicalExpenses"],
    )


def check_donation_credit(data: SuggestionInput) -> Optional[TaxSuggestion]:
    if not ZERO < data.deductions.donations_total < DONATION_LOW_TIER_LIMIT:
        return None
    return TaxSuggestion(
        type=SuggestionType.OPTIMIZATION,
        priority=SuggestionPriority.LOW,
        title="Donation Credit Tip",
        description=(
            "Donations over $200 receive a higher tax credit (29% vs 15%). Consider combining "
            "this year's donations with next year's for a better credit."
        ),
        affected_fields=["deductions.charitableDonations"],
    )


def check_professional_dues(data: SuggestionInput) -> Optional[TaxSuggestion]:
    if (
        data.income.t4_total <= PROFESSIONAL_DUES_INCOME_THRESHOLD
        or data.deductions.professional_dues != 0
    ):
        return None
    return TaxSuggestion(
        type=SuggestionType.INFO,
        priority=SuggestionPriority.LOW,
        title="Professional Dues",
        description=(
            "If you pay membership fees to a professional association required for your "
            "work (e.g., CPA, P.Eng), these may be deductible."
        ),
        affected_fields=["deductions.professionalDues"],
        action_label="Add Dues",
        action_route=DEDUCTIONS_ROUTE,
    )


def check_student_loan_interest(data: SuggestionInput) -> Optional[TaxSuggestion]:
    """Reminder only; student loans are not detectable from slips."""
    deductions = data.deductions
    low_deductions = (
        deductions.rrsp_total + deductions.donations_total + deductions.student_loan_interest
    )
    if (
        data.income.t4_total <= STUDENT_LOAN_INCOME_THRESHOLD
        or low_deductions >= STUDENT_LOAN_LOW_DEDUCTIONS
        or deductions.student_loan_interest != 0
    ):
        return None
    return TaxSuggestion(
        type=SuggestionType.INFO,
        priority=SuggestionPriority.LOW,
        title="Student Loan Interest",
        description=(
            "Interest paid on qualifying student loans is eligible for a 15% federal tax "
            "credit. Don't forget to claim it if applicable."
        ),
        affected_fields=["deductions.studentLoanInterest"],
    )


RULES: tuple[SuggestionRule, ...] = (
    check_province_set,
    check_rrsp_opportunity,
    check_home_office_opportunity,
    check_high_deduction_ratio,
    check_medical_expense_threshold,
    check_donation_credit,
    check_professional_dues,
    check_student_loan_interest,
)


def get_static_suggestions(
    data: Union[SuggestionInput, Filing],
    rules: tuple[SuggestionRule, ...] = RULES,
) -> list[TaxSuggestion]:
    """
    Run every rule and return the suggestions, highest priority first.

    Args:
        data: Aggregated totals, or a filing to aggregate first
        rules: Rules to run, in order

    Returns:
        Suggestions sorted by priority, stable within a tier
    """
    if isinstance(data, Filing):
        data = build_suggestion_input(data)

    suggestions = []
    for rule in rules:
        suggestion = rule(data)
        if suggestion is not None:
            suggestions.append(suggestion)

    logger.debug("static_suggestions_evaluated", rules=len(rules), suggestions=len(suggestions))
    return sort_by_priority(suggestions)


__all__ = [
    "SuggestionRule",
    "RULES",
    "check_province_set",
    "check_rrsp_opportunity",
    "check_home_office_opportunity",
    "check_high_deduction_ratio",
    "check_medical_expense_threshold",
    "check_donation_credit",
    "check_professional_dues",
    "check_student_loan_interest",
    "get_static_suggestions",
]
