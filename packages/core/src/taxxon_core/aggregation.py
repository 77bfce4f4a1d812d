"""Single aggregation pass over a filing.

Every consumer of filing totals (the tax calculator, the static suggestion
rules and the partner submission transformer) reads them from
:class:`FilingTotals`, so the per-category formulas exist in one place.
"""

from decimal import Decimal
from typing import Iterable, Optional

from pydantic import BaseModel, ConfigDict, Field

from .models.filing import (
    Filing,
    HomeOfficeMethod,
    Province,
    T3Slip,
    T4ASlip,
    T5008Slip,
    T5Slip,
)
from .tax_tables import CAPITAL_GAINS_INCLUSION_RATE, HOME_OFFICE_DAILY_RATE

ZERO = Decimal("0")


def _sum(values: Iterable[Decimal]) -> Decimal:
    return sum(values, ZERO)


# =============================================================================
# PER-SLIP INCOME FORMULAS
# =============================================================================

def t4a_slip_income(slip: T4ASlip) -> Decimal:
    return slip.total_income


def t5_slip_income(slip: T5Slip) -> Decimal:
    """Dividends, interest and capital gains dividends."""
    return slip.actual_dividends + slip.interest_from_canadian_sources + slip.capital_gains_dividends


def t3_slip_income(slip: T3Slip) -> Decimal:
    """Trust income with capital gains at the inclusion rate."""
    return (
        slip.capital_gains * CAPITAL_GAINS_INCLUSION_RATE
        + slip.eligible_dividends
        + slip.other_dividends
        + slip.other_income
    )


def t5008_slip_income(slip: T5008Slip) -> Decimal:
    """Taxable gain on one disposition. Losses are floored per slip, not netted."""
    return max(ZERO, slip.proceeds - slip.cost_base) * CAPITAL_GAINS_INCLUSION_RATE


def home_office_deduction(days: int, method: Optional[HomeOfficeMethod]) -> Decimal:
    """Flat-rate method only; the detailed method is not computed."""
    if method != HomeOfficeMethod.FLAT_RATE:
        return ZERO
    return Decimal(days) * HOME_OFFICE_DAILY_RATE


# =============================================================================
# FILING TOTALS
# =============================================================================

class FilingTotals(BaseModel):
    """Aggregated amounts for one filing.

    Income totals are per slip family. Deductions reduce taxable income;
    donations, medical expenses, tuition and student-loan interest are
    credit bases and are not part of total_deductions.
    """
    model_config = ConfigDict(frozen=True)

    # Income
    t4_income: Decimal = ZERO
    t4a_income: Decimal = ZERO
    t4e_income: Decimal = ZERO
    t5_income: Decimal = ZERO
    t3_income: Decimal = ZERO
    t4rsp_income: Decimal = ZERO
    t5008_income: Decimal = ZERO
    self_employment_income: Decimal = ZERO
    other_income: Decimal = ZERO
    total_income: Decimal = ZERO

    # Deductions
    rrsp_contributions: Decimal = ZERO
    childcare_expenses: Decimal = ZERO
    home_office_deduction: Decimal = ZERO
    moving_expenses: Decimal = ZERO
    professional_dues: Decimal = ZERO
    total_deductions: Decimal = ZERO
    taxable_income: Decimal = ZERO

    # Credit bases
    donation_amounts: tuple[Decimal, ...] = Field(default_factory=tuple)
    donations: Decimal = ZERO
    medical_expenses: Decimal = ZERO
    tuition_fees: Decimal = ZERO
    student_loan_interest: Decimal = ZERO

    # Withholding
    t4_tax_withheld: Decimal = ZERO
    t4a_tax_withheld: Decimal = ZERO
    t4e_tax_withheld: Decimal = ZERO
    t4rsp_tax_withheld: Decimal = ZERO
    total_paid: Decimal = ZERO

    # Reported to the filing partner only
    cpp_contributions: Decimal = ZERO
    ei_premiums: Decimal = ZERO
    union_dues: Decimal = ZERO

    @property
    def investment_income(self) -> Decimal:
        """T5 plus T3 income, as reported to the filing partner."""
        return self.t5_income + self.t3_income


def aggregate_filing(filing: Filing) -> FilingTotals:
    """Compute every aggregate of a filing in one pass. Pure."""
    income = filing.income
    deductions = filing.deductions

    t4_income = _sum(s.employment_income for s in income.t4_slips)
    t4a_income = _sum(t4a_slip_income(s) for s in income.t4a_slips)
    t4e_income = _sum(s.ei_benefits for s in income.t4e_slips)
    t5_income = _sum(t5_slip_income(s) for s in income.t5_slips)
    t3_income = _sum(t3_slip_income(s) for s in income.t3_slips)
    t4rsp_income = _sum(s.rrsp_income for s in income.t4rsp_slips)
    t5008_income = _sum(t5008_slip_income(s) for s in income.t5008_slips)

    total_income = (
        t4_income + t4a_income + t4e_income + t5_income + t3_income
        + t4rsp_income + t5008_income
        + income.self_employment_income + income.other_income
    )

    rrsp = _sum(c.contribution_amount for c in deductions.rrsp_contributions)
    home_office = home_office_deduction(
        deductions.home_office_days, deductions.home_office_method
    )
    total_deductions = (
        rrsp
        + deductions.childcare_expenses
        + home_office
        + deductions.moving_expenses
        + deductions.professional_dues
    )

    donation_amounts = tuple(d.donation_amount for d in deductions.charitable_donations)

    t4_withheld = _sum(s.income_tax_deducted for s in income.t4_slips)
    t4a_withheld = _sum(s.income_tax_deducted for s in income.t4a_slips)
    t4e_withheld = _sum(s.income_tax_deducted for s in income.t4e_slips)
    t4rsp_withheld = _sum(s.income_tax_deducted for s in income.t4rsp_slips)

    return FilingTotals(
        t4_income=t4_income,
        t4a_income=t4a_income,
        t4e_income=t4e_income,
        t5_income=t5_income,
        t3_income=t3_income,
        t4rsp_income=t4rsp_income,
        t5008_income=t5008_income,
        self_employment_income=income.self_employment_income,
        other_income=income.other_income,
        total_income=total_income,
        rrsp_contributions=rrsp,
        childcare_expenses=deductions.childcare_expenses,
        home_office_deduction=home_office,
        moving_expenses=deductions.moving_expenses,
        professional_dues=deductions.professional_dues,
        total_deductions=total_deductions,
        taxable_income=max(ZERO, total_income - total_deductions),
        donation_amounts=donation_amounts,
        donations=_sum(donation_amounts),
        medical_expenses=_sum(e.amount for e in deductions.medical_expenses),
        tuition_fees=_sum(s.eligible_tuition_fees for s in income.t2202_slips),
        student_loan_interest=deductions.student_loan_interest,
        t4_tax_withheld=t4_withheld,
        t4a_tax_withheld=t4a_withheld,
        t4e_tax_withheld=t4e_withheld,
        t4rsp_tax_withheld=t4rsp_withheld,
        total_paid=t4_withheld + t4a_withheld + t4e_withheld + t4rsp_withheld,
        cpp_contributions=_sum(s.cpp_contributions for s in income.t4_slips),
        ei_premiums=_sum(s.ei_premiums for s in income.t4_slips),
        union_dues=_sum(s.union_dues for s in income.t4_slips),
    )


# =============================================================================
# SUGGESTION INPUT
# =============================================================================

class IncomeTotals(BaseModel):
    model_config = ConfigDict(frozen=True)

    t4_total: Decimal = ZERO
    t4a_total: Decimal = ZERO
    t4e_total: Decimal = ZERO
    t5_total: Decimal = ZERO
    t3_total: Decimal = ZERO
    self_employment_income: Decimal = ZERO
    other_income: Decimal = ZERO


class DeductionTotals(BaseModel):
    model_config = ConfigDict(frozen=True)

    rrsp_total: Decimal = ZERO
    donations_total: Decimal = ZERO
    medical_total: Decimal = ZERO
    childcare_expenses: Decimal = ZERO
    home_office_days: int = 0
    home_office_method: Optional[HomeOfficeMethod] = None
    moving_expenses: Decimal = ZERO
    student_loan_interest: Decimal = ZERO
    professional_dues: Decimal = ZERO


class SuggestionInput(BaseModel):
    """Aggregate view of a filing with personal identifiers removed.

    Carries no SIN, name, address, phone or e-mail.
    """
    model_config = ConfigDict(frozen=True)

    income: IncomeTotals = Field(default_factory=IncomeTotals)
    deductions: DeductionTotals = Field(default_factory=DeductionTotals)
    province: Optional[Province] = None
    has_spouse: bool = False
    has_dependents: bool = False  # dependents are not collected


def build_suggestion_input(
    filing: Filing,
    totals: Optional[FilingTotals] = None,
) -> SuggestionInput:
    """Reduce a filing to the aggregates the static suggestion rules read."""
    totals = totals or aggregate_filing(filing)
    deductions = filing.deductions
    return SuggestionInput(
        income=IncomeTotals(
            t4_total=totals.t4_income,
            t4a_total=totals.t4a_income,
            t4e_total=totals.t4e_income,
            t5_total=totals.t5_income,
            t3_total=totals.t3_income,
            self_employment_income=totals.self_employment_income,
            other_income=totals.other_income,
        ),
        deductions=DeductionTotals(
            rrsp_total=totals.rrsp_contributions,
            donations_total=totals.donations,
            medical_total=totals.medical_expenses,
            childcare_expenses=totals.childcare_expenses,
            home_office_days=deductions.home_office_days,
            home_office_method=deductions.home_office_method,
            moving_expenses=totals.moving_expenses,
            student_loan_interest=totals.student_loan_interest,
            professional_dues=totals.professional_dues,
        ),
        province=filing.personal_info.province,
        has_spouse=filing.personal_info.has_spouse,
    )


__all__ = [
    "FilingTotals",
    "aggregate_filing",
    "home_office_deduction",
    "IncomeTotals",
    "DeductionTotals",
    "SuggestionInput",
    "build_suggestion_input",
]
