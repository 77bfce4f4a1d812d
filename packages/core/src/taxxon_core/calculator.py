"""Tax calculation engine.

Turns a filing's income and deduction records into a TaxSummary:

    total income -> deductions -> taxable income
    -> federal and provincial bracket tax
    -> non-refundable credits
    -> total tax (floored at zero) -> refund or balance owing

The calculation is pure: it reads a filing snapshot, performs no I/O and
keeps no state between calls, so it is safe to run on every edit.
"""

from decimal import Decimal
from enum import Enum
from typing import Optional

import structlog
from pydantic import BaseModel, Field

from .aggregation import FilingTotals, aggregate_filing
from .models.filing import Filing, HomeOfficeMethod, TaxSummary
from .tax_tables import (
    BASIC_PERSONAL_AMOUNT,
    LOWEST_RATE,
    MEDICAL_INCOME_THRESHOLD_RATE,
    STUDENT_LOAN_CREDIT_RATE,
    TAX_TABLES_VERSION,
    TUITION_CREDIT_RATE,
    apply_brackets,
    donation_credit,
    get_federal_schedule,
    get_provincial_schedule,
)

logger = structlog.get_logger()

ZERO = Decimal("0")


class DonationCreditMethod(str, Enum):
    """Where the $200 low-rate donation tier is applied.

    PER_RECEIPT applies it to each donation record separately (the
    long-standing behaviour of this engine). ANNUAL_TOTAL applies it once to
    the year's combined donations, as the CRA defines the credit.
    """
    PER_RECEIPT = "per-receipt"
    ANNUAL_TOTAL = "annual-total"


class CalculationStep(BaseModel):
    """One audited step of a calculation."""
    step: str
    input_value: str
    output_value: str
    source: str
    notes: Optional[str] = None


class CalculationResult(BaseModel):
    """Summary plus the audit trail that produced it."""
    summary: TaxSummary
    totals: FilingTotals
    audit_log: list[CalculationStep] = Field(default_factory=list)
    warnings: list[str] = Field(default_factory=list)
    tax_tables_version: str = TAX_TABLES_VERSION


class TaxCalculator:
    """
    Calculate the tax summary for a filing.

    Each public call builds its own audit list, so one calculator can be
    shared between callers.
    """

    def __init__(
        self,
        donation_credit_method: DonationCreditMethod = DonationCreditMethod.PER_RECEIPT,
    ):
        """
        Args:
            donation_credit_method: How the two-tier donation credit is applied
        """
        self.donation_credit_method = donation_credit_method

    def _log_step(
        self,
        audit_log: Optional[list[CalculationStep]],
        step: str,
        input_value: str,
        output_value: str,
        source: str,
        notes: Optional[str] = None,
    ) -> None:
        """Add an entry to the audit log, when one is being kept."""
        if audit_log is None:
            return
        audit_log.append(
            CalculationStep(
                step=step,
                input_value=input_value,
                output_value=output_value,
                source=source,
                notes=notes,
            )
        )
        logger.info(
            "calculation_step",
            step=step,
            input=input_value,
            output=output_value,
            source=source,
        )

    def donation_credit(self, donation_amounts: tuple[Decimal, ...]) -> Decimal:
        """Donation credit under the configured method.

        Example:
            >>> TaxCalculator().donation_credit((Decimal("300"),))
            Decimal('59.00')
        """
        if self.donation_credit_method == DonationCreditMethod.ANNUAL_TOTAL:
            return donation_credit(sum(donation_amounts, ZERO))
        return sum((donation_credit(amount) for amount in donation_amounts), ZERO)

    def _compute(
        self,
        filing: Filing,
        audit_log: Optional[list[CalculationStep]] = None,
        warnings: Optional[list[str]] = None,
    ) -> tuple[TaxSummary, FilingTotals]:
        totals = aggregate_filing(filing)
        tables = f"Tax tables {TAX_TABLES_VERSION}"

        # Step 1: Income
        self._log_step(
            audit_log,
            step="total_income",
            input_value=(
                f"t4={totals.t4_income}, t4a={totals.t4a_income}, t4e={totals.t4e_income}, "
                f"t5={totals.t5_income}, t3={totals.t3_income}, t4rsp={totals.t4rsp_income}, "
                f"t5008={totals.t5008_income}, self_employment={totals.self_employment_income}, "
                f"other={totals.other_income}"
            ),
            output_value=str(totals.total_income),
            source="Sum of income slips",
        )

        # Step 2: Deductions and taxable income
        self._log_step(
            audit_log,
            step="total_deductions",
            input_value=(
                f"rrsp={totals.rrsp_contributions}, childcare={totals.childcare_expenses}, "
                f"home_office={totals.home_office_deduction}, moving={totals.moving_expenses}, "
                f"professional_dues={totals.professional_dues}"
            ),
            output_value=str(totals.total_deductions),
            source="Sum of deductions",
        )
        if (
            warnings is not None
            and filing.deductions.home_office_method == HomeOfficeMethod.DETAILED
            and filing.deductions.home_office_days > 0
        ):
            warnings.append(
                "Detailed home office method is not calculated; no home office deduction applied."
            )

        taxable_income = totals.taxable_income
        self._log_step(
            audit_log,
            step="taxable_income",
            input_value=f"{totals.total_income} - {totals.total_deductions}",
            output_value=str(taxable_income),
            source="max(0, income - deductions)",
        )

        # Step 3: Bracket tax
        federal_tax = apply_brackets(taxable_income, get_federal_schedule())
        self._log_step(
            audit_log,
            step="federal_tax",
            input_value=str(taxable_income),
            output_value=str(federal_tax),
            source=f"{tables} federal brackets",
        )

        province = filing.personal_info.province
        provincial_tax = apply_brackets(taxable_income, get_provincial_schedule(province))
        self._log_step(
            audit_log,
            step="provincial_tax",
            input_value=str(taxable_income),
            output_value=str(provincial_tax),
            source=f"{tables} Ontario brackets",
            notes=f"province={province.value if province else 'unset'}",
        )
        if warnings is not None and (province is None or province.value != "ON"):
            warnings.append(
                "Provincial tax uses the Ontario schedule for every province of residence."
            )

        # Step 4: Credits
        basic_personal = BASIC_PERSONAL_AMOUNT * LOWEST_RATE
        donations = self.donation_credit(totals.donation_amounts)
        medical_threshold = totals.total_income * MEDICAL_INCOME_THRESHOLD_RATE
        medical = max(ZERO, totals.medical_expenses - medical_threshold) * LOWEST_RATE
        tuition = totals.tuition_fees * TUITION_CREDIT_RATE
        student_loan = totals.student_loan_interest * STUDENT_LOAN_CREDIT_RATE
        total_credits = basic_personal + donations + medical + tuition + student_loan
        self._log_step(
            audit_log,
            step="total_credits",
            input_value=(
                f"basic_personal={basic_personal}, donations={donations}, medical={medical}, "
                f"tuition={tuition}, student_loan={student_loan}"
            ),
            output_value=str(total_credits),
            source=f"{tables} credit rates",
            notes=f"donation_method={self.donation_credit_method.value}",
        )

        # Step 5: Total tax and balance
        total_tax = max(ZERO, federal_tax + provincial_tax - total_credits)
        self._log_step(
            audit_log,
            step="total_tax",
            input_value=f"{federal_tax} + {provincial_tax} - {total_credits}",
            output_value=str(total_tax),
            source="max(0, federal + provincial - credits)",
        )

        refund_or_owing = totals.total_paid - total_tax
        self._log_step(
            audit_log,
            step="refund_or_owing",
            input_value=f"{totals.total_paid} - {total_tax}",
            output_value=str(refund_or_owing),
            source="Tax withheld on T4, T4A, T4E and T4RSP slips",
        )

        summary = TaxSummary(
            total_income=totals.total_income,
            total_deductions=totals.total_deductions,
            taxable_income=taxable_income,
            federal_tax=federal_tax,
            provincial_tax=provincial_tax,
            total_tax=total_tax,
            total_credits=total_credits,
            total_paid=totals.total_paid,
            refund_or_owing=refund_or_owing,
        )
        return summary, totals

    def calculate(self, filing: Filing) -> TaxSummary:
        """
        Calculate the tax summary for a filing.

        Args:
            filing: Filing snapshot; not modified

        Returns:
            TaxSummary satisfying total_tax = max(0, federal + provincial - credits)
            and refund_or_owing = total_paid - total_tax
        """
        summary, _ = self._compute(filing)
        return summary

    def calculate_with_audit(self, filing: Filing) -> CalculationResult:
        """
        Calculate the tax summary and record every step.

        Args:
            filing: Filing snapshot; not modified

        Returns:
            CalculationResult with the summary, the aggregates, the audit
            trail and any warnings about simplifications that applied
        """
        audit_log: list[CalculationStep] = []
        warnings: list[str] = []
        summary, totals = self._compute(filing, audit_log, warnings)
        return CalculationResult(
            summary=summary,
            totals=totals,
            audit_log=audit_log,
            warnings=warnings,
        )


_default_calculator = TaxCalculator()


def calculate_summary(filing: Filing) -> TaxSummary:
    """Calculate a filing's tax summary with the default calculator."""
    return _default_calculator.calculate(filing)


__all__ = [
    "DonationCreditMethod",
    "CalculationStep",
    "CalculationResult",
    "TaxCalculator",
    "calculate_summary",
]
