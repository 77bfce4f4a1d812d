"""Map a filing and its tax summary into a NETFILE submission request.

All totals come from taxxon_core.aggregation, the same pass the calculator
uses, so the request and the summary cannot disagree on an aggregate.
"""

from typing import Optional

from taxxon_core.aggregation import FilingTotals, aggregate_filing
from taxxon_core.models import Filing, TaxSummary
from taxxon_core.tax_tables import BASIC_PERSONAL_AMOUNT
from taxxon_core.validators import format_sin

from taxxon_netfile.interfaces.types import (
    SubmissionCalculated,
    SubmissionCredits,
    SubmissionDeductions,
    SubmissionIncome,
    SubmissionPersonalInfo,
    SubmissionRequest,
)


def transform_filing_to_submission_request(
    filing: Filing,
    summary: TaxSummary,
    totals: Optional[FilingTotals] = None,
) -> SubmissionRequest:
    """
    Build the partner request for a filing.

    Args:
        filing: Filing to submit
        summary: Tax summary calculated for the filing
        totals: Aggregates for the filing, when the caller already has them

    Returns:
        SubmissionRequest with per-category totals
    """
    totals = totals or aggregate_filing(filing)
    personal = filing.personal_info

    return SubmissionRequest(
        filing_id=filing.id,
        tax_year=filing.year,
        personal_info=SubmissionPersonalInfo(
            sin=format_sin(personal.sin),
            first_name=personal.first_name,
            last_name=personal.last_name,
            date_of_birth=personal.date_of_birth,
            email=personal.email,
            province=personal.province.value if personal.province else None,
            postal_code=personal.address.postal_code,
        ),
        income=SubmissionIncome(
            total_employment_income=totals.t4_income,
            total_tax_withheld=totals.total_paid,
            total_cpp_contributions=totals.cpp_contributions,
            total_ei_premiums=totals.ei_premiums,
            investment_income=totals.investment_income,
            self_employment_income=totals.self_employment_income,
            other_income=totals.other_income,
        ),
        deductions=SubmissionDeductions(
            rrsp_contributions=totals.rrsp_contributions,
            union_dues=totals.union_dues,
            childcare_expenses=totals.childcare_expenses,
            moving_expenses=totals.moving_expenses,
            other_deductions=totals.professional_dues,
        ),
        credits=SubmissionCredits(
            basic_personal_amount=BASIC_PERSONAL_AMOUNT,
            charitable_donations=totals.donations,
            medical_expenses=totals.medical_expenses,
            tuition_fees=totals.tuition_fees,
            student_loan_interest=totals.student_loan_interest,
        ),
        calculated=SubmissionCalculated(
            total_income=summary.total_income,
            net_income=summary.net_income,
            taxable_income=summary.taxable_income,
            federal_tax=summary.federal_tax,
            provincial_tax=summary.provincial_tax,
            total_tax=summary.total_tax,
            total_credits=summary.total_credits,
            refund_or_owing=summary.refund_or_owing,
        ),
    )
