"""NETFILE partner wire models.

The submission request is a flattened view of a filing: per-category totals,
not per-slip detail. Field names serialize in the partner's camelCase
(``model_dump(by_alias=True)``); Python code uses snake_case.
"""

from datetime import date, datetime, timezone
from decimal import Decimal
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

ZERO = Decimal("0")


def _utc_now() -> datetime:
    """Return current UTC datetime with timezone info."""
    return datetime.now(timezone.utc)


class WireModel(BaseModel):
    """Base for partner wire models: camelCase on the wire, snake_case in Python."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# =============================================================================
# ENUMERATIONS
# =============================================================================

class SubmissionStatus(str, Enum):
    """Status of a submission as reported by the filing partner."""

    PENDING = "pending"
    """Received, not yet forwarded to the CRA."""

    SUBMITTED = "submitted"
    """Forwarded to the CRA, awaiting acceptance."""

    ACCEPTED = "accepted"
    """Accepted by the CRA."""

    REJECTED = "rejected"
    """Rejected by partner or CRA validation."""

    ERROR = "error"
    """Unknown submission or transport failure."""


# =============================================================================
# REQUEST
# =============================================================================

class SubmissionPersonalInfo(WireModel):
    sin: str = ""
    first_name: str = ""
    last_name: str = ""
    date_of_birth: Optional[date] = None
    email: str = ""
    province: Optional[str] = None
    postal_code: str = ""


class SubmissionIncome(WireModel):
    total_employment_income: Decimal = ZERO
    total_tax_withheld: Decimal = ZERO
    total_cpp_contributions: Decimal = Field(default=ZERO, alias="totalCPPContributions")
    total_ei_premiums: Decimal = Field(default=ZERO, alias="totalEIPremiums")
    investment_income: Decimal = ZERO
    self_employment_income: Decimal = ZERO
    other_income: Decimal = ZERO


class SubmissionDeductions(WireModel):
    rrsp_contributions: Decimal = ZERO
    union_dues: Decimal = ZERO
    childcare_expenses: Decimal = ZERO
    moving_expenses: Decimal = ZERO
    other_deductions: Decimal = ZERO


class SubmissionCredits(WireModel):
    basic_personal_amount: Decimal = ZERO
    charitable_donations: Decimal = ZERO
    medical_expenses: Decimal = ZERO
    tuition_fees: Decimal = ZERO
    student_loan_interest: Decimal = ZERO


class SubmissionCalculated(WireModel):
    total_income: Decimal = ZERO
    net_income: Decimal = ZERO
    taxable_income: Decimal = ZERO
    federal_tax: Decimal = ZERO
    provincial_tax: Decimal = ZERO
    total_tax: Decimal = ZERO
    total_credits: Decimal = ZERO
    refund_or_owing: Decimal = ZERO


class SubmissionRequest(WireModel):
    """Everything a NETFILE partner needs to file one return."""
    filing_id: str
    tax_year: int
    personal_info: SubmissionPersonalInfo = Field(default_factory=SubmissionPersonalInfo)
    income: SubmissionIncome = Field(default_factory=SubmissionIncome)
    deductions: SubmissionDeductions = Field(default_factory=SubmissionDeductions)
    credits: SubmissionCredits = Field(default_factory=SubmissionCredits)
    calculated: SubmissionCalculated = Field(default_factory=SubmissionCalculated)


# =============================================================================
# RESPONSES
# =============================================================================

class SubmissionErrorDetail(WireModel):
    code: str
    message: str
    field: Optional[str] = None


class SubmissionResponse(WireModel):
    """Result of a submission attempt.

    A rejection is a normal response with success=False and errors set.
    """
    success: bool
    confirmation_number: Optional[str] = None
    status: SubmissionStatus
    timestamp: datetime = Field(default_factory=_utc_now)
    errors: list[SubmissionErrorDetail] = Field(default_factory=list)
    warnings: list[str] = Field(default_factory=list)


class StatusResponse(WireModel):
    filing_id: str = ""
    confirmation_number: Optional[str] = None
    status: SubmissionStatus
    last_updated: datetime = Field(default_factory=_utc_now)
    cra_assessment_date: Optional[datetime] = None
    notice_of_assessment: Optional[str] = None


class ValidationOutcome(WireModel):
    valid: bool
    errors: list[str] = Field(default_factory=list)


# =============================================================================
# STORED SUBMISSIONS
# =============================================================================

class StoredSubmission(BaseModel):
    """A submission as kept by a SubmissionStore."""
    confirmation_number: str
    request: SubmissionRequest
    status: SubmissionStatus = SubmissionStatus.SUBMITTED
    submitted_at: datetime = Field(default_factory=_utc_now)
    updated_at: datetime = Field(default_factory=_utc_now)
