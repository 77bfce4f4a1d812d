"""Filing data model for a Canadian personal income tax return.

A Filing is the aggregate root: one per tax year per user. It owns the
personal information, every income slip, every deduction record and the
uploaded-document list. Slips and deduction records are identified by a
generated id and live in ordered lists owned by their filing.

Slip names follow the CRA information slips they represent:
    T4      Statement of Remuneration Paid (employment)
    T4A     Pension, retirement, annuity and other income
    T4E     Employment insurance and other benefits
    T5      Investment income
    T3      Trust income allocations
    T2202   Tuition and enrolment certificate
    T4RSP   RRSP income
    T5008   Securities transactions
"""

from datetime import date, datetime, timezone
from decimal import Decimal
from enum import Enum
from typing import Any, Optional, Union
from uuid import uuid4

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    computed_field,
    field_validator,
    model_validator,
)
from pydantic import ValidationError as PydanticValidationError

from ..exceptions import FilingStateError, RecordNotFoundError, ValidationError
from ..matching import to_decimal
from .documents import DocumentType


def _utc_now() -> datetime:
    """Return current UTC datetime with timezone info."""
    return datetime.now(timezone.utc)


def _new_id() -> str:
    return str(uuid4())


ZERO = Decimal("0")


# =============================================================================
# ENUMERATIONS
# =============================================================================

class Province(str, Enum):
    """Canadian provinces and territories."""
    AB = "AB"
    BC = "BC"
    MB = "MB"
    NB = "NB"
    NL = "NL"
    NS = "NS"
    NT = "NT"
    NU = "NU"
    ON = "ON"
    PE = "PE"
    QC = "QC"
    SK = "SK"
    YT = "YT"

    @property
    def display_name(self) -> str:
        return PROVINCE_NAMES[self]


PROVINCE_NAMES: dict[Province, str] = {
    Province.AB: "Alberta",
    Province.BC: "British Columbia",
    Province.MB: "Manitoba",
    Province.NB: "New Brunswick",
    Province.NL: "Newfoundland and Labrador",
    Province.NS: "Nova Scotia",
    Province.NT: "Northwest Territories",
    Province.NU: "Nunavut",
    Province.ON: "Ontario",
    Province.PE: "Prince Edward Island",
    Province.QC: "Quebec",
    Province.SK: "Saskatchewan",
    Province.YT: "Yukon",
}


class MaritalStatus(str, Enum):
    """Marital status as of December 31 of the tax year."""
    SINGLE = "single"
    MARRIED = "married"
    COMMON_LAW = "common-law"
    SEPARATED = "separated"
    DIVORCED = "divorced"
    WIDOWED = "widowed"


class FilingStatus(str, Enum):
    """Lifecycle status of a filing."""
    NOT_STARTED = "not-started"
    IN_PROGRESS = "in-progress"
    SUBMITTED = "submitted"
    ACCEPTED = "accepted"


class ContributorType(str, Enum):
    """Who the RRSP contribution was made to."""
    SELF = "self"
    SPOUSAL = "spousal"


class DonationType(str, Enum):
    CASH = "cash"
    PROPERTY = "property"
    ECOGIFT = "ecogift"


class Beneficiary(str, Enum):
    """Who a medical expense was paid for."""
    SELF = "self"
    SPOUSE = "spouse"
    DEPENDENT = "dependent"


class HomeOfficeMethod(str, Enum):
    """Home office expense claim method."""
    FLAT_RATE = "flat-rate"  # $2/day, up to 250 days
    DETAILED = "detailed"  # T2200 detailed method


def _blank_to_none(v: Any) -> Any:
    """Form inputs use '' for unset selections."""
    if isinstance(v, str) and not v.strip():
        return None
    return v


# =============================================================================
# PERSONAL INFORMATION
# =============================================================================

class Address(BaseModel):
    """Mailing address."""
    model_config = ConfigDict(validate_assignment=True)

    street: str = ""
    city: str = ""
    province: Optional[Province] = None
    postal_code: str = ""

    @field_validator("province", mode="before")
    @classmethod
    def normalize_province(cls, v):
        v = _blank_to_none(v)
        return v.strip().upper() if isinstance(v, str) else v


class PersonalInfo(BaseModel):
    """Identity and residency section of the return."""
    model_config = ConfigDict(validate_assignment=True)

    first_name: str = ""
    last_name: str = ""
    sin: str = ""  # Social Insurance Number, XXX-XXX-XXX
    date_of_birth: Optional[date] = None
    email: str = ""
    phone: str = ""
    province: Optional[Province] = None  # Province of residence on December 31
    marital_status: Optional[MaritalStatus] = None
    address: Address = Field(default_factory=Address)

    @field_validator("province", mode="before")
    @classmethod
    def normalize_province(cls, v):
        v = _blank_to_none(v)
        return v.strip().upper() if isinstance(v, str) else v

    @field_validator("marital_status", "date_of_birth", mode="before")
    @classmethod
    def blank_is_unset(cls, v):
        return _blank_to_none(v)

    @property
    def has_spouse(self) -> bool:
        return self.marital_status in (MaritalStatus.MARRIED, MaritalStatus.COMMON_LAW)

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()


# =============================================================================
# RECORD BASE
# =============================================================================

class FilingRecord(BaseModel):
    """Base for every slip and deduction record owned by a filing.

    Records are edited in place and every assignment is validated.
    Money fields accept int, float, str or Decimal and are stored as Decimal.
    """
    model_config = ConfigDict(validate_assignment=True)

    id: str = Field(default_factory=_new_id)

    @field_validator("*", mode="before")
    @classmethod
    def coerce_money(cls, v, info):
        field = cls.model_fields.get(info.field_name)
        if field is not None and field.annotation is Decimal and isinstance(v, float):
            return to_decimal(v)
        return v


def _money(description: Optional[str] = None) -> Any:
    return Field(default=ZERO, ge=0, description=description)


# =============================================================================
# INCOME SLIPS
# =============================================================================

class T4Slip(FilingRecord):
    """T4 - Statement of Remuneration Paid."""
    employer_name: str = ""
    employer_address: str = ""
    employment_income: Decimal = _money("Box 14")
    income_tax_deducted: Decimal = _money("Box 22")
    cpp_contributions: Decimal = _money("Box 16")
    ei_premiums: Decimal = _money("Box 18")
    rpp_contributions: Decimal = _money("Box 20")
    union_dues: Decimal = _money("Box 44")
    charitable_donations: Decimal = _money("Box 46")


class T4ASlip(FilingRecord):
    """T4A - Pension, retirement, annuity and other income."""
    payer_name: str = ""
    pension_income: Decimal = _money("Box 016")
    lump_sum_payments: Decimal = _money("Box 018")
    self_employed_commissions: Decimal = _money("Box 020")
    income_tax_deducted: Decimal = _money("Box 022")
    other_income: Decimal = _money("Box 028")

    @property
    def total_income(self) -> Decimal:
        return (
            self.pension_income + self.lump_sum_payments
            + self.self_employed_commissions + self.other_income
        )


class T4ESlip(FilingRecord):
    """T4E - Employment insurance and other benefits."""
    ei_benefits: Decimal = _money("Box 14")
    income_tax_deducted: Decimal = _money("Box 22")
    amount_repaid: Decimal = _money("Box 30")


class T5Slip(FilingRecord):
    """T5 - Statement of Investment Income."""
    payer_name: str = ""
    actual_dividends: Decimal = _money("Box 10")
    interest_from_canadian_sources: Decimal = _money("Box 13")
    capital_gains_dividends: Decimal = _money("Box 18")
    foreign_income: Decimal = _money("Box 15")
    foreign_tax_paid: Decimal = _money("Box 16")

    @property
    def dividends_and_interest(self) -> Decimal:
        return self.actual_dividends + self.interest_from_canadian_sources


class T3Slip(FilingRecord):
    """T3 - Statement of Trust Income Allocations and Designations."""
    trust_name: str = ""
    capital_gains: Decimal = _money("Box 21")
    eligible_dividends: Decimal = _money("Box 23")
    other_dividends: Decimal = _money("Box 32")
    foreign_business_income: Decimal = _money("Box 24")
    foreign_non_business_income: Decimal = _money("Box 25")
    other_income: Decimal = _money("Box 26")


class T2202Slip(FilingRecord):
    """T2202 - Tuition and Enrolment Certificate."""
    institution_name: str = ""
    eligible_tuition_fees: Decimal = _money("Box A")
    months_part_time: int = Field(default=0, ge=0, le=12)
    months_full_time: int = Field(default=0, ge=0, le=12)


class T4RSPSlip(FilingRecord):
    """T4RSP - Statement of RRSP Income."""
    payer_name: str = ""
    rrsp_income: Decimal = _money("Box 16 or 22")
    income_tax_deducted: Decimal = _money("Box 30")


class T5008Slip(FilingRecord):
    """T5008 - Statement of Securities Transactions."""
    security_description: str = ""
    proceeds: Decimal = _money("Box 21")
    cost_base: Decimal = _money("Box 20")

    @computed_field
    @property
    def gain(self) -> Decimal:
        """Realized gain; negative for a loss."""
        return self.proceeds - self.cost_base


# =============================================================================
# DEDUCTION RECORDS
# =============================================================================

class RRSPContribution(FilingRecord):
    institution_name: str = ""
    contribution_amount: Decimal = _money()
    contributor_type: ContributorType = ContributorType.SELF


class CharitableDonation(FilingRecord):
    charity_name: str = ""
    registration_number: str = ""
    donation_amount: Decimal = _money()
    donation_type: DonationType = DonationType.CASH


class MedicalExpense(FilingRecord):
    description: str = ""
    amount: Decimal = _money()
    for_whom: Beneficiary = Beneficiary.SELF


IncomeSlip = Union[
    T4Slip, T4ASlip, T4ESlip, T5Slip, T3Slip, T2202Slip, T4RSPSlip, T5008Slip
]
DeductionRecord = Union[RRSPContribution, CharitableDonation, MedicalExpense]


# =============================================================================
# SECTIONS
# =============================================================================

class IncomeData(BaseModel):
    """Income section: slip lists plus flat amounts."""
    model_config = ConfigDict(validate_assignment=True)

    t4_slips: list[T4Slip] = Field(default_factory=list)
    t4a_slips: list[T4ASlip] = Field(default_factory=list)
    t4e_slips: list[T4ESlip] = Field(default_factory=list)
    t5_slips: list[T5Slip] = Field(default_factory=list)
    t3_slips: list[T3Slip] = Field(default_factory=list)
    t2202_slips: list[T2202Slip] = Field(default_factory=list)
    t4rsp_slips: list[T4RSPSlip] = Field(default_factory=list)
    t5008_slips: list[T5008Slip] = Field(default_factory=list)
    self_employment_income: Decimal = ZERO
    other_income: Decimal = ZERO

    @field_validator("self_employment_income", "other_income", mode="before")
    @classmethod
    def coerce_money(cls, v):
        return to_decimal(v) if isinstance(v, float) else v


class Deductions(BaseModel):
    """Deductions and credits section."""
    model_config = ConfigDict(validate_assignment=True)

    rrsp_contributions: list[RRSPContribution] = Field(default_factory=list)
    charitable_donations: list[CharitableDonation] = Field(default_factory=list)
    medical_expenses: list[MedicalExpense] = Field(default_factory=list)
    childcare_expenses: Decimal = _money()
    home_office_days: int = Field(default=0, ge=0, le=365)
    home_office_method: Optional[HomeOfficeMethod] = None
    moving_expenses: Decimal = _money()
    student_loan_interest: Decimal = _money()
    professional_dues: Decimal = _money()

    @field_validator(
        "childcare_expenses",
        "moving_expenses",
        "student_loan_interest",
        "professional_dues",
        mode="before",
    )
    @classmethod
    def coerce_money(cls, v):
        return to_decimal(v) if isinstance(v, float) else v

    @field_validator("home_office_method", mode="before")
    @classmethod
    def blank_is_unset(cls, v):
        return _blank_to_none(v)


class TaxDocument(BaseModel):
    """Metadata for an uploaded supporting document."""
    id: str = Field(default_factory=_new_id)
    name: str
    type: DocumentType = DocumentType.OTHER
    size: int = Field(default=0, ge=0)
    mime_type: str = "application/octet-stream"
    uploaded_at: datetime = Field(default_factory=_utc_now)


# =============================================================================
# TAX SUMMARY
# =============================================================================

class TaxSummary(BaseModel):
    """Result of the tax calculation.

    total_tax = max(0, federal_tax + provincial_tax - total_credits)
    refund_or_owing = total_paid - total_tax (positive = refund)
    """
    model_config = ConfigDict(frozen=True)

    total_income: Decimal = ZERO
    total_deductions: Decimal = ZERO
    taxable_income: Decimal = ZERO
    federal_tax: Decimal = ZERO
    provincial_tax: Decimal = ZERO
    total_tax: Decimal = ZERO
    total_credits: Decimal = ZERO
    total_paid: Decimal = ZERO
    refund_or_owing: Decimal = ZERO

    @property
    def is_refund(self) -> bool:
        return self.refund_or_owing >= 0

    @property
    def net_income(self) -> Decimal:
        return self.total_income - self.total_deductions


# =============================================================================
# FILING (AGGREGATE ROOT)
# =============================================================================

# Record type -> (section attribute, list attribute)
_RECORD_LISTS: dict[type, tuple[str, str]] = {
    T4Slip: ("income", "t4_slips"),
    T4ASlip: ("income", "t4a_slips"),
    T4ESlip: ("income", "t4e_slips"),
    T5Slip: ("income", "t5_slips"),
    T3Slip: ("income", "t3_slips"),
    T2202Slip: ("income", "t2202_slips"),
    T4RSPSlip: ("income", "t4rsp_slips"),
    T5008Slip: ("income", "t5008_slips"),
    RRSPContribution: ("deductions", "rrsp_contributions"),
    CharitableDonation: ("deductions", "charitable_donations"),
    MedicalExpense: ("deductions", "medical_expenses"),
}

_SUBMITTED_STATES = (FilingStatus.SUBMITTED, FilingStatus.ACCEPTED)


def _apply_changes(target: BaseModel, changes: dict[str, Any]) -> None:
    """Validate a change set against the whole model, then assign it.

    Nothing is assigned unless every change is valid.

    Raises:
        ValidationError: For an unknown field or a value that fails validation.
    """
    model = type(target)
    for name in changes:
        if name == "id" or name not in model.model_fields:
            raise ValidationError(
                f"{model.__name__} has no editable field {name!r}",
                field=name,
            )

    current = {name: getattr(target, name) for name in model.model_fields}
    try:
        validated = model.model_validate({**current, **changes})
    except PydanticValidationError as exc:
        errors = exc.errors(include_url=False, include_context=False)
        first = errors[0]
        raise ValidationError(
            f"Invalid {model.__name__} update: {first['msg']}",
            field=".".join(str(part) for part in first["loc"]) or None,
            value=first.get("input"),
            details={"errors": errors},
        ) from exc

    for name in changes:
        setattr(target, name, getattr(validated, name))


class Filing(BaseModel):
    """A tax return for one user and one tax year.

    Created empty, edited through its lifecycle by each form section, and
    submitted exactly once. The summary and confirmation number are only
    populated by a successful submission.
    """
    model_config = ConfigDict(validate_assignment=True)

    id: str = Field(default_factory=_new_id)
    user_id: Optional[str] = None
    year: int = Field(ge=2000, le=2100)
    status: FilingStatus = FilingStatus.NOT_STARTED
    personal_info: PersonalInfo = Field(default_factory=PersonalInfo)
    income: IncomeData = Field(default_factory=IncomeData)
    deductions: Deductions = Field(default_factory=Deductions)
    documents: list[TaxDocument] = Field(default_factory=list)
    summary: Optional[TaxSummary] = None
    confirmation_number: Optional[str] = None
    submitted_at: Optional[datetime] = None
    created_at: datetime = Field(default_factory=_utc_now)
    updated_at: datetime = Field(default_factory=_utc_now)

    @model_validator(mode="after")
    def submission_fields_require_submission(self) -> "Filing":
        if self.status not in _SUBMITTED_STATES:
            if self.summary is not None or self.confirmation_number is not None:
                raise ValueError(
                    "summary and confirmation_number are only set on submitted filings"
                )
        return self

    @classmethod
    def new(cls, year: int, user_id: Optional[str] = None) -> "Filing":
        """Create an empty filing for a tax year."""
        return cls(year=year, user_id=user_id)

    @property
    def is_submitted(self) -> bool:
        return self.status in _SUBMITTED_STATES

    # -------------------------------------------------------------------------
    # Record lifecycle
    # -------------------------------------------------------------------------

    def _ensure_editable(self, operation: str) -> None:
        if self.is_submitted:
            raise FilingStateError(
                f"Filing {self.id} has been submitted and can no longer be changed",
                current_status=self.status.value,
                attempted=operation,
            )

    def _touch(self) -> None:
        if self.status == FilingStatus.NOT_STARTED:
            self.status = FilingStatus.IN_PROGRESS
        self.updated_at = _utc_now()

    def _list_for(self, record_type: type) -> list:
        try:
            section, attr = _RECORD_LISTS[record_type]
        except KeyError:
            raise ValidationError(
                f"{record_type.__name__} is not a filing record",
                field="record",
                value=record_type.__name__,
            ) from None
        return getattr(getattr(self, section), attr)

    def iter_records(self):
        """Yield every slip and deduction record in list order."""
        for record_type in _RECORD_LISTS:
            yield from self._list_for(record_type)

    def find_record(self, record_id: str) -> Optional[FilingRecord]:
        for record in self.iter_records():
            if record.id == record_id:
                return record
        return None

    def get_record(self, record_id: str) -> FilingRecord:
        record = self.find_record(record_id)
        if record is None:
            raise RecordNotFoundError(
                f"No record with id {record_id}",
                record_id=record_id,
                filing_id=self.id,
            )
        return record

    def add_record(self, record: FilingRecord) -> FilingRecord:
        """Append a slip or deduction record to its owning list."""
        self._ensure_editable("add_record")
        records = self._list_for(type(record))
        records.append(record)
        self._touch()
        return record

    def update_record(self, record_id: str, **changes: Any) -> FilingRecord:
        """Edit fields of an existing record in place, all or nothing."""
        self._ensure_editable("update_record")
        record = self.get_record(record_id)
        _apply_changes(record, changes)
        self._touch()
        return record

    def remove_record(self, record_id: str) -> FilingRecord:
        """Delete a record from its owning list."""
        self._ensure_editable("remove_record")
        record = self.get_record(record_id)
        self._list_for(type(record)).remove(record)
        self._touch()
        return record

    def update_personal_info(self, **changes: Any) -> PersonalInfo:
        self._ensure_editable("update_personal_info")
        _apply_changes(self.personal_info, changes)
        self._touch()
        return self.personal_info

    def update_income(self, **changes: Any) -> IncomeData:
        """Edit the flat income amounts (self-employment, other)."""
        self._ensure_editable("update_income")
        for name in changes:
            if name.endswith("_slips"):
                raise ValidationError(
                    "Slip lists are edited through add_record/remove_record",
                    field=name,
                )
        _apply_changes(self.income, changes)
        self._touch()
        return self.income

    def update_deductions(self, **changes: Any) -> Deductions:
        """Edit the scalar deduction fields."""
        self._ensure_editable("update_deductions")
        for name in changes:
            if name in ("rrsp_contributions", "charitable_donations", "medical_expenses"):
                raise ValidationError(
                    "Deduction records are edited through add_record/remove_record",
                    field=name,
                )
        _apply_changes(self.deductions, changes)
        self._touch()
        return self.deductions

    def add_document(self, document: TaxDocument) -> TaxDocument:
        self._ensure_editable("add_document")
        self.documents.append(document)
        self._touch()
        return document

    def remove_document(self, document_id: str) -> TaxDocument:
        self._ensure_editable("remove_document")
        for document in self.documents:
            if document.id == document_id:
                self.documents.remove(document)
                self._touch()
                return document
        raise RecordNotFoundError(
            f"No document with id {document_id}",
            record_id=document_id,
            filing_id=self.id,
        )

    # -------------------------------------------------------------------------
    # Submission lifecycle
    # -------------------------------------------------------------------------

    def mark_submitted(
        self,
        summary: TaxSummary,
        confirmation_number: str,
        submitted_at: Optional[datetime] = None,
    ) -> None:
        """Record a successful submission. Allowed exactly once."""
        if self.is_submitted:
            raise FilingStateError(
                f"Filing {self.id} was already submitted",
                current_status=self.status.value,
                attempted="mark_submitted",
            )
        if not confirmation_number:
            raise ValidationError(
                "A confirmation number is required to mark a filing submitted",
                field="confirmation_number",
            )
        self.status = FilingStatus.SUBMITTED
        self.summary = summary
        self.confirmation_number = confirmation_number
        self.submitted_at = submitted_at or _utc_now()
        self.updated_at = self.submitted_at

    def mark_accepted(self) -> None:
        """Record partner acceptance of a submitted filing."""
        if self.status != FilingStatus.SUBMITTED:
            raise FilingStateError(
                f"Only submitted filings can be accepted (filing {self.id})",
                current_status=self.status.value,
                attempted="mark_accepted",
            )
        self.status = FilingStatus.ACCEPTED
        self.updated_at = _utc_now()
