"""Extracted document models.

The document-extraction collaborator returns a document type tag and a flat
field-name to value mapping. Before that data reaches cross-validation it is
validated here: every document type has an explicit field model, unknown
keys are dropped and numeric fields are parsed with the soft-fail policy of
:func:`taxxon_core.matching.parse_amount` (unparseable means zero).

Field names arrive in camelCase from the extractor (``employerName``);
snake_case is accepted as well.
"""

from decimal import Decimal
from enum import Enum
from typing import Any, Optional

import structlog
from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    SerializeAsAny,
    field_validator,
    model_validator,
)
from pydantic.alias_generators import to_camel

from ..exceptions import ValidationError
from ..matching import ZERO, parse_amount

logger = structlog.get_logger()


class DocumentType(str, Enum):
    """Tax documents a user can upload."""
    T4 = "t4"
    T4A = "t4a"
    T4E = "t4e"
    T5 = "t5"
    T3 = "t3"
    T2202 = "t2202"
    T4RSP = "t4rsp"
    T5008 = "t5008"
    RRSP_RECEIPT = "rrsp-receipt"
    DONATION_RECEIPT = "donation-receipt"
    MEDICAL_RECEIPT = "medical-receipt"
    OTHER = "other"

    @property
    def label(self) -> str:
        return DOCUMENT_TYPE_LABELS[self]


DOCUMENT_TYPE_LABELS: dict[DocumentType, str] = {
    DocumentType.T4: "T4 - Employment Income",
    DocumentType.T4A: "T4A - Pension/Other Income",
    DocumentType.T4E: "T4E - EI Benefits",
    DocumentType.T5: "T5 - Investment Income",
    DocumentType.T3: "T3 - Trust Income",
    DocumentType.T2202: "T2202 - Tuition",
    DocumentType.T4RSP: "T4RSP - RRSP Income",
    DocumentType.T5008: "T5008 - Securities",
    DocumentType.RRSP_RECEIPT: "RRSP Contribution Receipt",
    DocumentType.DONATION_RECEIPT: "Charitable Donation Receipt",
    DocumentType.MEDICAL_RECEIPT: "Medical Expense Receipt",
    DocumentType.OTHER: "Other Document",
}


# =============================================================================
# FIELD SETS
# =============================================================================

class ExtractedFields(BaseModel):
    """Base for the per-document-type field sets.

    Decimal fields default to zero, meaning "not present on the document".
    """
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
        frozen=True,
    )

    @field_validator("*", mode="before")
    @classmethod
    def coerce_values(cls, v, info):
        field = cls.model_fields.get(info.field_name)
        if field is None:
            return v
        if field.annotation is Decimal:
            return parse_amount(v)
        if field.annotation is int:
            return int(parse_amount(v))
        if field.annotation is str:
            return "" if v is None else str(v).strip()
        return v

    @classmethod
    def known_keys(cls) -> set[str]:
        """Every accepted key, snake_case and camelCase."""
        keys = set()
        for name, field in cls.model_fields.items():
            keys.add(name)
            if field.alias:
                keys.add(field.alias)
        return keys


class T4Fields(ExtractedFields):
    employer_name: str = ""
    employment_income: Decimal = ZERO
    income_tax_deducted: Decimal = ZERO
    cpp_contributions: Decimal = ZERO
    ei_premiums: Decimal = ZERO
    rpp_contributions: Decimal = ZERO
    union_dues: Decimal = ZERO
    charitable_donations: Decimal = ZERO


class T4AFields(ExtractedFields):
    payer_name: str = ""
    pension_income: Decimal = ZERO
    lump_sum_payments: Decimal = ZERO
    self_employed_commissions: Decimal = ZERO
    income_tax_deducted: Decimal = ZERO
    other_income: Decimal = ZERO


class T4EFields(ExtractedFields):
    ei_benefits: Decimal = ZERO
    income_tax_deducted: Decimal = ZERO
    amount_repaid: Decimal = ZERO


class T5Fields(ExtractedFields):
    payer_name: str = ""
    actual_dividends: Decimal = ZERO
    interest_from_canadian_sources: Decimal = ZERO
    capital_gains_dividends: Decimal = ZERO
    foreign_income: Decimal = ZERO
    foreign_tax_paid: Decimal = ZERO


class T3Fields(ExtractedFields):
    trust_name: str = ""
    capital_gains: Decimal = ZERO
    eligible_dividends: Decimal = ZERO
    other_dividends: Decimal = ZERO
    foreign_business_income: Decimal = ZERO
    foreign_non_business_income: Decimal = ZERO
    other_income: Decimal = ZERO


class T2202Fields(ExtractedFields):
    institution_name: str = ""
    eligible_tuition_fees: Decimal = ZERO
    months_part_time: int = 0
    months_full_time: int = 0


class T4RSPFields(ExtractedFields):
    payer_name: str = ""
    rrsp_income: Decimal = ZERO
    income_tax_deducted: Decimal = ZERO


class T5008Fields(ExtractedFields):
    security_description: str = ""
    proceeds: Decimal = ZERO
    cost_base: Decimal = ZERO


class RRSPReceiptFields(ExtractedFields):
    institution_name: str = ""
    contribution_amount: Decimal = ZERO
    contributor_type: str = ""


class DonationReceiptFields(ExtractedFields):
    charity_name: str = ""
    registration_number: str = ""
    donation_amount: Decimal = ZERO


class MedicalReceiptFields(ExtractedFields):
    description: str = ""
    amount: Decimal = ZERO


class OtherFields(ExtractedFields):
    """Unclassified documents carry no typed fields."""


FIELD_MODELS: dict[DocumentType, type[ExtractedFields]] = {
    DocumentType.T4: T4Fields,
    DocumentType.T4A: T4AFields,
    DocumentType.T4E: T4EFields,
    DocumentType.T5: T5Fields,
    DocumentType.T3: T3Fields,
    DocumentType.T2202: T2202Fields,
    DocumentType.T4RSP: T4RSPFields,
    DocumentType.T5008: T5008Fields,
    DocumentType.RRSP_RECEIPT: RRSPReceiptFields,
    DocumentType.DONATION_RECEIPT: DonationReceiptFields,
    DocumentType.MEDICAL_RECEIPT: MedicalReceiptFields,
    DocumentType.OTHER: OtherFields,
}


def expected_field_names(document_type: DocumentType) -> list[str]:
    """Field names the extractor should look for, in extractor (camelCase) form."""
    model = FIELD_MODELS[document_type]
    return [field.alias or name for name, field in model.model_fields.items()]


# =============================================================================
# EXTRACTED DOCUMENT
# =============================================================================

class ExtractedDocument(BaseModel):
    """One extracted document: type tag plus its typed field set."""
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        frozen=True,
    )

    document_type: DocumentType
    fields: SerializeAsAny[ExtractedFields] = Field(default_factory=OtherFields)
    document_name: Optional[str] = None

    @model_validator(mode="before")
    @classmethod
    def select_field_model(cls, data: Any) -> Any:
        """Validate the raw field mapping against the model for its type."""
        if not isinstance(data, dict):
            return data
        data = dict(data)
        raw_type = data.get("document_type", data.get("documentType"))
        try:
            document_type = DocumentType(raw_type)
        except ValueError:
            return data  # field validation reports the bad tag

        model = FIELD_MODELS[document_type]
        raw_fields = data.get("fields") or {}
        if isinstance(raw_fields, ExtractedFields):
            if not isinstance(raw_fields, model):
                raise ValueError(
                    f"{type(raw_fields).__name__} does not belong to {document_type.value}"
                )
            return data
        if isinstance(raw_fields, dict):
            unknown = sorted(set(raw_fields) - model.known_keys())
            if unknown:
                logger.debug(
                    "extracted_fields_dropped",
                    document_type=document_type.value,
                    fields=unknown,
                )
            data["fields"] = model.model_validate(raw_fields)
        return data

    def field_set(self, model: type[ExtractedFields]) -> ExtractedFields:
        """Return the fields, asserting they are of the expected model."""
        if not isinstance(self.fields, model):
            raise ValidationError(
                f"Document fields are {type(self.fields).__name__}, not {model.__name__}",
                field="fields",
                value=self.document_type.value,
            )
        return self.fields

    @classmethod
    def from_field_list(
        cls,
        document_type: DocumentType,
        fields: list[dict[str, Any]],
        document_name: Optional[str] = None,
    ) -> "ExtractedDocument":
        """Build from the extractor's list form: [{fieldName, value, confidence}, ...]."""
        mapping = {}
        for item in fields:
            name = item.get("fieldName", item.get("field_name"))
            if name:
                mapping[name] = item.get("value")
        return cls(document_type=document_type, fields=mapping, document_name=document_name)


def parse_extracted_document(payload: dict[str, Any]) -> ExtractedDocument:
    """Validate a raw extraction payload at the boundary.

    Raises:
        ValidationError: When the document type is missing or unknown.
    """
    raw_type = payload.get("document_type", payload.get("documentType"))
    if not isinstance(raw_type, str) or raw_type not in {t.value for t in DocumentType}:
        raise ValidationError(
            "Unknown document type",
            field="documentType",
            value=raw_type,
            constraint=f"Must be one of: {', '.join(t.value for t in DocumentType)}",
        )
    return ExtractedDocument.model_validate(payload)


__all__ = [
    "DocumentType",
    "DOCUMENT_TYPE_LABELS",
    "ExtractedFields",
    "T4Fields",
    "T4AFields",
    "T4EFields",
    "T5Fields",
    "T3Fields",
    "T2202Fields",
    "T4RSPFields",
    "T5008Fields",
    "RRSPReceiptFields",
    "DonationReceiptFields",
    "MedicalReceiptFields",
    "OtherFields",
    "FIELD_MODELS",
    "expected_field_names",
    "ExtractedDocument",
    "parse_extracted_document",
]
