"""Data models for taxxon-core.

This package provides:
- The filing aggregate, its slips and deduction records (filing.py)
- Extracted-document field sets validated at the boundary (documents.py)
- Advisory suggestions and cross-check results (suggestions.py)
"""

from taxxon_core.models.documents import (
    DOCUMENT_TYPE_LABELS,
    FIELD_MODELS,
    DocumentType,
    DonationReceiptFields,
    ExtractedDocument,
    ExtractedFields,
    MedicalReceiptFields,
    OtherFields,
    RRSPReceiptFields,
    T2202Fields,
    T3Fields,
    T4AFields,
    T4EFields,
    T4Fields,
    T4RSPFields,
    T5008Fields,
    T5Fields,
    expected_field_names,
    parse_extracted_document,
)
from taxxon_core.models.filing import (
    PROVINCE_NAMES,
    Address,
    Beneficiary,
    CharitableDonation,
    ContributorType,
    DeductionRecord,
    Deductions,
    DonationType,
    Filing,
    FilingRecord,
    FilingStatus,
    HomeOfficeMethod,
    IncomeData,
    IncomeSlip,
    MaritalStatus,
    MedicalExpense,
    PersonalInfo,
    Province,
    RRSPContribution,
    T2202Slip,
    T3Slip,
    T4ASlip,
    T4ESlip,
    T4RSPSlip,
    T4Slip,
    T5008Slip,
    T5Slip,
    TaxDocument,
    TaxSummary,
)
from taxxon_core.models.suggestions import (
    CrossCheckResult,
    SuggestionPriority,
    SuggestionType,
    TaxSuggestion,
    dedupe_by_title,
    sort_by_priority,
)

__all__ = [
    # Filing
    "Province",
    "PROVINCE_NAMES",
    "MaritalStatus",
    "FilingStatus",
    "ContributorType",
    "DonationType",
    "Beneficiary",
    "HomeOfficeMethod",
    "Address",
    "PersonalInfo",
    "FilingRecord",
    "T4Slip",
    "T4ASlip",
    "T4ESlip",
    "T5Slip",
    "T3Slip",
    "T2202Slip",
    "T4RSPSlip",
    "T5008Slip",
    "RRSPContribution",
    "CharitableDonation",
    "MedicalExpense",
    "IncomeSlip",
    "DeductionRecord",
    "IncomeData",
    "Deductions",
    "TaxDocument",
    "TaxSummary",
    "Filing",
    # Extracted documents
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
    # Suggestions
    "SuggestionType",
    "SuggestionPriority",
    "TaxSuggestion",
    "CrossCheckResult",
    "sort_by_priority",
    "dedupe_by_title",
]
