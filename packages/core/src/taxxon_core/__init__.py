"""Taxxon Core - Canadian personal tax calculation and document cross-validation."""

__version__ = "0.1.0"

from .aggregation import FilingTotals, SuggestionInput, aggregate_filing, build_suggestion_input
from .calculator import (
    CalculationResult,
    DonationCreditMethod,
    TaxCalculator,
    calculate_summary,
)
from .cross_check import CrossValidator, cross_check_document, validate_all_documents
from .models import ExtractedDocument, Filing, TaxSummary, TaxSuggestion
from .suggestions import get_static_suggestions

__all__ = [
    "Filing",
    "TaxSummary",
    "TaxSuggestion",
    "ExtractedDocument",
    "FilingTotals",
    "SuggestionInput",
    "aggregate_filing",
    "build_suggestion_input",
    "DonationCreditMethod",
    "CalculationResult",
    "TaxCalculator",
    "calculate_summary",
    "CrossValidator",
    "cross_check_document",
    "validate_all_documents",
    "get_static_suggestions",
]
