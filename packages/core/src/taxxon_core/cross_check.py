"""Cross-validation of extracted documents against entered filing data.

An uploaded slip or receipt is run through an external extractor; the result
is compared here with what the user typed in. Each supported document type
has its own check:

- T4: score every entered T4 against the document, then report field
  mismatches on a confident match, or flag a possible duplicate or a new T4.
- T5: match on dividends plus interest, then report component mismatches.
- RRSP and donation receipts: flag amounts that are not yet claimed.

Other document types produce no suggestions. All checks are pure; the
only failure mode is a ``validation_error`` suggestion in the result.
"""

from collections.abc import Iterable, Mapping
from decimal import Decimal
from typing import Any, Callable, Optional, Union

import structlog

from .matching import ZERO, format_amount, names_match, values_match
from .models.documents import (
    DocumentType,
    DonationReceiptFields,
    ExtractedDocument,
    RRSPReceiptFields,
    T4Fields,
    T5Fields,
    parse_extracted_document,
)
from .models.filing import Filing, T4Slip
from .models.suggestions import (
    CrossCheckResult,
    SuggestionPriority,
    SuggestionType,
    TaxSuggestion,
    dedupe_by_title,
)
from .tax_tables import ASSUMED_MARGINAL_RATE

logger = structlog.get_logger()

# Score contributions for T4 matching
EMPLOYER_NAME_SCORE = 3
INCOME_MATCH_SCORE = 2
TAX_MATCH_SCORE = 2
CONFIDENT_MATCH_SCORE = 3

INCOME_ROUTE = "/file/income"
DEDUCTIONS_ROUTE = "/file/deductions"

DocumentInput = Union[ExtractedDocument, Mapping[str, Any]]


def _document_suffix(document_name: Optional[str]) -> str:
    return f" ({document_name})" if document_name else ""


def _bulleted(lines: list[str]) -> str:
    return "\n• " + "\n• ".join(lines)


def _mismatch_line(
    label: str,
    extracted: Decimal,
    entered: Decimal,
    show_difference: bool = False,
) -> str:
    line = (
        f"{label}: Document shows {format_amount(extracted)}, "
        f"you entered {format_amount(entered)}"
    )
    if show_difference:
        line += f" (difference: {format_amount(abs(extracted - entered))})"
    return line


def find_matching_t4(fields: T4Fields, slips: list[T4Slip]) -> tuple[Optional[T4Slip], int]:
    """Return the best-scoring entered T4 and its score.

    Ties keep the earliest slip; a slip must score above zero to be chosen.
    """
    best_slip = None
    best_score = 0

    for slip in slips:
        score = 0
        if names_match(fields.employer_name, slip.employer_name):
            score += EMPLOYER_NAME_SCORE
        if fields.employment_income > 0 and values_match(
            fields.employment_income, slip.employment_income
        ):
            score += INCOME_MATCH_SCORE
        if fields.income_tax_deducted > 0 and values_match(
            fields.income_tax_deducted, slip.income_tax_deducted
        ):
            score += TAX_MATCH_SCORE

        if score > best_score:
            best_score = score
            best_slip = slip

    return best_slip, best_score


class CrossValidator:
    """
    Compare extracted documents with a filing and produce suggestions.

    Stateless; one instance can serve any number of filings.
    """

    def __init__(self):
        self._checks: dict[
            DocumentType, Callable[[ExtractedDocument, Filing], list[TaxSuggestion]]
        ] = {
            DocumentType.T4: self._check_t4,
            DocumentType.T5: self._check_t5,
            DocumentType.RRSP_RECEIPT: self._check_rrsp_receipt,
            DocumentType.DONATION_RECEIPT: self._check_donation_receipt,
        }

    @property
    def supported_types(self) -> tuple[DocumentType, ...]:
        return tuple(self._checks)

    # -------------------------------------------------------------------------
    # Per-type checks
    # -------------------------------------------------------------------------

    def _check_t4(self, document: ExtractedDocument, filing: Filing) -> list[TaxSuggestion]:
        fields = document.field_set(T4Fields)
        slips = filing.income.t4_slips
        matched, score = find_matching_t4(fields, slips)

        logger.debug(
            "t4_match_scored",
            document=document.document_name,
            score=score,
            matched_slip=matched.id if matched else None,
        )

        income = fields.employment_income

        if matched is not None and score >= CONFIDENT_MATCH_SCORE:
            lines = []
            if income > 0 and not values_match(income, matched.employment_income):
                lines.append(_mismatch_line(
                    "Employment income", income, matched.employment_income, show_difference=True,
                ))
            tax = fields.income_tax_deducted
            if tax > 0 and not values_match(tax, matched.income_tax_deducted):
                lines.append(_mismatch_line(
                    "Tax deducted", tax, matched.income_tax_deducted, show_difference=True,
                ))
            cpp = fields.cpp_contributions
            if cpp > 0 and not values_match(cpp, matched.cpp_contributions):
                lines.append(_mismatch_line("CPP contributions", cpp, matched.cpp_contributions))
            ei = fields.ei_premiums
            if ei > 0 and not values_match(ei, matched.ei_premiums):
                lines.append(_mismatch_line("EI premiums", ei, matched.ei_premiums))

            if not lines:
                return []
            return [TaxSuggestion(
                type=SuggestionType.VALIDATION_ERROR,
                priority=SuggestionPriority.HIGH,
                title="T4 Data Mismatch Detected",
                description=(
                    f"The uploaded document{_document_suffix(document.document_name)} "
                    f"doesn't match your entered T4 for {matched.employer_name}:"
                    f"{_bulleted(lines)}"
                ),
                affected_fields=["income.t4Slips"],
                action_label="Review Income",
                action_route=INCOME_ROUTE,
            )]

        if income <= 0:
            return []

        duplicate = next(
            (slip for slip in slips if values_match(income, slip.employment_income)), None
        )
        if duplicate is not None:
            return [TaxSuggestion(
                type=SuggestionType.WARNING,
                priority=SuggestionPriority.MEDIUM,
                title="Possible Duplicate T4",
                description=(
                    f"This T4 shows {format_amount(income)} in employment income, which "
                    f"matches an existing T4 from {duplicate.employer_name}. Please verify "
                    f"this isn't a duplicate entry."
                ),
                affected_fields=["income.t4Slips"],
                action_label="Review T4s",
                action_route=INCOME_ROUTE,
            )]

        return [TaxSuggestion(
            type=SuggestionType.INFO,
            priority=SuggestionPriority.LOW,
            title="New T4 Detected",
            description=(
                f"This document contains a T4 with {format_amount(income)} in employment "
                f"income that doesn't match any existing entries. Consider adding it to "
                f"your return."
            ),
            affected_fields=["income.t4Slips"],
            action_label="Add T4",
            action_route=INCOME_ROUTE,
        )]

    def _check_t5(self, document: ExtractedDocument, filing: Filing) -> list[TaxSuggestion]:
        fields = document.field_set(T5Fields)
        dividends = fields.actual_dividends
        interest = fields.interest_from_canadian_sources
        total = dividends + interest
        if total == 0:
            return []

        matched = next(
            (
                slip for slip in filing.income.t5_slips
                if values_match(total, slip.dividends_and_interest)
            ),
            None,
        )
        if matched is None:
            return []

        lines = []
        if dividends > 0 and not values_match(dividends, matched.actual_dividends):
            lines.append(_mismatch_line("Dividends", dividends, matched.actual_dividends))
        if interest > 0 and not values_match(interest, matched.interest_from_canadian_sources):
            lines.append(_mismatch_line(
                "Interest", interest, matched.interest_from_canadian_sources,
            ))

        if not lines:
            return []
        return [TaxSuggestion(
            type=SuggestionType.VALIDATION_ERROR,
            priority=SuggestionPriority.HIGH,
            title="T5 Data Mismatch Detected",
            description=(
                f"The uploaded investment slip{_document_suffix(document.document_name)} "
                f"doesn't match your entered data:{_bulleted(lines)}"
            ),
            affected_fields=["income.t5Slips"],
            action_label="Review T5",
            action_route=INCOME_ROUTE,
        )]

    def _check_rrsp_receipt(
        self, document: ExtractedDocument, filing: Filing
    ) -> list[TaxSuggestion]:
        amount = document.field_set(RRSPReceiptFields).contribution_amount
        if amount <= 0:
            return []

        contributions = filing.deductions.rrsp_contributions
        if any(values_match(amount, c.contribution_amount) for c in contributions):
            return []

        total_entered = sum((c.contribution_amount for c in contributions), ZERO)
        impact = amount * ASSUMED_MARGINAL_RATE

        if total_entered > 0:
            return [TaxSuggestion(
                type=SuggestionType.INFO,
                priority=SuggestionPriority.MEDIUM,
                title="Additional RRSP Contribution Found",
                description=(
                    f"This receipt shows a {format_amount(amount)} RRSP contribution that "
                    f"may not be included in your current total of "
                    f"{format_amount(total_entered)}."
                ),
                affected_fields=["deductions.rrspContributions"],
                action_label="Review RRSPs",
                action_route=DEDUCTIONS_ROUTE,
                estimated_impact=impact,
            )]

        return [TaxSuggestion(
            type=SuggestionType.MISSING_DEDUCTION,
            priority=SuggestionPriority.HIGH,
            title="RRSP Contribution Not Claimed",
            description=(
                f"You uploaded an RRSP receipt for {format_amount(amount)} but haven't "
                f"entered any RRSP contributions. Don't miss this deduction!"
            ),
            affected_fields=["deductions.rrspContributions"],
            action_label="Add RRSP",
            action_route=DEDUCTIONS_ROUTE,
            estimated_impact=impact,
        )]

    def _check_donation_receipt(
        self, document: ExtractedDocument, filing: Filing
    ) -> list[TaxSuggestion]:
        amount = document.field_set(DonationReceiptFields).donation_amount
        if amount <= 0:
            return []

        donations = filing.deductions.charitable_donations
        if any(values_match(amount, d.donation_amount) for d in donations):
            return []
        # Unmatched receipts are only flagged when nothing has been claimed
        if sum((d.donation_amount for d in donations), ZERO) > 0:
            return []

        return [TaxSuggestion(
            type=SuggestionType.MISSING_DEDUCTION,
            priority=SuggestionPriority.HIGH,
            title="Donation Not Claimed",
            description=(
                f"You uploaded a donation receipt for {format_amount(amount)} but haven't "
                f"claimed any charitable donations."
            ),
            affected_fields=["deductions.charitableDonations"],
            action_label="Add Donation",
            action_route=DEDUCTIONS_ROUTE,
        )]

    # -------------------------------------------------------------------------
    # Public API
    # -------------------------------------------------------------------------

    def cross_check_document(self, document: DocumentInput, filing: Filing) -> CrossCheckResult:
        """
        Compare one extracted document with the filing.

        Args:
            document: ExtractedDocument, or a raw extraction payload that is
                validated first
            filing: Filing snapshot; not modified

        Returns:
            CrossCheckResult; is_valid is False when any validation_error
            suggestion is present
        """
        if not isinstance(document, ExtractedDocument):
            document = parse_extracted_document(dict(document))

        check = self._checks.get(document.document_type)
        discrepancies = check(document, filing) if check else []

        result = CrossCheckResult(
            is_valid=not any(s.is_validation_error for s in discrepancies),
            discrepancies=discrepancies,
        )
        logger.info(
            "document_cross_checked",
            document_type=document.document_type.value,
            document=document.document_name,
            suggestions=len(discrepancies),
            is_valid=result.is_valid,
        )
        return result

    def validate_all_documents(
        self,
        documents: Iterable[DocumentInput],
        filing: Filing,
    ) -> list[TaxSuggestion]:
        """
        Cross-check every document and merge the suggestions.

        Suggestions are deduplicated by title; the first occurrence wins.
        """
        suggestions: list[TaxSuggestion] = []
        for document in documents:
            suggestions.extend(self.cross_check_document(document, filing).discrepancies)
        return dedupe_by_title(suggestions)


_default_validator = CrossValidator()


def cross_check_document(document: DocumentInput, filing: Filing) -> CrossCheckResult:
    """Cross-check one extracted document with the default validator."""
    return _default_validator.cross_check_document(document, filing)


def validate_all_documents(
    documents: Iterable[DocumentInput],
    filing: Filing,
) -> list[TaxSuggestion]:
    """Cross-check a batch of extracted documents with the default validator."""
    return _default_validator.validate_all_documents(documents, filing)


__all__ = [
    "CrossValidator",
    "find_matching_t4",
    "cross_check_document",
    "validate_all_documents",
]
