"""Tests for extracted document validation."""

from decimal import Decimal

import pytest
from pydantic import ValidationError as PydanticValidationError

from taxxon_core.exceptions import ValidationError
from taxxon_core.models import (
    FIELD_MODELS,
    DocumentType,
    ExtractedDocument,
    OtherFields,
    T2202Fields,
    T4Fields,
    T5Fields,
    expected_field_names,
    parse_extracted_document,
)


class TestFieldSets:
    """Test suite for per-type field models."""

    def test_every_type_has_a_model(self):
        assert set(FIELD_MODELS) == set(DocumentType)

    def test_camel_and_snake_keys(self):
        """Extractor camelCase and Python snake_case are both accepted."""
        camel = T4Fields.model_validate({"employerName": "Acme", "employmentIncome": 50000})
        snake = T4Fields.model_validate({"employer_name": "Acme", "employment_income": 50000})

        assert camel == snake
        assert camel.employment_income == Decimal("50000")

    def test_unknown_keys_are_dropped(self):
        fields = T4Fields.model_validate({"employerName": "Acme", "favouriteColour": "blue"})

        assert "favouriteColour" not in fields.model_dump(by_alias=True)

    @pytest.mark.parametrize("raw", ["N/A", "", None, "abc", float("nan")])
    def test_unparseable_amounts_are_zero(self, raw):
        fields = T4Fields.model_validate({"employmentIncome": raw})
        assert fields.employment_income == Decimal("0")

    def test_amount_strings(self):
        fields = T5Fields.model_validate({"actualDividends": "$1,234.50 "})
        assert fields.actual_dividends == Decimal("1234.50")

    def test_text_is_stripped(self):
        fields = T4Fields.model_validate({"employerName": "  Acme Corp  "})
        assert fields.employer_name == "Acme Corp"

    def test_month_counts_are_integers(self):
        fields = T2202Fields.model_validate({"monthsFullTime": "8", "monthsPartTime": "bad"})

        assert fields.months_full_time == 8
        assert fields.months_part_time == 0

    def test_expected_field_names(self):
        names = expected_field_names(DocumentType.T4)

        assert names[:3] == ["employerName", "employmentIncome", "incomeTaxDeducted"]
        assert "interestFromCanadianSources" in expected_field_names(DocumentType.T5)
        assert expected_field_names(DocumentType.OTHER) == []


class TestExtractedDocument:
    """Test suite for ExtractedDocument."""

    def test_field_model_selected_by_type(self):
        document = ExtractedDocument(
            document_type=DocumentType.T5,
            fields={"actualDividends": 100},
        )

        assert isinstance(document.fields, T5Fields)
        assert document.field_set(T5Fields).actual_dividends == Decimal("100")

    def test_from_camel_payload(self):
        document = ExtractedDocument.model_validate(
            {"documentType": "t4", "documentName": "t4.pdf", "fields": {"employerName": "Acme"}}
        )

        assert document.document_type == DocumentType.T4
        assert document.document_name == "t4.pdf"
        assert document.fields.employer_name == "Acme"

    def test_missing_fields_default(self):
        document = ExtractedDocument(document_type=DocumentType.OTHER)
        assert isinstance(document.fields, OtherFields)

    def test_serializes_typed_fields(self):
        """Dumps include the concrete field set, under extractor names."""
        document = ExtractedDocument(
            document_type=DocumentType.T4,
            fields={"employerName": "Acme", "employmentIncome": 1},
        )

        dumped = document.model_dump(by_alias=True)

        assert dumped["documentType"] == DocumentType.T4
        assert dumped["fields"]["employerName"] == "Acme"
        assert dumped["fields"]["employmentIncome"] == Decimal("1")

    def test_fields_instance_of_wrong_type(self):
        with pytest.raises(PydanticValidationError):
            ExtractedDocument(document_type=DocumentType.T4, fields=T5Fields())

    def test_field_set_mismatch(self):
        document = ExtractedDocument(document_type=DocumentType.T5, fields={})

        with pytest.raises(ValidationError) as exc_info:
            document.field_set(T4Fields)
        assert exc_info.value.details["value"] == "t5"

    def test_is_frozen(self):
        document = ExtractedDocument(document_type=DocumentType.OTHER)
        with pytest.raises(PydanticValidationError):
            document.document_name = "renamed"

    def test_from_field_list(self):
        """The extractor's list form is flattened into a mapping."""
        document = ExtractedDocument.from_field_list(
            DocumentType.RRSP_RECEIPT,
            [
                {"fieldName": "institutionName", "value": "Big Bank", "confidence": "high"},
                {"fieldName": "contributionAmount", "value": "5,000.00", "confidence": "medium"},
                {"value": "orphan"},
            ],
            document_name="receipt.jpg",
        )

        assert document.fields.institution_name == "Big Bank"
        assert document.fields.contribution_amount == Decimal("5000.00")
        assert document.document_name == "receipt.jpg"

    def test_label(self):
        assert DocumentType.RRSP_RECEIPT.label == "RRSP Contribution Receipt"


class TestParseExtractedDocument:
    """Test suite for boundary parsing."""

    def test_parses_known_type(self):
        document = parse_extracted_document(
            {"document_type": "donation-receipt", "fields": {"donation_amount": "75"}}
        )

        assert document.fields.donation_amount == Decimal("75")

    @pytest.mark.parametrize(
        "payload",
        [
            {},
            {"documentType": "w2"},
            {"documentType": None},
            {"documentType": ["t4"]},
            {"documentType": {"type": "t4"}},
        ],
    )
    def test_unknown_type(self, payload):
        with pytest.raises(ValidationError) as exc_info:
            parse_extracted_document(payload)

        assert exc_info.value.field == "documentType"
        assert "t4" in exc_info.value.constraint
