"""Tests for filing aggregation."""

from decimal import Decimal

import pytest

from taxxon_core import aggregate_filing, build_suggestion_input
from taxxon_core.aggregation import (
    home_office_deduction,
    t3_slip_income,
    t4a_slip_income,
    t5008_slip_income,
    t5_slip_income,
)
from taxxon_core.models import (
    Filing,
    HomeOfficeMethod,
    Province,
    T3Slip,
    T4ASlip,
    T4Slip,
    T5008Slip,
    T5Slip,
)


@pytest.fixture
def filing() -> Filing:
    filing = Filing.new(2024)
    filing.update_personal_info(
        first_name="Jane",
        last_name="Doe",
        sin="046-454-286",
        email="jane@example.com",
        province="BC",
        marital_status="married",
    )
    filing.add_record(
        T4Slip(
            employment_income=Decimal("60000"),
            income_tax_deducted=Decimal("9000"),
            cpp_contributions=Decimal("3500"),
            ei_premiums=Decimal("1000"),
            union_dues=Decimal("600"),
        )
    )
    filing.add_record(T5Slip(actual_dividends=Decimal("300"), capital_gains_dividends=Decimal("100")))
    filing.add_record(T3Slip(capital_gains=Decimal("200"), other_income=Decimal("20")))
    filing.update_deductions(moving_expenses=Decimal("1500"))
    return filing


class TestSlipFormulas:
    """Test suite for per-slip income formulas."""

    def test_t4a(self):
        slip = T4ASlip(
            pension_income=Decimal("1"),
            lump_sum_payments=Decimal("2"),
            self_employed_commissions=Decimal("3"),
            other_income=Decimal("4"),
            income_tax_deducted=Decimal("100"),
        )
        assert t4a_slip_income(slip) == Decimal("10")

    def test_t5_includes_capital_gains_dividends(self):
        slip = T5Slip(
            actual_dividends=Decimal("100"),
            interest_from_canadian_sources=Decimal("50"),
            capital_gains_dividends=Decimal("25"),
            foreign_income=Decimal("999"),
        )
        assert t5_slip_income(slip) == Decimal("175")

    def test_t3_capital_gains_at_inclusion_rate(self):
        slip = T3Slip(
            capital_gains=Decimal("1000"),
            eligible_dividends=Decimal("10"),
            other_dividends=Decimal("20"),
            other_income=Decimal("30"),
        )
        assert t3_slip_income(slip) == Decimal("560")

    @pytest.mark.parametrize(
        "proceeds,cost_base,expected",
        [("3000", "2000", "500"), ("2000", "2000", "0"), ("1000", "4000", "0")],
    )
    def test_t5008_floors_losses(self, proceeds, cost_base, expected):
        slip = T5008Slip(proceeds=Decimal(proceeds), cost_base=Decimal(cost_base))
        assert t5008_slip_income(slip) == Decimal(expected)

    @pytest.mark.parametrize(
        "days,method,expected",
        [
            (100, HomeOfficeMethod.FLAT_RATE, "200"),
            (0, HomeOfficeMethod.FLAT_RATE, "0"),
            (100, HomeOfficeMethod.DETAILED, "0"),
            (100, None, "0"),
        ],
    )
    def test_home_office(self, days, method, expected):
        assert home_office_deduction(days, method) == Decimal(expected)


class TestAggregateFiling:
    """Test suite for aggregate_filing."""

    def test_totals(self, filing: Filing):
        totals = aggregate_filing(filing)

        assert totals.t4_income == Decimal("60000")
        assert totals.t5_income == Decimal("400")
        assert totals.t3_income == Decimal("120")
        assert totals.investment_income == Decimal("520")
        assert totals.total_income == Decimal("60520")
        assert totals.total_deductions == Decimal("1500")
        assert totals.taxable_income == Decimal("59020")
        assert totals.total_paid == Decimal("9000")

    def test_partner_only_amounts(self, filing: Filing):
        totals = aggregate_filing(filing)

        assert totals.cpp_contributions == Decimal("3500")
        assert totals.ei_premiums == Decimal("1000")
        assert totals.union_dues == Decimal("600")

    def test_taxable_income_floored(self):
        filing = Filing.new(2024)
        filing.update_income(other_income=Decimal("1000"))
        filing.update_deductions(childcare_expenses=Decimal("5000"))

        assert aggregate_filing(filing).taxable_income == 0

    def test_empty(self):
        totals = aggregate_filing(Filing.new(2024))

        assert totals.total_income == 0
        assert totals.donation_amounts == ()


class TestSuggestionInput:
    """Test suite for build_suggestion_input."""

    def test_carries_aggregates(self, filing: Filing):
        data = build_suggestion_input(filing)

        assert data.income.t4_total == Decimal("60000")
        assert data.income.t5_total == Decimal("400")
        assert data.deductions.moving_expenses == Decimal("1500")
        assert data.province == Province.BC
        assert data.has_spouse is True
        assert data.has_dependents is False

    def test_carries_no_personal_identifiers(self, filing: Filing):
        """Names, SIN and contact details never leave the filing."""
        dumped = repr(build_suggestion_input(filing).model_dump())

        for value in ("Jane", "Doe", "046", "example.com"):
            assert value not in dumped

    def test_reuses_totals(self, filing: Filing):
        totals = aggregate_filing(filing)
        assert build_suggestion_input(filing, totals) == build_suggestion_input(filing)
