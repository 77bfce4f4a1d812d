"""Tests for the tax calculation engine."""

from decimal import Decimal

import pytest

from taxxon_core import (
    CalculationResult,
    DonationCreditMethod,
    Filing,
    TaxCalculator,
    calculate_summary,
)
from taxxon_core.models import (
    CharitableDonation,
    HomeOfficeMethod,
    MedicalExpense,
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
)
from taxxon_core.tax_tables import (
    FEDERAL_BRACKETS,
    ONTARIO_BRACKETS,
    apply_brackets,
    get_provincial_schedule,
    get_tax_tables_version,
)


@pytest.fixture
def employment_filing() -> Filing:
    """Filing with a single T4: $50,000 income, $8,000 withheld."""
    filing = Filing.new(2024)
    filing.add_record(
        T4Slip(
            employer_name="Acme Corporation",
            employment_income=Decimal("50000"),
            income_tax_deducted=Decimal("8000"),
        )
    )
    return filing


@pytest.fixture
def busy_filing() -> Filing:
    """Filing touching every slip type and deduction."""
    filing = Filing.new(2024)
    filing.update_personal_info(province="ON")
    filing.add_record(T4Slip(employment_income=Decimal("82000"), income_tax_deducted=Decimal("15000")))
    filing.add_record(T4ASlip(pension_income=Decimal("3000"), income_tax_deducted=Decimal("300")))
    filing.add_record(T4ESlip(ei_benefits=Decimal("2000"), income_tax_deducted=Decimal("200")))
    filing.add_record(T5Slip(actual_dividends=Decimal("400"), interest_from_canadian_sources=Decimal("100")))
    filing.add_record(T3Slip(capital_gains=Decimal("1000"), eligible_dividends=Decimal("50")))
    filing.add_record(T4RSPSlip(rrsp_income=Decimal("5000"), income_tax_deducted=Decimal("500")))
    filing.add_record(T5008Slip(proceeds=Decimal("3000"), cost_base=Decimal("2000")))
    filing.add_record(T2202Slip(eligible_tuition_fees=Decimal("4000")))
    filing.add_record(RRSPContribution(contribution_amount=Decimal("6000")))
    filing.add_record(CharitableDonation(donation_amount=Decimal("500")))
    filing.add_record(MedicalExpense(amount=Decimal("4000")))
    filing.update_deductions(
        childcare_expenses=Decimal("1000"),
        home_office_days=100,
        home_office_method=HomeOfficeMethod.FLAT_RATE,
        student_loan_interest=Decimal("300"),
        professional_dues=Decimal("700"),
    )
    return filing


class TestBrackets:
    """Test suite for bracket interpolation."""

    def test_federal_scenario_70000(self):
        """Taxable income of 70000 lands in the second federal bracket."""
        assert apply_brackets(Decimal("70000"), FEDERAL_BRACKETS) == Decimal("11277.265")

    @pytest.mark.parametrize("income", [Decimal("0"), Decimal("-1"), Decimal("-50000")])
    def test_zero_tax_for_non_positive_income(self, income: Decimal):
        """No tax is owed on zero or negative taxable income."""
        assert apply_brackets(income, FEDERAL_BRACKETS) == 0
        assert apply_brackets(income, ONTARIO_BRACKETS) == 0

    def test_threshold_is_taxed_in_lower_bracket(self):
        """Income exactly at a threshold uses the lower bracket's rate."""
        assert apply_brackets(Decimal("55867"), FEDERAL_BRACKETS) == Decimal("55867") * Decimal("0.15")
        assert apply_brackets(Decimal("51446"), ONTARIO_BRACKETS) == Decimal("51446") * Decimal("0.0505")

    @pytest.mark.parametrize("schedule", [FEDERAL_BRACKETS, ONTARIO_BRACKETS])
    def test_continuity_at_thresholds(self, schedule):
        """Published rounded bases keep the schedule continuous within $2."""
        for lower, upper in zip(schedule, schedule[1:]):
            from_below = lower.base + (upper.lower - lower.lower) * lower.rate
            assert abs(from_below - upper.base) <= Decimal("2")

            at_threshold = apply_brackets(upper.lower, schedule)
            just_above = apply_brackets(upper.lower + Decimal("0.01"), schedule)
            assert abs(just_above - at_threshold) <= Decimal("2")

    def test_monotonic(self):
        """Tax never decreases as income rises."""
        previous = Decimal("0")
        for income in range(0, 300001, 2500):
            tax = apply_brackets(Decimal(income), FEDERAL_BRACKETS)
            assert tax >= previous - Decimal("2")
            previous = tax

    @pytest.mark.parametrize("province", list(Province) + [None])
    def test_every_province_uses_ontario_schedule(self, province):
        """Only one provincial schedule is implemented."""
        assert get_provincial_schedule(province) is ONTARIO_BRACKETS


class TestTaxCalculator:
    """Test suite for TaxCalculator."""

    def test_single_t4_refund(self, employment_filing: Filing):
        """One T4 of $50,000 with $8,000 withheld yields a $330.75 refund."""
        summary = TaxCalculator().calculate(employment_filing)

        assert summary.total_income == Decimal("50000")
        assert summary.total_deductions == Decimal("0")
        assert summary.taxable_income == Decimal("50000")
        assert summary.federal_tax == Decimal("7500")
        assert summary.provincial_tax == Decimal("2525")
        assert summary.total_credits == Decimal("2355.75")
        assert summary.total_tax == Decimal("7669.25")
        assert summary.total_paid == Decimal("8000")
        assert summary.refund_or_owing == Decimal("330.75")
        assert summary.is_refund

    def test_empty_filing(self):
        """An empty filing owes nothing and is owed nothing."""
        summary = TaxCalculator().calculate(Filing.new(2024))

        assert summary.total_income == 0
        assert summary.federal_tax == 0
        assert summary.provincial_tax == 0
        assert summary.total_tax == 0
        assert summary.refund_or_owing == 0

    def test_total_tax_floored_at_zero(self):
        """Credits larger than tax never produce negative tax."""
        filing = Filing.new(2024)
        filing.add_record(
            T4Slip(employment_income=Decimal("10000"), income_tax_deducted=Decimal("400"))
        )
        summary = TaxCalculator().calculate(filing)

        assert summary.federal_tax + summary.provincial_tax < summary.total_credits
        assert summary.total_tax == 0
        assert summary.refund_or_owing == Decimal("400")

    def test_balance_owing_is_negative(self):
        """Under-withheld tax shows as a negative refund_or_owing."""
        filing = Filing.new(2024)
        filing.update_income(self_employment_income=Decimal("60000"))
        summary = TaxCalculator().calculate(filing)

        assert summary.total_paid == 0
        assert summary.refund_or_owing == -summary.total_tax
        assert not summary.is_refund

    @pytest.mark.parametrize(
        "income,withheld",
        [("0", "0"), ("15000", "100"), ("55867", "9000"), ("120000", "30000"), ("400000", "90000")],
    )
    def test_summary_invariants(self, income: str, withheld: str):
        """total_tax and refund_or_owing always follow their formulas."""
        filing = Filing.new(2024)
        filing.add_record(
            T4Slip(employment_income=Decimal(income), income_tax_deducted=Decimal(withheld))
        )
        s = TaxCalculator().calculate(filing)

        assert s.total_tax == max(Decimal("0"), s.federal_tax + s.provincial_tax - s.total_credits)
        assert s.total_tax >= 0
        assert s.refund_or_owing == s.total_paid - s.total_tax

    def test_idempotent(self, busy_filing: Filing):
        """Calculating twice on an unchanged filing gives identical output."""
        calculator = TaxCalculator()
        first = calculator.calculate(busy_filing)
        second = calculator.calculate(busy_filing)

        assert first == second
        assert first.model_dump() == second.model_dump()

    def test_does_not_modify_filing(self, busy_filing: Filing):
        """The calculation reads the filing without changing it."""
        before = busy_filing.model_dump()
        TaxCalculator().calculate_with_audit(busy_filing)

        assert busy_filing.model_dump() == before
        assert busy_filing.summary is None

    def test_income_aggregation(self, busy_filing: Filing):
        """Every slip family contributes with its own formula."""
        summary = TaxCalculator().calculate(busy_filing)

        # 82000 + 3000 + 2000 + 500 + (500 + 50) + 5000 + 500
        assert summary.total_income == Decimal("93550")

    def test_deduction_aggregation(self, busy_filing: Filing):
        """RRSP, childcare, flat-rate home office and dues are deductions."""
        summary = TaxCalculator().calculate(busy_filing)

        # 6000 + 1000 + 100 * 2 + 0 + 700
        assert summary.total_deductions == Decimal("7900")
        assert summary.taxable_income == Decimal("85650")

    def test_total_paid_includes_all_withholding_slips(self, busy_filing: Filing):
        """Withholding on T4, T4A, T4E and T4RSP counts as paid."""
        summary = TaxCalculator().calculate(busy_filing)

        assert summary.total_paid == Decimal("16000")

    def test_credits(self, busy_filing: Filing):
        """Credits sum basic personal, donation, medical, tuition and student loan."""
        summary = TaxCalculator().calculate(busy_filing)

        basic = Decimal("15705") * Decimal("0.15")
        donation = Decimal("200") * Decimal("0.15") + Decimal("300") * Decimal("0.29")
        medical = (Decimal("4000") - Decimal("93550") * Decimal("0.03")) * Decimal("0.15")
        tuition = Decimal("4000") * Decimal("0.15")
        student_loan = Decimal("300") * Decimal("0.15")

        assert summary.total_credits == basic + donation + medical + tuition + student_loan

    def test_t5008_losses_not_netted(self):
        """A loss on one disposition does not offset a gain on another."""
        filing = Filing.new(2024)
        filing.add_record(T5008Slip(proceeds=Decimal("3000"), cost_base=Decimal("2000")))
        filing.add_record(T5008Slip(proceeds=Decimal("1000"), cost_base=Decimal("4000")))

        assert TaxCalculator().calculate(filing).total_income == Decimal("500")

    def test_home_office_detailed_method_not_deducted(self):
        """Only the flat-rate method produces a home office deduction."""
        filing = Filing.new(2024)
        filing.add_record(T4Slip(employment_income=Decimal("40000")))
        filing.update_deductions(home_office_days=120, home_office_method=HomeOfficeMethod.DETAILED)

        result = TaxCalculator().calculate_with_audit(filing)

        assert result.summary.total_deductions == 0
        assert any("Detailed home office" in w for w in result.warnings)

    def test_medical_below_threshold_earns_nothing(self, employment_filing: Filing):
        """Medical expenses under 3% of income give no credit."""
        employment_filing.add_record(MedicalExpense(amount=Decimal("1500")))
        summary = TaxCalculator().calculate(employment_filing)

        assert summary.total_credits == Decimal("2355.75")

    def test_student_loan_interest_is_not_a_deduction(self, employment_filing: Filing):
        """Student loan interest is a credit, not a deduction."""
        employment_filing.update_deductions(student_loan_interest=Decimal("1000"))
        summary = TaxCalculator().calculate(employment_filing)

        assert summary.total_deductions == 0
        assert summary.total_credits == Decimal("2355.75") + Decimal("150")

    def test_calculate_summary_uses_default_calculator(self, busy_filing: Filing):
        """The module-level helper matches a default calculator."""
        assert calculate_summary(busy_filing) == TaxCalculator().calculate(busy_filing)


class TestDonationCredit:
    """Test suite for the two-tier donation credit."""

    def test_donation_of_200(self):
        """The first $200 is credited at 15%."""
        assert TaxCalculator().donation_credit((Decimal("200"),)) == Decimal("30")

    def test_donation_of_300(self):
        """Amounts above $200 are credited at 29%."""
        assert TaxCalculator().donation_credit((Decimal("300"),)) == Decimal("59")

    def test_per_receipt_applies_low_tier_to_each_donation(self):
        """The default method splits every receipt at $200."""
        calculator = TaxCalculator(DonationCreditMethod.PER_RECEIPT)
        assert calculator.donation_credit((Decimal("200"), Decimal("200"))) == Decimal("60")

    def test_annual_total_applies_low_tier_once(self):
        """The annual method splits the year's total at $200."""
        calculator = TaxCalculator(DonationCreditMethod.ANNUAL_TOTAL)
        assert calculator.donation_credit((Decimal("200"), Decimal("200"))) == Decimal("88")

    def test_no_donations(self):
        """No donations, no credit, under either method."""
        for method in DonationCreditMethod:
            assert TaxCalculator(method).donation_credit(()) == 0

    def test_method_changes_summary(self, employment_filing: Filing):
        """The configured method flows through to total credits."""
        employment_filing.add_record(CharitableDonation(donation_amount=Decimal("150")))
        employment_filing.add_record(CharitableDonation(donation_amount=Decimal("150")))

        per_receipt = TaxCalculator().calculate(employment_filing)
        annual = TaxCalculator(DonationCreditMethod.ANNUAL_TOTAL).calculate(employment_filing)

        assert per_receipt.total_credits == Decimal("2355.75") + Decimal("45")
        assert annual.total_credits == Decimal("2355.75") + Decimal("59")


class TestCalculationAudit:
    """Test suite for calculate_with_audit."""

    def test_returns_result(self, employment_filing: Filing):
        """Audited calculation returns the same summary plus the trail."""
        result = TaxCalculator().calculate_with_audit(employment_filing)

        assert isinstance(result, CalculationResult)
        assert result.summary == TaxCalculator().calculate(employment_filing)
        assert result.tax_tables_version == get_tax_tables_version() == "2024"

    def test_audit_log_populated(self, employment_filing: Filing):
        """Every calculation step is recorded in order."""
        result = TaxCalculator().calculate_with_audit(employment_filing)
        steps = [entry.step for entry in result.audit_log]

        assert steps == [
            "total_income",
            "total_deductions",
            "taxable_income",
            "federal_tax",
            "provincial_tax",
            "total_credits",
            "total_tax",
            "refund_or_owing",
        ]
        assert Decimal(result.audit_log[-1].output_value) == Decimal("330.75")

    def test_audit_log_reset_between_calls(self, employment_filing: Filing):
        """A shared calculator does not accumulate entries across calls."""
        calculator = TaxCalculator()
        first = calculator.calculate_with_audit(employment_filing)
        second = calculator.calculate_with_audit(employment_filing)

        assert len(first.audit_log) == len(second.audit_log)

    def test_warns_when_province_not_ontario(self, employment_filing: Filing):
        """Residents outside Ontario are told which schedule was used."""
        employment_filing.update_personal_info(province="BC")
        result = TaxCalculator().calculate_with_audit(employment_filing)

        assert any("Ontario schedule" in w for w in result.warnings)

    def test_no_warning_for_ontario(self, employment_filing: Filing):
        """Ontario residents get no schedule warning."""
        employment_filing.update_personal_info(province="ON")
        result = TaxCalculator().calculate_with_audit(employment_filing)

        assert result.warnings == []
