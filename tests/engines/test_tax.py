"""
Tests for the Tax Calculator.

Covers:
- GST/HST/PST/QST per jurisdiction
- Per-component cent rounding
- Tax-inclusive (reverse) calculation
- Rate lookup with default-jurisdiction fallback
- Itemized tax lines
- Quarterly expense summary
"""

from dataclasses import FrozenInstanceError
from datetime import date
from decimal import Decimal

import pytest

from salestax_engines import tax as tax_module
from salestax_engines.tax import (
    TaxBreakdown,
    TaxCalculator,
    TaxType,
)


class TestForwardCalculation:
    """Tests for tax on a pre-tax amount."""

    def setup_method(self):
        self.calculator = TaxCalculator()

    def test_ontario_hst(self):
        """Ontario charges 13% HST only."""
        result = self.calculator.forward(100, "ON")

        assert result.before_tax == Decimal("100")
        assert result.gst == Decimal("0")
        assert result.pst == Decimal("0")
        assert result.hst == Decimal("13.00")
        assert result.total_tax == Decimal("13.00")
        assert result.after_tax == Decimal("113.00")

    def test_british_columbia_gst_and_pst(self):
        """BC charges 5% GST plus 7% PST."""
        result = self.calculator.forward(100, "BC")

        assert result.gst == Decimal("5.00")
        assert result.pst == Decimal("7.00")
        assert result.hst == Decimal("0")
        assert result.total_tax == Decimal("12.00")
        assert result.after_tax == Decimal("112.00")

    def test_alberta_gst_only(self):
        result = self.calculator.forward(100, "AB")

        assert result.gst == Decimal("5.00")
        assert result.pst == Decimal("0")
        assert result.hst == Decimal("0")
        assert result.total_tax == Decimal("5.00")
        assert result.after_tax == Decimal("105.00")

    def test_quebec_gst_and_qst(self):
        """QST of 9.975% is reported in the provincial component."""
        result = self.calculator.forward(100, "QC")

        assert result.gst == Decimal("5.00")
        assert result.pst == Decimal("9.98")
        assert result.hst == Decimal("0")
        assert result.total_tax == Decimal("14.98")
        assert result.after_tax == Decimal("114.98")

    @pytest.mark.parametrize("code", ["NB", "NL", "NS", "PE"])
    def test_atlantic_hst(self, code):
        result = self.calculator.forward(100, code)

        assert result.hst == Decimal("15.00")
        assert result.after_tax == Decimal("115.00")

    def test_case_insensitive_codes(self):
        upper = self.calculator.forward(100, "ON")

        assert self.calculator.forward(100, "on") == upper
        assert self.calculator.forward(100, "On") == upper

    def test_unknown_code_uses_ontario(self):
        assert self.calculator.forward(100, "ZZ") == self.calculator.forward(100, "ON")

    def test_default_jurisdiction_is_ontario(self):
        result = self.calculator.forward(100)

        assert result.hst == Decimal("13.00")
        assert result.total_tax == Decimal("13.00")

    def test_components_rounded_before_summing(self):
        """33.33 * 0.13 = 4.3329, so HST is 4.33."""
        result = self.calculator.forward("33.33", "ON")

        assert result.before_tax == Decimal("33.33")
        assert result.hst == Decimal("4.33")
        assert result.total_tax == Decimal("4.33")
        assert result.after_tax == Decimal("37.66")

    def test_float_input_treated_as_decimal_literal(self):
        assert self.calculator.forward(33.33, "ON") == self.calculator.forward("33.33", "ON")

    def test_total_is_sum_of_rounded_components(self):
        """SK on 0.08: 0.004 and 0.0048 each round to zero, though their sum would not."""
        result = self.calculator.forward("0.08", "SK")

        assert result.gst == Decimal("0")
        assert result.pst == Decimal("0")
        assert result.total_tax == Decimal("0")
        assert result.after_tax == Decimal("0.08")

    @pytest.mark.parametrize(
        "amount,code,field,expected",
        [
            ("33.33", "ON", "hst", "4.33"),
            ("66.67", "ON", "hst", "8.67"),
            ("999.99", "QC", "gst", "50.00"),
            ("999.99", "QC", "pst", "99.75"),
            ("10.01", "ON", "hst", "1.30"),
        ],
    )
    def test_cent_rounding(self, amount, code, field, expected):
        result = self.calculator.forward(amount, code)

        assert getattr(result, field) == Decimal(expected)

    def test_half_cent_rounds_away_from_zero(self):
        """0.50 * 0.13 = 0.065 exactly."""
        assert self.calculator.forward("0.50", "ON").hst == Decimal("0.07")
        assert self.calculator.forward("-0.50", "ON").hst == Decimal("-0.07")

    def test_zero_amount(self):
        result = self.calculator.forward(0, "ON")

        assert result.before_tax == 0
        assert result.gst == 0
        assert result.pst == 0
        assert result.hst == 0
        assert result.total_tax == 0
        assert result.after_tax == 0

    def test_negative_amount_for_refunds(self):
        result = self.calculator.forward(-100, "ON")

        assert result.before_tax == Decimal("-100")
        assert result.hst == Decimal("-13.00")
        assert result.total_tax == Decimal("-13.00")
        assert result.after_tax == Decimal("-113.00")

    def test_very_small_amount(self):
        result = self.calculator.forward("0.01", "ON")

        assert result.hst == Decimal("0")
        assert result.after_tax == Decimal("0.01")

    def test_large_amounts_keep_cent_precision(self):
        result = self.calculator.forward("1000000.99", "ON")

        assert result.hst == Decimal("130000.13")
        assert result.after_tax == Decimal("1130001.12")

    def test_very_large_amount(self):
        result = self.calculator.forward("999999999.99", "AB")

        assert result.gst == Decimal("50000000.00")
        assert result.after_tax == Decimal("1049999999.99")

    def test_amount_beyond_default_decimal_precision(self):
        """Amounts needing more than 28 digits at the cent still round."""
        result = self.calculator.forward(1e30, "ON")

        assert result.hst == Decimal("1.3E+29")
        assert result.total_tax == result.hst
        assert result.after_tax == Decimal("1.13E+30")

    def test_non_numeric_amount_rejected(self):
        with pytest.raises(ValueError):
            self.calculator.forward("abc", "ON")

    def test_breakdown_is_immutable(self):
        result = self.calculator.forward(100, "ON")

        with pytest.raises(FrozenInstanceError):
            result.hst = Decimal("0")


class TestInverseCalculation:
    """Tests for recovering the pre-tax amount from a tax-inclusive total."""

    def setup_method(self):
        self.calculator = TaxCalculator()

    def test_ontario(self):
        result = self.calculator.inverse(113, "ON")

        assert abs(result.before_tax - Decimal("100")) < Decimal("0.01")
        assert result.hst == Decimal("13.00")
        assert result.after_tax == Decimal("113.00")

    def test_british_columbia(self):
        result = self.calculator.inverse(112, "BC")

        assert abs(result.before_tax - Decimal("100")) < Decimal("0.01")
        assert result.gst == Decimal("5.00")
        assert result.pst == Decimal("7.00")
        assert result.after_tax == Decimal("112.00")

    def test_quebec_complex_amount(self):
        result = self.calculator.inverse("1234.56", "QC")
        expected_pre_tax = Decimal("1234.56") / Decimal("1.14975")

        assert abs(result.before_tax - expected_pre_tax) < Decimal("0.01")
        assert abs(result.after_tax - Decimal("1234.56")) <= Decimal("0.01")

    def test_very_large_total(self):
        result = self.calculator.inverse(1e27, "QC")

        assert abs(result.after_tax - Decimal("1E+27")) <= 1
        assert result.total_tax == result.gst + result.pst

    def test_unknown_code_uses_ontario(self):
        assert self.calculator.inverse(113, "ZZ") == self.calculator.inverse(113, "ON")


class TestRates:
    """Tests for rate lookup and jurisdiction enumeration."""

    def setup_method(self):
        self.calculator = TaxCalculator()

    def test_ontario_rates(self):
        rates = self.calculator.rates_of("ON")

        assert rates.hst == Decimal("0.13")
        assert rates.total_rate == Decimal("0.13")

    def test_british_columbia_rates(self):
        rates = self.calculator.rates_of("BC")

        assert rates.gst == Decimal("0.05")
        assert rates.pst == Decimal("0.07")
        assert rates.total_rate == Decimal("0.12")

    def test_quebec_rates_fold_qst_into_pst(self):
        rates = self.calculator.rates_of("QC")

        assert rates.gst == Decimal("0.05")
        assert rates.pst == Decimal("0.09975")
        assert rates.hst == Decimal("0")
        assert rates.total_rate == Decimal("0.14975")

    def test_unknown_code_uses_ontario(self):
        assert self.calculator.rates_of("XX") == self.calculator.rates_of("ON")

    def test_all_jurisdictions(self):
        provinces = self.calculator.all_jurisdictions()
        codes = [p.code for p in provinces]

        assert len(provinces) == 13
        assert codes == sorted(codes)
        assert {"ON", "BC", "QC", "AB"} <= set(codes)

    def test_jurisdiction_names_and_rates(self):
        ontario = next(p for p in self.calculator.all_jurisdictions() if p.code == "ON")

        assert ontario.name == "Ontario"
        assert ontario.total_rate == Decimal("0.13")

    def test_total_rate_is_sum_of_components(self):
        for summary in self.calculator.all_jurisdictions():
            rates = self.calculator.rates_of(summary.code)
            assert rates.gst + rates.pst + rates.hst == summary.total_rate


class TestItemize:
    """Tests for itemized tax lines."""

    def setup_method(self):
        self.calculator = TaxCalculator()

    def test_hst_line(self):
        lines = self.calculator.itemize(100, "ON")

        assert len(lines) == 1
        assert lines[0].tax_type == TaxType.HST
        assert lines[0].amount == Decimal("13.00")
        assert lines[0].description == "Ontario HST (13.0%)"

    def test_quebec_lines(self):
        lines = self.calculator.itemize(100, "QC")

        assert [line.tax_type for line in lines] == [TaxType.GST, TaxType.PST]
        assert lines[0].description == "GST (5.0%)"
        assert lines[1].description == "Quebec QST (9.975%)"
        assert lines[1].amount == Decimal("9.98")

    def test_provincial_label(self):
        lines = self.calculator.itemize(100, "BC")

        assert lines[1].description == "British Columbia PST (7.00%)"

    def test_provincial_rate_two_decimals(self):
        lines = self.calculator.itemize(100, "SK")

        assert lines[0].description == "GST (5.0%)"
        assert lines[1].description == "Saskatchewan PST (6.00%)"

    def test_gst_only(self):
        lines = self.calculator.itemize(100, "YT")

        assert len(lines) == 1
        assert lines[0].tax_type == TaxType.GST


class TestQuarterlySummary:
    """Tests for the expense-side quarterly summary."""

    expenses = [
        {"amount": 100, "tax_amount": 13, "date": "2024-01-15"},
        {"amount": 200, "tax_amount": 26, "date": "2024-02-15"},
        {"amount": 150, "tax_amount": 19.5, "date": "2024-03-15"},
        {"amount": 300, "tax_amount": 39, "date": "2024-04-15"},  # Outside Q1
    ]

    def setup_method(self):
        self.calculator = TaxCalculator()

    def test_q1_summary(self):
        summary = self.calculator.quarterly_summary(self.expenses, "2024-01-01", "2024-03-31")

        assert summary.period.start == "2024-01-01"
        assert summary.period.end == "2024-03-31"
        assert summary.count == 3
        assert summary.total_amount == Decimal("450")
        assert summary.total_tax_paid == Decimal("58.5")
        assert summary.input_tax_credits == Decimal("58.5")

    def test_boundaries_inclusive(self):
        expenses = [
            {"amount": 10, "tax_amount": 1, "date": "2024-01-01"},
            {"amount": 20, "tax_amount": 2, "date": "2024-03-31"},
        ]

        summary = self.calculator.quarterly_summary(expenses, "2024-01-01", "2024-03-31")

        assert summary.count == 2

    def test_empty_expenses(self):
        summary = self.calculator.quarterly_summary([], "2024-01-01", "2024-03-31")

        assert summary.count == 0
        assert summary.total_amount == 0
        assert summary.total_tax_paid == 0
        assert summary.input_tax_credits == 0

    def test_expenses_without_tax(self):
        expenses = [
            {"amount": 100, "tax_amount": 0, "date": "2024-01-15"},
            {"amount": 200, "date": "2024-02-15"},
        ]

        summary = self.calculator.quarterly_summary(expenses, "2024-01-01", "2024-03-31")

        assert summary.total_amount == Decimal("300")
        assert summary.total_tax_paid == 0
        assert summary.input_tax_credits == 0

    def test_accepts_expense_date_key_and_date_bounds(self):
        expenses = [{"amount": 100, "tax_amount": 13, "expense_date": "2024-02-01"}]

        summary = self.calculator.quarterly_summary(expenses, date(2024, 1, 1), date(2024, 3, 31))

        assert summary.count == 1
        assert summary.period.start == "2024-01-01"


class TestConvenienceFunctions:
    """Module-level functions share the bundled rate table."""

    def test_forward(self):
        assert tax_module.forward(100, "BC").total_tax == Decimal("12.00")

    def test_inverse(self):
        assert tax_module.inverse(113, "ON").hst == Decimal("13.00")

    def test_rates_and_jurisdictions(self):
        assert tax_module.rates_of("AB").total_rate == Decimal("0.05")
        assert len(tax_module.all_jurisdictions()) == 13

    def test_quarterly_summary(self):
        summary = tax_module.quarterly_summary(
            [{"amount": 100, "tax_amount": 13, "date": "2024-01-15"}],
            "2024-01-01",
            "2024-03-31",
        )
        assert summary.input_tax_credits == Decimal("13.00")

    def test_untaxed_breakdown(self):
        result = TaxBreakdown.untaxed(100)

        assert result.total_tax == 0
        assert result.before_tax == result.after_tax == Decimal("100")
