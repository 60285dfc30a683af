"""Unit tests for the fiscal cascade."""

from decimal import Decimal

import pytest

from fluxledger.calculators.fiscal_calculator import (
    FiscalRules,
    compute_fiscal_cascade,
)


class TestComputeFiscalCascade:
    """Test cases for compute_fiscal_cascade."""

    def test_reference_year(self):
        """Test gross 1040 with one stamp through every step."""
        cascade = compute_fiscal_cascade(Decimal("1040"), stamp_count=1)

        assert cascade.base_with_stamps == Decimal("1000")
        assert cascade.surcharge_withheld == Decimal("40")
        assert cascade.total_stamps == Decimal("2")
        assert cascade.base_pure == Decimal("998")
        assert cascade.taxable_income == Decimal("778.44")
        assert cascade.social_fund_contribution == Decimal("112.8738")
        assert cascade.substitute_tax == Decimal("33.27831")
        assert cascade.mandatory_reserve == Decimal("146.15211")
        assert cascade.net_income == Decimal("851.84789")

    def test_expenses_reduce_net(self):
        """Test overheads are subtracted from net income only."""
        without = compute_fiscal_cascade(Decimal("1040"), 1)
        with_expenses = compute_fiscal_cascade(Decimal("1040"), 1, Decimal("300"))

        assert with_expenses.yearly_expense_total == Decimal("300")
        assert with_expenses.mandatory_reserve == without.mandatory_reserve
        assert with_expenses.net_income == without.net_income - Decimal("300")

    def test_base_pure_clamped_at_zero(self):
        """Test stamps above the base give a zero base, never negative."""
        cascade = compute_fiscal_cascade(Decimal("5.20"), stamp_count=10)

        assert cascade.total_stamps == Decimal("20")
        assert cascade.base_pure == Decimal("0")
        assert cascade.taxable_income == Decimal("0")
        assert cascade.substitute_tax == Decimal("0")

    def test_zero_year(self):
        """Test an empty year gives zero everywhere."""
        cascade = compute_fiscal_cascade(Decimal("0"), 0)
        assert all(value == 0 for value in cascade.as_dict().values())

    def test_custom_rules(self):
        """Test rates come from the rules object."""
        rules = FiscalRules(
            surcharge_rate=Decimal("0"),
            profitability_coefficient=Decimal("1"),
            social_fund_rate=Decimal("0"),
            substitute_tax_rate=Decimal("0.15"),
        )
        cascade = compute_fiscal_cascade(Decimal("1000"), 0, rules=rules)

        assert cascade.taxable_income == Decimal("1000")
        assert cascade.substitute_tax == Decimal("150")
        assert cascade.net_income == Decimal("850")

    def test_negative_inputs_rejected(self):
        """Test negative stamp counts and expenses are rejected."""
        with pytest.raises(ValueError, match="stamp_count"):
            compute_fiscal_cascade(Decimal("100"), -1)
        with pytest.raises(ValueError, match="expense_total"):
            compute_fiscal_cascade(Decimal("100"), 0, Decimal("-5"))

    def test_as_dict_lists_every_figure(self):
        """Test the dictionary form exposes all intermediate figures."""
        figures = compute_fiscal_cascade(Decimal("1040"), 1).as_dict()
        assert set(figures) == {
            "gross_paid",
            "total_stamps",
            "base_with_stamps",
            "surcharge_withheld",
            "base_pure",
            "taxable_income",
            "social_fund_contribution",
            "substitute_tax",
            "mandatory_reserve",
            "yearly_expense_total",
            "net_income",
        }
