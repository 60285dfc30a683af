"""Fiscal cascade for the regime forfettario.

This module derives a net-income estimate from the yearly paid earnings.
The steps run in a fixed order, each one feeding the next:

1. Reverse the 4% integrative surcharge already embedded in the paid amount
2. Subtract the stamp duties charged on the year's invoices (floored at 0)
3. Apply the profitability coefficient to get the taxable income
4. Compute the social fund contribution on the taxable income
5. Compute the substitute tax on taxable income net of the contribution
6. Subtract surcharge, contribution, tax, overheads and stamps from gross

Every intermediate figure is exposed so the dashboard can show the whole
breakdown, not just the final net figure.
"""

from dataclasses import asdict, dataclass
from decimal import Decimal
from typing import TYPE_CHECKING, Dict, Union

if TYPE_CHECKING:
    from fluxledger.config.settings import FluxLedgerConfig

ZERO = Decimal("0")


@dataclass(frozen=True)
class FiscalRules:
    """Numeric constants of the fiscal cascade.

    Attributes:
        stamp_duty_amount: Stamp duty per invoice (bollo)
        surcharge_rate: Integrative surcharge charged to clients (rivalsa)
        profitability_coefficient: Share of revenue deemed taxable
        social_fund_rate: Pension fund contribution on taxable income
        substitute_tax_rate: Flat tax on taxable income net of contribution
    """

    stamp_duty_amount: Decimal = Decimal("2.00")
    surcharge_rate: Decimal = Decimal("0.04")
    profitability_coefficient: Decimal = Decimal("0.78")
    social_fund_rate: Decimal = Decimal("0.145")
    substitute_tax_rate: Decimal = Decimal("0.05")

    @classmethod
    def from_config(cls, config: "FluxLedgerConfig") -> "FiscalRules":
        return cls(
            stamp_duty_amount=config.stamp_duty_amount,
            surcharge_rate=config.surcharge_rate,
            profitability_coefficient=config.profitability_coefficient,
            social_fund_rate=config.social_fund_rate,
            substitute_tax_rate=config.substitute_tax_rate,
        )


@dataclass(frozen=True)
class FiscalCascade:
    """All figures of one fiscal projection, unrounded.

    Attributes:
        gross_paid: Earnings of the paid entries in the year
        total_stamps: Stamp duties charged on the year's invoices
        base_with_stamps: Gross with the surcharge reversed out
        surcharge_withheld: Surcharge share of the gross
        base_pure: Base without surcharge and stamps, never negative
        taxable_income: base_pure × profitability coefficient
        social_fund_contribution: Pension fund contribution
        substitute_tax: Flat income tax
        mandatory_reserve: Contribution plus tax to set aside
        yearly_expense_total: Overhead costs of the year
        net_income: What is left after everything above
    """

    gross_paid: Decimal
    total_stamps: Decimal
    base_with_stamps: Decimal
    surcharge_withheld: Decimal
    base_pure: Decimal
    taxable_income: Decimal
    social_fund_contribution: Decimal
    substitute_tax: Decimal
    mandatory_reserve: Decimal
    yearly_expense_total: Decimal
    net_income: Decimal

    def as_dict(self) -> Dict[str, Decimal]:
        return asdict(self)


def compute_fiscal_cascade(
    gross_paid: Decimal,
    stamp_count: int,
    expense_total: Union[Decimal, int] = ZERO,
    rules: FiscalRules = FiscalRules(),
) -> FiscalCascade:
    """Run the gross-to-net cascade for one year.

    Args:
        gross_paid: Sum of earnings of the paid entries in the year
        stamp_count: Number of invoices that carried a stamp duty
        expense_total: Overhead costs dated in the year
        rules: Rates and amounts to apply

    Returns:
        FiscalCascade with every intermediate figure

    Raises:
        ValueError: If the stamp count or the expense total is negative

    Example:
        >>> cascade = compute_fiscal_cascade(Decimal("1040"), stamp_count=1)
        >>> cascade.base_with_stamps == Decimal("1000")
        True
        >>> cascade.base_pure == Decimal("998")
        True
    """
    if stamp_count < 0:
        raise ValueError(f"stamp_count cannot be negative, got {stamp_count}")
    gross_paid = Decimal(gross_paid)
    expense_total = Decimal(expense_total)
    if expense_total < 0:
        raise ValueError(f"expense_total cannot be negative, got {expense_total}")

    total_stamps = Decimal(stamp_count) * rules.stamp_duty_amount

    base_with_stamps = gross_paid / (Decimal("1") + rules.surcharge_rate)
    surcharge_withheld = gross_paid - base_with_stamps

    base_pure = max(ZERO, base_with_stamps - total_stamps)

    taxable_income = base_pure * rules.profitability_coefficient
    social_fund_contribution = taxable_income * rules.social_fund_rate
    substitute_tax = (
        max(ZERO, taxable_income - social_fund_contribution)
        * rules.substitute_tax_rate
    )
    mandatory_reserve = social_fund_contribution + substitute_tax

    net_income = (
        gross_paid
        - surcharge_withheld
        - mandatory_reserve
        - expense_total
        - total_stamps
    )

    return FiscalCascade(
        gross_paid=gross_paid,
        total_stamps=total_stamps,
        base_with_stamps=base_with_stamps,
        surcharge_withheld=surcharge_withheld,
        base_pure=base_pure,
        taxable_income=taxable_income,
        social_fund_contribution=social_fund_contribution,
        substitute_tax=substitute_tax,
        mandatory_reserve=mandatory_reserve,
        yearly_expense_total=expense_total,
        net_income=net_income,
    )
