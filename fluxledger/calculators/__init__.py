"""Calculator modules for the ledger."""

from fluxledger.calculators.earnings_calculator import (
    billable_hours,
    compute_base_amount,
    compute_earnings,
    compute_expense_total,
    round_currency,
    sum_earnings,
)
from fluxledger.calculators.fiscal_calculator import (
    FiscalCascade,
    FiscalRules,
    compute_fiscal_cascade,
)

__all__ = [
    # earnings_calculator
    "billable_hours",
    "compute_base_amount",
    "compute_earnings",
    "compute_expense_total",
    "round_currency",
    "sum_earnings",
    # fiscal_calculator
    "FiscalCascade",
    "FiscalRules",
    "compute_fiscal_cascade",
]
