"""Fiscal projector for the yearly dashboard.

Selects the paid entries and the business expenses of a calendar year from
the store and runs the fiscal cascade on them. The projection is recomputed
from scratch on every call.
"""

import datetime as dt
import logging
from dataclasses import dataclass
from decimal import Decimal
from typing import TYPE_CHECKING, Dict, Iterable, List

from fluxledger.calculators.earnings_calculator import sum_earnings
from fluxledger.calculators.fiscal_calculator import (
    FiscalCascade,
    FiscalRules,
    compute_fiscal_cascade,
)
from fluxledger.models.entry import TimeEntry
from fluxledger.models.expense import BusinessExpense, ExpenseCategory

if TYPE_CHECKING:
    from fluxledger.services.ledger_store import LedgerStore

logger = logging.getLogger(__name__)


@dataclass
class FiscalProjection:
    """Fiscal figures of one year plus the overhead breakdown.

    Attributes:
        year: Calendar year projected
        stamp_count: Stamp duties assumed for the year
        paid_entry_count: Number of paid entries in the year
        cascade: All figures of the cascade
        expense_breakdown: Overhead totals by category (every category listed)
    """

    year: int
    stamp_count: int
    paid_entry_count: int
    cascade: FiscalCascade
    expense_breakdown: Dict[ExpenseCategory, Decimal]

    @property
    def net_income(self) -> Decimal:
        return self.cascade.net_income


def entry_year(entry: TimeEntry) -> int:
    """Calendar year of an entry's start, in UTC."""
    return entry.start_time.astimezone(dt.timezone.utc).year


def paid_entries_in_year(entries: Iterable[TimeEntry], year: int) -> List[TimeEntry]:
    """Entries marked paid whose start falls in ``year``."""
    return [e for e in entries if e.is_paid and entry_year(e) == year]


def expense_breakdown(
    expenses: Iterable[BusinessExpense], year: int
) -> Dict[ExpenseCategory, Decimal]:
    """Sum the year's business expenses by category."""
    breakdown = {category: Decimal("0") for category in ExpenseCategory}
    for expense in expenses:
        if expense.date.year == year:
            breakdown[expense.category] += expense.amount
    return breakdown


def project_year(
    entries: Iterable[TimeEntry],
    expenses: Iterable[BusinessExpense],
    year: int,
    stamp_count: int,
    rules: FiscalRules = FiscalRules(),
) -> FiscalProjection:
    """Compute the fiscal projection of a year from in-memory records.

    Args:
        entries: All entries of the user
        expenses: Business expenses of the user
        year: Calendar year to project
        stamp_count: Stamp duties charged in the year
        rules: Fiscal rates

    Returns:
        FiscalProjection
    """
    paid = paid_entries_in_year(entries, year)
    breakdown = expense_breakdown(expenses, year)
    expense_total = sum(breakdown.values(), Decimal("0"))

    cascade = compute_fiscal_cascade(
        gross_paid=sum_earnings(paid),
        stamp_count=stamp_count,
        expense_total=expense_total,
        rules=rules,
    )

    logger.info(
        f"Fiscal projection {year}: {len(paid)} paid entries, "
        f"gross {cascade.gross_paid}, net {cascade.net_income}"
    )

    return FiscalProjection(
        year=year,
        stamp_count=stamp_count,
        paid_entry_count=len(paid),
        cascade=cascade,
        expense_breakdown=breakdown,
    )


class FiscalProjector:
    """Loads a user's records from the store and projects a fiscal year.

    Example:
        >>> projector = FiscalProjector(store)
        >>> projection = projector.project("u-1", 2024, stamp_count=12)
        >>> projection.cascade.mandatory_reserve
    """

    def __init__(self, store: "LedgerStore", rules: FiscalRules = FiscalRules()):
        self.store = store
        self.rules = rules

    def project(self, user_id: str, year: int, stamp_count: int) -> FiscalProjection:
        entries = self.store.list_entries(user_id)
        expenses = self.store.list_expenses(user_id, year=year)
        return project_year(entries, expenses, year, stamp_count, self.rules)
