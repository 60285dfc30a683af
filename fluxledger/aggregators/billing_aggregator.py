"""Billing aggregator for invoice preparation.

This module selects the entries that go on a document and computes its
totals:
- Filtering by billed state, project set and year-month buckets
- Base total from the per-entry earnings
- Optional stamp duty (bollo), added once per document
- Optional integrative surcharge on (base + stamp), only above a threshold

The filter state is passed in as an immutable BillingQuery; nothing here
reads or writes storage.
"""

import datetime as dt
import logging
from dataclasses import dataclass, field
from decimal import Decimal
from enum import Enum
from typing import TYPE_CHECKING, FrozenSet, Iterable, List, Optional

from pydantic import ConfigDict, Field, field_validator

from fluxledger.calculators.earnings_calculator import compute_earnings, sum_earnings
from fluxledger.models.base import BaseDataModel
from fluxledger.models.entry import TimeEntry

if TYPE_CHECKING:
    from fluxledger.config.settings import FluxLedgerConfig

logger = logging.getLogger(__name__)

ZERO = Decimal("0")


class BillingView(str, Enum):
    """Which side of the billed flag a document looks at."""

    PENDING = "pending"
    BILLED = "billed"


@dataclass(frozen=True)
class InvoiceRules:
    """Amounts and thresholds applied to an invoice document.

    Attributes:
        stamp_duty_amount: Flat stamp duty added once per document
        surcharge_rate: Integrative surcharge rate on (base + stamp)
        surcharge_threshold: Subtotal that must be exceeded for the surcharge
        stamp_duty_suggestion_threshold: Base above which the stamp is suggested
    """

    stamp_duty_amount: Decimal = Decimal("2.00")
    surcharge_rate: Decimal = Decimal("0.04")
    surcharge_threshold: Decimal = Decimal("100")
    stamp_duty_suggestion_threshold: Decimal = Decimal("77.47")

    @classmethod
    def from_config(cls, config: "FluxLedgerConfig") -> "InvoiceRules":
        return cls(
            stamp_duty_amount=config.stamp_duty_amount,
            surcharge_rate=config.surcharge_rate,
            surcharge_threshold=config.surcharge_threshold,
            stamp_duty_suggestion_threshold=config.stamp_duty_suggestion_threshold,
        )


class BillingQuery(BaseDataModel):
    """Immutable selection of what goes on a billing document.

    Attributes:
        view: pending (not yet billed) or billed entries
        project_ids: Projects to include; empty selects nothing
        months: Year-month buckets (YYYY-MM) to include; empty selects nothing
        apply_stamp_duty: Add the stamp duty to the document
        apply_surcharge: Add the surcharge (subject to the threshold)
        entry_ids: Optional manual selection narrowing the filtered entries

    Example:
        >>> query = BillingQuery(
        ...     project_ids={"p-1"},
        ...     months={"2024-03"},
        ...     apply_stamp_duty=True,
        ... )
        >>> query.view
        <BillingView.PENDING: 'pending'>
    """

    model_config = ConfigDict(frozen=True, validate_assignment=False)

    view: BillingView = BillingView.PENDING
    project_ids: FrozenSet[str] = Field(default_factory=frozenset)
    months: FrozenSet[str] = Field(default_factory=frozenset)
    apply_stamp_duty: bool = False
    apply_surcharge: bool = False
    entry_ids: Optional[FrozenSet[str]] = None

    @field_validator("months")
    @classmethod
    def validate_month_format(cls, v: FrozenSet[str]) -> FrozenSet[str]:
        """Ensure every month bucket is YYYY-MM."""
        for month in v:
            try:
                dt.datetime.strptime(month, "%Y-%m")
            except ValueError:
                raise ValueError(f"Invalid month bucket: {month}. Expected YYYY-MM")
            if len(month) != 7:
                raise ValueError(f"Invalid month bucket: {month}. Expected YYYY-MM")
        return v


@dataclass
class InvoiceTotals:
    """The four scalar totals of a document.

    Attributes:
        base_total: Sum of the entries' earnings
        stamp_duty: Stamp duty added (0 when disabled)
        surcharge: Surcharge added (0 when disabled or below threshold)
        grand_total: base_total + stamp_duty + surcharge
        surcharge_eligible: Whether (base + stamp) exceeds the threshold
    """

    base_total: Decimal
    stamp_duty: Decimal
    surcharge: Decimal
    grand_total: Decimal
    surcharge_eligible: bool


@dataclass
class BillingSummary:
    """Filtered, chronologically sorted entries plus the document totals."""

    entries: List[TimeEntry]
    totals: InvoiceTotals
    query: BillingQuery
    line_amounts: List[Decimal] = field(default_factory=list)

    @property
    def base_total(self) -> Decimal:
        return self.totals.base_total

    @property
    def stamp_duty(self) -> Decimal:
        return self.totals.stamp_duty

    @property
    def surcharge(self) -> Decimal:
        return self.totals.surcharge

    @property
    def grand_total(self) -> Decimal:
        return self.totals.grand_total

    @property
    def is_empty(self) -> bool:
        return not self.entries


def month_bucket(instant: dt.datetime) -> str:
    """Year-month bucket (YYYY-MM) of an instant, normalized to UTC."""
    if instant.tzinfo is not None:
        instant = instant.astimezone(dt.timezone.utc)
    return instant.strftime("%Y-%m")


def matches_view(entry: TimeEntry, view: BillingView) -> bool:
    """Whether an entry's billed flag belongs to the requested view."""
    if view is BillingView.BILLED:
        return entry.is_billed
    return not entry.is_billed


def filter_entries(entries: Iterable[TimeEntry], query: BillingQuery) -> List[TimeEntry]:
    """Select the entries matching a query, oldest first.

    An empty project or month selection yields an empty list rather than
    selecting everything.

    Args:
        entries: All entries of the user
        query: Billing selection

    Returns:
        Matching entries sorted ascending by start_time
    """
    if not query.project_ids or not query.months:
        return []

    selected = [
        entry
        for entry in entries
        if matches_view(entry, query.view)
        and entry.project_id in query.project_ids
        and month_bucket(entry.start_time) in query.months
    ]

    if query.entry_ids:
        selected = [entry for entry in selected if entry.id in query.entry_ids]

    return sorted(selected, key=lambda entry: entry.start_time)


def compute_invoice_totals(
    base_total: Decimal,
    apply_stamp_duty: bool,
    apply_surcharge: bool,
    rules: InvoiceRules = InvoiceRules(),
) -> InvoiceTotals:
    """Apply stamp duty and surcharge to a base total.

    The surcharge is computed on the post-stamp subtotal and only when that
    subtotal is strictly above the threshold; below it the surcharge is
    forced off whatever the toggle says.

    Args:
        base_total: Sum of the document's entry earnings
        apply_stamp_duty: Stamp duty toggle
        apply_surcharge: Surcharge toggle
        rules: Amounts and thresholds

    Returns:
        InvoiceTotals

    Example:
        >>> totals = compute_invoice_totals(Decimal("95"), True, True)
        >>> totals.surcharge, totals.grand_total
        (Decimal('0'), Decimal('97.00'))
    """
    stamp_duty = rules.stamp_duty_amount if apply_stamp_duty else ZERO
    subtotal = base_total + stamp_duty
    eligible = subtotal > rules.surcharge_threshold

    if apply_surcharge and eligible:
        surcharge = subtotal * rules.surcharge_rate
    else:
        surcharge = ZERO
        if apply_surcharge:
            logger.debug(
                f"Surcharge disabled: subtotal {subtotal} does not exceed "
                f"{rules.surcharge_threshold}"
            )

    return InvoiceTotals(
        base_total=base_total,
        stamp_duty=stamp_duty,
        surcharge=surcharge,
        grand_total=subtotal + surcharge,
        surcharge_eligible=eligible,
    )


def aggregate_billing(
    entries: Iterable[TimeEntry],
    query: BillingQuery,
    rules: InvoiceRules = InvoiceRules(),
) -> BillingSummary:
    """Build the billing summary for a query.

    Args:
        entries: All entries of the user
        query: Billing selection and fiscal toggles
        rules: Amounts and thresholds

    Returns:
        BillingSummary with the filtered entries and the four totals
    """
    selected = filter_entries(entries, query)
    line_amounts = [compute_earnings(entry) for entry in selected]
    base_total = sum(line_amounts, ZERO)

    totals = compute_invoice_totals(
        base_total, query.apply_stamp_duty, query.apply_surcharge, rules
    )

    logger.info(
        f"Billing summary ({query.view.value}): {len(selected)} entries, "
        f"grand total {totals.grand_total}"
    )

    return BillingSummary(
        entries=selected, totals=totals, query=query, line_amounts=line_amounts
    )


def stamp_duty_suggested(
    base_total: Decimal, rules: InvoiceRules = InvoiceRules()
) -> bool:
    """Whether the stamp duty checkbox should start ticked for this base."""
    return base_total > rules.stamp_duty_suggestion_threshold


def available_months(entries: Iterable[TimeEntry], view: BillingView) -> List[str]:
    """Month buckets that have entries in a view, newest first."""
    months = {
        month_bucket(entry.start_time) for entry in entries if matches_view(entry, view)
    }
    return sorted(months, reverse=True)


def pending_total(entries: Iterable[TimeEntry]) -> Decimal:
    """Earnings of all entries not yet billed."""
    return sum_earnings(entry for entry in entries if not entry.is_billed)
