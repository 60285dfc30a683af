"""Earnings calculator for single time entries.

This module turns one TimeEntry into its monetary value:
- Daily entries are a flat fee, duration is ignored
- Hourly entries are (duration in hours) × rate
- Itemized expenses are always added on top

No rounding is applied here; amounts are rounded to cents only for display
(see ``round_currency``).
"""

from decimal import ROUND_HALF_UP, Decimal
from typing import Iterable

from fluxledger.models.entry import DailyBilling, HourlyBilling, TimeEntry

SECONDS_PER_HOUR = Decimal("3600")
CENT = Decimal("0.01")


def compute_base_amount(entry: TimeEntry) -> Decimal:
    """Calculate the amount earned for the work itself, without expenses.

    Args:
        entry: Time entry to value

    Returns:
        Flat fee for daily entries, hours × rate for hourly entries

    Raises:
        TypeError: If the entry's billing variant is not recognized

    Example:
        >>> entry = TimeEntry(
        ...     project_id="p-1",
        ...     start_time=0,
        ...     duration=5400,
        ...     hourly_rate=Decimal("40"),
        ... )
        >>> compute_base_amount(entry) == Decimal("60")
        True
    """
    billing = entry.billing

    if isinstance(billing, DailyBilling):
        return billing.flat_fee

    if isinstance(billing, HourlyBilling):
        if not billing.rate or not entry.duration:
            return Decimal("0")
        return (Decimal(entry.duration) / SECONDS_PER_HOUR) * billing.rate

    raise TypeError(f"Unsupported billing variant: {billing!r}")


def compute_expense_total(entry: TimeEntry) -> Decimal:
    """Sum the itemized expenses of an entry (zero when there are none)."""
    return sum((expense.amount for expense in entry.expenses), Decimal("0"))


def compute_earnings(entry: TimeEntry) -> Decimal:
    """Calculate the monetary value of one time entry.

    Args:
        entry: Time entry to value

    Returns:
        Base amount plus expenses, unrounded

    Example:
        >>> entry = TimeEntry(
        ...     project_id="p-1",
        ...     start_time=0,
        ...     duration=7200,
        ...     hourly_rate=Decimal("25"),
        ...     expenses=[{"amount": "5"}],
        ... )
        >>> compute_earnings(entry)
        Decimal('55')
    """
    return compute_base_amount(entry) + compute_expense_total(entry)


def sum_earnings(entries: Iterable[TimeEntry]) -> Decimal:
    """Sum ``compute_earnings`` over a collection of entries."""
    return sum((compute_earnings(entry) for entry in entries), Decimal("0"))


def billable_hours(entry: TimeEntry) -> Decimal:
    """Hours billed by the hour for an entry.

    Daily entries are billed as a flat day, not by the hour, so they count as
    0 here; the billing document shows them as "1 GG" instead.
    """
    if isinstance(entry.billing, DailyBilling):
        return Decimal("0")
    return Decimal(entry.duration) / SECONDS_PER_HOUR


def round_currency(amount: Decimal) -> Decimal:
    """Round an amount to cents, half up, for display."""
    return amount.quantize(CENT, rounding=ROUND_HALF_UP)
