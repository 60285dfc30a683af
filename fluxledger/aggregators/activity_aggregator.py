"""Activity aggregator for the time log and the dashboard header.

Groups entries by day for the time log and summarizes the current month's
activity (gross earnings, worked hours, number of services).
"""

import datetime as dt
from dataclasses import dataclass
from decimal import Decimal
from typing import Dict, Iterable, List, Optional

from fluxledger.calculators.earnings_calculator import sum_earnings
from fluxledger.models.entry import BillingType, TimeEntry


@dataclass
class DayGroup:
    """Entries recorded on one day.

    Attributes:
        date: The day (UTC)
        entries: Entries of the day, newest first
        total_duration: Worked seconds of the day
    """

    date: dt.date
    entries: List[TimeEntry]
    total_duration: int


@dataclass
class MonthlySnapshot:
    """Dashboard figures for the current month."""

    month: str
    earnings: Decimal
    worked_seconds: int
    entry_count: int

    @property
    def worked_hours(self) -> Decimal:
        return Decimal(self.worked_seconds) / Decimal("3600")


def _counted_duration(entry: TimeEntry) -> int:
    """Seconds an entry contributes to its day total.

    Whole-day daily entries recorded without times add nothing; when the
    stored duration is zero the start/end pair is used instead.
    """
    if entry.billing_type is BillingType.DAILY and not entry.has_specific_time:
        return 0
    if entry.duration:
        return entry.duration
    if entry.end_time is not None:
        return int((entry.end_time - entry.start_time).total_seconds())
    return 0


def group_by_day(entries: Iterable[TimeEntry]) -> List[DayGroup]:
    """Group entries by UTC day, newest day and newest entry first.

    Args:
        entries: Entries to group

    Returns:
        List of DayGroup sorted by date descending
    """
    groups: Dict[dt.date, DayGroup] = {}

    for entry in sorted(entries, key=lambda e: e.start_time, reverse=True):
        day = entry.start_time.astimezone(dt.timezone.utc).date()
        group = groups.setdefault(day, DayGroup(date=day, entries=[], total_duration=0))
        group.entries.append(entry)
        group.total_duration += _counted_duration(entry)

    return sorted(groups.values(), key=lambda g: g.date, reverse=True)


def monthly_snapshot(
    entries: Iterable[TimeEntry], now: Optional[dt.datetime] = None
) -> MonthlySnapshot:
    """Summarize the entries started since the first day of the current month.

    Args:
        entries: All entries of the user
        now: Reference instant (defaults to the current UTC time)

    Returns:
        MonthlySnapshot for the month containing ``now``
    """
    now = now or dt.datetime.now(dt.timezone.utc)
    if now.tzinfo is None:
        now = now.replace(tzinfo=dt.timezone.utc)
    start_of_month = dt.datetime(now.year, now.month, 1, tzinfo=dt.timezone.utc)

    month_entries = [e for e in entries if e.start_time >= start_of_month]

    return MonthlySnapshot(
        month=start_of_month.strftime("%Y-%m"),
        earnings=sum_earnings(month_entries),
        worked_seconds=sum(e.duration for e in month_entries),
        entry_count=len(month_entries),
    )
