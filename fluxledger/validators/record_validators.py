"""Per-record checks on raw stored rows.

These run on the JSON dictionaries as stored, before model validation, so
they can report rows written by older versions that the models would now
reject outright (for example paid entries that were never billed).
"""

import datetime as dt
from decimal import Decimal
from typing import Any, Dict, Optional

from fluxledger.models.base import to_decimal, to_utc_datetime
from fluxledger.validators.validation_report import ValidationReport

Record = Dict[str, Any]


def _parse_instant(value: Any) -> Optional[dt.datetime]:
    value = to_utc_datetime(value)
    if isinstance(value, str):
        try:
            value = to_utc_datetime(dt.datetime.fromisoformat(value.replace("Z", "+00:00")))
        except ValueError:
            return None
    return value if isinstance(value, dt.datetime) else None


def _parse_amount(value: Any) -> Optional[Decimal]:
    try:
        return to_decimal(value)
    except ValueError:
        return None


class RecordValidators:
    """Static checks for single entry and project rows."""

    @staticmethod
    def validate_lifecycle(record: Record, report: ValidationReport, context: Dict) -> None:
        """Paid rows must also be billed."""
        if record.get("is_paid") and not record.get("is_billed"):
            report.add_error(
                "entries.is_paid",
                "Entry is marked paid but not billed",
                record.get("is_paid"),
                context,
            )

    @staticmethod
    def validate_time_order(record: Record, report: ValidationReport, context: Dict) -> None:
        """end_time, when present, must not precede start_time."""
        start = _parse_instant(record.get("start_time"))
        if start is None:
            report.add_error(
                "entries.start_time",
                "Missing or unreadable start time",
                record.get("start_time"),
                context,
            )
            return

        if record.get("end_time") is None:
            return
        end = _parse_instant(record.get("end_time"))
        if end is None:
            report.add_error(
                "entries.end_time", "Unreadable end time", record.get("end_time"), context
            )
        elif end < start:
            report.add_error(
                "entries.end_time",
                f"End time ({end.isoformat()}) precedes start time ({start.isoformat()})",
                record.get("end_time"),
                context,
            )

    @staticmethod
    def validate_amounts(record: Record, report: ValidationReport, context: Dict) -> None:
        """Rates, durations and expense amounts must be finite and non-negative."""
        rate = record.get("hourly_rate")
        if rate is not None:
            parsed = _parse_amount(rate)
            if parsed is None or parsed < 0:
                report.add_error(
                    "entries.hourly_rate", "Rate must be a non-negative number", rate, context
                )

        duration = record.get("duration", 0)
        if not isinstance(duration, int) or isinstance(duration, bool) or duration < 0:
            report.add_error(
                "entries.duration",
                "Duration must be a non-negative number of seconds",
                duration,
                context,
            )

        for expense in record.get("expenses") or []:
            amount = _parse_amount(expense.get("amount"))
            if amount is None or amount < 0:
                report.add_error(
                    "entries.expenses.amount",
                    "Expense amount must be a non-negative number",
                    expense.get("amount"),
                    context,
                )

    @staticmethod
    def validate_zero_value(record: Record, report: ValidationReport, context: Dict) -> None:
        """Hourly rows with a time span but nothing to bill are suspicious."""
        if record.get("billing_type", "hourly") not in (None, "hourly"):
            return
        rate = _parse_amount(record.get("hourly_rate"))
        duration = record.get("duration") or 0
        if duration and not rate:
            report.add_warning(
                "entries.hourly_rate",
                "Hourly entry has worked time but no rate; it bills 0",
                record.get("hourly_rate"),
                context,
            )
        elif rate and not duration:
            report.add_warning(
                "entries.duration",
                "Hourly entry has a rate but no duration; it bills 0",
                duration,
                context,
            )

    @staticmethod
    def validate_night_shift(record: Record, report: ValidationReport, context: Dict) -> None:
        """Night-shift flags are informational only."""
        if record.get("is_night_shift"):
            report.add_info(
                "entries.is_night_shift",
                "Night-shift flag is display-only and does not change earnings",
                True,
                context,
            )
