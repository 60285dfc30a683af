"""List entries command."""

from typing import Optional, Tuple

import click

from fluxledger.aggregators.activity_aggregator import group_by_day, monthly_snapshot
from fluxledger.aggregators.billing_aggregator import month_bucket, pending_total
from fluxledger.calculators.earnings_calculator import compute_earnings
from fluxledger.cli.error_handlers import with_error_handling
from fluxledger.cli.utils.formatters import format_info, format_success, format_table
from fluxledger.cli.utils.session import open_session
from fluxledger.models.entry import BillingType, TimeEntry
from fluxledger.utils.formatting import (
    format_currency,
    format_duration,
    format_duration_human,
)

HEADERS = ["Id", "Time", "Project", "Description", "Duration", "Amount", "Status"]


def _status(entry: TimeEntry) -> str:
    if entry.is_paid:
        return "paid"
    if entry.is_billed:
        return "billed"
    return "pending"


def _row(entry: TimeEntry, project_names) -> list:
    if entry.has_specific_time:
        span = f"{entry.start_time:%H:%M}-{entry.end_time:%H:%M}"
    else:
        span = "all day"
    if entry.billing_type is BillingType.DAILY:
        duration = "1 GG"
    else:
        duration = format_duration(entry.duration)
    return [
        entry.id[:8],
        span,
        project_names.get(entry.project_id, entry.project_id),
        entry.description,
        duration,
        format_currency(compute_earnings(entry)),
        _status(entry),
    ]


@click.command(name="list-entries")
@click.option("--project", "projects", multiple=True, help="Project id (repeatable)")
@click.option("--month", default=None, help="Only entries of this month (YYYY-MM)")
@click.option(
    "--status",
    type=click.Choice(["all", "pending", "billed", "paid"]),
    default="all",
    show_default=True,
)
@click.option("--debug", is_flag=True, help="Show full stack traces")
def list_entries(projects: Tuple[str, ...], month: Optional[str], status: str, debug: bool):
    """List time entries grouped by day, newest first.

    Example:
        fluxledger list-entries --month 2024-03 --status pending
    """
    with with_error_handling(debug):
        session = open_session()
        entries = session.store.list_entries(session.user_id)
        project_names = {p.id: p.name for p in session.store.list_projects(session.user_id)}

        snapshot = monthly_snapshot(entries)
        click.echo(
            format_info(
                f"{snapshot.month}: {format_currency(snapshot.earnings)} earned, "
                f"{format_duration_human(snapshot.worked_seconds)} worked, "
                f"{snapshot.entry_count} services"
            )
        )
        click.echo(format_info(f"Pending: {format_currency(pending_total(entries))}"))

        selected = [
            e
            for e in entries
            if (not projects or e.project_id in projects)
            and (month is None or month_bucket(e.start_time) == month)
            and (status == "all" or _status(e) == status)
        ]
        if not selected:
            click.echo()
            click.echo(format_info("No entries found."))
            return

        for group in group_by_day(selected):
            click.echo()
            click.echo(
                f"{group.date:%d/%m/%Y}  ({format_duration_human(group.total_duration)})"
            )
            click.echo(format_table(HEADERS, [_row(e, project_names) for e in group.entries]))

        click.echo()
        click.echo(format_success(f"Found {len(selected)} entries"))
