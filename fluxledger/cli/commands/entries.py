"""Entry commands: recording entries and bulk billed, paid and rate changes."""

from decimal import Decimal, InvalidOperation
from typing import List, Tuple

import click

from fluxledger.calculators.earnings_calculator import compute_earnings
from fluxledger.cli.commands.billing import build_query, selection_options
from fluxledger.cli.error_handlers import DataValidationError, with_error_handling
from fluxledger.cli.utils.formatters import format_bulk_result, format_info, format_success
from fluxledger.cli.utils.session import Session, open_session
from fluxledger.exceptions import RecordNotFoundError
from fluxledger.services.billing_service import filter_summary_ids
from fluxledger.services.ledger_store import BulkUpdateResult
from fluxledger.utils.formatting import format_currency

DATETIME_FORMATS = ["%Y-%m-%d %H:%M", "%Y-%m-%dT%H:%M", "%Y-%m-%d"]

entry_ids_option = click.option(
    "--entry-id",
    "entry_ids",
    multiple=True,
    help="Entry id to update (repeatable)",
)
debug_option = click.option("--debug", is_flag=True, help="Show full stack traces")


def _echo_result(result: BulkUpdateResult) -> None:
    for line in format_bulk_result(result):
        click.echo(line)


def _selected_ids(
    session: Session,
    entry_ids: Tuple[str, ...],
    projects: Tuple[str, ...],
    months: Tuple[str, ...],
    view: str,
) -> List[str]:
    """Explicit ids win; otherwise every entry of the filtered selection."""
    if entry_ids:
        return list(entry_ids)
    query = build_query(session, projects, months, view)
    summary = session.billing_service().summarize(session.user_id, query)
    click.echo(format_info(f"Selection holds {len(summary.entries)} entries"))
    return filter_summary_ids(summary, None)


@click.command(name="mark-billed")
@entry_ids_option
@selection_options
@debug_option
def mark_billed(entry_ids, projects, months, view, debug):
    """Mark entries as invoiced.

    Without --entry-id every entry of the --project/--month selection is
    marked.

    Example:
        fluxledger mark-billed --project p-1 --month 2024-03
    """
    with with_error_handling(debug):
        session = open_session()
        ids = _selected_ids(session, entry_ids, projects, months, view)
        _echo_result(session.billing_service().mark_billed(session.user_id, ids))


@click.command(name="mark-unbilled")
@entry_ids_option
@debug_option
def mark_unbilled(entry_ids, debug):
    """Move entries back to pending. Their paid flag is cleared too."""
    with with_error_handling(debug):
        session = open_session()
        _echo_result(session.billing_service().mark_unbilled(session.user_id, entry_ids))


@click.command(name="mark-paid")
@entry_ids_option
@click.option("--unpaid", is_flag=True, help="Revoke the paid flag instead")
@debug_option
def mark_paid(entry_ids, unpaid, debug):
    """Record payment of billed entries.

    Entries that are not billed yet are reported and left untouched.
    """
    with with_error_handling(debug):
        session = open_session()
        result = session.billing_service().mark_paid(
            session.user_id, entry_ids, paid=not unpaid
        )
        _echo_result(result)


@click.command(name="set-rate")
@entry_ids_option
@click.option("--rate", required=True, help="New hourly rate or daily fee")
@debug_option
def set_rate(entry_ids, rate, debug):
    """Overwrite the rate of entries, whatever their billing type.

    Example:
        fluxledger set-rate --entry-id e-1 --entry-id e-2 --rate 45
    """
    with with_error_handling(debug):
        try:
            value = Decimal(rate)
        except InvalidOperation as e:
            raise DataValidationError(f"Invalid rate: {rate}") from e
        if not value.is_finite() or value < 0:
            raise DataValidationError(
                f"Invalid rate: {rate}", recovery_hint="Use a non-negative number"
            )

        session = open_session()
        _echo_result(session.billing_service().update_rates(session.user_id, entry_ids, value))


@click.command(name="add-entry")
@click.option("--project", "project_id", required=True, help="Project id")
@click.option(
    "--start",
    required=True,
    type=click.DateTime(formats=DATETIME_FORMATS),
    help="Start, YYYY-MM-DD HH:MM in UTC (a bare date for whole-day entries)",
)
@click.option(
    "--end",
    default=None,
    type=click.DateTime(formats=DATETIME_FORMATS),
    help="End, YYYY-MM-DD HH:MM in UTC (earlier than --start means next day)",
)
@click.option("--description", default="", help="What was done")
@debug_option
def add_entry(project_id, start, end, description, debug):
    """Record a new entry with the project's default rate and billing type.

    Trial plans are limited to TRIAL_ENTRY_LIMIT entries.

    Example:
        fluxledger add-entry --project p-1 --start "2024-03-04 09:00" --end "2024-03-04 12:30"
    """
    with with_error_handling(debug):
        session = open_session()
        project = next(
            (p for p in session.store.list_projects(session.user_id) if p.id == project_id),
            None,
        )
        if project is None:
            raise RecordNotFoundError("project", project_id)

        entry = session.add_entry(project.new_entry(start, end, description))
        click.echo(
            format_success(
                f"Added entry {entry.id}: {format_currency(compute_earnings(entry))}"
            )
        )
