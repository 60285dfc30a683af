"""Billing summary command."""

from typing import Optional, Tuple

import click
from pydantic import ValidationError

from fluxledger.aggregators.billing_aggregator import (
    BillingQuery,
    BillingView,
    available_months,
    stamp_duty_suggested,
)
from fluxledger.cli.error_handlers import DataValidationError, with_error_handling
from fluxledger.cli.utils.formatters import format_info, format_warning
from fluxledger.cli.utils.session import Session, open_session
from fluxledger.models.base import first_error
from fluxledger.writers.billing_document_writer import BillingDocumentWriter


def build_query(
    session: Session,
    projects: Tuple[str, ...],
    months: Tuple[str, ...],
    view: str,
    stamp_duty: Optional[bool] = False,
    surcharge: bool = False,
    entry_ids: Tuple[str, ...] = (),
) -> BillingQuery:
    """Turn command options into a BillingQuery.

    No --project means every project of the user; no --month means every
    month that has entries in the view.
    """
    billing_view = BillingView(view)
    entries = session.store.list_entries(session.user_id)
    project_ids = list(projects) or [p.id for p in session.store.list_projects(session.user_id)]
    month_buckets = list(months) or available_months(entries, billing_view)
    try:
        return BillingQuery(
            view=billing_view,
            project_ids=frozenset(project_ids),
            months=frozenset(month_buckets),
            apply_stamp_duty=bool(stamp_duty),
            apply_surcharge=surcharge,
            entry_ids=frozenset(entry_ids) if entry_ids else None,
        )
    except ValidationError as e:
        raise DataValidationError(first_error(e), recovery_hint="Months are written YYYY-MM") from e


def selection_options(func):
    """--project, --month and --view options shared by billing commands."""
    func = click.option(
        "--view",
        type=click.Choice([v.value for v in BillingView]),
        default=BillingView.PENDING.value,
        show_default=True,
        help="Entries not yet billed (pending) or already billed",
    )(func)
    func = click.option(
        "--month",
        "months",
        multiple=True,
        help="Month bucket YYYY-MM (repeatable, default: every month with entries)",
    )(func)
    func = click.option(
        "--project",
        "projects",
        multiple=True,
        help="Project id (repeatable, default: every project)",
    )(func)
    return func


@click.command(name="billing-summary")
@selection_options
@click.option(
    "--stamp-duty/--no-stamp-duty",
    default=None,
    help="Add the stamp duty (default: suggested when the base exceeds the threshold)",
)
@click.option("--surcharge", is_flag=True, help="Add the 4% integrative surcharge")
@click.option("--entry-id", "entry_ids", multiple=True, help="Only these entries (repeatable)")
@click.option(
    "--reference",
    default=None,
    help="Invoice reference printed in the header (display only, not stored)",
)
@click.option("--debug", is_flag=True, help="Show full stack traces")
def billing_summary(
    projects: Tuple[str, ...],
    months: Tuple[str, ...],
    view: str,
    stamp_duty: Optional[bool],
    surcharge: bool,
    entry_ids: Tuple[str, ...],
    reference: Optional[str],
    debug: bool,
):
    """Print the billing document for a selection of entries.

    The document is printed only; billing state changes through mark-billed.

    Example:
        fluxledger billing-summary --project p-1 --month 2024-03 --surcharge
    """
    with with_error_handling(debug):
        session = open_session()
        session.require_reports()
        service = session.billing_service()

        query = build_query(
            session, projects, months, view, stamp_duty, surcharge, entry_ids
        )
        summary = service.summarize(session.user_id, query)

        if stamp_duty is None and stamp_duty_suggested(summary.base_total, service.rules):
            query = query.model_copy(update={"apply_stamp_duty": True})
            summary = service.summarize(session.user_id, query)
            click.echo(format_info("Stamp duty applied: base exceeds the suggestion threshold"))

        if surcharge and not summary.totals.surcharge_eligible:
            click.echo(
                format_warning(
                    "Surcharge not applied: subtotal does not exceed "
                    f"{service.rules.surcharge_threshold}"
                )
            )

        writer = BillingDocumentWriter(
            summary, service.projects_for(session.user_id), reference=reference
        )
        click.echo(writer.render_text())
