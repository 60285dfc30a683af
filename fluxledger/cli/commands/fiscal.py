"""Fiscal projection command."""

import datetime as dt
from typing import Optional

import click

from fluxledger.cli.error_handlers import with_error_handling
from fluxledger.cli.utils.formatters import format_info, format_table
from fluxledger.cli.utils.session import open_session
from fluxledger.utils.formatting import format_currency

CASCADE_LABELS = [
    ("gross_paid", "Lordo incassato"),
    ("surcharge_withheld", "Rivalsa 4%"),
    ("total_stamps", "Bolli"),
    ("base_pure", "Base imponibile"),
    ("taxable_income", "Reddito imponibile"),
    ("social_fund_contribution", "Contributi"),
    ("substitute_tax", "Imposta sostitutiva"),
    ("mandatory_reserve", "Accantonamento"),
    ("yearly_expense_total", "Spese"),
    ("net_income", "Netto"),
]


@click.command(name="fiscal-projection")
@click.option("--year", type=int, default=None, help="Calendar year (default: current)")
@click.option(
    "--stamps",
    type=click.IntRange(min=0),
    default=0,
    show_default=True,
    help="Number of invoices that carried a stamp duty",
)
@click.option("--debug", is_flag=True, help="Show full stack traces")
def fiscal_projection(year: Optional[int], stamps: int, debug: bool):
    """Estimate net income for a year under the flat-rate regime.

    Example:
        fluxledger fiscal-projection --year 2024 --stamps 12
    """
    with with_error_handling(debug):
        session = open_session()
        session.require_reports()
        target_year = year or dt.datetime.now(dt.timezone.utc).year

        projection = session.fiscal_projector().project(
            session.user_id, target_year, stamps
        )
        figures = projection.cascade.as_dict()

        click.echo(
            format_info(
                f"Year {projection.year}: {projection.paid_entry_count} paid entries, "
                f"{projection.stamp_count} stamps"
            )
        )
        click.echo(
            format_table(
                ["Voce", "Importo"],
                [[label, format_currency(figures[key])] for key, label in CASCADE_LABELS],
            )
        )

        spent = [
            [category.value, format_currency(amount)]
            for category, amount in projection.expense_breakdown.items()
            if amount
        ]
        if spent:
            click.echo()
            click.echo(format_table(["Categoria", "Spese"], spent))
