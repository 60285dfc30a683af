"""FluxLedger CLI.

Command-line interface over the ledger: list entries, print billing
documents, update billing state and project the yearly taxes.
"""

import click

from fluxledger import __version__
from fluxledger.cli.commands import (
    add_entry,
    billing_summary,
    fiscal_projection,
    list_entries,
    mark_billed,
    mark_paid,
    mark_unbilled,
    set_rate,
    validate_data,
)


@click.group(
    help="FluxLedger CLI - Track billable time, prepare invoices and project taxes"
)
@click.version_option(version=__version__)
def cli():
    """FluxLedger CLI main entry point."""


cli.add_command(list_entries)
cli.add_command(add_entry)
cli.add_command(billing_summary)
cli.add_command(mark_billed)
cli.add_command(mark_unbilled)
cli.add_command(mark_paid)
cli.add_command(set_rate)
cli.add_command(fiscal_projection)
cli.add_command(validate_data)


def main():
    """Main entry point for the CLI."""
    cli()


if __name__ == "__main__":
    main()
