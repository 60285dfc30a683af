"""Validate data command."""

import click

from fluxledger.cli.error_handlers import with_error_handling
from fluxledger.cli.utils.formatters import (
    format_error,
    format_info,
    format_success,
    format_warning,
)
from fluxledger.cli.utils.session import open_session
from fluxledger.validators.validation_report import ValidationSeverity
from fluxledger.validators.validator import LedgerValidator


@click.command(name="validate-data")
@click.option(
    "--severity",
    type=click.Choice(["error", "warning", "info"], case_sensitive=False),
    default="warning",
    help="Minimum severity level to display (default: warning)",
)
@click.option("--all-users", is_flag=True, help="Validate every user's records")
@click.option("--debug", is_flag=True, help="Show full stack traces")
@click.pass_context
def validate_data(ctx: click.Context, severity: str, all_users: bool, debug: bool):
    """Validate the stored ledger data.

    Checks for:
    - Paid entries that were never billed
    - End times before start times
    - Invalid or negative amounts
    - Entries pointing at missing projects
    - Duplicate ids

    Returns exit code 1 if errors are found.

    Example:
        fluxledger validate-data --severity info
    """
    with with_error_handling(debug):
        session = open_session()
        click.echo(format_info(f"Validating {session.store.data_file}..."))

        report = LedgerValidator().validate_document(
            session.store.read_document(),
            user_id=None if all_users else session.user_id,
        )

        threshold = ValidationSeverity[severity.upper()]
        styles = {
            ValidationSeverity.ERROR: format_error,
            ValidationSeverity.WARNING: format_warning,
            ValidationSeverity.INFO: format_info,
        }
        for issue in report.at_least(threshold):
            click.echo(styles[issue.severity](str(issue)))

        click.echo()
        if report.is_valid():
            click.echo(format_success(f"Validation passed: {report.summary()}"))
        else:
            click.echo(format_error(f"Validation failed: {report.summary()}"))

    if not report.is_valid():
        ctx.exit(1)
