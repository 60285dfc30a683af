"""CLI commands."""

from fluxledger.cli.commands.billing import billing_summary
from fluxledger.cli.commands.entries import (
    add_entry,
    mark_billed,
    mark_paid,
    mark_unbilled,
    set_rate,
)
from fluxledger.cli.commands.fiscal import fiscal_projection
from fluxledger.cli.commands.list import list_entries
from fluxledger.cli.commands.validate import validate_data

__all__ = [
    "add_entry",
    "billing_summary",
    "fiscal_projection",
    "list_entries",
    "mark_billed",
    "mark_paid",
    "mark_unbilled",
    "set_rate",
    "validate_data",
]
