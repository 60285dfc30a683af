"""CLI utility functions."""

from fluxledger.cli.utils.formatters import (
    format_bulk_result,
    format_error,
    format_info,
    format_success,
    format_table,
    format_warning,
)

__all__ = [
    "format_bulk_result",
    "format_error",
    "format_info",
    "format_success",
    "format_table",
    "format_warning",
]
