"""Output formatting utilities for CLI."""

from typing import List

import click

from fluxledger.services.ledger_store import BulkUpdateResult


def format_success(message: str) -> str:
    """Format a success message with green color."""
    return click.style(f"✓ {message}", fg="green", bold=True)


def format_error(message: str) -> str:
    """Format an error message with red color."""
    return click.style(f"✗ {message}", fg="red", bold=True)


def format_warning(message: str) -> str:
    """Format a warning message with yellow color."""
    return click.style(f"⚠ {message}", fg="yellow", bold=True)


def format_info(message: str) -> str:
    """Format an info message with blue color."""
    return click.style(f"ℹ {message}", fg="blue")


def format_table(headers: List[str], rows: List[List[str]], max_width: int = 40) -> str:
    """Format rows as a boxed text table.

    Args:
        headers: Column headers
        rows: Data rows (each a list of cell values)
        max_width: Maximum width of a column; longer cells are truncated

    Returns:
        The table as a string
    """
    if not headers:
        return ""

    widths = [len(h) for h in headers]
    for row in rows:
        for i, cell in enumerate(row[: len(widths)]):
            widths[i] = max(widths[i], len(str(cell)))
    widths = [min(w, max_width) for w in widths]

    def render(cells: List[str]) -> str:
        padded = [
            f" {str(cell)[: widths[i]]:<{widths[i]}} "
            for i, cell in enumerate(cells[: len(widths)])
        ]
        return "|" + "|".join(padded) + "|"

    separator = "+" + "+".join("-" * (w + 2) for w in widths) + "+"
    lines = [separator, render(headers), separator]
    if rows:
        lines.extend(render(row) for row in rows)
        lines.append(separator)
    return "\n".join(lines)


def format_bulk_result(result: BulkUpdateResult) -> List[str]:
    """Success line plus one warning per failed id."""
    lines = [format_success(f"{result.operation}: {len(result.updated_ids)} entries updated")]
    for entry_id, reason in result.failed_ids.items():
        lines.append(format_warning(f"{entry_id}: {reason}"))
    return lines
