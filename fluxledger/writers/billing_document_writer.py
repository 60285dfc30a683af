"""Billing document writer for the printable pro-forma summary.

This module turns a BillingSummary into a document: a lines DataFrame
(one row per entry, oldest first) and a plain-text rendering with the
header and the totals block, ready to print.
"""

import datetime as dt
from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional

import pandas as pd

from fluxledger.aggregators.billing_aggregator import BillingSummary
from fluxledger.calculators.earnings_calculator import billable_hours
from fluxledger.models.entry import BillingType, TimeEntry
from fluxledger.models.project import Project
from fluxledger.utils.formatting import format_currency, format_hours

COMBINED_TITLE = "Portfolio Professionale Combinato"


@dataclass
class BillingDocument:
    """A rendered billing document.

    Attributes:
        title: Client name, or the combined title for several clients
        lines: One row per entry with Date, Client, Description, Quantity, Amount
        totals: Label to formatted amount, in display order
        reference: Optional invoice reference
    """

    title: str
    lines: pd.DataFrame
    totals: Dict[str, str]
    reference: Optional[str] = None


class BillingDocumentWriter:
    """Build the printable summary of a billing selection.

    Example:
        >>> writer = BillingDocumentWriter(summary, projects)
        >>> print(writer.render_text())
    """

    LINE_COLUMNS = ["Date", "Client", "Description", "Quantity", "Amount"]

    def __init__(
        self,
        summary: BillingSummary,
        projects: Iterable[Project],
        reference: Optional[str] = None,
    ):
        self.summary = summary
        self.projects = {project.id: project for project in projects}
        self.reference = reference

    def build(self) -> BillingDocument:
        """Assemble title, lines and totals."""
        return BillingDocument(
            title=self._title(),
            lines=self._lines(),
            totals=self._totals(),
            reference=self.reference,
        )

    def render_text(self) -> str:
        """Plain-text rendering of the document."""
        document = self.build()
        out: List[str] = [document.title.upper()]
        if document.reference:
            out.append(f"Rif. {document.reference}")
        out.append("")

        if document.lines.empty:
            out.append("Nessun servizio selezionato")
        else:
            out.append(document.lines.to_string(index=False))

        out.append("")
        width = max(len(label) for label in document.totals)
        for label, value in document.totals.items():
            out.append(f"{label:<{width}}  {value:>14}")
        return "\n".join(out)

    def _title(self) -> str:
        project_ids = self.summary.query.project_ids
        if len(project_ids) == 1:
            (project_id,) = project_ids
            project = self.projects.get(project_id)
            if project is not None:
                return project.name
        return COMBINED_TITLE

    def _lines(self) -> pd.DataFrame:
        if self.summary.is_empty:
            return pd.DataFrame(columns=self.LINE_COLUMNS)

        rows = [
            self._line(entry, amount)
            for entry, amount in zip(self.summary.entries, self.summary.line_amounts)
        ]
        return pd.DataFrame(rows, columns=self.LINE_COLUMNS)

    def _line(self, entry: TimeEntry, amount) -> Dict[str, str]:
        project = self.projects.get(entry.project_id)
        if entry.billing_type is BillingType.DAILY:
            quantity = "1 GG"
        else:
            quantity = format_hours(billable_hours(entry))
        return {
            "Date": self._format_date(entry.start_time),
            "Client": project.name if project else "",
            "Description": entry.description,
            "Quantity": quantity,
            "Amount": format_currency(amount),
        }

    def _totals(self) -> Dict[str, str]:
        totals = self.summary.totals
        rows = {"Imponibile": format_currency(totals.base_total)}
        if self.summary.query.apply_stamp_duty:
            rows["Imposta di Bollo"] = format_currency(totals.stamp_duty)
        if totals.surcharge:
            rows["Contributo Integrativo 4%"] = format_currency(totals.surcharge)
        rows["Totale"] = format_currency(totals.grand_total)
        return rows

    @staticmethod
    def _format_date(instant: dt.datetime) -> str:
        return instant.astimezone(dt.timezone.utc).strftime("%d/%m/%Y")
