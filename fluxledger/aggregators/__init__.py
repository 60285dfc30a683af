"""Aggregators module for combining entries into documents and projections.

This module selects and sums entries for billing documents, groups them for
the time log, and projects the yearly fiscal figures.
"""

from fluxledger.aggregators.activity_aggregator import (
    DayGroup,
    MonthlySnapshot,
    group_by_day,
    monthly_snapshot,
)
from fluxledger.aggregators.billing_aggregator import (
    BillingQuery,
    BillingSummary,
    BillingView,
    InvoiceRules,
    InvoiceTotals,
    aggregate_billing,
    available_months,
    compute_invoice_totals,
    filter_entries,
    month_bucket,
    stamp_duty_suggested,
)
from fluxledger.aggregators.fiscal_projector import (
    FiscalProjection,
    FiscalProjector,
    project_year,
)

__all__ = [
    "DayGroup",
    "MonthlySnapshot",
    "group_by_day",
    "monthly_snapshot",
    "BillingQuery",
    "BillingSummary",
    "BillingView",
    "InvoiceRules",
    "InvoiceTotals",
    "aggregate_billing",
    "available_months",
    "compute_invoice_totals",
    "filter_entries",
    "month_bucket",
    "stamp_duty_suggested",
    "FiscalProjection",
    "FiscalProjector",
    "project_year",
]
