"""Persistence and application services for the ledger."""

from fluxledger.services.billing_service import BillingService
from fluxledger.services.ledger_store import BulkUpdateResult, LedgerStore

__all__ = ["BillingService", "BulkUpdateResult", "LedgerStore"]
