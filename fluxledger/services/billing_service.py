"""
Billing service: billing summaries and bulk entry mutations over the store.

Every mutation takes an explicit, non-empty id selection and returns only a
BulkUpdateResult. Nothing is updated in memory: after a mutation the caller
asks for a fresh summary, which re-reads the store.
"""

import logging
from decimal import Decimal
from typing import Iterable, List, Optional, Union

from fluxledger.aggregators.billing_aggregator import (
    BillingQuery,
    BillingSummary,
    InvoiceRules,
    aggregate_billing,
)
from fluxledger.exceptions import CapabilityError, RecordNotFoundError, require_ids
from fluxledger.models.entry import TimeEntry
from fluxledger.models.profile import UserProfile
from fluxledger.models.project import Project
from fluxledger.services.ledger_store import BulkUpdateResult, LedgerStore
from fluxledger.utils.logging_utils import LogContext

logger = logging.getLogger(__name__)


class BillingService:
    """
    Orchestrates billing reads and writes for one store.

    Attributes:
        store: Persistence collaborator
        rules: Stamp duty and surcharge rules

    Example:
        >>> service = BillingService(LedgerStore("data/fluxledger.json"))
        >>> summary = service.summarize("u-1", query)
        >>> service.mark_billed("u-1", [e.id for e in summary.entries])
    """

    def __init__(self, store: LedgerStore, rules: InvoiceRules = InvoiceRules()):
        self.store = store
        self.rules = rules

    def summarize(self, user_id: str, query: BillingQuery) -> BillingSummary:
        """Load the user's entries and aggregate them for a query."""
        with LogContext(user_id=user_id, operation="summarize"):
            entries = self.store.list_entries(user_id)
            return aggregate_billing(entries, query, self.rules)

    def projects_for(self, user_id: str) -> List[Project]:
        return self.store.list_projects(user_id)

    def mark_billed(self, user_id: str, entry_ids: Iterable[str]) -> BulkUpdateResult:
        """Mark the selected entries as invoiced."""
        ids = require_ids(entry_ids, "mark_billed")
        with LogContext(user_id=user_id, operation="mark_billed"):
            return self.store.set_billed_flag(ids, billed=True, user_id=user_id)

    def mark_unbilled(self, user_id: str, entry_ids: Iterable[str]) -> BulkUpdateResult:
        """Move the selected entries back to pending (also clears paid)."""
        ids = require_ids(entry_ids, "mark_unbilled")
        with LogContext(user_id=user_id, operation="mark_unbilled"):
            return self.store.set_billed_flag(ids, billed=False, user_id=user_id)

    def mark_paid(
        self, user_id: str, entry_ids: Iterable[str], paid: bool = True
    ) -> BulkUpdateResult:
        """Record (or revoke) payment of billed entries."""
        ids = require_ids(entry_ids, "mark_paid")
        with LogContext(user_id=user_id, operation="mark_paid"):
            return self.store.set_paid_flag(ids, paid=paid, user_id=user_id)

    def update_rates(
        self,
        user_id: str,
        entry_ids: Iterable[str],
        rate: Union[Decimal, int, str],
    ) -> BulkUpdateResult:
        """Overwrite the rate of every selected entry, whatever its billing type."""
        ids = require_ids(entry_ids, "set_rate")
        with LogContext(user_id=user_id, operation="set_rate"):
            return self.store.set_rate(ids, rate, user_id=user_id)

    def update_entry_rate(
        self, user_id: str, entry_id: str, rate: Union[Decimal, int, str]
    ) -> TimeEntry:
        """
        Change the rate of one entry by re-saving the whole record.

        Raises:
            RecordNotFoundError: If the entry does not exist for the user
            pydantic.ValidationError: If the rate is invalid
        """
        with LogContext(user_id=user_id, operation="update_entry_rate"):
            entry = self._find_entry(user_id, entry_id)
            updated = TimeEntry.model_validate(
                {**entry.model_dump(), "hourly_rate": rate}
            )
            return self.store.save_entry(updated, user_id)

    def add_entry(
        self,
        user_id: str,
        entry: TimeEntry,
        profile: Optional[UserProfile] = None,
        trial_entry_limit: int = 15,
    ) -> TimeEntry:
        """
        Save a new entry if the user's plan allows it.

        Without a profile the ledger is single-tenant and nothing is gated.

        Raises:
            CapabilityError: If the plan does not allow another entry
        """
        with LogContext(user_id=user_id, operation="add_entry"):
            if profile is not None:
                count = len(self.store.list_entries(user_id))
                if not profile.can_add_entry(count, trial_entry_limit):
                    raise CapabilityError(
                        f"Plan '{profile.subscription_status.value}' does not allow "
                        f"adding entries ({count} already recorded)",
                        user_id=user_id,
                    )
            return self.store.save_entry(entry, user_id)

    def _find_entry(self, user_id: str, entry_id: str) -> TimeEntry:
        for entry in self.store.list_entries(user_id):
            if entry.id == entry_id:
                return entry
        raise RecordNotFoundError("entry", entry_id)


def filter_summary_ids(summary: BillingSummary, entry_ids: Optional[Iterable[str]]) -> List[str]:
    """Ids to act on: the given ones, or every entry of the summary."""
    if entry_ids:
        return list(entry_ids)
    return [entry.id for entry in summary.entries]
