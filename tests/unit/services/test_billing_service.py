"""Unit tests for the billing service."""

import datetime as dt
from decimal import Decimal

import pytest
from pydantic import ValidationError

from fluxledger.aggregators.billing_aggregator import BillingQuery, BillingView
from fluxledger.exceptions import CapabilityError, EmptySelectionError, RecordNotFoundError
from fluxledger.models.entry import TimeEntry
from fluxledger.models.profile import SubscriptionStatus, UserProfile
from fluxledger.services.billing_service import BillingService, filter_summary_ids

USER = "test-user"


@pytest.fixture
def service(populated_store):
    return BillingService(populated_store)


def pending_query(**kwargs) -> BillingQuery:
    kwargs.setdefault("project_ids", {"p-rossi", "p-cantiere"})
    kwargs.setdefault("months", {"2024-03", "2024-04"})
    return BillingQuery(**kwargs)


class TestBillingService:
    """Test cases for BillingService."""

    def test_summarize(self, service):
        """Test the summary reads the store and aggregates."""
        summary = service.summarize(USER, pending_query())

        assert [e.id for e in summary.entries] == ["e-1", "e-2"]
        assert summary.base_total == Decimal("60") + Decimal("262.50")

    def test_mutation_then_requery(self, service):
        """Test mutations return only a result and a new summary reflects them."""
        before = service.summarize(USER, pending_query())
        result = service.mark_billed(USER, filter_summary_ids(before, None))

        assert result.updated_ids == ["e-1", "e-2"]
        assert [e.id for e in before.entries] == ["e-1", "e-2"]
        assert service.summarize(USER, pending_query()).is_empty

        billed = service.summarize(USER, pending_query(view=BillingView.BILLED))
        assert [e.id for e in billed.entries] == ["e-1", "e-2", "e-3"]

    def test_mark_paid_and_unbilled(self, service, populated_store):
        """Test paid and unbilled transitions through the service."""
        assert service.mark_paid(USER, ["e-3"]).ok
        assert service.mark_unbilled(USER, ["e-3"]).ok

        entry = {e.id: e for e in populated_store.list_entries(USER)}["e-3"]
        assert (entry.is_billed, entry.is_paid) == (False, False)

    @pytest.mark.parametrize(
        "operation", ["mark_billed", "mark_unbilled", "mark_paid"]
    )
    def test_empty_selection(self, service, operation):
        """Test every bulk mutation rejects an empty selection."""
        with pytest.raises(EmptySelectionError):
            getattr(service, operation)(USER, [])

    def test_update_rates(self, service, populated_store):
        """Test a bulk rate change."""
        assert service.update_rates(USER, ["e-1"], Decimal("50")).ok
        entry = {e.id: e for e in populated_store.list_entries(USER)}["e-1"]
        assert entry.hourly_rate == Decimal("50")

    def test_update_entry_rate(self, service):
        """Test the single-entry rate change re-saves the record."""
        updated = service.update_entry_rate(USER, "e-1", "60")
        assert updated.hourly_rate == Decimal("60")

        with pytest.raises(RecordNotFoundError):
            service.update_entry_rate(USER, "ghost", "60")
        with pytest.raises(ValidationError):
            service.update_entry_rate(USER, "e-1", "-3")

    def test_filter_summary_ids_prefers_explicit(self, service):
        """Test explicit ids win over the summary's entries."""
        summary = service.summarize(USER, pending_query())
        assert filter_summary_ids(summary, ["x"]) == ["x"]
        assert filter_summary_ids(summary, []) == ["e-1", "e-2"]


class TestAddEntry:
    """Test cases for the capability gate on new entries."""

    def test_trial_limit(self, service):
        """Test a trial user at the limit cannot add entries."""
        profile = UserProfile(
            id=USER,
            email="a@b.it",
            trial_ends_at=dt.datetime.now(dt.timezone.utc) + dt.timedelta(days=5),
        )
        entry = TimeEntry(project_id="p-rossi", start_time=0)

        with pytest.raises(CapabilityError, match="3 already recorded"):
            service.add_entry(USER, entry, profile, trial_entry_limit=3)

        saved = service.add_entry(USER, entry, profile, trial_entry_limit=15)
        assert saved.user_id == USER

    def test_paid_plan_unlimited(self, service):
        """Test paid plans are not limited."""
        profile = UserProfile(
            id=USER, email="a@b.it", subscription_status=SubscriptionStatus.PRO
        )
        entry = TimeEntry(project_id="p-rossi", start_time=0)
        assert service.add_entry(USER, entry, profile, trial_entry_limit=0).id == entry.id

    def test_no_profile_not_gated(self, service):
        """Test a single-tenant ledger without a profile always accepts entries."""
        entry = TimeEntry(project_id="p-rossi", start_time=0)

        saved = service.add_entry(USER, entry, trial_entry_limit=0)
        assert saved.id in {e.id for e in service.store.list_entries(USER)}
