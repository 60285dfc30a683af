"""Unit tests for UserProfile capability gates."""

import datetime as dt

import pytest

from fluxledger.models.profile import SubscriptionStatus, UserProfile, UserRole

NOW = dt.datetime(2024, 3, 10, 12, tzinfo=dt.timezone.utc)


class TestUserProfile:
    """Test cases for UserProfile."""

    def test_start_trial(self):
        """Test a new trial ends trial_days after now."""
        profile = UserProfile.start_trial("u-1", "ing@studio.it", 60, now=NOW)

        assert profile.subscription_status is SubscriptionStatus.TRIAL
        assert profile.trial_ends_at == NOW + dt.timedelta(days=60)
        assert profile.trial_days_left(NOW) == 60

    def test_trial_days_left_rounds_up_and_floors(self):
        """Test partial days count as a whole day and past trials give zero."""
        profile = UserProfile(
            id="u-1", email="a@b.it", trial_ends_at=NOW + dt.timedelta(hours=30)
        )
        assert profile.trial_days_left(NOW) == 2
        assert profile.trial_days_left(NOW + dt.timedelta(days=5)) == 0

    def test_trial_expiry(self):
        """Test a trial past its end date is expired."""
        profile = UserProfile(
            id="u-1", email="a@b.it", trial_ends_at=NOW - dt.timedelta(days=1)
        )
        assert profile.is_trial_expired(NOW) is True

    def test_paid_plan_never_expires_by_date(self):
        """Test the trial date is ignored once the plan is paid."""
        profile = UserProfile(
            id="u-1",
            email="a@b.it",
            subscription_status=SubscriptionStatus.PRO,
            trial_ends_at=NOW - dt.timedelta(days=100),
        )
        assert profile.is_trial_expired(NOW) is False

    @pytest.mark.parametrize(
        "count,expected",
        [(0, True), (14, True), (15, False), (40, False)],
    )
    def test_trial_entry_limit(self, count, expected):
        """Test trial accounts stop at the entry limit."""
        profile = UserProfile(
            id="u-1", email="a@b.it", trial_ends_at=NOW + dt.timedelta(days=10)
        )
        assert profile.can_add_entry(count, limit=15, now=NOW) is expected

    def test_expired_or_unapproved_cannot_add(self):
        """Test expired plans and unapproved accounts cannot add entries."""
        expired = UserProfile(
            id="u-1", email="a@b.it", subscription_status=SubscriptionStatus.EXPIRED
        )
        unapproved = UserProfile(
            id="u-2",
            email="b@b.it",
            subscription_status=SubscriptionStatus.ACTIVE,
            is_approved=False,
        )
        assert expired.can_add_entry(0, limit=15, now=NOW) is False
        assert unapproved.can_add_entry(0, limit=15, now=NOW) is False

    def test_admin_bypasses_gates(self):
        """Test administrators are never limited."""
        admin = UserProfile(
            id="u-1",
            email="a@b.it",
            role=UserRole.ADMIN,
            subscription_status=SubscriptionStatus.EXPIRED,
        )
        assert admin.can_add_entry(1000, limit=15, now=NOW) is True
        assert admin.can_access_reports() is True

    @pytest.mark.parametrize(
        "status,expected",
        [
            (SubscriptionStatus.TRIAL, False),
            (SubscriptionStatus.ACTIVE, True),
            (SubscriptionStatus.PRO, True),
            (SubscriptionStatus.ELITE, True),
            (SubscriptionStatus.EXPIRED, False),
        ],
    )
    def test_report_access(self, status, expected):
        """Test reports are reserved to paid plans."""
        profile = UserProfile(id="u-1", email="a@b.it", subscription_status=status)
        assert profile.can_access_reports() is expected
