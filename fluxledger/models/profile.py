"""User profile model and the capability gates derived from it.

The profile is not part of the numeric core; the core only asks it whether
the user may add another entry or open the reports.
"""

import datetime as dt
import math
from enum import Enum
from typing import Optional

from pydantic import Field, field_validator

from fluxledger.models.base import BaseDataModel, to_utc_datetime


class SubscriptionStatus(str, Enum):
    TRIAL = "trial"
    ACTIVE = "active"
    PRO = "pro"
    ELITE = "elite"
    EXPIRED = "expired"


class UserRole(str, Enum):
    ADMIN = "admin"
    USER = "user"


REPORT_STATUSES = {
    SubscriptionStatus.ACTIVE,
    SubscriptionStatus.PRO,
    SubscriptionStatus.ELITE,
}


class UserProfile(BaseDataModel):
    """Subscription and identity record of a user.

    Attributes:
        id: User id
        email: Login email
        full_name: Display name
        role: admin or user
        subscription_status: Current plan
        trial_ends_at: End of the free trial (UTC)
        is_approved: Account approved by an administrator

    Example:
        >>> profile = UserProfile(id="u-1", email="ing@studio.it")
        >>> profile.can_add_entry(current_count=15, limit=15)
        False
    """

    id: str = Field(..., min_length=1)
    email: str = Field(..., min_length=3)
    full_name: Optional[str] = None
    role: UserRole = UserRole.USER
    subscription_status: SubscriptionStatus = SubscriptionStatus.TRIAL
    trial_ends_at: Optional[dt.datetime] = None
    is_approved: bool = True

    @field_validator("trial_ends_at", mode="before")
    @classmethod
    def convert_epoch_millis(cls, v):
        return to_utc_datetime(v)

    @field_validator("trial_ends_at")
    @classmethod
    def normalize_to_utc(cls, v):
        return to_utc_datetime(v)

    @classmethod
    def start_trial(
        cls, user_id: str, email: str, trial_days: int, now: Optional[dt.datetime] = None
    ) -> "UserProfile":
        """Create a new trial profile ending ``trial_days`` from ``now``."""
        now = now or dt.datetime.now(dt.timezone.utc)
        return cls(
            id=user_id,
            email=email,
            subscription_status=SubscriptionStatus.TRIAL,
            trial_ends_at=now + dt.timedelta(days=trial_days),
        )

    @property
    def is_admin(self) -> bool:
        return self.role is UserRole.ADMIN

    def is_trial_expired(self, now: Optional[dt.datetime] = None) -> bool:
        """Whether the account has lost access because its plan ran out."""
        if self.subscription_status is SubscriptionStatus.EXPIRED:
            return True
        if self.subscription_status is not SubscriptionStatus.TRIAL:
            return False
        if self.trial_ends_at is None:
            return False
        now = to_utc_datetime(now or dt.datetime.now(dt.timezone.utc))
        return self.trial_ends_at < now

    def trial_days_left(self, now: Optional[dt.datetime] = None) -> int:
        """Whole days left in the trial, rounded up and floored at zero."""
        if self.trial_ends_at is None:
            return 0
        now = to_utc_datetime(now or dt.datetime.now(dt.timezone.utc))
        seconds = (self.trial_ends_at - now).total_seconds()
        return max(0, math.ceil(seconds / 86400))

    def can_add_entry(
        self, current_count: int, limit: int, now: Optional[dt.datetime] = None
    ) -> bool:
        """Whether the user may record another time entry.

        Args:
            current_count: Entries the user already has
            limit: Maximum entries for trial accounts
            now: Reference instant for the trial expiry check

        Returns:
            True if a new entry is allowed
        """
        if self.is_admin:
            return True
        if not self.is_approved or self.is_trial_expired(now):
            return False
        if self.subscription_status is SubscriptionStatus.TRIAL:
            return current_count < limit
        return True

    def can_access_reports(self) -> bool:
        """Reports and fiscal projections are reserved to paid plans."""
        return self.is_admin or (
            self.is_approved and self.subscription_status in REPORT_STATUSES
        )
