"""Time entry data model for the ledger.

This module defines the TimeEntry model, which represents one unit of
billable work, together with its itemized expenses and the tagged billing
variant used by the earnings calculator.
"""

import datetime as dt
import uuid
from dataclasses import dataclass
from decimal import Decimal
from enum import Enum
from typing import List, Optional, Union

from pydantic import Field, field_validator, model_validator

from fluxledger.models.base import BaseDataModel, to_decimal, to_utc_datetime


def generate_id() -> str:
    """Generate a new opaque record identifier."""
    return str(uuid.uuid4())


class BillingType(str, Enum):
    """How an entry's rate is applied."""

    HOURLY = "hourly"
    DAILY = "daily"


@dataclass(frozen=True)
class HourlyBilling:
    """Rate multiplied by the worked hours."""

    rate: Decimal


@dataclass(frozen=True)
class DailyBilling:
    """Flat fee for the day, independent of duration."""

    flat_fee: Decimal


BillingMode = Union[HourlyBilling, DailyBilling]


class Expense(BaseDataModel):
    """An itemized extra cost attached to a time entry.

    Attributes:
        id: Expense identifier
        description: What the expense was for
        amount: Amount charged to the client
    """

    id: str = Field(default_factory=generate_id)
    description: str = ""
    amount: Decimal = Field(..., ge=0, description="Amount charged to the client")

    @field_validator("amount", mode="before")
    @classmethod
    def convert_to_decimal(cls, v):
        """Convert numeric values to Decimal for precision."""
        return to_decimal(v)


class TimeEntry(BaseDataModel):
    """Represents one unit of billable work.

    An entry is billed either hourly (duration × rate) or as a flat daily fee.
    Expenses are always added on top. The ``is_billed`` flag means the work
    has been invoiced, ``is_paid`` means the money has been received; an
    entry can only be paid once it is billed.

    Attributes:
        id: Unique identifier
        project_id: Weak reference to the owning project
        user_id: Owner of the record (set by the store)
        description: Free-text description of the work
        start_time: Start instant (UTC)
        end_time: End instant (UTC), None for whole-day entries
        duration: Worked seconds, authoritative for hourly billing
        hourly_rate: Hourly rate, or the flat fee for daily entries
        billing_type: hourly or daily
        expenses: Itemized expenses, always additive
        is_night_shift: Display-only classification flag
        activity_type_id: Optional work phase label
        is_billed: Entry has been invoiced
        is_paid: Invoice has been paid

    Example:
        >>> entry = TimeEntry(
        ...     project_id="p-1",
        ...     start_time=dt.datetime(2024, 3, 4, 8, 0, tzinfo=dt.timezone.utc),
        ...     duration=7200,
        ...     hourly_rate=Decimal("25"),
        ... )
        >>> entry.billing
        HourlyBilling(rate=Decimal('25'))
    """

    id: str = Field(default_factory=generate_id)
    project_id: str = Field(..., min_length=1, description="Owning project id")
    user_id: Optional[str] = None
    description: str = ""
    start_time: dt.datetime = Field(..., description="Start instant (UTC)")
    end_time: Optional[dt.datetime] = Field(None, description="End instant (UTC)")
    duration: int = Field(0, ge=0, description="Worked seconds")
    hourly_rate: Optional[Decimal] = Field(None, ge=0, description="Rate or daily fee")
    billing_type: BillingType = BillingType.HOURLY
    expenses: List[Expense] = Field(default_factory=list)
    is_night_shift: bool = False
    activity_type_id: Optional[str] = None
    is_billed: bool = False
    is_paid: bool = False

    @field_validator("hourly_rate", mode="before")
    @classmethod
    def convert_to_decimal(cls, v):
        """Convert numeric values to Decimal for precision."""
        return to_decimal(v)

    @field_validator("start_time", "end_time", mode="before")
    @classmethod
    def convert_epoch_millis(cls, v):
        """Accept milliseconds since the epoch as well as datetimes."""
        return to_utc_datetime(v)

    @field_validator("start_time", "end_time")
    @classmethod
    def normalize_to_utc(cls, v):
        """Store every instant as an aware UTC datetime."""
        return to_utc_datetime(v)

    @field_validator("billing_type", mode="before")
    @classmethod
    def default_billing_type(cls, v):
        """Treat a missing billing type as hourly."""
        return BillingType.HOURLY if v is None else v

    @model_validator(mode="after")
    def validate_lifecycle(self) -> "TimeEntry":
        """Validate timing and lifecycle rules.

        Validates:
        - end_time must not precede start_time
        - an entry cannot be paid before it is billed

        Returns:
            The validated model instance

        Raises:
            ValueError: If validation fails
        """
        if self.end_time is not None and self.end_time < self.start_time:
            raise ValueError(
                f"end_time ({self.end_time}) must not be before start_time "
                f"({self.start_time})"
            )
        if self.is_paid and not self.is_billed:
            raise ValueError("an entry cannot be marked paid before it is billed")
        return self

    @property
    def billing(self) -> BillingMode:
        """The tagged billing variant for this entry."""
        rate = self.hourly_rate or Decimal("0")
        if self.billing_type is BillingType.DAILY:
            return DailyBilling(flat_fee=rate)
        return HourlyBilling(rate=rate)

    @property
    def has_specific_time(self) -> bool:
        """False for whole-day entries recorded without times."""
        return self.end_time is not None
