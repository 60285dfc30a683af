"""Project data models for the ledger.

This module defines the Project model (a client or work-site) together with
its named shift presets and activity labels.
"""

import datetime as dt
import re
from decimal import Decimal
from typing import List, Optional

from pydantic import Field, field_validator

from fluxledger.models.base import BaseDataModel, to_decimal
from fluxledger.models.entry import BillingType, TimeEntry, generate_id

_HHMM = re.compile(r"^([01]\d|2[0-3]):[0-5]\d$")


class Shift(BaseDataModel):
    """A named start/end time preset, e.g. "Turno mattina 06:00-14:00"."""

    id: str = Field(default_factory=generate_id)
    name: str = Field(..., min_length=1)
    start_time: str = Field(..., description="Start as HH:MM")
    end_time: str = Field(..., description="End as HH:MM")

    @field_validator("start_time", "end_time")
    @classmethod
    def validate_hhmm(cls, v: str, info) -> str:
        if not _HHMM.match(v):
            raise ValueError(f"{info.field_name} must be HH:MM, got {v!r}")
        return v


class ActivityType(BaseDataModel):
    """A free-form phase label for a project (e.g. "Sopralluogo")."""

    id: str = Field(default_factory=generate_id)
    name: str = Field(..., min_length=1)


class Project(BaseDataModel):
    """Represents a client or work-site.

    Projects own no entries; entries reference them weakly by id.

    Attributes:
        id: Unique identifier
        name: Client or site name
        color: Display color as #RRGGBB
        default_hourly_rate: Rate pre-filled on new entries
        default_billing_type: Billing type pre-filled on new entries
        shifts: Named start/end presets
        activity_types: Phase labels
        user_id: Owner of the record

    Example:
        >>> project = Project(name="Cantiere Via Roma", default_hourly_rate="45")
        >>> project.default_hourly_rate
        Decimal('45')
    """

    id: str = Field(default_factory=generate_id)
    name: str = Field(..., min_length=1, description="Client or site name")
    color: str = Field("#6366f1", description="Display color")
    default_hourly_rate: Decimal = Field(Decimal("0"), ge=0)
    default_billing_type: BillingType = BillingType.HOURLY
    shifts: List[Shift] = Field(default_factory=list)
    activity_types: List[ActivityType] = Field(default_factory=list)
    user_id: Optional[str] = None

    @field_validator("name")
    @classmethod
    def validate_not_empty(cls, v: str, info) -> str:
        """Validate that string fields are not empty or whitespace only.

        Raises:
            ValueError: If the value is empty or whitespace only
        """
        if not v or not v.strip():
            raise ValueError(f"{info.field_name} cannot be empty or whitespace")
        return v.strip()

    @field_validator("color")
    @classmethod
    def validate_color(cls, v: str) -> str:
        if not re.match(r"^#[0-9a-fA-F]{6}$", v):
            raise ValueError(f"color must be a #RRGGBB hex value, got {v!r}")
        return v.lower()

    @field_validator("default_hourly_rate", mode="before")
    @classmethod
    def convert_to_decimal(cls, v):
        """Convert numeric values to Decimal for precision."""
        return to_decimal(v)

    @field_validator("default_billing_type", mode="before")
    @classmethod
    def default_billing_type_when_missing(cls, v):
        return BillingType.HOURLY if v is None else v

    def new_entry(
        self,
        start_time: dt.datetime,
        end_time: Optional[dt.datetime] = None,
        description: str = "",
    ) -> TimeEntry:
        """Build an entry pre-filled with this project's defaults.

        Hourly entries take their duration from the start/end pair; daily
        entries without an end time are whole-day entries with zero duration.

        Args:
            start_time: Start instant
            end_time: End instant, or None for a whole-day entry
            description: Free-text description

        Returns:
            New unsaved TimeEntry
        """
        duration = 0
        if end_time is not None:
            if end_time < start_time:
                # shift crosses midnight
                end_time = end_time + dt.timedelta(days=1)
            duration = int((end_time - start_time).total_seconds())

        return TimeEntry(
            project_id=self.id,
            user_id=self.user_id,
            description=description,
            start_time=start_time,
            end_time=end_time,
            duration=duration,
            hourly_rate=self.default_hourly_rate,
            billing_type=self.default_billing_type,
        )
