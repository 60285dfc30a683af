"""Data models for the ledger.

This package contains Pydantic models for all business entities:
- BaseDataModel: Base class with common configuration
- TimeEntry / Expense: Billable work and its itemized expenses
- Project / Shift / ActivityType: Clients and their presets
- BusinessExpense: Yearly overhead costs
- UserProfile: Subscription record and capability gates
"""

from fluxledger.models.base import BaseDataModel
from fluxledger.models.entry import (
    BillingMode,
    BillingType,
    DailyBilling,
    Expense,
    HourlyBilling,
    TimeEntry,
    generate_id,
)
from fluxledger.models.expense import BusinessExpense, ExpenseCategory
from fluxledger.models.profile import SubscriptionStatus, UserProfile, UserRole
from fluxledger.models.project import ActivityType, Project, Shift

__all__ = [
    "BaseDataModel",
    "BillingMode",
    "BillingType",
    "DailyBilling",
    "HourlyBilling",
    "Expense",
    "TimeEntry",
    "generate_id",
    "BusinessExpense",
    "ExpenseCategory",
    "SubscriptionStatus",
    "UserProfile",
    "UserRole",
    "ActivityType",
    "Project",
    "Shift",
]
