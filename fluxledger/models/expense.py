"""Business expense model.

Yearly overhead costs of the practice (software, insurance, transport...)
that the fiscal projection subtracts from net income.
"""

import datetime as dt
from decimal import Decimal
from enum import Enum
from typing import Optional

from pydantic import Field, field_validator

from fluxledger.models.base import BaseDataModel, to_decimal
from fluxledger.models.entry import generate_id


class ExpenseCategory(str, Enum):
    """Overhead categories shown in the expense breakdown."""

    SOFTWARE = "Software"
    ORDINE_ASSICURAZIONE = "Ordine/Assicurazione"
    AUTO_TRASPORTI = "Auto/Trasporti"
    STUDIO_UTENZE = "Studio/Utenze"
    ALTRO = "Altro"


class BusinessExpense(BaseDataModel):
    """Represents one overhead cost of the practice.

    Attributes:
        id: Unique identifier
        user_id: Owner of the record
        description: What was bought
        amount: Cost in currency units
        category: Overhead category
        date: Date the cost was incurred
        is_recurring: Whether the cost repeats every year
    """

    id: str = Field(default_factory=generate_id)
    user_id: Optional[str] = None
    description: str = ""
    amount: Decimal = Field(..., ge=0, description="Cost in currency units")
    category: ExpenseCategory = ExpenseCategory.ALTRO
    date: dt.date = Field(..., description="Date the cost was incurred")
    is_recurring: bool = False

    @field_validator("amount", mode="before")
    @classmethod
    def convert_to_decimal(cls, v):
        """Convert numeric values to Decimal for precision."""
        return to_decimal(v)
