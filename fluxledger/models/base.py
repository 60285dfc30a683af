"""Base model for all data models in the ledger.

This module provides a base Pydantic model with common configuration
and the shared field converters used by the entity models.
"""

import datetime as dt
from decimal import Decimal, InvalidOperation
from typing import Any, Optional, Union

from pydantic import BaseModel, ConfigDict, ValidationError


class BaseDataModel(BaseModel):
    """Base class for all data models.

    Provides common configuration:
    - Validation with type checking
    - Validation on assignment, so in-place edits keep invariants
    - Unknown fields rejected
    - Arbitrary types support for dates, datetimes, decimals

    Example:
        >>> class Client(BaseDataModel):
        ...     name: str
        ...     rate: int
        >>> client = Client(name="Studio Rossi", rate=50)
        >>> client.model_dump()
        {'name': 'Studio Rossi', 'rate': 50}
    """

    model_config = ConfigDict(
        # Allow arbitrary types like Decimal, date, datetime
        arbitrary_types_allowed=True,
        # Validate on assignment to catch errors early
        validate_assignment=True,
        strict=False,
        extra="forbid",
        frozen=False,
    )


def to_decimal(v: Union[str, int, float, Decimal, None]) -> Optional[Decimal]:
    """Convert a numeric value to a finite Decimal.

    Args:
        v: The value to convert (None passes through)

    Returns:
        The value as a Decimal, or None

    Raises:
        ValueError: If the value is not a number or is NaN/infinite
    """
    if v is None:
        return None
    if isinstance(v, bool):
        raise ValueError(f"Cannot convert boolean {v} to Decimal")
    if isinstance(v, Decimal):
        result = v
    else:
        try:
            result = Decimal(str(v).strip())
        except (InvalidOperation, ValueError, TypeError) as e:
            raise ValueError(f"Cannot convert {v!r} to Decimal: {e}")
    if not result.is_finite():
        raise ValueError(f"{v!r} is not a finite number")
    return result


def to_utc_datetime(v: Any) -> Any:
    """Normalize timestamps to timezone-aware UTC datetimes.

    Integers and floats are read as milliseconds since the epoch, naive
    datetimes are assumed to be UTC. Other values are left for pydantic.
    """
    if v is None:
        return None
    if isinstance(v, bool):
        return v
    if isinstance(v, (int, float)):
        return dt.datetime.fromtimestamp(v / 1000, tz=dt.timezone.utc)
    if isinstance(v, dt.datetime):
        if v.tzinfo is None:
            return v.replace(tzinfo=dt.timezone.utc)
        return v.astimezone(dt.timezone.utc)
    return v


def first_error(error: ValidationError) -> str:
    """Short human-readable reason from a pydantic ValidationError."""
    details = error.errors()
    if not details:
        return str(error)
    message = details[0].get("msg", str(error))
    return message.removeprefix("Value error, ")
