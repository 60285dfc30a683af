"""Exception hierarchy for the ledger core.

All errors raised by the store, the billing service and the capability gates
derive from FluxLedgerError so callers can catch them in one place. Pydantic
ValidationError is left untouched for bad input at the model boundary.
"""

from typing import Iterable, Optional


class FluxLedgerError(Exception):
    """Base class for all ledger errors."""

    code: str = "FLUXLEDGER_ERROR"


class StorageError(FluxLedgerError):
    """Raised when the persistence backend cannot be read or written."""

    code = "STORAGE_ERROR"


class RecordNotFoundError(StorageError):
    """Raised when a record id does not exist for the requested user."""

    code = "RECORD_NOT_FOUND"

    def __init__(self, kind: str, record_id: str):
        self.kind = kind
        self.record_id = record_id
        super().__init__(f"{kind} '{record_id}' not found")


class EmptySelectionError(FluxLedgerError, ValueError):
    """Raised when a bulk mutation is requested with no entry ids."""

    code = "EMPTY_SELECTION"

    def __init__(self, operation: str):
        self.operation = operation
        super().__init__(f"{operation} requires at least one entry id")


class CapabilityError(FluxLedgerError):
    """Raised when the user's subscription does not allow an operation."""

    code = "CAPABILITY_DENIED"

    def __init__(self, message: str, user_id: Optional[str] = None):
        self.user_id = user_id
        super().__init__(message)


def require_ids(entry_ids: Iterable[str], operation: str) -> list:
    """Return entry ids as a de-duplicated list, rejecting an empty selection.

    Args:
        entry_ids: Ids supplied by the caller
        operation: Operation name used in the error message

    Returns:
        List of unique ids preserving the caller's order

    Raises:
        EmptySelectionError: If no ids were given
    """
    unique = list(dict.fromkeys(entry_ids or []))
    if not unique:
        raise EmptySelectionError(operation)
    return unique
