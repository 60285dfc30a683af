"""Validation layer for stored ledger data quality."""

from fluxledger.validators.record_validators import RecordValidators
from fluxledger.validators.validation_report import (
    ValidationIssue,
    ValidationReport,
    ValidationSeverity,
)
from fluxledger.validators.validator import LedgerValidator

__all__ = [
    "LedgerValidator",
    "RecordValidators",
    "ValidationReport",
    "ValidationIssue",
    "ValidationSeverity",
]
