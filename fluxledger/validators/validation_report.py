"""Validation report for collecting and formatting data-quality issues."""

from dataclasses import dataclass
from enum import IntEnum
from typing import Any, Dict, List, Optional


class ValidationSeverity(IntEnum):
    """Severity levels for validation issues."""

    INFO = 1
    WARNING = 2
    ERROR = 3


@dataclass
class ValidationIssue:
    """A single issue found in the stored data.

    Attributes:
        severity: The severity level of the issue
        field: Dotted location of the issue (e.g. ``entries.is_paid``)
        message: Human-readable description of the issue
        value: The offending value
        context: Optional record context (collection, id, project)
    """

    severity: ValidationSeverity
    field: str
    message: str
    value: Any
    context: Optional[Dict[str, Any]] = None

    def __str__(self) -> str:
        context_str = ""
        if self.context:
            context_str = " ({})".format(
                ", ".join(f"{k}={v}" for k, v in self.context.items())
            )
        return f"[{self.severity.name}] {self.field}: {self.message}{context_str}"


class ValidationReport:
    """Collects validation issues across a whole data set.

    Example:
        >>> report = ValidationReport()
        >>> report.add_error("entries.is_paid", "Paid but not billed", True)
        >>> report.is_valid()
        False
        >>> report.summary()
        '1 error(s)'
    """

    def __init__(self) -> None:
        self.issues: List[ValidationIssue] = []

    def count(self, severity: ValidationSeverity) -> int:
        """Number of issues with exactly this severity."""
        return sum(1 for issue in self.issues if issue.severity == severity)

    @property
    def error_count(self) -> int:
        return self.count(ValidationSeverity.ERROR)

    @property
    def warning_count(self) -> int:
        return self.count(ValidationSeverity.WARNING)

    @property
    def info_count(self) -> int:
        return self.count(ValidationSeverity.INFO)

    def is_valid(self) -> bool:
        """True when there are no errors; warnings and info do not count."""
        return self.error_count == 0

    def add(
        self,
        severity: ValidationSeverity,
        field: str,
        message: str,
        value: Any,
        context: Optional[Dict[str, Any]] = None,
    ) -> None:
        """Append an issue of the given severity."""
        self.issues.append(
            ValidationIssue(
                severity=severity,
                field=field,
                message=message,
                value=value,
                context=dict(context) if context else None,
            )
        )

    def add_error(self, field: str, message: str, value: Any, context=None) -> None:
        self.add(ValidationSeverity.ERROR, field, message, value, context)

    def add_warning(self, field: str, message: str, value: Any, context=None) -> None:
        self.add(ValidationSeverity.WARNING, field, message, value, context)

    def add_info(self, field: str, message: str, value: Any, context=None) -> None:
        self.add(ValidationSeverity.INFO, field, message, value, context)

    def get_errors(self) -> List[ValidationIssue]:
        return self.at_severity(ValidationSeverity.ERROR)

    def get_warnings(self) -> List[ValidationIssue]:
        return self.at_severity(ValidationSeverity.WARNING)

    def at_severity(self, severity: ValidationSeverity) -> List[ValidationIssue]:
        """Issues with exactly this severity, in insertion order."""
        return [issue for issue in self.issues if issue.severity == severity]

    def at_least(self, severity: ValidationSeverity) -> List[ValidationIssue]:
        """Issues at or above a minimum severity, most severe first."""
        selected = [issue for issue in self.issues if issue.severity >= severity]
        return sorted(selected, key=lambda issue: issue.severity, reverse=True)

    def merge(self, other: "ValidationReport") -> None:
        """Append the issues of another report."""
        self.issues.extend(other.issues)

    def summary(self) -> str:
        """Counts per severity, e.g. ``2 error(s), 1 warning(s)``."""
        parts = []
        if self.error_count:
            parts.append(f"{self.error_count} error(s)")
        if self.warning_count:
            parts.append(f"{self.warning_count} warning(s)")
        if self.info_count:
            parts.append(f"{self.info_count} info message(s)")
        return ", ".join(parts) if parts else "No issues found"

    def format(self) -> str:
        """Multi-line rendering grouped by severity."""
        if not self.issues:
            return "Validation successful - no issues found"

        lines = [f"Validation Report - {self.summary()}", "=" * 60]
        for severity, heading in (
            (ValidationSeverity.ERROR, "ERRORS"),
            (ValidationSeverity.WARNING, "WARNINGS"),
            (ValidationSeverity.INFO, "INFO"),
        ):
            issues = self.at_severity(severity)
            if issues:
                lines.append(f"\n{heading}:")
                lines.extend(f"  - {issue}" for issue in issues)
        return "\n".join(lines)
