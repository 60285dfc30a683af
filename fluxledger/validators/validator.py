"""Main validator for a stored ledger document.

LedgerValidator runs the per-record checks on every entry row and the
data-set checks that need more than one row: duplicate ids and entries
pointing at projects that no longer exist.
"""

import logging
from collections import Counter
from typing import Any, Dict, List, Optional

from pydantic import ValidationError

from fluxledger.models.base import first_error
from fluxledger.models.entry import TimeEntry
from fluxledger.models.project import Project
from fluxledger.validators.record_validators import RecordValidators
from fluxledger.validators.validation_report import ValidationReport

logger = logging.getLogger(__name__)

Document = Dict[str, List[Dict[str, Any]]]


class LedgerValidator:
    """Validate a raw ledger document as returned by ``LedgerStore.read_document``.

    Example:
        >>> validator = LedgerValidator()
        >>> report = validator.validate_document(store.read_document(), user_id="local")
        >>> if not report.is_valid():
        ...     print(report.format())
    """

    ENTRY_CHECKS = (
        RecordValidators.validate_time_order,
        RecordValidators.validate_lifecycle,
        RecordValidators.validate_amounts,
        RecordValidators.validate_zero_value,
        RecordValidators.validate_night_shift,
    )

    def validate_document(
        self, document: Document, user_id: Optional[str] = None
    ) -> ValidationReport:
        """Validate entries and projects, optionally for one user only.

        Args:
            document: Raw collections keyed by name
            user_id: Restrict validation to this user's records

        Returns:
            ValidationReport with every issue found
        """
        entries = self._owned(document.get("entries", []), user_id)
        projects = self._owned(document.get("projects", []), user_id)

        report = ValidationReport()
        report.merge(self._validate_duplicates(entries, "entries"))
        report.merge(self._validate_duplicates(projects, "projects"))
        report.merge(self.validate_projects(projects))
        report.merge(self.validate_entries(entries, {p.get("id") for p in projects}))

        logger.info(f"Validated {len(entries)} entries, {len(projects)} projects: {report.summary()}")
        return report

    def validate_entries(
        self, records: List[Dict[str, Any]], project_ids: Optional[set] = None
    ) -> ValidationReport:
        """Validate entry rows, including project references when ids are given."""
        report = ValidationReport()

        for position, record in enumerate(records, start=1):
            context = {"entry": record.get("id", f"#{position}")}
            record_report = ValidationReport()
            for check in self.ENTRY_CHECKS:
                check(record, record_report, context)

            if project_ids is not None and record.get("project_id") not in project_ids:
                record_report.add_error(
                    "entries.project_id",
                    "Entry references a project that does not exist",
                    record.get("project_id"),
                    context,
                )

            # Model errors are only reported when no row check explained them.
            if record_report.is_valid():
                try:
                    TimeEntry.model_validate(record)
                except ValidationError as e:
                    record_report.add_error(
                        "entries", f"Invalid entry: {first_error(e)}", None, context
                    )

            report.merge(record_report)

        return report

    def validate_projects(self, records: List[Dict[str, Any]]) -> ValidationReport:
        """Validate project rows against the Project model."""
        report = ValidationReport()
        for position, record in enumerate(records, start=1):
            context = {"project": record.get("id", f"#{position}")}
            try:
                Project.model_validate(record)
            except ValidationError as e:
                report.add_error(
                    "projects", f"Invalid project: {first_error(e)}", record.get("name"), context
                )
        return report

    @staticmethod
    def _validate_duplicates(records: List[Dict[str, Any]], collection: str) -> ValidationReport:
        report = ValidationReport()
        counts = Counter(record.get("id") for record in records)
        for record_id, count in counts.items():
            if count > 1:
                report.add_error(
                    f"{collection}.id",
                    f"Id appears {count} times",
                    record_id,
                )
        return report

    @staticmethod
    def _owned(records: List[Dict[str, Any]], user_id: Optional[str]) -> List[Dict[str, Any]]:
        if user_id is None:
            return list(records)
        return [record for record in records if record.get("user_id") == user_id]
