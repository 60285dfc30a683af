"""
JSON file store for entries, projects, business expenses and profiles.

This module is the persistence collaborator of the ledger core. Records are
kept in a single versioned JSON document written atomically (temp file +
rename), so an interrupted write never leaves a corrupted file behind.

Bulk updates are best-effort per id: ids that do not exist, or whose update
would violate a model invariant, are reported back as failed while the rest
are written in one go. Mutations never return records; callers re-query.
"""

import json
import logging
import os
import tempfile
import threading
from dataclasses import dataclass, field
from datetime import datetime, timezone
from decimal import Decimal
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional, Type, TypeVar, Union

from pydantic import ValidationError

from fluxledger.exceptions import RecordNotFoundError, StorageError, require_ids
from fluxledger.models.base import BaseDataModel, first_error, to_decimal
from fluxledger.models.entry import TimeEntry
from fluxledger.models.expense import BusinessExpense
from fluxledger.models.profile import UserProfile
from fluxledger.models.project import Project

logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT", bound=BaseDataModel)


@dataclass
class BulkUpdateResult:
    """Outcome of a bulk mutation.

    Attributes:
        operation: Name of the mutation
        updated_ids: Ids that were written
        failed_ids: Ids that were not written, mapped to the reason
    """

    operation: str
    updated_ids: List[str] = field(default_factory=list)
    failed_ids: Dict[str, str] = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        """True when every requested id was updated."""
        return not self.failed_ids


class LedgerStore:
    """
    JSON-backed persistence for a single-tenant ledger.

    File layout:
        {"version": "1.0", "last_updated": "...", "entries": [...],
         "projects": [...], "expenses": [...], "profiles": [...]}

    Example:
        >>> store = LedgerStore("data/fluxledger.json")
        >>> store.save_entry(entry, user_id="u-1")
        >>> store.set_billed_flag([entry.id], user_id="u-1").ok
        True
    """

    STORE_VERSION = "1.0"
    COLLECTIONS = ("entries", "projects", "expenses", "profiles")

    def __init__(self, data_file: Union[str, Path]):
        """
        Initialize the store.

        Args:
            data_file: Path of the JSON document (created on first write)
        """
        self.data_file = Path(data_file)
        self._lock = threading.Lock()
        logger.debug(f"LedgerStore initialized (data_file={self.data_file})")

    # ------------------------------------------------------------------ reads

    def list_entries(self, user_id: str) -> List[TimeEntry]:
        """All time entries of a user, in storage order."""
        return self._list(TimeEntry, "entries", user_id)

    def list_projects(self, user_id: str) -> List[Project]:
        """All projects of a user, in storage order."""
        return self._list(Project, "projects", user_id)

    def list_expenses(self, user_id: str, year: Optional[int] = None) -> List[BusinessExpense]:
        """Business expenses of a user, optionally restricted to one year."""
        expenses = self._list(BusinessExpense, "expenses", user_id)
        if year is not None:
            expenses = [e for e in expenses if e.date.year == year]
        return expenses

    def get_profile(self, user_id: str) -> UserProfile:
        """
        Load a user profile.

        Raises:
            RecordNotFoundError: If the user has no profile
        """
        with self._lock:
            data = self._load()
        for record in data["profiles"]:
            if record.get("id") == user_id:
                return self._parse(UserProfile, record)
        raise RecordNotFoundError("profile", user_id)

    def read_document(self) -> Dict[str, List[Dict[str, Any]]]:
        """Raw stored records of every collection, without model validation."""
        with self._lock:
            return self._load()

    # ----------------------------------------------------------------- writes

    def save_entry(self, entry: TimeEntry, user_id: str) -> TimeEntry:
        """Insert or replace an entry, assigning it to ``user_id``."""
        stored = entry.model_copy(update={"user_id": user_id})
        self._upsert("entries", stored)
        logger.info(f"Saved entry {stored.id}")
        return stored

    def save_project(self, project: Project, user_id: str) -> Project:
        """Insert or replace a project, assigning it to ``user_id``."""
        stored = project.model_copy(update={"user_id": user_id})
        self._upsert("projects", stored)
        logger.info(f"Saved project {stored.id} ({stored.name})")
        return stored

    def save_expense(self, expense: BusinessExpense, user_id: str) -> BusinessExpense:
        """Insert or replace a business expense, assigning it to ``user_id``."""
        stored = expense.model_copy(update={"user_id": user_id})
        self._upsert("expenses", stored)
        logger.info(f"Saved business expense {stored.id}")
        return stored

    def save_profile(self, profile: UserProfile) -> UserProfile:
        """Insert or replace a user profile."""
        self._upsert("profiles", profile)
        return profile

    def delete_entry(self, entry_id: str, user_id: str) -> None:
        """Delete an entry outright."""
        self._delete("entries", entry_id, user_id)

    def delete_project(self, project_id: str, user_id: str) -> None:
        """Delete a project. Its entries keep their (now dangling) reference."""
        self._delete("projects", project_id, user_id)

    def delete_expense(self, expense_id: str, user_id: str) -> None:
        """Delete a business expense."""
        self._delete("expenses", expense_id, user_id)

    # ---------------------------------------------------------- bulk updates

    def set_billed_flag(
        self, entry_ids: Iterable[str], billed: bool = True, user_id: Optional[str] = None
    ) -> BulkUpdateResult:
        """
        Mark entries as billed, or back to pending.

        Moving an entry back to pending also clears its paid flag.

        Args:
            entry_ids: Entries to update (must not be empty)
            billed: New value of the billed flag
            user_id: Restrict the update to this user's entries

        Returns:
            BulkUpdateResult with updated and failed ids

        Raises:
            EmptySelectionError: If no ids were given
        """
        updates: Dict[str, Any] = {"is_billed": billed}
        if not billed:
            updates["is_paid"] = False
        operation = "mark_billed" if billed else "mark_unbilled"
        return self._bulk_update(entry_ids, updates, operation, user_id)

    def set_paid_flag(
        self, entry_ids: Iterable[str], paid: bool = True, user_id: Optional[str] = None
    ) -> BulkUpdateResult:
        """
        Mark entries as paid or unpaid.

        Entries that are not billed cannot be marked paid and are reported
        as failed.
        """
        return self._bulk_update(
            entry_ids, {"is_paid": paid}, "mark_paid" if paid else "mark_unpaid", user_id
        )

    def set_rate(
        self,
        entry_ids: Iterable[str],
        rate: Union[Decimal, int, float, str],
        user_id: Optional[str] = None,
    ) -> BulkUpdateResult:
        """
        Overwrite the hourly rate (or daily fee) of entries.

        The rate is written as-is regardless of each entry's billing type.

        Raises:
            EmptySelectionError: If no ids were given
            ValueError: If the rate is not a finite, non-negative number
        """
        new_rate = to_decimal(rate)
        if new_rate is None or new_rate < 0:
            raise ValueError(f"Rate must be a non-negative number, got {rate!r}")
        return self._bulk_update(entry_ids, {"hourly_rate": new_rate}, "set_rate", user_id)

    # -------------------------------------------------------------- internals

    def _list(self, model: Type[ModelT], collection: str, user_id: str) -> List[ModelT]:
        """Parse a user's rows, skipping the ones that no longer validate.

        Skipped rows stay in the file untouched; validate-data reports them.
        """
        with self._lock:
            data = self._load()

        records: List[ModelT] = []
        skipped: List[str] = []
        for record in data[collection]:
            if record.get("user_id") != user_id:
                continue
            try:
                records.append(model.model_validate(record))
            except ValidationError as e:
                skipped.append(str(record.get("id")))
                logger.warning(
                    f"Skipping invalid {model.__name__} '{record.get('id')}': {first_error(e)}"
                )

        if skipped:
            logger.warning(
                f"{len(skipped)} invalid {collection} skipped; run validate-data for details"
            )
        return records

    def _parse(self, model: Type[ModelT], record: Dict[str, Any]) -> ModelT:
        try:
            return model.model_validate(record)
        except ValidationError as e:
            raise StorageError(
                f"Stored {model.__name__} '{record.get('id')}' is invalid: {e}"
            ) from e

    def _upsert(self, collection: str, record: BaseDataModel) -> None:
        serialized = record.model_dump(mode="json")
        with self._lock:
            data = self._load()
            records = data[collection]
            for i, existing in enumerate(records):
                if existing.get("id") == serialized["id"]:
                    records[i] = serialized
                    break
            else:
                records.append(serialized)
            self._save(data)

    def _delete(self, collection: str, record_id: str, user_id: str) -> None:
        with self._lock:
            data = self._load()
            records = data[collection]
            remaining = [
                r
                for r in records
                if not (r.get("id") == record_id and r.get("user_id") == user_id)
            ]
            if len(remaining) == len(records):
                raise RecordNotFoundError(collection.rstrip("s"), record_id)
            data[collection] = remaining
            self._save(data)
        logger.info(f"Deleted {collection.rstrip('s')} {record_id}")

    def _bulk_update(
        self,
        entry_ids: Iterable[str],
        updates: Dict[str, Any],
        operation: str,
        user_id: Optional[str],
    ) -> BulkUpdateResult:
        ids = require_ids(entry_ids, operation)
        result = BulkUpdateResult(operation=operation)

        with self._lock:
            data = self._load()
            index: Dict[str, int] = {
                r.get("id"): i
                for i, r in enumerate(data["entries"])
                if user_id is None or r.get("user_id") == user_id
            }

            for entry_id in ids:
                position = index.get(entry_id)
                if position is None:
                    result.failed_ids[entry_id] = "entry not found"
                    continue
                try:
                    updated = TimeEntry.model_validate(
                        {**data["entries"][position], **updates}
                    )
                except ValidationError as e:
                    result.failed_ids[entry_id] = first_error(e)
                    continue
                data["entries"][position] = updated.model_dump(mode="json")
                result.updated_ids.append(entry_id)

            if result.updated_ids:
                self._save(data)

        if result.failed_ids:
            logger.warning(
                f"{operation}: {len(result.updated_ids)} updated, "
                f"{len(result.failed_ids)} failed ({', '.join(result.failed_ids)})"
            )
        else:
            logger.info(f"{operation}: {len(result.updated_ids)} entries updated")
        return result

    def _load(self) -> Dict[str, List[Dict[str, Any]]]:
        """Read the whole document (caller holds the lock)."""
        empty: Dict[str, List[Dict[str, Any]]] = {name: [] for name in self.COLLECTIONS}
        if not self.data_file.exists():
            return empty

        try:
            with open(self.data_file, "r", encoding="utf-8") as f:
                raw = json.load(f)
        except json.JSONDecodeError as e:
            raise StorageError(f"Data file {self.data_file} is corrupted: {e}") from e
        except OSError as e:
            raise StorageError(f"Cannot read data file {self.data_file}: {e}") from e

        if not isinstance(raw, dict):
            raise StorageError(
                f"Data file {self.data_file} is not a ledger document "
                f"(expected a JSON object, got {type(raw).__name__})"
            )

        version = raw.get("version", "unknown")
        if version != self.STORE_VERSION:
            raise StorageError(
                f"Unsupported data file version {version} "
                f"(expected {self.STORE_VERSION})"
            )

        for name in self.COLLECTIONS:
            empty[name] = list(raw.get(name, []))
        return empty

    def _save(self, data: Dict[str, List[Dict[str, Any]]]) -> None:
        """Write the whole document atomically (caller holds the lock)."""
        document = {
            "version": self.STORE_VERSION,
            "last_updated": datetime.now(timezone.utc).isoformat(),
            **data,
        }

        try:
            self.data_file.parent.mkdir(parents=True, exist_ok=True)
            temp_fd, temp_path = tempfile.mkstemp(
                dir=self.data_file.parent, suffix=".tmp"
            )
        except OSError as e:
            raise StorageError(f"Cannot write data file {self.data_file}: {e}") from e

        try:
            with os.fdopen(temp_fd, "w", encoding="utf-8") as f:
                json.dump(document, f, indent=2)
            os.replace(temp_path, self.data_file)
        except OSError as e:
            try:
                os.unlink(temp_path)
            except FileNotFoundError:
                pass
            raise StorageError(f"Cannot write data file {self.data_file}: {e}") from e
