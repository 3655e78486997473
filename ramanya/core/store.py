"""
Correction store - point lookups, status scans and single-record atomic writes.
Two backends: SQLite (default) and in-memory (development and tests).
"""

import json
import sqlite3
import threading
import uuid
from abc import ABC, abstractmethod
from datetime import datetime
from typing import Any, Dict, List, Optional

from .db import get_db, init_db
from .errors import NotFoundError, StoreError
from .schema import CorrectionRecord, STATUS_APPROVED, STATUS_PENDING, VALID_STATUSES
from util.logging import logger

# Fields a single-field update may touch
UPDATABLE_FIELDS = ('original', 'suggestion', 'context', 'embedding')

# Errors raised while turning a stored row back into a record
DECODE_ERRORS = (ValueError, TypeError)


def new_record_id() -> str:
    return uuid.uuid4().hex


class ICorrectionStore(ABC):
    """Abstract interface for correction persistence."""

    @abstractmethod
    def get(self, record_id: str) -> Optional[CorrectionRecord]:
        """Fetch one record by id, or None."""
        pass

    @abstractmethod
    def query_by_status(self, status: str) -> List[CorrectionRecord]:
        """Return all records with the given status, in store order."""
        pass

    @abstractmethod
    def create(self, record: CorrectionRecord) -> str:
        """Insert a record and return its id."""
        pass

    @abstractmethod
    def update_field(self, record_id: str, field_name: str, value: Any) -> None:
        """Atomically overwrite one field of one record."""
        pass

    @abstractmethod
    def delete(self, record_id: str) -> None:
        """Delete a record by id."""
        pass

    @abstractmethod
    def promote(self, record_id: str, approved_at: datetime) -> CorrectionRecord:
        """Replace a pending record with an approved copy in one atomic step."""
        pass

    @abstractmethod
    def count(self, status: str = None) -> int:
        """Count records, optionally restricted to one status."""
        pass


def _check_field(field_name: str):
    if field_name not in UPDATABLE_FIELDS:
        raise ValueError(f"Field '{field_name}' cannot be updated; allowed: {UPDATABLE_FIELDS}")


def _check_status(status: str):
    if status not in VALID_STATUSES:
        raise ValueError(f"status must be one of: {list(VALID_STATUSES)}")


def _decode_each(items, decode, status: str) -> List[CorrectionRecord]:
    """Decode rows one at a time; a row that cannot be decoded is logged and skipped."""
    records = []
    for item in items:
        try:
            records.append(decode(item))
        except DECODE_ERRORS as e:
            logger.log_operation("store.decode", "failed", {
                "status": status,
                "error": str(e)
            })
    return records


def _decode_embedding(raw: Optional[str]) -> Optional[List[float]]:
    if not raw:
        return None
    vector = json.loads(raw)
    if not isinstance(vector, list):
        raise TypeError(f"embedding must be a JSON array, got {type(vector).__name__}")
    return [float(x) for x in vector]


class SQLiteCorrectionStore(ICorrectionStore):
    """SQLite implementation. Each operation opens its own connection."""

    _COLUMNS = "id, original, suggestion, context, status, embedding, created_at, approved_at"

    def __init__(self, db_path: str = None):
        self.db_path = db_path
        init_db(db_path)

    def _row_to_record(self, row) -> CorrectionRecord:
        record_id, original, suggestion, context, status, embedding, created_at, approved_at = row
        return CorrectionRecord(
            id=record_id,
            original=original,
            suggestion=suggestion,
            context=context,
            status=status,
            embedding=_decode_embedding(embedding),
            created_at=datetime.fromisoformat(created_at),
            approved_at=datetime.fromisoformat(approved_at) if approved_at else None
        )

    def get(self, record_id: str) -> Optional[CorrectionRecord]:
        try:
            with get_db(self.db_path) as conn:
                cursor = conn.cursor()
                cursor.execute(f"SELECT {self._COLUMNS} FROM corrections WHERE id = ?", (record_id,))
                row = cursor.fetchone()
        except sqlite3.Error as e:
            raise StoreError(f"Failed to get correction '{record_id}': {e}") from e
        if not row:
            return None
        try:
            return self._row_to_record(row)
        except DECODE_ERRORS as e:
            raise StoreError(f"Correction '{record_id}' could not be decoded: {e}") from e

    def query_by_status(self, status: str) -> List[CorrectionRecord]:
        _check_status(status)
        try:
            with get_db(self.db_path) as conn:
                cursor = conn.cursor()
                cursor.execute(
                    f"SELECT {self._COLUMNS} FROM corrections WHERE status = ? ORDER BY rowid",
                    (status,)
                )
                rows = cursor.fetchall()
        except sqlite3.Error as e:
            raise StoreError(f"Failed to query corrections with status '{status}': {e}") from e
        return _decode_each(rows, self._row_to_record, status)

    def create(self, record: CorrectionRecord) -> str:
        _check_status(record.status)
        record_id = record.id or new_record_id()
        try:
            with get_db(self.db_path) as conn:
                self._insert(conn.cursor(), record, record_id)
                conn.commit()
        except sqlite3.Error as e:
            raise StoreError(f"Failed to create correction: {e}") from e
        record.id = record_id
        return record_id

    def _insert(self, cursor, record: CorrectionRecord, record_id: str):
        cursor.execute(
            f"INSERT INTO corrections ({self._COLUMNS}) VALUES (?, ?, ?, ?, ?, ?, ?, ?)",
            (
                record_id,
                record.original,
                record.suggestion,
                record.context,
                record.status,
                json.dumps(list(record.embedding)) if record.embedding is not None else None,
                record.created_at.isoformat(),
                record.approved_at.isoformat() if record.approved_at else None
            )
        )

    def update_field(self, record_id: str, field_name: str, value: Any) -> None:
        _check_field(field_name)
        if field_name == 'embedding' and value is not None:
            value = json.dumps([float(x) for x in value])
        try:
            with get_db(self.db_path) as conn:
                cursor = conn.cursor()
                cursor.execute(f"UPDATE corrections SET {field_name} = ? WHERE id = ?", (value, record_id))
                conn.commit()
                updated = cursor.rowcount
        except sqlite3.Error as e:
            raise StoreError(f"Failed to update '{field_name}' on correction '{record_id}': {e}") from e
        if updated == 0:
            raise NotFoundError(f"Correction '{record_id}' not found")

    def delete(self, record_id: str) -> None:
        try:
            with get_db(self.db_path) as conn:
                cursor = conn.cursor()
                cursor.execute("DELETE FROM corrections WHERE id = ?", (record_id,))
                conn.commit()
                deleted = cursor.rowcount
        except sqlite3.Error as e:
            raise StoreError(f"Failed to delete correction '{record_id}': {e}") from e
        if deleted == 0:
            raise NotFoundError(f"Correction '{record_id}' not found")

    def promote(self, record_id: str, approved_at: datetime) -> CorrectionRecord:
        try:
            with get_db(self.db_path) as conn:
                cursor = conn.cursor()
                cursor.execute(
                    f"SELECT {self._COLUMNS} FROM corrections WHERE id = ? AND status = ?",
                    (record_id, STATUS_PENDING)
                )
                row = cursor.fetchone()
                if not row:
                    raise NotFoundError(f"No pending correction with id '{record_id}'")

                pending = self._row_to_record(row)
                approved = CorrectionRecord(
                    id=new_record_id(),
                    original=pending.original,
                    suggestion=pending.suggestion,
                    context=pending.context,
                    status=STATUS_APPROVED,
                    embedding=pending.embedding,
                    created_at=pending.created_at,
                    approved_at=approved_at
                )

                # Insert and delete share one transaction
                self._insert(cursor, approved, approved.id)
                cursor.execute("DELETE FROM corrections WHERE id = ?", (record_id,))
                conn.commit()
        except (sqlite3.Error, ValueError, TypeError) as e:
            raise StoreError(f"Failed to approve correction '{record_id}': {e}") from e
        return approved

    def count(self, status: str = None) -> int:
        try:
            with get_db(self.db_path) as conn:
                cursor = conn.cursor()
                if status:
                    cursor.execute("SELECT COUNT(*) FROM corrections WHERE status = ?", (status,))
                else:
                    cursor.execute("SELECT COUNT(*) FROM corrections")
                return cursor.fetchone()[0]
        except sqlite3.Error as e:
            raise StoreError(f"Failed to count corrections: {e}") from e


class InMemoryCorrectionStore(ICorrectionStore):
    """In-memory implementation; insertion order is the store order."""

    def __init__(self):
        self._records: Dict[str, CorrectionRecord] = {}
        self._lock = threading.Lock()

    @staticmethod
    def _copy(record: CorrectionRecord) -> CorrectionRecord:
        return CorrectionRecord.from_dict(record.to_dict())

    def get(self, record_id: str) -> Optional[CorrectionRecord]:
        with self._lock:
            record = self._records.get(record_id)
            return self._copy(record) if record else None

    def query_by_status(self, status: str) -> List[CorrectionRecord]:
        _check_status(status)
        with self._lock:
            matching = [r for r in self._records.values() if r.status == status]
            return _decode_each(matching, self._copy, status)

    def create(self, record: CorrectionRecord) -> str:
        _check_status(record.status)
        record.id = record.id or new_record_id()
        with self._lock:
            self._records[record.id] = self._copy(record)
        return record.id

    def update_field(self, record_id: str, field_name: str, value: Any) -> None:
        _check_field(field_name)
        if field_name == 'embedding' and value is not None:
            value = [float(x) for x in value]
        with self._lock:
            record = self._records.get(record_id)
            if record is None:
                raise NotFoundError(f"Correction '{record_id}' not found")
            setattr(record, field_name, value)

    def delete(self, record_id: str) -> None:
        with self._lock:
            if record_id not in self._records:
                raise NotFoundError(f"Correction '{record_id}' not found")
            del self._records[record_id]

    def promote(self, record_id: str, approved_at: datetime) -> CorrectionRecord:
        with self._lock:
            pending = self._records.get(record_id)
            if pending is None or pending.status != STATUS_PENDING:
                raise NotFoundError(f"No pending correction with id '{record_id}'")

            approved = self._copy(pending)
            approved.id = new_record_id()
            approved.status = STATUS_APPROVED
            approved.approved_at = approved_at

            self._records[approved.id] = approved
            del self._records[record_id]
            return self._copy(approved)

    def count(self, status: str = None) -> int:
        with self._lock:
            if status:
                return sum(1 for r in self._records.values() if r.status == status)
            return len(self._records)


def get_correction_store(config) -> ICorrectionStore:
    """Get configured store implementation."""
    if config.store_backend == "memory":
        return InMemoryCorrectionStore()
    return SQLiteCorrectionStore(config.db_path)
