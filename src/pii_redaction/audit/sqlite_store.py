"""Persistent audit store backed by SQLite.

Usage:
    store = SQLiteAuditStore("~/.pii-redaction/audit.db")
    audit_id = store.create_redaction_audit(record)
"""

import json
import logging
import sqlite3
import threading
from datetime import datetime, timezone
from pathlib import Path
from typing import List, Optional, Union

from .base import BaseAuditStore
from ..errors import PersistenceError
from ..models.entities import AuditStatus, RedactionAudit

logger = logging.getLogger(__name__)

_SCHEMA = """
CREATE TABLE IF NOT EXISTS redaction_audit (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    attachment_id INTEGER NOT NULL,
    case_id TEXT NOT NULL,
    pii_detected INTEGER NOT NULL DEFAULT 0,
    pii_redacted INTEGER NOT NULL DEFAULT 0,
    risk_score INTEGER NOT NULL DEFAULT 0,
    pii_types TEXT,
    original_text_sample TEXT,
    redacted_text_sample TEXT,
    extraction_method TEXT,
    processing_time_ms INTEGER,
    status TEXT NOT NULL DEFAULT 'PENDING',
    reviewed_by TEXT,
    review_notes TEXT,
    reviewed_at TEXT,
    created_at TEXT NOT NULL
);
CREATE INDEX IF NOT EXISTS idx_redaction_audit_case
    ON redaction_audit(case_id);
CREATE INDEX IF NOT EXISTS idx_redaction_audit_attachment
    ON redaction_audit(attachment_id);
"""

_COLUMNS = (
    "id, attachment_id, case_id, pii_detected, pii_redacted, risk_score, pii_types, "
    "original_text_sample, redacted_text_sample, extraction_method, processing_time_ms, "
    "status, reviewed_by, review_notes, reviewed_at, created_at"
)


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


def _parse_time(value: Optional[str]) -> Optional[datetime]:
    return datetime.fromisoformat(value) if value else None


class SQLiteAuditStore(BaseAuditStore):
    """Audit rows in a single SQLite table; ``pii_types`` is a JSON array."""

    def __init__(self, db_path: Union[str, Path] = "audit.db"):
        db_path = Path(db_path).expanduser()
        db_path.parent.mkdir(parents=True, exist_ok=True)
        self._db = sqlite3.connect(str(db_path), check_same_thread=False)
        self._db.executescript(_SCHEMA)
        self._lock = threading.Lock()

    def create_redaction_audit(self, record: RedactionAudit) -> int:
        try:
            with self._lock, self._db:
                cursor = self._db.execute(
                    "INSERT INTO redaction_audit (attachment_id, case_id, pii_detected, "
                    "pii_redacted, risk_score, pii_types, original_text_sample, "
                    "redacted_text_sample, extraction_method, processing_time_ms, status, "
                    "created_at) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)",
                    (
                        record.attachment_id,
                        record.case_id,
                        record.pii_detected,
                        record.pii_redacted,
                        record.risk_score,
                        json.dumps(list(record.pii_types)),
                        record.original_text_sample,
                        record.redacted_text_sample,
                        record.extraction_method,
                        record.processing_time_ms,
                        record.status.value,
                        _now(),
                    ),
                )
                return cursor.lastrowid
        except sqlite3.Error as e:
            logger.error("Failed to create redaction audit: %s", e)
            raise PersistenceError("Failed to create redaction audit") from e

    def get_redaction_audit_by_case_id(self, case_id: str) -> List[RedactionAudit]:
        with self._lock:
            rows = self._db.execute(
                f"SELECT {_COLUMNS} FROM redaction_audit WHERE case_id = ? ORDER BY id DESC",
                (case_id,),
            ).fetchall()
        return [self._to_record(row) for row in rows]

    def get_redaction_audit_by_attachment_id(self, attachment_id: int) -> Optional[RedactionAudit]:
        with self._lock:
            row = self._db.execute(
                f"SELECT {_COLUMNS} FROM redaction_audit WHERE attachment_id = ? "
                "ORDER BY id DESC LIMIT 1",
                (attachment_id,),
            ).fetchone()
        return self._to_record(row) if row else None

    def update_redaction_audit_status(
        self,
        audit_id: int,
        status: AuditStatus,
        reviewed_by: Optional[str] = None,
        notes: Optional[str] = None,
    ) -> bool:
        try:
            with self._lock, self._db:
                cursor = self._db.execute(
                    "UPDATE redaction_audit SET status = ?, reviewed_by = ?, review_notes = ?, "
                    "reviewed_at = ? WHERE id = ?",
                    (status.value, reviewed_by, notes, _now(), audit_id),
                )
        except sqlite3.Error as e:
            logger.error("Failed to update redaction audit %d: %s", audit_id, e)
            raise PersistenceError("Failed to update redaction audit") from e
        return cursor.rowcount > 0

    def close(self) -> None:
        self._db.close()

    @staticmethod
    def _to_record(row: tuple) -> RedactionAudit:
        (
            audit_id, attachment_id, case_id, pii_detected, pii_redacted, risk_score,
            pii_types, original_sample, redacted_sample, extraction_method,
            processing_time_ms, status, reviewed_by, review_notes, reviewed_at, created_at,
        ) = row
        return RedactionAudit(
            id=audit_id,
            attachment_id=attachment_id,
            case_id=case_id,
            pii_detected=pii_detected,
            pii_redacted=pii_redacted,
            risk_score=risk_score,
            pii_types=json.loads(pii_types) if pii_types else [],
            original_text_sample=original_sample,
            redacted_text_sample=redacted_sample,
            extraction_method=extraction_method,
            processing_time_ms=processing_time_ms,
            status=AuditStatus(status),
            reviewed_by=reviewed_by,
            review_notes=review_notes,
            reviewed_at=_parse_time(reviewed_at),
            created_at=_parse_time(created_at),
        )
