"""In-process audit store for tests and single-process deployments."""

import dataclasses
import itertools
import threading
from datetime import datetime, timezone
from typing import Dict, List, Optional

from .base import BaseAuditStore
from ..models.entities import AuditStatus, RedactionAudit


class InMemoryAuditStore(BaseAuditStore):
    """Keep audit rows in a dict guarded by a lock."""

    def __init__(self):
        self._rows: Dict[int, RedactionAudit] = {}
        self._ids = itertools.count(1)
        self._lock = threading.Lock()

    def create_redaction_audit(self, record: RedactionAudit) -> int:
        with self._lock:
            audit_id = next(self._ids)
            self._rows[audit_id] = dataclasses.replace(
                record,
                id=audit_id,
                pii_types=list(record.pii_types),
                created_at=datetime.now(timezone.utc),
            )
        return audit_id

    def get_redaction_audit_by_case_id(self, case_id: str) -> List[RedactionAudit]:
        with self._lock:
            rows = [dataclasses.replace(r) for r in self._rows.values() if r.case_id == case_id]
        # Ids grow with creation time
        return sorted(rows, key=lambda r: r.id, reverse=True)

    def get_redaction_audit_by_attachment_id(self, attachment_id: int) -> Optional[RedactionAudit]:
        with self._lock:
            rows = [r for r in self._rows.values() if r.attachment_id == attachment_id]
            if not rows:
                return None
            return dataclasses.replace(max(rows, key=lambda r: r.id))

    def update_redaction_audit_status(
        self,
        audit_id: int,
        status: AuditStatus,
        reviewed_by: Optional[str] = None,
        notes: Optional[str] = None,
    ) -> bool:
        with self._lock:
            row = self._rows.get(audit_id)
            if row is None:
                return False
            self._rows[audit_id] = dataclasses.replace(
                row,
                status=status,
                reviewed_by=reviewed_by,
                review_notes=notes,
                reviewed_at=datetime.now(timezone.utc),
            )
        return True
