"""Case-record store interface for redaction audits."""

import asyncio
from abc import ABC, abstractmethod
from typing import List, Optional

from ..models.entities import AuditStatus, RedactionAudit

TEXT_SAMPLE_LENGTH = 500


def text_sample(text: Optional[str]) -> Optional[str]:
    """Bounded prefix of a text kept in the audit trail."""
    if text is None:
        return None
    return text[:TEXT_SAMPLE_LENGTH]


class BaseAuditStore(ABC):
    """Interface for the store that owns redaction audit rows.

    Rows are append-only apart from the manual review fields.
    """

    @abstractmethod
    def create_redaction_audit(self, record: RedactionAudit) -> int:
        """
        Persist a new audit row.

        Returns:
            The assigned audit id.

        Raises:
            PersistenceError: If the write fails.
        """

    @abstractmethod
    def get_redaction_audit_by_case_id(self, case_id: str) -> List[RedactionAudit]:
        """All audits of a case, newest first."""

    @abstractmethod
    def get_redaction_audit_by_attachment_id(self, attachment_id: int) -> Optional[RedactionAudit]:
        """Most recent audit of an attachment, or None."""

    @abstractmethod
    def update_redaction_audit_status(
        self,
        audit_id: int,
        status: AuditStatus,
        reviewed_by: Optional[str] = None,
        notes: Optional[str] = None,
    ) -> bool:
        """Record a manual review decision. Returns False if the id is unknown."""

    async def create_redaction_audit_async(self, record: RedactionAudit) -> int:
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(None, self.create_redaction_audit, record)

    async def get_redaction_audit_by_case_id_async(self, case_id: str) -> List[RedactionAudit]:
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(None, self.get_redaction_audit_by_case_id, case_id)
