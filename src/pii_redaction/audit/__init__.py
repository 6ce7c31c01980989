"""Case-record stores for redaction audits."""

from .base import TEXT_SAMPLE_LENGTH, BaseAuditStore, text_sample
from .memory_store import InMemoryAuditStore
from .sqlite_store import SQLiteAuditStore

__all__ = [
    "BaseAuditStore",
    "InMemoryAuditStore",
    "SQLiteAuditStore",
    "TEXT_SAMPLE_LENGTH",
    "text_sample",
]
