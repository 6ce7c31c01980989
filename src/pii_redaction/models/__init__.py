"""Data models for the PII redaction pipeline."""

from .entities import (
    AuditStatus,
    AuditSummary,
    CaseRedactionStatus,
    EntityOrigin,
    ExtractionMethod,
    ExtractionResult,
    ModelOrigin,
    PIIEntity,
    PIIType,
    RedactionAudit,
    RedactionResult,
    RedactionServiceResult,
    RegexOrigin,
    StoredObject,
)

__all__ = [
    "AuditStatus",
    "AuditSummary",
    "CaseRedactionStatus",
    "EntityOrigin",
    "ExtractionMethod",
    "ExtractionResult",
    "ModelOrigin",
    "PIIEntity",
    "PIIType",
    "RedactionAudit",
    "RedactionResult",
    "RedactionServiceResult",
    "RegexOrigin",
    "StoredObject",
]
