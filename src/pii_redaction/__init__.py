"""Case document PII detection and redaction pipeline."""

from .errors import (
    ExtractionError,
    ModelDetectionError,
    PersistenceError,
    PIIProcessingError,
    RedactionError,
    ValidationError,
)
from .factory import build_service
from .merger import merge_entities
from .models.entities import (
    AuditStatus,
    CaseRedactionStatus,
    ExtractionMethod,
    ExtractionResult,
    PIIEntity,
    PIIType,
    RedactionAudit,
    RedactionResult,
    RedactionServiceResult,
)
from .pipeline import PIIRedactionService
from .scoring import calculate_risk_score

__all__ = [
    "AuditStatus",
    "CaseRedactionStatus",
    "ExtractionError",
    "ExtractionMethod",
    "ExtractionResult",
    "ModelDetectionError",
    "PIIEntity",
    "PIIProcessingError",
    "PIIRedactionService",
    "PIIType",
    "PersistenceError",
    "RedactionAudit",
    "RedactionError",
    "RedactionResult",
    "RedactionServiceResult",
    "ValidationError",
    "build_service",
    "calculate_risk_score",
    "merge_entities",
]
