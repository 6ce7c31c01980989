"""Data models for the case document PII redaction pipeline."""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import List, Optional, Union


class ExtractionMethod(str, Enum):
    """Technique used to obtain plain text from a source document."""

    PDF = "pdf"
    OCR = "ocr"
    WORD = "word"
    TEXT = "text"


class PIIType(str, Enum):
    """Known PII categories.

    Entities carry their type as a plain string so that categories reported
    by the language model outside this list are still redacted.
    """

    SSN = "SSN"
    PHONE = "PHONE"
    EMAIL = "EMAIL"
    CREDIT_CARD = "CREDIT_CARD"
    DRIVERS_LICENSE = "DRIVERS_LICENSE"
    PASSPORT = "PASSPORT"
    BANK_ACCOUNT = "BANK_ACCOUNT"
    IP_ADDRESS = "IP_ADDRESS"
    DOB = "DOB"
    MEDICAL_RECORD = "MEDICAL_RECORD"
    CASE_NUMBER = "CASE_NUMBER"
    NAME = "NAME"
    ADDRESS = "ADDRESS"
    MEDICAL = "MEDICAL"
    FINANCIAL = "FINANCIAL"


class AuditStatus(str, Enum):
    """Lifecycle status of a redaction audit row."""

    PENDING = "PENDING"
    PROCESSING = "PROCESSING"
    COMPLETED = "COMPLETED"
    FAILED = "FAILED"
    MANUAL_REVIEW = "MANUAL_REVIEW"


@dataclass
class ExtractionResult:
    """Text extracted from a single uploaded document."""

    text: str
    extraction_method: ExtractionMethod
    page_count: Optional[int] = None
    confidence: Optional[float] = None  # OCR engine confidence, 0-100
    language: Optional[str] = None


@dataclass(frozen=True)
class RegexOrigin:
    """Entity found by a named pattern rule."""

    rule_id: str

    @property
    def source(self) -> str:
        return "regex"


@dataclass(frozen=True)
class ModelOrigin:
    """Entity reported by the language model, with its unclamped confidence."""

    raw_confidence: float

    @property
    def source(self) -> str:
        return "model"


EntityOrigin = Union[RegexOrigin, ModelOrigin]


@dataclass(frozen=True)
class PIIEntity:
    """A detected PII span in the extracted text (half-open offsets)."""

    type: str
    value: str
    start: int
    end: int
    confidence: float
    origin: EntityOrigin

    @property
    def source(self) -> str:
        return self.origin.source

    @property
    def length(self) -> int:
        return self.end - self.start

    def overlaps(self, other: "PIIEntity") -> bool:
        return not (self.end <= other.start or other.end <= self.start)

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        return {
            "type": self.type,
            "value": self.value,
            "start": self.start,
            "end": self.end,
            "confidence": self.confidence,
            "source": self.source,
        }


@dataclass
class RedactionResult:
    """Output of redacting one text with a merged entity list."""

    original_text: str
    redacted_text: str
    entities: List[PIIEntity]
    redaction_count: int
    redaction_percentage: int


@dataclass
class StoredObject:
    """Reply of the storage collaborator after a successful write."""

    key: str
    url: str


@dataclass
class RedactionAudit:
    """Durable record of one pipeline invocation."""

    attachment_id: int
    case_id: str
    pii_detected: int = 0
    pii_redacted: int = 0
    risk_score: int = 0
    pii_types: List[str] = field(default_factory=list)
    original_text_sample: Optional[str] = None
    redacted_text_sample: Optional[str] = None
    extraction_method: Optional[str] = None
    processing_time_ms: Optional[int] = None
    status: AuditStatus = AuditStatus.PENDING
    # Assigned by the case-record store
    id: Optional[int] = None
    created_at: Optional[datetime] = None
    # Manual review
    reviewed_by: Optional[str] = None
    review_notes: Optional[str] = None
    reviewed_at: Optional[datetime] = None

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        return {
            "id": self.id,
            "attachment_id": self.attachment_id,
            "case_id": self.case_id,
            "pii_detected": self.pii_detected,
            "pii_redacted": self.pii_redacted,
            "risk_score": self.risk_score,
            "pii_types": list(self.pii_types),
            "original_text_sample": self.original_text_sample,
            "redacted_text_sample": self.redacted_text_sample,
            "extraction_method": self.extraction_method,
            "processing_time_ms": self.processing_time_ms,
            "status": self.status.value,
            "created_at": self.created_at.isoformat() if self.created_at else None,
            "reviewed_by": self.reviewed_by,
            "review_notes": self.review_notes,
            "reviewed_at": self.reviewed_at.isoformat() if self.reviewed_at else None,
        }


@dataclass
class RedactionServiceResult:
    """Result returned to the surrounding application for one document."""

    success: bool
    original_file_name: str
    file_name: str
    storage_key: str
    storage_url: str
    pii_detected: int
    pii_redacted: int
    risk_score: int
    pii_types: List[str]
    processing_time_ms: int
    requires_manual_review: bool
    audit_id: Optional[int] = None

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        return {
            "success": self.success,
            "original_file_name": self.original_file_name,
            "file_name": self.file_name,
            "storage_key": self.storage_key,
            "storage_url": self.storage_url,
            "pii_detected": self.pii_detected,
            "pii_redacted": self.pii_redacted,
            "risk_score": self.risk_score,
            "pii_types": list(self.pii_types),
            "processing_time_ms": self.processing_time_ms,
            "requires_manual_review": self.requires_manual_review,
            "audit_id": self.audit_id,
        }


@dataclass
class AuditSummary:
    """Condensed audit row for case status listings."""

    id: Optional[int]
    attachment_id: int
    status: AuditStatus
    pii_detected: int
    risk_score: int
    created_at: Optional[datetime]

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "attachment_id": self.attachment_id,
            "status": self.status.value,
            "pii_detected": self.pii_detected,
            "risk_score": self.risk_score,
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }


@dataclass
class CaseRedactionStatus:
    """Aggregate redaction status across all documents of a case."""

    case_id: str
    documents_processed: int = 0
    total_pii_detected: int = 0
    total_pii_redacted: int = 0
    average_risk_score: int = 0
    requires_review: bool = False
    audits: List[AuditSummary] = field(default_factory=list)

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        return {
            "case_id": self.case_id,
            "documents_processed": self.documents_processed,
            "total_pii_detected": self.total_pii_detected,
            "total_pii_redacted": self.total_pii_redacted,
            "average_risk_score": self.average_risk_score,
            "requires_review": self.requires_review,
            "audits": [a.to_dict() for a in self.audits],
        }
