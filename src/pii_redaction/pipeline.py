"""Main PII redaction pipeline orchestrator."""

import asyncio
import logging
import time
from pathlib import PurePath
from typing import List, Optional

import filetype
import structlog

from .audit.base import BaseAuditStore, text_sample
from .detectors.base import BaseDetector
from .errors import PIIProcessingError, ValidationError
from .extractors.router import DocumentExtractor
from .merger import merge_entities, sanitize_spans
from .models.entities import (
    AuditStatus,
    AuditSummary,
    CaseRedactionStatus,
    PIIEntity,
    RedactionAudit,
    RedactionServiceResult,
)
from .redactors.base import BaseRedactor
from .redactors.text_redactor import round_half_up
from .scoring import calculate_risk_score
from .storage.base import BaseStorage, case_storage_key, generate_secure_file_name

logger = logging.getLogger(__name__)

# Fixed review policy
REVIEW_RISK_THRESHOLD = 70
REVIEW_ENTITY_THRESHOLD = 10

REDACTED_MIME_TYPE = "text/plain"

_GENERIC_MIME_TYPES = {"application/octet-stream", "binary/octet-stream"}
_EXECUTABLE_MIME_TYPES = {"application/x-msdownload", "application/x-executable"}
_PE_MIME_TYPE = "application/x-msdownload"
_PE_OFFSET_FIELD = 0x3C


def requires_manual_review(risk_score: int, pii_detected: int) -> bool:
    return risk_score > REVIEW_RISK_THRESHOLD or pii_detected > REVIEW_ENTITY_THRESHOLD


def _has_pe_header(data: bytes) -> bool:
    """True when the DOS header points at a `PE\\0\\0` signature."""
    if len(data) < _PE_OFFSET_FIELD + 4:
        return False
    offset = int.from_bytes(data[_PE_OFFSET_FIELD:_PE_OFFSET_FIELD + 4], "little")
    return bytes(data[offset:offset + 4]) == b"PE\x00\x00"


def _elapsed_ms(start: float) -> int:
    return int((time.perf_counter() - start) * 1000)


class PIIRedactionService:
    """Orchestrates extract -> detect -> merge -> redact/score -> persist.

    Every collaborator is injected; the service holds no per-document state,
    so one instance can process many documents concurrently.
    """

    def __init__(
        self,
        extractor: DocumentExtractor,
        pattern_detector: BaseDetector,
        redactor: BaseRedactor,
        storage: BaseStorage,
        audit_store: BaseAuditStore,
        model_detector: Optional[BaseDetector] = None,
        max_file_size_bytes: Optional[int] = None,
    ):
        self.extractor = extractor
        self.pattern_detector = pattern_detector
        self.model_detector = model_detector
        self.redactor = redactor
        self.storage = storage
        self.audit_store = audit_store
        self.max_file_size_bytes = max_file_size_bytes

    async def process_document_for_pii(
        self,
        data: bytes,
        file_name: str,
        mime_type: str,
        case_id: str,
        submission_id: int,
    ) -> RedactionServiceResult:
        """Run the full pipeline for one uploaded document.

        Raises:
            ValidationError: Unusable input; nothing is processed or audited.
            PIIProcessingError: Any later failure, after a best-effort
                ``FAILED`` audit row has been written.
        """
        mime_type = self._validate(data, file_name, mime_type, case_id)
        start = time.perf_counter()

        with structlog.contextvars.bound_contextvars(case_id=case_id, submission_id=submission_id):
            try:
                return await self._process(data, file_name, mime_type, case_id, submission_id, start)
            except Exception as e:
                logger.error("PII processing failed: %s", type(e).__name__)
                logger.debug("PII processing failure detail", exc_info=True)
                await self._record_failure(case_id, submission_id, _elapsed_ms(start))
                raise PIIProcessingError(PIIProcessingError.PROCESS_FAILED) from e

    def process_document_for_pii_sync(
        self,
        data: bytes,
        file_name: str,
        mime_type: str,
        case_id: str,
        submission_id: int,
    ) -> RedactionServiceResult:
        """Synchronous entry point for callers without an event loop."""
        return asyncio.run(
            self.process_document_for_pii(data, file_name, mime_type, case_id, submission_id)
        )

    async def _process(
        self,
        data: bytes,
        file_name: str,
        mime_type: str,
        case_id: str,
        submission_id: int,
        start: float,
    ) -> RedactionServiceResult:
        loop = asyncio.get_running_loop()

        logger.info("Extracting text from document (%s)", mime_type)
        extraction = await loop.run_in_executor(
            None, self.extractor.extract, data, mime_type, file_name
        )
        text = extraction.text
        logger.info("Extracted %d characters via %s", len(text), extraction.extraction_method.value)

        logger.info("Detecting PII...")
        entities = await self.detect(text)
        pii_types = list(dict.fromkeys(e.type for e in entities))

        redaction = self.redactor.redact(text, entities)
        risk_score = calculate_risk_score(entities)
        pii_detected = len(entities)
        pii_redacted = redaction.redaction_count
        review = requires_manual_review(risk_score, pii_detected)
        logger.info(
            "Found %d PII entities (%s), risk score %d",
            pii_detected, ", ".join(pii_types) or "none", risk_score,
        )

        stored_name = generate_secure_file_name(
            f"redacted-{PurePath(file_name).stem}.txt", case_id
        )
        stored = await self.storage.put_async(
            case_storage_key(case_id, stored_name),
            redaction.redacted_text.encode("utf-8"),
            REDACTED_MIME_TYPE,
        )

        processing_time_ms = _elapsed_ms(start)
        audit_id = await self.audit_store.create_redaction_audit_async(
            RedactionAudit(
                attachment_id=submission_id,
                case_id=case_id,
                pii_detected=pii_detected,
                pii_redacted=pii_redacted,
                risk_score=risk_score,
                pii_types=pii_types,
                original_text_sample=text_sample(text),
                redacted_text_sample=text_sample(redaction.redacted_text),
                extraction_method=extraction.extraction_method.value,
                processing_time_ms=processing_time_ms,
                status=AuditStatus.MANUAL_REVIEW if review else AuditStatus.COMPLETED,
            )
        )

        logger.info(
            "Processing complete: %d PII entities found, %d redacted in %dms",
            pii_detected, pii_redacted, processing_time_ms,
        )
        return RedactionServiceResult(
            success=True,
            original_file_name=file_name,
            file_name=stored_name,
            storage_key=stored.key,
            storage_url=stored.url,
            pii_detected=pii_detected,
            pii_redacted=pii_redacted,
            risk_score=risk_score,
            pii_types=pii_types,
            processing_time_ms=processing_time_ms,
            requires_manual_review=review,
            audit_id=audit_id,
        )

    async def detect(self, text: str) -> List[PIIEntity]:
        """Run both detectors concurrently and merge their findings.

        A model detector failure is logged and ignored; a pattern detector
        failure propagates.
        """
        if self.model_detector is None:
            model_entities: List[PIIEntity] = []
            pattern_entities = await self.pattern_detector.detect_async(text)
        else:
            pattern_entities, model_result = await asyncio.gather(
                self.pattern_detector.detect_async(text),
                self.model_detector.detect_async(text),
                return_exceptions=True,
            )
            if isinstance(pattern_entities, BaseException):
                raise pattern_entities
            if isinstance(model_result, BaseException):
                logger.warning("Model detector raised, using pattern results only: %s", model_result)
                model_entities = []
            else:
                model_entities = model_result

        logger.info("Pattern rules: %d matches, model: %d entities", len(pattern_entities), len(model_entities))
        combined = sanitize_spans(pattern_entities + model_entities, len(text))
        return merge_entities(combined)

    async def get_case_redaction_status(self, case_id: str) -> CaseRedactionStatus:
        """Aggregate the audit trail of a case."""
        try:
            audits = await self.audit_store.get_redaction_audit_by_case_id_async(case_id)
        except Exception as e:
            logger.exception("Get redaction status failed for case %s", case_id)
            raise PIIProcessingError(PIIProcessingError.STATUS_FAILED) from e

        if not audits:
            return CaseRedactionStatus(case_id=case_id)

        return CaseRedactionStatus(
            case_id=case_id,
            documents_processed=len(audits),
            total_pii_detected=sum(a.pii_detected for a in audits),
            total_pii_redacted=sum(a.pii_redacted for a in audits),
            average_risk_score=round_half_up(sum(a.risk_score for a in audits) / len(audits)),
            requires_review=any(a.status == AuditStatus.MANUAL_REVIEW for a in audits),
            audits=[
                AuditSummary(
                    id=a.id,
                    attachment_id=a.attachment_id,
                    status=a.status,
                    pii_detected=a.pii_detected,
                    risk_score=a.risk_score,
                    created_at=a.created_at,
                )
                for a in audits
            ],
        )

    async def review_audit(
        self,
        audit_id: int,
        status: AuditStatus,
        reviewed_by: str,
        notes: Optional[str] = None,
    ) -> bool:
        """Record a reviewer's decision on an audit. Returns False for an unknown id."""
        loop = asyncio.get_running_loop()
        try:
            return await loop.run_in_executor(
                None, self.audit_store.update_redaction_audit_status, audit_id, status, reviewed_by, notes
            )
        except Exception as e:
            logger.exception("Updating redaction audit %d failed", audit_id)
            raise PIIProcessingError(PIIProcessingError.REVIEW_FAILED) from e

    def _validate(self, data: bytes, file_name: str, mime_type: str, case_id: str) -> str:
        """Check the input and return the effective MIME type.

        Generic octet-stream types are refined by sniffing the content.
        """
        if not isinstance(data, (bytes, bytearray)) or not data:
            raise ValidationError("Document buffer is empty")
        if not file_name:
            raise ValidationError("File name is required")
        if not mime_type:
            raise ValidationError("MIME type is required")
        if not case_id:
            raise ValidationError("Case id is required")
        if self.max_file_size_bytes is not None and len(data) > self.max_file_size_bytes:
            raise ValidationError(
                f"File size ({len(data)} bytes) exceeds maximum of {self.max_file_size_bytes} bytes"
            )

        kind = filetype.guess(bytes(data[:8192]))
        if kind is not None and kind.mime in _EXECUTABLE_MIME_TYPES:
            if kind.mime != _PE_MIME_TYPE or _has_pe_header(data):
                raise ValidationError("File content validation failed: executable content")
            # "MZ" alone is not enough to call a file a Windows executable
            kind = None

        mime_type = mime_type.strip().lower()
        if mime_type in _GENERIC_MIME_TYPES and kind is not None:
            logger.info("Refined MIME type %s -> %s", mime_type, kind.mime)
            return kind.mime
        return mime_type

    async def _record_failure(self, case_id: str, submission_id: int, processing_time_ms: int) -> None:
        """Best-effort ``FAILED`` audit row with zeroed counters."""
        try:
            await self.audit_store.create_redaction_audit_async(
                RedactionAudit(
                    attachment_id=submission_id,
                    case_id=case_id,
                    processing_time_ms=processing_time_ms,
                    status=AuditStatus.FAILED,
                )
            )
        except Exception as e:
            logger.error("Failed to create audit log for failed attempt: %s", e)
