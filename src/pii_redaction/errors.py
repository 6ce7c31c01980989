"""Exception taxonomy for the PII redaction pipeline."""


class RedactionError(Exception):
    """Base class for all pipeline errors."""


class ValidationError(RedactionError):
    """Missing or unsupported buffer, file name, MIME type or case id."""


class ExtractionError(RedactionError):
    """Unrecoverable failure while parsing a document or running OCR."""


class ModelDetectionError(RedactionError):
    """The model call failed or its reply did not match the entity schema.

    Raised and recovered inside the model detector only.
    """


class PersistenceError(RedactionError):
    """Writing the redacted artifact or the audit row failed."""


class PIIProcessingError(RedactionError):
    """Single generic error surfaced to callers.

    The message never carries internal detail; the underlying cause is
    available through ``__cause__`` for server-side logging.
    """

    PROCESS_FAILED = "Failed to process document for PII redaction"
    STATUS_FAILED = "Failed to get redaction status"
    REVIEW_FAILED = "Failed to update redaction audit"

    def __init__(self, message: str = PROCESS_FAILED):
        super().__init__(message)
