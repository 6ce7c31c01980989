"""Abstract base class for document extractors."""

from abc import ABC, abstractmethod

from ..models.entities import ExtractionResult


class BaseExtractor(ABC):
    """Interface for document text extractors."""

    @abstractmethod
    def extract(self, data: bytes, mime_type: str = "") -> ExtractionResult:
        """
        Extract text content from an in-memory document.

        Args:
            data: Raw document bytes. Never modified.
            mime_type: Declared MIME type, used by extractors that normalise
                their input before parsing.

        Returns:
            ExtractionResult with the text and its provenance.

        Raises:
            ExtractionError: On an unrecoverable parse or OCR failure.
        """
