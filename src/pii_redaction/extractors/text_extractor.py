"""Plain-text decoding, also the fallback for unrecognised document types."""

from .base import BaseExtractor
from ..models.entities import ExtractionMethod, ExtractionResult


class TextExtractor(BaseExtractor):
    """Decode the buffer as UTF-8, replacing invalid byte sequences."""

    def extract(self, data: bytes, mime_type: str = "") -> ExtractionResult:
        return ExtractionResult(
            text=data.decode("utf-8", errors="replace"),
            extraction_method=ExtractionMethod.TEXT,
        )
