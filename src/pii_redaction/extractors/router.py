"""Route an uploaded document to the matching extraction strategy."""

import logging
from typing import Optional

from .base import BaseExtractor
from .pdf_extractor import ImageExtractor, PDFExtractor
from .text_extractor import TextExtractor
from .word_extractor import WordExtractor
from ..models.entities import ExtractionResult

logger = logging.getLogger(__name__)

PDF_MIME_TYPE = "application/pdf"
DOCX_MIME_TYPE = "application/vnd.openxmlformats-officedocument.wordprocessingml.document"
IMAGE_EXTENSIONS = {"jpg", "jpeg", "png", "gif", "webp", "tiff", "bmp"}
TEXT_EXTENSIONS = {"txt", "csv", "log"}


def file_extension(file_name: str) -> str:
    """Lower-cased extension without the dot, or "" when there is none."""
    if "." not in file_name:
        return ""
    return file_name.rsplit(".", 1)[-1].lower()


class DocumentExtractor:
    """Dispatch by MIME type or file extension.

    PDF, image and Word documents go to their dedicated extractors; plain
    text and every unrecognised type are decoded as UTF-8.
    """

    def __init__(
        self,
        pdf_extractor: Optional[BaseExtractor] = None,
        image_extractor: Optional[BaseExtractor] = None,
        word_extractor: Optional[BaseExtractor] = None,
        text_extractor: Optional[BaseExtractor] = None,
    ):
        self.pdf_extractor = pdf_extractor or PDFExtractor()
        self.image_extractor = image_extractor or ImageExtractor()
        self.word_extractor = word_extractor or WordExtractor()
        self.text_extractor = text_extractor or TextExtractor()

    def select(self, mime_type: str, file_name: str) -> BaseExtractor:
        """Pick the extractor for a MIME type / file name pair."""
        extension = file_extension(file_name)
        mime_type = (mime_type or "").lower()

        if mime_type == PDF_MIME_TYPE or extension == "pdf":
            return self.pdf_extractor
        if mime_type.startswith("image/") or extension in IMAGE_EXTENSIONS:
            return self.image_extractor
        if mime_type == DOCX_MIME_TYPE or extension == "docx":
            return self.word_extractor
        if mime_type != "text/plain" and extension not in TEXT_EXTENSIONS:
            logger.info("Unrecognised document type %r, decoding as plain text", mime_type)
        return self.text_extractor

    def extract(self, data: bytes, mime_type: str, file_name: str) -> ExtractionResult:
        """Extract text from a document buffer.

        Raises:
            ExtractionError: On an unrecoverable parse or OCR failure.
        """
        extractor = self.select(mime_type, file_name)
        logger.info("Extracting text with %s", type(extractor).__name__)
        return extractor.extract(data, (mime_type or "").lower())


def extract_text_from_document(data: bytes, mime_type: str, file_name: str) -> ExtractionResult:
    """Extract text using the default extractors."""
    return DocumentExtractor().extract(data, mime_type, file_name)
