"""Best-effort text scrape of Word (DOCX) documents.

This is not a document-format parser: visible ``<w:t>`` text runs are pulled
out of the raw WordprocessingML with a regular expression. Tables, headers,
footnotes and run ordering across fields may be lost.
"""

import html
import io
import logging
import re
import zipfile

from .base import BaseExtractor
from ..errors import ExtractionError
from ..models.entities import ExtractionMethod, ExtractionResult

logger = logging.getLogger(__name__)

NO_TEXT_MESSAGE = "Unable to extract text from Word document"

_DOCUMENT_PART = "word/document.xml"
_RAW_SCAN_BYTES = 10000

_TEXT_RUN = re.compile(r"<w:t[^>]*>([^<]+)</w:t>")


class WordExtractor(BaseExtractor):
    """Scrape text runs from a DOCX archive, or from raw markup bytes."""

    def extract(self, data: bytes, mime_type: str = "") -> ExtractionResult:
        try:
            markup = self._read_markup(data)
        except Exception as e:
            logger.error("Word extraction failed: %s", e)
            raise ExtractionError("Failed to extract text from Word document") from e

        # Decode XML entities such as &amp; and &#64;
        runs = [html.unescape(run) for run in _TEXT_RUN.findall(markup)]
        if not runs:
            logger.info("No text runs found in Word markup")

        return ExtractionResult(
            text=" ".join(runs) if runs else NO_TEXT_MESSAGE,
            extraction_method=ExtractionMethod.WORD,
        )

    @staticmethod
    def _read_markup(data: bytes) -> str:
        """Return the main document XML, or the decoded head of the buffer."""
        if zipfile.is_zipfile(io.BytesIO(data)):
            with zipfile.ZipFile(io.BytesIO(data)) as archive:
                if _DOCUMENT_PART in archive.namelist():
                    return archive.read(_DOCUMENT_PART).decode("utf-8", errors="replace")
        return data[:_RAW_SCAN_BYTES].decode("utf-8", errors="replace")
