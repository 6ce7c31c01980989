"""PDF and image text extraction using PyMuPDF and Tesseract."""

import io
import logging
from typing import Dict, List, Optional, Tuple

import fitz  # PyMuPDF

from .base import BaseExtractor
from ..errors import ExtractionError
from ..models.entities import ExtractionMethod, ExtractionResult

logger = logging.getLogger(__name__)

MAX_PDF_PAGES = 50

# Minimum character count to consider a page as having usable text
_MIN_TEXT_LENGTH = 30

# Formats Tesseract handles poorly; converted to PNG before OCR
_NORMALIZE_MIME_TYPES = {"image/webp", "image/tiff", "image/gif"}

OCR_LANGUAGE = "eng"


def page_placeholder(page_number: int) -> str:
    """Marker emitted for a PDF page with no native text (1-indexed)."""
    return f"\n--- Page {page_number} ---\n"


class PDFExtractor(BaseExtractor):
    """Extract text content from PDF files.

    Per-page native text of the first 50 pages is concatenated. When no page
    carries native text (scanned documents), page placeholders are emitted
    instead of failing, unless OCR fallback is enabled, in which case
    near-empty pages are rendered and passed through Tesseract.
    """

    def __init__(self, enable_ocr: bool = False, max_pages: int = MAX_PDF_PAGES):
        """
        Initialize the extractor.

        Args:
            enable_ocr: Whether to attempt OCR on pages with little/no text.
            max_pages: Number of leading pages to read.
        """
        self.enable_ocr = enable_ocr
        self.max_pages = max_pages
        self._ocr_available: Optional[bool] = None

    def _check_ocr_available(self) -> bool:
        """Check if Tesseract OCR is available."""
        if self._ocr_available is not None:
            return self._ocr_available
        try:
            import pytesseract
            pytesseract.get_tesseract_version()
            self._ocr_available = True
            logger.info("Tesseract OCR is available")
        except Exception:
            self._ocr_available = False
            logger.warning("Tesseract OCR is not available; scanned PDF pages will be placeholders")
        return self._ocr_available

    def extract(self, data: bytes, mime_type: str = "") -> ExtractionResult:
        try:
            with fitz.open(stream=data, filetype="pdf") as doc:
                page_count = len(doc)
                texts = [
                    self._page_text(doc[page_num], page_num)
                    for page_num in range(min(page_count, self.max_pages))
                ]
        except Exception as e:
            logger.error("PDF extraction failed: %s", e)
            raise ExtractionError("Failed to extract text from PDF") from e

        if any(t.strip() for t in texts):
            text = "\n".join(texts)
        else:
            logger.info("PDF has no native text, emitting %d page placeholders", len(texts))
            text = "".join(page_placeholder(i + 1) for i in range(len(texts)))

        return ExtractionResult(
            text=text,
            extraction_method=ExtractionMethod.PDF,
            page_count=page_count,
        )

    def _page_text(self, page, page_num: int) -> str:
        text = page.get_text()
        # If native text extraction yields too little, try OCR
        if len(text.strip()) < _MIN_TEXT_LENGTH and self.enable_ocr:
            ocr_text = self._ocr_page(page)
            if ocr_text and len(ocr_text.strip()) > len(text.strip()):
                logger.info("Page %d: OCR extracted %d characters", page_num + 1, len(ocr_text))
                return ocr_text
        return text

    def _ocr_page(self, page) -> str:
        """Render a PDF page at 300 DPI and run Tesseract on it.

        Returns an empty string when Tesseract is unavailable or fails, so the
        page falls back to its (short) native text.
        """
        if not self._check_ocr_available():
            return ""

        try:
            import pytesseract
            from PIL import Image

            mat = fitz.Matrix(300 / 72, 300 / 72)
            pix = page.get_pixmap(matrix=mat)
            img = Image.open(io.BytesIO(pix.tobytes("png")))
            return pytesseract.image_to_string(img, lang=OCR_LANGUAGE)
        except Exception as e:
            logger.warning("OCR failed for page: %s", e)
            return ""


class ImageExtractor(BaseExtractor):
    """Extract text from image files using a single Tesseract pass.

    Word boxes from ``image_to_data`` are re-joined into lines; the engine
    confidence is the mean of the per-word confidences.
    """

    def extract(self, data: bytes, mime_type: str = "") -> ExtractionResult:
        try:
            import pytesseract
            from PIL import Image

            img = Image.open(io.BytesIO(data))
            if mime_type in _NORMALIZE_MIME_TYPES:
                img = self._to_png(img)

            ocr = pytesseract.image_to_data(
                img, lang=OCR_LANGUAGE, output_type=pytesseract.Output.DICT
            )
        except Exception as e:
            logger.error("OCR extraction failed: %s", e)
            raise ExtractionError("Failed to extract text from image") from e

        text, confidence = self._assemble(ocr)
        logger.info("OCR extracted %d characters (confidence %.1f)", len(text), confidence)
        return ExtractionResult(
            text=text,
            extraction_method=ExtractionMethod.OCR,
            confidence=confidence,
            language=OCR_LANGUAGE,
        )

    @staticmethod
    def _to_png(img):
        from PIL import Image

        buf = io.BytesIO()
        img.convert("RGB").save(buf, format="PNG")
        buf.seek(0)
        return Image.open(buf)

    @staticmethod
    def _assemble(ocr: Dict[str, list]) -> Tuple[str, float]:
        """Join Tesseract word boxes into text and compute mean confidence."""
        lines: Dict[Tuple[int, int, int], List[str]] = {}
        confidences: List[float] = []

        for i, word in enumerate(ocr.get("text", [])):
            word = (word or "").strip()
            if not word:
                continue
            key = (ocr["block_num"][i], ocr["par_num"][i], ocr["line_num"][i])
            lines.setdefault(key, []).append(word)
            conf = float(ocr["conf"][i])
            if conf >= 0:
                confidences.append(conf)

        text = "\n".join(" ".join(words) for words in lines.values())
        confidence = sum(confidences) / len(confidences) if confidences else 0.0
        return text, confidence
