"""Document text extraction module with OCR support."""

from .base import BaseExtractor
from .pdf_extractor import ImageExtractor, PDFExtractor
from .router import DocumentExtractor, extract_text_from_document
from .text_extractor import TextExtractor
from .word_extractor import WordExtractor

__all__ = [
    "BaseExtractor",
    "DocumentExtractor",
    "ImageExtractor",
    "PDFExtractor",
    "TextExtractor",
    "WordExtractor",
    "extract_text_from_document",
]
