"""Tests for document text extraction and routing."""

import io
import zipfile

import fitz
import pytest
import pytesseract
from PIL import Image

from pii_redaction.errors import ExtractionError
from pii_redaction.extractors import (
    DocumentExtractor,
    ImageExtractor,
    PDFExtractor,
    TextExtractor,
    WordExtractor,
)
from pii_redaction.extractors.pdf_extractor import page_placeholder
from pii_redaction.extractors.router import DOCX_MIME_TYPE, extract_text_from_document
from pii_redaction.extractors.word_extractor import NO_TEXT_MESSAGE
from pii_redaction.models.entities import ExtractionMethod


def _pdf(*page_texts: str) -> bytes:
    doc = fitz.open()
    for text in page_texts:
        page = doc.new_page()
        if text:
            page.insert_text((72, 72), text)
    data = doc.tobytes()
    doc.close()
    return data


def _png() -> bytes:
    buf = io.BytesIO()
    Image.new("RGB", (64, 32), "white").save(buf, format="PNG")
    return buf.getvalue()


def _docx(document_xml: str) -> bytes:
    buf = io.BytesIO()
    with zipfile.ZipFile(buf, "w") as archive:
        archive.writestr("[Content_Types].xml", "<Types/>")
        archive.writestr("word/document.xml", document_xml)
    return buf.getvalue()


_OCR_DATA = {
    "text": ["", "Jane", "Doe", "", "MRN", "1234567"],
    "block_num": [0, 1, 1, 1, 1, 1],
    "par_num": [0, 1, 1, 1, 1, 1],
    "line_num": [0, 1, 1, 1, 2, 2],
    "conf": [-1, 90, 80, -1, 70, 60],
}


class TestPDFExtractor:
    def test_native_text(self):
        result = PDFExtractor().extract(_pdf("SSN 123-45-6789"))
        assert "123-45-6789" in result.text
        assert result.extraction_method == ExtractionMethod.PDF
        assert result.page_count == 1

    def test_pages_joined_in_order(self):
        result = PDFExtractor().extract(_pdf("first page", "second page"))
        assert result.text.index("first page") < result.text.index("second page")
        assert result.page_count == 2

    def test_blank_pdf_emits_page_placeholders(self):
        result = PDFExtractor().extract(_pdf("", ""))
        assert result.text == page_placeholder(1) + page_placeholder(2)
        assert result.page_count == 2

    def test_only_leading_pages_read(self):
        result = PDFExtractor(max_pages=2).extract(_pdf("alpha", "beta", "gamma"))
        assert "beta" in result.text
        assert "gamma" not in result.text
        assert result.page_count == 3

    def test_corrupt_pdf_raises(self):
        with pytest.raises(ExtractionError):
            PDFExtractor().extract(b"this is not a pdf")


class TestImageExtractor:
    def test_words_joined_by_line_with_mean_confidence(self, monkeypatch):
        monkeypatch.setattr(pytesseract, "image_to_data", lambda *a, **kw: _OCR_DATA)
        result = ImageExtractor().extract(_png(), "image/png")
        assert result.text == "Jane Doe\nMRN 1234567"
        assert result.confidence == pytest.approx(75.0)
        assert result.extraction_method == ExtractionMethod.OCR
        assert result.language == "eng"

    def test_webp_normalised_before_ocr(self, monkeypatch):
        seen = {}

        def fake_image_to_data(img, **kwargs):
            seen["format"] = img.format
            return _OCR_DATA

        monkeypatch.setattr(pytesseract, "image_to_data", fake_image_to_data)
        ImageExtractor().extract(_png(), "image/webp")
        assert seen["format"] == "PNG"

    def test_no_words_gives_empty_text(self, monkeypatch):
        empty = {"text": [""], "block_num": [0], "par_num": [0], "line_num": [0], "conf": [-1]}
        monkeypatch.setattr(pytesseract, "image_to_data", lambda *a, **kw: empty)
        result = ImageExtractor().extract(_png(), "image/png")
        assert result.text == ""
        assert result.confidence == 0.0

    def test_unreadable_image_raises(self):
        with pytest.raises(ExtractionError):
            ImageExtractor().extract(b"not an image", "image/png")

    def test_ocr_engine_failure_raises(self, monkeypatch):
        def broken(*args, **kwargs):
            raise pytesseract.TesseractNotFoundError()

        monkeypatch.setattr(pytesseract, "image_to_data", broken)
        with pytest.raises(ExtractionError):
            ImageExtractor().extract(_png(), "image/png")


class TestWordExtractor:
    def test_text_runs_joined_with_spaces(self):
        xml = (
            '<w:document><w:body><w:p><w:r><w:t>Client:</w:t></w:r>'
            '<w:r><w:t xml:space="preserve">Jane Doe</w:t></w:r></w:p></w:body></w:document>'
        )
        result = WordExtractor().extract(_docx(xml))
        assert result.text == "Client: Jane Doe"
        assert result.extraction_method == ExtractionMethod.WORD

    def test_xml_entities_decoded(self):
        xml = "<w:t>Smith &amp; Jones</w:t><w:t>jane&#64;example.com</w:t>"
        result = WordExtractor().extract(_docx(xml))
        assert result.text == "Smith & Jones jane@example.com"

    def test_raw_markup_without_archive(self):
        result = WordExtractor().extract(b"<w:t>loose run</w:t>")
        assert result.text == "loose run"

    def test_no_runs_gives_fixed_message(self):
        result = WordExtractor().extract(_docx("<w:document/>"))
        assert result.text == NO_TEXT_MESSAGE


class TestTextExtractor:
    def test_utf8(self):
        result = TextExtractor().extract("café 123-45-6789".encode("utf-8"))
        assert result.text == "café 123-45-6789"
        assert result.extraction_method == ExtractionMethod.TEXT

    def test_invalid_bytes_replaced(self):
        result = TextExtractor().extract(b"ok \xff\xfe end")
        assert result.text.startswith("ok ")
        assert "�" in result.text


class TestDocumentExtractor:
    @pytest.mark.parametrize(
        "mime_type, file_name, expected",
        [
            ("application/pdf", "a.bin", PDFExtractor),
            ("application/octet-stream", "scan.PDF", PDFExtractor),
            ("image/jpeg", "photo", ImageExtractor),
            ("application/octet-stream", "scan.tiff", ImageExtractor),
            (DOCX_MIME_TYPE, "letter", WordExtractor),
            ("application/octet-stream", "letter.docx", WordExtractor),
            ("text/plain", "notes.txt", TextExtractor),
            ("application/json", "data.json", TextExtractor),
        ],
    )
    def test_select(self, mime_type, file_name, expected):
        assert isinstance(DocumentExtractor().select(mime_type, file_name), expected)

    def test_unknown_type_decoded_as_text(self):
        result = extract_text_from_document(b"plain words", "application/x-unknown", "file.xyz")
        assert result.text == "plain words"
        assert result.extraction_method == ExtractionMethod.TEXT

    def test_pdf_routed(self):
        result = extract_text_from_document(_pdf("routed pdf"), "application/pdf", "a.pdf")
        assert "routed pdf" in result.text
