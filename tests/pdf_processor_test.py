"""Unit tests for the PDF processor."""

import asyncio
from io import BytesIO

import PyPDF2
import pytest

from docextract.processors import FileHandle, FileProcessingError, PDFProcessor, ProcessorErrorCode


def make_pdf_file(content: bytes = b"%PDF-1.7 stub", name: str = "report.pdf") -> FileHandle:
    """Build an in-memory PDF handle."""
    return FileHandle(name=name, media_type="application/pdf", content=content)


def blank_pdf(pages: int = 2) -> bytes:
    """Write a real PDF with blank pages."""
    writer = PyPDF2.PdfWriter()
    for _ in range(pages):
        writer.add_blank_page(width=72, height=72)
    buffer = BytesIO()
    writer.write(buffer)
    return buffer.getvalue()


@pytest.fixture
def mock_reader(mocker):
    """Fixture to mock PyPDF2.PdfReader with pages of fixed text."""

    def build(*page_texts):
        pages = []
        for text in page_texts:
            page = mocker.Mock()
            page.extract_text.return_value = text
            pages.append(page)
        reader = mocker.Mock()
        reader.pages = pages
        return mocker.patch("PyPDF2.PdfReader", return_value=reader)

    return build


def test_can_process():
    """Test that only application/pdf is accepted."""
    processor = PDFProcessor()
    assert processor.can_process(make_pdf_file())
    assert not processor.can_process(FileHandle(name="a.pdf", media_type="text/plain", content=b"x"))
    assert processor.supported_types == ["application/pdf"]


def test_extract_text_cleans_pages(mock_reader):
    """Test that page text is joined and cleaned."""
    mock_reader("Quarterly\nreport | 2024", "Revenue ----- up\n\n\nCosts down")

    text = asyncio.run(PDFProcessor().extract_text(make_pdf_file()))

    assert text == "Quarterly report 2024\n\nRevenue up\n\nCosts down"


def test_extract_with_metadata(mock_reader):
    """Test page count, word count and the image marker heuristic."""
    mock_reader("Intro text [Figure] here", None, "End")

    result = asyncio.run(PDFProcessor().extract_with_metadata(make_pdf_file()))

    assert result.text == "Intro text [Figure] here\n\nEnd"
    assert result.metadata.page_count == 3
    assert result.metadata.has_images is True
    assert result.metadata.word_count == 5
    assert result.metadata.processing_time >= 0


def test_extract_with_metadata_without_markers(mock_reader):
    """Test that has_images is False when no marker appears."""
    mock_reader("Plain page")
    result = asyncio.run(PDFProcessor().extract_with_metadata(make_pdf_file()))
    assert result.metadata.has_images is False


def test_blank_pdf_has_no_text_content():
    """Test that a real PDF without text raises NO_TEXT_CONTENT."""
    with pytest.raises(FileProcessingError) as excinfo:
        asyncio.run(PDFProcessor().extract_text(make_pdf_file(blank_pdf())))
    assert excinfo.value.code is ProcessorErrorCode.NO_TEXT_CONTENT


def test_blank_pdf_metadata_reports_pages():
    """Test that metadata extraction returns empty text with the page count."""
    result = asyncio.run(PDFProcessor().extract_with_metadata(make_pdf_file(blank_pdf(3))))
    assert result.text == ""
    assert result.metadata.page_count == 3
    assert result.metadata.word_count == 0


def test_corrupt_pdf_is_extraction_failed(mocker, caplog):
    """Test that parser errors become EXTRACTION_FAILED and are logged."""
    mocker.patch("PyPDF2.PdfReader", side_effect=PyPDF2.errors.PdfReadError("EOF marker not found"))

    with pytest.raises(FileProcessingError) as excinfo:
        asyncio.run(PDFProcessor().extract_text(make_pdf_file(b"garbage")))

    assert excinfo.value.code is ProcessorErrorCode.EXTRACTION_FAILED
    assert "EOF marker not found" in excinfo.value.message
    assert isinstance(excinfo.value.__cause__, PyPDF2.errors.PdfReadError)
    assert "PyPDF2 failed to parse report.pdf" in caplog.text


def test_extract_text_rejects_foreign_type():
    """Test that a direct call with a foreign type raises UNSUPPORTED_TYPE."""
    with pytest.raises(FileProcessingError) as excinfo:
        asyncio.run(PDFProcessor().extract_text(FileHandle(name="a.txt", media_type="text/plain", content=b"x")))
    assert excinfo.value.code is ProcessorErrorCode.UNSUPPORTED_TYPE
