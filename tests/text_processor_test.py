"""Unit tests for the plain-text family processor."""

import asyncio

import pytest

from docextract.processors import FileHandle, FileProcessingError, ProcessorErrorCode, TextProcessor


def make_file(content: bytes, name: str = "notes.txt", media_type: str = "text/plain") -> FileHandle:
    """Build an in-memory file handle."""
    return FileHandle(name=name, media_type=media_type, content=content)


@pytest.mark.parametrize(
    "media_type",
    ["text/plain", "text/markdown", "text/csv", "application/json", "text/html"],
)
def test_can_process_declared_types(media_type):
    """Test that every text-family media type is accepted."""
    assert TextProcessor().can_process(make_file(b"x", media_type=media_type))


@pytest.mark.parametrize("name", ["README.md", "notes.markdown", "data.csv", "config.json", "a.TXT"])
def test_can_process_by_extension_when_type_missing(name):
    """Test the filename suffix fallback for untyped uploads."""
    assert TextProcessor().can_process(make_file(b"x", name=name, media_type=""))


def test_cannot_process_foreign_type():
    """Test that a PDF is rejected."""
    assert not TextProcessor().can_process(make_file(b"%PDF", name="a.pdf", media_type="application/pdf"))


def test_extract_text_cleans_content():
    """Test decoding and conservative cleaning."""
    text = asyncio.run(TextProcessor().extract_text(make_file(b"hello  world\r\n\r\n\r\n\r\n\r\nbye \n")))
    assert text == "hello world\n\n\nbye"


def test_extract_text_keeps_markdown():
    """Test that Markdown survives unchanged."""
    content = "# Title\n\nThis is **bold** text."
    text = asyncio.run(
        TextProcessor().extract_text(make_file(content.encode(), "test.md", "text/markdown"))
    )
    assert text == content


def test_extract_text_strips_bom():
    """Test that a UTF-8 byte order mark is dropped."""
    text = asyncio.run(TextProcessor().extract_text(make_file("\ufeffcafé".encode("utf-8"))))
    assert text == "café"


def test_extract_text_replaces_invalid_utf8(caplog):
    """Test that undecodable bytes are replaced and a warning is logged."""
    text = asyncio.run(TextProcessor().extract_text(make_file(b"abc\xff def")))
    assert text == "abc\ufffd def"
    assert "not valid UTF-8" in caplog.text


def test_extract_text_whitespace_only_is_empty():
    """Test that whitespace-only content raises EMPTY_FILE."""
    with pytest.raises(FileProcessingError) as excinfo:
        asyncio.run(TextProcessor().extract_text(make_file(b"  \n\t \n")))
    assert excinfo.value.code is ProcessorErrorCode.EMPTY_FILE


def test_extract_text_rejects_foreign_type():
    """Test that a direct call with a foreign type raises UNSUPPORTED_TYPE."""
    with pytest.raises(FileProcessingError) as excinfo:
        asyncio.run(TextProcessor().extract_text(make_file(b"x", "a.png", "image/png")))
    assert excinfo.value.code is ProcessorErrorCode.UNSUPPORTED_TYPE


def test_extract_text_read_failure(mocker):
    """Test that an unexpected read error becomes READ_FAILED."""
    mocker.patch.object(FileHandle, "read", side_effect=RuntimeError("disk gone"))
    with pytest.raises(FileProcessingError) as excinfo:
        asyncio.run(TextProcessor().extract_text(make_file(b"hello")))
    assert excinfo.value.code is ProcessorErrorCode.READ_FAILED
    assert "disk gone" in excinfo.value.message


def test_has_no_metadata_extraction():
    """Test that metadata is left to the dispatcher fallback."""
    assert not hasattr(TextProcessor(), "extract_with_metadata")
