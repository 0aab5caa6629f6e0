"""Unit tests for FileProcessingError."""

import pickle

import pytest

from docextract.processors import FileHandle, FileProcessingError, ProcessorErrorCode


@pytest.fixture
def handle():
    """Fixture for a small text file."""
    return FileHandle(name="notes.txt", media_type="text/plain", content=b"hello")


def test_error_fields_and_str(handle):
    """Test that code, message and file are exposed and rendered."""
    error = FileProcessingError("File is empty", ProcessorErrorCode.EMPTY_FILE, handle)

    assert error.code is ProcessorErrorCode.EMPTY_FILE
    assert error.message == "File is empty"
    assert error.file is handle
    assert str(error) == "[EMPTY_FILE] File is empty (File: notes.txt)"


def test_error_without_file():
    """Test rendering of an error that has no file."""
    error = FileProcessingError("No file provided", ProcessorErrorCode.NO_FILE)
    assert str(error) == "[NO_FILE] No file provided"
    assert error.to_dict() == {"code": "NO_FILE", "message": "No file provided", "file": None}


def test_error_is_immutable(handle):
    """Test that fields cannot be reassigned or deleted."""
    error = FileProcessingError("boom", ProcessorErrorCode.OCR_FAILED, handle)

    with pytest.raises(AttributeError):
        error.code = ProcessorErrorCode.NO_FILE
    with pytest.raises(AttributeError):
        error.message = "changed"
    with pytest.raises(AttributeError):
        del error.file

    assert error.code is ProcessorErrorCode.OCR_FAILED
    assert error.message == "boom"


def test_error_can_be_raised_and_chained(handle):
    """Test that raising with a cause still works on an immutable error."""
    cause = ValueError("bad xref")
    with pytest.raises(FileProcessingError) as excinfo:
        try:
            raise cause
        except ValueError as e:
            raise FileProcessingError("parse failed", ProcessorErrorCode.EXTRACTION_FAILED, handle) from e

    assert excinfo.value.__cause__ is cause


def test_with_prefix_keeps_code_and_file(handle):
    """Test that prefixing creates a new error with the same code and file."""
    error = FileProcessingError("No text content found in PDF", ProcessorErrorCode.NO_TEXT_CONTENT, handle)
    prefixed = error.with_prefix("PDFProcessor")

    assert prefixed is not error
    assert prefixed.message == "PDFProcessor: No text content found in PDF"
    assert prefixed.code is ProcessorErrorCode.NO_TEXT_CONTENT
    assert prefixed.file is handle
    assert error.message == "No text content found in PDF"


def test_code_accepts_string_value():
    """Test that a plain string code is converted to the enum."""
    error = FileProcessingError("too big", "FILE_TOO_LARGE")
    assert error.code is ProcessorErrorCode.FILE_TOO_LARGE


def test_error_pickles(handle):
    """Test that the error survives a pickle round trip."""
    error = FileProcessingError("boom", ProcessorErrorCode.READ_FAILED, handle)
    restored = pickle.loads(pickle.dumps(error))

    assert restored.code is ProcessorErrorCode.READ_FAILED
    assert restored.message == "boom"
    assert restored.file == handle
