"""Unit tests for the docextract command line."""

import json

import pytest

from docextract import cli


@pytest.fixture(autouse=True)
def quiet_cli(mocker, monkeypatch):
    """Fixture to keep the CLI from touching global logging and terminal state."""
    monkeypatch.delenv("LOG_LEVEL", raising=False)
    mocker.patch("docextract.cli.init")
    mocker.patch("docextract.processors.config.load_dotenv")
    return mocker.patch("docextract.cli.configure_logging")


def test_setup_arg_parser():
    """Test parsing of the command-line options."""
    args = cli.setup_arg_parser().parse_args(
        ["a.pdf", "b.png", "--no-ocr", "--lang", "deu", "--json", "--log-level", "debug"]
    )

    assert args.files == ["a.pdf", "b.png"]
    assert args.no_ocr is True
    assert args.lang == "deu"
    assert args.json is True
    assert args.log_level == "DEBUG"


def test_main_prints_text(tmp_path, capsys, quiet_cli):
    """Test a successful run prints the text and exits 0."""
    path = tmp_path / "notes.txt"
    path.write_text("hello  world")

    assert cli.main([str(path)]) == 0

    output = capsys.readouterr().out
    assert "notes.txt" in output
    assert "2 words" in output
    assert "hello world" in output
    quiet_cli.assert_called_once_with("INFO")


def test_main_json_output_and_failure_exit(tmp_path, capsys):
    """Test JSON output and exit code 1 when a file fails."""
    good = tmp_path / "good.txt"
    good.write_text("one two three")
    empty = tmp_path / "empty.txt"
    empty.write_text("")

    assert cli.main([str(good), str(empty), "--json", "--log-level", "warning"]) == 1

    data = json.loads(capsys.readouterr().out)
    assert data[0]["file"] == "good.txt"
    assert data[0]["ok"] is True
    assert data[0]["text"] == "one two three"
    assert data[0]["metadata"]["word_count"] == 3
    assert data[1] == {
        "file": "empty.txt",
        "ok": False,
        "error": {"code": "EMPTY_FILE", "message": "File is empty", "file": "empty.txt"},
    }


def test_main_missing_file(tmp_path, capsys):
    """Test that a path that does not exist is reported as a failed item."""
    assert cli.main([str(tmp_path / "missing.txt"), "--json"]) == 1

    captured = capsys.readouterr()
    assert "Cannot open" in captured.err
    data = json.loads(captured.out)
    assert data == [
        {"file": None, "ok": False, "error": {"code": "NO_FILE", "message": "No file provided", "file": None}}
    ]


def test_main_no_ocr_placeholder(tmp_path, capsys):
    """Test that --no-ocr returns the OCR disabled placeholder for images."""
    path = tmp_path / "scan.png"
    path.write_bytes(b"\x89PNG\r\n\x1a\n")

    assert cli.main([str(path), "--no-ocr", "--json"]) == 0

    data = json.loads(capsys.readouterr().out)
    assert data[0]["text"] == "[Image uploaded: scan.png. OCR disabled.]"
    assert data[0]["metadata"]["word_count"] == 0
    assert data[0]["metadata"]["has_images"] is True
