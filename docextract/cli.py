#!/usr/bin/env python3

"""Extract text from documents and images on the command line."""

import argparse
import asyncio
import json
import sys

from colorama import Fore, Style, init

from .logging import configure_logging
from .processors import BatchOutcome, ExtractionConfig, FileHandle, OcrOptions, UnifiedFileProcessor


def main(argv: list[str] | None = None) -> int:
    """Extract every file given on the command line and display the results."""
    init(autoreset=True)  # Initialize Colorama
    parser = setup_arg_parser()
    args = parser.parse_args(argv)

    config = ExtractionConfig.from_env(**({"log_level": args.log_level} if args.log_level else {}))
    configure_logging(config.log_level)

    ocr_options = OcrOptions(
        enabled=not args.no_ocr, language=args.lang or config.default_ocr_language
    )
    outcomes = asyncio.run(run_batch(args.files, config, ocr_options))

    if args.json:
        print(json.dumps([outcome_to_dict(outcome) for outcome in outcomes], indent=2))
    else:
        display_results(outcomes)
    return 0 if all(outcome.ok for outcome in outcomes) else 1


def setup_arg_parser() -> argparse.ArgumentParser:
    """Set up argument parser for command-line options."""
    parser = argparse.ArgumentParser(description="Extract text from documents and images.")
    parser.add_argument("files", nargs="+", help="Files to extract")
    parser.add_argument("--no-ocr", action="store_true", help="Do not run OCR on images")
    parser.add_argument("--lang", help="Tesseract language, e.g. eng or eng+deu", default=None)
    parser.add_argument("--json", action="store_true", help="Print results as JSON")
    parser.add_argument(
        "--log-level",
        help="Logging level (defaults to LOG_LEVEL or INFO)",
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        type=str.upper,
        default=None,
    )
    return parser


async def run_batch(
    paths: list[str], config: ExtractionConfig, ocr_options: OcrOptions
) -> list[BatchOutcome]:
    """Extract all files, releasing the OCR worker afterwards."""
    handles = []
    for path in paths:
        try:
            handles.append(FileHandle.from_path(path))
        except OSError as e:
            print(f"{Fore.RED}Cannot open {path}: {e}", file=sys.stderr)
            handles.append(None)

    async with UnifiedFileProcessor(config=config) as processor:
        return await processor.extract_from_multiple_files(handles, ocr_options)


def outcome_to_dict(outcome: BatchOutcome) -> dict:
    """Convert a batch outcome to a JSON-serializable dict."""
    data = {"file": outcome.file.name if outcome.file is not None else None, "ok": outcome.ok}
    if outcome.ok:
        data.update(outcome.result.model_dump())
    else:
        data["error"] = outcome.error.to_dict()
    return data


def display_results(outcomes: list[BatchOutcome]) -> None:
    """Print each outcome with a colored header."""
    for outcome in outcomes:
        name = outcome.file.name if outcome.file is not None else "<missing>"
        if outcome.ok:
            metadata = outcome.result.metadata
            print(
                f"{Fore.GREEN}{name}{Style.RESET_ALL} "
                f"{Fore.CYAN}({metadata.word_count} words, {metadata.processing_time:.2f}s)"
            )
            print(outcome.result.text)
        else:
            print(f"{Fore.RED}{name}: {outcome.error}")
        print()


if __name__ == "__main__":
    sys.exit(main())
