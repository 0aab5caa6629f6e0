"""Configuration for the extraction subsystem.

Settings have code defaults and can be overridden from the environment
(or a ``.env`` file) through :meth:`ExtractionConfig.from_env`.

Example:
    >>> from docextract.processors import ExtractionConfig, UnifiedFileProcessor
    >>> config = ExtractionConfig(max_concurrency=4, extraction_timeout=30)
    >>> processor = UnifiedFileProcessor(config=config)
"""

import os

from dotenv import load_dotenv
from pydantic import BaseModel, Field

MAX_FILE_SIZE = 50 * 1024 * 1024  # 50 MiB


class ExtractionConfig(BaseModel):
    """Settings shared by the dispatcher and its processors.

    - max_file_size: inclusive size ceiling enforced before any processor runs
    - default_ocr_language: language used when OcrOptions are not supplied
    - max_concurrency: bound on concurrent batch items (0 means unbounded)
    - extraction_timeout: per-file timeout in seconds (None means no timeout)
    - log_level: level used by configure_logging
    """

    max_file_size: int = Field(
        default=MAX_FILE_SIZE,
        description="Maximum accepted file size in bytes (inclusive)",
        ge=1,
    )
    default_ocr_language: str = Field(
        default="eng",
        description="OCR language used when the caller passes no OcrOptions",
        min_length=1,
    )
    max_concurrency: int = Field(
        default=0,
        description="Maximum batch items processed at once. 0 means no limit.",
        ge=0,
    )
    extraction_timeout: float | None = Field(
        default=None,
        description="Per-file timeout in seconds. None means no timeout.",
        gt=0,
    )
    log_level: str = Field(default="INFO", description="Logging level name")

    @classmethod
    def from_env(cls, **overrides) -> "ExtractionConfig":
        """Build a configuration from DOCEXTRACT_* environment variables.

        Parameters
        ----------
        **overrides
            Values that take precedence over the environment

        Returns
        -------
        ExtractionConfig
            The validated configuration
        """
        load_dotenv()

        env_fields = {
            "max_file_size": "DOCEXTRACT_MAX_FILE_SIZE",
            "default_ocr_language": "DOCEXTRACT_OCR_LANGUAGE",
            "max_concurrency": "DOCEXTRACT_MAX_CONCURRENCY",
            "extraction_timeout": "DOCEXTRACT_EXTRACTION_TIMEOUT",
            "log_level": "LOG_LEVEL",
        }
        values = {
            field_name: os.environ[env_name]
            for field_name, env_name in env_fields.items()
            if os.environ.get(env_name)
        }
        values.update(overrides)
        return cls(**values)
