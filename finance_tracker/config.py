"""
Configuration settings for the Finance Tracker statement importer.
Centralized configuration management for the application.
"""

import os
from pathlib import Path
from typing import Optional

class Config:
    """Application configuration class."""

    # Application Settings
    APP_NAME = "Finance Tracker Statement Importer"
    VERSION = "1.0.0"

    # File Upload Settings
    MAX_FILE_SIZE_MB: int = int(os.getenv("MAX_FILE_SIZE_MB", "10"))
    MAX_FILE_SIZE_BYTES: int = MAX_FILE_SIZE_MB * 1024 * 1024
    ALLOWED_FILE_TYPES: list[str] = [".pdf"]

    # Output Settings
    OUTPUT_DIR: Path = Path(os.getenv("OUTPUT_DIR", "./output"))
    LOG_DIR: Path = Path(os.getenv("LOG_DIR", "./logs"))

    # Extraction Settings
    MIN_SEGMENT_LENGTH: int = int(os.getenv("MIN_SEGMENT_LENGTH", "10"))
    MAX_DESCRIPTION_LENGTH: int = int(os.getenv("MAX_DESCRIPTION_LENGTH", "100"))
    # Off keeps the literal comma-to-period rule ("1.234,56" -> 1.234)
    LOCALE_AWARE_AMOUNTS: bool = os.getenv("LOCALE_AWARE_AMOUNTS", "false").lower() == "true"
    # Off reads "15.03.23 ... 12.50" as amount 15.03
    BLANK_DATE_BEFORE_AMOUNT: bool = os.getenv("BLANK_DATE_BEFORE_AMOUNT", "false").lower() == "true"
    EXTRACTION_WORKERS: int = int(os.getenv("EXTRACTION_WORKERS", "1"))

    # Validation Settings
    STRICT_MODE: bool = os.getenv("STRICT_MODE", "false").lower() == "true"

    # Logging Settings
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")
    LOG_FORMAT: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    LOG_DATE_FORMAT: str = "%Y-%m-%d %H:%M:%S"

    # API Settings
    API_HOST: str = os.getenv("API_HOST", "0.0.0.0")
    API_PORT: int = int(os.getenv("API_PORT", "8000"))

    @classmethod
    def ensure_directories(cls):
        """Ensure required directories exist."""
        cls.OUTPUT_DIR.mkdir(parents=True, exist_ok=True)
        cls.LOG_DIR.mkdir(parents=True, exist_ok=True)

    @classmethod
    def get_log_path(cls, filename: str) -> Path:
        """Get full path for log file."""
        cls.ensure_directories()
        return cls.LOG_DIR / filename

    @classmethod
    def validate_file(cls, filename: str, file_size: int) -> tuple[bool, Optional[str]]:
        """
        Validate uploaded file.

        Returns:
            tuple: (is_valid, error_message)
        """
        # Check file type
        if not any(filename.lower().endswith(ext) for ext in cls.ALLOWED_FILE_TYPES):
            return False, f"Invalid file type. Allowed types: {', '.join(cls.ALLOWED_FILE_TYPES)}"

        # Check file size
        if file_size > cls.MAX_FILE_SIZE_BYTES:
            size_mb = file_size / (1024 * 1024)
            return False, f"File too large ({size_mb:.2f} MB). Maximum: {cls.MAX_FILE_SIZE_MB} MB"

        # Check if empty
        if file_size == 0:
            return False, "File is empty"

        return True, None

    @classmethod
    def to_dict(cls) -> dict:
        """Convert configuration to dictionary."""
        return {
            "app_name": cls.APP_NAME,
            "version": cls.VERSION,
            "max_file_size_mb": cls.MAX_FILE_SIZE_MB,
            "output_dir": str(cls.OUTPUT_DIR),
            "log_dir": str(cls.LOG_DIR),
            "min_segment_length": cls.MIN_SEGMENT_LENGTH,
            "max_description_length": cls.MAX_DESCRIPTION_LENGTH,
            "locale_aware_amounts": cls.LOCALE_AWARE_AMOUNTS,
            "blank_date_before_amount": cls.BLANK_DATE_BEFORE_AMOUNT,
            "extraction_workers": cls.EXTRACTION_WORKERS,
            "strict_mode": cls.STRICT_MODE,
            "log_level": cls.LOG_LEVEL,
        }


# Create a singleton instance
config = Config()
