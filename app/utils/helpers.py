"""
Helper utilities for Deck Watchman.

Common path and formatting functions shared by the conversion and
retention domains.
"""

import time
from pathlib import Path
from typing import Optional

PRESENTATION_EXTENSIONS = (".pptx", ".ppt")
OUTPUT_EXTENSION = ".pdf"
PARTIAL_SUFFIX = ".tmp"

MEDIA_TYPES = {
    ".pptx": "application/vnd.openxmlformats-officedocument.presentationml.presentation",
    ".ppt": "application/vnd.ms-powerpoint",
}

SECONDS_PER_DAY = 24 * 60 * 60


def get_file_extension(path: Path) -> str:
    """Get lowercase file extension, including the dot."""
    return path.suffix.lower()


def is_presentation(path: Path) -> bool:
    """Check whether path has a recognised presentation extension."""
    return get_file_extension(path) in PRESENTATION_EXTENSIONS


def is_output(path: Path) -> bool:
    """Check whether path has the converted output extension."""
    return get_file_extension(path) == OUTPUT_EXTENSION


def is_partial_output(path: Path) -> bool:
    """Check whether path is a hidden temp file left by an output write."""
    return is_hidden(path) and get_file_extension(path) == PARTIAL_SUFFIX


def base_name(path: Path) -> str:
    """File name without its final extension (case preserved)."""
    return path.stem


def media_type_for(path: Path) -> str:
    """Upload media type for a presentation file."""
    return MEDIA_TYPES.get(get_file_extension(path), "application/octet-stream")


def is_hidden(path: Path) -> bool:
    """Check if path is hidden (starts with dot)."""
    return path.name.startswith('.')


def file_age(path: Path, now: Optional[float] = None) -> float:
    """
    Age of a file in seconds, based on its modification time.

    Raises:
        OSError: if the file cannot be stat'ed
    """
    if now is None:
        now = time.time()
    return now - path.stat().st_mtime


def days_to_seconds(days: float) -> float:
    return days * SECONDS_PER_DAY


def format_kilobytes(bytes_count: int) -> str:
    """Format a byte count as kilobytes with two decimals."""
    return f"{bytes_count / 1024:.2f} KB"

