"""
Pydantic models for Deck Watchman.

Shared data models across the conversion and retention domains.
"""

from enum import Enum
from pathlib import Path
from typing import List, Optional

from pydantic import BaseModel, Field

from app.utils.helpers import OUTPUT_EXTENSION, base_name, get_file_extension


# =====================================================
# Filesystem Models
# =====================================================

class WatchedFile(BaseModel):
    """Presentation file observed in the input directory."""
    path: Path
    base_name: str
    extension: str
    modified: float

    @classmethod
    def from_path(cls, path: Path) -> "WatchedFile":
        """
        Build from the current filesystem state.

        Raises:
            OSError: if the file cannot be stat'ed
        """
        return cls(
            path=path,
            base_name=base_name(path),
            extension=get_file_extension(path),
            modified=path.stat().st_mtime,
        )


class ConvertedOutput(BaseModel):
    """PDF paired with a source file by base name."""
    output_dir: Path
    base_name: str

    @property
    def path(self) -> Path:
        return self.output_dir / f"{self.base_name}{OUTPUT_EXTENSION}"


# =====================================================
# Conversion Models
# =====================================================

class FreshnessState(str, Enum):
    """Relationship between a source file and its output."""
    MISSING = "missing"
    STALE = "stale"
    FRESH = "fresh"


class FreshnessVerdict(BaseModel):
    """Result of comparing a source against its paired output."""
    source: Path
    output: Path
    state: FreshnessState

    @property
    def needs_conversion(self) -> bool:
        return self.state is not FreshnessState.FRESH


class ConversionFailure(BaseModel):
    """Failed call to the conversion service."""
    status_code: Optional[int] = None
    message: str

    def __str__(self) -> str:
        if self.status_code is None:
            return self.message
        return f"HTTP {self.status_code}: {self.message}"


class ConversionOutcome(str, Enum):
    """What happened to a single watch event."""
    IGNORED = "ignored"
    DUPLICATE = "duplicate"
    VANISHED = "vanished"
    UP_TO_DATE = "up_to_date"
    CONVERTED = "converted"
    FAILED = "failed"


# =====================================================
# Retention Models
# =====================================================

class SweepReport(BaseModel):
    """Summary of one retention sweep."""
    deleted: List[Path] = Field(default_factory=list)
    errors: List[str] = Field(default_factory=list)

    @property
    def deleted_count(self) -> int:
        return len(self.deleted)
