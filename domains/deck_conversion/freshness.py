"""
Freshness checks for converted PDFs.

A PDF counts as up to date only when its mtime is strictly newer than
the source's. Equal timestamps reconvert. Verdicts rely on filesystem
mtimes, so clock skew between writers or coarse timestamp granularity
can produce a wrong verdict; the next change event corrects it.
"""

from pathlib import Path

from loguru import logger

from app.models.schemas import ConvertedOutput, FreshnessState, FreshnessVerdict, WatchedFile
from app.utils.helpers import base_name


class OutputFreshnessChecker:
    """Compares a source presentation with its paired PDF."""

    def __init__(self, output_dir: Path):
        self.output_dir = output_dir

    def output_for(self, source: Path) -> ConvertedOutput:
        return ConvertedOutput(output_dir=self.output_dir, base_name=base_name(source))

    def check(self, source: Path) -> FreshnessVerdict:
        """
        Decide whether source needs (re)conversion.

        Args:
            source: Presentation path

        Returns:
            Verdict with state missing, stale or fresh
        """
        output = self.output_for(source).path

        try:
            output_mtime = output.stat().st_mtime
        except OSError:
            return FreshnessVerdict(source=source, output=output, state=FreshnessState.MISSING)

        try:
            watched = WatchedFile.from_path(source)
        except OSError as e:
            logger.debug(f"Cannot stat {source}: {e}")
            return FreshnessVerdict(source=source, output=output, state=FreshnessState.STALE)

        state = FreshnessState.FRESH if output_mtime > watched.modified else FreshnessState.STALE
        return FreshnessVerdict(source=source, output=output, state=state)
