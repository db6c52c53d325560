"""
Retention sweep over the input and output directories.

Deletes presentations older than the retention window together with
their PDFs, PDFs older than the window, and PDFs whose presentation is
gone (orphans) whatever their age. Temp files left in the output
directory by an interrupted write are removed once they outlive the
window. Every deletion is attempted and logged on its own; one failure
never stops the sweep.
"""

import time
from pathlib import Path
from typing import Callable, List, Set

from loguru import logger

from app.models.schemas import ConvertedOutput, SweepReport
from app.utils.helpers import (
    base_name,
    days_to_seconds,
    file_age,
    is_output,
    is_partial_output,
    is_presentation,
)

SEPARATOR = "=" * 60


class RetentionSweeper:
    """Applies the retention policy to both directories."""

    def __init__(
        self,
        input_dir: Path,
        output_dir: Path,
        max_age_days: int = 7,
        clock: Callable[[], float] = time.time,
    ):
        """
        Initialize sweeper.

        Args:
            input_dir: Directory holding presentations
            output_dir: Directory holding converted PDFs
            max_age_days: Retention window in days
            clock: Returns the current time in epoch seconds
        """
        self.input_dir = input_dir
        self.output_dir = output_dir
        self.max_age_days = max_age_days
        self.clock = clock

    @property
    def max_age_seconds(self) -> float:
        return days_to_seconds(self.max_age_days)

    def sweep(self) -> SweepReport:
        """
        Run one retention pass. Never raises.

        Returns:
            Deleted paths and the errors met on the way
        """
        logger.info(SEPARATOR)
        logger.info(f"Checking for files older than {self.max_age_days} days...")

        now = self.clock()
        report = SweepReport()

        self._sweep_sources(now, report)
        self._sweep_outputs(now, report)

        if report.deleted_count == 0:
            logger.info("No old or orphaned files found")
        else:
            logger.success(f"Files deleted: {report.deleted_count}")
        logger.info(SEPARATOR)

        return report

    def _list_sources(self) -> List[Path]:
        """
        Presentations currently in the input directory.

        Raises:
            OSError: if the directory cannot be listed
        """
        return [
            entry for entry in self.input_dir.iterdir()
            if is_presentation(entry) and entry.is_file()
        ]

    def _sweep_sources(self, now: float, report: SweepReport) -> None:
        try:
            sources = self._list_sources()
        except OSError as e:
            self._record_error(report, f"Error scanning presentation folder: {e}")
            return

        for source in sources:
            if not self._is_expired(source, now, report):
                continue

            self._delete(source, report, "Deleted old presentation")

            paired = ConvertedOutput(output_dir=self.output_dir, base_name=base_name(source)).path
            if paired.exists():
                self._delete(paired, report, "Deleted matching PDF")

    def _sweep_outputs(self, now: float, report: SweepReport) -> None:
        try:
            entries = [entry for entry in self.output_dir.iterdir() if entry.is_file()]
            # Fresh listing: step one may have removed sources
            source_names: Set[str] = {base_name(p) for p in self._list_sources()}
        except OSError as e:
            self._record_error(report, f"Error scanning PDF folder: {e}")
            return

        partials = [entry for entry in entries if is_partial_output(entry)]
        outputs = [entry for entry in entries if is_output(entry)]

        for output in outputs:
            if base_name(output) not in source_names:
                self._delete(output, report, "Deleted orphaned PDF (no matching presentation)")
                continue

            if self._is_expired(output, now, report):
                self._delete(output, report, "Deleted old PDF")

        for partial in partials:
            if self._is_expired(partial, now, report):
                self._delete(partial, report, "Deleted leftover partial PDF")

    def _is_expired(self, path: Path, now: float, report: SweepReport) -> bool:
        try:
            age = file_age(path, now)
        except FileNotFoundError:
            logger.debug(f"Vanished before it could be checked: {path.name}")
            return False
        except OSError as e:
            self._record_error(report, f"Cannot stat {path.name}: {e}")
            return False
        return age > self.max_age_seconds

    def _delete(self, path: Path, report: SweepReport, message: str) -> None:
        try:
            path.unlink()
        except OSError as e:
            self._record_error(report, f"Error deleting {path.name}: {e}")
            return
        logger.info(f"{message}: {path.name}")
        report.deleted.append(path)

    @staticmethod
    def _record_error(report: SweepReport, message: str) -> None:
        logger.error(message)
        report.errors.append(message)
