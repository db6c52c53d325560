"""
Conversion orchestrator for the Deck Conversion domain.

Receives watch events, drops duplicates for paths already being handled,
waits for the file to settle, skips up-to-date PDFs and writes fresh
conversions to the output directory.
"""

import asyncio
import os
import tempfile
from pathlib import Path
from typing import Protocol, Union

from loguru import logger

from app.models.schemas import ConversionFailure, ConversionOutcome
from app.utils.helpers import PARTIAL_SUFFIX, format_kilobytes, is_presentation

from .freshness import OutputFreshnessChecker


class Converter(Protocol):
    async def convert(self, source: Path) -> Union[bytes, ConversionFailure]:
        """Return PDF bytes for source, or a failure. Must not raise."""


class ConversionOrchestrator:
    """Coordinates conversion of presentations reported by an event source."""

    def __init__(
        self,
        converter: Converter,
        output_dir: Path,
        settle_delay: float = 1.0,
    ):
        """
        Initialize orchestrator.

        Args:
            converter: Conversion service client
            output_dir: Directory receiving PDFs
            settle_delay: Seconds to wait before touching a new file
        """
        self.converter = converter
        self.output_dir = output_dir
        self.settle_delay = settle_delay
        self.freshness = OutputFreshnessChecker(output_dir)

        # Only mutable state shared between concurrent handlers
        self.in_flight: set[str] = set()
        self._tasks: set[asyncio.Task] = set()

    def submit(self, path: str) -> asyncio.Task:
        """
        Schedule handling of a watch event on the running loop.

        Intended as an event-source callback; returns immediately.
        """
        task = asyncio.get_running_loop().create_task(self.handle_event(path))
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return task

    async def handle_event(self, path: str) -> ConversionOutcome:
        """
        Handle one appeared/changed event.

        Args:
            path: Absolute path reported by the watcher

        Returns:
            What happened to the event
        """
        source = Path(path)
        if not is_presentation(source):
            return ConversionOutcome.IGNORED

        key = str(source)
        # No await between the membership test and the insert
        if key in self.in_flight:
            logger.debug(f"Already processing: {source.name}")
            return ConversionOutcome.DUPLICATE
        self.in_flight.add(key)

        try:
            await asyncio.sleep(self.settle_delay)

            if not source.exists():
                logger.debug(f"File disappeared before conversion: {source.name}")
                return ConversionOutcome.VANISHED

            return await self.convert_file(source)

        except Exception as e:
            logger.error(f"Error while processing {source.name}: {e}")
            return ConversionOutcome.FAILED

        finally:
            self.in_flight.discard(key)

    async def convert_file(self, source: Path) -> ConversionOutcome:
        """Convert source unless its PDF is already newer."""
        logger.info(f"Detected file: {source.name}")

        verdict = self.freshness.check(source)
        output = verdict.output

        if not verdict.needs_conversion:
            logger.info(f"PDF already up to date, skipping: {output.name}")
            return ConversionOutcome.UP_TO_DATE

        if output.exists():
            logger.info(f"PDF exists but {source.name} is newer, updating...")

        logger.info("Converting to PDF via Gotenberg...")
        result = await self.converter.convert(source)

        if isinstance(result, ConversionFailure):
            logger.error(f"Conversion failed for {source.name}: {result}")
            return ConversionOutcome.FAILED

        await asyncio.to_thread(self._write_output, output, result)

        logger.success(f"Converted: {output.name}")
        logger.info(f"  Size: {format_kilobytes(len(result))}")
        return ConversionOutcome.CONVERTED

    def _write_output(self, output: Path, data: bytes) -> None:
        """Write data next to output, then move it into place."""
        output.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(
            prefix=f".{output.stem}.", suffix=PARTIAL_SUFFIX, dir=output.parent
        )
        try:
            with os.fdopen(fd, "wb") as fh:
                fh.write(data)
            os.replace(tmp_name, output)
        except BaseException:
            Path(tmp_name).unlink(missing_ok=True)
            raise
