"""
Deck Watchman - service wiring

Watches a folder for presentations and keeps a folder of PDFs in sync:
- Converts new or changed .pptx/.ppt files through Gotenberg
- Skips files whose PDF is already newer
- Sweeps out old presentations, old PDFs and orphaned PDFs
"""

import asyncio
import signal
import sys
from typing import Optional

from loguru import logger

from app.utils.config import Settings
from app.utils.gotenberg_client import GotenbergClient
from domains.deck_conversion import ConversionOrchestrator
from domains.deck_conversion.watchers.filesystem import EventSource, FileSystemWatcher
from domains.retention import RetentionScheduler, RetentionSweeper

SEPARATOR = "=" * 60


def configure_logging(level: str = "INFO") -> None:
    """Send loguru output to stdout with the service format."""
    logger.remove()
    logger.add(
        sys.stdout,
        format="<green>{time:YYYY-MM-DD HH:mm:ss}</green> | <level>{level: <8}</level> | <cyan>{name}</cyan>:<cyan>{function}</cyan> - <level>{message}</level>",
        level=level
    )


class DeckWatcher:
    """Owns the conversion pipeline, the retention scheduler and their lifetimes."""

    def __init__(
        self,
        settings: Settings,
        client: Optional[GotenbergClient] = None,
        watcher: Optional[EventSource] = None,
    ):
        """
        Initialize the service.

        Args:
            settings: Complete settings (both directories set)
            client: Conversion client; built from settings when omitted
            watcher: Event source; a FileSystemWatcher on input_dir when omitted
        """
        if not settings.is_complete():
            raise ValueError("input_dir and output_dir are required")

        self.settings = settings
        self.input_dir = settings.input_dir.expanduser().resolve()
        self.output_dir = settings.output_dir.expanduser().resolve()

        self.client = client or GotenbergClient(
            base_url=settings.gotenberg_url,
            convert_timeout=settings.convert_timeout,
            health_timeout=settings.health_timeout,
        )
        self.watcher = watcher or FileSystemWatcher(
            self.input_dir, stability_seconds=settings.write_stability
        )
        self.orchestrator = ConversionOrchestrator(
            self.client, self.output_dir, settle_delay=settings.settle_delay
        )
        self.scheduler = RetentionScheduler(
            RetentionSweeper(self.input_dir, self.output_dir, settings.cleanup_days),
            interval=settings.sweep_interval_seconds,
        )
        self._stop_event: Optional[asyncio.Event] = None

    def request_stop(self) -> None:
        if self._stop_event is not None:
            self._stop_event.set()

    async def prepare(self) -> bool:
        """
        Startup checks: input folder, output folder, Gotenberg.

        Returns:
            True if the service may start
        """
        if not self.input_dir.is_dir():
            logger.error(f"Input folder '{self.input_dir}' does not exist!")
            return False

        try:
            self.output_dir.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            logger.error(f"Cannot create output folder '{self.output_dir}': {e}")
            return False

        return await self.client.health_check()

    def log_banner(self) -> None:
        logger.info(SEPARATOR)
        logger.info("Monitoring started")
        logger.info(f"Input folder:  {self.input_dir}")
        logger.info(f"Output folder: {self.output_dir}")
        logger.info(f"Gotenberg URL: {self.settings.gotenberg_url}")
        logger.info(f"Retention:     {self.settings.cleanup_days} days")
        logger.info("Waiting for new presentations... (Ctrl+C to stop)")
        logger.info(SEPARATOR)

    def start(self) -> None:
        """Start the scheduler (with its startup sweep) and the watcher."""
        self.scheduler.start()
        self.watcher.subscribe(
            on_appeared=self.orchestrator.submit,
            on_changed=self.orchestrator.submit,
        )
        self.watcher.start(asyncio.get_running_loop())

    def stop(self) -> None:
        """Best-effort shutdown; in-flight conversions are not awaited."""
        logger.info("Stopping monitoring...")
        self.scheduler.stop()
        self.watcher.stop()

    async def run(self) -> int:
        """
        Run until SIGINT/SIGTERM.

        Returns:
            Process exit code
        """
        if not await self.prepare():
            return 1

        self.log_banner()
        self._stop_event = asyncio.Event()
        self._install_signal_handlers()

        try:
            self.start()
        except OSError as e:
            logger.error(f"Failed to watch {self.input_dir}: {e}")
            self.stop()
            return 1

        await self._stop_event.wait()
        self.stop()
        return 0

    def _install_signal_handlers(self) -> None:
        loop = asyncio.get_running_loop()
        for signum in (signal.SIGINT, signal.SIGTERM):
            try:
                loop.add_signal_handler(signum, self._on_signal, signum)
            except NotImplementedError:
                # Proactor loops have no add_signal_handler
                signal.signal(
                    signum,
                    lambda s, _frame: loop.call_soon_threadsafe(self._on_signal, s),
                )

    def _on_signal(self, signum: int) -> None:
        logger.info(f"Received signal {signum}, shutting down.")
        self.request_stop()
