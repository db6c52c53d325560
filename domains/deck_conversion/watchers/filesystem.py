"""
File system watcher for the Deck Conversion domain.

Monitors the input directory (non-recursively) and reports files that
appear or change once they have been quiet for a stability window, so
that partially copied files are not reported mid-write.
Uses watchdog library for cross-platform file system event monitoring;
events are handed over to the asyncio loop and debounced there.
"""

import asyncio
import os
from enum import Enum
from pathlib import Path
from typing import Callable, Dict, Optional, Protocol, Tuple

from loguru import logger
from watchdog.events import DirModifiedEvent, FileSystemEvent, FileSystemEventHandler
from watchdog.observers import Observer

from app.utils.helpers import is_hidden

PathCallback = Callable[[str], None]
ErrorCallback = Callable[[Exception], None]


class WatchEventKind(str, Enum):
    APPEARED = "appeared"
    CHANGED = "changed"


def log_watch_error(error: Exception) -> None:
    logger.error(f"Watcher error: {error}")


class EventSource(Protocol):
    """Anything that reports presentations appearing in a directory."""

    def subscribe(
        self,
        on_appeared: PathCallback,
        on_changed: PathCallback,
        on_error: Optional[ErrorCallback] = None,
    ) -> None:
        ...

    def start(self, loop: Optional[asyncio.AbstractEventLoop] = None) -> None:
        ...

    def stop(self) -> None:
        ...


class WatchEventHandler(FileSystemEventHandler):
    """Forwards watchdog events from the observer thread to the loop."""

    def __init__(
        self,
        loop: asyncio.AbstractEventLoop,
        forward: Callable[[WatchEventKind, str], None],
    ):
        """
        Initialize event handler.

        Args:
            loop: Loop that owns all debounce state
            forward: Loop-side callable receiving (kind, path)
        """
        super().__init__()
        self.loop = loop
        # dispatch() is FileSystemEventHandler's own entry point
        self.forward = forward

    def should_process(self, path: str) -> bool:
        return not is_hidden(Path(path))

    def on_created(self, event: FileSystemEvent):
        """Handle file creation."""
        if event.is_directory or not self.should_process(os.fsdecode(event.src_path)):
            return
        self._forward(WatchEventKind.APPEARED, os.fsdecode(event.src_path))

    def on_modified(self, event: FileSystemEvent):
        """Handle file modification."""
        # Directory modifications only echo changes to their children
        if isinstance(event, DirModifiedEvent) or event.is_directory:
            return
        if not self.should_process(os.fsdecode(event.src_path)):
            return
        self._forward(WatchEventKind.CHANGED, os.fsdecode(event.src_path))

    def on_moved(self, event: FileSystemEvent):
        """Handle rename into the watched directory."""
        dest = getattr(event, "dest_path", None)
        if event.is_directory or not dest or not self.should_process(os.fsdecode(dest)):
            return
        self._forward(WatchEventKind.APPEARED, os.fsdecode(dest))

    def _forward(self, kind: WatchEventKind, path: str) -> None:
        try:
            self.loop.call_soon_threadsafe(self.forward, kind, path)
        except RuntimeError:
            # Loop already closed during shutdown
            logger.debug(f"Dropped {kind.value} event for {path}")


class FileSystemWatcher:
    """watchdog-backed event source for a single input directory."""

    def __init__(self, watch_dir: Path, stability_seconds: float = 2.0):
        """
        Initialize file system watcher.

        Args:
            watch_dir: Directory to watch (not recursive)
            stability_seconds: Quiet period required before reporting a path
        """
        self.watch_dir = Path(watch_dir).resolve()
        self.stability_seconds = stability_seconds

        self._on_appeared: Optional[PathCallback] = None
        self._on_changed: Optional[PathCallback] = None
        self._on_error: ErrorCallback = log_watch_error

        self._loop: Optional[asyncio.AbstractEventLoop] = None
        self._observer: Optional[Observer] = None
        self._pending: Dict[str, Tuple[asyncio.TimerHandle, WatchEventKind]] = {}

    def subscribe(
        self,
        on_appeared: PathCallback,
        on_changed: PathCallback,
        on_error: Optional[ErrorCallback] = None,
    ) -> None:
        self._on_appeared = on_appeared
        self._on_changed = on_changed
        if on_error is not None:
            self._on_error = on_error

    @property
    def running(self) -> bool:
        return self._observer is not None

    def start(self, loop: Optional[asyncio.AbstractEventLoop] = None) -> None:
        """
        Start the observer, then report files already present.

        Raises:
            OSError: if the directory cannot be watched
        """
        if self._observer is not None:
            return

        self._loop = loop or asyncio.get_running_loop()
        handler = WatchEventHandler(self._loop, self._schedule)

        observer = Observer()
        observer.schedule(handler, str(self.watch_dir), recursive=False)
        observer.daemon = True
        observer.start()
        self._observer = observer
        logger.success(f"Started watching: {self.watch_dir}")

        self._initial_scan()

    def stop(self) -> None:
        """Stop watching and drop pending events."""
        for handle, _ in self._pending.values():
            handle.cancel()
        self._pending.clear()

        if self._observer is None:
            return
        self._observer.stop()
        self._observer.join(timeout=5)
        self._observer = None
        logger.info("File system observer stopped")

    def _initial_scan(self) -> None:
        try:
            entries = sorted(self.watch_dir.iterdir())
        except OSError as e:
            self._report_error(e)
            return

        for entry in entries:
            if entry.is_file() and not is_hidden(entry):
                self._schedule(WatchEventKind.APPEARED, str(entry))

    def _schedule(self, kind: WatchEventKind, path: str) -> None:
        """(Re)arm the stability timer for path. Runs on the loop thread."""
        if self._loop is None:
            return

        pending = self._pending.pop(path, None)
        if pending is not None:
            handle, previous = pending
            handle.cancel()
            if previous is WatchEventKind.APPEARED:
                kind = previous

        handle = self._loop.call_later(self.stability_seconds, self._emit, kind, path)
        self._pending[path] = (handle, kind)

    def _emit(self, kind: WatchEventKind, path: str) -> None:
        self._pending.pop(path, None)
        callback = self._on_appeared if kind is WatchEventKind.APPEARED else self._on_changed
        if callback is None:
            return

        try:
            callback(path)
        except Exception as e:
            self._report_error(e)

    def _report_error(self, error: Exception) -> None:
        try:
            self._on_error(error)
        except Exception as e:
            logger.error(f"Watcher error handler failed: {e}")
