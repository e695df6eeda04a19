"""Content directory watcher that rebuilds the site on change.

Features:
- Batch debounce: a burst of saves triggers one rebuild after the quiet period
- Ignores editor swap/backup files and ``.tmp`` files (atomic write pattern)
- Only recipe suffixes (``.md``/``.mdx``) trigger a rebuild
- A failed rebuild is logged; the watcher keeps running
- SIGTERM/SIGINT handler: drains the pending batch before shutdown
"""

from __future__ import annotations

import logging
import signal
import threading
from collections.abc import Callable
from pathlib import Path

from watchdog.events import FileSystemEvent, FileSystemEventHandler
from watchdog.observers import Observer

from krecipes.content.store import RECIPE_SUFFIXES

logger = logging.getLogger(__name__)

IGNORED_SUFFIXES = (".tmp", ".swp", ".swx", ".bak")


def _event_path(raw: str | bytes) -> Path:
    return Path(raw.decode("utf-8") if isinstance(raw, bytes) else raw)


def is_recipe_file(path: Path) -> bool:
    name = path.name
    if name.startswith((".#", "~")) or name.endswith("~"):
        return False
    if path.suffix in IGNORED_SUFFIXES:
        return False
    return path.suffix.lower() in RECIPE_SUFFIXES


class RebuildHandler(FileSystemEventHandler):
    """Watchdog handler that collects changed recipe paths and flushes them after a quiet period."""

    def __init__(
        self,
        on_change: Callable[[list[Path]], None],
        debounce_seconds: float = 0.5,
    ) -> None:
        super().__init__()
        self.on_change = on_change
        self.debounce_seconds = debounce_seconds
        self._pending: dict[str, Path] = {}
        self._lock = threading.Lock()
        self._timer: threading.Timer | None = None

    def on_created(self, event: FileSystemEvent) -> None:
        if not event.is_directory:
            self._queue(_event_path(event.src_path))

    def on_modified(self, event: FileSystemEvent) -> None:
        if not event.is_directory:
            self._queue(_event_path(event.src_path))

    def on_deleted(self, event: FileSystemEvent) -> None:
        if not event.is_directory:
            self._queue(_event_path(event.src_path))

    def on_moved(self, event: FileSystemEvent) -> None:
        if event.is_directory:
            return
        self._queue(_event_path(event.src_path))
        self._queue(_event_path(event.dest_path))

    def _queue(self, path: Path) -> None:
        if not is_recipe_file(path):
            logger.debug("[Watcher] Ignoring %s", path)
            return
        with self._lock:
            self._pending[str(path)] = path
            if self._timer is not None:
                self._timer.cancel()
            self._timer = threading.Timer(self.debounce_seconds, self.flush)
            self._timer.daemon = True
            self._timer.start()

    def pending(self) -> list[Path]:
        with self._lock:
            return sorted(self._pending.values())

    def flush(self) -> None:
        """Hand the pending batch to the callback now."""
        with self._lock:
            if self._timer is not None:
                self._timer.cancel()
                self._timer = None
            if not self._pending:
                return
            changed = sorted(self._pending.values())
            self._pending.clear()

        logger.info("[Watcher] %d file(s) changed, rebuilding", len(changed))
        self.on_change(changed)


class SiteWatcher:
    """Watches the content directory and calls ``rebuild`` after changes settle."""

    def __init__(
        self,
        content_dir: str | Path,
        rebuild: Callable[[], object],
        debounce_seconds: float = 0.5,
    ) -> None:
        self.content_dir = Path(content_dir)
        self.rebuild = rebuild
        self.rebuilds = 0
        self.failures = 0
        self._handler = RebuildHandler(self._on_change, debounce_seconds=debounce_seconds)
        self._observer = Observer()
        self._running = False
        self._stopped = threading.Event()
        self._original_handlers: dict[int, object] = {}

    @property
    def running(self) -> bool:
        return self._running

    def _on_change(self, changed: list[Path]) -> None:
        for path in changed:
            logger.debug("[Watcher] changed: %s", path)
        try:
            self.rebuild()
            self.rebuilds += 1
        except Exception as exc:
            self.failures += 1
            logger.error("[Watcher] Rebuild failed: %s", exc)

    def start(self, install_signal_handlers: bool = False) -> None:
        if self._running:
            return
        if install_signal_handlers:
            self._setup_signal_handlers()
        self._observer.schedule(self._handler, str(self.content_dir), recursive=True)
        self._observer.start()
        self._running = True
        logger.info("[Watcher] Watching %s", self.content_dir)

    def stop(self) -> None:
        """Flush pending changes, stop the observer and restore signal handlers."""
        if not self._running:
            return
        logger.info("[Watcher] Stopping...")
        self._handler.flush()
        self._observer.stop()
        self._observer.join(timeout=5.0)
        self._running = False
        self._restore_signal_handlers()
        self._stopped.set()
        logger.info("[Watcher] Stopped")

    def wait(self) -> None:
        """Block until :meth:`stop` is called (e.g. from a signal handler)."""
        while not self._stopped.wait(timeout=0.5):
            pass

    def _setup_signal_handlers(self) -> None:
        def handler(signum, frame):
            logger.info("[Watcher] Received signal %s, shutting down", signum)
            self.stop()

        for sig in (signal.SIGTERM, signal.SIGINT):
            self._original_handlers[sig] = signal.signal(sig, handler)

    def _restore_signal_handlers(self) -> None:
        for sig, original in self._original_handlers.items():
            signal.signal(sig, original)
        self._original_handlers.clear()
