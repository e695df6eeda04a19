from __future__ import annotations

import logging
import time
from contextlib import contextmanager
from pathlib import Path
from typing import Any, Iterator, TextIO


class BuildLogger:
    """Build log with a console sink and two optional file sinks.

    - console   : ``min_level`` and above (human-readable)
    - info_file : INFO+ (persisted copy of the console output)
    - trace_file: every line, including TRACE and DEBUG

    Each sink has its own level gate; all lines carry wall-clock time and
    elapsed seconds since the logger was created.
    """

    LEVELS: dict[str, int] = {
        "TRACE": -1,
        "DEBUG": 0,
        "INFO": 1,
        "METRIC": 1,
        "WARN": 2,
        "ERROR": 3,
    }

    def __init__(
        self,
        log_file: str | Path | None = None,
        trace_file: str | Path | None = None,
        console: bool = True,
        min_level: str = "INFO",
    ) -> None:
        self.console = console
        self.min_level = self.LEVELS.get(min_level.upper(), 1)
        self.log_path = Path(log_file) if log_file else None
        self.trace_path = Path(trace_file) if trace_file else None
        self._info_file = self._open(self.log_path, "krecipes build log")
        self._trace_file = self._open(self.trace_path, "krecipes trace log")
        self._timings: dict[str, float] = {}
        self.counts: dict[str, int] = {"WARN": 0, "ERROR": 0}
        self._start = time.perf_counter()

    @staticmethod
    def _open(path: Path | None, banner: str) -> TextIO | None:
        if path is None:
            return None
        path.parent.mkdir(parents=True, exist_ok=True)
        handle = open(path, "w", encoding="utf-8", buffering=1)
        handle.write(f"# {banner} ({time.strftime('%Y-%m-%d %H:%M:%S')})\n\n")
        return handle

    def _write(self, line: str, level_int: int) -> None:
        if self.console and level_int >= self.min_level:
            print(line, flush=True)
        if self._info_file and level_int >= 1:
            self._info_file.write(line + "\n")
        if self._trace_file:
            self._trace_file.write(line + "\n")

    def _emit(self, level: str, msg: str) -> None:
        if level in self.counts:
            self.counts[level] += 1
        elapsed = time.perf_counter() - self._start
        line = f"[{time.strftime('%H:%M:%S')}] [{elapsed:6.2f}s] {level:6} | {msg}"
        self._write(line, self.LEVELS.get(level, 1))

    def trace(self, msg: str) -> None:
        self._emit("TRACE", msg)

    def debug(self, msg: str) -> None:
        self._emit("DEBUG", msg)

    def info(self, msg: str) -> None:
        self._emit("INFO", msg)

    def warn(self, msg: str) -> None:
        self._emit("WARN", msg)

    def error(self, msg: str) -> None:
        self._emit("ERROR", msg)

    def section(self, title: str) -> None:
        for line in ("", "=" * 72, f"  {title}", "=" * 72):
            self._write(line, 1)

    def metric(self, name: str, value: Any, unit: str = "") -> None:
        shown = f"{value:.3f}" if isinstance(value, float) else str(value)
        self._emit("METRIC", f"{name} = {shown}{' ' + unit if unit else ''}")

    @contextmanager
    def timer(self, name: str) -> Iterator[None]:
        started = time.perf_counter()
        try:
            yield
        finally:
            self._timings[name] = time.perf_counter() - started
            self._emit("METRIC", f"timer:{name} = {self._timings[name]:.3f}s")

    def summary(self) -> None:
        self.section("SUMMARY")
        self.info(f"Total wall time: {time.perf_counter() - self._start:.2f}s")
        self.info(f"Warnings: {self.counts['WARN']}  Errors: {self.counts['ERROR']}")
        for name, elapsed in sorted(self._timings.items(), key=lambda x: -x[1]):
            self.info(f"  {name:<40} {elapsed:>8.3f}s")
        if self.log_path:
            self.info(f"Info log : {self.log_path}")
        if self.trace_path:
            self.info(f"Trace log: {self.trace_path}")

    def install_stdlib_bridge(self, root_logger: str = "", level: int = logging.INFO) -> None:
        """Route records from a stdlib logger hierarchy into this logger."""
        handler = _BridgeHandler(self)
        handler.setLevel(level)
        root = logging.getLogger(root_logger)
        root.setLevel(min(root.level or logging.DEBUG, level))
        if not any(isinstance(h, _BridgeHandler) for h in root.handlers):
            root.addHandler(handler)

    def remove_stdlib_bridge(self, root_logger: str = "") -> None:
        root = logging.getLogger(root_logger)
        for h in [h for h in root.handlers if isinstance(h, _BridgeHandler)]:
            root.removeHandler(h)

    def close(self) -> None:
        for handle in (self._info_file, self._trace_file):
            if handle:
                handle.close()
        self._info_file = None
        self._trace_file = None

    def __enter__(self) -> "BuildLogger":
        return self

    def __exit__(self, *_: object) -> None:
        self.close()


class _BridgeHandler(logging.Handler):
    _MAP = {
        logging.DEBUG: "debug",
        logging.INFO: "info",
        logging.WARNING: "warn",
        logging.ERROR: "error",
        logging.CRITICAL: "error",
    }

    def __init__(self, logger: BuildLogger) -> None:
        super().__init__()
        self._target = logger

    def emit(self, record: logging.LogRecord) -> None:
        try:
            msg = self.format(record)
            getattr(self._target, self._MAP.get(record.levelno, "info"))(
                f"[{record.name}] {msg}"
            )
        except Exception:
            self.handleError(record)
