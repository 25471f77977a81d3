"""Logging configuration for heaptrace.

Logs to stderr so that rendered query results on stdout stay clean.
Per-query detail is gated by a Verbosity tier carried in the query's
configuration rather than by any process-wide switch.
"""

import logging
import os
import sys
import time
from collections.abc import Generator, Iterable
from contextlib import contextmanager
from enum import IntEnum
from typing import Any, TypeVar

from tqdm import tqdm

# Progress bars are disabled with HEAPTRACE_DISABLE_PROGRESS=1 or when
# stderr is not a TTY (pipes, CI, test runners).
_DISABLE_PROGRESS = (
    os.getenv("HEAPTRACE_DISABLE_PROGRESS", "").lower() in ("1", "true", "yes")
    or not sys.stderr.isatty()
)

T = TypeVar("T")

logger = logging.getLogger("heaptrace")
logger.setLevel(logging.INFO)

if not logger.handlers:
    handler = logging.StreamHandler(sys.stderr)
    handler.setLevel(logging.DEBUG)
    formatter = logging.Formatter(
        "[heaptrace] %(asctime)s %(levelname)s: %(message)s",
        datefmt="%H:%M:%S",
    )
    handler.setFormatter(formatter)
    logger.addHandler(handler)


class Verbosity(IntEnum):
    """How much per-node and per-edge detail a query logs.

    Never affects what a query returns.
    """

    SILENT = 0
    NORMAL = 1
    VERBOSE = 2
    DEBUG = 3

    @classmethod
    def parse(cls, value: "str | int | Verbosity") -> "Verbosity":
        """Accept a tier name ("verbose") or number (2 or "2").

        Numbers outside the known tiers are clamped to SILENT or DEBUG.
        """
        if isinstance(value, cls):
            return value
        if isinstance(value, int):
            return cls(max(cls.SILENT, min(cls.DEBUG, value)))
        text = str(value).strip()
        if text.lstrip("-").isdigit():
            return cls.parse(int(text))
        try:
            return cls[text.upper()]
        except KeyError:
            raise ValueError(
                f"Unknown verbosity '{value}'. Must be one of: "
                f"{', '.join(v.name.lower() for v in cls)}"
            ) from None


class QueryLog:
    """Logging sink for a single query.

    Messages are emitted to ``sink`` only when ``verbosity`` reaches the
    tier each method stands for.
    """

    def __init__(
        self,
        verbosity: Verbosity = Verbosity.NORMAL,
        sink: logging.Logger | None = None,
    ) -> None:
        self.verbosity = verbosity
        self.sink = sink if sink is not None else logger

    def enabled(self, tier: Verbosity) -> bool:
        return self.verbosity >= tier

    def summary(self, message: str, *args: Any) -> None:
        """Operation start and finish banners."""
        if self.verbosity >= Verbosity.NORMAL:
            self.sink.info(message, *args)

    def detail(self, message: str, *args: Any) -> None:
        """Query headlines, totals and per-node output."""
        if self.verbosity >= Verbosity.VERBOSE:
            self.sink.info(message, *args)

    def trace(self, message: str, *args: Any) -> None:
        """Per-edge output; can be very large."""
        if self.verbosity >= Verbosity.DEBUG:
            self.sink.info(message, *args)

    def warning(self, message: str, *args: Any) -> None:
        if self.verbosity > Verbosity.SILENT:
            self.sink.warning(message, *args)

    def error(self, message: str, *args: Any) -> None:
        if self.verbosity > Verbosity.SILENT:
            self.sink.error(message, *args)


class TimingContext:
    """Context object that captures elapsed time from an operation.

    Attributes:
        elapsed: Elapsed time in seconds (set after context exits).
        elapsed_ms: Elapsed time in milliseconds (set after context exits).
    """

    def __init__(self) -> None:
        self.elapsed: float = 0.0
        self.elapsed_ms: float = 0.0
        self._start: float = 0.0

    def start(self) -> None:
        self._start = time.perf_counter()

    def stop(self) -> None:
        self.elapsed = time.perf_counter() - self._start
        self.elapsed_ms = self.elapsed * 1000


@contextmanager
def log_operation(
    operation: str,
    details: dict[str, Any] | None = None,
    log: QueryLog | None = None,
) -> Generator[TimingContext, None, None]:
    """Context manager for logging operation start/end with timing.

    Args:
        operation: Name of the operation.
        details: Optional details dict to include in start message.
        log: Sink to report through (default: NORMAL verbosity on the
            package logger).

    Yields:
        TimingContext object with elapsed time after context exits.

    Example:
        with log_operation("build_heap_graph", {"nodes": 1200}) as timing:
            ...
        print(f"Took {timing.elapsed_ms:.1f}ms")
    """
    log = log if log is not None else QueryLog()
    details_str = ""
    if details:
        details_str = " " + " ".join(f"{k}={v}" for k, v in details.items())

    log.summary("▶ Starting %s%s", operation, details_str)

    ctx = TimingContext()
    ctx.start()

    try:
        yield ctx
    except Exception as e:
        ctx.stop()
        log.error("✗ %s failed after %.2fs: %s", operation, ctx.elapsed, e)
        raise
    else:
        ctx.stop()
        log.summary("✓ Completed %s in %.2fs", operation, ctx.elapsed)


def progress_bar(
    iterable: Iterable[T],
    desc: str | None = None,
    total: int | None = None,
    unit: str = "it",
    disable: bool = False,
) -> Iterable[T]:
    """Wrap an iterable with a tqdm progress bar on stderr.

    Plain iteration is returned when disabled or when stderr is not a TTY.

    Args:
        iterable: The iterable to wrap.
        desc: Description shown before the progress bar.
        total: Total number of items (required for generators).
        unit: Unit name for the items (e.g., "nodes", "edges").
        disable: If True, disable progress bar entirely.

    Returns:
        Wrapped iterable that shows progress.
    """
    if disable or _DISABLE_PROGRESS:
        return iterable

    return tqdm(
        iterable,
        desc=f"  {desc}" if desc else None,
        total=total,
        unit=unit,
        file=sys.stderr,
        ncols=80,
        leave=False,
        bar_format="{l_bar}{bar}| {n_fmt}/{total_fmt} [{elapsed}<{remaining}, {rate_fmt}]",
    )
