"""Logging for cochange.

Everything here writes to stderr; stdout carries the group listing or
the JSON report. Long commit scans get a tqdm bar when stderr is a
terminal.
"""

import logging
import os
import sys
import time
from collections.abc import Generator, Iterable
from contextlib import contextmanager
from typing import Any, TypeVar

from tqdm import tqdm

T = TypeVar("T")

logger = logging.getLogger("cochange")
logger.setLevel(logging.INFO)

if not logger.handlers:
    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(
        logging.Formatter("[cochange] %(asctime)s %(levelname)s: %(message)s", datefmt="%H:%M:%S")
    )
    logger.addHandler(handler)


class RunStats:
    """Counters collected while an operation runs.

    Callers fill ``counts`` through ``record()``; they are appended to
    the completion message, e.g. ``commits=412 groups=37``.
    """

    def __init__(self, operation: str) -> None:
        self.operation = operation
        self.counts: dict[str, int] = {}
        self.seconds: float = 0.0

    def record(self, **counts: int) -> None:
        self.counts.update(counts)

    def summary(self) -> str:
        return " ".join(f"{name}={value}" for name, value in self.counts.items())


@contextmanager
def log_operation(operation: str, **details: Any) -> Generator[RunStats, None, None]:
    """Log the start and outcome of a pipeline stage.

    Args:
        operation: Stage name, e.g. "cluster".
        **details: Context shown in the start message (repo path, limits).

    Yields:
        RunStats whose recorded counts are logged on success.

    Example:
        with log_operation("cluster", repo=path) as stats:
            ...
            stats.record(commits=engine.commits_seen, groups=len(engine))
    """
    context = "".join(f" {k}={v}" for k, v in details.items())
    logger.info("%s started%s", operation, context)

    stats = RunStats(operation)
    start = time.perf_counter()
    try:
        yield stats
    except Exception as e:
        stats.seconds = time.perf_counter() - start
        logger.error("%s failed after %.2fs: %s", operation, stats.seconds, e)
        raise

    stats.seconds = time.perf_counter() - start
    summary = stats.summary()
    logger.info(
        "%s finished in %.2fs%s", operation, stats.seconds, f" ({summary})" if summary else ""
    )


def _progress_disabled() -> bool:
    """COCHANGE_DISABLE_PROGRESS=1 or a non-TTY stderr turns bars off."""
    return (
        os.getenv("COCHANGE_DISABLE_PROGRESS", "").lower() in ("1", "true", "yes")
        or not sys.stderr.isatty()
    )


def progress_bar(
    iterable: Iterable[T],
    desc: str,
    total: int,
    unit: str = "commits",
) -> Iterable[T]:
    """Show a tqdm bar for an iteration of known length.

    Without a terminal the iterable is returned untouched; large runs
    get a single log line instead.
    """
    if _progress_disabled():
        if total > 100:
            logger.info("%s: %d %s", desc, total, unit)
        return iterable

    return tqdm(iterable, desc=desc, total=total, unit=unit, file=sys.stderr, leave=False)
