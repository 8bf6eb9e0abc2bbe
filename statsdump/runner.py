"""Loop driver - collect, write, flush, sleep, repeat."""

import sys
import time
from enum import Enum
from typing import Callable, Optional, TextIO

from .collectors import BaseCollector
from .exceptions import SourceUnavailableError
from .utils.logger import get_logger


logger = get_logger(__name__)


class HeaderPolicy(str, Enum):
    """When to write the CSV header line.

    ONCE writes it before the first tick only; output from several runs
    appended to one file will contain one header per run.
    """

    ONCE = "once"
    NEVER = "never"
    EVERY = "every"


def timestamp_ms(clock: Callable[[], float] = time.time) -> int:
    return int(clock() * 1000)


def run(
    interval_secs: int,
    collector: BaseCollector,
    out: Optional[TextIO] = None,
    header: HeaderPolicy = HeaderPolicy.ONCE,
    max_ticks: Optional[int] = None,
    clock: Callable[[], float] = time.time,
    sleep: Callable[[float], None] = time.sleep,
) -> int:
    """Drive a collector until interrupted or max_ticks is reached.

    Sleeps interval_secs after each tick; time spent collecting is not
    subtracted, so ticks drift by the collection time.

    Args:
        interval_secs: Seconds between ticks, positive.
        collector: Collector producing the rows.
        out: Output stream. Defaults to stdout.
        header: Header emission policy.
        max_ticks: Stop after this many ticks. None runs forever.
        clock: Wall-clock source returning seconds.
        sleep: Sleep function.

    Returns:
        Number of ticks run.
    """
    if isinstance(interval_secs, bool) or not isinstance(interval_secs, int) or interval_secs < 1:
        raise ValueError(f"interval_secs must be a positive integer, got {interval_secs!r}")
    header = HeaderPolicy(header)
    out = out or sys.stdout

    logger.info("Running %s collector every %ds", collector.collector_name, interval_secs)

    ticks = 0
    header_written = False
    while max_ticks is None or ticks < max_ticks:
        now_ms = timestamp_ms(clock)

        try:
            rows = collector.collect(now_ms)
        except SourceUnavailableError as exc:
            logger.warning("Skipping tick at %d: %s", now_ms, exc)
            rows = None

        if rows is not None:
            if header is HeaderPolicy.EVERY or (header is HeaderPolicy.ONCE and not header_written):
                out.write(collector.header + "\n")
                header_written = True
            for row in rows:
                out.write(row + "\n")
            out.flush()

        ticks += 1
        if max_ticks is not None and ticks >= max_ticks:
            break
        sleep(interval_secs)

    return ticks
