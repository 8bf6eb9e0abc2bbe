"""System collector - memory counters and load averages."""

from typing import List, Optional

from ..models import SystemSample
from ..sources import SystemInfoSource
from .base_collector import BaseCollector


class SystemCollector(BaseCollector):
    """Collects one memory/load row per tick."""

    def __init__(self, source: Optional[SystemInfoSource] = None, id: str = ""):
        """Initialize system collector.

        Args:
            source: Where OS state is read from.
            id: Identifier written in the first column of every row,
                typically the hostname.
        """
        super().__init__(source)
        self.id = id or ""

    @property
    def collector_name(self) -> str:
        return "sys"

    @property
    def columns(self):
        return SystemSample.COLUMNS

    def collect_system(self, timestamp_ms: int) -> SystemSample:
        """Read memory and load for one tick.

        Memory is reported by the kernel in KiB and converted to bytes. A
        counter missing from an otherwise readable source is 0, so every
        column is always present.
        """
        mem = self.source.memory()
        load = self.source.load_average()

        return SystemSample(
            id=self.id,
            time_ms=timestamp_ms,
            mem_total=mem.total_kb * 1024,
            mem_free=mem.free_kb * 1024,
            mem_buffers=mem.buffers_kb * 1024,
            mem_cached=mem.cached_kb * 1024,
            load_avg_1=load.one,
            load_avg_5=load.five,
            load_avg_15=load.fifteen,
        )

    def collect(self, timestamp_ms: int) -> List[str]:
        return [self.collect_system(timestamp_ms).to_row()]

    def check(self) -> None:
        self.source.memory()
        self.source.load_average()
