"""Mount collector - gathers the mounted filesystem table."""

from typing import List, Optional

from ..models import MountSample
from ..sources import SystemInfoSource
from ..sources.psutil_source import disk_usage
from .base_collector import BaseCollector


# Reported when a filesystem can't be queried
UNKNOWN_USAGE = (0, 0, 0, 100)


class MountCollector(BaseCollector):
    """Collects one row per mount table entry."""

    def __init__(self, source: Optional[SystemInfoSource] = None, usage: bool = False):
        """Initialize mount collector.

        Args:
            source: Where OS state is read from.
            usage: Append used/available/total KiB and use% columns.
        """
        super().__init__(source)
        self.usage = usage

    @property
    def collector_name(self) -> str:
        return "mount"

    @property
    def columns(self):
        return MountSample.columns(usage=self.usage)

    def collect_mounts(self, timestamp_ms: int) -> List[MountSample]:
        """Collect the mount table in its on-disk order.

        Mount options are joined with ";" so they don't collide with the
        CSV separator.
        """
        samples = []
        for entry in self.source.mounts():
            usage = None
            if self.usage:
                usage = disk_usage(entry.dest) or UNKNOWN_USAGE
            samples.append(MountSample.from_entry(timestamp_ms, entry, usage))
        return samples

    def collect(self, timestamp_ms: int) -> List[str]:
        return [sample.to_row() for sample in self.collect_mounts(timestamp_ms)]

    def check(self) -> None:
        next(iter(self.source.mounts()), None)
