"""Process collector - gathers information about running processes."""

from typing import List

from ..models import ProcessSample
from ..utils.logger import get_logger
from .base_collector import BaseCollector


logger = get_logger(__name__)


class ProcessCollector(BaseCollector):
    """Collects one row per running process."""

    @property
    def collector_name(self) -> str:
        return "proc"

    @property
    def columns(self):
        return ProcessSample.COLUMNS

    def collect_processes(self, timestamp_ms: int) -> List[ProcessSample]:
        """Collect every process visible to us.

        Rows keep the source's enumeration order. A process that exits
        while being read is left out of this tick.
        """
        samples = [ProcessSample.from_info(timestamp_ms, info) for info in self.source.processes()]
        logger.debug("Collected %d processes", len(samples))
        return samples

    def collect(self, timestamp_ms: int) -> List[str]:
        return [sample.to_row() for sample in self.collect_processes(timestamp_ms)]

    def check(self) -> None:
        # Only enumeration must succeed; the first record is enough
        next(iter(self.source.processes()), None)
