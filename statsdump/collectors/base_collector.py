"""Base collector class with common functionality."""

from abc import ABC, abstractmethod
from typing import List, Optional, Sequence

from ..models import format_row
from ..sources import ProcFsSource, SystemInfoSource


class BaseCollector(ABC):
    """Abstract base class for all collectors.

    A collector turns one snapshot of a source into CSV rows that all carry
    the same timestamp.
    """

    def __init__(self, source: Optional[SystemInfoSource] = None):
        """Initialize the collector.

        Args:
            source: Where OS state is read from. Defaults to /proc.
        """
        self.source = source or ProcFsSource()

    @property
    @abstractmethod
    def collector_name(self) -> str:
        """Name of this collector for logging."""
        pass

    @property
    @abstractmethod
    def columns(self) -> Sequence[str]:
        """Column names, in row order."""
        pass

    @property
    def header(self) -> str:
        return format_row(self.columns)

    @abstractmethod
    def collect(self, timestamp_ms: int) -> List[str]:
        """Take one snapshot and format it.

        Args:
            timestamp_ms: Wall-clock time of the tick in milliseconds.

        Returns:
            Formatted rows, without line terminators.

        Raises:
            SourceUnavailableError: The source couldn't be read this tick.
        """
        pass

    @abstractmethod
    def check(self) -> None:
        """Probe the source once before the first tick.

        Raises:
            SourceUnavailableError: The source can't be opened at all.
        """
        pass
