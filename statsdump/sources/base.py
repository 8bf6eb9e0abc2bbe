"""Interface every OS data source implements."""

from abc import ABC, abstractmethod
from typing import Iterator

from ..models import LoadAverage, MemoryInfo, MountEntry, ProcessInfo


class SystemInfoSource(ABC):
    """Read access to global OS state.

    The underlying data is racy and unversioned. Methods raise
    SourceUnavailableError when the whole source can't be read; iterators
    skip individual entries that disappear or are malformed.
    """

    @property
    @abstractmethod
    def source_name(self) -> str:
        """Name of this source for logging."""
        pass

    @abstractmethod
    def memory(self) -> MemoryInfo:
        pass

    @abstractmethod
    def load_average(self) -> LoadAverage:
        pass

    @abstractmethod
    def processes(self) -> Iterator[ProcessInfo]:
        """Yield one record per process still alive when its details are read.

        Enumeration happens before the first record is yielded, so an
        unreadable process table raises on the first ``next()``.
        """
        pass

    @abstractmethod
    def mounts(self) -> Iterator[MountEntry]:
        pass
