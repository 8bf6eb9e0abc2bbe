# Sources module
"""
OS data sources the collectors read from.
"""

from pathlib import Path
from typing import Union

from .base import SystemInfoSource
from .procfs import ProcFsSource
from .psutil_source import PsutilSource


def make_source(kind: str = "procfs", proc_root: Union[str, Path] = "/proc") -> SystemInfoSource:
    """Build a source by name ("procfs" or "psutil")."""
    if kind == "procfs":
        return ProcFsSource(proc_root)
    if kind == "psutil":
        return PsutilSource()
    raise ValueError(f"unknown source {kind!r}")


__all__ = [
    "SystemInfoSource",
    "ProcFsSource",
    "PsutilSource",
    "make_source",
]
