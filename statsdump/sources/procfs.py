"""Linux procfs source - reads the kernel's text files directly."""

import os
import re
from pathlib import Path
from typing import Iterator, List, Optional, Union

from ..exceptions import SourceUnavailableError
from ..models import LoadAverage, MemoryInfo, MountEntry, ProcessInfo, single_line
from ..utils.logger import get_logger
from .base import SystemInfoSource


logger = get_logger(__name__)

# meminfo key -> MemoryInfo field
MEMINFO_FIELDS = {
    "MemTotal": "total_kb",
    "MemFree": "free_kb",
    "Buffers": "buffers_kb",
    "Cached": "cached_kb",
}

# Indexes into /proc/<pid>/stat after the ")" closing comm (field 3 is index 0)
STAT_UTIME = 11
STAT_STIME = 12
STAT_NUM_THREADS = 17
STAT_STARTTIME = 19

# Only space, tab and backslash are decoded; \012 stays escaped so a mount
# path can't split a row
_OCTAL_ESCAPE = re.compile(r"\\(040|011|134)")


def unescape_mount_field(value: str) -> str:
    """Decode the octal escapes (\\040 etc.) the kernel uses in mount paths."""
    return _OCTAL_ESCAPE.sub(lambda m: chr(int(m.group(1), 8)), value)


def parse_meminfo(text: str) -> MemoryInfo:
    """Parse /proc/meminfo. Absent fields stay at 0."""
    values = {}
    for line in text.splitlines():
        key, sep, rest = line.partition(":")
        if not sep or key not in MEMINFO_FIELDS:
            continue
        parts = rest.split()
        try:
            values[MEMINFO_FIELDS[key]] = int(parts[0])
        except (IndexError, ValueError):
            logger.debug("Bad meminfo line: %r", line)
    return MemoryInfo(**values)


def parse_loadavg(text: str) -> LoadAverage:
    parts = text.split()
    if len(parts) < 3:
        raise ValueError(f"expected 3 load averages, got {text!r}")
    return LoadAverage(float(parts[0]), float(parts[1]), float(parts[2]))


def parse_mount_line(line: str) -> Optional[MountEntry]:
    """Parse one mount table line, None if malformed."""
    parts = line.split()
    if len(parts) < 6:
        return None
    try:
        dump, pass_ = int(parts[4]), int(parts[5])
    except ValueError:
        return None
    return MountEntry(
        source=unescape_mount_field(parts[0]),
        dest=unescape_mount_field(parts[1]),
        fstype=parts[2],
        options=tuple(parts[3].split(",")),
        dump=dump,
        pass_=pass_,
    )


class ProcFsSource(SystemInfoSource):
    """Reads memory, load, processes and mounts from a procfs mount."""

    def __init__(self, root: Union[str, Path] = "/proc"):
        """Initialize the source.

        Args:
            root: Where procfs is mounted. Tests point this at a fixture tree.
        """
        self.root = Path(root)

    @property
    def source_name(self) -> str:
        return f"procfs:{self.root}"

    def _read_text(self, *parts: str) -> str:
        path = self.root.joinpath(*parts)
        try:
            return path.read_text(encoding="utf-8", errors="replace")
        except OSError as exc:
            raise SourceUnavailableError(str(path), exc.strerror or str(exc)) from exc

    def memory(self) -> MemoryInfo:
        return parse_meminfo(self._read_text("meminfo"))

    def load_average(self) -> LoadAverage:
        text = self._read_text("loadavg")
        try:
            return parse_loadavg(text)
        except ValueError as exc:
            raise SourceUnavailableError(str(self.root / "loadavg"), str(exc)) from exc

    def pids(self) -> List[int]:
        """Numeric entries of the procfs root, in directory order."""
        try:
            names = os.listdir(self.root)
        except OSError as exc:
            raise SourceUnavailableError(str(self.root), exc.strerror or str(exc)) from exc
        return [int(name) for name in names if name.isdigit()]

    def processes(self) -> Iterator[ProcessInfo]:
        for pid in self.pids():
            info = self.process(pid)
            if info is not None:
                yield info

    def process(self, pid: int) -> Optional[ProcessInfo]:
        """Read one process, None if it vanished or its stat is unreadable."""
        proc_dir = self.root / str(pid)
        try:
            # Directory owner is the effective uid (root for non-dumpable)
            owner = os.stat(proc_dir).st_uid
            stat = (proc_dir / "stat").read_text(encoding="utf-8", errors="replace")
        except OSError:
            # Exited between enumeration and read
            return None

        try:
            name, fields = self._split_stat(stat)
            utime = int(fields[STAT_UTIME])
            stime = int(fields[STAT_STIME])
            num_threads = int(fields[STAT_NUM_THREADS])
            starttime = int(fields[STAT_STARTTIME])
        except (IndexError, ValueError):
            logger.debug("Skipping pid %d: malformed stat", pid)
            return None

        return ProcessInfo(
            pid=pid,
            owner=owner,
            open_fd_count=self._fd_count(proc_dir),
            num_threads=num_threads,
            starttime=starttime,
            utime=utime,
            stime=stime,
            cmdline=single_line(self._cmdline(proc_dir) or f"[{name}]"),
        )

    @staticmethod
    def _split_stat(stat: str):
        # comm may contain spaces and parentheses; it ends at the last ")"
        start = stat.index("(")
        end = stat.rindex(")")
        return stat[start + 1:end], stat[end + 2:].split()

    @staticmethod
    def _fd_count(proc_dir: Path) -> int:
        try:
            return len(os.listdir(proc_dir / "fd"))
        except OSError:
            return -1

    @staticmethod
    def _cmdline(proc_dir: Path) -> str:
        try:
            raw = (proc_dir / "cmdline").read_bytes()
        except OSError:
            return ""
        args = [arg.decode("utf-8", errors="replace") for arg in raw.split(b"\0")]
        while args and not args[-1]:
            args.pop()
        return " ".join(args)

    def mounts(self) -> Iterator[MountEntry]:
        text = self._read_text("mounts")
        for line in text.splitlines():
            if not line.strip():
                continue
            entry = parse_mount_line(line)
            if entry is None:
                logger.debug("Skipping malformed mount line: %r", line)
                continue
            yield entry
