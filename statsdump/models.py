"""Sample records and their CSV row format.

Rows are comma separated and never quoted. Free-form text (cmdline, mount
paths, fstype) is written verbatim, so a value containing a comma produces
extra columns; consumers of the existing format rely on this layout.
"""

from dataclasses import dataclass, fields
from typing import List, Optional, Tuple


SEPARATOR = ","


def format_row(values) -> str:
    return SEPARATOR.join(str(v) for v in values)


def single_line(text: str) -> str:
    """Replace line breaks so a free-form value can't end its record early."""
    return text.replace("\r", " ").replace("\n", " ")


# Source-level records (no timestamp)

@dataclass(frozen=True)
class MemoryInfo:
    """Memory counters in KiB, as exposed by the kernel."""

    total_kb: int = 0
    free_kb: int = 0
    buffers_kb: int = 0
    cached_kb: int = 0


@dataclass(frozen=True)
class LoadAverage:
    one: float
    five: float
    fifteen: float


@dataclass(frozen=True)
class ProcessInfo:
    pid: int
    owner: int
    open_fd_count: int
    num_threads: int
    starttime: int
    utime: int
    stime: int
    cmdline: str


@dataclass(frozen=True)
class MountEntry:
    source: str
    dest: str
    fstype: str
    options: Tuple[str, ...]
    dump: int
    pass_: int


# Emitted samples

@dataclass(frozen=True)
class SystemSample:
    id: str
    time_ms: int
    mem_total: int
    mem_free: int
    mem_buffers: int
    mem_cached: int
    load_avg_1: float
    load_avg_5: float
    load_avg_15: float

    COLUMNS = (
        "id", "time_ms", "mem_total", "mem_free", "mem_buffers", "mem_cached",
        "load_avg_1", "load_avg_5", "load_avg_15",
    )

    def to_row(self) -> str:
        return format_row(getattr(self, f.name) for f in fields(self))

    @classmethod
    def from_row(cls, row: str) -> "SystemSample":
        # id is operator supplied and may itself contain commas
        parts = row.rstrip("\n").rsplit(SEPARATOR, len(cls.COLUMNS) - 1)
        if len(parts) != len(cls.COLUMNS):
            raise ValueError(f"expected {len(cls.COLUMNS)} fields, got {len(parts)}")
        return cls(
            parts[0],
            *(int(p) for p in parts[1:6]),
            *(float(p) for p in parts[6:]),
        )


@dataclass(frozen=True)
class ProcessSample:
    time_ms: int
    pid: int
    owner: int
    open_fd_count: int
    num_threads: int
    starttime: int
    utime: int
    stime: int
    cmdline: str

    COLUMNS = (
        "time_ms", "pid", "owner", "open_fd_count", "num_threads",
        "starttime", "utime", "stime", "cmdline",
    )

    @classmethod
    def from_info(cls, time_ms: int, info: ProcessInfo) -> "ProcessSample":
        return cls(
            time_ms=time_ms,
            pid=info.pid,
            owner=info.owner,
            open_fd_count=info.open_fd_count,
            num_threads=info.num_threads,
            starttime=info.starttime,
            utime=info.utime,
            stime=info.stime,
            cmdline=info.cmdline,
        )

    def to_row(self) -> str:
        return format_row(getattr(self, f.name) for f in fields(self))

    @classmethod
    def from_row(cls, row: str) -> "ProcessSample":
        # cmdline is the trailing free-form field and keeps any commas
        parts = row.rstrip("\n").split(SEPARATOR, len(cls.COLUMNS) - 1)
        if len(parts) != len(cls.COLUMNS):
            raise ValueError(f"expected {len(cls.COLUMNS)} fields, got {len(parts)}")
        return cls(*(int(p) for p in parts[:-1]), parts[-1])


@dataclass(frozen=True)
class MountSample:
    time_ms: int
    source: str
    dest: str
    fstype: str
    options: str
    dump: int
    pass_: int
    used: Optional[int] = None
    available: Optional[int] = None
    total: Optional[int] = None
    use_pc: Optional[int] = None

    COLUMNS = ("time_ms", "source", "dest", "fstype", "options", "dump", "pass")
    USAGE_COLUMNS = ("used", "available", "total", "use_pc")

    @classmethod
    def from_entry(cls, time_ms: int, entry: MountEntry, usage=None) -> "MountSample":
        used, available, total, use_pc = usage if usage is not None else (None,) * 4
        return cls(
            time_ms=time_ms,
            source=entry.source,
            dest=entry.dest,
            fstype=entry.fstype,
            options=";".join(entry.options),
            dump=entry.dump,
            pass_=entry.pass_,
            used=used,
            available=available,
            total=total,
            use_pc=use_pc,
        )

    @property
    def has_usage(self) -> bool:
        return self.use_pc is not None

    @classmethod
    def columns(cls, usage: bool = False) -> Tuple[str, ...]:
        return cls.COLUMNS + cls.USAGE_COLUMNS if usage else cls.COLUMNS

    def to_row(self) -> str:
        values: List = [
            self.time_ms, self.source, self.dest, self.fstype,
            self.options, self.dump, self.pass_,
        ]
        if self.has_usage:
            values.extend([self.used, self.available, self.total, self.use_pc])
        return format_row(values)

    @classmethod
    def from_row(cls, row: str) -> "MountSample":
        parts = row.rstrip("\n").split(SEPARATOR)
        if len(parts) == len(cls.COLUMNS) + len(cls.USAGE_COLUMNS):
            usage = [int(p) for p in parts[len(cls.COLUMNS):]]
            parts = parts[:len(cls.COLUMNS)]
        elif len(parts) == len(cls.COLUMNS):
            usage = [None] * 4
        else:
            raise ValueError(f"unexpected field count {len(parts)}")
        return cls(
            int(parts[0]), parts[1], parts[2], parts[3], parts[4],
            int(parts[5]), int(parts[6]), *usage,
        )
