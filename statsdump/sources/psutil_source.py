"""psutil-backed source for hosts without a procfs mount."""

import os
from typing import Iterator, Optional

import psutil

from ..exceptions import SourceUnavailableError
from ..models import LoadAverage, MemoryInfo, MountEntry, ProcessInfo, single_line
from .base import SystemInfoSource


DEFAULT_CLOCK_TICKS = 100


def clock_ticks() -> int:
    """Kernel clock ticks per second (USER_HZ)."""
    try:
        return os.sysconf("SC_CLK_TCK")
    except (AttributeError, ValueError, OSError):
        return DEFAULT_CLOCK_TICKS


class PsutilSource(SystemInfoSource):
    """Reads OS state through psutil.

    psutil reports seconds where procfs reports ticks, so CPU and start
    times are converted back with the clock tick rate. It does not expose
    the dump/pass columns of the mount table; those are always 0.
    """

    def __init__(self):
        self.ticks = clock_ticks()

    @property
    def source_name(self) -> str:
        return "psutil"

    def memory(self) -> MemoryInfo:
        try:
            vm = psutil.virtual_memory()
        except (OSError, RuntimeError) as exc:
            raise SourceUnavailableError("virtual_memory", str(exc)) from exc
        # buffers/cached only exist on some platforms
        return MemoryInfo(
            total_kb=vm.total // 1024,
            free_kb=vm.free // 1024,
            buffers_kb=getattr(vm, "buffers", 0) // 1024,
            cached_kb=getattr(vm, "cached", 0) // 1024,
        )

    def load_average(self) -> LoadAverage:
        try:
            one, five, fifteen = psutil.getloadavg()
        except (OSError, RuntimeError, AttributeError) as exc:
            raise SourceUnavailableError("getloadavg", str(exc)) from exc
        return LoadAverage(one, five, fifteen)

    def processes(self) -> Iterator[ProcessInfo]:
        try:
            boot_time = psutil.boot_time()
            procs = list(psutil.process_iter())
        except (OSError, RuntimeError) as exc:
            raise SourceUnavailableError("process table", str(exc)) from exc

        for proc in procs:
            try:
                info = self._process_info(proc, boot_time)
            except (psutil.NoSuchProcess, psutil.ZombieProcess):
                # Process exited after enumeration
                continue
            yield info

    @staticmethod
    def _read(getter, default):
        """Call a process accessor, default when access is denied.

        NoSuchProcess propagates so the whole process is skipped.
        """
        try:
            return getter()
        except (psutil.AccessDenied, AttributeError):
            return default

    def _process_info(self, proc: psutil.Process, boot_time: float) -> ProcessInfo:
        with proc.oneshot():
            cpu = self._read(proc.cpu_times, None)
            created = self._read(proc.create_time, None)
            # uids() is missing on Windows
            uids = self._read(lambda: proc.uids(), None)

            return ProcessInfo(
                pid=proc.pid,
                owner=uids.effective if uids is not None else 0,
                open_fd_count=self._fd_count(proc),
                num_threads=self._read(proc.num_threads, 0),
                starttime=round((created - boot_time) * self.ticks) if created is not None else 0,
                utime=round(cpu.user * self.ticks) if cpu is not None else 0,
                stime=round(cpu.system * self.ticks) if cpu is not None else 0,
                cmdline=single_line(self._cmdline(proc)),
            )

    @staticmethod
    def _fd_count(proc: psutil.Process) -> int:
        try:
            return proc.num_fds()
        except (psutil.AccessDenied, AttributeError):
            return -1

    @staticmethod
    def _cmdline(proc: psutil.Process) -> str:
        try:
            args = proc.cmdline()
        except psutil.AccessDenied:
            args = []
        if args:
            return " ".join(args)
        try:
            return f"[{proc.name()}]"
        except psutil.AccessDenied:
            return "[?]"

    def mounts(self) -> Iterator[MountEntry]:
        try:
            partitions = psutil.disk_partitions(all=True)
        except OSError as exc:
            raise SourceUnavailableError("disk_partitions", str(exc)) from exc

        for part in partitions:
            yield MountEntry(
                source=single_line(part.device),
                dest=single_line(part.mountpoint),
                fstype=part.fstype,
                options=tuple(part.opts.split(",")) if part.opts else (),
                dump=0,
                pass_=0,
            )


def disk_usage(mount_point: str) -> Optional[tuple]:
    """Return (used, available, total, use_pc) in KiB for a mount point.

    use_pc is the share of the space available to unprivileged users, as
    df reports it. Returns None when the filesystem can't be queried.
    """
    try:
        usage = psutil.disk_usage(mount_point)
    except OSError:
        return None

    used = usage.used // 1024
    available = usage.free // 1024
    nonroot_total = used + available
    use_pc = used * 100 // nonroot_total if nonroot_total else 0
    return used, available, usage.total // 1024, use_pc
