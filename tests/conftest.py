"""
Shared fixtures: a fake procfs tree built under tmp_path.
"""

from pathlib import Path

import pytest


MEMINFO = """\
MemTotal:       16318540 kB
MemFree:         8123456 kB
MemAvailable:   12000000 kB
Buffers:          204800 kB
Cached:          3145728 kB
SwapCached:            0 kB
"""

LOADAVG = "0.52 0.58 0.59 2/1234 56789\n"

MOUNTS = """\
sysfs /sys sysfs rw,nosuid,nodev,noexec,relatime 0 0
proc /proc proc rw,nosuid,nodev,noexec,relatime 0 0
/dev/sda1 / ext4 rw,relatime,errors=remount-ro 0 1
tmpfs /run/user/1000 tmpfs rw,nosuid,nodev,relatime,size=1628512k,mode=700,uid=1000,gid=1000 0 0
"""


def stat_line(pid, name, utime=0, stime=0, num_threads=1, starttime=0):
    after = [
        "S", "1", str(pid), str(pid), "0", "-1", "4194560", "100", "0", "0", "0",
        str(utime), str(stime), "0", "0", "20", "0", str(num_threads), "0",
        str(starttime), "1000000", "250",
    ]
    return f"{pid} ({name}) " + " ".join(after) + "\n"


class ProcTree:
    """Builder for a fake /proc directory."""

    def __init__(self, root: Path):
        self.root = root
        self.root.mkdir(parents=True, exist_ok=True)

    def write(self, name: str, text: str) -> "ProcTree":
        (self.root / name).write_text(text)
        return self

    def add_process(
        self,
        pid,
        name="proc",
        cmdline=None,
        uid=1000,
        euid=None,
        fds=3,
        utime=10,
        stime=5,
        num_threads=1,
        starttime=1000,
    ) -> Path:
        """Add /proc/<pid>. fds=None leaves out the fd directory.

        uid/euid only go into status; the directory itself is owned by
        whoever runs the tests, as it would be by the process's euid.
        """
        proc_dir = self.root / str(pid)
        euid = uid if euid is None else euid
        proc_dir.mkdir()
        (proc_dir / "stat").write_text(
            stat_line(pid, name, utime, stime, num_threads, starttime)
        )
        (proc_dir / "status").write_text(
            f"Name:\t{name}\nUid:\t{uid}\t{euid}\t{euid}\t{euid}\nGid:\t{uid}\t{uid}\t{uid}\t{uid}\n"
        )
        args = cmdline if cmdline is not None else [name]
        (proc_dir / "cmdline").write_bytes(b"".join(a.encode() + b"\0" for a in args))
        if fds is not None:
            (proc_dir / "fd").mkdir()
            for fd in range(fds):
                (proc_dir / "fd" / str(fd)).write_text("")
        return proc_dir


@pytest.fixture
def proc_tree(tmp_path):
    """Fake procfs with meminfo, loadavg and mounts but no processes."""
    tree = ProcTree(tmp_path / "proc")
    tree.write("meminfo", MEMINFO).write("loadavg", LOADAVG).write("mounts", MOUNTS)
    return tree
