"""Tests for the loop driver."""

import io

import pytest

from statsdump.collectors import BaseCollector, ProcessCollector, SystemCollector
from statsdump.exceptions import SourceUnavailableError
from statsdump.runner import HeaderPolicy, run
from statsdump.sources import ProcFsSource


class FakeClock:
    """Clock that only advances when slept on, plus collection overhead."""

    def __init__(self, start=1700000000.0, overhead=0.25):
        self.now = start
        self.overhead = overhead
        self.sleeps = []
        self.tick_starts = []

    def time(self):
        self.tick_starts.append(self.now)
        value = self.now
        self.now += self.overhead
        return value

    def sleep(self, secs):
        self.sleeps.append(secs)
        self.now += secs


class FlakyCollector(BaseCollector):
    """Fails on the ticks listed in fail_on."""

    def __init__(self, fail_on=()):
        super().__init__()
        self.fail_on = set(fail_on)
        self.calls = 0

    @property
    def collector_name(self):
        return "flaky"

    @property
    def columns(self):
        return ("time_ms", "n")

    def collect(self, timestamp_ms):
        self.calls += 1
        if self.calls in self.fail_on:
            raise SourceUnavailableError("/proc/flaky", "gone")
        return [f"{timestamp_ms},{self.calls}"]

    def check(self):
        pass


def test_three_system_ticks(proc_tree):
    clock = FakeClock()
    out = io.StringIO()
    ticks = run(1, SystemCollector(ProcFsSource(proc_tree.root)), out=out,
                header=HeaderPolicy.NEVER, max_ticks=3, clock=clock.time, sleep=clock.sleep)

    rows = out.getvalue().splitlines()
    assert ticks == 3
    assert len(rows) == 3
    assert all(len(row.split(",")) == 9 for row in rows)
    times = [int(row.split(",")[1]) for row in rows]
    assert times[0] < times[1] < times[2]


def test_tick_starts_at_least_interval_apart():
    clock = FakeClock()
    run(5, FlakyCollector(), out=io.StringIO(), max_ticks=4,
        clock=clock.time, sleep=clock.sleep)
    starts = clock.tick_starts
    assert len(starts) == 4
    assert all(b - a >= 5 for a, b in zip(starts, starts[1:]))
    # No sleep after the final tick
    assert clock.sleeps == [5, 5, 5]


def test_header_once():
    clock = FakeClock()
    out = io.StringIO()
    run(1, FlakyCollector(), out=out, max_ticks=2, clock=clock.time, sleep=clock.sleep)
    lines = out.getvalue().splitlines()
    assert lines[0] == "time_ms,n"
    assert lines.count("time_ms,n") == 1
    assert len(lines) == 3


def test_header_every():
    clock = FakeClock()
    out = io.StringIO()
    run(1, FlakyCollector(), out=out, header="every", max_ticks=2,
        clock=clock.time, sleep=clock.sleep)
    assert out.getvalue().splitlines().count("time_ms,n") == 2


def test_failed_tick_is_skipped():
    clock = FakeClock()
    out = io.StringIO()
    collector = FlakyCollector(fail_on={1, 3})
    ticks = run(1, collector, out=out, max_ticks=4, clock=clock.time, sleep=clock.sleep)
    lines = out.getvalue().splitlines()
    assert ticks == 4
    # Header still comes first even though the first tick failed
    assert lines[0] == "time_ms,n"
    assert [line.split(",")[1] for line in lines[1:]] == ["2", "4"]


def test_rows_share_timestamp(proc_tree):
    for pid in (1, 2, 3):
        proc_tree.add_process(pid)

    clock = FakeClock(start=42.0)
    out = io.StringIO()
    run(1, ProcessCollector(ProcFsSource(proc_tree.root)), out=out, header="never",
        max_ticks=1, clock=clock.time, sleep=clock.sleep)
    assert {line.split(",")[0] for line in out.getvalue().splitlines()} == {"42000"}


@pytest.mark.parametrize("interval", [0, -1, 1.5, True])
def test_rejects_bad_interval(interval):
    with pytest.raises(ValueError):
        run(interval, FlakyCollector(), out=io.StringIO(), max_ticks=1)
