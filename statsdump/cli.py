"""
Dump system stats as CSV on stdout.

Usage:
    statsdump sys --interval-secs N [--id ID]
    statsdump proc --interval-secs N
    statsdump mount --interval-secs N [--usage]
"""

import argparse
import signal
import sys
from pathlib import Path
from typing import List, Optional

from . import __version__
from .collectors import BaseCollector, MountCollector, ProcessCollector, SystemCollector
from .exceptions import ConfigError, SourceUnavailableError
from .runner import HeaderPolicy, run
from .sources import make_source
from .utils.config import HEADER_CHOICES, SOURCE_CHOICES, load_settings
from .utils.logger import setup_logging


def positive_int(value: str) -> int:
    try:
        number = int(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"invalid integer: {value!r}")
    if number < 1:
        raise argparse.ArgumentTypeError(f"must be a positive integer, got {number}")
    return number


def add_common_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "-s", "--interval-secs",
        type=positive_int,
        default=None,
        help="interval in seconds between writes (required unless set in the config file)"
    )
    parser.add_argument(
        "--header",
        choices=HEADER_CHOICES,
        default=None,
        help="when to print the CSV header line (default: once)"
    )
    parser.add_argument(
        "--source",
        choices=SOURCE_CHOICES,
        default=None,
        help="where to read OS state from (default: procfs)"
    )
    parser.add_argument(
        "--proc-root",
        type=Path,
        default=None,
        help="procfs mount point (default: /proc)"
    )
    parser.add_argument(
        "--ticks",
        type=positive_int,
        default=None,
        help="stop after this many ticks instead of running until interrupted"
    )
    parser.add_argument(
        "--config",
        type=Path,
        default=None,
        help="YAML settings file"
    )
    parser.add_argument(
        "--log-level",
        default=None,
        help="diagnostic log level on stderr (default: WARNING)"
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="statsdump", description="dumps system stats")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    subparsers = parser.add_subparsers(dest="command", metavar="{sys,proc,mount}")
    subparsers.required = True

    sys_parser = subparsers.add_parser("sys", help="Collect system information (memory, load)")
    sys_parser.add_argument(
        "-i", "--id",
        default=None,
        help="identifier of the stats, use hostname or similar"
    )
    add_common_arguments(sys_parser)

    proc_parser = subparsers.add_parser("proc", help="Collect process information (pid, fd, cmd etc)")
    add_common_arguments(proc_parser)

    mount_parser = subparsers.add_parser("mount", help="Collect mounted fs information")
    mount_parser.add_argument(
        "--usage",
        action="store_true",
        default=None,
        help="append used/available/total KiB and use%% columns"
    )
    add_common_arguments(mount_parser)

    return parser


def make_collector(command: str, settings: dict) -> BaseCollector:
    source = make_source(settings["source"], settings["proc_root"])
    if command == "sys":
        return SystemCollector(source, id=settings["id"])
    if command == "proc":
        return ProcessCollector(source)
    if command == "mount":
        return MountCollector(source, usage=settings["usage"])
    raise ValueError(f"unknown command {command!r}")


def restore_sigpipe() -> None:
    # Die quietly when the reader goes away (e.g. piping into head)
    if hasattr(signal, "SIGPIPE"):
        signal.signal(signal.SIGPIPE, signal.SIG_DFL)


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    overrides = {
        "interval_secs": args.interval_secs,
        "header": args.header,
        "source": args.source,
        "proc_root": args.proc_root,
        "log_level": args.log_level,
        "id": getattr(args, "id", None),
        "usage": getattr(args, "usage", None),
    }

    try:
        settings = load_settings(args.config, overrides)
    except ConfigError as exc:
        parser.error(str(exc))

    try:
        logger = setup_logging(settings["log_level"])
    except ValueError as exc:
        parser.error(f"invalid log level: {exc}")

    if settings["interval_secs"] is None:
        parser.error("--interval-secs is required")

    collector = make_collector(args.command, settings)

    try:
        collector.check()
    except SourceUnavailableError as exc:
        logger.error(
            "Cannot start %s collector from %s: %s",
            collector.collector_name, collector.source.source_name, exc,
        )
        return 1

    restore_sigpipe()

    try:
        run(
            settings["interval_secs"],
            collector,
            out=sys.stdout,
            header=HeaderPolicy(settings["header"]),
            max_ticks=args.ticks,
        )
    except KeyboardInterrupt:
        pass

    return 0


if __name__ == "__main__":
    sys.exit(main())
