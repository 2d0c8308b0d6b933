from __future__ import annotations

import argparse
import asyncio
import logging
import signal
import sys
from importlib.metadata import PackageNotFoundError, version
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence

from rich.console import Console

from .config import create_default_config, load_config
from .errors import ConfigurationError, InvalidRangeError, ProbeCancelled
from .pinger import IcmpPinger, Pinger
from .prober import PACING_INTERVAL, Prober
from .render import ConsoleReporter, Reporter
from .stats import ProbeResult
from .targets import expand
from .util import setup_logging

log = logging.getLogger(__name__)

EPILOG = """\
examples:
  pingpy www.example.com 4 2000
  pingpy 192.168.1.1 5
  pingpy 192.168.1.100-105 3 1500
  pingpy 192.168.1.100-192.168.1.105 3
"""


def _version() -> str:
    try:
        return version("pingpy")
    except PackageNotFoundError:
        return "unknown"


def positive_int(text: str) -> int:
    try:
        value = int(text)
    except ValueError:
        raise argparse.ArgumentTypeError(f"not an integer: {text!r}")
    if value <= 0:
        raise argparse.ArgumentTypeError(f"must be a positive integer, got {value}")
    return value


def build_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(
        prog="pingpy",
        description="Ping a host or a last-octet IPv4 range and report latency statistics.",
        epilog=EPILOG,
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    ap.add_argument(
        "target",
        nargs="?",
        help="Hostname, IP address, or IPv4 range A.B.C.start-end",
    )
    ap.add_argument("count", nargs="?", type=positive_int, default=None,
                    help="Attempts per host (default 4)")
    ap.add_argument("timeout", nargs="?", type=positive_int, default=None,
                    help="Per-attempt timeout in milliseconds (default 2000)")
    ap.add_argument("--config", type=Path, default=None, help="TOML configuration file")
    ap.add_argument("--privileged", action="store_true", help="Use raw ICMP sockets (needs root)")
    ap.add_argument("--ascii", action="store_true", help="Use ASCII borders")
    ap.add_argument("--no-color", action="store_true", help="Disable colored output")
    ap.add_argument("-v", "--verbose", action="count", default=0, help="More logging (-vv for debug)")
    ap.add_argument("--log-file", type=Path, default=None, help="Also write logs to this file")
    ap.add_argument("--write-config", type=Path, metavar="PATH", default=None,
                    help="Write a default configuration file and exit")
    ap.add_argument("--version", action="version", version=f"%(prog)s {_version()}")
    return ap


def _cli_overrides(args: argparse.Namespace) -> Dict[str, Dict[str, Any]]:
    """Config sections set explicitly on the command line."""
    probe: Dict[str, Any] = {}
    if args.count is not None:
        probe["count"] = args.count
    if args.timeout is not None:
        probe["timeout_ms"] = args.timeout
    if args.privileged:
        probe["privileged"] = True

    output: Dict[str, Any] = {}
    if args.ascii:
        output["ascii"] = True
    if args.no_color:
        output["color"] = False

    logging_: Dict[str, Any] = {}
    if args.verbose:
        logging_["level"] = "DEBUG" if args.verbose > 1 else "INFO"
    if args.log_file:
        logging_["file"] = args.log_file

    return {"probe": probe, "output": output, "logging": logging_}


async def run(
    target: str,
    hosts: Sequence[str],
    prober: Prober,
    reporter: Reporter,
) -> List[ProbeResult]:
    """Probe every host in order, then print the sweep summary."""
    reporter.sweep_started(target, hosts)
    results = await prober.sweep(hosts)
    reporter.sweep_finished(results)
    return results


async def ping_loop(
    target: str,
    hosts: Sequence[str],
    *,
    pinger: Pinger,
    count: int,
    timeout_ms: int,
    reporter: Reporter,
    interval: float = PACING_INTERVAL,
) -> List[ProbeResult]:
    cancel = asyncio.Event()
    loop = asyncio.get_running_loop()

    # SIGINT/SIGTERM trip the cancel event so the prober can unwind cleanly
    installed = []
    for sig in (signal.SIGINT, signal.SIGTERM):
        try:
            loop.add_signal_handler(sig, cancel.set)
        except (NotImplementedError, RuntimeError, ValueError):
            continue
        installed.append(sig)

    prober = Prober(
        pinger,
        count,
        timeout_ms,
        interval=interval,
        reporter=reporter,
        cancel=cancel,
    )
    try:
        return await run(target, hosts, prober, reporter)
    finally:
        for sig in installed:
            loop.remove_signal_handler(sig)


def main(
    argv: Optional[List[str]] = None,
    *,
    pinger: Optional[Pinger] = None,
    console: Optional[Console] = None,
    interval: float = PACING_INTERVAL,
) -> int:
    ap = build_parser()
    args = ap.parse_args(argv)

    if args.write_config is not None:
        create_default_config(args.write_config)
        print(args.write_config)
        return 0

    if not args.target:
        ap.error("the following arguments are required: target")

    try:
        cfg = load_config(args.config, overrides=_cli_overrides(args))
    except ConfigurationError as e:
        print(f"error: {e}", file=sys.stderr)
        return 2

    setup_logging(cfg.logging.level, cfg.logging.file)

    try:
        hosts = expand(args.target)
    except InvalidRangeError as e:
        print(f"error: {e}", file=sys.stderr)
        ap.print_usage(sys.stderr)
        return 2
    log.info("expanded %s into %d host(s)", args.target, len(hosts))

    if console is None:
        console = Console(highlight=False, no_color=not cfg.output.color)
    reporter = ConsoleReporter(console, ascii_mode=cfg.output.ascii)
    if pinger is None:
        pinger = IcmpPinger(privileged=cfg.probe.privileged)

    try:
        asyncio.run(
            ping_loop(
                args.target,
                hosts,
                pinger=pinger,
                count=cfg.probe.count,
                timeout_ms=cfg.probe.timeout_ms,
                reporter=reporter,
                interval=interval,
            )
        )
    except ProbeCancelled as e:
        reporter.interrupted(e.result)
        return 130
    except KeyboardInterrupt:
        reporter.interrupted(None)
        return 130

    return 0


if __name__ == "__main__":
    raise SystemExit(main())
