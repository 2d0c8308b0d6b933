from __future__ import annotations

import asyncio
import contextlib
import logging
import socket
from pathlib import Path
from typing import Optional

from rich.console import Console
from rich.logging import RichHandler

from .errors import ResolutionError

LOG_FORMAT = "%(asctime)s %(levelname)-8s %(name)s %(message)s"


# ---------------- Logging ----------------

def setup_logging(level: int | str = logging.WARNING, log_file: Optional[Path] = None) -> None:
    """Route log records to stderr through rich, plus an optional plain file."""
    root = logging.getLogger("pingpy")
    root.setLevel(level)
    for old in list(root.handlers):
        root.removeHandler(old)
        old.close()
    root.propagate = False

    console = RichHandler(
        console=Console(stderr=True),
        show_path=False,
        rich_tracebacks=True,
    )
    console.setLevel(level)
    root.addHandler(console)

    if log_file is not None:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        fh = logging.FileHandler(log_file, mode="w", encoding="utf-8")
        fh.setLevel(level)
        fh.setFormatter(logging.Formatter(LOG_FORMAT, datefmt="%m-%d %H:%M:%S"))
        root.addHandler(fh)


# ---------------- DNS helpers ----------------

def is_ip_literal(s: str) -> bool:
    try:
        socket.inet_pton(socket.AF_INET, s)
        return True
    except OSError:
        pass
    with contextlib.suppress(OSError, ValueError):
        socket.inet_pton(socket.AF_INET6, s)
        return True
    return False


async def resolve_host(host: str) -> str:
    """Resolve forward to a numeric IP, preferring IPv4. Raises ResolutionError."""
    if is_ip_literal(host):
        return host

    loop = asyncio.get_running_loop()
    try:
        infos = await loop.getaddrinfo(host, None)
    except (socket.gaierror, UnicodeError) as e:
        raise ResolutionError(host, str(e)) from e

    infos_sorted = sorted(infos, key=lambda x: 0 if x[0] == socket.AF_INET else 1)
    for family, _type, _proto, _canon, sockaddr in infos_sorted:
        if family in (socket.AF_INET, socket.AF_INET6):
            return sockaddr[0]
    raise ResolutionError(host, "no IPv4 or IPv6 address")
