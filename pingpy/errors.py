from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .stats import ProbeResult


class PingError(Exception):
    """Base class for pingpy errors."""


class InputError(PingError):
    """Bad command-line value; fatal to the whole run."""


class InvalidRangeError(InputError):
    def __init__(self, target: str, start: int, end: int) -> None:
        super().__init__(
            f"invalid IP range {target!r}: bounds must satisfy 0 <= start <= end <= 255"
        )
        self.target = target
        self.start = start
        self.end = end


class ResolutionError(PingError):
    """Host name or address could not be resolved."""

    def __init__(self, host: str, reason: str = "") -> None:
        super().__init__(f"unknown host {host}" + (f" ({reason})" if reason else ""))
        self.host = host


class ProbeIOError(PingError):
    """The reachability check itself failed (permissions, socket errors)."""


class ProbeCancelled(PingError):
    """Run interrupted; carries whatever the interrupted host recorded."""

    def __init__(self, result: "ProbeResult | None" = None) -> None:
        super().__init__("ping interrupted")
        self.result = result


class ConfigurationError(PingError):
    """Configuration-related errors."""
