from __future__ import annotations

import logging
from abc import ABC, abstractmethod

from icmplib import ICMPLibError, async_ping

from .errors import ProbeIOError
from .util import resolve_host

log = logging.getLogger(__name__)


class Pinger(ABC):
    """Resolve a host once, then answer "did it reply within the timeout" per attempt."""

    @abstractmethod
    async def resolve(self, host: str) -> str:
        """Return a concrete address for host, or raise ResolutionError."""
        raise NotImplementedError

    @abstractmethod
    async def is_reachable(self, address: str, timeout_ms: int) -> bool:
        """Run exactly one reachability check, raising ProbeIOError if it cannot run."""
        raise NotImplementedError


class IcmpPinger(Pinger):
    """
    One ICMP echo request per check, through icmplib.

    With privileged=False icmplib uses datagram ICMP sockets, which on Linux
    need net.ipv4.ping_group_range to include the caller's group.
    """

    def __init__(self, privileged: bool = False) -> None:
        self.privileged = privileged

    async def resolve(self, host: str) -> str:
        return await resolve_host(host)

    async def is_reachable(self, address: str, timeout_ms: int) -> bool:
        try:
            host = await async_ping(
                address,
                count=1,
                timeout=timeout_ms / 1000.0,
                privileged=self.privileged,
            )
        except ICMPLibError as e:
            raise ProbeIOError(f"{type(e).__name__}: {e}") from e
        except OSError as e:
            raise ProbeIOError(str(e)) from e
        log.debug("icmp %s alive=%s rtts=%s", address, host.is_alive, host.rtts)
        return host.is_alive
