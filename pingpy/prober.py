from __future__ import annotations

import asyncio
import contextlib
import logging
import math
from time import perf_counter
from typing import Awaitable, List, Optional, Sequence, TypeVar

from .errors import InputError, ProbeCancelled, ProbeIOError, ResolutionError
from .pinger import Pinger
from .render import Reporter
from .stats import HostState, ProbeResult

log = logging.getLogger(__name__)

T = TypeVar("T")

# seconds between consecutive attempts against one host
PACING_INTERVAL = 0.5


class Prober:
    """
    Sequential probe loop over one host at a time.

    The reachability check and the pacing sleep both race against the
    ``cancel`` event; when it fires the whole run unwinds with ProbeCancelled.
    """

    def __init__(
        self,
        pinger: Pinger,
        count: int,
        timeout_ms: int,
        *,
        interval: float = PACING_INTERVAL,
        reporter: Optional[Reporter] = None,
        cancel: Optional[asyncio.Event] = None,
    ) -> None:
        if count <= 0:
            raise InputError(f"count must be positive, got {count}")
        if timeout_ms <= 0:
            raise InputError(f"timeout_ms must be positive, got {timeout_ms}")
        self.pinger = pinger
        self.count = count
        self.timeout_ms = timeout_ms
        self.interval = interval
        self.reporter = reporter or Reporter()
        self.cancel = cancel or asyncio.Event()

    async def _interruptible(self, aw: Awaitable[T]) -> T:
        if self.cancel.is_set():
            # close a coroutine we will never await
            if asyncio.iscoroutine(aw):
                aw.close()
            raise ProbeCancelled()

        work = asyncio.ensure_future(aw)
        stop = asyncio.ensure_future(self.cancel.wait())
        try:
            await asyncio.wait({work, stop}, return_when=asyncio.FIRST_COMPLETED)
        finally:
            # also reached when our own task is cancelled (Ctrl+C under asyncio.run)
            for fut in (work, stop):
                if not fut.done():
                    fut.cancel()
                    with contextlib.suppress(asyncio.CancelledError):
                        await fut

        if work.done() and not work.cancelled():
            return work.result()
        raise ProbeCancelled()

    async def probe(self, host: str) -> ProbeResult:
        """Resolve ``host`` and run ``count`` timed attempts against it."""
        result = ProbeResult(host=host)
        self.reporter.host_started(host)

        result.state = HostState.RESOLVING
        try:
            result.address = await self._guard(self.pinger.resolve(host), result)
        except ResolutionError as e:
            log.warning("resolution failed for %s: %s", host, e)
            result.state = HostState.RESOLUTION_FAILED
            result.error = str(e)
            self.reporter.host_finished(result)
            return result
        log.info("resolved %s -> %s", host, result.address)
        self.reporter.resolved(result)

        result.state = HostState.PROBING
        for _ in range(self.count):
            result.sent += 1
            started = perf_counter()
            try:
                reachable = await self._guard(
                    self.pinger.is_reachable(result.address, self.timeout_ms), result
                )
            except ProbeIOError as e:
                log.warning("probe %d to %s failed: %s", result.sent, result.address, e)
                result.state = HostState.ABORTED
                result.error = str(e)
                break
            rtt = math.floor((perf_counter() - started) * 1000.0)

            if reachable:
                attempt = result.record_reply(rtt)
            else:
                attempt = result.record_timeout()
            log.debug("probe %d to %s: %s", attempt.seq, result.address,
                      f"{rtt}ms" if attempt.is_reply else "timeout")
            self.reporter.attempt(result, attempt)

            await self._guard(asyncio.sleep(self.interval), result)
        else:
            result.state = HostState.COMPLETED

        self.reporter.host_finished(result)
        return result

    async def _guard(self, aw: Awaitable[T], result: ProbeResult) -> T:
        """Await ``aw``, tagging the interrupted host's result onto ProbeCancelled."""
        try:
            return await self._interruptible(aw)
        except ProbeCancelled as e:
            log.info("cancelled while probing %s after %d attempt(s)", result.host, result.sent)
            result.state = HostState.CANCELLED
            e.result = result
            raise

    async def sweep(self, hosts: Sequence[str]) -> List[ProbeResult]:
        """Probe each host in order, one at a time."""
        results: List[ProbeResult] = []
        for host in hosts:
            results.append(await self.probe(host))
        return results
