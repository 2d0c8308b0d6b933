from __future__ import annotations

import math
from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional


class HostState(str, Enum):
    IDLE = "idle"
    RESOLVING = "resolving"
    RESOLUTION_FAILED = "resolution_failed"
    PROBING = "probing"
    ABORTED = "aborted"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


def round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


@dataclass(frozen=True)
class Attempt:
    seq: int
    rtt_ms: Optional[int] = None  # None means the attempt timed out
    # icmplib does not hand back the reply TTL
    ttl: Optional[int] = None

    @property
    def is_reply(self) -> bool:
        return self.rtt_ms is not None


@dataclass
class ProbeResult:
    host: str
    address: Optional[str] = None
    state: HostState = HostState.IDLE
    sent: int = 0
    received: int = 0
    attempts: List[Attempt] = field(default_factory=list)
    min_rtt: Optional[int] = None
    max_rtt: Optional[int] = None
    total_rtt: int = 0
    error: Optional[str] = None

    def record_reply(self, rtt_ms: int) -> Attempt:
        self.received += 1
        self.total_rtt += rtt_ms
        self.min_rtt = rtt_ms if self.min_rtt is None else min(self.min_rtt, rtt_ms)
        self.max_rtt = rtt_ms if self.max_rtt is None else max(self.max_rtt, rtt_ms)
        attempt = Attempt(seq=self.sent, rtt_ms=rtt_ms)
        self.attempts.append(attempt)
        return attempt

    def record_timeout(self) -> Attempt:
        attempt = Attempt(seq=self.sent)
        self.attempts.append(attempt)
        return attempt

    @property
    def lost(self) -> int:
        return self.sent - self.received

    @property
    def loss_pct(self) -> float:
        if self.sent == 0:
            return 0.0
        return 100.0 * self.lost / self.sent

    @property
    def loss_pct_display(self) -> int:
        return round_half_up(self.loss_pct)

    @property
    def avg_rtt(self) -> Optional[float]:
        if self.received == 0:
            return None
        return self.total_rtt / self.received

    @property
    def has_rtt_summary(self) -> bool:
        return self.received > 0

    @property
    def has_statistics(self) -> bool:
        """Resolution failures and cancelled hosts get no statistics block."""
        return self.state in (HostState.COMPLETED, HostState.ABORTED)
