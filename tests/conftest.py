"""Shared fixtures: a scripted Pinger so no test touches the network."""

from __future__ import annotations

import asyncio
import io
from collections import deque
from typing import Callable, Iterable

import pytest
from rich.console import Console

from pingpy.errors import ProbeIOError, ResolutionError
from pingpy.pinger import Pinger

REPLY = "reply"
TIMEOUT = "timeout"
ERROR = "error"


class FakePinger(Pinger):
    """
    script: host -> iterable of outcomes ("reply", "timeout", "error") returned
    per call in order. Hosts in ``unknown`` fail resolution. Hosts with no
    script left time out.
    """

    def __init__(
        self,
        script: dict[str, Iterable[str]] | None = None,
        unknown: Iterable[str] = (),
        on_check: Callable[[str, int], None] | None = None,
    ) -> None:
        self.script = {k: deque(v) for k, v in (script or {}).items()}
        self.unknown = set(unknown)
        self.on_check = on_check
        self.resolved: list[str] = []
        self.checks: list[tuple[str, int]] = []

    async def resolve(self, host: str) -> str:
        if host in self.unknown:
            raise ResolutionError(host, "Name or service not known")
        self.resolved.append(host)
        return host

    async def is_reachable(self, address: str, timeout_ms: int) -> bool:
        self.checks.append((address, timeout_ms))
        dq = self.script.get(address)
        outcome = dq.popleft() if dq else TIMEOUT
        await asyncio.sleep(0)
        if self.on_check is not None:
            self.on_check(address, len(self.checks))
        if outcome == ERROR:
            raise ProbeIOError("Operation not permitted")
        return outcome == REPLY


@pytest.fixture
def fake_pinger():
    return FakePinger


@pytest.fixture
def console():
    """Plain, wide, uncolored console writing into a buffer."""
    return Console(file=io.StringIO(), width=120, color_system=None, highlight=False)


@pytest.fixture(autouse=True)
def _isolated_env(monkeypatch, tmp_path):
    """Keep user config files and PINGPY_* variables out of the tests."""
    import os

    for key in list(os.environ):
        if key.startswith("PINGPY_"):
            monkeypatch.delenv(key)
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("HOME", str(tmp_path))
