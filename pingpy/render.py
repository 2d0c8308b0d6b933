from __future__ import annotations

from typing import Iterable, Optional, Sequence

from rich import box
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from .stats import Attempt, ProbeResult, round_half_up
from .targets import is_range

HEADERS = ["Host", "Address", "Loss%", "Snt", "Recv", "Avg", "Best", "Wrst"]


def _fmt_ms(v: float | None) -> str:
    return f"{round_half_up(v)}" if v is not None else "-"


class Reporter:
    """Progress hooks called by the prober and the CLI. The base class ignores everything."""

    def sweep_started(self, target: str, hosts: Sequence[str]) -> None:
        pass

    def host_started(self, host: str) -> None:
        pass

    def resolved(self, result: ProbeResult) -> None:
        pass

    def attempt(self, result: ProbeResult, attempt: Attempt) -> None:
        pass

    def host_finished(self, result: ProbeResult) -> None:
        pass

    def sweep_finished(self, results: Sequence[ProbeResult]) -> None:
        pass

    def interrupted(self, result: Optional[ProbeResult]) -> None:
        pass


class ConsoleReporter(Reporter):
    """Ping-style console output."""

    def __init__(self, console: Optional[Console] = None, *, ascii_mode: bool = False) -> None:
        self.console = console or Console(highlight=False)
        self.ascii_mode = ascii_mode

    def _rule(self) -> None:
        self.console.print("-" * 40 if self.ascii_mode else "─" * 40, style="dim")

    def sweep_started(self, target: str, hosts: Sequence[str]) -> None:
        suffix = ""
        if is_range(target):
            suffix = f" ({len(hosts)} host{'' if len(hosts) == 1 else 's'})"
        self.console.print(f"\nPinging {target}{suffix}, please wait...")

    def host_started(self, host: str) -> None:
        self.console.print()
        self._rule()
        self.console.print(f"Target host: [bold]{escape(host)}[/]")

    def resolved(self, result: ProbeResult) -> None:
        self.console.print(f"Resolved address: {result.address}")

    def attempt(self, result: ProbeResult, attempt: Attempt) -> None:
        if attempt.is_reply:
            ttl = "unavailable" if attempt.ttl is None else str(attempt.ttl)
            self.console.print(
                f"Reply from {result.address}: time={attempt.rtt_ms}ms TTL={ttl}",
                style="green",
            )
        else:
            self.console.print(f"Request timed out for {result.address}.", style="yellow")

    def host_finished(self, result: ProbeResult) -> None:
        if result.error and not result.has_statistics:
            self.console.print(f"Error: {escape(result.error)}. Check the host name or IP address.", style="red")
            return
        if result.error:
            self.console.print(f"Error: I/O failure while pinging: {escape(result.error)}", style="red")
            self.console.print("Check the network connection and the program's permissions.")
        for line in statistics_lines(result):
            self.console.print(line)

    def sweep_finished(self, results: Sequence[ProbeResult]) -> None:
        self.console.print()
        self._rule()
        if len(results) > 1:
            self.console.print(build_table(results, ascii_mode=self.ascii_mode))
        self.console.print("Ping complete.")

    def interrupted(self, result: Optional[ProbeResult]) -> None:
        self.console.print("\nPing interrupted.", style="bold red")


def statistics_lines(result: ProbeResult) -> list[str]:
    """Plain-text statistics block for one host."""
    lines = [
        f"\nPing statistics for {result.address}:",
        f"    Packets: sent = {result.sent}, received = {result.received}, "
        f"lost = {result.lost} ({result.loss_pct_display}% loss)",
    ]
    if result.has_rtt_summary:
        lines.append("Approximate round trip times in milli-seconds:")
        lines.append(
            f"    Minimum = {result.min_rtt}ms, Maximum = {result.max_rtt}ms, "
            f"Average = {_fmt_ms(result.avg_rtt)}ms"
        )
    return lines


def build_table(results: Iterable[ProbeResult], *, ascii_mode: bool = False) -> Table:
    """Summary table with one row per probed host."""
    t = Table(
        box=box.SIMPLE if ascii_mode else box.ROUNDED,
        show_edge=True,
        show_lines=False,
        title="Summary",
        pad_edge=False,
    )
    for h in HEADERS:
        if h in {"Loss%", "Snt", "Recv", "Avg", "Best", "Wrst"}:
            t.add_column(h, justify="right", no_wrap=True)
        else:
            t.add_column(h, justify="left")

    for r in results:
        if not r.has_statistics:
            t.add_row(r.host, r.address or "*", "-", "-", "-", "-", "-", "-")
            continue
        t.add_row(
            r.host,
            r.address or "*",
            str(r.loss_pct_display),
            str(r.sent),
            str(r.received),
            _fmt_ms(r.avg_rtt),
            _fmt_ms(r.min_rtt),
            _fmt_ms(r.max_rtt),
        )
    return t
