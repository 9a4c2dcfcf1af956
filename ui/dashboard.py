"""Real-time CLI dashboard for relay monitoring."""

from collections import Counter
from datetime import datetime
from threading import Lock

from rich.console import Console
from rich.layout import Layout
from rich.live import Live
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from core.config import Config
from ui.log_utils import submit_log, write_cli_log, write_relay_log

console = Console()


class RelayInfo:
    """Info about a single relayed request."""

    def __init__(self, method: str, target: str, status: int, elapsed_ms: float, timestamp: datetime):
        self.method = method
        self.target = target[:70] + "..." if len(target) > 70 else target
        self.status = status
        self.elapsed_ms = elapsed_ms
        self.timestamp = timestamp


class Dashboard:
    """Real-time dashboard showing recent relays and errors."""

    def __init__(self, config: Config):
        self.config = config
        self._lock = Lock()
        self._recent: list[RelayInfo] = []
        self._max_recent = 10
        self._status_count: Counter[str] = Counter()
        self._errors: list[str] = []
        self._live: Live | None = None

    def start(self) -> "Dashboard":
        """Start the live dashboard."""
        self._live = Live(
            self._build_layout(),
            console=console,
            refresh_per_second=4,
            screen=False,
        )
        self._live.start()
        return self

    def stop(self) -> None:
        """Stop the live dashboard."""
        if self._live:
            self._live.stop()

    def log_relay(
        self,
        method: str,
        target: str,
        status: int,
        *,
        elapsed_ms: float,
        headers: dict[str, str] | None = None,
    ) -> None:
        """Log a request relayed to the backend."""
        with self._lock:
            self._status_count[f"{status // 100}xx"] += 1
            info = RelayInfo(method, target, status, elapsed_ms, datetime.now())
            self._recent.insert(0, info)
            self._recent = self._recent[: self._max_recent]
            self._refresh()

        if self.config.proxy.debug:
            submit_log(write_relay_log, method, target, status, elapsed_ms=elapsed_ms, headers=headers)

    def log_error(self, route: str, status: int, message: str) -> None:
        """Log an error."""
        with self._lock:
            self._status_count["failed"] += 1
            truncated = message[:50] + "..." if len(message) > 50 else message
            self._errors.insert(0, f"{route} {status}: {truncated}")
            self._errors = self._errors[:3]
            self._refresh()
        submit_log(write_cli_log, "ERROR", message[:200], route=route, status=status)

    def _refresh(self) -> None:
        """Refresh the display."""
        if self._live:
            self._live.update(self._build_layout())

    def _build_layout(self) -> Layout:
        """Build the dashboard layout."""
        layout = Layout()

        layout.split_column(
            Layout(name="header", size=3),
            Layout(name="body"),
            Layout(name="footer", size=5),
        )

        layout["header"].update(self._build_header())
        layout["body"].update(self._build_relays_panel())
        layout["footer"].update(self._build_footer())

        return layout

    def _build_header(self) -> Panel:
        """Build header with stats."""
        stats = Text()
        stats.append("CORS Relay", style="bold cyan")
        stats.append("  |  ")
        stats.append(f"2xx: {self._status_count['2xx']}", style="green")
        stats.append("  |  ")
        stats.append(f"4xx: {self._status_count['4xx']}", style="yellow")
        stats.append("  |  ")
        stats.append(f"5xx: {self._status_count['5xx']}", style="red")
        stats.append("  |  ")
        stats.append(f"failed: {self._status_count['failed']}", style="red bold")
        stats.append("  |  ")
        stats.append(f"Port: {self.config.proxy.port}", style="dim")

        return Panel(stats, style="cyan")

    def _build_relays_panel(self) -> Panel:
        """Build recent relays panel."""
        if self._recent:
            table = Table(show_header=True, header_style="bold", expand=True, box=None)
            table.add_column("Time", style="dim", width=8)
            table.add_column("Method", width=7)
            table.add_column("Target", ratio=3)
            table.add_column("Status", width=6)
            table.add_column("ms", justify="right", width=8)

            for info in self._recent:
                table.add_row(
                    info.timestamp.strftime("%H:%M:%S"),
                    info.method,
                    info.target,
                    Text(str(info.status), style=_status_style(info.status)),
                    f"{info.elapsed_ms:.0f}",
                )
            content = table
        else:
            content = Text("Waiting for requests...", style="dim")

        return Panel(content, title="[blue]Recent relays[/blue]", border_style="blue")

    def _build_footer(self) -> Panel:
        """Build footer with errors and help."""
        if self._errors:
            error_text = Text()
            for err in self._errors:
                error_text.append("! ", style="red bold")
                error_text.append(err + "\n", style="red")
            content = error_text
        else:
            backend = f"{self.config.backend.origin}{self.config.backend.prefix}"
            content = Text(
                f"http://{self.config.proxy.host}:{self.config.proxy.port}"
                f"{self.config.api.public_prefix} -> {backend}",
                style="dim",
            )

        return Panel(content, title="[dim]Status[/dim]", border_style="dim")


def _status_style(status: int) -> str:
    if status >= 500:
        return "red"
    if status >= 400:
        return "yellow"
    return "green"
