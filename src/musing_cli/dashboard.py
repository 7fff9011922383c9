"""Live monitor: a textual app that redraws the dev stack status every few seconds."""

from __future__ import annotations

import logging
import platform
import threading
from datetime import datetime
from typing import Callable, Sequence

from rich.text import Text
from textual import events
from textual.app import App, ComposeResult
from textual.binding import Binding
from textual.containers import VerticalScroll
from textual.message import Message
from textual.widgets import Footer, Header, Static

from .registry import ProbeTarget
from .render import render_sections
from .snapshot import HealthSnapshot, build_snapshot
from .state import (
    REFRESH_INTERVAL,
    SPINNER_INTERVAL,
    DashboardState,
    Effect,
    Event,
    KeyPress,
    Phase,
    Resize,
    SnapshotReady,
    Tick,
    dispatch,
    spin,
    start,
)

logger = logging.getLogger(__name__)

SPINNER_FRAMES = "⠋⠙⠹⠸⠼⠴⠦⠧⠇⠏"


class SnapshotArrived(Message):
    """Posted from the sweep thread when a refresh cycle finishes."""

    def __init__(self, snapshot: HealthSnapshot) -> None:
        super().__init__()
        self.snapshot = snapshot


class MonitorApp(App):
    CSS_PATH = "dashboard.tcss"
    TITLE = "Development Stack - Live Monitor"
    BINDINGS = [
        Binding("q", "quit_key('q')", "Quit"),
        Binding("escape", "quit_key('escape')", "Quit", show=False, priority=True),
        Binding("ctrl+c", "quit_key('ctrl+c')", "Quit", show=False, priority=True),
    ]

    def __init__(
        self,
        targets: Sequence[ProbeTarget],
        build: Callable[[Sequence[ProbeTarget]], HealthSnapshot] = build_snapshot,
        **kwargs,
    ) -> None:
        super().__init__(**kwargs)
        self.targets = tuple(targets)
        self._snapshot_builder = build
        self.state = DashboardState()
        self.last_frame = Text()

    def compose(self) -> ComposeResult:
        yield Header()
        yield Static("", id="status-line")
        with VerticalScroll(id="monitor-scroll"):
            yield Static("", id="monitor-body")
        yield Footer()

    def on_mount(self) -> None:
        self.sub_title = f"{platform.node()} | updates every {REFRESH_INTERVAL:.0f}s"
        logger.info("monitor started with %d targets", len(self.targets))
        self._apply(start(self.state))
        self.set_interval(REFRESH_INTERVAL, self._tick)
        self.set_interval(SPINNER_INTERVAL, self._spin)

    # -- event intake -------------------------------------------------------

    def feed_event(self, event: Event) -> None:
        self._apply(dispatch(self.state, event))

    def _tick(self) -> None:
        self.feed_event(Tick(datetime.now()))

    def _spin(self) -> None:
        if spin(self.state):
            self._update_status_line()

    def on_snapshot_arrived(self, message: SnapshotArrived) -> None:
        self.feed_event(SnapshotReady(message.snapshot))

    def on_resize(self, event: events.Resize) -> None:
        self.feed_event(Resize(event.size.width, event.size.height))

    def action_quit_key(self, key: str) -> None:
        self.feed_event(KeyPress(key))

    # -- effects ------------------------------------------------------------

    def _apply(self, effects: list[Effect]) -> None:
        for effect in effects:
            if effect is Effect.START_REFRESH:
                self._start_sweep()
            elif effect is Effect.RENDER:
                self._redraw()
            elif effect is Effect.QUIT:
                logger.info("monitor exiting")
                self.exit()

    def _start_sweep(self) -> None:
        # not joined on exit
        threading.Thread(target=self._sweep, name="musing-sweep", daemon=True).start()

    def _sweep(self) -> None:
        snapshot = self._snapshot_builder(self.targets)
        if self.state.phase is Phase.EXITING:
            logger.debug("dropping sweep result after quit")
            return
        self.post_message(SnapshotArrived(snapshot))

    def _status_line(self) -> str:
        st = self.state
        if st.snapshot is None:
            updated = "[dim]Checking services...[/dim]"
        else:
            up = sum(1 for r in st.snapshot if r.reachable)
            updated = (
                f"[dim italic]Last updated: {st.snapshot.started_at:%H:%M:%S}[/dim italic]"
                f"  [green]{up} up[/green]  [red]{len(st.snapshot) - up} down[/red]"
            )
        if st.refreshing:
            spinner = SPINNER_FRAMES[st.spinner_phase % len(SPINNER_FRAMES)]
            return f"[magenta]{spinner}[/magenta] {updated}"
        return f"  {updated}"

    def _update_status_line(self) -> None:
        self.query_one("#status-line", Static).update(self._status_line())

    def _redraw(self) -> None:
        if self.state.phase is Phase.INITIALIZING:
            return
        snapshot = self.state.current
        if self.state.snapshot is None:
            frame = Text("Waiting for first health check...", style="dim")
        elif not snapshot.results:
            frame = Text("No services configured", style="dim")
        else:
            frame = render_sections(snapshot)
        self.last_frame = frame
        self._update_status_line()
        self.query_one("#monitor-body", Static).update(frame)


def run_monitor(targets: Sequence[ProbeTarget]) -> None:
    MonitorApp(targets).run()
