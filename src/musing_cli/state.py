"""Dashboard view state and the event dispatcher that drives it.

The dispatcher never performs I/O. It mutates ``DashboardState`` and returns
the effects the app should carry out (start a refresh, redraw, quit).
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum, auto
from typing import Union

from .snapshot import HealthSnapshot

REFRESH_INTERVAL = 3.0
SPINNER_INTERVAL = 0.1
QUIT_KEYS = frozenset({"q", "escape", "ctrl+c"})


class Phase(Enum):
    INITIALIZING = auto()
    RUNNING = auto()
    EXITING = auto()


class Effect(Enum):
    START_REFRESH = auto()
    RENDER = auto()
    QUIT = auto()


@dataclass(frozen=True)
class Tick:
    at: datetime


@dataclass(frozen=True)
class SnapshotReady:
    snapshot: HealthSnapshot


@dataclass(frozen=True)
class KeyPress:
    key: str


@dataclass(frozen=True)
class Resize:
    width: int
    height: int


Event = Union[Tick, SnapshotReady, KeyPress, Resize]


@dataclass
class DashboardState:
    phase: Phase = Phase.INITIALIZING
    snapshot: HealthSnapshot | None = None
    refreshing: bool = False
    width: int = 0
    height: int = 0
    spinner_phase: int = 0
    last_tick: datetime | None = None

    @property
    def current(self) -> HealthSnapshot:
        return self.snapshot if self.snapshot is not None else HealthSnapshot.empty()


def start(state: DashboardState) -> list[Effect]:
    """Enter RUNNING and request the first snapshot without waiting for a tick."""
    if state.phase is not Phase.INITIALIZING:
        return []
    state.phase = Phase.RUNNING
    state.refreshing = True
    return [Effect.START_REFRESH, Effect.RENDER]


def dispatch(state: DashboardState, event: Event) -> list[Effect]:
    if state.phase is Phase.EXITING:
        return []

    if isinstance(event, KeyPress):
        if event.key in QUIT_KEYS:
            state.phase = Phase.EXITING
            return [Effect.QUIT]
        return []

    if isinstance(event, Resize):
        state.width = event.width
        state.height = event.height
        return [Effect.RENDER]

    if isinstance(event, SnapshotReady):
        state.snapshot = event.snapshot
        state.refreshing = False
        return [Effect.RENDER]

    if isinstance(event, Tick):
        state.last_tick = event.at
        if state.refreshing:
            return [Effect.RENDER]
        state.refreshing = True
        return [Effect.START_REFRESH, Effect.RENDER]

    raise TypeError(f"unknown dashboard event: {event!r}")


def spin(state: DashboardState) -> bool:
    """Advance the spinner by one frame. Returns False when nothing changed."""
    if state.phase is not Phase.RUNNING or not state.refreshing:
        return False
    state.spinner_phase += 1
    return True
