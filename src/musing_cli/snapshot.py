"""One refresh cycle: probe every target and assemble an ordered snapshot."""

from __future__ import annotations

import logging
import queue
import threading
from dataclasses import dataclass
from datetime import datetime
from typing import Callable, Sequence

from . import engine, health
from .health import HTTPStatus, PortStatus, status_for
from .registry import ProbeTarget

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ProbeResult:
    target: ProbeTarget
    reachable: bool
    latency_ms: float = 0.0

    @property
    def status(self) -> str:
        return status_for(self.reachable)


@dataclass(frozen=True)
class HealthSnapshot:
    results: tuple[ProbeResult, ...]
    started_at: datetime

    @classmethod
    def empty(cls) -> HealthSnapshot:
        return cls(results=(), started_at=datetime.now())

    def __len__(self) -> int:
        return len(self.results)

    def __iter__(self):
        return iter(self.results)


def _probe(
    target: ProbeTarget,
    check_port: Callable[[int], PortStatus],
    check_http: Callable[[str], HTTPStatus],
    check_engine: Callable[[], PortStatus],
) -> ProbeResult:
    if not target.has_port:
        st = check_engine()
        return ProbeResult(target, st.open, st.latency_ms if st.open else 0.0)
    if target.health_path:
        hs = check_http(f"http://localhost:{target.port}{target.health_path}")
        return ProbeResult(target, hs.available, hs.latency_ms if hs.available else 0.0)
    ps = check_port(target.port)
    return ProbeResult(target, ps.open, ps.latency_ms if ps.open else 0.0)


def _probe_worker(index: int, target: ProbeTarget, checks: tuple, out: queue.Queue) -> None:
    try:
        result = _probe(target, *checks)
    except Exception:
        logger.debug("probe for %s raised", target.name, exc_info=True)
        result = ProbeResult(target, False)
    out.put((index, result))


def build_snapshot(
    targets: Sequence[ProbeTarget],
    check_port: Callable[[int], PortStatus] = health.check_port,
    check_http: Callable[[str], HTTPStatus] = health.check_http,
    check_engine: Callable[[], PortStatus] = engine.check_engine,
    clock: Callable[[], datetime] = datetime.now,
) -> HealthSnapshot:
    """Probe all targets concurrently; results keep the order of ``targets``.

    Each probe runs on its own daemon thread, so a sweep abandoned at exit
    never holds up interpreter shutdown. Each check's own timeout bounds the
    sweep.
    """
    started_at = clock()
    if not targets:
        return HealthSnapshot(results=(), started_at=started_at)

    checks = (check_port, check_http, check_engine)
    done: queue.Queue[tuple[int, ProbeResult]] = queue.Queue()
    for i, target in enumerate(targets):
        threading.Thread(
            target=_probe_worker,
            args=(i, target, checks, done),
            name=f"probe-{target.name}",
            daemon=True,
        ).start()

    slots: list[ProbeResult | None] = [None] * len(targets)
    for _ in targets:
        i, result = done.get()
        slots[i] = result

    logger.debug("snapshot: %d/%d reachable", sum(1 for r in slots if r.reachable), len(slots))
    return HealthSnapshot(results=tuple(slots), started_at=started_at)
