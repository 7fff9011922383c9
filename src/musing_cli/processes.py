"""Find which local process is listening on a port."""

from __future__ import annotations

import logging
from dataclasses import dataclass

import psutil

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Listener:
    pid: int
    name: str


def find_listener(port: int) -> Listener | None:
    """Return the process holding a LISTEN socket on ``port``, if visible to us."""
    try:
        conns = psutil.net_connections(kind="tcp")
    except (psutil.AccessDenied, OSError) as exc:
        logger.debug("cannot list connections: %s", exc)
        return None

    for c in conns:
        if c.status != psutil.CONN_LISTEN or not c.laddr or c.laddr.port != port:
            continue
        if c.pid is None:
            continue
        try:
            name = psutil.Process(c.pid).name()
        except (psutil.NoSuchProcess, psutil.AccessDenied):
            name = "?"
        return Listener(pid=c.pid, name=name)
    return None
