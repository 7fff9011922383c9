"""Single-shot liveness checks against local ports and HTTP endpoints."""

from __future__ import annotations

import socket
import time
from dataclasses import dataclass

import requests

PORT_TIMEOUT = 2.0
HTTP_TIMEOUT = 3.0

STATUS_RUNNING = "running"
STATUS_DOWN = "down"


@dataclass(frozen=True)
class PortStatus:
    port: int
    open: bool
    latency_ms: float = 0.0


@dataclass(frozen=True)
class HTTPStatus:
    url: str
    available: bool
    latency_ms: float = 0.0
    error: Exception | None = None


def check_port(port: int, host: str = "localhost", timeout: float = PORT_TIMEOUT) -> PortStatus:
    """Open a TCP connection to host:port and close it straight away.

    ``timeout`` bounds the whole check, not each address ``host`` resolves to.
    """
    start = time.perf_counter()
    deadline = start + timeout
    try:
        addrs = socket.getaddrinfo(host, port, type=socket.SOCK_STREAM)
    except OSError:
        return PortStatus(port=port, open=False)

    for family, socktype, proto, _, addr in addrs:
        remaining = deadline - time.perf_counter()
        if remaining <= 0:
            break
        sock = socket.socket(family, socktype, proto)
        try:
            sock.settimeout(remaining)
            sock.connect(addr)
            elapsed = (time.perf_counter() - start) * 1000
        except OSError:
            continue
        finally:
            sock.close()
        return PortStatus(port=port, open=True, latency_ms=elapsed)
    return PortStatus(port=port, open=False)


def check_http(url: str, timeout: float = HTTP_TIMEOUT) -> HTTPStatus:
    """GET a URL once. Only 2xx counts as available; transport errors are carried."""
    start = time.perf_counter()
    try:
        resp = requests.get(url, timeout=timeout)
    except requests.RequestException as exc:
        return HTTPStatus(url=url, available=False, error=exc)
    elapsed = (time.perf_counter() - start) * 1000
    available = 200 <= resp.status_code < 300
    return HTTPStatus(url=url, available=available, latency_ms=elapsed)


def format_latency(ms: float | None) -> str:
    if not ms:
        return "timeout"
    # whole microseconds, then one decimal of milliseconds
    micros = int(ms * 1000)
    return f"{micros / 1000:.1f}ms"


def status_for(is_open: bool) -> str:
    return STATUS_RUNNING if is_open else STATUS_DOWN
