import socket
from datetime import datetime

import pytest

from musing_cli.registry import Category, ProbeTarget
from musing_cli.snapshot import HealthSnapshot, ProbeResult


@pytest.fixture
def listening_port():
    srv = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
    srv.bind(("127.0.0.1", 0))
    srv.listen(8)
    try:
        yield srv.getsockname()[1]
    finally:
        srv.close()


@pytest.fixture
def closed_port():
    s = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
    s.bind(("127.0.0.1", 0))
    port = s.getsockname()[1]
    s.close()
    return port


def make_snapshot(*rows):
    """rows: (name, port, category, reachable, latency_ms)"""
    results = tuple(
        ProbeResult(ProbeTarget(name, port, category), reachable, latency)
        for name, port, category, reachable, latency in rows
    )
    return HealthSnapshot(results=results, started_at=datetime(2024, 1, 1, 12, 0, 0))


@pytest.fixture
def sample_snapshot():
    return make_snapshot(
        ("Docker Desktop", 0, Category.INFRA, True, 3.4),
        ("MongoDB", 27018, Category.DATABASE, True, 1.2),
        ("Production", 27019, Category.TUNNEL, False, 0.0),
        ("news-api", 8084, Category.API, True, 0.8),
        ("Angular", 3000, Category.FRONTEND, False, 0.0),
        ("about-me-api", 8086, Category.API, False, 0.0),
    )
