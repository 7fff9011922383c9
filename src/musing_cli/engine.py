"""Container engine presence check (the port-less infra entry)."""

from __future__ import annotations

import logging
import time

import docker as docker_lib
from docker.errors import DockerException

from .errors import StartupError
from .health import PortStatus

logger = logging.getLogger(__name__)

ENGINE_TIMEOUT = 2


def check_engine(timeout: int = ENGINE_TIMEOUT) -> PortStatus:
    """Ping the Docker daemon. Port is always 0; any failure counts as down."""
    start = time.perf_counter()
    try:
        client = docker_lib.from_env(timeout=timeout)
    except DockerException as exc:
        logger.debug("docker client unavailable: %s", exc)
        return PortStatus(port=0, open=False)
    try:
        client.ping()
    except (DockerException, OSError) as exc:
        logger.debug("docker ping failed: %s", exc)
        return PortStatus(port=0, open=False)
    finally:
        client.close()
    elapsed = (time.perf_counter() - start) * 1000
    return PortStatus(port=0, open=True, latency_ms=elapsed)


def ensure_running(timeout: int = ENGINE_TIMEOUT) -> None:
    if not check_engine(timeout).open:
        raise StartupError("Docker is not running. Start Docker Desktop and try again")
