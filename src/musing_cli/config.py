"""Project configuration for the dev stack.

The project root is read from ``~/.musingrc`` (a single line holding a
path) and the stack itself is described by ``.musing.yaml`` in that root::

    database:
      type: MongoDB
      dev_port: 27018
      prod_port: 27019
    production:
      server: deploy@example.com
      remote_db_port: 27017
    services:
      - name: news-api
        port: 8084
        type: api
        health_path: /health
      - name: Angular
        port: 3000
        type: frontend

The loaded ``ProjectConfig`` is passed explicitly to whatever needs it.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path

import yaml

from .errors import ConfigError

logger = logging.getLogger(__name__)

CONFIG_FILENAME = ".musing.yaml"
COMPOSE_FILENAME = "compose.yaml"
RC_PATH = Path.home() / ".musingrc"

MONGO_DEV_PORT = 27018
MONGO_PROD_PORT = 27019
MONGO_REMOTE_PORT = 27017

SERVICE_TYPES = ("api", "frontend", "database")


@dataclass(frozen=True)
class DatabaseConfig:
    type: str = "MongoDB"
    dev_port: int = MONGO_DEV_PORT
    prod_port: int = MONGO_PROD_PORT


@dataclass(frozen=True)
class ProductionConfig:
    server: str = ""
    remote_db_port: int = MONGO_REMOTE_PORT


@dataclass(frozen=True)
class ServiceConfig:
    name: str
    port: int
    type: str | None = None
    health_path: str | None = None


@dataclass(frozen=True)
class ProjectConfig:
    database: DatabaseConfig = field(default_factory=DatabaseConfig)
    production: ProductionConfig | None = None
    services: tuple[ServiceConfig, ...] = ()
    root: Path | None = None

    @property
    def frontend_names(self) -> set[str]:
        return {s.name for s in self.services if s.type == "frontend"}


DEFAULT_SERVICES = (
    ServiceConfig("networks-api", 8085),
    ServiceConfig("random-facts-api", 8082),
    ServiceConfig("alcohol-free-api", 8081),
    ServiceConfig("random-quotes-api", 8083),
    ServiceConfig("news-api", 8084),
    ServiceConfig("about-me-api", 8086),
    ServiceConfig("featured-item-api", 8087),
    ServiceConfig("bitcoin-price-api", 8088),
    ServiceConfig("Angular", 3000, type="frontend"),
)

DEFAULT_CONFIG = ProjectConfig(services=DEFAULT_SERVICES)


# ---------------------------------------------------------------------------
# Discovery
# ---------------------------------------------------------------------------

def _is_project_dir(path: Path) -> bool:
    return (path / CONFIG_FILENAME).is_file() or (path / COMPOSE_FILENAME).is_file()


def find_project_root(rc_path: Path | None = None) -> Path:
    """Resolve the project root from MUSING_PROJECT or ~/.musingrc."""
    env = os.environ.get("MUSING_PROJECT")
    if env:
        root = Path(env).expanduser()
        source = "MUSING_PROJECT"
    else:
        rc_path = rc_path or RC_PATH
        try:
            root = Path(rc_path.read_text().strip()).expanduser()
        except OSError:
            raise ConfigError(
                f"{rc_path} not found - create it with your project path (e.g., /Users/you/Repos/project)"
            ) from None
        source = str(rc_path)

    if not _is_project_dir(root):
        raise ConfigError(f"{source} points to {root} which does not contain {CONFIG_FILENAME} or {COMPOSE_FILENAME}")
    return root


# ---------------------------------------------------------------------------
# Parsing
# ---------------------------------------------------------------------------

def _port(value: object, where: str) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise ConfigError(f"{where}: port must be an integer, got {value!r}")
    return value


def _parse_database(raw: dict) -> DatabaseConfig:
    default = DatabaseConfig()
    return DatabaseConfig(
        type=str(raw.get("type", default.type)),
        dev_port=_port(raw.get("dev_port", default.dev_port), "database.dev_port"),
        prod_port=_port(raw.get("prod_port", default.prod_port), "database.prod_port"),
    )


def _parse_production(raw: dict | None) -> ProductionConfig | None:
    if not raw:
        return None
    return ProductionConfig(
        server=str(raw.get("server", "")),
        remote_db_port=_port(raw.get("remote_db_port", MONGO_REMOTE_PORT), "production.remote_db_port"),
    )


def _parse_services(raw: list) -> tuple[ServiceConfig, ...]:
    services = []
    for i, entry in enumerate(raw):
        where = f"services[{i}]"
        if not isinstance(entry, dict) or "name" not in entry or "port" not in entry:
            raise ConfigError(f"{where}: expected a mapping with 'name' and 'port'")
        svc_type = entry.get("type")
        if svc_type is not None and svc_type not in SERVICE_TYPES:
            raise ConfigError(f"{where}: unknown service type {svc_type!r} (expected one of {', '.join(SERVICE_TYPES)})")
        services.append(ServiceConfig(
            name=str(entry["name"]),
            port=_port(entry["port"], where),
            type=svc_type,
            health_path=entry.get("health_path"),
        ))
    return tuple(services)


def parse_config(data: object, root: Path | None = None) -> ProjectConfig:
    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise ConfigError("configuration must be a mapping at the top level")
    services = data.get("services") or []
    if not isinstance(services, list):
        raise ConfigError("'services' must be a list")
    return ProjectConfig(
        database=_parse_database(data.get("database") or {}),
        production=_parse_production(data.get("production")),
        services=_parse_services(services),
        root=root,
    )


def load_config(path: Path) -> ProjectConfig:
    """Load and validate a .musing.yaml file."""
    try:
        with open(path) as f:
            data = yaml.safe_load(f)
    except OSError as exc:
        raise ConfigError(f"could not read {path}: {exc}") from exc
    except yaml.YAMLError as exc:
        raise ConfigError(f"error parsing {path}: {exc}") from exc
    return parse_config(data, root=path.parent)


def discover_config(explicit: Path | None = None) -> ProjectConfig:
    """Pick the config: explicit path, MUSING_CONFIG, project root, then built-in defaults."""
    if explicit is None and os.environ.get("MUSING_CONFIG"):
        explicit = Path(os.environ["MUSING_CONFIG"]).expanduser()
    if explicit is not None:
        return load_config(explicit)

    try:
        root = find_project_root()
    except ConfigError as exc:
        logger.warning("%s; using built-in service table", exc)
        return DEFAULT_CONFIG

    path = root / CONFIG_FILENAME
    if not path.is_file():
        logger.warning("%s has no %s; using built-in service table", root, CONFIG_FILENAME)
        return ProjectConfig(services=DEFAULT_SERVICES, root=root)
    return load_config(path)
