"""The ordered list of endpoints the dashboard probes."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from .config import DEFAULT_CONFIG, ProjectConfig

ENGINE_NAME = "Docker Desktop"
DEFAULT_TUNNEL_NAME = "Production"
FRONTEND_NAME = "Angular"


class Category(str, Enum):
    INFRA = "infra"
    DATABASE = "database"
    API = "api"
    FRONTEND = "frontend"
    TUNNEL = "tunnel"


@dataclass(frozen=True)
class ProbeTarget:
    name: str
    port: int = 0
    category: Category = Category.API
    health_path: str | None = None

    @property
    def has_port(self) -> bool:
        return self.port > 0


_SERVICE_CATEGORY = {
    "api": Category.API,
    "frontend": Category.FRONTEND,
    "database": Category.DATABASE,
}


def classify(name: str, port: int, config: ProjectConfig) -> Category:
    """Infer a category for a service that has no explicit type."""
    if name == ENGINE_NAME:
        return Category.INFRA
    if name == config.database.type:
        return Category.DATABASE
    if name == FRONTEND_NAME or name in config.frontend_names:
        return Category.FRONTEND
    if port and port == config.database.prod_port:
        return Category.TUNNEL
    return Category.API


def tunnel_name(config: ProjectConfig) -> str:
    if config.production is not None and config.production.server:
        return config.production.server
    return DEFAULT_TUNNEL_NAME


def registry_from_config(config: ProjectConfig) -> list[ProbeTarget]:
    """Engine status, database, production tunnel, then configured services in file order.

    Services without a ``type`` are placed by name and port.
    """
    db = config.database
    targets = [
        ProbeTarget(ENGINE_NAME, 0, Category.INFRA),
        ProbeTarget(db.type, db.dev_port, Category.DATABASE),
        ProbeTarget(tunnel_name(config), db.prod_port, Category.TUNNEL),
    ]
    for svc in config.services:
        targets.append(ProbeTarget(
            name=svc.name,
            port=svc.port,
            category=_SERVICE_CATEGORY[svc.type] if svc.type else classify(svc.name, svc.port, config),
            health_path=svc.health_path,
        ))
    return targets


def static_registry() -> list[ProbeTarget]:
    return registry_from_config(DEFAULT_CONFIG)
