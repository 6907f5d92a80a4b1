"""Configuration module: frozen dataclass loaded from environment variables."""

import logging
import os
import socket
from dataclasses import dataclass

import yaml

from gelf_adapter.compression import DEFAULT_ALGORITHM, DEFAULT_LEVEL, parse_algorithm, parse_level
from gelf_adapter.router import Route
from gelf_adapter.transport import DEFAULT_CHUNK_SIZE

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Config:
    hostname: str = ""
    routes: tuple[str, ...] = ()
    routes_file: str = ""
    compress_type: str = DEFAULT_ALGORITHM
    compress_level: int = DEFAULT_LEVEL
    send_timestamp: bool = False
    extra_json: str = ""
    chunk_size: int = DEFAULT_CHUNK_SIZE
    dashboard_port: int = 0
    max_failures: int = 100


def _parse_int(name: str, default: int) -> int:
    """Read an integer env var, falling back to *default* if unset or invalid."""
    raw = os.environ.get(name)
    if raw is None or not raw.strip():
        return default
    try:
        return int(raw)
    except ValueError:
        logger.warning("Ignoring non-integer %s=%r, using %d", name, raw, default)
        return default


def load_config() -> Config:
    """Build Config from environment variables with sensible defaults.

    The hostname is resolved here, once per process.
    """
    routes = tuple(
        uri.strip() for uri in os.environ.get("ROUTE", "").split(",") if uri.strip()
    )
    return Config(
        hostname=socket.gethostname(),
        routes=routes,
        routes_file=os.environ.get("ROUTES_FILE", Config.routes_file),
        compress_type=parse_algorithm(os.environ.get("COMPRESS_TYPE")),
        compress_level=parse_level(os.environ.get("COMPRESS_LEVEL")),
        send_timestamp=os.environ.get("SEND_TIMESTAMP") == "1",
        extra_json=os.environ.get("EXTRA_JSON", Config.extra_json),
        chunk_size=_parse_int("CHUNK_SIZE", Config.chunk_size),
        dashboard_port=_parse_int("DASHBOARD_PORT", Config.dashboard_port),
        max_failures=_parse_int("MAX_FAILURES", Config.max_failures),
    )


def load_routes(config: Config) -> list[Route]:
    """Collect routes from the ROUTE URIs and the optional YAML routes file.

    The file holds either a list or a mapping with a ``routes`` list; each
    item is a route URI or a mapping with adapter/address/transport keys.
    """
    routes = [Route.from_uri(uri) for uri in config.routes]
    if not config.routes_file:
        return routes

    with open(config.routes_file, "r") as f:
        data = yaml.safe_load(f) or []
    if isinstance(data, dict):
        data = data.get("routes") or []
    if not isinstance(data, list):
        raise ValueError(f"{config.routes_file}: expected a list of routes")

    for item in data:
        if isinstance(item, str):
            routes.append(Route.from_uri(item))
        elif isinstance(item, dict):
            routes.append(Route.from_dict(item))
        else:
            raise ValueError(f"{config.routes_file}: unsupported route entry {item!r}")
    logger.info("Loaded %d route(s) from %s", len(routes), config.routes_file)
    return routes
