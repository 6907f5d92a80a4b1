"""Routes and the adapter/transport registries.

A route names an adapter, an optional transport and a destination address,
e.g. ``gelf://graylog:12201`` or ``gelf+udp://graylog:12201``.
"""

import logging
from dataclasses import dataclass
from urllib.parse import urlsplit

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Route:
    adapter: str
    address: str
    transport: str = ""

    def adapter_transport(self, default: str) -> str:
        return self.transport or default

    @classmethod
    def from_uri(cls, uri: str) -> "Route":
        """Parse ``adapter[+transport]://host:port``. Raises ValueError."""
        parts = urlsplit(uri.strip())
        if not parts.scheme or not parts.netloc:
            raise ValueError(f"Invalid route {uri!r}, expected adapter://host:port")
        adapter, _, transport = parts.scheme.partition("+")
        return cls(adapter=adapter, address=parts.netloc, transport=transport)

    @classmethod
    def from_dict(cls, data: dict) -> "Route":
        if "address" not in data:
            raise ValueError(f"Route {data!r} has no address")
        return cls(
            adapter=str(data.get("adapter", "gelf")),
            address=str(data["address"]),
            transport=str(data.get("transport", "")),
        )


class Registry:
    """Name -> factory lookup table."""

    def __init__(self, kind: str):
        self._kind = kind
        self._items: dict = {}

    def register(self, item, name: str):
        self._items[name] = item
        logger.debug("Registered %s %r", self._kind, name)

    def lookup(self, name: str):
        """Return (item, found)."""
        item = self._items.get(name)
        return item, item is not None

    def names(self) -> list[str]:
        return sorted(self._items)


adapter_factories = Registry("adapter")
adapter_transports = Registry("transport")
