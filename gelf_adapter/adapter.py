"""GELF stream adapter: turns a record stream into GELF messages on one route."""

import logging
from typing import Iterable

from gelf_adapter.assembler import build_message
from gelf_adapter.config import Config
from gelf_adapter.extras import ExtrasSerializationError, decode_json_object
from gelf_adapter.failure_tracker import FailureTracker
from gelf_adapter.metrics import Metrics
from gelf_adapter.models import RawLogRecord
from gelf_adapter.router import Route, adapter_factories, adapter_transports
from gelf_adapter.transport import GelfUDPWriter

logger = logging.getLogger(__name__)

DEFAULT_TRANSPORT = "udp"


class AdapterConstructionError(Exception):
    """Raised when an adapter cannot be built for a route."""


class GelfAdapter:
    """Drains one record stream in order and ships each record to a writer.

    A record that cannot be encoded or sent is logged and dropped; the
    stream keeps going.
    """

    def __init__(self, route: Route, writer, config: Config,
                 metrics: Metrics | None = None,
                 failures: FailureTracker | None = None):
        self.route = route
        self._writer = writer
        self._host = config.hostname
        self._send_timestamp = config.send_timestamp
        self._env_extra = decode_json_object(config.extra_json)
        self.metrics = metrics or Metrics()
        self.failures = failures or FailureTracker(config.max_failures)

    def stream(self, records: Iterable[RawLogRecord]):
        """Process records until the iterable is exhausted."""
        logger.info("Streaming to %s", self.route.address)
        for record in records:
            try:
                message = build_message(
                    record, self._env_extra, self._host, self._send_timestamp,
                )
            except ExtrasSerializationError as e:
                logger.error("Graylog: dropping record from %s: %s", record.container.name, e)
                self._drop("serialization", str(e), record)
                continue
            except Exception as e:
                logger.exception("Unexpected error building message from %s", record.container.name)
                self._drop("processing", str(e), record)
                continue

            try:
                sent = self._writer.write_message(message)
            except Exception as e:
                logger.exception("Unexpected error sending to %s", self.route.address)
                self._drop("transport", str(e), record)
                continue
            if not sent:
                self._drop("transport", "send failed", record)
                continue

            self.metrics.record_sent(message.level)
        logger.info("Stream to %s drained", self.route.address)

    def close(self):
        close = getattr(self._writer, "close", None)
        if close:
            close()

    def _drop(self, reason: str, error: str, record: RawLogRecord):
        self.metrics.record_dropped(reason)
        self.failures.add(self.route.address, reason, error, record.data)


def new_gelf_adapter(route: Route, config: Config,
                     metrics: Metrics | None = None,
                     failures: FailureTracker | None = None) -> GelfAdapter:
    """Factory registered as the "gelf" adapter.

    Raises AdapterConstructionError if the route's transport is not
    registered or the writer cannot be created for its address.
    """
    transport, found = adapter_transports.lookup(route.adapter_transport(DEFAULT_TRANSPORT))
    if not found:
        raise AdapterConstructionError("unable to find adapter: " + route.adapter)

    try:
        writer = transport(
            route.address,
            compress_type=config.compress_type,
            compress_level=config.compress_level,
            chunk_size=config.chunk_size,
        )
    except (OSError, ValueError) as e:
        raise AdapterConstructionError(f"cannot create writer for {route.address}: {e}") from e

    return GelfAdapter(route, writer, config, metrics, failures)


def create_adapter(route: Route, config: Config,
                   metrics: Metrics | None = None,
                   failures: FailureTracker | None = None) -> GelfAdapter:
    """Look up the factory named by the route and build an adapter with it."""
    factory, found = adapter_factories.lookup(route.adapter)
    if not found:
        raise AdapterConstructionError(
            f"unknown adapter {route.adapter!r} (available: {', '.join(adapter_factories.names())})"
        )
    return factory(route, config, metrics, failures)


adapter_transports.register(GelfUDPWriter, DEFAULT_TRANSPORT)
adapter_factories.register(new_gelf_adapter, "gelf")
