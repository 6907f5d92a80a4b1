"""Shared pytest fixtures for the gelf_adapter test suite."""

import socket
from datetime import datetime, timezone

import pytest

from gelf_adapter.config import Config
from gelf_adapter.models import STDOUT, RawLogRecord, SourceIdentity


@pytest.fixture()
def identity() -> SourceIdentity:
    return SourceIdentity(
        id="c0ffee",
        name="/web-1",
        image="sha256:abc123",
        config_image="nginx:1.25",
        cmd=("nginx", "-g", "daemon off;"),
        created=datetime(2021, 4, 30, 8, 0, 0, tzinfo=timezone.utc),
        labels={},
    )


@pytest.fixture()
def make_record(identity):
    """Factory for RawLogRecord with sensible defaults."""

    def _make(data, source=STDOUT, time=None, container=None):
        return RawLogRecord(
            data=data,
            source=source,
            time=time or datetime(2021, 5, 1, 10, 0, 0, 123456, tzinfo=timezone.utc),
            container=container or identity,
        )

    return _make


@pytest.fixture()
def config() -> Config:
    return Config(hostname="test-host", compress_type="none")


@pytest.fixture()
def udp_receiver():
    """A bound loopback UDP socket; yields (sock, "127.0.0.1:port")."""
    sock = socket.socket(socket.AF_INET, socket.SOCK_DGRAM)
    sock.bind(("127.0.0.1", 0))
    sock.settimeout(5.0)
    host, port = sock.getsockname()
    try:
        yield sock, f"{host}:{port}"
    finally:
        sock.close()


class FakeWriter:
    """Collects messages instead of sending them."""

    def __init__(self, fail=False):
        self.fail = fail
        self.messages = []
        self.closed = False

    def write_message(self, message) -> bool:
        if self.fail:
            return False
        self.messages.append(message)
        return True

    def close(self):
        self.closed = True


@pytest.fixture()
def fake_writer() -> FakeWriter:
    return FakeWriter()
