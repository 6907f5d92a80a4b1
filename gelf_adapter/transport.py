"""GELF UDP writer: compresses, chunks and sends messages to a collector."""

import logging
import os
import socket

from gelf_adapter.compression import DEFAULT_ALGORITHM, DEFAULT_LEVEL, CompressionHandler
from gelf_adapter.models import GelfMessage

logger = logging.getLogger(__name__)

CHUNK_MAGIC = b"\x1e\x0f"
CHUNK_HEADER_LEN = 12  # magic(2) + message id(8) + sequence(1) + count(1)
DEFAULT_CHUNK_SIZE = 1420
MAX_CHUNKS = 128


def parse_address(address: str) -> tuple[str, int]:
    """Split 'host:port' into (host, port). Raises ValueError when invalid."""
    host, sep, port_text = address.rpartition(":")
    if not sep or not host or not port_text:
        raise ValueError(f"Invalid address {address!r}, expected host:port")
    try:
        port = int(port_text)
    except ValueError:
        raise ValueError(f"Invalid port in address {address!r}") from None
    if not 0 < port < 65536:
        raise ValueError(f"Port out of range in address {address!r}")
    return host.strip("[]"), port


def split_chunks(payload: bytes, chunk_size: int = DEFAULT_CHUNK_SIZE,
                 message_id: bytes | None = None) -> list[bytes]:
    """Split *payload* into GELF chunked datagrams.

    Raises ValueError if more than MAX_CHUNKS would be needed.
    """
    data_len = chunk_size - CHUNK_HEADER_LEN
    if data_len <= 0:
        raise ValueError(f"Chunk size {chunk_size} leaves no room for data")
    count = (len(payload) + data_len - 1) // data_len
    if count > MAX_CHUNKS:
        raise ValueError(
            f"Message needs {count} chunks, more than the {MAX_CHUNKS} allowed"
        )

    message_id = message_id or os.urandom(8)
    chunks = []
    for seq in range(count):
        part = payload[seq * data_len:(seq + 1) * data_len]
        chunks.append(CHUNK_MAGIC + message_id + bytes([seq, count]) + part)
    return chunks


class GelfUDPWriter:
    """Sends GELF messages over a connected UDP socket.

    Sending is fire-and-forget: write_message() logs failures and returns
    False, it never retries.
    """

    def __init__(
        self,
        address: str,
        compress_type: str = DEFAULT_ALGORITHM,
        compress_level: int = DEFAULT_LEVEL,
        chunk_size: int = DEFAULT_CHUNK_SIZE,
    ):
        host, port = parse_address(address)
        self._compression = CompressionHandler(compress_type, compress_level)
        self._chunk_size = chunk_size
        self.address = address

        family, socktype, proto, _, sockaddr = socket.getaddrinfo(
            host, port, type=socket.SOCK_DGRAM,
        )[0]
        self._sock = socket.socket(family, socktype, proto)
        try:
            self._sock.connect(sockaddr)
        except OSError:
            self._sock.close()
            raise
        logger.info(
            "GELF writer for %s (compression=%s, level=%d)",
            address, self._compression.algorithm, self._compression.level,
        )

    @property
    def compression(self) -> CompressionHandler:
        return self._compression

    def write_message(self, message: GelfMessage) -> bool:
        """Serialize, compress and send one message. Returns True on success."""
        if not self._sock:
            logger.warning("Send to %s failed: writer is closed", self.address)
            return False
        payload = self._compression.compress(message.to_bytes())
        try:
            if len(payload) <= self._chunk_size:
                self._sock.send(payload)
            else:
                for chunk in split_chunks(payload, self._chunk_size):
                    self._sock.send(chunk)
            return True
        except (OSError, ValueError) as e:
            logger.warning("Send to %s failed: %s", self.address, e)
            return False

    def close(self):
        if self._sock:
            try:
                self._sock.close()
            except OSError:
                pass
            self._sock = None
