"""Payload compression for GELF datagrams (none, gzip or zlib)."""

import gzip
import zlib

ALGORITHMS = ("none", "gzip", "zlib")

DEFAULT_ALGORITHM = "gzip"
# zlib's Z_DEFAULT_COMPRESSION
DEFAULT_LEVEL = -1


def parse_algorithm(value: str | None) -> str:
    """Normalize a COMPRESS_TYPE value; anything unrecognised means gzip."""
    algorithm = (value or "").strip().lower()
    if algorithm in ALGORITHMS:
        return algorithm
    return DEFAULT_ALGORITHM


def parse_level(value: str | None) -> int:
    """Parse a COMPRESS_LEVEL value in -1..9, falling back to the default."""
    if value is None:
        return DEFAULT_LEVEL
    try:
        level = int(value.strip())
    except ValueError:
        return DEFAULT_LEVEL
    if -1 <= level <= 9:
        return level
    return DEFAULT_LEVEL


class CompressionHandler:
    """Compresses serialized messages with a fixed algorithm and level."""

    def __init__(self, algorithm: str = DEFAULT_ALGORITHM, level: int = DEFAULT_LEVEL):
        self._algorithm = algorithm.lower()
        self._level = level

        if self._algorithm not in ALGORITHMS:
            raise ValueError(f"Unsupported algorithm: {self._algorithm}")
        if not -1 <= level <= 9:
            raise ValueError(f"Compression level out of range: {level}")

    @property
    def algorithm(self) -> str:
        return self._algorithm

    @property
    def level(self) -> int:
        return self._level

    def compress(self, data: bytes) -> bytes:
        if self._algorithm == "gzip":
            return gzip.compress(data, compresslevel=self._level)
        if self._algorithm == "zlib":
            return zlib.compress(data, self._level)
        return data
