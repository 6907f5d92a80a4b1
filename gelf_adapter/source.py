"""Inbound record source: JSON-lines decoding and a closable record queue.

Each input line is one container log record::

    {"data": "...", "source": "stdout", "time": "2021-05-01T10:00:00.5Z",
     "container": {"id": "...", "name": "/web", "image": "sha256:...",
                   "created": "...", "node": {"name": "node-1"},
                   "config": {"image": "nginx:1.25", "cmd": ["nginx"],
                              "labels": {"gelf_team": "core"}}}}
"""

import json
import logging
import queue
import re
from datetime import datetime, timezone
from typing import Iterator, TextIO

from gelf_adapter.models import STDERR, STDOUT, RawLogRecord, SourceIdentity

logger = logging.getLogger(__name__)

# Seconds fraction, normalised to exactly six digits for fromisoformat
# (container runtimes emit nanoseconds; other sources may send fewer).
_FRACTION_RE = re.compile(r"(:\d{2})\.(\d+)")


def _six_digit_fraction(m: re.Match) -> str:
    return f"{m.group(1)}.{(m.group(2) + '000000')[:6]}"


def _parse_time(value: str | None) -> datetime | None:
    if not value:
        return None
    text = _FRACTION_RE.sub(_six_digit_fraction, value.strip(), count=1)
    if text.endswith(("Z", "z")):
        text = text[:-1] + "+00:00"
    moment = datetime.fromisoformat(text)
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    return moment


def identity_from_dict(data: dict) -> SourceIdentity:
    config = data.get("config") or {}
    node = data.get("node") or None
    return SourceIdentity(
        id=str(data.get("id", "")),
        name=str(data.get("name", "")),
        image=str(data.get("image", "")),
        config_image=str(config.get("image", "")),
        cmd=tuple(str(token) for token in (config.get("cmd") or ())),
        created=_parse_time(data.get("created")),
        node_name=str(node["name"]) if node and "name" in node else None,
        labels={str(k): str(v) for k, v in (config.get("labels") or {}).items()},
    )


def record_from_dict(data: dict) -> RawLogRecord:
    """Build a RawLogRecord. Raises ValueError/KeyError/TypeError on bad input."""
    source = data.get("source", STDOUT)
    if source not in (STDOUT, STDERR):
        raise ValueError(f"unknown source stream {source!r}")
    return RawLogRecord(
        data=str(data["data"]),
        source=source,
        time=_parse_time(data.get("time")) or datetime.now(timezone.utc),
        container=identity_from_dict(data.get("container") or {}),
    )


def read_records(stream: TextIO) -> Iterator[RawLogRecord]:
    """Yield records from a JSON-lines stream, skipping lines that don't decode."""
    for lineno, line in enumerate(stream, 1):
        line = line.strip()
        if not line:
            continue
        try:
            data = json.loads(line)
            if not isinstance(data, dict):
                raise ValueError("record is not a JSON object")
            yield record_from_dict(data)
        except (ValueError, KeyError, TypeError, AttributeError, RecursionError) as exc:
            logger.warning("Skipping input line %d: %s", lineno, exc)


class RecordQueue:
    """Blocking queue of records; iteration ends once close() is called.

    Records put before close() are still delivered.
    """

    _CLOSED = object()

    def __init__(self, maxsize: int = 0):
        self._queue: queue.Queue = queue.Queue(maxsize)

    def put(self, record: RawLogRecord):
        self._queue.put(record)

    def close(self):
        self._queue.put(self._CLOSED)

    def __iter__(self) -> Iterator[RawLogRecord]:
        while True:
            item = self._queue.get()
            if item is self._CLOSED:
                return
            yield item
