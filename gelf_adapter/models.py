"""Record and message dataclasses shared by the pipeline stages."""

import json
from dataclasses import dataclass, field
from datetime import datetime

STDOUT = "stdout"
STDERR = "stderr"

GELF_VERSION = "1.1"


@dataclass(frozen=True)
class SourceIdentity:
    """Metadata of the container or process that emitted a line."""

    id: str
    name: str
    image: str = ""
    config_image: str = ""
    cmd: tuple[str, ...] = ()
    created: datetime | None = None
    node_name: str | None = None
    labels: dict[str, str] = field(default_factory=dict)


@dataclass(frozen=True)
class RawLogRecord:
    data: str
    source: str
    time: datetime
    container: SourceIdentity


@dataclass(frozen=True)
class ParsedLine:
    raw: str
    matched: bool

    timestamp: str = ""
    facility: str = ""
    level: str = ""
    message: str = ""
    context: str = ""
    extra: str = ""


@dataclass(frozen=True)
class GelfMessage:
    host: str
    short_message: str
    level: int
    facility: str = ""
    extra: str = "{}"
    timestamp: float | None = None
    version: str = GELF_VERSION

    def envelope(self) -> dict:
        """Standard GELF fields, without the additional `_` fields."""
        payload = {
            "version": self.version,
            "host": self.host,
            "short_message": self.short_message,
        }
        if self.timestamp is not None:
            payload["timestamp"] = self.timestamp
        payload["level"] = self.level
        payload["facility"] = self.facility
        return payload

    def to_bytes(self) -> bytes:
        """Serialize to the GELF JSON payload, splicing extras in at top level."""
        body = json.dumps(self.envelope(), separators=(",", ":"))
        extra = self.extra.strip()
        if extra not in ("", "{}"):
            body = body[:-1] + "," + extra[1:]
        return body.encode("utf-8")
