"""Assemble GELF messages from raw records."""

from datetime import datetime, timedelta, timezone
from typing import Any, Mapping

from gelf_adapter.extras import decode_json_object, encode_extras, merge_extras
from gelf_adapter.models import GelfMessage, ParsedLine, RawLogRecord
from gelf_adapter.parser import parse_line
from gelf_adapter.severity import severity_for

_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)
_ONE_MS = timedelta(milliseconds=1)


def unix_millis_timestamp(moment: datetime) -> float:
    """Seconds since the epoch, truncated to millisecond resolution.

    Naive datetimes are taken to be UTC.
    """
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    millis = (moment - _EPOCH) // _ONE_MS
    return millis / 1000


def assemble_message(
    record: RawLogRecord,
    parsed: ParsedLine,
    extras_json: str,
    host: str,
    send_timestamp: bool,
) -> GelfMessage:
    return GelfMessage(
        host=host,
        short_message=parsed.message or record.data,
        level=severity_for(parsed.level, record.source),
        facility=parsed.facility,
        extra=extras_json,
        timestamp=unix_millis_timestamp(record.time) if send_timestamp else None,
    )


def build_message(
    record: RawLogRecord,
    env_extra: Mapping[str, Any],
    host: str,
    send_timestamp: bool = False,
) -> GelfMessage:
    """Run one record through parsing, severity mapping, merging and assembly.

    Raises ExtrasSerializationError if the merged extras cannot be encoded.
    """
    parsed = parse_line(record.data)
    extras = merge_extras(
        record.container,
        decode_json_object(parsed.context),
        decode_json_object(parsed.extra),
        env_extra,
        record.container.labels,
    )
    return assemble_message(record, parsed, encode_extras(extras), host, send_timestamp)
