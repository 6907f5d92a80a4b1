"""Build the additional-field map of a GELF message.

The map is assembled from five layers, each one overwriting keys set by the
ones before it:

  1. source identity (container id, name, image, command, ...)
  2. the context JSON object recovered from the line
  3. the extra JSON object recovered from the line
  4. the EXTRA_JSON object from the environment
  5. ``gelf_*`` labels on the source
"""

from __future__ import annotations

import json
from datetime import datetime, timezone
from typing import Any, Callable, Mapping

from gelf_adapter.models import SourceIdentity

LABEL_PREFIX = "gelf_"

_ZERO_TIME = datetime.min.replace(tzinfo=timezone.utc)


class ExtrasSerializationError(Exception):
    """Raised when the merged extras map cannot be encoded as JSON."""


# ---------------------------------------------------------------------------
# JSON helpers
# ---------------------------------------------------------------------------


def _reject_constant(name: str) -> float:
    raise ValueError(f"non-finite number {name} is not valid JSON")


def decode_json_object(text: str) -> dict[str, Any]:
    """Decode *text* as a JSON object, returning {} for anything else.

    Malformed input, ``[]`` and other non-object values, and NaN/Infinity
    literals all yield an empty dict.
    """
    if not text:
        return {}
    try:
        value = json.loads(text, parse_constant=_reject_constant)
    except (ValueError, TypeError, RecursionError):
        return {}
    if not isinstance(value, dict):
        return {}
    return value


def encode_extras(extras: Mapping[str, Any]) -> str:
    """Encode the merged map as compact JSON."""
    try:
        return json.dumps(extras, separators=(",", ":"), allow_nan=False)
    except (TypeError, ValueError, RecursionError) as exc:
        raise ExtrasSerializationError(f"cannot encode extra fields: {exc}") from exc


def _format_time(value: datetime | None) -> str:
    """RFC 3339 text, with a Z suffix for UTC."""
    text = (value or _ZERO_TIME).isoformat()
    if text.endswith("+00:00"):
        text = text[:-6] + "Z"
    return text


# ---------------------------------------------------------------------------
# Layers
# ---------------------------------------------------------------------------


def identity_fields(identity: SourceIdentity) -> dict[str, Any]:
    name = identity.name
    if name.startswith("/"):
        name = name[1:]

    fields: dict[str, Any] = {
        "_container_id": identity.id,
        "_container_name": name,
        "_image_id": identity.image,
        "_image_name": identity.config_image,
        "_command": " ".join(identity.cmd),
        "_created": _format_time(identity.created),
    }
    if identity.node_name is not None:
        fields["_swarm_node"] = identity.node_name
    return fields


def underscore_fields(values: Mapping[str, Any]) -> dict[str, Any]:
    return {"_" + key: value for key, value in values.items()}


def label_fields(labels: Mapping[str, str]) -> dict[str, Any]:
    """Pick ``gelf_*`` labels, keyed by the label name minus its first 4 chars.

    ``GELF_team`` becomes ``_team``: only ``gelf`` is dropped and the
    underscore stays.
    """
    fields: dict[str, Any] = {}
    for name, value in labels.items():
        if len(name) > len(LABEL_PREFIX) and name[:len(LABEL_PREFIX)].lower() == LABEL_PREFIX:
            fields[name[4:]] = value
    return fields


def merge_extras(
    identity: SourceIdentity,
    context: Mapping[str, Any],
    extra: Mapping[str, Any],
    env_extra: Mapping[str, Any],
    labels: Mapping[str, str],
) -> dict[str, Any]:
    """Merge all layers into a new dict; later layers win on key collisions."""
    layers: list[tuple[Callable[..., dict[str, Any]], Any]] = [
        (identity_fields, identity),
        (underscore_fields, context),
        (underscore_fields, extra),
        (underscore_fields, env_extra),
        (label_fields, labels),
    ]

    merged: dict[str, Any] = {}
    for build_layer, source in layers:
        merged.update(build_layer(source))
    return merged
