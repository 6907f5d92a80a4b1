"""Line grammar parser for the bracketed-timestamp application log convention.

Recognised lines look like::

    [2021-05-01T10:00:00.123456+00:00] web.INFO: boot complete {"user":"bob"} []

i.e. ``[timestamp] facility.level: message context extra`` where both trailing
tokens are mandatory and each is either a JSON object or ``[]``. A line that
does not match the whole grammar yields no structured parts at all.

The fixed-shape head is matched with a regex. The tail is split by a linear
scan that picks the same split as ``(.*)\\s(\\{.*?\\}|\\[\\])\\s(\\{.*?\\}|\\[\\])``
(longest message, then shortest context) without the backtracking that
pattern costs on long lines.
"""

import re
from enum import IntEnum

from gelf_adapter.models import ParsedLine

# ---------------------------------------------------------------------------
# Compiled grammar
# ---------------------------------------------------------------------------

_TIME_EXP = r"\d{4}-\d{2}-\d{2}T\d{2}:\d{2}:\d{2}(\.\d{6})?(\+|\-)(\d{4}|\d{2}:\d{2})"
_FACILITY_EXP = r"[\w\-]+"
_LEVEL_EXP = r"\w+"

_HEAD_RE = re.compile(
    rf"\[(?P<timestamp>{_TIME_EXP})\]\s"
    rf"(?P<facility>{_FACILITY_EXP})\.(?P<level>{_LEVEL_EXP}):\s",
    re.ASCII,
)

# ASCII \s
_SPACE = frozenset(" \t\n\r\f\v")


class LinePart(IntEnum):
    """Capture-group positions of the parts callers may ask for."""

    TIMESTAMP = 1
    FACILITY = 5
    LEVEL = 6
    MESSAGE = 7
    CONTEXT = 8
    EXTRA = 9


_PART_FIELDS = {
    LinePart.TIMESTAMP: "timestamp",
    LinePart.FACILITY: "facility",
    LinePart.LEVEL: "level",
    LinePart.MESSAGE: "message",
    LinePart.CONTEXT: "context",
    LinePart.EXTRA: "extra",
}


# ---------------------------------------------------------------------------
# Tail scanner
# ---------------------------------------------------------------------------


def _split_tail(tail: str) -> tuple[str, str, str] | None:
    """Split ``message SP context SP extra`` or return None.

    Neither part may contain a newline; separators are single whitespace
    characters.
    """
    n = len(tail)
    if n < 6 or not (tail.endswith("}") or tail.endswith("[]")):
        return None

    last_nl = tail.rfind("\n")

    def extra_starts_at(q: int) -> bool:
        if q >= n - 1:
            return False
        if tail[q] == "[":
            return q == n - 2 and tail[q + 1] == "]"
        return tail[q] == "{" and tail[-1] == "}" and q > last_nl

    # next_end[i]: smallest e >= i closing a brace context (tail[e-1] == "}"),
    # followed by a separator and a valid extra.
    next_end = [n] * (n + 1)
    for e in range(n - 1, 0, -1):
        good = tail[e - 1] == "}" and tail[e] in _SPACE and extra_starts_at(e + 1)
        next_end[e] = e if good else next_end[e + 1]

    # next_nl[i]: index of the first newline at or after i.
    next_nl = [n] * (n + 1)
    for i in range(n - 1, -1, -1):
        next_nl[i] = i if tail[i] == "\n" else next_nl[i + 1]

    first_nl = next_nl[0]
    for p in range(min(first_nl, n - 3), -1, -1):
        if tail[p] not in _SPACE:
            continue
        c = p + 1
        if tail[c] == "{":
            e = next_end[c + 2]
            if e < n and e <= next_nl[c]:
                return tail[:p], tail[c:e], tail[e + 1:]
        elif tail[c:c + 2] == "[]" and c + 2 < n and tail[c + 2] in _SPACE and extra_starts_at(c + 3):
            return tail[:p], "[]", tail[c + 3:]
    return None


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def parse_line(line: str) -> ParsedLine:
    """Match *line* against the full grammar.

    Returns a ParsedLine with matched=False and every part empty if the line
    does not follow the convention.
    """
    m = _HEAD_RE.match(line)
    if not m:
        return ParsedLine(raw=line, matched=False)
    parts = _split_tail(line[m.end():])
    if parts is None:
        return ParsedLine(raw=line, matched=False)
    message, context, extra = parts
    return ParsedLine(
        raw=line,
        matched=True,
        timestamp=m.group("timestamp"),
        facility=m.group("facility"),
        level=m.group("level"),
        message=message,
        context=context,
        extra=extra,
    )


def get_part(line: str, part: int) -> str:
    """Return one part of *line* by capture-group position.

    Positions outside LinePart and non-matching lines give "".
    """
    field = _PART_FIELDS.get(part)
    if field is None:
        return ""
    return getattr(parse_line(line), field)
