"""Map application level names to syslog severities."""

from gelf_adapter.models import STDERR

LOG_EMERG = 0
LOG_ALERT = 1
LOG_CRIT = 2
LOG_ERR = 3
LOG_WARNING = 4
LOG_NOTICE = 5
LOG_INFO = 6
LOG_DEBUG = 7

# Exact, case-sensitive keys: "info" falls through to the default.
_LEVEL_SEVERITIES: dict[str, int] = {
    "DEBUG": LOG_DEBUG,
    "INFO": LOG_INFO,
    "NOTICE": LOG_NOTICE,
    "WARNING": LOG_WARNING,
    "ERROR": LOG_ERR,
    "CRITICAL": LOG_CRIT,
    "ALERT": LOG_ALERT,
    "EMERGENCY": LOG_EMERG,
}


def severity_for(level: str, source: str) -> int:
    """Return the severity for *level*, defaulting on the source stream.

    Unknown or empty levels resolve to LOG_INFO, or LOG_ERR for stderr lines.
    """
    severity = _LEVEL_SEVERITIES.get(level)
    if severity is not None:
        return severity
    return LOG_ERR if source == STDERR else LOG_INFO
