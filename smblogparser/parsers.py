"""Regex-based parsers for the two Samba log formats.

Detection order:
  1. Contains 'smbd_audit:' -> audit line (vfs_full_audit, one line per event)
  2. '[YYYY/MM/DD HH:MM:SS' header plus an operation keyword -> structured
     two-line record (smbd debug log)
  3. Anything else is not an event
"""

import logging
import re
from datetime import datetime
from enum import Enum

from smblogparser.actions import classify_audit, classify_structured
from smblogparser.models import ActionKind, LogEvent
from smblogparser.reconstruct import AUDIT_MARKER

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Compiled regex patterns
# ---------------------------------------------------------------------------

_STRUCTURED_TS_RE = re.compile(
    r'^\[(?P<time>\d{4}/\d{2}/\d{2} \d{2}:\d{2}:\d{2})'
)

_STRUCTURED_USER_RE = re.compile(
    r'^[ \t]+(?P<user>\S+)[ \t]+(?:opened|closed)\b',
    re.MULTILINE,
)

_STRUCTURED_FILE_RE = re.compile(
    r'file (?P<path>.*?)(?: read=| \(numopen)'
)

_SYSLOG_PREFIX_RE = re.compile(
    r'^(?P<timestamp>[A-Z][a-z]{2}\s+\d{1,2}\s+\d{2}:\d{2}:\d{2})'
)

STRUCTURED_KEYWORDS = ("open_file", "close_normal_file", "pwrite", "unlink", "rmdir")

STRUCTURED_TIME_FORMAT = "%Y/%m/%d %H:%M:%S"

# user|client ip|client name|share|operation|result|path
AUDIT_MIN_FIELDS = 5
_AUDIT_USER = 0
_AUDIT_OPERATION = 4
_AUDIT_PATH = 6


class RecordFormat(str, Enum):
    STRUCTURED = "structured"
    AUDIT = "audit"


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _structured_time(time_str: str) -> datetime | None:
    """'2025/09/09 13:01:08' -> datetime, None if invalid."""
    try:
        return datetime.strptime(time_str, STRUCTURED_TIME_FORMAT)
    except ValueError:
        return None


def _syslog_time(time_str: str, now: datetime | None = None) -> datetime | None:
    """'Sep  9 13:01:08' -> datetime in the current local year."""
    year = (now or datetime.now()).year
    try:
        return datetime.strptime(f"{year} {time_str}", "%Y %b %d %H:%M:%S")
    except ValueError:
        return None


# ---------------------------------------------------------------------------
# Format detection
# ---------------------------------------------------------------------------


def classify_record(record: str) -> RecordFormat | None:
    """Decide which format *record* is in, or None if it is not an event."""
    if AUDIT_MARKER in record:
        return RecordFormat.AUDIT

    header = record.split("\n", 1)[0]
    if _STRUCTURED_TS_RE.match(header) and any(k in record for k in STRUCTURED_KEYWORDS):
        return RecordFormat.STRUCTURED

    return None


# ---------------------------------------------------------------------------
# Format-specific parsers
# ---------------------------------------------------------------------------


def parse_structured(record: str, device: str) -> LogEvent | None:
    """Parse a header + detail record. Returns None when no action applies."""
    action = classify_structured(record)
    if action == ActionKind.UNKNOWN:
        logger.debug("No action in structured record: %.100s", record)
        return None

    ts_match = _STRUCTURED_TS_RE.match(record)
    user_match = _STRUCTURED_USER_RE.search(record)
    # the path follows the verb; usernames such as 'profile' also end in "file"
    file_match = _STRUCTURED_FILE_RE.search(record, user_match.end() if user_match else 0)

    return LogEvent(
        user=user_match.group("user") if user_match else "",
        device=device,
        file_path=file_match.group("path") if file_match else "",
        action=action,
        timestamp=_structured_time(ts_match.group("time")) if ts_match else None,
        source_format=RecordFormat.STRUCTURED.value,
    )


def parse_audit(line: str, device: str, now: datetime | None = None) -> LogEvent:
    """Parse a vfs_full_audit line.

    Lines with fewer than five fields still produce an event; its action
    stays UNKNOWN and the aggregator drops it.
    """
    prefix, _, body = line.partition(AUDIT_MARKER)

    ts_match = _SYSLOG_PREFIX_RE.match(prefix.strip())
    timestamp = _syslog_time(ts_match.group("timestamp"), now) if ts_match else None

    fields = body.strip().split("|")
    event = LogEvent(
        user=fields[_AUDIT_USER].strip(),
        device=device,
        timestamp=timestamp,
        source_format=RecordFormat.AUDIT.value,
    )

    if len(fields) < AUDIT_MIN_FIELDS:
        logger.debug("Short audit line (%d fields): %.100s", len(fields), line)
        return event

    event.action = classify_audit(fields[_AUDIT_OPERATION].strip())
    if len(fields) > _AUDIT_PATH:
        event.file_path = fields[_AUDIT_PATH].strip()
    return event


# ---------------------------------------------------------------------------
# Entry points
# ---------------------------------------------------------------------------


def parse_record(record: str, device: str) -> LogEvent | None:
    """Parse one logical record into a LogEvent, or None if it is not an event."""
    fmt = classify_record(record)
    if fmt == RecordFormat.AUDIT:
        return parse_audit(record, device)
    if fmt == RecordFormat.STRUCTURED:
        return parse_structured(record, device)
    return None


def parse_records(records: list[str], device: str) -> list[LogEvent]:
    """Parse every record of one pass, keeping recognized events in order."""
    events = []
    for record in records:
        event = parse_record(record, device)
        if event is not None:
            events.append(event)
    return events
