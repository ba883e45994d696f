"""Event exporters: CSV rows and NDJSON lines."""

import csv
import json
from typing import Iterable, TextIO

from smblogparser.models import LogEvent, event_to_dict

CSV_COLUMNS = ("user", "device", "timestamp", "file_path", "action")


def events_to_csv(events: Iterable[LogEvent], stream: TextIO) -> int:
    """Write one CSV row per event with a header. Returns rows written."""
    writer = csv.writer(stream)
    writer.writerow(CSV_COLUMNS)
    rows = 0
    for event in events:
        writer.writerow([
            event.user,
            event.device,
            event.timestamp.isoformat(sep=" ") if event.timestamp else "",
            event.file_path,
            event.action.value,
        ])
        rows += 1
    return rows


def format_json(event: LogEvent) -> str:
    """One event as a single JSON line."""
    return json.dumps(event_to_dict(event))
