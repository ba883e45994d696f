"""Per-(user, device) operation counters and parse statistics."""

import json
from collections import Counter
from dataclasses import asdict, dataclass, field
from typing import Iterable

from smblogparser.models import COUNTED_ACTIONS, LogEvent, UserMetrics, metrics_key


@dataclass
class ParseStats:
    records_total: int = 0
    events_recognized: int = 0
    records_skipped: int = 0
    events_counted: int = 0
    events_dropped: int = 0
    action_counts: dict[str, int] = field(default_factory=dict)


def aggregate(events: Iterable[LogEvent | None]) -> dict[str, UserMetrics]:
    """Fold events into counters keyed by 'user|device'.

    None, UNKNOWN and CLOSE events are skipped. The fold only adds, so the
    result does not depend on event order.
    """
    metrics: dict[str, UserMetrics] = {}

    for event in events:
        if event is None or event.action not in COUNTED_ACTIONS:
            continue
        key = metrics_key(event.user, event.device)
        entry = metrics.get(key)
        if entry is None:
            entry = UserMetrics(user=event.user, device=event.device)
            metrics[key] = entry
        entry.record(event.action)

    return metrics


def compute_stats(records_total: int, events: Iterable[LogEvent]) -> ParseStats:
    """Count recognized vs. skipped records and counted vs. dropped events."""
    action_counter = Counter()
    recognized = 0
    counted = 0

    for event in events:
        recognized += 1
        action_counter[event.action.value] += 1
        if event.action in COUNTED_ACTIONS:
            counted += 1

    return ParseStats(
        records_total=records_total,
        events_recognized=recognized,
        records_skipped=max(records_total - recognized, 0),
        events_counted=counted,
        events_dropped=recognized - counted,
        action_counts=dict(action_counter.most_common()),
    )


def format_stats_text(stats: ParseStats) -> str:
    """One-line human-readable summary for the log."""
    actions = ", ".join(f"{k}={v}" for k, v in stats.action_counts.items()) or "none"
    return (
        f"{stats.records_total} records, {stats.events_recognized} events "
        f"({stats.records_skipped} skipped), {stats.events_counted} counted, "
        f"{stats.events_dropped} dropped; actions: {actions}"
    )


def format_stats_json(stats: ParseStats) -> str:
    return json.dumps(asdict(stats), indent=2)
