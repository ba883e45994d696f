"""Event and counter dataclasses shared by the parsers and the aggregator."""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any


class ActionKind(str, Enum):
    CREATE = "create"
    OPEN = "open"
    MODIFY = "modify"
    DELETE = "delete"
    CLOSE = "close"
    UNKNOWN = "unknown"


# Actions that have a counter in UserMetrics
COUNTED_ACTIONS = (
    ActionKind.CREATE,
    ActionKind.OPEN,
    ActionKind.MODIFY,
    ActionKind.DELETE,
)


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class LogEvent:
    user: str = ""
    device: str = ""
    file_path: str = ""
    action: ActionKind = ActionKind.UNKNOWN
    timestamp: datetime | None = None
    created_at: datetime = field(default_factory=_utc_now)
    source_format: str = ""  # "structured" or "audit"


@dataclass
class UserMetrics:
    user: str
    device: str
    create: int = 0
    open: int = 0
    modify: int = 0
    delete: int = 0

    def record(self, action: ActionKind) -> bool:
        """Bump the counter for *action*. Returns False for uncounted actions."""
        if action not in COUNTED_ACTIONS:
            return False
        name = action.value
        setattr(self, name, getattr(self, name) + 1)
        return True

    @property
    def total(self) -> int:
        return self.create + self.open + self.modify + self.delete


def metrics_key(user: str, device: str) -> str:
    """'alice', 'nas01' -> 'alice|nas01'. Empty users are valid keys."""
    return f"{user}|{device}"


def event_to_dict(event: LogEvent) -> dict[str, Any]:
    """Convert a LogEvent to a JSON-friendly dict."""
    return {
        "user": event.user,
        "device": event.device,
        "file_path": event.file_path,
        "action": event.action.value,
        "timestamp": event.timestamp.isoformat() if event.timestamp else None,
        "created_at": event.created_at.isoformat(),
        "source_format": event.source_format,
    }
