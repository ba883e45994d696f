"""Map raw operation indicators to ActionKind.

Structured records are matched against an ordered rule table, first match
wins. An "opened" record also carries "write=..." flags, so the open/create/
modify rules sit above the generic write and delete rules.
"""

import re
from typing import Callable

from smblogparser.models import ActionKind

_BARE_WRITE_RE = re.compile(r"\bwrite\b")

Rule = tuple[Callable[[str], bool], ActionKind]

STRUCTURED_RULES: list[Rule] = [
    (lambda t: "opened" in t and "read=Yes" in t and "write=Yes" in t, ActionKind.MODIFY),
    (lambda t: "opened" in t and "write=Yes" in t, ActionKind.CREATE),
    (lambda t: "opened" in t, ActionKind.OPEN),
    (lambda t: "pwrite" in t or _BARE_WRITE_RE.search(t) is not None, ActionKind.MODIFY),
    (lambda t: "unlink" in t or "rmdir" in t, ActionKind.DELETE),
    (lambda t: "closed" in t, ActionKind.CLOSE),
]

# smbd_audit operation token -> action (exact, case-sensitive)
AUDIT_ACTIONS: dict[str, ActionKind] = {
    "open": ActionKind.OPEN,
    "pwrite": ActionKind.MODIFY,
    "unlink": ActionKind.DELETE,
    "rmdir": ActionKind.DELETE,
    "mkdir": ActionKind.CREATE,
    "rename": ActionKind.MODIFY,
    "close": ActionKind.CLOSE,
}


def classify_structured(text: str, rules: list[Rule] = STRUCTURED_RULES) -> ActionKind:
    """Evaluate *rules* top to bottom against the full record text."""
    for predicate, action in rules:
        if predicate(text):
            return action
    return ActionKind.UNKNOWN


def classify_audit(operation: str) -> ActionKind:
    return AUDIT_ACTIONS.get(operation, ActionKind.UNKNOWN)
