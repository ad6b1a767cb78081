"""In-memory audit log of session state transitions and actions."""

from __future__ import annotations

import threading
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any


@dataclass(frozen=True)
class AuditEntry:
    """A single recorded action belonging to a change session."""

    session_id: str
    timestamp: datetime
    action: str
    actor: str
    details: dict[str, Any] | None = field(default=None)


_entries: dict[str, list[AuditEntry]] = {}
_lock = threading.Lock()


def log(
    session_id: str,
    action: str,
    actor: str,
    details: dict[str, Any] | None = None,
) -> AuditEntry:
    """Record an action for ``session_id`` with a UTC timestamp."""
    entry = AuditEntry(
        session_id=session_id,
        timestamp=datetime.now(timezone.utc),
        action=action,
        actor=actor,
        details=details,
    )
    with _lock:
        _entries.setdefault(session_id, []).append(entry)
    return entry


def get_audit_log(session_id: str) -> list[AuditEntry]:
    """Return a copy of the entries recorded for ``session_id``, oldest first."""
    with _lock:
        return list(_entries.get(session_id, ()))


def clear_audit_log(session_id: str) -> None:
    """Forget every entry recorded for ``session_id``."""
    with _lock:
        _entries.pop(session_id, None)