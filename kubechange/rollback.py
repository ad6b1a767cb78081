"""In-memory resource snapshots and rollback to earlier resource states."""

from __future__ import annotations

import copy
import threading
import uuid
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any

from kubechange.audit import log


@dataclass(frozen=True)
class ResourceID:
    """Identity of a Kubernetes resource for snapshot and rollback purposes."""

    name: str = ""
    kind: str = ""
    namespace: str = ""
    api_version: str = ""

    def __str__(self) -> str:
        if self.namespace:
            return f"{self.namespace}/{self.kind}/{self.name}.{self.api_version}"
        return f"{self.kind}/{self.name}.{self.api_version}"


def _rfc3339(moment: datetime) -> str:
    text = moment.isoformat(timespec="seconds")
    if text.endswith("+00:00"):
        text = text[: -len("+00:00")] + "Z"
    return text


@dataclass
class Snapshot:
    """A point-in-time copy of a resource, taken so a change can be undone."""

    id: str
    session_id: str
    resource_id: ResourceID
    object: dict[str, Any] | None
    created_at: datetime

    def __str__(self) -> str:
        return (
            f"Snapshot{{id={self.id}, sessionID={self.session_id}, "
            f"resource={self.resource_id}, createdAt={_rfc3339(self.created_at)}}}"
        )


class SnapshotError(Exception):
    """Base class for snapshot and rollback failures."""


class SnapshotNotFoundError(SnapshotError, LookupError):
    """Raised when a snapshot ID does not exist."""

    def __init__(self, message: str = "snapshot not found") -> None:
        super().__init__(message)


class NoSnapshotForResourceError(SnapshotError, LookupError):
    """Raised when no snapshot exists for a resource."""

    def __init__(self, message: str = "no snapshot found for resource") -> None:
        super().__init__(message)


class NilObjectError(SnapshotError, ValueError):
    """Raised when asked to snapshot a missing object."""

    def __init__(self, message: str = "cannot create snapshot of nil object") -> None:
        super().__init__(message)


class _SnapshotStore:
    def __init__(self) -> None:
        self.lock = threading.RLock()
        self.by_session: dict[str, list[Snapshot]] = {}
        self.by_resource: dict[ResourceID, list[Snapshot]] = {}

    def clear(self) -> None:
        with self.lock:
            self.by_session = {}
            self.by_resource = {}

    def all_snapshots(self):
        for session_id, snapshots in self.by_session.items():
            for snapshot in snapshots:
                yield session_id, snapshot


_store = _SnapshotStore()


def _latest(snapshots: list[Snapshot]) -> Snapshot | None:
    latest: Snapshot | None = None
    for snapshot in snapshots:
        if latest is None or snapshot.created_at > latest.created_at:
            latest = snapshot
    return latest


def create_snapshot(
    session_id: str, resource: ResourceID, obj: dict[str, Any] | None
) -> Snapshot:
    """Store a deep copy of ``obj`` as a new snapshot for ``session_id``."""
    if obj is None:
        raise NilObjectError()

    snapshot = Snapshot(
        id=str(uuid.uuid4()),
        session_id=session_id,
        resource_id=resource,
        object=copy.deepcopy(obj),
        created_at=datetime.now(timezone.utc),
    )
    with _store.lock:
        _store.by_session.setdefault(session_id, []).append(snapshot)
        _store.by_resource.setdefault(resource, []).append(snapshot)
    return snapshot


def get_snapshot(snapshot_id: str) -> Snapshot:
    """Return the snapshot with ``snapshot_id``."""
    with _store.lock:
        for _, snapshot in _store.all_snapshots():
            if snapshot.id == snapshot_id:
                return snapshot
    raise SnapshotNotFoundError()


def get_snapshots_for_session(session_id: str) -> list[Snapshot]:
    """Return the snapshots taken in a session, oldest first; empty if none."""
    with _store.lock:
        return list(_store.by_session.get(session_id, ()))


def get_latest_snapshot(resource: ResourceID) -> Snapshot:
    """Return the most recent snapshot of ``resource`` across all sessions."""
    with _store.lock:
        latest = _latest(_store.by_resource.get(resource, []))
    if latest is None:
        raise NoSnapshotForResourceError()
    return latest


def get_snapshots_for_resource(resource: ResourceID) -> list[Snapshot]:
    """Return every snapshot of ``resource``, newest first."""
    with _store.lock:
        snapshots = list(_store.by_resource.get(resource, ()))
    return sorted(snapshots, key=lambda s: s.created_at, reverse=True)


def rollback(session_id: str, resource: ResourceID) -> dict[str, Any]:
    """Return a copy of the latest state of ``resource`` captured in ``session_id``."""
    log(session_id, "rollback", "rollback", {"resource": str(resource)})

    with _store.lock:
        snapshots = _store.by_session.get(session_id)
        if snapshots is None:
            log(
                session_id,
                "rollback_failed",
                "rollback",
                {"resource": str(resource), "error": "no snapshots for session"},
            )
            raise NoSnapshotForResourceError()

        latest = _latest([s for s in snapshots if s.resource_id == resource])
        if latest is None:
            log(
                session_id,
                "rollback_failed",
                "rollback",
                {"resource": str(resource), "error": "no snapshot found for resource"},
            )
            raise NoSnapshotForResourceError()

        log(
            session_id,
            "rollback_completed",
            "rollback",
            {"resource": str(resource), "snapshot_id": latest.id},
        )
        return copy.deepcopy(latest.object)


def rollback_to_snapshot(snapshot_id: str) -> dict[str, Any]:
    """Return a copy of the state captured by the snapshot ``snapshot_id``."""
    with _store.lock:
        for session_id, snapshot in _store.all_snapshots():
            if snapshot.id == snapshot_id:
                log(
                    session_id,
                    "rollback_to_snapshot",
                    "rollback",
                    {"snapshot_id": snapshot_id, "resource": str(snapshot.resource_id)},
                )
                return copy.deepcopy(snapshot.object)

    log(
        "",
        "rollback_to_snapshot_failed",
        "rollback",
        {"snapshot_id": snapshot_id, "error": "snapshot not found"},
    )
    raise SnapshotNotFoundError()


def delete_snapshots_for_session(session_id: str) -> None:
    """Drop every snapshot taken in ``session_id``; unknown sessions are ignored."""
    with _store.lock:
        snapshots = _store.by_session.pop(session_id, None)
        if snapshots is None:
            return
        for resource in {s.resource_id for s in snapshots}:
            remaining = [
                s for s in _store.by_resource.get(resource, []) if s.session_id != session_id
            ]
            if remaining:
                _store.by_resource[resource] = remaining
            else:
                _store.by_resource.pop(resource, None)


def snapshot_count() -> int:
    """Total number of snapshots held."""
    with _store.lock:
        return sum(len(snapshots) for snapshots in _store.by_session.values())


def clear_snapshots() -> None:
    """Remove every snapshot from the store."""
    _store.clear()