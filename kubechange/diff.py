"""Field-level differences between two versions of a Kubernetes object."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from kubechange.rollback import ResourceID


@dataclass
class DetailedFieldChange:
    """One changed field; ``old_value`` is None when added, ``new_value`` when removed."""

    path: list[str]
    old_value: Any = None
    new_value: Any = None


@dataclass
class DetailedResourceDiff:
    """Every field change between two states of one resource."""

    resource_id: ResourceID = field(default_factory=ResourceID)
    before: dict[str, Any] | None = None
    after: dict[str, Any] | None = None
    changes: list[DetailedFieldChange] = field(default_factory=list)


def _resource_id(obj: dict[str, Any]) -> ResourceID:
    metadata = obj.get("metadata")
    if not isinstance(metadata, dict):
        metadata = {}

    def text(value: Any) -> str:
        return value if isinstance(value, str) else ""

    return ResourceID(
        name=text(metadata.get("name")),
        kind=text(obj.get("kind")),
        namespace=text(metadata.get("namespace")),
        api_version=text(obj.get("apiVersion")),
    )


def calculate_diff(
    before: dict[str, Any] | None, after: dict[str, Any] | None
) -> DetailedResourceDiff:
    """Compare two objects; a missing side is treated as an empty object."""
    if before is None and after is None:
        return DetailedResourceDiff()

    resource_id = _resource_id(before if before is not None else after)
    before = {} if before is None else before
    after = {} if after is None else after

    return DetailedResourceDiff(
        resource_id=resource_id,
        before=before,
        after=after,
        changes=list(_compare(None, before, after)),
    )


def _deep_equal(a: Any, b: Any) -> bool:
    if type(a) is not type(b):
        return False
    if isinstance(a, dict):
        return a.keys() == b.keys() and all(_deep_equal(a[k], b[k]) for k in a)
    if isinstance(a, list):
        return len(a) == len(b) and all(_deep_equal(x, y) for x, y in zip(a, b))
    return a == b


def _compare(prefix: str | None, old: Any, new: Any):
    prefix = prefix or ""

    if isinstance(old, dict) and isinstance(new, dict):
        keys = list(old) + [k for k in new if k not in old]
        for key in keys:
            path = f"{prefix}.{key}" if prefix else key
            if key not in old:
                yield DetailedFieldChange(parse_path(path), None, new[key])
            elif key not in new:
                yield DetailedFieldChange(parse_path(path), old[key], None)
            else:
                yield from _compare(path, old[key], new[key])
        return

    if isinstance(old, list) and isinstance(new, list) and len(old) == len(new):
        for index, (old_item, new_item) in enumerate(zip(old, new)):
            yield from _compare(f"{prefix}[{index}]", old_item, new_item)
        return

    if not _deep_equal(old, new):
        yield DetailedFieldChange(parse_path(prefix), old, new)


def parse_path(path: str) -> list[str]:
    """Split a dotted path into its non-empty components."""
    return [part for part in path.split(".") if part]