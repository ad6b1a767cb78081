"""Turning validated intents into step-by-step change plans."""

from __future__ import annotations

import time
from dataclasses import dataclass, field
from datetime import timedelta
from typing import Any

from kubechange.validator import (
    Action,
    ParsedIntent,
    ResourceTarget,
    RiskLevel,
    is_namespaced_kind,
)


@dataclass
class ChangeStep:
    """A single action on a target resource within a plan."""

    seq: int
    action: Action | str
    target: ResourceTarget = field(default_factory=ResourceTarget)
    risk_level: RiskLevel | None = None
    can_rollback: bool = False
    validate: str = ""
    description: str = ""


@dataclass
class ChangePlan:
    """Everything needed to carry out a change and undo it if necessary."""

    id: str
    summary: str = ""
    steps: list[ChangeStep] = field(default_factory=list)
    pre_check: list[str] = field(default_factory=list)
    rollback_plan: list[ChangeStep] = field(default_factory=list)
    risk_level: RiskLevel | None = None
    impact: str = ""
    duration: timedelta = field(default_factory=timedelta)


@dataclass
class ResourceDiff:
    """Top-level differences between a current and a desired resource state."""

    has_changes: bool = False
    changed_fields: list[str] = field(default_factory=list)
    old_values: dict[str, Any] = field(default_factory=dict)
    new_values: dict[str, Any] = field(default_factory=dict)


_IMPACT_TEMPLATES = {
    Action.CREATE: "Creates a new {} resource",
    Action.UPDATE: "Modifies existing {} resource",
    Action.DELETE: "Permanently removes {} resource",
    Action.INSPECT: "Reads {} resource information",
}

_DURATIONS = {
    Action.CREATE: timedelta(seconds=30),
    Action.UPDATE: timedelta(seconds=20),
    Action.DELETE: timedelta(seconds=15),
    Action.INSPECT: timedelta(seconds=5),
}
_DEFAULT_DURATION = timedelta(seconds=10)

_BASE_RISK = {
    Action.CREATE: RiskLevel.LOW,
    Action.UPDATE: RiskLevel.MEDIUM,
    Action.DELETE: RiskLevel.HIGH,
    Action.INSPECT: RiskLevel.LOW,
}

_CRITICAL_KINDS = frozenset(
    {
        "Node",
        "PersistentVolume",
        "ClusterRole",
        "ClusterRoleBinding",
        "Namespace",
        "StorageClass",
        "VolumeAttachment",
    }
)

_CRITICAL_KIND_ESCALATION = {
    RiskLevel.LOW: RiskLevel.MEDIUM,
    RiskLevel.MEDIUM: RiskLevel.HIGH,
    RiskLevel.HIGH: RiskLevel.CRITICAL,
}

_CLUSTER_SCOPE_ESCALATION = {
    RiskLevel.LOW: RiskLevel.MEDIUM,
    RiskLevel.MEDIUM: RiskLevel.HIGH,
}


def _as_action(action: Action | str) -> Action | None:
    try:
        return Action(action)
    except ValueError:
        return None


def generate_plan(intent: ParsedIntent) -> ChangePlan:
    """Build a complete plan (steps, pre-checks, rollback, summary) for ``intent``."""
    steps = _generate_steps(intent)
    return ChangePlan(
        id=f"plan-{time.time_ns()}",
        summary=_generate_summary(intent),
        steps=steps,
        pre_check=_generate_pre_checks(intent),
        rollback_plan=_generate_rollback_plan(intent),
        risk_level=intent.risk_level,
        impact=_assess_impact(intent),
        duration=_DURATIONS.get(_as_action(intent.action), _DEFAULT_DURATION),
    )


def _inspect(seq: int, target: ResourceTarget, validate: str, description: str) -> ChangeStep:
    return ChangeStep(
        seq=seq,
        action=Action.INSPECT,
        target=target,
        risk_level=RiskLevel.LOW,
        can_rollback=False,
        validate=validate,
        description=description,
    )


def _generate_steps(intent: ParsedIntent) -> list[ChangeStep]:
    target = intent.target
    action = _as_action(intent.action)

    if action is Action.CREATE:
        return [
            _inspect(1, target, "check-resource-not-exists",
                     "Check target resource does not already exist"),
            ChangeStep(2, Action.CREATE, target, intent.risk_level, True,
                       "validate-spec", "Create the resource with validated spec"),
        ]
    if action is Action.UPDATE:
        return [
            _inspect(1, target, "check-resource-exists", "Verify target resource exists"),
            _inspect(2, target, "capture-current-state",
                     "Capture current resource state for rollback"),
            ChangeStep(3, Action.UPDATE, target, intent.risk_level, True,
                       "validate-spec", "Apply updates to the resource"),
        ]
    if action is Action.DELETE:
        return [
            _inspect(1, target, "check-resource-exists", "Verify target resource exists"),
            _inspect(2, target, "capture-current-state",
                     "Capture current resource state for rollback"),
            ChangeStep(3, Action.DELETE, target, intent.risk_level, False,
                       "confirm-deletion", "Delete the resource"),
        ]
    if action is Action.INSPECT:
        return [
            _inspect(1, target, "check-resource-exists", "Verify target resource exists"),
            _inspect(2, target, "retrieve-resource", "Retrieve and display resource details"),
        ]
    return []


def _generate_pre_checks(intent: ParsedIntent) -> list[str]:
    checks = ["validate-kubernetes-connection", "check-permissions"]
    action = _as_action(intent.action)
    if action is Action.CREATE:
        checks.append("verify-namespace-exists")
    elif action is Action.UPDATE:
        checks += ["verify-resource-exists", "verify-lock-status"]
    elif action is Action.DELETE:
        checks += ["verify-resource-exists", "confirm-no-dependents"]
    return checks


def _generate_rollback_plan(intent: ParsedIntent) -> list[ChangeStep]:
    action = _as_action(intent.action)
    if action in (Action.INSPECT, Action.DELETE):
        return []
    if action is Action.CREATE:
        return [
            ChangeStep(1, Action.DELETE, intent.target, RiskLevel.MEDIUM, False,
                       "confirm-deletion", "Delete the created resource"),
        ]
    return [
        ChangeStep(1, Action.UPDATE, intent.target, RiskLevel.MEDIUM, False,
                   "revert-changes", "Revert to previous resource state"),
    ]


def _generate_summary(intent: ParsedIntent) -> str:
    target = intent.target
    description = f"{target.kind} {target.name}"
    if target.namespace:
        description += f" in namespace {target.namespace}"
    risk = "" if intent.risk_level is None else str(intent.risk_level)
    return f"{intent.action} {description} (Risk: {risk})"


def _assess_impact(intent: ParsedIntent) -> str:
    template = _IMPACT_TEMPLATES.get(_as_action(intent.action))
    if template is None:
        return "Unknown impact"
    return template.format(intent.target.kind)


def calculate_resource_diff(current: dict[str, Any], desired: dict[str, Any]) -> ResourceDiff:
    """Compare the top-level fields of ``current`` and ``desired``."""
    diff = ResourceDiff()

    for key, new_value in desired.items():
        exists = key in current
        if not exists or not _values_equal(current[key], new_value):
            diff.has_changes = True
            diff.changed_fields.append(key)
            if exists:
                diff.old_values[key] = current[key]
            diff.new_values[key] = new_value

    for key, old_value in current.items():
        if key not in desired:
            diff.has_changes = True
            diff.changed_fields.append(key)
            diff.old_values[key] = old_value

    return diff


def _values_equal(a: Any, b: Any) -> bool:
    """Equality limited to strings, ints, bools and nested dicts of them."""
    if isinstance(a, bool) or isinstance(b, bool):
        return type(a) is bool and type(b) is bool and a == b
    if isinstance(a, str):
        return isinstance(b, str) and a == b
    if isinstance(a, int):
        return isinstance(b, int) and a == b
    if isinstance(a, dict):
        return isinstance(b, dict) and _maps_equal(a, b)
    return False


def _maps_equal(a: dict[str, Any], b: dict[str, Any]) -> bool:
    if len(a) != len(b):
        return False
    return all(key in b and _values_equal(value, b[key]) for key, value in a.items())


def assess_risk_level(intent: ParsedIntent) -> RiskLevel | None:
    """Return the intent's explicit risk, or derive one from action and target kind.

    Critical kinds raise the risk one level; cluster-scoped kinds raise it again
    (up to HIGH) unless the action only inspects.
    """
    if intent.risk_level:
        return intent.risk_level

    action = _as_action(intent.action)
    risk = _BASE_RISK.get(action)
    kind = intent.target.kind

    if kind in _CRITICAL_KINDS and risk is not None:
        risk = _CRITICAL_KIND_ESCALATION.get(risk, risk)

    if not is_namespaced_kind(kind) and action is not Action.INSPECT and risk is not None:
        risk = _CLUSTER_SCOPE_ESCALATION.get(risk, risk)

    return risk