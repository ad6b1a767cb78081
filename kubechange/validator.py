"""Parsed user intents and their validation before planning."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class Action(str, Enum):
    """Type of Kubernetes operation a change performs."""

    CREATE = "CREATE"
    UPDATE = "UPDATE"
    DELETE = "DELETE"
    INSPECT = "INSPECT"

    def __str__(self) -> str:
        return self.value


class RiskLevel(str, Enum):
    """Risk associated with an operation."""

    LOW = "LOW"
    MEDIUM = "MEDIUM"
    HIGH = "HIGH"
    CRITICAL = "CRITICAL"

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class ResourceTarget:
    """Identifies the Kubernetes resource an operation works on."""

    name: str = ""
    kind: str = ""
    namespace: str = ""
    api_version: str = ""


@dataclass
class ParsedIntent:
    """A user's request turned into a structured operation."""

    action: Action | str
    target: ResourceTarget = field(default_factory=ResourceTarget)
    params: dict[str, Any] = field(default_factory=dict)
    risk_level: RiskLevel | None = None
    reason: str = ""


@dataclass
class ClarifyQuestion:
    """A question put to the user when an intent is incomplete."""

    field: str
    question: str
    options: list[str] = field(default_factory=list)
    required: bool = False


_NAMESPACED_KINDS = frozenset(
    {
        "Deployment",
        "Service",
        "ConfigMap",
        "Secret",
        "Pod",
        "ReplicaSet",
        "StatefulSet",
        "DaemonSet",
        "Job",
        "CronJob",
        "Ingress",
        "ServiceAccount",
        "Role",
        "RoleBinding",
        "PersistentVolumeClaim",
        "Endpoints",
        "LimitRange",
        "ResourceQuota",
        "HorizontalPodAutoscaler",
    }
)

_VALID_ACTIONS = frozenset(Action)

_DEFAULT_RISK = {
    Action.CREATE: RiskLevel.LOW,
    Action.UPDATE: RiskLevel.MEDIUM,
    Action.DELETE: RiskLevel.HIGH,
    Action.INSPECT: RiskLevel.LOW,
}


def validate_intent(intent: ParsedIntent | None) -> ClarifyQuestion | None:
    """Return a question for the first problem found, or None if the intent is ready.

    Checks run in order: action, target kind, target name, namespace, reason.
    """
    if intent is None:
        return ClarifyQuestion("intent", "intent is required", required=True)

    if intent.action not in _VALID_ACTIONS:
        return ClarifyQuestion(
            "action",
            f"invalid action type: {intent.action}, "
            "valid values are: CREATE, UPDATE, DELETE, INSPECT",
            required=True,
        )

    target = intent.target
    if not target.kind:
        return ClarifyQuestion(
            "target.kind",
            "what is the resource kind? (e.g., Deployment, Service, Pod)",
            required=True,
        )

    if intent.action != Action.CREATE and not target.name:
        return ClarifyQuestion("target.name", "what is the resource name?", required=True)

    if is_namespaced_kind(target.kind) and not target.namespace:
        return ClarifyQuestion("target.namespace", "which namespace?", required=True)

    if intent.risk_level in (RiskLevel.HIGH, RiskLevel.CRITICAL) and not intent.reason:
        return ClarifyQuestion(
            "reason",
            "what is the reason for this operation? "
            "(high-risk operations require justification)",
            required=True,
        )

    return None


def default_risk_level(intent: ParsedIntent | None) -> RiskLevel:
    """Return the default risk for the intent's action; LOW when unknown."""
    if intent is None:
        return RiskLevel.LOW
    try:
        return _DEFAULT_RISK[Action(intent.action)]
    except ValueError:
        return RiskLevel.LOW


def is_namespaced_kind(kind: str) -> bool:
    """True if resources of ``kind`` live inside a namespace."""
    return kind in _NAMESPACED_KINDS