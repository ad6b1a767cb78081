# kubechange

`kubechange` is a library that takes a Kubernetes change through a fixed workflow.
A change is parsed, clarified where needed, planned, reviewed and executed. It ends
as completed or failed. The state transitions, the execution phases and the
rollbacks are all written to an in-memory audit log.

The package uses only the standard library.

## Installation

From a checkout of the project:

```
pip install .
```

To run the tests:

```
pip install ".[test]"
pytest
```

## Modules

### `kubechange.state`

- `State` is an `IntEnum` with the members `PARSING`, `CLARIFYING`, `PLANNING`, `REVIEWING`, `EXECUTING`, `COMPLETED` and `FAILED`. `str()` of a member gives its name, and `is_terminal` is true for `COMPLETED` and `FAILED`.
- `SessionSignal` is an `IntEnum` with the members `CONFIRM`, `ABORT`, `MODIFY` and `PROCEED`. `str()` of a member gives `"Confirm"`, `"Abort"` and so on.
- `transition(current_state, signal)` returns the next state. When the signal is not allowed in that state, it raises `TransitionError`, which carries `from_state`, `signal` and `message`. The terminal states accept no signal at all.

| From         | CONFIRM    | MODIFY     | ABORT  |
|--------------|------------|------------|--------|
| PARSING      | PLANNING   | CLARIFYING | FAILED |
| CLARIFYING   | PARSING    | CLARIFYING | FAILED |
| PLANNING     | REVIEWING  | PLANNING   | FAILED |
| REVIEWING    | EXECUTING  | PLANNING   | FAILED |
| EXECUTING    | COMPLETED  | (error)    | FAILED |

No state accepts `PROCEED`.

### `kubechange.session`

- `ChangeSession(id, state=State.PARSING)` holds the state of one change.
- `ChangeSession.transition(signal)` applies the signal and returns the new state. It writes a `state_transition` audit entry whose details hold `from_state`, `to_state` and `signal`. When the transition is rejected, the state stays as it was.
- `ChangeManager` keeps sessions in memory:
  - `create_session()` returns a new UUID.
  - `get_session(session_id)` returns the session with that ID.
  - `signal_session(session_id, signal)` sends a signal to a session and returns its new state.
  - `close_session(session_id)` removes the session.
  - An unknown ID raises `SessionNotFoundError`.

### `kubechange.validator`

- The enums are `Action` (`CREATE`, `UPDATE`, `DELETE`, `INSPECT`) and `RiskLevel` (`LOW`, `MEDIUM`, `HIGH`, `CRITICAL`).
- The dataclasses are `ResourceTarget`, `ParsedIntent` and `ClarifyQuestion`.
- `validate_intent(intent)` returns `None` when the intent is ready for planning. Otherwise it returns the first `ClarifyQuestion` that applies. The checks run in this order:
  - a valid action;
  - the target kind;
  - the target name, which is not needed for `CREATE`;
  - the namespace, for namespaced kinds;
  - a reason, for `HIGH` and `CRITICAL` risk.
- `default_risk_level(intent)` gives `LOW` for `CREATE` and `INSPECT`, `MEDIUM` for `UPDATE` and `HIGH` for `DELETE`. It gives `LOW` for anything else.
- `is_namespaced_kind(kind)` reports whether a kind is one of the namespaced kinds that the module knows.

### `kubechange.planner`

- `generate_plan(intent)` returns a `ChangePlan` built from the intent. The plan holds:
  - its ordered `ChangeStep`s;
  - the names of its pre-checks;
  - a rollback plan: `CREATE` is undone by a delete and `UPDATE` by a revert, and `DELETE` and `INSPECT` have none;
  - a summary;
  - an impact text;
  - an estimated `duration` as a `timedelta`.
- `assess_risk_level(intent)` returns the intent's own `risk_level` if it has one. Otherwise it starts from the risk for the action and raises it one level for critical kinds such as `Node`, `PersistentVolume` or `Namespace`. For kinds that are not namespaced it raises the risk again, up to `HIGH`, unless the action is `INSPECT`.
- `calculate_resource_diff(current, desired)` compares the top-level keys of two dicts. It returns a `ResourceDiff` with `has_changes`, `changed_fields`, `old_values` and `new_values`.

### `kubechange.diff`

- `calculate_diff(before, after)` compares two resource documents, given as plain dicts, field by field. It returns a `DetailedResourceDiff` that holds a `ResourceID`, taken from `metadata`, `kind` and `apiVersion`, and a list of `DetailedFieldChange`s.
  - When a field is added, its `old_value` is `None`. When a field is removed, its `new_value` is `None`.
  - Lists of equal length are compared item by item. Any other list change is reported as a single change.
  - A missing side is treated as an empty document.
- `parse_path(path)` splits a dotted path into its non-empty components. For example, `"spec.containers[0].image"` becomes `["spec", "containers[0]", "image"]`.

### `kubechange.rollback`

This module is an in-memory snapshot store, indexed by session and by `ResourceID`.

- Saving and looking up snapshots:
  - `create_snapshot(session_id, resource, obj)` stores a deep copy of `obj`. If `obj` is `None`, it raises `NilObjectError`.
  - `get_snapshot(snapshot_id)` returns that snapshot.
  - `get_snapshots_for_session(session_id)` returns the session's snapshots, oldest first.
  - `get_latest_snapshot(resource)` returns the most recent snapshot of the resource.
  - `get_snapshots_for_resource(resource)` returns the resource's snapshots, newest first.
- Getting a saved object back:
  - `rollback(session_id, resource)` returns a copy of the latest object saved for the resource within that session.
  - `rollback_to_snapshot(snapshot_id)` returns a copy of the object in a given snapshot.
  - Both functions write audit entries.
- Managing the store: `delete_snapshots_for_session`, `snapshot_count` and `clear_snapshots`.
- Errors: `SnapshotNotFoundError` and `NoSnapshotForResourceError`. Both derive from `SnapshotError` and `LookupError`.

### `kubechange.executor`

- `CheckResult` and `PreCheck(name, run, critical=False)` describe the checks that run before a plan.
- `default_pre_checks()` returns four checks: `resource_exists`, `sufficient_quota`, `no_conflicting_name` and `backup_snapshot`. These checks always pass.
- `run_pre_checks(session, plan, pre_checks=None)` runs the checks in order and returns their results. It raises `PreCheckFailedError` at the first critical check that fails. A failed non-critical check does not stop the run.
- `execute_step(session, plan, step)` writes `step_start` and then either `step_completed` or `step_failed` to the audit log. It raises `StepFailedError` for an unknown action.
- `execute(session, plan, pre_checks=None)` runs the pre-checks and then every step. Its progress goes to the audit log as `execute_start`, `execute_prechecks_passed` and `execute_completed`, or as `execute_precheck_failed` or `execute_steps_failed`.

### `kubechange.audit`

- `log(session_id, action, actor, details)` appends an `AuditEntry` with a UTC timestamp and returns it.
- `get_audit_log(session_id)` returns a copy of the session's entries, oldest first.
- `clear_audit_log(session_id)` forgets the session's entries.

The log is safe to write from several threads.

### `kubechange.ipc`

This module defines the messages that pass between a user interface and an agent: `Input`, `Output` and the `OutputType` enum.

## Example

```python
from kubechange.session import ChangeSession
from kubechange.state import SessionSignal, State
from kubechange.validator import Action, ParsedIntent, ResourceTarget, RiskLevel, validate_intent
from kubechange.planner import generate_plan
from kubechange.executor import execute
from kubechange.rollback import ResourceID, create_snapshot, rollback
from kubechange.audit import get_audit_log

intent = ParsedIntent(
    action=Action.UPDATE,
    target=ResourceTarget(name="web", kind="Deployment", namespace="default"),
    risk_level=RiskLevel.MEDIUM,
)
assert validate_intent(intent) is None

session = ChangeSession("session-1")
session.transition(SessionSignal.CONFIRM)   # PARSING -> PLANNING
plan = generate_plan(intent)
session.transition(SessionSignal.CONFIRM)   # PLANNING -> REVIEWING
session.transition(SessionSignal.CONFIRM)   # REVIEWING -> EXECUTING

resource = ResourceID(name="web", kind="Deployment", namespace="default", api_version="apps/v1")
create_snapshot(session.id, resource, {"spec": {"replicas": 3}})

execute(session, plan)
session.transition(SessionSignal.CONFIRM)   # EXECUTING -> COMPLETED
assert session.state is State.COMPLETED

assert rollback(session.id, resource) == {"spec": {"replicas": 3}}

for entry in get_audit_log(session.id):
    print(entry.timestamp, entry.actor, entry.action, entry.details)
```

## What it does not do

- It never talks to a Kubernetes cluster. An executed step only checks that its action is known and records the outcome. The default pre-checks pass without looking at anything. To act on a real cluster, call your own code around `execute_step`, or supply your own `PreCheck`s.
- It does not turn free text into a `ParsedIntent`. The caller builds the intent.
- Sessions, snapshots and the audit log exist only in memory and are lost when the process ends.
- It has no command-line program, server or user interface. `kubechange.ipc` defines message types only.