"""Change sessions, planning, validation, diffing, snapshots and audit logging for Kubernetes changes."""

__version__ = "0.1.0"