"""Reconciliation state and result types."""

from dataclasses import dataclass, field
from enum import Enum


class ReconcileState(str, Enum):
    PENDING = "PENDING"
    CREATING = "CREATING"
    CONFLICT = "CONFLICT"
    UPDATING = "UPDATING"
    READY = "READY"
    RECONCILING = "RECONCILING"
    FAILED = "FAILED"


# Allowed transitions. CREATING → CONFLICT → UPDATING is the name-collision branch.
TRANSITIONS = {
    ReconcileState.PENDING: {ReconcileState.CREATING},
    ReconcileState.CREATING: {
        ReconcileState.READY,
        ReconcileState.RECONCILING,
        ReconcileState.FAILED,
        ReconcileState.CONFLICT,
    },
    ReconcileState.CONFLICT: {ReconcileState.UPDATING},
    ReconcileState.UPDATING: {ReconcileState.READY, ReconcileState.RECONCILING, ReconcileState.FAILED},
    ReconcileState.READY: set(),
    ReconcileState.RECONCILING: set(),
    ReconcileState.FAILED: set(),
}


@dataclass
class Reconciliation:
    """Per-call record of the states a deploy has passed through."""

    state: ReconcileState = ReconcileState.PENDING
    history: list[ReconcileState] = field(default_factory=lambda: [ReconcileState.PENDING])

    def advance(self, state: ReconcileState) -> None:
        if state not in TRANSITIONS[self.state]:
            raise RuntimeError(f"Illegal reconcile transition {self.state.value} -> {state.value}")
        self.state = state
        self.history.append(state)

    @property
    def updated(self) -> bool:
        """True if the collision branch was taken."""
        return ReconcileState.UPDATING in self.history


@dataclass
class DeployResult:
    """Outcome of a successful reconciliation. The control plane stays authoritative."""

    status: str
    service_url: str
    reconciling: bool
    service_name: str
    region: str
    latest_ready_revision: str | None = None
    action: str = "create"

    def to_dict(self) -> dict:
        """Response body for the route boundary."""
        return {
            "status": self.status,
            "serviceUrl": self.service_url,
            "reconciling": self.reconciling,
            "serviceName": self.service_name,
            "region": self.region,
            "latestReadyRevision": self.latest_ready_revision,
        }

    @classmethod
    def from_dict(cls, d: dict) -> "DeployResult":
        reconciling = bool(d.get("reconciling", False))
        return cls(
            status=d.get("status") or ("RECONCILING" if reconciling else "READY"),
            service_url=d.get("serviceUrl") or "",
            reconciling=reconciling,
            service_name=d.get("serviceName") or "",
            region=d.get("region") or "",
            latest_ready_revision=d.get("latestReadyRevision"),
        )
