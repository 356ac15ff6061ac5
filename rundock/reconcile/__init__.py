"""Reconciliation against the Cloud Run control plane."""

from rundock.reconcile.classify import classify_error, is_already_exists
from rundock.reconcile.reconciler import Reconciler, make_services_client
from rundock.reconcile.types import DeployResult, ReconcileState, Reconciliation

__all__ = [
    "DeployResult",
    "ReconcileState",
    "Reconciler",
    "Reconciliation",
    "classify_error",
    "is_already_exists",
    "make_services_client",
]
