"""Create-or-update a Cloud Run service and wait for the operation to settle."""

import asyncio
import logging

from google.cloud import run_v2

from rundock.config import DEFAULT_OPERATION_TIMEOUT
from rundock.errors import InternalError
from rundock.reconcile.classify import classify_error, is_already_exists
from rundock.reconcile.types import DeployResult, ReconcileState, Reconciliation
from rundock.spec.types import ServiceIdentity, TransportSpec

logger = logging.getLogger(__name__)


def make_services_client():
    """Build a Cloud Run ServicesAsyncClient from ambient process credentials.

    Must be called from inside a running event loop.
    """
    try:
        return run_v2.ServicesAsyncClient()
    except Exception as e:
        raise classify_error(e, context="Cloud Run client setup") from e


class Reconciler:
    """Drives one deploy through PENDING → CREATING → ... → READY/RECONCILING/FAILED.

    Args:
        client: object exposing async ``create_service(request=...)`` and
            ``update_service(request=...)`` that return long-running
            operations with an async ``result(timeout=...)``. Defaults to
            a ServicesAsyncClient built on first use.
        operation_timeout: seconds to wait for an operation to settle.
        client_factory: builds the client when none is injected. The
            Reconciler owns a client it built and closes it in close().

    Use as ``async with Reconciler() as reconciler:`` so an owned client's
    channel is closed before the event loop goes away. An injected client
    is left open for its owner.
    """

    def __init__(self, client=None, operation_timeout=DEFAULT_OPERATION_TIMEOUT, client_factory=None):
        self._client = client
        self._owns_client = client is None
        self._client_factory = client_factory
        self.operation_timeout = operation_timeout

    @property
    def client(self):
        if self._client is None:
            factory = self._client_factory or make_services_client
            self._client = factory()
        return self._client

    async def close(self):
        """Close the client's transport if this Reconciler created it."""
        if not self._owns_client or self._client is None:
            return
        client, self._client = self._client, None
        await client.transport.close()
        logger.debug("Closed Cloud Run services client")

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc, tb):
        await self.close()

    async def _run_operation(self, operation):
        return await operation.result(timeout=self.operation_timeout)

    async def _create(self, identity: ServiceIdentity, transport: TransportSpec):
        request = run_v2.CreateServiceRequest(
            parent=identity.parent,
            service_id=identity.service_name,
            service=transport.to_service(),
        )
        operation = await self.client.create_service(request=request)
        return await self._run_operation(operation)

    async def _update(self, identity: ServiceIdentity, transport: TransportSpec):
        request = run_v2.UpdateServiceRequest(service=transport.to_service(name=identity.resource_name))
        operation = await self.client.update_service(request=request)
        return await self._run_operation(operation)

    async def reconcile(self, identity: ServiceIdentity, transport: TransportSpec, record=None) -> DeployResult:
        """Create the service, or update it if the identity already exists.

        Args:
            record: optional Reconciliation to track state in; a fresh one
                is used if omitted.

        Returns:
            DeployResult built from the service the control plane returned.

        Raises:
            AuthError, TransientError or InternalError. Raw transport
            exceptions never escape.
        """
        record = record or Reconciliation()
        action = "create"
        try:
            record.advance(ReconcileState.CREATING)
            logger.info(f"Creating Cloud Run service '{identity.service_name}' in {identity.parent}...")
            try:
                service = await self._create(identity, transport)
            except Exception as e:
                if not is_already_exists(e):
                    raise
                record.advance(ReconcileState.CONFLICT)
                logger.info(f"Service '{identity.service_name}' already exists, updating {identity.resource_name}...")
                record.advance(ReconcileState.UPDATING)
                action = "update"
                service = await self._update(identity, transport)
        except asyncio.CancelledError:
            logger.warning(
                f"Deploy of '{identity.service_name}' cancelled while in {record.state.value}; "
                "the remote operation may still complete."
            )
            raise
        except Exception as e:
            record.advance(ReconcileState.FAILED)
            error = classify_error(e)
            logger.error(f"Deploy of '{identity.service_name}' failed: {error.message}")
            raise error from e

        if service is None:
            record.advance(ReconcileState.FAILED)
            raise InternalError(f"Cloud Run returned no service for '{identity.service_name}'")

        reconciling = bool(service.reconciling)
        record.advance(ReconcileState.RECONCILING if reconciling else ReconcileState.READY)
        result = DeployResult(
            status=record.state.value,
            service_url=service.uri or "",
            reconciling=reconciling,
            service_name=identity.service_name,
            region=identity.region,
            latest_ready_revision=service.latest_ready_revision or None,
            action=action,
        )
        logger.info(f"Service '{identity.service_name}' {action}d: {result.status} {result.service_url}")
        return result
