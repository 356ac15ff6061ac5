"""Client for a remote rundock deployer endpoint.

Used by callers that hand deployment off to a separate deployer service
instead of talking to Cloud Run themselves, e.g. right after registering a
new tenant.
"""

import asyncio
import json
import logging

import httpx

from rundock.errors import AUTH_HINT, AuthError, FieldError, TransientError, ValidationError
from rundock.reconcile.types import DeployResult

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 60


def _error_from_response(resp: httpx.Response):
    """Map a non-2xx deployer reply onto the error taxonomy."""
    try:
        body = resp.json()
    except (json.JSONDecodeError, ValueError):
        body = {}
    if not isinstance(body, dict):
        body = {}
    message = body.get("message") or f"Deployer returned HTTP {resp.status_code}"

    errors = body.get("errors")
    if 400 <= resp.status_code < 500 and isinstance(errors, list):
        return ValidationError(
            [FieldError(str(e.get("field", "")), str(e.get("message", ""))) for e in errors if isinstance(e, dict)]
        )
    if resp.status_code == 503 and body.get("error") == AuthError.code:
        return AuthError(message, hint=body.get("hint") or AUTH_HINT)
    return TransientError(f"Deployer request failed: {message}")


async def submit_deploy(deployer_url, body, token=None, timeout=DEFAULT_TIMEOUT, dry_run=False, transport=None):
    """POST a deploy request body to *deployer_url*.

    Args:
        body: JSON request body (see Overrides.from_dict).
        token: optional bearer token for the deployer.
        transport: optional httpx transport (tests use httpx.MockTransport).

    Returns:
        DeployResult parsed from the deployer reply, or None in dry-run mode.
    """
    if dry_run:
        logger.info(f"[dry-run] POST {deployer_url}")
        logger.info(f"[dry-run] payload: {json.dumps(body, indent=2)}")
        return None

    headers = {"Content-Type": "application/json"}
    if token:
        headers["Authorization"] = f"Bearer {token}"

    try:
        async with httpx.AsyncClient(transport=transport) as client:
            resp = await client.post(deployer_url, json=body, headers=headers, timeout=timeout)
    except httpx.HTTPError as e:
        raise TransientError(f"Deployer request to {deployer_url} failed: {e}") from e

    if resp.is_error:
        raise _error_from_response(resp)
    data = resp.json()
    # Some deployers wrap the result in {"success": ..., "data": {...}}.
    if isinstance(data, dict) and isinstance(data.get("data"), dict):
        data = data["data"]
    return DeployResult.from_dict(data)


def _log_background_outcome(service_name, task: asyncio.Task):
    if task.cancelled():
        logger.warning(f"Background deploy of '{service_name}' was cancelled")
        return
    exc = task.exception()
    if exc is not None:
        code = getattr(exc, "code", type(exc).__name__)
        logger.error(f"Background deploy of '{service_name}' failed ({code}): {exc}")
        return
    result = task.result()
    if result is not None:
        logger.info(f"Background deploy of '{service_name}' finished: {result.status} {result.service_url}")


def deploy_in_background(deployer_url, body, token=None, timeout=DEFAULT_TIMEOUT, transport=None) -> asyncio.Task:
    """Schedule submit_deploy as a detached task on the running loop.

    Failures are logged, never raised to the caller that scheduled the task.
    The task is returned so a caller that does care can await or inspect it.
    """
    service_name = body.get("serviceName", "?") if isinstance(body, dict) else "?"
    task = asyncio.ensure_future(
        submit_deploy(deployer_url, body, token=token, timeout=timeout, transport=transport)
    )
    task.add_done_callback(lambda t: _log_background_outcome(service_name, t))
    return task
