"""Validation of a merged spec and its identity against Cloud Run rules.

Every check runs on every call; the result is the complete list of
violations so a caller can fix them all in one round trip.
"""

import re

from rundock.errors import FieldError, ValidationError
from rundock.spec.types import MergedSpec, ServiceIdentity

VALID_CPUS = ["1", "2", "4", "8"]
MEMORY_PATTERN = re.compile(r"^\d+(Mi|Gi)$")
SERVICE_NAME_PATTERN = re.compile(r"^[a-z0-9]([-a-z0-9]*[a-z0-9])?$")
MAX_SERVICE_NAME_LENGTH = 63
TIMEOUT_PATTERN = re.compile(r"^(\d+)(\.\d+)?s?$")
MAX_TIMEOUT_SECONDS = 3600

# Set by Cloud Run itself; user-supplied values are rejected by the API.
RESERVED_ENV_NAMES = {"PORT", "K_SERVICE", "K_REVISION", "K_CONFIGURATION"}


def _is_blank(value) -> bool:
    return not isinstance(value, str) or not value.strip()


def _is_count(value) -> bool:
    return isinstance(value, int) and not isinstance(value, bool) and value >= 0


def _check_identity(identity: ServiceIdentity) -> list[FieldError]:
    errors = []
    name = identity.service_name
    if _is_blank(name):
        errors.append(FieldError("serviceName", "Service name is required"))
    elif len(name) > MAX_SERVICE_NAME_LENGTH or not SERVICE_NAME_PATTERN.match(name):
        errors.append(
            FieldError(
                "serviceName",
                "Service name must be a DNS label (lowercase letters, digits and inner hyphens, max 63 chars)",
            )
        )
    if _is_blank(identity.project_id):
        errors.append(FieldError("projectId", "GCP project ID is required"))
    if _is_blank(identity.region):
        errors.append(FieldError("region", "Region is required"))
    return errors


def _check_container(container) -> list[FieldError]:
    errors = []
    if _is_blank(container.get("image")):
        errors.append(FieldError("containerImage", "Container image is required"))

    limits = (container.get("resources") or {}).get("limits") or {}
    cpu = limits.get("cpu")
    if cpu not in (None, "") and str(cpu) not in VALID_CPUS:
        errors.append(FieldError("resources.cpu", f"CPU must be one of: {', '.join(VALID_CPUS)}"))
    memory = limits.get("memory")
    if memory not in (None, "") and not MEMORY_PATTERN.match(str(memory)):
        errors.append(FieldError("resources.memory", "Memory must be e.g. 256Mi, 512Mi, 1Gi, 2Gi"))

    seen = set()
    for i, entry in enumerate(container.get("env") or []):
        name = entry.get("name")
        if _is_blank(name):
            errors.append(FieldError(f"env[{i}].name", "Environment variable name is required"))
        elif name in RESERVED_ENV_NAMES:
            errors.append(FieldError(f"env[{i}].name", f"{name} is reserved by Cloud Run and cannot be set"))
        elif name in seen:
            errors.append(FieldError(f"env[{i}].name", f"Duplicate environment variable {name}"))
        seen.add(name)
    return errors


def _check_scaling(scaling) -> list[FieldError]:
    errors = []
    low = scaling.get("min_instance_count")
    high = scaling.get("max_instance_count")
    if low is not None and not _is_count(low):
        errors.append(FieldError("minInstances", "minInstanceCount must be a non-negative integer"))
    if high is not None and not _is_count(high):
        errors.append(FieldError("maxInstances", "maxInstanceCount must be a non-negative integer"))
    if _is_count(low) and _is_count(high) and low > high:
        errors.append(FieldError("scaling", "minInstanceCount cannot exceed maxInstanceCount"))
    return errors


def _check_timeout(timeout) -> list[FieldError]:
    if timeout is None or isinstance(timeout, dict):
        return []
    match = TIMEOUT_PATTERN.match(str(timeout).strip())
    if not match:
        return [FieldError("timeout", "Timeout must be a number of seconds, e.g. 300s, 300 or 1.5s")]
    seconds = float(match.group(1) + (match.group(2) or ""))
    if seconds < 1 or seconds > MAX_TIMEOUT_SECONDS:
        return [FieldError("timeout", f"Timeout must be between 1s and {MAX_TIMEOUT_SECONDS}s")]
    return []


def validate(spec: MergedSpec, identity: ServiceIdentity) -> list[FieldError]:
    """Return every violation in *spec* and *identity*. Empty means deployable."""
    errors = _check_identity(identity)

    container = spec.container
    if container is None:
        errors.append(FieldError("template", "At least one container is required"))
    else:
        errors.extend(_check_container(container))

    errors.extend(_check_scaling(spec.scaling))
    errors.extend(_check_timeout(spec.timeout))
    return errors


def ensure_valid(spec: MergedSpec, identity: ServiceIdentity) -> None:
    """Raise ValidationError carrying every violation, if there are any."""
    errors = validate(spec, identity)
    if errors:
        raise ValidationError(errors)
