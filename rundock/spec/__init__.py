"""Service spec compilation: overrides, merge, validation, transport shape."""

from rundock.spec.adapt import parse_duration, to_transport_shape
from rundock.spec.merge import merge, normalize_timeout
from rundock.spec.overrides import EnvVar, Overrides, ResourceOverrides, parse_env_entry
from rundock.spec.types import MergedSpec, ServiceIdentity, TransportSpec
from rundock.spec.validate import ensure_valid, validate

__all__ = [
    "EnvVar",
    "MergedSpec",
    "Overrides",
    "ResourceOverrides",
    "ServiceIdentity",
    "TransportSpec",
    "ensure_valid",
    "merge",
    "normalize_timeout",
    "parse_duration",
    "parse_env_entry",
    "to_transport_shape",
    "validate",
]
