"""Shared CLI plumbing: request arguments, error reporting."""

import argparse
import json
import logging

import yaml

from rundock.config import load_settings
from rundock.errors import ConfigLoadError, ConfigParseError, RundockError, ValidationError
from rundock.spec.overrides import Overrides

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_FAILED = 1
EXIT_INVALID = 2


def add_request_arguments(parser):
    """Register the flags that make up a deploy request."""
    parser.add_argument("--request", default=None, help="JSON or YAML file with the request body")
    parser.add_argument("--service-name", default=None, help="Service name (DNS label)")
    parser.add_argument("--image", default=None, help="Container image, e.g. gcr.io/project/image:tag")
    parser.add_argument("--region", default=None, help="Region (default: $GCP_REGION or europe-west1)")
    parser.add_argument("--project", default=None, help="GCP project (default: $GCP_PROJECT_ID)")
    parser.add_argument("--env", action="append", default=None, metavar="KEY=VALUE", help="Environment entry (repeatable)")
    parser.add_argument("--cpu", default=None, help="CPU limit: 1, 2, 4 or 8")
    parser.add_argument("--memory", default=None, help="Memory limit, e.g. 512Mi or 2Gi")
    parser.add_argument(
        "--cpu-idle",
        action=argparse.BooleanOptionalAction,
        default=None,
        help="Allocate CPU only during requests (--no-cpu-idle keeps it always on)",
    )
    parser.add_argument("--min-instances", type=int, default=None, help="Minimum instance count")
    parser.add_argument("--max-instances", type=int, default=None, help="Maximum instance count")
    parser.add_argument("--timeout", default=None, help="Request timeout, e.g. 300s")
    parser.add_argument("--description", default=None, help="Service description")
    parser.add_argument("--template", default=None, help="Base template YAML (default: bundled template)")
    parser.add_argument("--config", default=None, help="Settings YAML file")


def _read_request_file(path):
    try:
        with open(path) as f:
            raw = f.read()
    except OSError as e:
        raise ConfigLoadError(f"Failed to read request file {path}: {e}") from e
    try:
        # YAML is a superset of JSON, so one parser covers both.
        return yaml.safe_load(raw) or {}
    except yaml.YAMLError as e:
        raise ConfigParseError(f"Invalid request file {path}: {e}") from e


def request_body_from_args(args) -> dict:
    """Build a request body from --request plus any flags (flags win)."""
    body = _read_request_file(args.request) if args.request else {}
    if not isinstance(body, dict):
        return body  # Overrides.from_dict reports the shape error
    flag_values = {
        "serviceName": args.service_name,
        "containerImage": args.image,
        "region": args.region,
        "projectId": args.project,
        "env": args.env,
        "minInstances": args.min_instances,
        "maxInstances": args.max_instances,
        "timeout": args.timeout,
        "description": args.description,
    }
    for key, value in flag_values.items():
        if value is not None:
            body[key] = value

    resource_flags = {"cpu": args.cpu, "memory": args.memory, "cpuIdle": args.cpu_idle}
    if any(v is not None for v in resource_flags.values()):
        resources = dict(body.get("resources") or {})
        resources.update({k: v for k, v in resource_flags.items() if v is not None})
        body["resources"] = resources
    return body


def settings_from_args(args):
    settings = load_settings(args.config)
    if args.template:
        settings.template_path = args.template
    return settings


def overrides_from_args(args) -> Overrides:
    return Overrides.from_dict(request_body_from_args(args))


def report_error(error: RundockError) -> int:
    """Log *error* for a terminal user and return the matching exit code."""
    if isinstance(error, ValidationError):
        logger.error("Validation failed:")
        for e in error.errors:
            logger.error(f"  {e.field}: {e.message}")
        return EXIT_INVALID
    logger.error(f"Error: {error.message}")
    if error.hint:
        logger.error(f"Hint: {error.hint}")
    return EXIT_FAILED


def print_json(data):
    logger.info(json.dumps(data, indent=2))
