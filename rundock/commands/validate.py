"""Validate command: merge and validate a request without deploying it."""

import logging
import sys

from rundock.commands import (
    EXIT_OK,
    add_request_arguments,
    overrides_from_args,
    report_error,
    settings_from_args,
)
from rundock.deploy.orchestrate import compile_service
from rundock.errors import RundockError

logger = logging.getLogger(__name__)


def handle_validate(args):
    """CLI handler for 'validate'."""
    try:
        settings = settings_from_args(args)
        compiled = compile_service(overrides_from_args(args), settings=settings)
    except RundockError as e:
        sys.exit(report_error(e))

    logger.info(f"Service '{compiled.identity.service_name}' is valid ({compiled.identity.resource_name}).")
    sys.exit(EXIT_OK)


def register_validate_command(subparsers):
    """Register the validate subcommand."""
    parser = subparsers.add_parser("validate", help="Check a deploy request and report every violation")
    add_request_arguments(parser)
    parser.set_defaults(func=handle_validate)
