"""Deploy command: compile the service spec and create-or-update it on Cloud Run."""

import asyncio
import logging
import sys

import yaml

from rundock.commands import (
    EXIT_OK,
    add_request_arguments,
    overrides_from_args,
    print_json,
    report_error,
    settings_from_args,
)
from rundock.deploy.orchestrate import compile_service, deploy
from rundock.errors import RundockError
from rundock.redact import redact_secrets, register_secrets, reset_secrets
from rundock.template.store import TemplateStore

logger = logging.getLogger(__name__)


def _log_dry_run(compiled):
    identity = compiled.identity
    logger.info(f"[dry-run] CreateService parent={identity.parent} service_id={identity.service_name}")
    logger.info(f"[dry-run] on ALREADY_EXISTS: UpdateService name={identity.resource_name}")
    rendered = yaml.safe_dump(compiled.transport.document, sort_keys=False, default_flow_style=False)
    for line in redact_secrets(rendered).rstrip().splitlines():
        logger.info(f"[dry-run]   {line}")


async def _handle_deploy(args) -> int:
    try:
        settings = settings_from_args(args)
        overrides = overrides_from_args(args)
    except RundockError as e:
        return report_error(e)

    register_secrets(overrides.env)
    try:
        store = TemplateStore(settings.template_path)
        if args.dry_run:
            _log_dry_run(compile_service(overrides, settings=settings, store=store))
            return EXIT_OK

        result = await deploy(overrides, settings=settings, store=store)
        print_json(result.to_dict())
        return EXIT_OK
    except RundockError as e:
        return report_error(e)
    finally:
        reset_secrets()


def handle_deploy(args):
    """CLI handler for 'deploy'."""
    sys.exit(asyncio.run(_handle_deploy(args)))


def register_deploy_command(subparsers):
    """Register the deploy subcommand."""
    parser = subparsers.add_parser("deploy", help="Create or update a Cloud Run service from the base template")
    add_request_arguments(parser)
    parser.add_argument("--dry-run", action="store_true", help="Print the request instead of calling Cloud Run")
    parser.set_defaults(func=handle_deploy)
