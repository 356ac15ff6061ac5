"""Submit command: hand a deploy request to a remote deployer service."""

import asyncio
import logging
import sys

from rundock.commands import (
    EXIT_FAILED,
    EXIT_OK,
    add_request_arguments,
    print_json,
    report_error,
    request_body_from_args,
    settings_from_args,
)
from rundock.deployer import submit_deploy
from rundock.errors import RundockError

logger = logging.getLogger(__name__)


async def _handle_submit(args) -> int:
    try:
        settings = settings_from_args(args)
        deployer_url = args.deployer_url or settings.deployer_url
        if not deployer_url:
            logger.error("Error: no deployer URL. Pass --deployer-url or set RUNDOCK_DEPLOYER_URL.")
            return EXIT_FAILED
        body = request_body_from_args(args)
        result = await submit_deploy(
            deployer_url,
            body,
            token=settings.deployer_token or None,
            timeout=args.http_timeout,
            dry_run=args.dry_run,
        )
    except RundockError as e:
        return report_error(e)

    if result is not None:
        print_json(result.to_dict())
    return EXIT_OK


def handle_submit(args):
    """CLI handler for 'submit'."""
    sys.exit(asyncio.run(_handle_submit(args)))


def register_submit_command(subparsers):
    """Register the submit subcommand."""
    parser = subparsers.add_parser("submit", help="Send a deploy request to a remote deployer endpoint")
    add_request_arguments(parser)
    parser.add_argument("--deployer-url", default=None, help="Deployer endpoint (default: $RUNDOCK_DEPLOYER_URL)")
    parser.add_argument("--http-timeout", type=float, default=60, help="HTTP timeout in seconds (default: 60)")
    parser.add_argument("--dry-run", action="store_true", help="Print the request instead of sending it")
    parser.set_defaults(func=handle_submit)
