#!/usr/bin/env python3
"""Cloud Run service deploy tools: CLI entrypoint."""

import argparse

from rundock.commands.deploy import register_deploy_command
from rundock.commands.submit import register_submit_command
from rundock.commands.validate import register_validate_command
from rundock.logging_setup import setup_cli_logging


def main():
    parser = argparse.ArgumentParser(description="Cloud Run service deploy tools")
    parser.add_argument("--verbose", action="store_true", help="Show debug logging")
    subparsers = parser.add_subparsers(dest="command", required=True)

    register_deploy_command(subparsers)
    register_validate_command(subparsers)
    register_submit_command(subparsers)

    args = parser.parse_args()
    setup_cli_logging(verbose=args.verbose)
    args.func(args)


if __name__ == "__main__":
    main()
