"""CLI logging setup: plain %(message)s format, secrets redacted."""

import logging
import sys

from rundock.redact import SecretRedactingFilter


def setup_cli_logging(verbose=False):
    """Configure the root logger with a plain message format for CLI commands.

    Output reads like print(). With verbose=True, debug records are shown
    with their logger name so library internals can be told apart.
    """
    root = logging.getLogger()
    root.setLevel(logging.DEBUG if verbose else logging.INFO)
    root.handlers.clear()
    handler = logging.StreamHandler(sys.stdout)
    fmt = "[%(name)s] %(message)s" if verbose else "%(message)s"
    handler.setFormatter(logging.Formatter(fmt))
    # On the handler, not the logger: logger filters skip propagated records.
    handler.addFilter(SecretRedactingFilter())
    root.addHandler(handler)

    # google-auth and grpc are chatty at DEBUG
    for noisy in ("google", "grpc", "httpx", "httpcore"):
        logging.getLogger(noisy).setLevel(logging.WARNING)
