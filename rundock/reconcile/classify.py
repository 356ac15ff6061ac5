"""Map control-plane and credential exceptions onto the rundock error taxonomy.

Classification looks only at exception types, which the client libraries
derive from structured status codes. Messages are never inspected.
"""

import asyncio
import logging

from google.api_core import exceptions as api_exceptions
from google.auth import exceptions as auth_exceptions

from rundock.errors import AuthError, InternalError, RundockError, TransientError

logger = logging.getLogger(__name__)

# Checked in order; the first matching type decides.
_ERROR_MAP = [
    (auth_exceptions.DefaultCredentialsError, AuthError),
    (auth_exceptions.RefreshError, AuthError),
    (api_exceptions.Unauthenticated, AuthError),
    (api_exceptions.PermissionDenied, AuthError),
    (api_exceptions.GoogleAPICallError, TransientError),
    (api_exceptions.RetryError, TransientError),
]


def is_already_exists(exc: BaseException) -> bool:
    """True if the control plane reported that the resource identity is taken."""
    return isinstance(exc, api_exceptions.AlreadyExists)


def classify_error(exc: BaseException, context="Cloud Run deployment") -> RundockError:
    """Return the rundock error for *exc*. RundockErrors pass through unchanged."""
    if isinstance(exc, RundockError):
        return exc

    for exc_type, error_cls in _ERROR_MAP:
        if isinstance(exc, exc_type):
            if error_cls is AuthError:
                return AuthError(f"Google Cloud credentials are not configured or were rejected: {exc}")
            return error_cls(f"{context} failed: {exc}")

    if isinstance(exc, asyncio.TimeoutError):
        return InternalError(f"{context} did not settle in time; it may still complete remotely")

    logger.error(f"Unexpected error during {context}", exc_info=exc)
    return InternalError(f"{context} failed: {exc}")
