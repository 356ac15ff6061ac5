"""Error taxonomy for template loading, validation and reconciliation."""

from dataclasses import dataclass


@dataclass(frozen=True)
class FieldError:
    """A single field violation: which request field, and what is wrong with it."""

    field: str
    message: str

    def to_dict(self) -> dict:
        return {"field": self.field, "message": self.message}


class RundockError(Exception):
    """Base class for every error surfaced by rundock.

    ``status_code`` is the HTTP status a route boundary should answer with,
    ``code`` a stable machine-readable identifier and ``hint`` optional
    remediation guidance for operators.
    """

    status_code = 500
    code = "INTERNAL_ERROR"

    def __init__(self, message, hint=None):
        super().__init__(message)
        self.message = message
        self.hint = hint

    def to_dict(self) -> dict:
        body = {"error": self.code, "message": self.message}
        if self.hint:
            body["hint"] = self.hint
        return body


class ConfigLoadError(RundockError):
    """A template or config file could not be read."""

    code = "CONFIG_LOAD_ERROR"


class ConfigParseError(RundockError):
    """A template or config file was read but is not the expected shape."""

    code = "CONFIG_PARSE_ERROR"


class ValidationError(RundockError):
    """One or more field violations. Carries the complete list."""

    status_code = 400
    code = "VALIDATION_ERROR"

    def __init__(self, errors):
        self.errors = list(errors)
        fields = ", ".join(e.field for e in self.errors)
        super().__init__(f"Invalid service configuration ({len(self.errors)} error(s): {fields})")

    def to_dict(self) -> dict:
        body = super().to_dict()
        body["errors"] = [e.to_dict() for e in self.errors]
        return body


AUTH_HINT = (
    "Run 'gcloud auth application-default login' or set GOOGLE_APPLICATION_CREDENTIALS "
    "to a service account key file. See https://cloud.google.com/docs/authentication/getting-started"
)


class AuthError(RundockError):
    """Control-plane credentials are missing or rejected."""

    status_code = 503
    code = "GCP_CREDENTIALS_MISSING"

    def __init__(self, message, hint=AUTH_HINT):
        super().__init__(message, hint=hint)


class TransientError(RundockError):
    """The control plane failed in a way the caller may retry."""

    status_code = 502
    code = "CONTROL_PLANE_ERROR"


class InternalError(RundockError):
    """Anything unexpected. Logged for investigation."""
