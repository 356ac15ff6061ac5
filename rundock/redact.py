"""Centralized secret redaction for logs and rendered specs."""

import logging
import os
import re

# Env vars whose values should be redacted from all output
_SECRET_ENV_VARS = [
    "GOOGLE_APPLICATION_CREDENTIALS",
    "RUNDOCK_DEPLOYER_TOKEN",
    "GCP_SERVICE_ACCOUNT",
]

# Deployed env entries whose names contain one of these are treated as secrets.
_SECRET_NAME_HINTS = ("TOKEN", "SECRET", "PASSWORD", "KEY")

_MIN_SECRET_LENGTH = 8  # skip short values to avoid false positives

# Values registered at runtime (e.g. secret env entries of a deploy request).
# Process-wide and only ever grows until reset_secrets(); a long-lived caller
# should reset it once a request has been handled.
_registered: set[str] = set()


def _collect_secret_values() -> set[str]:
    values = set(_registered)
    for var in _SECRET_ENV_VARS:
        val = os.environ.get(var, "")
        if len(val) >= _MIN_SECRET_LENGTH:
            values.add(val)
    return values


def _build_patterns(values: set[str]) -> list[re.Pattern]:
    # Sort by length descending so longer values match first
    return [re.compile(re.escape(v)) for v in sorted(values, key=len, reverse=True)]


# Lazy-initialized module cache
_patterns: list[re.Pattern] | None = None


def _get_patterns() -> list[re.Pattern]:
    global _patterns
    if _patterns is None:
        _patterns = _build_patterns(_collect_secret_values())
    return _patterns


def is_secret_name(name: str) -> bool:
    """True if an env var name looks like it holds a credential."""
    upper = (name or "").upper()
    return any(hint in upper for hint in _SECRET_NAME_HINTS)


def register_secrets(env_entries) -> int:
    """Register values of secret-looking env entries for redaction.

    Accepts any iterable of objects with ``name``/``value`` attributes or
    ``{"name", "value"}`` mappings. Returns the number of values added.
    """
    global _patterns
    added = 0
    for entry in env_entries:
        if isinstance(entry, dict):
            name, value = entry.get("name", ""), entry.get("value", "")
        else:
            name, value = getattr(entry, "name", ""), getattr(entry, "value", "")
        value = str(value or "")
        if is_secret_name(str(name)) and len(value) >= _MIN_SECRET_LENGTH and value not in _registered:
            _registered.add(value)
            added += 1
    if added:
        _patterns = None
    return added


def reset_secrets() -> None:
    """Forget every value added by register_secrets()."""
    global _patterns
    _registered.clear()
    _patterns = None


def redact_secrets(text: str) -> str:
    """Replace known secret values with '***'."""
    return _apply(text, _get_patterns())


def _apply(text: str, patterns: list[re.Pattern]) -> str:
    for p in patterns:
        text = p.sub("***", text)
    return text


class SecretRedactingFilter(logging.Filter):
    """Logging filter that replaces secret values in log records with '***'.

    Attach it to a handler so records propagated from every logger pass through it.
    Handles both f-string messages (msg is pre-formatted) and
    %-style messages (msg + args).
    """

    def filter(self, record: logging.LogRecord) -> bool:
        patterns = _get_patterns()
        if patterns:
            record.msg = _apply(str(record.msg), patterns)
            if record.args:
                if isinstance(record.args, dict):
                    record.args = {k: _apply(v, patterns) if isinstance(v, str) else v for k, v in record.args.items()}
                elif isinstance(record.args, tuple):
                    record.args = tuple(_apply(a, patterns) if isinstance(a, str) else a for a in record.args)
        return True
