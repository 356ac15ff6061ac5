"""Template document types."""

import copy
import re
from dataclasses import dataclass, field

PLACEHOLDER_IMAGE = "{{CONTAINER_IMAGE}}"
FALLBACK_IMAGE = "gcr.io/cloudrun/container:hello"

_PLACEHOLDER_RE = re.compile(r"^\{\{\s*[A-Za-z0-9_]+\s*\}\}$")


def is_placeholder(value) -> bool:
    """True if *value* is an unresolved ``{{NAME}}`` template placeholder."""
    return isinstance(value, str) and bool(_PLACEHOLDER_RE.match(value.strip()))


@dataclass(frozen=True)
class BaseTemplate:
    """Parsed base service document.

    Shared across requests for the lifetime of the process, so the stored
    tree is never handed out: callers get their own copy from to_dict().
    """

    document: dict = field(repr=False)
    source: str = ""

    def to_dict(self) -> dict:
        """Return a deep copy of the document tree."""
        return copy.deepcopy(self.document)

    @property
    def default_image(self) -> str | None:
        containers = self.document.get("template", {}).get("containers") or []
        if not containers:
            return None
        return containers[0].get("image")
