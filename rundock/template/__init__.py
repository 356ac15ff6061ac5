"""Base template loading and types."""

from rundock.template.store import TemplateStore, load_template
from rundock.template.types import (
    FALLBACK_IMAGE,
    PLACEHOLDER_IMAGE,
    BaseTemplate,
    is_placeholder,
)

__all__ = [
    "BaseTemplate",
    "FALLBACK_IMAGE",
    "PLACEHOLDER_IMAGE",
    "TemplateStore",
    "is_placeholder",
    "load_template",
]
