"""Base template loading."""

import copy
import logging

import yaml

from rundock.config import DEFAULT_TEMPLATE_PATH
from rundock.errors import ConfigLoadError, ConfigParseError
from rundock.template.types import BaseTemplate

logger = logging.getLogger(__name__)


def _check_container(container, where, path):
    env = container.get("env")
    if env is not None and (not isinstance(env, list) or not all(isinstance(e, dict) for e in env)):
        raise ConfigParseError(f"Template {path}: '{where}.env' must be a list of {{name, value}} mappings")

    resources = container.get("resources")
    if resources is None:
        return
    if not isinstance(resources, dict):
        raise ConfigParseError(f"Template {path}: '{where}.resources' must be a mapping")
    limits = resources.get("limits")
    if limits is not None and not isinstance(limits, dict):
        raise ConfigParseError(f"Template {path}: '{where}.resources.limits' must be a mapping")


def _check_shape(document, path):
    """Raise ConfigParseError unless *document* looks like a service tree."""
    if not isinstance(document, dict):
        raise ConfigParseError(f"Template {path} must be a mapping at the top level, got {type(document).__name__}")

    if "template" not in document:
        return
    template = document["template"]
    if not isinstance(template, dict):
        raise ConfigParseError(f"Template {path}: 'template' must be a mapping")

    containers = template.get("containers")
    if containers is not None and (not isinstance(containers, list) or not all(isinstance(c, dict) for c in containers)):
        raise ConfigParseError(f"Template {path}: 'template.containers' must be a list of mappings")
    for i, container in enumerate(containers or []):
        _check_container(container, f"template.containers[{i}]", path)

    if "scaling" in template and not isinstance(template["scaling"], dict):
        raise ConfigParseError(f"Template {path}: 'template.scaling' must be a mapping")


def load_template(path=DEFAULT_TEMPLATE_PATH) -> BaseTemplate:
    """Read and parse a template file. No caching."""
    try:
        with open(path) as f:
            raw = f.read()
    except OSError as e:
        raise ConfigLoadError(f"Failed to load Cloud Run template {path}: {e}") from e

    try:
        document = yaml.safe_load(raw)
    except yaml.YAMLError as e:
        raise ConfigParseError(f"Invalid Cloud Run template YAML {path}: {e}") from e

    _check_shape(document, path)
    return BaseTemplate(document=document, source=str(path))


class TemplateStore:
    """Loads the base template once and serves the same instance afterwards."""

    def __init__(self, path=DEFAULT_TEMPLATE_PATH):
        self.path = path
        self._template = None

    def load(self) -> BaseTemplate:
        if self._template is None:
            template = load_template(self.path)
            # Keep a private copy so later edits to the parsed tree cannot leak in.
            self._template = BaseTemplate(document=copy.deepcopy(template.document), source=template.source)
            logger.debug(f"Loaded base template from {self.path}")
        return self._template
