"""Process settings: defaults, optional YAML config file, environment overrides."""

import logging
import os
from dataclasses import dataclass, fields

import yaml

from rundock.errors import ConfigLoadError, ConfigParseError

logger = logging.getLogger(__name__)

DEFAULT_REGION = "europe-west1"
DEFAULT_TEMPLATE_PATH = os.path.join(os.path.dirname(__file__), "templates", "cloud-run-service.yaml")
DEFAULT_OPERATION_TIMEOUT = 600

# Environment variable → settings field. First variable set wins.
_ENV_VARS = {
    "project_id": ("GCP_PROJECT_ID", "GOOGLE_CLOUD_PROJECT"),
    "region": ("GCP_REGION",),
    "template_path": ("RUNDOCK_TEMPLATE",),
    "operation_timeout": ("RUNDOCK_OPERATION_TIMEOUT",),
    "deployer_url": ("RUNDOCK_DEPLOYER_URL",),
    "deployer_token": ("RUNDOCK_DEPLOYER_TOKEN",),
}


@dataclass
class Settings:
    """Deployment defaults applied when a request leaves a field out."""

    project_id: str = ""
    region: str = DEFAULT_REGION
    template_path: str = DEFAULT_TEMPLATE_PATH
    operation_timeout: int = DEFAULT_OPERATION_TIMEOUT
    deployer_url: str = ""
    deployer_token: str = ""


def _read_config_file(config_path):
    try:
        with open(config_path) as f:
            raw = f.read()
    except OSError as e:
        raise ConfigLoadError(f"Failed to read config file {config_path}: {e}") from e
    try:
        data = yaml.safe_load(raw)
    except yaml.YAMLError as e:
        raise ConfigParseError(f"Invalid YAML in config file {config_path}: {e}") from e
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigParseError(f"Config file {config_path} must contain a mapping at the top level")
    return data


def _coerce_timeout(value, source):
    try:
        timeout = int(value)
    except (TypeError, ValueError) as e:
        raise ConfigParseError(f"operation_timeout from {source} must be an integer, got {value!r}") from e
    if timeout <= 0:
        raise ConfigParseError(f"operation_timeout from {source} must be positive, got {timeout}")
    return timeout


def load_settings(config_path=None, environ=None) -> Settings:
    """Build Settings from defaults, an optional YAML file, then the environment.

    Unknown keys in the config file are ignored with a warning.
    """
    environ = os.environ if environ is None else environ
    settings = Settings()
    known = {f.name for f in fields(Settings)}

    if config_path:
        for key, value in _read_config_file(config_path).items():
            if key not in known:
                logger.warning(f"Ignoring unknown config key '{key}' in {config_path}")
                continue
            if key == "operation_timeout":
                value = _coerce_timeout(value, config_path)
            elif value is not None:
                value = str(value)
            setattr(settings, key, value if value is not None else getattr(settings, key))

    for key, names in _ENV_VARS.items():
        for name in names:
            value = environ.get(name)
            if value:
                if key == "operation_timeout":
                    value = _coerce_timeout(value, name)
                setattr(settings, key, value)
                break

    return settings
