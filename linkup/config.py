"""Client configuration.

Settings are resolved in priority order (highest first):
1. Environment variables (LINKUP_*)
2. YAML config file (~/.config/linkup/config.yaml)
3. Defaults
"""

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Mapping, Optional, Union

import yaml

from .errors import ConfigurationError
from .transport.http_client import Transport
from .transport.retry_policy import RetryPolicy

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "https://api.linkup.so/v1"
DEFAULT_USER_AGENT = "linkup-python/0.1"
DEFAULT_TIMEOUT = 30.0
DEFAULT_CONFIG_FILE = Path.home() / ".config" / "linkup" / "config.yaml"

# env var -> (config key, converter)
ENV_VARS = {
    "LINKUP_API_KEY": ("api_key", str),
    "LINKUP_BASE_URL": ("base_url", str),
    "LINKUP_USER_AGENT": ("user_agent", str),
    "LINKUP_MAX_RETRIES": ("max_retries", int),
    "LINKUP_MIN_BACKOFF": ("min_backoff", float),
    "LINKUP_MAX_BACKOFF": ("max_backoff", float),
    "LINKUP_TIMEOUT": ("timeout", float),
}

_RETRY_KEYS = {"max_retries": "max_retries", "min_backoff": "min_delay", "max_backoff": "max_delay"}


@dataclass
class ClientConfig:
    """Settings for a LinkupClient.

    An empty api_key is accepted here; calls fail with ConfigurationError
    before any request is sent.
    """
    api_key: str = ""
    base_url: str = DEFAULT_BASE_URL
    user_agent: str = DEFAULT_USER_AGENT
    timeout: float = DEFAULT_TIMEOUT
    retry_policy: RetryPolicy = field(default_factory=RetryPolicy)
    transport: Optional[Transport] = field(default=None, repr=False)

    def __post_init__(self):
        self.base_url = (self.base_url or DEFAULT_BASE_URL).rstrip("/")
        if not self.user_agent:
            self.user_agent = DEFAULT_USER_AGENT
        if self.timeout <= 0:
            raise ConfigurationError(f"timeout must be > 0, got {self.timeout}")


def _from_yaml(config_file: Path) -> dict[str, Any]:
    if not config_file.exists():
        logger.debug(f"Config file not found: {config_file}")
        return {}

    try:
        with open(config_file, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ConfigurationError(f"Failed to parse config {config_file}: {e}") from e

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigurationError(
            f"Config file must be a YAML mapping, got {type(data).__name__}: {config_file}"
        )
    logger.debug(f"Loaded configuration from {config_file}")
    return data


def _from_env(environ: Mapping[str, str]) -> dict[str, Any]:
    values: dict[str, Any] = {}
    for name, (key, convert) in ENV_VARS.items():
        raw = environ.get(name)
        if raw is None or raw == "":
            continue
        try:
            values[key] = convert(raw)
        except ValueError:
            raise ConfigurationError(f"Invalid value for {name}: {raw!r}") from None
    return values


def load_config(
    config_file: Optional[Union[str, Path]] = None,
    environ: Optional[Mapping[str, str]] = None,
    **overrides: Any,
) -> ClientConfig:
    """Build a ClientConfig from file, environment and explicit overrides.

    Args:
        config_file: YAML file path. Defaults to DEFAULT_CONFIG_FILE.
        environ: Environment mapping. Defaults to os.environ.
        **overrides: Highest-priority values; None entries are ignored.

    Returns:
        Validated ClientConfig.

    Raises:
        ConfigurationError: On unparsable files, bad values or unknown keys.
    """
    config_file = Path(config_file) if config_file else DEFAULT_CONFIG_FILE
    environ = os.environ if environ is None else environ

    values: dict[str, Any] = {}
    values.update(_from_yaml(config_file))
    values.update(_from_env(environ))
    values.update({k: v for k, v in overrides.items() if v is not None})

    retry_args = {
        _RETRY_KEYS[k]: values.pop(k) for k in list(values) if k in _RETRY_KEYS
    }

    known = set(ClientConfig.__dataclass_fields__) - {"retry_policy"}
    unknown = set(values) - known
    if unknown:
        raise ConfigurationError(f"Unknown config keys: {', '.join(sorted(unknown))}")

    try:
        return ClientConfig(retry_policy=RetryPolicy(**retry_args), **values)
    except TypeError as e:
        raise ConfigurationError(f"Invalid configuration: {e}") from e
