"""
Configuration loading.

Settings are merged from, lowest to highest precedence:

1. An optional YAML file (``~/.tfc-ops.yaml`` or an explicit path)
2. The Terraform CLI credentials file (``~/.terraform.d/credentials.tfrc.json``)
3. Environment variables (``ATLAS_TOKEN``, ``ATLAS_TOKEN_DESTINATION``,
   ``TFC_OPS_DEBUG``, ``TFC_OPS_HOSTNAME``)
4. Command-line flags

Example ``~/.tfc-ops.yaml``::

    hostname: app.terraform.io
    organization: acme
    page_size: 50
"""

from __future__ import annotations

import json
import logging
import os
from pathlib import Path
from typing import Any, Dict, Mapping, Optional

import yaml
from pydantic import Field, ValidationError

from tfcops.context import DEFAULT_HOSTNAME, DEFAULT_PAGE_SIZE, ClientContext
from tfcops.errors import ConfigurationError
from tfcops.models.base import BaseOpsModel

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = Path("~/.tfc-ops.yaml")
CREDENTIALS_PATH = Path("~/.terraform.d/credentials.tfrc.json")

ENV_TOKEN = "ATLAS_TOKEN"
ENV_DESTINATION_TOKEN = "ATLAS_TOKEN_DESTINATION"
ENV_DEBUG = "TFC_OPS_DEBUG"
ENV_HOSTNAME = "TFC_OPS_HOSTNAME"


class OpsSettings(BaseOpsModel):
    """Resolved tfc-ops settings."""

    hostname: str = DEFAULT_HOSTNAME
    token: Optional[str] = Field(default=None, repr=False)
    destination_token: Optional[str] = Field(default=None, repr=False)
    organization: Optional[str] = None
    page_size: int = Field(default=DEFAULT_PAGE_SIZE, ge=1, le=100)
    debug: bool = False
    read_only: bool = False

    def require_token(self) -> str:
        if not self.token:
            raise ConfigurationError(
                f"No API token found. Set {ENV_TOKEN} or run 'terraform login {self.hostname}'."
            )
        return self.token

    def context(self) -> ClientContext:
        """Client context for the source account."""
        return ClientContext(
            token=self.require_token(),
            hostname=self.hostname,
            read_only=self.read_only,
            debug=self.debug,
            page_size=self.page_size,
        )

    def destination_context(self) -> ClientContext:
        """Client context for the destination account of a cross-account clone."""
        source = self.context()
        if not self.destination_token:
            logger.info(f"{ENV_DESTINATION_TOKEN} not set, using the source token for the destination account")
            return source
        return source.for_token(self.destination_token)


def _env_flag(value: Optional[str]) -> Optional[bool]:
    if value is None or value == "":
        return None
    return value.strip().lower() in ("1", "true", "yes", "on")


def load_yaml_config(path: Path) -> Dict[str, Any]:
    """
    Read a YAML settings file.

    Raises:
        ConfigurationError: If the file cannot be read or is not a YAML mapping
    """
    try:
        with open(path, "r") as f:
            data = yaml.safe_load(f)
    except (OSError, yaml.YAMLError) as e:
        raise ConfigurationError(f"Cannot read {path}: {e}") from e
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigurationError(f"Config file {path} must contain a mapping")
    logger.debug(f"Loaded settings from {path}")
    return data


def load_credentials_token(hostname: str, path: Path = CREDENTIALS_PATH) -> Optional[str]:
    """
    Token stored by ``terraform login`` for ``hostname``, if any.

    Raises:
        ConfigurationError: If the file exists but cannot be read as JSON
    """
    path = path.expanduser()
    if not path.exists():
        return None
    try:
        with open(path, "r") as f:
            data = json.load(f)
    except (OSError, ValueError) as e:
        raise ConfigurationError(f"Cannot read {path}: {e}") from e
    if not isinstance(data, dict):
        raise ConfigurationError(f"Cannot read {path}: expected a JSON object")
    token = (data.get("credentials") or {}).get(hostname, {}).get("token")
    if token:
        logger.debug(f"Using token for {hostname} from {path}")
    return token


def load_settings(
    config_path: Optional[Path] = None,
    overrides: Optional[Mapping[str, Any]] = None,
    environ: Optional[Mapping[str, str]] = None,
    credentials_path: Path = CREDENTIALS_PATH,
) -> OpsSettings:
    """
    Merge every settings source into an OpsSettings.

    Args:
        config_path: Explicit YAML file; must exist when given
        overrides: Values from command-line flags; None values are ignored
        environ: Environment to read (defaults to ``os.environ``)
        credentials_path: Terraform CLI credentials file

    Raises:
        ConfigurationError: If the config file is missing or invalid
    """
    env = os.environ if environ is None else environ
    values: Dict[str, Any] = {}

    if config_path is not None:
        path = Path(config_path).expanduser()
        if not path.exists():
            raise ConfigurationError(f"Config file not found: {path}")
        values.update(load_yaml_config(path))
    else:
        default = DEFAULT_CONFIG_PATH.expanduser()
        if default.exists():
            values.update(load_yaml_config(default))

    if env.get(ENV_HOSTNAME):
        values["hostname"] = env[ENV_HOSTNAME]
    if overrides and overrides.get("hostname"):
        values["hostname"] = overrides["hostname"]

    if not values.get("token"):
        token = load_credentials_token(values.get("hostname", DEFAULT_HOSTNAME), credentials_path)
        if token:
            values["token"] = token

    if env.get(ENV_TOKEN):
        values["token"] = env[ENV_TOKEN]
    if env.get(ENV_DESTINATION_TOKEN):
        values["destination_token"] = env[ENV_DESTINATION_TOKEN]
    debug = _env_flag(env.get(ENV_DEBUG))
    if debug is not None:
        values["debug"] = debug

    for key, value in (overrides or {}).items():
        if value is not None:
            values[key] = value

    try:
        return OpsSettings.model_validate(values)
    except ValidationError as e:
        raise ConfigurationError(f"Invalid settings: {e}") from e
