"""Helpers for loading client settings.

A fresh ClientConfig is built on every call: defaults first, then the YAML
file (when present), then ``IMDS_*`` environment variables.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Any, Dict, Mapping, Optional

import yaml

from .commands import IPVersion

logger = logging.getLogger("ec2-imds-config")

DEFAULT_CONFIG_PATH = "config/imds.yaml"
DEFAULT_TOKEN_TTL = 21600  # 6 hours, the longest the service grants
DEFAULT_API_VERSION = "latest"
DEFAULT_TIMEOUT_SECONDS = 2.0

ENV_OVERRIDES = {
    "IMDS_IP_VERSION": "ip_version",
    "IMDS_TOKEN_TTL": "token_ttl",
    "IMDS_API_VERSION": "api_version",
    "IMDS_TIMEOUT_SECONDS": "timeout",
}


@dataclass(frozen=True)
class ClientConfig:
    ip_version: IPVersion = IPVersion.IPV4
    token_ttl: int = DEFAULT_TOKEN_TTL
    api_version: str = DEFAULT_API_VERSION
    timeout: float = DEFAULT_TIMEOUT_SECONDS


def _coerce(values: Mapping[str, Any]) -> Dict[str, Any]:
    coerced: Dict[str, Any] = {}
    for key, value in values.items():
        if key == "ip_version":
            coerced[key] = IPVersion.parse(value)
        elif key == "token_ttl":
            coerced[key] = int(value)
        elif key == "timeout":
            coerced[key] = float(value)
        elif key == "api_version":
            coerced[key] = str(value)
        else:
            raise ValueError(f"Unknown configuration key '{key}'")
    return coerced


def _read_config_file(config_path: Path) -> Dict[str, Any]:
    if not config_path.exists():
        logger.debug("No configuration file at %s; using defaults", config_path)
        return {}

    with config_path.open() as f:
        data = yaml.safe_load(f)

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ValueError(f"Configuration file {config_path} must contain a mapping")
    logger.debug("Loaded configuration from %s", config_path)
    return data


def load_config(
    *,
    config_path: str = DEFAULT_CONFIG_PATH,
    environ: Optional[Mapping[str, str]] = None,
) -> ClientConfig:
    """Build a new ClientConfig from the file and environment."""

    if environ is None:
        environ = os.environ

    config = ClientConfig()
    file_values = _read_config_file(Path(config_path).expanduser())
    config = replace(config, **_coerce(file_values))

    env_values = {
        field: environ[variable] for variable, field in ENV_OVERRIDES.items() if variable in environ
    }
    return replace(config, **_coerce(env_values))
