"""Configuration models and loading.

Sources, lowest priority first:

1. model defaults
2. a TOML file (explicit path, ``./spanlab.toml`` or ``~/.spanlab.toml``)
3. ``SPANLAB_*`` environment variables
4. explicit overrides passed by the caller
"""

from __future__ import annotations

import os
import tomllib
from pathlib import Path
from typing import Any, Dict, Optional, Tuple

from pydantic import BaseModel, Field, ValidationError as PydanticValidationError, field_validator

from spanlab.errors import ConfigError

CONFIG_FILE_NAME = "spanlab.toml"
HOME_CONFIG_FILE_NAME = ".spanlab.toml"

SAMPLER_NAMES = ("always_on", "always_off", "ratio", "parent_based")


class TracingConfig(BaseModel):
    service_name: str = "Workshop App"
    service_version: str = "v1.0.0"
    shutdown_timeout: float = Field(default=10.0, gt=0)


class SamplingConfig(BaseModel):
    sampler: str = "always_on"
    ratio: float = Field(default=1.0, ge=0.0, le=1.0)

    @field_validator("sampler")
    @classmethod
    def _known_sampler(cls, value: str) -> str:
        value = value.strip().lower()
        if value not in SAMPLER_NAMES:
            raise ValueError(f"sampler must be one of {', '.join(SAMPLER_NAMES)}")
        return value


class ExportersConfig(BaseModel):
    enable_console: bool = True
    console_pretty: bool = True
    enable_otlp: bool = True
    endpoint: str = "localhost:4318"
    insecure: bool = True
    headers: Dict[str, str] = Field(default_factory=dict)
    timeout: float = Field(default=10.0, gt=0)

    @field_validator("endpoint")
    @classmethod
    def _endpoint_not_empty(cls, value: str) -> str:
        if not value or not value.strip():
            raise ValueError("endpoint must not be empty")
        return value.strip()


class ResourceConfig(BaseModel):
    attributes: Dict[str, str] = Field(default_factory=lambda: {"foo": "bar"})
    detect: bool = True


class LoggingConfig(BaseModel):
    debug: bool = False
    level: str = "INFO"


class SpanlabConfig(BaseModel):
    tracing: TracingConfig = Field(default_factory=TracingConfig)
    sampling: SamplingConfig = Field(default_factory=SamplingConfig)
    exporters: ExportersConfig = Field(default_factory=ExportersConfig)
    resource: ResourceConfig = Field(default_factory=ResourceConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)


# env var -> (section, key)
ENV_VARS: Dict[str, Tuple[str, str]] = {
    "SPANLAB_SERVICE_NAME": ("tracing", "service_name"),
    "SPANLAB_SERVICE_VERSION": ("tracing", "service_version"),
    "SPANLAB_SAMPLER": ("sampling", "sampler"),
    "SPANLAB_SAMPLE_RATIO": ("sampling", "ratio"),
    "SPANLAB_ENDPOINT": ("exporters", "endpoint"),
    "SPANLAB_INSECURE": ("exporters", "insecure"),
    "SPANLAB_ENABLE_CONSOLE": ("exporters", "enable_console"),
    "SPANLAB_ENABLE_OTLP": ("exporters", "enable_otlp"),
    "SPANLAB_DEBUG": ("logging", "debug"),
    "SPANLAB_LOG_LEVEL": ("logging", "level"),
}


def find_config_file() -> Optional[str]:
    """Return the first config file found in the cwd or home directory."""
    candidates = [
        Path.cwd() / CONFIG_FILE_NAME,
        Path.home() / HOME_CONFIG_FILE_NAME,
    ]
    for candidate in candidates:
        if candidate.is_file():
            return str(candidate)
    return None


def load_toml_config(path: str) -> Dict[str, Any]:
    """
    Load a TOML config file as a nested dict.

    Returns an empty dict when the file does not exist.

    Raises:
        ConfigError: the file is not valid TOML
    """
    config_path = Path(path)
    if not config_path.is_file():
        return {}
    try:
        with config_path.open("rb") as fh:
            return tomllib.load(fh)
    except tomllib.TOMLDecodeError as exc:
        raise ConfigError("invalid TOML in config file", {"path": path, "error": exc}) from exc


def load_env_config() -> Dict[str, Any]:
    """Collect ``SPANLAB_*`` variables into the nested config layout (raw strings)."""
    result: Dict[str, Any] = {}
    for env_name, (section, key) in ENV_VARS.items():
        value = os.getenv(env_name)
        if value is None or value == "":
            continue
        result.setdefault(section, {})[key] = value
    return result


def _deep_merge(base: Dict[str, Any], update: Dict[str, Any]) -> Dict[str, Any]:
    merged = dict(base)
    for key, value in update.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = _deep_merge(merged[key], value)
        else:
            merged[key] = value
    return merged


def load_config(
    config_file: Optional[str] = None,
    overrides: Optional[Dict[str, Any]] = None,
) -> SpanlabConfig:
    """
    Load configuration from all sources.

    An explicit ``config_file`` must exist; only the auto-discovered
    locations are optional.

    Raises:
        ConfigError: a source is missing, unreadable, or the merged values are invalid
    """
    if config_file and not Path(config_file).is_file():
        raise ConfigError("config file not found", {"path": config_file})
    path = config_file or find_config_file()
    data: Dict[str, Any] = load_toml_config(path) if path else {}
    data = _deep_merge(data, load_env_config())
    data = _deep_merge(data, overrides or {})
    try:
        return SpanlabConfig.model_validate(data)
    except PydanticValidationError as exc:
        raise ConfigError("invalid configuration", {"errors": exc.error_count(), "detail": exc}) from exc


def validate_config(
    config_file: Optional[str] = None,
    overrides: Optional[Dict[str, Any]] = None,
) -> Tuple[bool, str, Optional[SpanlabConfig]]:
    """Like load_config() but reports problems instead of raising."""
    try:
        config = load_config(config_file=config_file, overrides=overrides)
    except ConfigError as exc:
        return False, str(exc), None
    return True, "ok", config
