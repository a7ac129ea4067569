"""
Configuration management for cosmosrest.

Handles loading, validation, and access to client settings.
"""

import os
import re
import json
import logging
from pathlib import Path
from typing import Any, Callable, Dict, Optional, Tuple
from enum import Enum

import yaml
from pydantic import BaseModel, ConfigDict, Field, SecretStr, ValidationError, field_validator

from cosmosrest.auth.masterkey import Credentials
from cosmosrest.services.cosmosdb.constants import (
    DEFAULT_API_VERSION,
    DEFAULT_RETRY_ATTEMPTS,
    DEFAULT_RETRY_BACKOFF,
    DEFAULT_SERVICE_DOMAIN,
)

logger = logging.getLogger(__name__)

ENV_PREFIX = "COSMOSREST_"

_VERSION_PATTERN = re.compile(r"^\d+\.\d+\.\d+$")


class LogLevel(str, Enum):
    """Valid log levels."""
    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


class AccountConfig(BaseModel):
    """Account and credentials."""
    name: Optional[str] = None
    master_key: Optional[SecretStr] = Field(
        default=None,
        description="Base64 master key as shown in the portal"
    )
    connection_string: Optional[SecretStr] = Field(
        default=None,
        description="AccountEndpoint=...;AccountKey=...; (takes precedence over name/master_key)"
    )
    service_domain: str = DEFAULT_SERVICE_DOMAIN
    endpoint: Optional[str] = Field(
        default=None,
        description="Explicit base address, e.g. https://localhost:8081/ for the emulator"
    )

    def credentials(self) -> Credentials:
        """
        Build credentials from the configured secrets.

        Raises:
            ValueError: If neither a connection string nor name and key are set
        """
        if self.connection_string is not None:
            credentials = Credentials.from_connection_string(self.connection_string.get_secret_value())
            if self.endpoint:
                credentials = Credentials(credentials.account_name, credentials.master_key, self.endpoint)
            return credentials

        if not self.name or self.master_key is None:
            raise ValueError("Account name and master key (or a connection string) are required")

        return Credentials.from_base64(self.name, self.master_key.get_secret_value(), endpoint=self.endpoint)


class HTTPConfig(BaseModel):
    """HTTP transport configuration."""
    timeout: float = Field(default=30.0, ge=0.0, description="Request timeout in seconds")
    verify_tls: bool = True
    api_version: str = DEFAULT_API_VERSION


class RetryConfig(BaseModel):
    """Precondition-failed retry configuration."""
    max_attempts: int = Field(default=DEFAULT_RETRY_ATTEMPTS, ge=1)
    backoff_seconds: float = Field(
        default=DEFAULT_RETRY_BACKOFF,
        ge=0.0,
        description="Delay multiplied by the attempt index between attempts"
    )


class CodecSettings(BaseModel):
    """Response decoding configuration."""
    strict_required_fields: bool = True


class LoggingConfig(BaseModel):
    """Logging configuration."""
    level: LogLevel = LogLevel.WARNING
    format: str = "text"
    file: Optional[str] = None
    rotation_size: str = "10MB"
    rotation_count: int = 5
    module_levels: Optional[Dict[str, str]] = Field(
        default=None,
        description="Per-module log levels, e.g., {'cosmosrest.services.cosmosdb.dispatcher': 'DEBUG'}"
    )


class CosmosRestConfig(BaseModel):
    """Main cosmosrest configuration schema."""

    version: str = Field(default="0.1.0", description="Configuration version")

    account: AccountConfig = Field(default_factory=AccountConfig)

    http: HTTPConfig = Field(default_factory=HTTPConfig)

    retry: RetryConfig = Field(default_factory=RetryConfig)

    codec: CodecSettings = Field(default_factory=CodecSettings)

    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    @field_validator("version")
    @classmethod
    def validate_version(cls, v: str) -> str:
        if not _VERSION_PATTERN.match(v):
            raise ValueError(f"Version must be numeric x.y.z, got {v!r}")
        return v

    model_config = ConfigDict(use_enum_values=True)


def _as_bool(value: str) -> bool:
    return value.strip().lower() in ("true", "1", "yes", "on")


# COSMOSREST_<NAME> -> (section, field, converter)
ENV_VARS: Dict[str, Tuple[str, str, Callable[[str], Any]]] = {
    "ACCOUNT": ("account", "name", str),
    "MASTER_KEY": ("account", "master_key", str),
    "CONNECTION_STRING": ("account", "connection_string", str),
    "ENDPOINT": ("account", "endpoint", str),
    "SERVICE_DOMAIN": ("account", "service_domain", str),
    "API_VERSION": ("http", "api_version", str),
    "TIMEOUT": ("http", "timeout", float),
    "VERIFY_TLS": ("http", "verify_tls", _as_bool),
    "RETRY_ATTEMPTS": ("retry", "max_attempts", int),
    "LOG_LEVEL": ("logging", "level", str.upper),
    "LOG_FILE": ("logging", "file", str),
}


def deep_merge(base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
    """Merge override into a copy of base, descending into nested sections."""
    merged = dict(base)
    for key, value in override.items():
        current = merged.get(key)
        if isinstance(current, dict) and isinstance(value, dict):
            merged[key] = deep_merge(current, value)
        else:
            merged[key] = value
    return merged


class ConfigManager:
    """
    Loads cosmosrest settings from layered sources.

    Configuration precedence (highest to lowest):
    1. CLI arguments
    2. Environment variables (COSMOSREST_*)
    3. Configuration file (YAML/JSON)
    4. Defaults
    """

    def __init__(self):
        self._config: Optional[CosmosRestConfig] = None
        self._config_file: Optional[Path] = None

    def load(
        self,
        config_file: Optional[str] = None,
        cli_overrides: Optional[Dict[str, Any]] = None
    ) -> CosmosRestConfig:
        """
        Build and validate the configuration.

        Args:
            config_file: YAML (.yaml/.yml) or JSON file
            cli_overrides: Nested dict of values given on the command line

        Returns:
            Validated configuration

        Raises:
            ValidationError: If a value is invalid
            FileNotFoundError: If config_file does not exist
            ValueError: If the file format is not supported
        """
        layers = []
        if config_file:
            layers.append(("file", self._read_file(Path(config_file))))
            self._config_file = Path(config_file)
        layers.append(("environment", self._read_env()))
        layers.append(("command line", cli_overrides or {}))

        merged: Dict[str, Any] = {}
        for source, values in layers:
            if values:
                logger.debug(f"Applying {source} settings: {', '.join(sorted(values))}")
                merged = deep_merge(merged, values)

        try:
            self._config = CosmosRestConfig(**merged)
        except ValidationError as e:
            logger.error(f"Configuration validation failed: {e}")
            raise

        # SecretStr fields dump as '**********'
        logger.debug(f"Active configuration: {json.dumps(self._config.model_dump(mode='json'))}")
        return self._config

    def _read_file(self, path: Path) -> Dict[str, Any]:
        if not path.exists():
            raise FileNotFoundError(f"Configuration file not found: {path}")

        with open(path, 'r') as f:
            if path.suffix in ('.yaml', '.yml'):
                data = yaml.safe_load(f)
            elif path.suffix == '.json':
                data = json.load(f)
            else:
                raise ValueError(f"Unsupported config file format: {path.suffix}")

        logger.info(f"Loaded configuration from file: {path}")
        return data or {}

    def _read_env(self) -> Dict[str, Any]:
        """Collect COSMOSREST_* variables into nested sections."""
        values: Dict[str, Any] = {}
        for name, (section, field_name, convert) in ENV_VARS.items():
            raw = os.getenv(f"{ENV_PREFIX}{name}")
            if raw:
                values.setdefault(section, {})[field_name] = convert(raw)
        return values

    def get_config(self) -> CosmosRestConfig:
        """
        Get the loaded configuration.

        Raises:
            RuntimeError: If load() has not been called
        """
        if self._config is None:
            raise RuntimeError("Configuration not loaded. Call load() first.")
        return self._config

    def reload(self) -> CosmosRestConfig:
        """Load again from the same file and the current environment."""
        return self.load(config_file=str(self._config_file) if self._config_file else None)
