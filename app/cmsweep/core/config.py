"""Application configuration and settings.

This module provides the configuration model and I/O functions for
cmsweep. Configuration is stored in ~/.config/cmsweep/config.toml and
controls scan concurrency, API timeouts and the protection policy.

Example config.toml::

    workers = 5
    request_timeout = 30

    [protection]
    extend_defaults = true
    names = ["legacy-settings"]
    prefixes = ["vault-"]
    namespaces = ["platform"]
"""

import logging
import os
import tomllib
from pathlib import Path
from tempfile import NamedTemporaryFile
from typing import Annotated

import tomli_w
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from cmsweep.core.paths import get_config_path
from cmsweep.core.protected import (
    PROTECTED_NAMES,
    PROTECTED_NAMESPACES,
    PROTECTED_PREFIXES,
    ProtectionPolicy,
)

logger = logging.getLogger(__name__)

DEFAULT_WORKERS = 5
DEFAULT_REQUEST_TIMEOUT = 30


class ProtectionConfig(BaseModel):
    """Protection policy overrides.

    Attributes:
        extend_defaults: If True, the lists below are added to the built-in
            lists. If False, they replace them.
        names: Exact protected ConfigMap names.
        prefixes: Protected ConfigMap name prefixes.
        namespaces: Namespaces whose ConfigMaps are all protected.
    """

    model_config = ConfigDict(extra="forbid")

    extend_defaults: bool = True
    names: list[str] = Field(default_factory=list)
    prefixes: list[str] = Field(default_factory=list)
    namespaces: list[str] = Field(default_factory=list)

    @field_validator("names", "prefixes", "namespaces")
    @classmethod
    def reject_blank_entries(cls, v: list[str]) -> list[str]:
        """Reject empty strings; an empty prefix would protect everything."""
        cleaned = [item.strip() for item in v]
        if any(not item for item in cleaned):
            msg = "entries cannot be empty"
            raise ValueError(msg)
        return cleaned

    def to_policy(self) -> ProtectionPolicy:
        """Build the effective protection policy.

        Returns:
            ProtectionPolicy with built-in defaults merged or replaced.
        """
        if self.extend_defaults:
            names = (*PROTECTED_NAMES, *self.names)
            prefixes = (*PROTECTED_PREFIXES, *self.prefixes)
            namespaces = (*PROTECTED_NAMESPACES, *self.namespaces)
        else:
            names, prefixes, namespaces = (
                tuple(self.names),
                tuple(self.prefixes),
                tuple(self.namespaces),
            )
        return ProtectionPolicy(
            names=frozenset(names),
            prefixes=tuple(dict.fromkeys(prefixes)),
            namespaces=frozenset(namespaces),
        )


class AppConfig(BaseModel):
    """Configuration for cmsweep.

    Attributes:
        workers: Maximum number of namespaces scanned concurrently.
        request_timeout: Timeout in seconds for each Kubernetes API call.
        protection: Protection policy overrides.
    """

    model_config = ConfigDict(extra="forbid")

    workers: Annotated[
        int,
        Field(ge=1, le=64, description="Concurrent namespace scans (1-64)"),
    ] = DEFAULT_WORKERS
    request_timeout: Annotated[
        int,
        Field(ge=1, le=600, description="API request timeout in seconds (1-600)"),
    ] = DEFAULT_REQUEST_TIMEOUT
    protection: ProtectionConfig = Field(default_factory=ProtectionConfig)

    def protection_policy(self) -> ProtectionPolicy:
        """Return the effective protection policy."""
        return self.protection.to_policy()


class ConfigError(Exception):
    """Base exception for configuration errors."""


class ConfigNotFoundError(ConfigError):
    """Raised when an explicitly requested config file is not found."""


class ConfigParseError(ConfigError):
    """Raised when the config file cannot be parsed."""


def load_config(path: Path | None = None) -> AppConfig:
    """Load configuration from a TOML file.

    A missing file at the default location yields the default
    configuration. A missing file at an explicitly given path is an error.

    Args:
        path: Path to the config file. If None, uses the default config path.

    Returns:
        Validated AppConfig object.

    Raises:
        ConfigNotFoundError: If an explicit config file doesn't exist.
        ConfigParseError: If the TOML syntax is invalid.
        ConfigError: If the content doesn't match the schema.
    """
    config_path = path or get_config_path()

    if not config_path.exists():
        if path is not None:
            raise ConfigNotFoundError(f"Config file not found: {config_path}")
        logger.debug("No config file at %s, using defaults", config_path)
        return AppConfig()

    try:
        with open(config_path, "rb") as f:
            data = tomllib.load(f)
    except tomllib.TOMLDecodeError as e:
        raise ConfigParseError(f"Invalid TOML syntax in {config_path}: {e}") from e
    except OSError as e:
        raise ConfigError(f"Failed to read config: {e}") from e

    try:
        config = AppConfig.model_validate(data)
    except (ValueError, ValidationError) as e:
        raise ConfigError(f"Invalid config content in {config_path}: {e}") from e

    logger.debug("Loaded config from %s", config_path)
    return config


def save_config(config: AppConfig, path: Path | None = None) -> Path:
    """Save configuration to a TOML file.

    The file is written atomically by first writing to a temporary file
    and then using os.replace() for atomic rename.

    Args:
        config: The AppConfig object to save.
        path: Path to save the config. If None, uses the default config path.

    Returns:
        Path where the config was saved.

    Raises:
        ConfigError: If the file cannot be written.
    """
    config_path = path or get_config_path()

    tmp_path: Path | None = None
    try:
        config_path.parent.mkdir(parents=True, exist_ok=True)
        with NamedTemporaryFile(
            mode="wb",
            dir=config_path.parent,
            delete=False,
            suffix=".tmp",
        ) as f:
            tmp_path = Path(f.name)
            tomli_w.dump(config.model_dump(), f)
        # os.replace() is atomic on POSIX
        os.replace(str(tmp_path), str(config_path))
    except OSError as e:
        if tmp_path is not None and tmp_path.exists():
            tmp_path.unlink()
        raise ConfigError(f"Failed to write config: {e}") from e

    return config_path
