"""Configuration management using Pydantic.

Provides:
- Typed configuration models with validation
- YAML file loading with defaults
- Environment variable overrides
- Configuration initialization and display
"""

import os
from pathlib import Path
from typing import Optional

import yaml
from pydantic import BaseModel, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from fwapi.core.exceptions import ConfigurationError, FwapiError
from fwapi.core.validation import validate_port


# Default configuration path
DEFAULT_CONFIG_PATH = Path("/etc/fwapi/config.yaml")


class ServerConfig(BaseModel):
    """HTTP listener configuration."""

    host: str = "127.0.0.1"
    port: int = 8000

    @field_validator("port")
    @classmethod
    def validate_port(cls, v: int) -> int:
        try:
            return validate_port(v)
        except FwapiError as e:
            raise ValueError(e.message) from e


class FirewallConfig(BaseModel):
    """Packet-filter subsystem configuration."""

    ipv6: bool = False  # Drive ip6tables instead of iptables
    wait_for_lock: bool = True  # Pass -w so concurrent writers queue on the xtables lock
    command_timeout: int = 10  # seconds

    @field_validator("command_timeout")
    @classmethod
    def validate_timeout(cls, v: int) -> int:
        if v <= 0:
            raise ValueError("command_timeout must be a positive number of seconds")
        return v

    @property
    def binary(self) -> str:
        """Name of the iptables binary to run."""
        return "ip6tables" if self.ipv6 else "iptables"


class FwapiConfig(BaseModel):
    """Root configuration model loaded from /etc/fwapi/config.yaml."""

    server: ServerConfig = Field(default_factory=ServerConfig)
    firewall: FirewallConfig = Field(default_factory=FirewallConfig)

    @classmethod
    def load(cls, path: Path) -> "FwapiConfig":
        """Load configuration from YAML file.

        Args:
            path: Path to configuration file

        Returns:
            Loaded configuration

        Raises:
            ConfigurationError: If file not found or invalid
        """
        if not path.exists():
            raise ConfigurationError(
                f"Configuration file not found: {path}",
                hint="Create it with: fwapi config init",
            )

        try:
            with open(path) as f:
                data = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            raise ConfigurationError(
                f"Invalid YAML in configuration file: {path}",
                details=[str(e)],
            ) from e
        except PermissionError:
            raise ConfigurationError(
                f"Cannot read configuration file: {path}",
                hint="Check file permissions or run with sudo",
            )

        if not isinstance(data, dict):
            raise ConfigurationError(
                f"Configuration file must contain a mapping: {path}",
            )

        try:
            return cls(**data)
        except Exception as e:
            raise ConfigurationError(
                f"Invalid configuration: {e}",
                details=[str(e)],
            ) from e

    @classmethod
    def load_or_default(cls, path: Optional[Path] = None) -> "FwapiConfig":
        """Load configuration, falling back to defaults if file doesn't exist."""
        if path is None:
            path = DEFAULT_CONFIG_PATH

        if path.exists():
            return cls.load(path)
        return cls()

    def to_yaml(self) -> str:
        """Convert configuration to YAML string."""
        data = self.model_dump(exclude_none=True)
        return yaml.dump(data, default_flow_style=False, sort_keys=False)


class EnvOverrides(BaseSettings):
    """Settings overridden from environment variables.

    Values set here win over the configuration file.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        populate_by_name=True,
    )

    host: Optional[str] = Field(None, alias="FWAPI_HOST")
    port: Optional[int] = Field(None, alias="FWAPI_PORT")
    ipv6: Optional[bool] = Field(None, alias="FWAPI_IPV6")


class AppConfig:
    """Application configuration combining config file and environment.

    This is the main interface for accessing configuration throughout the app.
    """

    def __init__(
        self,
        config_path: Optional[Path] = None,
        config: Optional[FwapiConfig] = None,
    ) -> None:
        """Initialize application configuration.

        Args:
            config_path: Path to config file (uses default if None)
            config: Pre-loaded config (skips file loading if provided)
        """
        self.config_path = config_path or DEFAULT_CONFIG_PATH
        self._config = config or FwapiConfig.load_or_default(self.config_path)
        try:
            self._env = EnvOverrides()
        except Exception as e:
            raise ConfigurationError(
                f"Invalid environment override: {e}",
                hint="Check the FWAPI_HOST, FWAPI_PORT and FWAPI_IPV6 variables",
                details=[str(e)],
            ) from e
        self._apply_env()

    def _apply_env(self) -> None:
        server_updates = {}
        if self._env.host is not None:
            server_updates["host"] = self._env.host
        if self._env.port is not None:
            try:
                server_updates["port"] = validate_port(self._env.port)
            except FwapiError as e:
                raise ConfigurationError(
                    f"Invalid FWAPI_PORT: {e.message}",
                    hint="Use a port between 1 and 65535",
                ) from e
        if server_updates:
            self._config.server = self._config.server.model_copy(update=server_updates)
        if self._env.ipv6 is not None:
            self._config.firewall = self._config.firewall.model_copy(
                update={"ipv6": self._env.ipv6}
            )

    @property
    def config(self) -> FwapiConfig:
        """Get the effective configuration."""
        return self._config

    @property
    def server(self) -> ServerConfig:
        """Shortcut to server config."""
        return self._config.server

    @property
    def firewall(self) -> FirewallConfig:
        """Shortcut to firewall config."""
        return self._config.firewall


def get_example_config() -> str:
    """Generate example configuration file content."""
    return """# fwapi configuration
# Environment variables FWAPI_HOST, FWAPI_PORT and FWAPI_IPV6 override these values

# HTTP listener
server:
  host: 127.0.0.1  # Bind to 0.0.0.0 only behind an authenticating proxy
  port: 8000

# Packet-filter subsystem
firewall:
  ipv6: false  # true drives ip6tables instead of iptables
  wait_for_lock: true  # pass -w to wait for the xtables lock
  command_timeout: 10  # seconds per iptables invocation
"""


def init_config(path: Path, force: bool = False) -> None:
    """Initialize a new configuration file.

    Args:
        path: Path to create config file
        force: Overwrite if exists

    Raises:
        ConfigurationError: If file exists and force is False
    """
    if path.exists() and not force:
        raise ConfigurationError(
            f"Configuration file already exists: {path}",
            hint="Use --force to overwrite",
        )

    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(get_example_config())
    os.chmod(path, 0o600)
