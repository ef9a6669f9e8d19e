"""
Configuration management for Skeleton.

Hybrid configuration system using a YAML file and environment variables.
Priority: Environment variables > YAML config > Pydantic defaults

Environment variables use the SKELETON_ prefix with `.` translated to `_`
(e.g. listen.address -> SKELETON_LISTEN_ADDRESS).
"""

from pathlib import Path
from typing import List, Optional, Tuple

import yaml
from dotenv import load_dotenv
from pydantic import BaseModel, Field, ValidationError, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from skeleton import APP_NAME
from skeleton.domain.exceptions import ConfigurationError

ENV_PREFIX = f"{APP_NAME.upper()}_"

# Older config files name the JWT issuer list after the gin-jwt middleware
LEGACY_CONFIG_KEYS = {"ginjwt_auth": "jwt_auth"}


def parse_listen_address(address: str) -> Tuple[str, int]:
    """
    Split a `host:port` listen address.

    An empty host (":8000") binds all interfaces.

    Args:
        address: Listen address

    Returns:
        (host, port) tuple

    Raises:
        ValueError: If the address has no port or the port is out of range
    """
    host, sep, port = address.rpartition(":")
    if not sep:
        raise ValueError(f"listen address {address!r} must be host:port")

    try:
        port_number = int(port)
    except ValueError:
        raise ValueError(f"invalid port in listen address {address!r}") from None

    if not 0 <= port_number <= 65535:
        raise ValueError(f"port out of range in listen address {address!r}")

    host = host.strip("[]") or "0.0.0.0"
    return host, port_number


class JWTAuthConfig(BaseModel):
    """
    One accepted JWT issuer.

    Signing keys come either from a JWKS endpoint (asymmetric) or a
    shared secret (HMAC).
    """

    enabled: bool = True
    audience: str = Field(..., min_length=1)
    issuer: str = Field(..., min_length=1)
    jwks_uri: Optional[str] = None
    secret: Optional[str] = None
    algorithm: Optional[str] = None
    roles_claim: str = Field(default="scope", description="Claim holding scopes")
    username_claim: str = Field(default="sub", description="Claim naming the caller")

    @model_validator(mode="after")
    def check_key_source(self) -> "JWTAuthConfig":
        if self.enabled and not (self.jwks_uri or self.secret):
            raise ValueError("jwt auth config requires jwks_uri or secret")
        if self.algorithm is None:
            self.algorithm = "RS256" if self.jwks_uri else "HS256"
        return self


class Settings(BaseSettings):
    """
    Skeleton configuration schema.

    Loads configuration from:
    1. Environment variables (highest priority)
    2. YAML configuration file
    3. Pydantic defaults (lowest priority)
    """

    model_config = SettingsConfigDict(
        env_prefix=ENV_PREFIX,
        case_sensitive=False,
        extra="ignore",
    )

    # API Server
    listen_address: str = Field(
        default="",
        validate_default=True,
        description="host:port the API listens on (required)",
    )
    developer_mode: bool = Field(
        default=False,
        description="Verbose logging and framework debug mode",
    )

    # JWT Authentication (empty = auth disabled)
    jwt_auth: List[JWTAuthConfig] = Field(default_factory=list)

    # Metrics
    metrics_enabled: bool = Field(default=True)
    metrics_host: str = Field(default="0.0.0.0")
    metrics_port: int = Field(default=9090, ge=0, le=65535)

    # Timeouts (seconds)
    shutdown_timeout: float = Field(
        default=10.0,
        gt=0,
        description="Maximum seconds to drain in-flight requests on shutdown",
    )
    read_timeout: float = Field(default=10.0, gt=0)
    write_timeout: float = Field(default=20.0, gt=0)

    # Logging
    log_level: Optional[str] = Field(default=None)

    # Tracing
    tracing_enabled: bool = Field(default=False)
    tracing_exporter: str = Field(default="console")
    otlp_endpoint: Optional[str] = Field(default=None)

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls,
        init_settings,
        env_settings,
        dotenv_settings,
        file_secret_settings,
    ):
        # YAML values arrive as init kwargs; environment wins over them.
        return env_settings, dotenv_settings, init_settings, file_secret_settings

    @field_validator("listen_address")
    @classmethod
    def validate_listen_address(cls, v: str) -> str:
        """Require a parseable listen address."""
        v = v.strip()
        if not v:
            raise ValueError("no listen address set")
        parse_listen_address(v)
        return v

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: Optional[str]) -> Optional[str]:
        """Validate log level."""
        if v is None:
            return v
        allowed = ["debug", "info", "warning", "error", "critical"]
        v_lower = v.lower()
        if v_lower not in allowed:
            raise ValueError(f"Invalid log_level. Must be one of: {allowed}")
        return v_lower

    @field_validator("tracing_exporter")
    @classmethod
    def validate_tracing_exporter(cls, v: str) -> str:
        if v not in ("console", "otlp"):
            raise ValueError("tracing_exporter must be 'console' or 'otlp'")
        return v

    @model_validator(mode="after")
    def check_timeouts(self) -> "Settings":
        if self.write_timeout < self.read_timeout:
            raise ValueError("write_timeout must not be shorter than read_timeout")
        return self

    @property
    def listen_host(self) -> str:
        return parse_listen_address(self.listen_address)[0]

    @property
    def listen_port(self) -> int:
        return parse_listen_address(self.listen_address)[1]

    @property
    def effective_log_level(self) -> str:
        """Configured level, or debug/info depending on developer mode."""
        if self.log_level:
            return self.log_level
        return "debug" if self.developer_mode else "info"


def load_config(config_file: str, env_file: Optional[str] = None) -> Settings:
    """
    Load configuration from a YAML file and environment variables.

    Args:
        config_file: Path to the YAML config file
        env_file: Optional .env file loaded into the environment first

    Returns:
        Settings instance

    Raises:
        ConfigurationError: If the file cannot be read or values are invalid
    """
    path = Path(config_file)

    try:
        with open(path, "r") as f:
            loaded = yaml.safe_load(f)
    except OSError as e:
        raise ConfigurationError(f"opening config file {config_file}: {e}") from e
    except yaml.YAMLError as e:
        raise ConfigurationError(f"reading config {config_file}: {e}") from e

    if loaded is None:
        loaded = {}
    if not isinstance(loaded, dict):
        raise ConfigurationError(
            f"reading config {config_file}: top level must be a mapping"
        )

    for legacy, current in LEGACY_CONFIG_KEYS.items():
        if legacy not in loaded:
            continue
        if current in loaded:
            raise ConfigurationError(
                f"reading config {config_file}: both {legacy} and {current} are set"
            )
        loaded[current] = loaded.pop(legacy)

    if env_file:
        load_dotenv(env_file, override=False)

    try:
        return Settings(**loaded)
    except ValidationError as e:
        raise ConfigurationError(f"unmarshaling config: {e}") from e
