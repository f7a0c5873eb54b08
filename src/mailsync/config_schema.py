"""Pydantic configuration schema for mailsync.

This module defines the configuration schema that mirrors config.yaml structure.
All configuration is validated against these models when it is loaded.

Usage:
    from mailsync.config_schema import AppConfig

    config = AppConfig(**yaml_data)
"""

from typing import Literal

from pydantic import BaseModel, Field, field_validator

# Current schema version - increment when adding new required fields
CURRENT_SCHEMA_VERSION = 1

DEFAULT_BACKEND_URL = "http://localhost:8000"


class ServiceConfig(BaseModel):
    """Remote mail service connection settings."""

    base_url: str = Field(
        default=DEFAULT_BACKEND_URL,
        description="Base address of the mail backend (scheme and host, no trailing path)",
    )
    timeout_seconds: float = Field(
        default=30.0,
        gt=0,
        le=300,
        description="Per-request transport timeout in seconds",
    )

    @field_validator("base_url")
    @classmethod
    def validate_base_url(cls, v: str) -> str:
        """Require an http(s) URL and strip any trailing slash."""
        if not v or not v.strip():
            raise ValueError("Base URL cannot be empty")
        if not v.startswith(("http://", "https://")):
            raise ValueError("Base URL must start with http:// or https://")
        return v.rstrip("/")


class AuthConfig(BaseModel):
    """Where the session bearer token comes from."""

    token_env_var: str = Field(
        default="MAILSYNC_TOKEN",
        description="Environment variable holding the bearer token",
    )

    @field_validator("token_env_var")
    @classmethod
    def validate_token_env_var(cls, v: str) -> str:
        if not v or not v.strip():
            raise ValueError("Token environment variable name cannot be empty")
        return v.strip()


class LoggingConfig(BaseModel):
    """Log output settings."""

    level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = Field(
        default="INFO",
        description="Minimum log level",
    )
    json_output: bool = Field(
        default=True,
        description="Emit JSON lines; False for the human-readable console renderer",
    )


class AppConfig(BaseModel):
    """Root configuration model."""

    schema_version: int = Field(default=CURRENT_SCHEMA_VERSION, ge=1)
    service: ServiceConfig = Field(default_factory=ServiceConfig)
    auth: AuthConfig = Field(default_factory=AuthConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)
