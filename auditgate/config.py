"""Configuration management for auditgate."""

from pathlib import Path
from typing import Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from .models.issues import AUDIT_DOMAINS


class Settings(BaseSettings):
    """auditgate configuration settings."""

    model_config = SettingsConfigDict(
        env_prefix="AUDITGATE_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Environment
    env: str = Field(default="dev", description="Environment: dev, prod")

    # Logging Configuration
    log_level: str = Field(default="WARNING", description="Logging level")
    log_format: str = Field(
        default="console",
        description="Log format: json, console"
    )

    # Validation Configuration
    audit_domain: Optional[str] = Field(
        default=None,
        description="Default audit domain: accessibility, security, architecture"
    )
    strict_fields: bool = Field(
        default=False,
        description="Reject records carrying keys outside the issue schema"
    )
    source_root: Optional[Path] = Field(
        default=None,
        description="Codebase root used to resolve file:line locations"
    )

    # Export Configuration
    export_indent: int = Field(
        default=2,
        description="JSON indentation for exported issue lists"
    )

    @field_validator("audit_domain")
    @classmethod
    def _check_domain(cls, value: Optional[str]) -> Optional[str]:
        if value is not None and value not in AUDIT_DOMAINS:
            raise ValueError(
                f"audit_domain must be one of {', '.join(AUDIT_DOMAINS)}"
            )
        return value


# Global settings instance
_settings: Optional[Settings] = None


def get_settings() -> Settings:
    """Get the global settings instance."""
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings


def reset_settings() -> None:
    """Reset the global settings instance (for testing)."""
    global _settings
    _settings = None
