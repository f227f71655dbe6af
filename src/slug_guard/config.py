"""
Slug Guard Configuration System.

This module provides a type-safe configuration system using Pydantic.
Settings can be loaded from:
1. Environment variables (prefixed with SLUG_GUARD_)
2. Config file (TOML or JSON)
3. CLI arguments (highest priority)

Example usage:
    from slug_guard.config import Settings

    # Load from environment
    settings = Settings()

    # Or with explicit values
    settings = Settings(
        database={"path": "blog.db"},
        slugs={"rollback_policy": "any_error"},
    )
"""

from __future__ import annotations

import json
import tomllib
from enum import Enum
from pathlib import Path
from typing import Any, Self

from pydantic import BaseModel, Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class RollbackPolicy(str, Enum):
    """Which validation failures roll back a speculative slug."""

    # Errors on the source field or the slug field only
    RELEVANT_FIELDS = "relevant_fields"
    # Any validation error at all
    ANY_ERROR = "any_error"


class SlugOptions(BaseModel):
    """Slug derivation settings."""

    source_field: str = Field(
        default="title",
        min_length=1,
        description="Field the slug is derived from",
    )
    slug_field: str = Field(
        default="slug",
        min_length=1,
        description="Field holding the slug (uniquely indexed)",
    )
    separator: str = Field(
        default="-",
        pattern=r"^[-_.]$",
        description="Word separator inside slugs",
    )
    max_length: int | None = Field(
        default=None,
        ge=8,
        le=255,
        description="Maximum slug length before the conflict suffix (None = unlimited)",
    )
    rollback_policy: RollbackPolicy = Field(
        default=RollbackPolicy.RELEVANT_FIELDS,
        description="Which validation errors roll back a speculative slug",
    )

    @model_validator(mode="after")
    def validate_fields_differ(self) -> Self:
        """The slug cannot be derived from itself."""
        if self.source_field == self.slug_field:
            raise ValueError("source_field and slug_field must differ")
        return self


class LoggingConfig(BaseModel):
    """Logging configuration."""

    level: str = Field(
        default="INFO",
        pattern="^(DEBUG|INFO|WARNING|ERROR|CRITICAL)$",
        description="Log level",
    )
    file: Path | None = Field(
        default=None,
        description="Log file path (None = console only)",
    )
    format: str = Field(
        default="rich",
        pattern="^(rich|json|simple)$",
        description="Log format: rich (colored), json, or simple",
    )
    max_file_size_mb: int = Field(
        default=10,
        ge=1,
        le=100,
        description="Max log file size before rotation",
    )
    backup_count: int = Field(
        default=3,
        ge=1,
        le=10,
        description="Number of rotated log files to keep",
    )
    slug_level: str | None = Field(
        default=None,
        pattern="^(DEBUG|INFO|WARNING|ERROR|CRITICAL)$",
        description="Level for slug regeneration/rollback events (None = same as level)",
    )


class DatabaseConfig(BaseModel):
    """Database location."""

    path: Path = Field(
        default=Path("blog.db"),
        description="Path to the SQLite database file",
    )
    table: str = Field(
        default="posts",
        pattern=r"^[A-Za-z_][A-Za-z0-9_]*$",
        description="Table holding posts",
    )


class Settings(BaseSettings):
    """
    Main settings class for Slug Guard.

    Settings are loaded in this priority (highest first):
    1. Explicit constructor arguments
    2. Environment variables (SLUG_GUARD_* prefix)
    3. Config file (if specified)
    4. Defaults

    Example:
        # From environment
        export SLUG_GUARD_DATABASE__PATH="posts.db"
        export SLUG_GUARD_SLUGS__ROLLBACK_POLICY="any_error"
        settings = Settings()

        # From config file
        settings = Settings.from_file("config.toml")
    """

    model_config = SettingsConfigDict(
        env_prefix="SLUG_GUARD_",
        env_nested_delimiter="__",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    slugs: SlugOptions = Field(default_factory=SlugOptions)
    database: DatabaseConfig = Field(default_factory=DatabaseConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    @classmethod
    def from_file(cls, path: Path | str) -> "Settings":
        """Load settings from a TOML or JSON config file."""
        path = Path(path)
        if not path.exists():
            raise FileNotFoundError(f"Config file not found: {path}")

        content = path.read_text()

        if path.suffix in (".toml", ".tml"):
            data = tomllib.loads(content)
        elif path.suffix == ".json":
            data = json.loads(content)
        else:
            raise ValueError(f"Unsupported config format: {path.suffix}")

        return cls.model_validate(data)

    def to_file(self, path: Path | str) -> None:
        """Save current settings to a config file."""
        path = Path(path)
        data = self.model_dump(mode="json", exclude_none=True)

        if path.suffix in (".toml", ".tml"):
            # Sections are flat models, so one level of tables is enough
            lines = []
            for key, value in data.items():
                if isinstance(value, dict):
                    lines.append(f"\n[{key}]")
                    for k, v in value.items():
                        lines.append(f"{k} = {json.dumps(v)}")
                else:
                    lines.append(f"{key} = {json.dumps(value)}")
            path.write_text("\n".join(lines).lstrip() + "\n")
        else:
            path.write_text(json.dumps(data, indent=2))


def load_settings(
    config_file: Path | str | None = None,
    **overrides: Any,
) -> Settings:
    """
    Load settings with optional config file and overrides.

    Args:
        config_file: Optional path to config file
        **overrides: Top-level sections to override (highest priority)

    Returns:
        Configured Settings instance
    """
    if config_file:
        settings = Settings.from_file(config_file)
        if overrides:
            data = settings.model_dump()
            for key, value in overrides.items():
                if isinstance(value, dict) and isinstance(data.get(key), dict):
                    data[key].update(value)
                else:
                    data[key] = value
            return Settings.model_validate(data)
        return settings
    return Settings(**overrides)
