"""Configuration management for the sample data dump tool."""

from __future__ import annotations

import json
from pathlib import Path

from dotenv import load_dotenv
from pydantic import Field, ValidationError, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from sampledump.exceptions import ConfigurationError
from sampledump.models import TableConfiguration


class DumpSettings(BaseSettings):
    """Connection, storage and safety settings shared by every table."""

    model_config = SettingsConfigDict(
        env_file="config.env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # PostgreSQL connection
    pg_host: str = Field(default="localhost")
    pg_port: int = Field(default=5432, ge=1, le=65535)
    pg_database: str = Field(default="postgres")
    pg_user: str | None = Field(default=None)
    pg_password: str | None = Field(default=None)
    pg_connect_timeout_seconds: int = Field(default=30, ge=1, le=300)

    # Local dump files
    dump_directory: Path = Field(default=Path("data/sample_data_dump"))

    # Schema holding the lorem_ipsum(n) placeholder generator
    lorem_ipsum_function_schema: str = Field(default="public", min_length=1)

    # "production" disables loading dumps
    environment: str = Field(default="development")

    table_configurations_file: Path = Field(default=Path("sample_data_dump.json"))

    # Logging
    log_level: str = Field(default="INFO")

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        valid_levels = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        v = v.upper()
        if v not in valid_levels:
            raise ValueError(f"LOG_LEVEL must be one of {valid_levels}")
        return v

    @field_validator("environment")
    @classmethod
    def normalize_environment(cls, v: str) -> str:
        v = v.strip().lower()
        if not v:
            raise ValueError("ENVIRONMENT cannot be empty")
        return v

    @field_validator("lorem_ipsum_function_schema")
    @classmethod
    def strip_function_schema(cls, v: str) -> str:
        return v.strip()

    @property
    def is_production(self) -> bool:
        return self.environment == "production"

    @property
    def dsn(self) -> str:
        parts = [
            f"host={self.pg_host}",
            f"port={self.pg_port}",
            f"dbname={self.pg_database}",
            f"connect_timeout={self.pg_connect_timeout_seconds}",
        ]
        if self.pg_user:
            parts.append(f"user={self.pg_user}")
        if self.pg_password:
            parts.append(f"password={self.pg_password}")
        return " ".join(parts)


def get_settings() -> DumpSettings:
    """Load settings from environment."""
    try:
        load_dotenv("config.env")
        return DumpSettings()
    except Exception as e:
        raise ConfigurationError(f"Failed to load settings: {e}") from e


def load_table_configurations(path: Path) -> list[TableConfiguration]:
    """Read table configurations from a JSON file shaped ``{"tables": [...]}``."""
    if not path.exists():
        raise ConfigurationError("Table configurations file not found", details={"path": str(path)})

    try:
        document = json.loads(path.read_text(encoding="utf-8-sig"))
    except (OSError, ValueError) as e:
        raise ConfigurationError(
            "Table configurations file is not valid JSON",
            details={"path": str(path), "error": str(e)},
        ) from e

    entries = document.get("tables") if isinstance(document, dict) else None
    if not isinstance(entries, list):
        raise ConfigurationError(
            "Table configurations file must contain a 'tables' list",
            details={"path": str(path)},
        )

    configurations: list[TableConfiguration] = []
    for index, entry in enumerate(entries):
        try:
            configurations.append(TableConfiguration.model_validate(entry))
        except ValidationError as e:
            raise ConfigurationError(
                f"Invalid table configuration at index {index}",
                details={"path": str(path), "error": str(e)},
            ) from e
    return configurations
