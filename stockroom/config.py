"""
Configuration management for stockroom.

Loads and validates configuration from stockroom.toml files using Pydantic.
"""

from __future__ import annotations

import tomllib
from pathlib import Path
from typing import Optional

from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings, SettingsConfigDict

CONFIG_FILENAME = "stockroom.toml"


class DatabaseConfig(BaseModel):
    """Database connection configuration."""

    url: str = Field(
        default="postgresql://localhost/stockroom_local",
        description="PostgreSQL connection URL",
    )
    schema_name: str = Field(default="public", description="Schema holding the stockroom tables")
    backend: str = Field(
        default="direct", description="Storage backend ('direct' or 'staging')"
    )


class IdConfig(BaseModel):
    """Custom id configuration."""

    max_retries: int = Field(
        default=3, ge=1, description="Attempts before giving up on a colliding generated id"
    )


class LoggingConfig(BaseModel):
    """Logging configuration."""

    level: str = Field(default="INFO", description="Root log level")
    format: str = Field(
        default="%(asctime)s %(levelname)s %(name)s: %(message)s",
        description="Log record format",
    )


class Config(BaseSettings):
    """Main configuration for stockroom."""

    model_config = SettingsConfigDict(env_prefix="STOCKROOM_", env_nested_delimiter="__")

    database: DatabaseConfig = Field(default_factory=DatabaseConfig)
    ids: IdConfig = Field(default_factory=IdConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    @classmethod
    def from_toml(cls, path: Path | str) -> Config:
        """
        Load configuration from TOML file.

        Args:
            path: Path to stockroom.toml file

        Returns:
            Config instance

        Raises:
            FileNotFoundError: If config file doesn't exist
            ValueError: If config file is invalid
        """
        config_path = Path(path)
        if not config_path.exists():
            raise FileNotFoundError(f"Config file not found: {config_path}")

        with open(config_path, "rb") as f:
            data = tomllib.load(f)

        return cls(**data)

    @classmethod
    def find_and_load(cls, start_dir: Optional[Path] = None) -> Config:
        """
        Find and load configuration from stockroom.toml.

        Searches for stockroom.toml starting from start_dir and walking up
        parent directories until found or reaching filesystem root.

        Args:
            start_dir: Directory to start search (defaults to current directory)

        Returns:
            Config instance

        Raises:
            FileNotFoundError: If no config file found
        """
        if start_dir is None:
            start_dir = Path.cwd()

        current = Path(start_dir).resolve()

        while True:
            config_path = current / CONFIG_FILENAME
            if config_path.exists():
                return cls.from_toml(config_path)

            parent = current.parent
            if parent == current:
                break
            current = parent

        raise FileNotFoundError(
            f"No {CONFIG_FILENAME} found in {start_dir} or parent directories. "
            f"Run 'stockroom init' to create one."
        )

    def to_toml(self, path: Path | str) -> None:
        """
        Write configuration to TOML file.

        Args:
            path: Path to write stockroom.toml
        """
        config_path = Path(path)

        toml_content = f"""# Stockroom Configuration

[database]
url = "{self.database.url}"
schema_name = "{self.database.schema_name}"
backend = "{self.database.backend}"

[ids]
max_retries = {self.ids.max_retries}

[logging]
level = "{self.logging.level}"
format = "{self.logging.format}"
"""

        config_path.write_text(toml_content)

