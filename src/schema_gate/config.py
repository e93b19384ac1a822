"""Configuration management for schema-gate.

Settings come from two places, environment variables winning:
  1. SCHEMA_GATE_* environment variables
  2. $SCHEMA_GATE_CONFIG_DIR/config.json (default ~/.schema-gate/config.json)
"""

import json
import os
from pathlib import Path
from typing import Any, Literal, Optional

from loguru import logger
from pydantic import Field
from pydantic_settings import BaseSettings, PydanticBaseSettingsSource, SettingsConfigDict

from schema_gate.schema.objects import ExternalComposition, Project
from schema_gate.utils import setup_logging

CONFIG_FILE_NAME = "config.json"

# Module-level cache, cleared by tests
_CONFIG_CACHE: Optional["SchemaGateConfig"] = None


class SchemaGateConfig(BaseSettings):
    """Settings for schema validation runs."""

    log_level: Literal["TRACE", "DEBUG", "INFO", "WARNING", "ERROR"] = Field(
        default="INFO",
        description="Minimum level written to stderr",
    )
    accept_breaking_changes: bool = Field(
        default=False,
        description="Accept breaking changes unless the caller says otherwise",
    )
    external_composition_enabled: bool = Field(
        default=False,
        description="Compose through an external composition service",
    )
    external_composition_endpoint: str | None = Field(
        default=None,
        description="URL of the external composition service",
    )
    external_composition_secret: str | None = Field(
        default=None,
        description="Secret used to sign requests to the external composition service",
    )
    external_composition_timeout: float = Field(
        default=30.0,
        description="Timeout in seconds for external composition requests",
        gt=0,
    )

    model_config = SettingsConfigDict(
        env_prefix="SCHEMA_GATE_",
        extra="ignore",
    )

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        # Environment beats values passed in from the config file
        return env_settings, init_settings, dotenv_settings, file_secret_settings

    def project(self) -> Project:
        """Build the composition policy described by this config."""
        return Project(
            external_composition=ExternalComposition(
                enabled=self.external_composition_enabled,
                endpoint=self.external_composition_endpoint,
                secret=self.external_composition_secret,
            )
        )


class ConfigManager:
    """Loads and caches SchemaGateConfig."""

    def __init__(self) -> None:
        config_dir = os.getenv("SCHEMA_GATE_CONFIG_DIR")
        self.config_dir = Path(config_dir) if config_dir else Path.home() / ".schema-gate"
        self.config_file = self.config_dir / CONFIG_FILE_NAME

    @property
    def config(self) -> SchemaGateConfig:
        global _CONFIG_CACHE
        if _CONFIG_CACHE is None:
            _CONFIG_CACHE = self.load_config()
        return _CONFIG_CACHE

    def load_config(self) -> SchemaGateConfig:
        """Load config from file and environment, falling back to defaults on a bad file."""
        file_data: dict[str, Any] = {}
        if self.config_file.exists():
            try:
                file_data = json.loads(self.config_file.read_text(encoding="utf-8"))
            except (OSError, json.JSONDecodeError) as e:
                logger.warning(f"Ignoring unreadable config file {self.config_file}: {e}")
        return SchemaGateConfig(**file_data)

    def save_config(self, config: SchemaGateConfig) -> None:
        global _CONFIG_CACHE
        self.config_dir.mkdir(parents=True, exist_ok=True)
        self.config_file.write_text(config.model_dump_json(indent=2), encoding="utf-8")
        _CONFIG_CACHE = config


def init_cli_logging() -> None:
    """Initialize logging for CLI commands."""
    setup_logging(log_level=ConfigManager().config.log_level)
