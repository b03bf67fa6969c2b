"""Application configuration using pydantic-settings."""

from functools import lru_cache
from pathlib import Path
from typing import Any, Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        populate_by_name=True,
    )

    # Application
    app_name: str = Field(default="deploystack", alias="APP_NAME")
    app_env: str = Field(default="development", alias="APP_ENV")
    debug: bool = Field(default=False, alias="DEBUG")
    log_level: str = Field(default="INFO", alias="LOG_LEVEL")

    # API
    api_host: str = Field(default="0.0.0.0", alias="API_HOST")
    api_port: int = Field(default=3000, alias="API_PORT")

    # Database
    database_url: Optional[str] = Field(default=None, alias="DATABASE_URL")
    persistent_data_dir: Path = Field(default=Path("persistent_data"), alias="PERSISTENT_DATA_DIR")
    sqlite_db_path: Path = Field(
        default=Path("persistent_data/database/deploystack.db"),
        alias="SQLITE_DB_PATH",
    )

    # Plugins
    plugins_path: list[Path] = Field(default_factory=lambda: [Path("plugins")], alias="PLUGINS_PATH")
    plugin_factories: list[str] = Field(default_factory=list, alias="PLUGIN_FACTORIES")
    plugin_options: dict[str, dict[str, Any]] = Field(default_factory=dict, alias="PLUGIN_OPTIONS")
    ui_plugin_options: dict[str, dict[str, Any]] = Field(
        default_factory=dict, alias="UI_PLUGIN_OPTIONS"
    )

    # Security
    encryption_secret: str = Field(
        default="fallback-secret-key-change-in-production-immediately",
        alias="DEPLOYSTACK_ENCRYPTION_SECRET",
    )

    @property
    def db_selection_file(self) -> Path:
        """Path of the persisted database selection."""
        return self.persistent_data_dir / "db.selection.json"

    @property
    def is_development(self) -> bool:
        """Check if running in development mode."""
        return self.app_env != "production"


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
