"""Plugin descriptors, options and optional feature declarations."""

import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Awaitable, Callable, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator
from sqlalchemy import Column

from deploystack.global_settings.types import GlobalSettingDefinition, GlobalSettingGroup

SEMVER_PATTERN = re.compile(
    r"^(0|[1-9]\d*)\.(0|[1-9]\d*)\.(0|[1-9]\d*)"
    r"(?:-[0-9A-Za-z-]+(?:\.[0-9A-Za-z-]+)*)?"
    r"(?:\+[0-9A-Za-z-]+(?:\.[0-9A-Za-z-]+)*)?$"
)


class PluginMeta(BaseModel):
    """Static metadata identifying a plugin."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(min_length=1)
    name: str = Field(min_length=1)
    version: str
    description: str = ""
    author: Optional[str] = None

    @field_validator("id")
    @classmethod
    def id_has_no_whitespace(cls, value: str) -> str:
        """Plugin ids end up in URLs and table names."""
        if value != value.strip() or any(ch.isspace() for ch in value):
            raise ValueError("plugin id must not contain whitespace")
        return value

    @field_validator("version")
    @classmethod
    def version_is_semver(cls, value: str) -> str:
        """Require a semantic version string."""
        if not SEMVER_PATTERN.match(value):
            raise ValueError(f"'{value}' is not a semantic version")
        return value


class PluginOptions(BaseModel):
    """Per-plugin options supplied by the host."""

    enabled: bool = True
    config: dict[str, Any] = Field(default_factory=dict)


class PluginConfiguration(BaseModel):
    """Plugin search paths, factory references and per-plugin options."""

    paths: list[Path] = Field(default_factory=list)
    factories: list[Any] = Field(default_factory=list)
    plugins: dict[str, PluginOptions] = Field(default_factory=dict)


# Builds fresh Column objects each time a table is materialized
ColumnsFactory = Callable[[], list[Column]]
DatabaseInitHook = Callable[[Any], Union[Awaitable[None], None]]
RoutesHook = Callable[[Any, Any], Union[Awaitable[None], None]]


@dataclass(frozen=True)
class DatabaseExtension:
    """Tables contributed by a plugin.

    Attributes:
        table_definitions: Table name (without plugin prefix) -> columns factory
        on_database_init: Optional hook run once the tables exist
    """

    table_definitions: dict[str, ColumnsFactory] = field(default_factory=dict)
    on_database_init: Optional[DatabaseInitHook] = None


@dataclass(frozen=True)
class GlobalSettingsExtension:
    """Global settings groups and definitions contributed by a plugin."""

    groups: list[GlobalSettingGroup] = field(default_factory=list)
    settings: list[GlobalSettingDefinition] = field(default_factory=list)


@dataclass(frozen=True)
class PluginFeatures:
    """Optional capabilities a backend plugin declares.

    Attributes:
        routes: Called with (route_manager, db) after initialize
        database: Table definitions and database init hook
        global_settings: Settings groups and definitions
    """

    routes: Optional[RoutesHook] = None
    database: Optional[DatabaseExtension] = None
    global_settings: Optional[GlobalSettingsExtension] = None
