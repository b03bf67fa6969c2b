"""Global settings data types."""

from dataclasses import dataclass, field
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class GlobalSettingDefinition(BaseModel):
    """Definition of a single global setting."""

    model_config = ConfigDict(frozen=True)

    key: str = Field(min_length=1)
    default_value: str = ""
    description: str = ""
    encrypted: bool = False
    required: bool = False
    group_id: Optional[str] = None


class GlobalSettingGroup(BaseModel):
    """Group of settings shown together in the admin UI."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(min_length=1)
    name: str
    description: Optional[str] = None
    icon: Optional[str] = None
    sort_order: int = 0


class GlobalSettingsModule(BaseModel):
    """A group together with the settings it defines."""

    model_config = ConfigDict(frozen=True)

    group: GlobalSettingGroup
    settings: list[GlobalSettingDefinition]


@dataclass
class InitializationResult:
    """Outcome of a non-destructive settings initialization."""

    total_modules: int = 0
    total_settings: int = 0
    created: int = 0
    skipped: int = 0
    created_settings: list[str] = field(default_factory=list)
    skipped_settings: list[str] = field(default_factory=list)


@dataclass
class ValidationResult:
    """Result of checking required settings."""

    valid: bool
    missing: list[str] = field(default_factory=list)
    groups: dict[str, dict] = field(default_factory=dict)
