"""Database-backed global settings service."""

import json
import math
import re
from typing import Any, Iterable, Optional

from pydantic import AnyUrl, TypeAdapter, ValidationError
from sqlalchemy import select

from deploystack.core.config import get_settings
from deploystack.core.exceptions import ConfigurationException, DatabaseNotConfiguredError
from deploystack.core.logging import get_logger
from deploystack.global_settings.encryption import SettingsCipher
from deploystack.global_settings.registry import GlobalSettingsRegistry
from deploystack.global_settings.types import (
    GlobalSettingGroup,
    InitializationResult,
    ValidationResult,
)
from deploystack.storage.database.base import Database
from deploystack.storage.database.models import GlobalSettingGroupModel, GlobalSettingModel

logger = get_logger(__name__)

TRUE_VALUES = frozenset({"true", "1", "yes", "on", "enabled"})
FALSE_VALUES = frozenset({"false", "0", "no", "off", "disabled"})
EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
_url_adapter = TypeAdapter(AnyUrl)


class GlobalSettingsService:
    """Reads and writes global settings.

    The service exists before a database does; it is bound once the
    database comes up and raises ``DatabaseNotConfiguredError`` until then.
    Values of settings flagged encrypted are stored sealed and returned
    in plain text.
    """

    def __init__(self, db: Optional[Database] = None, cipher: Optional[SettingsCipher] = None) -> None:
        self._db = db
        self._cipher = cipher or SettingsCipher(get_settings().encryption_secret)

    def bind(self, db: Optional[Database]) -> None:
        """Attach (or detach) the database."""
        self._db = db

    @property
    def is_available(self) -> bool:
        """Whether a database is bound."""
        return self._db is not None

    def _require_db(self) -> Database:
        if self._db is None:
            raise DatabaseNotConfiguredError()
        return self._db

    def _value_of(self, setting: GlobalSettingModel) -> str:
        if setting.is_encrypted and setting.value:
            return self._cipher.decrypt(setting.value)
        return setting.value

    async def get(self, key: str, default: Optional[str] = None) -> Optional[str]:
        """Get a setting value.

        Args:
            key: Setting key
            default: Returned when the setting does not exist

        Returns:
            Stored (decrypted) value or default

        Raises:
            SettingsEncryptionError: If an encrypted value cannot be decrypted
        """
        async with self._require_db().session() as session:
            setting = await session.get(GlobalSettingModel, key)
            return self._value_of(setting) if setting is not None else default

    async def exists(self, key: str) -> bool:
        """Check if a setting exists."""
        async with self._require_db().session() as session:
            return await session.get(GlobalSettingModel, key) is not None

    async def set(
        self,
        key: str,
        value: str,
        *,
        description: Optional[str] = None,
        encrypted: Optional[bool] = None,
        group_id: Optional[str] = None,
    ) -> None:
        """Create or update a setting.

        ``encrypted`` left as None keeps the flag of an existing setting
        (new settings default to plain text).
        """
        async with self._require_db().session() as session:
            setting = await session.get(GlobalSettingModel, key)
            if encrypted is None:
                encrypted = setting.is_encrypted if setting is not None else False
            stored = self._cipher.encrypt(value) if encrypted and value else value

            if setting is None:
                session.add(
                    GlobalSettingModel(
                        key=key,
                        value=stored,
                        description=description,
                        is_encrypted=encrypted,
                        group_id=group_id,
                    )
                )
            else:
                setting.value = stored
                if description is not None:
                    setting.description = description
                if group_id is not None:
                    setting.group_id = group_id
                setting.is_encrypted = encrypted

    async def get_all(self) -> dict[str, str]:
        """All settings as a key -> value mapping."""
        async with self._require_db().session() as session:
            result = await session.execute(select(GlobalSettingModel).order_by(GlobalSettingModel.key))
            return {s.key: self._value_of(s) for s in result.scalars()}

    async def get_by_group(self, group_id: str) -> dict[str, str]:
        """Settings of one group as a full key -> value mapping."""
        async with self._require_db().session() as session:
            result = await session.execute(
                select(GlobalSettingModel)
                .where(GlobalSettingModel.group_id == group_id)
                .order_by(GlobalSettingModel.key)
            )
            return {s.key: self._value_of(s) for s in result.scalars()}

    async def group_exists(self, group_id: str) -> bool:
        """Check if a settings group exists."""
        async with self._require_db().session() as session:
            return await session.get(GlobalSettingGroupModel, group_id) is not None

    async def create_group(self, group: GlobalSettingGroup) -> None:
        """Insert a settings group."""
        async with self._require_db().session() as session:
            session.add(
                GlobalSettingGroupModel(
                    id=group.id,
                    name=group.name,
                    description=group.description,
                    icon=group.icon,
                    sort_order=group.sort_order,
                )
            )

    async def initialize_settings(self, registry: GlobalSettingsRegistry) -> InitializationResult:
        """Create missing groups and settings with their defaults.

        Existing rows are never overwritten.
        """
        self._require_db()

        for group in registry.get_groups():
            if not await self.group_exists(group.id):
                await self.create_group(group)
                logger.info("settings_group_created", group=group.id)

        definitions = registry.get_all_settings()
        result = InitializationResult(
            total_modules=len(registry.get_groups()),
            total_settings=len(definitions),
        )

        for definition in definitions:
            if await self.exists(definition.key):
                result.skipped += 1
                result.skipped_settings.append(definition.key)
                continue

            await self.set(
                definition.key,
                definition.default_value,
                description=definition.description,
                encrypted=definition.encrypted,
                group_id=definition.group_id,
            )
            result.created += 1
            result.created_settings.append(definition.key)

        logger.info(
            "global_settings_initialized",
            created=result.created,
            skipped=result.skipped,
        )

        validation = await self.validate_required_settings(registry)
        if not validation.valid:
            logger.warning("required_settings_missing", missing=validation.missing)

        return result

    async def validate_required_settings(self, registry: GlobalSettingsRegistry) -> ValidationResult:
        """Report required settings that are missing or empty."""
        values = await self.get_all()
        missing: list[str] = []
        groups: dict[str, dict] = {}

        for definition in registry.get_all_settings():
            group_key = definition.group_id or "ungrouped"
            summary = groups.setdefault(group_key, {"total": 0, "missing": 0, "missing_keys": []})
            summary["total"] += 1

            if definition.required and not values.get(definition.key):
                missing.append(definition.key)
                summary["missing"] += 1
                summary["missing_keys"].append(definition.key)

        return ValidationResult(valid=not missing, missing=missing, groups=groups)

    # Typed accessors. Missing or blank values fall back to the default;
    # values that do not parse are logged and fall back as well.

    async def get_string(self, key: str, default: Optional[str] = None) -> Optional[str]:
        """Setting value, or ``default`` when missing or blank."""
        value = await self.get(key)
        if value is None or not value.strip():
            return default
        return value

    async def get_boolean(self, key: str, default: Optional[bool] = None) -> Optional[bool]:
        """Parse true/1/yes/on/enabled and false/0/no/off/disabled."""
        value = await self.get_string(key)
        if value is None:
            return default

        normalized = value.strip().lower()
        if normalized in TRUE_VALUES:
            return True
        if normalized in FALSE_VALUES:
            return False

        logger.warning("setting_not_boolean", key=key)
        return default

    async def _get_float(self, key: str) -> Optional[float]:
        value = await self.get_string(key)
        if value is None:
            return None
        try:
            number = float(value.strip())
        except ValueError:
            number = math.nan
        if math.isnan(number):
            logger.warning("setting_not_numeric", key=key)
            return None
        return number

    async def get_number(self, key: str, default: Optional[float] = None) -> Optional[float]:
        """Setting parsed as a float."""
        number = await self._get_float(key)
        return default if number is None else number

    async def get_integer(self, key: str, default: Optional[int] = None) -> Optional[int]:
        """Setting parsed as a number and rounded down."""
        number = await self._get_float(key)
        if number is None or math.isinf(number):
            return default
        return math.floor(number)

    async def get_url(self, key: str, default: Optional[str] = None) -> Optional[str]:
        """Setting value if it parses as an absolute URL."""
        value = await self.get_string(key)
        if value is None:
            return default
        try:
            _url_adapter.validate_python(value)
        except ValidationError:
            logger.warning("setting_not_url", key=key)
            return default
        return value

    async def get_email(self, key: str, default: Optional[str] = None) -> Optional[str]:
        """Setting value if it looks like an email address."""
        value = await self.get_string(key)
        if value is None:
            return default
        if not EMAIL_PATTERN.match(value):
            logger.warning("setting_not_email", key=key)
            return default
        return value

    async def get_json(self, key: str, default: Any = None) -> Any:
        """Setting value decoded from JSON."""
        value = await self.get_string(key)
        if value is None:
            return default
        try:
            return json.loads(value)
        except json.JSONDecodeError:
            logger.warning("setting_not_json", key=key)
            return default

    async def get_array(self, key: str, default: Optional[list[str]] = None) -> list[str]:
        """Comma-separated setting split into trimmed, non-empty items."""
        value = await self.get_string(key)
        if value is None:
            return list(default or [])
        return [item.strip() for item in value.split(",") if item.strip()]

    async def get_multiple(self, keys: Iterable[str]) -> dict[str, Optional[str]]:
        """Several settings at once; missing or blank ones map to None."""
        return {key: await self.get_string(key) for key in keys}

    async def get_group_values(self, group_id: str, *, full_keys: bool = False) -> dict[str, Optional[str]]:
        """Values of a group's settings; blank ones map to None.

        Keys lose their first dotted segment ("smtp.host" -> "host") unless
        ``full_keys`` is set.
        """
        values = await self.get_by_group(group_id)
        if full_keys:
            return {key: value or None for key, value in values.items()}
        return {key.partition(".")[2]: value or None for key, value in values.items()}

    async def is_set(self, key: str) -> bool:
        """Whether the setting exists with a non-blank value."""
        return await self.get_string(key) is not None

    async def is_empty(self, key: str) -> bool:
        """Whether the setting is missing or blank."""
        return not await self.is_set(key)

    async def get_required(self, key: str) -> str:
        """Setting value that must be configured.

        Raises:
            ConfigurationException: If the setting is missing or blank
        """
        value = await self.get_string(key)
        if value is None:
            raise ConfigurationException(
                f"Required setting '{key}' is not configured or is empty",
                details={"key": key},
            )
        return value
