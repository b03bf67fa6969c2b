"""Tests for global settings registry and service."""

from typing import Callable

import pytest
import pytest_asyncio

from deploystack.core.exceptions import (
    ConfigurationException,
    DatabaseNotConfiguredError,
    SettingsEncryptionError,
)
from deploystack.global_settings.definitions import CORE_SETTINGS_MODULES
from deploystack.global_settings.encryption import SettingsCipher, looks_encrypted
from deploystack.global_settings.registry import GlobalSettingsRegistry
from deploystack.global_settings.service import GlobalSettingsService
from deploystack.global_settings.types import (
    GlobalSettingDefinition,
    GlobalSettingGroup,
    GlobalSettingsModule,
)
from deploystack.plugin_system import GlobalSettingsExtension, PluginFeatures
from deploystack.storage.database.base import Database
from deploystack.storage.database.models import GlobalSettingModel


def plugin_settings(*settings: GlobalSettingDefinition, groups=()) -> PluginFeatures:
    """Features declaring only global settings."""
    return PluginFeatures(
        global_settings=GlobalSettingsExtension(groups=list(groups), settings=list(settings))
    )


def test_core_modules_registered() -> None:
    """Test the registry starts with the core settings modules."""
    registry = GlobalSettingsRegistry()

    assert [g.id for g in registry.get_groups()] == [m.group.id for m in CORE_SETTINGS_MODULES]
    assert registry.get_setting("smtp.host") is not None
    assert all(s.group_id == "smtp" for s in registry.get_settings_by_group("smtp"))


def test_groups_sorted_by_sort_order() -> None:
    """Test groups are listed by sort order."""
    registry = GlobalSettingsRegistry(
        modules=[
            GlobalSettingsModule(group=GlobalSettingGroup(id="b", name="B", sort_order=2), settings=[]),
            GlobalSettingsModule(group=GlobalSettingGroup(id="a", name="A", sort_order=1), settings=[]),
        ]
    )

    assert [g.id for g in registry.get_groups()] == ["a", "b"]


def test_register_plugin_settings(make_plugin: Callable) -> None:
    """Test plugin groups and settings are added."""
    registry = GlobalSettingsRegistry(modules=[])
    plugin = make_plugin(
        "p1",
        features=plugin_settings(
            GlobalSettingDefinition(key="p1.enabled", default_value="true", group_id="p1_group"),
            groups=[GlobalSettingGroup(id="p1_group", name="P1")],
        ),
    )

    added = registry.register_plugin_settings([plugin, make_plugin("no-settings")])

    assert added == 1
    assert registry.get_setting("p1.enabled").group_id == "p1_group"
    assert [g.id for g in registry.get_groups()] == ["p1_group"]


def test_plugin_setting_cannot_override_core(make_plugin: Callable) -> None:
    """Test a plugin setting reusing a core key is skipped."""
    registry = GlobalSettingsRegistry()
    original = registry.get_setting("smtp.host")
    plugin = make_plugin(
        "p1",
        features=plugin_settings(GlobalSettingDefinition(key="smtp.host", default_value="evil")),
    )

    assert registry.register_plugin_settings([plugin]) == 0
    assert registry.get_setting("smtp.host") == original


def test_plugin_setting_unknown_group(make_plugin: Callable) -> None:
    """Test a setting referring to an unknown group becomes ungrouped."""
    registry = GlobalSettingsRegistry(modules=[])
    plugin = make_plugin(
        "p1",
        features=plugin_settings(GlobalSettingDefinition(key="p1.key", group_id="nowhere")),
    )

    registry.register_plugin_settings([plugin])

    assert registry.get_setting("p1.key").group_id is None


@pytest.mark.asyncio
async def test_service_requires_database() -> None:
    """Test the unbound service raises a configuration error."""
    service = GlobalSettingsService()

    assert not service.is_available
    with pytest.raises(DatabaseNotConfiguredError):
        await service.get("global.page_url")


@pytest.mark.asyncio
async def test_set_and_get(database: Database) -> None:
    """Test values are upserted and read back."""
    service = GlobalSettingsService(database)

    await service.set("custom.key", "one", description="A custom setting")
    await service.set("custom.key", "two")

    assert await service.get("custom.key") == "two"
    assert await service.exists("custom.key")
    assert await service.get("missing.key", "fallback") == "fallback"
    assert await service.get_all() == {"custom.key": "two"}


@pytest.mark.asyncio
async def test_initialize_settings_creates_defaults(database: Database) -> None:
    """Test initialization creates groups and default values."""
    registry = GlobalSettingsRegistry()
    service = GlobalSettingsService()
    service.bind(database)

    result = await service.initialize_settings(registry)

    assert result.created == len(registry.get_all_settings())
    assert result.skipped == 0
    assert await service.group_exists("smtp")
    assert await service.get("global.send_mail") == "false"


@pytest.mark.asyncio
async def test_initialize_settings_keeps_existing_values(database: Database) -> None:
    """Test initialization never overwrites stored values."""
    registry = GlobalSettingsRegistry()
    service = GlobalSettingsService(database)
    await service.initialize_settings(registry)
    await service.set("global.send_mail", "true")

    result = await service.initialize_settings(registry)

    assert result.created == 0
    assert "global.send_mail" in result.skipped_settings
    assert await service.get("global.send_mail") == "true"


@pytest.mark.asyncio
async def test_validate_required_settings(database: Database) -> None:
    """Test required settings without a value are reported."""
    registry = GlobalSettingsRegistry()
    service = GlobalSettingsService(database)
    await service.initialize_settings(registry)

    validation = await service.validate_required_settings(registry)

    assert not validation.valid
    assert "smtp.host" in validation.missing
    assert validation.groups["smtp"]["missing"] >= 1

    for key in validation.missing:
        await service.set(key, "configured")

    assert (await service.validate_required_settings(registry)).valid


@pytest.fixture(scope="module")
def cipher() -> SettingsCipher:
    """Cipher with a fixed test secret."""
    return SettingsCipher("test-encryption-secret")


@pytest.mark.asyncio
async def test_encrypted_setting_stored_sealed(database: Database, cipher: SettingsCipher) -> None:
    """Test encrypted settings never reach the database in plain text."""
    service = GlobalSettingsService(database, cipher)

    await service.set("smtp.password", "hunter2", encrypted=True)

    async with database.session() as session:
        row = await session.get(GlobalSettingModel, "smtp.password")
        stored = row.value
    assert stored != "hunter2"
    assert "hunter2" not in stored
    assert looks_encrypted(stored)
    assert await service.get("smtp.password") == "hunter2"
    assert await service.get_all() == {"smtp.password": "hunter2"}


@pytest.mark.asyncio
async def test_update_keeps_encryption_flag(database: Database, cipher: SettingsCipher) -> None:
    """Test updating an encrypted setting without the flag keeps it sealed."""
    service = GlobalSettingsService(database, cipher)
    await service.set("api.token", "first", encrypted=True)

    await service.set("api.token", "second")

    async with database.session() as session:
        row = await session.get(GlobalSettingModel, "api.token")
        assert row.is_encrypted
        assert looks_encrypted(row.value)
    assert await service.get("api.token") == "second"


@pytest.mark.asyncio
async def test_encrypted_setting_needs_same_secret(database: Database, cipher: SettingsCipher) -> None:
    """Test a different deployment secret cannot read sealed values."""
    await GlobalSettingsService(database, cipher).set("api.token", "secret", encrypted=True)

    other = GlobalSettingsService(database, SettingsCipher("another-secret"))

    with pytest.raises(SettingsEncryptionError):
        await other.get("api.token")


@pytest.mark.asyncio
async def test_plugin_encrypted_default_is_sealed(
    database: Database, cipher: SettingsCipher, make_plugin: Callable
) -> None:
    """Test initialization seals non-empty defaults of encrypted settings."""
    registry = GlobalSettingsRegistry(modules=[])
    registry.register_plugin_settings(
        [
            make_plugin(
                "vault",
                features=plugin_settings(
                    GlobalSettingDefinition(key="vault.token", default_value="initial-token", encrypted=True)
                ),
            )
        ]
    )
    service = GlobalSettingsService(database, cipher)

    await service.initialize_settings(registry)

    async with database.session() as session:
        assert (await session.get(GlobalSettingModel, "vault.token")).value != "initial-token"
    assert await service.get("vault.token") == "initial-token"


def test_cipher_format_and_errors(cipher: SettingsCipher) -> None:
    """Test sealed values use a fresh IV and reject tampering."""
    first = cipher.encrypt("value")
    second = cipher.encrypt("value")

    assert first != second
    assert first.count(":") == 2
    assert cipher.decrypt(first) == "value"
    assert cipher.self_check()

    iv, tag, data = first.split(":")
    tampered = f"{iv}:{tag}:{'00' if data[:2] != '00' else '11'}{data[2:]}"
    with pytest.raises(SettingsEncryptionError):
        cipher.decrypt(tampered)
    with pytest.raises(SettingsEncryptionError):
        cipher.decrypt("not-encrypted")
    with pytest.raises(SettingsEncryptionError):
        cipher.decrypt("zz:zz:zz")


def test_cipher_requires_secret() -> None:
    """Test an empty secret is a configuration error."""
    with pytest.raises(ConfigurationException):
        SettingsCipher("")


@pytest_asyncio.fixture
async def typed_service(database: Database, cipher: SettingsCipher) -> GlobalSettingsService:
    """Service holding values of various shapes."""
    service = GlobalSettingsService(database, cipher)
    values = {
        "flags.on": "Yes",
        "flags.off": "disabled",
        "flags.odd": "maybe",
        "numbers.port": "587",
        "numbers.ratio": "2.75",
        "numbers.bad": "twelve",
        "text.blank": "   ",
        "text.url": "https://deploystack.io/docs",
        "text.bad_url": "not a url",
        "text.email": "admin@deploystack.io",
        "text.bad_email": "admin@localhost",
        "text.json": '{"retries": 3, "hosts": ["a", "b"]}',
        "text.bad_json": "{retries: 3}",
        "text.list": " alpha, beta ,,gamma ",
    }
    for key, value in values.items():
        await service.set(key, value)
    await service.create_group(GlobalSettingGroup(id="smtp", name="SMTP"))
    await service.set("smtp.host", "smtp.example.com", group_id="smtp")
    await service.set("smtp.password", "s3cret", group_id="smtp", encrypted=True)
    await service.set("smtp.username", "", group_id="smtp")
    return service


@pytest.mark.asyncio
async def test_get_string_treats_blank_as_missing(typed_service: GlobalSettingsService) -> None:
    """Test blank values fall back to the default."""
    assert await typed_service.get_string("text.blank", "fallback") == "fallback"
    assert await typed_service.get_string("missing.key") is None
    assert await typed_service.get_string("flags.on") == "Yes"


@pytest.mark.asyncio
async def test_get_boolean(typed_service: GlobalSettingsService) -> None:
    """Test boolean spellings and the fallback for unknown ones."""
    assert await typed_service.get_boolean("flags.on") is True
    assert await typed_service.get_boolean("flags.off", True) is False
    assert await typed_service.get_boolean("flags.odd", True) is True
    assert await typed_service.get_boolean("flags.odd") is None
    assert await typed_service.get_boolean("missing.key", False) is False


@pytest.mark.asyncio
async def test_get_number_and_integer(typed_service: GlobalSettingsService) -> None:
    """Test numeric parsing and flooring."""
    assert await typed_service.get_number("numbers.ratio") == 2.75
    assert await typed_service.get_integer("numbers.ratio") == 2
    assert await typed_service.get_integer("numbers.port") == 587
    assert await typed_service.get_number("numbers.bad", 1.5) == 1.5
    assert await typed_service.get_integer("numbers.bad", 25) == 25
    assert await typed_service.get_integer("text.blank") is None


@pytest.mark.asyncio
async def test_get_url_email_json_array(typed_service: GlobalSettingsService) -> None:
    """Test validated accessors return the default for malformed values."""
    assert await typed_service.get_url("text.url") == "https://deploystack.io/docs"
    assert await typed_service.get_url("text.bad_url", "http://localhost") == "http://localhost"
    assert await typed_service.get_email("text.email") == "admin@deploystack.io"
    assert await typed_service.get_email("text.bad_email") is None
    assert await typed_service.get_json("text.json") == {"retries": 3, "hosts": ["a", "b"]}
    assert await typed_service.get_json("text.bad_json", {}) == {}
    assert await typed_service.get_array("text.list") == ["alpha", "beta", "gamma"]
    assert await typed_service.get_array("text.blank", ["x"]) == ["x"]
    assert await typed_service.get_array("missing.key") == []


@pytest.mark.asyncio
async def test_get_multiple_and_group_values(typed_service: GlobalSettingsService) -> None:
    """Test bulk reads decrypt values and map blanks to None."""
    assert await typed_service.get_multiple(["flags.on", "text.blank", "missing.key"]) == {
        "flags.on": "Yes",
        "text.blank": None,
        "missing.key": None,
    }
    assert await typed_service.get_group_values("smtp") == {
        "host": "smtp.example.com",
        "password": "s3cret",
        "username": None,
    }
    full = await typed_service.get_group_values("smtp", full_keys=True)
    assert full["smtp.password"] == "s3cret"
    assert await typed_service.get_group_values("missing") == {}


@pytest.mark.asyncio
async def test_presence_checks(typed_service: GlobalSettingsService) -> None:
    """Test is_set, is_empty and get_required."""
    assert await typed_service.is_set("numbers.port")
    assert await typed_service.is_empty("text.blank")
    assert await typed_service.is_empty("missing.key")
    assert await typed_service.get_required("numbers.port") == "587"

    with pytest.raises(ConfigurationException, match="Required setting 'text.blank' is not configured or is empty"):
        await typed_service.get_required("text.blank")
