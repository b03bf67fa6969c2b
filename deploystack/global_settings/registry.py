"""In-memory registry of global settings definitions."""

from typing import TYPE_CHECKING, Iterable, Optional

from deploystack.core.logging import get_logger
from deploystack.global_settings.definitions import CORE_SETTINGS_MODULES
from deploystack.global_settings.types import (
    GlobalSettingDefinition,
    GlobalSettingGroup,
    GlobalSettingsModule,
)

if TYPE_CHECKING:
    from deploystack.plugin_system.base import Plugin

logger = get_logger(__name__)


class GlobalSettingsRegistry:
    """Core settings modules plus groups and settings contributed by plugins.

    Keys and group ids are unique; core definitions always win over plugin
    definitions with the same key.
    """

    def __init__(self, modules: Optional[Iterable[GlobalSettingsModule]] = None) -> None:
        self._groups: dict[str, GlobalSettingGroup] = {}
        self._settings: dict[str, GlobalSettingDefinition] = {}
        self._owners: dict[str, str] = {}

        for module in CORE_SETTINGS_MODULES if modules is None else modules:
            self.register_module(module)

    def register_module(self, module: GlobalSettingsModule, owner: str = "core") -> None:
        """Register a group and its settings.

        Settings without a group id are attached to the module's group.
        """
        self._add_group(module.group, owner)
        for setting in module.settings:
            if setting.group_id is None:
                setting = setting.model_copy(update={"group_id": module.group.id})
            self._add_setting(setting, owner)

    def register_plugin_settings(self, plugins: Iterable["Plugin"]) -> int:
        """Register settings contributed by plugins.

        Args:
            plugins: Plugins to inspect

        Returns:
            Number of settings added
        """
        added = 0
        for plugin in plugins:
            extension = plugin.features.global_settings
            if extension is None:
                continue

            owner = f"plugin:{plugin.id}"
            for group in extension.groups:
                self._add_group(group, owner)
            for setting in extension.settings:
                if setting.group_id is not None and setting.group_id not in self._groups:
                    logger.warning(
                        "plugin_setting_unknown_group",
                        plugin=plugin.id,
                        key=setting.key,
                        group=setting.group_id,
                    )
                    setting = setting.model_copy(update={"group_id": None})
                if self._add_setting(setting, owner):
                    added += 1

            logger.info("plugin_settings_registered", plugin=plugin.id, count=len(extension.settings))
        return added

    def _add_group(self, group: GlobalSettingGroup, owner: str) -> bool:
        if group.id in self._groups:
            logger.warning("settings_group_exists", group=group.id, owner=owner)
            return False
        self._groups[group.id] = group
        return True

    def _add_setting(self, setting: GlobalSettingDefinition, owner: str) -> bool:
        if setting.key in self._settings:
            logger.warning(
                "setting_key_exists",
                key=setting.key,
                owner=owner,
                defined_by=self._owners[setting.key],
            )
            return False
        self._settings[setting.key] = setting
        self._owners[setting.key] = owner
        return True

    def get_all_settings(self) -> list[GlobalSettingDefinition]:
        """All registered setting definitions."""
        return list(self._settings.values())

    def get_setting(self, key: str) -> Optional[GlobalSettingDefinition]:
        """Definition for a key, or None."""
        return self._settings.get(key)

    def get_settings_by_group(self, group_id: str) -> list[GlobalSettingDefinition]:
        """Setting definitions belonging to a group."""
        return [s for s in self._settings.values() if s.group_id == group_id]

    def get_groups(self) -> list[GlobalSettingGroup]:
        """All groups ordered by sort order."""
        return sorted(self._groups.values(), key=lambda g: g.sort_order)
