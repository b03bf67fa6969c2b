"""Shared fixtures and plugin doubles."""

from pathlib import Path
from typing import Any, AsyncGenerator, Callable, Optional

import pytest
import pytest_asyncio
from fastapi import FastAPI

from deploystack.core.config import Settings
from deploystack.global_settings.service import GlobalSettingsService
from deploystack.plugin_system import Plugin, PluginContext, PluginFeatures, PluginMeta
from deploystack.storage.database.base import Database
from deploystack.ui.manager import UIPlugin, UIPluginContext

REPO_ROOT = Path(__file__).parent.parent


class RecordingPlugin(Plugin):
    """Server plugin that appends lifecycle calls to a shared event list."""

    def __init__(
        self,
        plugin_id: str,
        events: list[str],
        *,
        fail_initialize: bool = False,
        fail_cleanup: bool = False,
        features: Optional[PluginFeatures] = None,
    ) -> None:
        self._meta = PluginMeta(id=plugin_id, name=plugin_id.title(), version="1.0.0")
        self.events = events
        self.fail_initialize = fail_initialize
        self.fail_cleanup = fail_cleanup
        self._features = features or PluginFeatures()
        self.contexts: list[PluginContext] = []

    @property
    def meta(self) -> PluginMeta:
        return self._meta

    @property
    def features(self) -> PluginFeatures:
        return self._features

    async def initialize(self, context: PluginContext) -> None:
        self.events.append(f"init:{self.id}")
        self.contexts.append(context)
        if self.fail_initialize:
            raise RuntimeError(f"{self.id} failed to initialize")

    async def reinitialize(self, context: PluginContext) -> None:
        self.events.append(f"reinit:{self.id}")

    async def cleanup(self) -> None:
        self.events.append(f"cleanup:{self.id}")
        if self.fail_cleanup:
            raise RuntimeError(f"{self.id} failed to clean up")


class BannerPlugin(UIPlugin):
    """Synchronous UI plugin contributing one banner."""

    def __init__(self, plugin_id: str, point: str = "main-content", order: int = 0) -> None:
        self._meta = PluginMeta(id=plugin_id, name=plugin_id.title(), version="0.1.0")
        self.point = point
        self.order = order
        self.cleaned_up = False

    @property
    def meta(self) -> PluginMeta:
        return self._meta

    def initialize(self, context: UIPluginContext) -> None:
        context.register_extension_point(
            self.point,
            lambda text: f"<p>{text}</p>",
            props={"text": f"banner from {self.id}"},
            order=self.order,
        )

    def cleanup(self) -> None:
        self.cleaned_up = True


@pytest.fixture
def events() -> list[str]:
    """Shared lifecycle event log."""
    return []


@pytest.fixture
def make_plugin(events: list[str]) -> Callable[..., RecordingPlugin]:
    """Factory of recording plugins sharing the ``events`` log."""

    def factory(plugin_id: str, **kwargs: Any) -> RecordingPlugin:
        return RecordingPlugin(plugin_id, events, **kwargs)

    return factory


@pytest.fixture
def app() -> FastAPI:
    """Bare FastAPI application."""
    return FastAPI()


@pytest.fixture
def settings_service() -> GlobalSettingsService:
    """Settings service without a database."""
    return GlobalSettingsService()


@pytest.fixture
def settings(tmp_path: Path) -> Settings:
    """Settings pointing all persistent data into a temporary directory."""
    return Settings(  # type: ignore
        _env_file=None,
        database_url=None,
        persistent_data_dir=tmp_path / "persistent_data",
        sqlite_db_path=tmp_path / "persistent_data" / "database" / "deploystack.db",
        plugins_path=[REPO_ROOT / "plugins"],
    )


@pytest.fixture
def sqlite_url(tmp_path: Path) -> str:
    """URL of a throwaway SQLite database."""
    return f"sqlite+aiosqlite:///{tmp_path / 'test.db'}"


@pytest.fixture
def make_banner() -> Callable[..., BannerPlugin]:
    """Factory of UI banner plugins."""
    return BannerPlugin


@pytest_asyncio.fixture
async def database(sqlite_url: str) -> AsyncGenerator[Database, None]:
    """Initialized SQLite database with the core tables."""
    db = Database(sqlite_url)
    await db.create_all()
    yield db
    await db.dispose()
