"""CLI commands for the DeployStack backend."""

import asyncio
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.table import Table

from deploystack import __version__
from deploystack.core.config import get_settings
from deploystack.plugin_system.errors import PluginError
from deploystack.plugin_system.manager import PluginManager
from deploystack.plugin_system.types import PluginConfiguration

app = typer.Typer(name="deploystack", help="DeployStack backend CLI")
console = Console()


@app.command()
def version() -> None:
    """Show version."""
    console.print(f"[bold green]DeployStack backend v{__version__}[/bold green]")


@app.command()
def serve(
    host: Optional[str] = typer.Option(None, help="Host to bind"),
    port: Optional[int] = typer.Option(None, help="Port to bind"),
    reload: bool = typer.Option(False, help="Reload on code changes"),
) -> None:
    """Start API server.

    Args:
        host: Host to bind (API_HOST by default)
        port: Port to bind (API_PORT by default)
        reload: Reload on code changes
    """
    import uvicorn

    settings = get_settings()
    host = host or settings.api_host
    port = port or settings.api_port

    console.print(f"[yellow]Starting server on {host}:{port}[/yellow]")
    uvicorn.run("deploystack.api.app:create_app", factory=True, host=host, port=port, reload=reload)


@app.command()
def plugins(
    path: Optional[list[Path]] = typer.Option(None, "--path", "-p", help="Plugin directory (repeatable)"),
) -> None:
    """Discover and list server plugins without starting them.

    Args:
        path: Plugin directories (PLUGINS_PATH by default)
    """
    settings = get_settings()
    manager = PluginManager(
        PluginConfiguration(
            paths=path or settings.plugins_path,
            factories=settings.plugin_factories,
        )
    )

    async def _load() -> None:
        await manager.load_plugins(await manager.discover_plugins())

    try:
        asyncio.run(_load())
    except PluginError as e:
        console.print(f"[red]✗ {e.message}[/red]")
        raise typer.Exit(code=1)

    table = Table(title="Plugins")
    table.add_column("ID", style="cyan")
    table.add_column("Name")
    table.add_column("Version", style="green")
    table.add_column("Features")

    for info in manager.list_plugins():
        features = ", ".join(name for name, enabled in info["features"].items() if enabled)
        table.add_row(info["id"], info["name"], info["version"], features or "-")

    console.print(table)


if __name__ == "__main__":
    app()
