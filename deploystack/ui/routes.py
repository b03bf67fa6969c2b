"""Web UI routes."""

from functools import partial
from pathlib import Path

from fastapi import APIRouter, Request
from fastapi.responses import HTMLResponse
from fastapi.templating import Jinja2Templates
from markupsafe import Markup, escape

from deploystack.ui.extension_points import ExtensionPointStore

TEMPLATES_DIR = Path(__file__).parent / "templates"

templates = Jinja2Templates(directory=str(TEMPLATES_DIR))


def render_extension_point(store: ExtensionPointStore, point: str) -> Markup:
    """Render all contributions of an extension point in order.

    Args:
        store: Extension point store
        point: Extension point name

    Returns:
        Joined HTML of the contributions
    """
    fragments = []
    for contribution in store.get(point):
        if callable(contribution.component):
            html = Markup(contribution.component(**contribution.props))
        else:
            html = Markup(templates.get_template(contribution.component).render(**contribution.props))
        fragments.append(
            Markup('<div class="extension" data-extension-id="{}" data-plugin="{}">{}</div>').format(
                escape(contribution.id), escape(contribution.plugin_id), html
            )
        )
    return Markup("").join(fragments)


def create_ui_router() -> APIRouter:
    """Create the web UI router; UI plugins may add pages to it."""
    router = APIRouter(prefix="/ui", tags=["web-ui"])

    @router.get("/", response_class=HTMLResponse)
    async def index(request: Request) -> HTMLResponse:
        """Main page with the plugin extension points."""
        store: ExtensionPointStore = request.app.state.ui_plugin_manager.extension_points
        return templates.TemplateResponse(
            request,
            "index.html",
            {
                "app_name": request.app.title,
                "extension_point": partial(render_extension_point, store),
            },
        )

    return router
