"""FastAPI shell serving the force-graph page and the view-state API."""

from __future__ import annotations

import logging

from fastapi import FastAPI, HTTPException, Request
from fastapi.responses import HTMLResponse, JSONResponse
from pydantic import BaseModel

from .._viz_html import VIZ_HTML
from ..config import RepoVizConfig
from ..github import GitHubClient
from ..render import RendererConfig, Theme
from ..view_state import ViewPreferences, ViewStateEngine

logger = logging.getLogger(__name__)


class VisualizeRequest(BaseModel):
    url: str


class SearchRequest(BaseModel):
    term: str = ""


class SelectRequest(BaseModel):
    node_id: str


def build_engine(config: RepoVizConfig) -> ViewStateEngine:
    """Wire a GitHub-backed engine from *config*."""
    client = GitHubClient(
        token=config.github_token,
        base_url=config.api_url,
        branch=config.branch,
        timeout=config.timeout,
    )
    theme = Theme(config.theme)
    prefs = ViewPreferences(
        show_labels=config.show_labels,
        tree_visible=config.tree_visible,
        theme=theme,
    )
    return ViewStateEngine(client, preferences=prefs, renderer=RendererConfig(theme=theme))


def _engine(request: Request) -> ViewStateEngine:
    return request.app.state.engine


def create_app(engine: ViewStateEngine | None = None, config: RepoVizConfig | None = None) -> FastAPI:
    """Build the app around one engine (one viewing session)."""
    config = config or RepoVizConfig()
    app = FastAPI(title="repoviz", version="0.1.0")
    app.state.config = config
    app.state.engine = engine or build_engine(config)

    # -----------------------------------------------------------------------
    # Page
    # -----------------------------------------------------------------------

    @app.get("/", response_class=HTMLResponse)
    async def index() -> HTMLResponse:
        return HTMLResponse(VIZ_HTML)

    # -----------------------------------------------------------------------
    # State
    # -----------------------------------------------------------------------

    @app.get("/api/state")
    async def get_state(request: Request) -> JSONResponse:
        """Return the full view-state snapshot."""
        return JSONResponse(_engine(request).snapshot())

    @app.post("/api/visualize")
    async def visualize(req: VisualizeRequest, request: Request) -> JSONResponse:
        """Fetch a repository and replace the graph. Errors land in the snapshot."""
        engine = _engine(request)
        await engine.visualize(req.url)
        return JSONResponse(engine.snapshot())

    @app.post("/api/search")
    async def search(req: SearchRequest, request: Request) -> JSONResponse:
        engine = _engine(request)
        engine.set_search_term(req.term)
        return JSONResponse(engine.snapshot())

    @app.post("/api/select")
    async def select(req: SelectRequest, request: Request) -> JSONResponse:
        engine = _engine(request)
        engine.select(req.node_id)
        return JSONResponse(engine.snapshot())

    @app.delete("/api/select")
    async def clear_selection(request: Request) -> JSONResponse:
        engine = _engine(request)
        engine.clear_selection()
        return JSONResponse(engine.snapshot())

    @app.post("/api/toggle/{name}")
    async def toggle(name: str, request: Request) -> JSONResponse:
        """Flip one of the ``labels``, ``tree`` or ``theme`` preferences."""
        engine = _engine(request)
        toggles = {
            "labels": engine.toggle_labels,
            "tree": engine.toggle_tree,
            "theme": engine.toggle_theme,
        }
        if name not in toggles:
            raise HTTPException(status_code=404, detail=f"Unknown toggle '{name}'.")
        toggles[name]()
        return JSONResponse(engine.snapshot())

    # -----------------------------------------------------------------------
    # Read-only views
    # -----------------------------------------------------------------------

    @app.get("/api/info")
    async def get_info(request: Request) -> JSONResponse:
        """Repository metadata for the info dialog."""
        info = _engine(request).repo_info
        if info is None:
            raise HTTPException(status_code=404, detail="No repository loaded.")
        return JSONResponse(info.model_dump())

    @app.get("/api/tree")
    async def get_tree(request: Request) -> JSONResponse:
        return JSONResponse(_engine(request).tree.model_dump())

    return app


# ---------------------------------------------------------------------------
# Server launcher
# ---------------------------------------------------------------------------

def start_server(config: RepoVizConfig, host: str | None = None, port: int | None = None) -> None:
    """Serve the visualizer with uvicorn (blocking)."""
    import uvicorn

    app = create_app(config=config)
    uvicorn.run(app, host=host or config.host, port=port or config.port)
