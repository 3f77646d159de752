"""Entry point for the FastAPI-powered post browser."""

from __future__ import annotations

import json
import logging
from contextlib import AsyncExitStack, asynccontextmanager
from typing import Any

import httpx
from fastapi import FastAPI, HTTPException, Query, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import HTMLResponse, JSONResponse, RedirectResponse

from .config import settings
from .database import Database
from .models import FilterState
from .services.browse import BrowseService
from .services.favorites import FavoritesStore
from .services.records import RecordStore
from .services.storage import DatabaseStorage
from .validation import parse_id
from .web import render_detail_page, render_list_page

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

app: FastAPI


@asynccontextmanager
async def lifespan(fastapi_app: FastAPI):
    exit_stack = AsyncExitStack()
    records_client = await exit_stack.enter_async_context(
        httpx.AsyncClient(
            base_url=str(settings.records_api_url),
            timeout=httpx.Timeout(20.0, connect=10.0),
        )
    )
    database = Database(settings.database_url)
    await database.create_all()

    favorites = FavoritesStore(
        DatabaseStorage(database.session_factory),
        storage_key=settings.favorites_storage_key,
        clear_after=settings.announcement_clear_seconds,
    )
    await favorites.load()

    store = RecordStore(records_client, collection_path=settings.records_path)
    browse_service = BrowseService.from_settings(settings, store)
    plan = await browse_service.publish()
    logger.info(
        "Serving %d posts with %d pregenerated detail views (on demand: %s)",
        len(browse_service.collection),
        len(plan.identifiers),
        plan.on_demand,
    )

    fastapi_app.state.browse_service = browse_service
    fastapi_app.state.favorites = favorites
    fastapi_app.state.database = database

    try:
        yield
    finally:  # pragma: no cover - teardown path exercised at runtime
        favorites.close()
        await database.dispose()
        await exit_stack.aclose()


def create_app() -> FastAPI:
    fastapi_app = FastAPI(
        title=settings.app_name,
        description="Browse, filter and favorite posts",
        version="1.0.0",
        lifespan=lifespan,
    )

    fastapi_app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["GET", "POST"],
        allow_headers=["*"],
    )

    register_routes(fastapi_app)
    return fastapi_app


def get_browse_service(app: FastAPI) -> BrowseService:
    service = getattr(app.state, "browse_service", None)
    if not isinstance(service, BrowseService):
        raise RuntimeError("Browse service not initialised")
    return service


def get_favorites(app: FastAPI) -> FavoritesStore:
    favorites = getattr(app.state, "favorites", None)
    if not isinstance(favorites, FavoritesStore):
        raise RuntimeError("Favorites store not initialised")
    return favorites


def register_routes(fastapi_app: FastAPI) -> None:
    def _favorites_payload(favorites: FavoritesStore) -> dict[str, Any]:
        return {
            "favorites": favorites.as_mapping(),
            "count": favorites.count(),
            "announcement": favorites.announcement,
        }

    def _parse_record_id(raw_id: str) -> int:
        record_id = parse_id(raw_id)
        if record_id is None:
            raise HTTPException(
                status_code=400, detail="The ID must be a positive number."
            )
        return record_id

    async def _toggle(record_id: int, label: str | None) -> bool:
        service = get_browse_service(fastapi_app)
        favorites = get_favorites(fastapi_app)
        if not label:
            record = service.find(record_id)
            label = record.display_title() if record else f"Post {record_id}"
        return await favorites.toggle(record_id, label)

    @fastapi_app.get("/healthz")
    async def healthcheck() -> dict[str, str]:
        return {"status": "ok"}

    @fastapi_app.get("/", response_class=HTMLResponse)
    async def list_page(q: str = "", favorites: bool = False) -> HTMLResponse:
        service = get_browse_service(fastapi_app)
        store = get_favorites(fastapi_app)
        state = FilterState(query=q, favorites_only=favorites)
        favorite_ids = store.ids()
        return HTMLResponse(
            render_list_page(
                settings.app_name,
                service.visible(state, favorite_ids),
                state,
                favorite_ids,
                announcement=store.announcement,
                error=service.collection_error,
                total=len(service.collection),
            )
        )

    @fastapi_app.post("/favorites/{raw_id}")
    async def toggle_favorite_form(
        raw_id: str, next_url: str = Query(default="/", alias="next")
    ) -> RedirectResponse:
        await _toggle(_parse_record_id(raw_id), None)
        if not next_url.startswith("/") or next_url.startswith("//"):
            next_url = "/"
        return RedirectResponse(next_url, status_code=303)

    @fastapi_app.get("/items/{raw_id}", response_class=HTMLResponse)
    async def detail_page(raw_id: str) -> HTMLResponse:
        service = get_browse_service(fastapi_app)
        view = await service.detail(raw_id)
        return HTMLResponse(
            render_detail_page(settings.app_name, view),
            status_code=view.status_code,
        )

    @fastapi_app.get("/api/posts")
    async def posts_endpoint(
        q: str = "",
        favorites_only: bool = Query(default=False, alias="favoritesOnly"),
    ) -> dict[str, Any]:
        service = get_browse_service(fastapi_app)
        store = get_favorites(fastapi_app)
        state = FilterState(query=q, favorites_only=favorites_only)
        visible = service.visible(state, store.ids())
        return {
            "posts": [record.to_payload() for record in visible],
            "count": len(visible),
            "favoritesCount": store.count(),
            "announcement": store.announcement,
            "error": service.collection_error,
        }

    @fastapi_app.get("/api/posts/{raw_id}")
    async def post_detail_endpoint(
        raw_id: str,
        navigated_id: str | None = Query(default=None, alias="navigatedId"),
    ) -> JSONResponse:
        service = get_browse_service(fastapi_app)
        view = await service.detail(raw_id, navigated_id)
        return JSONResponse(view.to_payload(), status_code=view.status_code)

    @fastapi_app.get("/api/favorites")
    async def favorites_endpoint() -> dict[str, Any]:
        return _favorites_payload(get_favorites(fastapi_app))

    @fastapi_app.post("/api/favorites/{raw_id}")
    async def toggle_favorite_endpoint(request: Request, raw_id: str) -> dict[str, Any]:
        record_id = _parse_record_id(raw_id)
        try:
            payload = await request.json()
        except json.JSONDecodeError:
            payload = {}
        if not isinstance(payload, dict):
            raise HTTPException(status_code=400, detail="Invalid payload")

        label = payload.get("label")
        is_favorite = await _toggle(record_id, str(label).strip() if label else None)
        return {
            "id": record_id,
            "favorite": is_favorite,
            **_favorites_payload(get_favorites(fastapi_app)),
        }

    @fastapi_app.get("/api/paths")
    async def paths_endpoint() -> dict[str, object]:
        return get_browse_service(fastapi_app).plan.to_payload()

    @fastapi_app.post("/api/republish")
    async def republish_endpoint() -> dict[str, object]:
        service = get_browse_service(fastapi_app)
        plan = await service.publish()
        return {
            **plan.to_payload(),
            "posts": len(service.collection),
            "error": service.collection_error,
        }


app = create_app()


if __name__ == "__main__":  # pragma: no cover - manual execution
    import uvicorn

    uvicorn.run(
        "app.main:app",
        host=settings.server_host,
        port=settings.server_port,
        reload=settings.environment == "development",
    )
