"""FastAPI endpoints for the penguin roster and counter events."""

from __future__ import annotations

from fastapi import Depends, FastAPI, HTTPException, Query, Request, Response
from fastapi.responses import JSONResponse, PlainTextResponse

from .config import BackendSettings, load_settings
from .errors import PersistenceError
from .events import record_bellyrub, record_fish, record_visit
from .logging import get_logger
from .roster import RosterCache
from .store import PenguinStore, create_store

logger = get_logger(__name__)

_FORM_CONTENT_TYPES = ("application/x-www-form-urlencoded", "multipart/form-data")


async def read_penguin_id(request: Request, query_id: str = Query(default="", alias="id")) -> str:
    """Return the `id` form field of a POST body, falling back to the query string."""
    content_type = request.headers.get("content-type", "")
    if request.method == "POST" and content_type.startswith(_FORM_CONTENT_TYPES):
        form = await request.form()
        form_id = form.get("id")
        if isinstance(form_id, str) and form_id:
            return form_id
    return query_id


def _default_cache(settings: BackendSettings, store: PenguinStore | None) -> RosterCache:
    penguin_store = store if store is not None else create_store(settings.database_url)
    return RosterCache.from_file(
        settings.roster_path,
        store=penguin_store,
        ttl_seconds=settings.cache_ttl_seconds,
    )


def create_app(
    cache: RosterCache | None = None,
    store: PenguinStore | None = None,
    settings: BackendSettings | None = None,
) -> FastAPI:
    """Build the application around one roster cache.

    Without an explicit cache the roster is loaded from the configured file;
    a RosterLoadError propagates so the process never serves an empty roster.
    """
    app = FastAPI(title="Penguin Daycare API", version="1.0.0")
    roster_cache = cache if cache is not None else _default_cache(settings or load_settings(), store)
    penguin_store = store if store is not None else roster_cache.store
    app.state.roster_cache = roster_cache

    def get_cache() -> RosterCache:
        return roster_cache

    def get_store() -> PenguinStore:
        return penguin_store

    @app.api_route("/", methods=["GET", "POST"], response_class=PlainTextResponse)
    def root(local_cache: RosterCache = Depends(get_cache)) -> str:
        return f"Hello! This is Penguin Daycare Simulator backend! Number of penguins loaded: {local_cache.size}"

    @app.api_route("/penguins", methods=["GET", "POST"])
    def list_penguins(local_cache: RosterCache = Depends(get_cache)) -> Response:
        try:
            local_cache.maybe_refresh()
        except PersistenceError:
            logger.exception("roster_refresh_failed")
            raise HTTPException(status_code=503, detail="Persistence unavailable")

        penguins = local_cache.snapshot()
        try:
            return JSONResponse(content=penguins)
        except (TypeError, ValueError):
            logger.exception("roster_serialization_failed")
            raise HTTPException(status_code=500, detail="Unable to serialize roster")

    @app.api_route("/update", methods=["GET", "POST"])
    def update(local_cache: RosterCache = Depends(get_cache)) -> Response:
        local_cache.force_refresh()
        return Response()

    # Stat endpoints answer 200 with an empty body even when the id is unknown
    # or the store write failed; events are fire-and-forget for the client.
    @app.api_route("/stat/visit", methods=["GET", "POST"])
    def stat_visit(
        penguin_id: str = Depends(read_penguin_id),
        local_cache: RosterCache = Depends(get_cache),
        local_store: PenguinStore = Depends(get_store),
    ) -> Response:
        record_visit(local_cache, local_store, penguin_id)
        return Response()

    @app.api_route("/stat/fish", methods=["GET", "POST"])
    def stat_fish(
        penguin_id: str = Depends(read_penguin_id),
        local_cache: RosterCache = Depends(get_cache),
        local_store: PenguinStore = Depends(get_store),
    ) -> Response:
        record_fish(local_cache, local_store, penguin_id)
        return Response()

    @app.api_route("/stat/bellyrub", methods=["GET", "POST"])
    def stat_bellyrub(
        penguin_id: str = Depends(read_penguin_id),
        local_cache: RosterCache = Depends(get_cache),
        local_store: PenguinStore = Depends(get_store),
    ) -> Response:
        record_bellyrub(local_cache, local_store, penguin_id)
        return Response()

    return app
