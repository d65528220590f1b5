# backend/mcstats/main.py
import logging
from contextlib import asynccontextmanager
from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Depends, FastAPI, HTTPException, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from . import stats
from .config import settings
from .crud import StatsStore
from .database import StoreUnavailable
from .schemas import ErrorOut

logger = logging.getLogger(__name__)

router = APIRouter()

TOP_N = 10
MIN_UUID_LENGTH = 5

_LOOKUP_ERRORS = {
    stats.StatsError.NOT_FOUND: (404, "Player not found"),
    stats.StatsError.EMPTY_DATA: (500, "Stats data is empty or null"),
    stats.StatsError.CORRUPTED_JSON: (500, "Corrupted stats data: Invalid JSON"),
}


def configure_logging(level: Optional[str] = None) -> None:
    logging.basicConfig(format="%(asctime)s [%(levelname)s] %(name)s: %(message)s")
    logging.getLogger(__package__).setLevel((level or settings.LOG_LEVEL).upper())


def get_store(request: Request) -> StatsStore:
    return request.app.state.store


def _ranking(store: StatsStore, metric: str, limit: Optional[int] = TOP_N) -> List[Dict[str, Any]]:
    descriptor = stats.get_metric(metric)
    board = stats.build_leaderboard(store.fetch_all(), descriptor, limit)
    return [entry.as_dict(descriptor.key) for entry in board]


# ----- Health -----
@router.get("/health")
def health() -> Dict[str, Any]:
    return {"ok": True}


# ----- Player stats -----
@router.get("/api/stats/{uuid}", responses={400: {"model": ErrorOut}, 404: {"model": ErrorOut}})
def player_stats(uuid: str, store: StatsStore = Depends(get_store)) -> Dict[str, Any]:
    if len(uuid) < MIN_UUID_LENGTH:
        raise HTTPException(status_code=400, detail="Invalid UUID")

    record = store.fetch_by_id(uuid)
    if record is not None:
        logger.debug("Raw stats from DB for %s: %r", uuid, record.raw_payload)

    result = stats.lookup(record)
    if isinstance(result, stats.Err):
        status, message = _LOOKUP_ERRORS[result.error]
        logger.warning("stats lookup for %s failed: %s", uuid, result.error.value)
        raise HTTPException(status_code=status, detail=message)
    return result.value


# ----- Leaderboards -----
@router.get("/api/bank")
def bank(store: StatsStore = Depends(get_store)) -> List[Dict[str, Any]]:
    return _ranking(store, "balance", limit=None)

@router.get("/api/topbalance")
def top_balance(store: StatsStore = Depends(get_store)) -> List[Dict[str, Any]]:
    return _ranking(store, "balance")

@router.get("/api/mostblockbroken")
def most_block_broken(store: StatsStore = Depends(get_store)) -> List[Dict[str, Any]]:
    return _ranking(store, "blockbroken")

@router.get("/api/mostplaytime")
def most_play_time(store: StatsStore = Depends(get_store)) -> List[Dict[str, Any]]:
    return _ranking(store, "playtime")

@router.get("/api/mostkills")
def most_kills(store: StatsStore = Depends(get_store)) -> List[Dict[str, Any]]:
    return _ranking(store, "kills")

@router.get("/api/mostdeath")
def most_death(store: StatsStore = Depends(get_store)) -> List[Dict[str, Any]]:
    return _ranking(store, "deaths")


# must stay last so the routes above win
@router.api_route(
    "/api/{rest:path}",
    methods=["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS", "HEAD"],
    include_in_schema=False,
)
def invalid_endpoint(rest: str):
    raise HTTPException(status_code=404, detail="Invalid API endpoint.")


# ----- Error bodies -----
def _error_response(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content=ErrorOut(error=message).model_dump())

async def http_error_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    return _error_response(exc.status_code, str(exc.detail))

async def store_error_handler(request: Request, exc: StoreUnavailable) -> JSONResponse:
    logger.error("Database error on %s %s", request.method, request.url.path, exc_info=exc)
    return _error_response(500, "Internal server error")


def create_app(store: Optional[StatsStore] = None) -> FastAPI:
    configure_logging()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        if app.state.store is None:
            app.state.store = StatsStore.from_url(settings.database_url, settings.DB_POOL_SIZE)
            try:
                app.state.store.create_schema()
            except StoreUnavailable:
                logger.exception("could not prepare player_stats table")
        yield
        app.state.store.dispose()

    app = FastAPI(title="Minecraft Stats API", lifespan=lifespan)
    app.state.store = store

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_methods=["GET"],
        allow_headers=["*"],
    )
    app.add_exception_handler(StarletteHTTPException, http_error_handler)
    app.add_exception_handler(StoreUnavailable, store_error_handler)

    app.include_router(router)
    return app


app = create_app()

# Uvicorn entrypoint (optional, used only if you run `python -m mcstats.main`)
if __name__ == "__main__":
    import uvicorn
    uvicorn.run("mcstats.main:app", host="0.0.0.0", port=settings.PORT, reload=False)
