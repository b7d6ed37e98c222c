import logging
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from . import __version__
from .config import settings
from .db import close_mongo_connection, connect_to_mongo, get_database
from .errors import GameError
from .repositories import Stores, build_memory_stores, build_mongo_stores, ensure_indexes
from .routers import admin, battles, inventory, profile, shop, story, trades
from .state import GameServices, set_services_provider

logger = logging.getLogger(__name__)


async def _prepare_mongo_stores() -> Stores | None:
    if not await connect_to_mongo():
        return None
    database = get_database()
    try:
        await ensure_indexes(database)
        stores = build_mongo_stores(database)
        await stores.catalog.seed_if_empty()
    except Exception:  # pragma: no cover - depends on a live server
        logger.exception("Failed to prepare MongoDB collections")
        await close_mongo_connection()
        return None
    return stores


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    stores = await _prepare_mongo_stores()
    if stores is None:
        logger.warning("MongoDB connection is not available; using the in-memory game store")
        stores = build_memory_stores()
        await stores.catalog.seed_if_empty()

    services = GameServices.build(stores)
    set_services_provider(lambda: services)

    yield

    await services.battles.shutdown()
    await close_mongo_connection()


app = FastAPI(
    title="Nail Arena API",
    version=__version__,
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.allowed_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(GameError)
async def handle_game_error(request: Request, exc: GameError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error("%s on %s %s: %s", type(exc).__name__, request.method, request.url.path, exc.detail)
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.detail})


for module in (profile, inventory, shop, admin, trades, battles, story):
    app.include_router(module.router, prefix="/api")


@app.get("/", tags=["health"])
async def healthcheck() -> dict[str, str]:
    """Simple health-check endpoint."""

    return {"status": "ok"}
