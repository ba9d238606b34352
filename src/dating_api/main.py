import logging
import time

import redis.asyncio as redis
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from dating_api.config import load_settings
from dating_api.db.db import Database
from dating_api.db.discover import DiscoveryStore
from dating_api.db.profile import ProfileStore
from dating_api.db.session import SessionStore
from dating_api.db.swipe import PostgresLedgerStore
from dating_api.errors import StoreError
from dating_api.routes import discover, swipe, users
from dating_api.services.matcher import SwipeMatcher

logging.basicConfig(
    level=logging.INFO,
    format="[%(asctime)s] %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

app = FastAPI(title="Dating API")

app.include_router(users.router, tags=["Users"])
app.include_router(discover.router, tags=["Discover"])
app.include_router(swipe.router, tags=["Swipe"])


@app.middleware("http")
async def log_requests(request: Request, call_next):
    start = time.time()
    try:
        response = await call_next(request)
    except Exception:
        logger.exception(f"Unhandled request error: {request.method} {request.url.path}")
        raise
    duration_ms = round((time.time() - start) * 1000, 2)
    level = logging.INFO
    if response.status_code >= 500:
        level = logging.ERROR
    elif response.status_code >= 400:
        level = logging.WARNING
    logger.log(level, f"HTTP {request.method} {request.url.path} -> {response.status_code} in {duration_ms}ms")
    return response


@app.exception_handler(StoreError)
async def store_error_handler(request: Request, exc: StoreError):
    logger.info(f"{request.url.path} failed: {exc.message}")
    return JSONResponse(status_code=exc.status_code, content={"error": exc.message})


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError):
    for error in exc.errors():
        logger.error(f"Validation error on {request.url.path}: field={error.get('loc')} type={error.get('type')}")
    return JSONResponse(status_code=400, content={"error": "request body contained unexpected values"})


@app.on_event("startup")
async def on_startup():
    settings = load_settings()
    database = Database(settings)
    await database.init()
    redis_client = redis.from_url(
        settings.redis_url, decode_responses=True, socket_timeout=settings.db_timeout
    )

    app.state.settings = settings
    app.state.database = database
    app.state.redis = redis_client
    app.state.profile_store = ProfileStore(database.pool, settings.db_timeout)
    app.state.discovery_store = DiscoveryStore(database.pool, settings.db_timeout)
    app.state.session_store = SessionStore(redis_client, settings.session_ttl)
    app.state.matcher = SwipeMatcher(PostgresLedgerStore(database.pool), settings.db_timeout)
    logger.info("Resources initialized.")


@app.on_event("shutdown")
async def on_shutdown():
    await app.state.database.close()
    await app.state.redis.aclose()
    logger.info("Resources closed.")
