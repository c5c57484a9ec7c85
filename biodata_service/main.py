import logging
import time
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware

from .config import get_settings
from .db import close_mongo_connection, connect_to_mongo, is_connected
from .repositories.exceptions import RepositoryError
from .routers import (
    contact_requests,
    dashboard,
    favourites,
    payments,
    profiles,
    success_stories,
    users,
)
from .services.exceptions import WorkflowError
from .utils.http import OrjsonResponse, error_response

LOGGER = logging.getLogger("uvicorn.error")


@asynccontextmanager
async def lifespan(_app: FastAPI):
    await connect_to_mongo()
    try:
        yield
    finally:
        await close_mongo_connection()


app = FastAPI(title="Biodata Service API", default_response_class=OrjsonResponse, lifespan=lifespan)
settings = get_settings()

LOGGER.info("CORS allow_origins=%s", settings.allow_origins)
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.allow_origins,
    allow_methods=["*"],
    allow_headers=["*"],
    allow_credentials=True,
)
app.add_middleware(GZipMiddleware, minimum_size=512)


# Simple slow-request logger
@app.middleware("http")
async def log_slow_requests(request: Request, call_next):
    t0 = time.perf_counter()
    response = await call_next(request)
    dt = (time.perf_counter() - t0) * 1000
    if dt >= get_settings().slow_request_ms:
        LOGGER.warning(
            "[perf] slow request %s %s %dms status=%s",
            request.method,
            request.url.path,
            int(dt),
            response.status_code,
        )
    return response


@app.exception_handler(WorkflowError)
async def handle_workflow_error(_request: Request, exc: WorkflowError):
    if exc.status_code >= 500:
        LOGGER.error("Request failed: %s", exc, exc_info=exc.__cause__)
    return error_response(exc.status_code, exc.message)


@app.exception_handler(RepositoryError)
async def handle_repository_error(request: Request, exc: RepositoryError):
    LOGGER.error("Store failure on %s %s: %s", request.method, request.url.path, exc, exc_info=exc)
    return error_response(500, "internal server error")


# Routers
app.include_router(users.router)
app.include_router(profiles.router)
app.include_router(dashboard.router)
app.include_router(contact_requests.router)
app.include_router(favourites.router)
app.include_router(payments.router)
app.include_router(success_stories.router)


@app.get("/")
async def root():
    return {"status": "biodata-service-ok"}


@app.get("/health/db")
async def db_health():
    return {
        "mongo": "connected" if is_connected() else "disconnected",
        "db": str(get_settings().mongo_db),
    }
