"""
Top-lists FastAPI service - publishes top-N materials and customers to host slots.

Entrypoint: uvicorn services.toplists.main:app --host 0.0.0.0 --port 8000
"""

import uuid
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, Response
from starlette.responses import JSONResponse

from services.toplists.config import settings
from services.toplists.middleware.cors import setup_cors
from services.toplists.middleware.sentry import setup_sentry
from services.toplists.routers import health, top_lists
from services.toplists.wiring import (
    build_http_client,
    build_refresher,
    build_store,
    connect_redis,
)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup/shutdown lifecycle."""
    setup_sentry()

    # Variable store degrades to in-memory when Redis is not reachable
    redis_client = await connect_redis(settings)
    store = build_store(settings, redis_client)

    http_client = build_http_client(settings)

    app.state.settings = settings
    app.state.redis = redis_client
    app.state.store = store
    app.state.refresher = build_refresher(settings, http_client, store)

    yield

    await http_client.aclose()
    if redis_client:
        await redis_client.aclose()


app = FastAPI(
    title="Top Lists API",
    version=settings.app_version,
    docs_url="/docs" if settings.environment == "development" else None,
    redoc_url=None,
    lifespan=lifespan,
)

app.include_router(health.router)
app.include_router(top_lists.router)

# CORS (needs to be outermost to handle preflight)
setup_cors(app)


@app.middleware("http")
async def request_id_middleware(request: Request, call_next) -> Response:
    request_id = request.headers.get("x-request-id", str(uuid.uuid4()))
    request.state.request_id = request_id
    response = await call_next(request)
    response.headers["X-Request-ID"] = request_id
    return response


# -- Exception Handlers --

@app.exception_handler(404)
async def not_found_handler(request: Request, exc) -> JSONResponse:
    return JSONResponse(
        status_code=404,
        content={
            "success": False,
            "error": {"code": "NOT_FOUND", "message": "Resource not found."},
            "requestId": getattr(request.state, "request_id", str(uuid.uuid4())),
        },
    )


@app.exception_handler(422)
async def validation_error_handler(request: Request, exc) -> JSONResponse:
    return JSONResponse(
        status_code=422,
        content={
            "success": False,
            "error": {
                "code": "VALIDATION_ERROR",
                "message": str(exc.detail) if hasattr(exc, "detail") else "Validation error.",
            },
            "requestId": getattr(request.state, "request_id", str(uuid.uuid4())),
        },
    )


@app.exception_handler(503)
async def unavailable_handler(request: Request, exc) -> JSONResponse:
    return JSONResponse(
        status_code=503,
        content={
            "success": False,
            "error": {"code": "UNAVAILABLE", "message": str(getattr(exc, "detail", "Unavailable."))},
            "requestId": getattr(request.state, "request_id", str(uuid.uuid4())),
        },
    )


@app.exception_handler(409)
async def conflict_handler(request: Request, exc) -> JSONResponse:
    return JSONResponse(
        status_code=409,
        content={
            "success": False,
            "error": {"code": "CONFLICT", "message": str(getattr(exc, "detail", "Conflict."))},
            "requestId": getattr(request.state, "request_id", str(uuid.uuid4())),
        },
    )
