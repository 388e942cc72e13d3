# Use postponed evaluation of annotations so type hints stay as strings at runtime.
from __future__ import annotations

from datetime import datetime, timezone
import logging
import time

# `FastAPI` exposes the economy and the network documents as HTTP endpoints for the browser game.
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

# Network endpoints are stateful (they go through the store); compute endpoints are pure previews.
from trainbuilder.api.compute_routes import router as compute_router
from trainbuilder.api.routes import router as network_router
from trainbuilder.api.schemas import HealthOut
from trainbuilder.api.service import NetworkService

# `AppConfig` is the typed config model so we can avoid globals and magic strings.
from trainbuilder.config.models import AppConfig
from trainbuilder.errors import TrainBuilderError

# Central logging configuration keeps operational debugging consistent across scripts and the API.
from trainbuilder.utils.logging import configure_logging, log_request


logger = logging.getLogger(__name__)


def _format_validation_errors(exc: RequestValidationError) -> str:
    parts = []
    for err in exc.errors():
        loc = ".".join(str(x) for x in err.get("loc", ()) if x != "body")
        parts.append(f"{loc}: {err.get('msg')}" if loc else str(err.get("msg")))
    return "; ".join(parts) or "Invalid request"


def _jsonable_errors(exc: RequestValidationError) -> list[dict[str, object]]:
    return [
        {"loc": [str(x) for x in err.get("loc", ())], "msg": str(err.get("msg")), "type": str(err.get("type"))}
        for err in exc.errors()
    ]


def register_error_handlers(app: FastAPI, *, dev_mode: bool) -> None:
    # Domain errors carry their own status code and payload (see `trainbuilder.errors`).
    @app.exception_handler(TrainBuilderError)
    async def handle_domain_error(request: Request, exc: TrainBuilderError) -> JSONResponse:
        if exc.status_code >= 500:
            logger.error("%s %s failed: %s", request.method, request.url.path, exc.message)
            payload = exc.to_payload() if dev_mode else {"error": "Internal Server Error"}
            return JSONResponse(status_code=exc.status_code, content=payload)
        return JSONResponse(status_code=exc.status_code, content=exc.to_payload())

    # Malformed bodies share the 400 shape of ValidationError instead of FastAPI's default 422.
    @app.exception_handler(RequestValidationError)
    async def handle_request_validation(request: Request, exc: RequestValidationError) -> JSONResponse:
        return JSONResponse(
            status_code=400,
            content={"error": _format_validation_errors(exc), "details": _jsonable_errors(exc)},
        )

    # Unmatched routes and wrong methods: keep the `{error}` shape and echo the path.
    @app.exception_handler(StarletteHTTPException)
    async def handle_http_error(request: Request, exc: StarletteHTTPException) -> JSONResponse:
        return JSONResponse(
            status_code=exc.status_code,
            content={"error": str(exc.detail), "path": request.url.path},
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(Exception)
    async def handle_unexpected(request: Request, exc: Exception) -> JSONResponse:
        logger.exception("Unhandled error on %s %s", request.method, request.url.path)
        message = str(exc) if dev_mode else "Internal Server Error"
        return JSONResponse(status_code=500, content={"error": message})


# This app factory builds the FastAPI application from a typed config.
def create_app(config: AppConfig) -> FastAPI:
    # Configure logging first so every subsequent log line follows the same format/level.
    configure_logging(config.logging, dev_mode=config.app.dev_mode)

    app = FastAPI(title=config.app.name)

    # Store the service on `app.state` so route handlers reach it through `Depends` instead of globals.
    app.state.network_service = NetworkService(config)
    app.state.started_at = time.monotonic()

    register_error_handlers(app, dev_mode=config.app.dev_mode)

    @app.middleware("http")
    async def request_timing(request: Request, call_next):  # type: ignore[no-untyped-def]
        start = time.perf_counter()
        response = await call_next(request)
        log_request(request.method, request.url.path, response.status_code, (time.perf_counter() - start) * 1000)
        return response

    # The browser client calls `<host>/api/...`; `/health` stays at the root.
    app.include_router(network_router, prefix=config.app.api_prefix)
    app.include_router(compute_router, prefix=config.app.api_prefix)

    @app.get("/health", response_model=HealthOut)
    def health() -> HealthOut:
        return HealthOut(
            status="ok",
            timestamp=datetime.now(timezone.utc),
            uptime=round(time.monotonic() - app.state.started_at, 3),
            environment="development" if config.app.dev_mode else "production",
        )

    logger.info("Serving networks from %s", config.storage.networks_dir)
    return app
