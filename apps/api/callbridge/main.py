"""FastAPI application fronting Stream video for booked consultations."""
from __future__ import annotations

import logging
import traceback
from datetime import datetime, timezone
from typing import Any

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, Response

from .core.config import Settings, get_settings
from .routers import calls as calls_router
from .routers import tokens as tokens_router
from .services.errors import CallBridgeError, UpstreamUnavailable, ValidationError
from .services.stream import StreamGateway, build_gateway

logger = logging.getLogger(__name__)

SANITIZED_DETAILS = "The video service could not complete the request. Please try again later."


def create_app(settings: Settings | None = None, gateway: StreamGateway | None = None) -> FastAPI:
    """Build the API with its settings and Stream gateway attached to ``app.state``."""

    settings = settings or get_settings()
    application = FastAPI(title="Booking Call Bridge", version="0.1.0")
    application.state.settings = settings
    application.state.gateway = gateway or build_gateway(settings)

    if settings.cors_allow_origins:
        application.add_middleware(
            CORSMiddleware,
            allow_origins=settings.cors_allow_origins,
            allow_credentials=True,
            allow_methods=["*"],
            allow_headers=["*"],
        )

    application.include_router(tokens_router.router, tags=["tokens"])
    application.include_router(calls_router.router, tags=["calls"])
    application.add_api_route("/health", health, methods=["GET"], tags=["meta"])
    application.add_api_route("/health", health_head, methods=["HEAD"], tags=["meta"], include_in_schema=False)

    application.add_exception_handler(CallBridgeError, handle_call_bridge_error)
    application.add_exception_handler(RequestValidationError, handle_request_validation_error)
    application.add_exception_handler(Exception, handle_unexpected_error)
    return application


async def health(request: Request) -> dict[str, Any]:
    """Liveness probe that also reports whether Stream credentials are present."""

    settings: Settings = request.app.state.settings
    return {
        "status": "ok",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "hasApiKey": bool(settings.stream_api_key.strip()),
        "hasApiSecret": bool(settings.stream_api_secret.strip()),
        "environment": settings.app_env,
    }


async def health_head() -> Response:
    """Allow HEAD for uptime monitors that only need the status code."""

    return Response(status_code=200)


async def handle_call_bridge_error(request: Request, exc: CallBridgeError) -> JSONResponse:
    if isinstance(exc, ValidationError):
        body: dict[str, Any] = {"error": exc.message}
        if exc.missing:
            body["missing"] = exc.missing
        return JSONResponse(status_code=exc.status_code, content=body)

    body = {"error": exc.message}
    if isinstance(exc, UpstreamUnavailable):
        body["details"] = _details(request, exc.diagnostic, exc)
    if exc.code is not None:
        body["code"] = exc.code
    return JSONResponse(status_code=exc.status_code, content=body)


async def handle_request_validation_error(request: Request, exc: RequestValidationError) -> JSONResponse:
    details = [
        {"loc": list(error.get("loc", ())), "msg": error.get("msg", "")}
        for error in exc.errors()
    ]
    return JSONResponse(status_code=400, content={"error": "Invalid request body", "details": details})


async def handle_unexpected_error(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return JSONResponse(
        status_code=500,
        content={"error": "Internal server error", "details": _details(request, str(exc), exc)},
    )


def _details(request: Request, diagnostic: str, exc: BaseException) -> Any:
    """Expose upstream diagnostics and tracebacks only in development."""

    settings: Settings = request.app.state.settings
    if not settings.is_development:
        return SANITIZED_DETAILS
    return {
        "message": diagnostic,
        "stack": traceback.format_exception(type(exc), exc, exc.__traceback__),
    }


app = create_app()


def run() -> None:
    """Console entrypoint: serve the API with uvicorn."""

    import uvicorn

    settings = get_settings()
    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    uvicorn.run(app, host=settings.host, port=settings.port, log_level=settings.log_level.lower())


if __name__ == "__main__":
    run()
