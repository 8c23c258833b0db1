"""FastAPI dependencies for objects built once at startup."""
from __future__ import annotations

from fastapi import Request

from .core.config import Settings
from .services.stream import StreamGateway


def get_gateway(request: Request) -> StreamGateway:
    return request.app.state.gateway


def get_app_settings(request: Request) -> Settings:
    return request.app.state.settings
