"""FastAPI dependencies resolving shared state from the application."""

import httpx
from fastapi import HTTPException, Request

from ..config import Settings
from ..pipeline.runs import RunRegistry


def get_registry(request: Request) -> RunRegistry:
    registry: RunRegistry | None = getattr(request.app.state, "registry", None)
    if registry is None:
        raise HTTPException(status_code=503, detail="Generation pipeline is not configured")
    return registry


def get_http_client(request: Request) -> httpx.AsyncClient:
    return request.app.state.http_client


def get_settings(request: Request) -> Settings:
    return request.app.state.settings
