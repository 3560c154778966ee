# src/pomofocus/web/router.py

"""Shared API router and request helpers for the HTTP endpoints."""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Request

from ..core.state import AppState
from ..errors import ValidationError

api_router = APIRouter(prefix="/api")


def get_app_state(request: Request) -> AppState:
    return request.app.state.pomofocus


def ensure_payload_dict(payload: Any) -> dict[str, Any]:
    if not isinstance(payload, dict):
        raise ValidationError("Invalid request", {"type": type(payload).__name__})
    return payload


def text_field(payload: dict[str, Any], key: str) -> str:
    """Read a field as trimmed text; None and missing become ""."""
    value = payload.get(key)
    if value is None:
        return ""
    return str(value).strip()
