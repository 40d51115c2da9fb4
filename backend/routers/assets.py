"""Asset library API endpoints"""

from __future__ import annotations

import logging
from typing import Any

from fastapi import APIRouter, Body
from fastapi.responses import JSONResponse
from pydantic import ValidationError

from models.document import Asset
from services.asset_store import AssetStoreConfigError, AssetStoreError, get_asset_backend, search_assets
from services.config_manager import ConfigManager

logger = logging.getLogger(__name__)

router = APIRouter()


def error_response(status_code: int, error: str, details: str | None = None) -> JSONResponse:
    content = {"error": error}
    if details is not None:
        content["details"] = details
    return JSONResponse(status_code=status_code, content=content)


def backend_failure(e: Exception) -> JSONResponse:
    if isinstance(e, AssetStoreConfigError):
        return error_response(500, str(e))
    logger.error("[Assets] Error: %s", e)
    return error_response(500, "Internal Server Error", str(e))


@router.get("")
async def list_assets(search: str | None = None):
    """All saved assets, optionally filtered by name/content"""
    try:
        backend = get_asset_backend(ConfigManager.get_instance().get_config())
        assets = await backend.list_assets()
    except AssetStoreError as e:
        return backend_failure(e)

    logger.info("[Assets] Fetch assets success")
    return [asset.model_dump() for asset in search_assets(assets, search)]


@router.post("")
async def save_asset(payload: dict[str, Any] | None = Body(default=None)):
    """Upsert one asset"""
    payload = payload or {}
    if not payload.get("id") or not payload.get("name") or not payload.get("content"):
        logger.warning("[Assets] POST missing fields")
        return error_response(400, "Missing fields")

    try:
        asset = Asset(
            id=str(payload["id"]),
            name=str(payload["name"]),
            content=str(payload["content"]),
            createdAt=payload.get("createdAt"),
        )
    except ValidationError:
        logger.warning("[Assets] POST invalid createdAt: %r", payload.get("createdAt"))
        return error_response(400, "Invalid createdAt")

    try:
        backend = get_asset_backend(ConfigManager.get_instance().get_config())
        saved = await backend.save_asset(asset)
    except AssetStoreError as e:
        return backend_failure(e)

    logger.info("[Assets] Saved asset %s", saved.id)
    return saved.model_dump()


@router.delete("")
async def delete_asset(id: str | None = None):
    """Remove one asset"""
    if not id:
        return error_response(400, "Missing id")

    try:
        backend = get_asset_backend(ConfigManager.get_instance().get_config())
        await backend.delete_asset(id)
    except AssetStoreError as e:
        return backend_failure(e)

    logger.info("[Assets] Deleted asset %s", id)
    return {"success": True}
