"""Configuration API endpoints"""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter, HTTPException
from pydantic import BaseModel

from services.asset_store import AssetStoreError, get_asset_backend
from services.config_manager import ConfigManager

router = APIRouter()


class ConfigUpdateRequest(BaseModel):
    """Request to update configuration"""

    diff: dict | None = None
    assets: dict | None = None
    kv: dict | None = None


class ConfigResponse(BaseModel):
    """Configuration response"""

    diff: dict
    assets: dict
    kv: dict


class ValidateResponse(BaseModel):
    """Validation response"""

    valid: bool
    message: str
    backend: str


def mask_key(key: str) -> str:
    if not key:
        return ""
    if len(key) <= 8:
        return "*" * len(key)
    return key[:4] + "*" * (len(key) - 8) + key[-4:]


@router.get("", response_model=ConfigResponse)
async def get_config() -> ConfigResponse:
    """Get current configuration"""
    config = ConfigManager.get_instance().get_config()

    kv = config.get("kv", {}).copy()
    kv["token"] = mask_key(kv.get("token", ""))

    return ConfigResponse(
        diff=config.get("diff", {}),
        assets=config.get("assets", {}),
        kv=kv,
    )


@router.put("")
async def update_config(request: ConfigUpdateRequest) -> dict[str, Any]:
    """Update configuration"""
    config_manager = ConfigManager.get_instance()
    current_config = config_manager.get_config()

    if request.diff:
        context_lines = request.diff.get("context_lines")
        if context_lines is not None and (not isinstance(context_lines, int) or context_lines < 0):
            raise HTTPException(status_code=400, detail="context_lines must be a non-negative integer")
        granularity = request.diff.get("granularity")
        if granularity is not None and granularity not in ("line", "word"):
            raise HTTPException(status_code=400, detail="granularity must be 'line' or 'word'")
        current_config["diff"] = {**current_config.get("diff", {}), **request.diff}
    if request.assets:
        current_config["assets"] = {**current_config.get("assets", {}), **request.assets}
    if request.kv:
        current_config["kv"] = {**current_config.get("kv", {}), **request.kv}

    config_manager.save_config(current_config)

    return {"status": "success", "message": "Configuration updated"}


@router.post("/validate", response_model=ValidateResponse)
async def validate_config() -> ValidateResponse:
    """Validate the asset backend by listing assets"""
    config = ConfigManager.get_instance().get_config()
    backend_name = config.get("assets", {}).get("backend", "memory")

    try:
        backend = get_asset_backend(config)
        assets = await backend.list_assets()
    except AssetStoreError as e:
        return ValidateResponse(
            valid=False,
            message=f"Connection failed: {e}",
            backend=backend_name,
        )

    return ValidateResponse(
        valid=True,
        message=f"Successfully connected to {backend_name} ({len(assets)} assets)",
        backend=backend_name,
    )
