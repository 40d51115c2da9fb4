"""
Asset Store - Key-value persistence for the asset library

Assets live in a single hash named ``assets`` keyed by asset id. The KV
backend speaks the Redis-over-REST protocol used by Upstash and Vercel KV.
"""

from __future__ import annotations

import asyncio
import json
import logging
import os
import time
from abc import ABC, abstractmethod
from contextlib import asynccontextmanager
from typing import Any

import aiohttp

from models.document import Asset

logger = logging.getLogger(__name__)

ASSETS_KEY = "assets"
MISSING_CREDENTIALS_MESSAGE = (
    "Server Misconfiguration: Missing Redis credentials. Please check the KV storage settings."
)


class AssetStoreError(Exception):
    """Raised when the asset backend fails"""


class AssetStoreConfigError(AssetStoreError):
    """Raised when the asset backend is not configured"""


def now_millis() -> int:
    return int(time.time() * 1000)


def search_assets(assets: list[Asset], query: str | None) -> list[Asset]:
    """Filter assets whose name or content contains query, ignoring case"""
    if not query:
        return assets
    needle = query.lower()
    return [a for a in assets if needle in a.name.lower() or needle in a.content.lower()]


class AssetBackend(ABC):
    """Storage contract behind the /assets endpoints"""

    @abstractmethod
    async def list_assets(self) -> list[Asset]:
        ...

    @abstractmethod
    async def save_asset(self, asset: Asset) -> Asset:
        ...

    @abstractmethod
    async def delete_asset(self, asset_id: str) -> None:
        ...


class InMemoryAssetBackend(AssetBackend):
    """Process-local backend, mostly for development and tests"""

    def __init__(self):
        self._assets: dict[str, Asset] = {}

    async def list_assets(self) -> list[Asset]:
        return list(self._assets.values())

    async def save_asset(self, asset: Asset) -> Asset:
        if asset.createdAt is None:
            asset = asset.model_copy(update={"createdAt": now_millis()})
        self._assets[asset.id] = asset
        return asset

    async def delete_asset(self, asset_id: str) -> None:
        self._assets.pop(asset_id, None)


class KVRestAssetBackend(AssetBackend):
    """Backend for a Redis REST endpoint (Upstash / Vercel KV)"""

    def __init__(self, url: str, token: str, timeout_seconds: float = 10):
        if not url or not token:
            raise AssetStoreConfigError(MISSING_CREDENTIALS_MESSAGE)
        self.url = url.rstrip("/")
        self.token = token
        self.timeout_seconds = timeout_seconds

    @asynccontextmanager
    async def _request(self, command: list[str]):
        """POST one Redis command with automatic session cleanup"""
        timeout = aiohttp.ClientTimeout(total=self.timeout_seconds)
        headers = {"Authorization": f"Bearer {self.token}"}
        async with aiohttp.ClientSession(timeout=timeout) as session:
            async with session.post(self.url, json=command, headers=headers) as response:
                if response.status != 200:
                    error_text = await response.text()
                    logger.error("[Assets] KV error on %s: %s", command[0], error_text)
                    raise AssetStoreError(f"KV {command[0]} failed (HTTP {response.status}): {error_text}")
                yield response

    async def _command(self, *command: str) -> Any:
        try:
            async with self._request(list(command)) as response:
                data = await response.json()
        except asyncio.TimeoutError as e:
            logger.error("[Assets] KV %s timed out after %ss", command[0], self.timeout_seconds)
            raise AssetStoreError(f"KV {command[0]} timed out after {self.timeout_seconds}s") from e
        except (aiohttp.ClientError, ValueError) as e:
            raise AssetStoreError(f"KV request failed: {e}") from e

        if not isinstance(data, dict):
            raise AssetStoreError(f"KV {command[0]} returned an unexpected response")
        if "error" in data:
            raise AssetStoreError(f"KV {command[0]} failed: {data['error']}")
        return data.get("result")

    async def list_assets(self) -> list[Asset]:
        result = await self._command("HGETALL", ASSETS_KEY) or []
        # HGETALL answers with a flat [field, value, field, value, ...] list
        if isinstance(result, list):
            values = result[1::2]
        elif isinstance(result, dict):
            values = list(result.values())
        else:
            raise AssetStoreError("KV HGETALL returned an unexpected result")

        assets = []
        for value in values:
            try:
                record = json.loads(value) if isinstance(value, str) else value
                assets.append(Asset(**record))
            except (ValueError, TypeError) as e:
                logger.error("[Assets] Malformed asset record: %s", e)
                raise AssetStoreError(f"Malformed asset record: {e}") from e
        return assets

    async def save_asset(self, asset: Asset) -> Asset:
        if asset.createdAt is None:
            asset = asset.model_copy(update={"createdAt": now_millis()})
        await self._command("HSET", ASSETS_KEY, asset.id, asset.model_dump_json())
        return asset

    async def delete_asset(self, asset_id: str) -> None:
        await self._command("HDEL", ASSETS_KEY, asset_id)


_memory_backend: InMemoryAssetBackend | None = None


def resolve_kv_credentials(config: dict[str, Any]) -> tuple[str, str]:
    """KV url/token from the environment, falling back to configuration"""
    kv = config.get("kv", {})
    url = os.environ.get("KV_REST_API_URL") or os.environ.get("UPSTASH_REDIS_REST_URL") or kv.get("url", "")
    token = os.environ.get("KV_REST_API_TOKEN") or os.environ.get("UPSTASH_REDIS_REST_TOKEN") or kv.get("token", "")
    return url, token


def get_asset_backend(config: dict[str, Any]) -> AssetBackend:
    """Build the backend selected by ``assets.backend``"""
    global _memory_backend
    backend = config.get("assets", {}).get("backend", "memory")

    if backend == "kv":
        url, token = resolve_kv_credentials(config)
        if not url or not token:
            logger.error("[Assets] Missing KV/Redis credentials")
            raise AssetStoreConfigError(MISSING_CREDENTIALS_MESSAGE)
        return KVRestAssetBackend(url, token)

    if backend != "memory":
        raise AssetStoreConfigError(f"Unsupported asset backend: {backend}")

    if _memory_backend is None:
        _memory_backend = InMemoryAssetBackend()
    return _memory_backend
