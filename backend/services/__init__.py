"""Services module - Business logic layer"""

from .asset_store import AssetBackend, InMemoryAssetBackend, KVRestAssetBackend, get_asset_backend
from .config_manager import ConfigManager
from .diff_engine import DiffComputationError, compute_diff
from .diff_generator import DiffGenerator, build_hunks, format_unified_patch
from .diff_renderer import render_split, render_unified, word_segments
from .document_store import DocumentCollection, DocumentNotFoundError

__all__ = [
    "AssetBackend",
    "InMemoryAssetBackend",
    "KVRestAssetBackend",
    "get_asset_backend",
    "ConfigManager",
    "DiffComputationError",
    "compute_diff",
    "DiffGenerator",
    "build_hunks",
    "format_unified_patch",
    "render_split",
    "render_unified",
    "word_segments",
    "DocumentCollection",
    "DocumentNotFoundError",
]
