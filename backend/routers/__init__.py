"""Routers module - FastAPI route handlers"""

from . import assets, config, diff, documents

__all__ = ["assets", "config", "diff", "documents"]
