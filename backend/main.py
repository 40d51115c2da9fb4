"""
Markdown Diff Backend - FastAPI Application Entry Point
"""

import logging
import os
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from routers import assets, config, diff, documents
from services.config_manager import ConfigManager

logging.basicConfig(
    level=os.environ.get("MDDIFF_LOG_LEVEL", "INFO"),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager - startup and shutdown logic"""
    logger.info("[Backend] Starting Markdown Diff Backend...")
    config_manager = ConfigManager.get_instance()
    backend = config_manager.get_config().get("assets", {}).get("backend", "memory")
    logger.info("[Backend] ConfigManager initialized (asset backend: %s)", backend)

    yield
    logger.info("[Backend] Shutting down Markdown Diff Backend...")


app = FastAPI(
    title="Markdown Diff Backend",
    description="Compare documents against a base with unified and split diff views",
    version="1.0.0",
    lifespan=lifespan,
)

# CORS middleware for the browser frontend
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include routers
app.include_router(diff.router, prefix="/api/diff", tags=["diff"])
app.include_router(documents.router, prefix="/api/documents", tags=["documents"])
app.include_router(assets.router, prefix="/api/assets", tags=["assets"])
app.include_router(config.router, prefix="/api/config", tags=["config"])


@app.get("/health")
async def health_check():
    """Health check endpoint"""
    return {"status": "healthy", "service": "markdown-diff-backend"}


if __name__ == "__main__":
    import uvicorn

    server = ConfigManager.get_instance().get_config().get("server", {})
    uvicorn.run(app, host=server.get("host", "0.0.0.0"), port=server.get("port", 8000))
