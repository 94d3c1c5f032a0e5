"""FastAPI application for video-chapters."""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI

from .api import router as api_router
from .config import ensure_dirs, get_completions_dir
from .core.scheduler import CleanupScheduler
from .server import mcp

logger = logging.getLogger(__name__)

# Create global cleanup scheduler instance
cleanup_scheduler = CleanupScheduler()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Manage application lifespan."""
    ensure_dirs()
    logger.info(f"Storing chapter completions in {get_completions_dir()}")

    await cleanup_scheduler.start()

    # Initialize MCP session manager (required for streamable HTTP)
    mcp.streamable_http_app()
    async with mcp.session_manager.run():
        yield

    await cleanup_scheduler.stop()


app = FastAPI(
    title="Video Chapters",
    description="Chapter segmentation and learning progress tracking for videos",
    version="0.1.0",
    lifespan=lifespan,
)

# Include REST API routes
app.include_router(api_router, prefix="/api", tags=["API"])

# Mount MCP server routes (streamable HTTP only, provides /mcp endpoint)
app.mount("/", mcp.streamable_http_app())


def main():
    """Run the server."""
    import uvicorn

    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    uvicorn.run(
        "video_chapters.app:app",
        host="0.0.0.0",
        port=8000,
        reload=False,
    )


if __name__ == "__main__":
    main()
