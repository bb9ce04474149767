"""Serve the built single-page frontend: static files from the dist directory, index.html for every other GET."""

import logging
from pathlib import Path

from fastapi import FastAPI
from fastapi.responses import FileResponse, PlainTextResponse, Response
from fastapi.staticfiles import StaticFiles

logger = logging.getLogger(__name__)

INDEX_NOT_FOUND_MESSAGE = (
    "Application resource not found. Please ensure the frontend is built and `dist/index.html` exists."
)


def mount_frontend(app: FastAPI, dist_dir: str) -> None:
    """
    Register /assets and a catch-all GET route. Must run after the API router
    is included so API paths take precedence.
    """
    root = Path(dist_dir).resolve()
    app.mount("/assets", StaticFiles(directory=root / "assets", check_dir=False), name="assets")

    @app.get("/{full_path:path}", include_in_schema=False)
    def serve_frontend(full_path: str) -> Response:
        if full_path:
            candidate = (root / full_path).resolve()
            if candidate.is_relative_to(root) and candidate.is_file():
                return FileResponse(candidate)
        index_path = root / "index.html"
        if index_path.is_file():
            return FileResponse(index_path)
        logger.error("index.html not found in frontend dist folder. Path searched: %s", index_path)
        return PlainTextResponse(INDEX_NOT_FOUND_MESSAGE, status_code=404)

    logger.info("Serving frontend from %s", root)
