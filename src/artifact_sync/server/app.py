"""Reference persistence service: writes saved artifacts into a project directory."""

from __future__ import annotations

import logging
import time
from datetime import datetime
from pathlib import Path
from typing import Callable, Optional
from zoneinfo import ZoneInfo

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import ConfigDict, Field

from artifact_sync import __version__
from artifact_sync.exceptions import PersistenceError
from artifact_sync.schemas import SchemaBase
from artifact_sync.server.filenames import file_extension, filename_stem, write_unique

logger = logging.getLogger(__name__)


class ArtifactPayload(SchemaBase):
    # Content is written verbatim.
    model_config = ConfigDict(str_strip_whitespace=False)

    content: Optional[str] = None
    title: Optional[str] = None
    language: str = "text"
    project_path: Optional[str] = Field(default=None, alias="projectPath")
    timestamp: Optional[str] = None


class PathPayload(SchemaBase):
    path: str = ""


def _error(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": message})


def create_app(clock: Callable[[], float] = time.time) -> FastAPI:
    app = FastAPI(title="Artifact Sync Server", version=__version__)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.get("/api/health")
    async def health():
        return {
            "status": "ok",
            "version": __version__,
            "timestamp": datetime.now(ZoneInfo("UTC")).isoformat(),
        }

    @app.post("/api/artifact")
    def save_artifact(payload: ArtifactPayload):
        if not payload.content or not payload.project_path:
            return _error(400, "Missing required fields")

        directory = Path(payload.project_path)
        try:
            directory.mkdir(parents=True, exist_ok=True)
            filename, path = write_unique(
                directory,
                filename_stem(payload.title, payload.language),
                file_extension(payload.language),
                payload.content,
                clock=clock,
            )
        except PersistenceError as exc:
            logger.warning("Could not save artifact %r: %s", payload.title, exc.message)
            return _error(exc.status_code or 500, exc.message)
        except OSError as exc:
            logger.error("Error saving artifact %r: %s", payload.title, exc)
            return _error(500, str(exc))

        logger.info("Saved artifact: %s (%d bytes)", filename, len(payload.content))
        return {"success": True, "filename": filename, "path": str(path), "size": len(payload.content)}

    @app.post("/api/test-path")
    def test_path(payload: PathPayload):
        if payload.path and Path(payload.path).exists():
            return {"valid": True}
        return JSONResponse(status_code=404, content={"valid": False})

    return app
