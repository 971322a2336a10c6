"""
whisperserve.server.app - HTTP routes.

POST /transcribe takes the raw audio file as the request body and runs the
pipeline in a worker thread, so long transcodes and inference never block
the event loop. GET /health, /info and /models are informational.
"""

from __future__ import annotations

import asyncio
import logging
import time
from typing import Any

from fastapi import FastAPI, Query, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from whisperserve import __version__
from whisperserve.config import ServerConfig
from whisperserve.exceptions import EmptyUpload, WhisperServeError
from whisperserve.transcribe.pipeline import TranscriptionPipeline
from whisperserve.validation import list_models

logger = logging.getLogger(__name__)

SERVICE_NAME = "whisperserve"

ENDPOINTS = {
    "POST /transcribe": "Transcribe audio file",
    "GET /health": "Health check",
    "GET /info": "API information",
    "GET /models": "List available model files",
}


def error_response(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={"error": message, "status": status_code},
    )


def create_app(config: ServerConfig, pipeline: TranscriptionPipeline) -> FastAPI:
    """Build the FastAPI app around an already loaded pipeline.

    Args:
        config: Resolved server configuration
        pipeline: Pipeline owning the process's single engine

    Returns:
        Configured FastAPI application
    """
    app = FastAPI(title="whisperserve", version=__version__)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.state.config = config
    app.state.pipeline = pipeline

    @app.exception_handler(WhisperServeError)
    async def handle_pipeline_error(request: Request, exc: WhisperServeError) -> JSONResponse:
        if exc.client_fault:
            logger.info(f"Rejected {request.url.path}: {exc}")
        else:
            logger.error(f"Failed {request.url.path}: {exc}")
        return error_response(exc.status_code, str(exc))

    @app.get("/health")
    async def health_check() -> dict[str, str]:
        return {"status": "ok", "version": __version__}

    @app.get("/info")
    async def get_info(request: Request) -> dict[str, Any]:
        cfg: ServerConfig = request.app.state.config
        return {
            "name": SERVICE_NAME,
            "version": __version__,
            "model_path": str(cfg.model_path),
            "threads": cfg.threads,
            "max_upload_mb": cfg.max_upload_mb,
            "endpoints": ENDPOINTS,
        }

    @app.get("/models")
    async def get_models(request: Request) -> dict[str, Any]:
        cfg: ServerConfig = request.app.state.config
        return await asyncio.to_thread(list_models, cfg.model_path)

    @app.post("/transcribe")
    async def transcribe(
        request: Request,
        language: str | None = Query(None, description="Language code; auto-detect if unset"),
    ) -> Any:
        cfg: ServerConfig = request.app.state.config
        started = time.perf_counter()

        too_large = error_response(
            413, f"Audio upload exceeds the {cfg.max_upload_mb} MB limit"
        )

        declared = request.headers.get("content-length")
        if declared is not None and declared.isdigit() and int(declared) > cfg.max_upload_bytes:
            return too_large

        # chunked uploads carry no Content-Length
        body = await request.body()
        if not body:
            raise EmptyUpload("Empty audio data")
        if len(body) > cfg.max_upload_bytes:
            return too_large

        result = await asyncio.to_thread(
            request.app.state.pipeline.transcribe, body, language or None
        )

        processing_time_ms = int((time.perf_counter() - started) * 1000)
        logger.info(
            f"Transcription completed in {processing_time_ms}ms: "
            f"{result.byte_length()} bytes of text"
        )
        return {"result": result.model_dump(), "processing_time_ms": processing_time_ms}

    return app
