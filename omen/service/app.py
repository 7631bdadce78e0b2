"""FastAPI application entrypoint for omen service mode."""

from __future__ import annotations

import asyncio
from typing import Any, Callable, List, Optional

import uvicorn
from fastapi import Depends, FastAPI
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from ..config import ConfigError
from ..generator import IndexGenerator
from ..logging import get_logger
from ..models import GenerationResult

logger = get_logger("service")


class GenerateRequest(BaseModel):
    path: str
    output_format: Optional[str] = None


class GenerateResponse(BaseModel):
    file_count: int
    function_count: int
    class_count: int
    outputs: List[str]


class HealthResponse(BaseModel):
    status: str


def _default_generator() -> IndexGenerator:
    return IndexGenerator()


def create_app(
    generator_factory: Callable[[], IndexGenerator] = _default_generator,
) -> FastAPI:
    """Create the FastAPI application exposing index generation."""
    app = FastAPI(title="Omen Service", version="0.1.0")

    async def get_generator() -> IndexGenerator:
        return generator_factory()

    @app.get("/health", response_model=HealthResponse)
    async def health() -> HealthResponse:
        return HealthResponse(status="ok")

    @app.post("/generate", response_model=GenerateResponse)
    async def generate(
        payload: GenerateRequest,
        generator: IndexGenerator = Depends(get_generator),
    ) -> GenerateResponse:
        def _run_generate() -> GenerationResult:
            return generator.generate(payload.path, output_format=payload.output_format)

        loop = asyncio.get_running_loop()
        result = await loop.run_in_executor(None, _run_generate)
        return GenerateResponse(
            file_count=result.file_count,
            function_count=result.function_count,
            class_count=result.class_count,
            outputs=[str(path) for path in result.outputs],
        )

    @app.exception_handler(FileNotFoundError)
    async def file_not_found_handler(_: Any, exc: FileNotFoundError) -> JSONResponse:
        return JSONResponse(status_code=404, content={"detail": str(exc)})

    @app.exception_handler(NotADirectoryError)
    async def not_a_directory_handler(_: Any, exc: NotADirectoryError) -> JSONResponse:
        return JSONResponse(status_code=400, content={"detail": str(exc)})

    @app.exception_handler(ConfigError)
    async def config_error_handler(_: Any, exc: ConfigError) -> JSONResponse:
        return JSONResponse(status_code=400, content={"detail": str(exc)})

    return app


def run_service(host: str = "127.0.0.1", port: int = 8000) -> None:  # pragma: no cover
    logger.info("Starting omen service on %s:%d", host, port)
    uvicorn.run(create_app(), host=host, port=port)
