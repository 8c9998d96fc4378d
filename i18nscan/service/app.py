"""FastAPI application entrypoint for i18nscan service mode."""

from __future__ import annotations

import asyncio
from pathlib import Path
from typing import Any, Callable, Dict, Optional

from fastapi import Depends, FastAPI
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from .. import __version__
from ..config import ConfigError
from ..scanner import Scanner

ScannerFactory = Callable[..., Scanner]


class ScanRequest(BaseModel):
    path: str
    workers: int = 1


class ScanFileRequest(BaseModel):
    path: str
    file: str
    content: Optional[str] = None


class HealthResponse(BaseModel):
    status: str


def _default_scanner(path: str, workers: int = 1) -> Scanner:
    return Scanner.from_config(Path(path).expanduser().resolve(), workers=workers)


def create_app(scanner_factory: ScannerFactory = _default_scanner) -> FastAPI:
    """Create the FastAPI application exposing scan operations."""

    app = FastAPI(title="i18nscan Service", version=__version__)

    async def get_factory() -> ScannerFactory:
        return scanner_factory

    async def _in_executor(func: Callable[[], Dict[str, Any]]) -> Dict[str, Any]:
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(None, func)

    @app.get("/health", response_model=HealthResponse)
    async def health() -> HealthResponse:
        return HealthResponse(status="ok")

    @app.post("/scan")
    async def scan_project(
        payload: ScanRequest,
        factory: ScannerFactory = Depends(get_factory),
    ) -> Dict[str, Any]:
        def _run_scan() -> Dict[str, Any]:
            return factory(payload.path, workers=payload.workers).scan().to_dict()

        return await _in_executor(_run_scan)

    @app.post("/scan-file")
    async def scan_file(
        payload: ScanFileRequest,
        factory: ScannerFactory = Depends(get_factory),
    ) -> Dict[str, Any]:
        def _run_scan_file() -> Dict[str, Any]:
            scanner = factory(payload.path)
            return scanner.scan_single_file(payload.file, payload.content).to_dict()

        return await _in_executor(_run_scan_file)

    @app.exception_handler(FileNotFoundError)
    async def file_not_found_handler(_: Any, exc: FileNotFoundError) -> JSONResponse:
        return JSONResponse(status_code=404, content={"detail": str(exc)})

    @app.exception_handler(ConfigError)
    async def config_error_handler(_: Any, exc: ConfigError) -> JSONResponse:
        return JSONResponse(status_code=400, content={"detail": str(exc)})

    return app


def run_service(
    host: str = "127.0.0.1", port: int = 8000
) -> None:  # pragma: no cover - integration path
    import uvicorn

    uvicorn.run(create_app(), host=host, port=port)
