"""FastAPI application entrypoint for mdxbundler service mode."""

from __future__ import annotations

import dataclasses
from typing import Any, Awaitable, Callable, Dict, List, Optional

from fastapi import FastAPI
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field

from ..bundler import bundle_mdx
from ..engine.api import BuildOptions, message_dict
from ..errors import BundleError, ConfigurationError
from ..frontmatter import FrontMatterError, MatterOptions
from ..markup import MarkupError, MarkupOptions
from ..models import BundleResult

BundleFunction = Callable[..., Awaitable[BundleResult]]


class BundleRequest(BaseModel):
    source: Optional[str] = None
    file: Optional[str] = None
    cwd: Optional[str] = None
    files: Dict[str, str] = Field(default_factory=dict)
    globals: Dict[str, str] = Field(default_factory=dict)
    loaders: Dict[str, str] = Field(default_factory=dict)
    bundle_directory: Optional[str] = None
    bundle_path: Optional[str] = None
    excerpt: bool = False
    image_imports: bool = False


class BundleResponse(BaseModel):
    code: str
    frontmatter: Dict[str, Any]
    excerpt: str = ""
    warnings: List[Dict[str, Any]] = Field(default_factory=list)


class HealthResponse(BaseModel):
    status: str


def create_app(bundler: BundleFunction = bundle_mdx) -> FastAPI:
    """Create the FastAPI application exposing the bundler."""

    app = FastAPI(title="mdxbundler service", version="1.0.0")

    @app.get("/health", response_model=HealthResponse)
    async def health() -> HealthResponse:
        return HealthResponse(status="ok")

    @app.post("/bundle", response_model=BundleResponse)
    async def bundle(payload: BundleRequest) -> BundleResponse:
        result = await bundler(payload.source, **_bundle_kwargs(payload))
        return BundleResponse(
            code=result.code,
            frontmatter=jsonable_encoder(result.frontmatter),
            excerpt=str(result.matter.get("excerpt") or ""),
            warnings=[message_dict(message) for message in result.errors],
        )

    @app.exception_handler(BundleError)
    async def bundle_error_handler(_: Any, exc: BundleError) -> JSONResponse:
        return JSONResponse(
            status_code=422,
            content={"detail": str(exc), "errors": [message_dict(message) for message in exc.errors]},
        )

    @app.exception_handler(ConfigurationError)
    @app.exception_handler(FrontMatterError)
    @app.exception_handler(MarkupError)
    async def input_error_handler(_: Any, exc: ValueError) -> JSONResponse:
        return JSONResponse(status_code=400, content={"detail": str(exc)})

    @app.exception_handler(FileNotFoundError)
    async def file_not_found_handler(_: Any, exc: FileNotFoundError) -> JSONResponse:
        return JSONResponse(status_code=404, content={"detail": str(exc)})

    return app


def _bundle_kwargs(payload: BundleRequest) -> Dict[str, Any]:
    kwargs: Dict[str, Any] = {
        "file": payload.file,
        "cwd": payload.cwd,
        "files": payload.files,
        "globals": payload.globals,
        "bundle_directory": payload.bundle_directory,
        "bundle_path": payload.bundle_path,
    }
    if payload.excerpt:

        def matter_options(options: MatterOptions) -> MatterOptions:
            return dataclasses.replace(options, excerpt=True)

        kwargs["matter_options"] = matter_options
    if payload.image_imports:

        def markup_options(options: MarkupOptions, frontmatter: Dict[str, Any]) -> MarkupOptions:
            return dataclasses.replace(options, image_imports=True)

        kwargs["markup_options"] = markup_options
    if payload.loaders:
        loaders = dict(payload.loaders)

        def build_options(options: BuildOptions, frontmatter: Dict[str, Any]) -> BuildOptions:
            return dataclasses.replace(options, loader={**options.loader, **loaders})

        kwargs["build_options"] = build_options
    return kwargs


def run_service(host: str = "127.0.0.1", port: int = 8000) -> None:  # pragma: no cover - integration path
    import uvicorn

    uvicorn.run(create_app(), host=host, port=port)


__all__ = ["BundleRequest", "BundleResponse", "create_app", "run_service"]
