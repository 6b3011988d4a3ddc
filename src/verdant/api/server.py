"""FastAPI app factory and CLI entry point."""

from __future__ import annotations

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from pathlib import Path

import click
import uvicorn
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from verdant.api.routes import router
from verdant.application.context import GovernanceContext
from verdant.config import VerdantConfig
from verdant.domain.exceptions import (
    ComponentNotFound,
    CompletionUnavailable,
    PersistenceError,
    UnknownAgent,
    UnknownZone,
    ValidationError,
    VerdantError,
)
from verdant.logging_setup import setup_logging
from verdant.wiring import build_context

logger = logging.getLogger(__name__)

# Most specific first; the first isinstance match wins.
_STATUS_CODES: tuple[tuple[type[VerdantError], int], ...] = (
    (ComponentNotFound, 404),
    (UnknownAgent, 400),
    (UnknownZone, 400),
    (ValidationError, 400),
    (CompletionUnavailable, 503),
    (PersistenceError, 500),
)


def status_for(error: VerdantError) -> int:
    for error_type, status in _STATUS_CODES:
        if isinstance(error, error_type):
            return status
    return 500


async def _verdant_error_handler(request: Request, exc: Exception) -> JSONResponse:
    assert isinstance(exc, VerdantError)
    status = status_for(exc)
    if status >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc)
    return JSONResponse(status_code=status, content={"error": str(exc)})


def create_app(context: GovernanceContext | None = None) -> FastAPI:
    """
    Create and configure the FastAPI application.

    Args:
        context: Governance context to serve (default build_context())
    """
    context = context or build_context()

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        context.init()
        try:
            yield
        finally:
            context.teardown()

    app = FastAPI(title="Verdant Governance", lifespan=lifespan)
    app.state.context = context
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["GET", "POST"],
        allow_headers=["Content-Type"],
    )
    app.add_exception_handler(VerdantError, _verdant_error_handler)
    app.include_router(router)
    return app


@click.command()
@click.option(
    "--project-root",
    type=click.Path(exists=True, file_okay=False, path_type=Path),
    default=None,
    help="Design-system project root (default: $VERDANT_PROJECT_ROOT or cwd).",
)
@click.option("--host", default="127.0.0.1", help="Bind address.")
@click.option("--port", default=3001, type=int, help="Port number.")
@click.option("--log-file", default=None, type=click.Path(), help="Path to log file.")
@click.option("-v", "--verbose", is_flag=True, help="Enable verbose (DEBUG) logging.")
def main(
    project_root: Path | None,
    host: str,
    port: int,
    log_file: str | None,
    verbose: bool,
) -> None:
    """Start the governance server."""
    setup_logging(verbose=verbose, log_file=log_file)
    config = VerdantConfig.from_env(project_root=project_root)
    app = create_app(build_context(config))
    logger.info("Serving %s on http://%s:%d", config.project_root, host, port)
    uvicorn.run(app, host=host, port=port, log_config=None)
