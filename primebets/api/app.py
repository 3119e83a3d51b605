"""FastAPI application factory."""

from __future__ import annotations

import asyncio
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from loguru import logger
from starlette.requests import Request
from starlette.responses import JSONResponse

from primebets import __version__
from primebets.api.automations import router as automations_router
from primebets.api.routes import router as core_router
from primebets.core.config.loader import load_config
from primebets.core.config.schema import Config
from primebets.core.errors import PrimeBetsError, ValidationError
from primebets.runtime import Runtime, build_runtime


def install_runtime(app: FastAPI, runtime: Runtime) -> None:
    app.state.config = runtime.config
    app.state.runtime = runtime


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup: Config → Runtime → automations → scheduler loop. Shutdown: drain."""
    runtime = getattr(app.state, "runtime", None)
    if runtime is None:
        config = getattr(app.state, "config", None) or load_config()
        runtime = build_runtime(config)
        install_runtime(app, runtime)

    runtime.automations.initialize_all()
    scheduler_task = asyncio.create_task(runtime.scheduler.start())

    logger.info(f"PrimeBets API started, timezone: {runtime.config.app.timezone}")
    yield

    # Shutdown
    await runtime.shutdown()
    scheduler_task.cancel()
    logger.info("PrimeBets API shutting down")


async def _domain_error(request: Request, exc: PrimeBetsError) -> JSONResponse:
    status = 400 if isinstance(exc, ValidationError) else 409
    return JSONResponse(status_code=status, content={"detail": str(exc)})


def create_app(config: Config | None = None) -> FastAPI:
    """Create and configure the FastAPI application.

    Without a config, one is loaded at startup (YAML + env).
    """
    app = FastAPI(
        title="PrimeBets API",
        description="Sports-betting advisor with scheduled automations",
        version=__version__,
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.api.cors_origins if config else ["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_exception_handler(PrimeBetsError, _domain_error)
    if config is not None:
        app.state.config = config

    app.include_router(core_router)
    app.include_router(automations_router)
    return app


app = create_app()
