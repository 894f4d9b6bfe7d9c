from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI, HTTPException, Request
from fastapi.exception_handlers import http_exception_handler
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from ringrules import __version__
from ringrules.api.dependencies import get_runtime
from ringrules.api.errors import ERROR_HEADER, from_domain_error
from ringrules.api.routes import automation, health
from ringrules.core.domain.errors import RingrulesError
from ringrules.core.utils.log_setup import configure_logging

logger = structlog.get_logger()


async def ringrules_http_exception_handler(
    request: Request,
    exc: HTTPException,
) -> JSONResponse:
    """Return standardized error responses for ringrules exceptions."""
    if exc.headers and exc.headers.get(ERROR_HEADER) == "1" and isinstance(exc.detail, dict):
        return JSONResponse(status_code=exc.status_code, content=exc.detail, headers=exc.headers)
    return await http_exception_handler(request, exc)


async def ringrules_error_handler(request: Request, exc: RingrulesError) -> JSONResponse:
    """Translate domain errors escaping a route into ErrorResponse payloads."""
    http_exc = from_domain_error(exc)
    if http_exc.status_code >= 500:
        logger.error("api.domain_error", path=request.url.path, code=exc.code, error=exc.message)
    return JSONResponse(
        status_code=http_exc.status_code, content=http_exc.detail, headers=http_exc.headers
    )


def _resolve_runtime(app: FastAPI):
    provider = app.dependency_overrides.get(get_runtime, get_runtime)
    return provider()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Start the scheduler if enabled; drain in-flight events on shutdown."""
    runtime = _resolve_runtime(app)
    configure_logging(runtime.config.logging.level)
    scheduler_enabled = runtime.config.scheduler.enabled
    if scheduler_enabled:
        await runtime.scheduler.start()
    await logger.ainfo(
        "fastapi.startup",
        message="ringrules API starting...",
        scheduler_enabled=scheduler_enabled,
        work_dir=runtime.config.work_dir,
    )
    yield
    await logger.ainfo("fastapi.shutdown", message="ringrules API shutting down...")
    await runtime.scheduler.stop()
    await runtime.engine.drain()


def create_app() -> FastAPI:
    """Create and configure FastAPI application."""
    configure_logging()
    app = FastAPI(
        title="ringrules Automation API",
        description="Tenant automation rules, execution log and job scheduler",
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan,
    )

    app.add_exception_handler(HTTPException, ringrules_http_exception_handler)
    app.add_exception_handler(RingrulesError, ringrules_error_handler)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(automation.router, prefix="/api/v1", tags=["automation"])
    app.include_router(health.router, tags=["health"])
    return app


app = create_app()

if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host="0.0.0.0", port=8070)
