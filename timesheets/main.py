from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from contextlib import asynccontextmanager
from timesheets.routers import auth_router, entries_router, timer_router, analytics_router
from timesheets.utils.logging_config import setup_logging, get_log_files_info
from timesheets.config import Settings, get_settings
from timesheets.context import AppContext
from timesheets.exceptions import (
    AuthenticationError, InvalidInputError, StoreNotConfiguredError, WriteError
)
import logging

logger = logging.getLogger(__name__)

VERSION = "1.0.0"


def create_app(settings: Settings = None, context: AppContext = None) -> FastAPI:
    settings = settings or get_settings()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        # Startup
        setup_logging(settings.log_dir, settings.log_level)
        logger.info("Starting Consultant Timesheets...")
        app.state.context = context or AppContext(settings)
        app.state.context.start()
        logger.info("Application started successfully")

        yield

        # Shutdown
        logger.info("Shutting down...")
        app.state.context.stop()
        logger.info("Application stopped")

    app = FastAPI(
        title="Consultant Timesheets",
        description="Clock tasks and hours per project, with live analytics",
        version=VERSION,
        lifespan=lifespan
    )

    # CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origin_list,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Include routers
    app.include_router(auth_router.router)
    app.include_router(entries_router.router)
    app.include_router(timer_router.router)
    app.include_router(analytics_router.router)

    _register_exception_handlers(app)

    @app.get("/")
    async def root():
        return {
            "message": "Consultant Timesheets API",
            "status": "running",
            "version": VERSION
        }

    @app.get("/health")
    async def health_check(request: Request):
        ctx = request.app.state.context
        return {
            "status": "healthy" if ctx.store.configured else "degraded",
            "database": "connected" if ctx.store.configured else "not configured",
            "scheduler": "running" if ctx.scheduler.scheduler.running else "stopped"
        }

    @app.get("/logs/info")
    async def logs_info():
        """Get information about current log files."""
        return {
            "logs_directory": settings.log_dir,
            "log_files": get_log_files_info(settings.log_dir)
        }

    return app


def _register_exception_handlers(app: FastAPI):
    @app.exception_handler(StoreNotConfiguredError)
    async def store_not_configured(request: Request, exc: StoreNotConfiguredError):
        logger.warning(f"{request.url.path}: {exc}")
        return JSONResponse(status_code=503, content={"detail": str(exc)})

    @app.exception_handler(WriteError)
    async def write_failed(request: Request, exc: WriteError):
        return JSONResponse(status_code=502, content={"detail": str(exc)})

    @app.exception_handler(InvalidInputError)
    async def invalid_input(request: Request, exc: InvalidInputError):
        return JSONResponse(status_code=422, content={"detail": str(exc), "field": exc.field})

    @app.exception_handler(AuthenticationError)
    async def not_authenticated(request: Request, exc: AuthenticationError):
        return JSONResponse(
            status_code=401,
            content={"detail": str(exc)},
            headers={"WWW-Authenticate": "Bearer"}
        )


app = create_app()
