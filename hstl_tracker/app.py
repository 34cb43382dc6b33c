"""
Application Factory
FastAPI app with CORS, JSON error handling and the static tracker page.
"""
from contextlib import asynccontextmanager
from collections import defaultdict
from typing import Dict, Optional, Set

from fastapi import APIRouter, FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import FileResponse, JSONResponse
from fastapi.staticfiles import StaticFiles
from starlette.exceptions import HTTPException as StarletteHTTPException

from .api.routes import router
from . import config as tracker_config
from .core.errors import MethodNotAllowed, TrackerError
from .core.logging import api_logger, configure_logging
from .store.recruitment_store import RecruitmentStore

log = api_logger()


def route_methods(app: FastAPI, api_router: APIRouter, prefix: str) -> Dict[str, Set[str]]:
    """Map each full route path to the methods registered on it."""
    table: Dict[str, Set[str]] = defaultdict(set)
    for route in api_router.routes:
        methods = getattr(route, "methods", None)
        if methods:
            table[prefix + route.path] |= methods
    # App-level routes; an included router may sit here as one entry without a path
    for route in app.router.routes:
        path = getattr(route, "path", None)
        methods = getattr(route, "methods", None)
        if isinstance(path, str) and methods:
            table[path] |= methods
    return table


def allowed_methods(app: FastAPI, request: Request, prefix: str) -> Set[str]:
    """Methods registered on the request's path."""
    table = route_methods(app, router, prefix)
    path = request.scope["path"]
    root_path = request.scope.get("root_path", "")
    if path not in table and root_path and path.startswith(root_path):
        path = path[len(root_path):]
    return table.get(path, set())


def _error_response(exc: TrackerError) -> JSONResponse:
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict(), headers=exc.headers)


def register_exception_handlers(app: FastAPI, prefix: str = ""):
    """Every error leaves the app as {"message": ...} JSON."""

    @app.exception_handler(TrackerError)
    async def tracker_error_handler(request: Request, exc: TrackerError):
        if exc.status_code >= 500:
            log.error(f"{request.method} {request.url.path} failed: {exc.message}", exc_info=exc.__cause__)
        return _error_response(exc)

    @app.exception_handler(StarletteHTTPException)
    async def http_error_handler(request: Request, exc: StarletteHTTPException):
        if exc.status_code == 405:
            return _error_response(MethodNotAllowed(request.method, allowed_methods(app, request, prefix)))
        if exc.status_code == 404:
            return JSONResponse(status_code=404, content={"message": "API endpoint not found"})
        return JSONResponse(status_code=exc.status_code, content={"message": str(exc.detail)})

    @app.exception_handler(Exception)
    async def unhandled_error_handler(request: Request, exc: Exception):
        log.error(f"Unhandled error on {request.method} {request.url.path}", exc_info=exc)
        return JSONResponse(status_code=500, content={"message": "Internal server error"})


def create_app(store: Optional[RecruitmentStore] = None, setup_logging: bool = True) -> FastAPI:
    """Build the tracker application around a store (init-once in lifespan)."""
    config = tracker_config.config

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Application lifespan handler"""
        if setup_logging:
            configure_logging(
                log_dir=config.logging.log_dir,
                log_level=config.logging.level,
                max_days=config.logging.max_days,
                json_format=config.logging.json_format,
            )
        log.info("🚀 Starting HSTL Recruitment Tracker...")
        await app.state.store.initialize()
        log.info(f"🔐 Admin password configured: {config.auth.password_configured}")
        log.info(f"🔑 Token signing secret configured: {config.auth.secret_configured}")
        log.info(f"⏱️  Token TTL: {config.auth.token_ttl_seconds}s")

        yield

        log.info("👋 Shutting down HSTL Recruitment Tracker...")

    app = FastAPI(
        title="HSTL Recruitment Tracker",
        description="Recruitment bonus tracker with a password-protected admin API",
        version="1.0.0",
        lifespan=lifespan
    )
    app.state.store = store or RecruitmentStore()

    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.server.cors_origins,
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
        allow_headers=["Content-Type", "Authorization"],
    )

    register_exception_handlers(app, config.server.api_prefix)
    app.include_router(router, prefix=config.server.api_prefix)

    frontend_dir = config.frontend_dir
    if frontend_dir.exists():
        app.mount("/static", StaticFiles(directory=frontend_dir), name="static")

    @app.get("/")
    async def root():
        """Serve the tracker page"""
        index_path = frontend_dir / "index.html"
        if index_path.exists():
            return FileResponse(index_path)
        return {"message": "HSTL Recruitment Tracker API", "docs": "/docs"}

    @app.get("/health")
    async def health():
        """Health check endpoint"""
        return {"status": "healthy"}

    return app
