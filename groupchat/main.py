import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError

from groupchat.config.settings import Settings, settings as default_settings
from groupchat.core.exceptions import ChatError, StorageError, Unauthenticated
from groupchat.database.engine import create_engine_from_settings, ensure_database_directory
from groupchat.database.schema import check_tables_exist, init_schema
from groupchat.modules.auth import routes as auth_routes
from groupchat.modules.users import routes as users_routes
from groupchat.modules.groups import routes as groups_routes
from groupchat.modules.messages import routes as messages_routes

logger = logging.getLogger(__name__)

GENERIC_ERROR_MESSAGE = "An unexpected error occurred"


def configure_logging(settings: Settings) -> None:
    logging.basicConfig(
        level=getattr(logging, settings.log_level.upper(), logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%SZ",
    )


class SecurityHeadersMiddleware:
    def __init__(self, app):
        self.app = app

    async def __call__(self, scope, receive, send):
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        async def send_with_headers(message):
            if message["type"] == "http.response.start":
                message.setdefault("headers", [])
                message["headers"].extend([
                    (b"X-Content-Type-Options", b"nosniff"),
                    (b"X-Frame-Options", b"DENY"),
                    (b"X-XSS-Protection", b"1; mode=block"),
                ])
            await send(message)

        await self.app(scope, receive, send_with_headers)


def register_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(ChatError)
    async def chat_error_handler(request: Request, exc: ChatError):
        headers = None
        if isinstance(exc, StorageError):
            logger.error("Storage failure on %s %s: %s", request.method, request.url.path, exc.message)
            message = GENERIC_ERROR_MESSAGE
        else:
            message = exc.message
        if isinstance(exc, Unauthenticated):
            headers = {"WWW-Authenticate": "Bearer"}
        return JSONResponse(status_code=exc.status_code, content={"error": message}, headers=headers)

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(request: Request, exc: RequestValidationError):
        errors = exc.errors()
        if errors:
            location = ".".join(str(part) for part in errors[0].get("loc", ()) if part != "body")
            message = f"{location}: {errors[0].get('msg')}" if location else errors[0].get("msg")
        else:
            message = "Invalid request"
        return JSONResponse(status_code=400, content={"error": message})

    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception):
        logger.exception(f"Unhandled exception on {request.method} {request.url.path}: {exc}")
        return JSONResponse(status_code=500, content={"error": GENERIC_ERROR_MESSAGE})


def create_app(settings: Optional[Settings] = None, engine: Optional[Engine] = None) -> FastAPI:
    """Build the API around a database engine.

    The engine is created from settings unless one is passed in (tests pass
    their own in-memory engine).
    """
    if settings is None:
        settings = default_settings
    owns_engine = engine is None
    if owns_engine:
        engine = create_engine_from_settings(settings)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger.info("Application startup")
        ensure_database_directory(engine)
        if settings.auto_create_schema:
            init_schema(engine)
        yield
        logger.info("Application shutdown")
        if owns_engine:
            engine.dispose()

    app = FastAPI(
        title=settings.app_name,
        debug=settings.debug and not settings.is_production,
        redirect_slashes=False,
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.engine = engine

    register_exception_handlers(app)

    app.add_middleware(SecurityHeadersMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.get_cors_origins_list(),
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Include module routes
    app.include_router(users_routes.router)
    app.include_router(auth_routes.router)
    app.include_router(groups_routes.router)
    app.include_router(messages_routes.router)

    @app.get("/")
    async def root():
        return {"message": "Welcome to groupchat-api", "status": "healthy"}

    @app.get("/health")
    async def health():
        return {"status": "healthy"}

    @app.get("/ready")
    async def ready():
        """Readiness probe: all four tables must exist"""
        try:
            tables_ready = check_tables_exist(app.state.engine)
        except SQLAlchemyError as e:
            logger.error(f"Readiness check failed: {e}")
            tables_ready = False
        if not tables_ready:
            return JSONResponse(status_code=503, content={"status": "not ready"})
        return {"status": "ready"}

    return app


configure_logging(default_settings)
app = create_app(default_settings)
