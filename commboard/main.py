import os
import sys
import logging
import logging.config
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from commboard.api.deps import build_services
from commboard.api.routes import admin, boards, cards, social, system
from commboard.core.config import Settings
from commboard.core.errors import CommboardError, LimitExceeded, ValidationFailed
from commboard.core.identity import IdentityClient
from commboard.db.base import Base
from commboard.db.session import make_engine, make_sessionmaker

# Load logging config if present
if os.path.exists("logging.conf"):
    logging.config.fileConfig("logging.conf", disable_existing_loggers=False)
else:
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s | %(levelname)s | %(name)s | %(message)s",
        stream=sys.stdout,
    )
logger = logging.getLogger(__name__)


def _error_body(exc: CommboardError) -> dict:
    body = {"detail": exc.message}
    if isinstance(exc, LimitExceeded):
        body["limit"] = exc.limit
        body["maximum"] = exc.maximum
    elif isinstance(exc, ValidationFailed) and exc.field:
        body["field"] = exc.field
    return body


def _validation_message(exc: RequestValidationError) -> str:
    errors = exc.errors()
    if not errors:
        return "Invalid request body"
    first = errors[0]
    location = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
    return f"Invalid request body: {location or 'body'}: {first.get('msg', 'invalid')}"


def register_error_handlers(app: FastAPI) -> None:
    @app.exception_handler(CommboardError)
    async def handle_domain_error(request: Request, exc: CommboardError):
        if exc.status_code >= 500:
            logger.error(f"{request.method} {request.url.path} failed: {exc.message}")
        return JSONResponse(status_code=exc.status_code, content=_error_body(exc))

    @app.exception_handler(RequestValidationError)
    async def handle_bad_request(request: Request, exc: RequestValidationError):
        return JSONResponse(status_code=400, content={"detail": _validation_message(exc)})

    @app.exception_handler(Exception)
    async def handle_unexpected(request: Request, exc: Exception):
        logger.error(f"Unhandled error on {request.method} {request.url.path}", exc_info=exc)
        return JSONResponse(status_code=500, content={"detail": "Internal Server Error"})


def create_app(settings: Optional[Settings] = None, identity: Optional[IdentityClient] = None) -> FastAPI:
    settings = settings or Settings.from_env()
    engine = make_engine(settings)
    sessions = make_sessionmaker(engine)
    identity = identity or IdentityClient(
        settings.identity_api_url,
        settings.identity_api_key,
        timeout=settings.identity_timeout,
    )

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        # Startup logic
        async with engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
        logger.info("Database initialized")

        yield  # App runs here

        await identity.close()
        await engine.dispose()
        logger.info("Shutting down...")

    app = FastAPI(
        title="Communication Boards API",
        version="1.0",
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.engine = engine
    app.state.sessions = sessions
    app.state.services = build_services(settings, sessions, identity)

    if settings.env == "development":
        app.add_middleware(
            CORSMiddleware,
            allow_origins=["http://localhost:3000", "http://127.0.0.1:3000"],
            allow_credentials=True,
            allow_methods=["*"],
            allow_headers=["*"],
        )
        logger.info("CORS allowed for development environment")
    elif settings.cors_origins:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=list(settings.cors_origins),
            allow_credentials=True,
            allow_methods=["*"],
            allow_headers=["*"],
        )
    else:
        logger.info("Running in production environment - CORS restricted")

    if not settings.admin_identifiers:
        logger.warning("ADMIN_EMAILS is not set; admin endpoints are unreachable")

    register_error_handlers(app)

    # API routes
    app.include_router(boards.router)
    app.include_router(cards.router)
    app.include_router(social.router)
    app.include_router(admin.router)
    app.include_router(system.router)

    return app


app = create_app()
