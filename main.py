"""
main.py
───────
Storefront Backend: FastAPI application entry point.

Startup sequence
────────────────
1. Load settings from .env (validated by pydantic-settings).
2. Configure structured logging.
3. Create database tables (and optionally seed demo data) via the lifespan hook.
4. Register CORS middleware.
5. Mount the API router under /api.
6. Register exception handlers so every error is returned as {"error": "..."}.
"""

import logging
import logging.config
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlmodel import Session
from starlette.exceptions import HTTPException as StarletteHTTPException

from storefront.api import routes
from storefront.core.config import get_settings
from storefront.database import create_db_and_tables, engine
from storefront.seed import seed_database

logging.config.dictConfig(
    {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "default": {
                "format": "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
                "datefmt": "%Y-%m-%d %H:%M:%S",
            }
        },
        "handlers": {
            "console": {
                "class": "logging.StreamHandler",
                "formatter": "default",
            }
        },
        "root": {"level": "INFO", "handlers": ["console"]},
        # Quieten SQLAlchemy in production
        "loggers": {
            "sqlalchemy.engine": {
                "level": "DEBUG" if get_settings().APP_DEBUG else "WARNING",
                "handlers": ["console"],
                "propagate": False,
            }
        },
    }
)

logger = logging.getLogger(__name__)
settings = get_settings()

GENERIC_ERROR = "An unexpected error occurred. Please try again."


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Run startup / shutdown logic around the application lifetime."""
    logger.info("Starting storefront backend (env=%s)", settings.APP_ENV)
    create_db_and_tables()
    logger.info("Database tables created / verified.")
    if settings.SEED_ON_STARTUP:
        with Session(engine) as session:
            seed_database(session)
    if not settings.assistant_enabled:
        logger.warning("OPENAI_API_KEY is not set; /api/assistant/chat will answer 503.")
    yield
    logger.info("Storefront backend shutting down.")


app = FastAPI(
    title="Storefront API",
    version=routes.API_VERSION,
    description=(
        "Persona-driven e-commerce backend.\n\n"
        "Core features:\n"
        "- **Catalogue**: browse, search and filter products\n"
        "- **Recommendations**: preference- and history-based picks with a trending fallback\n"
        "- **Dynamic pricing**: loyalty, accessibility and time-of-day discounts\n"
        "- **Cart & wishlist**: persisted per shopper\n"
        "- **Shopping assistant**: AI chat with catalogue and cart tools\n"
    ),
    lifespan=lifespan,
    docs_url="/docs",
    redoc_url="/redoc",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    """Reshape HTTP errors raised by routes and services into {"error": ...}."""
    if exc.status_code >= 500:
        logger.error("%s %s -> %d: %s", request.method, request.url.path, exc.status_code, exc.detail)
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": str(exc.detail)},
        headers=getattr(exc, "headers", None),
    )


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Missing or malformed input is a plain 400 with a readable message."""
    problems = []
    for err in exc.errors():
        location = ".".join(str(part) for part in err.get("loc", ()) if part != "body")
        problems.append(f"{location}: {err.get('msg')}" if location else str(err.get("msg")))
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"error": "; ".join(problems) or "Invalid request"},
    )


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """
    Catch-all handler so unhandled exceptions return a clean JSON response
    instead of an HTML traceback (important in production).
    """
    logger.exception("Unhandled exception on %s %s", request.method, request.url)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"error": GENERIC_ERROR},
    )


app.include_router(routes.router, prefix="/api")
