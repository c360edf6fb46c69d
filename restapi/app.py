from __future__ import annotations

import logging
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pymongo import MongoClient
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.middleware.base import BaseHTTPMiddleware

from restapi.core.config import Settings, get_settings
from restapi.core.logs import configure_logging
from restapi.db import create_client, get_users_collection
from restapi.repositories.user_repository import UserRepository
from restapi.routers import root as root_router
from restapi.routers import users as users_router
from restapi.services.user_service import UserError, UserService, UserValidationError

logger = logging.getLogger(__name__)


class ErrorFallbackMiddleware(BaseHTTPMiddleware):
    """Turn any exception that escaped the routers into a 500 JSON response."""

    async def dispatch(self, request, call_next):
        try:
            return await call_next(request)
        except Exception as exc:
            logger.exception("unhandled error on %s %s", request.method, request.url.path)
            return JSONResponse({"error": str(exc)}, status_code=500)


async def _user_error_handler(request: Request, exc: UserError) -> JSONResponse:
    content = {"error": exc.message}
    if isinstance(exc, UserValidationError) and exc.fields:
        content["fields"] = exc.fields
    logger.info("%s %s -> %d %s", request.method, request.url.path, exc.status_code, exc.message)
    return JSONResponse(content, status_code=exc.status_code)


async def _http_error_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    return JSONResponse({"error": exc.detail}, status_code=exc.status_code, headers=getattr(exc, "headers", None))


def _lifespan_for(settings: Settings, mongo_client: MongoClient | None):
    @asynccontextmanager
    async def lifespan(app: FastAPI):
        client = mongo_client if mongo_client is not None else create_client(settings)
        repository = UserRepository(get_users_collection(client, settings))
        app.state.mongo_client = client
        app.state.user_service = UserService(repository)
        logger.info("API server is running on port %s", settings.port)
        try:
            yield
        finally:
            app.state.user_service = None
            # injected clients belong to the caller
            if mongo_client is None:
                client.close()
            logger.info("API server stopped")

    return lifespan


def create_app(settings: Settings | None = None, mongo_client: MongoClient | None = None) -> FastAPI:
    """Factory compatible with uvicorn/gunicorn; tests inject ``mongo_client``."""
    settings = settings or get_settings()
    configure_logging(settings.log_level)
    app = FastAPI(title="REST API", lifespan=_lifespan_for(settings, mongo_client))
    app.state.settings = settings

    # last added wraps outermost: CORS headers must also reach fallback 500s
    app.add_middleware(ErrorFallbackMiddleware)
    if settings.cors_origins:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=sorted(settings.cors_origins),
            allow_credentials=True,
            allow_methods=["GET", "POST", "PATCH", "DELETE", "OPTIONS"],
            allow_headers=["*"],
        )

    app.add_exception_handler(UserError, _user_error_handler)
    app.add_exception_handler(StarletteHTTPException, _http_error_handler)

    app.include_router(root_router.router)
    app.include_router(users_router.router)
    return app


app = create_app()


def main() -> None:
    settings = get_settings()
    uvicorn.run(app, host=settings.host, port=settings.port, log_level=settings.log_level.lower())
