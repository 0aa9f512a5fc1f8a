from __future__ import annotations

import logging
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse, PlainTextResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from albums import dependencies as album_dependencies
from albums import repository as album_repository
from albums import router as albums_router
from core.logs import RequestLoggingMiddleware, configure_logging
from core.settings import Settings, load_settings

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    # An injected store (tests) is owned by the caller; only open and close
    # the one we build here.
    if app.state.album_store is not None:
        yield
        return

    settings = app.state.settings or load_settings()
    configure_logging(settings.log_level)
    store = await album_dependencies.open_store(settings)
    app.state.album_store = store
    try:
        yield
    finally:
        app.state.album_store = None
        await store.close()
        logger.info("album_store_closed store=%s", settings.album_store)


async def http_exception_handler(_: Request, exc: StarletteHTTPException) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status_code,
        content={"msg": exc.detail},
        headers=getattr(exc, "headers", None),
    )


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("unhandled_error method=%s path=%s", request.method, request.url.path)
    return JSONResponse(status_code=500, content={"msg": "internal server error"})


def create_app(
    settings: Settings | None = None,
    store: album_repository.AlbumStore | None = None,
) -> FastAPI:
    """
    Build the application.

    Settings are read from the environment at startup when not given, so
    importing this module never needs a database.
    """
    app = FastAPI(title="Album Store API", lifespan=lifespan)
    app.state.settings = settings
    app.state.album_store = store

    app.add_middleware(RequestLoggingMiddleware)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)

    app.include_router(albums_router.router, tags=["albums"])

    # Load balancer health check; touches nothing.
    @app.get("/count", response_class=PlainTextResponse)
    def count() -> str:
        return "OK"

    return app


app = create_app()


if __name__ == "__main__":
    settings = load_settings()
    configure_logging(settings.log_level)
    uvicorn.run(create_app(settings), host=settings.host, port=settings.port)
