"""ASGI entry point.

Startup order: configure logging, build the cache and HTTP client, preload
the article index. A preload failure aborts startup, so the server never
accepts traffic with a partial index.

Run with ``python -m inkwell.server`` or the ``inkwell`` console script.
"""

from __future__ import annotations

import logging
import sys
from contextlib import asynccontextmanager
from typing import TYPE_CHECKING

import structlog
import uvicorn
from starlette.applications import Starlette
from starlette.responses import JSONResponse
from starlette.routing import Route

from inkwell.config import LoggingSettings, Settings
from inkwell.errors import NotFoundError
from inkwell.handlers import resolve
from inkwell.state import build_state

if TYPE_CHECKING:
    from collections.abc import AsyncIterator

    import httpx
    from starlette.requests import Request

log = structlog.get_logger()

CACHE_HEADERS = {"Cache-Control": "public, max-age=86400"}


def configure_logging(settings: LoggingSettings) -> None:
    """Structured logs to stderr; stdout stays free for the server."""
    processors: list[structlog.typing.Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
    ]
    if settings.format == "json":
        processors += [structlog.processors.dict_tracebacks, structlog.processors.JSONRenderer()]
    else:
        processors.append(structlog.dev.ConsoleRenderer())

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(
            logging.getLevelNamesMapping()[settings.level]
        ),
        logger_factory=structlog.PrintLoggerFactory(file=sys.stderr),
        cache_logger_on_first_use=True,
    )


def create_app(settings: Settings, client: httpx.AsyncClient | None = None) -> Starlette:
    @asynccontextmanager
    async def lifespan(app: Starlette) -> AsyncIterator[None]:
        state = build_state(settings, client)
        try:
            await state.preload()
            log.info(
                "server_ready",
                articles=len(state.articles),
                pages=len(settings.pages),
                debug=settings.server.debug,
            )
            app.state.inkwell = state
            yield
        finally:
            await state.aclose()

    async def page(request: Request) -> JSONResponse:
        base_url = str(request.url.replace(query=""))
        try:
            payload = await resolve(request.app.state.inkwell, request.url.path, base_url)
        except NotFoundError as exc:
            return JSONResponse(exc.to_dict(), status_code=404)
        return JSONResponse(payload.model_dump(mode="json"), headers=CACHE_HEADERS)

    return Starlette(routes=[Route("/{path:path}", page)], lifespan=lifespan)


def main() -> None:
    settings = Settings()
    configure_logging(settings.logging)
    uvicorn.run(
        create_app(settings),
        host=settings.server.host,
        port=settings.server.port,
        lifespan="on",
        log_level=settings.logging.level.lower(),
    )


if __name__ == "__main__":
    main()
