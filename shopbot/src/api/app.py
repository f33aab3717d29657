"""
Shopbot - FastAPI Application Factory
======================================
Builds the ASGI app: routes, CORS and the knowledge-base lifecycle.

Lifespan
--------
Startup performs the first knowledge load (a missing file is logged,
not fatal) and, in ``watch`` reload mode, starts the directory watcher
task.  Shutdown cancels the watcher.

CORS
----
``ALLOWED_ORIGINS`` entries are normalised (scheme and trailing slash
stripped) and matched with either ``http`` or ``https``.  Requests
without an ``Origin`` header are never blocked.
"""

from __future__ import annotations

import asyncio
import contextlib
import re
from collections.abc import AsyncIterator

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware

from shopbot.config.settings import Settings, settings as default_settings
from shopbot.src.api.routes import MESSAGE_REQUIRED, error_response, router
from shopbot.src.api.static import router as images_router
from shopbot.src.core.chat_engine import ChatEngine
from shopbot.src.utils.logger import get_logger, quiet_library_loggers

logger = get_logger(__name__)

_SCHEME_RE = re.compile(r"^[a-z][a-z0-9+.-]*://", re.IGNORECASE)


def normalize_origin(origin: str) -> str:
    """``"https://shop.example/"`` → ``"shop.example"``."""
    return _SCHEME_RE.sub("", origin.strip()).rstrip("/").lower()


def origin_regex(origins: list[str]) -> str | None:
    """Regex accepting every configured host over http or https, or ``None`` if none are configured."""
    hosts = sorted({normalize_origin(o) for o in origins if normalize_origin(o)})
    if not hosts:
        return None
    return r"^https?://(?:" + "|".join(re.escape(h) for h in hosts) + r")$"


def create_app(app_settings: Settings | None = None, engine: ChatEngine | None = None) -> FastAPI:
    """Create and configure the FastAPI application.

    Args:
        app_settings: Settings override (tests); defaults to the singleton.
        engine: Pre-built engine (tests); defaults to ``ChatEngine.from_settings``.

    Returns:
        FastAPI: Configured application
    """
    cfg = app_settings or default_settings
    quiet_library_loggers()
    chat_engine = engine or ChatEngine.from_settings(cfg)

    @contextlib.asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        kb = chat_engine.knowledge
        await kb.reload()
        logger.info("[API] Knowledge base ready: %s", kb.health())

        watcher: asyncio.Task[None] | None = None
        if cfg.KB_RELOAD_MODE == "watch":
            watcher = kb.start_watcher()

        try:
            yield
        finally:
            if watcher is not None:
                watcher.cancel()
                with contextlib.suppress(asyncio.CancelledError):
                    await watcher
                logger.info("[API] Knowledge watcher stopped.")

    app = FastAPI(title=cfg.APP_TITLE, description="Retrieval-augmented shop chat backend", version="0.1.0", lifespan=lifespan)
    app.state.settings = cfg
    app.state.engine = chat_engine

    app.add_middleware(
        CORSMiddleware,
        allow_origins=[],
        allow_origin_regex=origin_regex(cfg.allowed_origins),
        allow_methods=["GET", "POST", "OPTIONS"],
        allow_headers=["*"],
    )

    @app.exception_handler(RequestValidationError)
    async def validation_error(request: Request, exc: RequestValidationError):
        logger.debug("[API] Rejected request body: %s", exc.errors())
        return error_response(400, MESSAGE_REQUIRED)

    app.include_router(router)
    app.include_router(images_router)

    return app
