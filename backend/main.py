"""FastAPI application wiring."""
from __future__ import annotations

import logging
import time
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from backend.api.routes import languages, sync, translations
from backend.config import Settings, get_settings
from backend.ingest.documents import DirectorySource
from backend.store.errors import (
    DecodeError,
    InvalidKeyError,
    InvalidLanguageError,
    KeyCollisionError,
    LanguageExistsError,
    LanguageNotFound,
)
from backend.store.translator import TranslationStore

logger = logging.getLogger(__name__)


def _error(status_code: int, detail: str, exc: Exception) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"detail": detail, "message": str(exc)})


def register_error_handlers(app: FastAPI) -> None:
    @app.exception_handler(LanguageNotFound)
    async def language_not_found(request: Request, exc: LanguageNotFound):
        return _error(404, "language_not_found", exc)

    @app.exception_handler(LanguageExistsError)
    async def language_exists(request: Request, exc: LanguageExistsError):
        return _error(409, "language_exists", exc)

    @app.exception_handler(InvalidLanguageError)
    async def invalid_language(request: Request, exc: InvalidLanguageError):
        return _error(400, "invalid_language", exc)

    @app.exception_handler(InvalidKeyError)
    async def invalid_key(request: Request, exc: InvalidKeyError):
        return _error(400, "invalid_key", exc)

    @app.exception_handler(KeyCollisionError)
    async def key_collision(request: Request, exc: KeyCollisionError):
        return _error(409, "key_collision", exc)

    @app.exception_handler(DecodeError)
    async def decode_error(request: Request, exc: DecodeError):
        logger.error("Decode failure on %s %s: %s", request.method, request.url.path, exc)
        return _error(500, "decode_error", exc)

    @app.exception_handler(OSError)
    async def io_error(request: Request, exc: OSError):
        logger.exception("I/O failure on %s %s", request.method, request.url.path)
        return _error(500, "io_error", exc)


def create_app(store: Optional[TranslationStore] = None, settings: Optional[Settings] = None) -> FastAPI:
    settings = settings or get_settings()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logging.basicConfig(
            level=settings.log_level.upper(),
            format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        )
        owned = app.state.store is None
        if owned:
            app.state.store = TranslationStore(DirectorySource(settings.translations_dir))
            app.state.store.load()
        try:
            yield
        finally:
            if owned:
                app.state.store.close()
                app.state.store = None

    app = FastAPI(title=settings.app_name, lifespan=lifespan)
    app.state.store = store
    app.state.settings = settings

    @app.middleware("http")
    async def log_requests(request: Request, call_next):
        started = time.perf_counter()
        response = await call_next(request)
        elapsed = (time.perf_counter() - started) * 1000
        logger.info("%s %s -> %d (%.1f ms)", request.method, request.url.path, response.status_code, elapsed)
        return response

    register_error_handlers(app)
    app.include_router(languages.router)
    app.include_router(translations.router)
    app.include_router(sync.router)
    return app


app = create_app()
