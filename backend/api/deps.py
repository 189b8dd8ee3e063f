"""Shared route dependencies."""
from __future__ import annotations

from fastapi import HTTPException, Request

from backend.config import Settings, get_settings
from backend.store.translator import TranslationStore


def get_store(request: Request) -> TranslationStore:
    store = getattr(request.app.state, "store", None)
    if store is None:
        raise HTTPException(status_code=503, detail="store_not_loaded")
    return store


def get_app_settings(request: Request) -> Settings:
    return getattr(request.app.state, "settings", None) or get_settings()


def persist(store: TranslationStore, settings: Settings) -> None:
    if settings.autosave:
        store.save(settings.save_indent)
