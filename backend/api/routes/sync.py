"""Synchronization and reload routes."""
from __future__ import annotations

from typing import List

from fastapi import APIRouter, Depends

from backend.api.deps import get_app_settings, get_store, persist
from backend.api.schemas import LanguageSchema, SyncRequest

router = APIRouter()


@router.post("/sync", response_model=List[LanguageSchema])
def sync_languages(body: SyncRequest, store=Depends(get_store), settings=Depends(get_app_settings)):
    store.sync(body.base_language, body.orphan_removal)
    persist(store, settings)
    return [view.to_dict() for view in store.languages()]


@router.post("/reload", response_model=List[LanguageSchema])
def reload_languages(store=Depends(get_store)):
    store.load()
    return [view.to_dict() for view in store.languages()]
