"""Translation routes."""
from __future__ import annotations

from typing import List

from fastapi import APIRouter, Depends, Response

from backend.api.deps import get_app_settings, get_store, persist
from backend.api.schemas import KeyValues, TranslationSchema

router = APIRouter()


@router.get("/languages/{lang}/translations", response_model=List[TranslationSchema])
def list_translations(lang: str, store=Depends(get_store)):
    return store.language(lang).to_dict()["translations"]


@router.post("/languages/{lang}/translations", response_model=TranslationSchema, status_code=201)
def create_translation(
    lang: str, body: TranslationSchema, store=Depends(get_store), settings=Depends(get_app_settings)
):
    store.set(body.id, body.template, lang)
    persist(store, settings)
    return body


@router.get("/languages/{lang}/translations/{key}", response_model=TranslationSchema)
def get_translation(lang: str, key: str, store=Depends(get_store)):
    store.language(lang)
    return {"id": key, "template": store.get(key, lang)}


@router.delete("/languages/{lang}/translations/{key}", status_code=204)
def delete_translation(lang: str, key: str, store=Depends(get_store), settings=Depends(get_app_settings)):
    store.remove(key, lang)
    persist(store, settings)
    return Response(status_code=204)


@router.get("/translations/{key}", response_model=KeyValues)
def get_all_translations(key: str, store=Depends(get_store)):
    return {"id": key, "values": store.get_all(key)}
