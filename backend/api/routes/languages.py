"""Language routes."""
from __future__ import annotations

from typing import List

from fastapi import APIRouter, Depends, HTTPException, Response

from backend.api.deps import get_app_settings, get_store, persist
from backend.api.schemas import CoverageRow, LanguageCreate, LanguageSchema
from backend.services.coverage import coverage_report

router = APIRouter()


@router.get("/languages", response_model=List[LanguageSchema])
def list_languages(store=Depends(get_store)):
    return [view.to_dict() for view in store.languages()]


@router.post("/languages", response_model=LanguageSchema, status_code=201)
def create_language(body: LanguageCreate, store=Depends(get_store), settings=Depends(get_app_settings)):
    view = store.add_language(body.language, body.base_language)
    persist(store, settings)
    return view.to_dict()


@router.get("/languages/{code}", response_model=LanguageSchema)
def get_language(code: str, store=Depends(get_store)):
    return store.language(code).to_dict()


@router.delete("/languages/{code}", status_code=204)
def delete_language(code: str, store=Depends(get_store)):
    store.remove_language(code)
    return Response(status_code=204)


@router.get("/languages/{code}/document")
def get_document(code: str, store=Depends(get_store)):
    store.language(code)
    data = store.raw(code)
    if data is None:
        raise HTTPException(status_code=404, detail="document_not_serialized")
    return Response(content=data, media_type="application/json")


@router.get("/languages/{code}/coverage", response_model=List[CoverageRow])
def get_coverage(code: str, store=Depends(get_store)):
    return coverage_report(store, code)
