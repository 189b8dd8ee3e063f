"""API schema definitions."""
from __future__ import annotations

from typing import Dict, List

from pydantic import BaseModel, ConfigDict, Field


class TranslationSchema(BaseModel):
    id: str = Field(min_length=1, description="Flat dotted key")
    template: str


class LanguageSchema(BaseModel):
    id: str
    translations: List[TranslationSchema] = Field(default_factory=list)


class LanguageCreate(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    language: str = Field(min_length=1)
    base_language: str = Field(alias="baseLanguage", min_length=1)


class SyncRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    base_language: str = Field(alias="baseLanguage", min_length=1)
    orphan_removal: bool = Field(default=False, alias="orphanRemoval")


class KeyValues(BaseModel):
    id: str
    values: Dict[str, str]


class CoverageRow(BaseModel):
    language: str
    keys: int
    missing: int
    orphans: int
    untranslated: int
    completion: float
