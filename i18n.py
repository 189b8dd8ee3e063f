from __future__ import annotations

import threading
from pathlib import Path
from typing import Optional

from backend.ingest.documents import DirectorySource
from backend.store.translator import TranslationStore

LOCALES_DIR = Path(__file__).parent / "locales"

_STORE: Optional[TranslationStore] = None
_STORE_LOCK = threading.Lock()


def _ui_store() -> TranslationStore:
    global _STORE
    with _STORE_LOCK:
        if _STORE is None:
            store = TranslationStore(DirectorySource(LOCALES_DIR))
            store.load()
            _STORE = store
        return _STORE


def t(key: str, lang: str, default: Optional[str] = None) -> str:
    """Return translated string for `key` in `lang`.

    Dot-separated keys address nested entries of ``locales/<lang>.json``.
    Falls back to `default` or the key itself if translation not found.
    """
    value = _ui_store().get(key, lang)
    if value == key and default is not None:
        return default
    return value
