"""In-memory translation store with cross-language synchronization.

Every language is held as a flat ``{dotted_key: Translation}`` map. Two
locks guard the shared state: one for the flat maps and one for the cache
of serialized documents. Locks are held for single map reads or writes
only, so multi-key operations (``sync``, ``save``) are not atomic as a
whole and concurrent readers may observe intermediate states. Individual
key mutations are atomic.
"""
from __future__ import annotations

import json
import logging
import threading
from typing import Dict, List, Optional

from backend.ingest.documents import DirectorySource
from backend.store.errors import (
    DecodeError,
    InvalidLanguageError,
    KeyCollisionError,
    LanguageExistsError,
    LanguageNotFound,
)
from backend.store.flatten import check_collisions, find_collision, flatten, unflatten, validate_key
from backend.store.models import LanguageView, Translation

logger = logging.getLogger(__name__)

Language = Dict[str, Translation]


def validate_code(code: str) -> str:
    if not isinstance(code, str) or not code.strip():
        raise InvalidLanguageError("invalid_language:empty")
    if code != code.strip() or any(c in code for c in "./\\"):
        raise InvalidLanguageError(f"invalid_language:{code}")
    return code


def encode_document(tree: Dict, indent: bool = False) -> bytes:
    if indent:
        return (json.dumps(tree, ensure_ascii=False, sort_keys=True, indent=2) + "\n").encode("utf-8")
    return json.dumps(tree, ensure_ascii=False, sort_keys=True, separators=(",", ":")).encode("utf-8")


def decode_document(data: bytes, origin: str = "<bytes>") -> Dict:
    try:
        tree = json.loads(data.decode("utf-8-sig"))
    except UnicodeDecodeError as exc:
        raise DecodeError(f"decode_error:{origin}:{exc.reason}") from exc
    except json.JSONDecodeError as exc:
        raise DecodeError(f"decode_error:{origin}:{exc.msg} (line {exc.lineno})") from exc
    if not isinstance(tree, dict):
        raise DecodeError(f"decode_error:{origin}:not_an_object")
    return tree


class TranslationStore:
    """Per-language flat key maps plus their last serialized form."""

    def __init__(self, source: Optional[DirectorySource] = None) -> None:
        self.source = source
        self._languages: Dict[str, Language] = {}
        self._raw: Dict[str, bytes] = {}
        self._lang_lock = threading.Lock()
        self._raw_lock = threading.Lock()

    # -- loading -----------------------------------------------------------

    def load(self, source: Optional[DirectorySource] = None) -> List[str]:
        """Flatten every document of ``source`` into the store.

        A broken document aborts the load; languages registered before it
        stay loaded. Passing ``source`` rebinds the store to it, so later
        ``save`` and ``remove_language`` calls write to and delete from that
        source. Loading again only adds or replaces languages: a language
        whose document disappeared from the source stays in memory until
        ``remove_language``.
        """

        if source is not None:
            self.source = source
        source = self.source
        if source is None:
            raise ValueError("missing_source")
        loaded: List[str] = []
        for document in source.discover():
            self.load_document(document.code, source.read(document), origin=str(document.path))
            loaded.append(document.code)
        logger.info("Loaded %d languages: %s", len(loaded), ", ".join(loaded) or "-")
        return loaded

    def load_document(self, code: str, data: bytes, origin: Optional[str] = None) -> None:
        flat = flatten(decode_document(data, origin or code))
        check_collisions(flat)
        with self._raw_lock:
            self._raw[code] = data
        with self._lang_lock:
            self._languages[code] = flat
        logger.debug("Registered %s with %d keys", code, len(flat))

    # -- single keys -------------------------------------------------------

    def get(self, key: str, lang: str) -> str:
        """Return the template for ``key`` or the key itself when unavailable."""

        with self._lang_lock:
            translation = self._languages.get(lang, {}).get(key)
        return translation.template if translation is not None else key

    def set(self, key: str, value: str, lang: str) -> None:
        if not isinstance(value, str):
            raise TypeError("template must be a string")
        with self._lang_lock:
            language = self._languages.get(lang)
            if language is None:
                raise LanguageNotFound(lang)
            validate_key(key)
            if key not in language:
                clash = find_collision(language, key)
                if clash is not None:
                    raise KeyCollisionError(f"key_collision:{key}:{clash}")
            language[key] = Translation(key=key, template=value)

    def remove(self, key: str, lang: str) -> None:
        with self._lang_lock:
            language = self._languages.get(lang)
            if language is None:
                raise LanguageNotFound(lang)
            language.pop(key, None)

    def get_all(self, key: str) -> Dict[str, str]:
        values: Dict[str, str] = {}
        with self._lang_lock:
            for code, language in self._languages.items():
                translation = language.get(key)
                if translation is not None:
                    values[code] = translation.template
        return values

    # -- languages ---------------------------------------------------------

    def codes(self) -> List[str]:
        with self._lang_lock:
            return sorted(self._languages)

    def has_language(self, code: str) -> bool:
        with self._lang_lock:
            return code in self._languages

    def language(self, code: str) -> LanguageView:
        with self._lang_lock:
            language = self._languages.get(code)
            if language is None:
                raise LanguageNotFound(code)
            translations = sorted(language.values(), key=lambda t: t.key)
        return LanguageView(id=code, translations=translations)

    def languages(self) -> List[LanguageView]:
        with self._lang_lock:
            return [
                LanguageView(id=code, translations=sorted(language.values(), key=lambda t: t.key))
                for code, language in sorted(self._languages.items())
            ]

    def add_language(self, code: str, base: str) -> LanguageView:
        """Register ``code`` as an independent copy of ``base``."""

        validate_code(code)
        with self._lang_lock:
            base_language = self._languages.get(base)
            if base_language is None:
                raise LanguageNotFound(base)
            if code in self._languages:
                raise LanguageExistsError(code)
            # Translation is immutable, so copying the mapping copies by value
            self._languages[code] = dict(base_language)
        logger.info("Added language %s cloned from %s", code, base)
        return self.language(code)

    def remove_language(self, code: str) -> None:
        with self._lang_lock:
            if code not in self._languages:
                raise LanguageNotFound(code)
            del self._languages[code]
        with self._raw_lock:
            self._raw.pop(code, None)
        if self.source is not None:
            self.source.delete(code)
        logger.info("Removed language %s", code)

    def raw(self, code: str) -> Optional[bytes]:
        with self._raw_lock:
            return self._raw.get(code)

    # -- synchronization ---------------------------------------------------

    def _keys(self, code: str) -> List[str]:
        with self._lang_lock:
            return list(self._languages.get(code, ()))

    def sync(self, base: str, orphan_removal: bool = False) -> None:
        """Make every other language carry the key set of ``base``.

        Missing keys receive the base translation as a placeholder; keys that
        exist on both sides keep their own value. With ``orphan_removal``
        keys absent from the base are deleted first. A base key that would
        collide with a leaf or container of the target language is skipped.
        """

        with self._lang_lock:
            if base not in self._languages:
                raise LanguageNotFound(base)
            others = [code for code in self._languages if code != base]

        removed = 0
        if orphan_removal:
            for code in others:
                for key in self._keys(code):
                    with self._lang_lock:
                        language = self._languages.get(code)
                        base_language = self._languages.get(base, {})
                        if language is not None and key in language and key not in base_language:
                            del language[key]
                            removed += 1

        added = skipped = 0
        for key in self._keys(base):
            for code in others:
                with self._lang_lock:
                    translation = self._languages.get(base, {}).get(key)
                    language = self._languages.get(code)
                    if translation is None or language is None or key in language:
                        continue
                    clash = find_collision(language, key)
                    if clash is not None:
                        logger.warning("Not syncing %s into %s: collides with %s", key, code, clash)
                        skipped += 1
                        continue
                    language[key] = translation
                    added += 1

        logger.info(
            "Synced %d languages against %s (added=%d, removed=%d, skipped=%d)",
            len(others),
            base,
            added,
            removed,
            skipped,
        )

    # -- persistence -------------------------------------------------------

    def _refresh_raw(self, code: str, indent: bool) -> Optional[bytes]:
        with self._lang_lock:
            language = self._languages.get(code)
            if language is None:
                return None
            snapshot = dict(language)
        data = encode_document(unflatten(snapshot), indent=indent)
        with self._raw_lock:
            self._raw[code] = data
        return data

    def save(self, indent: bool = False) -> None:
        """Serialize every language and overwrite its backing document.

        Not transactional: a failure leaves earlier languages written.
        """

        if self.source is None:
            raise ValueError("missing_source")
        written = 0
        for code in self.codes():
            data = self._refresh_raw(code, indent)
            if data is None:
                continue
            self.source.write(code, data)
            written += 1
        logger.info("Saved %d languages to %s", written, self.source.directory)

    def close(self) -> None:
        with self._lang_lock:
            self._languages.clear()
        with self._raw_lock:
            self._raw.clear()
