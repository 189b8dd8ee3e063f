"""Conversion between nested translation documents and flat dotted keys."""
from __future__ import annotations

import logging
from typing import Any, Dict, Iterable, Mapping, Optional

from backend.store.errors import DecodeError, InvalidKeyError, KeyCollisionError
from backend.store.models import Translation

logger = logging.getLogger(__name__)

SEPARATOR = "."


def is_valid_key(key: str) -> bool:
    return isinstance(key, str) and all(key.split(SEPARATOR))


def validate_key(key: str) -> str:
    """Return ``key`` if every dot-separated segment is non-empty."""

    if not isinstance(key, str) or not key:
        raise InvalidKeyError("invalid_key:empty")
    if not is_valid_key(key):
        raise InvalidKeyError(f"invalid_key:{key}")
    return key


def _parents(key: str) -> Iterable[str]:
    parts = key.split(SEPARATOR)
    for end in range(1, len(parts)):
        yield SEPARATOR.join(parts[:end])


def find_collision(keys: Mapping[str, Any], key: str) -> Optional[str]:
    """Return an existing key that cannot coexist with ``key`` when nested.

    That is either a leaf sitting on a parent path of ``key`` or a key that
    needs ``key`` as its container.
    """

    for parent in _parents(key):
        if parent in keys:
            return parent
    nested = key + SEPARATOR
    for existing in keys:
        if existing.startswith(nested):
            return existing
    return None


def check_collisions(flat: Mapping[str, Translation]) -> None:
    containers = {parent: key for key in flat for parent in _parents(key)}
    for key in flat:
        if key in containers:
            raise KeyCollisionError(f"key_collision:{key}:{containers[key]}")


def flatten(tree: Mapping[str, Any], prefix: str = "") -> Dict[str, Translation]:
    """Flatten a nested document into ``{dotted_key: Translation}``.

    String leaves become translations, nested mappings are walked
    recursively and every other value type is skipped, as are local keys
    with empty segments (``""``, ``"a."``, ``".c"``). When a dotted local
    key and a nested path produce the same flat key the nested value wins.
    """

    flat: Dict[str, Translation] = {}
    for local_key, value in tree.items():
        if not is_valid_key(local_key):
            logger.debug("Skipping invalid key %r under prefix %r", local_key, prefix)
            continue
        full_key = f"{prefix}{SEPARATOR}{local_key}" if prefix else local_key
        if isinstance(value, str):
            flat.setdefault(full_key, Translation(key=full_key, template=value))
        elif isinstance(value, Mapping):
            flat.update(flatten(value, full_key))
        else:
            logger.debug("Skipping unsupported value for %s (%s)", full_key, type(value).__name__)
    return flat


def _insert(tree: Dict[str, Any], key: str, value: str, full_key: str) -> None:
    head, sep, rest = key.partition(SEPARATOR)
    existing = tree.get(head)
    if not sep:
        if isinstance(existing, dict):
            raise KeyCollisionError(f"key_collision:{full_key}")
        tree[head] = value
        return
    if existing is None:
        existing = {}
    elif not isinstance(existing, dict):
        raise KeyCollisionError(f"key_collision:{full_key}")
    _insert(existing, rest, value, full_key)
    tree[head] = existing


def unflatten(flat: Mapping[str, Translation]) -> Dict[str, Any]:
    """Rebuild the nested document from a flat key map.

    Raises :class:`KeyCollisionError` when one key is a leaf and another key
    needs the same path as a container (``"a"`` next to ``"a.b"``), and
    :class:`DecodeError` for keys with empty segments.
    """

    tree: Dict[str, Any] = {}
    for key, translation in flat.items():
        if not key or not is_valid_key(key):
            raise DecodeError(f"invalid_key:{key}")
        _insert(tree, key, translation.template, key)
    return tree
