"""Error taxonomy for the translation store."""
from __future__ import annotations


class TranslatorError(Exception):
    """Base class for every error raised by the translation store."""


class LanguageNotFound(TranslatorError, KeyError):
    """Raised when an operation references a language that is not loaded."""

    def __init__(self, code: str) -> None:
        super().__init__(code)
        self.code = code

    def __str__(self) -> str:
        return f"language_not_found:{self.code}"


class LanguageExistsError(TranslatorError):
    """Raised when adding a language whose code is already registered."""

    def __init__(self, code: str) -> None:
        super().__init__(f"language_exists:{code}")
        self.code = code


class InvalidLanguageError(TranslatorError, ValueError):
    """Raised for empty or malformed language codes."""


class InvalidKeyError(TranslatorError, ValueError):
    """Raised when a flat key is not a valid dot path."""


class DecodeError(TranslatorError, ValueError):
    """Raised when a language document cannot be decoded."""


class KeyCollisionError(DecodeError):
    """Raised when a key requires descending into an existing leaf (or vice versa)."""
