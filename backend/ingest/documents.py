"""Directory-backed storage for language documents."""
from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, List, Union

logger = logging.getLogger(__name__)

DOCUMENT_SUFFIX = ".json"


@dataclass
class LanguageDocument:
    code: str
    path: Path


class DirectorySource:
    """Discover, read and write ``<code>.json`` documents below a directory.

    Subdirectories are walked as well; a document found there keeps its
    location on save. Languages created at runtime are written to the top
    level of the directory.
    """

    def __init__(self, directory: Union[str, Path]) -> None:
        self.directory = Path(directory)
        if not self.directory.exists():
            raise FileNotFoundError(f"missing_directory:{self.directory}")
        if not self.directory.is_dir():
            raise NotADirectoryError(f"not_a_directory:{self.directory}")
        self._paths: Dict[str, Path] = {}

    def discover(self) -> List[LanguageDocument]:
        documents: List[LanguageDocument] = []
        for path in sorted(self.directory.rglob(f"*{DOCUMENT_SUFFIX}")):
            if not path.is_file():
                continue
            code = path.name[: -len(DOCUMENT_SUFFIX)]
            if not code:
                continue
            if code in self._paths and self._paths[code] != path:
                logger.warning("Duplicate document for %s: %s shadows %s", code, path, self._paths[code])
            self._paths[code] = path
            documents.append(LanguageDocument(code=code, path=path))
        logger.debug("Discovered %d documents in %s", len(documents), self.directory)
        return documents

    def path_for(self, code: str) -> Path:
        return self._paths.get(code, self.directory / f"{code}{DOCUMENT_SUFFIX}")

    def read(self, document: LanguageDocument) -> bytes:
        return document.path.read_bytes()

    def write(self, code: str, data: bytes) -> Path:
        path = self.path_for(code)
        path.write_bytes(data)
        self._paths[code] = path
        return path

    def delete(self, code: str) -> None:
        path = self.path_for(code)
        # documents for languages added at runtime may never have been written
        path.unlink(missing_ok=True)
        self._paths.pop(code, None)
