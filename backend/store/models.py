"""Value types held by the translation store."""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List


@dataclass(frozen=True)
class Translation:
    key: str
    template: str

    def to_dict(self) -> Dict[str, str]:
        return {"id": self.key, "template": self.template}


@dataclass
class LanguageView:
    """Read-only projection of a loaded language."""

    id: str
    translations: List[Translation] = field(default_factory=list)

    def to_dict(self) -> Dict[str, object]:
        return {"id": self.id, "translations": [t.to_dict() for t in self.translations]}
