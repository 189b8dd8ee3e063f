"""Translation coverage statistics across languages."""
from __future__ import annotations

from typing import Dict, List

import pandas as pd

from backend.store.errors import LanguageNotFound
from backend.store.translator import TranslationStore


def build_presence_frame(store: TranslationStore) -> pd.DataFrame:
    """Create a key x language frame of templates (NaN where a key is missing)."""

    columns: Dict[str, Dict[str, str]] = {}
    for view in store.languages():
        columns[view.id] = {t.key: t.template for t in view.translations}
    if not columns:
        return pd.DataFrame()
    frame = pd.DataFrame(columns)
    return frame.sort_index()


def coverage_report(store: TranslationStore, base: str) -> List[Dict]:
    """Summarize how far every other language is from ``base``."""

    if not store.has_language(base):
        raise LanguageNotFound(base)
    frame = build_presence_frame(store)
    if base not in frame.columns:
        # removed concurrently
        return []

    in_base = frame[base].notna()
    base_total = int(in_base.sum())
    report: List[Dict] = []
    for code in frame.columns:
        if code == base:
            continue
        present = frame[code].notna()
        same = present & in_base & (frame[code] == frame[base])
        translated = present & in_base & ~same
        report.append(
            {
                "language": code,
                "keys": int(present.sum()),
                "missing": int((in_base & ~present).sum()),
                "orphans": int((present & ~in_base).sum()),
                "untranslated": int(same.sum()),
                "completion": float(translated.sum()) / base_total if base_total else 1.0,
            }
        )
    return report
