"""
Translation editor Streamlit app.

Edits the <code>.json translation documents of one directory and keeps the
languages in sync with a base language. Configure the directory via the env
var TRANSLATOR_TRANSLATIONS_DIR (see backend/config.py).
"""

import logging
from typing import Any, Dict, List

import pandas as pd
import streamlit as st

from backend.config import get_settings
from backend.ingest.documents import DirectorySource
from backend.services.coverage import build_presence_frame, coverage_report
from backend.store.errors import TranslatorError
from backend.store.translator import TranslationStore
from i18n import t

logger = logging.getLogger(__name__)

# Page settings
st.set_page_config(page_title="Translation Editor", layout="wide")

# available UI languages (code -> display name)
LANGUAGES = {"en": "English", "ja": "日本語"}


def _get_ui_lang() -> str:
    """Determine UI language from the query string, defaulting to English."""
    code = st.query_params.get("lang", "en")
    return code if code in LANGUAGES else "en"


@st.cache_resource
def get_store() -> TranslationStore:
    """One store per Streamlit process, loaded from the configured directory."""
    settings = get_settings()
    store = TranslationStore(DirectorySource(settings.translations_dir))
    store.load()
    return store


def _save(store: TranslationStore) -> None:
    store.save(get_settings().save_indent)


def filter_keys(frame: pd.DataFrame, term: str) -> pd.DataFrame:
    """Keep rows whose key or any template contains ``term`` (case-insensitive)."""
    term = term.strip().lower()
    if not term or frame.empty:
        return frame

    def _passes(row: pd.Series) -> bool:
        if term in str(row.name).lower():
            return True
        return any(term in str(v).lower() for v in row.dropna())

    return frame[frame.apply(_passes, axis=1)]


def render_coverage(store: TranslationStore, base: str, ui_lang: str) -> None:
    st.subheader(t("ui.coverage", ui_lang))
    rows: List[Dict[str, Any]] = coverage_report(store, base)
    if not rows:
        return
    st.dataframe(
        pd.DataFrame(rows),
        column_config={
            "language": t("col.language", ui_lang),
            "keys": t("col.keys", ui_lang),
            "missing": t("col.missing", ui_lang),
            "orphans": t("col.orphans", ui_lang),
            "untranslated": t("col.untranslated", ui_lang),
            "completion": st.column_config.ProgressColumn(
                t("col.completion", ui_lang), format="%.2f", min_value=0, max_value=1
            ),
        },
        hide_index=True,
        use_container_width=True,
    )


def render_editor(store: TranslationStore, codes: List[str], ui_lang: str) -> None:
    st.subheader(t("ui.translations", ui_lang))
    keyword = st.text_input(t("ui.search_keys", ui_lang), key="key_search")
    frame = filter_keys(build_presence_frame(store), keyword)
    st.dataframe(frame, use_container_width=True)

    lang = st.selectbox(t("ui.edit_language", ui_lang), options=codes, key="edit_lang")
    with st.form("edit_value"):
        key = st.text_input(t("ui.key", ui_lang))
        current = store.get(key, lang) if key else ""
        value = st.text_area(t("ui.value", ui_lang), value=current if current != key else "")
        save_col, delete_col = st.columns(2)
        with save_col:
            submitted = st.form_submit_button(t("ui.save_value", ui_lang))
        with delete_col:
            deleted = st.form_submit_button(t("ui.delete_key", ui_lang))
    if submitted and key:
        store.set(key, value, lang)
        _save(store)
        st.success(t("msg.saved", ui_lang))
    elif deleted and key:
        store.remove(key, lang)
        _save(store)
        st.success(t("msg.saved", ui_lang))


def render_language_admin(store: TranslationStore, base: str, codes: List[str], ui_lang: str) -> None:
    add_col, remove_col, sync_col = st.columns(3)
    with add_col:
        new_code = st.text_input(t("ui.new_language_code", ui_lang), key="new_code")
        if st.button(t("ui.add_language", ui_lang)) and new_code:
            store.add_language(new_code, base)
            _save(store)
            st.success(t("msg.language_added", ui_lang).format(code=new_code))
            st.rerun()
    with remove_col:
        removable = [code for code in codes if code != base]
        target = st.selectbox(t("ui.remove_language", ui_lang), options=removable, key="remove_lang")
        if st.button(t("ui.remove_language", ui_lang), disabled=not removable) and target:
            store.remove_language(target)
            st.success(t("msg.language_removed", ui_lang).format(code=target))
            st.rerun()
    with sync_col:
        orphan_removal = st.checkbox(t("ui.orphan_removal", ui_lang), value=False)
        if st.button(t("ui.sync", ui_lang)):
            store.sync(base, orphan_removal)
            _save(store)
            st.success(t("msg.synced", ui_lang).format(code=base))


def main() -> None:
    ui_lang = _get_ui_lang()
    options = list(LANGUAGES.keys())
    chosen = st.sidebar.selectbox(
        t("ui.language", ui_lang),
        options=options,
        format_func=lambda code: LANGUAGES.get(code, code),
        index=options.index(ui_lang),
    )
    if chosen != ui_lang:
        st.query_params["lang"] = chosen
        st.rerun()

    st.title(t("app.title", ui_lang))
    st.markdown(t("app.desc", ui_lang))

    try:
        store = get_store()
    except (OSError, TranslatorError) as exc:
        logger.exception("Failed to load translations")
        st.error(t("error.loading", ui_lang).format(err=exc))
        return

    codes = store.codes()
    if not codes:
        st.info(t("msg.no_languages", ui_lang).format(path=get_settings().translations_dir))
        return

    base = st.sidebar.selectbox(t("ui.base_language", ui_lang), options=codes, key="base_lang")

    try:
        render_coverage(store, base, ui_lang)
        render_editor(store, codes, ui_lang)
        render_language_admin(store, base, codes, ui_lang)
    except (OSError, TranslatorError) as exc:
        logger.exception("Editor operation failed")
        st.error(t("error.operation", ui_lang).format(err=exc))


def _is_running_in_streamlit() -> bool:
    """Return True when executed under Streamlit's runtime."""

    try:
        from streamlit.runtime.scriptrunner import get_script_run_ctx

        return get_script_run_ctx() is not None
    except ImportError:
        return False


if __name__ == "__main__":
    if _is_running_in_streamlit():
        main()
    else:
        raise SystemExit(
            "This application must be run with 'streamlit run app.py' to enable UI reruns."
        )
