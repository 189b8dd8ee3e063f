import json
import os
import sys

ROOT = os.path.dirname(os.path.dirname(__file__))
if ROOT not in sys.path:
    sys.path.insert(0, ROOT)

from fastapi.testclient import TestClient

from backend.config import Settings
from backend.ingest.documents import DirectorySource
from backend.main import create_app
from backend.store.translator import TranslationStore


def build_documents(directory):
    (directory / "en.json").write_text(
        json.dumps({"PAGE": {"LOADING": "Loading", "TITLE": "Title"}, "OK": "OK"}), encoding="utf-8"
    )
    (directory / "de.json").write_text(json.dumps({"PAGE": {"LOADING": "Lade"}, "OLD": "Alt"}), encoding="utf-8")


def prepare_client(tmp_path, autosave=True):
    build_documents(tmp_path)
    store = TranslationStore(DirectorySource(tmp_path))
    store.load()
    settings = Settings(translations_dir=str(tmp_path), autosave=autosave, save_indent=True)
    app = create_app(store, settings)
    return TestClient(app), store


def read_json(path):
    return json.loads(path.read_text(encoding="utf-8"))


def test_list_languages(tmp_path):
    client, _ = prepare_client(tmp_path)
    resp = client.get("/languages")
    assert resp.status_code == 200
    assert [item["id"] for item in resp.json()] == ["de", "en"]


def test_get_language_and_not_found(tmp_path):
    client, _ = prepare_client(tmp_path)
    resp = client.get("/languages/de")
    assert resp.status_code == 200
    assert resp.json()["translations"] == [
        {"id": "OLD", "template": "Alt"},
        {"id": "PAGE.LOADING", "template": "Lade"},
    ]
    resp = client.get("/languages/xx")
    assert resp.status_code == 404
    assert resp.json()["detail"] == "language_not_found"


def test_create_language_clones_base_and_saves(tmp_path):
    client, store = prepare_client(tmp_path)
    resp = client.post("/languages", json={"language": "fr", "baseLanguage": "en"})
    assert resp.status_code == 201
    assert {t["id"] for t in resp.json()["translations"]} == {"PAGE.LOADING", "PAGE.TITLE", "OK"}
    assert read_json(tmp_path / "fr.json") == read_json(tmp_path / "en.json")

    resp = client.post("/languages", json={"language": "fr", "baseLanguage": "en"})
    assert resp.status_code == 409
    resp = client.post("/languages", json={"language": "it", "baseLanguage": "xx"})
    assert resp.status_code == 404
    resp = client.post("/languages", json={"language": "a/b", "baseLanguage": "en"})
    assert resp.status_code == 400
    resp = client.post("/languages", json={"language": "it"})
    assert resp.status_code == 422


def test_delete_language(tmp_path):
    client, store = prepare_client(tmp_path)
    resp = client.delete("/languages/de")
    assert resp.status_code == 204
    assert not store.has_language("de")
    assert not (tmp_path / "de.json").exists()
    assert client.delete("/languages/de").status_code == 404


def test_translation_routes(tmp_path):
    client, store = prepare_client(tmp_path)
    resp = client.post("/languages/de/translations", json={"id": "PAGE.TITLE", "template": "Titel"})
    assert resp.status_code == 201
    assert resp.json() == {"id": "PAGE.TITLE", "template": "Titel"}
    assert read_json(tmp_path / "de.json")["PAGE"]["TITLE"] == "Titel"

    resp = client.get("/languages/de/translations/PAGE.TITLE")
    assert resp.json() == {"id": "PAGE.TITLE", "template": "Titel"}
    resp = client.get("/languages/de/translations/MISSING.KEY")
    assert resp.json() == {"id": "MISSING.KEY", "template": "MISSING.KEY"}

    resp = client.get("/languages/de/translations")
    assert [t["id"] for t in resp.json()] == ["OLD", "PAGE.LOADING", "PAGE.TITLE"]

    resp = client.delete("/languages/de/translations/OLD")
    assert resp.status_code == 204
    assert "OLD" not in read_json(tmp_path / "de.json")


def test_translation_errors(tmp_path):
    client, _ = prepare_client(tmp_path)
    resp = client.post("/languages/xx/translations", json={"id": "A", "template": "a"})
    assert resp.status_code == 404
    resp = client.post("/languages/de/translations", json={"id": "A..B", "template": "a"})
    assert resp.status_code == 400
    assert resp.json()["detail"] == "invalid_key"
    resp = client.get("/languages/xx/translations/A")
    assert resp.status_code == 404


def test_colliding_key_is_rejected_and_saving_continues(tmp_path):
    client, store = prepare_client(tmp_path)
    resp = client.post("/languages/de/translations", json={"id": "OLD.CHILD", "template": "x"})
    assert resp.status_code == 409
    assert resp.json()["detail"] == "key_collision"
    assert store.get_all("OLD.CHILD") == {}

    resp = client.post("/languages/en/translations", json={"id": "NEW", "template": "new"})
    assert resp.status_code == 201
    assert read_json(tmp_path / "en.json")["NEW"] == "new"

    resp = client.post("/languages/de/translations", json={"id": "PAGE", "template": "x"})
    assert resp.status_code == 409


def test_get_all_for_key(tmp_path):
    client, _ = prepare_client(tmp_path)
    resp = client.get("/translations/PAGE.LOADING")
    assert resp.json() == {"id": "PAGE.LOADING", "values": {"de": "Lade", "en": "Loading"}}


def test_sync_route(tmp_path):
    client, store = prepare_client(tmp_path)
    resp = client.post("/sync", json={"baseLanguage": "en", "orphanRemoval": True})
    assert resp.status_code == 200
    de = next(item for item in resp.json() if item["id"] == "de")
    assert {t["id"]: t["template"] for t in de["translations"]} == {
        "OK": "OK",
        "PAGE.LOADING": "Lade",
        "PAGE.TITLE": "Title",
    }
    assert read_json(tmp_path / "de.json") == {"OK": "OK", "PAGE": {"LOADING": "Lade", "TITLE": "Title"}}
    assert client.post("/sync", json={"baseLanguage": "xx"}).status_code == 404


def test_autosave_disabled_leaves_documents(tmp_path):
    client, store = prepare_client(tmp_path, autosave=False)
    client.post("/languages/de/translations", json={"id": "NEW", "template": "neu"})
    assert "NEW" not in read_json(tmp_path / "de.json")
    assert store.get("NEW", "de") == "neu"


def test_document_route_serves_cached_bytes(tmp_path):
    client, store = prepare_client(tmp_path)
    resp = client.get("/languages/de/document")
    assert resp.status_code == 200
    assert resp.content == (tmp_path / "de.json").read_bytes()
    client.post("/languages", json={"language": "fr", "baseLanguage": "en"})
    assert client.get("/languages/fr/document").json() == read_json(tmp_path / "fr.json")


def test_coverage_route(tmp_path):
    client, _ = prepare_client(tmp_path)
    resp = client.get("/languages/en/coverage")
    assert resp.status_code == 200
    assert resp.json() == [
        {"language": "de", "keys": 2, "missing": 2, "orphans": 1, "untranslated": 0, "completion": 1 / 3}
    ]
    assert client.get("/languages/xx/coverage").status_code == 404


def test_reload_route_picks_up_new_documents(tmp_path):
    client, _ = prepare_client(tmp_path)
    (tmp_path / "es.json").write_text(json.dumps({"OK": "Vale"}), encoding="utf-8")
    resp = client.post("/reload")
    assert resp.status_code == 200
    assert "es" in [item["id"] for item in resp.json()]


def test_lifespan_owns_store(tmp_path):
    build_documents(tmp_path)
    app = create_app(settings=Settings(translations_dir=str(tmp_path)))
    with TestClient(app) as client:
        assert client.get("/languages/en/translations/OK").json()["template"] == "OK"
    assert app.state.store is None


def test_store_missing_returns_503(tmp_path):
    app = create_app(settings=Settings(translations_dir=str(tmp_path)))
    client = TestClient(app)
    assert client.get("/languages").status_code == 503
