import base64

import pytest
from fastapi.testclient import TestClient

import albumboard.core.import_session as import_session
from albumboard.api.app import app
from albumboard.api.state import AppState, get_state
from albumboard.core.errors import ImageDecodeError
from albumboard.core.spotify_client import SpotifyCatalog
from albumboard.models.candidate import CanonicalAlbum, RawOcrResult

NEVERMIND = CanonicalAlbum(
    id="nv",
    name="Nevermind (Remastered)",
    artists=["Nirvana"],
    image_url="https://img/nv.jpg",
    release_date="1991-09-24",
    spotify_url="https://open.spotify.com/album/nv",
)


class FakeCatalog(SpotifyCatalog):
    def __init__(self, results=None, fail=False):
        super().__init__(client_id="", client_secret="")
        self.results = results or {}
        self.fail = fail
        self.queries = []

    def search_albums(self, query, limit=12):
        self.queries.append((query, limit))
        if self.fail:
            raise ConnectionError("spotify down")
        return self.results.get(query, [])


@pytest.fixture
def catalog():
    return FakeCatalog({"artist:Nirvana album:Nevermind": [NEVERMIND]})


@pytest.fixture
def client(tmp_path, catalog):
    state = AppState(
        catalog=catalog,
        reviews_path=tmp_path / "reviews.json",
        tier_lists_path=tmp_path / "tier_lists.json",
        resolve_delay_sec=0,
    )
    app.dependency_overrides[get_state] = lambda: state
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def fake_pipeline(monkeypatch):
    async def fake_preprocess(source, focus):
        if source == b"broken":
            raise ImageDecodeError()
        return "data:image/png;base64,AAAA"

    async def fake_recognize(data_url, on_progress=None):
        return RawOcrResult(text="1. Nirvana - Nevermind\n2. blah\n3. Portishead / Dummy", confidence=80.0)

    monkeypatch.setattr(import_session, "preprocess", fake_preprocess)
    monkeypatch.setattr(import_session, "recognize", fake_recognize)


def test_search_validates_and_clamps(client, catalog):
    assert client.get("/api/spotify/search", params={"q": "  "}).status_code == 400
    resp = client.get("/api/spotify/search", params={"q": "artist:Nirvana album:Nevermind", "limit": 50})
    assert resp.status_code == 200
    assert resp.json()["albums"][0]["id"] == "nv"
    assert catalog.queries[-1] == ("artist:Nirvana album:Nevermind", 20)
    client.get("/api/spotify/search", params={"q": "x"})
    assert catalog.queries[-1] == ("x", 12)


def test_search_upstream_failure_is_502(tmp_path):
    state = AppState(catalog=FakeCatalog(fail=True), reviews_path=tmp_path / "r.json", tier_lists_path=tmp_path / "t.json")
    app.dependency_overrides[get_state] = lambda: state
    try:
        assert TestClient(app).get("/api/spotify/search", params={"q": "x"}).status_code == 502
    finally:
        app.dependency_overrides.clear()


def test_album_ids_required(client):
    assert client.post("/api/spotify/albums", json={"ids": []}).status_code == 400


def test_image_import_resolve_and_handoff(client, fake_pipeline):
    resp = client.post(
        "/api/imports/",
        files={"image": ("list.png", b"png-bytes", "image/png")},
        data={"focus_on_right_column": "true"},
    )
    assert resp.status_code == 200
    body = resp.json()
    session_id = body["session_id"]
    assert [(c["artist"], c["line_number"]) for c in body["candidates"]] == [("Nirvana", 1), ("Portishead", 3)]
    assert body["raw_text"].startswith("1. Nirvana")

    assert client.get(f"/api/imports/{session_id}/matched").status_code == 400

    resolved = client.post(f"/api/imports/{session_id}/resolve").json()
    assert [c["matched"] for c in resolved["candidates"]] == [True, False]
    assert resolved["candidates"][0]["resolved_album"]["id"] == "nv"
    assert resolved["matched_count"] == 1 and resolved["unmatched_count"] == 1

    matched = client.get(f"/api/imports/{session_id}/matched").json()
    assert [a["id"] for a in matched["albums"]] == ["nv"]


def test_edit_resets_and_remove(client, fake_pipeline):
    session_id = client.post(
        "/api/imports/", files={"image": ("list.png", b"png-bytes", "image/png")}
    ).json()["session_id"]
    client.post(f"/api/imports/{session_id}/candidates/0/resolve")
    edited = client.patch(f"/api/imports/{session_id}/candidates/0", json={"album": "In Utero"}).json()
    assert edited["album"] == "In Utero" and edited["matched"] is False and edited["resolved_album"] is None

    assert client.delete(f"/api/imports/{session_id}/candidates/1").status_code == 204
    assert len(client.get(f"/api/imports/{session_id}").json()["candidates"]) == 1
    assert client.delete(f"/api/imports/{session_id}/candidates/5").status_code == 404


def test_undecodable_image_is_400(client, fake_pipeline):
    resp = client.post("/api/imports/", files={"image": ("x.png", b"broken", "image/png")})
    assert resp.status_code == 400


def test_text_import(client):
    body = client.post("/api/imports/text", json={"text": "Air - Moon Safari\nAIR - moon safari"}).json()
    assert [(c["artist"], c["album"]) for c in body["candidates"]] == [("Air", "Moon Safari")]


def test_unknown_session_is_404(client):
    assert client.get("/api/imports/nope").status_code == 404


def _review_body(image_data_url=None):
    return {
        "playlist_id": "pl",
        "playlist_name": "90s",
        "playlist_owner": "me",
        "albums": [{"id": "nv", "name": "Nevermind", "artist": "Nirvana", "rating": 9}],
        "image_data_url": image_data_url,
        "review_mode": "rating",
    }


def test_review_crud_and_share_image(client):
    png = b"\x89PNG\r\n\x1a\nfake"
    data_url = "data:image/png;base64," + base64.b64encode(png).decode()
    created = client.post("/api/reviews/", json=_review_body(data_url))
    assert created.status_code == 201
    review_id = created.json()["id"]

    assert [r["id"] for r in client.get("/api/reviews/").json()] == [review_id]
    assert client.get(f"/api/reviews/{review_id}").json()["albums"][0]["rating"] == 9.0

    og = client.get(f"/api/reviews/{review_id}/og")
    assert og.status_code == 200
    assert og.headers["content-type"] == "image/png"
    assert og.content == png

    assert client.delete(f"/api/reviews/{review_id}").status_code == 204
    assert client.get(f"/api/reviews/{review_id}").status_code == 404


def test_review_without_image_has_no_og(client):
    review_id = client.post("/api/reviews/", json=_review_body()).json()["id"]
    assert client.get(f"/api/reviews/{review_id}/og").status_code == 404


def test_tier_list_crud(client):
    body = {
        "playlist_id": "pl",
        "playlist_name": "90s",
        "albums": [
            {"id": "nv", "name": "Nevermind", "artist": "Nirvana", "tier": "s"},
            {"id": "dm", "name": "Dummy", "artist": "Portishead", "tier": "bogus"},
        ],
        "tier_metadata": {"s": {"title": "Essentials", "color": "#1D4ED8"}},
    }
    created = client.post("/api/tier-lists/", json=body)
    assert created.status_code == 201
    tier_list = created.json()
    assert [a["tier"] for a in tier_list["albums"]] == ["s", "unranked"]
    assert tier_list["tier_metadata"]["s"]["title"] == "Essentials"
    assert tier_list["tier_metadata"]["s"]["color"] == "#1D4ED8"

    fetched = client.get(f"/api/tier-lists/{tier_list['id']}").json()
    assert fetched["tier_metadata"]["s"]["color"] == "#1D4ED8"
    assert client.delete(f"/api/tier-lists/{tier_list['id']}").status_code == 204
    assert client.get("/api/tier-lists/").json() == []


def test_oldest_import_session_is_evicted(tmp_path):
    state = AppState(
        catalog=FakeCatalog(),
        reviews_path=tmp_path / "r.json",
        tier_lists_path=tmp_path / "t.json",
        max_import_sessions=2,
    )
    first, _ = state.new_import_session()
    second, _ = state.new_import_session()
    # touching the first makes the second the least recently used
    assert state.get_import_session(first) is not None
    third, _ = state.new_import_session()
    assert state.get_import_session(second) is None
    assert state.get_import_session(first) is not None
    assert state.get_import_session(third) is not None


def test_evicted_session_is_404_over_http(tmp_path):
    state = AppState(
        catalog=FakeCatalog(),
        reviews_path=tmp_path / "r.json",
        tier_lists_path=tmp_path / "t.json",
        max_import_sessions=1,
    )
    app.dependency_overrides[get_state] = lambda: state
    try:
        client = TestClient(app)
        old = client.post("/api/imports/text", json={"text": "Air - Moon Safari"}).json()["session_id"]
        new = client.post("/api/imports/text", json={"text": "Low - Secret Name"}).json()["session_id"]
        assert client.get(f"/api/imports/{old}").status_code == 404
        assert client.get(f"/api/imports/{new}").status_code == 200
    finally:
        app.dependency_overrides.clear()
