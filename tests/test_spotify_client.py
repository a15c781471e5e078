import asyncio

import pytest

from albumboard.core.errors import SpotifyUnavailableError
from albumboard.core.spotify_client import SpotifyCatalog, album_from_search_item, extract_playlist_id


class FakeSpotify:
    def __init__(self, search_items=None, albums=None, fail_album_chunks=0):
        self.search_items = search_items or []
        self.albums_by_id = albums or {}
        self.fail_album_chunks = fail_album_chunks
        self.search_calls = []
        self.album_chunks = []

    def search(self, q, type, limit):
        self.search_calls.append((q, type, limit))
        return {"albums": {"items": self.search_items}}

    def albums(self, ids):
        self.album_chunks.append(list(ids))
        if len(self.album_chunks) <= self.fail_album_chunks:
            raise RuntimeError("429 Too Many Requests")
        return {"albums": [self.albums_by_id.get(i) for i in ids]}

    def playlist(self, playlist_id):
        return {
            "name": "Best of 2024",
            "owner": {"display_name": "dj"},
            "images": [{"url": "https://img/cover.jpg"}],
        }

    def playlist_items(self, playlist_id, fields=None, limit=100):
        return {
            "items": [
                {"track": {"name": "t1", "album": {"id": "a1"}}},
                {"track": {"name": "t2", "album": {"id": "a2"}}},
                {"track": {"name": "t3", "album": {"id": "a1"}}},
                {"track": None},
            ]
        }


SEARCH_ITEM = {
    "id": "4LH4d3cOWNNsVw41Gqt2kv",
    "name": "The Dark Side of the Moon",
    "artists": [{"name": "Pink Floyd"}],
    "images": [
        {"url": "https://img/small.jpg", "height": 64},
        {"url": "https://img/large.jpg", "height": 640},
        {"url": "https://img/mid.jpg", "height": 300},
    ],
    "release_date": "1973-03-01",
    "external_urls": {"spotify": "https://open.spotify.com/album/4LH4d3cOWNNsVw41Gqt2kv"},
    "total_tracks": 10,
}


def test_extract_playlist_id():
    assert extract_playlist_id("https://open.spotify.com/playlist/37i9dQZF1DXcBWIGoYBM5M?si=abc") == (
        "37i9dQZF1DXcBWIGoYBM5M"
    )
    assert extract_playlist_id("https://open.spotify.com/album/xyz") is None


def test_album_from_search_item_picks_largest_image():
    album = album_from_search_item(SEARCH_ITEM)
    assert album.artists == ["Pink Floyd"]
    assert album.image_url == "https://img/large.jpg"
    assert album.spotify_url.endswith("4LH4d3cOWNNsVw41Gqt2kv")
    assert album.total_tracks == 10


def test_album_from_sparse_item():
    album = album_from_search_item({"id": "x"})
    assert album.name == "Unknown album"
    assert album.image_url is None and album.artists == [] and album.total_tracks is None


def test_search_albums_and_blank_query():
    fake = FakeSpotify(search_items=[SEARCH_ITEM, None])
    catalog = SpotifyCatalog(client=fake)
    albums = catalog.search_albums("pink floyd", 5)
    assert [a.name for a in albums] == ["The Dark Side of the Moon"]
    assert fake.search_calls == [("pink floyd", "album", 5)]
    assert catalog.search_albums("   ") == []
    assert len(fake.search_calls) == 1


def test_async_search_wrapper():
    catalog = SpotifyCatalog(client=FakeSpotify(search_items=[SEARCH_ITEM]))
    albums = asyncio.run(catalog.asearch_albums("artist:Pink Floyd album:Dark Side", 5))
    assert albums[0].id == SEARCH_ITEM["id"]


def test_unconfigured_catalog_raises():
    catalog = SpotifyCatalog(client_id="", client_secret="")
    assert not catalog.configured
    with pytest.raises(SpotifyUnavailableError):
        catalog.search_albums("anything")


def test_album_details_chunks_dedupes_and_skips_failed_chunk():
    ids = [f"id{i}" for i in range(45)] + ["id0", "", "  "]
    albums = {i: {"id": i, "name": i.upper(), "images": [], "release_date": "2020"} for i in ids if i.strip()}
    fake = FakeSpotify(albums=albums, fail_album_chunks=1)
    details = SpotifyCatalog(client=fake).get_albums_details(ids)
    assert [len(c) for c in fake.album_chunks] == [20, 20, 5]
    # first chunk failed and was skipped
    assert "id0" not in details
    assert details["id20"].name == "ID20"
    assert len(details) == 25


def test_load_playlist_collects_unique_albums():
    fake = FakeSpotify(albums={"a1": {"id": "a1", "name": "One"}, "a2": {"id": "a2", "name": "Two"}})
    loaded = SpotifyCatalog(client=fake).load_playlist("https://open.spotify.com/playlist/abc123")
    assert loaded["playlist"].name == "Best of 2024"
    assert loaded["playlist"].owner == "dj"
    assert fake.album_chunks == [["a1", "a2"]]
    assert set(loaded["album_details"]) == {"a1", "a2"}
    assert len(loaded["tracks"]) == 4
