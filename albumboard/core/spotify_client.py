"""Spotify catalog access via Spotipy (client-credentials flow).

The access token lives in the cache handler handed to SpotifyCatalog (a
MemoryCacheHandler unless the caller injects another one); Spotipy stores the
expiry with it and refreshes on demand.
"""
import asyncio
import logging
import re
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

from albumboard.config import (
    ALBUM_DETAILS_CHUNK,
    PLAYLIST_TRACK_LIMIT,
    SEARCH_DEFAULT_LIMIT,
    SPOTIFY_CLIENT_ID,
    SPOTIFY_CLIENT_SECRET,
)
from albumboard.core.errors import SpotifyUnavailableError
from albumboard.models.candidate import CanonicalAlbum

logger = logging.getLogger(__name__)

_PLAYLIST_ID_RE = re.compile(r"playlist/([a-zA-Z0-9]+)")

PLAYLIST_TRACK_FIELDS = (
    "items(track(name,artists,album(id,name,images,release_date,label,artists,type,external_urls)))"
)


@dataclass
class PlaylistDetails:
    name: str
    owner: str
    image: Optional[str]


@dataclass
class AlbumDetail:
    id: str
    name: str
    label: Optional[str]
    images: List[dict]
    release_date: str
    spotify_url: Optional[str]


def extract_playlist_id(url: str) -> Optional[str]:
    """Return the playlist id from an open.spotify.com URL, or None."""
    match = _PLAYLIST_ID_RE.search(url or "")
    return match.group(1) if match else None


def _largest_image(images: Any) -> Optional[str]:
    if not isinstance(images, list) or not images:
        return None
    best = max(images, key=lambda img: (img or {}).get("height") or 0)
    return (best or {}).get("url")


def album_from_search_item(item: dict) -> CanonicalAlbum:
    """Map one item of /search?type=album to a CanonicalAlbum."""
    artists = [a.get("name") for a in item.get("artists") or [] if a and a.get("name")]
    total = item.get("total_tracks")
    return CanonicalAlbum(
        id=item.get("id") or "",
        name=item.get("name") or "Unknown album",
        artists=artists,
        image_url=_largest_image(item.get("images")),
        release_date=item.get("release_date") or "",
        spotify_url=(item.get("external_urls") or {}).get("spotify"),
        total_tracks=total if isinstance(total, int) else None,
    )


class SpotifyCatalog:
    """Read-only Spotify catalog: album search, playlists, album details."""

    def __init__(
        self,
        client_id: str = SPOTIFY_CLIENT_ID,
        client_secret: str = SPOTIFY_CLIENT_SECRET,
        cache_handler=None,
        client=None,
    ) -> None:
        self._client_id = client_id
        self._client_secret = client_secret
        self._cache_handler = cache_handler
        self._client = client

    @property
    def configured(self) -> bool:
        return self._client is not None or bool(self._client_id and self._client_secret)

    def client(self):
        """Return the Spotipy client, building it on first use."""
        if self._client is not None:
            return self._client
        if not self.configured:
            raise SpotifyUnavailableError("SPOTIFY_CLIENT_ID / SPOTIFY_CLIENT_SECRET not set")
        from spotipy import Spotify
        from spotipy.cache_handler import MemoryCacheHandler
        from spotipy.oauth2 import SpotifyClientCredentials

        if self._cache_handler is None:
            self._cache_handler = MemoryCacheHandler()
        auth = SpotifyClientCredentials(
            client_id=self._client_id,
            client_secret=self._client_secret,
            cache_handler=self._cache_handler,
        )
        self._client = Spotify(auth_manager=auth)
        return self._client

    def search_albums(self, query: str, limit: int = SEARCH_DEFAULT_LIMIT) -> List[CanonicalAlbum]:
        """Album search. Blank query returns [] without calling Spotify."""
        if not query.strip():
            return []
        response = self.client().search(q=query, type="album", limit=limit)
        items = ((response or {}).get("albums") or {}).get("items") or []
        return [album_from_search_item(item) for item in items if item]

    async def asearch_albums(self, query: str, limit: int = SEARCH_DEFAULT_LIMIT) -> List[CanonicalAlbum]:
        return await asyncio.to_thread(self.search_albums, query, limit)

    def get_playlist_details(self, playlist_id: str) -> PlaylistDetails:
        playlist = self.client().playlist(playlist_id) or {}
        images = playlist.get("images") or []
        return PlaylistDetails(
            name=playlist.get("name") or "",
            owner=(playlist.get("owner") or {}).get("display_name") or "",
            image=images[0]["url"] if images else None,
        )

    def get_playlist_tracks(self, playlist_id: str) -> List[dict]:
        response = self.client().playlist_items(
            playlist_id, fields=PLAYLIST_TRACK_FIELDS, limit=PLAYLIST_TRACK_LIMIT
        )
        return (response or {}).get("items") or []

    def get_albums_details(self, ids: List[str]) -> Dict[str, AlbumDetail]:
        """Fetch albums by id in chunks; a failing chunk is logged and skipped."""
        unique_ids = list(dict.fromkeys(i for i in ids if isinstance(i, str) and i.strip()))
        result: Dict[str, AlbumDetail] = {}
        for start in range(0, len(unique_ids), ALBUM_DETAILS_CHUNK):
            chunk = unique_ids[start:start + ALBUM_DETAILS_CHUNK]
            try:
                response = self.client().albums(chunk)
            except SpotifyUnavailableError:
                raise
            except Exception as e:
                logger.warning("Error fetching album details: %s", e)
                continue
            for album in (response or {}).get("albums") or []:
                if not album or not isinstance(album.get("id"), str):
                    continue
                result[album["id"]] = AlbumDetail(
                    id=album["id"],
                    name=album.get("name") or "",
                    label=album.get("label"),
                    images=album.get("images") if isinstance(album.get("images"), list) else [],
                    release_date=album.get("release_date") or "",
                    spotify_url=(album.get("external_urls") or {}).get("spotify"),
                )
        return result

    def load_playlist(self, url_or_id: str) -> Dict[str, Any]:
        """Playlist details, tracks, and details for each distinct album (first-seen order)."""
        playlist_id = extract_playlist_id(url_or_id) or url_or_id.strip()
        tracks = self.get_playlist_tracks(playlist_id)
        details = self.get_playlist_details(playlist_id)
        album_ids = []
        for item in tracks:
            album_id = (((item or {}).get("track") or {}).get("album") or {}).get("id")
            if isinstance(album_id, str) and album_id:
                album_ids.append(album_id)
        album_details = self.get_albums_details(album_ids) if album_ids else {}
        return {"tracks": tracks, "playlist": details, "album_details": album_details}
