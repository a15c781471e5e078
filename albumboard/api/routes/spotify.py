"""Spotify proxy: album search, playlist loading, album details."""
import logging
from dataclasses import asdict
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel

from albumboard.api.state import AppState, get_state
from albumboard.config import ALBUM_DETAILS_MAX_IDS, SEARCH_DEFAULT_LIMIT, SEARCH_MAX_LIMIT
from albumboard.core.errors import SpotifyUnavailableError
from albumboard.core.spotify_client import extract_playlist_id

logger = logging.getLogger(__name__)

router = APIRouter()


class PlaylistBody(BaseModel):
    """Playlist URL (open.spotify.com/playlist/...) or bare id."""
    url: str


class AlbumIdsBody(BaseModel):
    ids: List[str]


def _spotify_unavailable() -> HTTPException:
    return HTTPException(status_code=503, detail="Spotify credentials are not configured.")


def clamp_limit(limit: Optional[int]) -> int:
    if not limit:
        return SEARCH_DEFAULT_LIMIT
    return min(max(limit, 1), SEARCH_MAX_LIMIT)


@router.get("/search")
def search_albums(q: str = "", limit: Optional[int] = None, state: AppState = Depends(get_state)):
    """Search albums; limit is clamped to 1..20 (default 12)."""
    if not q.strip():
        raise HTTPException(status_code=400, detail='Query parameter "q" is required.')
    try:
        albums = state.catalog.search_albums(q, clamp_limit(limit))
    except SpotifyUnavailableError:
        raise _spotify_unavailable()
    except Exception as e:
        logger.error("Spotify album search failed: %s", e)
        raise HTTPException(status_code=502, detail="Failed to search Spotify.")
    return {"albums": [asdict(a) for a in albums]}


@router.post("/playlist")
def load_playlist(body: PlaylistBody, state: AppState = Depends(get_state)):
    """Playlist details, its tracks, and details for every album on it."""
    playlist_id = extract_playlist_id(body.url) or body.url.strip()
    if not playlist_id:
        raise HTTPException(status_code=400, detail="Invalid playlist URL or ID.")
    try:
        loaded = state.catalog.load_playlist(playlist_id)
    except SpotifyUnavailableError:
        raise _spotify_unavailable()
    except Exception as e:
        logger.error("Failed to load playlist %s: %s", playlist_id, e)
        raise HTTPException(status_code=502, detail="Failed to load playlist from Spotify.")
    return {
        "tracks": loaded["tracks"],
        "playlist": asdict(loaded["playlist"]),
        "album_details": {k: asdict(v) for k, v in loaded["album_details"].items()},
    }


@router.post("/albums")
def album_details(body: AlbumIdsBody, state: AppState = Depends(get_state)):
    """Album details by id (first 100 ids are used)."""
    if not body.ids:
        raise HTTPException(status_code=400, detail="Array of album IDs required.")
    try:
        albums = state.catalog.get_albums_details(body.ids[:ALBUM_DETAILS_MAX_IDS])
    except SpotifyUnavailableError:
        raise _spotify_unavailable()
    return {"albums": {k: asdict(v) for k, v in albums.items()}}
