"""Persist and load tier lists (JSON). Album order within the list is its position."""
import json
import logging
import uuid
from dataclasses import asdict
from datetime import datetime, timezone
from pathlib import Path
from typing import Dict, List, Optional

from albumboard.config import TIER_LISTS_PATH, ensure_data_dir
from albumboard.core.review_store import album_from_dict
from albumboard.core.tier_metadata import default_tier_metadata, merge_tier_metadata
from albumboard.models.tier_list import TIER_IDS, StoredTierList, TierListAlbum, TierStyle

logger = logging.getLogger(__name__)


def _path(path: Optional[Path]) -> Path:
    if path is None:
        ensure_data_dir()
        return TIER_LISTS_PATH
    path.parent.mkdir(parents=True, exist_ok=True)
    return path


def normalize_tier(value) -> str:
    return value if value in TIER_IDS else "unranked"


def _album_from_dict(item: dict) -> TierListAlbum:
    album = album_from_dict(item)
    return TierListAlbum(**asdict(album), tier=normalize_tier(item.get("tier")))


def _tier_list_from_dict(item: dict) -> StoredTierList:
    return StoredTierList(
        id=item["id"],
        playlist_id=item["playlist_id"],
        playlist_name=item["playlist_name"],
        playlist_owner=item.get("playlist_owner") or "",
        playlist_image=item.get("playlist_image"),
        image_data_url=item.get("image_data_url"),
        created_at=item["created_at"],
        albums=[_album_from_dict(a) for a in item.get("albums") or []],
        tier_metadata=merge_tier_metadata(item.get("tier_metadata")),
    )


def load_tier_lists(path: Optional[Path] = None) -> List[StoredTierList]:
    """Load all tier lists, newest first. Missing or unreadable file -> []."""
    p = _path(path)
    if not p.exists():
        return []
    try:
        data = json.loads(p.read_text())
    except (json.JSONDecodeError, OSError) as e:
        logger.warning("Could not read %s: %s", p, e)
        return []
    out = []
    for item in data.get("tier_lists", []) if isinstance(data, dict) else []:
        try:
            out.append(_tier_list_from_dict(item))
        except (KeyError, TypeError):
            continue
    out.sort(key=lambda t: t.created_at, reverse=True)
    return out


def save_tier_lists(tier_lists: List[StoredTierList], path: Optional[Path] = None) -> None:
    p = _path(path)
    p.write_text(json.dumps({"tier_lists": [asdict(t) for t in tier_lists]}, indent=2))


def add_tier_list(
    tier_lists: List[StoredTierList],
    *,
    playlist_id: str,
    playlist_name: str,
    playlist_owner: str,
    playlist_image: Optional[str],
    albums: List[TierListAlbum],
    image_data_url: Optional[str],
    tier_metadata: Optional[Dict[str, TierStyle]] = None,
    path: Optional[Path] = None,
) -> StoredTierList:
    """Insert a new tier list at the front (newest first) and save."""
    tier_list = StoredTierList(
        id=str(uuid.uuid4()),
        playlist_id=playlist_id,
        playlist_name=playlist_name,
        playlist_owner=playlist_owner,
        playlist_image=playlist_image,
        image_data_url=image_data_url,
        created_at=datetime.now(timezone.utc).isoformat(),
        albums=[
            TierListAlbum(**{**asdict(a), "tier": normalize_tier(a.tier)}) for a in albums
        ],
        tier_metadata=tier_metadata or default_tier_metadata(),
    )
    tier_lists.insert(0, tier_list)
    save_tier_lists(tier_lists, path)
    return tier_list


def get_tier_list_by_id(tier_lists: List[StoredTierList], tier_list_id: str) -> Optional[StoredTierList]:
    for t in tier_lists:
        if t.id == tier_list_id:
            return t
    return None


def delete_tier_list(tier_lists: List[StoredTierList], tier_list_id: str, path: Optional[Path] = None) -> bool:
    """Remove tier list by id; save. Returns True if found and removed."""
    for i, t in enumerate(tier_lists):
        if t.id == tier_list_id:
            tier_lists.pop(i)
            save_tier_lists(tier_lists, path)
            return True
    return False
