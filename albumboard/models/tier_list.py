"""Tier lists: albums sorted into ranked lanes."""
from dataclasses import dataclass, field
from typing import Dict, List, Optional

from albumboard.models.review import StoredAlbum

RANKED_TIER_IDS = ("s", "a", "b", "c")
TIER_IDS = ("unranked",) + RANKED_TIER_IDS


@dataclass
class TierListAlbum(StoredAlbum):
    tier: str = "unranked"  # "unranked" | "s" | "a" | "b" | "c"


@dataclass
class TierStyle:
    """User-customizable heading and colors for one ranked lane."""
    title: str
    created_by: str
    color: str
    text_color: str


@dataclass
class StoredTierList:
    id: str
    playlist_id: str
    playlist_name: str
    playlist_owner: str
    playlist_image: Optional[str]
    image_data_url: Optional[str]
    created_at: str
    albums: List[TierListAlbum] = field(default_factory=list)
    tier_metadata: Dict[str, TierStyle] = field(default_factory=dict)
