"""Saved playlist reviews."""
from dataclasses import dataclass, field
from typing import List, Optional

REVIEW_MODES = ("review", "plain", "rating", "both")


@dataclass
class StoredAlbum:
    """One album row in a review or tier list, with the user's notes and rating."""
    id: str
    name: str
    artist: str
    image: Optional[str] = None
    release_date: str = ""
    label: Optional[str] = None
    notes: str = ""
    rating: Optional[float] = None
    spotify_url: Optional[str] = None


@dataclass
class StoredReview:
    """Persisted review page: ordered albums plus the exported share image."""
    id: str
    playlist_id: str
    playlist_name: str
    playlist_owner: str
    playlist_image: Optional[str]
    image_data_url: Optional[str]
    review_mode: str  # "review" | "plain" | "rating" | "both"
    created_at: str
    albums: List[StoredAlbum] = field(default_factory=list)
