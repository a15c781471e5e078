"""Persist and load playlist reviews (JSON)."""
import json
import logging
import uuid
from dataclasses import asdict
from datetime import datetime, timezone
from pathlib import Path
from typing import List, Optional

from albumboard.config import REVIEWS_PATH, ensure_data_dir
from albumboard.models.review import REVIEW_MODES, StoredAlbum, StoredReview

logger = logging.getLogger(__name__)

_ALBUM_FIELDS = (
    "id",
    "name",
    "artist",
    "image",
    "release_date",
    "label",
    "notes",
    "rating",
    "spotify_url",
)


def _path(path: Optional[Path]) -> Path:
    if path is None:
        ensure_data_dir()
        return REVIEWS_PATH
    path.parent.mkdir(parents=True, exist_ok=True)
    return path


def album_from_dict(item: dict) -> StoredAlbum:
    """Build a StoredAlbum from JSON; id/name/artist are required."""
    data = {k: item[k] for k in _ALBUM_FIELDS if k in item}
    rating = data.get("rating")
    data["rating"] = float(rating) if isinstance(rating, (int, float)) else None
    data["notes"] = data.get("notes") or ""
    data["release_date"] = data.get("release_date") or ""
    return StoredAlbum(**data)


def normalize_review_mode(value) -> str:
    return value if value in REVIEW_MODES else "review"


def _review_from_dict(item: dict) -> StoredReview:
    image = item.get("playlist_image")
    return StoredReview(
        id=item["id"],
        playlist_id=item["playlist_id"],
        playlist_name=item["playlist_name"],
        playlist_owner=item.get("playlist_owner") or "",
        playlist_image=image if isinstance(image, str) else None,
        image_data_url=item.get("image_data_url"),
        review_mode=normalize_review_mode(item.get("review_mode")),
        created_at=item["created_at"],
        albums=[album_from_dict(a) for a in item.get("albums") or []],
    )


def load_reviews(path: Optional[Path] = None) -> List[StoredReview]:
    """Load all reviews from disk. Missing or unreadable file -> []."""
    p = _path(path)
    if not p.exists():
        return []
    try:
        data = json.loads(p.read_text())
    except (json.JSONDecodeError, OSError) as e:
        logger.warning("Could not read %s: %s", p, e)
        return []
    out = []
    for item in data.get("reviews", []) if isinstance(data, dict) else []:
        try:
            out.append(_review_from_dict(item))
        except (KeyError, TypeError):
            continue
    return out


def save_reviews(reviews: List[StoredReview], path: Optional[Path] = None) -> None:
    p = _path(path)
    p.write_text(json.dumps({"reviews": [asdict(r) for r in reviews]}, indent=2))


def add_review(
    reviews: List[StoredReview],
    *,
    playlist_id: str,
    playlist_name: str,
    playlist_owner: str,
    playlist_image: Optional[str],
    albums: List[StoredAlbum],
    image_data_url: Optional[str],
    review_mode: str = "review",
    path: Optional[Path] = None,
) -> StoredReview:
    """Append a new review and save."""
    review = StoredReview(
        id=str(uuid.uuid4()),
        playlist_id=playlist_id,
        playlist_name=playlist_name,
        playlist_owner=playlist_owner,
        playlist_image=playlist_image,
        image_data_url=image_data_url,
        review_mode=normalize_review_mode(review_mode),
        created_at=datetime.now(timezone.utc).isoformat(),
        albums=list(albums),
    )
    reviews.append(review)
    save_reviews(reviews, path)
    return review


def get_review_by_id(reviews: List[StoredReview], review_id: str) -> Optional[StoredReview]:
    for r in reviews:
        if r.id == review_id:
            return r
    return None


def delete_review(reviews: List[StoredReview], review_id: str, path: Optional[Path] = None) -> bool:
    """Remove review by id; save. Returns True if found and removed."""
    for i, r in enumerate(reviews):
        if r.id == review_id:
            reviews.pop(i)
            save_reviews(reviews, path)
            return True
    return False
