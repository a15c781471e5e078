"""Saved reviews CRUD and the share-preview image."""
from dataclasses import asdict
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import Response
from pydantic import BaseModel

from albumboard.api.state import AppState, get_state
from albumboard.core.image_preprocessor import parse_data_url
from albumboard.core.review_store import add_review, delete_review, get_review_by_id
from albumboard.models.review import StoredAlbum

router = APIRouter()


class AlbumBody(BaseModel):
    id: str
    name: str
    artist: str
    image: Optional[str] = None
    release_date: str = ""
    label: Optional[str] = None
    notes: str = ""
    rating: Optional[float] = None
    spotify_url: Optional[str] = None


class CreateReviewBody(BaseModel):
    playlist_id: str
    playlist_name: str
    playlist_owner: str = ""
    playlist_image: Optional[str] = None
    albums: List[AlbumBody]
    image_data_url: Optional[str] = None
    review_mode: str = "review"


@router.get("/")
def list_reviews(state: AppState = Depends(get_state)):
    return [asdict(r) for r in state.load_reviews()]


@router.post("/", status_code=201)
def create_review(body: CreateReviewBody, state: AppState = Depends(get_state)):
    """Save a review; albums keep the order they were arranged in."""
    if not body.albums:
        raise HTTPException(status_code=400, detail="A review needs at least one album.")
    reviews = state.load_reviews()
    review = add_review(
        reviews,
        playlist_id=body.playlist_id,
        playlist_name=body.playlist_name,
        playlist_owner=body.playlist_owner,
        playlist_image=body.playlist_image,
        albums=[StoredAlbum(**a.model_dump()) for a in body.albums],
        image_data_url=body.image_data_url,
        review_mode=body.review_mode,
        path=state.reviews_path,
    )
    return asdict(review)


@router.get("/{review_id}")
def get_review(review_id: str, state: AppState = Depends(get_state)):
    review = get_review_by_id(state.load_reviews(), review_id)
    if review is None:
        raise HTTPException(status_code=404, detail="Review not found")
    return asdict(review)


@router.get("/{review_id}/og")
def review_share_image(review_id: str, state: AppState = Depends(get_state)):
    """Serve the exported review image stored with the review."""
    review = get_review_by_id(state.load_reviews(), review_id)
    if review is None:
        raise HTTPException(status_code=404, detail="Review not found")
    parsed = parse_data_url(review.image_data_url or "")
    if parsed is None:
        raise HTTPException(status_code=404, detail="Review has no exported image")
    mime_type, payload = parsed
    return Response(
        content=payload,
        media_type=mime_type,
        headers={"Cache-Control": "public, max-age=86400, immutable"},
    )


@router.delete("/{review_id}", status_code=204)
def remove_review(review_id: str, state: AppState = Depends(get_state)):
    if not delete_review(state.load_reviews(), review_id, path=state.reviews_path):
        raise HTTPException(status_code=404, detail="Review not found")
