"""Tier lists CRUD."""
from dataclasses import asdict
from typing import Dict, List, Optional

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel

from albumboard.api.routes.reviews import AlbumBody
from albumboard.api.state import AppState, get_state
from albumboard.core.tier_list_store import add_tier_list, delete_tier_list, get_tier_list_by_id
from albumboard.core.tier_metadata import merge_tier_metadata
from albumboard.models.tier_list import TierListAlbum

router = APIRouter()


class TierListAlbumBody(AlbumBody):
    tier: str = "unranked"


class CreateTierListBody(BaseModel):
    playlist_id: str
    playlist_name: str
    playlist_owner: str = ""
    playlist_image: Optional[str] = None
    image_data_url: Optional[str] = None
    albums: List[TierListAlbumBody]
    tier_metadata: Optional[Dict[str, dict]] = None


@router.get("/")
def list_tier_lists(state: AppState = Depends(get_state)):
    return [asdict(t) for t in state.load_tier_lists()]


@router.post("/", status_code=201)
def create_tier_list(body: CreateTierListBody, state: AppState = Depends(get_state)):
    """Save a tier list. Unknown tiers become unranked; invalid styling falls back to defaults."""
    tier_lists = state.load_tier_lists()
    tier_list = add_tier_list(
        tier_lists,
        playlist_id=body.playlist_id,
        playlist_name=body.playlist_name,
        playlist_owner=body.playlist_owner,
        playlist_image=body.playlist_image,
        albums=[TierListAlbum(**a.model_dump()) for a in body.albums],
        image_data_url=body.image_data_url,
        tier_metadata=merge_tier_metadata(body.tier_metadata),
        path=state.tier_lists_path,
    )
    return asdict(tier_list)


@router.get("/{tier_list_id}")
def get_tier_list(tier_list_id: str, state: AppState = Depends(get_state)):
    tier_list = get_tier_list_by_id(state.load_tier_lists(), tier_list_id)
    if tier_list is None:
        raise HTTPException(status_code=404, detail="Tier list not found")
    return asdict(tier_list)


@router.delete("/{tier_list_id}", status_code=204)
def remove_tier_list(tier_list_id: str, state: AppState = Depends(get_state)):
    if not delete_tier_list(state.load_tier_lists(), tier_list_id, path=state.tier_lists_path):
        raise HTTPException(status_code=404, detail="Tier list not found")
