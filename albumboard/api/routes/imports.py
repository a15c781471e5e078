"""Import an album list from a screenshot (OCR) or pasted text, then match it on Spotify."""
import logging
from dataclasses import asdict
from typing import Optional

from fastapi import APIRouter, Depends, File, Form, HTTPException, UploadFile
from pydantic import BaseModel

from albumboard.api.state import AppState, get_state
from albumboard.core.album_parser import candidates_from_text
from albumboard.core.errors import CanvasUnavailableError, ImageDecodeError, OcrFailureError
from albumboard.core.import_session import ImportSession
from albumboard.models.candidate import OcrProgress

logger = logging.getLogger(__name__)

router = APIRouter()


class TextImportBody(BaseModel):
    text: str


class EditCandidateBody(BaseModel):
    artist: Optional[str] = None
    album: Optional[str] = None


def _session_to_dict(session_id: str, session: ImportSession) -> dict:
    return {
        "session_id": session_id,
        "raw_text": session.raw_text,
        "matched_count": session.matched_count,
        "unmatched_count": len(session.candidates) - session.matched_count,
        "candidates": [asdict(c) for c in session.candidates],
    }


def _get_session(session_id: str, state: AppState) -> ImportSession:
    session = state.get_import_session(session_id)
    if session is None:
        raise HTTPException(status_code=404, detail="Import session not found")
    return session


def _check_index(session: ImportSession, index: int) -> None:
    if not 0 <= index < len(session.candidates):
        raise HTTPException(status_code=404, detail="Candidate not found")


@router.post("/")
async def import_image(
    image: UploadFile = File(...),
    focus_on_right_column: bool = Form(True),
    state: AppState = Depends(get_state),
):
    """Run preprocessing, OCR, and parsing on an uploaded screenshot."""
    if image.content_type and not image.content_type.startswith("image/"):
        raise HTTPException(status_code=400, detail="Upload must be an image.")
    data = await image.read()
    logger.info("Import from %s (%d bytes), focus_on_right_column=%s", image.filename, len(data), focus_on_right_column)

    def on_progress(progress: OcrProgress) -> None:
        logger.debug("OCR %s %.0f%%", progress.status, progress.progress * 100)

    session_id, session = state.new_import_session()
    try:
        await session.import_image(data, focus_on_right_column, on_progress)
    except ImageDecodeError as e:
        state.drop_import_session(session_id)
        raise HTTPException(status_code=400, detail=str(e))
    except (CanvasUnavailableError, OcrFailureError) as e:
        state.drop_import_session(session_id)
        raise HTTPException(status_code=422, detail=str(e))
    return _session_to_dict(session_id, session)


@router.post("/text")
def import_text(body: TextImportBody, state: AppState = Depends(get_state)):
    """Parse pasted text the same way as OCR output."""
    session_id, session = state.new_import_session()
    session.load(candidates_from_text(body.text), body.text)
    return _session_to_dict(session_id, session)


@router.get("/{session_id}")
def get_import(session_id: str, state: AppState = Depends(get_state)):
    return _session_to_dict(session_id, _get_session(session_id, state))


@router.delete("/{session_id}", status_code=204)
def delete_import(session_id: str, state: AppState = Depends(get_state)):
    if not state.drop_import_session(session_id):
        raise HTTPException(status_code=404, detail="Import session not found")


@router.post("/{session_id}/resolve")
async def resolve_all(session_id: str, state: AppState = Depends(get_state)):
    """Match every candidate on Spotify, one at a time."""
    session = _get_session(session_id, state)
    await session.resolve_all()
    return _session_to_dict(session_id, session)


@router.post("/{session_id}/candidates/{index}/resolve")
async def resolve_candidate(session_id: str, index: int, state: AppState = Depends(get_state)):
    session = _get_session(session_id, state)
    _check_index(session, index)
    candidate = await session.resolve_one(index)
    if candidate is None:
        raise HTTPException(status_code=409, detail="Candidate changed while it was being resolved")
    return asdict(candidate)


@router.patch("/{session_id}/candidates/{index}")
def edit_candidate(
    session_id: str,
    index: int,
    body: EditCandidateBody,
    state: AppState = Depends(get_state),
):
    """Correct artist/album text; the candidate must be matched again."""
    session = _get_session(session_id, state)
    _check_index(session, index)
    return asdict(session.edit(index, artist=body.artist, album=body.album))


@router.delete("/{session_id}/candidates/{index}", status_code=204)
def remove_candidate(session_id: str, index: int, state: AppState = Depends(get_state)):
    session = _get_session(session_id, state)
    _check_index(session, index)
    session.remove(index)


@router.get("/{session_id}/matched")
def matched_albums(session_id: str, state: AppState = Depends(get_state)):
    """Matched albums, ready to add to a review or tier list."""
    session = _get_session(session_id, state)
    albums = session.matched_albums()
    if not albums:
        raise HTTPException(
            status_code=400,
            detail="No matched albums to import. Search for albums first.",
        )
    return {"albums": [asdict(a) for a in albums]}
