"""Image-to-album-list import: preprocess -> OCR -> parse -> filter -> dedupe -> resolve.

An ImportSession owns the candidate list for one uploaded image. The list is
replaced wholesale after every change (candidates are frozen dataclasses), so
callers can hold on to a snapshot while a batch resolution is running.
"""
import asyncio
import logging
from dataclasses import replace
from typing import Awaitable, Callable, List, Optional

from albumboard.config import RESOLVE_DELAY_SEC
from albumboard.core.album_parser import candidates_from_text
from albumboard.core.image_preprocessor import ImageSource, preprocess
from albumboard.core.match_resolver import MatchResolver
from albumboard.core.ocr_adapter import ProgressCallback, recognize
from albumboard.models.candidate import CanonicalAlbum, MatchedAlbumCandidate, ParsedAlbumCandidate, RawOcrResult

logger = logging.getLogger(__name__)

Recognizer = Callable[..., Awaitable[RawOcrResult]]
Preprocessor = Callable[[ImageSource, bool], Awaitable[str]]
UpdateCallback = Callable[[List[MatchedAlbumCandidate]], None]


async def import_from_image(
    source: ImageSource,
    focus_on_right_column: bool = True,
    on_ocr_progress: Optional[ProgressCallback] = None,
    *,
    preprocessor: Optional[Preprocessor] = None,
    recognizer: Optional[Recognizer] = None,
) -> tuple[List[ParsedAlbumCandidate], str]:
    """Run the image stages and return (cleaned candidates, raw OCR text).

    Decode, canvas, and OCR errors propagate; no candidates is not an error.
    """
    preprocessor = preprocessor or preprocess
    recognizer = recognizer or recognize
    data_url = await preprocessor(source, focus_on_right_column)
    result = await recognizer(data_url, on_ocr_progress)
    candidates = candidates_from_text(result.text)
    logger.info(
        "OCR confidence %.1f, %d candidate(s) from %d line(s)",
        result.confidence,
        len(candidates),
        len(result.text.splitlines()),
    )
    return candidates, result.text


class ImportSession:
    """Candidate list for one image plus its match state."""

    def __init__(
        self,
        resolver: MatchResolver,
        *,
        delay_sec: float = RESOLVE_DELAY_SEC,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        self._resolver = resolver
        self._delay_sec = delay_sec
        self._sleep = sleep
        self.raw_text = ""
        self.candidates: List[MatchedAlbumCandidate] = []

    def load(self, parsed: List[ParsedAlbumCandidate], raw_text: str = "") -> None:
        self.raw_text = raw_text
        self.candidates = [MatchedAlbumCandidate.from_parsed(p) for p in parsed]

    async def import_image(
        self,
        source: ImageSource,
        focus_on_right_column: bool = True,
        on_ocr_progress: Optional[ProgressCallback] = None,
        **stages,
    ) -> List[MatchedAlbumCandidate]:
        """Replace this session's candidates with the ones read from an image.

        On failure the previous candidate list is left untouched.
        """
        parsed, raw_text = await import_from_image(
            source, focus_on_right_column, on_ocr_progress, **stages
        )
        self.load(parsed, raw_text)
        return self.candidates

    def _set(self, index: int, candidate: MatchedAlbumCandidate) -> None:
        updated = list(self.candidates)
        updated[index] = candidate
        self.candidates = updated

    def _check_index(self, index: int) -> None:
        if not 0 <= index < len(self.candidates):
            raise IndexError(f"No candidate at index {index}")

    def _position(self, candidate: MatchedAlbumCandidate) -> Optional[int]:
        # identity, not equality: an edit or removal replaces the object
        for i, c in enumerate(self.candidates):
            if c is candidate:
                return i
        return None

    async def resolve_one(
        self, index: int, on_update: Optional[UpdateCallback] = None
    ) -> Optional[MatchedAlbumCandidate]:
        """Resolve one candidate; resolution never raises, failures leave it unmatched.

        Returns None when the candidate was edited or removed while the search
        was in flight; the late result is dropped.
        """
        self._check_index(index)
        pending = replace(self.candidates[index], searching=True)
        self._set(index, pending)
        if on_update is not None:
            on_update(self.candidates)
        return await self._settle(pending, on_update)

    async def _settle(
        self, pending: MatchedAlbumCandidate, on_update: Optional[UpdateCallback]
    ) -> Optional[MatchedAlbumCandidate]:
        try:
            album = await self._resolver.resolve(pending)
        except Exception as e:
            logger.warning("Resolution failed for %r - %r: %s", pending.artist, pending.album, e)
            album = None

        index = self._position(pending)
        if index is None:
            logger.info("Dropping late result for %r - %r", pending.artist, pending.album)
            return None
        settled = replace(pending, searching=False, matched=album is not None, resolved_album=album)
        self._set(index, settled)
        if on_update is not None:
            on_update(self.candidates)
        return settled

    async def resolve_all(self, on_update: Optional[UpdateCallback] = None) -> List[MatchedAlbumCandidate]:
        """Resolve every candidate in order, one at a time, pausing between requests.

        Candidates removed or edited after the batch started are skipped.
        """
        started = False
        for candidate in list(self.candidates):
            if started and self._delay_sec > 0:
                await self._sleep(self._delay_sec)
            index = self._position(candidate)
            if index is None:
                continue
            started = True
            await self.resolve_one(index, on_update)
        return self.candidates

    def edit(self, index: int, *, artist: Optional[str] = None, album: Optional[str] = None) -> MatchedAlbumCandidate:
        """Change artist and/or album text; any earlier match is discarded."""
        self._check_index(index)
        current = self.candidates[index]
        edited = replace(
            current,
            artist=artist if artist is not None else current.artist,
            album=album if album is not None else current.album,
            searching=False,
            matched=False,
            resolved_album=None,
        )
        self._set(index, edited)
        return edited

    def remove(self, index: int) -> None:
        self._check_index(index)
        self.candidates = [c for i, c in enumerate(self.candidates) if i != index]

    def matched_albums(self) -> List[CanonicalAlbum]:
        """Resolved albums, in list order, for the review/tier-list builder."""
        return [c.resolved_album for c in self.candidates if c.matched and c.resolved_album is not None]

    @property
    def matched_count(self) -> int:
        return sum(1 for c in self.candidates if c.matched)
