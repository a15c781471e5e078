"""Resolve parsed (artist, album) candidates to canonical Spotify albums."""
import logging
import re
from typing import Awaitable, Callable, List, Optional

from albumboard.config import MATCH_RESULT_LIMIT, MATCH_WORD_OVERLAP
from albumboard.models.candidate import CanonicalAlbum, ParsedAlbumCandidate

logger = logging.getLogger(__name__)

AlbumSearch = Callable[[str, int], Awaitable[List[CanonicalAlbum]]]

_QUERY_PUNCT_RE = re.compile(r"[?!.,;:'\"()\[\]{}]")
_NON_WORD_RE = re.compile(r"[^a-z0-9\s]")
_WHITESPACE_RE = re.compile(r"\s+")
MIN_WORD_LEN = 3


def sanitize_query_part(text: str) -> str:
    """Replace search-syntax punctuation with spaces and collapse whitespace."""
    return _WHITESPACE_RE.sub(" ", _QUERY_PUNCT_RE.sub(" ", text)).strip()


def normalize_for_match(text: str) -> str:
    return _WHITESPACE_RE.sub(" ", _NON_WORD_RE.sub("", text.lower())).strip()


def is_similar(a: str, b: str, word_overlap: float = MATCH_WORD_OVERLAP) -> bool:
    """Exact or substring match after normalization, else enough shared words.

    Word overlap counts words (3+ chars) of the first string that contain, or
    are contained in, some word of the second, and requires at least
    word_overlap times the shorter word list.
    """
    norm_a = normalize_for_match(a)
    norm_b = normalize_for_match(b)
    if norm_a == norm_b:
        return True
    if norm_a in norm_b or norm_b in norm_a:
        return True

    words_a = [w for w in norm_a.split(" ") if len(w) >= MIN_WORD_LEN]
    words_b = [w for w in norm_b.split(" ") if len(w) >= MIN_WORD_LEN]
    if not words_a or not words_b:
        return False
    matching = [w for w in words_a if any(w2 in w or w in w2 for w2 in words_b)]
    return len(matching) >= min(len(words_a), len(words_b)) * word_overlap


def build_queries(artist: str, album: str) -> List[str]:
    """Search phrasings, most precise first."""
    artist = sanitize_query_part(artist)
    album = sanitize_query_part(album)
    return [
        f"artist:{artist} album:{album}",
        f"{artist} {album}",
        f"artist:{artist} {album}",
        f"{album} {artist}",
    ]


class MatchResolver:
    """Tries each query phrasing in turn and accepts the first result whose
    artist and title both pass is_similar."""

    def __init__(
        self,
        search: AlbumSearch,
        *,
        result_limit: int = MATCH_RESULT_LIMIT,
        word_overlap: float = MATCH_WORD_OVERLAP,
    ) -> None:
        self._search = search
        self.result_limit = result_limit
        self.word_overlap = word_overlap

    def accepts(self, candidate: ParsedAlbumCandidate, album: CanonicalAlbum) -> bool:
        return is_similar(candidate.artist, album.artist_line, self.word_overlap) and is_similar(
            candidate.album, album.name, self.word_overlap
        )

    async def resolve(self, candidate: ParsedAlbumCandidate) -> Optional[CanonicalAlbum]:
        """Return the matching album, or None. Search failures count as no match."""
        for query in build_queries(candidate.artist, candidate.album):
            try:
                results = await self._search(query, self.result_limit)
            except Exception as e:
                logger.warning("Search failed for %r: %s", query, e)
                continue
            for album in results:
                if self.accepts(candidate, album):
                    logger.info(
                        "Found match for %r - %r: %r by %r",
                        candidate.artist,
                        candidate.album,
                        album.name,
                        album.artist_line,
                    )
                    return album
        logger.info("No matching result for %r - %r", candidate.artist, candidate.album)
        return None
