"""Image import candidates and the canonical albums they resolve to."""
from dataclasses import dataclass, field
from typing import List, Optional


@dataclass(frozen=True)
class RawOcrResult:
    """Text recognized from one image, with the engine's mean confidence (0-100)."""
    text: str
    confidence: float


@dataclass(frozen=True)
class OcrProgress:
    """Progress report from the OCR engine."""
    status: str
    progress: float  # 0..1


@dataclass(frozen=True)
class CanonicalAlbum:
    """Album record as returned by the remote search index."""
    id: str
    name: str
    artists: List[str] = field(default_factory=list)
    image_url: Optional[str] = None
    release_date: str = ""
    spotify_url: Optional[str] = None
    total_tracks: Optional[int] = None

    @property
    def artist_line(self) -> str:
        return " ".join(self.artists)


@dataclass(frozen=True)
class ParsedAlbumCandidate:
    """(artist, album) pair parsed from one line of OCR text."""
    artist: str
    album: str
    line_number: int


@dataclass(frozen=True)
class MatchedAlbumCandidate(ParsedAlbumCandidate):
    """Candidate plus its resolution state.

    matched=True always carries resolved_album; editing artist/album text
    clears both together.
    """
    matched: bool = False
    searching: bool = False
    resolved_album: Optional[CanonicalAlbum] = None

    @classmethod
    def from_parsed(cls, parsed: ParsedAlbumCandidate) -> "MatchedAlbumCandidate":
        return cls(artist=parsed.artist, album=parsed.album, line_number=parsed.line_number)
