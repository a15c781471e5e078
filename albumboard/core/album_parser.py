"""Turn raw OCR text into (artist, album) candidates.

Supported line layouts:
- Artist - Album
- Artist / Album
- Artist: Album
- Artist | Album
- 1. Artist - Album  (enumeration prefix is stripped)

Each line is split on the FIRST occurrence of the highest-priority delimiter
that yields sane lengths, so "Artist - Album Name - Deluxe" keeps the subtitle
in the album title.
"""
import re
from dataclasses import replace
from typing import Iterable, List, Optional, Tuple

from albumboard.models.candidate import ParsedAlbumCandidate

# Spaced variants first, then bare dashes, then the looser separators
DELIMITERS = (" - ", " – ", " — ", "-", "–", "—", ": ", " / ", " | ")

MAX_ARTIST_LEN = 100
MAX_ALBUM_LEN = 200
MIN_FIELD_LEN = 2
MIN_LETTERS = 5
MAX_SPECIAL_RATIO = 0.3

_ENUMERATION_RE = re.compile(r"^\d+[.)]\s*")
_WHITESPACE_RE = re.compile(r"\s+")
_LETTER_RE = re.compile(r"[a-zA-Z]")
_SPECIAL_RE = re.compile(r"[^a-zA-Z0-9\s\-'/]")
_NON_KEY_RE = re.compile(r"[^a-z0-9]")


def normalize(text: str) -> str:
    """Collapse whitespace and straighten quotes, apostrophes, and ellipses."""
    text = text.replace("“", '"').replace("”", '"')
    text = text.replace("‘", "'").replace("’", "'")
    text = text.replace("…", "...")
    return _WHITESPACE_RE.sub(" ", text).strip()


def clean_candidate(candidate: ParsedAlbumCandidate) -> ParsedAlbumCandidate:
    """Normalize artist and album separately; the line number is kept."""
    return replace(candidate, artist=normalize(candidate.artist), album=normalize(candidate.album))


def parse_line(line: str) -> Optional[Tuple[str, str]]:
    """Return (artist, album) for one line, or None when no delimiter gives a valid split."""
    clean_line = _ENUMERATION_RE.sub("", line, count=1)
    for delimiter in DELIMITERS:
        index = clean_line.find(delimiter)
        if index <= 0:
            continue
        artist = clean_line[:index].strip()
        album = clean_line[index + len(delimiter):].strip()
        if 0 < len(artist) < MAX_ARTIST_LEN and 0 < len(album) < MAX_ALBUM_LEN:
            return artist, album
    return None


def parse_lines(raw_text: str) -> List[ParsedAlbumCandidate]:
    """Parse every non-empty line; line numbers count non-empty lines from 1."""
    lines = [line.strip() for line in raw_text.split("\n")]
    lines = [line for line in lines if line]
    out = []
    for i, line in enumerate(lines, start=1):
        parsed = parse_line(line)
        if parsed is None:
            continue
        artist, album = parsed
        out.append(ParsedAlbumCandidate(artist=artist, album=album, line_number=i))
    return out


def _looks_like_text(candidate: ParsedAlbumCandidate) -> bool:
    if len(candidate.artist) < MIN_FIELD_LEN or len(candidate.album) < MIN_FIELD_LEN:
        return False
    combined = f"{candidate.artist} {candidate.album}"
    letters = len(_LETTER_RE.findall(combined))
    special = len(_SPECIAL_RE.findall(combined))
    return letters >= MIN_LETTERS and special < len(combined) * MAX_SPECIAL_RATIO


def filter_valid(candidates: Iterable[ParsedAlbumCandidate]) -> List[ParsedAlbumCandidate]:
    """Drop candidates that are too short or look like OCR noise."""
    return [c for c in candidates if _looks_like_text(c)]


def dedupe_key(candidate: ParsedAlbumCandidate) -> str:
    return _NON_KEY_RE.sub("", (candidate.artist + candidate.album).lower())


def deduplicate(candidates: Iterable[ParsedAlbumCandidate]) -> List[ParsedAlbumCandidate]:
    """Keep the first candidate per case/punctuation/space-insensitive key, in order."""
    seen = set()
    unique = []
    for candidate in candidates:
        key = dedupe_key(candidate)
        if key in seen:
            continue
        seen.add(key)
        unique.append(candidate)
    return unique


def candidates_from_text(raw_text: str) -> List[ParsedAlbumCandidate]:
    """parse -> normalize per field -> filter -> dedupe."""
    candidates = [clean_candidate(c) for c in parse_lines(raw_text)]
    return deduplicate(filter_valid(candidates))
