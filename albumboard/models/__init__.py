"""Data models for import candidates, reviews, and tier lists."""
from albumboard.models.candidate import (
    CanonicalAlbum,
    MatchedAlbumCandidate,
    OcrProgress,
    ParsedAlbumCandidate,
    RawOcrResult,
)
from albumboard.models.review import StoredAlbum, StoredReview
from albumboard.models.tier_list import StoredTierList, TierListAlbum, TierStyle

__all__ = [
    "CanonicalAlbum",
    "MatchedAlbumCandidate",
    "OcrProgress",
    "ParsedAlbumCandidate",
    "RawOcrResult",
    "StoredAlbum",
    "StoredReview",
    "StoredTierList",
    "TierListAlbum",
    "TierStyle",
]
