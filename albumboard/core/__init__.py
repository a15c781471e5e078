"""Core: screenshot import pipeline, Spotify catalog, review and tier-list stores."""
from albumboard.core.import_session import ImportSession, import_from_image
from albumboard.core.match_resolver import MatchResolver
from albumboard.core.spotify_client import SpotifyCatalog

__all__ = ["ImportSession", "MatchResolver", "SpotifyCatalog", "import_from_image"]
