"""Configuration: env, data paths, Spotify credentials, import pipeline tuning."""
import os
from pathlib import Path

# Base paths (project root = parent of albumboard package)
BASE_DIR = Path(__file__).resolve().parent.parent

# Load .env from project root so SPOTIFY_CLIENT_ID etc. are set
try:
    from dotenv import load_dotenv
    load_dotenv(BASE_DIR / ".env")
except ImportError:
    pass
DATA_DIR = Path(os.getenv("ALBUMBOARD_DATA_DIR", str(BASE_DIR / "data")))
REVIEWS_PATH = DATA_DIR / "reviews.json"
TIER_LISTS_PATH = DATA_DIR / "tier_lists.json"

# API
API_HOST = os.getenv("ALBUMBOARD_API_HOST", "0.0.0.0")
API_PORT = int(os.getenv("ALBUMBOARD_API_PORT", "8000"))
WEB_ORIGIN = os.getenv("ALBUMBOARD_WEB_ORIGIN", "*")

# Spotify (client-credentials flow; no user login)
SPOTIFY_CLIENT_ID = os.getenv("SPOTIFY_CLIENT_ID", "")
SPOTIFY_CLIENT_SECRET = os.getenv("SPOTIFY_CLIENT_SECRET", "")
SEARCH_DEFAULT_LIMIT = 12
SEARCH_MAX_LIMIT = 20
PLAYLIST_TRACK_LIMIT = 100
ALBUM_DETAILS_CHUNK = 20
ALBUM_DETAILS_MAX_IDS = 100

# OCR
OCR_LANGUAGE = os.getenv("ALBUMBOARD_OCR_LANGUAGE", "eng")

# Text column detection (grid screenshots: covers on the left, names on the right)
COLUMN_BANDS = 5
COLUMN_STRIP_WIDTH = 10
COLUMN_MIN_BRIGHTNESS = 30
COLUMN_MIN_SATURATION = 0.1
COLUMN_THRESHOLD_RATIO = float(os.getenv("ALBUMBOARD_COLOR_THRESHOLD_RATIO", "0.08"))
COLUMN_MIN_FRACTION = 0.40
COLUMN_MAX_FRACTION = 0.75
COLUMN_FALLBACK_FRACTION = 0.55

# Preprocessing
CONTRAST = 2.0

# Match resolution
MATCH_RESULT_LIMIT = 5
MATCH_WORD_OVERLAP = float(os.getenv("ALBUMBOARD_MATCH_WORD_OVERLAP", "0.5"))
RESOLVE_DELAY_SEC = float(os.getenv("ALBUMBOARD_RESOLVE_DELAY_SEC", "0.3"))

# Import sessions kept in memory; the least recently used is evicted past this
MAX_IMPORT_SESSIONS = int(os.getenv("ALBUMBOARD_MAX_IMPORT_SESSIONS", "50"))


def ensure_data_dir() -> None:
    DATA_DIR.mkdir(parents=True, exist_ok=True)
