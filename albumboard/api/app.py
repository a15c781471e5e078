"""FastAPI app, CORS, and route registration."""
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

# Configure logging in the worker process (so pipeline INFO logs are visible with uvicorn --reload)
logging.basicConfig(
    level=logging.INFO,
    format="%(levelname)s: %(name)s: %(message)s",
)

from albumboard.api.state import AppState, get_state
from albumboard.config import WEB_ORIGIN, ensure_data_dir

# Import routes after state to avoid circular imports
from albumboard.api.routes import imports, reviews, spotify, tier_lists

__all__ = ["app", "AppState", "get_state"]


@asynccontextmanager
async def lifespan(app: FastAPI):
    ensure_data_dir()
    if not get_state().catalog.configured:
        logging.getLogger(__name__).warning(
            "SPOTIFY_CLIENT_ID / SPOTIFY_CLIENT_SECRET not set; search and matching are disabled"
        )
    yield


app = FastAPI(
    title="Albumboard API",
    description="Playlist reviews, tier lists, and screenshot album-list import",
    lifespan=lifespan,
)
app.add_middleware(
    CORSMiddleware,
    allow_origins=[o.strip() for o in WEB_ORIGIN.split(",") if o.strip()],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(imports.router, prefix="/api/imports", tags=["imports"])
app.include_router(reviews.router, prefix="/api/reviews", tags=["reviews"])
app.include_router(spotify.router, prefix="/api/spotify", tags=["spotify"])
app.include_router(tier_lists.router, prefix="/api/tier-lists", tags=["tier-lists"])
