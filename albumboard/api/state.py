"""Shared application state (injected into routes)."""
import logging
import uuid
from collections import OrderedDict
from pathlib import Path
from typing import List, Optional

from albumboard.config import MAX_IMPORT_SESSIONS, REVIEWS_PATH, TIER_LISTS_PATH
from albumboard.core.import_session import ImportSession
from albumboard.core.match_resolver import MatchResolver
from albumboard.core.review_store import load_reviews
from albumboard.core.spotify_client import SpotifyCatalog
from albumboard.core.tier_list_store import load_tier_lists
from albumboard.models.review import StoredReview
from albumboard.models.tier_list import StoredTierList

logger = logging.getLogger(__name__)


class AppState:
    def __init__(
        self,
        catalog: Optional[SpotifyCatalog] = None,
        reviews_path: Path = REVIEWS_PATH,
        tier_lists_path: Path = TIER_LISTS_PATH,
        resolve_delay_sec: Optional[float] = None,
        max_import_sessions: int = MAX_IMPORT_SESSIONS,
    ) -> None:
        self.catalog = catalog or SpotifyCatalog()
        self.reviews_path = reviews_path
        self.tier_lists_path = tier_lists_path
        self._resolve_delay_sec = resolve_delay_sec
        self._max_import_sessions = max(1, max_import_sessions)
        # least recently used first
        self._sessions: "OrderedDict[str, ImportSession]" = OrderedDict()

    def load_reviews(self) -> List[StoredReview]:
        return load_reviews(self.reviews_path)

    def load_tier_lists(self) -> List[StoredTierList]:
        return load_tier_lists(self.tier_lists_path)

    def new_import_session(self) -> tuple[str, ImportSession]:
        resolver = MatchResolver(self.catalog.asearch_albums)
        if self._resolve_delay_sec is None:
            session = ImportSession(resolver)
        else:
            session = ImportSession(resolver, delay_sec=self._resolve_delay_sec)
        session_id = str(uuid.uuid4())
        self._sessions[session_id] = session
        while len(self._sessions) > self._max_import_sessions:
            evicted, _ = self._sessions.popitem(last=False)
            logger.info("Evicted import session %s", evicted)
        return session_id, session

    def get_import_session(self, session_id: str) -> Optional[ImportSession]:
        session = self._sessions.get(session_id)
        if session is not None:
            self._sessions.move_to_end(session_id)
        return session

    def drop_import_session(self, session_id: str) -> bool:
        return self._sessions.pop(session_id, None) is not None


_state = AppState()


def get_state() -> AppState:
    return _state
