from __future__ import annotations

"""Top-N leaderboard persisted as one JSON array in the key-value store."""

import json
import logging
from datetime import datetime, timezone
from typing import List, Optional

from pydantic import TypeAdapter, ValidationError

from .schema import LeaderboardEntry
from .store import KeyValueStore

logger = logging.getLogger(__name__)

LEADERBOARD_KEY = "psyche7_leaderboard"
LEADERBOARD_SIZE = 10
SEED_SCORES = (("GHOST_01", 98), ("NEXUS", 92), ("CIPHER", 85))

_ENTRIES = TypeAdapter(List[LeaderboardEntry])


class LeaderboardStore:
    def __init__(self, store: KeyValueStore, *, key: str = LEADERBOARD_KEY, size: int = LEADERBOARD_SIZE) -> None:
        self.store = store
        self.key = key
        self.size = size
        self._entries: Optional[List[LeaderboardEntry]] = None

    @property
    def entries(self) -> List[LeaderboardEntry]:
        if self._entries is None:
            return self.load()
        return list(self._entries)

    def load(self) -> List[LeaderboardEntry]:
        """Return persisted entries, installing the seed when none exist."""
        raw = self.store.get(self.key)
        entries: Optional[List[LeaderboardEntry]] = None
        if raw is not None:
            try:
                entries = _ENTRIES.validate_json(raw)
            except ValidationError as exc:
                logger.warning("Stored leaderboard is invalid, reseeding: %s", exc)
        if entries is None:
            now = datetime.now(timezone.utc)
            entries = [LeaderboardEntry(username=name, score=score, date=now) for name, score in SEED_SCORES]
            self._persist(entries)
        self._entries = entries
        return list(entries)

    def record(self, username: str, score: int) -> List[LeaderboardEntry]:
        """Add a result, keep the best ``size`` entries and persist them."""
        entry = LeaderboardEntry(username=username, score=int(score))
        # sorted() is stable so earlier entries win ties
        ranked = sorted(self.entries + [entry], key=lambda e: e.score, reverse=True)[: self.size]
        self._persist(ranked)
        self._entries = ranked
        return list(ranked)

    def _persist(self, entries: List[LeaderboardEntry]) -> None:
        payload = [e.model_dump(mode="json") for e in entries]
        self.store.set(self.key, json.dumps(payload))
