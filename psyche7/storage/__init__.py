from .leaderboard import LEADERBOARD_KEY, LEADERBOARD_SIZE, SEED_SCORES, LeaderboardStore
from .schema import LeaderboardEntry
from .store import KeyValueStore

__all__ = [
    "LEADERBOARD_KEY",
    "LEADERBOARD_SIZE",
    "SEED_SCORES",
    "LeaderboardStore",
    "LeaderboardEntry",
    "KeyValueStore",
]
