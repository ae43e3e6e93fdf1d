from __future__ import annotations

"""Pydantic model for persisted leaderboard entries."""

from datetime import datetime, timezone

from pydantic import BaseModel, Field, field_validator

from ..util.randomness import new_entry_id


class LeaderboardEntry(BaseModel):
    id: str = Field(default_factory=new_entry_id)
    username: str
    score: int
    date: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    @field_validator("date")
    @classmethod
    def _ensure_utc(cls, v: datetime) -> datetime:
        if v.tzinfo is None:
            return v.replace(tzinfo=timezone.utc)
        return v.astimezone(timezone.utc)
