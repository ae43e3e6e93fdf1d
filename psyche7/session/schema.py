from __future__ import annotations

"""Pydantic models for questions, answers and the dossier report.

Attributes are snake_case in Python; the wire form sent to and received from
the model uses camelCase aliases.
"""

from datetime import datetime, timezone
from typing import List

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

OPTIONS_PER_QUESTION = 4


class _WireModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)


class Question(_WireModel):
    id: int
    text: str
    dimension: str
    options: List[str] = Field(min_length=OPTIONS_PER_QUESTION, max_length=OPTIONS_PER_QUESTION)


class Answer(_WireModel):
    question_id: int
    question_text: str
    dimension: str
    selected_option: str
    time_taken: int = Field(ge=0)


class AnalysisPayload(_WireModel):
    """The structured analysis returned by the model, before local metadata."""

    score: int = Field(ge=1, le=100)
    dominant_traits: List[str]
    strengths: List[str]
    weaknesses: List[str]
    behavioral_tendencies: List[str]
    risk_indicators: List[str]
    confidence_score: int = Field(ge=1, le=100)


class PersonalityReport(AnalysisPayload):
    subject_name: str
    generated_at: datetime

    @field_validator("generated_at")
    @classmethod
    def _ensure_utc(cls, v: datetime) -> datetime:
        if v.tzinfo is None:
            return v.replace(tzinfo=timezone.utc)
        return v.astimezone(timezone.utc)
