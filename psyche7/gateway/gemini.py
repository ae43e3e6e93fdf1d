from __future__ import annotations

"""Gemini-backed gateway for question generation and personality analysis.

The gateway is created once at startup with the API key injected. The SDK
client itself is only built on the first call, so a missing key surfaces as a
``ConfigurationError`` from whichever operation runs first.
"""

import json
import logging
from datetime import datetime, timezone
from typing import Any, List, Optional, Sequence

from google import genai
from google.genai import types
from pydantic import TypeAdapter, ValidationError

from ..session.schema import AnalysisPayload, Answer, PersonalityReport, Question
from . import prompts
from .errors import ConfigurationError, EmptyPayloadError, MalformedPayloadError

logger = logging.getLogger(__name__)

DEFAULT_MODEL = "gemini-flash-latest"

_QUESTIONS = TypeAdapter(List[Question])


class GeminiGateway:
    def __init__(
        self,
        api_key: Optional[str],
        *,
        model: str = DEFAULT_MODEL,
        api_key_env: str = "API_KEY",
        client: Any = None,
    ) -> None:
        self._api_key = api_key
        self.api_key_env = api_key_env
        self.model = model
        self._client = client

    def _get_client(self) -> Any:
        if self._client is None:
            if not self._api_key:
                raise ConfigurationError(f"{self.api_key_env} not found in environment.")
            self._client = genai.Client(api_key=self._api_key)
        return self._client

    async def _generate_json(self, contents: str, instruction: str, schema: types.Schema, empty_message: str) -> Any:
        client = self._get_client()
        response = await client.aio.models.generate_content(
            model=self.model,
            contents=contents,
            config=types.GenerateContentConfig(
                system_instruction=instruction,
                response_mime_type="application/json",
                response_schema=schema,
            ),
        )
        raw_text = getattr(response, "text", None)
        if not raw_text:
            raise EmptyPayloadError(empty_message)
        try:
            return json.loads(raw_text)
        except json.JSONDecodeError as exc:
            raise MalformedPayloadError(f"Invalid JSON from construct: {exc}") from exc

    async def generate_questions(self, count: int) -> List[Question]:
        """Request ``count`` multiple-choice questions.

        Extra questions are dropped; fewer than ``count`` or duplicate ids are
        treated as a malformed payload.
        """
        try:
            data = await self._generate_json(
                prompts.question_request(count),
                prompts.question_instruction(count),
                prompts.QUESTIONS_SCHEMA,
                "No data received from construct.",
            )
            try:
                questions = _QUESTIONS.validate_python(data)
            except ValidationError as exc:
                raise MalformedPayloadError(
                    f"Question payload does not match schema ({exc.error_count()} errors)"
                ) from exc
            if len(questions) < count:
                raise MalformedPayloadError(f"Expected {count} questions, received {len(questions)}")
            questions = questions[:count]
            if len({q.id for q in questions}) != len(questions):
                raise MalformedPayloadError("Duplicate question ids in payload")
            return questions
        except Exception:
            logger.exception("Generation protocol failed")
            raise

    async def analyze_answers(self, answers: Sequence[Answer], subject_name: str) -> PersonalityReport:
        """Send the full answer sequence and decode the dossier."""
        subject_data = json.dumps(
            [
                {
                    "dimension": a.dimension,
                    "question": a.question_text,
                    "choice": a.selected_option,
                    "timeTakenMs": a.time_taken,
                }
                for a in answers
            ]
        )
        try:
            data = await self._generate_json(
                prompts.analysis_request(subject_data),
                prompts.ANALYSIS_INSTRUCTION,
                prompts.ANALYSIS_SCHEMA,
                "Analysis Protocol Failed.",
            )
            try:
                analysis = AnalysisPayload.model_validate(data)
            except ValidationError as exc:
                raise MalformedPayloadError(
                    f"Analysis payload does not match schema ({exc.error_count()} errors)"
                ) from exc
            return PersonalityReport(
                **analysis.model_dump(),
                subject_name=subject_name,
                generated_at=datetime.now(timezone.utc),
            )
        except Exception:
            logger.exception("Analysis protocol failed")
            raise


__all__ = ["GeminiGateway", "DEFAULT_MODEL"]
