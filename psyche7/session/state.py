from __future__ import annotations

"""Assessment session state: questions, answers and per-question timing.

The answer list and the current index always move together, so
``len(answers) == index`` holds between calls.
"""

import time
from typing import Callable, List, Optional, Sequence, Tuple

from .schema import Answer, Question


class AssessmentSession:
    def __init__(self, clock: Callable[[], float] = time.monotonic) -> None:
        self._clock = clock
        self._questions: Tuple[Question, ...] = ()
        self._answers: List[Answer] = []
        self._index = 0
        self._question_started_at = clock()

    @property
    def questions(self) -> Tuple[Question, ...]:
        return self._questions

    @property
    def answers(self) -> Tuple[Answer, ...]:
        return tuple(self._answers)

    @property
    def index(self) -> int:
        return self._index

    @property
    def total(self) -> int:
        return len(self._questions)

    @property
    def finished(self) -> bool:
        return bool(self._questions) and self._index >= len(self._questions)

    @property
    def progress_percent(self) -> float:
        if not self._questions:
            return 0.0
        return self._index / len(self._questions) * 100.0

    def start(self, questions: Sequence[Question]) -> None:
        self._questions = tuple(questions)
        self._answers = []
        self._index = 0
        self.restart_clock()

    def reset(self) -> None:
        self.start(())

    def restart_clock(self) -> None:
        self._question_started_at = self._clock()

    def current_question(self) -> Optional[Question]:
        if self._index >= len(self._questions):
            return None
        return self._questions[self._index]

    def record_answer(self, selected_option: str) -> Optional[Answer]:
        """Append the answer for the current question and move to the next one.

        Returns None when there is no current question. Raises ValueError if
        the option is not one offered by the current question.
        """
        question = self.current_question()
        if question is None:
            return None
        if selected_option not in question.options:
            raise ValueError(f"{selected_option!r} is not an option of question {question.id}")
        elapsed_ms = int((self._clock() - self._question_started_at) * 1000)
        answer = Answer(
            question_id=question.id,
            question_text=question.text,
            dimension=question.dimension,
            selected_option=selected_option,
            time_taken=max(elapsed_ms, 0),
        )
        self._answers.append(answer)
        self._index += 1
        self.restart_clock()
        return answer
