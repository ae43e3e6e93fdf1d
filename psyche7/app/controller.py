from __future__ import annotations

"""View controller: the state machine behind the terminal views.

It sequences boot, login, protocol selection, question generation, the
assessment itself, analysis and the dossier, and turns every gateway failure
into a single transition to ERROR. It knows nothing about Tk; views listen to
the ``state`` and ``progress`` events on the bus and call the action methods.
"""

import asyncio
import logging
import random
from dataclasses import dataclass
from enum import Enum
from typing import Any, Awaitable, Callable, List, Optional

from ..config.config import Timings
from ..session.schema import PersonalityReport, Question
from ..session.state import AssessmentSession
from ..storage.leaderboard import LeaderboardStore
from ..storage.schema import LeaderboardEntry
from .events import EventBus
from .explain import trace as xtrace
from .progress import ProgressSimulator

logger = logging.getLogger(__name__)

MIN_USERNAME_LENGTH = 3


class AppState(str, Enum):
    BOOTING = "BOOTING"
    AUTH = "AUTH"
    MENU = "MENU"
    LEADERBOARD = "LEADERBOARD"
    GENERATING = "GENERATING"
    ASSESSMENT = "ASSESSMENT"
    ANALYZING = "ANALYZING"
    RESULT = "RESULT"
    ERROR = "ERROR"


@dataclass(frozen=True)
class Protocol:
    count: int
    label: str
    estimate: str


PROTOCOLS: List[Protocol] = [
    Protocol(20, "QUICK SCAN", "EST. 5 MIN"),
    Protocol(50, "STANDARD PROFILE", "EST. 15 MIN"),
    Protocol(100, "DEEP PSYCHE ANALYSIS", "EST. 30 MIN"),
]
QUESTION_COUNTS = frozenset(p.count for p in PROTOCOLS)


class ViewController:
    def __init__(
        self,
        gateway: Any,
        leaderboard: LeaderboardStore,
        *,
        timings: Timings = Timings(),
        session: Optional[AssessmentSession] = None,
        bus: Optional[EventBus] = None,
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
        rng: Callable[[], float] = random.random,
    ) -> None:
        self.gateway = gateway
        self.leaderboard = leaderboard
        self.timings = timings
        self.session = session or AssessmentSession()
        self.bus = bus or EventBus()
        self._sleep = sleep
        self._rng = rng
        self.state = AppState.BOOTING
        self.username = ""
        self.report: Optional[PersonalityReport] = None
        self.error_message = ""
        self.progress: Optional[ProgressSimulator] = None

    # State plumbing ----------------------------------------------------
    def _transition(self, new_state: AppState) -> None:
        old_state = self.state
        self.state = new_state
        xtrace("state_changed", {"from": old_state.value, "to": new_state.value})
        self.bus.emit("state", new_state)

    def _emit_progress(self, value: float) -> None:
        self.bus.emit("progress", value)

    def _new_simulator(self, interval: float, max_step: float) -> ProgressSimulator:
        self.progress = ProgressSimulator(
            interval,
            max_step,
            ceiling=self.timings.progress_ceiling,
            rng=self._rng,
            on_change=self._emit_progress,
        )
        return self.progress

    def _fail(self, message: str) -> None:
        self.error_message = message
        self._transition(AppState.ERROR)

    @property
    def progress_value(self) -> float:
        return self.progress.value if self.progress is not None else 0.0

    @property
    def rankings(self) -> List[LeaderboardEntry]:
        return self.leaderboard.entries

    # Boot / auth -------------------------------------------------------
    async def boot(self) -> None:
        if self.state is not AppState.BOOTING:
            return
        await self._sleep(self.timings.boot_delay)
        if self.state is AppState.BOOTING:
            self._transition(AppState.AUTH)

    def set_username(self, raw: str) -> str:
        if self.state is AppState.AUTH:
            self.username = raw.upper()
        return self.username

    @property
    def can_login(self) -> bool:
        return len(self.username.strip()) >= MIN_USERNAME_LENGTH

    def login(self) -> bool:
        if self.state is not AppState.AUTH or not self.can_login:
            return False
        self.username = self.username.strip()
        self._transition(AppState.MENU)
        return True

    # Menu --------------------------------------------------------------
    def show_leaderboard(self) -> None:
        if self.state is AppState.MENU:
            self._transition(AppState.LEADERBOARD)

    def close_leaderboard(self) -> None:
        if self.state is AppState.LEADERBOARD:
            self._transition(AppState.MENU)

    async def start_assessment(self, count: int) -> None:
        if count not in QUESTION_COUNTS:
            raise ValueError(f"Unsupported question count: {count}")
        if self.state is not AppState.MENU:
            return
        self.error_message = ""
        simulator = self._new_simulator(self.timings.generate_tick, self.timings.generate_max_step)
        self._transition(AppState.GENERATING)
        try:
            async with simulator.running():
                questions: List[Question] = await self.gateway.generate_questions(count)
                simulator.complete()
        except Exception as exc:
            logger.error("Question generation failed: %s", exc)
            self._fail(f"CONNECTION FAILED: {str(exc) or 'UNKNOWN ERROR'}")
            return
        self.session.start(questions)
        xtrace("session_started", {"questions": len(questions), "subject": self.username})
        await self._sleep(self.timings.generate_settle)
        if self.state is AppState.GENERATING:
            self.session.restart_clock()
            self._transition(AppState.ASSESSMENT)

    # Assessment --------------------------------------------------------
    async def answer(self, question_id: int, option: str) -> None:
        """Record ``option`` for question ``question_id`` if it is still on screen."""
        if self.state is not AppState.ASSESSMENT:
            return
        current = self.session.current_question()
        if current is None or current.id != question_id:
            logger.debug("Ignoring answer for question %s; current is %s", question_id, current and current.id)
            return
        recorded = self.session.record_answer(option)
        if recorded is None:
            return
        xtrace(
            "answer_recorded",
            {"question": recorded.question_id, "ms": recorded.time_taken, "index": self.session.index},
        )
        if self.session.finished:
            await self._finish_assessment()
        else:
            self._transition(AppState.ASSESSMENT)

    async def _finish_assessment(self) -> None:
        simulator = self._new_simulator(self.timings.analyze_tick, self.timings.analyze_max_step)
        self._transition(AppState.ANALYZING)
        try:
            async with simulator.running():
                report: PersonalityReport = await self.gateway.analyze_answers(
                    list(self.session.answers), self.username
                )
                simulator.complete()
        except Exception as exc:
            logger.error("Analysis failed: %s", exc)
            self._fail(f"ANALYSIS FAILED: {str(exc) or 'DATA CORRUPTED'}")
            return
        self.report = report
        try:
            self.leaderboard.record(self.username, report.score)
        except OSError:
            # The dossier is still shown; only the ranking is lost
            logger.exception("Could not save leaderboard entry for %s", self.username)
        xtrace("report_ready", {"subject": report.subject_name, "score": report.score})
        await self._sleep(self.timings.analyze_settle)
        if self.state is AppState.ANALYZING:
            self._transition(AppState.RESULT)

    # Result / error ----------------------------------------------------
    def dismiss_report(self) -> None:
        if self.state is AppState.RESULT:
            self.report = None
            self._transition(AppState.MENU)

    def acknowledge_error(self) -> None:
        if self.state is AppState.ERROR:
            self.session.reset()
            self.report = None
            self._transition(AppState.MENU)
