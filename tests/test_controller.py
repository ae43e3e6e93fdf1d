import asyncio
import unittest
from typing import List

from psyche7.app.controller import AppState, ViewController
from psyche7.config.config import Timings
from psyche7.session.schema import Question
from psyche7.session.state import AssessmentSession
from psyche7.storage.leaderboard import LeaderboardStore

from .fakes import FakeGateway, ManualClock, MemoryStore, make_questions, make_report

INSTANT = Timings(
    boot_delay=3.5,
    generate_tick=0,
    analyze_tick=0,
    generate_settle=0.5,
    analyze_settle=0.8,
)


class ControllerTestCase(unittest.IsolatedAsyncioTestCase):
    def setUp(self) -> None:
        self.gateway = FakeGateway()
        self.sleeps: List[float] = []
        self.states: List[AppState] = []
        self.progress: List[float] = []
        self.board = LeaderboardStore(MemoryStore())
        self.board.load()
        self.clock = ManualClock()
        self.controller = self._make_controller(self.gateway)

    def _make_controller(self, gateway: FakeGateway) -> ViewController:
        async def fake_sleep(seconds: float) -> None:
            self.sleeps.append(seconds)
            await asyncio.sleep(0)

        controller = ViewController(
            gateway,
            self.board,
            timings=INSTANT,
            session=AssessmentSession(clock=self.clock),
            sleep=fake_sleep,
            rng=lambda: 0.5,
        )
        controller.bus.subscribe("state", self.states.append)
        controller.bus.subscribe("progress", self.progress.append)
        return controller

    async def _to_menu(self, controller: ViewController, name: str = "cipher9") -> None:
        await controller.boot()
        controller.set_username(name)
        self.assertTrue(controller.login())

    async def _answer_all(self, controller: ViewController) -> None:
        while controller.state is AppState.ASSESSMENT:
            question = controller.session.current_question()
            self.clock.advance(0.75)
            await controller.answer(question.id, question.options[0])


class BootAndLoginTests(ControllerTestCase):
    async def test_boot_moves_to_auth_after_delay(self) -> None:
        self.assertIs(self.controller.state, AppState.BOOTING)
        await self.controller.boot()
        self.assertEqual(self.sleeps, [3.5])
        self.assertIs(self.controller.state, AppState.AUTH)

    async def test_input_ignored_while_booting(self) -> None:
        self.controller.set_username("GHOST")
        self.assertEqual(self.controller.username, "")
        self.assertFalse(self.controller.login())
        self.assertIs(self.controller.state, AppState.BOOTING)

    async def test_username_is_uppercased_on_every_keystroke(self) -> None:
        await self.controller.boot()
        self.assertEqual(self.controller.set_username("c"), "C")
        self.assertEqual(self.controller.set_username("ci"), "CI")
        self.assertEqual(self.controller.set_username("cipher9"), "CIPHER9")

    async def test_login_guard_boundary(self) -> None:
        await self.controller.boot()
        for name in ("", "a", "ab", "  ab  "):
            with self.subTest(name=name):
                self.controller.set_username(name)
                self.assertFalse(self.controller.can_login)
                self.assertFalse(self.controller.login())
                self.assertIs(self.controller.state, AppState.AUTH)
        self.controller.set_username("abc")
        self.assertTrue(self.controller.login())
        self.assertIs(self.controller.state, AppState.MENU)
        self.assertEqual(self.controller.username, "ABC")

    async def test_leaderboard_view_round_trip(self) -> None:
        await self._to_menu(self.controller)
        self.controller.show_leaderboard()
        self.assertIs(self.controller.state, AppState.LEADERBOARD)
        self.assertEqual([e.score for e in self.controller.rankings], [98, 92, 85])
        self.controller.close_leaderboard()
        self.assertIs(self.controller.state, AppState.MENU)


class GenerationTests(ControllerTestCase):
    async def test_quick_scan_presents_first_question(self) -> None:
        await self._to_menu(self.controller)
        self.states.clear()
        await self.controller.start_assessment(20)
        self.assertEqual(self.states, [AppState.GENERATING, AppState.ASSESSMENT])
        self.assertEqual(self.gateway.generate_calls, [20])
        session = self.controller.session
        self.assertEqual(session.total, 20)
        self.assertEqual(session.index, 0)
        self.assertEqual(session.current_question().id, 1)
        self.assertEqual(session.progress_percent, 0.0)
        self.assertEqual(self.sleeps[-1], 0.5)
        self.assertEqual(self.controller.progress_value, 100.0)
        self.assertFalse(self.controller.progress.active)

    async def test_progress_events_are_bounded_until_completion(self) -> None:
        await self._to_menu(self.controller)
        self.controller.gateway.delay_steps = 60
        await self.controller.start_assessment(20)
        self.assertEqual(self.progress[0], 0.0)
        self.assertEqual(self.progress[-1], 100.0)
        ticking = self.progress[:-1]
        self.assertEqual(ticking, sorted(ticking))
        self.assertLess(max(ticking), 91)
        self.assertEqual(self.progress.count(100.0), 1)

    async def test_generation_failure_shows_cause(self) -> None:
        controller = self._make_controller(FakeGateway(generate_error=RuntimeError("socket closed")))
        await self._to_menu(controller)
        with self.assertLogs("psyche7.app.controller", level="ERROR"):
            await controller.start_assessment(50)
        self.assertIs(controller.state, AppState.ERROR)
        self.assertEqual(controller.error_message, "CONNECTION FAILED: socket closed")
        self.assertFalse(controller.progress.active)
        self.assertLess(controller.progress_value, 100.0)

    async def test_generation_failure_without_message(self) -> None:
        controller = self._make_controller(FakeGateway(generate_error=RuntimeError()))
        await self._to_menu(controller)
        with self.assertLogs("psyche7.app.controller", level="ERROR"):
            await controller.start_assessment(100)
        self.assertEqual(controller.error_message, "CONNECTION FAILED: UNKNOWN ERROR")

    async def test_unsupported_count_is_rejected(self) -> None:
        await self._to_menu(self.controller)
        with self.assertRaises(ValueError):
            await self.controller.start_assessment(30)
        self.assertIs(self.controller.state, AppState.MENU)

    async def test_start_ignored_outside_menu(self) -> None:
        await self.controller.boot()
        await self.controller.start_assessment(20)
        self.assertIs(self.controller.state, AppState.AUTH)
        self.assertEqual(self.gateway.generate_calls, [])

    async def test_no_second_call_while_generating(self) -> None:
        await self._to_menu(self.controller)
        task = asyncio.ensure_future(self.controller.start_assessment(20))
        await asyncio.sleep(0)
        self.assertIs(self.controller.state, AppState.GENERATING)
        await self.controller.start_assessment(50)
        await task
        self.assertEqual(self.gateway.generate_calls, [20])
        self.assertIs(self.controller.state, AppState.ASSESSMENT)


class AssessmentFlowTests(ControllerTestCase):
    async def test_each_answer_advances_one_question(self) -> None:
        await self._to_menu(self.controller)
        await self.controller.start_assessment(20)
        self.clock.advance(2)
        await self.controller.answer(1, "q1-c")
        session = self.controller.session
        self.assertIs(self.controller.state, AppState.ASSESSMENT)
        self.assertEqual(session.index, 1)
        self.assertEqual(len(session.answers), 1)
        self.assertEqual(session.answers[0].time_taken, 2000)
        self.assertEqual(session.current_question().id, 2)

    async def test_complete_run_reaches_result_and_updates_leaderboard(self) -> None:
        controller = self._make_controller(FakeGateway(report=make_report("CIPHER9", 93)))
        await self._to_menu(controller)
        await controller.start_assessment(20)
        self.states.clear()
        await self._answer_all(controller)
        self.assertEqual(self.states[-2:], [AppState.ANALYZING, AppState.RESULT])
        self.assertEqual(self.sleeps[-1], 0.8)
        answers, subject = controller.gateway.analyze_calls[0]
        self.assertEqual(subject, "CIPHER9")
        self.assertEqual(len(answers), 20)
        self.assertTrue(all(a.time_taken == 750 for a in answers))
        self.assertEqual(controller.report.score, 93)
        self.assertEqual([(e.username, e.score) for e in self.board.entries][:2], [("GHOST_01", 98), ("CIPHER9", 93)])
        self.assertFalse(controller.progress.active)

    async def test_leaderboard_write_failure_still_shows_report(self) -> None:
        controller = self._make_controller(FakeGateway(report=make_report("CIPHER9", 93)))
        await self._to_menu(controller)
        await controller.start_assessment(20)

        def broken_set(key: str, value: str) -> None:
            raise OSError("No space left on device")

        self.board.store.set = broken_set
        with self.assertLogs("psyche7.app.controller", level="ERROR") as logs:
            await self._answer_all(controller)
        self.assertIn("Could not save leaderboard entry", logs.output[0])
        self.assertIs(controller.state, AppState.RESULT)
        self.assertEqual(controller.error_message, "")
        self.assertEqual(controller.report.score, 93)
        self.assertEqual([e.score for e in self.board.entries], [98, 92, 85])

    async def test_analysis_failure_shows_exact_message(self) -> None:
        controller = self._make_controller(FakeGateway(analyze_error=Exception("timeout")))
        await self._to_menu(controller)
        await controller.start_assessment(20)
        with self.assertLogs("psyche7.app.controller", level="ERROR"):
            await self._answer_all(controller)
        self.assertIs(controller.state, AppState.ERROR)
        self.assertEqual(controller.error_message, "ANALYSIS FAILED: timeout")
        self.assertEqual(len(self.board.entries), 3)
        self.assertIsNone(controller.report)

    async def test_analysis_failure_without_message(self) -> None:
        controller = self._make_controller(FakeGateway(analyze_error=ValueError()))
        await self._to_menu(controller)
        await controller.start_assessment(20)
        with self.assertLogs("psyche7.app.controller", level="ERROR"):
            await self._answer_all(controller)
        self.assertEqual(controller.error_message, "ANALYSIS FAILED: DATA CORRUPTED")

    async def test_double_click_records_only_the_shown_question(self) -> None:
        likert = ["Agree", "Disagree", "Neutral", "Unsure"]
        questions = [Question(id=q.id, text=q.text, dimension=q.dimension, options=likert) for q in make_questions(20)]
        controller = self._make_controller(FakeGateway(questions=questions))
        await self._to_menu(controller)
        await controller.start_assessment(20)
        first = asyncio.ensure_future(controller.answer(1, "Agree"))
        second = asyncio.ensure_future(controller.answer(1, "Agree"))
        await asyncio.gather(first, second)
        session = controller.session
        self.assertEqual([(a.question_id, a.selected_option) for a in session.answers], [(1, "Agree")])
        self.assertEqual(session.index, 1)
        self.assertEqual(session.current_question().id, 2)

    async def test_answer_for_another_question_is_ignored(self) -> None:
        await self._to_menu(self.controller)
        await self.controller.start_assessment(20)
        await self.controller.answer(2, "q2-a")
        self.assertEqual(self.controller.session.answers, ())
        self.assertEqual(self.controller.session.index, 0)

    async def test_answers_ignored_outside_assessment(self) -> None:
        await self._to_menu(self.controller)
        await self.controller.answer(1, "q1-a")
        self.assertIs(self.controller.state, AppState.MENU)
        self.assertEqual(self.controller.session.answers, ())

    async def test_dismiss_report_returns_to_menu(self) -> None:
        await self._to_menu(self.controller)
        await self.controller.start_assessment(20)
        await self._answer_all(self.controller)
        self.assertIs(self.controller.state, AppState.RESULT)
        self.controller.dismiss_report()
        self.assertIs(self.controller.state, AppState.MENU)
        self.assertIsNone(self.controller.report)

    async def test_reboot_discards_session(self) -> None:
        controller = self._make_controller(FakeGateway(questions=make_questions(20), analyze_error=Exception("timeout")))
        await self._to_menu(controller)
        await controller.start_assessment(20)
        with self.assertLogs("psyche7.app.controller", level="ERROR"):
            await self._answer_all(controller)
        controller.acknowledge_error()
        self.assertIs(controller.state, AppState.MENU)
        self.assertEqual(controller.session.total, 0)
        self.assertEqual(controller.session.answers, ())

    async def test_recovery_allows_a_new_run(self) -> None:
        gateway = FakeGateway(generate_error=RuntimeError("offline"))
        controller = self._make_controller(gateway)
        await self._to_menu(controller)
        with self.assertLogs("psyche7.app.controller", level="ERROR"):
            await controller.start_assessment(20)
        controller.acknowledge_error()
        gateway.generate_error = None
        await controller.start_assessment(20)
        self.assertIs(controller.state, AppState.ASSESSMENT)
        self.assertEqual(gateway.generate_calls, [20, 20])


if __name__ == "__main__":
    unittest.main()
