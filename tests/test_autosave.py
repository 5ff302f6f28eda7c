"""
Tests for the autosave timer, writer and recovery.
"""

import asyncio
from unittest.mock import MagicMock

import pytest

from glowmatch_quiz.core.autosave import AutosaveRecovery, AutosaveTimer, AutosaveWriter
from glowmatch_quiz.core.errors import ApiError
from glowmatch_quiz.core.models import AutosaveSnapshot, Response
from glowmatch_quiz.core.questions import get_question
from glowmatch_quiz.infrastructure.draft_store import AUTOSAVE_KEY, PROGRESS_KEY

INTERVAL = 0.01


def snapshot(index=1):
    q1 = get_question(1)
    return AutosaveSnapshot(
        responses=[Response(question_id=1, question=q1.title, answer=q1.choose("oily"))],
        current_question_index=index,
    )


class TestTimer:
    def test_ticks_repeatedly_while_running(self):
        calls = []

        async def save():
            calls.append(1)

        async def scenario():
            timer = AutosaveTimer(save, INTERVAL)
            timer.start()
            await asyncio.sleep(INTERVAL * 10)
            timer.stop()
            return timer

        timer = asyncio.run(scenario())

        assert len(calls) >= 2
        assert timer.ticks == len(calls)
        assert timer.is_running is False

    def test_start_is_idempotent(self):
        async def save():
            pass

        async def scenario():
            timer = AutosaveTimer(save, INTERVAL)
            timer.start()
            first = timer._task
            timer.start()
            same = timer._task is first
            timer.stop()
            return same

        assert asyncio.run(scenario()) is True

    def test_saves_never_overlap(self):
        in_flight = []
        peak = []

        async def slow_save():
            in_flight.append(1)
            peak.append(len(in_flight))
            await asyncio.sleep(INTERVAL * 3)
            in_flight.pop()

        async def scenario():
            timer = AutosaveTimer(slow_save, INTERVAL)
            timer.start()
            await asyncio.sleep(INTERVAL * 20)
            timer.stop()

        asyncio.run(scenario())

        assert peak
        assert max(peak) == 1

    def test_no_tick_after_stop(self):
        calls = []

        async def save():
            calls.append(1)

        async def scenario():
            timer = AutosaveTimer(save, INTERVAL)
            timer.start()
            timer.stop()
            await asyncio.sleep(INTERVAL * 5)
            return timer

        timer = asyncio.run(scenario())

        assert calls == []
        assert timer.ticks == 0

    def test_stop_cancels_in_flight_save(self):
        finished = []

        async def slow_save():
            await asyncio.sleep(1)
            finished.append(1)

        async def scenario():
            timer = AutosaveTimer(slow_save, INTERVAL)
            timer.start()
            await asyncio.sleep(INTERVAL * 3)
            timer.stop()
            await asyncio.sleep(INTERVAL * 3)

        asyncio.run(scenario())

        assert finished == []

    def test_failures_do_not_stop_loop(self):
        async def failing_save():
            raise ApiError("Failed to save autosave", status=500)

        async def scenario():
            timer = AutosaveTimer(failing_save, INTERVAL)
            timer.start()
            await asyncio.sleep(INTERVAL * 10)
            running = timer.is_running
            timer.stop()
            return timer, running

        timer, running = asyncio.run(scenario())

        assert running is True
        assert timer.failures >= 2
        assert timer.failures == timer.ticks


class TestWriter:
    def test_remote_then_local(self, api, store):
        order = []
        api.save_autosave.side_effect = lambda *args: order.append(("remote", store.has(AUTOSAVE_KEY)))

        asyncio.run(AutosaveWriter(api, store, "user-1").write(snapshot(index=2)))

        assert order == [("remote", False)]
        user_id, quiz_data = api.save_autosave.await_args.args
        assert user_id == "user-1"
        assert quiz_data["currentQuestionIndex"] == 2
        assert quiz_data["responses"][0]["answer"] == {"id": "oily", "label": "Oily", "value": "oily"}
        saved = store.get(AUTOSAVE_KEY)
        assert saved["user_id"] == "user-1"
        assert saved["is_completed"] is False
        assert saved["quiz_data"] == quiz_data

    def test_remote_failure_skips_local(self, api, store):
        api.save_autosave.side_effect = ApiError("Failed to save autosave", status=500)

        with pytest.raises(ApiError):
            asyncio.run(AutosaveWriter(api, store, "user-1").write(snapshot()))

        assert not store.has(AUTOSAVE_KEY)


class TestRecovery:
    def test_candidates_in_priority_order(self, api, store):
        api.get_autosave.return_value = {"quiz_data": snapshot(3).to_storage()}
        store.set(AUTOSAVE_KEY, {"user_id": "user-1", "quiz_data": snapshot(2).to_storage()})
        store.set(PROGRESS_KEY, {**snapshot(1).to_storage(), "quizStarted": True})

        found = asyncio.run(AutosaveRecovery(api, store, "user-1").candidates())

        assert [(source, s.current_question_index) for source, s in found] == [
            ("remote", 3),
            ("local", 2),
            ("draft", 1),
        ]

    def test_backend_shaped_snapshot_is_offered(self, api, store):
        api.get_autosave.return_value = {
            "quiz_data": {
                "responses": [
                    {
                        "questionId": 1,
                        "question": get_question(1).title,
                        "answer": {"id": "oily", "label": "Oily", "value": "oily"},
                        "timestamp": "2026-01-01T00:00:00+00:00",
                    },
                    {
                        "questionId": 5,
                        "question": get_question(5).title,
                        "answer": {"id": "4", "label": "Very sensitive", "value": 4},
                        "timestamp": "2026-01-01T00:00:00+00:00",
                    },
                ],
                "currentQuestionIndex": 1,
            }
        }

        found = asyncio.run(AutosaveRecovery(api, store, "user-1").candidates())

        assert [source for source, _ in found] == ["remote"]
        restored = found[0][1]
        assert restored.current_question_index == 1
        assert restored.responses[0].answer == get_question(1).choose("oily")
        assert restored.responses[1].answer == get_question(5).slide(4)

    def test_written_snapshot_is_recoverable(self, api, store):
        asyncio.run(AutosaveWriter(api, store, "user-1").write(snapshot(index=2)))
        api.get_autosave.return_value = {"quiz_data": api.save_autosave.await_args.args[1]}

        found = asyncio.run(AutosaveRecovery(api, store, "user-1").candidates())

        assert [(source, s.current_question_index) for source, s in found] == [("remote", 2), ("local", 2)]
        assert all(s.responses[0].answer == get_question(1).choose("oily") for _, s in found)

    def test_remote_error_falls_back(self, api, store):
        api.get_autosave.side_effect = ApiError("Unable to reach GlowMatch", code="NETWORK_ERROR")
        store.set(AUTOSAVE_KEY, {"quiz_data": snapshot(2).to_storage()})

        found = asyncio.run(AutosaveRecovery(api, store, "user-1").candidates())

        assert [source for source, _ in found] == ["local"]

    def test_unreadable_and_unstarted_drafts_ignored(self, store):
        api = MagicMock()
        recovery = AutosaveRecovery(api, store, "user-1")
        store.set(AUTOSAVE_KEY, {"quiz_data": {"currentQuestionIndex": -4}})
        store.set(PROGRESS_KEY, {**snapshot(1).to_storage(), "quizStarted": False})

        assert recovery.local_snapshot() is None
        assert recovery.draft_snapshot() is None
