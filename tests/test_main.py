"""
Tests for the terminal driver.
"""

import asyncio
import time
from unittest.mock import patch

from glowmatch_quiz import main
from glowmatch_quiz.config import QuizSettings
from glowmatch_quiz.core.models import QuizPhase
from glowmatch_quiz.core.session import QuizSessionContext
from glowmatch_quiz.core.state_manager import QuizStateMachine


def slow_ask(question, position, total):
    time.sleep(0.05)
    return "1"


def test_autosave_runs_while_waiting_for_input(tmp_path, auth, api, store, navigate, report_generator):
    settings = QuizSettings(storage_path=str(tmp_path / "storage.json"), autosave_interval_s=0.01)
    context = QuizSessionContext.build(
        settings, auth, navigate=navigate, api=api, store=store, report_generator=report_generator
    )
    machine = QuizStateMachine(context)

    with patch.object(main, "ask", side_effect=slow_ask):
        exit_code = asyncio.run(main.run(machine))

    assert exit_code == 0
    assert machine.phase == QuizPhase.COMPLETE
    assert machine.autosave.ticks > 0
    assert api.save_autosave.await_count > 0
    api.save_attempt.assert_awaited_once()


def test_parse_answer_bounds(questions):
    assert main.parse_answer(questions[0], "2").id == "dry"
    assert main.parse_answer(questions[0], "9") is None
    assert main.parse_answer(questions[4], "6") is None
    assert main.parse_answer(questions[4], "x") is None
    assert main.parse_answer(questions[4], "4").value == 4
