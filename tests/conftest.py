"""
Shared fixtures: a mocked backend client, a temp draft store and a wired session.
"""

from unittest.mock import AsyncMock, MagicMock

import pytest

from glowmatch_quiz.config import QuizSettings
from glowmatch_quiz.core.models import ReportResult
from glowmatch_quiz.core.questions import SKIN_QUIZ_QUESTIONS
from glowmatch_quiz.core.session import AuthSession, QuizSessionContext
from glowmatch_quiz.core.state_manager import QuizStateMachine
from glowmatch_quiz.infrastructure.api_client import GlowMatchClient
from glowmatch_quiz.infrastructure.draft_store import LocalDraftStore


@pytest.fixture
def settings(tmp_path):
    return QuizSettings(
        storage_path=str(tmp_path / "storage.json"),
        autosave_interval_s=60,
        analysis_model="fallback",
    )


@pytest.fixture
def store(settings):
    return LocalDraftStore(settings.storage_path)


@pytest.fixture
def api():
    client = MagicMock(spec=GlowMatchClient)
    client.start_quiz.return_value = {"remaining": 2}
    client.save_attempt.return_value = {"id": "attempt-1", "user_id": "user-1"}
    client.save_autosave.return_value = None
    client.get_autosave.return_value = None
    client.delete_autosave.return_value = None
    client.run_analysis.return_value = {"analysis": {"skinType": "oily"}, "provider": "fallback"}
    client.get_subscription.return_value = {"quiz_attempts_limit": 3, "quiz_attempts_used": 1}
    client.get_referral.return_value = {"referral_code": "abc123", "referral_link": "https://glowimatch.vercel.app/?ref=abc123"}
    return client


@pytest.fixture
def auth():
    return AuthSession(user_id="user-1", token="token-1")


@pytest.fixture
def navigate():
    return MagicMock()


@pytest.fixture
def report_generator():
    return AsyncMock(return_value=ReportResult(success=True, public_url="https://cdn.example/report.json"))


@pytest.fixture
def context(settings, auth, api, store, navigate, report_generator):
    return QuizSessionContext.build(
        settings,
        auth,
        navigate=navigate,
        api=api,
        store=store,
        report_generator=report_generator,
    )


@pytest.fixture
def machine(context):
    return QuizStateMachine(context)


def _answer_for(question):
    """A valid answer for any catalog question."""
    if question.is_slider:
        return question.slide(question.max)
    return question.choose(question.options[0].id)


@pytest.fixture
def questions():
    return list(SKIN_QUIZ_QUESTIONS)


@pytest.fixture
def answer_for():
    return _answer_for
