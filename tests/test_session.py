"""
Tests for session wiring, entitlements and referral links.
"""

import asyncio

import pytest

from glowmatch_quiz.core.errors import ApiError, ResultsSchemaError
from glowmatch_quiz.core.models import QuestionDefinition, QuestionType
from glowmatch_quiz.core.questions import SKIN_QUIZ_QUESTIONS
from glowmatch_quiz.core.report import UploadReportGenerator
from glowmatch_quiz.core.session import AuthSession, Entitlements, QuizSessionContext, ReferralService


class TestContext:
    def test_build_wires_default_report_generator(self, settings, auth, api, store):
        context = QuizSessionContext.build(settings, auth, api=api, store=store)

        assert isinstance(context.report_generator, UploadReportGenerator)
        assert len(context.questions) == 8

    def test_duplicate_question_ids_rejected(self, settings, auth, api, store):
        questions = list(SKIN_QUIZ_QUESTIONS) + [SKIN_QUIZ_QUESTIONS[0]]

        with pytest.raises(ValueError, match="Duplicate"):
            QuizSessionContext.build(settings, auth, api=api, store=store, questions=questions)

    def test_schema_mismatch_rejected(self, settings, auth, api, store):
        retyped = QuestionDefinition(id=5, title="Sensitivity?", type=QuestionType.MULTIPLE_CHOICE)
        questions = [q if q.id != 5 else retyped for q in SKIN_QUIZ_QUESTIONS]

        with pytest.raises(ResultsSchemaError):
            QuizSessionContext.build(settings, auth, api=api, store=store, questions=questions)


class TestEntitlements:
    def test_unknown_balance_allows_start(self, api, auth):
        assert Entitlements(api, auth).can_take_quiz() is True

    def test_start_response_updates_balance(self, api, auth):
        entitlements = Entitlements(api, auth)

        entitlements.apply_start_response({"remaining": 0})

        assert entitlements.can_take_quiz() is False

    def test_refresh_from_subscription(self, api, auth):
        entitlements = Entitlements(api, auth)

        assert asyncio.run(entitlements.refresh()) == 2
        api.get_subscription.assert_awaited_once_with("user-1")

    def test_refresh_without_subscription(self, api, auth):
        api.get_subscription.return_value = None

        assert asyncio.run(Entitlements(api, auth).refresh()) == 0

    def test_refresh_signed_out_skips_call(self, api):
        entitlements = Entitlements(api, AuthSession(), remaining=1)

        assert asyncio.run(entitlements.refresh()) == 1
        api.get_subscription.assert_not_called()


class TestReferrals:
    def test_existing_link(self, api):
        service = ReferralService(api, "https://glowimatch.vercel.app/")

        assert asyncio.run(service.fetch_link()) == "https://glowimatch.vercel.app/?ref=abc123"
        api.create_referral.assert_not_called()

    def test_link_built_from_code(self, api):
        api.get_referral.return_value = {"referral_code": "xyz"}

        link = asyncio.run(ReferralService(api, "https://glowimatch.vercel.app/").fetch_link())

        assert link == "https://glowimatch.vercel.app/?ref=xyz"

    def test_creates_code_when_missing(self, api):
        api.get_referral.return_value = {"referral_link": "https://glowimatch.vercel.app/?ref=null"}
        api.create_referral.return_value = {"referral_code": "new1"}
        service = ReferralService(api, "https://glowimatch.vercel.app")

        assert asyncio.run(service.fetch_link()) == "https://glowimatch.vercel.app/?ref=new1"
        assert service.link == "https://glowimatch.vercel.app/?ref=new1"

    def test_create_failure_leaves_no_link(self, api):
        api.get_referral.return_value = {}
        api.create_referral.side_effect = ApiError("Failed to create referral", status=500)
        service = ReferralService(api, "https://glowimatch.vercel.app")

        assert asyncio.run(service.fetch_link()) is None
        assert service.link is None
