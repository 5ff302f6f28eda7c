"""
Quiz State Machine: NotStarted -> InProgress -> Complete.

Holds the current question index, the accumulated responses and the pending
answer. Remote failures never escape as exceptions: they are stored in
`last_error` as a QuizError for the UI to display.
"""

import logging
from typing import Callable, List, Optional, Union

from glowmatch_quiz.core.autosave import AutosaveRecovery, AutosaveTimer, AutosaveWriter
from glowmatch_quiz.core.errors import ApiError, InvalidAnswerError, InvalidTransitionError, SubmissionError
from glowmatch_quiz.core.models import (
    AutosaveSnapshot,
    ChoiceAnswer,
    QuestionDefinition,
    QuizError,
    QuizPhase,
    Response,
    SliderAnswer,
    StartOutcome,
    SubmissionRecord,
)
from glowmatch_quiz.core.pipeline import SubmissionPipeline
from glowmatch_quiz.core.session import QuizSessionContext
from glowmatch_quiz.infrastructure.draft_store import ANALYSIS_KEY, PROGRESS_KEY, QUIZ_DATA_KEY
from glowmatch_quiz.infrastructure.logger import quiz_logger

logger = logging.getLogger("QuizStateMachine")

AnswerType = Union[ChoiceAnswer, SliderAnswer]

RESUME_PROMPTS = {
    "remote": "We found a saved quiz on your account. Continue where you left off?",
    "local": "We found a quiz saved on this device. Continue where you left off?",
    "draft": "You have an unfinished quiz. Continue where you left off?",
}


class QuizStateMachine:
    """Manages one quiz session for the signed-in user."""

    def __init__(self, context: QuizSessionContext, pipeline: Optional[SubmissionPipeline] = None):
        self.context = context
        self.questions: List[QuestionDefinition] = list(context.questions)
        self.pipeline = pipeline or SubmissionPipeline(context)

        self.phase = QuizPhase.NOT_STARTED
        self.phase_history: List[QuizPhase] = []
        self.current_question_index = 0
        self.responses: List[Response] = []
        self.current_answer: Optional[AnswerType] = None
        self.last_error: Optional[QuizError] = None
        self.record: Optional[SubmissionRecord] = None
        self._submitting = False

        self.autosave = AutosaveTimer(self._autosave_tick, context.settings.autosave_interval_s)

    # --- Phase handling ---

    def _transition_to(self, phase: QuizPhase):
        """Transition to a new phase; the autosave timer runs only while in progress."""
        if self.phase != phase:
            self.phase_history.append(self.phase)
            previous = self.phase
            self.phase = phase
            quiz_logger.phase_change(previous.value, phase.value, self.current_question_index)

        if phase == QuizPhase.IN_PROGRESS:
            self.autosave.start()
        else:
            self.autosave.stop()

    def _require_phase(self, phase: QuizPhase, operation: str):
        if self.phase != phase:
            raise InvalidTransitionError(
                f"{operation} requires phase {phase.value}, current phase is {self.phase.value}"
            )

    # --- Read-only views ---

    @property
    def current_question(self) -> QuestionDefinition:
        return self.questions[self.current_question_index]

    @property
    def is_last_question(self) -> bool:
        return self.current_question_index == len(self.questions) - 1

    @property
    def is_complete(self) -> bool:
        return self.phase == QuizPhase.COMPLETE

    @property
    def attempt_id(self) -> Optional[str]:
        return self.record.attempt_id if self.record else None

    @property
    def progress_percent(self) -> int:
        return int(len(self.responses) * 100 / len(self.questions))

    def response_for(self, question_id: int) -> Optional[Response]:
        for response in self.responses:
            if response.question_id == question_id:
                return response
        return None

    def snapshot(self) -> AutosaveSnapshot:
        return AutosaveSnapshot(
            responses=list(self.responses),
            current_question_index=self.current_question_index,
        )

    # --- Start / resume ---

    async def start(self) -> StartOutcome:
        """
        Consume one attempt and enter the in-progress phase.

        Returns:
            StartOutcome describing why the quiz did or did not start
        """
        if self.phase != QuizPhase.NOT_STARTED:
            return StartOutcome.INVALID_PHASE

        self.last_error = None
        context = self.context

        if not context.auth.is_authenticated:
            self.last_error = QuizError(
                code="AUTH_REQUIRED",
                message="Sign in to take the skin quiz",
            )
            return StartOutcome.AUTH_REQUIRED

        if not context.entitlements.can_take_quiz():
            self.last_error = QuizError(
                code="NO_ATTEMPTS_REMAINING",
                message="You have no quiz attempts left. Share your referral link to earn more.",
                details={"remaining": context.entitlements.remaining},
            )
            context.tasks.spawn("referral", context.referrals.fetch_link())
            return StartOutcome.NO_ATTEMPTS

        try:
            data = await context.api.start_quiz()
        except ApiError as e:
            code = "NETWORK_ERROR" if e.code == "NETWORK_ERROR" else "START_ATTEMPT_ERROR"
            logger.error(f"startQuiz failed: {e.message}")
            self.last_error = e.to_quiz_error(code)
            return StartOutcome.FAILED

        context.entitlements.apply_start_response(data)
        self._enter_in_progress(0, [])
        context.tasks.spawn("entitlements", context.entitlements.refresh())
        logger.info("Quiz started")
        return StartOutcome.STARTED

    async def offer_resume(self, confirm: Callable[[str], bool]) -> bool:
        """
        Offer saved progress to the user, most authoritative source first.

        Args:
            confirm: Blocking yes/no prompt

        Returns:
            True if a snapshot was accepted and restored
        """
        if self.phase != QuizPhase.NOT_STARTED or not self.context.auth.is_authenticated:
            return False

        recovery = AutosaveRecovery(self.context.api, self.context.store, self.context.auth.user_id)
        for source, snapshot in await recovery.candidates():
            if confirm(RESUME_PROMPTS[source]):
                logger.info(f"Resuming quiz from {source} snapshot")
                await self.resume(snapshot)
                return True
        return False

    async def resume(self, snapshot: AutosaveSnapshot):
        """Restore a snapshot and enter the in-progress phase without a start call."""
        if not self.context.auth.is_authenticated:
            raise InvalidTransitionError("Resuming a quiz requires a signed-in user")
        self._require_phase(QuizPhase.NOT_STARTED, "resume")

        known = {q.id: q for q in self.questions}
        restored: List[Response] = []
        for response in snapshot.responses:
            question = known.get(response.question_id)
            if question is None or not question.accepts(response.answer):
                logger.warning(f"Dropping restored response for question {response.question_id}")
                continue
            restored = [r for r in restored if r.question_id != response.question_id]
            restored.append(response)

        index = min(snapshot.current_question_index, len(self.questions) - 1)
        self.last_error = None
        self._enter_in_progress(index, restored)

    def _enter_in_progress(self, index: int, responses: List[Response]):
        self.current_question_index = index
        self.responses = responses
        existing = self.response_for(self.current_question.id)
        self.current_answer = existing.answer if existing else None
        self.record = None
        self._transition_to(QuizPhase.IN_PROGRESS)
        self._save_progress()

    # --- Answering / navigation ---

    def answer(self, answer: AnswerType):
        """Record or overwrite the response to the current question."""
        self._require_phase(QuizPhase.IN_PROGRESS, "answer")
        question = self.current_question
        if not question.accepts(answer):
            raise InvalidAnswerError(
                f"Answer {answer!r} does not fit question {question.id} ({question.type.value})"
            )
        self.current_answer = answer
        self._commit(question, answer)
        self._save_progress()

    def _commit(self, question: QuestionDefinition, answer: AnswerType):
        response = Response(question_id=question.id, question=question.title, answer=answer)
        for i, existing in enumerate(self.responses):
            if existing.question_id == question.id:
                self.responses[i] = response
                return
        self.responses.append(response)

    async def next(self) -> bool:
        """
        Advance to the next question, or complete and submit on the last one.

        Returns:
            False when nothing happened (no current answer, or not in progress)
        """
        if self.phase != QuizPhase.IN_PROGRESS or self.current_answer is None:
            return False

        self._commit(self.current_question, self.current_answer)

        if not self.is_last_question:
            self.current_question_index += 1
            self.current_answer = None
            self._save_progress()
            return True

        self._transition_to(QuizPhase.COMPLETE)
        await self.submit()
        return True

    def previous(self) -> bool:
        """Step back one question, restoring its answer if it has one."""
        if self.phase != QuizPhase.IN_PROGRESS or self.current_question_index == 0:
            return False

        self.current_question_index -= 1
        existing = self.response_for(self.current_question.id)
        self.current_answer = existing.answer if existing else None
        self._save_progress()
        return True

    # --- Submission ---

    async def submit(self) -> Optional[SubmissionRecord]:
        """
        Run the submission pipeline. Also the retry path after a failed save.

        Returns:
            The saved record, or None if the save failed (see last_error)
        """
        self._require_phase(QuizPhase.COMPLETE, "submit")
        if self.record is not None:
            return self.record
        if self._submitting:
            logger.warning("Submission already in flight")
            return None

        self._submitting = True
        self.last_error = None
        try:
            self.record = await self.pipeline.submit(
                self.responses,
                self.context.auth.user_id,
                model=self.context.settings.analysis_model,
            )
        except SubmissionError as e:
            logger.error(f"Error completing quiz: {e.error.message}")
            self.last_error = e.error
            return None
        finally:
            self._submitting = False
        return self.record

    # --- Teardown ---

    def dismiss_error(self):
        self.last_error = None

    def reset(self):
        """Discard the session and its local drafts; back to not started."""
        self.autosave.stop()
        self.current_question_index = 0
        self.responses = []
        self.current_answer = None
        self.last_error = None
        self.record = None
        self._transition_to(QuizPhase.NOT_STARTED)
        self.context.store.clear_drafts()

    async def retake(self):
        """Reset, and also drop the previous result and the remote autosave."""
        self.reset()
        self.context.store.remove(QUIZ_DATA_KEY)
        self.context.store.remove(ANALYSIS_KEY)
        if not self.context.auth.is_authenticated:
            return
        try:
            await self.context.api.delete_autosave(self.context.auth.user_id)
        except ApiError as e:
            logger.warning(f"Failed to delete remote autosave: {e.message}")

    # --- Persistence ---

    def _save_progress(self):
        if self.phase != QuizPhase.IN_PROGRESS:
            return
        draft = self.snapshot().to_storage()
        draft["quizStarted"] = True
        draft["currentAnswer"] = self.current_answer.model_dump() if self.current_answer else None
        self.context.store.set(PROGRESS_KEY, draft)

    async def _autosave_tick(self):
        if not self.context.auth.is_authenticated:
            return
        writer = AutosaveWriter(self.context.api, self.context.store, self.context.auth.user_id)
        await writer.write(self.snapshot())
