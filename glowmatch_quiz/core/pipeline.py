"""
Submission Pipeline: turns final responses into a saved attempt.

The remote save is the only blocking step. Once it returns an attempt id the
pipeline mirrors the record locally, clears the drafts, navigates forward and
hands AI analysis and report generation to tracked background jobs. Those jobs
only ever add their own key to the local mirror.
"""

import logging
from typing import Any, Dict, Optional, Sequence

from glowmatch_quiz.core.errors import ApiError, SubmissionError
from glowmatch_quiz.core.models import (
    QuizData,
    QuizError,
    Response,
    SubmissionMetadata,
    SubmissionRecord,
    utc_now_iso,
)
from glowmatch_quiz.core.session import QuizSessionContext
from glowmatch_quiz.infrastructure.draft_store import QUIZ_DATA_KEY
from glowmatch_quiz.infrastructure.logger import quiz_logger

logger = logging.getLogger("SubmissionPipeline")

SAVE_ERROR = "SAVE_ERROR"


class SubmissionPipeline:
    """Builds, saves and enriches a quiz submission."""

    def __init__(self, context: QuizSessionContext):
        self.context = context

    def build_record(self, responses: Sequence[Response]) -> SubmissionRecord:
        completed_at = utc_now_iso()
        quiz_data = QuizData(
            responses=list(responses),
            metadata=SubmissionMetadata(
                completed_at=completed_at,
                total_questions=len(self.context.questions),
            ),
        )
        results = self.context.results_schema.derive(responses, completed_at)
        return SubmissionRecord(quiz_data=quiz_data, results=results)

    async def submit(
        self,
        responses: Sequence[Response],
        user_id: str,
        model: Optional[str] = None,
    ) -> SubmissionRecord:
        """
        Save the submission and start enrichment.

        Raises:
            SubmissionError: The remote save failed; nothing was written locally
        """
        model = model or self.context.settings.analysis_model
        record = self.build_record(responses)
        quiz_data = record.quiz_data.to_wire()
        results = record.results.model_dump()

        logger.info(f"Saving quiz attempt ({len(responses)} responses)")
        try:
            attempt = await self.context.api.save_attempt(
                user_id, quiz_data, results, is_autosave=False
            )
        except ApiError as e:
            quiz_logger.submission(None, len(responses), e.message)
            raise SubmissionError(
                QuizError(
                    code=SAVE_ERROR,
                    message="Unable to save your quiz results",
                    details=e.details if e.details is not None else e.message,
                )
            ) from e

        attempt_id = str(attempt["id"])
        record.attempt_id = attempt_id
        quiz_logger.submission(attempt_id, len(responses))

        store = self.context.store
        store.set(QUIZ_DATA_KEY, {**quiz_data, "attemptId": attempt_id})
        store.clear_drafts()

        self.context.navigate(
            self.context.settings.analysis_route,
            {"quizAttemptId": attempt_id, "model": model},
        )

        tasks = self.context.tasks
        tasks.spawn("analysis", self._run_analysis(quiz_data, model, attempt_id))
        tasks.spawn(
            "report",
            self._generate_report({**attempt, "id": attempt_id, "quiz_data": quiz_data, "results": results}),
        )
        return record

    async def _run_analysis(self, quiz_data: Dict[str, Any], model: str, attempt_id: str):
        data = await self.context.api.run_analysis(quiz_data, model, attempt_id=attempt_id)
        if not data:
            logger.info("Analysis returned no data")
            return
        analysis = data.get("analysis") or data.get("result") or data
        self.context.store.update(QUIZ_DATA_KEY, {"analysis": analysis})

    async def _generate_report(self, attempt: Dict[str, Any]):
        generator = self.context.report_generator
        if generator is None:
            logger.debug("No report generator configured")
            return
        result = await generator(attempt)
        if result.success and result.public_url:
            self.context.store.update(QUIZ_DATA_KEY, {"reportUrl": result.public_url})
        else:
            logger.info(f"Report for {attempt['id']} has no public URL")
