"""
Quiz History: past attempts of the signed-in user.
"""

import logging
from typing import Any, Dict, List, Optional

from glowmatch_quiz.core.errors import ApiError
from glowmatch_quiz.core.models import QuizError
from glowmatch_quiz.core.session import QuizSessionContext
from glowmatch_quiz.infrastructure.draft_store import ANALYSIS_KEY, QUIZ_DATA_KEY

logger = logging.getLogger("QuizHistory")


class QuizHistory:
    """List, open and delete saved attempts. Errors land in last_error."""

    def __init__(self, context: QuizSessionContext):
        self.context = context
        self.attempts: List[Dict[str, Any]] = []
        self.last_error: Optional[QuizError] = None

    def _fail(self, code: str, e: ApiError):
        logger.error(f"{code}: {e.message}")
        self.last_error = e.to_quiz_error(code)

    async def load(self) -> List[Dict[str, Any]]:
        self.last_error = None
        if not self.context.auth.is_authenticated:
            self.last_error = QuizError(code="AUTH_REQUIRED", message="Sign in to see your quiz history")
            return []
        try:
            self.attempts = await self.context.api.get_history(self.context.auth.user_id)
        except ApiError as e:
            self._fail("HISTORY_LOAD_ERROR", e)
            return []
        return self.attempts

    async def delete(self, attempt_id: str) -> bool:
        try:
            await self.context.api.delete_attempt(attempt_id)
        except ApiError as e:
            self._fail("HISTORY_DELETE_ERROR", e)
            return False
        self.attempts = [a for a in self.attempts if a.get("id") != attempt_id]
        logger.info(f"Deleted quiz attempt {attempt_id}")
        return True

    async def delete_all(self) -> bool:
        self.last_error = None
        if not self.context.auth.is_authenticated:
            self.last_error = QuizError(code="AUTH_REQUIRED", message="Sign in to manage your quiz history")
            return False
        try:
            await self.context.api.delete_history(self.context.auth.user_id)
        except ApiError as e:
            self._fail("HISTORY_DELETE_ERROR", e)
            return False
        self.attempts = []
        logger.info("Deleted all quiz attempts")
        return True

    def open(self, attempt: Dict[str, Any]):
        """Load an attempt into the local mirror and show the results screen."""
        store = self.context.store
        store.set(QUIZ_DATA_KEY, {**(attempt.get("quiz_data") or {}), "attemptId": attempt.get("id")})
        store.set(ANALYSIS_KEY, attempt.get("results") or {})
        self.context.navigate("/results-dashboard", {"quizAttemptId": attempt.get("id")})
