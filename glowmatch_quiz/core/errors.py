"""
Exceptions raised by the quiz flow.
Remote failures are converted to QuizError at the call site before reaching the UI.
"""

from typing import Any, Optional

from glowmatch_quiz.core.models import QuizError


class QuizFlowError(Exception):
    """Base class for all quiz flow errors."""


class ApiError(QuizFlowError):
    """Backend call failed (HTTP error status or transport failure)."""

    def __init__(
        self,
        message: str,
        status: Optional[int] = None,
        code: Optional[str] = None,
        details: Any = None,
    ):
        super().__init__(message)
        self.message = message
        self.status = status
        self.code = code or (str(status) if status else "NETWORK_ERROR")
        self.details = details

    def to_quiz_error(self, code: Optional[str] = None) -> QuizError:
        return QuizError(code=code or self.code, message=self.message, details=self.details)


class InvalidAnswerError(QuizFlowError):
    """Answer variant or value does not fit the current question."""


class InvalidTransitionError(QuizFlowError):
    """Operation not allowed in the current phase."""


class ResultsSchemaError(QuizFlowError):
    """Results schema does not match the question catalog."""


class MissingAnswerError(QuizFlowError):
    """A mapped question was not answered and the policy is RAISE."""


class SubmissionError(QuizFlowError):
    """The blocking save of a submission failed."""

    def __init__(self, error: QuizError):
        super().__init__(error.message)
        self.error = error
