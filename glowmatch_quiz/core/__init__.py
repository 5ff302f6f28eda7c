"""
Core module: quiz data model, state machine, autosave and submission.
"""

from glowmatch_quiz.core.models import (
    AutosaveSnapshot,
    ChoiceAnswer,
    QuestionDefinition,
    QuestionOption,
    QuestionType,
    QuizError,
    QuizPhase,
    Response,
    ResultsSummary,
    SliderAnswer,
    StartOutcome,
    SubmissionRecord,
)

__all__ = [
    "AutosaveSnapshot",
    "ChoiceAnswer",
    "QuestionDefinition",
    "QuestionOption",
    "QuestionType",
    "QuizError",
    "QuizPhase",
    "Response",
    "ResultsSummary",
    "SliderAnswer",
    "StartOutcome",
    "SubmissionRecord",
]
