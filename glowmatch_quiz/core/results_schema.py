"""
Results Schema: declarative mapping from question ids to results summary fields.

Each field names the question it reads, the question type it expects, an
extractor for that answer variant, and the default used when the question was
not answered. The schema is checked against the question catalog when a
session is built, so reordering or retyping questions fails loudly instead of
producing a wrong summary.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Dict, Iterable, List, Optional, Sequence

from glowmatch_quiz.core.errors import MissingAnswerError, ResultsSchemaError
from glowmatch_quiz.core.models import (
    ChoiceAnswer,
    QuestionDefinition,
    QuestionType,
    Response,
    ResultsSummary,
    SliderAnswer,
    utc_now_iso,
)

logger = logging.getLogger("ResultsSchema")


class MissingAnswerPolicy(str, Enum):
    """What to do when a mapped question has no response."""

    DEFAULT = "default"  # Fill the field's default value
    RAISE = "raise"  # Raise MissingAnswerError


MISSING_ANSWER_POLICY = MissingAnswerPolicy.DEFAULT

CHOICE_TYPES = (QuestionType.MULTIPLE_CHOICE, QuestionType.IMAGE_SELECTION)


def choice_label(answer: ChoiceAnswer) -> str:
    return answer.label


def choice_id(answer: ChoiceAnswer) -> str:
    return answer.id


def choice_labels(answer: ChoiceAnswer) -> List[str]:
    return [answer.label] if answer.label else []


def slider_value(answer: SliderAnswer) -> int:
    return answer.value


@dataclass(frozen=True)
class ResultField:
    name: str
    question_id: int
    question_types: Sequence[QuestionType]
    extract: Callable[[Any], Any]
    default: Any

    def default_value(self) -> Any:
        # Lists must not be shared between summaries
        return list(self.default) if isinstance(self.default, list) else self.default


class ResultsSchema:
    """Derives a ResultsSummary from a list of responses."""

    def __init__(
        self,
        fields: Iterable[ResultField],
        policy: MissingAnswerPolicy = MISSING_ANSWER_POLICY,
    ):
        self.fields: List[ResultField] = list(fields)
        self.policy = policy

    def validate_against(self, questions: Sequence[QuestionDefinition]) -> None:
        """
        Check every mapped question exists with the expected type.

        Raises:
            ResultsSchemaError: On a missing question id or a type mismatch
        """
        by_id = {q.id: q for q in questions}
        problems = []
        for f in self.fields:
            question = by_id.get(f.question_id)
            if question is None:
                problems.append(f"{f.name}: question {f.question_id} not in catalog")
            elif question.type not in f.question_types:
                expected = ", ".join(t.value for t in f.question_types)
                problems.append(
                    f"{f.name}: question {f.question_id} is {question.type.value}, expected {expected}"
                )
        if problems:
            raise ResultsSchemaError("; ".join(problems))

    def derive(
        self, responses: Sequence[Response], completed_at: Optional[str] = None
    ) -> ResultsSummary:
        by_question = {r.question_id: r for r in responses}
        values: Dict[str, Any] = {}

        for f in self.fields:
            response = by_question.get(f.question_id)
            if response is None:
                if self.policy == MissingAnswerPolicy.RAISE:
                    raise MissingAnswerError(
                        f"No answer for question {f.question_id} ({f.name})"
                    )
                logger.debug(f"Question {f.question_id} unanswered, using default for {f.name}")
                values[f.name] = f.default_value()
                continue
            values[f.name] = f.extract(response.answer)

        values["completed_at"] = completed_at or utc_now_iso()
        return ResultsSummary(**values)


SKIN_RESULTS_SCHEMA = ResultsSchema(
    [
        ResultField("skin_type", 1, CHOICE_TYPES, choice_label, "unknown"),
        ResultField("concerns", 4, CHOICE_TYPES, choice_labels, []),
        ResultField("sensitivity_level", 5, (QuestionType.SLIDER,), slider_value, 3),
        ResultField("routine_complexity", 6, CHOICE_TYPES, choice_id, "basic"),
    ]
)
