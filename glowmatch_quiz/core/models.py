"""
Data model for the skin quiz session.
Questions, typed answers, responses, and the records exchanged with the backend.
"""

from datetime import datetime, timezone
from enum import Enum
from typing import Annotated, Any, Dict, List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, model_validator


def utc_now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


# --- Phases ---
class QuizPhase(str, Enum):
    """Lifecycle of a quiz session."""

    NOT_STARTED = "not_started"
    IN_PROGRESS = "in_progress"
    COMPLETE = "complete"


class StartOutcome(str, Enum):
    STARTED = "started"
    AUTH_REQUIRED = "auth_required"
    NO_ATTEMPTS = "no_attempts"
    FAILED = "failed"
    INVALID_PHASE = "invalid_phase"


# --- Questions ---
class QuestionType(str, Enum):
    MULTIPLE_CHOICE = "multiple-choice"
    IMAGE_SELECTION = "image-selection"
    SLIDER = "slider"


class QuestionOption(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    label: str
    description: Optional[str] = None
    image: Optional[str] = None


# --- Answers (tagged union) ---
class ChoiceAnswer(BaseModel):
    """Answer to a multiple-choice or image-selection question."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["choice"] = "choice"
    id: str
    label: str

    def to_wire(self) -> Dict[str, Any]:
        return {"id": self.id, "label": self.label, "value": self.id}


class SliderAnswer(BaseModel):
    """Answer to a slider question."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["slider"] = "slider"
    value: int
    label: Optional[str] = None

    def to_wire(self) -> Dict[str, Any]:
        return {"id": str(self.value), "label": self.label, "value": self.value}


Answer = Annotated[Union[ChoiceAnswer, SliderAnswer], Field(discriminator="kind")]


class QuestionDefinition(BaseModel):
    """Static question, fixed for the lifetime of a session."""

    model_config = ConfigDict(frozen=True)

    id: int
    title: str
    subtitle: str = ""
    type: QuestionType
    options: List[QuestionOption] = Field(default_factory=list)

    # Slider-only settings
    min: Optional[int] = None
    max: Optional[int] = None
    step: int = 1
    labels: Dict[int, str] = Field(default_factory=dict)

    @property
    def is_slider(self) -> bool:
        return self.type == QuestionType.SLIDER

    def option(self, option_id: str) -> Optional[QuestionOption]:
        for opt in self.options:
            if opt.id == option_id:
                return opt
        return None

    def choose(self, option_id: str) -> ChoiceAnswer:
        """Build the answer for one of this question's options."""
        opt = self.option(option_id)
        if opt is None:
            raise ValueError(f"Question {self.id} has no option '{option_id}'")
        return ChoiceAnswer(id=opt.id, label=opt.label)

    def slide(self, value: int) -> SliderAnswer:
        """Build the answer for a slider position."""
        return SliderAnswer(value=value, label=self.labels.get(value))

    def accepts(self, answer: Union[ChoiceAnswer, SliderAnswer]) -> bool:
        """Check the answer variant and value fit this question."""
        if self.is_slider:
            if not isinstance(answer, SliderAnswer):
                return False
            if self.min is not None and answer.value < self.min:
                return False
            if self.max is not None and answer.value > self.max:
                return False
            return True

        if not isinstance(answer, ChoiceAnswer):
            return False
        return self.option(answer.id) is not None


# --- Responses ---
class Response(BaseModel):
    """One answered question. At most one per question id in a session."""

    model_config = ConfigDict(populate_by_name=True)

    question_id: int = Field(alias="questionId")
    question: str
    answer: Answer
    timestamp: str = Field(default_factory=utc_now_iso)

    @model_validator(mode="before")
    @classmethod
    def tag_wire_answer(cls, data: Any) -> Any:
        """Accept the backend's untagged {id, label, value} answer shape."""
        if not isinstance(data, dict):
            return data
        answer = data.get("answer")
        if not isinstance(answer, dict) or "kind" in answer:
            return data
        value = answer.get("value")
        if isinstance(value, int) and not isinstance(value, bool):
            tagged = {"kind": "slider", "value": value, "label": answer.get("label")}
        else:
            tagged = {"kind": "choice", "id": answer.get("id"), "label": answer.get("label")}
        return {**data, "answer": tagged}

    def to_wire(self) -> Dict[str, Any]:
        return {
            "questionId": self.question_id,
            "question": self.question,
            "answer": self.answer.to_wire(),
            "timestamp": self.timestamp,
        }


# --- Errors shown to the caller ---
class QuizError(BaseModel):
    """Structured error surfaced to the UI layer."""

    code: str
    message: str
    details: Optional[Any] = None


# --- Submission ---
class SubmissionMetadata(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    completed_at: str = Field(default_factory=utc_now_iso, alias="completedAt")
    total_questions: int = Field(alias="totalQuestions")
    version: str = "1.0"


class QuizData(BaseModel):
    responses: List[Response] = Field(default_factory=list)
    metadata: SubmissionMetadata

    def to_wire(self) -> Dict[str, Any]:
        return {
            "responses": [r.to_wire() for r in self.responses],
            "metadata": self.metadata.model_dump(by_alias=True),
        }


class ResultsSummary(BaseModel):
    """Summary derived from the responses by the results schema."""

    skin_type: str = "unknown"
    concerns: List[str] = Field(default_factory=list)
    sensitivity_level: int = 3
    routine_complexity: str = "basic"
    completed_at: str = Field(default_factory=utc_now_iso)


class SubmissionRecord(BaseModel):
    quiz_data: QuizData
    results: ResultsSummary
    attempt_id: Optional[str] = None


class AutosaveSnapshot(BaseModel):
    """Periodic snapshot of an in-progress session."""

    model_config = ConfigDict(populate_by_name=True)

    responses: List[Response] = Field(default_factory=list)
    current_question_index: int = Field(0, alias="currentQuestionIndex", ge=0)
    timestamp: str = Field(default_factory=utc_now_iso)

    def to_storage(self) -> Dict[str, Any]:
        return self.model_dump(by_alias=True, mode="json")

    def to_wire(self) -> Dict[str, Any]:
        """Backend autosave shape; answers as {id, label, value}."""
        return {
            "responses": [r.to_wire() for r in self.responses],
            "currentQuestionIndex": self.current_question_index,
            "timestamp": self.timestamp,
        }


class ReportResult(BaseModel):
    success: bool
    public_url: Optional[str] = Field(None, alias="publicUrl")

    model_config = ConfigDict(populate_by_name=True)
