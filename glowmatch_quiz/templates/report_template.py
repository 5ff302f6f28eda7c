"""
Report Template - Structures a saved quiz attempt into a skin report document.
"""
from typing import Any, Dict, List

from glowmatch_quiz.core.models import QuestionDefinition
from .base_template import DocumentTemplate


class ReportTemplate(DocumentTemplate):
    """Template for the downloadable skin report."""

    def __init__(self, questions: List[QuestionDefinition]):
        self._titles = {q.id: q.title for q in questions}

    def render(self, data: Dict[str, Any]) -> Dict[str, Any]:
        """
        Render a saved attempt into a report.

        Expected data format:
        {
            "id": str,                       # attempt id
            "quiz_data": {"responses": [...], "metadata": {...}},
            "results": {"skin_type": str, "concerns": [...], ...},
            "analysis": Optional[Any]
        }
        """
        self.validate_required_fields(data, ["id", "quiz_data", "results"])

        results = data["results"]
        answers = []
        for response in data["quiz_data"].get("responses", []):
            question_id = response.get("questionId")
            answer = response.get("answer") or {}
            answers.append({
                "question_id": question_id,
                "question": self._titles.get(question_id, response.get("question", "")),
                "answer": answer.get("label") or answer.get("value"),
            })

        return {
            "title": "GlowMatch Skin Report",
            "attempt_id": data["id"],
            "skin_profile": {
                "skin_type": results.get("skin_type", "unknown"),
                "concerns": results.get("concerns", []),
                "sensitivity_level": results.get("sensitivity_level"),
                "routine_complexity": results.get("routine_complexity"),
            },
            "answers": answers,
            "total_answers": len(answers),
            "analysis": data.get("analysis"),
            "completed_at": results.get("completed_at", ""),
        }
