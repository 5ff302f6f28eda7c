"""
Report generation: renders a saved attempt and uploads it to the backend.
"""

import base64
import json
import logging
from typing import Any, Dict, List

from glowmatch_quiz.core.models import QuestionDefinition, ReportResult
from glowmatch_quiz.infrastructure.api_client import GlowMatchClient
from glowmatch_quiz.templates.report_template import ReportTemplate

logger = logging.getLogger("ReportGenerator")


class UploadReportGenerator:
    """
    Async callable producing a ReportResult for a saved attempt.
    """

    def __init__(self, api: GlowMatchClient, questions: List[QuestionDefinition]):
        self.api = api
        self.template = ReportTemplate(questions)

    async def __call__(self, attempt: Dict[str, Any]) -> ReportResult:
        document = self.template.render(attempt)
        encoded = base64.b64encode(json.dumps(document, indent=2).encode("utf-8")).decode("ascii")
        filename = f"glowmatch-report-{attempt['id']}.json"

        uploaded = await self.api.upload_report(
            attempt_id=attempt["id"],
            filename=filename,
            data_b64=encoded,
            analysis=attempt.get("analysis"),
        )
        logger.info(f"Report uploaded for attempt {attempt['id']}")
        return ReportResult(success=True, public_url=uploaded.get("publicUrl"))
