"""
Session context: everything the quiz flow needs, built once at startup
and passed explicitly to the state machine and the submission pipeline.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, Dict, List, Optional

from glowmatch_quiz.config import QuizSettings
from glowmatch_quiz.core.errors import ApiError
from glowmatch_quiz.core.models import QuestionDefinition, ReportResult
from glowmatch_quiz.core.questions import SKIN_QUIZ_QUESTIONS
from glowmatch_quiz.core.results_schema import SKIN_RESULTS_SCHEMA, ResultsSchema
from glowmatch_quiz.core.tasks import BackgroundTaskRegistry
from glowmatch_quiz.infrastructure.api_client import GlowMatchClient
from glowmatch_quiz.infrastructure.draft_store import LocalDraftStore

logger = logging.getLogger("QuizSession")

Navigator = Callable[[str, Dict[str, Any]], None]
Confirm = Callable[[str], bool]
ReportGenerator = Callable[[Dict[str, Any]], Awaitable[ReportResult]]


@dataclass
class AuthSession:
    """The signed-in user, if any."""

    user_id: Optional[str] = None
    token: Optional[str] = None

    @property
    def is_authenticated(self) -> bool:
        return bool(self.user_id)


class Entitlements:
    """
    Tracks how many quiz attempts the user has left.
    None means unknown; an unknown balance does not block starting.
    """

    def __init__(self, api: GlowMatchClient, auth: AuthSession, remaining: Optional[int] = None):
        self.api = api
        self.auth = auth
        self.remaining: Optional[int] = remaining

    def can_take_quiz(self) -> bool:
        return self.remaining is None or self.remaining > 0

    def apply_start_response(self, data: Dict[str, Any]):
        """Record the balance the start call reports."""
        if isinstance(data, dict) and isinstance(data.get("remaining"), int):
            self.remaining = data["remaining"]

    async def refresh(self) -> Optional[int]:
        """Reload the balance from the active subscription."""
        if not self.auth.is_authenticated:
            return self.remaining
        subscription = await self.api.get_subscription(self.auth.user_id)
        if not subscription:
            self.remaining = 0
        else:
            limit = subscription.get("quiz_attempts_limit") or 0
            used = subscription.get("quiz_attempts_used") or 0
            self.remaining = max(0, limit - used)
        logger.info(f"Remaining quiz attempts: {self.remaining}")
        return self.remaining


class ReferralService:
    """Fetches the user's referral link, creating a code when none exists."""

    def __init__(self, api: GlowMatchClient, frontend_url: str):
        self.api = api
        self.frontend_url = frontend_url.rstrip("/")
        self.link: Optional[str] = None

    def _link_from(self, data: Dict[str, Any]) -> Optional[str]:
        link = data.get("referral_link") or data.get("link")
        if not link and data.get("referral_code"):
            link = f"{self.frontend_url}/?ref={data['referral_code']}"
        if link and "ref=null" in link:
            return None
        return link

    async def fetch_link(self) -> Optional[str]:
        link = self._link_from(await self.api.get_referral())
        if not link:
            try:
                link = self._link_from(await self.api.create_referral())
            except ApiError as e:
                logger.warning(f"Failed to create referral code: {e.message}")
        self.link = link
        return link


def _no_navigation(route: str, state: Dict[str, Any]):
    logger.info(f"Navigate -> {route} {state}")


@dataclass
class QuizSessionContext:
    """
    Injected session object threaded through the quiz flow.
    """

    settings: QuizSettings
    auth: AuthSession
    api: GlowMatchClient
    store: LocalDraftStore
    entitlements: Entitlements
    referrals: ReferralService
    questions: List[QuestionDefinition] = field(default_factory=lambda: list(SKIN_QUIZ_QUESTIONS))
    results_schema: ResultsSchema = SKIN_RESULTS_SCHEMA
    tasks: BackgroundTaskRegistry = field(default_factory=BackgroundTaskRegistry)
    navigate: Navigator = _no_navigation
    report_generator: Optional[ReportGenerator] = None

    def __post_init__(self):
        if not self.questions:
            raise ValueError("A quiz needs at least one question")
        ids = [q.id for q in self.questions]
        if len(ids) != len(set(ids)):
            raise ValueError(f"Duplicate question ids: {ids}")
        self.results_schema.validate_against(self.questions)

    @classmethod
    def build(
        cls,
        settings: QuizSettings,
        auth: AuthSession,
        navigate: Navigator = _no_navigation,
        api: Optional[GlowMatchClient] = None,
        store: Optional[LocalDraftStore] = None,
        **kwargs,
    ) -> "QuizSessionContext":
        """Wire the default collaborators from settings."""
        api = api or GlowMatchClient(
            base_url=settings.backend_url,
            token=auth.token,
            timeout_s=settings.http_timeout_s,
        )
        store = store or LocalDraftStore(settings.storage_path)
        context = cls(
            settings=settings,
            auth=auth,
            api=api,
            store=store,
            entitlements=Entitlements(api, auth),
            referrals=ReferralService(api, settings.frontend_url),
            navigate=navigate,
            **kwargs,
        )
        if context.report_generator is None:
            from glowmatch_quiz.core.report import UploadReportGenerator

            context.report_generator = UploadReportGenerator(api, context.questions)
        return context
