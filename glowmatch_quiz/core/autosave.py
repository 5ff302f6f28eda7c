"""
Autosave: periodic best-effort snapshots of an in-progress quiz.

AutosaveTimer runs one asyncio task per entry into the in-progress phase.
Each tick sleeps for the interval and then awaits the save, so two ticks are
never in flight at once. stop() cancels the task immediately; no tick runs
after it returns.
"""

import asyncio
import logging
from typing import Any, Awaitable, Callable, Dict, Optional, Tuple

from glowmatch_quiz.core.errors import ApiError
from glowmatch_quiz.core.models import AutosaveSnapshot
from glowmatch_quiz.infrastructure.api_client import GlowMatchClient
from glowmatch_quiz.infrastructure.draft_store import AUTOSAVE_KEY, PROGRESS_KEY, LocalDraftStore
from glowmatch_quiz.infrastructure.logger import quiz_logger

logger = logging.getLogger("Autosave")

DEFAULT_INTERVAL_S = 30.0


class AutosaveTimer:
    """Periodic, non-overlapping, cancellable autosave loop."""

    def __init__(
        self,
        save: Callable[[], Awaitable[None]],
        interval_s: float = DEFAULT_INTERVAL_S,
    ):
        self._save = save
        self.interval_s = interval_s
        self._task: Optional[asyncio.Task] = None
        self.ticks = 0
        self.failures = 0

    @property
    def is_running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self):
        """Start the loop. Calling start while running does nothing."""
        if self.is_running:
            logger.debug("Autosave already running")
            return
        self._task = asyncio.get_running_loop().create_task(self._run(), name="autosave")
        logger.info(f"Autosave started (every {self.interval_s}s)")

    def stop(self):
        """Cancel the loop, including a tick that is waiting on the save."""
        if self._task is None:
            return
        if not self._task.done():
            self._task.cancel()
            logger.info("Autosave stopped")
        self._task = None

    async def _run(self):
        while True:
            await asyncio.sleep(self.interval_s)
            await self.tick()

    async def tick(self):
        """Run one save. Failures are logged and never end the loop."""
        self.ticks += 1
        try:
            await self._save()
        except asyncio.CancelledError:
            raise
        except Exception as e:
            self.failures += 1
            logger.error(f"Auto-save error: {e}")


class AutosaveWriter:
    """
    Writes a snapshot to the remote autosave store and then to the local mirror.
    """

    def __init__(self, api: GlowMatchClient, store: LocalDraftStore, user_id: str):
        self.api = api
        self.store = store
        self.user_id = user_id

    async def write(self, snapshot: AutosaveSnapshot):
        quiz_data = snapshot.to_wire()
        try:
            await self.api.save_autosave(self.user_id, quiz_data)
        except ApiError as e:
            quiz_logger.autosave(False, snapshot.current_question_index, e.message)
            raise

        self.store.set(
            AUTOSAVE_KEY,
            {"user_id": self.user_id, "quiz_data": quiz_data, "is_completed": False},
        )
        quiz_logger.autosave(True, snapshot.current_question_index)


class AutosaveRecovery:
    """Finds snapshots to offer for resume: remote, then the local mirror, then the live draft."""

    def __init__(self, api: GlowMatchClient, store: LocalDraftStore, user_id: str):
        self.api = api
        self.store = store
        self.user_id = user_id

    async def remote_snapshot(self) -> Optional[AutosaveSnapshot]:
        try:
            saved = await self.api.get_autosave(self.user_id)
        except ApiError as e:
            logger.error(f"Error loading saved progress: {e.message}")
            return None
        return self._parse(saved, "remote")

    def local_snapshot(self) -> Optional[AutosaveSnapshot]:
        return self._parse(self.store.get(AUTOSAVE_KEY), "local")

    def draft_snapshot(self) -> Optional[AutosaveSnapshot]:
        draft = self.store.get(PROGRESS_KEY)
        if not isinstance(draft, dict) or not draft.get("quizStarted"):
            return None
        return self._parse({"quiz_data": draft}, "draft")

    async def candidates(self) -> Tuple[Tuple[str, AutosaveSnapshot], ...]:
        """Snapshots to offer, in the order they should be offered."""
        found = []
        remote = await self.remote_snapshot()
        if remote is not None:
            found.append(("remote", remote))
        local = self.local_snapshot()
        if local is not None:
            found.append(("local", local))
        draft = self.draft_snapshot()
        if draft is not None:
            found.append(("draft", draft))
        return tuple(found)

    @staticmethod
    def _parse(saved: Optional[Dict[str, Any]], source: str) -> Optional[AutosaveSnapshot]:
        if not isinstance(saved, dict) or not saved.get("quiz_data"):
            return None
        try:
            return AutosaveSnapshot.model_validate(saved["quiz_data"])
        except ValueError as e:
            # pydantic.ValidationError is a ValueError
            logger.warning(f"Ignoring unreadable {source} autosave: {e}")
            return None
