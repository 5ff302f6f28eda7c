"""
Tests for structured lifecycle logging and background job tracking.
"""

import asyncio
import json
import logging

from glowmatch_quiz.core.tasks import BackgroundTaskRegistry
from glowmatch_quiz.infrastructure.logger import StructuredLogger


def entries(caplog):
    return [json.loads(r.getMessage()) for r in caplog.records if r.name == "GlowMatchTest"]


def test_phase_change_entry(caplog):
    caplog.set_level(logging.INFO)

    StructuredLogger("GlowMatchTest").phase_change("not_started", "in_progress", 0)

    entry = entries(caplog)[0]
    assert entry["type"] == "phase_change"
    assert entry["from"] == "not_started"
    assert entry["to"] == "in_progress"
    assert entry["level"] == "INFO"


def test_autosave_failure_is_warning(caplog):
    caplog.set_level(logging.DEBUG)
    logger = StructuredLogger("GlowMatchTest")

    logger.autosave(True, 2)
    logger.autosave(False, 3, "timeout")

    ok, failed = entries(caplog)
    assert ok["level"] == "DEBUG"
    assert failed["level"] == "WARNING"
    assert failed["error"] == "timeout"
    assert failed["question_index"] == 3


def test_registry_tracks_outcomes():
    registry = BackgroundTaskRegistry()

    async def ok():
        return "done"

    async def broken():
        raise RuntimeError("boom")

    async def scenario():
        registry.spawn("analysis", ok())
        registry.spawn("report", broken())
        pending = registry.pending
        await registry.wait_all()
        return pending

    pending = asyncio.run(scenario())

    assert pending == ["analysis#1", "report#2"]
    assert registry.completed == ["analysis#1"]
    assert str(registry.failures["report#2"]) == "boom"
    assert registry.pending == []
