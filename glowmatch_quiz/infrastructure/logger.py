"""
Structured Logging for the GlowMatch quiz client.
Provides JSON-formatted lifecycle logs alongside plain module loggers.
"""

import json
import logging
import os
from datetime import datetime, timezone
from typing import Any, Dict, Optional

CONSOLE_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"


class StructuredLogger:
    """Structured logger with JSON output for quiz lifecycle events."""

    def __init__(self, name: str):
        self.name = name
        self.logger = logging.getLogger(name)

    def _build_log_entry(self, level: str, message: str, extra: Optional[Dict[str, Any]] = None) -> str:
        """Build structured JSON log entry."""
        log_data = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": level,
            "logger": self.name,
            "message": message,
            **(extra or {}),
        }
        return json.dumps(log_data, default=str)

    def info(self, message: str, extra: Optional[Dict[str, Any]] = None):
        self.logger.info(self._build_log_entry("INFO", message, extra))

    def warning(self, message: str, extra: Optional[Dict[str, Any]] = None):
        self.logger.warning(self._build_log_entry("WARNING", message, extra))

    def error(self, message: str, extra: Optional[Dict[str, Any]] = None):
        self.logger.error(self._build_log_entry("ERROR", message, extra))

    def debug(self, message: str, extra: Optional[Dict[str, Any]] = None):
        self.logger.debug(self._build_log_entry("DEBUG", message, extra))

    # --- Quiz lifecycle logging ---

    def phase_change(self, old: str, new: str, question_index: int):
        self.info(f"Phase: {old} -> {new}", extra={
            "from": old,
            "to": new,
            "question_index": question_index,
            "type": "phase_change",
        })

    def autosave(self, ok: bool, question_index: int, error: Optional[str] = None):
        entry = {"ok": ok, "question_index": question_index, "type": "autosave"}
        if ok:
            self.debug("Autosave stored", extra=entry)
        else:
            self.warning(f"Autosave failed: {error}", extra={**entry, "error": error})

    def submission(self, attempt_id: Optional[str], total: int, error: Optional[str] = None):
        if error:
            self.error(f"Submission failed: {error}", extra={
                "total_responses": total,
                "error": error,
                "type": "submission",
            })
            return
        self.info(f"Submission saved: {attempt_id}", extra={
            "attempt_id": attempt_id,
            "total_responses": total,
            "type": "submission",
        })

    def background_job(self, job: str, ok: bool, error: Optional[str] = None):
        entry = {"job": job, "ok": ok, "type": "background_job"}
        if ok:
            self.info(f"Background {job} completed", extra=entry)
        else:
            self.warning(f"Background {job} failed: {error}", extra={**entry, "error": error})


def setup_logging(level: int = logging.INFO, log_dir: str = "logs"):
    """
    Configure console logging, plus a file handler when log_dir exists.
    """
    root_logger = logging.getLogger()
    root_logger.setLevel(level)

    # Prevent duplicate handlers on repeated setup
    if getattr(root_logger, "_glowmatch_configured", False):
        return

    console_handler = logging.StreamHandler()
    console_handler.setFormatter(logging.Formatter(CONSOLE_FORMAT))
    root_logger.addHandler(console_handler)

    if os.path.exists(log_dir):
        file_handler = logging.FileHandler(os.path.join(log_dir, "quiz.log"))
        file_handler.setFormatter(logging.Formatter(CONSOLE_FORMAT))
        root_logger.addHandler(file_handler)

    root_logger._glowmatch_configured = True


quiz_logger = StructuredLogger("GlowMatchQuiz")
