"""
Local Draft Store: persistent key/value storage for quiz drafts and results.
Backed by a single JSON file, loaded once and rewritten on every change.
"""

import json
import logging
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, Optional

logger = logging.getLogger("DraftStore")

# Storage keys shared with the web client
PROGRESS_KEY = "glowmatch-quiz-progress"
AUTOSAVE_KEY = "glowmatch-quiz-autosave"
QUIZ_DATA_KEY = "glowmatch-quiz-data"
ANALYSIS_KEY = "glowmatch-analysis"


class LocalDraftStore:
    """
    Client-side persistent storage for in-progress and submitted quiz data.
    """

    def __init__(self, storage_path: str = ".glowmatch/storage.json"):
        self.storage_path = Path(storage_path)
        self._data: Dict[str, Any] = {}
        self._load()

    def _load(self):
        """Load stored entries from file."""
        if not self.storage_path.exists():
            return
        try:
            with open(self.storage_path, "r", encoding="utf-8") as f:
                data = json.load(f)
            if isinstance(data, dict):
                self._data = data.get("entries", {})
            logger.info(f"Draft store loaded from {self.storage_path}")
        except (OSError, ValueError) as e:
            # A corrupt file must not block the quiz; start empty
            logger.warning(f"Failed to load draft store: {e}")
            self._data = {}

    def _save(self):
        """Persist all entries to file."""
        self.storage_path.parent.mkdir(parents=True, exist_ok=True)
        data = {"entries": self._data, "last_updated": datetime.now().isoformat()}
        with open(self.storage_path, "w", encoding="utf-8") as f:
            json.dump(data, f, indent=2)

    def get(self, key: str, default: Any = None) -> Any:
        return self._data.get(key, default)

    def has(self, key: str) -> bool:
        return key in self._data

    def set(self, key: str, value: Any):
        """Replace the value stored under key."""
        self._data[key] = value
        self._save()
        logger.debug(f"Stored {key}")

    def update(self, key: str, fields: Dict[str, Any]) -> Dict[str, Any]:
        """
        Add fields to the dict stored under key, keeping existing fields.

        Returns:
            The merged value
        """
        existing = self._data.get(key)
        merged = dict(existing) if isinstance(existing, dict) else {}
        merged.update(fields)
        self._data[key] = merged
        self._save()
        logger.debug(f"Extended {key} with {', '.join(fields)}")
        return merged

    def remove(self, key: str):
        if key in self._data:
            del self._data[key]
            self._save()
            logger.debug(f"Removed {key}")

    def clear_drafts(self):
        """Remove the live draft and the autosave mirror."""
        self.remove(PROGRESS_KEY)
        self.remove(AUTOSAVE_KEY)

    def keys(self):
        return list(self._data.keys())
