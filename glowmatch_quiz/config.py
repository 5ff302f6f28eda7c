"""
Configuration for the GlowMatch quiz client.
Values come from environment variables, optionally overridden by a JSON file
named in RUN_CONFIG.
"""

import json
import os
from typing import Any, Dict, Optional

from pydantic import BaseModel, Field

ENV_PREFIX = "GLOWMATCH_"


class QuizSettings(BaseModel):
    """Validated client settings."""

    backend_url: str = "https://backend-three-sigma-81.vercel.app/api"
    frontend_url: str = "https://glowimatch.vercel.app"
    autosave_interval_s: float = Field(30.0, gt=0)
    storage_path: str = ".glowmatch/storage.json"
    analysis_model: str = "fallback"
    http_timeout_s: float = Field(10.0, gt=0)
    log_dir: str = "logs"
    analysis_route: str = "/image-upload-analysis"

    @classmethod
    def from_env(cls, environ: Optional[Dict[str, str]] = None) -> "QuizSettings":
        env = os.environ if environ is None else environ
        values: Dict[str, Any] = {}
        mapping = {
            "BACKEND_URL": "backend_url",
            "FRONTEND_URL": "frontend_url",
            "AUTOSAVE_INTERVAL": "autosave_interval_s",
            "STORAGE_PATH": "storage_path",
            "ANALYSIS_MODEL": "analysis_model",
            "HTTP_TIMEOUT": "http_timeout_s",
            "LOG_DIR": "log_dir",
        }
        for suffix, field_name in mapping.items():
            value = env.get(ENV_PREFIX + suffix)
            if value:
                values[field_name] = value
        return cls(**values)


def load_settings(environ: Optional[Dict[str, str]] = None) -> QuizSettings:
    """
    Load settings from the environment, then apply the RUN_CONFIG file if set.

    Raises:
        FileNotFoundError: RUN_CONFIG points at a missing file
        pydantic.ValidationError: A value is invalid
    """
    env = os.environ if environ is None else environ
    settings = QuizSettings.from_env(env)

    config_path = env.get("RUN_CONFIG")
    if not config_path:
        return settings

    if not os.path.exists(config_path):
        raise FileNotFoundError(
            f"Config file not found: {config_path}. "
            f"Create it or unset the RUN_CONFIG env variable."
        )

    with open(config_path, "r", encoding="utf-8") as f:
        overrides = json.load(f)

    return QuizSettings(**{**settings.model_dump(), **overrides})
