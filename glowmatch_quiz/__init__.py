"""
GlowMatch Quiz - skin quiz session, autosave and submission client.
"""

__version__ = "1.0.0"

from .config import QuizSettings, load_settings
from .core.session import AuthSession, QuizSessionContext
from .core.state_manager import QuizStateMachine

__all__ = [
    "AuthSession",
    "QuizSessionContext",
    "QuizSettings",
    "QuizStateMachine",
    "load_settings",
]
