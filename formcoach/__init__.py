"""FormCoach - live exercise posture feedback from streamed pose landmarks."""

from .config import AFFIRMING, CORRECTIVE, CoachConfig
from .session import SessionController, SessionPhase, SessionState

__all__ = [
    "AFFIRMING",
    "CORRECTIVE",
    "CoachConfig",
    "SessionController",
    "SessionPhase",
    "SessionState",
]

__version__ = "0.1.0"
