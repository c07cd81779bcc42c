"""
Runtime configuration for the coaching engine.

Defaults are the tuned constants of the engine; every value can be
overridden through COACH_* environment variables.
"""

import os
from dataclasses import dataclass
from typing import Optional

AFFIRMING = "affirming"
CORRECTIVE = "corrective"
FEEDBACK_CLASSES = (AFFIRMING, CORRECTIVE)

_TRUE_VALUES = {"1", "true", "yes", "on"}


def _env_float(name: str, default: Optional[float]) -> Optional[float]:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return float(raw)
    except ValueError:
        raise ValueError(f"{name} must be a number, got {raw!r}") from None


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    return raw.strip().lower() in _TRUE_VALUES


@dataclass
class CoachConfig:
    """Tunable constants of the feedback engine."""

    affirming_cooldown_ms: float = 3000.0
    corrective_cooldown_ms: float = 4000.0
    min_confidence: float = 0.5
    speech_rate: float = 1.0
    speech_pitch: float = 1.0
    rep_message: str = "Good rep!"
    # Count reps from keypoints instead of waiting for "counter" messages
    local_rep_counting: bool = False
    # Skip posture evaluation when landmarks jump further than this between frames
    jitter_threshold: Optional[float] = None

    def __post_init__(self):
        if self.affirming_cooldown_ms < 0 or self.corrective_cooldown_ms < 0:
            raise ValueError("Cooldowns must be non-negative")
        if not 0.0 <= self.min_confidence < 1.0:
            raise ValueError("min_confidence must be in [0, 1)")
        if self.jitter_threshold is not None and self.jitter_threshold <= 0:
            raise ValueError("jitter_threshold must be positive when set")
        if not self.rep_message.strip():
            raise ValueError("rep_message must not be empty")

    def cooldown_ms(self, feedback_class: str) -> float:
        if feedback_class == AFFIRMING:
            return self.affirming_cooldown_ms
        if feedback_class == CORRECTIVE:
            return self.corrective_cooldown_ms
        raise ValueError(f"Unknown feedback class '{feedback_class}'")

    @classmethod
    def from_env(cls) -> "CoachConfig":
        defaults = cls()
        return cls(
            affirming_cooldown_ms=_env_float("COACH_AFFIRMING_COOLDOWN_MS", defaults.affirming_cooldown_ms),
            corrective_cooldown_ms=_env_float("COACH_CORRECTIVE_COOLDOWN_MS", defaults.corrective_cooldown_ms),
            min_confidence=_env_float("COACH_MIN_CONFIDENCE", defaults.min_confidence),
            speech_rate=_env_float("COACH_SPEECH_RATE", defaults.speech_rate),
            speech_pitch=_env_float("COACH_SPEECH_PITCH", defaults.speech_pitch),
            rep_message=os.getenv("COACH_REP_MESSAGE") or defaults.rep_message,
            local_rep_counting=_env_bool("COACH_LOCAL_REP_COUNTING", defaults.local_rep_counting),
            jitter_threshold=_env_float("COACH_JITTER_THRESHOLD", None),
        )
