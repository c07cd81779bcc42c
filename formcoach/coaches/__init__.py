"""
FormCoach Coaching System

Two components:
1. PostureRuleRegistry - Data-driven, per-exercise posture rules
2. FeedbackArbiter - Cooldown-based arbitration of affirming/corrective feedback
"""

from .feedback_arbiter import FeedbackArbiter, FeedbackCandidate
from .posture_rules import PostureRule, PostureRuleRegistry, get_default_registry

__all__ = [
    "FeedbackArbiter",
    "FeedbackCandidate",
    "PostureRule",
    "PostureRuleRegistry",
    "get_default_registry",
]
