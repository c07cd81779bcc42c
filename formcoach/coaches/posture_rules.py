"""
Posture Rules - Data-driven, per-exercise posture evaluation.

This module turns the declarative rules in posture_rules_config.py into
PostureRule objects and keeps them in a registry keyed by exercise id:
1. Each rule names the landmarks it needs and the joint angles it checks
2. Rules are evaluated in order against one KeypointFrame
3. The first violated rule supplies the single corrective message for the frame

Rules are pure: they never touch session state. Missing landmarks and
degenerate geometry skip a rule; they are never reported as violations.
"""

import logging
from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence, Tuple

from ..keypoints import KeypointFrame, normalize_name
from ..kinematics import angle_at_joint
from .posture_rules_config import POSTURE_RULES_CONFIG

logger = logging.getLogger(__name__)


def normalize_exercise_id(exercise_id: str) -> str:
    """'Push-Up', 'push up' and 'PUSH_UP' all map to 'push_up'."""
    return normalize_name(exercise_id)


@dataclass(frozen=True)
class AngleCheck:
    """Bounds on the angle measured at the middle joint of a landmark triad."""

    angle: str
    joints: Tuple[str, str, str]
    message: str
    v_min: Optional[float] = None
    v_max: Optional[float] = None

    @classmethod
    def from_config(cls, config: Mapping[str, Any]) -> "AngleCheck":
        joints = tuple(normalize_name(j) for j in config["joints"])
        if len(joints) != 3:
            raise ValueError(f"Angle check needs exactly three joints, got {joints}")
        if config.get("v_min") is None and config.get("v_max") is None:
            raise ValueError(f"Angle check '{config.get('angle')}' has no bounds")
        return cls(
            angle=config.get("angle", joints[1]),
            joints=joints,
            message=config["message"],
            v_min=config.get("v_min"),
            v_max=config.get("v_max"),
        )

    def is_violated(self, value: float) -> bool:
        if self.v_max is not None and value > self.v_max:
            return True
        if self.v_min is not None and value < self.v_min:
            return True
        return False


class PostureRule:
    """
    A single posture rule for one exercise.

    Subclasses may override evaluate() for rules that are not plain angle
    bounds; the registry only relies on `name`, `required_landmarks` and
    `evaluate`.
    """

    def __init__(self, name: str, checks: Sequence[AngleCheck], description: str = ""):
        self.name = name
        self.description = description
        self.checks = list(checks)

    @classmethod
    def from_config(cls, config: Mapping[str, Any]) -> "PostureRule":
        return cls(
            name=config["name"],
            checks=[AngleCheck.from_config(c) for c in config["checks"]],
            description=config.get("description", ""),
        )

    @property
    def required_landmarks(self) -> Tuple[str, ...]:
        seen: List[str] = []
        for check in self.checks:
            for joint in check.joints:
                if joint not in seen:
                    seen.append(joint)
        return tuple(seen)

    def measure(self, frame: KeypointFrame) -> Optional[List[float]]:
        """Angles in check order, or None if any of them cannot be evaluated."""
        if not frame.has_all(self.required_landmarks):
            return None
        angles = []
        for check in self.checks:
            value = angle_at_joint(*(frame.get(j) for j in check.joints))
            if value is None:
                return None
            angles.append(value)
        return angles

    def evaluate(self, frame: KeypointFrame) -> Optional[str]:
        """Return the corrective message of the first failing check, if any."""
        angles = self.measure(frame)
        if angles is None:
            return None
        for check, value in zip(self.checks, angles):
            if check.is_violated(value):
                return check.message
        return None

    def __repr__(self) -> str:
        return f"PostureRule({self.name!r}, landmarks={self.required_landmarks})"


class PostureRuleRegistry:
    """
    Ordered posture rules per exercise.

    Usage:
        registry = PostureRuleRegistry.from_config()
        message = registry.evaluate("squat", frame)  # None if posture is fine
    """

    def __init__(self):
        self._rules: Dict[str, List[PostureRule]] = {}

    @classmethod
    def from_config(cls, config: Optional[Mapping[str, Iterable[Mapping[str, Any]]]] = None):
        registry = cls()
        for exercise_id, rules in (config or POSTURE_RULES_CONFIG).items():
            registry.register(exercise_id, [PostureRule.from_config(r) for r in rules])
        return registry

    def register(self, exercise_id: str, rules: Iterable[PostureRule]) -> None:
        """Register (or replace) the ordered rule list for an exercise."""
        self._rules[normalize_exercise_id(exercise_id)] = list(rules)

    def exercises(self) -> List[str]:
        return list(self._rules.keys())

    def rules_for(self, exercise_id: Optional[str]) -> List[PostureRule]:
        """Ordered rules for the exercise; empty for unknown ids."""
        if not exercise_id:
            return []
        return list(self._rules.get(normalize_exercise_id(exercise_id), []))

    def evaluate(self, exercise_id: Optional[str], frame: KeypointFrame) -> Optional[str]:
        """Evaluate the exercise's rules in order; the first violation wins."""
        for rule in self.rules_for(exercise_id):
            message = rule.evaluate(frame)
            if message:
                logger.debug("Rule %s violated: %s", rule.name, message)
                return message
        return None

    def __contains__(self, exercise_id: str) -> bool:
        return normalize_exercise_id(exercise_id) in self._rules


# Singleton instance
_registry_instance = None


def get_default_registry() -> PostureRuleRegistry:
    """Get the shared registry built from POSTURE_RULES_CONFIG."""
    global _registry_instance
    if _registry_instance is None:
        _registry_instance = PostureRuleRegistry.from_config()
    return _registry_instance
