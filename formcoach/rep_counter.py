"""
Rep counting for the coaching engine.

Two pieces:
- RepCounterBridge turns cumulative rep counts (reported by the pose source,
  or by a local counter) into affirming feedback on every increase.
- AngleRepCounter is an online up/down state machine over a joint angle,
  used when the pose source does not report counts itself.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Mapping, Optional, Tuple

from .coaches.feedback_arbiter import FeedbackArbiter, FeedbackCandidate
from .config import CoachConfig
from .keypoints import KeypointFrame
from .kinematics import angle_at_joint

if TYPE_CHECKING:
    from .session import SessionState

logger = logging.getLogger(__name__)


# Arm when the "arm" angle crosses its threshold, count when the "count"
# angle crosses its threshold afterwards.
REP_COUNTER_CONFIG = {
    "squat": {
        "arm": {"joints": ("left_shoulder", "left_hip", "left_knee"), "above": 170},
        "count": {"joints": ("left_hip", "left_knee", "left_ankle"), "below": 100},
    },
    "push_up": {
        "arm": {"joints": ("right_shoulder", "right_elbow", "right_wrist"), "above": 160},
        "count": {"joints": ("right_shoulder", "right_elbow", "right_wrist"), "below": 70},
    },
    "bicep_curl": {
        "arm": {"joints": ("right_shoulder", "right_elbow", "right_wrist"), "below": 30},
        "count": {"joints": ("right_shoulder", "right_elbow", "right_wrist"), "above": 160},
    },
}


class RepCounterBridge:
    """
    Detects increases in a cumulative rep count and reports them as
    affirming feedback.

    The reported count is only a baseline: when it drops (the source
    re-initialized) the baseline moves down silently and the session's
    rep_count is left untouched.
    """

    def __init__(
        self,
        state: "SessionState",
        arbiter: FeedbackArbiter,
        config: Optional[CoachConfig] = None,
    ):
        self.state = state
        self.arbiter = arbiter
        self.config = config or CoachConfig()

    def update(self, current_count: int, now: float) -> bool:
        """
        Record a newly reported cumulative count.

        Returns:
            True if the count increased (an affirming candidate was submitted).
        """
        previous = self.state.last_reported_count
        self.state.last_reported_count = current_count

        if current_count <= previous:
            if current_count < previous:
                logger.debug("Rep count went from %d to %d, re-baselining", previous, current_count)
            return False

        self.state.rep_count += current_count - previous
        self.arbiter.submit(FeedbackCandidate.affirming(self.config.rep_message, now))
        return True


@dataclass
class _Threshold:
    joints: Tuple[str, str, str]
    above: Optional[float] = None
    below: Optional[float] = None

    @classmethod
    def from_config(cls, config: Mapping[str, Any]) -> "_Threshold":
        return cls(tuple(config["joints"]), config.get("above"), config.get("below"))

    def crossed(self, frame: KeypointFrame) -> Optional[bool]:
        """None when the angle cannot be measured on this frame."""
        if not frame.has_all(self.joints):
            return None
        angle = angle_at_joint(*(frame.get(j) for j in self.joints))
        if angle is None:
            return None
        if self.above is not None and angle > self.above:
            return True
        if self.below is not None and angle < self.below:
            return True
        return False


class AngleRepCounter:
    """
    Online repetition counter over joint angles.

    A rep is counted when the count threshold is crossed after the arm
    threshold was crossed (e.g. standing tall, then squatting below 100
    degrees at the knee). Frames where either angle is unavailable leave the
    counter untouched.
    """

    def __init__(self, arm: _Threshold, count: _Threshold):
        self.arm = arm
        self.count = count
        self.armed = False
        self.rep_count = 0

    @classmethod
    def for_exercise(cls, exercise_id: Optional[str]) -> Optional["AngleRepCounter"]:
        config = REP_COUNTER_CONFIG.get(exercise_id or "")
        if config is None:
            return None
        return cls(_Threshold.from_config(config["arm"]), _Threshold.from_config(config["count"]))

    def update(self, frame: KeypointFrame) -> int:
        """Feed one frame and return the cumulative rep count."""
        if not self.armed:
            if self.arm.crossed(frame):
                self.armed = True
        elif self.count.crossed(frame):
            self.armed = False
            self.rep_count += 1
        return self.rep_count
