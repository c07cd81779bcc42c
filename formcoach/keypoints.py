"""Keypoint frame adapter: raw landmark lists -> confidence-filtered lookup."""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import Any, Dict, Iterable, Iterator, Mapping, Optional, Tuple

logger = logging.getLogger(__name__)

DEFAULT_MIN_CONFIDENCE = 0.5

# BlazePose / MediaPipe pose landmark order (33 points)
LANDMARK_NAMES = (
    "nose",
    "left_eye_inner",
    "left_eye",
    "left_eye_outer",
    "right_eye_inner",
    "right_eye",
    "right_eye_outer",
    "left_ear",
    "right_ear",
    "mouth_left",
    "mouth_right",
    "left_shoulder",
    "right_shoulder",
    "left_elbow",
    "right_elbow",
    "left_wrist",
    "right_wrist",
    "left_pinky",
    "right_pinky",
    "left_index",
    "right_index",
    "left_thumb",
    "right_thumb",
    "left_hip",
    "right_hip",
    "left_knee",
    "right_knee",
    "left_ankle",
    "right_ankle",
    "left_heel",
    "right_heel",
    "left_foot_index",
    "right_foot_index",
)

JOINT_INDICES: Dict[str, int] = {name: idx for idx, name in enumerate(LANDMARK_NAMES)}


def normalize_name(name: str) -> str:
    """'Left Hip', 'LEFT_HIP' and 'left-hip' all map to 'left_hip'."""
    return "_".join(name.strip().lower().replace("-", " ").replace("_", " ").split())


@dataclass(frozen=True)
class Landmark:
    """A single named 2D keypoint. Only valid within the frame that produced it."""

    name: str
    x: float
    y: float
    confidence: float

    @classmethod
    def from_raw(cls, raw: Any, position: int) -> Optional["Landmark"]:
        """
        Build a landmark from one entry of an inbound keypoint list.

        Accepts {"name", "x", "y", "score"}; falls back to "visibility" for the
        confidence and to the index order for the name. Returns None for
        entries that cannot be interpreted.
        """
        if not isinstance(raw, Mapping):
            return None

        name = raw.get("name")
        name = normalize_name(name) if isinstance(name, str) else ""
        if not name:
            index = raw.get("index", position)
            if isinstance(index, bool) or not isinstance(index, int):
                return None
            if not 0 <= index < len(LANDMARK_NAMES):
                return None
            name = LANDMARK_NAMES[index]

        confidence = raw.get("score", raw.get("visibility"))
        try:
            x = float(raw["x"])
            y = float(raw["y"])
            confidence = float(confidence)
        except (KeyError, TypeError, ValueError):
            return None
        if not (math.isfinite(x) and math.isfinite(y) and math.isfinite(confidence)):
            return None

        return cls(name, x, y, confidence)


class KeypointFrame:
    """
    Name-keyed view of one frame, restricted to confident landmarks.

    Lookups for absent or low-confidence landmarks return None. There is
    no fallback to earlier frames or default coordinates.
    """

    def __init__(self, landmarks: Mapping[str, Landmark]):
        self._landmarks = dict(landmarks)

    @classmethod
    def from_raw(
        cls,
        raw_landmarks: Iterable[Any],
        min_confidence: float = DEFAULT_MIN_CONFIDENCE,
    ) -> "KeypointFrame":
        accepted: Dict[str, Landmark] = {}
        dropped = 0
        for position, raw in enumerate(raw_landmarks):
            landmark = Landmark.from_raw(raw, position)
            if landmark is None or landmark.confidence <= min_confidence:
                dropped += 1
                continue
            accepted[landmark.name] = landmark
        if dropped:
            logger.debug("Dropped %d unusable landmarks from frame", dropped)
        return cls(accepted)

    def get(self, name: str) -> Optional[Landmark]:
        return self._landmarks.get(normalize_name(name))

    def has_all(self, names: Iterable[str]) -> bool:
        return all(self.get(name) is not None for name in names)

    def points(self) -> Dict[str, Tuple[float, float]]:
        """Plain name -> (x, y) snapshot, used for frame-to-frame comparisons."""
        return {name: (lm.x, lm.y) for name, lm in self._landmarks.items()}

    def __contains__(self, name: str) -> bool:
        return self.get(name) is not None

    def __iter__(self) -> Iterator[str]:
        return iter(self._landmarks)

    def __len__(self) -> int:
        return len(self._landmarks)
