"""
Kinematic utilities for FormCoach.

Implements:
- Planar joint angle computation (dot product / magnitude formula)
- Frame-to-frame landmark movement check (jitter detection)

Everything here is pure: no session state is read or written.
"""

import math
from typing import Mapping, Optional, Sequence

import numpy as np

# Vectors shorter than this are treated as zero length
MIN_VECTOR_NORM = 1e-9


def _as_point(p) -> Optional[np.ndarray]:
    """Coerce a landmark-like object, mapping or (x, y) pair into a 2D array."""
    if p is None:
        return None
    if hasattr(p, "x") and hasattr(p, "y"):
        coords = (p.x, p.y)
    elif isinstance(p, Mapping):
        coords = (p.get("x"), p.get("y"))
    else:
        coords = tuple(p)[:2]
    try:
        point = np.array(coords, dtype=float)
    except (TypeError, ValueError):
        return None
    if point.shape != (2,) or not np.all(np.isfinite(point)):
        return None
    return point


def angle_at_joint(a, b, c) -> Optional[float]:
    """
    Compute the angle at joint b formed by points a-b-c.

    Args:
        a, b, c: 2D points, either (x, y) pairs or objects exposing x/y.
            b is the vertex.

    Returns:
        Angle in degrees in [0, 180], or None when the geometry cannot be
        evaluated (non-finite coordinates or a zero-length limb vector).
    """
    pa, pb, pc = _as_point(a), _as_point(b), _as_point(c)
    if pa is None or pb is None or pc is None:
        return None

    ba = pa - pb
    bc = pc - pb
    norm_ba = np.linalg.norm(ba)
    norm_bc = np.linalg.norm(bc)
    if norm_ba < MIN_VECTOR_NORM or norm_bc < MIN_VECTOR_NORM:
        return None

    cosine = np.dot(ba, bc) / (norm_ba * norm_bc)
    return float(np.degrees(np.arccos(np.clip(cosine, -1.0, 1.0))))


def landmarks_moved(
    previous: Optional[Mapping[str, Sequence[float]]],
    current: Optional[Mapping[str, Sequence[float]]],
    threshold: float,
) -> bool:
    """
    Return True if any landmark present in both frames moved further than
    `threshold` (normalized image units) between the two frames.

    Frames are name -> (x, y) mappings. A missing previous frame never
    counts as movement.
    """
    if not previous or not current:
        return False
    for name, point in current.items():
        before = previous.get(name)
        if before is None:
            continue
        if math.hypot(point[0] - before[0], point[1] - before[1]) > threshold:
            return True
    return False
