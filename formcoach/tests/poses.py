"""Hand-built side-view poses shared by the tests."""


def landmarks(points, score=0.9):
    """{"left_hip": (x, y), ...} -> inbound keypoint list."""
    return [{"name": name, "x": x, "y": y, "score": score} for name, (x, y) in points.items()]


# Side view, y grows downwards. Knee bent to 90 degrees, hip angle 160 degrees.
GOOD_SQUAT = {
    "left_shoulder": (-2.0, -0.364),
    "left_hip": (-1.0, 0.0),
    "left_knee": (0.0, 0.0),
    "left_ankle": (0.0, 1.0),
}

# Knee straight (180 degrees).
STANDING = {
    "left_shoulder": (0.0, 0.0),
    "left_hip": (0.0, 1.0),
    "left_knee": (0.0, 2.0),
    "left_ankle": (0.0, 3.0),
}

# Knee at 90 degrees, torso folded to 90 degrees over the thigh.
ROUNDED_BACK = dict(GOOD_SQUAT, left_shoulder=(-1.0, -1.0))
