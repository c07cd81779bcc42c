# Per-exercise posture rules, evaluated in order on every keypoint frame.
#
# Each rule lists its angle checks. An angle is measured at the middle
# landmark of "joints". A check fails when the angle is "above" v_max or
# "below" v_min (or outside both when both are given). The first failing
# check of the first failing rule supplies the corrective message.
POSTURE_RULES_CONFIG = {
    "squat": [
        {
            "name": "squat_form",
            "description": "Squat depth and back posture, measured on the left side.",
            "checks": [
                {
                    "angle": "knee",
                    "joints": ("left_hip", "left_knee", "left_ankle"),
                    "v_max": 160,
                    "message": "Go deeper into the squat",
                },
                {
                    "angle": "back",
                    "joints": ("left_shoulder", "left_hip", "left_knee"),
                    "v_min": 150,
                    "message": "Keep your back straight",
                },
            ],
        },
    ],
    "push_up": [
        {
            "name": "body_line",
            "description": "Shoulders, hips and ankles should stay in one line.",
            "checks": [
                {
                    "angle": "hip",
                    "joints": ("left_shoulder", "left_hip", "left_ankle"),
                    "v_min": 160,
                    "message": "Keep your body in a straight line",
                },
            ],
        },
    ],
    "plank": [
        {
            "name": "hip_alignment",
            "description": "Hips sagging or piking out of the shoulder-ankle line.",
            "checks": [
                {
                    "angle": "hip",
                    "joints": ("left_shoulder", "left_hip", "left_ankle"),
                    "v_min": 165,
                    "message": "Keep your hips in line with your shoulders",
                },
            ],
        },
        {
            "name": "elbow_stack",
            "description": "Forearm plank: elbows stacked under the shoulders.",
            "checks": [
                {
                    "angle": "elbow",
                    "joints": ("left_shoulder", "left_elbow", "left_wrist"),
                    "v_min": 70,
                    "v_max": 110,
                    "message": "Keep your elbows under your shoulders",
                },
            ],
        },
    ],
    "lunge": [
        {
            "name": "front_knee_depth",
            "description": "Front knee should bend towards 90 degrees.",
            "checks": [
                {
                    "angle": "knee",
                    "joints": ("left_hip", "left_knee", "left_ankle"),
                    "v_max": 120,
                    "message": "Bend your front knee more",
                },
            ],
        },
        {
            "name": "torso_upright",
            "description": "Torso stays upright over the rear hip.",
            "checks": [
                {
                    "angle": "hip",
                    "joints": ("right_shoulder", "right_hip", "right_knee"),
                    "v_min": 150,
                    "message": "Keep your torso upright",
                },
            ],
        },
    ],
    "bicep_curl": [
        {
            "name": "elbow_drift",
            "description": "Upper arm stays pinned to the torso during the curl.",
            "checks": [
                {
                    "angle": "shoulder",
                    "joints": ("right_hip", "right_shoulder", "right_elbow"),
                    "v_max": 35,
                    "message": "Keep your elbow close to your body",
                },
            ],
        },
    ],
}
