"""Fast spin: long outer-track run before the drop"""

SCRIPT = {
    "ball": {
        "decay_coefficient":  0.25,
        "drop_threshold":     100.0,
        "stopping_threshold": 5.0,
    },
    "spin": {
        "velocity":       950.0,   # deg/s
        "wheel_velocity":  35.0,
        "position":         0.0,
        "wheel_rotation":   0.0,
    },
}
