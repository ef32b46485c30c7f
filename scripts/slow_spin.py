"""Slow spin: the ball drops almost immediately"""

SCRIPT = {
    "ball": {
        "decay_coefficient":  0.3,
        "drop_threshold":     120.0,
    },
    "wheel": {
        "fret_inner_radius":  0.8,
        "fret_outer_radius":  1.0,
    },
    "spin": {
        "velocity":       180.0,
        "wheel_velocity":  10.0,
        "position":        45.0,
    },
}
