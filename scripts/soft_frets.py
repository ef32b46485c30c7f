"""Soft frets: lower restitution, more friction, configuration only (no spin)"""

SCRIPT = {
    "params": {
        "FRET_RESTITUTION": 0.15,
        "FRET_FRICTION":    0.2,
    },
}
