from .state_vector import (
    StateVector,
    OBSERVER_FIELDS,
    DEFAULT_REFERENCE_FRAME,
    DEFAULT_VELOCITY_UNIT,
    HORIZONS_SOURCE,
)
from .snapshot import Snapshot, BodyEphemeris, DISTANCE_UNIT

__all__ = [
    "StateVector",
    "OBSERVER_FIELDS",
    "DEFAULT_REFERENCE_FRAME",
    "DEFAULT_VELOCITY_UNIT",
    "HORIZONS_SOURCE",
    "Snapshot",
    "BodyEphemeris",
    "DISTANCE_UNIT",
]
