from dataclasses import dataclass
from enum import Enum
from typing import List, Optional


class EphemType(Enum):
    """Type of ephemeris to generate."""

    OBSERVER = "OBSERVER"
    VECTORS = "VECTORS"


class HorizonsRequestObserverQuantities(Enum):
    """
    Codes accepted by the QUANTITIES parameter of an OBSERVER request.

    Only the columns starrelay reads are listed.
    """

    ASTROMETRIC_RA_DEC = 1
    VISUAL_MAGNITUDE_SURFACE_BRIGHTNESS = 9
    ILLUMINATED_FRACTION = 10
    TARGET_RANGE_RANGE_RATE = 20
    DOWN_LEG_LIGHT_TIME = 21
    SOLAR_ELONGATION_ANGLE = 23
    SUN_TARGET_OBSERVER_ANGLE = 24


class HorizonsRequestVectorTable(Enum):
    """
    Values of the VEC_TABLE parameter for vector ephemeris requests
    """

    POSITION_ONLY = 1
    STATE_VECTOR = 2


# Requested together, these produce the column layout ObserverParser expects.
OBSERVER_GEOMETRY_QUANTITIES = [
    HorizonsRequestObserverQuantities.ASTROMETRIC_RA_DEC.value,
    HorizonsRequestObserverQuantities.VISUAL_MAGNITUDE_SURFACE_BRIGHTNESS.value,
    HorizonsRequestObserverQuantities.ILLUMINATED_FRACTION.value,
    HorizonsRequestObserverQuantities.TARGET_RANGE_RANGE_RATE.value,
    HorizonsRequestObserverQuantities.DOWN_LEG_LIGHT_TIME.value,
    HorizonsRequestObserverQuantities.SOLAR_ELONGATION_ANGLE.value,
    HorizonsRequestObserverQuantities.SUN_TARGET_OBSERVER_ANGLE.value,
]


@dataclass
class Quantities:
    """A collection of quantities to request from Horizons."""

    values: List[int]

    def __init__(self, values: Optional[List[int]] = None) -> None:
        """Initialize quantities.

        Args:
            values: List of quantity codes to request
        """
        self.values = list(values) if values is not None else list(
            OBSERVER_GEOMETRY_QUANTITIES
        )

    def to_string(self) -> str:
        """Convert quantities to string format for Horizons API.
        If there are multiple quantities, they will be quoted.

        Returns:
            str: Comma-separated list of quantity codes, quoted if multiple
        """
        quantities_str = ",".join(str(v) for v in sorted(set(self.values)))
        if len(set(self.values)) > 1:
            quantities_str = f"'{quantities_str}'"
        return quantities_str
