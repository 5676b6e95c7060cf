from dataclasses import dataclass, fields, replace
from typing import Any, Dict, Optional

DEFAULT_REFERENCE_FRAME = "J2000-ECLIPTIC"
DEFAULT_VELOCITY_UNIT = "AU/day"
HORIZONS_SOURCE = "NASA-JPL-Horizons"

# Attribute name -> JSON key, in output order.
_JSON_KEYS = {
    "name": "name",
    "x_au": "x_au",
    "y_au": "y_au",
    "z_au": "z_au",
    "vx": "vx",
    "vy": "vy",
    "vz": "vz",
    "velocity_unit": "velocityUnit",
    "reference_frame": "referenceFrame",
    "source": "source",
    "timestamp": "timestamp",
    "range_au": "range_au",
    "range_rate_km_s": "range_rate_km_s",
    "light_time_minutes": "light_time_minutes",
    "solar_elongation_deg": "solar_elongation_deg",
    "phase_angle_deg": "phase_angle_deg",
    "illumination_fraction": "illumination_fraction",
    "apparent_magnitude": "apparent_magnitude",
}

OBSERVER_FIELDS = (
    "range_au",
    "range_rate_km_s",
    "light_time_minutes",
    "solar_elongation_deg",
    "phase_angle_deg",
    "illumination_fraction",
    "apparent_magnitude",
)


@dataclass(frozen=True)
class StateVector:
    """
    Position (and optionally velocity) of one body at one instant.

    Positions are in AU relative to the solar system barycenter in the named
    reference frame. Observer geometry is only filled in when the fetch asked
    for it ("full" mode).
    """

    name: str
    x_au: float
    y_au: float
    z_au: float
    vx: Optional[float] = None
    vy: Optional[float] = None
    vz: Optional[float] = None
    velocity_unit: Optional[str] = DEFAULT_VELOCITY_UNIT
    reference_frame: Optional[str] = DEFAULT_REFERENCE_FRAME
    source: Optional[str] = HORIZONS_SOURCE
    timestamp: Optional[str] = None
    range_au: Optional[float] = None
    range_rate_km_s: Optional[float] = None
    light_time_minutes: Optional[float] = None
    solar_elongation_deg: Optional[float] = None
    phase_angle_deg: Optional[float] = None
    illumination_fraction: Optional[float] = None
    apparent_magnitude: Optional[float] = None

    @property
    def has_observer_geometry(self) -> bool:
        return any(getattr(self, name) is not None for name in OBSERVER_FIELDS)

    def with_observer(self, observer: Dict[str, Optional[float]]) -> "StateVector":
        """Return a copy extended with observer geometry fields."""
        known = {k: v for k, v in observer.items() if k in OBSERVER_FIELDS}
        return replace(self, **known)

    def to_dict(self) -> Dict[str, Any]:
        """Client JSON representation; absent fields are omitted."""
        result: Dict[str, Any] = {}
        for attr, key in _JSON_KEYS.items():
            value = getattr(self, attr)
            if value is not None:
                result[key] = value
        return result

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "StateVector":
        """Rebuild a vector from its client JSON representation."""
        by_key = {key: attr for attr, key in _JSON_KEYS.items()}
        kwargs = {by_key[k]: v for k, v in data.items() if k in by_key}
        # Unset optional fields must stay None rather than take class defaults
        for f in fields(cls):
            if f.name not in kwargs and f.name in (
                "velocity_unit",
                "reference_frame",
                "source",
            ):
                kwargs[f.name] = None
        return cls(**kwargs)
