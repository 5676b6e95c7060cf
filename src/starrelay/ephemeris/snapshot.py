"""Aggregated payloads built from state vectors."""

from dataclasses import dataclass
from typing import Any, Dict, Optional, Tuple

from .state_vector import (
    DEFAULT_REFERENCE_FRAME,
    DEFAULT_VELOCITY_UNIT,
    HORIZONS_SOURCE,
    StateVector,
)

DISTANCE_UNIT = "AU"


@dataclass(frozen=True)
class Snapshot:
    """State vectors for the whole tracked body set, plus how we got them."""

    timestamp: str
    bodies: Tuple[StateVector, ...]
    reference_frame: str = DEFAULT_REFERENCE_FRAME
    velocity_unit: str = DEFAULT_VELOCITY_UNIT
    response_time_ms: Optional[float] = None
    fallback_bodies: Tuple[str, ...] = ()
    missing_bodies: Tuple[str, ...] = ()
    source: str = HORIZONS_SOURCE
    generated_at: Optional[str] = None

    @property
    def partial(self) -> bool:
        return bool(self.fallback_bodies or self.missing_bodies)

    def body(self, name: str) -> Optional[StateVector]:
        for vector in self.bodies:
            if vector.name == name:
                return vector
        return None

    def to_dict(self) -> Dict[str, Any]:
        metadata: Dict[str, Any] = {
            "source": self.source,
            "referenceFrame": self.reference_frame,
            "distanceUnit": DISTANCE_UNIT,
            "velocityUnit": self.velocity_unit,
            "partial": self.partial,
        }
        if self.response_time_ms is not None:
            metadata["responseTimeMs"] = self.response_time_ms
        if self.fallback_bodies:
            metadata["fallbackBodies"] = list(self.fallback_bodies)
        if self.missing_bodies:
            metadata["missingBodies"] = list(self.missing_bodies)
        if self.generated_at is not None:
            metadata["generatedAt"] = self.generated_at
        return {
            "timestamp": self.timestamp,
            "metadata": metadata,
            "bodies": [vector.to_dict() for vector in self.bodies],
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Snapshot":
        metadata = data.get("metadata") or {}
        return cls(
            timestamp=data["timestamp"],
            bodies=tuple(StateVector.from_dict(b) for b in data.get("bodies", [])),
            reference_frame=metadata.get("referenceFrame", DEFAULT_REFERENCE_FRAME),
            velocity_unit=metadata.get("velocityUnit", DEFAULT_VELOCITY_UNIT),
            response_time_ms=metadata.get("responseTimeMs"),
            fallback_bodies=tuple(metadata.get("fallbackBodies") or ()),
            missing_bodies=tuple(metadata.get("missingBodies") or ()),
            source=metadata.get("source", HORIZONS_SOURCE),
            generated_at=metadata.get("generatedAt"),
        )


@dataclass(frozen=True)
class BodyEphemeris:
    """One body's state vector as served by the single-body endpoint."""

    id: str
    vector: StateVector
    response_time_ms: Optional[float] = None
    request_id: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        result: Dict[str, Any] = {"id": self.id}
        result.update(self.vector.to_dict())
        # The vector's display name is implied by the id on this endpoint
        result.pop("name", None)
        metadata: Dict[str, Any] = {}
        if self.response_time_ms is not None:
            metadata["responseTimeMs"] = self.response_time_ms
        if self.request_id is not None:
            metadata["requestId"] = self.request_id
        result["metadata"] = metadata
        return result
