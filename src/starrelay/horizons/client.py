"""Horizons client implementation."""

import logging
import time
from datetime import datetime, timezone
from typing import Optional

from ..config import HORIZONS_URL
from ..ephemeris import DEFAULT_VELOCITY_UNIT, HORIZONS_SOURCE, StateVector
from ..space_time import iso_utc
from .parsers import ObserverParser, VectorQuantity, VectorsParser
from .quantities import EphemType, Quantities
from .request import HorizonsRequest

logger = logging.getLogger(__name__)


class HorizonsClient:
    """Fetches normalized state vectors from the Horizons API.

    Each call is one blocking round-trip per table (vectors, plus observer
    geometry when requested).
    """

    def __init__(self, base_url: str = HORIZONS_URL, timeout: float = 30.0):
        """Initialize the client.

        Args:
            base_url: Horizons API endpoint
            timeout: Per-request socket timeout in seconds
        """
        self.base_url = base_url
        self.timeout = timeout

    def fetch_state_vector(
        self,
        horizons_id: str,
        name: str,
        include_observer: bool = False,
        correlation_id: Optional[str] = None,
        now: Optional[datetime] = None,
    ) -> StateVector:
        """Get the current state vector of one body.

        Args:
            horizons_id: Horizons COMMAND value (e.g. "499")
            name: Name to put on the returned vector
            include_observer: Also fetch geocentric observer geometry
            correlation_id: Request id carried into log lines
            now: Start of the requested window. Defaults to now (UTC).

        Returns:
            The state vector at the first epoch of the window

        Raises:
            HorizonsError: If the request fails or the response is unusable
        """
        started = time.monotonic()
        now = now or datetime.now(timezone.utc)

        vectors_request = HorizonsRequest(
            horizons_id,
            ephem_type=EphemType.VECTORS,
            start_time=now,
            base_url=self.base_url,
            timeout=self.timeout,
        )
        try:
            row = VectorsParser(vectors_request.make_request()).first()
            vector = StateVector(
                name=name,
                x_au=row.values[VectorQuantity.X],
                y_au=row.values[VectorQuantity.Y],
                z_au=row.values[VectorQuantity.Z],
                vx=row.values.get(VectorQuantity.VX),
                vy=row.values.get(VectorQuantity.VY),
                vz=row.values.get(VectorQuantity.VZ),
                velocity_unit=DEFAULT_VELOCITY_UNIT,
                reference_frame=vectors_request.reference_frame,
                source=HORIZONS_SOURCE,
                timestamp=row.timestamp or iso_utc(now),
            )

            if include_observer:
                observer_request = HorizonsRequest(
                    horizons_id,
                    ephem_type=EphemType.OBSERVER,
                    start_time=now,
                    quantities=Quantities(),
                    base_url=self.base_url,
                    timeout=self.timeout,
                )
                observer = ObserverParser(observer_request.make_request()).first()
                vector = vector.with_observer(observer)
        except Exception as e:
            latency_ms = (time.monotonic() - started) * 1000.0
            logger.error(
                f"Error fetching {name} ({horizons_id}) from Horizons after "
                f"{latency_ms:.0f}ms [request {correlation_id}]: {e}"
            )
            raise

        latency_ms = (time.monotonic() - started) * 1000.0
        logger.debug(
            f"Got {name} ({horizons_id}) from Horizons in {latency_ms:.0f}ms "
            f"[request {correlation_id}]"
        )
        return vector
