from datetime import datetime, timedelta, timezone
from typing import Dict, Optional
from urllib.parse import urlencode
import logging

import requests

from ..config import HORIZONS_URL
from ..errors import HorizonsError
from .quantities import EphemType, Quantities, HorizonsRequestVectorTable

logger = logging.getLogger(__name__)

# Barycentric ecliptic J2000 frame for vector tables
VECTOR_CENTER = "@0"
# Geocentric observer for observer tables
GEOCENTRIC_OBSERVER = "500@399"


def format_horizons_time(dt: datetime) -> str:
    """Format a datetime the way the Horizons API 1.2 accepts it.

    The API treats a space between date and time as two separate constants,
    so an ISO-style "T" separator is used.
    """
    dt = dt.astimezone(timezone.utc)
    return dt.strftime("%Y-%m-%dT%H:%M")


class HorizonsRequest:
    """A single request to the JPL Horizons API."""

    def __init__(
        self,
        command: str,
        ephem_type: EphemType = EphemType.VECTORS,
        start_time: Optional[datetime] = None,
        window: timedelta = timedelta(hours=1),
        quantities: Optional[Quantities] = None,
        base_url: str = HORIZONS_URL,
        timeout: float = 30.0,
    ) -> None:
        """Initialize a Horizons request.

        Args:
            command: Horizons body id (e.g. "499" for Mars)
            ephem_type: VECTORS or OBSERVER
            start_time: Start of the requested window. Defaults to now (UTC).
            window: Length of the requested window
            quantities: Quantities for OBSERVER requests
            base_url: Horizons API endpoint
            timeout: Socket timeout in seconds
        """
        self.command = command
        self.ephem_type = ephem_type
        self.start_time = start_time or datetime.now(timezone.utc)
        self.stop_time = self.start_time + window
        self.quantities = quantities or Quantities()
        self.base_url = base_url
        self.timeout = timeout

    def get_params(self) -> Dict[str, str]:
        """Get query parameters for the request.

        Returns:
            Dict[str, str]: Parameters
        """
        params = {
            "format": "json",
            "COMMAND": self.command,
            "EPHEM_TYPE": self.ephem_type.value,
            "START_TIME": format_horizons_time(self.start_time),
            "STOP_TIME": format_horizons_time(self.stop_time),
            # "1 d" is rejected by the current API
            "STEP_SIZE": "1d",
            "CSV_FORMAT": "YES",
        }
        if self.ephem_type == EphemType.VECTORS:
            params.update(
                {
                    "CENTER": VECTOR_CENTER,
                    "REF_PLANE": "ECLIPTIC",
                    "REF_SYSTEM": "J2000",
                    "OUT_UNITS": "AU-D",
                    "VEC_TABLE": str(HorizonsRequestVectorTable.STATE_VECTOR.value),
                }
            )
        else:
            params["CENTER"] = GEOCENTRIC_OBSERVER
            params["QUANTITIES"] = self.quantities.to_string()
        return params

    @property
    def reference_frame(self) -> str:
        return "J2000-ECLIPTIC"

    def get_url(self) -> str:
        """Get URL for request.

        Returns:
            str: URL for request
        """

        def quote_except_quotes(x: str, *args: str) -> str:
            """Quote URL component, preserving single quotes."""
            if x == "'":
                return x
            return urlencode({"": x}, safe="'")[1:]

        return f"{self.base_url}?{urlencode(self.get_params(), quote_via=quote_except_quotes)}"

    def make_request(self) -> str:
        """Make request to Horizons API.

        Returns:
            str: The ephemeris text (the `result` field of the JSON reply)

        Raises:
            HorizonsError: On transport errors, HTTP errors, or an API error reply
        """
        url = self.get_url()
        logger.debug(f"Request URL: {url}")

        try:
            response = requests.get(url, timeout=self.timeout)
        except requests.RequestException as e:
            raise HorizonsError(f"Horizons request failed: {e}") from e

        try:
            data = response.json()
        except ValueError:
            data = None

        if isinstance(data, dict) and data.get("error"):
            raise HorizonsError(f"Horizons error: {data['error']}")

        try:
            response.raise_for_status()
        except requests.HTTPError as e:
            raise HorizonsError(f"Horizons HTTP {response.status_code}") from e

        if isinstance(data, dict):
            result = data.get("result")
            if not isinstance(result, str) or not result:
                raise HorizonsError("Empty or invalid Horizons response")
            return result
        if not response.text:
            raise HorizonsError("Empty or invalid Horizons response")
        return response.text
