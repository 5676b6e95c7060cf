"""Parser for VECTORS type Horizons responses."""

import re
from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from typing import Dict, List, Optional

from ...errors import HorizonsError
from ...space_time import SECONDS_PER_DAY, datetime_from_julian, iso_utc
from .base import BaseHorizonsParser

AU_IN_KM = 149597870.7


class VectorQuantity(Enum):
    X = "X"
    Y = "Y"
    Z = "Z"
    VX = "VX"
    VY = "VY"
    VZ = "VZ"


# CSV column index of each quantity when VEC_TABLE=2
_CSV_COLUMNS = {
    VectorQuantity.X: 2,
    VectorQuantity.Y: 3,
    VectorQuantity.Z: 4,
    VectorQuantity.VX: 5,
    VectorQuantity.VY: 6,
    VectorQuantity.VZ: 7,
}

_UNITS_RE = re.compile(r"Output units\s*:\s*([^\n]+)")
_CALENDAR_RE = re.compile(r"(\d{4}-[A-Za-z]{3}-\d{2} \d{2}:\d{2}:\d{2}(?:\.\d+)?)")


@dataclass
class VectorRow:
    """One row of a vector table, already converted to AU and AU/day."""

    julian_date: Optional[float]
    timestamp: Optional[str]
    values: Dict[VectorQuantity, float]


class VectorsParser(BaseHorizonsParser[VectorRow]):
    """Parser for VECTORS type Horizons responses.

    Handles the CSV layout (JDTDB, Calendar Date, X, Y, Z, VX, VY, VZ) as well
    as the older labelled layout:

        2460754.333333333 = A.D. 2025-Mar-19 20:00:00.0000 TDB
         X = 1.3E+00 Y =-2.1E-01 Z =-3.6E-02
         VX= 2.0E-03 VY= 1.4E-02 VZ= 2.5E-04
    """

    @property
    def table_name(self) -> str:
        return "VECTORS"

    def output_units(self) -> str:
        """Position unit declared in the response header: "AU" or "KM"."""
        match = _UNITS_RE.search(self.response_text)
        if match and "KM" in match.group(1).upper():
            return "KM"
        return "AU"

    def parse(self) -> List[VectorRow]:
        lines = self._extract_data_lines()
        if not lines:
            return []
        if re.search(r"(?<![A-Z])X\s*=", "\n".join(lines)):
            rows = [self._parse_labelled(lines)]
        else:
            rows = [self._parse_csv(line) for line in lines]
        return [self._convert_units(row) for row in rows]

    def _parse_csv(self, line: str) -> VectorRow:
        fields = self._split_csv(line)
        values: Dict[VectorQuantity, float] = {}
        for quantity, index in _CSV_COLUMNS.items():
            value = self._to_float(fields[index]) if len(fields) > index else None
            if value is not None:
                values[quantity] = value
        self._require_position(values)
        jd = self._to_float(fields[0])
        calendar = fields[1] if len(fields) > 1 else None
        return VectorRow(jd, self._timestamp(calendar, jd), values)

    def _parse_labelled(self, lines: List[str]) -> VectorRow:
        block = "\n".join(lines)
        values: Dict[VectorQuantity, float] = {}
        for quantity in VectorQuantity:
            match = re.search(
                rf"(?<![A-Z]){quantity.value}\s*=\s*([-+\d.Ee]+)", block
            )
            if match:
                value = self._to_float(match.group(1))
                if value is not None:
                    values[quantity] = value
        self._require_position(values)
        jd = self._to_float(lines[0].split("=")[0].strip())
        return VectorRow(jd, self._timestamp(lines[0], jd), values)

    @staticmethod
    def _require_position(values: Dict[VectorQuantity, float]) -> None:
        missing = [
            q.value
            for q in (VectorQuantity.X, VectorQuantity.Y, VectorQuantity.Z)
            if q not in values
        ]
        if missing:
            raise HorizonsError(
                f"Missing {'/'.join(missing)} coordinates in Horizons response"
            )

    @staticmethod
    def _timestamp(calendar: Optional[str], jd: Optional[float]) -> Optional[str]:
        if calendar:
            match = _CALENDAR_RE.search(calendar)
            if match:
                text = match.group(1)
                fmt = "%Y-%b-%d %H:%M:%S.%f" if "." in text else "%Y-%b-%d %H:%M:%S"
                try:
                    dt = datetime.strptime(text, fmt).replace(tzinfo=timezone.utc)
                    return iso_utc(dt)
                except ValueError:
                    pass
        if jd is not None:
            return iso_utc(datetime_from_julian(jd))
        return None

    def _convert_units(self, row: VectorRow) -> VectorRow:
        if self.output_units() != "KM":
            return row
        converted: Dict[VectorQuantity, float] = {}
        for quantity, value in row.values.items():
            if quantity in (VectorQuantity.VX, VectorQuantity.VY, VectorQuantity.VZ):
                # km/s -> AU/day
                converted[quantity] = value * SECONDS_PER_DAY / AU_IN_KM
            else:
                converted[quantity] = value / AU_IN_KM
        return VectorRow(row.julian_date, row.timestamp, converted)
