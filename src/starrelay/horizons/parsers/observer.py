"""Parser for OBSERVER type Horizons responses."""

from typing import Dict, List, Optional

from .base import BaseHorizonsParser

# Column index of each observer field when QUANTITIES='1,9,10,20,21,23,24':
# Date, (sol), (lun), R.A., DEC, APmag, S-brt, Illu%, delta, deldot,
# 1-way_LT, S-O-T, /r, S-T-O
_COLUMNS = {
    "apparent_magnitude": 5,
    "illumination_fraction": 7,
    "range_au": 8,
    "range_rate_km_s": 9,
    "light_time_minutes": 10,
    "solar_elongation_deg": 11,
    "phase_angle_deg": 13,
}

ObserverRow = Dict[str, Optional[float]]


class ObserverParser(BaseHorizonsParser[ObserverRow]):
    """Parser for OBSERVER type Horizons responses.

    The response format is:
    *******************************************************************************
    ... metadata ...
    *******************************************************************************
    $$SOE
    2025-Mar-19 20:00, , , 81.50141, 24.79052, 1.057, 4.887, 92.46, 1.0256, ...
    $$EOE
    *******************************************************************************
    """

    @property
    def table_name(self) -> str:
        return "OBSERVER"

    def parse(self) -> List[ObserverRow]:
        rows = []
        for line in self._extract_data_lines():
            fields = self._split_csv(line)
            row: ObserverRow = {}
            for name, index in _COLUMNS.items():
                row[name] = self._to_float(fields[index]) if len(fields) > index else None
            if row["illumination_fraction"] is not None:
                # Horizons reports a percentage
                row["illumination_fraction"] = row["illumination_fraction"] / 100.0
            rows.append(row)
        return rows
