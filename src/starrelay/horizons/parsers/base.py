"""Base class for Horizons response parsers."""

from abc import ABC, abstractmethod
from typing import Generic, List, Optional, TypeVar

from ...errors import HorizonsError

T = TypeVar("T")


class BaseHorizonsParser(ABC, Generic[T]):
    """Base class for parsing Horizons API responses.

    Both table types wrap their rows between $$SOE and $$EOE markers; this
    class finds those rows and leaves the column layout to subclasses.

    Args:
        response_text: The ephemeris text returned by the Horizons API
    """

    def __init__(self, response_text: str) -> None:
        """Initialize the parser with response text."""
        self._response_text = response_text
        self._parsed_data: Optional[List[T]] = None

    @property
    def response_text(self) -> str:
        """Get the raw response text."""
        return self._response_text

    @abstractmethod
    def parse(self) -> List[T]:
        """Parse the response text into structured rows.

        Raises:
            HorizonsError: If the response has no usable data block
        """
        pass

    def first(self) -> T:
        """Get the first parsed row.

        Raises:
            HorizonsError: If the response holds no rows
        """
        if self._parsed_data is None:
            self._parsed_data = self.parse()
        if not self._parsed_data:
            raise HorizonsError(f"No rows in Horizons {self.table_name} response")
        return self._parsed_data[0]

    @property
    def table_name(self) -> str:
        return "ephemeris"

    def _extract_data_block(self) -> str:
        """Get the text between $$SOE and $$EOE.

        Raises:
            HorizonsError: If either marker is missing
        """
        text = self.response_text
        start = text.find("$$SOE")
        end = text.find("$$EOE")
        if start == -1 or end == -1 or end <= start:
            raise HorizonsError(
                f"Horizons {self.table_name} response has no $$SOE/$$EOE block"
            )
        return text[start + len("$$SOE") : end]

    def _extract_data_lines(self) -> List[str]:
        """Extract non-empty data lines from the $$SOE/$$EOE block."""
        return [
            line.strip()
            for line in self._extract_data_block().split("\n")
            if line.strip()
        ]

    @staticmethod
    def _split_csv(line: str) -> List[str]:
        return [v.strip() for v in line.split(",")]

    @staticmethod
    def _to_float(value: Optional[str]) -> Optional[float]:
        """Convert a Horizons column value, treating n.a. and blanks as missing."""
        if value is None:
            return None
        try:
            result = float(value)
        except ValueError:
            return None
        if result != result:  # NaN
            return None
        return result
