"""Parser modules for JPL Horizons API responses."""

from .observer import ObserverParser
from .vectors import VectorsParser, VectorQuantity, VectorRow

__all__ = [
    "ObserverParser",
    "VectorsParser",
    "VectorQuantity",
    "VectorRow",
]
