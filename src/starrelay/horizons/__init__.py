"""Horizons module for fetching state vectors from the JPL Horizons system."""

from .client import HorizonsClient
from .fetcher import StateVectorFetcher, HorizonsStateVectorFetcher
from .quantities import EphemType, Quantities, HorizonsRequestObserverQuantities
from .request import HorizonsRequest

__all__ = [
    "HorizonsClient",
    "StateVectorFetcher",
    "HorizonsStateVectorFetcher",
    "EphemType",
    "Quantities",
    "HorizonsRequestObserverQuantities",
    "HorizonsRequest",
]
