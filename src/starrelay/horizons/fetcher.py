"""Asynchronous state-vector fetchers used by the caches."""

import asyncio
from abc import ABC, abstractmethod
from typing import Optional

from ..catalog import BodyDescriptor
from ..ephemeris import StateVector
from .client import HorizonsClient


class StateVectorFetcher(ABC):
    """
    Asynchronous source of state vectors.

    The caches only depend on this contract: given a body, return its state
    vector or raise.
    """

    @abstractmethod
    async def fetch(
        self,
        body: BodyDescriptor,
        include_observer: bool = False,
        correlation_id: Optional[str] = None,
    ) -> StateVector:
        """Fetch one body's current state vector."""
        pass

    async def close(self) -> None:
        """Release any resources held by the fetcher."""
        return None


class HorizonsStateVectorFetcher(StateVectorFetcher):
    """Runs the blocking HorizonsClient in a worker thread."""

    def __init__(self, client: Optional[HorizonsClient] = None):
        self.client = client or HorizonsClient()

    async def fetch(
        self,
        body: BodyDescriptor,
        include_observer: bool = False,
        correlation_id: Optional[str] = None,
    ) -> StateVector:
        return await asyncio.to_thread(
            self.client.fetch_state_vector,
            body.horizons_id,
            body.display_name,
            include_observer,
            correlation_id,
        )
