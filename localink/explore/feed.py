from __future__ import annotations

import logging
import threading
from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field
from typing import Protocol

from ..directory.models import BusinessRecord
from ..geo.distance import Coordinate
from .ranker import merge_businesses

logger = logging.getLogger(__name__)


class NearbyFetcher(Protocol):
    def fetch_nearby(self, lat: float, lng: float, radius_km: float) -> list[BusinessRecord]: ...


@dataclass(frozen=True)
class FetchTicket:
    """Parameters of one remote fetch, tagged with the generation that issued it."""

    generation: int
    center: Coordinate
    radius_km: float


@dataclass(frozen=True)
class RemoteBatch:
    ticket: FetchTicket
    businesses: Sequence[BusinessRecord] = field(default_factory=tuple)


def fetch_nearby_or_empty(
    fetcher: NearbyFetcher | None, center: Coordinate, radius_km: float,
) -> tuple[list[BusinessRecord], bool]:
    """
    Call the remote collaborator, degrading to an empty list on any failure.

    Returns ``(businesses, ok)``.
    """
    if fetcher is None:
        return [], False
    try:
        return list(fetcher.fetch_nearby(center.lat, center.lng, radius_km)), True
    except Exception:
        logger.warning(
            "Nearby fetch failed for (%s, %s) r=%skm, continuing with local data",
            center.lat, center.lng, radius_km, exc_info=True,
        )
        return [], False


class ExploreFeed:
    """
    Displayed business list plus the generation of the latest remote request.

    ``request()`` is called whenever the location or radius changes; a batch
    is merged by ``apply()`` only if its ticket is still the latest one.
    The check only helps a caller that keeps one feed alive across requests;
    a feed built per request sees a single ticket.
    """

    def __init__(self, local: Iterable[BusinessRecord] = ()) -> None:
        self._businesses: list[BusinessRecord] = list(local)
        self._generation = 0
        self._current: FetchTicket | None = None
        self._lock = threading.Lock()

    @property
    def businesses(self) -> list[BusinessRecord]:
        with self._lock:
            return list(self._businesses)

    @property
    def generation(self) -> int:
        return self._generation

    def request(self, center: Coordinate, radius_km: float) -> FetchTicket:
        with self._lock:
            self._generation += 1
            self._current = FetchTicket(self._generation, center, radius_km)
            return self._current

    def is_current(self, ticket: FetchTicket) -> bool:
        with self._lock:
            return self._current is not None and ticket == self._current

    def apply(self, batch: RemoteBatch) -> bool:
        """Merge *batch* if it answers the latest request. Returns whether it was applied."""
        with self._lock:
            if self._current is None or batch.ticket != self._current:
                logger.debug(
                    "Discarding stale batch (generation %d, current %s)",
                    batch.ticket.generation,
                    self._current.generation if self._current else None,
                )
                return False
            self._businesses = merge_businesses(self._businesses, batch.businesses)
            return True

    def refresh(self, fetcher: NearbyFetcher | None, center: Coordinate, radius_km: float) -> bool:
        """Issue a request, fetch and apply it. Returns whether the fetch succeeded."""
        ticket = self.request(center, radius_km)
        businesses, ok = fetch_nearby_or_empty(fetcher, center, radius_km)
        self.apply(RemoteBatch(ticket=ticket, businesses=businesses))
        return ok
