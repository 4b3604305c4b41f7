"""Read-only registry of venue clients, built once at startup."""

from __future__ import annotations

from collections.abc import Iterator, Mapping
from types import MappingProxyType
from typing import TYPE_CHECKING

import structlog

from liquidity_desk.venues.exceptions import RegistryConfigurationError

if TYPE_CHECKING:
    from collections.abc import Iterable

    from liquidity_desk.venues.client import VenueClient
    from liquidity_desk.venues.models import VenueId

logger = structlog.get_logger()


class VenueRegistry(Mapping["VenueId", "VenueClient"]):
    """
    Immutable mapping of VenueId -> VenueClient.

    Iteration order is registration order, which is also the tie-break order used by venue
    selection. Adding a venue means registering another client, never branching on identity.
    """

    def __init__(self, clients: Iterable[VenueClient]) -> None:
        registered: dict[VenueId, VenueClient] = {}
        for client in clients:
            venue = client.venue_id
            if venue in registered:
                raise RegistryConfigurationError(
                    f"Duplicate venue client registered: {venue.value}"
                )
            registered[venue] = client

        if not registered:
            raise RegistryConfigurationError("At least one venue client must be registered")

        self._clients: Mapping[VenueId, VenueClient] = MappingProxyType(registered)
        logger.info("venue_registry_initialized", venues=[v.value for v in registered])

    def __getitem__(self, venue: VenueId) -> VenueClient:
        return self._clients[venue]

    def __iter__(self) -> Iterator[VenueId]:
        return iter(self._clients)

    def __len__(self) -> int:
        return len(self._clients)

    def __repr__(self) -> str:
        return f"VenueRegistry({[v.value for v in self._clients]})"
