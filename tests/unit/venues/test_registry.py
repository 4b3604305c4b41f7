"""Tests for VenueRegistry."""

from __future__ import annotations

import pytest

from liquidity_desk.venues import RegistryConfigurationError, VenueError, VenueRegistry
from liquidity_desk.venues.models import VenueId


def test_registry_preserves_registration_order(make_venue) -> None:
    clients = [make_venue(VenueId.BINANCE), make_venue(VenueId.BITBANK), make_venue(VenueId.OKX)]
    registry = VenueRegistry(clients)

    assert list(registry) == [VenueId.BINANCE, VenueId.BITBANK, VenueId.OKX]
    assert len(registry) == 3
    assert registry[VenueId.BITBANK] is clients[1]
    assert VenueId.OKX in registry
    assert VenueId.BYBIT not in registry


def test_registry_rejects_empty() -> None:
    with pytest.raises(RegistryConfigurationError):
        VenueRegistry([])


def test_registry_rejects_duplicates(make_venue) -> None:
    with pytest.raises(RegistryConfigurationError, match="bitbank"):
        VenueRegistry([make_venue(VenueId.BITBANK), make_venue(VenueId.BITBANK)])


def test_registry_error_is_venue_error() -> None:
    assert issubclass(RegistryConfigurationError, VenueError)


def test_registry_is_read_only(make_venue) -> None:
    registry = VenueRegistry([make_venue(VenueId.BITBANK)])
    with pytest.raises(TypeError):
        registry[VenueId.OKX] = make_venue(VenueId.OKX)  # type: ignore[index]
