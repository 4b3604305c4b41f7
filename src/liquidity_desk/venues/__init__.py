"""Venue boundary: normalized models, the client protocol and the venue registry."""

from liquidity_desk.venues.client import VenueClient
from liquidity_desk.venues.exceptions import (
    RegistryConfigurationError,
    VenueError,
    VenueUnavailableError,
)
from liquidity_desk.venues.mock import MockVenueClient
from liquidity_desk.venues.models import (
    Balance,
    ComplianceLevel,
    ComplianceStatus,
    OrderBook,
    OrderBookLevel,
    OrderResult,
    OrderSide,
    OrderStatus,
    Trade,
    TradingLimits,
    VenueId,
    VenueRegion,
)
from liquidity_desk.venues.registry import VenueRegistry

__all__ = [
    "Balance",
    "ComplianceLevel",
    "ComplianceStatus",
    "MockVenueClient",
    "OrderBook",
    "OrderBookLevel",
    "OrderResult",
    "OrderSide",
    "OrderStatus",
    "RegistryConfigurationError",
    "Trade",
    "TradingLimits",
    "VenueClient",
    "VenueError",
    "VenueId",
    "VenueRegion",
    "VenueRegistry",
    "VenueUnavailableError",
]
