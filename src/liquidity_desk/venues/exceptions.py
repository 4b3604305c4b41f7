"""Custom exceptions for venue access."""

from __future__ import annotations


class VenueError(Exception):
    """Base exception for venue errors."""


class VenueUnavailableError(VenueError):
    """A venue could not serve a request (down, maintenance, transport failure)."""

    def __init__(self, venue: str, message: str = "Venue unavailable") -> None:
        self.venue = venue
        self.message = message
        super().__init__(f"{venue}: {message}")


class RegistryConfigurationError(VenueError):
    """The venue registry is misconfigured (empty, duplicate venues).

    Raised at startup only; a running desk never sees this.
    """
