"""Exceptions raised while loading the map sources."""

from __future__ import annotations

from typing import Optional


class RouteMapError(Exception):
    """Base class for every error this package raises on purpose."""


class SourceError(RouteMapError):
    """A source could not be fetched or read."""

    def __init__(self, location: str, reason: str, cause: Optional[BaseException] = None):
        super().__init__(f"{location}: {reason}")
        self.location = location
        self.reason = reason
        self.cause = cause


class StationTableError(RouteMapError):
    """The station CSV was read but could not be parsed."""


class GeometryParseError(RouteMapError):
    """The route geometry document is not valid KML/GeoJSON."""
