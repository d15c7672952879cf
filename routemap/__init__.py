"""Interactive route/station maps from a CSV and a KML."""

__version__ = "0.1.0"
