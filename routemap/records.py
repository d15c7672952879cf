"""Station rows: cell typing, column fallbacks and the typed record."""

from __future__ import annotations

import math
import re
from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Sequence

import pandas as pd


# ----------------------------
# Column fallbacks (tried in order)
# ----------------------------

ROUTE_FIELDS = ("Route",)
LATITUDE_FIELDS = ("Latitude", "lat", "Lat")
LONGITUDE_FIELDS = ("Longitude", "lon", "Lon")
STATION_FIELDS = ("Station", "Station Name")
TOWN_FIELDS = ("Town Name", "Town", "TownName")
ELEVATION_FIELDS = ("Elevation_m", "Elevation (m)")
ROUTE_DISTANCE_FIELDS = ("Route Distance (KM)", "RouteDistanceKM", "Route_Distance_KM")
NEXT_DIST_FIELDS = ("NextDist_km", "NextDist")
PREV_DIST_FIELDS = ("PrevDist_km", "PrevDist")
SEQ_FIELDS = ("StationSeq", "Seq")
LOGO_FIELDS = ("Logo_URL", "logo")

UNKNOWN_ROUTE = "Unknown"

_NUMBER_RE = re.compile(r"^\s*-?(\d+\.?|\.\d+|\d+\.\d+)([eE][-+]?\d+)?\s*$")
_LEADING_FLOAT_RE = re.compile(r"^\s*([-+]?(\d+\.?\d*|\.\d+)([eE][-+]?\d+)?)")


def is_present(value: Any) -> bool:
    if value is None:
        return False
    if isinstance(value, str):
        return value != ""
    if isinstance(value, float) and math.isnan(value):
        return False
    return True


def first_present(row: Mapping[str, Any], fields: Sequence[str]) -> Any:
    """Return the value of the first field in ``fields`` that holds a value, else None."""
    for name in fields:
        value = row.get(name)
        if is_present(value):
            return value
    return None


def coerce_cell(value: Any) -> Any:
    """Type a raw CSV cell: blanks become None, numbers and booleans are converted."""
    if value is None or (not isinstance(value, str) and pd.isna(value)):
        return None
    if not isinstance(value, str):
        return value
    if value == "":
        return None
    lowered = value.strip().lower()
    if lowered == "true":
        return True
    if lowered == "false":
        return False
    if _NUMBER_RE.match(value):
        text = value.strip()
        if re.fullmatch(r"-?\d+", text):
            return int(text)
        return float(text)
    return value


def parse_float(value: Any) -> float:
    """Parse the leading number of ``value``; NaN when there is none."""
    if value is None or isinstance(value, bool):
        return math.nan
    if isinstance(value, (int, float)):
        return float(value)
    m = _LEADING_FLOAT_RE.match(str(value))
    if not m:
        return math.nan
    return float(m.group(1))


def format_value(value: Any) -> str:
    """Render a typed cell for display; integral floats drop their ``.0``."""
    if value is None:
        return ""
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def route_name_of(value: Any) -> str:
    if not is_present(value) or value is False or value == 0:
        return UNKNOWN_ROUTE
    return format_value(value)


@dataclass(frozen=True)
class StationRecord:
    route: str
    lat: float
    lon: float
    station: Any = None
    town: Any = None
    elevation: Any = None
    seq: Any = None
    route_distance: Any = None
    next_dist: Any = None
    prev_dist: Any = None
    logo_url: Any = None
    row: Dict[str, Any] = field(default_factory=dict, compare=False, repr=False)

    @property
    def has_valid_coordinates(self) -> bool:
        return math.isfinite(self.lat) and math.isfinite(self.lon)

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> "StationRecord":
        return cls(
            route=route_name_of(first_present(row, ROUTE_FIELDS)),
            lat=parse_float(first_present(row, LATITUDE_FIELDS)),
            lon=parse_float(first_present(row, LONGITUDE_FIELDS)),
            station=first_present(row, STATION_FIELDS),
            town=first_present(row, TOWN_FIELDS),
            elevation=first_present(row, ELEVATION_FIELDS),
            seq=first_present(row, SEQ_FIELDS),
            route_distance=first_present(row, ROUTE_DISTANCE_FIELDS),
            next_dist=first_present(row, NEXT_DIST_FIELDS),
            prev_dist=first_present(row, PREV_DIST_FIELDS),
            logo_url=first_present(row, LOGO_FIELDS),
            row=dict(row),
        )


def records_from_rows(rows: Sequence[Mapping[str, Any]]) -> List[StationRecord]:
    return [StationRecord.from_row(r) for r in rows]
