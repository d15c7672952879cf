"""Map defaults and the settings object the CLI builds from them."""

from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional, Tuple


# ----------------------------
# Data sources
# ----------------------------

CSV_FILE = "routes_with_elevations.csv"
KML_FILE = "routes.kml"

BORDERS_URL = "https://raw.githubusercontent.com/datasets/geo-countries/master/data/countries.geojson"
BORDER_COUNTRIES = ("ethiopia", "djibouti")

HTTP_TIMEOUT_S = 30.0

# ----------------------------
# Map view (Ethiopia + Djibouti)
# ----------------------------

BOUNDS_SW = (2.0, 32.0)  # lat, lon
BOUNDS_NE = (15.5, 48.5)
CENTER = (9.65, 39.01)
ZOOM_START = 6
MIN_ZOOM = 6
MAX_ZOOM = 12
FIT_PADDING = (20, 20)

TILE_URL = "https://{s}.tile.openstreetmap.org/{z}/{x}/{y}.png"
TILE_ATTR = "&copy; OpenStreetMap contributors"
TILE_MAX_ZOOM = 19

# ----------------------------
# Styling
# ----------------------------

# strong palette, repeats when there are more routes than colours
COLORS = [
    "#d32f2f", "#1976d2", "#2e7d32", "#6a1b9a", "#ef6c00",
    "#b71c1c", "#0d47a1", "#1b5e20", "#f57c00", "#263238",
    "#6d4c41", "#0b5394", "#00897b", "#7b1fa2", "#c2185b",
]

LINE_FALLBACK_COLOR = "#000"
MARKER_FALLBACK_COLOR = "#333"

LINE_WEIGHT = 5
LINE_OPACITY = 0.9

MARKER_RADIUS = 7
MARKER_OUTLINE = "#000"
MARKER_OUTLINE_WEIGHT = 1
MARKER_FILL_OPACITY = 0.95

POPUP_MAX_WIDTH = 320

BORDER_STYLE = {
    "color": "#000000",
    "weight": 2.5,
    "opacity": 0.95,
    "fillOpacity": 0,
}


@dataclass(frozen=True)
class BBox:
    min_lon: float
    min_lat: float
    max_lon: float
    max_lat: float

    @property
    def south_west(self) -> Tuple[float, float]:
        return (self.min_lat, self.min_lon)

    @property
    def north_east(self) -> Tuple[float, float]:
        return (self.max_lat, self.max_lon)


DEFAULT_BBOX = BBox(BOUNDS_SW[1], BOUNDS_SW[0], BOUNDS_NE[1], BOUNDS_NE[0])


def parse_bbox(vals: Optional[List[float]]) -> BBox:
    if not vals:
        return DEFAULT_BBOX
    if len(vals) != 4:
        raise ValueError("--bounds must be 4 numbers: min_lon min_lat max_lon max_lat")
    min_lon, min_lat, max_lon, max_lat = vals
    if min_lon > max_lon:
        raise ValueError("bounds invalid: min_lon > max_lon")
    if min_lat > max_lat:
        raise ValueError("bounds invalid: min_lat > max_lat")
    return BBox(min_lon, min_lat, max_lon, max_lat)


@dataclass(frozen=True)
class Settings:
    csv_path: str = CSV_FILE
    kml_path: str = KML_FILE
    out_path: str = "index.html"
    borders_url: Optional[str] = BORDERS_URL
    border_countries: Tuple[str, ...] = BORDER_COUNTRIES
    bbox: BBox = DEFAULT_BBOX
    center: Tuple[float, float] = CENTER
    show_all: bool = False
    legend_collapsed: bool = False
