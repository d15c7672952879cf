"""Join station rows and route geometry by route name.

Everything here is a pure function of its inputs: colours, per-route stats and
per-route line segments are derived once and handed to the renderer.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence, Tuple

from shapely.geometry import shape
from shapely.geometry.base import BaseGeometry

from .config import COLORS
from .records import UNKNOWN_ROUTE, StationRecord, is_present, parse_float

logger = logging.getLogger(__name__)

LatLon = Tuple[float, float]
Segment = List[LatLon]

FEATURE_NAME_FIELDS = ("name", "Name", "title")


@dataclass
class RouteStats:
    station_count: int = 0
    # running max of the per-row route distance, not a sum
    total_distance: float = 0.0


@dataclass
class Aggregation:
    colors: Dict[str, str] = field(default_factory=dict)
    stats: Dict[str, RouteStats] = field(default_factory=dict)
    segments: Dict[str, List[Segment]] = field(default_factory=dict)
    route_names: List[str] = field(default_factory=list)

    def stats_for(self, route: str) -> RouteStats:
        return self.stats.get(route) or RouteStats()


def distinct_route_names(records: Iterable[StationRecord]) -> List[str]:
    seen = set()
    out: List[str] = []
    for r in records:
        if r.route not in seen:
            seen.add(r.route)
            out.append(r.route)
    return out


def assign_route_colors(records: Iterable[StationRecord], palette: Sequence[str] = COLORS) -> Dict[str, str]:
    """Nth distinct route (first-seen order) gets ``palette[N % len(palette)]``."""
    if not palette:
        raise ValueError("palette must not be empty")
    return {name: palette[i % len(palette)] for i, name in enumerate(distinct_route_names(records))}


def compute_route_stats(records: Iterable[StationRecord]) -> Dict[str, RouteStats]:
    stats: Dict[str, RouteStats] = {}
    for r in records:
        dist = parse_float(r.route_distance)
        if math.isnan(dist):
            dist = 0.0
        s = stats.setdefault(r.route, RouteStats())
        s.station_count += 1
        if dist > s.total_distance:
            s.total_distance = dist
    return stats


# ----------------------------
# Geometry
# ----------------------------

def feature_route_name(properties: Optional[Mapping[str, Any]]) -> str:
    for key in FEATURE_NAME_FIELDS:
        value = (properties or {}).get(key)
        if is_present(value):
            return str(value)
    return UNKNOWN_ROUTE


def flatten_lines(geom: BaseGeometry) -> List[BaseGeometry]:
    """Line parts of ``geom``; points and polygons contribute nothing."""
    if geom.is_empty:
        return []
    if geom.geom_type == "LineString":
        return [geom]
    if geom.geom_type == "MultiLineString":
        return [g for g in geom.geoms if g.geom_type == "LineString"]
    if geom.geom_type == "GeometryCollection":
        out: List[BaseGeometry] = []
        for g in geom.geoms:
            out.extend(flatten_lines(g))
        return out
    return []


def line_to_latlon(ls: BaseGeometry) -> Segment:
    return [(float(c[1]), float(c[0])) for c in ls.coords]


def group_route_segments(features: Iterable[Mapping[str, Any]]) -> Dict[str, List[Segment]]:
    """Route name -> list of (lat, lon) segments, in feature order.

    Names of features without any line geometry map to an empty list.
    """
    out: Dict[str, List[Segment]] = {}
    for ft in features:
        name = feature_route_name(ft.get("properties"))
        # the name is registered whether or not the feature has line parts
        out.setdefault(name, [])
        geom = ft.get("geometry")
        if not geom:
            continue
        try:
            sh = shape(geom)
        except Exception as e:
            logger.warning(f"Skipping unreadable geometry for {name!r}: {e}")
            continue

        for ls in flatten_lines(sh):
            seg = line_to_latlon(ls)
            if len(seg) >= 2:
                out[name].append(seg)
    return out


def aggregate(
    records: Sequence[StationRecord],
    features: Iterable[Mapping[str, Any]] = (),
    palette: Sequence[str] = COLORS,
) -> Aggregation:
    agg = Aggregation(
        colors=assign_route_colors(records, palette),
        stats=compute_route_stats(records),
        segments=group_route_segments(features),
        route_names=distinct_route_names(records),
    )
    logger.info(
        f"Aggregated {len(agg.route_names)} routes from stations, "
        f"{len(agg.segments)} routes from geometry"
    )
    return agg
