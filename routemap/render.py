"""Folium rendering: base map, borders, one hidden layer group per route."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence

import folium
from markupsafe import escape

from . import config
from .aggregate import Aggregation, RouteStats, aggregate
from .config import Settings
from .legend import Legend
from .loading import LoadedSources
from .records import StationRecord, format_value
from .ui import add_alert, add_console_warnings, add_legend_ui

logger = logging.getLogger(__name__)


# ----------------------------
# Markup helpers
# ----------------------------

# tooltip text lands inside a JS template literal
TEMPLATE_LITERAL_ESCAPES = {"`": "&#96;", "$": "&#36;", "\\": "&#92;"}


def escape_html(value: Any) -> str:
    if value is None:
        return ""
    out = str(escape(format_value(value)))
    for ch, ent in TEMPLATE_LITERAL_ESCAPES.items():
        out = out.replace(ch, ent)
    return out


def osm_link(lat: float, lon: float) -> str:
    return f"https://www.openstreetmap.org/?mlat={lat}&mlon={lon}#map=15/{lat}/{lon}"


def google_link(lat: float, lon: float) -> str:
    return f"https://www.google.com/maps?q={lat},{lon}"


def _or(value: Any, default: str) -> Any:
    return default if value is None or value == "" else value


def segment_tooltip_html(route: str, stats: RouteStats) -> str:
    return f"""
        <div style="font-size:14px; font-weight:500;">
            <b>Route:</b> {escape_html(route)}<br>
            <b>Total Distance:</b> {escape_html(stats.total_distance)} km<br>
            <b>Stations:</b> {stats.station_count}
        </div>
        """.strip()


def station_tooltip_html(rec: StationRecord) -> str:
    return f"""
        <div style="font-size:14px;">
          <b>{escape_html(_or(rec.station, ""))}</b><br>
          Town: {escape_html(_or(rec.town, "Unknown"))}<br>
          Elevation: {escape_html(_or(rec.elevation, "N/A"))} m<br>
          Next: {escape_html(_or(rec.next_dist, "N/A"))} km
        </div>
        """.strip()


def station_popup_html(rec: StationRecord) -> str:
    lat, lon = rec.lat, rec.lon
    parts = ['<div style="font-size:14px;">']
    if rec.logo_url:
        parts.append(
            f'<div style="margin-bottom:6px;"><img src="{escape_html(rec.logo_url)}" alt="logo" '
            f'style="height:38px; object-fit:contain;"></div>'
        )
    seq = f"(#{escape_html(rec.seq)})" if rec.seq else ""
    parts.append(f"<b>Station:</b> {escape_html(_or(rec.station, ''))} {seq}<br>")
    parts.append(f"<b>Route:</b> {escape_html(rec.route)}<br>")
    parts.append(f"<b>Town:</b> {escape_html(_or(rec.town, 'Unknown'))}<br>")
    parts.append(f"<b>Elevation:</b> {escape_html(_or(rec.elevation, 'N/A'))} m<br>")
    parts.append(f"<b>Route Distance (KM):</b> {escape_html(_or(rec.route_distance, 'N/A'))}<br>")
    parts.append(f"<b>PrevDist (km):</b> {escape_html(_or(rec.prev_dist, 'N/A'))}<br>")
    parts.append(f"<b>NextDist (km):</b> {escape_html(_or(rec.next_dist, 'N/A'))}<br>")
    parts.append(
        f'<a href="{escape_html(osm_link(lat, lon))}" target="_blank">OpenStreetMap</a> | '
        f'<a href="{escape_html(google_link(lat, lon))}" target="_blank">Google Maps</a>'
    )
    parts.append("</div>")
    return "".join(parts)


# ----------------------------
# Route layers
# ----------------------------

@dataclass
class RouteVisual:
    """Everything drawn for one route, toggled as a unit."""

    name: str
    color: str
    group: folium.FeatureGroup
    segment_count: int = 0
    marker_count: int = 0

    @property
    def visible(self) -> bool:
        return bool(self.group.show)

    @visible.setter
    def visible(self, on: bool) -> None:
        self.group.show = bool(on)

    @property
    def js_name(self) -> str:
        return self.group.get_name()


def _new_visual(name: str, color: str) -> RouteVisual:
    return RouteVisual(name=name, color=color, group=folium.FeatureGroup(name=name, show=False, control=False))


def build_route_visuals(agg: Aggregation, records: Sequence[StationRecord]) -> Dict[str, RouteVisual]:
    """One hidden group per route: CSV routes in first-seen order, then geometry-only routes."""
    visuals: Dict[str, RouteVisual] = {}
    for name in agg.route_names:
        visuals[name] = _new_visual(name, agg.colors.get(name, config.MARKER_FALLBACK_COLOR))

    for name, segments in agg.segments.items():
        color = agg.colors.get(name, config.LINE_FALLBACK_COLOR)
        v = visuals.get(name)
        if v is None:
            v = visuals[name] = _new_visual(name, color)
        tip = segment_tooltip_html(name, agg.stats_for(name))
        for seg in segments:
            folium.PolyLine(
                locations=[(lat, lon) for (lat, lon) in seg],
                color=color,
                weight=config.LINE_WEIGHT,
                opacity=config.LINE_OPACITY,
                tooltip=folium.Tooltip(tip, sticky=True, class_name="custom-tooltip"),
            ).add_to(v.group)
            v.segment_count += 1

    for rec in records:
        if not rec.has_valid_coordinates:
            continue
        v = visuals[rec.route]
        folium.CircleMarker(
            location=[rec.lat, rec.lon],
            radius=config.MARKER_RADIUS,
            color=config.MARKER_OUTLINE,
            weight=config.MARKER_OUTLINE_WEIGHT,
            fill=True,
            fill_color=agg.colors.get(rec.route, config.MARKER_FALLBACK_COLOR),
            fill_opacity=config.MARKER_FILL_OPACITY,
            tooltip=folium.Tooltip(station_tooltip_html(rec), sticky=True, class_name="custom-tooltip"),
            popup=folium.Popup(station_popup_html(rec), max_width=config.POPUP_MAX_WIDTH),
        ).add_to(v.group)
        v.marker_count += 1

    return visuals


# ----------------------------
# Map
# ----------------------------

def base_map(settings: Settings) -> folium.Map:
    bbox = settings.bbox
    m = folium.Map(
        location=list(settings.center),
        zoom_start=config.ZOOM_START,
        min_zoom=config.MIN_ZOOM,
        max_zoom=config.MAX_ZOOM,
        tiles=None,
        max_bounds=True,
        min_lat=bbox.min_lat,
        max_lat=bbox.max_lat,
        min_lon=bbox.min_lon,
        max_lon=bbox.max_lon,
        max_bounds_viscosity=1.0,
    )
    folium.TileLayer(
        tiles=config.TILE_URL,
        name="OpenStreetMap",
        attr=config.TILE_ATTR,
        max_zoom=config.TILE_MAX_ZOOM,
        overlay=False,
        control=False,
    ).add_to(m)
    return m


def add_country_borders(m: folium.Map, geo: Dict[str, Any]) -> folium.GeoJson:
    layer = folium.GeoJson(
        geo,
        name="Borders",
        style_function=lambda x: dict(config.BORDER_STYLE),
        control=False,
    )
    layer.add_to(m)
    return layer


@dataclass
class BuildResult:
    map: folium.Map
    visuals: Dict[str, RouteVisual] = field(default_factory=dict)
    legend: Optional[Legend] = None
    aggregation: Optional[Aggregation] = None
    warnings: List[str] = field(default_factory=list)
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None


def build_map(sources: LoadedSources, settings: Settings) -> BuildResult:
    m = base_map(settings)

    if sources.borders is not None and sources.borders.ok and sources.borders.value:
        add_country_borders(m, sources.borders.value)

    if not sources.stations.ok:
        message = f"Error loading CSV: {sources.stations.error}"
        add_alert(m, message)
        return BuildResult(map=m, error=message)

    records: List[StationRecord] = sources.stations.value
    warnings: List[str] = []
    features: List[Dict[str, Any]] = []
    if sources.geometry.ok and sources.geometry.value:
        features = sources.geometry.value
    elif not sources.geometry.ok:
        warnings.append(f"KML not loaded or empty; only station markers are drawn ({sources.geometry.error})")
    else:
        warnings.append("KML not loaded or empty; only station markers are drawn")

    agg = aggregate(records, features)
    visuals = build_route_visuals(agg, records)
    for v in visuals.values():
        v.group.add_to(m)

    legend = Legend.from_visuals(visuals, agg.stats, collapsed=settings.legend_collapsed)
    if settings.show_all:
        legend.set_all(True)

    add_legend_ui(m, legend)
    if warnings:
        add_console_warnings(m, warnings)

    m.fit_bounds([settings.bbox.south_west, settings.bbox.north_east], padding=config.FIT_PADDING)

    logger.info(
        f"Built {len(visuals)} route layers: "
        f"{sum(v.segment_count for v in visuals.values())} segments, "
        f"{sum(v.marker_count for v in visuals.values())} station markers"
    )
    return BuildResult(map=m, visuals=visuals, legend=legend, aggregation=agg, warnings=warnings)
