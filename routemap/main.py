"""Build a standalone HTML map of bus/train routes.

Reads a CSV of stations (coordinates, elevation, distances) and a KML of
route geometries, joins them by route name, and writes one HTML page with:
- a coloured, hidden-by-default layer per route (lines + station markers),
- station tooltips/popups with OpenStreetMap and Google Maps links,
- a collapsible legend with per-route checkboxes, check/uncheck all and a
  text filter,
- Ethiopia/Djibouti country outlines.

Usage example:
  routemap \
    --csv routes_with_elevations.csv \
    --kml routes.kml \
    --out index.html

Notes:
- The CSV is mandatory: if it fails to load the page only shows the base map
  and an alert, and the command exits with status 1.
- The KML is optional: without it only station markers are drawn.
- --csv/--kml/--borders-url accept local paths or http(s) URLs.
"""

from __future__ import annotations

import argparse
import logging
import sys
from typing import List, Optional

from . import config
from .config import Settings, parse_bbox
from .loading import load_sources
from .render import BuildResult, build_map

logger = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def build_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(prog="routemap", description="Render route/station data onto an interactive map.")
    ap.add_argument("--csv", default=config.CSV_FILE, help="Station table (path or URL)")
    ap.add_argument("--kml", default=config.KML_FILE, help="Route geometry, KML or GeoJSON (path or URL)")
    ap.add_argument("--out", default="index.html", help="Output HTML filename")
    ap.add_argument("--borders-url", default=config.BORDERS_URL, help="Countries GeoJSON used for the border overlay")
    ap.add_argument("--no-borders", action="store_true", help="Skip the country border overlay")
    ap.add_argument("--show-all", action="store_true", help="Start with every route visible")
    ap.add_argument("--legend-collapsed", action="store_true", help="Start with the legend panel collapsed")
    ap.add_argument(
        "--bounds",
        nargs=4,
        type=float,
        default=None,
        metavar=("MIN_LON", "MIN_LAT", "MAX_LON", "MAX_LAT"),
        help="Pan/fit bounds (default: Ethiopia + Djibouti)",
    )
    ap.add_argument("--log-level", default="INFO", choices=["DEBUG", "INFO", "WARNING", "ERROR"])
    return ap


def settings_from_args(args: argparse.Namespace) -> Settings:
    return Settings(
        csv_path=args.csv,
        kml_path=args.kml,
        out_path=args.out,
        borders_url=None if args.no_borders else args.borders_url,
        bbox=parse_bbox(args.bounds),
        show_all=bool(args.show_all),
        legend_collapsed=bool(args.legend_collapsed),
    )


def build(settings: Settings) -> BuildResult:
    sources = load_sources(
        settings.csv_path,
        settings.kml_path,
        borders_url=settings.borders_url,
        border_countries=settings.border_countries,
    )
    return build_map(sources, settings)


def main(argv: Optional[List[str]] = None) -> int:
    ap = build_parser()
    args = ap.parse_args(argv)
    logging.basicConfig(level=getattr(logging, args.log_level), format=LOG_FORMAT)

    try:
        settings = settings_from_args(args)
    except ValueError as e:
        ap.error(str(e))

    try:
        result = build(settings)
        result.map.save(settings.out_path)
    except Exception:
        logger.exception("Error building the map")
        print("Error building the map. See log for details.", file=sys.stderr)
        return 1

    print(f"Wrote: {settings.out_path}")
    if not result.ok:
        print(result.error, file=sys.stderr)
        return 1

    print(
        f"Routes: {len(result.visuals):,} | "
        f"Segments: {sum(v.segment_count for v in result.visuals.values()):,} | "
        f"Stations: {sum(v.marker_count for v in result.visuals.values()):,}"
    )
    for w in result.warnings:
        print(f"Warning: {w}", file=sys.stderr)
    return 0


if __name__ == "__main__":
    sys.exit(main())
