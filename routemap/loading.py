"""Fetch and parse the map sources.

The station table, the route geometry and the country borders are loaded
concurrently. Each job settles on its own: a failure in one is kept as that
job's outcome and never stops the others.
"""

from __future__ import annotations

import io
import json
import logging
from concurrent.futures import ThreadPoolExecutor, wait
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional, Sequence

import pandas as pd
import requests

from .config import BORDER_COUNTRIES, HTTP_TIMEOUT_S
from .errors import GeometryParseError, SourceError, StationTableError
from .kml import parse_kml
from .records import StationRecord, coerce_cell, records_from_rows

logger = logging.getLogger(__name__)

session = requests.Session()


def is_url(location: str) -> bool:
    return location.lower().startswith(("http://", "https://"))


def read_source(location: str) -> str:
    """Read a local file or an http(s) URL as text."""
    if is_url(location):
        try:
            resp = session.get(location, timeout=HTTP_TIMEOUT_S)
            resp.raise_for_status()
        except requests.RequestException as e:
            raise SourceError(location, str(e), e) from e
        return resp.text

    try:
        return Path(location).read_text(encoding="utf-8-sig")
    except OSError as e:
        raise SourceError(location, e.strerror or str(e), e) from e


# ----------------------------
# Station table
# ----------------------------

def parse_station_table(text: str) -> List[Dict[str, Any]]:
    """Header-driven CSV parse; returns one typed dict per non-empty line."""
    try:
        df = pd.read_csv(io.StringIO(text), dtype=str, keep_default_na=False, skip_blank_lines=True)
    except (pd.errors.EmptyDataError, pd.errors.ParserError) as e:
        raise StationTableError(f"could not parse station table: {e}") from e

    rows: List[Dict[str, Any]] = []
    for raw in df.to_dict(orient="records"):
        rows.append({str(k): coerce_cell(v) for k, v in raw.items()})
    return rows


def load_stations(location: str) -> List[StationRecord]:
    logger.info(f"Loading station table: {location}")
    rows = parse_station_table(read_source(location))
    records = records_from_rows(rows)
    logger.info(f"Loaded {len(records)} station rows from {location}")
    return records


# ----------------------------
# Route geometry
# ----------------------------

def parse_geometry_document(text: str, location: str = "") -> List[Dict[str, Any]]:
    """Parse KML (default) or GeoJSON (``.geojson``/``.json``) into feature dicts."""
    if location.lower().endswith((".geojson", ".json")):
        try:
            data = json.loads(text)
        except ValueError as e:
            raise GeometryParseError(f"invalid GeoJSON: {e}") from e
        if isinstance(data, dict) and data.get("type") == "FeatureCollection":
            return list(data.get("features") or [])
        if isinstance(data, dict) and data.get("type") == "Feature":
            return [data]
        raise GeometryParseError("GeoJSON document is not a Feature or FeatureCollection")
    return parse_kml(text)


def load_geometry(location: str) -> List[Dict[str, Any]]:
    logger.info(f"Loading route geometry: {location}")
    features = parse_geometry_document(read_source(location), location)
    logger.info(f"Loaded {len(features)} geometry features from {location}")
    return features


# ----------------------------
# Country borders
# ----------------------------

BORDER_NAME_FIELDS = ("ADMIN", "NAME", "name")


def filter_countries(geo: Dict[str, Any], countries: Sequence[str] = BORDER_COUNTRIES) -> Dict[str, Any]:
    wanted = {c.lower() for c in countries}
    keep = []
    for feat in geo.get("features", []) or []:
        props = feat.get("properties") or {}
        name = ""
        for key in BORDER_NAME_FIELDS:
            if props.get(key):
                name = str(props[key])
                break
        if name.lower() in wanted:
            keep.append(feat)
    return {"type": "FeatureCollection", "features": keep}


def fetch_country_borders(url: str, countries: Sequence[str] = BORDER_COUNTRIES) -> Dict[str, Any]:
    text = read_source(url)
    try:
        geo = json.loads(text)
    except ValueError as e:
        raise SourceError(url, f"invalid GeoJSON: {e}", e) from e
    subset = filter_countries(geo, countries)
    logger.info(f"Kept {len(subset['features'])} border features from {url}")
    return subset


# ----------------------------
# Concurrent load
# ----------------------------

@dataclass(frozen=True)
class Settled:
    """Outcome of one load job: either ``value`` or ``error`` is set."""

    value: Any = None
    error: Optional[BaseException] = None

    @property
    def ok(self) -> bool:
        return self.error is None


@dataclass(frozen=True)
class LoadedSources:
    stations: Settled
    geometry: Settled
    borders: Optional[Settled] = None


def _settle(fn: Callable[..., Any], *args: Any) -> Settled:
    try:
        return Settled(value=fn(*args))
    except Exception as e:
        return Settled(error=e)


def load_sources(
    stations_location: str,
    geometry_location: str,
    borders_url: Optional[str] = None,
    border_countries: Sequence[str] = BORDER_COUNTRIES,
) -> LoadedSources:
    """Run every load job concurrently and wait until all of them have settled."""
    with ThreadPoolExecutor(max_workers=3 if borders_url else 2) as executor:
        f_stations = executor.submit(_settle, load_stations, stations_location)
        f_geometry = executor.submit(_settle, load_geometry, geometry_location)
        f_borders = (
            executor.submit(_settle, fetch_country_borders, borders_url, border_countries)
            if borders_url
            else None
        )
        wait([f for f in (f_stations, f_geometry, f_borders) if f is not None])

    stations = f_stations.result()
    geometry = f_geometry.result()
    borders = f_borders.result() if f_borders is not None else None

    if not stations.ok:
        logger.error(f"Error loading CSV: {stations.error}")
    if not geometry.ok:
        logger.warning(f"KML not loaded; only station markers will be drawn: {geometry.error}")
    if borders is not None and not borders.ok:
        logger.warning(f"Could not load country borders: {borders.error}")

    return LoadedSources(stations=stations, geometry=geometry, borders=borders)
