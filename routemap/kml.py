"""KML -> GeoJSON-like features.

Every ``Placemark`` in the document becomes a feature dict shaped like GeoJSON:

    {"type": "Feature", "properties": {"name": ...}, "geometry": {...}}

Coordinates stay in KML's native (lon, lat[, alt]) order; swapping to
(lat, lon) happens when routes are grouped. Namespaces are ignored so plain
KML 2.2, Google's ``gx:`` extensions and un-namespaced files all parse.
"""

from __future__ import annotations

import logging
import xml.etree.ElementTree as ET
from typing import Any, Dict, List, Optional

from .errors import GeometryParseError

logger = logging.getLogger(__name__)

Coord = List[float]


def _local(tag: Any) -> str:
    if not isinstance(tag, str):
        return ""
    return tag.rsplit("}", 1)[-1]


def _children(node: ET.Element, name: str) -> List[ET.Element]:
    return [c for c in node if _local(c.tag) == name]


def _child(node: ET.Element, name: str) -> Optional[ET.Element]:
    for c in node:
        if _local(c.tag) == name:
            return c
    return None


def _descendant(node: ET.Element, name: str) -> Optional[ET.Element]:
    for c in node.iter():
        if c is not node and _local(c.tag) == name:
            return c
    return None


def parse_coordinates(text: Optional[str]) -> List[Coord]:
    """Parse a KML ``<coordinates>`` body: whitespace separated ``lon,lat[,alt]`` tuples."""
    out: List[Coord] = []
    for tup in (text or "").split():
        parts = [p for p in tup.split(",") if p != ""]
        if len(parts) < 2:
            continue
        try:
            out.append([float(p) for p in parts[:3]])
        except ValueError:
            continue
    return out


def _coords_of(node: ET.Element) -> List[Coord]:
    c = _descendant(node, "coordinates")
    return parse_coordinates(c.text if c is not None else None)


def _track_coords(node: ET.Element) -> List[Coord]:
    out: List[Coord] = []
    for c in node.iter():
        if _local(c.tag) != "coord":
            continue
        parts = (c.text or "").split()
        if len(parts) < 2:
            continue
        try:
            out.append([float(p) for p in parts[:3]])
        except ValueError:
            continue
    return out


def _line(coords: List[Coord]) -> Optional[Dict[str, Any]]:
    if len(coords) < 2:
        return None
    return {"type": "LineString", "coordinates": coords}


def parse_geometry(node: ET.Element) -> Optional[Dict[str, Any]]:
    """Convert one KML geometry element to a GeoJSON geometry dict (None if unsupported/empty)."""
    tag = _local(node.tag)

    if tag == "Point":
        coords = _coords_of(node)
        return {"type": "Point", "coordinates": coords[0]} if coords else None

    if tag in {"LineString", "LinearRing"}:
        return _line(_coords_of(node))

    if tag == "Track":
        return _line(_track_coords(node))

    if tag == "Polygon":
        rings = []
        for boundary in ("outerBoundaryIs", "innerBoundaryIs"):
            for b in _children(node, boundary):
                ring = _coords_of(b)
                if ring:
                    rings.append(ring)
        return {"type": "Polygon", "coordinates": rings} if rings else None

    if tag in {"MultiGeometry", "MultiTrack"}:
        geoms = []
        for c in node:
            g = parse_geometry(c)
            if g is not None:
                geoms.append(g)
        if not geoms:
            return None
        return {"type": "GeometryCollection", "geometries": geoms}

    return None


GEOMETRY_TAGS = {"Point", "LineString", "LinearRing", "Polygon", "MultiGeometry", "Track", "MultiTrack"}


def _properties(placemark: ET.Element) -> Dict[str, Any]:
    props: Dict[str, Any] = {}
    for key in ("name", "description", "styleUrl"):
        el = _child(placemark, key)
        if el is not None and el.text is not None:
            props[key] = el.text.strip()

    ext = _child(placemark, "ExtendedData")
    if ext is not None:
        for el in ext.iter():
            t = _local(el.tag)
            if t == "Data":
                v = _child(el, "value")
                props[el.get("name", "")] = (v.text or "").strip() if v is not None else ""
            elif t == "SimpleData":
                props[el.get("name", "")] = (el.text or "").strip()
    props.pop("", None)
    return props


def parse_kml(text: str) -> List[Dict[str, Any]]:
    """Parse a KML document into a list of feature dicts, in document order."""
    try:
        root = ET.fromstring(text.encode("utf-8") if isinstance(text, str) else text)
    except ET.ParseError as e:
        raise GeometryParseError(f"invalid KML: {e}") from e

    features: List[Dict[str, Any]] = []
    for pm in root.iter():
        if _local(pm.tag) != "Placemark":
            continue
        geometry = None
        for c in pm:
            if _local(c.tag) in GEOMETRY_TAGS:
                geometry = parse_geometry(c)
                break
        features.append({"type": "Feature", "properties": _properties(pm), "geometry": geometry})

    logger.debug(f"Parsed {len(features)} placemarks from KML")
    return features
