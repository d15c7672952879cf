"""Shared fixtures: small station tables and route documents on disk."""

from pathlib import Path

import pytest

SCENARIO_CSV = """Route,Latitude,Longitude,Station,Elevation_m,Route Distance (KM)
A,9.0,38.0,X,2000,10
A,9.1,38.1,Y,2100,25
"""

ROUTE_B_KML = """<?xml version="1.0" encoding="UTF-8"?>
<kml xmlns="http://www.opengis.net/kml/2.2">
  <Document>
    <Placemark>
      <name>B</name>
      <MultiGeometry>
        <LineString><coordinates>38.0,9.0,0 38.5,9.5,0</coordinates></LineString>
        <LineString><coordinates>39.0,10.0 39.5,10.5 40.0,11.0</coordinates></LineString>
      </MultiGeometry>
    </Placemark>
  </Document>
</kml>
"""

ROUTE_A_KML = """<?xml version="1.0" encoding="UTF-8"?>
<kml xmlns="http://www.opengis.net/kml/2.2">
  <Document>
    <Folder>
      <Placemark>
        <name>A</name>
        <LineString><coordinates>38.0,9.0 38.1,9.1</coordinates></LineString>
      </Placemark>
      <Placemark>
        <name>Depot</name>
        <Point><coordinates>38.2,9.2</coordinates></Point>
      </Placemark>
    </Folder>
  </Document>
</kml>
"""


@pytest.fixture
def scenario_csv(tmp_path: Path) -> Path:
    p = tmp_path / "routes_with_elevations.csv"
    p.write_text(SCENARIO_CSV, encoding="utf-8")
    return p


@pytest.fixture
def route_b_kml(tmp_path: Path) -> Path:
    p = tmp_path / "routes.kml"
    p.write_text(ROUTE_B_KML, encoding="utf-8")
    return p


@pytest.fixture
def route_a_kml(tmp_path: Path) -> Path:
    p = tmp_path / "routes_a.kml"
    p.write_text(ROUTE_A_KML, encoding="utf-8")
    return p


@pytest.fixture
def scenario_csv_text() -> str:
    return SCENARIO_CSV


@pytest.fixture
def route_b_kml_text() -> str:
    return ROUTE_B_KML
