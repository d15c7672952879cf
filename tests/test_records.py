"""Tests for station row typing and column fallbacks."""

import math

from routemap.records import (
    StationRecord,
    coerce_cell,
    first_present,
    format_value,
    parse_float,
    route_name_of,
)


def test_coerce_cell_types_numbers_and_blanks():
    """Numeric strings become numbers, blanks become None, text is kept."""
    assert coerce_cell("2000") == 2000
    assert isinstance(coerce_cell("2000"), int)
    assert coerce_cell("9.05") == 9.05
    assert coerce_cell("-1.5e2") == -150.0
    assert coerce_cell("") is None
    assert coerce_cell(float("nan")) is None
    assert coerce_cell("TRUE") is True
    assert coerce_cell("false") is False
    assert coerce_cell("Addis Ababa") == "Addis Ababa"
    assert coerce_cell("12 km") == "12 km"


def test_first_present_skips_missing_and_empty():
    """Fallback columns are tried in order; empty strings count as missing."""
    row = {"Latitude": "", "lat": None, "Lat": 9.3}
    assert first_present(row, ("Latitude", "lat", "Lat")) == 9.3
    assert first_present({}, ("Latitude",)) is None
    assert first_present({"NextDist_km": 0}, ("NextDist_km", "NextDist")) == 0


def test_parse_float_reads_leading_number():
    """Leading numeric prefix is parsed like parseFloat; junk yields NaN."""
    assert parse_float(25) == 25.0
    assert parse_float("25.5 km") == 25.5
    assert math.isnan(parse_float("n/a"))
    assert math.isnan(parse_float(None))


def test_route_name_defaults_to_unknown():
    """Absent, empty and zero route values fall back to 'Unknown'."""
    assert route_name_of(None) == "Unknown"
    assert route_name_of("") == "Unknown"
    assert route_name_of(0) == "Unknown"
    assert route_name_of(12) == "12"
    assert route_name_of("Addis - Adama") == "Addis - Adama"


def test_format_value_drops_integral_fraction():
    """Integral floats display without a trailing .0."""
    assert format_value(25.0) == "25"
    assert format_value(25.5) == "25.5"
    assert format_value(None) == ""


def test_station_record_from_row_uses_fallback_columns():
    """Alternate column names fill every record field."""
    rec = StationRecord.from_row(
        {
            "Route": "R1",
            "lat": 8.5,
            "Lon": 39.2,
            "Station Name": "Adama",
            "Town": "Adama",
            "Elevation (m)": 1712,
            "RouteDistanceKM": 99.5,
            "NextDist": 12,
            "PrevDist": 7,
            "Seq": 3,
            "logo": "https://example.org/logo.png",
        }
    )
    assert rec.route == "R1"
    assert (rec.lat, rec.lon) == (8.5, 39.2)
    assert rec.station == "Adama"
    assert rec.town == "Adama"
    assert rec.elevation == 1712
    assert rec.route_distance == 99.5
    assert rec.next_dist == 12
    assert rec.prev_dist == 7
    assert rec.seq == 3
    assert rec.logo_url == "https://example.org/logo.png"
    assert rec.has_valid_coordinates


def test_station_record_invalid_coordinates():
    """Missing or non-numeric coordinates are not valid."""
    assert not StationRecord.from_row({"Route": "A", "Latitude": "north", "Longitude": 38.0}).has_valid_coordinates
    assert not StationRecord.from_row({"Route": "A"}).has_valid_coordinates
