# tests/cluster_planner/domain/test_site_index.py

import math

from cluster_planner.domain.entities import SiteRecord
from cluster_planner.domain.site_index import (
    SiteIndex,
    is_standard_site_id,
    normalize_site_id,
    parse_coordinate,
    resolve_points,
    tokenize_site_ids,
)


def test_normalize_site_id_strips_single_letter_prefix():
    assert normalize_site_id("W2362") == "2362"
    assert normalize_site_id("w2362") == "2362"
    assert normalize_site_id("2362") == "2362"
    assert normalize_site_id("  W2362 ") == "2362"


def test_normalize_site_id_is_idempotent_and_keeps_other_formats():
    assert normalize_site_id(normalize_site_id("W2362")) == "2362"
    assert normalize_site_id("AB12") == "AB12"
    assert normalize_site_id("W12a") == "W12a"
    assert normalize_site_id("W") == "W"
    assert normalize_site_id("   ") is None
    assert normalize_site_id(None) is None


def test_tokenize_site_ids_splits_on_whitespace_comma_and_semicolon():
    assert tokenize_site_ids("W1, 2;3\n  4\tW5") == ["W1", "2", "3", "4", "W5"]
    assert tokenize_site_ids("") == []
    assert tokenize_site_ids(None) == []


def test_parse_coordinate_handles_spreadsheet_values():
    assert parse_coordinate(21.5) == 21.5
    assert parse_coordinate(5) == 5.0
    assert parse_coordinate(" 39.82 ") == 39.82
    assert parse_coordinate("#N/A") is None
    assert parse_coordinate("N/A") is None
    assert parse_coordinate("") is None
    assert parse_coordinate("abc") is None
    assert parse_coordinate(float("nan")) is None
    assert parse_coordinate(math.inf) is None
    assert parse_coordinate(None) is None


def test_resolve_deduplicates_prefixed_and_plain_tokens():
    # === INPUT ===
    points, report = resolve_points("W100 100 W100", [{"id": "W100", "lat": 1, "lng": 1}])

    assert len(points) == 1
    assert points[0].site_id == "W100"
    assert (points[0].lat, points[0].lng) == (1.0, 1.0)

    assert report.total_pasted == 3
    assert report.unique_ids == 1
    assert report.matched == 1
    assert report.not_found_ids == []
    assert report.missing_coords_ids == []

    d = report.as_dict()
    assert d["totalPasted"] == 3
    assert d["uniqueIds"] == 1
    assert d["matched"] == 1


def test_resolve_against_empty_reference_reports_not_found():
    points, report = resolve_points("W200", [])

    assert points == []
    assert report.not_found_ids == ["200"]
    assert report.matched == 0


def test_resolve_reports_missing_and_out_of_range_coordinates():
    registros = [
        {"id": "W5", "lat": None, "lng": 2},
        {"id": "W6", "lat": "#N/A", "lng": "#N/A"},
        {"id": "W7", "lat": 95.0, "lng": 10.0},
        {"id": "W8", "lat": 21.4, "lng": 39.8},
    ]
    points, report = resolve_points("5 w6 W7 8", registros)

    assert [p.site_id for p in points] == ["W8"]
    assert report.missing_coords_ids == ["W5", "W6", "W7"]
    assert report.matched == 1


def test_resolve_emits_each_raw_identifier_once():
    registros = [
        SiteRecord(site_id="W7", lat=1.0, lng=1.0),
        SiteRecord(site_id="W7", lat=1.0, lng=1.0),
    ]
    points, report = resolve_points("W7", registros)

    assert len(points) == 1
    assert report.matched == 1


def test_resolve_returns_all_distinct_matches_for_a_query():
    registros = [
        SiteRecord(site_id="W8", lat=1.0, lng=1.0),
        SiteRecord(site_id="8", lat=2.0, lng=2.0),
    ]
    points, _ = resolve_points("8", registros)

    assert [p.site_id for p in points] == ["W8", "8"]


def test_resolve_preserves_input_order():
    registros = [{"id": f"W{i}", "lat": 20.0 + i, "lng": 40.0} for i in range(1, 4)]
    points, report = resolve_points("3 1 W2 AB9", registros)

    assert [p.site_id for p in points] == ["W3", "W1", "W2"]
    assert report.not_found_ids == ["AB9"]


def test_site_index_lookup_by_raw_and_normalized_key():
    index = SiteIndex([{"id": "W42", "lat": 1, "lng": 1}, {"id": "  ", "lat": 1, "lng": 1}])

    assert index.total_records == 1
    assert len(index.lookup("W42")) == 1
    assert len(index.lookup("42")) == 1
    assert index.lookup("43") == []
    assert "42" in index


def test_resolve_flags_non_standard_tokens_as_invalid():
    registros = [{"id": "W1", "lat": 21.4, "lng": 39.8}, {"id": "AB9", "lat": 21.5, "lng": 39.9}]
    points, report = resolve_points("W1 AB9 12x 1 12x", registros)

    assert report.invalid_inputs == ["AB9", "12x"]
    assert [p.site_id for p in points] == ["W1", "AB9"]
    assert report.not_found_ids == ["12x"]
    assert report.as_dict()["invalidInputs"] == ["AB9", "12x"]


def test_is_standard_site_id():
    assert is_standard_site_id("W2362")
    assert is_standard_site_id("w2362")
    assert is_standard_site_id(" 2362 ")
    assert not is_standard_site_id("AB9")
    assert not is_standard_site_id("W-12")
    assert not is_standard_site_id("")
