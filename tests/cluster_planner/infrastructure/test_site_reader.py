# tests/cluster_planner/infrastructure/test_site_reader.py

import pytest

from cluster_planner.domain.site_index import resolve_points
from cluster_planner.infrastructure.site_reader import load_site_records


def test_load_csv_keeps_payload_and_raw_coordinates(tmp_path):
    arquivo = tmp_path / "sites.csv"
    arquivo.write_text(
        "Site ID,Latitude,Longitude,VIP_Category\n"
        "W1,21.4,39.8,VIP\n"
        "W2,#N/A,#N/A,\n"
        ",21.0,39.0,\n",
        encoding="utf-8",
    )

    registros = load_site_records(str(arquivo))

    assert [r.site_id for r in registros] == ["W1", "W2", ""]
    assert registros[0].payload["VIP_Category"] == "VIP"

    points, report = resolve_points("1 2", registros)
    assert [p.site_id for p in points] == ["W1"]
    assert report.missing_coords_ids == ["W2"]


def test_load_semicolon_csv(tmp_path):
    arquivo = tmp_path / "sites.csv"
    arquivo.write_text("Site ID;Latitude;Longitude\nW7;21,4;39,8\nW8;21.5;39.9\n", encoding="utf-8")

    registros = load_site_records(str(arquivo))

    assert [r.site_id for r in registros] == ["W7", "W8"]


def test_missing_required_column_raises(tmp_path):
    arquivo = tmp_path / "sites.csv"
    arquivo.write_text("Site ID,Lat,Lng\nW1,1,1\n", encoding="utf-8")

    with pytest.raises(ValueError, match="Latitude"):
        load_site_records(str(arquivo))


def test_missing_file_raises(tmp_path):
    with pytest.raises(FileNotFoundError):
        load_site_records(str(tmp_path / "nao_existe.csv"))


def test_unsupported_extension_raises(tmp_path):
    arquivo = tmp_path / "sites.txt"
    arquivo.write_text("qualquer coisa", encoding="utf-8")

    with pytest.raises(ValueError):
        load_site_records(str(arquivo))
