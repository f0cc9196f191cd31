# tests/cluster_planner/config/test_settings.py

from cluster_planner.config import settings


def test_env_int_reads_integer(monkeypatch):
    monkeypatch.setenv("CLUSTER_DEFAULT_K", " 8 ")
    assert settings._env_int("CLUSTER_DEFAULT_K", 6) == 8


def test_env_int_falls_back_on_blank_or_garbage(monkeypatch):
    monkeypatch.setenv("CLUSTER_DEFAULT_K", "abc")
    assert settings._env_int("CLUSTER_DEFAULT_K", 6) == 6

    monkeypatch.setenv("CLUSTER_SEED", "  ")
    assert settings._env_int("CLUSTER_SEED", None) is None

    monkeypatch.delenv("CLUSTER_ITERATIONS", raising=False)
    assert settings._env_int("CLUSTER_ITERATIONS", 2) == 2


def test_export_columns_follow_planner_order():
    assert settings.EXPORT_COLUMNS[:6] == ["Site ID", "NFO Name", "FE ID", "Technology", "Latitude", "Longitude"]
    assert set(settings.EXPORT_PASSTHROUGH_COLUMNS) <= set(settings.EXPORT_COLUMNS)
