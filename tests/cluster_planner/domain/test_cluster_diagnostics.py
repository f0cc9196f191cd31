# tests/cluster_planner/domain/test_cluster_diagnostics.py

from cluster_planner.domain.cluster_diagnostics import capacity_ok, explain_point, summarize_groups
from cluster_planner.domain.entities import Centroid, ClusterResult, LocatedPoint


def _resultado():
    points = [
        LocatedPoint("W1", 0.0, 0.0),
        LocatedPoint("W2", 0.0, 0.02),
        LocatedPoint("W3", 10.0, 10.0),
    ]
    centroids = [Centroid(0.0, 0.01), Centroid(10.0, 10.0)]
    return ClusterResult(assignment=[0, 0, 1], centroids=centroids, k_used=2, points=points)


def test_summarize_groups_reports_size_and_distances():
    r = _resultado()
    resumo = summarize_groups(r.points, r.assignment, r.centroids)

    assert [s.group for s in resumo] == [1, 2]
    assert [s.size for s in resumo] == [2, 1]
    assert resumo[0].avg_km > 0
    assert resumo[1].avg_km == 0.0
    assert resumo[0].max_km >= resumo[0].avg_km


def test_summarize_groups_empty_input():
    assert summarize_groups([], [], []) == []


def test_explain_point_accepts_raw_or_normalized_id():
    r = _resultado()

    por_cru = explain_point(r, "W3")
    por_normalizado = explain_point(r, "3")

    assert por_cru == por_normalizado
    assert por_cru["siteId"] == "W3"
    assert por_cru["chosenGroup"] == 2
    assert por_cru["distances"][0]["group"] == 2
    assert por_cru["distances"][0]["km"] <= por_cru["distances"][1]["km"]


def test_explain_point_unknown_site():
    assert explain_point(_resultado(), "W999") is None


def test_capacity_ok():
    assert capacity_ok(_resultado()) is True

    desbalanceado = _resultado()
    desbalanceado.assignment = [0, 0, 0]
    assert capacity_ok(desbalanceado) is False
