# tests/cluster_planner/visualization/test_cluster_plotting.py

from cluster_planner.domain.entities import Centroid, ClusterResult, LocatedPoint
from cluster_planner.visualization.cluster_plotting import CLUSTER_COLOR_PALETTE, cluster_color, gerar_mapa_clusters


def test_cluster_color_palette_then_hue_rotation():
    assert cluster_color(0) == CLUSTER_COLOR_PALETTE[0]
    assert cluster_color(15) == CLUSTER_COLOR_PALETTE[15]
    assert cluster_color(16) == "hsl(32, 70%, 45%)"


def test_map_is_written_to_html(tmp_path):
    result = ClusterResult(
        assignment=[0, 1],
        centroids=[Centroid(21.4, 39.8), Centroid(21.5, 39.9)],
        k_used=2,
        points=[LocatedPoint("W1", 21.4, 39.8), LocatedPoint("W2", 21.5, 39.9)],
    )

    saida = gerar_mapa_clusters(result, tmp_path / "mapas" / "clusters.html")

    assert saida.exists()
    assert "NFO 2" in saida.read_text(encoding="utf-8")


def test_map_skips_empty_result(tmp_path):
    vazio = ClusterResult(assignment=[], centroids=[], k_used=0)
    assert gerar_mapa_clusters(vazio, tmp_path / "vazio.html") is None
