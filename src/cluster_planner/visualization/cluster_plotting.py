# =========================================================
# 📦 src/cluster_planner/visualization/cluster_plotting.py
# =========================================================

from pathlib import Path
from typing import Optional

import folium
from loguru import logger

from cluster_planner.domain.entities import ClusterResult

CLUSTER_COLOR_PALETTE = [
    "#2563eb", "#f97316", "#22c55e", "#e11d48",
    "#8b5cf6", "#14b8a6", "#f59e0b", "#10b981",
    "#ef4444", "#6366f1", "#06b6d4", "#84cc16",
    "#db2777", "#0ea5e9", "#f43f5e", "#0f766e",
]


def cluster_color(index: int) -> str:
    """Cor fixa para os 16 primeiros grupos; depois, matiz girando 47° por grupo."""
    if index < len(CLUSTER_COLOR_PALETTE):
        return CLUSTER_COLOR_PALETTE[index]
    return f"hsl({(index * 47) % 360}, 70%, 45%)"


def gerar_mapa_clusters(
    result: ClusterResult,
    output_path: Path,
    selected_group: Optional[int] = None,
) -> Optional[Path]:
    """
    Gera mapa HTML com um marcador por site, colorido pelo grupo (NFO).
    Com `selected_group` (0-based), os demais grupos ficam esmaecidos.
    """
    if not result.points:
        logger.warning("❌ Nenhum site clusterizado para plotar.")
        return None

    lat_centro = sum(p.lat for p in result.points) / len(result.points)
    lng_centro = sum(p.lng for p in result.points) / len(result.points)

    m = folium.Map(location=[lat_centro, lng_centro], zoom_start=11, tiles="CartoDB positron")

    for p, g in zip(result.points, result.assignment):
        cor = cluster_color(g)
        opacidade = 0.85 if selected_group is None or g == selected_group else 0.25
        popup_html = f"""
        <b>Site:</b> {p.site_id}<br>
        <b>NFO:</b> {g + 1}<br>
        <b>Lat/Lng:</b> {p.lat:.6f}, {p.lng:.6f}
        """
        folium.CircleMarker(
            location=(p.lat, p.lng),
            radius=6,
            color=cor,
            fill=True,
            opacity=opacidade,
            fill_opacity=opacidade,
            popup=folium.Popup(popup_html, max_width=260),
            tooltip=folium.Tooltip(f"{p.site_id} · NFO {g + 1}", sticky=True),
        ).add_to(m)

    for g, c in enumerate(result.centroids):
        folium.Marker(
            location=(c.lat, c.lng),
            tooltip=f"Centro NFO {g + 1}",
            icon=folium.Icon(color="gray", icon="user"),
        ).add_to(m)

    tamanhos = result.group_sizes()
    legend_html = """
    <div style="
        position: fixed; bottom: 50px; left: 50px; width: 180px;
        z-index:9999; font-size:14px; background-color:white;
        border:2px solid grey; border-radius:8px; padding:10px;">
        <b>Grupos</b><br>{}
    </div>
    """.format("<br>".join(
        f"<span style='color:{cluster_color(g)}'>●</span> NFO {g + 1} ({tamanhos[g]})"
        for g in range(result.k_used)
    ))
    m.get_root().html.add_child(folium.Element(legend_html))

    output_path = Path(output_path)
    output_path.parent.mkdir(parents=True, exist_ok=True)
    if output_path.exists():
        output_path.unlink()

    m.save(str(output_path))
    logger.success(f"✅ Mapa de clusters salvo em {output_path}")
    return output_path
