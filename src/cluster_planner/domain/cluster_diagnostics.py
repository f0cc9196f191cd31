# ============================================================
# 📦 src/cluster_planner/domain/cluster_diagnostics.py
# ============================================================

import math
from typing import Dict, List, Optional, Sequence

from loguru import logger

from cluster_planner.domain.entities import Centroid, ClusterResult, GroupSummary, LocatedPoint
from cluster_planner.domain.haversine_utils import haversine_km
from cluster_planner.domain.site_index import normalize_site_id


def summarize_groups(
    points: Sequence[LocatedPoint],
    assignment: Sequence[int],
    centroids: Sequence[Centroid],
) -> List[GroupSummary]:
    """Tamanho e distância média / máxima ao centro de cada grupo."""
    if not points or not centroids:
        return []

    totais = [{"n": 0, "soma": 0.0, "max": 0.0} for _ in centroids]
    for p, g in zip(points, assignment):
        if g < 0 or g >= len(centroids):
            continue
        c = centroids[g]
        d = haversine_km((p.lat, p.lng), (c.lat, c.lng))
        totais[g]["n"] += 1
        totais[g]["soma"] += d
        totais[g]["max"] = max(totais[g]["max"], d)

    resumo = [
        GroupSummary(
            group=g + 1,
            size=t["n"],
            avg_km=round(t["soma"] / t["n"], 2) if t["n"] else 0.0,
            max_km=round(t["max"], 2),
            centroid=centroids[g],
        )
        for g, t in enumerate(totais)
    ]

    logger.info(
        "📈 Grupos: "
        + " | ".join(f"NFO {s.group}: {s.size} sites, média={s.avg_km:.2f} km" for s in resumo)
    )
    return resumo


def explain_point(result: ClusterResult, site_id: str) -> Optional[Dict]:
    """
    Distâncias de um site a todos os centros, da menor para a maior.
    Aceita o ID cru ('W2362') ou normalizado ('2362').
    """
    indice = {}
    for i, p in enumerate(result.points):
        indice[p.site_id] = i
        normalizado = normalize_site_id(p.site_id)
        if normalizado:
            indice.setdefault(normalizado, i)

    pos = indice.get(site_id)
    if pos is None:
        normalizado = normalize_site_id(site_id)
        pos = indice.get(normalizado) if normalizado else None
    if pos is None:
        logger.warning(f"⚠️ Site {site_id} não está no resultado da clusterização.")
        return None

    p = result.points[pos]
    distancias = sorted(
        (
            {"group": g + 1, "km": round(haversine_km((p.lat, p.lng), (c.lat, c.lng)), 2)}
            for g, c in enumerate(result.centroids)
        ),
        key=lambda d: d["km"],
    )
    return {
        "siteId": p.site_id,
        "chosenGroup": result.assignment[pos] + 1,
        "distances": distancias,
    }


def capacity_ok(result: ClusterResult) -> bool:
    """Confere se cada grupo ficou com ⌊N/K⌋ ou ⌈N/K⌉ sites (grupo reservado fora da conta)."""
    tamanhos = result.group_sizes()
    if result.reserved_group:
        tamanhos = tamanhos[1:]
    if not tamanhos:
        return True
    n = sum(tamanhos)
    k = len(tamanhos)
    return all(n // k <= t <= math.ceil(n / k) for t in tamanhos)
