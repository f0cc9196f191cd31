# ============================================================
# 📦 src/cluster_planner/application/cluster_planner_use_case.py
# ============================================================

import time
from dataclasses import dataclass, field
from typing import Callable, Iterable, List, Optional, Union

import numpy as np
from loguru import logger

from cluster_planner.config import settings
from cluster_planner.domain.balanced_clustering import RandomState, balanced_clustering
from cluster_planner.domain.cluster_diagnostics import summarize_groups
from cluster_planner.domain.entities import (
    Centroid,
    ClusterResult,
    GroupSummary,
    LocatedPoint,
    ResolutionReport,
    SiteRecord,
)
from cluster_planner.domain.haversine_utils import mean_centroid
from cluster_planner.domain.site_index import SiteIndex

ReservedPredicate = Callable[[LocatedPoint], bool]


def _coords(points: List[LocatedPoint]) -> np.ndarray:
    return np.array([[p.lat, p.lng] for p in points], dtype=float).reshape(-1, 2)


def _centroids(centers: np.ndarray) -> List[Centroid]:
    return [Centroid(lat=float(c[0]), lng=float(c[1])) for c in centers]


# ============================================================
# ⚙️ Operação principal
# ============================================================
def cluster(
    points: Iterable[LocatedPoint],
    k: int,
    reserved_predicate: Optional[ReservedPredicate] = None,
    iterations: int = settings.BALANCE_ROUNDS,
    max_kmeans_iter: int = settings.KMEANS_MAX_ITER,
    max_swap_scans: int = settings.SWAP_MAX_SCANS,
    random_state: RandomState = None,
) -> ClusterResult:
    """
    Divide os pontos em grupos compactos e do mesmo tamanho.

    - k abaixo de 1 vira 1; k acima de N vira N.
    - Com `reserved_predicate`, os pontos reservados (ex.: VIP) formam sozinhos o
      grupo 0 e o restante é clusterizado em k-1 grupos, deslocados em +1.
    - Nenhuma entrada gera exceção: sem pontos → resultado vazio com k_used=0.
    """
    points = list(points)
    n = len(points)

    if n == 0:
        logger.warning("⚠️ Nenhum ponto válido para clusterizar.")
        return ClusterResult(assignment=[], centroids=[], k_used=0, points=[])

    try:
        k_pedido = int(k)
    except (TypeError, ValueError):
        k_pedido = 1
    if k_pedido < 1:
        logger.warning(f"⚠️ K={k} inválido — usando K=1.")
    k_used = min(max(1, k_pedido), n)

    params = dict(
        iterations=iterations,
        max_kmeans_iter=max_kmeans_iter,
        max_swap_scans=max_swap_scans,
        random_state=random_state,
    )

    reservados_idx: List[int] = []
    if reserved_predicate is not None:
        reservados_idx = [i for i, p in enumerate(points) if reserved_predicate(p)]

    # ------------------------------------------------------------
    # Caminho normal (sem grupo reservado)
    # ------------------------------------------------------------
    if not reservados_idx:
        labels, centers = balanced_clustering(_coords(points), k_used, **params)
        return ClusterResult(
            assignment=[int(g) for g in labels],
            centroids=_centroids(centers),
            k_used=len(centers),
            points=points,
        )

    # ------------------------------------------------------------
    # Grupo reservado = 0; normais em k-1 grupos, deslocados +1
    # ------------------------------------------------------------
    if k_used - 1 < 1:
        logger.info("ℹ️ Apenas 1 grupo pedido — reservados e normais no mesmo grupo.")
        lat, lng = mean_centroid(_coords(points))
        return ClusterResult(
            assignment=[0] * n,
            centroids=[Centroid(lat=lat, lng=lng)],
            k_used=1,
            points=points,
        )

    reservados_set = set(reservados_idx)
    normais_idx = [i for i in range(n) if i not in reservados_set]
    reservados = [points[i] for i in reservados_idx]
    normais = [points[i] for i in normais_idx]

    lat, lng = mean_centroid(_coords(reservados))
    centroids = [Centroid(lat=lat, lng=lng)]
    assignment = [0] * n

    if normais:
        k_normais = min(k_used - 1, len(normais))
        labels, centers = balanced_clustering(_coords(normais), k_normais, **params)
        for i, g in zip(normais_idx, labels):
            assignment[i] = int(g) + 1
        centroids.extend(_centroids(centers))

    logger.info(
        f"⭐ Grupo reservado com {len(reservados)} sites | {len(normais)} sites em {len(centroids) - 1} grupos"
    )
    return ClusterResult(
        assignment=assignment,
        centroids=centroids,
        k_used=len(centroids),
        points=points,
        reserved_group=True,
    )


# ============================================================
# 🧭 Caso de uso: texto colado → grupos de NFO
# ============================================================
@dataclass
class PlannerOutcome:
    points: List[LocatedPoint]
    report: ResolutionReport
    result: ClusterResult
    summaries: List[GroupSummary] = field(default_factory=list)
    duration_s: float = 0.0

    @property
    def ok(self) -> bool:
        return self.result.k_used > 0


class ClusterPlannerUseCase:
    """Resolve os IDs colados contra a base de sites e distribui entre os NFOs."""

    def __init__(
        self,
        records: Iterable[Union[SiteRecord, dict]],
        k: int = settings.DEFAULT_K,
        reserved_predicate: Optional[ReservedPredicate] = None,
        iterations: int = settings.BALANCE_ROUNDS,
        random_state: RandomState = settings.DEFAULT_SEED,
    ):
        self.index = SiteIndex(records)
        self.k = k
        self.reserved_predicate = reserved_predicate
        self.iterations = iterations
        self.random_state = random_state

    def execute(self, raw_text: str) -> PlannerOutcome:
        inicio = time.time()
        logger.info(f"🚀 Iniciando Cluster Planner | K={self.k} | base={self.index.total_records} sites")

        points, report = self.index.resolve(raw_text)
        if not points:
            logger.error("❌ Nenhum site com coordenadas — clusterização não executada.")
            return PlannerOutcome(
                points=[],
                report=report,
                result=ClusterResult(assignment=[], centroids=[], k_used=0),
                duration_s=round(time.time() - inicio, 2),
            )

        result = cluster(
            points,
            self.k,
            reserved_predicate=self.reserved_predicate,
            iterations=self.iterations,
            random_state=self.random_state,
        )
        summaries = summarize_groups(points, result.assignment, result.centroids)

        duracao = round(time.time() - inicio, 2)
        logger.success(f"✅ Cluster Planner concluído | {len(points)} sites em {result.k_used} grupos | {duracao}s")
        return PlannerOutcome(
            points=points,
            report=report,
            result=result,
            summaries=summaries,
            duration_s=duracao,
        )
