# ==========================================================
# 📦 src/cluster_planner/domain/entities.py
# ==========================================================

from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional


@dataclass
class SiteRecord:
    """Registro de referência de um site (linha da planilha / tabela de sites)."""
    site_id: str
    lat: Optional[float] = None
    lng: Optional[float] = None
    payload: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_mapping(
        cls,
        row: Mapping[str, Any],
        id_column: str = "Site ID",
        lat_column: str = "Latitude",
        lng_column: str = "Longitude",
    ) -> "SiteRecord":
        """
        Monta o registro a partir de uma linha de planilha ou de um dict {id, lat, lng}.
        As coordenadas ficam cruas aqui; o parsing acontece no SiteIndex.
        """
        if id_column not in row and "id" in row:
            id_column, lat_column, lng_column = "id", "lat", "lng"

        raw_id = row.get(id_column)
        site_id = "" if raw_id is None else str(raw_id).strip()
        return cls(
            site_id=site_id,
            lat=row.get(lat_column),
            lng=row.get(lng_column),
            payload=dict(row),
        )


@dataclass(frozen=True)
class LocatedPoint:
    """Site resolvido com coordenadas válidas, pronto para a clusterização."""
    site_id: str
    lat: float
    lng: float
    record: Any = field(default=None, compare=False, repr=False)


@dataclass(frozen=True)
class Centroid:
    lat: float
    lng: float


# ==========================================================
# 📋 Diagnóstico da resolução de IDs
# ==========================================================
@dataclass
class ResolutionReport:
    total_pasted: int = 0
    unique_ids: int = 0
    matched: int = 0
    not_found_ids: List[str] = field(default_factory=list)
    missing_coords_ids: List[str] = field(default_factory=list)
    invalid_inputs: List[str] = field(default_factory=list)

    def as_dict(self) -> Dict[str, Any]:
        return {
            "totalPasted": self.total_pasted,
            "uniqueIds": self.unique_ids,
            "matched": self.matched,
            "notFoundIds": list(self.not_found_ids),
            "missingCoordsIds": list(self.missing_coords_ids),
            "invalidInputs": list(self.invalid_inputs),
        }


# ==========================================================
# 🗺️ Resultado da clusterização
# ==========================================================
@dataclass
class ClusterResult:
    """
    Resultado de uma execução do planner.
    - assignment: índice do grupo por ponto, na mesma ordem de `points`
    - centroids: um centro por grupo (índice = grupo)
    - k_used: número de grupos efetivamente usados
    """
    assignment: List[int]
    centroids: List[Centroid]
    k_used: int
    points: List[LocatedPoint] = field(default_factory=list, repr=False)
    reserved_group: bool = False

    def __iter__(self):
        # permite: assignment, centroids, k_used = cluster(...)
        return iter((self.assignment, self.centroids, self.k_used))

    @property
    def assignment_by_id(self) -> Dict[str, int]:
        return {p.site_id: g for p, g in zip(self.points, self.assignment)}

    def group_sizes(self) -> List[int]:
        sizes = [0] * self.k_used
        for g in self.assignment:
            sizes[g] += 1
        return sizes


@dataclass
class GroupSummary:
    group: int          # 1-based (NFO 1, NFO 2, ...)
    size: int
    avg_km: float
    max_km: float
    centroid: Optional[Centroid] = None
