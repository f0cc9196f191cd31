from cluster_planner.domain.site_index import resolve_points
from cluster_planner.application.cluster_planner_use_case import cluster

__all__ = ["resolve_points", "cluster"]
