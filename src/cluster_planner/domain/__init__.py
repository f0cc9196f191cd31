from .entities import Centroid, ClusterResult, GroupSummary, LocatedPoint, ResolutionReport, SiteRecord
