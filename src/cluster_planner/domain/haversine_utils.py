# ============================================================
# 📦 src/cluster_planner/domain/haversine_utils.py
# ============================================================

import math

import numpy as np
from sklearn.metrics.pairwise import haversine_distances

EARTH_RADIUS_KM = 6371.0


def haversine_km(coord1, coord2):
    """
    Calcula a distância entre dois pontos (lat, lng) em quilômetros.
    """
    lat1, lon1 = coord1
    lat2, lon2 = coord2

    phi1, phi2 = math.radians(lat1), math.radians(lat2)
    dphi = math.radians(lat2 - lat1)
    dlambda = math.radians(lon2 - lon1)

    a = math.sin(dphi / 2) ** 2 + math.cos(phi1) * math.cos(phi2) * math.sin(dlambda / 2) ** 2
    return 2 * EARTH_RADIUS_KM * math.asin(math.sqrt(min(1.0, a)))


def haversine_matrix_km(coords_a: np.ndarray, coords_b: np.ndarray) -> np.ndarray:
    """Matriz de distâncias (len(a) x len(b)) em km, com coords em graus."""
    a = np.radians(np.asarray(coords_a, dtype=float).reshape(-1, 2))
    b = np.radians(np.asarray(coords_b, dtype=float).reshape(-1, 2))
    if len(a) == 0 or len(b) == 0:
        return np.zeros((len(a), len(b)))
    return haversine_distances(a, b) * EARTH_RADIUS_KM


def mean_centroid(coords: np.ndarray):
    """Centro simples (média aritmética de lat e lng), não o centro esférico."""
    coords = np.asarray(coords, dtype=float)
    return float(coords[:, 0].mean()), float(coords[:, 1].mean())
