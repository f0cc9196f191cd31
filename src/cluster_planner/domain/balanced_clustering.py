# ============================================================
# 📦 src/cluster_planner/domain/balanced_clustering.py
# ============================================================

from typing import List, Optional, Tuple, Union

import numpy as np
from loguru import logger

from cluster_planner.domain.haversine_utils import haversine_matrix_km, mean_centroid

RandomState = Union[None, int, np.random.Generator]


# ============================================================
# 📍 Funções auxiliares
# ============================================================
def build_capacities(total: int, k: int) -> List[int]:
    """Divisão igualitária; o resto vai para os grupos de menor índice."""
    k = max(1, int(k))
    base, resto = divmod(int(total), k)
    return [base + (1 if g < resto else 0) for g in range(k)]


def recompute_centroids(
    coords: np.ndarray,
    labels: np.ndarray,
    k: int,
    fallback: Optional[np.ndarray] = None,
) -> np.ndarray:
    """
    Média simples de lat/lng por grupo.
    Grupo vazio mantém fallback[g] (ou o primeiro ponto se não houver fallback).
    """
    centers = np.empty((k, 2), dtype=float)
    if len(coords) == 0:
        return centers[:0]

    contagem = np.bincount(labels, minlength=k)[:k]
    soma_lat = np.bincount(labels, weights=coords[:, 0], minlength=k)[:k]
    soma_lng = np.bincount(labels, weights=coords[:, 1], minlength=k)[:k]

    for g in range(k):
        if contagem[g] > 0:
            centers[g] = (soma_lat[g] / contagem[g], soma_lng[g] / contagem[g])
        elif fallback is not None and g < len(fallback):
            centers[g] = fallback[g]
        else:
            centers[g] = coords[0]
    return centers


def initialize_centroids(coords: np.ndarray, k: int, rng: np.random.Generator) -> np.ndarray:
    """Sorteia min(k, n) pontos distintos como centros iniciais."""
    n = len(coords)
    m = min(int(k), n)
    idx = rng.choice(n, size=m, replace=False)
    return coords[idx].copy()


# ============================================================
# 1️⃣ Fase A — KMeans geográfico sem capacidade
# ============================================================
def run_kmeans(
    coords: np.ndarray,
    k: int,
    rng: np.random.Generator,
    max_iter: int = 12,
) -> Tuple[np.ndarray, np.ndarray]:
    n = len(coords)
    if n == 0:
        return np.zeros(0, dtype=int), np.zeros((0, 2), dtype=float)
    if k <= 1:
        return np.zeros(n, dtype=int), coords[:1].copy()

    centers = initialize_centroids(coords, k, rng)
    labels = np.zeros(n, dtype=int)

    # grupo vazio cai no ponto (g % n)
    fallback = coords[np.arange(k) % n]

    for it in range(max_iter):
        dist = haversine_matrix_km(coords, centers)
        novos = np.argmin(dist, axis=1)
        mudou = int(np.count_nonzero(novos != labels))
        labels = novos

        centers = recompute_centroids(coords, labels, k, fallback)
        logger.debug(f"🔁 KMeans iteração {it + 1}: {mudou} pontos mudaram de grupo")

        if not mudou:
            break

    return labels, centers


# ============================================================
# 2️⃣ Fase B — Rebalanceamento por capacidade
# ============================================================
def balance_assignments(
    coords: np.ndarray,
    centers: np.ndarray,
    labels: np.ndarray,
    capacities: List[int],
) -> np.ndarray:
    """
    Mantém cada ponto no grupo atual enquanto houver vaga; os excedentes
    vão, em ordem de entrada, para o grupo mais próximo ainda com vaga.
    """
    n = len(coords)
    if n == 0:
        return np.zeros(0, dtype=int)

    k = len(centers)
    dist = haversine_matrix_km(coords, centers)
    preferencias = np.argsort(dist, axis=1, kind="stable")

    final = np.array(labels, dtype=int, copy=True)
    ocupacao = np.zeros(k, dtype=int)
    excedentes = []

    for i in range(n):
        atual = final[i]
        if ocupacao[atual] < capacities[atual]:
            ocupacao[atual] += 1
        else:
            excedentes.append(i)

    for i in excedentes:
        for g in preferencias[i]:
            if ocupacao[g] < capacities[g]:
                final[i] = g
                ocupacao[g] += 1
                break
        else:
            # sem vaga em lugar nenhum: fica onde estava, mesmo acima da capacidade
            ocupacao[final[i]] += 1

    logger.debug(f"⚖️ Rebalanceamento: {len(excedentes)} excedentes realocados | ocupação={ocupacao.tolist()}")
    return final


# ============================================================
# 3️⃣ Fase C — Trocas par a par
# ============================================================
def refine_swaps(
    coords: np.ndarray,
    labels: np.ndarray,
    centers: np.ndarray,
    max_scans: int = 50,
) -> np.ndarray:
    """
    Troca pares (i, j) de grupos diferentes quando a soma das distâncias aos
    centros cai estritamente. Tamanhos dos grupos não mudam.

    Cada varredura é O(N²); é o gargalo do algoritmo se N crescer muito.
    """
    n = len(coords)
    labels = np.array(labels, dtype=int, copy=True)
    if n < 2 or len(centers) < 2:
        return labels

    # centros fixos durante o refinamento
    dist = haversine_matrix_km(coords, centers)

    melhorou = True
    varreduras = 0
    total_trocas = 0

    while melhorou and varreduras < max_scans:
        melhorou = False
        varreduras += 1

        for i in range(n - 1):
            inicio = i + 1
            while inicio < n:
                u = labels[i]
                cauda = labels[inicio:]
                bloco = dist[inicio:]

                custo_atual = dist[i, u] + bloco[np.arange(len(cauda)), cauda]
                custo_troca = dist[i, cauda] + bloco[:, u]

                candidatos = np.flatnonzero((cauda != u) & (custo_troca < custo_atual))
                if candidatos.size == 0:
                    break

                j = inicio + int(candidatos[0])
                labels[i], labels[j] = labels[j], u
                melhorou = True
                total_trocas += 1
                inicio = j + 1

    logger.debug(f"🔀 Refinamento por trocas: {total_trocas} trocas em {varreduras} varreduras")
    return labels


# ============================================================
# 🚀 Algoritmo principal
# ============================================================
def balanced_clustering(
    coords,
    k: int,
    iterations: int = 2,
    max_kmeans_iter: int = 12,
    max_swap_scans: int = 50,
    random_state: RandomState = None,
) -> Tuple[np.ndarray, np.ndarray]:
    """
    Clusterização geográfica balanceada:
      A) KMeans haversine (semente geográfica, ignora capacidade)
      B) rebalanceamento para tamanhos ⌊N/K⌋ / ⌈N/K⌉
      C) trocas par a par que reduzem a distância total aos centros
    B e C repetem `iterations` vezes, sempre contra os centros da rodada anterior.

    `random_state` aceita int, Generator do numpy ou None.
    Retorna (labels, centers) como arrays numpy.
    """
    coords = np.asarray(coords, dtype=float).reshape(-1, 2)
    n = len(coords)
    k = int(k)

    if n == 0:
        return np.zeros(0, dtype=int), np.zeros((0, 2), dtype=float)

    if k <= 1:
        return np.zeros(n, dtype=int), np.array([mean_centroid(coords)], dtype=float)

    rng = np.random.default_rng(random_state)
    logger.debug(f"📊 Clusterização balanceada: N={n}, K={k}, rodadas={iterations}")

    labels, centers = run_kmeans(coords, k, rng, max_iter=max_kmeans_iter)
    capacities = build_capacities(n, k)

    for rodada in range(max(1, iterations)):
        labels = balance_assignments(coords, centers, labels, capacities)
        centers = recompute_centroids(coords, labels, k, centers)
        labels = refine_swaps(coords, labels, centers, max_scans=max_swap_scans)
        centers = recompute_centroids(coords, labels, k, centers)
        logger.debug(f"🌀 Rodada {rodada + 1}: tamanhos → {np.bincount(labels, minlength=k).tolist()}")

    return labels, centers
