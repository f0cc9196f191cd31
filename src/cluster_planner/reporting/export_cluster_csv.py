#cluster_planner/reporting/export_cluster_csv.py

# ============================================================
# 📦 src/cluster_planner/reporting/export_cluster_csv.py
# ============================================================

import os
from datetime import date, timedelta
from typing import Optional

import pandas as pd
from loguru import logger

from cluster_planner.config import settings
from cluster_planner.domain.entities import ClusterResult


def _texto(valor) -> str:
    if valor is None:
        return ""
    try:
        if pd.isna(valor):
            return ""
    except (TypeError, ValueError):
        pass
    return str(valor)


def build_cluster_dataframe(
    result: ClusterResult,
    start_date: Optional[date] = None,
    sites_per_day: Optional[int] = None,
) -> pd.DataFrame:
    """
    Uma linha por site, ordenada por grupo e Site ID.
    Com start_date + sites_per_day, cada NFO recebe Plan_Date em blocos diários.
    """
    linhas = []
    for p, g in zip(result.points, result.assignment):
        payload = getattr(p.record, "payload", None) or {}
        linha = {
            "Site ID": p.site_id,
            "NFO Name": f"NFO {g + 1}",
            "Latitude": p.lat,
            "Longitude": p.lng,
        }
        for col in settings.EXPORT_PASSTHROUGH_COLUMNS:
            linha[col] = _texto(payload.get(col))
        linha["_grupo"] = g
        linhas.append(linha)

    colunas = list(settings.EXPORT_COLUMNS)
    if not linhas:
        return pd.DataFrame(columns=colunas)

    df = pd.DataFrame(linhas).sort_values(["_grupo", "Site ID"], kind="stable").reset_index(drop=True)

    if start_date is not None and sites_per_day:
        posicao = df.groupby("_grupo").cumcount()
        df["Plan_Date"] = [
            (start_date + timedelta(days=int(pos) // int(sites_per_day))).isoformat()
            for pos in posicao
        ]
        colunas.append("Plan_Date")

    return df[colunas]


def export_cluster_csv(
    result: ClusterResult,
    output_dir: str = settings.OUTPUT_DIR,
    start_date: Optional[date] = None,
    sites_per_day: Optional[int] = None,
) -> Optional[str]:
    df = build_cluster_dataframe(result, start_date=start_date, sites_per_day=sites_per_day)
    if df.empty:
        logger.warning("⚠️ Nenhum site clusterizado — nada a exportar.")
        return None

    # =========================================================
    # Aceita caminho de arquivo ou diretório
    # =========================================================
    if output_dir.endswith(".csv"):
        output_path = output_dir
        pasta = os.path.dirname(output_path)
        if pasta:
            os.makedirs(pasta, exist_ok=True)
    else:
        os.makedirs(output_dir, exist_ok=True)
        sufixo = f"_K{result.k_used}" if result.k_used else ""
        output_path = os.path.join(output_dir, f"hajj_sites_planner_clusters{sufixo}.csv")

    df.to_csv(output_path, index=False, encoding="utf-8-sig")
    logger.success(f"✅ CSV de clusters salvo em {output_path} ({len(df)} sites)")
    return output_path
