# ============================================================
# 📦 src/cluster_planner/infrastructure/site_reader.py
# ============================================================

import os
from typing import List

import pandas as pd
from loguru import logger

from cluster_planner.config import settings
from cluster_planner.domain.entities import SiteRecord


def _ler_tabela(path: str) -> pd.DataFrame:
    ext = os.path.splitext(path)[1].lower()
    if ext == ".xlsx":
        return pd.read_excel(path, sheet_name=0, dtype=object, engine="openpyxl")
    if ext == ".csv":
        # planilhas exportadas em pt-BR costumam vir com ';'
        with open(path, encoding="utf-8-sig") as f:
            cabecalho = f.readline()
        sep = ";" if cabecalho.count(";") > cabecalho.count(",") else ","
        return pd.read_csv(path, sep=sep, dtype=object, encoding="utf-8-sig")
    raise ValueError(f"Formato não suportado: {ext} (use .csv ou .xlsx)")


def load_site_records(
    path: str,
    id_column: str = settings.SITE_ID_COLUMN,
    lat_column: str = settings.LATITUDE_COLUMN,
    lng_column: str = settings.LONGITUDE_COLUMN,
) -> List[SiteRecord]:
    """
    Lê a base de sites (CSV ou XLSX) e devolve os registros de referência.
    Todas as colunas ficam no payload; coordenadas são interpretadas depois, no SiteIndex.
    """
    if not os.path.exists(path):
        raise FileNotFoundError(f"Arquivo de sites não encontrado: {path}")

    df = _ler_tabela(path)
    df.columns = [str(c) for c in df.columns]

    faltando = [c for c in (id_column, lat_column, lng_column) if c not in df.columns]
    if faltando:
        raise ValueError(f"Colunas obrigatórias ausentes: {', '.join(faltando)}")

    df = df.astype(object).where(pd.notna(df), None)

    registros = [
        SiteRecord.from_mapping(row, id_column=id_column, lat_column=lat_column, lng_column=lng_column)
        for row in df.to_dict(orient="records")
    ]
    sem_id = sum(1 for r in registros if not r.site_id)
    if sem_id:
        logger.warning(f"⚠️ {sem_id} linhas sem '{id_column}' serão ignoradas.")

    logger.info(f"📥 {len(registros)} sites carregados de {path}")
    return registros
