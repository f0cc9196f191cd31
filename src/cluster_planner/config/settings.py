#cluster_planner/config/settings.py

import os

from loguru import logger


def _env_int(name: str, default):
    valor = os.getenv(name)
    if valor is None or valor.strip() == "":
        return default
    try:
        return int(valor)
    except ValueError:
        logger.warning(f"⚠️ {name}='{valor}' não é inteiro — usando padrão {default}.")
        return default


# ============================================================
# ⚙️ Parâmetros do Cluster Planner
# ============================================================
DEFAULT_K = _env_int("CLUSTER_DEFAULT_K", 6)
BALANCE_ROUNDS = _env_int("CLUSTER_ITERATIONS", 2)
KMEANS_MAX_ITER = _env_int("CLUSTER_KMEANS_MAX_ITER", 12)
SWAP_MAX_SCANS = _env_int("CLUSTER_SWAP_MAX_SCANS", 50)

# None = semente aleatória a cada execução
DEFAULT_SEED = _env_int("CLUSTER_SEED", None)

OUTPUT_DIR = os.getenv("CLUSTER_OUTPUT_DIR", "output/cluster_planner")

# ============================================================
# 📄 Colunas da planilha de sites
# ============================================================
SITE_ID_COLUMN = "Site ID"
LATITUDE_COLUMN = "Latitude"
LONGITUDE_COLUMN = "Longitude"

EXPORT_PASSTHROUGH_COLUMNS = [
    "FE ID",
    "Technology",
    "Location",
    "Area",
    "ON/OFF_Season-26",
    "VIP_Category",
    "Site_Type_Category",
]

# ordem do CSV de planejamento (mesma da exportação do planner)
EXPORT_COLUMNS = [
    "Site ID",
    "NFO Name",
    "FE ID",
    "Technology",
    "Latitude",
    "Longitude",
    "Location",
    "Area",
    "ON/OFF_Season-26",
    "VIP_Category",
    "Site_Type_Category",
]
