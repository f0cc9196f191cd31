# ============================================================
# 📦 src/cluster_planner/cli/run_cluster_planner.py
# ============================================================

import argparse
import sys
from datetime import date
from pathlib import Path

from loguru import logger

from cluster_planner.application.cluster_planner_use_case import ClusterPlannerUseCase
from cluster_planner.config import settings
from cluster_planner.domain.cluster_diagnostics import explain_point
from cluster_planner.infrastructure.site_reader import load_site_records
from cluster_planner.reporting.export_cluster_csv import export_cluster_csv
from cluster_planner.visualization.cluster_plotting import gerar_mapa_clusters


def validar_data(valor: str) -> date:
    try:
        return date.fromisoformat(valor)
    except ValueError:
        raise argparse.ArgumentTypeError(f"Data inválida: '{valor}' — use AAAA-MM-DD.")


def montar_predicado_reservado(coluna, valores):
    """Site é reservado quando o payload[coluna] bate com um dos valores (ou é não vazio, sem valores)."""
    if not coluna:
        return None
    aceitos = {v.strip().upper() for v in valores.split(",")} if valores else None

    def predicado(point):
        payload = getattr(point.record, "payload", None) or {}
        valor = payload.get(coluna)
        if valor is None or str(valor).strip() == "":
            return False
        if aceitos is None:
            return True
        return str(valor).strip().upper() in aceitos

    return predicado


def main(argv=None):
    parser = argparse.ArgumentParser(description="Distribui sites entre NFOs em grupos compactos e balanceados.")

    # OBRIGATÓRIOS
    parser.add_argument("--sites", required=True, help="Base de sites (.csv ou .xlsx)")
    grupo_ids = parser.add_mutually_exclusive_group(required=True)
    grupo_ids.add_argument("--ids", help="IDs colados (ex.: 'W2362 2363, w2364')")
    grupo_ids.add_argument("--ids_file", help="Arquivo texto com os IDs")

    # PARÂMETROS
    parser.add_argument("--k", type=int, default=settings.DEFAULT_K, help="Número de NFOs / grupos")
    parser.add_argument("--iterations", type=int, default=settings.BALANCE_ROUNDS)
    parser.add_argument("--seed", type=int, default=settings.DEFAULT_SEED)
    parser.add_argument("--reserved_column", default=None, help="Coluna que marca sites reservados (ex.: VIP_Category)")
    parser.add_argument("--reserved_values", default=None, help="Valores aceitos, separados por vírgula")

    # SAÍDA
    parser.add_argument("--output_dir", default=settings.OUTPUT_DIR)
    parser.add_argument("--start_date", type=validar_data, default=None)
    parser.add_argument("--sites_per_day", type=int, default=None)
    parser.add_argument("--map", action="store_true", help="Gera mapa HTML dos grupos")
    parser.add_argument("--explain", default=None, help="Mostra as distâncias de um site a todos os centros")
    parser.add_argument("--verbose", action="store_true")

    args = parser.parse_args(argv)

    logger.remove()
    logger.add(
        sys.stdout,
        colorize=True,
        level="DEBUG" if args.verbose else "INFO",
        format="<green>{time:HH:mm:ss}</green> | <level>{message}</level>",
    )

    try:
        registros = load_site_records(args.sites)
        if args.ids_file:
            texto = Path(args.ids_file).read_text(encoding="utf-8")
        else:
            texto = args.ids
    except (FileNotFoundError, ValueError) as e:
        logger.error(f"❌ {e}")
        return 1

    use_case = ClusterPlannerUseCase(
        records=registros,
        k=args.k,
        reserved_predicate=montar_predicado_reservado(args.reserved_column, args.reserved_values),
        iterations=args.iterations,
        random_state=args.seed,
    )
    outcome = use_case.execute(texto)

    report = outcome.report
    logger.info(
        f"📋 Colados={report.total_pasted} | únicos={report.unique_ids} | encontrados={report.matched}"
    )
    if report.not_found_ids:
        logger.warning(f"🔎 Não encontrados ({len(report.not_found_ids)}): {', '.join(report.not_found_ids)}")
    if report.invalid_inputs:
        logger.warning(f"🚫 Fora do padrão ({len(report.invalid_inputs)}): {', '.join(report.invalid_inputs)}")
    if report.missing_coords_ids:
        logger.warning(f"📭 Sem coordenadas ({len(report.missing_coords_ids)}): {', '.join(report.missing_coords_ids)}")

    if not outcome.ok:
        logger.error("❌ Nenhum resultado retornado.")
        return 2

    csv_path = export_cluster_csv(
        outcome.result,
        output_dir=args.output_dir,
        start_date=args.start_date,
        sites_per_day=args.sites_per_day,
    )

    if args.map:
        # --output_dir pode ser um arquivo .csv: o mapa vai para a mesma pasta do CSV
        pasta_mapa = Path(csv_path).parent if csv_path else Path(args.output_dir)
        mapa = pasta_mapa / f"cluster_planner_K{outcome.result.k_used}.html"
        gerar_mapa_clusters(outcome.result, mapa)

    if args.explain:
        detalhe = explain_point(outcome.result, args.explain)
        if detalhe:
            logger.info(f"🧭 {detalhe['siteId']} → NFO {detalhe['chosenGroup']} | distâncias={detalhe['distances']}")

    logger.success(f"🏁 {outcome.result.k_used} grupos gerados em {outcome.duration_s}s")
    return 0


if __name__ == "__main__":
    sys.exit(main())
