# ============================================================
# 📦 src/cluster_planner/domain/site_index.py
# ============================================================

import math
import re
from collections import defaultdict
from typing import Dict, Iterable, List, Optional, Tuple, Union

from loguru import logger

from cluster_planner.domain.entities import LocatedPoint, ResolutionReport, SiteRecord

_TOKEN_SPLIT = re.compile(r"[\s,;]+")
_PREFIXED_ID = re.compile(r"^[A-Za-z](\d+)$")
_DIGITS_ONLY = re.compile(r"^\d+$")
_NULL_MARKERS = {"#N/A", "N/A", "NA", "NAN", "NULL", "NONE", "-"}


# ============================================================
# 🔤 Normalização de IDs
# ============================================================
def tokenize_site_ids(text: Optional[str]) -> List[str]:
    """Quebra o texto colado em tokens (espaços, quebras de linha, vírgula ou ponto-e-vírgula)."""
    if not text:
        return []
    return [t.strip() for t in _TOKEN_SPLIT.split(text) if t and t.strip()]


def normalize_site_id(value) -> Optional[str]:
    """
    'W2362', 'w2362' e '2362' → '2362'.
    Qualquer outro formato volta apenas sem espaços nas pontas.
    """
    raw = "" if value is None else str(value).strip()
    if not raw:
        return None
    match = _PREFIXED_ID.match(raw)
    if match:
        return match.group(1)
    return raw


def is_standard_site_id(token: str) -> bool:
    """Formato padrão da planilha: letra + dígitos ou apenas dígitos."""
    raw = (token or "").strip()
    return bool(_PREFIXED_ID.match(raw) or _DIGITS_ONLY.match(raw))


def parse_coordinate(value) -> Optional[float]:
    """Converte células de planilha ('#N/A', '', texto numérico, NaN) em float ou None."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, str):
        texto = value.strip()
        if not texto or texto.upper() in _NULL_MARKERS:
            return None
        try:
            numero = float(texto)
        except ValueError:
            return None
    else:
        try:
            numero = float(value)
        except (TypeError, ValueError):
            return None
    return numero if math.isfinite(numero) else None


def _coordenadas_validas(lat: Optional[float], lng: Optional[float]) -> bool:
    return lat is not None and lng is not None and -90.0 <= lat <= 90.0 and -180.0 <= lng <= 180.0


# ============================================================
# 🗂️ Índice de sites
# ============================================================
class SiteIndex:
    """
    Índice multi-valorado: cada registro entra pela chave crua ('W2362')
    e pela normalizada ('2362'), então a busca funciona com ou sem prefixo.
    """

    def __init__(self, records: Iterable[Union[SiteRecord, dict]]):
        self._lookup: Dict[str, List[SiteRecord]] = defaultdict(list)
        self.total_records = 0

        for rec in records:
            if not isinstance(rec, SiteRecord):
                rec = SiteRecord.from_mapping(rec)
            site_id = (rec.site_id or "").strip()
            if not site_id:
                continue
            self.total_records += 1

            chaves = {site_id}
            normalizado = normalize_site_id(site_id)
            if normalizado:
                chaves.add(normalizado)
            for chave in chaves:
                self._lookup[chave].append(rec)

        logger.debug(f"🗂️ SiteIndex montado | registros={self.total_records} | chaves={len(self._lookup)}")

    def lookup(self, key: str) -> List[SiteRecord]:
        return list(self._lookup.get(key, []))

    def __contains__(self, key) -> bool:
        return key in self._lookup

    def __len__(self) -> int:
        return len(self._lookup)

    # --------------------------------------------------------
    def resolve(self, raw_text: str) -> Tuple[List[LocatedPoint], ResolutionReport]:
        tokens = tokenize_site_ids(raw_text)
        report = ResolutionReport(total_pasted=len(tokens))

        unique_ids: List[str] = []
        vistos = set()
        for token in tokens:
            normalizado = normalize_site_id(token)
            if not normalizado:
                report.invalid_inputs.append(token)
                continue
            # fora do padrão vai para invalid_inputs, mas a busca exata continua
            if not is_standard_site_id(token) and token not in report.invalid_inputs:
                report.invalid_inputs.append(token)
            if normalizado in vistos:
                continue
            vistos.add(normalizado)
            unique_ids.append(normalizado)
        report.unique_ids = len(unique_ids)

        points: List[LocatedPoint] = []
        emitidos = set()

        for site_id in unique_ids:
            candidatos = self._lookup.get(site_id)
            if not candidatos:
                report.not_found_ids.append(site_id)
                continue

            for rec in candidatos:
                raw_id = (rec.site_id or "").strip()
                if not raw_id or raw_id in emitidos:
                    continue

                lat = parse_coordinate(rec.lat)
                lng = parse_coordinate(rec.lng)
                if not _coordenadas_validas(lat, lng):
                    report.missing_coords_ids.append(raw_id or site_id)
                    continue

                emitidos.add(raw_id)
                points.append(LocatedPoint(site_id=raw_id, lat=lat, lng=lng, record=rec))

        report.matched = len(points)

        if not points:
            logger.warning(
                f"⚠️ Nenhum site com coordenadas encontrado | colados={report.total_pasted} "
                f"| não encontrados={len(report.not_found_ids)} | sem coordenadas={len(report.missing_coords_ids)}"
            )
        else:
            logger.info(
                f"📍 Resolução concluída | colados={report.total_pasted} | únicos={report.unique_ids} "
                f"| encontrados={report.matched} | não encontrados={len(report.not_found_ids)} "
                f"| sem coordenadas={len(report.missing_coords_ids)}"
            )
        return points, report


def resolve_points(
    raw_text: str,
    reference_records: Iterable[Union[SiteRecord, dict]],
) -> Tuple[List[LocatedPoint], ResolutionReport]:
    """Resolve o texto colado contra os registros de referência."""
    return SiteIndex(reference_records).resolve(raw_text)
