# pdv/usecases/producao.py
"""
UC: Registro de PRODUÇÃO de peças de gesso (tabicas, molduras, sancas...).

Cada registro guarda a peça, quantas unidades saíram e quantos sacos de gesso
foram usados. Não mexe no estoque de produtos; é um controle da fábrica.
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional, Tuple

from pdv.config import DB_PATH
from pdv.adapters.parsers import parse_quantidade
from pdv.domain.errors import ValidationError
from pdv.domain.models import Producao, hoje_iso
from pdv.infra.repositories import ProducaoRepo
from pdv.infra.logger import log_database_operation, log_transaction

Tabela = Tuple[List[str], List[List[Any]], Optional[str]]


def _sacos(valor: Any) -> int:
    try:
        f = float(str(valor).strip().replace(",", "."))
        n = int(f)
    except (TypeError, ValueError, OverflowError):
        raise ValidationError(f"Sacos de gesso inválido: {valor!r}")
    if n != f or n < 0:
        raise ValidationError(f"Sacos de gesso deve ser um inteiro não negativo: {valor!r}")
    return n


def registrar_producao(
    peca: str,
    quantidade: Any,
    sacos_gesso: Any = 0,
    data: Optional[str] = None,
    observacao: Optional[str] = None,
    db_path: str = DB_PATH,
) -> Producao:
    nome = (peca or "").strip()
    if not nome:
        raise ValidationError("Nome da peça é obrigatório")
    prod = Producao(
        peca=nome,
        quantidade=parse_quantidade(quantidade),
        sacos_gesso=_sacos(sacos_gesso),
        data=data or hoje_iso(),
        observacao=(observacao or "").strip() or None,
    )
    prod.id = ProducaoRepo(db_path).insert(prod)
    log_database_operation("producao", "INSERT", 1, id=prod.id)
    log_transaction("registrar_producao", {"peca": nome, "quantidade": prod.quantidade, "sacos": prod.sacos_gesso}, result=prod.id)
    return prod


def listar_producoes(
    data_ini: Optional[str] = None,
    data_fim: Optional[str] = None,
    db_path: str = DB_PATH,
) -> List[Producao]:
    return ProducaoRepo(db_path).list(data_ini, data_fim)


def totais_por_peca(
    data_ini: Optional[str] = None,
    data_fim: Optional[str] = None,
    db_path: str = DB_PATH,
) -> Tabela:
    """Unidades e sacos por peça; nomes iguais sem diferença de caixa somam juntos.

    A última linha é o total geral.
    """
    agg: Dict[str, List[Any]] = {}
    for p in listar_producoes(data_ini, data_fim, db_path=db_path):
        linha = agg.setdefault(p.peca.lower(), [p.peca, 0, 0])
        linha[1] += p.quantidade
        linha[2] += p.sacos_gesso
    rows = sorted(agg.values(), key=lambda r: (-r[1], r[0].lower()))
    if rows:
        rows.append(["TOTAL", sum(r[1] for r in rows), sum(r[2] for r in rows)])
    columns = ["Peça", "Quantidade", "Sacos de gesso"]
    return columns, rows, None if rows else "Nenhuma produção no período."


def total_sacos_gesso(
    data_ini: Optional[str] = None,
    data_fim: Optional[str] = None,
    db_path: str = DB_PATH,
) -> int:
    return sum(p.sacos_gesso for p in listar_producoes(data_ini, data_fim, db_path=db_path))
