# pdv/usecases/retiradas.py
"""
UC: Retiradas de dinheiro do caixa (sangria).
"""

from __future__ import annotations

from decimal import Decimal
from typing import Any, Dict, List, Optional

from pdv.config import DB_PATH
from pdv.domain.errors import ValidationError
from pdv.domain.models import Retirada, hoje_iso, to_money
from pdv.infra.repositories import RetiradaRepo
from pdv.infra.logger import log_database_operation, log_transaction


def registrar_retirada(
    valor: Any,
    data: Optional[str] = None,
    motivo: Optional[str] = None,
    db_path: str = DB_PATH,
) -> Retirada:
    try:
        v = to_money(valor)
    except ValueError:
        raise ValidationError(f"Valor inválido: {valor!r}")
    if v <= 0:
        raise ValidationError("Valor da retirada deve ser maior que zero")
    ret = Retirada(valor=v, motivo=(motivo or "").strip() or None, data=data or hoje_iso())
    ret.id = RetiradaRepo(db_path).insert(ret)
    log_database_operation("retirada", "INSERT", 1, id=ret.id)
    log_transaction("registrar_retirada", {"valor": str(v), "data": ret.data}, result=ret.id)
    return ret


def listar_retiradas(
    data_ini: Optional[str] = None,
    data_fim: Optional[str] = None,
    db_path: str = DB_PATH,
) -> List[Retirada]:
    return RetiradaRepo(db_path).list(data_ini, data_fim)


def total_retiradas_por_dia(
    data_ini: Optional[str] = None,
    data_fim: Optional[str] = None,
    db_path: str = DB_PATH,
) -> Dict[str, Decimal]:
    """Total retirado por dia (``YYYY-MM-DD`` → valor)."""
    return RetiradaRepo(db_path).total_por_dia(data_ini, data_fim)
