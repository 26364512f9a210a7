# pdv/usecases/ajuste_estoque.py
"""
UC: AJUSTE de estoque (inventário).

O estoque do produto passa a ser o valor contado, nunca abaixo de zero. A
movimentação ``ajuste`` guarda a diferença com sinal (contado - anterior),
então a soma das movimentações continua batendo com o estoque.
"""

from __future__ import annotations

from typing import Any, Optional

from pdv.config import DB_PATH
from pdv.domain.errors import NotFoundError, ValidationError
from pdv.domain.models import MovimentoEstoque, hoje_iso
from pdv.infra.db import connect
from pdv.infra.repositories import MovimentoRepo, ProdutoRepo
from pdv.infra.logger import log_database_operation, log_estoque, log_system_event, log_transaction


def _estoque_contado(valor: Any) -> int:
    try:
        f = float(str(valor).strip())
        n = int(f)
    except (TypeError, ValueError, OverflowError):
        raise ValidationError(f"Estoque contado inválido: {valor!r}")
    if n != f:
        raise ValidationError(f"Estoque contado deve ser inteiro: {valor!r}")
    return max(0, n)


def registrar_ajuste(
    produto_id: int,
    novo_estoque: Any,
    motivo: Optional[str] = None,
    data: Optional[str] = None,
    db_path: str = DB_PATH,
) -> MovimentoEstoque:
    """Define o estoque do produto como ``novo_estoque`` e registra o ajuste."""
    log_system_event("ajuste_start", {"produto_id": produto_id})
    try:
        contado = _estoque_contado(novo_estoque)
        prod_repo = ProdutoRepo(db_path)
        with connect(db_path, immediate=True) as c:
            produto = prod_repo.get(produto_id, conn=c)
            if produto is None:
                raise NotFoundError(f"Produto {produto_id} não encontrado")
            prod_repo.set_estoque(produto.id, contado, conn=c)
            mov = MovimentoEstoque(
                produto_id=produto.id,
                produto_nome=produto.nome,
                tipo="ajuste",
                quantidade=contado - produto.estoque,
                motivo=(motivo or "").strip() or f"Ajuste de inventário: {produto.estoque} -> {contado}",
                data=data or hoje_iso(),
            )
            MovimentoRepo(db_path).insert(mov, conn=c)

        log_estoque("ajuste", produto.id, mov.quantidade, estoque_anterior=produto.estoque, estoque_novo=contado)
        log_database_operation("movimento_estoque", "INSERT", 1, produto_id=produto.id)
        log_transaction("ajuste", {"produto_id": produto_id, "estoque": contado}, result="success")
        return mov
    except Exception as e:
        log_transaction("ajuste", {"produto_id": produto_id, "estoque": novo_estoque}, error=str(e))
        log_system_event("ajuste_error", {"error": str(e)}, level="error")
        raise
