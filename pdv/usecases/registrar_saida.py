# pdv/usecases/registrar_saida.py
"""
UC: Registrar SAÍDAS de estoque.
- registrar_saida(): baixa manual (perda, uso interno...), com checagem de estoque.
- importar_vendas(): gera as saídas de vendas gravadas sem movimentação.

Obs.:
- ``importar_vendas`` é idempotente: uma venda que já tem movimentação
  (``venda_id``) nunca é baixada de novo.
- Na importação o estoque é limitado a zero em vez de recusar a venda, pois a
  venda já aconteceu.
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional

from pdv.config import DB_PATH
from pdv.adapters.parsers import parse_quantidade
from pdv.domain.errors import NotFoundError, ValidationError
from pdv.domain.models import TIPOS_MOVIMENTO, ItemCatalogo, MovimentoEstoque, hoje_iso
from pdv.domain.reconciliacao import resolver_baixas
from pdv.infra.db import connect
from pdv.infra.repositories import MovimentoRepo, ProdutoRepo, VendaRepo
from pdv.infra.logger import (
    log_database_operation, log_estoque, log_system_event, log_transaction, print_system,
)


def registrar_saida(
    produto_id: int,
    quantidade: Any,
    motivo: Optional[str] = None,
    data: Optional[str] = None,
    db_path: str = DB_PATH,
) -> MovimentoEstoque:
    """Retira ``quantidade`` do estoque. Sem saldo suficiente nada é gravado."""
    log_system_event("saida_unica_start", {"produto_id": produto_id})
    try:
        qtd = parse_quantidade(quantidade)
        prod_repo = ProdutoRepo(db_path)
        with connect(db_path, immediate=True) as c:
            produto = prod_repo.get(produto_id, conn=c)
            if produto is None:
                raise NotFoundError(f"Produto {produto_id} não encontrado")
            item = ItemCatalogo(produto.id, produto.nome, qtd, produto.preco)
            prod_repo.baixar_estoque([item], conn=c)
            mov = MovimentoEstoque(
                produto_id=produto.id,
                produto_nome=produto.nome,
                tipo="saida",
                quantidade=qtd,
                motivo=motivo or "Saída manual",
                data=data or hoje_iso(),
            )
            MovimentoRepo(db_path).insert(mov, conn=c)

        log_estoque("saida", produto.id, qtd, estoque_anterior=produto.estoque)
        log_database_operation("movimento_estoque", "INSERT", 1, produto_id=produto.id)
        log_transaction("saida_unica", {"produto_id": produto_id, "quantidade": qtd}, result="success")
        print_system(">> Saída registrada com sucesso.")
        return mov
    except Exception as e:
        log_transaction("saida_unica", {"produto_id": produto_id, "quantidade": quantidade}, error=str(e))
        log_system_event("saida_unica_error", {"error": str(e)}, level="error")
        raise


def importar_vendas(db_path: str = DB_PATH) -> Dict[str, int]:
    """Transforma cada venda ainda sem movimentação em saídas de estoque.

    Returns:
        ``{"vendas_processadas", "movimentos", "ja_importadas"}``
    """
    log_system_event("importar_vendas_start")
    try:
        vendas = VendaRepo(db_path).list()
        prod_repo = ProdutoRepo(db_path)
        mov_repo = MovimentoRepo(db_path)
        movimentos: List[MovimentoEstoque] = []
        processadas = 0
        with connect(db_path, immediate=True) as c:
            ja = mov_repo.vendas_com_movimento(conn=c)
            catalogo = prod_repo.get_all(conn=c)
            estoque = {p.id: p.estoque for p in catalogo}
            for venda in vendas:
                if venda.id in ja:
                    continue
                processadas += 1
                for b in resolver_baixas(venda.itens, catalogo):
                    estoque[b.produto.id] = max(0, estoque[b.produto.id] - b.quantidade)
                    movimentos.append(MovimentoEstoque(
                        produto_id=b.produto.id,
                        produto_nome=b.produto.nome,
                        tipo="saida",
                        quantidade=b.quantidade,
                        motivo=f"Venda #{venda.id} - {venda.cliente_nome}",
                        data=venda.data,
                        venda_id=venda.id,
                    ))
            for pid in {m.produto_id for m in movimentos}:
                prod_repo.set_estoque(pid, estoque[pid], conn=c)
            mov_repo.insert_many(movimentos, conn=c)

        for m in movimentos:
            log_estoque("saida_venda_importada", m.produto_id, m.quantidade, venda_id=m.venda_id)
        result = {
            "vendas_processadas": processadas,
            "movimentos": len(movimentos),
            "ja_importadas": len(vendas) - processadas,
        }
        log_database_operation("movimento_estoque", "INSERT_MANY", len(movimentos))
        log_transaction("importar_vendas", {"vendas": len(vendas)}, result=result)
        return result
    except Exception as e:
        log_transaction("importar_vendas", {}, error=str(e))
        log_system_event("importar_vendas_error", {"error": str(e)}, level="error")
        raise


def listar_movimentos(
    produto_id: Optional[int] = None,
    tipo: Optional[str] = None,
    db_path: str = DB_PATH,
) -> List[MovimentoEstoque]:
    if tipo and tipo not in TIPOS_MOVIMENTO:
        raise ValidationError(f"Tipo de movimentação inválido: {tipo}")
    return MovimentoRepo(db_path).list(produto_id=produto_id, tipo=tipo)
