# pdv/usecases/registrar_venda.py
"""
UC: Registrar VENDAS.

- montar_carrinho(): resolve ids do cadastro e itens manuais em um Carrinho.
- finalizar_venda(): calcula totais, valida pagamento, baixa estoque e grava
  venda + movimentações de saída na MESMA transação do banco.
- quitar_venda(): pendente -> pago.
- listar_vendas(): filtros por período, status e forma de pagamento.

Obs.:
- A checagem de estoque do carrinho é consultiva; a que vale é a da baixa,
  feita com o banco reservado (BEGIN IMMEDIATE).
"""

from __future__ import annotations

from typing import Any, Iterable, List, Optional, Sequence, Tuple, Union

from pdv.config import DB_PATH, DEFAULTS
from pdv.domain.calculos import calcular_lucro, calcular_subtotal, calcular_total, calcular_troco
from pdv.domain.carrinho import Carrinho
from pdv.domain.errors import NotFoundError, PagamentoInsuficienteError, ValidationError
from pdv.domain.models import (
    CLIENTE_AVULSO, FORMAS_PAGAMENTO, STATUS_VENDA,
    Item, MovimentoEstoque, Venda, hoje_iso, to_money,
)
from pdv.infra.db import connect
from pdv.infra.repositories import ClienteRepo, MovimentoRepo, ParamsRepo, ProdutoRepo, VendaRepo
from pdv.infra.logger import log_estoque, log_system_event, log_transaction, log_venda


def custo_estimado_ratio(db_path: str = DB_PATH) -> float:
    """Razão de custo estimado para itens sem cadastro (parâmetro, com fallback para DEFAULTS)."""
    return ParamsRepo(db_path).get_float("custo_estimado_ratio", DEFAULTS.custo_estimado_ratio)


def forma_pagamento_padrao(db_path: str = DB_PATH) -> str:
    return ParamsRepo(db_path).get("forma_pagamento_padrao", DEFAULTS.forma_pagamento_padrao)


def montar_carrinho(
    itens: Iterable[Tuple[int, Any]] = (),
    manuais: Iterable[Tuple[str, Any, Any]] = (),
    db_path: str = DB_PATH,
) -> Carrinho:
    """Monta um carrinho a partir de ``(produto_id, qtd)`` e ``(descricao, preco, qtd)``."""
    repo = ProdutoRepo(db_path)
    carrinho = Carrinho()
    for produto_id, qtd in itens:
        produto = repo.get(int(produto_id))
        if produto is None:
            raise NotFoundError(f"Produto {produto_id} não encontrado")
        carrinho.adicionar_item_catalogo(produto, qtd)
    for descricao, preco, qtd in manuais:
        carrinho.adicionar_item_manual(descricao, preco, qtd)
    return carrinho


def _resolver_cliente(cliente_id: Optional[int], db_path: str) -> Tuple[Optional[int], str]:
    if cliente_id is None:
        return None, CLIENTE_AVULSO
    cliente = ClienteRepo(db_path).get(cliente_id)
    if cliente is None:
        raise NotFoundError(f"Cliente {cliente_id} não encontrado")
    return cliente.id, cliente.nome


def movimentos_da_venda(venda: Venda, baixas) -> List[MovimentoEstoque]:
    return [
        MovimentoEstoque(
            produto_id=b.produto.id,
            produto_nome=b.produto.nome,
            tipo="saida",
            quantidade=b.quantidade,
            motivo=f"Venda #{venda.id} - {venda.cliente_nome}",
            data=venda.data,
            venda_id=venda.id,
        )
        for b in baixas
    ]


def apurar_pagamento(total, forma_pagamento: str, valor_pago: Any = None, status: str = "pago") -> Tuple[Any, Any]:
    """Retorna ``(valor_pago, troco)`` para o total informado.

    Fora de dinheiro o valor pago é o próprio total e não há troco.
    """
    if forma_pagamento != "dinheiro":
        return total, to_money(0)
    try:
        pago = total if (valor_pago is None and status == "pago") else to_money(valor_pago)
    except ValueError:
        raise ValidationError(f"Valor pago inválido: {valor_pago!r}")
    if status == "pago" and pago < total:
        raise PagamentoInsuficienteError(f"Valor pago ({pago}) menor que o total ({total})")
    return pago, calcular_troco(total, pago, forma_pagamento)


def finalizar_venda(
    carrinho: Union[Carrinho, Sequence[Item]],
    forma_pagamento: Optional[str] = None,
    valor_pago: Any = None,
    desconto: Any = 0,
    status: str = "pago",
    cliente_id: Optional[int] = None,
    data: Optional[str] = None,
    db_path: str = DB_PATH,
) -> Venda:
    """Finaliza uma venda de forma atômica.

    Regras:
        - carrinho não pode estar vazio; desconto não pode ser negativo;
        - sem ``forma_pagamento`` vale o parâmetro ``forma_pagamento_padrao``;
        - pagamento fora de dinheiro: ``valor_pago = total`` e troco zero;
        - dinheiro com status ``pago``: ``valor_pago < total`` é recusado
          (``PagamentoInsuficienteError``); ``valor_pago`` omitido vale o total;
        - estoque insuficiente em qualquer linha aborta tudo
          (``InsufficientStockError``), sem gravar nada.
    """
    itens = list(carrinho)
    forma_pagamento = forma_pagamento or forma_pagamento_padrao(db_path)
    log_system_event("finalizar_venda_start", {"itens": len(itens), "forma_pagamento": forma_pagamento})
    try:
        if not itens:
            raise ValidationError("Venda sem itens")
        if forma_pagamento not in FORMAS_PAGAMENTO:
            raise ValidationError(f"Forma de pagamento inválida: {forma_pagamento}")
        if status not in STATUS_VENDA:
            raise ValidationError(f"Status de venda inválido: {status}")
        try:
            desc = to_money(desconto)
        except ValueError:
            raise ValidationError(f"Desconto inválido: {desconto!r}")
        if desc < 0:
            raise ValidationError("Desconto não pode ser negativo")

        cli_id, cli_nome = _resolver_cliente(cliente_id, db_path)
        razao = custo_estimado_ratio(db_path)
        produto_repo = ProdutoRepo(db_path)

        with connect(db_path, immediate=True) as c:
            catalogo = produto_repo.get_all(conn=c)
            subtotal = calcular_subtotal(itens)
            total = calcular_total(subtotal, desc)
            lucro = calcular_lucro(itens, catalogo, razao)

            pago, troco = apurar_pagamento(total, forma_pagamento, valor_pago, status)

            venda = Venda(
                itens=itens,
                subtotal=subtotal,
                desconto=desc,
                total=total,
                lucro=lucro,
                forma_pagamento=forma_pagamento,
                valor_pago=pago,
                troco=troco,
                status=status,
                cliente_id=cli_id,
                cliente_nome=cli_nome,
                data=data or hoje_iso(),
            )
            baixas = produto_repo.baixar_estoque(itens, conn=c)
            venda.id = VendaRepo(db_path).insert(venda, conn=c)
            MovimentoRepo(db_path).insert_many(movimentos_da_venda(venda, baixas), conn=c)

        for b in baixas:
            log_estoque("baixa_venda", b.produto.id, b.quantidade, venda_id=venda.id)
        log_venda("finalizada", f"venda#{venda.id}", venda.total, forma_pagamento=forma_pagamento, status=status)
        log_transaction("finalizar_venda", {"itens": len(itens), "cliente": cli_nome}, result={"id": venda.id, "total": str(total)})
        return venda
    except Exception as e:
        log_transaction("finalizar_venda", {"itens": len(itens), "forma_pagamento": forma_pagamento}, error=str(e))
        log_system_event("finalizar_venda_error", {"error": str(e)}, level="error")
        raise


def quitar_venda(venda_id: int, valor_pago: Any = None, db_path: str = DB_PATH) -> Venda:
    """Marca uma venda pendente como paga."""
    repo = VendaRepo(db_path)
    venda = repo.get(venda_id)
    if venda is None:
        raise NotFoundError(f"Venda {venda_id} não encontrada")
    if venda.status != "pendente":
        raise ValidationError(f"Venda {venda_id} não está pendente")
    pago, troco = apurar_pagamento(venda.total, venda.forma_pagamento, valor_pago)
    repo.set_status(venda_id, "pago", valor_pago=pago, troco=troco)
    log_venda("quitada", f"venda#{venda_id}", venda.total)
    return repo.get(venda_id)


def buscar_venda(venda_id: int, db_path: str = DB_PATH) -> Venda:
    venda = VendaRepo(db_path).get(venda_id)
    if venda is None:
        raise NotFoundError(f"Venda {venda_id} não encontrada")
    return venda


def listar_vendas(
    data_ini: Optional[str] = None,
    data_fim: Optional[str] = None,
    status: Optional[str] = None,
    forma_pagamento: Optional[str] = None,
    db_path: str = DB_PATH,
) -> List[Venda]:
    return VendaRepo(db_path).list(data_ini, data_fim, status=status, forma_pagamento=forma_pagamento)
