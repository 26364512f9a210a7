"""
Cálculo de totais de vendas e orçamentos.

Dada uma lista de itens e um retrato do cadastro de produtos, estas funções
derivam subtotal, total com desconto, troco e lucro estimado.

Todas as funções são puras: dependem apenas dos argumentos e não alteram
estado externo. Chamadas repetidas com a mesma entrada devolvem o mesmo
resultado, o que permite testá-las isoladamente.
"""

from __future__ import annotations

from decimal import Decimal
from typing import Dict, Iterable, Optional, Sequence, Tuple, Union

from pdv.config import DEFAULTS
from pdv.domain.models import Item, ItemCatalogo, Produto, to_money


Numero = Union[int, float, Decimal, str]


def indexar_catalogo(catalogo: Iterable[Produto]) -> Tuple[Dict[int, Produto], Dict[str, Produto]]:
    por_id: Dict[int, Produto] = {}
    por_nome: Dict[str, Produto] = {}
    for p in catalogo:
        if p.id is not None:
            por_id[int(p.id)] = p
        # primeiro cadastro com o nome vence
        por_nome.setdefault((p.nome or "").strip().lower(), p)
    return por_id, por_nome


def casar_produto(
    item: Item,
    por_id: Dict[int, Produto],
    por_nome: Dict[str, Produto],
) -> Optional[Produto]:
    """Localiza o produto do item: pelo id (preferido) ou pelo nome.

    O casamento por nome cobre registros históricos desnormalizados, que
    guardam apenas a descrição do produto.
    """
    if isinstance(item, ItemCatalogo):
        p = por_id.get(int(item.produto_id))
        if p is not None:
            return p
    return por_nome.get((item.descricao or "").strip().lower())


def calcular_subtotal(itens: Sequence[Item]) -> Decimal:
    """Soma dos totais de linha. Lista vazia resulta em zero."""
    return to_money(sum((i.total for i in itens), Decimal("0")))


def calcular_lucro(
    itens: Sequence[Item],
    catalogo: Iterable[Produto],
    razao_custo_estimado: Optional[Numero] = None,
) -> Decimal:
    """Lucro estimado da transação.

    Parameters
    ----------
    itens: Sequence[Item]
        Linhas da transação.
    catalogo: Iterable[Produto]
        Retrato do cadastro usado para obter o custo de cada item.
    razao_custo_estimado: número, opcional
        Fração do preço usada como custo quando o item não casa com nenhum
        produto. Padrão: ``DEFAULTS.custo_estimado_ratio``.

    Returns
    -------
    Decimal
        Soma de ``quantidade * (preco_unitario - custo)`` por item.
    """
    if razao_custo_estimado is None:
        razao_custo_estimado = DEFAULTS.custo_estimado_ratio
    razao = Decimal(str(razao_custo_estimado))
    por_id, por_nome = indexar_catalogo(catalogo)
    lucro = Decimal("0")
    for item in itens:
        produto = casar_produto(item, por_id, por_nome)
        if produto is not None:
            custo = produto.custo
        else:
            custo = Decimal(item.preco_unitario) * razao
        lucro += item.quantidade * (Decimal(item.preco_unitario) - custo)
    return to_money(lucro)


def calcular_total(subtotal: Numero, desconto: Numero) -> Decimal:
    """Total com desconto, nunca negativo (desconto maior que o subtotal zera o total)."""
    total = to_money(subtotal) - to_money(desconto)
    return to_money(max(total, Decimal("0")))


def calcular_troco(total: Numero, valor_pago: Numero, forma_pagamento: str) -> Decimal:
    """Troco devido: só existe para pagamento em dinheiro."""
    if forma_pagamento != "dinheiro":
        return to_money(0)
    return to_money(max(to_money(valor_pago) - to_money(total), Decimal("0")))


def calcular_margem(lucro: Numero, faturamento: Numero) -> float:
    """Margem de lucro em percentual (0 quando não há faturamento)."""
    fat = to_money(faturamento)
    if fat <= 0:
        return 0.0
    return float(to_money(lucro) / fat * 100)
