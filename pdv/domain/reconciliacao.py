# pdv/domain/reconciliacao.py
"""
Baixa de estoque de uma transação finalizada.

A baixa é tudo-ou-nada: primeiro todas as linhas são verificadas contra o
estoque; só então os novos saldos são calculados. As funções aqui são puras;
quem grava o resultado (``ProdutoRepo.baixar_estoque``) executa verificação e
escrita dentro de uma única transação do banco.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Iterable, List, Sequence

from pdv.domain.calculos import indexar_catalogo, casar_produto
from pdv.domain.errors import InsufficientStockError
from pdv.domain.models import Item, Produto


@dataclass
class Baixa:
    """Quantidade total a baixar de um produto."""
    produto: Produto
    quantidade: int


def resolver_baixas(itens: Sequence[Item], catalogo: Iterable[Produto]) -> List[Baixa]:
    """Agrupa as quantidades por produto, na ordem em que aparecem nos itens.

    Itens sem produto correspondente (manuais) são ignorados.
    """
    por_id, por_nome = indexar_catalogo(catalogo)
    baixas: Dict[int, Baixa] = {}
    for item in itens:
        produto = casar_produto(item, por_id, por_nome)
        if produto is None:
            continue
        b = baixas.get(produto.id)
        if b is None:
            baixas[produto.id] = Baixa(produto, int(item.quantidade))
        else:
            b.quantidade += int(item.quantidade)
    return list(baixas.values())


def verificar_disponibilidade(baixas: Iterable[Baixa]) -> None:
    """Levanta ``InsufficientStockError`` para o primeiro produto sem saldo."""
    for b in baixas:
        if b.produto.estoque < b.quantidade:
            raise InsufficientStockError(b.produto.nome, b.quantidade, b.produto.estoque)


def aplicar_baixas(baixas: Iterable[Baixa]) -> Dict[int, int]:
    """Novo saldo por produto, com piso em zero."""
    return {b.produto.id: max(0, b.produto.estoque - b.quantidade) for b in baixas}
