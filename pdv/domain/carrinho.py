# pdv/domain/carrinho.py
"""
Carrinho: acumula os itens de uma venda/orçamento ainda não finalizado.

O carrinho nunca altera o cadastro. A checagem de estoque feita aqui é
apenas consultiva (retorno imediato ao operador); a checagem que vale é a
da baixa de estoque, no momento da finalização.
"""

from __future__ import annotations

from dataclasses import replace
from decimal import Decimal
from typing import Any, Iterator, List

from pdv.domain.errors import InsufficientStockError, ValidationError
from pdv.domain.models import Item, ItemCatalogo, ItemManual, Produto, to_money


CAMPOS_EDITAVEIS = ("quantidade", "preco_unitario", "descricao")


def _quantidade_valida(quantidade: Any) -> int:
    try:
        qtd = int(quantidade)
    except (TypeError, ValueError, OverflowError):
        raise ValidationError(f"Quantidade inválida: {quantidade!r}")
    if qtd != quantidade and not isinstance(quantidade, str):
        # 2.5 não é quantidade inteira
        raise ValidationError(f"Quantidade deve ser inteira: {quantidade!r}")
    if qtd <= 0:
        raise ValidationError("Quantidade deve ser positiva")
    return qtd


def _preco_valido(preco: Any, permite_zero: bool = False) -> Decimal:
    try:
        valor = to_money(preco)
    except ValueError:
        raise ValidationError(f"Preço inválido: {preco!r}")
    if valor < 0 or (valor == 0 and not permite_zero):
        raise ValidationError("Preço deve ser positivo")
    return valor


class Carrinho:
    def __init__(self) -> None:
        self._itens: List[Item] = []

    @property
    def itens(self) -> List[Item]:
        return list(self._itens)

    @property
    def vazio(self) -> bool:
        return not self._itens

    def __len__(self) -> int:
        return len(self._itens)

    def __iter__(self) -> Iterator[Item]:
        return iter(list(self._itens))

    def quantidade_do_produto(self, produto_id: int) -> int:
        return sum(
            i.quantidade for i in self._itens
            if isinstance(i, ItemCatalogo) and i.produto_id == produto_id
        )

    def adicionar_item_catalogo(self, produto: Produto, quantidade: Any) -> "Carrinho":
        """Inclui um produto do cadastro com o preço atual dele.

        Considera o que o carrinho já tem do mesmo produto ao comparar com o
        estoque disponível.
        """
        qtd = _quantidade_valida(quantidade)
        ja_no_carrinho = self.quantidade_do_produto(produto.id)
        if ja_no_carrinho + qtd > produto.estoque:
            raise InsufficientStockError(produto.nome, ja_no_carrinho + qtd, produto.estoque)
        self._itens.append(ItemCatalogo(produto.id, produto.nome, qtd, to_money(produto.preco)))
        return self

    def adicionar_item_manual(self, descricao: str, preco_unitario: Any, quantidade: Any) -> "Carrinho":
        desc = (descricao or "").strip()
        if not desc:
            raise ValidationError("Descrição do item é obrigatória")
        preco = _preco_valido(preco_unitario)
        qtd = _quantidade_valida(quantidade)
        self._itens.append(ItemManual(desc, qtd, preco))
        return self

    def remover_item(self, indice: int) -> "Carrinho":
        if not 0 <= indice < len(self._itens):
            raise IndexError(f"Item {indice} fora do intervalo (0..{len(self._itens) - 1})")
        del self._itens[indice]
        return self

    def atualizar_item(self, indice: int, campo: str, valor: Any) -> "Carrinho":
        """Altera um campo da linha; o total da linha é derivado e acompanha a mudança."""
        if not 0 <= indice < len(self._itens):
            raise IndexError(f"Item {indice} fora do intervalo (0..{len(self._itens) - 1})")
        if campo not in CAMPOS_EDITAVEIS:
            raise ValidationError(f"Campo não editável: {campo}")
        item = self._itens[indice]
        if campo == "quantidade":
            novo = replace(item, quantidade=_quantidade_valida(valor))
        elif campo == "preco_unitario":
            novo = replace(item, preco_unitario=_preco_valido(valor, permite_zero=isinstance(item, ItemCatalogo)))
        else:
            desc = (str(valor) if valor is not None else "").strip()
            if not desc:
                raise ValidationError("Descrição do item é obrigatória")
            novo = replace(item, descricao=desc)
        self._itens[indice] = novo
        return self

    def limpar(self) -> "Carrinho":
        self._itens.clear()
        return self
