# pdv/adapters/recibo.py
"""
Renderização em texto puro de recibos de venda e de orçamentos.

O núcleo não sabe nada de impressão; estas funções apenas montam o texto que
o CLI mostra ou grava em arquivo.
"""

from __future__ import annotations

from datetime import date
from typing import Any, List

from pdv.domain.models import Item, Orcamento, Venda, to_money

LARGURA = 48

NOMES_PAGAMENTO = {
    "dinheiro": "Dinheiro",
    "pix": "PIX",
    "credito": "Cartão de crédito",
    "debito": "Cartão de débito",
}


def formatar_moeda(valor: Any) -> str:
    """``Decimal("1234.5")`` → ``"R$ 1.234,50"``."""
    v = to_money(valor)
    txt = f"{v:,.2f}".replace(",", "X").replace(".", ",").replace("X", ".")
    return f"R$ {txt}"


def formatar_data(iso: str) -> str:
    """``"2025-03-07"`` → ``"07/03/2025"``; valores fora do padrão voltam como vieram."""
    try:
        return date.fromisoformat(str(iso)[:10]).strftime("%d/%m/%Y")
    except ValueError:
        return str(iso)


def _linha(esq: str, direita: str) -> str:
    espaco = max(1, LARGURA - len(esq) - len(direita))
    return f"{esq}{' ' * espaco}{direita}"


def _itens(itens: List[Item]) -> List[str]:
    out = []
    for n, item in enumerate(itens, start=1):
        out.append(f"{n:>2}. {item.descricao}"[:LARGURA])
        out.append(_linha(f"    {item.quantidade} x {formatar_moeda(item.preco_unitario)}", formatar_moeda(item.total)))
    return out


def _totais(doc) -> List[str]:
    out = [_linha("Subtotal", formatar_moeda(doc.subtotal))]
    if doc.desconto:
        out.append(_linha("Desconto", "- " + formatar_moeda(doc.desconto)))
    out.append(_linha("TOTAL", formatar_moeda(doc.total)))
    return out


def render_recibo(venda: Venda, empresa: str = "PDV") -> str:
    sep = "-" * LARGURA
    linhas = [
        empresa.center(LARGURA),
        "RECIBO DE VENDA".center(LARGURA),
        sep,
        _linha(f"Venda #{venda.id if venda.id is not None else '-'}", formatar_data(venda.data)),
        f"Cliente: {venda.cliente_nome}",
        sep,
        *_itens(venda.itens),
        sep,
        *_totais(venda),
        _linha("Pagamento", NOMES_PAGAMENTO.get(venda.forma_pagamento, venda.forma_pagamento)),
    ]
    if venda.forma_pagamento == "dinheiro" and venda.status == "pago":
        linhas.append(_linha("Valor pago", formatar_moeda(venda.valor_pago)))
        linhas.append(_linha("Troco", formatar_moeda(venda.troco)))
    if venda.status == "pendente":
        linhas.append("*** PAGAMENTO PENDENTE ***".center(LARGURA))
    linhas += [sep, "Obrigado pela preferência!".center(LARGURA)]
    return "\n".join(linhas) + "\n"


def render_orcamento(orc: Orcamento, empresa: str = "PDV") -> str:
    sep = "-" * LARGURA
    linhas = [
        empresa.center(LARGURA),
        "ORÇAMENTO".center(LARGURA),
        sep,
        _linha(orc.numero or "ORC-(não gravado)", formatar_data(orc.data)),
        f"Cliente: {orc.cliente_nome}",
    ]
    if orc.cliente_documento:
        linhas.append(f"CPF/CNPJ: {orc.cliente_documento}")
    if orc.cliente_telefone:
        linhas.append(f"Telefone: {orc.cliente_telefone}")
    if orc.cliente_endereco:
        linhas.append(f"Endereço: {orc.cliente_endereco}")
    linhas += [sep, *_itens(orc.itens), sep, *_totais(orc)]
    if orc.forma_pagamento:
        linhas.append(_linha("Pagamento", NOMES_PAGAMENTO.get(orc.forma_pagamento, orc.forma_pagamento)))
    if orc.observacoes:
        linhas += [sep, f"Obs.: {orc.observacoes}"]
    linhas += [sep, f"Válido até {formatar_data(orc.validade)}", f"Situação: {orc.status}"]
    return "\n".join(linhas) + "\n"
