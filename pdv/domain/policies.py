"""
Políticas de negócio do PDV.

Este módulo contém as regras de transição de status dos orçamentos e a
classificação do nível de estoque usada no relatório de estoque baixo.
"""

from __future__ import annotations

from datetime import date
from typing import Optional

from pdv.domain.errors import ValidationError


# orcamento -> pedido -> vendido (terminal)
TRANSICOES_ORCAMENTO = {
    "orcamento": ("pedido",),
    "pedido": ("vendido",),
    "vendido": (),
}


def orcamento_expirado(validade: Optional[str], referencia: Optional[date] = None) -> bool:
    """Um orçamento expira no dia seguinte à sua validade (ISO ``YYYY-MM-DD``)."""
    if not validade:
        return False
    ref = referencia or date.today()
    try:
        return date.fromisoformat(str(validade)[:10]) < ref
    except ValueError:
        raise ValidationError(f"Validade inválida: {validade!r}")


def validar_transicao_orcamento(
    atual: str,
    novo: str,
    validade: Optional[str] = None,
    referencia: Optional[date] = None,
) -> None:
    """Garante que a mudança de status do orçamento é permitida.

    Regras:
        - ``orcamento`` → ``pedido``, desde que o orçamento não esteja vencido.
        - ``pedido`` → ``vendido`` (dispara a baixa de estoque).
        - ``vendido`` é terminal.

    Raises:
        ValidationError: para qualquer outra transição.
    """
    permitidos = TRANSICOES_ORCAMENTO.get(atual)
    if permitidos is None:
        raise ValidationError(f"Status de orçamento desconhecido: {atual}")
    if novo not in permitidos:
        raise ValidationError(f"Transição inválida: {atual} -> {novo}")
    if atual == "orcamento" and orcamento_expirado(validade, referencia):
        raise ValidationError(f"Orçamento vencido em {validade}")


def status_estoque(estoque: Optional[float], minimo: Optional[float]) -> str:
    """Classifica o nível de estoque de um produto.

    Regras:
        - Se algum dos parâmetros for ``None``, retorna ``'VERIFICAR'``.
        - ``estoque <= 0`` → ``'ZERADO'``
        - ``estoque <= minimo / 2`` → ``'CRITICO'``
        - ``estoque <= minimo`` → ``'BAIXO'``
        - ``estoque > minimo`` → ``'OK'``

    Args:
        estoque: Quantidade atual em estoque.
        minimo: Estoque mínimo desejado para o produto.

    Returns:
        ``'ZERADO'``, ``'CRITICO'``, ``'BAIXO'``, ``'OK'`` ou ``'VERIFICAR'``.
    """
    try:
        est = float(estoque) if estoque is not None else None
        m = float(minimo) if minimo is not None else None
    except (TypeError, ValueError):
        return "VERIFICAR"

    if est is None or m is None:
        return "VERIFICAR"
    if est <= 0:
        return "ZERADO"
    if est <= m / 2:
        return "CRITICO"
    if est <= m:
        return "BAIXO"
    return "OK"
