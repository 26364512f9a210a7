# pdv/domain/errors.py
"""
Exceções do domínio.

Todas herdam de ``PDVError`` e são levantadas de forma síncrona para quem
chamou; a camada de interface decide como exibir a mensagem.
"""

from __future__ import annotations

from typing import Optional


class PDVError(Exception):
    pass


class ValidationError(PDVError):
    """Entrada malformada (quantidade/preço não positivos, campo obrigatório vazio)."""


class PagamentoInsuficienteError(ValidationError):
    """Valor pago em dinheiro menor que o total da venda."""


class NotFoundError(PDVError):
    """Produto, cliente ou documento inexistente."""


class InsufficientStockError(PDVError):
    """Quantidade solicitada maior que o estoque disponível."""

    def __init__(self, produto: str, solicitado: int, disponivel: int, msg: Optional[str] = None):
        self.produto = produto
        self.solicitado = solicitado
        self.disponivel = disponivel
        super().__init__(
            msg or f"Estoque insuficiente para '{produto}': solicitado {solicitado}, disponível {disponivel}"
        )
