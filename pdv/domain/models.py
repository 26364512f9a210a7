# pdv/domain/models.py
"""
Modelos (dataclasses) do domínio.

Observação importante:
- Os repositórios aceitam dicionários ou dataclasses; os valores monetários
  circulam como ``Decimal`` quantizado em centavos.
- Itens de transação são uma variante com etiqueta: ``ItemCatalogo`` (tem
  ``produto_id``) ou ``ItemManual`` (texto livre, sem cadastro).
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal, ROUND_HALF_UP, InvalidOperation
from typing import Any, Dict, List, Optional, Union


FORMAS_PAGAMENTO = ("dinheiro", "pix", "credito", "debito")
STATUS_VENDA = ("pago", "pendente")
STATUS_ORCAMENTO = ("orcamento", "pedido", "vendido")
TIPOS_MOVIMENTO = ("entrada", "saida", "ajuste")

CLIENTE_AVULSO = "Cliente Avulso"

_CENTAVOS = Decimal("0.01")


def to_money(value: Any) -> Decimal:
    """Converte para ``Decimal`` com duas casas (ROUND_HALF_UP). ``None`` vira zero."""
    if value is None:
        return Decimal("0.00")
    if isinstance(value, Decimal):
        return value.quantize(_CENTAVOS, rounding=ROUND_HALF_UP)
    try:
        return Decimal(str(value).strip()).quantize(_CENTAVOS, rounding=ROUND_HALF_UP)
    except InvalidOperation as e:
        raise ValueError(f"Valor monetário inválido: {value!r}") from e


def hoje_iso() -> str:
    return date.today().isoformat()


@dataclass
class Produto:
    """Cadastro de produto (fonte única de preço, custo e estoque)."""
    nome: str
    preco: Decimal
    custo: Decimal
    estoque: int
    categoria: Optional[str] = None
    id: Optional[int] = None
    descricao: Optional[str] = None
    codigo_barras: Optional[str] = None
    estoque_minimo: Optional[int] = None

    def __post_init__(self):
        self.preco = to_money(self.preco)
        self.custo = to_money(self.custo)
        self.estoque = int(self.estoque or 0)


@dataclass
class Cliente:
    nome: str
    id: Optional[int] = None
    telefone: Optional[str] = None
    email: Optional[str] = None
    documento: Optional[str] = None
    endereco: Optional[str] = None
    cidade: Optional[str] = None
    estado: Optional[str] = None
    cep: Optional[str] = None


@dataclass(frozen=True)
class ItemCatalogo:
    """Linha ligada a um produto do cadastro. Preço capturado no momento da inclusão."""
    produto_id: int
    descricao: str
    quantidade: int
    preco_unitario: Decimal

    @property
    def total(self) -> Decimal:
        return to_money(self.preco_unitario * self.quantidade)


@dataclass(frozen=True)
class ItemManual:
    """Linha de texto livre, sem vínculo com o cadastro."""
    descricao: str
    quantidade: int
    preco_unitario: Decimal

    @property
    def total(self) -> Decimal:
        return to_money(self.preco_unitario * self.quantidade)


Item = Union[ItemCatalogo, ItemManual]


def item_to_dict(item: Item) -> Dict[str, Any]:
    return {
        "produto_id": item.produto_id if isinstance(item, ItemCatalogo) else None,
        "descricao": item.descricao,
        "quantidade": int(item.quantidade),
        "preco_unitario": str(to_money(item.preco_unitario)),
    }


def item_from_dict(d: Dict[str, Any]) -> Item:
    preco = to_money(d.get("preco_unitario"))
    qtd = int(d.get("quantidade") or 0)
    if d.get("produto_id") is not None:
        return ItemCatalogo(int(d["produto_id"]), d.get("descricao") or "", qtd, preco)
    return ItemManual(d.get("descricao") or "", qtd, preco)


@dataclass
class Venda:
    """Venda finalizada. Os itens são cópias desacopladas do cadastro."""
    itens: List[Item]
    subtotal: Decimal
    desconto: Decimal
    total: Decimal
    lucro: Decimal
    forma_pagamento: str
    valor_pago: Decimal
    troco: Decimal
    status: str = "pago"                  # 'pago' | 'pendente'
    cliente_id: Optional[int] = None
    cliente_nome: str = CLIENTE_AVULSO
    data: str = field(default_factory=hoje_iso)
    id: Optional[int] = None
    orcamento_id: Optional[int] = None


@dataclass
class Orcamento:
    """Orçamento: orcamento -> pedido -> vendido."""
    itens: List[Item]
    subtotal: Decimal
    desconto: Decimal
    total: Decimal
    lucro: Decimal
    cliente_nome: str
    validade: str
    status: str = "orcamento"
    cliente_id: Optional[int] = None
    cliente_documento: Optional[str] = None
    cliente_telefone: Optional[str] = None
    cliente_endereco: Optional[str] = None
    forma_pagamento: Optional[str] = None
    observacoes: Optional[str] = None
    numero: Optional[str] = None
    data: str = field(default_factory=hoje_iso)
    id: Optional[int] = None


@dataclass
class MovimentoEstoque:
    produto_id: int
    produto_nome: str
    tipo: str                             # 'entrada' | 'saida' | 'ajuste' (quantidade com sinal)
    quantidade: int
    motivo: Optional[str] = None
    data: str = field(default_factory=hoje_iso)
    venda_id: Optional[int] = None
    id: Optional[int] = None


@dataclass
class Retirada:
    """Retirada de dinheiro do caixa."""
    valor: Decimal
    motivo: Optional[str] = None
    data: str = field(default_factory=hoje_iso)
    id: Optional[int] = None


@dataclass
class Producao:
    """Lote de peças de gesso produzidas e sacos de gesso consumidos."""
    peca: str
    quantidade: int
    sacos_gesso: int
    data: str = field(default_factory=hoje_iso)
    observacao: Optional[str] = None
    id: Optional[int] = None
