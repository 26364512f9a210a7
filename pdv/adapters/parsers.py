"""
Utilidades de parsing para valores digitados no caixa.

Este módulo interpreta as strings recebidas pela linha de comando e pelas
planilhas: valores monetários no formato brasileiro ("1.234,56") ou com
ponto decimal ("1234.56"), quantidades inteiras e as especificações de item
usadas pelos comandos de venda e orçamento ("<produto_id>:<qtd>" e
"<descrição>:<preço>:<qtd>").
"""

from __future__ import annotations

import re
from decimal import Decimal
from typing import Any, Optional, Tuple

from pdv.domain.errors import ValidationError
from pdv.domain.models import to_money

_NUM_RE = re.compile(r"[-+]?\d[\d.,]*")


def parse_valor(txt: Any) -> Optional[Decimal]:
    """Interpreta um valor monetário.

    Aceita "R$" opcional, separador de milhar e vírgula ou ponto decimal.
    Quando há os dois separadores, o último que aparece é o decimal. Com
    apenas pontos, um grupo final de exatamente três dígitos é tratado como
    milhar ("1.234" → 1234).

    Exemplos:
        "1.234,56"   → Decimal("1234.56")
        "1234.56"    → Decimal("1234.56")
        "R$ 29,90"   → Decimal("29.90")
        "1,234.56"   → Decimal("1234.56")
        ""           → None

    Raises:
        ValidationError: quando o texto não contém um número ou tem mais de
            duas casas decimais ("1,234" é ambíguo e é recusado).
    """
    if txt is None:
        return None
    if isinstance(txt, (int, float, Decimal)):
        return to_money(txt)
    s = str(txt).strip().replace("R$", "").replace(" ", "")
    if not s:
        return None
    m = _NUM_RE.fullmatch(s)
    if not m:
        raise ValidationError(f"Valor inválido: {txt!r}")
    if "," in s and "." in s:
        if s.rfind(",") > s.rfind("."):
            s = s.replace(".", "").replace(",", ".")
        else:
            s = s.replace(",", "")
    elif "," in s:
        s = s.replace(",", ".")
    elif s.count(".") > 1 or re.fullmatch(r"[-+]?\d{1,3}\.\d{3}", s):
        s = s.replace(".", "")
    if "." in s and len(s.rsplit(".", 1)[1]) > 2:
        raise ValidationError(f"Valor com mais de duas casas decimais: {txt!r}")
    try:
        return to_money(s)
    except ValueError:
        raise ValidationError(f"Valor inválido: {txt!r}")


def parse_quantidade(txt: Any) -> int:
    """Quantidade inteira e positiva ("3", "3.0", " 3 ")."""
    try:
        f = float(str(txt).strip().replace(",", "."))
        inteiro = f == int(f)
    except (TypeError, ValueError, OverflowError):
        raise ValidationError(f"Quantidade inválida: {txt!r}")
    if not inteiro or f <= 0:
        raise ValidationError(f"Quantidade deve ser um inteiro positivo: {txt!r}")
    return int(f)


def parse_item_spec(spec: str) -> Tuple[int, int]:
    """``"12:3"`` → ``(12, 3)``. Sem ``:qtd`` a quantidade é 1."""
    partes = [p.strip() for p in str(spec).split(":")]
    if len(partes) > 2 or not partes[0]:
        raise ValidationError(f"Item inválido (use <produto_id>:<qtd>): {spec!r}")
    try:
        produto_id = int(partes[0])
    except ValueError:
        raise ValidationError(f"Id de produto inválido: {partes[0]!r}")
    qtd = parse_quantidade(partes[1]) if len(partes) == 2 and partes[1] else 1
    return produto_id, qtd


def parse_manual_spec(spec: str) -> Tuple[str, Decimal, int]:
    """``"Frete:25,00:1"`` → ``("Frete", Decimal("25.00"), 1)``.

    A descrição pode conter ``:``; preço e quantidade são os dois últimos campos.
    """
    partes = str(spec).rsplit(":", 2)
    if len(partes) != 3:
        raise ValidationError(f"Item manual inválido (use <descrição>:<preço>:<qtd>): {spec!r}")
    descricao, preco_txt, qtd_txt = (p.strip() for p in partes)
    if not descricao:
        raise ValidationError("Descrição do item manual é obrigatória")
    preco = parse_valor(preco_txt)
    if preco is None:
        raise ValidationError(f"Preço do item manual é obrigatório: {spec!r}")
    return descricao, preco, parse_quantidade(qtd_txt)
