from decimal import Decimal

import pytest

from pdv.adapters.recibo import formatar_data, formatar_moeda, render_orcamento, render_recibo
from pdv.domain.models import ItemCatalogo, ItemManual, Orcamento, Venda


@pytest.mark.parametrize(
    "valor,esperado",
    [
        (Decimal("1234.56"), "R$ 1.234,56"),
        ("0", "R$ 0,00"),
        (29.9, "R$ 29,90"),
        ("1000000", "R$ 1.000.000,00"),
    ],
)
def test_formatar_moeda(valor, esperado):
    assert formatar_moeda(valor) == esperado


def test_formatar_data():
    assert formatar_data("2025-03-07") == "07/03/2025"
    assert formatar_data("ontem") == "ontem"


def _itens():
    return [
        ItemCatalogo(1, "Placa de gesso", 5, Decimal("29.90")),
        ItemManual("Frete", 1, Decimal("20.00")),
    ]


def test_recibo_em_dinheiro_mostra_troco():
    venda = Venda(
        itens=_itens(), subtotal=Decimal("169.50"), desconto=Decimal("9.50"), total=Decimal("160.00"),
        lucro=Decimal("73.50"), forma_pagamento="dinheiro", valor_pago=Decimal("200.00"),
        troco=Decimal("40.00"), data="2025-03-07", id=42,
    )
    txt = render_recibo(venda, empresa="Gesso & Cia")
    assert "Gesso & Cia" in txt
    assert "Venda #42" in txt
    assert "07/03/2025" in txt
    assert "Cliente Avulso" in txt
    assert "5 x R$ 29,90" in txt
    assert "R$ 149,50" in txt
    assert "- R$ 9,50" in txt
    assert "R$ 160,00" in txt
    assert "Troco" in txt and "R$ 40,00" in txt
    assert "PENDENTE" not in txt


def test_recibo_pendente():
    venda = Venda(
        itens=_itens(), subtotal=Decimal("169.50"), desconto=Decimal("0"), total=Decimal("169.50"),
        lucro=Decimal("0"), forma_pagamento="pix", valor_pago=Decimal("169.50"), troco=Decimal("0"),
        status="pendente", id=1,
    )
    txt = render_recibo(venda)
    assert "PAGAMENTO PENDENTE" in txt
    assert "Troco" not in txt
    assert "Desconto" not in txt
    assert "PIX" in txt


def test_render_orcamento():
    orc = Orcamento(
        itens=_itens(), subtotal=Decimal("169.50"), desconto=Decimal("0"), total=Decimal("169.50"),
        lucro=Decimal("0"), cliente_nome="Ana Souza", validade="2025-03-16",
        cliente_documento="123.456.789-00", observacoes="Entrega na obra", numero="ORC-2025-0007",
        data="2025-03-01",
    )
    txt = render_orcamento(orc)
    assert "ORÇAMENTO" in txt
    assert "ORC-2025-0007" in txt
    assert "CPF/CNPJ: 123.456.789-00" in txt
    assert "Válido até 16/03/2025" in txt
    assert "Obs.: Entrega na obra" in txt
    assert "Situação: orcamento" in txt
