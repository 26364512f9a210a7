from decimal import Decimal

import pytest

from pdv.domain.calculos import (
    calcular_lucro, calcular_margem, calcular_subtotal, calcular_total, calcular_troco,
    casar_produto, indexar_catalogo,
)
from pdv.domain.models import ItemCatalogo, ItemManual, Produto


def _catalogo():
    return [
        Produto(nome="Placa de gesso", preco="29.90", custo="18.00", estoque=150, id=1),
        Produto(nome="Massa para junta", preco="45.00", custo="30.00", estoque=20, id=2),
    ]


def test_venda_simples_subtotal_e_lucro():
    itens = [ItemCatalogo(1, "Placa de gesso", 5, Decimal("29.90"))]
    assert calcular_subtotal(itens) == Decimal("149.50")
    assert calcular_lucro(itens, _catalogo()) == Decimal("59.50")


def test_item_manual_usa_custo_estimado_padrao():
    itens = [ItemManual("Mão de obra", 2, Decimal("40.00"))]
    # 2 * (40 - 40 * 0.30) = 56.00
    assert calcular_lucro(itens, _catalogo()) == Decimal("56.00")


def test_item_manual_com_razao_informada():
    itens = [ItemManual("Frete", 1, Decimal("100.00"))]
    assert calcular_lucro(itens, [], razao_custo_estimado=0.5) == Decimal("50.00")


def test_item_manual_com_nome_de_produto_usa_custo_do_cadastro():
    itens = [ItemManual("placa de gesso ", 1, Decimal("29.90"))]
    assert calcular_lucro(itens, _catalogo()) == Decimal("11.90")


def test_item_de_catalogo_sem_produto_cai_no_custo_estimado():
    itens = [ItemCatalogo(99, "Produto removido", 1, Decimal("10.00"))]
    assert calcular_lucro(itens, _catalogo()) == Decimal("7.00")


def test_totais_sao_idempotentes():
    itens = [
        ItemCatalogo(1, "Placa de gesso", 3, Decimal("29.90")),
        ItemManual("Frete", 1, Decimal("25.00")),
    ]
    cat = _catalogo()
    assert calcular_subtotal(itens) == calcular_subtotal(itens)
    assert calcular_lucro(itens, cat) == calcular_lucro(itens, cat)


def test_subtotal_vazio_e_zero():
    assert calcular_subtotal([]) == Decimal("0.00")


@pytest.mark.parametrize(
    "subtotal,desconto,esperado",
    [
        ("100.00", "0", "100.00"),
        ("100.00", "15.50", "84.50"),
        ("100.00", "100.00", "0.00"),
        ("100.00", "150.00", "0.00"),
    ],
)
def test_total_nunca_negativo(subtotal, desconto, esperado):
    assert calcular_total(subtotal, desconto) == Decimal(esperado)


def test_troco_em_dinheiro():
    assert calcular_troco("83.33", "100.00", "dinheiro") == Decimal("16.67")


def test_troco_valor_exato_e_zero():
    assert calcular_troco("50.00", "50.00", "dinheiro") == Decimal("0.00")


@pytest.mark.parametrize("forma", ["pix", "credito", "debito"])
def test_sem_troco_fora_do_dinheiro(forma):
    assert calcular_troco("83.33", "100.00", forma) == Decimal("0.00")


def test_margem():
    assert calcular_margem("59.50", "149.50") == pytest.approx(39.799, rel=1e-3)
    assert calcular_margem("10", "0") == 0.0


def test_indexar_catalogo_primeiro_nome_vence():
    cat = _catalogo() + [Produto(nome="PLACA DE GESSO", preco="1", custo="1", estoque=1, id=3)]
    por_id, por_nome = indexar_catalogo(cat)
    assert set(por_id) == {1, 2, 3}
    assert por_nome["placa de gesso"].id == 1


def test_casar_produto_prefere_id():
    por_id, por_nome = indexar_catalogo(_catalogo())
    item = ItemCatalogo(2, "Placa de gesso", 1, Decimal("45.00"))
    assert casar_produto(item, por_id, por_nome).id == 2
    assert casar_produto(ItemManual("Outro", 1, Decimal("1")), por_id, por_nome) is None
