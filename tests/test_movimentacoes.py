from decimal import Decimal
from pathlib import Path

import pandas as pd
import pytest

from pdv.domain.errors import InsufficientStockError, NotFoundError, ValidationError
from pdv.domain.models import ItemCatalogo, ItemManual, Venda
from pdv.infra.repositories import MovimentoRepo, ProdutoRepo, VendaRepo
from pdv.usecases.ajuste_estoque import registrar_ajuste
from pdv.usecases.registrar_entrada import registrar_entrada, registrar_entrada_lote
from pdv.usecases.registrar_saida import importar_vendas, listar_movimentos, registrar_saida
from pdv.usecases.registrar_venda import finalizar_venda, montar_carrinho


def _venda_sem_baixa(db, itens, data="2025-01-05"):
    """Venda gravada diretamente, como as trazidas de outro sistema."""
    total = sum((i.total for i in itens), Decimal("0"))
    venda = Venda(
        itens=itens, subtotal=total, desconto=Decimal("0"), total=total, lucro=Decimal("0"),
        forma_pagamento="pix", valor_pago=total, troco=Decimal("0"), data=data,
    )
    return VendaRepo(db).insert(venda)


def test_entrada_manual(db, placa):
    mov = registrar_entrada(placa.id, 20, motivo="NF 123", db_path=db)
    assert mov.tipo == "entrada"
    assert ProdutoRepo(db).get(placa.id).estoque == 170
    [salvo] = MovimentoRepo(db).list(produto_id=placa.id)
    assert salvo.motivo == "NF 123"
    assert salvo.quantidade == 20


@pytest.mark.parametrize("qtd", [0, -3, "abc"])
def test_entrada_quantidade_invalida(db, placa, qtd):
    with pytest.raises(ValidationError):
        registrar_entrada(placa.id, qtd, db_path=db)
    assert ProdutoRepo(db).get(placa.id).estoque == 150


def test_entrada_produto_inexistente(db):
    with pytest.raises(NotFoundError):
        registrar_entrada(999, 1, db_path=db)


def test_saida_manual_confere_estoque(db, perfil):
    registrar_saida(perfil.id, 15, motivo="Quebra", db_path=db)
    assert ProdutoRepo(db).get(perfil.id).estoque == 25
    with pytest.raises(InsufficientStockError):
        registrar_saida(perfil.id, 26, db_path=db)
    assert ProdutoRepo(db).get(perfil.id).estoque == 25
    assert len(listar_movimentos(tipo="saida", db_path=db)) == 1


def test_entrada_em_lote(db, placa, perfil, tmp_path: Path):
    arquivo = tmp_path / "entradas.xlsx"
    pd.DataFrame({
        "Código": [str(placa.id), None, "999", str(perfil.id)],
        "Produto": [None, "perfil montante", "Fantasma", None],
        "Qtd": ["10", "5", "1", "0"],
        "Data de entrada": ["05/01/2025", "2025-01-06", None, None],
        "Fornecedor": ["Gesso SA", None, None, None],
    }).to_excel(arquivo, index=False)

    res = registrar_entrada_lote(str(arquivo), db_path=db)
    assert res["linhas_inseridas"] == 2
    assert [r["linha"] for r in res["rejeitadas"]] == [4, 5]

    repo = ProdutoRepo(db)
    assert repo.get(placa.id).estoque == 160
    assert repo.get(perfil.id).estoque == 45
    movs = {m.produto_id: m for m in MovimentoRepo(db).list(tipo="entrada")}
    assert movs[placa.id].data == "2025-01-05"
    assert movs[placa.id].motivo == "Gesso SA"
    assert movs[perfil.id].data == "2025-01-06"


def test_importar_vendas_e_idempotente(db, placa):
    _venda_sem_baixa(db, [ItemCatalogo(placa.id, placa.nome, 4, placa.preco)])
    _venda_sem_baixa(db, [ItemManual("placa de gesso", 2, placa.preco), ItemManual("Frete", 1, Decimal("20"))])

    res = importar_vendas(db_path=db)
    assert res == {"vendas_processadas": 2, "movimentos": 2, "ja_importadas": 0}
    assert ProdutoRepo(db).get(placa.id).estoque == 144

    res = importar_vendas(db_path=db)
    assert res["movimentos"] == 0
    assert res["ja_importadas"] == 2
    assert ProdutoRepo(db).get(placa.id).estoque == 144


def test_importar_vendas_ignora_vendas_ja_baixadas(db, placa):
    finalizar_venda(montar_carrinho([(placa.id, 5)], db_path=db), forma_pagamento="pix", db_path=db)
    res = importar_vendas(db_path=db)
    assert res["movimentos"] == 0
    assert ProdutoRepo(db).get(placa.id).estoque == 145


def test_importar_vendas_estoque_com_piso_zero(db, perfil):
    _venda_sem_baixa(db, [ItemCatalogo(perfil.id, perfil.nome, 60, perfil.preco)])
    importar_vendas(db_path=db)
    assert ProdutoRepo(db).get(perfil.id).estoque == 0
    [mov] = MovimentoRepo(db).list(produto_id=perfil.id)
    assert mov.quantidade == 60


def test_ajuste_define_estoque_contado(db, perfil):
    mov = registrar_ajuste(perfil.id, 32, motivo="Inventário de março", db_path=db)
    assert mov.tipo == "ajuste"
    assert mov.quantidade == -8
    assert ProdutoRepo(db).get(perfil.id).estoque == 32

    registrar_ajuste(perfil.id, "45", db_path=db)
    assert ProdutoRepo(db).get(perfil.id).estoque == 45
    ultimo, primeiro = listar_movimentos(produto_id=perfil.id, tipo="ajuste", db_path=db)
    assert ultimo.quantidade == 13
    assert ultimo.motivo == "Ajuste de inventário: 32 -> 45"
    assert primeiro.motivo == "Inventário de março"


def test_ajuste_negativo_vira_zero(db, perfil):
    mov = registrar_ajuste(perfil.id, -5, db_path=db)
    assert ProdutoRepo(db).get(perfil.id).estoque == 0
    assert mov.quantidade == -40


@pytest.mark.parametrize("valor", ["abc", "2.5", None, "inf"])
def test_ajuste_valor_invalido(db, perfil, valor):
    with pytest.raises(ValidationError):
        registrar_ajuste(perfil.id, valor, db_path=db)
    assert ProdutoRepo(db).get(perfil.id).estoque == 40
    assert MovimentoRepo(db).list(produto_id=perfil.id) == []


def test_ajuste_produto_inexistente(db):
    with pytest.raises(NotFoundError):
        registrar_ajuste(999, 10, db_path=db)


def test_listar_movimentos_tipo_invalido(db):
    with pytest.raises(ValidationError):
        listar_movimentos(tipo="transferencia", db_path=db)
