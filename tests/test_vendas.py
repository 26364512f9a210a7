from decimal import Decimal

import pytest

from pdv.domain.carrinho import Carrinho
from pdv.domain.errors import (
    InsufficientStockError, NotFoundError, PagamentoInsuficienteError, ValidationError,
)
from pdv.domain.models import CLIENTE_AVULSO, ItemManual
from pdv.infra.repositories import MovimentoRepo, ParamsRepo, ProdutoRepo, VendaRepo
from pdv.usecases.cadastros import cadastrar_cliente, cadastrar_produto
from pdv.usecases.registrar_venda import (
    finalizar_venda, listar_vendas, montar_carrinho, quitar_venda,
)


def test_venda_simples_baixa_estoque(db, placa):
    carrinho = montar_carrinho([(placa.id, 5)], db_path=db)
    venda = finalizar_venda(carrinho, forma_pagamento="pix", db_path=db)

    assert venda.id is not None
    assert venda.subtotal == Decimal("149.50")
    assert venda.total == Decimal("149.50")
    assert venda.lucro == Decimal("59.50")
    assert venda.valor_pago == Decimal("149.50")
    assert venda.troco == Decimal("0.00")
    assert venda.cliente_nome == CLIENTE_AVULSO
    assert ProdutoRepo(db).get(placa.id).estoque == 145

    movs = MovimentoRepo(db).list(produto_id=placa.id)
    assert len(movs) == 1
    assert movs[0].tipo == "saida"
    assert movs[0].quantidade == 5
    assert movs[0].venda_id == venda.id


def test_venda_gravada_preserva_itens(db, placa):
    carrinho = montar_carrinho([(placa.id, 2)], [("Frete", "25.00", 1)], db_path=db)
    venda = finalizar_venda(carrinho, forma_pagamento="debito", db_path=db)
    salva = VendaRepo(db).get(venda.id)
    assert [i.descricao for i in salva.itens] == ["Placa de gesso", "Frete"]
    assert salva.itens[0].produto_id == placa.id
    assert isinstance(salva.itens[1], ItemManual)
    assert salva.total == Decimal("84.80")


def test_troco_em_dinheiro(db):
    carrinho = Carrinho().adicionar_item_manual("Serviço", "83.33", 1)
    venda = finalizar_venda(carrinho, forma_pagamento="dinheiro", valor_pago="100.00", db_path=db)
    assert venda.troco == Decimal("16.67")
    assert venda.valor_pago == Decimal("100.00")


def test_pagamento_insuficiente_nao_grava_nada(db, placa):
    carrinho = montar_carrinho([(placa.id, 5)], db_path=db)
    with pytest.raises(PagamentoInsuficienteError):
        finalizar_venda(carrinho, forma_pagamento="dinheiro", valor_pago="100.00", db_path=db)
    assert VendaRepo(db).list() == []
    assert ProdutoRepo(db).get(placa.id).estoque == 150


def test_pagamento_insuficiente_e_erro_de_validacao():
    assert issubclass(PagamentoInsuficienteError, ValidationError)


def test_cartao_ignora_valor_pago(db):
    carrinho = Carrinho().adicionar_item_manual("Serviço", "50", 1)
    venda = finalizar_venda(carrinho, forma_pagamento="credito", valor_pago="10", db_path=db)
    assert venda.valor_pago == Decimal("50.00")
    assert venda.troco == Decimal("0.00")


def test_desconto_maior_que_subtotal_zera_total(db):
    carrinho = Carrinho().adicionar_item_manual("Serviço", "50", 1)
    venda = finalizar_venda(carrinho, forma_pagamento="pix", desconto="80", db_path=db)
    assert venda.total == Decimal("0.00")


@pytest.mark.parametrize(
    "kwargs",
    [
        {"forma_pagamento": "cheque"},
        {"forma_pagamento": "pix", "desconto": "-1"},
        {"forma_pagamento": "pix", "status": "cancelada"},
    ],
)
def test_validacoes_da_venda(db, kwargs):
    carrinho = Carrinho().adicionar_item_manual("Serviço", "50", 1)
    with pytest.raises(ValidationError):
        finalizar_venda(carrinho, db_path=db, **kwargs)


def test_carrinho_vazio(db):
    with pytest.raises(ValidationError):
        finalizar_venda(Carrinho(), forma_pagamento="pix", db_path=db)


def test_estoque_conferido_na_finalizacao(db, placa):
    carrinho = montar_carrinho([(placa.id, 100)], db_path=db)
    # outra venda consome o estoque entre a montagem e a finalização
    finalizar_venda(montar_carrinho([(placa.id, 100)], db_path=db), forma_pagamento="pix", db_path=db)
    with pytest.raises(InsufficientStockError):
        finalizar_venda(carrinho, forma_pagamento="pix", db_path=db)
    assert ProdutoRepo(db).get(placa.id).estoque == 50
    assert len(VendaRepo(db).list()) == 1


def test_montar_carrinho_produto_inexistente(db):
    with pytest.raises(NotFoundError):
        montar_carrinho([(999, 1)], db_path=db)


def test_venda_com_cliente_cadastrado(db, placa):
    cliente = cadastrar_cliente("Construtora Alfa", documento="12.345.678/0001-90", db_path=db)
    venda = finalizar_venda(montar_carrinho([(placa.id, 1)], db_path=db), forma_pagamento="pix", cliente_id=cliente.id, db_path=db)
    assert venda.cliente_id == cliente.id
    assert venda.cliente_nome == "Construtora Alfa"
    with pytest.raises(NotFoundError):
        finalizar_venda(montar_carrinho([(placa.id, 1)], db_path=db), forma_pagamento="pix", cliente_id=999, db_path=db)


def test_razao_de_custo_configuravel(db):
    ParamsRepo(db).set_many([("custo_estimado_ratio", "0.5")])
    venda = finalizar_venda(Carrinho().adicionar_item_manual("Serviço", "100", 1), forma_pagamento="pix", db_path=db)
    assert venda.lucro == Decimal("50.00")


def test_venda_pendente_e_quitacao(db, placa):
    carrinho = montar_carrinho([(placa.id, 1)], db_path=db)
    venda = finalizar_venda(carrinho, forma_pagamento="dinheiro", status="pendente", db_path=db)
    assert venda.status == "pendente"
    assert venda.valor_pago == Decimal("0.00")
    assert ProdutoRepo(db).get(placa.id).estoque == 149

    with pytest.raises(PagamentoInsuficienteError):
        quitar_venda(venda.id, valor_pago="10", db_path=db)
    quitada = quitar_venda(venda.id, db_path=db)
    assert quitada.status == "pago"
    assert quitada.valor_pago == Decimal("29.90")
    with pytest.raises(ValidationError):
        quitar_venda(venda.id, db_path=db)
    with pytest.raises(NotFoundError):
        quitar_venda(999, db_path=db)


def test_quitacao_em_dinheiro_grava_troco(db, placa):
    venda = finalizar_venda(
        montar_carrinho([(placa.id, 1)], db_path=db), forma_pagamento="dinheiro", status="pendente", db_path=db,
    )
    quitar_venda(venda.id, valor_pago="50", db_path=db)

    salva = VendaRepo(db).get(venda.id)
    assert salva.status == "pago"
    assert salva.valor_pago == Decimal("50.00")
    assert salva.troco == Decimal("20.10")
    assert salva.troco == salva.valor_pago - salva.total


def test_forma_de_pagamento_padrao_vem_dos_parametros(db, placa):
    ParamsRepo(db).set_many([("forma_pagamento_padrao", "pix")])
    venda = finalizar_venda(montar_carrinho([(placa.id, 1)], db_path=db), db_path=db)
    assert venda.forma_pagamento == "pix"
    assert venda.valor_pago == Decimal("29.90")


def test_listar_vendas_com_filtros(db, placa):
    finalizar_venda(montar_carrinho([(placa.id, 1)], db_path=db), forma_pagamento="pix", data="2025-01-10", db_path=db)
    finalizar_venda(montar_carrinho([(placa.id, 1)], db_path=db), forma_pagamento="dinheiro", data="2025-02-10", db_path=db)
    finalizar_venda(montar_carrinho([(placa.id, 1)], db_path=db), forma_pagamento="pix", status="pendente", data="2025-02-11", db_path=db)

    assert len(listar_vendas(db_path=db)) == 3
    assert len(listar_vendas("2025-02-01", "2025-02-28", db_path=db)) == 2
    assert len(listar_vendas(forma_pagamento="pix", db_path=db)) == 2
    assert len(listar_vendas(status="pendente", db_path=db)) == 1
