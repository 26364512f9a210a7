from datetime import date, timedelta
from decimal import Decimal

import pytest

from pdv.domain.errors import InsufficientStockError, NotFoundError, PagamentoInsuficienteError, ValidationError
from pdv.domain.policies import orcamento_expirado, status_estoque, validar_transicao_orcamento
from pdv.infra.repositories import MovimentoRepo, ProdutoRepo, VendaRepo
from pdv.usecases.cadastros import cadastrar_cliente
from pdv.usecases.orcamentos import (
    buscar_orcamento, converter_em_pedido, converter_em_venda, criar_orcamento, listar_orcamentos,
)
from pdv.usecases.registrar_venda import montar_carrinho


def _orcamento(db, produto, qtd=10, **kw):
    kw.setdefault("cliente_nome", "Ana Souza")
    kw.setdefault("cliente_documento", "123.456.789-00")
    return criar_orcamento(montar_carrinho([(produto.id, qtd)], db_path=db), db_path=db, **kw)


def test_ciclo_de_vida_do_orcamento(db, placa):
    orc = _orcamento(db, placa, 10)
    assert orc.status == "orcamento"
    assert orc.total == Decimal("299.00")
    assert ProdutoRepo(db).get(placa.id).estoque == 150

    pedido = converter_em_pedido(orc.id, db_path=db)
    assert pedido.status == "pedido"
    assert ProdutoRepo(db).get(placa.id).estoque == 150

    venda = converter_em_venda(orc.id, forma_pagamento="pix", db_path=db)
    assert buscar_orcamento(orc.id, db_path=db).status == "vendido"
    assert ProdutoRepo(db).get(placa.id).estoque == 140
    assert venda.orcamento_id == orc.id
    assert venda.total == orc.total
    assert VendaRepo(db).get(venda.id).orcamento_id == orc.id
    assert [m.venda_id for m in MovimentoRepo(db).list(produto_id=placa.id)] == [venda.id]


def test_numero_e_validade_padrao(db, placa):
    orc = _orcamento(db, placa, data="2025-03-01")
    assert orc.numero == f"ORC-2025-{orc.id:04d}"
    assert orc.validade == "2025-03-16"


def test_nome_e_documento_obrigatorios(db, placa):
    with pytest.raises(ValidationError):
        _orcamento(db, placa, cliente_nome="  ")
    with pytest.raises(ValidationError):
        _orcamento(db, placa, cliente_documento=None)


def test_dados_do_cliente_cadastrado(db, placa):
    cli = cadastrar_cliente("Construtora Alfa", documento="12.345.678/0001-90", telefone="11 99999-0000", db_path=db)
    orc = _orcamento(db, placa, cliente_id=cli.id, cliente_nome=None, cliente_documento=None)
    assert orc.cliente_nome == "Construtora Alfa"
    assert orc.cliente_documento == "12.345.678/0001-90"
    assert orc.cliente_telefone == "11 99999-0000"


def test_orcamento_vencido_nao_vira_pedido(db, placa):
    ontem = (date.today() - timedelta(days=1)).isoformat()
    orc = _orcamento(db, placa, validade=ontem)
    with pytest.raises(ValidationError):
        converter_em_pedido(orc.id, db_path=db)
    assert buscar_orcamento(orc.id, db_path=db).status == "orcamento"


def test_validade_em_formato_brasileiro_vira_iso(db, placa):
    orc = _orcamento(db, placa, validade="31/12/2099")
    assert orc.validade == "2099-12-31"
    assert converter_em_pedido(orc.id, db_path=db).status == "pedido"


@pytest.mark.parametrize("validade", ["2099-13-01", "amanhã", "31-12-2099"])
def test_validade_invalida_recusada(db, placa, validade):
    with pytest.raises(ValidationError):
        _orcamento(db, placa, validade=validade)
    assert listar_orcamentos(db_path=db) == []


def test_orcamento_nao_vira_venda_sem_passar_por_pedido(db, placa):
    orc = _orcamento(db, placa)
    with pytest.raises(ValidationError):
        converter_em_venda(orc.id, forma_pagamento="pix", db_path=db)
    assert ProdutoRepo(db).get(placa.id).estoque == 150


def test_vendido_e_terminal(db, placa):
    orc = _orcamento(db, placa, 1)
    converter_em_pedido(orc.id, db_path=db)
    converter_em_venda(orc.id, forma_pagamento="pix", db_path=db)
    with pytest.raises(ValidationError):
        converter_em_venda(orc.id, forma_pagamento="pix", db_path=db)
    with pytest.raises(ValidationError):
        converter_em_pedido(orc.id, db_path=db)
    assert ProdutoRepo(db).get(placa.id).estoque == 149


def test_estoque_insuficiente_mantem_pedido(db, placa):
    orc = _orcamento(db, placa, 100)
    converter_em_pedido(orc.id, db_path=db)
    outro = _orcamento(db, placa, 100)
    converter_em_pedido(outro.id, db_path=db)
    converter_em_venda(outro.id, forma_pagamento="pix", db_path=db)

    with pytest.raises(InsufficientStockError):
        converter_em_venda(orc.id, forma_pagamento="pix", db_path=db)
    assert buscar_orcamento(orc.id, db_path=db).status == "pedido"
    assert ProdutoRepo(db).get(placa.id).estoque == 50
    assert len(VendaRepo(db).list()) == 1


def test_venda_em_dinheiro_confere_pagamento(db, placa):
    orc = _orcamento(db, placa, 1)
    converter_em_pedido(orc.id, db_path=db)
    with pytest.raises(PagamentoInsuficienteError):
        converter_em_venda(orc.id, forma_pagamento="dinheiro", valor_pago="10", db_path=db)
    venda = converter_em_venda(orc.id, forma_pagamento="dinheiro", valor_pago="50", db_path=db)
    assert venda.troco == Decimal("20.10")


def test_listar_e_buscar(db, placa):
    a = _orcamento(db, placa, 1)
    b = _orcamento(db, placa, 2)
    converter_em_pedido(b.id, db_path=db)
    assert [o.id for o in listar_orcamentos(db_path=db)] == [b.id, a.id]
    assert [o.id for o in listar_orcamentos(status="pedido", db_path=db)] == [b.id]
    with pytest.raises(NotFoundError):
        buscar_orcamento(999, db_path=db)


def test_politicas_de_transicao():
    validar_transicao_orcamento("orcamento", "pedido", "2999-01-01")
    validar_transicao_orcamento("pedido", "vendido")
    for atual, novo in [("orcamento", "vendido"), ("vendido", "pedido"), ("pedido", "orcamento"), ("xyz", "pedido")]:
        with pytest.raises(ValidationError):
            validar_transicao_orcamento(atual, novo)


def test_orcamento_expirado():
    ref = date(2025, 3, 16)
    assert not orcamento_expirado("2025-03-16", ref)
    assert orcamento_expirado("2025-03-15", ref)
    assert not orcamento_expirado(None, ref)
    with pytest.raises(ValidationError):
        orcamento_expirado("31/12/2099", ref)


@pytest.mark.parametrize(
    "estoque,minimo,esperado",
    [(0, 10, "ZERADO"), (5, 10, "CRITICO"), (8, 10, "BAIXO"), (11, 10, "OK"), (None, 10, "VERIFICAR")],
)
def test_status_estoque(estoque, minimo, esperado):
    assert status_estoque(estoque, minimo) == esperado
