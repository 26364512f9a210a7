from decimal import Decimal
from pathlib import Path

import pandas as pd
import pytest

from pdv.domain.carrinho import Carrinho
from pdv.usecases.registrar_venda import finalizar_venda, montar_carrinho
from pdv.usecases.retiradas import registrar_retirada
from pdv.usecases.relatorios import (
    estoque_baixo, exportar_relatorio_xlsx, produtos_mais_vendidos, resumo_vendas,
    valor_estoque, vendas_por_dia, vendas_por_mes, vendas_por_pagamento,
)


@pytest.fixture
def vendas(db, placa, perfil):
    finalizar_venda(montar_carrinho([(placa.id, 5)], db_path=db), forma_pagamento="pix", data="2025-01-10", db_path=db)
    finalizar_venda(
        montar_carrinho([(perfil.id, 2)], [("Frete", "20.00", 1)], db_path=db),
        forma_pagamento="dinheiro", valor_pago="50", data="2025-01-10", db_path=db,
    )
    finalizar_venda(
        montar_carrinho([(placa.id, 1)], db_path=db),
        forma_pagamento="dinheiro", status="pendente", data="2025-03-02", db_path=db,
    )
    registrar_retirada("10", data="2025-01-10", db_path=db)
    return db


def test_resumo_vendas(vendas):
    r = resumo_vendas(db_path=vendas)
    assert r["qtd_vendas"] == 3
    # 149.50 + 45.00 + 29.90
    assert r["faturamento"] == Decimal("224.40")
    # 59.50 + (2 * 5.50 + 20 * 0.70) + 11.90
    assert r["lucro"] == Decimal("96.40")
    assert r["ticket_medio"] == Decimal("74.80")
    assert r["a_receber"] == Decimal("29.90")
    assert r["retiradas"] == Decimal("10.00")
    assert r["saldo_caixa"] == Decimal("184.50")


def test_resumo_sem_vendas(db):
    r = resumo_vendas(db_path=db)
    assert r["qtd_vendas"] == 0
    assert r["ticket_medio"] == Decimal("0.00")
    assert r["margem"] == 0.0


def test_resumo_por_periodo(vendas):
    r = resumo_vendas("2025-03-01", "2025-03-31", db_path=vendas)
    assert r["qtd_vendas"] == 1
    assert r["faturamento"] == Decimal("29.90")


def test_vendas_por_mes(vendas):
    columns, rows, msg = vendas_por_mes(2025, db_path=vendas)
    assert columns == ["Mês", "Vendas", "Faturamento", "Lucro"]
    assert len(rows) == 12
    assert rows[0] == ["Jan", 2, Decimal("194.50"), Decimal("84.50")]
    assert rows[1][1] == 0
    assert rows[2][1] == 1
    assert msg is None
    assert vendas_por_mes(2024, db_path=vendas)[2] == "Nenhuma venda em 2024."


def test_vendas_por_dia(vendas):
    _, rows, _ = vendas_por_dia(db_path=vendas)
    assert [r[0] for r in rows] == ["2025-01-10", "2025-03-02"]
    assert rows[0][1] == 2


def test_vendas_por_pagamento(vendas):
    _, rows, _ = vendas_por_pagamento(db_path=vendas)
    assert rows == [["pix", 1, Decimal("149.50")], ["dinheiro", 2, Decimal("74.90")]]


def test_produtos_mais_vendidos(vendas):
    _, rows, _ = produtos_mais_vendidos(top_n=2, db_path=vendas)
    assert rows == [
        ["Placa de gesso", 6, Decimal("179.40")],
        ["Perfil montante", 2, Decimal("25.00")],
    ]


def test_estoque_baixo(vendas, placa, perfil):
    columns, rows, _ = estoque_baixo(db_path=vendas)
    assert columns[-1] == "Status"
    # perfil: 38 de mínimo 50 -> BAIXO; placa: 144 com mínimo padrão 10 -> OK
    assert [(r[0], r[5]) for r in rows] == [(perfil.id, "BAIXO")]
    _, todos, _ = estoque_baixo(incluir_ok=True, db_path=vendas)
    assert {r[0] for r in todos} == {placa.id, perfil.id}


def test_valor_estoque(db, placa, perfil):
    v = valor_estoque(db_path=db)
    assert v["produtos"] == 2
    assert v["unidades"] == 190
    # 150 * 18 + 40 * 7
    assert v["valor_custo"] == Decimal("2980.00")
    # 150 * 29.90 + 40 * 12.50
    assert v["valor_venda"] == Decimal("4985.00")


def test_exportar_relatorio_xlsx(vendas, tmp_path: Path):
    destino = exportar_relatorio_xlsx(str(tmp_path / "out" / "relatorio.xlsx"), db_path=vendas)
    abas = pd.read_excel(destino, sheet_name=None)
    assert set(abas) == {"Vendas", "Mensal", "Estoque"}
    assert len(abas["Vendas"]) == 4
    mensal = abas["Mensal"].set_index("mes")
    assert mensal.loc["2025-01", "vendas"] == 2
    assert mensal.loc["2025-01", "faturamento"] == pytest.approx(194.50)
    assert len(abas["Estoque"]) == 2


def test_exportar_sem_vendas(db, tmp_path: Path):
    destino = exportar_relatorio_xlsx(str(tmp_path / "vazio.xlsx"), db_path=db)
    abas = pd.read_excel(destino, sheet_name=None)
    assert abas["Vendas"].empty
    assert abas["Mensal"].empty
