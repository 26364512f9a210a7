# pdv/usecases/relatorios.py
"""
Relatórios de vendas e estoque:
- resumo do período (faturamento, lucro, ticket médio, margem)
- vendas por mês de um ano
- vendas por forma de pagamento
- produtos mais vendidos
- estoque baixo (contra o estoque mínimo)
- valor do estoque
- exportação para XLSX (vendas detalhadas, mensal, estoque)

Os relatórios tabulares devolvem ``(colunas, linhas, mensagem)``; a
mensagem só vem preenchida quando não há linhas.
"""

from __future__ import annotations

from collections import defaultdict
from decimal import Decimal
from typing import Any, Dict, List, Optional, Tuple

import pandas as pd

from pdv.config import DB_PATH, DEFAULTS
from pdv.adapters.planilhas import exportar_xlsx
from pdv.domain.calculos import calcular_margem
from pdv.domain.models import ItemCatalogo, Venda, to_money
from pdv.domain.policies import status_estoque
from pdv.infra.db import connect
from pdv.infra.views import create_views
from pdv.infra.repositories import ParamsRepo, ProdutoRepo, RetiradaRepo, VendaRepo
from pdv.infra.logger import log_file_operation, log_relatorio, log_system_event

Tabela = Tuple[List[str], List[List[Any]], Optional[str]]

MESES = ("Jan", "Fev", "Mar", "Abr", "Mai", "Jun", "Jul", "Ago", "Set", "Out", "Nov", "Dez")


def _soma(valores) -> Decimal:
    return to_money(sum(valores, Decimal("0")))


# ----------------------
# 1) Resumo do período
# ----------------------

def resumo_vendas(
    data_ini: Optional[str] = None,
    data_fim: Optional[str] = None,
    db_path: str = DB_PATH,
) -> Dict[str, Any]:
    """Indicadores do período.

    ``faturamento`` e ``lucro`` somam todas as vendas; ``a_receber`` é a parte
    ainda pendente. ``saldo_caixa`` desconta as retiradas do que foi recebido.
    """
    vendas = VendaRepo(db_path).list(data_ini, data_fim)
    faturamento = _soma(v.total for v in vendas)
    lucro = _soma(v.lucro for v in vendas)
    a_receber = _soma(v.total for v in vendas if v.status == "pendente")
    retiradas = _soma(r.valor for r in RetiradaRepo(db_path).list(data_ini, data_fim))
    qtd = len(vendas)
    resumo = {
        "qtd_vendas": qtd,
        "faturamento": faturamento,
        "lucro": lucro,
        "ticket_medio": to_money(faturamento / qtd) if qtd else to_money(0),
        "margem": calcular_margem(lucro, faturamento),
        "a_receber": a_receber,
        "retiradas": retiradas,
        "saldo_caixa": to_money(faturamento - a_receber - retiradas),
    }
    log_relatorio("resumo", data_ini=data_ini, data_fim=data_fim, vendas=qtd, faturamento=faturamento)
    return resumo


# ----------------------
# 2) Vendas por mês
# ----------------------

def vendas_por_mes(ano: int, db_path: str = DB_PATH) -> Tabela:
    """Uma linha por mês (janeiro a dezembro), inclusive meses sem venda."""
    vendas = VendaRepo(db_path).list(f"{ano:04d}-01-01", f"{ano:04d}-12-31")
    qtd: Dict[int, int] = defaultdict(int)
    fat: Dict[int, Decimal] = defaultdict(Decimal)
    luc: Dict[int, Decimal] = defaultdict(Decimal)
    for v in vendas:
        mes = int(str(v.data)[5:7])
        qtd[mes] += 1
        fat[mes] += v.total
        luc[mes] += v.lucro

    columns = ["Mês", "Vendas", "Faturamento", "Lucro"]
    rows = [[MESES[m - 1], qtd[m], to_money(fat[m]), to_money(luc[m])] for m in range(1, 13)]
    msg = None if vendas else f"Nenhuma venda em {ano}."
    return columns, rows, msg


def vendas_por_dia(
    data_ini: Optional[str] = None,
    data_fim: Optional[str] = None,
    db_path: str = DB_PATH,
) -> Tabela:
    create_views(db_path)
    sql = "SELECT dia, qtd_vendas, faturamento, lucro FROM vw_vendas_diarias"
    where, args = [], []
    if data_ini:
        where.append("dia >= date(?)")
        args.append(data_ini)
    if data_fim:
        where.append("dia <= date(?)")
        args.append(data_fim)
    if where:
        sql += " WHERE " + " AND ".join(where)
    with connect(db_path) as c:
        rows = [list(r) for r in c.execute(sql + " ORDER BY dia", args).fetchall()]
    columns = ["Dia", "Vendas", "Faturamento", "Lucro"]
    return columns, rows, None if rows else "Nenhuma venda no período."


# ----------------------
# 3) Formas de pagamento
# ----------------------

def vendas_por_pagamento(
    data_ini: Optional[str] = None,
    data_fim: Optional[str] = None,
    db_path: str = DB_PATH,
) -> Tabela:
    agg: Dict[str, List[Any]] = {}
    for v in VendaRepo(db_path).list(data_ini, data_fim):
        linha = agg.setdefault(v.forma_pagamento, [0, Decimal("0")])
        linha[0] += 1
        linha[1] += v.total
    rows = [[forma, n, to_money(total)] for forma, (n, total) in sorted(agg.items(), key=lambda kv: -kv[1][1])]
    columns = ["Forma de pagamento", "Vendas", "Total"]
    return columns, rows, None if rows else "Nenhuma venda no período."


# ----------------------
# 4) Produtos mais vendidos
# ----------------------

def produtos_mais_vendidos(
    top_n: int = 10,
    data_ini: Optional[str] = None,
    data_fim: Optional[str] = None,
    db_path: str = DB_PATH,
) -> Tabela:
    """Ranking por quantidade vendida.

    Itens do cadastro são agrupados pelo id do produto; itens manuais, pela
    descrição.
    """
    log_system_event("relatorio_mais_vendidos_start", {"top_n": top_n, "data_ini": data_ini, "data_fim": data_fim})
    agg: Dict[Any, Dict[str, Any]] = {}
    for v in VendaRepo(db_path).list(data_ini, data_fim):
        for item in v.itens:
            chave = ("id", item.produto_id) if isinstance(item, ItemCatalogo) else ("manual", item.descricao.strip().lower())
            r = agg.setdefault(chave, {"produto": item.descricao, "quantidade": 0, "faturamento": Decimal("0")})
            r["quantidade"] += item.quantidade
            r["faturamento"] += item.total

    ranking = sorted(agg.values(), key=lambda r: (-r["quantidade"], -r["faturamento"]))[: max(0, int(top_n))]
    columns = ["Produto", "Quantidade", "Faturamento"]
    rows = [[r["produto"], r["quantidade"], to_money(r["faturamento"])] for r in ranking]
    return columns, rows, None if rows else "Nenhum produto vendido no período."


# ----------------------
# 5) Estoque
# ----------------------

def estoque_baixo(incluir_ok: bool = False, db_path: str = DB_PATH) -> Tabela:
    """Produtos em ZERADO, CRITICO ou BAIXO frente ao estoque mínimo.

    Produtos sem mínimo cadastrado usam o parâmetro ``estoque_minimo_padrao``.
    """
    padrao = ParamsRepo(db_path).get_int("estoque_minimo_padrao", DEFAULTS.estoque_minimo_padrao)
    ordem = {"ZERADO": 0, "CRITICO": 1, "BAIXO": 2, "OK": 3, "VERIFICAR": 4}
    out = []
    for p in ProdutoRepo(db_path).get_all():
        minimo = p.estoque_minimo if p.estoque_minimo is not None else padrao
        status = status_estoque(p.estoque, minimo)
        if status == "OK" and not incluir_ok:
            continue
        if status != "OK":
            log_relatorio("estoque", "warning", status=status, produto=p.id, estoque=p.estoque, minimo=minimo)
        out.append([p.id, p.nome, p.categoria or "", p.estoque, minimo, status])
    out.sort(key=lambda r: (ordem.get(r[5], 9), r[3], r[1]))
    columns = ["Id", "Produto", "Categoria", "Estoque", "Mínimo", "Status"]
    return columns, out, None if out else "Nenhum produto com estoque baixo."


def valor_estoque(db_path: str = DB_PATH) -> Dict[str, Any]:
    """Totais do estoque valorizado a custo e a preço de venda."""
    create_views(db_path)
    with connect(db_path) as c:
        row = c.execute(
            """
            SELECT COUNT(*), COALESCE(SUM(estoque), 0),
                   COALESCE(SUM(valor_custo), 0), COALESCE(SUM(valor_venda), 0)
            FROM vw_estoque_valor
            """
        ).fetchone()
    return {
        "produtos": int(row[0]),
        "unidades": int(row[1]),
        "valor_custo": to_money(row[2]),
        "valor_venda": to_money(row[3]),
    }


# ----------------------
# 6) Exportação XLSX
# ----------------------

def _vendas_detalhadas(vendas: List[Venda]) -> pd.DataFrame:
    linhas = []
    for v in vendas:
        for item in v.itens:
            linhas.append({
                "venda_id": v.id,
                "data": v.data,
                "cliente": v.cliente_nome,
                "forma_pagamento": v.forma_pagamento,
                "status": v.status,
                "produto_id": item.produto_id if isinstance(item, ItemCatalogo) else None,
                "descricao": item.descricao,
                "quantidade": item.quantidade,
                "preco_unitario": float(item.preco_unitario),
                "total_item": float(item.total),
                "total_venda": float(v.total),
                "lucro_venda": float(v.lucro),
            })
    colunas = [
        "venda_id", "data", "cliente", "forma_pagamento", "status", "produto_id", "descricao",
        "quantidade", "preco_unitario", "total_item", "total_venda", "lucro_venda",
    ]
    return pd.DataFrame(linhas, columns=colunas)


def _mensal(vendas: List[Venda]) -> pd.DataFrame:
    df = pd.DataFrame(
        [{"mes": str(v.data)[:7], "total": float(v.total), "lucro": float(v.lucro)} for v in vendas],
        columns=["mes", "total", "lucro"],
    )
    if df.empty:
        return pd.DataFrame(columns=["mes", "vendas", "faturamento", "lucro"])
    return (
        df.groupby("mes")
        .agg(vendas=("total", "size"), faturamento=("total", "sum"), lucro=("lucro", "sum"))
        .round(2)
        .reset_index()
    )


def exportar_relatorio_xlsx(
    path: str,
    data_ini: Optional[str] = None,
    data_fim: Optional[str] = None,
    db_path: str = DB_PATH,
) -> str:
    """Exporta vendas detalhadas, totais mensais e estoque para um XLSX."""
    log_system_event("exportar_relatorio_start", {"path": path})
    try:
        vendas = VendaRepo(db_path).list(data_ini, data_fim)
        colunas_est, linhas_est, _ = estoque_baixo(incluir_ok=True, db_path=db_path)
        abas = {
            "Vendas": _vendas_detalhadas(vendas),
            "Mensal": _mensal(vendas),
            "Estoque": pd.DataFrame(linhas_est, columns=colunas_est),
        }
        destino = exportar_xlsx(path, abas)
        log_file_operation("export", destino, rows_processed=sum(len(df) for df in abas.values()))
        return destino
    except Exception as e:
        log_system_event("exportar_relatorio_error", {"path": path, "error": str(e)}, level="error")
        raise
