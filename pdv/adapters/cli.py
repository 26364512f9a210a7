# pdv/adapters/cli.py
"""
CLI do PDV (Typer).

Comandos principais:
- migrate                   -> aplica migrações e cria views
- params set/get/show       -> gerencia parâmetros globais
- produto add/list/preco    -> cadastro de produtos
- cliente add/list/rm       -> cadastro de clientes
- venda nova/list/quitar/recibo
- orcamento novo/list/pedido/vender/imprimir
- estoque entrada/saida/ajuste/entrada-lotes/importar-vendas/movimentos
- producao add/list/totais   -> produção de peças de gesso
- retirada add/list         -> retiradas de caixa
- rel resumo/mensal/pagamentos/top/estoque-baixo/exportar

Itens: ``--item <produto_id>:<qtd>`` e ``--manual "<descrição>:<preço>:<qtd>"``.
Valores aceitam ``1.234,56`` ou ``1234.56``.
"""

from __future__ import annotations

import json
from contextlib import contextmanager
from decimal import Decimal
from pathlib import Path
from typing import Any, Dict, List, Optional

import typer
from rich.console import Console
from rich.table import Table
from rich.panel import Panel
from rich import box

from pdv.config import DB_PATH, DEFAULTS
from pdv.adapters.parsers import parse_item_spec, parse_manual_spec, parse_valor
from pdv.adapters.recibo import formatar_data, formatar_moeda, render_orcamento, render_recibo
from pdv.domain.errors import PDVError
from pdv.domain.models import FORMAS_PAGAMENTO
from pdv.infra.migrations import apply_migrations
from pdv.infra.views import create_views
from pdv.infra.repositories import ParamsRepo
from pdv.usecases.cadastros import (
    atualizar_preco, cadastrar_cliente, cadastrar_produto,
    listar_clientes, listar_produtos, remover_cliente,
)
from pdv.usecases.registrar_venda import (
    buscar_venda, finalizar_venda, listar_vendas, montar_carrinho, quitar_venda,
)
from pdv.usecases.orcamentos import (
    buscar_orcamento, converter_em_pedido, converter_em_venda, criar_orcamento, listar_orcamentos,
)
from pdv.usecases.registrar_entrada import registrar_entrada, registrar_entrada_lote
from pdv.usecases.registrar_saida import importar_vendas, listar_movimentos, registrar_saida
from pdv.usecases.ajuste_estoque import registrar_ajuste
from pdv.usecases.producao import listar_producoes, registrar_producao, total_sacos_gesso, totais_por_peca
from pdv.usecases.retiradas import listar_retiradas, registrar_retirada, total_retiradas_por_dia
from pdv.usecases.relatorios import (
    estoque_baixo, exportar_relatorio_xlsx, produtos_mais_vendidos,
    resumo_vendas, valor_estoque, vendas_por_mes, vendas_por_pagamento,
)


app = typer.Typer(help="PDV: vendas, orçamentos e estoque")
console = Console()

DB_OPTION_HELP = "Caminho do SQLite"


# -----------------------
# util
# -----------------------

@contextmanager
def _erros():
    """Erros de negócio viram mensagem em vermelho e código de saída 1."""
    try:
        yield
    except PDVError as e:
        console.print(f"[bold red]Erro:[/] {e}")
        raise typer.Exit(code=1)


def _fmt(val: Any) -> str:
    if val is None:
        return ""
    if isinstance(val, Decimal):
        return f"{val:,.2f}".replace(",", "X").replace(".", ",").replace("X", ".")
    if isinstance(val, float):
        return f"{val:,.2f}".replace(",", "X").replace(".", ",").replace("X", ".")
    return str(val)


def _display_table(data: Any, title: str = "Resultado") -> None:
    """Exibe os dados em tabelas formatadas usando Rich.

    Aceita ``(colunas, linhas, mensagem)``, lista de dicts ou um dict simples.
    """
    if isinstance(data, tuple) and len(data) == 3:
        columns, rows, msg = data
        if not rows:
            console.print(Panel(msg or "Nenhum dado encontrado", title=title, border_style="yellow"))
            return
        table = Table(title=title, box=box.ROUNDED)
        for i, col in enumerate(columns):
            numerica = all(isinstance(r[i], (int, float, Decimal)) and not isinstance(r[i], bool) for r in rows)
            table.add_column(str(col), justify="right" if numerica else "left")
        for r in rows:
            table.add_row(*[_status(v) if columns[i] == "Status" else _fmt(v) for i, v in enumerate(r)])
        console.print(table)
        return

    if not data:
        console.print(Panel("Nenhum dado encontrado", title=title, border_style="yellow"))
        return

    if isinstance(data, list) and isinstance(data[0], dict):
        columns = list(data[0].keys())
        _display_table((columns, [[d.get(c) for c in columns] for d in data], None), title)
        return

    if isinstance(data, dict):
        table = Table(title=title, box=box.ROUNDED)
        table.add_column("Campo")
        table.add_column("Valor", justify="right")
        for k, v in data.items():
            table.add_row(str(k), _fmt(v))
        console.print(table)
        return

    typer.echo(json.dumps(data, ensure_ascii=False, indent=2, default=str))


def _status(val: Any) -> str:
    s = str(val)
    cores = {"ZERADO": "bold red", "CRITICO": "bold red", "BAIXO": "bold yellow", "OK": "bold green"}
    return f"[{cores[s]}]{s}[/]" if s in cores else s


def _valor(txt: Optional[str]) -> Optional[Decimal]:
    return parse_valor(txt) if txt is not None else None


def _carrinho(itens: Optional[List[str]], manuais: Optional[List[str]], db_path: str):
    return montar_carrinho(
        [parse_item_spec(s) for s in itens or []],
        [parse_manual_spec(s) for s in manuais or []],
        db_path=db_path,
    )


def _mostrar_documento(texto: str, saida: Optional[str]) -> None:
    if saida:
        Path(saida).write_text(texto, encoding="utf-8")
        typer.echo(f">> Gravado em: {saida}")
    else:
        typer.echo(texto)


# -----------------------
# comandos de infra
# -----------------------

@app.command("migrate")
def cmd_migrate(db_path: str = typer.Option(DB_PATH, "--db", help=DB_OPTION_HELP)):
    """Aplica migrações e recria as views auxiliares."""
    apply_migrations(db_path)
    create_views(db_path)
    typer.echo(f">> Migrações aplicadas e views criadas em: {db_path}")


params_app = typer.Typer(help="Gerenciar parâmetros globais.")
app.add_typer(params_app, name="params")

_PARAMS = ("custo_estimado_ratio", "validade_orcamento_dias", "forma_pagamento_padrao", "estoque_minimo_padrao")


@params_app.command("set")
def cmd_params_set(
    custo_estimado_ratio: Optional[float] = typer.Option(None, help="Fração do preço usada como custo de itens manuais (ex.: 0.30)"),
    validade_orcamento_dias: Optional[int] = typer.Option(None, help="Validade padrão de orçamentos, em dias"),
    estoque_minimo_padrao: Optional[int] = typer.Option(None, help="Mínimo usado quando o produto não tem um"),
    forma_pagamento_padrao: Optional[str] = typer.Option(None, help="dinheiro | pix | credito | debito"),
    db_path: str = typer.Option(DB_PATH, "--db", help=DB_OPTION_HELP),
):
    """Define parâmetros globais (apenas os informados são alterados)."""
    items: List[tuple[str, str]] = []
    if custo_estimado_ratio is not None:
        if not 0 <= custo_estimado_ratio <= 1:
            typer.echo("custo_estimado_ratio deve estar entre 0 e 1.")
            raise typer.Exit(code=1)
        items.append(("custo_estimado_ratio", str(custo_estimado_ratio)))
    if validade_orcamento_dias is not None:
        items.append(("validade_orcamento_dias", str(validade_orcamento_dias)))
    if estoque_minimo_padrao is not None:
        items.append(("estoque_minimo_padrao", str(estoque_minimo_padrao)))
    if forma_pagamento_padrao is not None:
        if forma_pagamento_padrao not in FORMAS_PAGAMENTO:
            typer.echo(f"forma_pagamento_padrao deve ser uma de: {', '.join(FORMAS_PAGAMENTO)}.")
            raise typer.Exit(code=1)
        items.append(("forma_pagamento_padrao", forma_pagamento_padrao))
    if not items:
        typer.echo("Nada a alterar. Informe pelo menos um parâmetro.")
        raise typer.Exit(code=1)
    ParamsRepo(db_path).set_many(items)
    typer.echo(">> Parâmetros atualizados.")


@params_app.command("get")
def cmd_params_get(
    chave: str = typer.Argument(..., help="Ex.: custo_estimado_ratio | validade_orcamento_dias"),
    db_path: str = typer.Option(DB_PATH, "--db", help=DB_OPTION_HELP),
):
    """Mostra um parâmetro específico."""
    val = ParamsRepo(db_path).get(chave)
    typer.echo("(None)" if val is None else val)


@params_app.command("show")
def cmd_params_show(db_path: str = typer.Option(DB_PATH, "--db", help=DB_OPTION_HELP)):
    """Exibe os parâmetros efetivos (com fallback para defaults)."""
    repo = ParamsRepo(db_path)
    columns = ["Parâmetro", "Valor Atual", "Valor Padrão"]
    rows = [[k, repo.get(k, str(getattr(DEFAULTS, k))), str(getattr(DEFAULTS, k))] for k in _PARAMS]
    _display_table((columns, rows, None), title="Parâmetros do Sistema")
    console.print(f"[dim]Banco de dados: {db_path}[/dim]")


# -----------------------
# cadastros
# -----------------------

produto_app = typer.Typer(help="Cadastro de produtos")
app.add_typer(produto_app, name="produto")


@produto_app.command("add")
def cmd_produto_add(
    nome: str = typer.Option(..., help="Nome do produto"),
    preco: str = typer.Option(..., help="Preço de venda (ex.: 29,90)"),
    estoque: int = typer.Option(..., help="Estoque inicial"),
    categoria: str = typer.Option(..., help="Categoria"),
    custo: str = typer.Option("0", help="Custo unitário"),
    descricao: Optional[str] = typer.Option(None, help="Descrição"),
    codigo_barras: Optional[str] = typer.Option(None, help="Código de barras"),
    estoque_minimo: Optional[int] = typer.Option(None, help="Estoque mínimo"),
    db_path: str = typer.Option(DB_PATH, "--db", help=DB_OPTION_HELP),
):
    """Cadastra um produto."""
    with _erros():
        p = cadastrar_produto(
            nome, _valor(preco), estoque, categoria, custo=_valor(custo),
            descricao=descricao, codigo_barras=codigo_barras,
            estoque_minimo=estoque_minimo, db_path=db_path,
        )
    typer.echo(f">> Produto #{p.id} cadastrado: {p.nome} ({formatar_moeda(p.preco)})")


@produto_app.command("list")
def cmd_produto_list(
    categoria: Optional[str] = typer.Option(None, help="Filtrar por categoria"),
    db_path: str = typer.Option(DB_PATH, "--db", help=DB_OPTION_HELP),
):
    """Lista os produtos cadastrados."""
    produtos = listar_produtos(categoria=categoria, db_path=db_path)
    columns = ["Id", "Nome", "Categoria", "Preço", "Custo", "Estoque"]
    rows = [[p.id, p.nome, p.categoria or "", p.preco, p.custo, p.estoque] for p in produtos]
    _display_table((columns, rows, "Nenhum produto cadastrado."), title="Produtos")


@produto_app.command("preco")
def cmd_produto_preco(
    produto_id: int = typer.Argument(..., help="Id do produto"),
    preco: str = typer.Argument(..., help="Novo preço"),
    custo: Optional[str] = typer.Option(None, help="Novo custo"),
    db_path: str = typer.Option(DB_PATH, "--db", help=DB_OPTION_HELP),
):
    """Atualiza preço (e opcionalmente custo) de um produto."""
    with _erros():
        p = atualizar_preco(produto_id, _valor(preco), custo=_valor(custo), db_path=db_path)
    typer.echo(f">> {p.nome}: {formatar_moeda(p.preco)}")


cliente_app = typer.Typer(help="Cadastro de clientes")
app.add_typer(cliente_app, name="cliente")


@cliente_app.command("add")
def cmd_cliente_add(
    nome: str = typer.Option(..., help="Nome do cliente"),
    telefone: Optional[str] = typer.Option(None),
    email: Optional[str] = typer.Option(None),
    documento: Optional[str] = typer.Option(None, help="CPF/CNPJ"),
    endereco: Optional[str] = typer.Option(None),
    cidade: Optional[str] = typer.Option(None),
    estado: Optional[str] = typer.Option(None),
    cep: Optional[str] = typer.Option(None),
    db_path: str = typer.Option(DB_PATH, "--db", help=DB_OPTION_HELP),
):
    """Cadastra um cliente."""
    with _erros():
        c = cadastrar_cliente(
            nome, db_path=db_path, telefone=telefone, email=email, documento=documento,
            endereco=endereco, cidade=cidade, estado=estado, cep=cep,
        )
    typer.echo(f">> Cliente #{c.id} cadastrado: {c.nome}")


@cliente_app.command("list")
def cmd_cliente_list(db_path: str = typer.Option(DB_PATH, "--db", help=DB_OPTION_HELP)):
    """Lista os clientes cadastrados."""
    columns = ["Id", "Nome", "Telefone", "Documento", "Cidade"]
    rows = [[c.id, c.nome, c.telefone or "", c.documento or "", c.cidade or ""] for c in listar_clientes(db_path=db_path)]
    _display_table((columns, rows, "Nenhum cliente cadastrado."), title="Clientes")


@cliente_app.command("rm")
def cmd_cliente_rm(
    cliente_id: int = typer.Argument(..., help="Id do cliente"),
    db_path: str = typer.Option(DB_PATH, "--db", help=DB_OPTION_HELP),
):
    """Remove um cliente."""
    with _erros():
        remover_cliente(cliente_id, db_path=db_path)
    typer.echo(f">> Cliente #{cliente_id} removido.")


# -----------------------
# vendas
# -----------------------

venda_app = typer.Typer(help="Vendas")
app.add_typer(venda_app, name="venda")


@venda_app.command("nova")
def cmd_venda_nova(
    item: Optional[List[str]] = typer.Option(None, "--item", help="<produto_id>:<qtd> (repetível)"),
    manual: Optional[List[str]] = typer.Option(None, "--manual", help='"<descrição>:<preço>:<qtd>" (repetível)'),
    pagamento: Optional[str] = typer.Option(None, help="dinheiro | pix | credito | debito (padrão: parâmetro forma_pagamento_padrao)"),
    valor_pago: Optional[str] = typer.Option(None, help="Valor recebido (dinheiro)"),
    desconto: str = typer.Option("0", help="Desconto em reais"),
    cliente: Optional[int] = typer.Option(None, help="Id do cliente (padrão: avulso)"),
    pendente: bool = typer.Option(False, "--pendente", help="Registra a venda como pendente de pagamento"),
    db_path: str = typer.Option(DB_PATH, "--db", help=DB_OPTION_HELP),
):
    """Registra uma venda, baixa o estoque e mostra o recibo."""
    with _erros():
        carrinho = _carrinho(item, manual, db_path)
        venda = finalizar_venda(
            carrinho,
            forma_pagamento=pagamento,
            valor_pago=_valor(valor_pago),
            desconto=_valor(desconto),
            status="pendente" if pendente else "pago",
            cliente_id=cliente,
            db_path=db_path,
        )
    typer.echo(render_recibo(venda))


@venda_app.command("list")
def cmd_venda_list(
    de: Optional[str] = typer.Option(None, help="Data inicial (YYYY-MM-DD)"),
    ate: Optional[str] = typer.Option(None, help="Data final (YYYY-MM-DD)"),
    status: Optional[str] = typer.Option(None, help="pago | pendente"),
    pagamento: Optional[str] = typer.Option(None, help="Forma de pagamento"),
    db_path: str = typer.Option(DB_PATH, "--db", help=DB_OPTION_HELP),
):
    """Lista vendas com filtros."""
    vendas = listar_vendas(de, ate, status=status, forma_pagamento=pagamento, db_path=db_path)
    columns = ["Id", "Data", "Cliente", "Itens", "Total", "Lucro", "Pagamento", "Situação"]
    rows = [
        [v.id, formatar_data(v.data), v.cliente_nome, len(v.itens), v.total, v.lucro, v.forma_pagamento, v.status]
        for v in vendas
    ]
    _display_table((columns, rows, "Nenhuma venda encontrada."), title="Vendas")


@venda_app.command("quitar")
def cmd_venda_quitar(
    venda_id: int = typer.Argument(..., help="Id da venda pendente"),
    valor_pago: Optional[str] = typer.Option(None, help="Valor recebido"),
    db_path: str = typer.Option(DB_PATH, "--db", help=DB_OPTION_HELP),
):
    """Marca uma venda pendente como paga."""
    with _erros():
        v = quitar_venda(venda_id, valor_pago=_valor(valor_pago), db_path=db_path)
    typer.echo(f">> Venda #{v.id} quitada ({formatar_moeda(v.total)}).")


@venda_app.command("recibo")
def cmd_venda_recibo(
    venda_id: int = typer.Argument(..., help="Id da venda"),
    saida: Optional[str] = typer.Option(None, help="Grava o recibo neste arquivo"),
    db_path: str = typer.Option(DB_PATH, "--db", help=DB_OPTION_HELP),
):
    """Mostra (ou grava) o recibo de uma venda."""
    with _erros():
        venda = buscar_venda(venda_id, db_path=db_path)
    _mostrar_documento(render_recibo(venda), saida)


# -----------------------
# orçamentos
# -----------------------

orc_app = typer.Typer(help="Orçamentos (orcamento -> pedido -> vendido)")
app.add_typer(orc_app, name="orcamento")


@orc_app.command("novo")
def cmd_orcamento_novo(
    item: Optional[List[str]] = typer.Option(None, "--item", help="<produto_id>:<qtd> (repetível)"),
    manual: Optional[List[str]] = typer.Option(None, "--manual", help='"<descrição>:<preço>:<qtd>" (repetível)'),
    cliente_nome: Optional[str] = typer.Option(None, help="Nome do cliente"),
    documento: Optional[str] = typer.Option(None, help="CPF/CNPJ"),
    telefone: Optional[str] = typer.Option(None),
    endereco: Optional[str] = typer.Option(None),
    cliente: Optional[int] = typer.Option(None, help="Id de cliente cadastrado"),
    desconto: str = typer.Option("0", help="Desconto em reais"),
    pagamento: Optional[str] = typer.Option(None, help="Forma de pagamento prevista"),
    obs: Optional[str] = typer.Option(None, help="Observações"),
    validade: Optional[str] = typer.Option(None, help="Validade (YYYY-MM-DD)"),
    db_path: str = typer.Option(DB_PATH, "--db", help=DB_OPTION_HELP),
):
    """Cria um orçamento (sem baixa de estoque)."""
    with _erros():
        carrinho = _carrinho(item, manual, db_path)
        orc = criar_orcamento(
            carrinho,
            cliente_nome=cliente_nome,
            cliente_documento=documento,
            cliente_telefone=telefone,
            cliente_endereco=endereco,
            cliente_id=cliente,
            desconto=_valor(desconto),
            forma_pagamento=pagamento,
            observacoes=obs,
            validade=validade,
            db_path=db_path,
        )
    typer.echo(render_orcamento(orc))


@orc_app.command("list")
def cmd_orcamento_list(
    status: Optional[str] = typer.Option(None, help="orcamento | pedido | vendido"),
    db_path: str = typer.Option(DB_PATH, "--db", help=DB_OPTION_HELP),
):
    """Lista orçamentos (mais recentes primeiro)."""
    columns = ["Id", "Número", "Data", "Cliente", "Total", "Validade", "Situação"]
    rows = [
        [o.id, o.numero, formatar_data(o.data), o.cliente_nome, o.total, formatar_data(o.validade), o.status]
        for o in listar_orcamentos(status=status, db_path=db_path)
    ]
    _display_table((columns, rows, "Nenhum orçamento encontrado."), title="Orçamentos")


@orc_app.command("pedido")
def cmd_orcamento_pedido(
    orcamento_id: int = typer.Argument(..., help="Id do orçamento"),
    db_path: str = typer.Option(DB_PATH, "--db", help=DB_OPTION_HELP),
):
    """Converte um orçamento em pedido."""
    with _erros():
        orc = converter_em_pedido(orcamento_id, db_path=db_path)
    typer.echo(f">> {orc.numero} agora é pedido.")


@orc_app.command("vender")
def cmd_orcamento_vender(
    orcamento_id: int = typer.Argument(..., help="Id do pedido"),
    pagamento: Optional[str] = typer.Option(None, help="Forma de pagamento"),
    valor_pago: Optional[str] = typer.Option(None, help="Valor recebido (dinheiro)"),
    db_path: str = typer.Option(DB_PATH, "--db", help=DB_OPTION_HELP),
):
    """Conclui um pedido: baixa o estoque e registra a venda."""
    with _erros():
        venda = converter_em_venda(orcamento_id, forma_pagamento=pagamento, valor_pago=_valor(valor_pago), db_path=db_path)
    typer.echo(render_recibo(venda))


@orc_app.command("imprimir")
def cmd_orcamento_imprimir(
    orcamento_id: int = typer.Argument(..., help="Id do orçamento"),
    saida: Optional[str] = typer.Option(None, help="Grava o orçamento neste arquivo"),
    db_path: str = typer.Option(DB_PATH, "--db", help=DB_OPTION_HELP),
):
    """Mostra (ou grava) o orçamento em texto."""
    with _erros():
        orc = buscar_orcamento(orcamento_id, db_path=db_path)
    _mostrar_documento(render_orcamento(orc), saida)


# -----------------------
# comandos de movimentação
# -----------------------

estoque_app = typer.Typer(help="Movimentações de estoque")
app.add_typer(estoque_app, name="estoque")


@estoque_app.command("entrada")
def cmd_estoque_entrada(
    produto_id: int = typer.Argument(..., help="Id do produto"),
    quantidade: int = typer.Argument(..., help="Quantidade"),
    motivo: Optional[str] = typer.Option(None, help="Motivo / fornecedor"),
    db_path: str = typer.Option(DB_PATH, "--db", help=DB_OPTION_HELP),
):
    """Registra uma entrada de estoque."""
    with _erros():
        mov = registrar_entrada(produto_id, quantidade, motivo=motivo, db_path=db_path)
    typer.echo(f">> Entrada: {mov.quantidade} x {mov.produto_nome}")


@estoque_app.command("saida")
def cmd_estoque_saida(
    produto_id: int = typer.Argument(..., help="Id do produto"),
    quantidade: int = typer.Argument(..., help="Quantidade"),
    motivo: Optional[str] = typer.Option(None, help="Motivo (perda, uso interno...)"),
    db_path: str = typer.Option(DB_PATH, "--db", help=DB_OPTION_HELP),
):
    """Registra uma saída de estoque."""
    with _erros():
        mov = registrar_saida(produto_id, quantidade, motivo=motivo, db_path=db_path)
    typer.echo(f">> Saída: {mov.quantidade} x {mov.produto_nome}")


@estoque_app.command("ajuste")
def cmd_estoque_ajuste(
    produto_id: int = typer.Argument(..., help="Id do produto"),
    novo_estoque: int = typer.Argument(..., help="Estoque contado (vira o estoque atual)"),
    motivo: Optional[str] = typer.Option(None, help="Motivo (inventário, avaria...)"),
    db_path: str = typer.Option(DB_PATH, "--db", help=DB_OPTION_HELP),
):
    """Ajusta o estoque para o valor contado."""
    with _erros():
        mov = registrar_ajuste(produto_id, novo_estoque, motivo=motivo, db_path=db_path)
    typer.echo(f">> Ajuste: {mov.produto_nome} ({mov.quantidade:+d})")


@estoque_app.command("entrada-lotes")
def cmd_estoque_entrada_lotes(
    path: str = typer.Argument(..., help="Caminho do XLSX de ENTRADAS"),
    db_path: str = typer.Option(DB_PATH, "--db", help=DB_OPTION_HELP),
):
    """Registra entradas em lote a partir de um XLSX."""
    with _erros():
        info = registrar_entrada_lote(path, db_path=db_path)
    console.print(Panel(
        f"Linhas inseridas: {info['linhas_inseridas']}\nRejeitadas: {len(info['rejeitadas'])}",
        title="Entradas em Lote",
    ))
    if info["rejeitadas"]:
        rows = [[r["linha"], r.get("produto_id") or r.get("produto") or "", r["erro"]] for r in info["rejeitadas"]]
        _display_table((["Linha", "Produto", "Erro"], rows, None), title="Linhas Rejeitadas")


@estoque_app.command("importar-vendas")
def cmd_estoque_importar_vendas(db_path: str = typer.Option(DB_PATH, "--db", help=DB_OPTION_HELP)):
    """Gera as saídas de estoque de vendas ainda não baixadas."""
    with _erros():
        res = importar_vendas(db_path=db_path)
    _display_table(res, title="Importação de Vendas")


@estoque_app.command("movimentos")
def cmd_estoque_movimentos(
    produto: Optional[int] = typer.Option(None, help="Id do produto"),
    tipo: Optional[str] = typer.Option(None, help="entrada | saida | ajuste"),
    db_path: str = typer.Option(DB_PATH, "--db", help=DB_OPTION_HELP),
):
    """Lista movimentações de estoque (mais recentes primeiro)."""
    with _erros():
        movimentos = listar_movimentos(produto_id=produto, tipo=tipo, db_path=db_path)
    columns = ["Id", "Data", "Produto", "Tipo", "Qtd", "Motivo"]
    rows = [[m.id, formatar_data(m.data), m.produto_nome, m.tipo, m.quantidade, m.motivo or ""] for m in movimentos]
    _display_table((columns, rows, "Nenhuma movimentação encontrada."), title="Movimentações")


# -----------------------
# produção
# -----------------------

producao_app = typer.Typer(help="Produção de peças de gesso")
app.add_typer(producao_app, name="producao")


@producao_app.command("add")
def cmd_producao_add(
    peca: str = typer.Option(..., help="Peça produzida (ex.: tabica 5x3)"),
    quantidade: int = typer.Option(..., help="Unidades produzidas"),
    sacos: int = typer.Option(0, help="Sacos de gesso usados"),
    data: Optional[str] = typer.Option(None, help="Data (YYYY-MM-DD, padrão: hoje)"),
    obs: Optional[str] = typer.Option(None, help="Observação"),
    db_path: str = typer.Option(DB_PATH, "--db", help=DB_OPTION_HELP),
):
    """Registra um lote de produção."""
    with _erros():
        p = registrar_producao(peca, quantidade, sacos, data=data, observacao=obs, db_path=db_path)
    typer.echo(f">> Produção #{p.id}: {p.quantidade} x {p.peca} ({p.sacos_gesso} sacos)")


@producao_app.command("list")
def cmd_producao_list(
    de: Optional[str] = typer.Option(None, help="Data inicial (YYYY-MM-DD)"),
    ate: Optional[str] = typer.Option(None, help="Data final (YYYY-MM-DD)"),
    db_path: str = typer.Option(DB_PATH, "--db", help=DB_OPTION_HELP),
):
    """Lista os lotes de produção."""
    columns = ["Id", "Data", "Peça", "Qtd", "Sacos", "Obs."]
    rows = [
        [p.id, formatar_data(p.data), p.peca, p.quantidade, p.sacos_gesso, p.observacao or ""]
        for p in listar_producoes(de, ate, db_path=db_path)
    ]
    _display_table((columns, rows, "Nenhuma produção registrada."), title="Produção")


@producao_app.command("totais")
def cmd_producao_totais(
    de: Optional[str] = typer.Option(None, help="Data inicial (YYYY-MM-DD)"),
    ate: Optional[str] = typer.Option(None, help="Data final (YYYY-MM-DD)"),
    db_path: str = typer.Option(DB_PATH, "--db", help=DB_OPTION_HELP),
):
    """Totais produzidos por peça e sacos de gesso consumidos."""
    _display_table(totais_por_peca(de, ate, db_path=db_path), title="Produção por Peça")
    console.print(f"[dim]Sacos de gesso usados: {total_sacos_gesso(de, ate, db_path=db_path)}[/dim]")


# -----------------------
# retiradas
# -----------------------

retirada_app = typer.Typer(help="Retiradas de caixa")
app.add_typer(retirada_app, name="retirada")


@retirada_app.command("add")
def cmd_retirada_add(
    valor: str = typer.Argument(..., help="Valor retirado"),
    motivo: Optional[str] = typer.Option(None, help="Motivo"),
    data: Optional[str] = typer.Option(None, help="Data (YYYY-MM-DD, padrão: hoje)"),
    db_path: str = typer.Option(DB_PATH, "--db", help=DB_OPTION_HELP),
):
    """Registra uma retirada de caixa."""
    with _erros():
        r = registrar_retirada(_valor(valor), data=data, motivo=motivo, db_path=db_path)
    typer.echo(f">> Retirada #{r.id}: {formatar_moeda(r.valor)}")


@retirada_app.command("list")
def cmd_retirada_list(
    de: Optional[str] = typer.Option(None, help="Data inicial (YYYY-MM-DD)"),
    ate: Optional[str] = typer.Option(None, help="Data final (YYYY-MM-DD)"),
    db_path: str = typer.Option(DB_PATH, "--db", help=DB_OPTION_HELP),
):
    """Lista retiradas e o total por dia."""
    columns = ["Id", "Data", "Valor", "Motivo"]
    rows = [[r.id, formatar_data(r.data), r.valor, r.motivo or ""] for r in listar_retiradas(de, ate, db_path=db_path)]
    _display_table((columns, rows, "Nenhuma retirada no período."), title="Retiradas")
    totais = total_retiradas_por_dia(de, ate, db_path=db_path)
    if totais:
        _display_table((["Dia", "Total"], [[formatar_data(d), v] for d, v in sorted(totais.items())], None), title="Total por Dia")


# -----------------------
# relatórios
# -----------------------

rel_app = typer.Typer(help="Relatórios de vendas e estoque")
app.add_typer(rel_app, name="rel")


@rel_app.command("resumo")
def rel_resumo(
    de: Optional[str] = typer.Option(None, help="Data inicial (YYYY-MM-DD)"),
    ate: Optional[str] = typer.Option(None, help="Data final (YYYY-MM-DD)"),
    db_path: str = typer.Option(DB_PATH, "--db", help=DB_OPTION_HELP),
):
    """Faturamento, lucro, ticket médio e margem do período."""
    r = resumo_vendas(de, ate, db_path=db_path)
    out: Dict[str, Any] = {
        "Vendas": r["qtd_vendas"],
        "Faturamento": formatar_moeda(r["faturamento"]),
        "Lucro": formatar_moeda(r["lucro"]),
        "Ticket médio": formatar_moeda(r["ticket_medio"]),
        "Margem": f"{r['margem']:.1f}%".replace(".", ","),
        "A receber": formatar_moeda(r["a_receber"]),
        "Retiradas": formatar_moeda(r["retiradas"]),
        "Saldo de caixa": formatar_moeda(r["saldo_caixa"]),
    }
    _display_table(out, title="Resumo de Vendas")


@rel_app.command("mensal")
def rel_mensal(
    ano: int = typer.Option(..., help="Ano (YYYY)"),
    db_path: str = typer.Option(DB_PATH, "--db", help=DB_OPTION_HELP),
):
    """Vendas por mês do ano."""
    _display_table(vendas_por_mes(ano, db_path=db_path), title=f"Vendas por Mês ({ano})")


@rel_app.command("pagamentos")
def rel_pagamentos(
    de: Optional[str] = typer.Option(None, help="Data inicial (YYYY-MM-DD)"),
    ate: Optional[str] = typer.Option(None, help="Data final (YYYY-MM-DD)"),
    db_path: str = typer.Option(DB_PATH, "--db", help=DB_OPTION_HELP),
):
    """Vendas por forma de pagamento."""
    _display_table(vendas_por_pagamento(de, ate, db_path=db_path), title="Vendas por Forma de Pagamento")


@rel_app.command("top")
def rel_top(
    n: int = typer.Option(10, "--n", help="Top N produtos"),
    de: Optional[str] = typer.Option(None, help="Data inicial (YYYY-MM-DD)"),
    ate: Optional[str] = typer.Option(None, help="Data final (YYYY-MM-DD)"),
    db_path: str = typer.Option(DB_PATH, "--db", help=DB_OPTION_HELP),
):
    """Produtos mais vendidos."""
    _display_table(produtos_mais_vendidos(n, de, ate, db_path=db_path), title=f"Top {n} Produtos")


@rel_app.command("estoque-baixo")
def rel_estoque_baixo(
    todos: bool = typer.Option(False, "--todos", help="Inclui produtos com estoque OK"),
    db_path: str = typer.Option(DB_PATH, "--db", help=DB_OPTION_HELP),
):
    """Produtos abaixo do estoque mínimo e valor total do estoque."""
    _display_table(estoque_baixo(incluir_ok=todos, db_path=db_path), title="Estoque Baixo")
    v = valor_estoque(db_path=db_path)
    console.print(
        f"[dim]{v['produtos']} produtos, {v['unidades']} unidades - "
        f"custo {formatar_moeda(v['valor_custo'])}, venda {formatar_moeda(v['valor_venda'])}[/dim]"
    )


@rel_app.command("exportar")
def rel_exportar(
    path: str = typer.Argument(..., help="Arquivo XLSX de destino"),
    de: Optional[str] = typer.Option(None, help="Data inicial (YYYY-MM-DD)"),
    ate: Optional[str] = typer.Option(None, help="Data final (YYYY-MM-DD)"),
    db_path: str = typer.Option(DB_PATH, "--db", help=DB_OPTION_HELP),
):
    """Exporta vendas detalhadas, totais mensais e estoque para XLSX."""
    destino = exportar_relatorio_xlsx(path, de, ate, db_path=db_path)
    typer.echo(f">> Relatório exportado: {destino}")


# Entry point opcional:
def main():
    app()


if __name__ == "__main__":
    main()
