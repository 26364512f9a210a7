# pdv/infra/repositories.py
"""
Repositórios (DAO) para acesso e manipulação de dados no SQLite.

Classes:
- ParamsRepo
- ProdutoRepo
- ClienteRepo
- VendaRepo
- OrcamentoRepo
- MovimentoRepo
- RetiradaRepo

Os métodos de escrita aceitam um ``conn`` opcional; quando informado, a
operação participa da transação já aberta pelo chamador (usado para gravar
venda, baixa de estoque e movimentações de forma atômica).
"""

from __future__ import annotations

import sqlite3
from collections import defaultdict
from contextlib import contextmanager
from dataclasses import fields, is_dataclass
from typing import Any, Dict, Iterable, Iterator, List, Optional, Sequence, Set, Tuple

from .db import connect
from pdv.domain.errors import NotFoundError
from pdv.domain.models import (
    Cliente, Item, MovimentoEstoque, Orcamento, Producao, Produto, Retirada, Venda,
    item_from_dict, item_to_dict, to_money,
)
from pdv.domain.reconciliacao import Baixa, aplicar_baixas, resolver_baixas, verificar_disponibilidade


# -------------------------
# Helpers
# -------------------------

def _as_dict(row: Any) -> Dict[str, Any]:
    if isinstance(row, dict):
        return dict(row)
    if is_dataclass(row):
        # raso: os itens continuam como dataclasses
        return {f.name: getattr(row, f.name) for f in fields(row)}
    raise TypeError("row must be dict or dataclass")


@contextmanager
def _session(db_path: str, conn: Optional[sqlite3.Connection] = None) -> Iterator[sqlite3.Connection]:
    if conn is not None:
        yield conn
        return
    with connect(db_path) as c:
        yield c


def _money_str(v: Any) -> str:
    return str(to_money(v))


def _coerce_itens(itens: Iterable[Any]) -> List[Item]:
    out: List[Item] = []
    for it in itens or []:
        out.append(item_from_dict(it) if isinstance(it, dict) else it)
    return out


def _insert_itens(c: sqlite3.Connection, table: str, fk: str, doc_id: int, itens: Sequence[Item]) -> None:
    rows = []
    for pos, item in enumerate(itens):
        d = item_to_dict(item)
        d.update({fk: doc_id, "posicao": pos})
        rows.append(d)
    if not rows:
        return
    c.executemany(
        f"""
        INSERT INTO {table} ({fk}, posicao, produto_id, descricao, quantidade, preco_unitario)
        VALUES (:{fk}, :posicao, :produto_id, :descricao, :quantidade, :preco_unitario)
        """,
        rows,
    )


def _load_itens(c: sqlite3.Connection, table: str, fk: str, doc_id: int) -> List[Item]:
    cur = c.execute(
        f"""SELECT produto_id, descricao, quantidade, preco_unitario
            FROM {table} WHERE {fk} = ? ORDER BY posicao""",
        (doc_id,),
    )
    return [item_from_dict(dict(r)) for r in cur.fetchall()]


def _filtro_periodo(data_ini: Optional[str], data_fim: Optional[str]) -> Tuple[List[str], List[Any]]:
    where: List[str] = []
    args: List[Any] = []
    if data_ini:
        where.append("date(data) >= date(?)")
        args.append(data_ini)
    if data_fim:
        where.append("date(data) <= date(?)")
        args.append(data_fim)
    return where, args


# -------------------------
# Params
# -------------------------

class ParamsRepo:
    def __init__(self, db_path: str):
        self.db_path = db_path

    def set_many(self, items: Iterable[Tuple[str, str]]) -> None:
        with connect(self.db_path) as c:
            c.executemany(
                """
                INSERT INTO params (chave, valor)
                VALUES (?, ?)
                ON CONFLICT(chave) DO UPDATE SET valor=excluded.valor
                """,
                list(items),
            )

    def get(self, key: str, default: Optional[str] = None) -> Optional[str]:
        with connect(self.db_path) as c:
            row = c.execute("SELECT valor FROM params WHERE chave = ?", (key,)).fetchone()
            return row[0] if row else default

    def get_float(self, key: str, default: float) -> float:
        v = self.get(key, None)
        if v is None:
            return default
        try:
            return float(v)
        except ValueError:
            return default

    def get_int(self, key: str, default: int) -> int:
        return int(self.get_float(key, float(default)))


# -------------------------
# Produto (catálogo)
# -------------------------

_PRODUTO_COLS = "id, nome, categoria, preco, custo, estoque, descricao, codigo_barras, estoque_minimo"


def _produto_from_row(row: sqlite3.Row) -> Produto:
    return Produto(
        id=row["id"],
        nome=row["nome"],
        categoria=row["categoria"],
        preco=row["preco"],
        custo=row["custo"],
        estoque=row["estoque"],
        descricao=row["descricao"],
        codigo_barras=row["codigo_barras"],
        estoque_minimo=row["estoque_minimo"],
    )


class ProdutoRepo:
    def __init__(self, db_path: str):
        self.db_path = db_path

    def insert(self, row: Any, conn: Optional[sqlite3.Connection] = None) -> int:
        r = _as_dict(row)
        payload = {
            "nome": r.get("nome"),
            "categoria": r.get("categoria"),
            "preco": _money_str(r.get("preco")),
            "custo": _money_str(r.get("custo")),
            "estoque": int(r.get("estoque") or 0),
            "descricao": r.get("descricao"),
            "codigo_barras": r.get("codigo_barras"),
            "estoque_minimo": r.get("estoque_minimo"),
        }
        with _session(self.db_path, conn) as c:
            cur = c.execute(
                """
                INSERT INTO produto
                    (nome, categoria, preco, custo, estoque, descricao, codigo_barras, estoque_minimo)
                VALUES
                    (:nome, :categoria, :preco, :custo, :estoque, :descricao, :codigo_barras, :estoque_minimo)
                """,
                payload,
            )
            return int(cur.lastrowid)

    def get(self, produto_id: int, conn: Optional[sqlite3.Connection] = None) -> Optional[Produto]:
        with _session(self.db_path, conn) as c:
            row = c.execute(f"SELECT {_PRODUTO_COLS} FROM produto WHERE id = ?", (produto_id,)).fetchone()
            return _produto_from_row(row) if row else None

    def get_all(self, conn: Optional[sqlite3.Connection] = None) -> List[Produto]:
        with _session(self.db_path, conn) as c:
            cur = c.execute(f"SELECT {_PRODUTO_COLS} FROM produto ORDER BY id")
            return [_produto_from_row(r) for r in cur.fetchall()]

    def update(self, produto_id: int, campos: Dict[str, Any]) -> None:
        editaveis = {"nome", "categoria", "preco", "custo", "descricao", "codigo_barras", "estoque_minimo"}
        sets = {k: v for k, v in campos.items() if k in editaveis}
        if not sets:
            return
        for k in ("preco", "custo"):
            if k in sets:
                sets[k] = _money_str(sets[k])
        assign = ", ".join(f"{k} = :{k}" for k in sets)
        with connect(self.db_path) as c:
            cur = c.execute(f"UPDATE produto SET {assign} WHERE id = :id", {**sets, "id": produto_id})
            if cur.rowcount == 0:
                raise NotFoundError(f"Produto {produto_id} não encontrado")

    def set_estoque(self, produto_id: int, novo_estoque: int, conn: Optional[sqlite3.Connection] = None) -> None:
        with _session(self.db_path, conn) as c:
            cur = c.execute("UPDATE produto SET estoque = ? WHERE id = ?", (int(novo_estoque), produto_id))
            if cur.rowcount == 0:
                raise NotFoundError(f"Produto {produto_id} não encontrado")

    def baixar_estoque(self, itens: Sequence[Item], conn: Optional[sqlite3.Connection] = None) -> List[Baixa]:
        """Baixa de estoque tudo-ou-nada para os itens de uma transação.

        Leitura, verificação e escrita acontecem na mesma transação. Sem
        ``conn`` a transação é aberta com BEGIN IMMEDIATE; com ``conn`` o
        chamador é responsável por tê-la aberto assim.
        """
        if conn is None:
            with connect(self.db_path, immediate=True) as c:
                return self.baixar_estoque(itens, conn=c)
        catalogo = self.get_all(conn=conn)
        baixas = resolver_baixas(itens, catalogo)
        verificar_disponibilidade(baixas)
        for produto_id, novo in aplicar_baixas(baixas).items():
            self.set_estoque(produto_id, novo, conn=conn)
        return baixas


# -------------------------
# Cliente
# -------------------------

_CLIENTE_COLS = "id, nome, telefone, email, documento, endereco, cidade, estado, cep"


class ClienteRepo:
    def __init__(self, db_path: str):
        self.db_path = db_path

    def insert(self, row: Any) -> int:
        r = _as_dict(row)
        r.pop("id", None)
        payload = {k: r.get(k) for k in ("nome", "telefone", "email", "documento", "endereco", "cidade", "estado", "cep")}
        with connect(self.db_path) as c:
            cur = c.execute(
                """
                INSERT INTO cliente (nome, telefone, email, documento, endereco, cidade, estado, cep)
                VALUES (:nome, :telefone, :email, :documento, :endereco, :cidade, :estado, :cep)
                """,
                payload,
            )
            return int(cur.lastrowid)

    def update(self, cliente_id: int, campos: Dict[str, Any]) -> None:
        editaveis = {"nome", "telefone", "email", "documento", "endereco", "cidade", "estado", "cep"}
        sets = {k: v for k, v in campos.items() if k in editaveis}
        if not sets:
            return
        assign = ", ".join(f"{k} = :{k}" for k in sets)
        with connect(self.db_path) as c:
            cur = c.execute(f"UPDATE cliente SET {assign} WHERE id = :id", {**sets, "id": cliente_id})
            if cur.rowcount == 0:
                raise NotFoundError(f"Cliente {cliente_id} não encontrado")

    def delete(self, cliente_id: int) -> None:
        with connect(self.db_path) as c:
            cur = c.execute("DELETE FROM cliente WHERE id = ?", (cliente_id,))
            if cur.rowcount == 0:
                raise NotFoundError(f"Cliente {cliente_id} não encontrado")

    def get(self, cliente_id: int) -> Optional[Cliente]:
        with connect(self.db_path) as c:
            row = c.execute(f"SELECT {_CLIENTE_COLS} FROM cliente WHERE id = ?", (cliente_id,)).fetchone()
            return Cliente(**dict(row)) if row else None

    def get_all(self) -> List[Cliente]:
        with connect(self.db_path) as c:
            cur = c.execute(f"SELECT {_CLIENTE_COLS} FROM cliente ORDER BY nome, id")
            return [Cliente(**dict(r)) for r in cur.fetchall()]


# -------------------------
# Vendas
# -------------------------

_VENDA_COLS = (
    "id, data, cliente_id, cliente_nome, subtotal, desconto, total, lucro, "
    "forma_pagamento, valor_pago, troco, status, orcamento_id"
)


def _venda_from_row(row: sqlite3.Row, itens: List[Item]) -> Venda:
    d = dict(row)
    for k in ("subtotal", "desconto", "total", "lucro", "valor_pago", "troco"):
        d[k] = to_money(d[k])
    return Venda(itens=itens, **d)


class VendaRepo:
    def __init__(self, db_path: str):
        self.db_path = db_path

    def insert(self, venda: Any, conn: Optional[sqlite3.Connection] = None) -> int:
        r = _as_dict(venda)
        itens = _coerce_itens(r.pop("itens", []))
        payload = {
            "data": r.get("data"),
            "cliente_id": r.get("cliente_id"),
            "cliente_nome": r.get("cliente_nome"),
            "subtotal": _money_str(r.get("subtotal")),
            "desconto": _money_str(r.get("desconto")),
            "total": _money_str(r.get("total")),
            "lucro": _money_str(r.get("lucro")),
            "forma_pagamento": r.get("forma_pagamento"),
            "valor_pago": _money_str(r.get("valor_pago")),
            "troco": _money_str(r.get("troco")),
            "status": r.get("status"),
            "orcamento_id": r.get("orcamento_id"),
        }
        with _session(self.db_path, conn) as c:
            cur = c.execute(
                """
                INSERT INTO venda
                    (data, cliente_id, cliente_nome, subtotal, desconto, total, lucro,
                     forma_pagamento, valor_pago, troco, status, orcamento_id)
                VALUES
                    (:data, :cliente_id, :cliente_nome, :subtotal, :desconto, :total, :lucro,
                     :forma_pagamento, :valor_pago, :troco, :status, :orcamento_id)
                """,
                payload,
            )
            venda_id = int(cur.lastrowid)
            _insert_itens(c, "venda_item", "venda_id", venda_id, itens)
            return venda_id

    def get(self, venda_id: int) -> Optional[Venda]:
        with connect(self.db_path) as c:
            row = c.execute(f"SELECT {_VENDA_COLS} FROM venda WHERE id = ?", (venda_id,)).fetchone()
            if not row:
                return None
            return _venda_from_row(row, _load_itens(c, "venda_item", "venda_id", venda_id))

    def list(
        self,
        data_ini: Optional[str] = None,
        data_fim: Optional[str] = None,
        status: Optional[str] = None,
        forma_pagamento: Optional[str] = None,
    ) -> List[Venda]:
        where, args = _filtro_periodo(data_ini, data_fim)
        if status:
            where.append("status = ?")
            args.append(status)
        if forma_pagamento:
            where.append("forma_pagamento = ?")
            args.append(forma_pagamento)
        sql = f"SELECT {_VENDA_COLS} FROM venda"
        if where:
            sql += " WHERE " + " AND ".join(where)
        sql += " ORDER BY date(data), id"
        with connect(self.db_path) as c:
            rows = c.execute(sql, args).fetchall()
            return [_venda_from_row(r, _load_itens(c, "venda_item", "venda_id", r["id"])) for r in rows]

    def set_status(self, venda_id: int, status: str, valor_pago: Any = None, troco: Any = None) -> None:
        """Troca o status; ``valor_pago`` e ``troco`` só são gravados quando informados."""
        sets, args = ["status = ?"], [status]
        if valor_pago is not None:
            sets.append("valor_pago = ?")
            args.append(_money_str(valor_pago))
        if troco is not None:
            sets.append("troco = ?")
            args.append(_money_str(troco))
        with connect(self.db_path) as c:
            cur = c.execute("UPDATE venda SET " + ", ".join(sets) + " WHERE id = ?", (*args, venda_id))
            if cur.rowcount == 0:
                raise NotFoundError(f"Venda {venda_id} não encontrada")


# -------------------------
# Orçamentos
# -------------------------

_ORCAMENTO_COLS = (
    "id, numero, data, validade, cliente_id, cliente_nome, cliente_documento, cliente_telefone, "
    "cliente_endereco, subtotal, desconto, total, lucro, forma_pagamento, observacoes, status"
)


def _orcamento_from_row(row: sqlite3.Row, itens: List[Item]) -> Orcamento:
    d = dict(row)
    for k in ("subtotal", "desconto", "total", "lucro"):
        d[k] = to_money(d[k])
    return Orcamento(itens=itens, **d)


class OrcamentoRepo:
    def __init__(self, db_path: str):
        self.db_path = db_path

    def insert(self, orcamento: Any, conn: Optional[sqlite3.Connection] = None) -> int:
        r = _as_dict(orcamento)
        itens = _coerce_itens(r.pop("itens", []))
        r.pop("id", None)
        for k in ("subtotal", "desconto", "total", "lucro"):
            r[k] = _money_str(r.get(k))
        cols = [
            "numero", "data", "validade", "cliente_id", "cliente_nome", "cliente_documento",
            "cliente_telefone", "cliente_endereco", "subtotal", "desconto", "total", "lucro",
            "forma_pagamento", "observacoes", "status",
        ]
        payload = {k: r.get(k) for k in cols}
        with _session(self.db_path, conn) as c:
            cur = c.execute(
                f"INSERT INTO orcamento ({', '.join(cols)}) VALUES ({', '.join(':' + k for k in cols)})",
                payload,
            )
            orc_id = int(cur.lastrowid)
            if not payload["numero"]:
                ano = str(payload["data"] or "")[:4]
                c.execute("UPDATE orcamento SET numero = ? WHERE id = ?", (f"ORC-{ano}-{orc_id:04d}", orc_id))
            _insert_itens(c, "orcamento_item", "orcamento_id", orc_id, itens)
            return orc_id

    def get(self, orcamento_id: int, conn: Optional[sqlite3.Connection] = None) -> Optional[Orcamento]:
        with _session(self.db_path, conn) as c:
            row = c.execute(f"SELECT {_ORCAMENTO_COLS} FROM orcamento WHERE id = ?", (orcamento_id,)).fetchone()
            if not row:
                return None
            return _orcamento_from_row(row, _load_itens(c, "orcamento_item", "orcamento_id", orcamento_id))

    def list(self, status: Optional[str] = None) -> List[Orcamento]:
        sql = f"SELECT {_ORCAMENTO_COLS} FROM orcamento"
        args: List[Any] = []
        if status:
            sql += " WHERE status = ?"
            args.append(status)
        sql += " ORDER BY id DESC"
        with connect(self.db_path) as c:
            rows = c.execute(sql, args).fetchall()
            return [_orcamento_from_row(r, _load_itens(c, "orcamento_item", "orcamento_id", r["id"])) for r in rows]

    def set_status(self, orcamento_id: int, status: str, conn: Optional[sqlite3.Connection] = None) -> None:
        with _session(self.db_path, conn) as c:
            cur = c.execute("UPDATE orcamento SET status = ? WHERE id = ?", (status, orcamento_id))
            if cur.rowcount == 0:
                raise NotFoundError(f"Orçamento {orcamento_id} não encontrado")


# -------------------------
# Movimentações de estoque
# -------------------------

_MOV_COLS = "id, data, produto_id, produto_nome, tipo, quantidade, motivo, venda_id"


class MovimentoRepo:
    def __init__(self, db_path: str):
        self.db_path = db_path

    def insert_many(self, rows: Iterable[Any], conn: Optional[sqlite3.Connection] = None) -> None:
        cols = ("data", "produto_id", "produto_nome", "tipo", "quantidade", "motivo", "venda_id")
        rows = [{k: _as_dict(r).get(k) for k in cols} for r in rows]
        if not rows:
            return
        with _session(self.db_path, conn) as c:
            c.executemany(
                """
                INSERT INTO movimento_estoque
                    (data, produto_id, produto_nome, tipo, quantidade, motivo, venda_id)
                VALUES
                    (:data, :produto_id, :produto_nome, :tipo, :quantidade, :motivo, :venda_id)
                """,
                rows,
            )

    def insert(self, row: Any, conn: Optional[sqlite3.Connection] = None) -> None:
        self.insert_many([row], conn=conn)

    def list(self, produto_id: Optional[int] = None, tipo: Optional[str] = None) -> List[MovimentoEstoque]:
        where: List[str] = []
        args: List[Any] = []
        if produto_id is not None:
            where.append("produto_id = ?")
            args.append(produto_id)
        if tipo:
            where.append("tipo = ?")
            args.append(tipo)
        sql = f"SELECT {_MOV_COLS} FROM movimento_estoque"
        if where:
            sql += " WHERE " + " AND ".join(where)
        sql += " ORDER BY id DESC"
        with connect(self.db_path) as c:
            return [MovimentoEstoque(**dict(r)) for r in c.execute(sql, args).fetchall()]

    def vendas_com_movimento(self, conn: Optional[sqlite3.Connection] = None) -> Set[int]:
        with _session(self.db_path, conn) as c:
            cur = c.execute("SELECT DISTINCT venda_id FROM movimento_estoque WHERE venda_id IS NOT NULL")
            return {int(r[0]) for r in cur.fetchall()}


# -------------------------
# Retiradas de caixa
# -------------------------

class RetiradaRepo:
    def __init__(self, db_path: str):
        self.db_path = db_path

    def insert(self, row: Any) -> int:
        r = _as_dict(row)
        with connect(self.db_path) as c:
            cur = c.execute(
                "INSERT INTO retirada (data, valor, motivo) VALUES (?, ?, ?)",
                (r.get("data"), _money_str(r.get("valor")), r.get("motivo")),
            )
            return int(cur.lastrowid)

    def list(self, data_ini: Optional[str] = None, data_fim: Optional[str] = None) -> List[Retirada]:
        where, args = _filtro_periodo(data_ini, data_fim)
        sql = "SELECT id, data, valor, motivo FROM retirada"
        if where:
            sql += " WHERE " + " AND ".join(where)
        sql += " ORDER BY date(data), id"
        with connect(self.db_path) as c:
            out = []
            for r in c.execute(sql, args).fetchall():
                d = dict(r)
                d["valor"] = to_money(d["valor"])
                out.append(Retirada(**d))
            return out

    def total_por_dia(self, data_ini: Optional[str] = None, data_fim: Optional[str] = None) -> Dict[str, Any]:
        totais: Dict[str, Any] = defaultdict(lambda: to_money(0))
        for r in self.list(data_ini, data_fim):
            totais[str(r.data)[:10]] += r.valor
        return dict(totais)


# -------------------------
# Produção de peças
# -------------------------

class ProducaoRepo:
    def __init__(self, db_path: str):
        self.db_path = db_path

    def insert(self, row: Any) -> int:
        r = _as_dict(row)
        with connect(self.db_path) as c:
            cur = c.execute(
                "INSERT INTO producao (data, peca, quantidade, sacos_gesso, observacao) VALUES (?, ?, ?, ?, ?)",
                (r.get("data"), r.get("peca"), int(r.get("quantidade")), int(r.get("sacos_gesso") or 0), r.get("observacao")),
            )
            return int(cur.lastrowid)

    def list(self, data_ini: Optional[str] = None, data_fim: Optional[str] = None) -> List[Producao]:
        where, args = _filtro_periodo(data_ini, data_fim)
        sql = "SELECT id, data, peca, quantidade, sacos_gesso, observacao FROM producao"
        if where:
            sql += " WHERE " + " AND ".join(where)
        sql += " ORDER BY date(data), id"
        with connect(self.db_path) as c:
            return [Producao(**dict(r)) for r in c.execute(sql, args).fetchall()]
