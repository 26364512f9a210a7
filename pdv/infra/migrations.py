# pdv/infra/migrations.py
"""
Migrações de schema usando PRAGMA user_version.

V1: tabelas base (cadastros, vendas, orçamentos, movimentações, retiradas)
V2: estoque mínimo por produto e endereço completo do cliente
V3: movimentação do tipo "ajuste" e registro de produção de peças
"""

from __future__ import annotations

from typing import List
from .db import connect


SCHEMA_V1: List[str] = [
    # Parâmetros K/V
    """
    CREATE TABLE IF NOT EXISTS params (
        chave TEXT PRIMARY KEY,
        valor TEXT
    );
    """,
    # Cadastro de produtos (valores monetários como TEXT decimal)
    """
    CREATE TABLE IF NOT EXISTS produto (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        nome TEXT NOT NULL,
        categoria TEXT,
        preco TEXT NOT NULL DEFAULT '0.00',
        custo TEXT NOT NULL DEFAULT '0.00',
        estoque INTEGER NOT NULL DEFAULT 0 CHECK (estoque >= 0),
        descricao TEXT,
        codigo_barras TEXT
    );
    """,
    # Cadastro de clientes
    """
    CREATE TABLE IF NOT EXISTS cliente (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        nome TEXT NOT NULL,
        telefone TEXT,
        email TEXT,
        documento TEXT,
        endereco TEXT
    );
    """,
    # Vendas
    """
    CREATE TABLE IF NOT EXISTS venda (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        data TEXT NOT NULL,
        cliente_id INTEGER,
        cliente_nome TEXT,
        subtotal TEXT NOT NULL,
        desconto TEXT NOT NULL,
        total TEXT NOT NULL,
        lucro TEXT NOT NULL,
        forma_pagamento TEXT NOT NULL,  -- 'dinheiro' | 'pix' | 'credito' | 'debito'
        valor_pago TEXT NOT NULL,
        troco TEXT NOT NULL,
        status TEXT NOT NULL,           -- 'pago' | 'pendente'
        orcamento_id INTEGER,
        FOREIGN KEY (cliente_id) REFERENCES cliente(id) ON DELETE SET NULL
    );
    """,
    # Itens de venda (cópia desacoplada do cadastro; produto_id nulo = item manual)
    """
    CREATE TABLE IF NOT EXISTS venda_item (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        venda_id INTEGER NOT NULL,
        posicao INTEGER NOT NULL,
        produto_id INTEGER,
        descricao TEXT NOT NULL,
        quantidade INTEGER NOT NULL,
        preco_unitario TEXT NOT NULL,
        FOREIGN KEY (venda_id) REFERENCES venda(id) ON DELETE CASCADE
    );
    """,
    # Orçamentos
    """
    CREATE TABLE IF NOT EXISTS orcamento (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        numero TEXT,
        data TEXT NOT NULL,
        validade TEXT,
        cliente_id INTEGER,
        cliente_nome TEXT NOT NULL,
        cliente_documento TEXT,
        cliente_telefone TEXT,
        cliente_endereco TEXT,
        subtotal TEXT NOT NULL,
        desconto TEXT NOT NULL,
        total TEXT NOT NULL,
        lucro TEXT NOT NULL,
        forma_pagamento TEXT,
        observacoes TEXT,
        status TEXT NOT NULL,           -- 'orcamento' | 'pedido' | 'vendido'
        FOREIGN KEY (cliente_id) REFERENCES cliente(id) ON DELETE SET NULL
    );
    """,
    """
    CREATE TABLE IF NOT EXISTS orcamento_item (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        orcamento_id INTEGER NOT NULL,
        posicao INTEGER NOT NULL,
        produto_id INTEGER,
        descricao TEXT NOT NULL,
        quantidade INTEGER NOT NULL,
        preco_unitario TEXT NOT NULL,
        FOREIGN KEY (orcamento_id) REFERENCES orcamento(id) ON DELETE CASCADE
    );
    """,
    # Movimentações de estoque (entrada/saída; V3 acrescenta ajuste)
    """
    CREATE TABLE IF NOT EXISTS movimento_estoque (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        data TEXT NOT NULL,
        produto_id INTEGER NOT NULL,
        produto_nome TEXT,
        tipo TEXT NOT NULL CHECK (tipo IN ('entrada', 'saida')),
        quantidade INTEGER NOT NULL,
        motivo TEXT,
        venda_id INTEGER,
        FOREIGN KEY (produto_id) REFERENCES produto(id)
    );
    """,
    # Retiradas de caixa
    """
    CREATE TABLE IF NOT EXISTS retirada (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        data TEXT NOT NULL,
        valor TEXT NOT NULL,
        motivo TEXT
    );
    """,
]


def _ensure_column(conn, table: str, column: str, ddl: str) -> None:
    """Adiciona coluna se não existir."""
    cur = conn.execute(f"PRAGMA table_info({table});")
    cols = [r[1] for r in cur.fetchall()]  # r[1] é o nome da coluna
    if column not in cols:
        conn.execute(f"ALTER TABLE {table} ADD COLUMN {ddl};")


def _apply_v1(conn) -> None:
    for sql in SCHEMA_V1:
        conn.executescript(sql)


def _apply_v2(conn) -> None:
    _ensure_column(conn, "produto", "estoque_minimo", "estoque_minimo INTEGER")
    _ensure_column(conn, "cliente", "cidade", "cidade TEXT")
    _ensure_column(conn, "cliente", "estado", "estado TEXT")
    _ensure_column(conn, "cliente", "cep", "cep TEXT")


SCHEMA_V3_PRODUCAO = """
CREATE TABLE IF NOT EXISTS producao (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    data TEXT NOT NULL,
    peca TEXT NOT NULL,
    quantidade INTEGER NOT NULL CHECK (quantidade > 0),
    sacos_gesso INTEGER NOT NULL DEFAULT 0 CHECK (sacos_gesso >= 0),
    observacao TEXT
);
"""


def _apply_v3(conn) -> None:
    # SQLite não altera CHECK: a tabela de movimentações é recriada
    conn.execute("ALTER TABLE movimento_estoque RENAME TO movimento_estoque_v2;")
    conn.execute(
        """
        CREATE TABLE movimento_estoque (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            data TEXT NOT NULL,
            produto_id INTEGER NOT NULL,
            produto_nome TEXT,
            tipo TEXT NOT NULL CHECK (tipo IN ('entrada', 'saida', 'ajuste')),
            quantidade INTEGER NOT NULL,
            motivo TEXT,
            venda_id INTEGER,
            FOREIGN KEY (produto_id) REFERENCES produto(id)
        );
        """
    )
    conn.execute(
        """
        INSERT INTO movimento_estoque (id, data, produto_id, produto_nome, tipo, quantidade, motivo, venda_id)
        SELECT id, data, produto_id, produto_nome, tipo, quantidade, motivo, venda_id FROM movimento_estoque_v2;
        """
    )
    conn.execute("DROP TABLE movimento_estoque_v2;")
    conn.execute(SCHEMA_V3_PRODUCAO)


def apply_migrations(db_path: str) -> None:
    """Aplica migrações incrementais de acordo com PRAGMA user_version."""
    with connect(db_path) as conn:
        ver = conn.execute("PRAGMA user_version;").fetchone()[0] or 0

        if ver < 1:
            _apply_v1(conn)
            conn.execute("PRAGMA user_version = 1;")
            ver = 1

        if ver < 2:
            _apply_v2(conn)
            conn.execute("PRAGMA user_version = 2;")
            ver = 2

        if ver < 3:
            _apply_v3(conn)
            conn.execute("PRAGMA user_version = 3;")
            ver = 3
