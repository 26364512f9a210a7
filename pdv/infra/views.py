# pdv/infra/views.py
"""
Criação de views auxiliares para consultas frequentes.

Views criadas:
- vw_vendas_diarias: faturamento, lucro e número de vendas por dia.
- vw_estoque_valor:  estoque de cada produto valorizado a custo e a preço.

Obs.:
- As views assumem que as migrações V1→V3 já foram aplicadas.
- Um conjunto de índices úteis também é criado, caso não existam.
"""

from __future__ import annotations

from .db import connect


def create_views(db_path: str) -> None:
    with connect(db_path) as c:
        # -----------------------
        # Views (drop + create)
        # -----------------------
        c.executescript(
            """
            ---------------------------
            -- Vendas por dia
            ---------------------------
            DROP VIEW IF EXISTS vw_vendas_diarias;
            CREATE VIEW vw_vendas_diarias AS
            SELECT
                date(data)                      AS dia,
                COUNT(*)                        AS qtd_vendas,
                ROUND(SUM(CAST(total AS REAL)), 2) AS faturamento,
                ROUND(SUM(CAST(lucro AS REAL)), 2) AS lucro
            FROM venda
            GROUP BY date(data);

            ---------------------------
            -- Valor do estoque por produto
            ---------------------------
            DROP VIEW IF EXISTS vw_estoque_valor;
            CREATE VIEW vw_estoque_valor AS
            SELECT
                id,
                nome,
                categoria,
                estoque,
                estoque_minimo,
                CAST(custo AS REAL)                     AS custo,
                CAST(preco AS REAL)                     AS preco,
                ROUND(estoque * CAST(custo AS REAL), 2) AS valor_custo,
                ROUND(estoque * CAST(preco AS REAL), 2) AS valor_venda
            FROM produto;
            """
        )

        # --------------------------------
        # Índices úteis (IF NOT EXISTS)
        # --------------------------------
        c.executescript(
            """
            CREATE INDEX IF NOT EXISTS idx_venda_data          ON venda(data);
            CREATE INDEX IF NOT EXISTS idx_venda_item_venda    ON venda_item(venda_id);
            CREATE INDEX IF NOT EXISTS idx_orcamento_item_orc  ON orcamento_item(orcamento_id);
            CREATE INDEX IF NOT EXISTS idx_movimento_produto   ON movimento_estoque(produto_id);
            CREATE INDEX IF NOT EXISTS idx_movimento_venda     ON movimento_estoque(venda_id);
            CREATE INDEX IF NOT EXISTS idx_retirada_data       ON retirada(data);
            CREATE INDEX IF NOT EXISTS idx_produto_nome        ON produto(nome);
            CREATE INDEX IF NOT EXISTS idx_producao_data       ON producao(data);
            """
        )
