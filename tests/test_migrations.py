from pathlib import Path

from pdv.infra.db import connect
from pdv.infra.migrations import _apply_v1, _apply_v2, apply_migrations


def _banco_v2(path: str) -> None:
    with connect(path) as c:
        _apply_v1(c)
        _apply_v2(c)
        c.execute("PRAGMA user_version = 2;")
        c.execute("INSERT INTO produto (nome, preco, custo, estoque) VALUES ('Placa', '29.90', '18.00', 10)")
        c.execute(
            "INSERT INTO movimento_estoque (data, produto_id, produto_nome, tipo, quantidade, motivo) "
            "VALUES ('2025-01-02', 1, 'Placa', 'entrada', 10, 'NF 1')"
        )


def test_v3_preserva_movimentos_e_aceita_ajuste(tmp_path: Path):
    db_path = str(tmp_path / "antigo.sqlite")
    _banco_v2(db_path)

    apply_migrations(db_path)
    apply_migrations(db_path)

    with connect(db_path) as c:
        assert c.execute("PRAGMA user_version;").fetchone()[0] == 3
        rows = c.execute("SELECT id, tipo, quantidade, motivo FROM movimento_estoque").fetchall()
        assert [tuple(r) for r in rows] == [(1, "entrada", 10, "NF 1")]
        c.execute(
            "INSERT INTO movimento_estoque (data, produto_id, produto_nome, tipo, quantidade) "
            "VALUES ('2025-01-03', 1, 'Placa', 'ajuste', -2)"
        )
        c.execute("INSERT INTO producao (data, peca, quantidade, sacos_gesso) VALUES ('2025-01-03', 'Tabica', 10, 1)")
