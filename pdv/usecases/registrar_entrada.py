# pdv/usecases/registrar_entrada.py
"""
UC: Registrar ENTRADAS de estoque (única e em lote).

Obs.:
- Cada entrada soma ao estoque do produto e grava uma movimentação ``entrada``
  na mesma transação.
- No lote, o produto é localizado pelo id ou, na falta dele, pelo nome. Linhas
  que não casam com o cadastro são devolvidas como rejeitadas; as demais são
  gravadas juntas.
"""
from __future__ import annotations

from typing import Any, Dict, List, Optional

from pdv.config import DB_PATH
from pdv.adapters.parsers import parse_quantidade
from pdv.adapters.planilhas import load_entradas_from_xlsx
from pdv.domain.calculos import indexar_catalogo
from pdv.domain.errors import NotFoundError, ValidationError
from pdv.domain.models import MovimentoEstoque, hoje_iso
from pdv.infra.db import connect
from pdv.infra.repositories import MovimentoRepo, ProdutoRepo
from pdv.infra.logger import (
    log_database_operation, log_estoque, log_file_operation,
    log_system_event, log_transaction, print_system,
)


def registrar_entrada(
    produto_id: int,
    quantidade: Any,
    motivo: Optional[str] = None,
    data: Optional[str] = None,
    db_path: str = DB_PATH,
) -> MovimentoEstoque:
    """Soma ``quantidade`` ao estoque do produto e registra a movimentação."""
    log_system_event("entrada_unica_start", {"produto_id": produto_id})
    try:
        qtd = parse_quantidade(quantidade)
        prod_repo = ProdutoRepo(db_path)
        with connect(db_path, immediate=True) as c:
            produto = prod_repo.get(produto_id, conn=c)
            if produto is None:
                raise NotFoundError(f"Produto {produto_id} não encontrado")
            prod_repo.set_estoque(produto.id, produto.estoque + qtd, conn=c)
            mov = MovimentoEstoque(
                produto_id=produto.id,
                produto_nome=produto.nome,
                tipo="entrada",
                quantidade=qtd,
                motivo=motivo or "Entrada manual",
                data=data or hoje_iso(),
            )
            MovimentoRepo(db_path).insert(mov, conn=c)

        log_estoque("entrada", produto.id, qtd, estoque_anterior=produto.estoque)
        log_database_operation("movimento_estoque", "INSERT", 1, produto_id=produto.id)
        log_transaction("entrada_unica", {"produto_id": produto_id, "quantidade": qtd}, result="success")
        print_system(">> Entrada registrada com sucesso.")
        return mov
    except Exception as e:
        log_transaction("entrada_unica", {"produto_id": produto_id, "quantidade": quantidade}, error=str(e))
        log_system_event("entrada_unica_error", {"error": str(e)}, level="error")
        raise


def registrar_entrada_lote(path: str, db_path: str = DB_PATH) -> Dict[str, Any]:
    """Lê um XLSX de ENTRADAS e aplica todas as linhas válidas de uma vez."""
    log_system_event("entrada_lote_start", {"file_path": path})
    log_file_operation("import", path)
    try:
        rows = load_entradas_from_xlsx(path)
        log_file_operation("import", path, rows_processed=len(rows))

        prod_repo = ProdutoRepo(db_path)
        rejeitadas: List[Dict[str, Any]] = []
        movimentos: List[MovimentoEstoque] = []
        with connect(db_path, immediate=True) as c:
            por_id, por_nome = indexar_catalogo(prod_repo.get_all(conn=c))
            estoque = {pid: p.estoque for pid, p in por_id.items()}
            for linha, row in enumerate(rows, start=2):
                produto = None
                if row.get("produto_id"):
                    try:
                        produto = por_id.get(int(float(row["produto_id"])))
                    except (ValueError, OverflowError):
                        produto = None
                if produto is None and row.get("produto"):
                    produto = por_nome.get(row["produto"].strip().lower())
                if produto is None:
                    rejeitadas.append({**row, "linha": linha, "erro": "produto não encontrado"})
                    continue
                try:
                    qtd = parse_quantidade(row.get("quantidade"))
                except ValidationError as e:
                    rejeitadas.append({**row, "linha": linha, "erro": str(e)})
                    continue
                estoque[produto.id] += qtd
                movimentos.append(MovimentoEstoque(
                    produto_id=produto.id,
                    produto_nome=produto.nome,
                    tipo="entrada",
                    quantidade=qtd,
                    motivo=row.get("motivo") or "Entrada em lote",
                    data=row.get("data") or hoje_iso(),
                ))
            for pid in {m.produto_id for m in movimentos}:
                prod_repo.set_estoque(pid, estoque[pid], conn=c)
            MovimentoRepo(db_path).insert_many(movimentos, conn=c)

        for m in movimentos:
            log_estoque("entrada_lote", m.produto_id, m.quantidade)
        log_database_operation("movimento_estoque", "INSERT_MANY", len(movimentos), file_path=path)
        if rejeitadas:
            log_system_event("entrada_lote_rejeitadas", {"file_path": path, "linhas": [r["linha"] for r in rejeitadas]}, level="warning")

        result = {"arquivo": path, "linhas_inseridas": len(movimentos), "rejeitadas": rejeitadas}
        log_transaction("entrada_lote", {"file": path, "rows_count": len(rows)}, result={"inseridas": len(movimentos), "rejeitadas": len(rejeitadas)})
        return result
    except Exception as e:
        log_transaction("entrada_lote", {"file": path}, error=str(e))
        log_system_event("entrada_lote_error", {"file_path": path, "error": str(e)}, level="error")
        raise
