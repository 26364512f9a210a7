# pdv/infra/logger.py
"""
Logs do PDV, um arquivo por assunto.

Assuntos: ``transactions``, ``vendas``, ``estoque``, ``database`` e ``system``,
gravados em ``LOGS_DIR`` (pasta ``logs`` do pacote ou ``PDV_LOGS_DIR``).
Nada é gravado a menos que ``PDV_LOGGING=1``.
"""

import logging
import os
from collections import deque
from pathlib import Path
from typing import Any, Dict, Optional


ENABLE_LOGGING = os.environ.get("PDV_LOGGING", "0") == "1"
# mensagens de progresso no terminal; o CLI usa Rich e deixa desligado
ENABLE_OUTPUT = False

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

LOGS_DIR = Path(os.environ.get("PDV_LOGS_DIR", str(Path(__file__).resolve().parent.parent / "logs")))

ASSUNTOS = ("transactions", "vendas", "estoque", "database", "system")
LOG_FILES: Dict[str, Path] = {assunto: LOGS_DIR / f"{assunto}.log" for assunto in ASSUNTOS}


def print_system(*args, **kwargs):
    if ENABLE_OUTPUT:
        print(*args, **kwargs)


def setup_logger(name: str, log_file: str, level: int = logging.INFO) -> logging.Logger:
    """Logger sem propagação com um único ``FileHandler`` em ``log_file``.

    Chamar de novo com o mesmo nome troca o arquivo de destino. O arquivo só
    é criado no primeiro registro.
    """
    Path(log_file).parent.mkdir(parents=True, exist_ok=True)
    logger = logging.getLogger(name)
    logger.setLevel(level)
    logger.propagate = False
    for antigo in list(logger.handlers):
        logger.removeHandler(antigo)
        antigo.close()
    handler = logging.FileHandler(log_file, encoding="utf-8", delay=True)
    handler.setFormatter(logging.Formatter(LOG_FORMAT, DATE_FORMAT))
    logger.addHandler(handler)
    return logger


transaction_logger = setup_logger("pdv.transactions", str(LOG_FILES["transactions"]))
venda_logger = setup_logger("pdv.vendas", str(LOG_FILES["vendas"]))
estoque_logger = setup_logger("pdv.estoque", str(LOG_FILES["estoque"]))
database_logger = setup_logger("pdv.database", str(LOG_FILES["database"]))
system_logger = setup_logger("pdv.system", str(LOG_FILES["system"]))


def _ativo() -> bool:
    return ENABLE_LOGGING or ENABLE_OUTPUT


def _kv(dados: Optional[Dict[str, Any]]) -> str:
    """``{"id": 1, "total": Decimal("9.90")}`` -> ``"id=1 total=9.90"``."""
    return " ".join(f"{k}={v}" for k, v in (dados or {}).items() if v is not None)


def log_transaction(operation: str, data: Dict[str, Any], result: Optional[Any] = None, error: Optional[str] = None) -> None:
    """Fim de um caso de uso: sucesso com ``result`` ou falha com ``error``."""
    if not _ativo():
        return
    if error:
        transaction_logger.error(f"TRANSACTION_FAILED: {operation} - {error} - {_kv(data)}")
    else:
        transaction_logger.info(f"TRANSACTION_SUCCESS: {operation} - result={result} {_kv(data)}".rstrip())


def log_venda(action: str, documento: str, total: Any = None, **kwargs) -> None:
    """Eventos de venda e orçamento (finalizada, quitada, pedido, vendido...)."""
    if not _ativo():
        return
    venda_logger.info(f"VENDA_{action.upper()}: {documento} {_kv({'total': total, **kwargs})}".rstrip())


def log_estoque(action: str, produto_id: Any, quantidade: Any, **kwargs) -> None:
    if not _ativo():
        return
    estoque_logger.info(f"ESTOQUE_{action.upper()}: produto={produto_id} qtd={quantidade} {_kv(kwargs)}".rstrip())


def log_database_operation(table: str, operation: str, affected_rows: int = 0, **kwargs) -> None:
    if not _ativo():
        return
    database_logger.info(f"DB_{operation}: {table} ({affected_rows} linhas) {_kv(kwargs)}".rstrip())


def log_system_event(event: str, details: Optional[Dict[str, Any]] = None, level: str = "info") -> None:
    """Evento de sistema; ``level`` é o nome do método do logger (info, warning, error)."""
    if not _ativo():
        return
    emitir = getattr(system_logger, level.lower(), system_logger.info)
    emitir(f"SYSTEM_EVENT: {event} {_kv(details)}".rstrip())


def log_file_operation(operation: str, file_path: str, rows_processed: int = 0, **kwargs) -> None:
    if not _ativo():
        return
    system_logger.info(f"FILE_{operation.upper()}: {file_path} ({rows_processed} linhas) {_kv(kwargs)}".rstrip())


def log_relatorio(nome: str, level: str = "info", **dados) -> None:
    if not _ativo():
        return
    emitir = getattr(system_logger, level.lower(), system_logger.info)
    emitir(f"REPORT_{nome.upper()}: {_kv(dados)}".rstrip())


def get_log_summary(log_type: str = "transactions", lines: int = 100) -> Optional[str]:
    """Últimas ``lines`` linhas do log ``log_type``; ``None`` com o log desligado."""
    if not _ativo():
        return None
    arquivo = LOG_FILES.get(log_type)
    if arquivo is None or not arquivo.exists():
        return f"Log {log_type} não encontrado."
    with open(arquivo, "r", encoding="utf-8") as f:
        return "".join(deque(f, maxlen=lines))
