from pathlib import Path

from pdv.infra import logger


def test_logging_desligado_nao_grava(monkeypatch):
    monkeypatch.setattr(logger, "ENABLE_LOGGING", False)
    monkeypatch.setattr(logger, "ENABLE_OUTPUT", False)
    assert logger.get_log_summary("transactions") is None


def test_log_transaction_e_resumo(monkeypatch, tmp_path: Path):
    arquivo = tmp_path / "transactions.log"
    monkeypatch.setattr(logger, "ENABLE_LOGGING", True)
    monkeypatch.setattr(logger, "transaction_logger", logger.setup_logger("pdv.test.transactions", str(arquivo)))
    monkeypatch.setitem(logger.LOG_FILES, "transactions", arquivo)

    logger.log_transaction("finalizar_venda", {"itens": 2}, result={"id": 1})
    logger.log_transaction("finalizar_venda", {"itens": 0}, error="Venda sem itens")

    resumo = logger.get_log_summary("transactions", lines=10)
    assert "TRANSACTION_SUCCESS: finalizar_venda" in resumo
    assert "TRANSACTION_FAILED: finalizar_venda - Venda sem itens" in resumo
    assert logger.get_log_summary("inexistente") == "Log inexistente não encontrado."


def test_log_de_erro_usa_nivel_error(monkeypatch, tmp_path: Path):
    arquivo = tmp_path / "system.log"
    monkeypatch.setattr(logger, "ENABLE_LOGGING", True)
    monkeypatch.setattr(logger, "system_logger", logger.setup_logger("pdv.test.system", str(arquivo)))

    logger.log_system_event("finalizar_venda_error", {"error": "x"}, level="error")
    texto = arquivo.read_text(encoding="utf-8")
    assert " - ERROR - SYSTEM_EVENT: finalizar_venda_error" in texto


def test_relatorio_de_estoque_loga_aviso(monkeypatch, tmp_path: Path):
    arquivo = tmp_path / "system.log"
    monkeypatch.setattr(logger, "ENABLE_LOGGING", True)
    monkeypatch.setattr(logger, "system_logger", logger.setup_logger("pdv.test.relatorio", str(arquivo)))

    logger.log_relatorio("estoque", "warning", status="ZERADO", produto=3, minimo=None)
    linha = arquivo.read_text(encoding="utf-8").strip()
    assert linha.endswith(" - WARNING - REPORT_ESTOQUE: status=ZERADO produto=3")
