# pdv/config.py
"""
Configurações globais e valores padrão do PDV.
"""

import os
from dataclasses import dataclass


# Caminho padrão do banco de dados SQLite (sobrescrito por PDV_DB)
DB_PATH = os.environ.get("PDV_DB", os.path.join(os.getcwd(), "pdv.db"))


@dataclass
class DefaultConfig:
    """Valores padrão para parâmetros do sistema."""
    custo_estimado_ratio: float = 0.30      # custo estimado de itens sem cadastro (fração do preço)
    validade_orcamento_dias: int = 15       # validade padrão de um orçamento
    forma_pagamento_padrao: str = "dinheiro"
    estoque_minimo_padrao: int = 10         # limite para o relatório de estoque baixo


# Instância global dos valores padrão
DEFAULTS = DefaultConfig()
