# pdv/adapters/planilhas.py
"""
Planilhas (XLSX) de ENTRADAS de estoque e exportação de relatórios.

Essas funções:
- leem planilhas XLSX usando pandas;
- normalizam cabeçalhos (acentos, variações, sinônimos);
- retornam listas de dicionários com as chaves esperadas pelos casos de uso;
- gravam relatórios em abas de um único XLSX (openpyxl).

Observações:
- A quantidade é preservada como texto; a validação fica no caso de uso.
- Datas são normalizadas para ISO (YYYY-MM-DD) quando possível.
"""

from __future__ import annotations

import re
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, List, Optional

import pandas as pd


# ---------------------------
# utilitários de normalização
# ---------------------------

def _slug(s: str) -> str:
    """Normaliza cabeçalhos: minúsculas, sem acentos, sem não-alfanumérico."""
    if s is None:
        return ""
    s = str(s).strip().lower()
    acentos = dict(zip("áàâãäéèêëíìîïóòôõöúùûüç", "aaaaaeeeeiiiiooooouuuuc"))
    s = "".join(acentos.get(ch, ch) for ch in s)
    s = re.sub(r"[^a-z0-9]+", " ", s)
    return re.sub(r"\s+", " ", s).strip()


def _safe_get(row, key):
    val = row.get(key)
    if val is None or pd.isna(val):
        return None
    s = str(val).strip()
    return s or None


def _to_date_iso(val: Any) -> Optional[str]:
    """Converte valor para data ISO (YYYY-MM-DD) se possível."""
    if val is None:
        return None
    if isinstance(val, pd.Timestamp):
        return val.date().isoformat()
    s = str(val).strip()
    if not s:
        return None
    for fmt in ("%Y-%m-%d", "%d/%m/%Y", "%d-%m-%Y", "%d/%m/%y", "%Y-%m-%d %H:%M:%S"):
        try:
            return datetime.strptime(s, fmt).date().isoformat()
        except ValueError:
            continue
    d = pd.to_datetime(s, dayfirst=True, errors="coerce")
    if pd.isna(d):
        return None
    return d.date().isoformat()


_ALIASES = {
    "id": "produto_id",
    "produto id": "produto_id",
    "id produto": "produto_id",
    "codigo": "produto_id",
    "cod": "produto_id",

    "produto": "produto",
    "nome": "produto",
    "nome do produto": "produto",
    "descricao": "produto",

    "quantidade": "quantidade",
    "qtde": "quantidade",
    "qtd": "quantidade",

    "data": "data",
    "data entrada": "data",
    "data de entrada": "data",
    "entrada": "data",

    "motivo": "motivo",
    "observacao": "motivo",
    "fornecedor": "motivo",
    "nota fiscal": "motivo",
    "nf": "motivo",
}


def _normalize_columns(df: pd.DataFrame) -> pd.DataFrame:
    """Renomeia colunas com base em sinônimos; sem alias, mantém o slug.

    Quando duas colunas caem na mesma chave, fica a primeira.
    """
    new_cols: Dict[str, str] = {}
    usados = set()
    for col in df.columns:
        key = _slug(col)
        alvo = _ALIASES.get(key, key)
        if alvo in usados:
            alvo = key
        usados.add(alvo)
        new_cols[col] = alvo
    return df.rename(columns=new_cols)


# ---------------------------
# loaders públicos (XLSX)
# ---------------------------

def load_entradas_from_xlsx(path: str) -> List[Dict[str, Any]]:
    """Lê XLSX de ENTRADAS de estoque.

    Campos de saída (chaves do dict por linha):
      - produto_id: str | None
      - produto: str | None (nome, usado quando não há id)
      - quantidade: str | None
      - data: ISO date (YYYY-MM-DD) | None
      - motivo: str | None

    Linhas totalmente vazias são descartadas.
    """
    df = pd.read_excel(path, dtype="string")
    df = _normalize_columns(df)
    out: List[Dict[str, Any]] = []
    for _, row in df.iterrows():
        rec = {
            "produto_id": _safe_get(row, "produto_id"),
            "produto": _safe_get(row, "produto"),
            "quantidade": _safe_get(row, "quantidade"),
            "data": _to_date_iso(_safe_get(row, "data")),
            "motivo": _safe_get(row, "motivo"),
        }
        if any(v is not None for v in rec.values()):
            out.append(rec)
    return out


# ---------------------------
# exportação
# ---------------------------

def exportar_xlsx(path: str, abas: Dict[str, pd.DataFrame]) -> str:
    """Grava cada DataFrame em uma aba do arquivo. Retorna o caminho gravado."""
    destino = Path(path)
    destino.parent.mkdir(parents=True, exist_ok=True)
    with pd.ExcelWriter(destino, engine="openpyxl") as writer:
        for nome, df in abas.items():
            # o Excel limita nomes de aba a 31 caracteres
            df.to_excel(writer, sheet_name=nome[:31], index=False)
    return str(destino)
