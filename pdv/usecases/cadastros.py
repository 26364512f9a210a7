# pdv/usecases/cadastros.py
"""
UC: Cadastros de produtos e clientes.

- cadastrar_produto / atualizar_produto / atualizar_preco / listar_produtos / buscar_produto
- cadastrar_cliente / atualizar_cliente / remover_cliente / listar_clientes / buscar_cliente

Obs.:
- Produtos não são removidos (o histórico de vendas referencia o cadastro).
- Nome de cliente não precisa ser único.
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional

from pdv.config import DB_PATH
from pdv.domain.errors import NotFoundError, ValidationError
from pdv.domain.models import Cliente, Produto, to_money
from pdv.infra.repositories import ClienteRepo, ProdutoRepo
from pdv.infra.logger import log_database_operation, log_system_event, log_transaction


def _normalize_str(x: Any) -> Optional[str]:
    if x is None:
        return None
    s = str(x).strip()
    return s or None


def _valor_nao_negativo(valor: Any, campo: str):
    try:
        v = to_money(valor)
    except ValueError:
        raise ValidationError(f"{campo} inválido: {valor!r}")
    if v < 0:
        raise ValidationError(f"{campo} não pode ser negativo")
    return v


def _inteiro_nao_negativo(valor: Any, campo: str) -> int:
    try:
        v = int(valor)
    except (TypeError, ValueError):
        raise ValidationError(f"{campo} inválido: {valor!r}")
    if v < 0:
        raise ValidationError(f"{campo} não pode ser negativo")
    return v


# -------------------------
# Produtos
# -------------------------

def cadastrar_produto(
    nome: str,
    preco: Any,
    estoque: Any,
    categoria: str,
    custo: Any = 0,
    descricao: Optional[str] = None,
    codigo_barras: Optional[str] = None,
    estoque_minimo: Optional[int] = None,
    db_path: str = DB_PATH,
) -> Produto:
    """Cadastra um produto. Nome, preço, estoque e categoria são obrigatórios."""
    nome = _normalize_str(nome)
    categoria = _normalize_str(categoria)
    if not nome:
        raise ValidationError("Nome do produto é obrigatório")
    if not categoria:
        raise ValidationError("Categoria é obrigatória")
    if preco is None or str(preco).strip() == "":
        raise ValidationError("Preço é obrigatório")
    if estoque is None or str(estoque).strip() == "":
        raise ValidationError("Estoque é obrigatório")

    produto = Produto(
        nome=nome,
        preco=_valor_nao_negativo(preco, "Preço"),
        custo=_valor_nao_negativo(custo, "Custo"),
        estoque=_inteiro_nao_negativo(estoque, "Estoque"),
        categoria=categoria,
        descricao=_normalize_str(descricao),
        codigo_barras=_normalize_str(codigo_barras),
        estoque_minimo=_inteiro_nao_negativo(estoque_minimo, "Estoque mínimo") if estoque_minimo is not None else None,
    )
    produto.id = ProdutoRepo(db_path).insert(produto)
    log_database_operation("produto", "INSERT", 1, id=produto.id, nome=nome)
    log_transaction("cadastrar_produto", {"nome": nome, "preco": str(produto.preco)}, result=produto.id)
    return produto


def atualizar_produto(produto_id: int, campos: Dict[str, Any], db_path: str = DB_PATH) -> Produto:
    """Atualiza campos cadastrais (preço, custo, nome...). O estoque só muda por movimentação."""
    if "estoque" in campos:
        raise ValidationError("Estoque só pode ser alterado por entrada ou saída")
    dados = dict(campos)
    for k, rotulo in (("preco", "Preço"), ("custo", "Custo")):
        if k in dados:
            dados[k] = _valor_nao_negativo(dados[k], rotulo)
    if "estoque_minimo" in dados and dados["estoque_minimo"] is not None:
        dados["estoque_minimo"] = _inteiro_nao_negativo(dados["estoque_minimo"], "Estoque mínimo")
    if "nome" in dados and not _normalize_str(dados["nome"]):
        raise ValidationError("Nome do produto é obrigatório")

    repo = ProdutoRepo(db_path)
    repo.update(produto_id, dados)
    log_database_operation("produto", "UPDATE", 1, id=produto_id, campos=list(dados))
    return buscar_produto(produto_id, db_path=db_path)


def atualizar_preco(produto_id: int, preco: Any, custo: Any = None, db_path: str = DB_PATH) -> Produto:
    campos: Dict[str, Any] = {"preco": preco}
    if custo is not None:
        campos["custo"] = custo
    produto = atualizar_produto(produto_id, campos, db_path=db_path)
    log_transaction("atualizar_preco", {"produto_id": produto_id, "preco": str(produto.preco)}, result="ok")
    return produto


def buscar_produto(produto_id: int, db_path: str = DB_PATH) -> Produto:
    p = ProdutoRepo(db_path).get(produto_id)
    if p is None:
        raise NotFoundError(f"Produto {produto_id} não encontrado")
    return p


def listar_produtos(categoria: Optional[str] = None, db_path: str = DB_PATH) -> List[Produto]:
    produtos = ProdutoRepo(db_path).get_all()
    if categoria:
        alvo = categoria.strip().lower()
        produtos = [p for p in produtos if (p.categoria or "").strip().lower() == alvo]
    return produtos


# -------------------------
# Clientes
# -------------------------

_CAMPOS_CLIENTE = ("telefone", "email", "documento", "endereco", "cidade", "estado", "cep")


def cadastrar_cliente(nome: str, db_path: str = DB_PATH, **dados: Any) -> Cliente:
    nome = _normalize_str(nome)
    if not nome:
        raise ValidationError("Nome do cliente é obrigatório")
    cliente = Cliente(nome=nome, **{k: _normalize_str(dados.get(k)) for k in _CAMPOS_CLIENTE})
    cliente.id = ClienteRepo(db_path).insert(cliente)
    log_database_operation("cliente", "INSERT", 1, id=cliente.id)
    return cliente


def atualizar_cliente(cliente_id: int, campos: Dict[str, Any], db_path: str = DB_PATH) -> Cliente:
    dados = {k: _normalize_str(v) for k, v in campos.items()}
    if "nome" in dados and not dados["nome"]:
        raise ValidationError("Nome do cliente é obrigatório")
    ClienteRepo(db_path).update(cliente_id, dados)
    log_database_operation("cliente", "UPDATE", 1, id=cliente_id)
    return buscar_cliente(cliente_id, db_path=db_path)


def remover_cliente(cliente_id: int, db_path: str = DB_PATH) -> None:
    ClienteRepo(db_path).delete(cliente_id)
    log_database_operation("cliente", "DELETE", 1, id=cliente_id)
    log_system_event("cliente_removido", {"id": cliente_id})


def buscar_cliente(cliente_id: int, db_path: str = DB_PATH) -> Cliente:
    c = ClienteRepo(db_path).get(cliente_id)
    if c is None:
        raise NotFoundError(f"Cliente {cliente_id} não encontrado")
    return c


def listar_clientes(db_path: str = DB_PATH) -> List[Cliente]:
    return ClienteRepo(db_path).get_all()
