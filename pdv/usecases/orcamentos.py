# pdv/usecases/orcamentos.py
"""
UC: ORÇAMENTOS (orcamento -> pedido -> vendido).

- criar_orcamento(): grava o orçamento com totais calculados; não mexe no estoque.
- converter_em_pedido(): orcamento -> pedido (recusado se vencido).
- converter_em_venda(): pedido -> vendido; baixa o estoque e grava uma Venda
  ligada ao orçamento, tudo na mesma transação.
- listar_orcamentos() / buscar_orcamento()
"""

from __future__ import annotations

from datetime import date, datetime, timedelta
from typing import Any, List, Optional, Sequence, Union

from pdv.config import DB_PATH, DEFAULTS
from pdv.domain.calculos import calcular_lucro, calcular_subtotal, calcular_total
from pdv.domain.carrinho import Carrinho
from pdv.domain.errors import NotFoundError, ValidationError
from pdv.domain.models import FORMAS_PAGAMENTO, Item, Orcamento, Venda, hoje_iso, to_money
from pdv.domain.policies import validar_transicao_orcamento
from pdv.infra.db import connect
from pdv.infra.repositories import ClienteRepo, MovimentoRepo, OrcamentoRepo, ParamsRepo, ProdutoRepo, VendaRepo
from pdv.infra.logger import log_estoque, log_system_event, log_transaction, log_venda
from pdv.usecases.registrar_venda import (
    apurar_pagamento, custo_estimado_ratio, forma_pagamento_padrao, movimentos_da_venda,
)


def _normalize_str(x: Any) -> Optional[str]:
    if x is None:
        return None
    s = str(x).strip()
    return s or None


def normalizar_validade(validade: Any) -> str:
    """Aceita ``YYYY-MM-DD`` ou ``dd/mm/aaaa`` e devolve a data em ISO."""
    txt = str(validade).strip()
    for fmt in ("%Y-%m-%d", "%d/%m/%Y"):
        try:
            return datetime.strptime(txt, fmt).date().isoformat()
        except ValueError:
            continue
    raise ValidationError(f"Validade inválida (use AAAA-MM-DD ou dd/mm/aaaa): {validade!r}")


def validade_padrao(data: Optional[str] = None, db_path: str = DB_PATH) -> str:
    dias = ParamsRepo(db_path).get_int("validade_orcamento_dias", DEFAULTS.validade_orcamento_dias)
    base = date.fromisoformat(data[:10]) if data else date.today()
    return (base + timedelta(days=dias)).isoformat()


def criar_orcamento(
    carrinho: Union[Carrinho, Sequence[Item]],
    cliente_nome: Optional[str] = None,
    cliente_documento: Optional[str] = None,
    cliente_telefone: Optional[str] = None,
    cliente_endereco: Optional[str] = None,
    cliente_id: Optional[int] = None,
    desconto: Any = 0,
    forma_pagamento: Optional[str] = None,
    observacoes: Optional[str] = None,
    validade: Optional[str] = None,
    data: Optional[str] = None,
    db_path: str = DB_PATH,
) -> Orcamento:
    """Cria um orçamento.

    Os dados do cliente podem vir de um cadastro (``cliente_id``) ou ser
    informados diretamente; nome e documento são obrigatórios. A validade
    padrão é a data do orçamento mais ``validade_orcamento_dias``.
    """
    itens = list(carrinho)
    try:
        if not itens:
            raise ValidationError("Orçamento sem itens")
        if cliente_id is not None:
            cliente = ClienteRepo(db_path).get(cliente_id)
            if cliente is None:
                raise NotFoundError(f"Cliente {cliente_id} não encontrado")
            cliente_nome = cliente_nome or cliente.nome
            cliente_documento = cliente_documento or cliente.documento
            cliente_telefone = cliente_telefone or cliente.telefone
            cliente_endereco = cliente_endereco or cliente.endereco
        nome = _normalize_str(cliente_nome)
        documento = _normalize_str(cliente_documento)
        if not nome:
            raise ValidationError("Nome do cliente é obrigatório")
        if not documento:
            raise ValidationError("Documento (CPF/CNPJ) do cliente é obrigatório")
        if forma_pagamento is not None and forma_pagamento not in FORMAS_PAGAMENTO:
            raise ValidationError(f"Forma de pagamento inválida: {forma_pagamento}")
        try:
            desc = to_money(desconto)
        except ValueError:
            raise ValidationError(f"Desconto inválido: {desconto!r}")
        if desc < 0:
            raise ValidationError("Desconto não pode ser negativo")

        data = data or hoje_iso()
        catalogo = ProdutoRepo(db_path).get_all()
        subtotal = calcular_subtotal(itens)
        orc = Orcamento(
            itens=itens,
            subtotal=subtotal,
            desconto=desc,
            total=calcular_total(subtotal, desc),
            lucro=calcular_lucro(itens, catalogo, custo_estimado_ratio(db_path)),
            cliente_nome=nome,
            validade=normalizar_validade(validade) if validade else validade_padrao(data, db_path),
            cliente_id=cliente_id,
            cliente_documento=documento,
            cliente_telefone=_normalize_str(cliente_telefone),
            cliente_endereco=_normalize_str(cliente_endereco),
            forma_pagamento=forma_pagamento,
            observacoes=_normalize_str(observacoes),
            data=data,
        )
        repo = OrcamentoRepo(db_path)
        orc_id = repo.insert(orc)
        salvo = repo.get(orc_id)
        log_venda("orcamento", salvo.numero, salvo.total, cliente=nome)
        log_transaction("criar_orcamento", {"cliente": nome, "itens": len(itens)}, result=salvo.numero)
        return salvo
    except Exception as e:
        log_transaction("criar_orcamento", {"cliente": cliente_nome, "itens": len(itens)}, error=str(e))
        log_system_event("criar_orcamento_error", {"error": str(e)}, level="error")
        raise


def buscar_orcamento(orcamento_id: int, db_path: str = DB_PATH) -> Orcamento:
    orc = OrcamentoRepo(db_path).get(orcamento_id)
    if orc is None:
        raise NotFoundError(f"Orçamento {orcamento_id} não encontrado")
    return orc


def converter_em_pedido(orcamento_id: int, referencia: Optional[date] = None, db_path: str = DB_PATH) -> Orcamento:
    """orcamento -> pedido. Sem efeito no estoque."""
    repo = OrcamentoRepo(db_path)
    orc = buscar_orcamento(orcamento_id, db_path=db_path)
    validar_transicao_orcamento(orc.status, "pedido", orc.validade, referencia)
    repo.set_status(orcamento_id, "pedido")
    log_venda("pedido", orc.numero, orc.total)
    return repo.get(orcamento_id)


def converter_em_venda(
    orcamento_id: int,
    forma_pagamento: Optional[str] = None,
    valor_pago: Any = None,
    data: Optional[str] = None,
    db_path: str = DB_PATH,
) -> Venda:
    """pedido -> vendido.

    Na mesma transação: baixa de estoque (tudo-ou-nada), status ``vendido``,
    venda com ``orcamento_id`` e movimentações de saída. Se o estoque não
    bastar para alguma linha, nada muda e o orçamento continua ``pedido``.
    """
    log_system_event("converter_em_venda_start", {"orcamento_id": orcamento_id})
    try:
        padrao = forma_pagamento_padrao(db_path)
        orc_repo = OrcamentoRepo(db_path)
        with connect(db_path, immediate=True) as c:
            orc = orc_repo.get(orcamento_id, conn=c)
            if orc is None:
                raise NotFoundError(f"Orçamento {orcamento_id} não encontrado")
            validar_transicao_orcamento(orc.status, "vendido")

            forma = forma_pagamento or orc.forma_pagamento or padrao
            if forma not in FORMAS_PAGAMENTO:
                raise ValidationError(f"Forma de pagamento inválida: {forma}")
            pago, troco = apurar_pagamento(orc.total, forma, valor_pago)

            baixas = ProdutoRepo(db_path).baixar_estoque(orc.itens, conn=c)
            orc_repo.set_status(orcamento_id, "vendido", conn=c)
            venda = Venda(
                itens=list(orc.itens),
                subtotal=orc.subtotal,
                desconto=orc.desconto,
                total=orc.total,
                lucro=orc.lucro,
                forma_pagamento=forma,
                valor_pago=pago,
                troco=troco,
                status="pago",
                cliente_id=orc.cliente_id,
                cliente_nome=orc.cliente_nome,
                data=data or hoje_iso(),
                orcamento_id=orcamento_id,
            )
            venda.id = VendaRepo(db_path).insert(venda, conn=c)
            MovimentoRepo(db_path).insert_many(movimentos_da_venda(venda, baixas), conn=c)

        for b in baixas:
            log_estoque("baixa_orcamento", b.produto.id, b.quantidade, orcamento=orc.numero, venda_id=venda.id)
        log_venda("vendido", orc.numero, orc.total, venda_id=venda.id)
        log_transaction("converter_em_venda", {"orcamento_id": orcamento_id}, result={"venda_id": venda.id})
        return venda
    except Exception as e:
        log_transaction("converter_em_venda", {"orcamento_id": orcamento_id}, error=str(e))
        log_system_event("converter_em_venda_error", {"error": str(e)}, level="error")
        raise


def listar_orcamentos(status: Optional[str] = None, db_path: str = DB_PATH) -> List[Orcamento]:
    return OrcamentoRepo(db_path).list(status=status)
