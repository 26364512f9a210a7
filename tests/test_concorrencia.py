import threading

from pdv.domain.errors import InsufficientStockError
from pdv.infra.repositories import MovimentoRepo, ProdutoRepo, VendaRepo
from pdv.usecases.cadastros import cadastrar_produto
from pdv.usecases.registrar_venda import finalizar_venda, montar_carrinho


def test_vendas_simultaneas_nao_vendem_alem_do_estoque(db):
    produto = cadastrar_produto("Gesso em pó 40kg", "45.00", 5, "Gesso", custo="30", db_path=db)
    carrinhos = [montar_carrinho([(produto.id, 3)], db_path=db) for _ in range(4)]
    largada = threading.Barrier(len(carrinhos))
    resultados = []
    trava = threading.Lock()

    def vender(carrinho):
        largada.wait()
        try:
            finalizar_venda(carrinho, forma_pagamento="pix", db_path=db)
            desfecho = "ok"
        except InsufficientStockError:
            desfecho = "sem_estoque"
        with trava:
            resultados.append(desfecho)

    threads = [threading.Thread(target=vender, args=(c,)) for c in carrinhos]
    for t in threads:
        t.start()
    for t in threads:
        t.join(timeout=30)

    assert sorted(resultados) == ["ok", "sem_estoque", "sem_estoque", "sem_estoque"]
    assert ProdutoRepo(db).get(produto.id).estoque == 2
    assert len(VendaRepo(db).list()) == 1
    assert [m.quantidade for m in MovimentoRepo(db).list(produto_id=produto.id)] == [3]
