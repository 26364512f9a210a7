from decimal import Decimal

import pytest

from pdv.domain.errors import ValidationError
from pdv.usecases.retiradas import listar_retiradas, registrar_retirada, total_retiradas_por_dia


def test_registrar_e_listar(db):
    registrar_retirada("50.00", data="2025-01-10", motivo="Troco do dia", db_path=db)
    registrar_retirada("20", data="2025-01-10", db_path=db)
    registrar_retirada("35.50", data="2025-01-11", db_path=db)

    todas = listar_retiradas(db_path=db)
    assert [r.valor for r in todas] == [Decimal("50.00"), Decimal("20.00"), Decimal("35.50")]
    assert todas[0].motivo == "Troco do dia"
    assert len(listar_retiradas("2025-01-11", "2025-01-11", db_path=db)) == 1

    assert total_retiradas_por_dia(db_path=db) == {
        "2025-01-10": Decimal("70.00"),
        "2025-01-11": Decimal("35.50"),
    }


@pytest.mark.parametrize("valor", ["0", "-10", "abc"])
def test_valor_deve_ser_positivo(db, valor):
    with pytest.raises(ValidationError):
        registrar_retirada(valor, db_path=db)
    assert listar_retiradas(db_path=db) == []
