from pathlib import Path

import pytest

from pdv.infra.migrations import apply_migrations
from pdv.infra.views import create_views
from pdv.usecases.cadastros import cadastrar_produto


@pytest.fixture
def db(tmp_path: Path) -> str:
    db_path = str(tmp_path / "pdv_test.sqlite")
    apply_migrations(db_path)
    create_views(db_path)
    return db_path


@pytest.fixture
def placa(db):
    """Placa de gesso: preço 29,90, custo 18,00, 150 em estoque."""
    return cadastrar_produto("Placa de gesso", "29.90", 150, "Placas", custo="18.00", db_path=db)


@pytest.fixture
def perfil(db):
    return cadastrar_produto("Perfil montante", "12.50", 40, "Perfis", custo="7.00", estoque_minimo=50, db_path=db)
