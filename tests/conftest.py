"""
Fixtures comunes: base de datos SQLite temporal por test, esquema creado
y datos mínimos (dos cuentas y dos categorías).
"""
from decimal import Decimal

import pytest

from database import db
from ledger import store
from ledger.engine import LedgerEngine


@pytest.fixture
def db_url(tmp_path) -> str:
    return f"sqlite:///{tmp_path / 'ledger.db'}"


@pytest.fixture
def ledger_db(db_url):
    db.init_app(db_url, echo=False)
    db.create_all()
    yield db
    db.close_all()


@pytest.fixture
def engine(ledger_db) -> LedgerEngine:
    return LedgerEngine(ledger_db)


@pytest.fixture
def seed(ledger_db):
    """Cuenta A (1000.00), cuenta B (100.00), categoría de gasto y de ingreso."""
    with ledger_db.unit_of_work() as session:
        ids = {
            "A": store.create_account(session, "Cuenta A", Decimal("1000.00")),
            "B": store.create_account(session, "Cuenta B", Decimal("100.00")),
            "gasto": store.create_category(session, "Supermercado", "expense", "Compras"),
            "ingreso": store.create_category(session, "Nómina", "income", "Sueldo"),
        }
    return ids


@pytest.fixture
def balance_of(ledger_db):
    """Lee el saldo guardado de una cuenta en una unidad de trabajo nueva."""

    def _read(account_id: int) -> Decimal:
        with ledger_db.unit_of_work() as session:
            return store.get_account(session, account_id).balance

    return _read


@pytest.fixture
def transactions_of(ledger_db):
    def _read(account_id: int | None = None):
        with ledger_db.unit_of_work() as session:
            return store.list_transactions(session, account_id)

    return _read
