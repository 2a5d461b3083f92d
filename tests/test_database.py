from decimal import Decimal

import pytest
from sqlalchemy import text, inspect

from database import _DB
from ledger.errors import StorageError, LedgerError


def test_without_url_stays_unconfigured(monkeypatch):
    monkeypatch.delenv("DATABASE_URL", raising=False)
    database = _DB()
    database.init_app()

    assert database.engine is None
    assert database._initialized
    with pytest.raises(RuntimeError):
        database.session()
    with pytest.raises(RuntimeError):
        with database.unit_of_work():
            pass
    assert database.check_connection() == (False, "No hay DATABASE_URL definida.")


def test_url_and_echo_from_environment(monkeypatch, db_url):
    monkeypatch.setenv("DATABASE_URL", db_url)
    monkeypatch.setenv("DB_ECHO", "yes")
    database = _DB()
    database.init_app()
    try:
        assert database.url == db_url
        assert database.echo is True
        assert database.check_connection() == (True, None)
        assert database.connected
    finally:
        database.close_all()
    assert database.engine is None


def test_check_connection_reports_errors(tmp_path):
    ok, message = _DB().check_connection(f"sqlite:///{tmp_path / 'no' / 'existe.db'}")
    assert not ok
    assert message


def test_create_all_builds_ledger_tables(ledger_db):
    assert {"accounts", "categories", "transactions"} <= set(inspect(ledger_db.engine).get_table_names())


def test_unit_of_work_commits_and_rolls_back(ledger_db):
    with ledger_db.unit_of_work() as session:
        session.execute(text("INSERT INTO accounts (name, balance, opening_balance) VALUES ('X', 1, 1)"))

    with pytest.raises(ValueError):
        with ledger_db.unit_of_work() as session:
            session.execute(text("INSERT INTO accounts (name, balance, opening_balance) VALUES ('Y', 2, 2)"))
            raise ValueError("abortar")

    with ledger_db.unit_of_work() as session:
        names = session.execute(text("SELECT name FROM accounts ORDER BY id")).scalars().all()
    assert names == ["X"]


def test_unit_of_work_wraps_database_errors(ledger_db):
    with pytest.raises(StorageError) as excinfo:
        with ledger_db.unit_of_work() as session:
            session.execute(text(
                "INSERT INTO transactions (description, amount, date, kind, category_id, account_id) "
                "VALUES ('huérfana', 1, '2025-01-01', 'expense', 999, 999)"
            ))

    assert isinstance(excinfo.value, LedgerError)
    with ledger_db.unit_of_work() as session:
        assert session.execute(text("SELECT COUNT(*) FROM transactions")).scalar_one() == 0


def test_account_to_dict(ledger_db, seed):
    from ledger import store

    with ledger_db.unit_of_work() as session:
        data = store.get_account(session, seed["A"]).to_dict()
    assert data == {"id": seed["A"], "name": "Cuenta A", "balance": str(Decimal("1000.00")), "opening_balance": "1000.00"}
