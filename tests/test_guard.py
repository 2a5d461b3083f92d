from datetime import date
from decimal import Decimal

import pytest

from ledger import store
from ledger.errors import ConflictError
from ledger.guard import can_delete_account, can_delete_category


def test_guard_reports_references(ledger_db, seed, engine):
    with ledger_db.unit_of_work() as session:
        assert can_delete_account(session, seed["A"])
        assert can_delete_category(session, seed["gasto"])

    engine.post("Compra", "12.00", date(2025, 1, 2), "expense", seed["gasto"], seed["A"])

    with ledger_db.unit_of_work() as session:
        assert not can_delete_account(session, seed["A"])
        assert not can_delete_category(session, seed["gasto"])
        assert can_delete_account(session, seed["B"])
        assert can_delete_category(session, seed["ingreso"])


def test_delete_referenced_entities_fails_without_side_effects(ledger_db, seed, engine, balance_of, transactions_of):
    posted = engine.post("Compra", "12.00", date(2025, 1, 2), "expense", seed["gasto"], seed["A"])

    with pytest.raises(ConflictError):
        with ledger_db.unit_of_work() as session:
            store.delete_account(session, seed["A"])
    with pytest.raises(ConflictError):
        with ledger_db.unit_of_work() as session:
            store.delete_category(session, seed["gasto"])

    with ledger_db.unit_of_work() as session:
        assert store.get_account(session, seed["A"]) is not None
        assert store.get_category(session, seed["gasto"]) is not None
    assert [t.id for t in transactions_of()] == [posted.id]
    assert balance_of(seed["A"]) == Decimal("988.00")


def test_delete_allowed_once_references_are_retracted(ledger_db, seed, engine):
    posted = engine.post("Compra", "12.00", date(2025, 1, 2), "expense", seed["gasto"], seed["A"])
    engine.retract(posted.id)

    with ledger_db.unit_of_work() as session:
        store.delete_account(session, seed["A"])
        store.delete_category(session, seed["gasto"])

    with ledger_db.unit_of_work() as session:
        assert store.get_account(session, seed["A"]) is None
        assert store.get_category(session, seed["gasto"]) is None
