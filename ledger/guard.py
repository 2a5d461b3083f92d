# ledger/guard.py
"""
Comprobación previa al borrado de cuentas y categorías.

Solo responde si se puede borrar; el borrado lo hace ledger.store. La fila
de la cuenta/categoría se bloquea para que nadie registre una transacción
contra ella entre la comprobación y el DELETE.
"""
from sqlalchemy import select, func

from models.account import Account
from models.category import Category
from models.transaction import Transaction


def _reference_count(session, column, value: int) -> int:
    return session.execute(
        select(func.count(Transaction.id)).where(column == value)
    ).scalar_one()


def can_delete_account(session, account_id: int) -> bool:
    session.execute(select(Account.id).where(Account.id == account_id).with_for_update())
    return _reference_count(session, Transaction.account_id, account_id) == 0


def can_delete_category(session, category_id: int) -> bool:
    session.execute(select(Category.id).where(Category.id == category_id).with_for_update())
    return _reference_count(session, Transaction.category_id, category_id) == 0
