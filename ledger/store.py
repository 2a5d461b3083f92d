# ledger/store.py
"""
Acceso a datos de cuentas, categorías y transacciones.

Todas las funciones reciben la sesión de la unidad de trabajo activa
(db.unit_of_work()); ninguna abre ni cierra transacciones por su cuenta.
Las búsquedas devuelven None si no hay coincidencia.

Las escrituras de transacciones (insert_transaction, create_transaction,
update_transaction_row, delete_transaction_row) no tocan saldos: desde
fuera hay que usar LedgerEngine para que la cuenta se mantenga cuadrada.
"""
from sqlalchemy import select, delete, update

from ledger.errors import ValidationError, NotFoundError, ConflictError
from ledger.guard import can_delete_account, can_delete_category
from models.account import Account
from models.category import Category
from models.money import to_amount, ZERO
from models.transaction import Transaction, TransactionKind, TransactionView, parse_date
from utils.logging_utils import get_logger

LOGGER = get_logger(__name__)


def _clean_name(name) -> str:
    if not isinstance(name, str) or not name.strip():
        raise ValidationError("El nombre no puede estar vacío")
    return name.strip()


# -------------------------------------------------------------
# Cuentas
# -------------------------------------------------------------
def list_accounts(session) -> list[Account]:
    return list(session.scalars(select(Account).order_by(Account.id.asc())).all())


def get_account(session, account_id: int) -> Account | None:
    return session.get(Account, account_id)


def create_account(session, name, initial_balance=ZERO) -> int:
    """Crea la cuenta y devuelve su id. El saldo inicial puede ser negativo."""
    name = _clean_name(name)
    initial = to_amount(initial_balance)
    account = Account(name=name, balance=initial, opening_balance=initial)
    session.add(account)
    session.flush()
    LOGGER.info("Cuenta creada id=%s nombre=%s saldo=%s", account.id, name, initial)
    return account.id


def update_account(session, account_id: int, name) -> Account:
    """Solo renombra: el saldo no se toca desde aquí."""
    name = _clean_name(name)
    account = session.get(Account, account_id)
    if account is None:
        raise NotFoundError(f"Cuenta {account_id} no encontrada")
    account.name = name
    session.flush()
    return account


def delete_account(session, account_id: int) -> None:
    if session.get(Account, account_id) is None:
        raise NotFoundError(f"Cuenta {account_id} no encontrada")
    if not can_delete_account(session, account_id):
        raise ConflictError(f"La cuenta {account_id} tiene transacciones asociadas")
    result = session.execute(delete(Account).where(Account.id == account_id))
    if result.rowcount == 0:
        raise ConflictError(f"No se pudo borrar la cuenta {account_id}")
    LOGGER.info("Cuenta %s borrada", account_id)


# -------------------------------------------------------------
# Categorías
# -------------------------------------------------------------
def list_categories(session) -> list[Category]:
    return list(session.scalars(select(Category).order_by(Category.name, Category.id)).all())


def get_category(session, category_id: int) -> Category | None:
    return session.get(Category, category_id)


def create_category(session, name, kind, description: str | None = None) -> int:
    category = Category(
        name=_clean_name(name),
        kind=TransactionKind.parse(kind).value,
        description=description or "",
    )
    session.add(category)
    session.flush()
    LOGGER.info("Categoría creada id=%s nombre=%s", category.id, category.name)
    return category.id


def update_category(session, category_id: int, name, kind, description: str | None = None) -> Category:
    name = _clean_name(name)
    kind = TransactionKind.parse(kind).value
    category = session.get(Category, category_id)
    if category is None:
        raise NotFoundError(f"Categoría {category_id} no encontrada")
    category.name = name
    category.kind = kind
    category.description = description or ""
    session.flush()
    return category


def delete_category(session, category_id: int) -> None:
    if session.get(Category, category_id) is None:
        raise NotFoundError(f"Categoría {category_id} no encontrada")
    if not can_delete_category(session, category_id):
        raise ConflictError(f"La categoría {category_id} tiene transacciones asociadas")
    result = session.execute(delete(Category).where(Category.id == category_id))
    if result.rowcount == 0:
        raise ConflictError(f"No se pudo borrar la categoría {category_id}")
    LOGGER.info("Categoría %s borrada", category_id)


# -------------------------------------------------------------
# Transacciones
# -------------------------------------------------------------
def _view_query():
    # LEFT JOIN: una vista nunca desaparece por falta de nombre
    return (
        select(
            Transaction,
            Category.name.label("category_name"),
            Account.name.label("account_name"),
        )
        .outerjoin(Category, Transaction.category_id == Category.id)
        .outerjoin(Account, Transaction.account_id == Account.id)
    )


def _to_view(row) -> TransactionView:
    t, category_name, account_name = row
    return TransactionView(
        id=t.id,
        description=t.description,
        amount=to_amount(t.amount),
        date=t.date,
        kind=TransactionKind.parse(t.kind),
        category_id=t.category_id,
        account_id=t.account_id,
        category_name=category_name,
        account_name=account_name,
    )


def list_transactions(session, account_id: int | None = None) -> list[TransactionView]:
    """Más recientes primero: fecha DESC y, a igual fecha, id DESC."""
    query = _view_query()
    if account_id is not None:
        query = query.where(Transaction.account_id == account_id)
    query = query.order_by(Transaction.date.desc(), Transaction.id.desc())
    return [_to_view(row) for row in session.execute(query).all()]


def get_transaction(session, transaction_id: int) -> TransactionView | None:
    row = session.execute(_view_query().where(Transaction.id == transaction_id)).first()
    return _to_view(row) if row is not None else None


def validate_transaction_fields(session, description, amount, tx_date, kind, category_id, account_id) -> dict:
    """Normaliza y valida los campos de una transacción; comprueba que existen categoría y cuenta."""
    if description is None:
        description = ""
    if not isinstance(description, str):
        raise ValidationError("La descripción debe ser texto")
    amount = to_amount(amount)
    if amount < 0:
        raise ValidationError(f"El importe no puede ser negativo: {amount}")
    fields = {
        "description": description.strip(),
        "amount": amount,
        "date": parse_date(tx_date),
        "kind": TransactionKind.parse(kind).value,
        "category_id": category_id,
        "account_id": account_id,
    }
    if session.get(Category, category_id) is None:
        raise NotFoundError(f"Categoría {category_id} no encontrada")
    if session.get(Account, account_id) is None:
        raise NotFoundError(f"Cuenta {account_id} no encontrada")
    return fields


def insert_transaction(session, fields: dict) -> int:
    t = Transaction(**fields)
    session.add(t)
    session.flush()
    return t.id


def create_transaction(session, description, amount, tx_date, kind, category_id: int, account_id: int) -> int:
    """Inserta la fila (importe en magnitud, >= 0) y devuelve el id. No toca saldos."""
    fields = validate_transaction_fields(session, description, amount, tx_date, kind, category_id, account_id)
    return insert_transaction(session, fields)


def load_transaction_for_update(session, transaction_id: int) -> Transaction | None:
    """Lee la fila bloqueándola hasta el final de la unidad de trabajo."""
    return session.scalars(
        select(Transaction)
        .where(Transaction.id == transaction_id)
        .with_for_update()
        .execution_options(populate_existing=True)
    ).first()


def update_transaction_row(session, transaction_id: int, fields: dict) -> None:
    result = session.execute(
        update(Transaction)
        .where(Transaction.id == transaction_id)
        .values(**fields)
        .execution_options(synchronize_session="evaluate")
    )
    if result.rowcount == 0:
        raise ConflictError(f"No se pudo actualizar la transacción {transaction_id}: 0 filas afectadas")


def delete_transaction_row(session, transaction_id: int) -> None:
    result = session.execute(
        delete(Transaction)
        .where(Transaction.id == transaction_id)
        .execution_options(synchronize_session="evaluate")
    )
    if result.rowcount == 0:
        raise ConflictError(f"No se pudo borrar la transacción {transaction_id}: 0 filas afectadas")
