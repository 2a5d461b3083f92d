# ledger/balance.py
from decimal import Decimal

from sqlalchemy import select, update

from ledger.errors import NotFoundError, ConflictError
from models.account import Account
from models.money import to_amount, check_range
from utils.logging_utils import get_logger

LOGGER = get_logger(__name__)


def adjust_balance(session, account_id: int, delta) -> Decimal:
    """
    Suma `delta` (ya con signo) al saldo de la cuenta y devuelve el saldo nuevo.

    Debe llamarse dentro de una unidad de trabajo abierta por quien llama; no
    hace commit. La lectura usa SELECT ... FOR UPDATE para que dos ajustes
    concurrentes sobre la misma cuenta no partan del mismo saldo.
    """
    delta = to_amount(delta)
    current = session.execute(
        select(Account.balance).where(Account.id == account_id).with_for_update()
    ).scalar_one_or_none()
    if current is None:
        raise NotFoundError(f"Cuenta {account_id} no encontrada para ajustar el saldo")

    # el saldo nuevo tiene que caber en la columna antes de escribirlo
    new_balance = check_range(to_amount(current) + delta)

    result = session.execute(
        update(Account)
        .where(Account.id == account_id)
        .values(balance=new_balance)
        .execution_options(synchronize_session="evaluate")
    )
    if result.rowcount == 0:
        raise ConflictError(f"No se pudo actualizar el saldo de la cuenta {account_id}: 0 filas afectadas")

    LOGGER.debug("Saldo cuenta %s: %s + (%s) -> %s", account_id, current, delta, new_balance)
    return new_balance
