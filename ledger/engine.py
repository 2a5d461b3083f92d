# ledger/engine.py
"""
Motor del ledger: única vía para crear, modificar o borrar transacciones.

Cada escritura de una transacción va acompañada de su ajuste de saldo y
ambas ocurren en la misma unidad de trabajo: o se aplican las dos o
ninguna. El saldo de la cuenta es una caché de

    saldo_inicial + suma(+importe si ingreso, -importe si gasto)

y este módulo la mantiene al día de forma incremental.

Las funciones *_transaction trabajan sobre una sesión que ya está dentro de
una transacción (para agrupar varias operaciones). LedgerEngine abre una
unidad de trabajo por operación.
"""
from models.transaction import signed_amount
from ledger.balance import adjust_balance
from ledger.errors import NotFoundError
from ledger import store
from utils.logging_utils import get_logger

LOGGER = get_logger(__name__)


def post_transaction(session, description, amount, tx_date, kind, category_id: int, account_id: int):
    """Inserta la transacción y aplica su efecto al saldo de la cuenta."""
    fields = store.validate_transaction_fields(
        session, description, amount, tx_date, kind, category_id, account_id
    )
    transaction_id = store.insert_transaction(session, fields)
    adjust_balance(session, account_id, signed_amount(fields["kind"], fields["amount"]))
    return store.get_transaction(session, transaction_id)


def revise_transaction(session, transaction_id: int, description, amount, tx_date, kind,
                       category_id: int, account_id: int):
    """
    Sustituye la transacción `transaction_id` por los datos nuevos.

    Revierte el efecto antiguo en su cuenta y aplica el nuevo (que puede ser
    otra cuenta). Equivale a retract + post conservando el id.
    """
    old = store.load_transaction_for_update(session, transaction_id)
    if old is None:
        raise NotFoundError(f"Transacción {transaction_id} no encontrada")
    # validamos antes de tocar ningún saldo
    fields = store.validate_transaction_fields(
        session, description, amount, tx_date, kind, category_id, account_id
    )

    adjust_balance(session, old.account_id, -old.signed_amount)
    adjust_balance(session, fields["account_id"], signed_amount(fields["kind"], fields["amount"]))
    store.update_transaction_row(session, transaction_id, fields)
    return store.get_transaction(session, transaction_id)


def retract_transaction(session, transaction_id: int):
    """Borra la transacción y revierte su efecto en el saldo. Devuelve la vista borrada."""
    old = store.load_transaction_for_update(session, transaction_id)
    if old is None:
        raise NotFoundError(f"Transacción {transaction_id} no encontrada")
    removed = store.get_transaction(session, transaction_id)

    adjust_balance(session, old.account_id, -old.signed_amount)
    store.delete_transaction_row(session, transaction_id)
    return removed


class LedgerEngine:
    """Ejecuta cada operación del ledger en su propia unidad de trabajo."""

    def __init__(self, database=None):
        if database is None:
            from database import db as database
        self.database = database

    def _run(self, operation: str, func, *args):
        try:
            with self.database.unit_of_work() as session:
                result = func(session, *args)
        except Exception as exc:
            # la unidad de trabajo ya hizo rollback; solo dejamos constancia
            LOGGER.warning("%s revertido: %s: %s", operation, type(exc).__name__, exc)
            raise
        LOGGER.info("%s confirmado: transacción %s", operation, result.id)
        return result

    def post(self, description, amount, tx_date, kind, category_id: int, account_id: int):
        return self._run("post", post_transaction, description, amount, tx_date, kind, category_id, account_id)

    def revise(self, transaction_id: int, description, amount, tx_date, kind, category_id: int, account_id: int):
        return self._run(
            "revise", revise_transaction, transaction_id, description, amount, tx_date, kind, category_id, account_id
        )

    def retract(self, transaction_id: int):
        return self._run("retract", retract_transaction, transaction_id)
