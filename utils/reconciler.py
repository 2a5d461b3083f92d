# utils/reconciler.py
from dataclasses import dataclass
from decimal import Decimal
from typing import List

from sqlalchemy import select, func, case

from ledger.errors import NotFoundError
from models.account import Account
from models.money import to_amount
from models.transaction import Transaction


@dataclass(frozen=True)
class AccountReconciliation:
    account_id: int
    name: str
    cached_balance: Decimal
    computed_balance: Decimal

    @property
    def drift(self) -> Decimal:
        return self.cached_balance - self.computed_balance

    @property
    def ok(self) -> bool:
        return self.drift == 0


def _signed_sum():
    # +importe para ingresos, -importe para gastos, sumado en la propia BD
    return func.coalesce(
        func.sum(case((Transaction.kind == "expense", -Transaction.amount), else_=Transaction.amount)),
        0,
    )


def compute_account_balance(session, account_id: int) -> Decimal:
    """
    Recalcula el saldo de la cuenta desde cero:
      - saldo inicial con el que se creó
      - transacciones (ingresos suman, gastos restan)
    """
    cuenta = session.get(Account, account_id)
    if not cuenta:
        raise NotFoundError(f"Cuenta {account_id} no encontrada")

    total = session.execute(
        select(_signed_sum()).where(Transaction.account_id == account_id)
    ).scalar_one()
    return to_amount(cuenta.opening_balance) + to_amount(total, bounded=False)


def reconcile_accounts(session, account_ids: List[int] | None = None) -> List[AccountReconciliation]:
    """Compara saldo cacheado y saldo recalculado para cada cuenta (o las indicadas)."""
    totales = dict(
        session.execute(
            select(Transaction.account_id, _signed_sum()).group_by(Transaction.account_id)
        ).all()
    )

    query = select(Account).order_by(Account.id)
    if account_ids is not None:
        query = query.where(Account.id.in_(account_ids))

    resultado = []
    for cuenta in session.scalars(query).all():
        computed = to_amount(cuenta.opening_balance) + to_amount(totales.get(cuenta.id, 0), bounded=False)
        resultado.append(AccountReconciliation(
            account_id=cuenta.id,
            name=cuenta.name,
            cached_balance=to_amount(cuenta.balance),
            computed_balance=computed,
        ))
    return resultado


def find_drift(session) -> List[AccountReconciliation]:
    """Solo las cuentas cuyo saldo no cuadra con sus transacciones."""
    return [r for r in reconcile_accounts(session) if not r.ok]
