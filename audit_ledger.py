# audit_ledger.py
"""
Auditoría de saldos: compara el saldo guardado de cada cuenta con el que
sale de sumar sus transacciones. Sale con código 1 si alguna no cuadra.
"""
import argparse
import sys

from database import db
from utils.reconciler import reconcile_accounts


def parse_args(argv=None):
    p = argparse.ArgumentParser(description="Comprobar que el saldo de cada cuenta cuadra con sus transacciones.")
    p.add_argument("--cuenta", "-c", type=int, action="append", dest="cuentas",
                   help="ID de la cuenta (se puede repetir). Por defecto todas.")
    p.add_argument("--url", type=str, default=None, help="DATABASE_URL a usar en lugar de la del .env")
    return p.parse_args(argv)


def main(argv=None) -> int:
    args = parse_args(argv)

    db.init_app(args.url)
    if db.engine is None:
        print("❌ Error: no hay base de datos configurada (DATABASE_URL)")
        return 2

    with db.unit_of_work() as session:
        filas = reconcile_accounts(session, args.cuentas)

    print(f"{'ID':>4} {'Cuenta':<25} {'Guardado':>14} {'Calculado':>14} {'Diferencia':>12}")
    print("-" * 73)
    for r in filas:
        marca = "" if r.ok else "  ⚠️"
        print(f"{r.account_id:>4} {r.name:<25.25} {r.cached_balance:>14} {r.computed_balance:>14} {r.drift:>12}{marca}")
    print("-" * 73)

    descuadradas = [r for r in filas if not r.ok]
    if descuadradas:
        print(f"AVISO: {len(descuadradas)} cuenta(s) con el saldo descuadrado.")
        return 1
    print("✅ Todos los saldos cuadran.")
    return 0


if __name__ == "__main__":
    sys.exit(main())
