#!/usr/bin/env python
# -*- coding: utf-8 -*-
"""
Script para ejecutar migración: Crear tablas accounts, categories y transactions
"""

import sys

from sqlalchemy import inspect
from sqlalchemy.exc import SQLAlchemyError

from database import db

TABLAS = ("accounts", "categories", "transactions")


def run_migration(db_url=None):
    """Crea las tablas que falten. Devuelve True si todo fue bien."""
    db.init_app(db_url)

    if not db.engine:
        print("❌ Error: No se pudo conectar a la base de datos")
        print("   Verifica que DATABASE_URL esté configurado en .env")
        return False

    try:
        existentes = set(inspect(db.engine).get_table_names())
        db.create_all()
    except SQLAlchemyError as e:
        print(f"❌ Error ejecutando migración: {e}")
        return False

    for tabla in TABLAS:
        estado = "ya existía" if tabla in existentes else "creada"
        print(f"    ✓ {tabla}: {estado}")
    print("✅ Migración completada exitosamente")
    return True


def main():
    print("=" * 60)
    print("  MIGRACIÓN: Crear tablas del ledger")
    print("=" * 60)

    success = run_migration(sys.argv[1] if len(sys.argv) > 1 else None)

    if not success:
        print("\n" + "=" * 60)
        print("  ❌ MIGRACIÓN FALLIDA")
        print("=" * 60)
        sys.exit(1)


if __name__ == "__main__":
    main()
