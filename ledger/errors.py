# ledger/errors.py
"""
Errores del ledger.

Todos heredan de LedgerError para que la UI pueda capturarlos juntos y
mostrar el mensaje. Cualquier error dentro de una unidad de trabajo
provoca rollback completo; ninguno se reintenta automáticamente.
"""


class LedgerError(Exception):
    """Base de los errores del ledger."""


class ValidationError(LedgerError):
    """Entrada mal formada: nombre vacío, importe negativo, tipo desconocido..."""


class NotFoundError(LedgerError):
    """El identificador referenciado no existe en el momento de la operación."""


class ConflictError(LedgerError):
    """
    Una escritura afectó a 0 filas cuando se esperaba 1, o la entidad sigue
    referenciada por transacciones y no se puede borrar.
    """


class StorageError(LedgerError):
    """Fallo de la base de datos subyacente (conexión, restricción, etc.)."""
