# models/money.py
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP

from ledger.errors import ValidationError

CENTS = Decimal("0.01")
ZERO = Decimal("0.00")
# mayor valor que cabe en Numeric(12, 2)
MAX_AMOUNT = Decimal("9999999999.99")


def check_range(amount: Decimal) -> Decimal:
    """Lanza ValidationError si el importe no cabe en las columnas Numeric(12, 2)."""
    if abs(amount) > MAX_AMOUNT:
        raise ValidationError(f"Importe fuera de rango (máximo {MAX_AMOUNT}): {amount}")
    return amount


def to_amount(value, bounded: bool = True) -> Decimal:
    """
    Convierte un importe a Decimal con 2 decimales (ROUND_HALF_UP).

    Acepta Decimal, int, str y float (este último vía str para no arrastrar
    el error binario: 0.1 -> Decimal("0.10")). Con bounded=True rechaza lo que
    no cabe en Numeric(12, 2); los totales calculados usan bounded=False.
    """
    if isinstance(value, bool) or value is None:
        raise ValidationError(f"Importe no válido: {value!r}")
    try:
        if isinstance(value, Decimal):
            amount = value
        else:
            amount = Decimal(str(value).strip())
        if not amount.is_finite():
            raise ValidationError(f"Importe no válido: {value!r}")
        amount = amount.quantize(CENTS, rounding=ROUND_HALF_UP)
    except (InvalidOperation, ValueError) as exc:
        raise ValidationError(f"Importe no válido: {value!r}") from exc
    if bounded:
        check_range(amount)
    return amount
