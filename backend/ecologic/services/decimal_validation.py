"""
Porta de entrada de todo valor monetário antes de uma escrita no banco.

As colunas monetárias são DECIMAL(10,2): o valor é arredondado para centavos
(ROUND_HALF_UP) e limitado a ±99.999.999,99. Ausência de valor continua sendo
None, não zero.
"""
import logging
import re
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from typing import Any, Optional

logger = logging.getLogger(__name__)

MAX_DECIMAL_VALUE = Decimal("99999999.99")
CENTS = Decimal("0.01")


def validate_decimal_value(value: Any, field_name: str = "campo") -> Optional[Decimal]:
    """
    Valida e limita um valor para DECIMAL(10,2).

    Args:
        value: número, string numérica ("12.5", "1.234,56"), None ou ""
        field_name: nome do campo, usado apenas nos logs

    Returns:
        Decimal arredondado para 2 casas, ou None quando não há valor válido
    """
    if value is None or value == "":
        return None

    if isinstance(value, bool):
        logger.warning(f"Valor inválido para {field_name}: {value!r}")
        return None

    if isinstance(value, str):
        clean = re.sub(r"[^\d.,-]", "", value)
        if "," in clean:
            # Formato brasileiro: pontos são separadores de milhar
            clean = clean.replace(".", "").replace(",", ".", 1)
        try:
            number = Decimal(clean)
        except (InvalidOperation, ValueError):
            logger.warning(f"Valor não numérico para {field_name}: {value!r}")
            return None
    elif isinstance(value, (int, float, Decimal)):
        try:
            number = Decimal(str(value))
        except (InvalidOperation, ValueError):
            logger.warning(f"Valor não numérico para {field_name}: {value!r}")
            return None
    else:
        logger.warning(f"Valor inválido para {field_name}: {value!r}")
        return None

    if not number.is_finite():
        logger.warning(f"Valor não numérico para {field_name}: {value!r}")
        return None

    if abs(number) > MAX_DECIMAL_VALUE:
        limited = MAX_DECIMAL_VALUE if number > 0 else -MAX_DECIMAL_VALUE
        logger.warning(
            f"Valor {number} para {field_name} excede o limite DECIMAL(10,2). Limitando para {limited}"
        )
        return limited

    return number.quantize(CENTS, rounding=ROUND_HALF_UP)
