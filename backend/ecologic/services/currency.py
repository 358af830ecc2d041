"""
Conversão entre valores monetários e strings no formato brasileiro (R$ 1.234,56).

Dois padrões de digitação são suportados pelo editor de orçamentos:

- Entrada livre: o usuário digita "1.234,56" ou "1234.56" (parse_currency_input)
- Direita para a esquerda: os dígitos digitados são centavos, como numa
  calculadora; "1234" vira "12,34" (format/parse_currency_right_to_left)

Valores negativos não fazem sentido nos campos de quantidade/preço e são
tratados como zero por todas as funções deste módulo. Nenhuma função levanta
exceção: entrada inválida resulta em 0 (ou string vazia na formatação).
"""
import re
from decimal import Context, Decimal, InvalidOperation, ROUND_HALF_UP, localcontext
from typing import Any, Optional

CENTS = Decimal("0.01")

# Valores com mais dígitos inteiros que isso são tratados como inválidos
MAX_INTEGER_DIGITS = 100

_LEADING_NUMBER = re.compile(r"\d+(?:\.\d+)?|\.\d+")


def to_decimal(value: Any) -> Decimal:
    """Converte qualquer valor numérico em Decimal; inválido vira 0"""
    if value is None or isinstance(value, bool):
        return Decimal("0")
    if isinstance(value, Decimal):
        result = value
    else:
        try:
            # str() evita herdar o erro binário do float (12.345 -> "12.345")
            result = Decimal(str(value).strip())
        except (InvalidOperation, ValueError):
            return Decimal("0")
    if not result.is_finite() or result.adjusted() >= MAX_INTEGER_DIGITS:
        return Decimal("0")
    return result


def _wide_context(value: Decimal):
    """Contexto com precisão suficiente para representar `value` em centavos"""
    return localcontext(Context(prec=max(28, value.adjusted() + 4), rounding=ROUND_HALF_UP))


def _br(value: Decimal) -> str:
    """Formata com separador de milhar '.' e decimal ','"""
    with _wide_context(value):
        text = f"{value:,.2f}"
    return text.replace(",", "X").replace(".", ",").replace("X", ".")


def _non_negative_cents(value: Any) -> Decimal:
    amount = to_decimal(value)
    if amount < 0:
        return Decimal("0.00")
    with _wide_context(amount):
        return amount.quantize(CENTS, rounding=ROUND_HALF_UP)


def _cents_from_digits(digits: str) -> Decimal:
    # "1234" -> 12.34 montado direto da string, sem int() nem divisão
    return Decimal(f"{digits[:-2] or '0'}.{digits[-2:].zfill(2)}")


def format_currency(value: Any, symbol: bool = True) -> str:
    """
    Formata para exibição: 1234.56 -> "R$ 1.234,56".
    Zero ou vazio retorna "" para que os campos comecem em branco.
    """
    amount = _non_negative_cents(value)
    if amount == 0:
        return ""
    text = _br(amount)
    return f"R$ {text}" if symbol else text


def format_currency_for_editing(value: Any) -> str:
    """Formata sem símbolo para edição: None -> "", 0 -> "0,00" """
    if value is None or value == "":
        return ""
    return _br(_non_negative_cents(value))


def format_currency_right_to_left(raw: Optional[str]) -> str:
    """
    Trata os dígitos digitados como centavos: "1234" -> "12,34".
    Qualquer caractere que não seja dígito é descartado.
    """
    digits = re.sub(r"\D", "", raw or "")
    if not digits:
        return ""
    return _br(_cents_from_digits(digits))


def parse_currency_right_to_left(formatted: Optional[str]) -> Decimal:
    """Inverso de format_currency_right_to_left: "12,34" -> Decimal("12.34")"""
    digits = re.sub(r"\D", "", formatted or "")
    if not digits:
        return Decimal("0")
    return _cents_from_digits(digits)


def to_cents_digits(value: Any) -> str:
    """Representação em centavos usada para alimentar o campo direita-para-esquerda"""
    return f"{_non_negative_cents(value):f}".replace(".", "").lstrip("0") or "0"


def parse_currency_input(text: Optional[str]) -> Decimal:
    """
    Interpreta texto livre como valor monetário.

    Se houver vírgula, assume formato brasileiro: pontos são separadores de
    milhar e a vírgula é o separador decimal. Sem vírgula, o texto é lido
    diretamente como número (o ponto é decimal). Retorna 0 se nada puder ser lido.
    """
    if not text or not str(text).strip():
        return Decimal("0")

    text = str(text).strip()
    if text.startswith("-"):
        return Decimal("0")

    clean = re.sub(r"[^\d,.]", "", text)
    if "," in clean:
        clean = clean.replace(".", "").replace(",", ".", 1)

    match = _LEADING_NUMBER.match(clean)
    if not match:
        return Decimal("0")
    return to_decimal(match.group(0))


def extract_numeric_value(formatted: Optional[str]) -> Decimal:
    """Extrai o número de uma string já formatada ("R$ 1.234,56")"""
    if not formatted:
        return Decimal("0")
    clean = re.sub(r"R\$\s?", "", formatted).replace(".", "").replace(",", ".", 1).strip()
    amount = to_decimal(clean)
    return amount if amount > 0 else Decimal("0")
