"""BRL currency formatting, parsing and amount-in-words rendering"""

import re
from decimal import Decimal, InvalidOperation, MAX_PREC, ROUND_HALF_UP, localcontext
from typing import List, Optional, Tuple

ZERO_CURRENCY = "R$ 0,00"

_NON_NUMERIC = re.compile(r"[^0-9,.\-]")


def _to_decimal(value) -> Decimal | None:
    """Best-effort conversion; None for anything that isn't a finite number"""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, str):
        return parse_currency(value)
    try:
        number = Decimal(str(value))
    except (InvalidOperation, ValueError):
        return None
    return number if number.is_finite() else None


def _quantize(number: Decimal, decimals: int) -> Optional[Decimal]:
    """Half-up to the given places, widening precision for large values; None past the exponent range"""
    with localcontext() as ctx:
        ctx.prec = min(MAX_PREC, max(ctx.prec, number.adjusted() + decimals + 2))
        try:
            return number.quantize(Decimal(1).scaleb(-decimals), rounding=ROUND_HALF_UP)
        except InvalidOperation:
            return None


def format_number(value, decimals: int = 2) -> str:
    """
    Format a number with Brazilian grouping, e.g. 1234.5 -> "1.234,50".

    Never raises; None/NaN render as zero.
    """
    number = _to_decimal(value)
    if number is not None:
        number = _quantize(number, decimals)
    if number is None:
        number = _quantize(Decimal(0), decimals)
    # Format US-style then swap separators
    us = f"{number:,.{decimals}f}"
    return us.replace(",", "_").replace(".", ",").replace("_", ".")


def format_currency(value) -> str:
    """
    Format an amount as BRL currency: 1234.56 -> "R$ 1.234,56".

    None, NaN, infinities and unparseable strings render as "R$ 0,00".
    """
    number = _to_decimal(value)
    if number is None:
        return ZERO_CURRENCY
    formatted = format_number(number.copy_abs())
    if number < 0 and formatted != "0,00":
        return f"-R$ {formatted}"
    return f"R$ {formatted}"


def parse_currency(text) -> Decimal:
    """
    Parse either "1234.56" or "1.234,56" (optionally with "R$") into a Decimal.

    Rules:
    - A comma is always the decimal separator; dots are thousands separators
    - Without a comma, a single dot is a decimal point ("1234.56"),
      several dots are thousands separators ("1.234.567")
    - Anything unparseable returns Decimal("0")
    """
    if text is None or isinstance(text, bool):
        return Decimal(0)
    if not isinstance(text, str):
        number = _to_decimal(text)
        return number if number is not None else Decimal(0)

    cleaned = _NON_NUMERIC.sub("", text.strip())
    if "," in cleaned:
        cleaned = cleaned.replace(".", "").replace(",", ".", 1)
    elif cleaned.count(".") > 1:
        cleaned = cleaned.replace(".", "")

    try:
        number = Decimal(cleaned)
    except InvalidOperation:
        return Decimal(0)
    return number if number.is_finite() else Decimal(0)


# Portuguese number words
_UNITS = ["", "um", "dois", "três", "quatro", "cinco", "seis", "sete", "oito", "nove"]
_TEENS = ["dez", "onze", "doze", "treze", "quatorze", "quinze", "dezesseis", "dezessete", "dezoito", "dezenove"]
_TENS = ["", "dez", "vinte", "trinta", "quarenta", "cinquenta", "sessenta", "setenta", "oitenta", "noventa"]
_HUNDREDS = ["", "cento", "duzentos", "trezentos", "quatrocentos", "quinhentos",
             "seiscentos", "setecentos", "oitocentos", "novecentos"]
# (singular, plural) per thousands group above "mil"
_SCALES = [("milhão", "milhões"), ("bilhão", "bilhões"), ("trilhão", "trilhões")]


def _group_in_words(n: int) -> str:
    """Words for 1..999"""
    if n == 100:
        return "cem"
    hundreds, rest = divmod(n, 100)
    tens, units = divmod(rest, 10)

    parts: List[str] = []
    if hundreds:
        parts.append(_HUNDREDS[hundreds])
    if tens == 1:
        parts.append(_TEENS[units])
    else:
        if tens:
            parts.append(_TENS[tens])
        if units:
            parts.append(_UNITS[units])
    return " e ".join(parts)


def _chunks(n: int) -> Tuple[List[str], int]:
    """Words per thousands group, most significant first, plus the last non-zero group"""
    chunks: List[str] = []
    # Past the largest scale word, count in multiples of it ("mil trilhões")
    largest = 1000 ** (len(_SCALES) + 1)
    if n >= largest * 1000:
        high, n = divmod(n, largest)
        chunks.append(f"{number_in_words(high)} {_SCALES[-1][1]}")

    groups = []
    while n > 0:
        n, group = divmod(n, 1000)
        groups.append(group)

    last_group = 0
    for index in range(len(groups) - 1, -1, -1):
        group = groups[index]
        if group == 0:
            continue
        last_group = group
        if index == 0:
            chunks.append(_group_in_words(group))
        elif index == 1:
            chunks.append("mil" if group == 1 else f"{_group_in_words(group)} mil")
        else:
            singular, plural = _SCALES[index - 2]
            chunks.append(f"{_group_in_words(group)} {singular if group == 1 else plural}")
    return chunks, last_group


def number_in_words(n: int) -> str:
    """Portuguese words for a non-negative integer"""
    if n == 0:
        return "zero"

    chunks, last_group = _chunks(n)
    # "e" before the last group when it is below 100 or a round hundred
    if len(chunks) > 1 and last_group and (last_group < 100 or last_group % 100 == 0):
        return " ".join(chunks[:-1]) + " e " + chunks[-1]
    return " ".join(chunks)


def amount_in_words(value) -> str:
    """
    Render a BRL amount in words for receipts and contracts.

    Example:
        1234.56 -> "mil duzentos e trinta e quatro reais e cinquenta e seis centavos"
    """
    number = _to_decimal(value)
    if number is None:
        return "zero reais"
    number = _quantize(number.copy_abs(), 2)
    if number is None:
        return "zero reais"
    reais_text, _, centavos_text = f"{number:f}".partition(".")
    reais, centavos = int(reais_text), int(centavos_text)

    if reais == 0 and centavos == 0:
        return "zero reais"

    parts: List[str] = []
    if reais:
        words = number_in_words(reais)
        # "um milhão de reais", "dois milhões de reais"
        if reais % 1_000_000 == 0:
            words += " de"
        parts.append(f"{words} {'real' if reais == 1 else 'reais'}")
    if centavos:
        parts.append(f"{number_in_words(centavos)} {'centavo' if centavos == 1 else 'centavos'}")
    return " e ".join(parts)
