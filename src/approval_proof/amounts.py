"""Locale-independent canonical form for monetary amounts.

Amounts are part of the signed canonical message, so the text produced here
must match the signer byte for byte:

- scale by 100 and round to whole cents, ties away from zero
- two decimals by default (``9.07``)
- one decimal when the hundredths digit is zero but the tenths digit is not
  (``62.50`` -> ``62.5``)
- whole amounts keep ``.00`` unless ``WholeAmountStyle.ONE_DECIMAL`` is used
  (``300`` -> ``300.00`` or ``300.0``)

The default differs from the reference signer, which writes whole amounts
with one decimal (``1.0``, ``500.0``). Pass ``WholeAmountStyle.ONE_DECIMAL``
(or set ``APPROVAL_PROOF_WHOLE_AMOUNT_STYLE=one_decimal``) to verify
signatures made by that signer:

    >>> canonicalize_amount(1.0)
    '1.00'
    >>> canonicalize_amount(1.0, whole_style=WholeAmountStyle.ONE_DECIMAL)
    '1.0'
"""
from __future__ import annotations

import math
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from enum import Enum
from typing import Any, Optional, Union

from .exceptions import InvalidNumberError

Amount = Union[int, float, Decimal, str]

_HUNDRED = Decimal(100)
_ONE = Decimal(1)


class WholeAmountStyle(str, Enum):
    """How an amount with no fractional cents is written."""

    TWO_DECIMALS = "two_decimals"
    ONE_DECIMAL = "one_decimal"


def _scaled(value: Any, field: Optional[str]) -> Decimal:
    # bool is an int subclass; True is not an amount.
    if isinstance(value, bool) or value is None:
        raise InvalidNumberError(value, field=field)

    if isinstance(value, float):
        if not math.isfinite(value):
            raise InvalidNumberError(value, field=field)
        # Float inputs scale in binary first, like the signer does.
        return Decimal(repr(value * 100))

    if isinstance(value, int):
        return Decimal(value) * _HUNDRED

    if isinstance(value, Decimal):
        number = value
    elif isinstance(value, str):
        try:
            number = Decimal(value.strip())
        except InvalidOperation:
            raise InvalidNumberError(value, field=field) from None
    else:
        raise InvalidNumberError(value, field=field)

    if not number.is_finite():
        raise InvalidNumberError(value, field=field)
    return number * _HUNDRED


def to_cents(value: Amount, *, field: Optional[str] = None) -> int:
    """Round an amount to whole cents, ties away from zero."""
    scaled = _scaled(value, field)
    try:
        return int(scaled.quantize(_ONE, rounding=ROUND_HALF_UP))
    except InvalidOperation:
        # More integer digits than the decimal context can hold.
        raise InvalidNumberError(value, field=field) from None


def format_cents(cents: int, whole_style: WholeAmountStyle = WholeAmountStyle.TWO_DECIMALS) -> str:
    """Render a cent count with the trimming rules described above."""
    sign = "-" if cents < 0 else ""
    units, fraction = divmod(abs(cents), 100)

    if fraction == 0:
        if WholeAmountStyle(whole_style) is WholeAmountStyle.ONE_DECIMAL:
            return f"{sign}{units}.0"
        return f"{sign}{units}.00"
    if fraction % 10 == 0:
        return f"{sign}{units}.{fraction // 10}"
    return f"{sign}{units}.{fraction:02d}"


def canonicalize_amount(
    value: Amount,
    *,
    whole_style: WholeAmountStyle = WholeAmountStyle.TWO_DECIMALS,
    field: Optional[str] = None,
) -> str:
    """
    Return the canonical text of a monetary amount.

    Accepts int, float, Decimal or a numeric string (so canonical output can
    be fed back in). Raises InvalidNumberError for anything that is not a
    finite number, including bools, None, NaN and infinities.
    """
    return format_cents(to_cents(value, field=field), whole_style)


__all__ = [
    "Amount",
    "WholeAmountStyle",
    "to_cents",
    "format_cents",
    "canonicalize_amount",
]
