"""Canonical message construction for proof-of-approval signatures."""
from __future__ import annotations

import math
from decimal import Decimal
from typing import Any, Mapping, Union

from .amounts import WholeAmountStyle, canonicalize_amount
from .exceptions import MissingFieldError
from .models import ValidationResult

MESSAGE_ENCODING = "utf-8"


def render_code(code: Any) -> str:
    """
    Render ReasonNotApprovedCode in its plain textual form.

    Integral floats drop the fractional part (``101.0`` -> ``101``) the way the
    signer's number-to-string conversion does.
    """
    if code is None:
        raise MissingFieldError("ReasonNotApprovedCode")
    if isinstance(code, float) and math.isfinite(code) and code.is_integer():
        return str(int(code))
    if isinstance(code, Decimal):
        return format(code, "f")
    return str(code)


def build_canonical_message(
    result: Union[ValidationResult, Mapping[str, Any]],
    *,
    whole_style: WholeAmountStyle = WholeAmountStyle.TWO_DECIMALS,
) -> str:
    """
    Build the delimiter-free message a validation result was signed over.

    Field order:
      ValidationRequestId, Approved|NotApproved, ReasonNotApproved (or ""),
      ReasonNotApprovedCode, TotalValue, TotalVat
    """
    result = ValidationResult.coerce(result)
    if not result.validation_request_id:
        raise MissingFieldError("ValidationRequestId")

    return "".join(
        (
            result.validation_request_id,
            result.approval_token,
            result.reason_not_approved or "",
            render_code(result.reason_not_approved_code),
            canonicalize_amount(result.total_value, whole_style=whole_style, field="TotalValue"),
            canonicalize_amount(result.total_vat, whole_style=whole_style, field="TotalVat"),
        )
    )


def encode_message(message: str) -> bytes:
    return message.encode(MESSAGE_ENCODING)


__all__ = [
    "MESSAGE_ENCODING",
    "render_code",
    "build_canonical_message",
    "encode_message",
]
