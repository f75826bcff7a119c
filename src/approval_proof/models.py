"""Typed inputs and outputs for proof-of-approval verification.

Inputs mirror the signer's JSON (PascalCase keys) as pydantic models. Outputs
are plain frozen dataclasses.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, ClassVar, Iterator, Mapping, Optional, Sequence

from pydantic import BaseModel, ConfigDict, Field, ValidationError, ValidationInfo, field_validator

from .amounts import to_cents
from .exceptions import ApprovalProofError, InvalidFieldError, MissingFieldError

APPROVED_TOKEN = "Approved"
NOT_APPROVED_TOKEN = "NotApproved"


def _raise_for_validation_error(exc: ValidationError, model: type[BaseModel]) -> None:
    """Translate the first pydantic error into an ApprovalProofError."""
    error = exc.errors()[0]
    loc = error.get("loc") or ()
    name = str(loc[0]) if loc else model.__name__
    if error.get("type") == "missing":
        raise MissingFieldError(name) from None
    raise InvalidFieldError(f"{name}: {error.get('msg', 'invalid value')}", field=name) from None


class ProofModel(BaseModel):
    """Base model for signer payloads."""

    model_config = ConfigDict(
        populate_by_name=True,
        frozen=True,
        extra="ignore",
    )

    REQUIRED_FIELDS: ClassVar[tuple[str, ...]] = ()

    @classmethod
    def from_payload(cls, data: Mapping[str, Any]):
        """Validate a raw mapping, surfacing absent fields as MissingFieldError."""
        if not isinstance(data, Mapping):
            raise InvalidFieldError(
                f"{cls.__name__} payload must be an object, got {type(data).__name__}"
            )
        for name in cls.REQUIRED_FIELDS:
            if data.get(name) is None:
                raise MissingFieldError(name)
        try:
            return cls.model_validate(dict(data))
        except ValidationError as exc:
            _raise_for_validation_error(exc, cls)


class ValidationResult(ProofModel):
    """One approval decision plus its proof-of-approval signature."""

    REQUIRED_FIELDS = (
        "ValidationRequestId",
        "Approved",
        "ReasonNotApprovedCode",
        "TotalValue",
        "TotalVat",
    )

    validation_request_id: str = Field(alias="ValidationRequestId")
    approved: bool = Field(alias="Approved")
    reason_not_approved: Optional[str] = Field(default=None, alias="ReasonNotApproved")
    reason_not_approved_code: Any = Field(alias="ReasonNotApprovedCode")
    total_value: Any = Field(alias="TotalValue")
    total_vat: Any = Field(alias="TotalVat")
    signature_of_proof: Optional[str] = Field(default=None, alias="SignatureOfProof")

    @field_validator("approved", mode="before")
    @classmethod
    def parse_approved(cls, v: Any) -> Any:
        """Accept a JSON boolean or the literal approval tokens."""
        if isinstance(v, bool):
            return v
        if v == APPROVED_TOKEN:
            return True
        if v == NOT_APPROVED_TOKEN:
            return False
        raise ValueError(f"expected a boolean, '{APPROVED_TOKEN}' or '{NOT_APPROVED_TOKEN}'")

    @field_validator("reason_not_approved_code")
    @classmethod
    def check_code(cls, v: Any) -> Any:
        if v is None:
            raise MissingFieldError("ReasonNotApprovedCode")
        if isinstance(v, bool) or not isinstance(v, (str, int, float)):
            raise ValueError("expected a string or a number")
        return v

    @field_validator("total_value", "total_vat")
    @classmethod
    def check_amount(cls, v: Any, info: ValidationInfo) -> Any:
        # Keep the raw value: floats and decimals scale differently.
        alias = "TotalValue" if info.field_name == "total_value" else "TotalVat"
        to_cents(v, field=alias)
        return v

    @property
    def approval_token(self) -> str:
        return APPROVED_TOKEN if self.approved else NOT_APPROVED_TOKEN

    @classmethod
    def coerce(cls, item: Any) -> "ValidationResult":
        """Return ``item`` unchanged when already parsed, else validate it."""
        if isinstance(item, cls):
            return item
        return cls.from_payload(item)


class SignedRequest(ProofModel):
    """A certificate plus the validation results signed with its key.

    Items stay raw until verification so one malformed result cannot hide the
    outcome of the others.
    """

    REQUIRED_FIELDS = ("PublicKey", "ValidationResults")

    public_key: str = Field(alias="PublicKey")
    validation_results: list[Any] = Field(alias="ValidationResults")

    def iter_results(self) -> Iterator[tuple[int, Any]]:
        yield from enumerate(self.validation_results)


# =============================================================================
# Outputs
# =============================================================================

@dataclass(frozen=True, slots=True)
class CertificateInfo:
    """Descriptive fields of the signing certificate. No trust decision."""

    subject: str
    issuer: str
    serial_number: int
    not_valid_before: datetime
    not_valid_after: datetime
    key_size: int

    def to_dict(self) -> dict[str, Any]:
        return {
            "subject": self.subject,
            "issuer": self.issuer,
            "serialNumber": format(self.serial_number, "x"),
            "notValidBefore": self.not_valid_before.isoformat(),
            "notValidAfter": self.not_valid_after.isoformat(),
            "keySize": self.key_size,
        }


@dataclass(frozen=True, slots=True)
class VerificationOutcome:
    """Verification result for one validation result, in input position."""

    id: Optional[str]
    canonical_message: Optional[str]
    is_valid: bool
    message_digest: Optional[bytes] = None
    error_code: Optional[str] = None
    error_message: Optional[str] = None

    @property
    def errored(self) -> bool:
        return self.error_code is not None

    @classmethod
    def from_error(
        cls,
        error: ApprovalProofError,
        *,
        id: Optional[str] = None,
        canonical_message: Optional[str] = None,
        message_digest: Optional[bytes] = None,
    ) -> "VerificationOutcome":
        return cls(
            id=id,
            canonical_message=canonical_message,
            is_valid=False,
            message_digest=message_digest,
            error_code=error.error_code,
            error_message=error.message,
        )

    def to_dict(self) -> dict[str, Any]:
        result: dict[str, Any] = {
            "id": self.id,
            "isValid": self.is_valid,
            "canonicalMessage": self.canonical_message,
        }
        if self.message_digest is not None:
            result["messageDigest"] = self.message_digest.hex()
        if self.errored:
            result["error"] = {"code": self.error_code, "message": self.error_message}
        return result


@dataclass(frozen=True, slots=True)
class BatchVerificationReport:
    certificate: CertificateInfo
    outcomes: Sequence[VerificationOutcome] = field(default_factory=tuple)

    @property
    def total(self) -> int:
        return len(self.outcomes)

    @property
    def valid(self) -> int:
        return sum(1 for outcome in self.outcomes if outcome.is_valid)

    @property
    def errored(self) -> int:
        return sum(1 for outcome in self.outcomes if outcome.errored)

    @property
    def invalid(self) -> int:
        return self.total - self.valid

    @property
    def all_valid(self) -> bool:
        return self.valid == self.total

    def iter_invalid(self) -> Iterator[VerificationOutcome]:
        for outcome in self.outcomes:
            if not outcome.is_valid:
                yield outcome

    def to_dict(self) -> dict[str, Any]:
        return {
            "certificate": self.certificate.to_dict(),
            "summary": {
                "total": self.total,
                "valid": self.valid,
                "invalid": self.invalid,
                "errored": self.errored,
            },
            "results": [outcome.to_dict() for outcome in self.outcomes],
        }


__all__ = [
    "APPROVED_TOKEN",
    "NOT_APPROVED_TOKEN",
    "ProofModel",
    "ValidationResult",
    "SignedRequest",
    "CertificateInfo",
    "VerificationOutcome",
    "BatchVerificationReport",
]
