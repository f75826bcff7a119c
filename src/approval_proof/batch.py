"""Batch verification of proof-of-approval signatures.

A batch is one SignedRequest: a single certificate and the validation results
signed with its key. The certificate is decoded once; a certificate that
cannot be decoded, or that carries a non-RSA key, aborts the batch before any
item is looked at. Every other failure is recorded against the item that
caused it and the remaining items are still verified.
"""
from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor
from typing import Any, Mapping, Optional, Union

from .amounts import WholeAmountStyle
from .config import ApprovalProofSettings
from .exceptions import ApprovalProofError, MissingFieldError
from .message import build_canonical_message
from .models import BatchVerificationReport, SignedRequest, ValidationResult, VerificationOutcome
from .signature import VerificationKey, decode_signature, load_verification_key, message_digest, verify_digest


def _raw_id(item: Any) -> Optional[str]:
    if isinstance(item, ValidationResult):
        return item.validation_request_id
    if isinstance(item, Mapping):
        value = item.get("ValidationRequestId")
        return None if value is None else str(value)
    return None


def verify_item(
    key: VerificationKey,
    item: Union[ValidationResult, Mapping[str, Any]],
    *,
    whole_style: WholeAmountStyle = WholeAmountStyle.TWO_DECIMALS,
) -> VerificationOutcome:
    """Verify one validation result. Never raises ApprovalProofError."""
    item_id = _raw_id(item)
    message: Optional[str] = None
    digest: Optional[bytes] = None
    try:
        result = ValidationResult.coerce(item)
        item_id = result.validation_request_id
        message = build_canonical_message(result, whole_style=whole_style)
        digest = message_digest(message)
        if result.signature_of_proof is None:
            raise MissingFieldError("SignatureOfProof")
        signature = decode_signature(result.signature_of_proof)
        is_valid = verify_digest(key.public_key, digest, signature)
    except ApprovalProofError as exc:
        return VerificationOutcome.from_error(
            exc,
            id=item_id,
            canonical_message=message,
            message_digest=digest,
        )
    return VerificationOutcome(
        id=item_id,
        canonical_message=message,
        is_valid=is_valid,
        message_digest=digest,
    )


class ProofBatchVerifier:
    """Verifies every validation result of a SignedRequest against its certificate."""

    def __init__(
        self,
        settings: Optional[ApprovalProofSettings] = None,
        *,
        whole_style: Optional[WholeAmountStyle] = None,
        max_workers: Optional[int] = None,
    ) -> None:
        self._settings = settings or ApprovalProofSettings()
        self._whole_style = WholeAmountStyle(whole_style or self._settings.whole_amount_style)
        self._max_workers = max(1, max_workers or self._settings.max_workers)

    @property
    def whole_style(self) -> WholeAmountStyle:
        return self._whole_style

    def verify_batch(self, request: Union[SignedRequest, Mapping[str, Any]]) -> BatchVerificationReport:
        """
        Verify all items of ``request`` and return outcomes in input order.

        Raises CertificateParseError or UnsupportedKeyTypeError when the
        certificate itself is unusable.
        """
        if not isinstance(request, SignedRequest):
            request = SignedRequest.from_payload(request)

        key = load_verification_key(request.public_key)
        items = request.validation_results

        if self._max_workers > 1 and len(items) > 1:
            with ThreadPoolExecutor(max_workers=min(self._max_workers, len(items))) as executor:
                outcomes = tuple(executor.map(lambda item: self._verify(key, item), items))
        else:
            outcomes = tuple(self._verify(key, item) for item in items)

        return BatchVerificationReport(certificate=key.info, outcomes=outcomes)

    def _verify(self, key: VerificationKey, item: Any) -> VerificationOutcome:
        return verify_item(key, item, whole_style=self._whole_style)


def verify_request(
    request: Union[SignedRequest, Mapping[str, Any]],
    settings: Optional[ApprovalProofSettings] = None,
) -> BatchVerificationReport:
    """Verify a signed request with default or supplied settings."""
    return ProofBatchVerifier(settings).verify_batch(request)


__all__ = [
    "ProofBatchVerifier",
    "verify_item",
    "verify_request",
]
