"""Proof-of-approval signature verification for validation results."""

from .amounts import WholeAmountStyle, canonicalize_amount, format_cents, to_cents
from .message import build_canonical_message, encode_message, render_code
from .signature import (
    VerificationKey,
    decode_certificate,
    decode_signature,
    extract_rsa_public_key,
    load_verification_key,
    message_digest,
    verify_digest,
    verify_signature,
)
from .batch import ProofBatchVerifier, verify_item, verify_request
from .models import (
    BatchVerificationReport,
    CertificateInfo,
    SignedRequest,
    ValidationResult,
    VerificationOutcome,
)
from .loader import load_request, parse_request
from .config import ApprovalProofSettings, load_settings
from .exceptions import (
    ApprovalProofError,
    CertificateParseError,
    InvalidFieldError,
    InvalidNumberError,
    MalformedSignatureError,
    MissingFieldError,
    RequestLoadError,
    UnsupportedKeyTypeError,
)

__all__ = [
    # Amounts
    "WholeAmountStyle",
    "canonicalize_amount",
    "format_cents",
    "to_cents",
    # Canonical message
    "build_canonical_message",
    "encode_message",
    "render_code",
    # Signatures
    "VerificationKey",
    "decode_certificate",
    "decode_signature",
    "extract_rsa_public_key",
    "load_verification_key",
    "message_digest",
    "verify_digest",
    "verify_signature",
    # Batches
    "ProofBatchVerifier",
    "verify_item",
    "verify_request",
    # Models
    "BatchVerificationReport",
    "CertificateInfo",
    "SignedRequest",
    "ValidationResult",
    "VerificationOutcome",
    # Loading
    "load_request",
    "parse_request",
    # Settings
    "ApprovalProofSettings",
    "load_settings",
    # Errors
    "ApprovalProofError",
    "CertificateParseError",
    "InvalidFieldError",
    "InvalidNumberError",
    "MalformedSignatureError",
    "MissingFieldError",
    "RequestLoadError",
    "UnsupportedKeyTypeError",
]
