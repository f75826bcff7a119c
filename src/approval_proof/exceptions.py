"""Exception hierarchy for approval-proof verification.

All errors raised by this package inherit from ApprovalProofError, so callers
can catch one type and still read a machine-readable code:

    from approval_proof.exceptions import ApprovalProofError

    try:
        report = verify_request(request)
    except ApprovalProofError as e:
        print(e.to_dict())

Errors marked ``fatal`` abort a whole batch (nothing can be verified without
the certificate). Everything else is recorded against the single validation
result that caused it.

All exceptions have:
- error_code: Machine-readable error code (e.g., "MISSING_FIELD")
- message: Human-readable error message
- details: Optional additional context dictionary
- to_dict(): Convert to a report-friendly dictionary
"""
from __future__ import annotations

from typing import Any, Optional


class ApprovalProofError(Exception):
    """Base exception for all approval-proof errors.

    Attributes:
        message: Human-readable error message
        error_code: Machine-readable error code
        details: Optional additional context
    """

    error_code: str = "APPROVAL_PROOF_ERROR"
    fatal: bool = False

    def __init__(
        self,
        message: str,
        error_code: Optional[str] = None,
        details: Optional[dict[str, Any]] = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        if error_code:
            self.error_code = error_code
        self.details = details or {}

    def to_dict(self) -> dict[str, Any]:
        """Convert exception to report format."""
        result = {
            "error": self.error_code,
            "message": self.message,
        }
        if self.details:
            result["details"] = self.details
        return result


# =============================================================================
# Input Errors
# =============================================================================

class InvalidNumberError(ApprovalProofError):
    """Amount is not a finite numeric value."""

    error_code = "INVALID_NUMBER"

    def __init__(
        self,
        value: Any,
        field: Optional[str] = None,
        details: Optional[dict[str, Any]] = None,
    ) -> None:
        message = f"Amount {value!r} is not a finite number"
        details = details or {}
        details["value"] = repr(value)
        if field:
            details["field"] = field
            message = f"{field}: {message}"
        super().__init__(message, details=details)


class MissingFieldError(ApprovalProofError):
    """Mandatory input field is absent."""

    error_code = "MISSING_FIELD"

    def __init__(
        self,
        field: str,
        details: Optional[dict[str, Any]] = None,
    ) -> None:
        details = details or {}
        details["field"] = field
        self.field = field
        super().__init__(f"Required field '{field}' is missing", details=details)


class InvalidFieldError(ApprovalProofError):
    """Input field is present but has an unusable type or value."""

    error_code = "INVALID_FIELD"

    def __init__(
        self,
        message: str,
        field: Optional[str] = None,
        details: Optional[dict[str, Any]] = None,
    ) -> None:
        details = details or {}
        if field:
            details["field"] = field
        super().__init__(message, details=details)


class RequestLoadError(ApprovalProofError):
    """Signed request could not be read or decoded."""

    error_code = "REQUEST_LOAD_ERROR"
    fatal = True

    def __init__(
        self,
        message: str,
        source: Optional[str] = None,
        details: Optional[dict[str, Any]] = None,
    ) -> None:
        details = details or {}
        if source:
            details["source"] = source
        super().__init__(message, details=details)


# =============================================================================
# Certificate & Signature Errors
# =============================================================================

class CertificateParseError(ApprovalProofError):
    """Public key blob is not a decodable X.509 certificate."""

    error_code = "CERTIFICATE_PARSE_ERROR"
    fatal = True


class UnsupportedKeyTypeError(ApprovalProofError):
    """Certificate carries a public key that is not RSA."""

    error_code = "UNSUPPORTED_KEY_TYPE"
    fatal = True

    def __init__(
        self,
        key_type: str,
        details: Optional[dict[str, Any]] = None,
    ) -> None:
        details = details or {}
        details["key_type"] = key_type
        details["supported_key_types"] = ["RSA"]
        super().__init__(
            f"Key type '{key_type}' not supported. Supported: RSA",
            details=details,
        )


class MalformedSignatureError(ApprovalProofError):
    """Signature bytes cannot be a PKCS#1 v1.5 signature for the key."""

    error_code = "MALFORMED_SIGNATURE"

    def __init__(
        self,
        message: str,
        expected_length: Optional[int] = None,
        actual_length: Optional[int] = None,
        details: Optional[dict[str, Any]] = None,
    ) -> None:
        details = details or {}
        if expected_length is not None:
            details["expected_length"] = expected_length
        if actual_length is not None:
            details["actual_length"] = actual_length
        super().__init__(message, details=details)


__all__ = [
    "ApprovalProofError",
    "InvalidNumberError",
    "MissingFieldError",
    "InvalidFieldError",
    "RequestLoadError",
    "CertificateParseError",
    "UnsupportedKeyTypeError",
    "MalformedSignatureError",
]
