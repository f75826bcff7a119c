"""X.509 certificate decoding and RSA PKCS#1 v1.5 / SHA-512 verification.

The certificate is only a carrier for the signer's public key. No chain,
expiry or revocation checks happen here; trust in the certificate is
established by the caller.
"""
from __future__ import annotations

import base64
import binascii
import hashlib
from dataclasses import dataclass
from typing import Union

from cryptography import x509
from cryptography.exceptions import InvalidSignature, UnsupportedAlgorithm
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.asymmetric import dsa, ec, ed448, ed25519, padding, rsa, utils

from .exceptions import CertificateParseError, MalformedSignatureError, UnsupportedKeyTypeError
from .message import encode_message
from .models import CertificateInfo

_PEM_MARKER = "-----BEGIN"

_KEY_TYPE_NAMES = (
    (ec.EllipticCurvePublicKey, "EC"),
    (ed25519.Ed25519PublicKey, "Ed25519"),
    (ed448.Ed448PublicKey, "Ed448"),
    (dsa.DSAPublicKey, "DSA"),
)


def _b64decode_strict(value: Union[str, bytes]) -> bytes:
    if isinstance(value, bytes):
        value = value.decode("ascii", errors="strict")
    compact = "".join(value.split())
    return base64.b64decode(compact, validate=True)


def decode_certificate(public_key: Union[str, bytes]) -> x509.Certificate:
    """
    Parse the request's PublicKey field into an X.509 certificate.

    Accepts base64 DER (the signer's format) or PEM text.
    """
    if isinstance(public_key, bytes):
        try:
            public_key = public_key.decode("ascii")
        except UnicodeDecodeError as exc:
            raise CertificateParseError("Certificate is not ASCII text") from exc
    text = public_key.strip()
    if not text:
        raise CertificateParseError("Certificate is empty")

    if text.startswith(_PEM_MARKER):
        try:
            return x509.load_pem_x509_certificate(text.encode("ascii"))
        except ValueError as exc:
            raise CertificateParseError(f"Invalid PEM certificate: {exc}") from exc

    try:
        der = _b64decode_strict(text)
    except (binascii.Error, ValueError) as exc:
        raise CertificateParseError(f"Certificate is not valid base64: {exc}") from exc
    try:
        return x509.load_der_x509_certificate(der)
    except ValueError as exc:
        raise CertificateParseError(f"Invalid DER certificate: {exc}") from exc


def _key_type_name(public_key: object) -> str:
    for key_cls, name in _KEY_TYPE_NAMES:
        if isinstance(public_key, key_cls):
            return name
    return type(public_key).__name__


def extract_rsa_public_key(certificate: x509.Certificate) -> rsa.RSAPublicKey:
    """Return the certificate's subject public key, which must be RSA."""
    try:
        public_key = certificate.public_key()
    except (UnsupportedAlgorithm, ValueError) as exc:
        raise UnsupportedKeyTypeError(
            certificate.public_key_algorithm_oid.dotted_string
        ) from exc
    if not isinstance(public_key, rsa.RSAPublicKey):
        raise UnsupportedKeyTypeError(_key_type_name(public_key))
    return public_key


def certificate_info(certificate: x509.Certificate, public_key: rsa.RSAPublicKey) -> CertificateInfo:
    return CertificateInfo(
        subject=certificate.subject.rfc4514_string(),
        issuer=certificate.issuer.rfc4514_string(),
        serial_number=certificate.serial_number,
        not_valid_before=certificate.not_valid_before_utc,
        not_valid_after=certificate.not_valid_after_utc,
        key_size=public_key.key_size,
    )


@dataclass(frozen=True, slots=True)
class VerificationKey:
    """Certificate and RSA key decoded once and shared, read-only, by a batch."""

    certificate: x509.Certificate
    public_key: rsa.RSAPublicKey
    info: CertificateInfo

    @property
    def signature_length(self) -> int:
        return signature_length(self.public_key)


def load_verification_key(public_key: Union[str, bytes]) -> VerificationKey:
    """Decode the PublicKey field into a reusable VerificationKey."""
    certificate = decode_certificate(public_key)
    rsa_key = extract_rsa_public_key(certificate)
    return VerificationKey(
        certificate=certificate,
        public_key=rsa_key,
        info=certificate_info(certificate, rsa_key),
    )


def signature_length(public_key: rsa.RSAPublicKey) -> int:
    """Byte length of a PKCS#1 v1.5 signature for this key."""
    return (public_key.key_size + 7) // 8


def decode_signature(signature_b64: Union[str, bytes]) -> bytes:
    """Decode SignatureOfProof from base64."""
    try:
        signature = _b64decode_strict(signature_b64)
    except (binascii.Error, ValueError) as exc:
        raise MalformedSignatureError(f"Signature is not valid base64: {exc}") from exc
    if not signature:
        raise MalformedSignatureError("Signature is empty", actual_length=0)
    return signature


def message_digest(message: str) -> bytes:
    """SHA-512 digest of the UTF-8 encoded message."""
    return hashlib.sha512(encode_message(message)).digest()


def verify_digest(public_key: rsa.RSAPublicKey, digest: bytes, signature: bytes) -> bool:
    """
    Check an RSASSA-PKCS1-v1_5 signature over a precomputed SHA-512 digest.

    A well-formed signature that does not match returns False. A signature
    whose length does not fit the key raises MalformedSignatureError.
    """
    expected = signature_length(public_key)
    if len(signature) != expected:
        raise MalformedSignatureError(
            f"Signature is {len(signature)} bytes, expected {expected} for a "
            f"{public_key.key_size}-bit key",
            expected_length=expected,
            actual_length=len(signature),
        )
    try:
        public_key.verify(
            signature,
            digest,
            padding.PKCS1v15(),
            utils.Prehashed(hashes.SHA512()),
        )
    except InvalidSignature:
        return False
    return True


def verify_signature(public_key: rsa.RSAPublicKey, message: str, signature: bytes) -> bool:
    """Hash ``message`` with SHA-512 and verify ``signature`` against it."""
    return verify_digest(public_key, message_digest(message), signature)


__all__ = [
    "VerificationKey",
    "decode_certificate",
    "extract_rsa_public_key",
    "certificate_info",
    "load_verification_key",
    "signature_length",
    "decode_signature",
    "message_digest",
    "verify_digest",
    "verify_signature",
]
