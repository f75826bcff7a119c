"""
Pytest configuration for approval-proof tests.

Keys and certificates are generated per session; nothing here talks to a real
signer.
"""
from __future__ import annotations

import base64
import json
import logging
import sys
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Any, Callable

import pytest
from cryptography import x509
from cryptography.hazmat.primitives import hashes, serialization
from cryptography.hazmat.primitives.asymmetric import ec, padding, rsa
from cryptography.x509.oid import NameOID

# Add package source to path
package_src = Path(__file__).parent.parent / "src"
if str(package_src) not in sys.path:
    sys.path.insert(0, str(package_src))

from approval_proof.amounts import WholeAmountStyle  # noqa: E402
from approval_proof.config import load_settings  # noqa: E402
from approval_proof.logging_config import BatchContextFilter  # noqa: E402
from approval_proof.message import build_canonical_message  # noqa: E402


def _self_signed_certificate(private_key, common_name: str) -> x509.Certificate:
    name = x509.Name(
        [
            x509.NameAttribute(NameOID.COUNTRY_NAME, "NL"),
            x509.NameAttribute(NameOID.ORGANIZATION_NAME, "Proof Test B.V."),
            x509.NameAttribute(NameOID.COMMON_NAME, common_name),
        ]
    )
    now = datetime.now(timezone.utc)
    return (
        x509.CertificateBuilder()
        .subject_name(name)
        .issuer_name(name)
        .public_key(private_key.public_key())
        .serial_number(x509.random_serial_number())
        .not_valid_before(now - timedelta(days=1))
        .not_valid_after(now + timedelta(days=30))
        .sign(private_key, hashes.SHA256())
    )


def certificate_b64(certificate: x509.Certificate) -> str:
    return base64.b64encode(certificate.public_bytes(serialization.Encoding.DER)).decode()


def sign_message(private_key: rsa.RSAPrivateKey, message: str) -> str:
    signature = private_key.sign(message.encode("utf-8"), padding.PKCS1v15(), hashes.SHA512())
    return base64.b64encode(signature).decode()


@pytest.fixture(scope="session")
def rsa_private_key() -> rsa.RSAPrivateKey:
    return rsa.generate_private_key(public_exponent=65537, key_size=2048)


@pytest.fixture(scope="session")
def other_rsa_private_key() -> rsa.RSAPrivateKey:
    return rsa.generate_private_key(public_exponent=65537, key_size=2048)


@pytest.fixture(scope="session")
def rsa_certificate(rsa_private_key) -> x509.Certificate:
    return _self_signed_certificate(rsa_private_key, "Approval Signer Test")


@pytest.fixture(scope="session")
def public_key_b64(rsa_certificate) -> str:
    """PublicKey field as the signer sends it: base64 DER certificate."""
    return certificate_b64(rsa_certificate)


@pytest.fixture(scope="session")
def ec_public_key_b64() -> str:
    ec_key = ec.generate_private_key(ec.SECP256R1())
    return certificate_b64(_self_signed_certificate(ec_key, "EC Signer Test"))


@pytest.fixture
def sign(rsa_private_key) -> Callable[[str], str]:
    """Sign a canonical message with the test signer key, base64 encoded."""
    return lambda message: sign_message(rsa_private_key, message)


@pytest.fixture
def make_item(sign) -> Callable[..., dict[str, Any]]:
    """Build a signed ValidationResult payload.

    The signature covers the canonical message for ``whole_style``.
    """

    def _make(
        whole_style: WholeAmountStyle = WholeAmountStyle.TWO_DECIMALS,
        **overrides: Any,
    ) -> dict[str, Any]:
        item: dict[str, Any] = {
            "ValidationRequestId": "N000680W00004700005000022061",
            "Approved": True,
            "ReasonNotApproved": None,
            "ReasonNotApprovedCode": 0,
            "TotalValue": 500.0,
            "TotalVat": 62.5,
        }
        item.update(overrides)
        item["SignatureOfProof"] = sign(build_canonical_message(item, whole_style=whole_style))
        return item

    return _make


@pytest.fixture
def make_request(public_key_b64) -> Callable[..., dict[str, Any]]:
    def _make(items: list[Any], public_key: str | None = None) -> dict[str, Any]:
        return {
            "PublicKey": public_key if public_key is not None else public_key_b64,
            "ValidationResults": items,
        }

    return _make


@pytest.fixture
def write_request(tmp_path) -> Callable[..., Path]:
    counter = {"n": 0}

    def _write(payload: Any, name: str | None = None) -> Path:
        counter["n"] += 1
        path = tmp_path / (name or f"request_{counter['n']}.json")
        path.write_text(json.dumps(payload), encoding="utf-8")
        return path

    return _write


@pytest.fixture
def restore_root_logger():
    """Drop handlers installed by setup_logging and restore the root level."""
    root = logging.getLogger()
    level = root.level
    yield root
    for handler in root.handlers[:]:
        if any(isinstance(f, BatchContextFilter) for f in handler.filters):
            root.removeHandler(handler)
            handler.close()
    root.setLevel(level)


@pytest.fixture
def clean_settings(monkeypatch, restore_root_logger):
    """Fresh settings with quiet logs."""
    monkeypatch.setenv("APPROVAL_PROOF_LOG_LEVEL", "WARNING")
    load_settings.cache_clear()
    yield
    load_settings.cache_clear()
