"""
Content addressing and signing over canonical bytes.

Hashes and signatures cover the *uncompressed* canonical encoding, so they
do not depend on zstd output, which is only deterministic within one
compressor build.

SECURITY: HMAC secrets and Ed25519 private keys MUST come from a secrets
manager. Never hardcode or commit them.
"""

import base64
import hashlib
import hmac
import uuid
from datetime import datetime, timezone
from typing import Any

from cryptography.exceptions import InvalidSignature
from cryptography.hazmat.primitives.asymmetric import ed25519

from .core import serialize


def _canonical_bytes(value: Any) -> bytes:
    return serialize(value, compress=False)


def content_hash(value: Any) -> str:
    """
    SHA-256 of the canonical encoding of a value.

    Returns:
        "sha256:<hex>" formatted hash
    """
    digest = hashlib.sha256(_canonical_bytes(value)).hexdigest()
    return f"sha256:{digest}"


def _signature_record(
    algorithm: str,
    signature: bytes,
    content: bytes,
    signer_id: str,
    key_id: str,
) -> dict[str, Any]:
    return {
        "signature_id": f"sig-{uuid.uuid4()}",
        "signer_id": signer_id,
        "algorithm": algorithm,
        "public_key_id": key_id,
        "signature_value": base64.b64encode(signature).decode("ascii"),
        "signed_at": datetime.now(timezone.utc).isoformat(),
        "content_hash": f"sha256:{hashlib.sha256(content).hexdigest()}",
    }


def sign_hmac(
    value: Any,
    secret: str,
    signer_id: str = "transit-canon",
    key_id: str = "default",
) -> dict[str, Any]:
    """
    Sign a value's canonical bytes with HMAC-SHA256.

    Args:
        value: Any value serialize accepts
        secret: HMAC shared secret (must match verifier)
        signer_id: Identity of the signer
        key_id: Key identifier for key rotation support

    Returns:
        Signature dict

    Raises:
        ValueError: If secret is empty
    """
    if not secret:
        raise ValueError("HMAC secret must not be empty")

    content = _canonical_bytes(value)
    mac = hmac.new(secret.encode("utf-8"), content, hashlib.sha256)
    return _signature_record("hmac-sha256", mac.digest(), content, signer_id, key_id)


def verify_hmac(value: Any, signature: dict[str, Any], secret: str) -> bool:
    """
    Check an HMAC-SHA256 signature dict against a value.
    """
    if not secret or signature.get("algorithm") != "hmac-sha256":
        return False
    signature_value = signature.get("signature_value")
    if not signature_value:
        return False

    expected = base64.b64encode(
        hmac.new(secret.encode("utf-8"), _canonical_bytes(value), hashlib.sha256).digest()
    ).decode("ascii")
    return hmac.compare_digest(expected, signature_value)


def sign_ed25519(
    value: Any,
    private_key: ed25519.Ed25519PrivateKey,
    signer_id: str = "transit-canon",
    key_id: str = "default",
) -> dict[str, Any]:
    """
    Sign a value's canonical bytes with an Ed25519 private key.
    """
    content = _canonical_bytes(value)
    return _signature_record("ed25519", private_key.sign(content), content, signer_id, key_id)


def verify_ed25519(
    value: Any,
    signature: dict[str, Any],
    public_key: ed25519.Ed25519PublicKey,
) -> bool:
    """
    Check an Ed25519 signature dict against a value.
    """
    if signature.get("algorithm") != "ed25519":
        return False
    try:
        raw = base64.b64decode(signature.get("signature_value") or "", validate=True)
        public_key.verify(raw, _canonical_bytes(value))
    except (InvalidSignature, ValueError):
        return False
    return True
