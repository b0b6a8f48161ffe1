"""Token sealing primitives.

Sealed token layout::

    <prefix>v1.<base64url(nonce || ciphertext || tag)>

- key: HKDF-SHA256(secret, info="mailpool/<context>/v1"), 32 bytes
- cipher: AES-256-GCM, 96-bit random nonce, 128-bit tag
- associated data: "v1:<context>"

The body alphabet is base64url without padding, so the token contains only
URL-unreserved characters and survives percent-encoding unchanged.
"""

import binascii
import json
import os
import re
from base64 import urlsafe_b64decode, urlsafe_b64encode
from typing import Any

from cryptography.exceptions import InvalidTag
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.ciphers.aead import AESGCM
from cryptography.hazmat.primitives.kdf.hkdf import HKDF

from mailpool.domain.error import DecodeError, IntegrityError

VERSION = "v1"
KEY_SIZE = 32
NONCE_SIZE = 12
TAG_SIZE = 16

_BODY_PATTERN = re.compile(r"[A-Za-z0-9_-]+")


def derive_key(secret: str, context: str) -> bytes:
    """Derive the sealing key for one context.

    Args:
        secret: Process-wide sealing secret
        context: Context label (e.g. "invite", "card")

    Returns:
        32-byte AES key
    """
    hkdf = HKDF(
        algorithm=hashes.SHA256(),
        length=KEY_SIZE,
        salt=None,
        info=f"mailpool/{context}/{VERSION}".encode("utf-8"),
    )
    return hkdf.derive(secret.encode("utf-8"))


def canonical_json(payload: dict[str, Any]) -> bytes:
    """Serialize a payload to its canonical byte form."""
    return json.dumps(
        payload, sort_keys=True, separators=(",", ":"), ensure_ascii=False
    ).encode("utf-8")


def _encode_body(data: bytes) -> str:
    return urlsafe_b64encode(data).rstrip(b"=").decode("ascii")


def _decode_body(body: str) -> bytes:
    if not _BODY_PATTERN.fullmatch(body):
        raise DecodeError()
    padded = body + "=" * (-len(body) % 4)
    try:
        data = urlsafe_b64decode(padded)
    except (binascii.Error, ValueError) as e:
        raise DecodeError() from e
    # Reject non-canonical encodings (stray bits in the last character)
    if _encode_body(data) != body:
        raise DecodeError()
    return data


def _associated_data(context: str) -> bytes:
    return f"{VERSION}:{context}".encode("utf-8")


def seal(payload: dict[str, Any], key: bytes, context: str, prefix: str = "") -> str:
    """Encrypt and authenticate a payload.

    Args:
        payload: JSON-compatible mapping
        key: Context key from derive_key
        context: Context label, bound as associated data
        prefix: Optional human-readable prefix

    Returns:
        URL-safe sealed token
    """
    nonce = os.urandom(NONCE_SIZE)
    ciphertext = AESGCM(key).encrypt(
        nonce, canonical_json(payload), _associated_data(context)
    )
    return f"{prefix}{VERSION}.{_encode_body(nonce + ciphertext)}"


def unseal(token: str, key: bytes, context: str, prefix: str = "") -> dict[str, Any]:
    """Authenticate and decrypt a sealed token.

    Args:
        token: Sealed token
        key: Context key from derive_key
        context: Context label the token must have been sealed under
        prefix: Expected prefix

    Returns:
        The payload mapping

    Raises:
        DecodeError: If the string is not a well-formed sealed token
        IntegrityError: If authentication fails
    """
    if not token or not token.startswith(prefix):
        raise DecodeError()

    version, separator, body = token[len(prefix) :].partition(".")
    if not separator or version != VERSION:
        raise DecodeError()

    data = _decode_body(body)
    if len(data) <= NONCE_SIZE + TAG_SIZE:
        raise DecodeError()

    nonce, ciphertext = data[:NONCE_SIZE], data[NONCE_SIZE:]
    try:
        plaintext = AESGCM(key).decrypt(nonce, ciphertext, _associated_data(context))
    except InvalidTag as e:
        raise IntegrityError() from e

    try:
        payload = json.loads(plaintext.decode("utf-8"))
    except (UnicodeDecodeError, json.JSONDecodeError) as e:
        raise DecodeError() from e
    if not isinstance(payload, dict):
        raise DecodeError()
    return payload
