"""
core/crypto.py -- Per-vault encryption envelope.

Every vault stores its own key material: 32 random bytes, hex-encoded, created
once by generate_key_material() and never rewritten. Secret item fields
(passwords, note bodies, card numbers, CVVs) are encrypted with a key derived
from that material and stored as a self-describing text envelope:

    <nonce_hex>:<ciphertext_hex>

Cipher: AES-256-GCM (authenticated). The AES key is SHA-256(key_material);
the raw material is never used as a key directly. A fresh 96-bit nonce is
drawn for every encrypt() call, so encrypting the same plaintext twice under
the same vault yields two different envelopes.

The GCM tag (16 bytes) is appended to the ciphertext by the cryptography
library. An empty plaintext therefore still produces a non-empty envelope.

Key material is read-only after vault creation, so no locking is needed
around key access.

Layer rule: imports only core/errors.py plus stdlib and cryptography.
"""

from __future__ import annotations

import hashlib
import os
import secrets

from cryptography.exceptions import InvalidTag
from cryptography.hazmat.primitives.ciphers.aead import AESGCM

from core.errors import EnvelopeError

KEY_MATERIAL_BYTES = 32  # 64 hex chars once encoded
NONCE_LENGTH = 12  # 96-bit nonce, the GCM recommendation
_SEPARATOR = ":"


def generate_key_material() -> str:
    """Return fresh vault key material as 64 hex characters (256 bits)."""
    return secrets.token_hex(KEY_MATERIAL_BYTES)


def derive_key(key_material: str) -> bytes:
    """Derive the 256-bit AES key for a vault from its stored key material."""
    return hashlib.sha256(key_material.encode("utf-8")).digest()


def encrypt(plaintext: str, key_material: str) -> str:
    """Encrypt plaintext under the vault key and return a text envelope."""
    nonce = os.urandom(NONCE_LENGTH)
    ciphertext = AESGCM(derive_key(key_material)).encrypt(nonce, plaintext.encode("utf-8"), None)
    return f"{nonce.hex()}{_SEPARATOR}{ciphertext.hex()}"


def split_envelope(envelope: str) -> tuple[bytes, bytes]:
    """Parse an envelope into (nonce, ciphertext).

    Raises EnvelopeError if the envelope is not exactly two hex fields or the
    nonce has the wrong length.
    """
    parts = envelope.split(_SEPARATOR)
    if len(parts) != 2:
        raise EnvelopeError("Malformed envelope: expected '<nonce>:<ciphertext>'")
    try:
        nonce = bytes.fromhex(parts[0])
        ciphertext = bytes.fromhex(parts[1])
    except ValueError:
        raise EnvelopeError("Malformed envelope: fields must be hex encoded") from None
    if len(nonce) != NONCE_LENGTH or not ciphertext:
        raise EnvelopeError("Malformed envelope: bad nonce or empty ciphertext")
    return nonce, ciphertext


def decrypt(envelope: str, key_material: str) -> str:
    """Decrypt an envelope produced by encrypt() with the same key material.

    Raises EnvelopeError on a malformed envelope, the wrong key, or any
    tampering (GCM authentication failure).
    """
    nonce, ciphertext = split_envelope(envelope)
    try:
        plaintext = AESGCM(derive_key(key_material)).decrypt(nonce, ciphertext, None)
    except InvalidTag:
        raise EnvelopeError() from None
    return plaintext.decode("utf-8")
