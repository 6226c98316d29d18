"""
tests/test_crypto.py -- Unit tests for the per-vault encryption envelope.

Covers:
  - Key material shape (64 hex chars, fresh per call)
  - Envelope format "<nonce_hex>:<ciphertext_hex>" with a 12-byte nonce
  - Fresh nonce per call: identical plaintexts give different envelopes
  - Empty plaintext still yields a non-empty, decryptable envelope
  - Wrong key, tampered ciphertext and malformed envelopes raise EnvelopeError
"""

from __future__ import annotations

import pytest

from core import crypto
from core.errors import EnvelopeError, InvalidRequestError


class TestKeyMaterial:
    def test_key_material_is_64_hex_chars(self) -> None:
        km = crypto.generate_key_material()
        assert len(km) == 64
        int(km, 16)  # raises if not hex

    def test_key_material_is_fresh_each_call(self) -> None:
        assert crypto.generate_key_material() != crypto.generate_key_material()

    def test_derived_key_is_256_bits_and_not_the_raw_material(self) -> None:
        km = crypto.generate_key_material()
        key = crypto.derive_key(km)
        assert len(key) == 32
        assert key != bytes.fromhex(km)


class TestEnvelope:
    """encrypt() output shape and the round trip through decrypt()."""

    def test_envelope_has_nonce_and_ciphertext(self) -> None:
        envelope = crypto.encrypt("hunter2", crypto.generate_key_material())
        nonce_hex, ct_hex = envelope.split(":")
        assert len(bytes.fromhex(nonce_hex)) == crypto.NONCE_LENGTH
        assert len(ct_hex) > 0

    def test_envelope_does_not_contain_plaintext(self) -> None:
        envelope = crypto.encrypt("hunter2-plaintext", crypto.generate_key_material())
        assert "hunter2" not in envelope

    def test_same_plaintext_twice_gives_distinct_envelopes(self) -> None:
        km = crypto.generate_key_material()
        first = crypto.encrypt("same secret", km)
        second = crypto.encrypt("same secret", km)
        assert first != second
        assert crypto.decrypt(first, km) == "same secret"
        assert crypto.decrypt(second, km) == "same secret"

    def test_empty_plaintext_encrypts_to_valid_envelope(self) -> None:
        km = crypto.generate_key_material()
        envelope = crypto.encrypt("", km)
        _nonce, ciphertext = crypto.split_envelope(envelope)
        assert len(ciphertext) == 16  # GCM tag only
        assert crypto.decrypt(envelope, km) == ""

    def test_unicode_round_trip(self) -> None:
        km = crypto.generate_key_material()
        assert crypto.decrypt(crypto.encrypt("pässwörd ✓", km), km) == "pässwörd ✓"


class TestDecryptFailures:
    def test_wrong_key_material_fails(self) -> None:
        envelope = crypto.encrypt("secret", crypto.generate_key_material())
        with pytest.raises(EnvelopeError):
            crypto.decrypt(envelope, crypto.generate_key_material())

    def test_tampered_ciphertext_fails(self) -> None:
        km = crypto.generate_key_material()
        nonce_hex, ct_hex = crypto.encrypt("secret", km).split(":")
        flipped = format(int(ct_hex[0], 16) ^ 0x1, "x") + ct_hex[1:]
        with pytest.raises(EnvelopeError):
            crypto.decrypt(f"{nonce_hex}:{flipped}", km)

    @pytest.mark.parametrize(
        "envelope",
        [
            "",
            "no-separator",
            "a:b:c",
            "zz:00",
            "00ff:00ff",  # nonce too short
            "00" * 12 + ":",  # empty ciphertext
        ],
    )
    def test_malformed_envelope_rejected(self, envelope: str) -> None:
        with pytest.raises(EnvelopeError):
            crypto.decrypt(envelope, crypto.generate_key_material())

    def test_envelope_error_is_an_invalid_request(self) -> None:
        assert issubclass(EnvelopeError, InvalidRequestError)
        assert EnvelopeError.kind == "invalid_request"
