"""Unit tests for the AES-128-CBC cipher session."""

from __future__ import annotations

import pytest

from broadlink_lan.protocol.cipher import CipherSession, Padding
from broadlink_lan.protocol.constants import BOOTSTRAP_KEY, PROTOCOL_IV
from broadlink_lan.protocol.exceptions import DecryptError
from tests.fixtures.reference_packets import COMMAND_BOOTSTRAP_32, COMMAND_BOOTSTRAP_32_PAYLOAD, SESSION_KEY

# Test constants
BLOCK = 16  # AES block size in bytes
AUTH_PAYLOAD_LENGTH = 0x50  # Block aligned; PKCS7 adds a full block, zero padding adds none


class TestConstruction:
    """Tests for CipherSession construction."""

    def test_bootstrap_uses_well_known_key_and_iv(self) -> None:
        """Test bootstrap session carries the fixed key and IV."""
        session = CipherSession.bootstrap()

        assert session.key == BOOTSTRAP_KEY
        assert session.iv == PROTOCOL_IV
        assert session.padding is Padding.PKCS7

    def test_bootstrap_with_zero_padding(self) -> None:
        """Test bootstrap honours the padding argument."""
        assert CipherSession.bootstrap(Padding.ZERO).padding is Padding.ZERO

    def test_padding_accepts_string_value(self) -> None:
        """Test padding given as its string value is coerced."""
        session = CipherSession(SESSION_KEY, padding="zero")  # type: ignore[arg-type]
        assert session.padding is Padding.ZERO

    @pytest.mark.parametrize("length", [0, 15, 17, 32])
    def test_rejects_bad_key_length(self, length: int) -> None:
        """Test keys other than 16 bytes are refused."""
        with pytest.raises(ValueError, match="Key must be 16 bytes"):
            CipherSession(bytes(length))

    def test_rejects_bad_iv_length(self) -> None:
        """Test IVs other than 16 bytes are refused."""
        with pytest.raises(ValueError, match="IV must be 16 bytes"):
            CipherSession(SESSION_KEY, iv=bytes(8))

    def test_with_key_keeps_iv_and_padding(self) -> None:
        """Test with_key swaps only the key."""
        bootstrap = CipherSession.bootstrap(Padding.ZERO)

        session = bootstrap.with_key(SESSION_KEY)

        assert session.key == SESSION_KEY
        assert session.iv == bootstrap.iv
        assert session.padding is Padding.ZERO
        assert bootstrap.key == BOOTSTRAP_KEY

    def test_repr_hides_key(self) -> None:
        """Test repr never contains key material."""
        text = repr(CipherSession(SESSION_KEY))

        assert SESSION_KEY.hex() not in text
        assert "bootstrap=False" in text
        assert "bootstrap=True" in repr(CipherSession.bootstrap())


class TestPadding:
    """Tests for block padding."""

    @pytest.mark.parametrize(
        "length,expected",
        [(0, 16), (1, 16), (15, 16), (16, 32), (AUTH_PAYLOAD_LENGTH, AUTH_PAYLOAD_LENGTH + BLOCK)],
    )
    def test_pkcs7_always_adds_padding(self, length: int, expected: int) -> None:
        """Test PKCS7 pads to the next block, adding a block when aligned."""
        assert len(CipherSession(SESSION_KEY).pad(bytes(length))) == expected

    @pytest.mark.parametrize(
        "length,expected",
        [(0, 0), (1, 16), (15, 16), (16, 16), (17, 32), (AUTH_PAYLOAD_LENGTH, AUTH_PAYLOAD_LENGTH)],
    )
    def test_zero_padding_only_fills_partial_blocks(self, length: int, expected: int) -> None:
        """Test zero padding leaves aligned input unchanged."""
        padded = CipherSession(SESSION_KEY, padding=Padding.ZERO).pad(b"\x01" * length)

        assert len(padded) == expected
        assert padded[length:] == bytes(expected - length)


class TestEncryptDecrypt:
    """Tests for encrypt/decrypt."""

    @pytest.mark.parametrize("plaintext", [b"", b"hello", bytes(range(16)), bytes(range(100))])
    def test_pkcs7_round_trip(self, plaintext: bytes) -> None:
        """Test PKCS7 decrypt restores the exact plaintext."""
        session = CipherSession(SESSION_KEY)
        assert session.decrypt(session.encrypt(plaintext)) == plaintext

    def test_zero_padding_returns_padded_plaintext(self) -> None:
        """Test zero padding cannot be stripped, so decrypt keeps it."""
        session = CipherSession(SESSION_KEY, padding=Padding.ZERO)

        decrypted = session.decrypt(session.encrypt(b"hello"))

        assert decrypted == b"hello" + bytes(11)

    def test_ciphertext_is_block_aligned(self) -> None:
        """Test ciphertext length is a multiple of the block size."""
        ciphertext = CipherSession(SESSION_KEY).encrypt(b"x" * 21)
        assert len(ciphertext) % BLOCK == 0

    def test_fixed_iv_is_deterministic(self) -> None:
        """Test equal plaintexts encrypt identically under the fixed IV."""
        session = CipherSession(SESSION_KEY)
        assert session.encrypt(b"same") == session.encrypt(b"same")

    def test_bootstrap_reference_ciphertext(self) -> None:
        """Test the bootstrap key and protocol IV produce the reference ciphertext."""
        ciphertext = CipherSession.bootstrap(Padding.ZERO).encrypt(COMMAND_BOOTSTRAP_32_PAYLOAD)

        assert ciphertext == COMMAND_BOOTSTRAP_32[0x38:]

    def test_different_keys_differ(self) -> None:
        """Test key actually feeds the cipher."""
        plaintext = bytes(range(32))
        assert CipherSession.bootstrap().encrypt(plaintext) != CipherSession(SESSION_KEY).encrypt(plaintext)

    def test_decrypt_not_block_aligned(self) -> None:
        """Test misaligned ciphertext raises DecryptError."""
        with pytest.raises(DecryptError) as exc_info:
            CipherSession(SESSION_KEY).decrypt(b"\x00" * 17)

        assert exc_info.value.reason == "not_block_aligned"

    def test_decrypt_invalid_pkcs7_padding(self) -> None:
        """Test a final plaintext byte of zero is invalid PKCS7 padding."""
        ciphertext = CipherSession(SESSION_KEY, padding=Padding.ZERO).encrypt(bytes(BLOCK))

        with pytest.raises(DecryptError) as exc_info:
            CipherSession(SESSION_KEY, padding=Padding.PKCS7).decrypt(ciphertext)

        assert exc_info.value.reason == "invalid_padding"

    def test_decrypt_empty_pkcs7(self) -> None:
        """Test empty ciphertext carries no PKCS7 padding."""
        with pytest.raises(DecryptError) as exc_info:
            CipherSession(SESSION_KEY).decrypt(b"")

        assert exc_info.value.reason == "invalid_padding"

    def test_decrypt_empty_zero_padding(self) -> None:
        """Test empty ciphertext decrypts to nothing in zero-padding mode."""
        assert CipherSession(SESSION_KEY, padding=Padding.ZERO).decrypt(b"") == b""
