"""Unit tests for wallet signature verification."""
import asyncio

import pytest

from realstay.canonical import ReviewMessage
from realstay.exceptions import MalformedSignatureError
from realstay.signatures import SignatureStatus
from realstay.verification import (
    VerificationResult,
    decode_signature,
    recover_address,
    verify_review_signature,
    verify_stored_review,
)
from realstay.wallets import LocalAccountWallet

MESSAGE = ReviewMessage(user_id="user-42", hotel_id="hotel-7", rating=4, comment="Quiet room.")


def _sign(wallet: LocalAccountWallet, message: bytes) -> str:
    return asyncio.run(wallet.sign_message(message, wallet.address))


class TestDecodeSignature:
    """Test signature decoding."""

    def test_prefixed_and_bare_hex(self):
        """Test signatures decode with or without the 0x prefix."""
        raw = bytes(range(65))

        assert decode_signature("0x" + raw.hex()) == raw
        assert decode_signature(raw.hex()) == raw

    def test_wrong_length(self):
        """Test signatures must be 65 bytes."""
        with pytest.raises(MalformedSignatureError, match="65 bytes"):
            decode_signature("0xdeadbeef")

    def test_not_hex(self):
        """Test non-hex signatures are rejected."""
        with pytest.raises(MalformedSignatureError, match="not valid hex"):
            decode_signature("0x" + "zz" * 65)


class TestVerifyReviewSignature:
    """Test recovery and address comparison."""

    def test_recover_address(self):
        """Test recovery returns the signing address."""
        wallet = LocalAccountWallet()

        assert recover_address(MESSAGE.to_bytes(), _sign(wallet, MESSAGE.to_bytes())) == wallet.address

    def test_valid(self):
        """Test a matching signature is valid."""
        wallet = LocalAccountWallet()
        result = verify_review_signature(MESSAGE, _sign(wallet, MESSAGE.to_bytes()), wallet.address.lower())

        assert result == VerificationResult(valid=True, recovered_address=wallet.address)

    def test_mismatch_reports_recovered_address(self):
        """Test a mismatch reports who actually signed."""
        signer, claimed = LocalAccountWallet(), LocalAccountWallet()
        result = verify_review_signature(MESSAGE, _sign(signer, MESSAGE.to_bytes()), claimed.address)

        assert result.valid is False
        assert result.recovered_address == signer.address
        assert result.error is None

    def test_newline_fallback(self):
        """Test a signature over the text plus a newline is accepted."""
        wallet = LocalAccountWallet()
        signature = _sign(wallet, MESSAGE.to_bytes() + b"\n")

        assert verify_review_signature(MESSAGE, signature, wallet.address).valid is True

    def test_newline_fallback_can_be_disabled(self):
        """Test the newline branch can be turned off."""
        wallet = LocalAccountWallet()
        signature = _sign(wallet, MESSAGE.to_bytes() + b"\n")
        result = verify_review_signature(MESSAGE, signature, wallet.address, newline_fallback=False)

        assert result.valid is False
        assert result.recovered_address != wallet.address

    def test_only_one_trailing_newline_is_tried(self):
        """Test only a single trailing newline is tried."""
        wallet = LocalAccountWallet()
        signature = _sign(wallet, MESSAGE.to_bytes() + b"\n\n")

        assert verify_review_signature(MESSAGE, signature, wallet.address).valid is False

    def test_unrecoverable_signature(self):
        """Test undecodable signatures are invalid with an error."""
        result = verify_review_signature(MESSAGE, "0xdeadbeef", LocalAccountWallet().address)

        assert result.valid is False
        assert result.recovered_address is None
        assert "65 bytes" in result.error
        assert result.to_payload() == {"valid": False, "error": result.error}


class TestVerifyStoredReview:
    """Test verification of persisted rows."""

    def _row(self, wallet, **overrides):
        row = {
            "user_id": MESSAGE.user_id,
            "hotel_id": MESSAGE.hotel_id,
            "rating": MESSAGE.rating,
            "comment": MESSAGE.comment,
            "wallet_address": wallet.address,
            "signature": _sign(wallet, MESSAGE.to_bytes()),
            "message_hash": "0" * 64,
        }
        row.update(overrides)
        return row

    def test_unsigned_row_is_not_verified(self):
        """Test rows without a signature are not verified."""
        status, result = verify_stored_review({**self._row(LocalAccountWallet()), "signature": None})

        assert status is SignatureStatus.UNSIGNED
        assert result is None

    def test_valid_row_ignores_message_hash(self):
        """Test the stored hash plays no part in verification."""
        status, result = verify_stored_review(self._row(LocalAccountWallet()))

        assert status is SignatureStatus.VALID
        assert result.valid is True

    def test_edited_row_is_invalid(self):
        """Test an edited row no longer verifies."""
        status, result = verify_stored_review(self._row(LocalAccountWallet(), rating=5))

        assert status is SignatureStatus.INVALID
        assert result.valid is False
