"""
Wallet signature verification for reviews.

Recovery uses the EIP-191 personal-sign scheme, the same scheme a browser
wallet applies for ``personal_sign``:

    keccak256("\\x19Ethereum Signed Message:\\n" + len(msg) + msg)

The message is always rebuilt from the review's own fields. A
client-supplied message string is never trusted, so a signature over
different content cannot be passed off as valid for this review.

All functions are pure: no IO, no shared state, safe to call concurrently.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Dict, Optional, Tuple

from eth_account import Account
from eth_account.messages import encode_defunct
from eth_keys.exceptions import BadSignature
from eth_keys.exceptions import ValidationError as KeyValidationError

from .canonical import ReviewMessage
from .exceptions import MalformedSignatureError
from .signatures import SignatureStatus, signature_claim

logger = logging.getLogger(__name__)

SIGNATURE_LENGTH = 65

# Some wallets sign the displayed text with a trailing newline.
NEWLINE_SUFFIX = b"\n"

_MESSAGE_FIELDS = ("user_id", "hotel_id", "rating", "comment")


@dataclass(frozen=True)
class VerificationResult:
    valid: bool
    recovered_address: Optional[str] = None
    error: Optional[str] = None

    def to_payload(self) -> Dict[str, Any]:
        """Wire form used by the verification endpoint."""
        payload: Dict[str, Any] = {"valid": self.valid}
        if self.recovered_address is not None:
            payload["recoveredAddress"] = self.recovered_address
        if self.error is not None:
            payload["error"] = self.error
        return payload


def decode_signature(signature: str) -> bytes:
    """Decode a 0x-prefixed (or bare) hex signature into its 65 raw bytes."""
    text = signature[2:] if signature[:2].lower() == "0x" else signature
    try:
        raw = bytes.fromhex(text)
    except ValueError as exc:
        raise MalformedSignatureError(f"Signature is not valid hex: {exc}") from exc
    if len(raw) != SIGNATURE_LENGTH:
        raise MalformedSignatureError(
            f"Signature must be {SIGNATURE_LENGTH} bytes, got {len(raw)}"
        )
    return raw


def recover_address(message: bytes, signature: str) -> str:
    """Recover the checksummed address that personal-signed ``message``.

    Raises:
        MalformedSignatureError: If the signature cannot be decoded or no
            public key can be recovered from it.
    """
    raw = decode_signature(signature)
    try:
        return Account.recover_message(encode_defunct(primitive=message), signature=raw)
    except (BadSignature, KeyValidationError, ValueError) as exc:
        raise MalformedSignatureError(f"Recover failed: {exc}") from exc


def _try_recover(message: bytes, signature: str) -> Tuple[Optional[str], Optional[str]]:
    try:
        return recover_address(message, signature), None
    except MalformedSignatureError as exc:
        return None, str(exc)


def _same_address(recovered: Optional[str], claimed: str) -> bool:
    return recovered is not None and recovered.lower() == claimed.lower()


def verify_review_signature(
    message: ReviewMessage,
    signature: str,
    wallet_address: str,
    newline_fallback: bool = True,
) -> VerificationResult:
    """Check that ``signature`` over ``message`` was made by ``wallet_address``.

    Two branches, not a retry loop:
    1. Recover from the canonical bytes.
    2. Only if (1) does not yield the claimed address, recover once more from
       the canonical bytes plus a single trailing newline.

    A mismatch is a normal ``valid=False`` result. A signature that cannot be
    recovered in either branch yields ``valid=False`` with ``error`` set.
    Unexpected exceptions propagate to the caller.
    """
    canonical = message.to_bytes()

    recovered, error = _try_recover(canonical, signature)
    if _same_address(recovered, wallet_address):
        return VerificationResult(valid=True, recovered_address=recovered)

    if newline_fallback:
        retried, retry_error = _try_recover(canonical + NEWLINE_SUFFIX, signature)
        if _same_address(retried, wallet_address):
            logger.debug("Signature matched %s with trailing newline", wallet_address)
            return VerificationResult(valid=True, recovered_address=retried)
        if recovered is None:
            recovered, error = retried, retry_error

    if recovered is None:
        logger.warning("Signature recovery failed for %s: %s", wallet_address, error)
        return VerificationResult(valid=False, error=error or "Recover failed")
    return VerificationResult(valid=False, recovered_address=recovered)


def verify_stored_review(
    row: Any,
    newline_fallback: bool = True,
) -> Tuple[SignatureStatus, Optional[VerificationResult]]:
    """Verify a persisted review from its stored fields.

    Returns ``(UNSIGNED, None)`` when the row lacks a wallet address or a
    signature; verification is not attempted for those rows.
    """
    claim = signature_claim(row)
    if claim is None:
        return SignatureStatus.UNSIGNED, None

    wallet_address, signature = claim
    if isinstance(row, dict):
        fields = {name: row.get(name) for name in _MESSAGE_FIELDS}
    else:
        fields = {name: getattr(row, name, None) for name in _MESSAGE_FIELDS}
    message = ReviewMessage(**fields)
    result = verify_review_signature(message, signature, wallet_address, newline_fallback)
    status = SignatureStatus.VALID if result.valid else SignatureStatus.INVALID
    return status, result
