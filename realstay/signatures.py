"""Signature attachment states for a review.

A review is either fully signed or fully unsigned. Storage keeps the triple
as three nullable columns; in code it travels as ``Unsigned | Signed`` so a
partial state cannot be constructed.
"""
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Optional, Tuple, Union

from .exceptions import IncompleteSignatureError


class SignatureStatus(str, Enum):
    """Display state of a review's signature badge.

    UNSIGNED never runs verification. A signed review goes PENDING while its
    verification call is outstanding, then VALID or INVALID.
    """

    UNSIGNED = "unsigned"
    PENDING = "pending"
    VALID = "valid"
    INVALID = "invalid"


@dataclass(frozen=True)
class Unsigned:
    def as_columns(self) -> Dict[str, Optional[str]]:
        return {"wallet_address": None, "signature": None, "message_hash": None}


@dataclass(frozen=True)
class Signed:
    wallet_address: str
    signature: str
    message_hash: str

    def __post_init__(self) -> None:
        missing = [name for name in ("wallet_address", "signature", "message_hash") if not getattr(self, name)]
        if missing:
            raise IncompleteSignatureError(f"Signed review missing: {', '.join(missing)}")

    def as_columns(self) -> Dict[str, Optional[str]]:
        return {
            "wallet_address": self.wallet_address,
            "signature": self.signature,
            "message_hash": self.message_hash,
        }


SignedReview = Union[Unsigned, Signed]

UNSIGNED = Unsigned()


def from_columns(
    wallet_address: Optional[str],
    signature: Optional[str],
    message_hash: Optional[str],
) -> SignedReview:
    """Build the variant from nullable columns, rejecting partial triples."""
    present = [value for value in (wallet_address, signature, message_hash) if value]
    if not present:
        return UNSIGNED
    if len(present) != 3:
        raise IncompleteSignatureError(
            "wallet_address, signature and message_hash must be all present or all absent"
        )
    return Signed(wallet_address=wallet_address, signature=signature, message_hash=message_hash)  # type: ignore[arg-type]


def signature_claim(row: Any) -> Optional[Tuple[str, str]]:
    """Return ``(wallet_address, signature)`` if the row can be verified.

    Works on ORM rows, schemas and plain dicts. A row missing either value
    counts as unsigned; ``message_hash`` plays no part.
    """
    if isinstance(row, dict):
        wallet_address, signature = row.get("wallet_address"), row.get("signature")
    else:
        wallet_address = getattr(row, "wallet_address", None)
        signature = getattr(row, "signature", None)
    if not wallet_address or not signature:
        return None
    return wallet_address, signature
