"""
Canonical review message.

The serialized bytes of a ReviewMessage are what a wallet signature attests
to, so signer and verifier MUST produce byte-identical output for the same
fields. The format is the browser's ``JSON.stringify`` of the object literal
``{type, user_id, hotel_id, rating, comment}``:

- keys in that fixed order (insertion order, not sorted)
- no whitespace between tokens
- integers as bare JSON numbers
- non-ASCII text emitted as UTF-8, control characters escaped

Pipeline: ReviewMessage → to_bytes() → personal-sign / recover
                                    → SHA-256 → message_hash
"""

from __future__ import annotations

import hashlib
import json
from typing import Any, Dict

from pydantic import BaseModel, ConfigDict, Field, field_validator

REVIEW_MESSAGE_TYPE = "realstay.review.v1"


class ReviewMessage(BaseModel):
    """The signable payload for one review. Derived, never stored."""

    model_config = ConfigDict(frozen=True)

    user_id: str = Field(..., min_length=1, strict=True, description="Opaque reviewer identifier.")
    hotel_id: str = Field(..., min_length=1, strict=True, description="Opaque listing identifier.")
    rating: int = Field(..., ge=1, le=5, strict=True, description="Star rating, 1 to 5.")
    comment: str = Field(..., min_length=1, strict=True, description="Review text, stored verbatim.")

    @field_validator("rating", mode="before")
    @classmethod
    def normalize_integral_rating(cls, v: Any) -> Any:
        # JSON.stringify writes 5.0 as 5, so an integral float names the same message.
        if isinstance(v, float) and v.is_integer():
            return int(v)
        return v

    @field_validator("user_id", "hotel_id", "comment")
    @classmethod
    def validate_utf8_encodable(cls, v: str) -> str:
        # Lone surrogates have no UTF-8 form, so no wallet could have signed them.
        try:
            v.encode("utf-8")
        except UnicodeEncodeError as exc:
            raise ValueError("text must be valid Unicode (no lone surrogates)") from exc
        return v

    @property
    def type(self) -> str:
        return REVIEW_MESSAGE_TYPE

    def canonical_dict(self) -> Dict[str, Any]:
        """Return the payload with keys in signing order."""
        return {
            "type": REVIEW_MESSAGE_TYPE,
            "user_id": self.user_id,
            "hotel_id": self.hotel_id,
            "rating": self.rating,
            "comment": self.comment,
        }

    def to_text(self) -> str:
        return serialize(self.canonical_dict())

    def to_bytes(self) -> bytes:
        return self.to_text().encode("utf-8")

    def digest(self) -> str:
        return message_digest(self)


def serialize(payload: Dict[str, Any]) -> str:
    """Serialize a payload exactly as ``JSON.stringify`` would."""
    return json.dumps(payload, ensure_ascii=False, separators=(",", ":"), allow_nan=False)


def message_digest(message: ReviewMessage) -> str:
    """SHA-256 of the canonical bytes, lowercase hex.

    Stored as ``message_hash`` for display and audit. It is not checked
    against the signature during verification.
    """
    return hashlib.sha256(message.to_bytes()).hexdigest()
