"""Pydantic schemas shared by the reviews and verifier services."""
from __future__ import annotations

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator

from .canonical import ReviewMessage
from .signatures import SignatureStatus, SignedReview, from_columns


class ReviewBase(BaseModel):
    user_id: str = Field(..., min_length=1, max_length=255)
    hotel_id: str = Field(..., min_length=1, max_length=255)
    rating: int = Field(..., ge=1, le=5)
    comment: str = Field(..., min_length=1, max_length=5000)


class ReviewCreate(ReviewBase):
    wallet_address: Optional[str] = Field(None, pattern=r"^0x[0-9a-fA-F]{40}$")
    signature: Optional[str] = Field(None, pattern=r"^0x[0-9a-fA-F]+$")
    message_hash: Optional[str] = Field(None, pattern=r"^[0-9a-f]{64}$")

    @model_validator(mode="after")
    def validate_signature_all_or_none(self) -> "ReviewCreate":
        self.signed()
        return self

    def signed(self) -> SignedReview:
        return from_columns(self.wallet_address, self.signature, self.message_hash)


class ReviewRead(ReviewBase):
    id: str
    wallet_address: Optional[str] = None
    signature: Optional[str] = None
    message_hash: Optional[str] = None
    created_at: datetime

    model_config = {"from_attributes": True}


class HotelReviewStats(BaseModel):
    hotel_id: str
    average_rating: float
    total_reviews: int


class SignatureCheckRead(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    review_id: str
    status: SignatureStatus
    recovered_address: Optional[str] = Field(None, alias="recoveredAddress")
    error: Optional[str] = None


class VerifyRequest(BaseModel):
    """Body of ``POST /verify-review-signature``.

    ``message.type`` is accepted but ignored: the canonical message always
    carries the current version tag.
    """

    message: ReviewMessage
    signature: str = Field(..., min_length=1)
    wallet_address: str = Field(..., min_length=1)


class ServicePing(BaseModel):
    status: str
    service: str
