"""Unit tests for schema validation."""
import pytest
from pydantic import ValidationError

from realstay.schemas import ReviewCreate, SignatureCheckRead, VerifyRequest
from realstay.signatures import UNSIGNED, Signed, SignatureStatus

ADDRESS = "0x2c7536E3605D9C16a7a3D7b1898e529396a65c23"
SIGNATURE = "0x" + "ab" * 65
MESSAGE_HASH = "c" * 64


class TestReviewSchemas:
    """Test review-related schemas."""

    def test_review_create_unsigned(self):
        """Test review creation without a signature."""
        review = ReviewCreate(user_id="u1", hotel_id="h1", rating=5, comment="Excellent stay!")

        assert review.rating == 5
        assert review.signed() is UNSIGNED

    def test_review_create_signed(self):
        """Test review creation with a full signature."""
        review = ReviewCreate(
            user_id="u1",
            hotel_id="h1",
            rating=4,
            comment="Good",
            wallet_address=ADDRESS,
            signature=SIGNATURE,
            message_hash=MESSAGE_HASH,
        )

        assert review.signed() == Signed(ADDRESS, SIGNATURE, MESSAGE_HASH)

    def test_review_create_partial_signature(self):
        """All three signature fields or none."""
        with pytest.raises(ValidationError):
            ReviewCreate(user_id="u1", hotel_id="h1", rating=4, comment="Good", signature=SIGNATURE)

    def test_review_create_bad_formats(self):
        """Test malformed signature fields are rejected."""
        base = {"user_id": "u1", "hotel_id": "h1", "rating": 4, "comment": "Good"}
        for field, value in (("wallet_address", "0x123"), ("signature", "deadbeef"), ("message_hash", "XYZ")):
            with pytest.raises(ValidationError):
                ReviewCreate(**base, **{field: value})

    def test_review_rating_validation(self):
        """Test review rating must be between 1 and 5."""
        with pytest.raises(ValidationError):
            ReviewCreate(user_id="u1", hotel_id="h1", rating=0, comment="Too low")

        with pytest.raises(ValidationError):
            ReviewCreate(user_id="u1", hotel_id="h1", rating=6, comment="Too high")


class TestVerificationSchemas:
    """Test verification request and result schemas."""

    def test_verify_request(self):
        """Test a valid verification request."""
        request = VerifyRequest.model_validate(
            {
                "message": {"type": "realstay.review.v1", "user_id": "u1", "hotel_id": "h1", "rating": 3, "comment": "x"},
                "signature": SIGNATURE,
                "wallet_address": ADDRESS,
            }
        )

        assert request.message.rating == 3

    def test_verify_request_empty_signature(self):
        """Test an empty signature is rejected."""
        with pytest.raises(ValidationError):
            VerifyRequest.model_validate(
                {
                    "message": {"user_id": "u1", "hotel_id": "h1", "rating": 3, "comment": "x"},
                    "signature": "",
                    "wallet_address": ADDRESS,
                }
            )

    def test_signature_check_uses_camel_case_address(self):
        """Test the recovered address serializes as recoveredAddress."""
        check = SignatureCheckRead(review_id="r1", status=SignatureStatus.VALID, recovered_address=ADDRESS)

        assert check.model_dump(by_alias=True, exclude_none=True, mode="json") == {
            "review_id": "r1",
            "status": "valid",
            "recoveredAddress": ADDRESS,
        }
