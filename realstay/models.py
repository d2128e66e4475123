"""SQLAlchemy models for persisted reviews."""
from __future__ import annotations

import uuid
from datetime import datetime
from typing import Optional

from sqlalchemy import CheckConstraint, DateTime, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from .database import Base


def _new_review_id() -> str:
    return str(uuid.uuid4())


class Review(Base):
    __tablename__ = "reviews"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_new_review_id)
    user_id: Mapped[str] = mapped_column(String(255), index=True)
    hotel_id: Mapped[str] = mapped_column(String(255), index=True)
    rating: Mapped[int] = mapped_column(Integer)
    # Stored verbatim: any rewrite would invalidate the wallet signature.
    comment: Mapped[str] = mapped_column(Text)
    wallet_address: Mapped[Optional[str]] = mapped_column(String(42), default=None)
    signature: Mapped[Optional[str]] = mapped_column(Text, default=None)
    message_hash: Mapped[Optional[str]] = mapped_column(String(64), default=None)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow, index=True)

    __table_args__ = (
        CheckConstraint("rating >= 1 AND rating <= 5", name="check_rating_range"),
        CheckConstraint(
            "(wallet_address IS NULL AND signature IS NULL AND message_hash IS NULL)"
            " OR (wallet_address IS NOT NULL AND signature IS NOT NULL AND message_hash IS NOT NULL)",
            name="check_signature_all_or_none",
        ),
    )
