"""Per-review signature badges for a rendered review list."""
from __future__ import annotations

import asyncio
import logging
from typing import Any, Awaitable, Callable, Dict, Iterable, Mapping, Optional

from .canonical import ReviewMessage
from .signatures import SignatureStatus, signature_claim
from .verification import VerificationResult

logger = logging.getLogger(__name__)

VerifyCall = Callable[[ReviewMessage, str, str], Awaitable[VerificationResult]]
ChangeListener = Callable[[str, SignatureStatus], None]


class SignatureBadges:
    """Tracks ``review_id -> SignatureStatus`` for the reviews on screen.

    Each signed review is verified by its own call and moves from PENDING to
    VALID or INVALID on its own; calls may finish in any order. A failed call
    marks only its review INVALID. Cancelling ``refresh`` leaves unfinished
    reviews PENDING.

    Args:
        verify:    Coroutine function, typically ``VerifierClient.verify``.
        on_change: Optional listener notified on every status change.
    """

    def __init__(self, verify: VerifyCall, on_change: Optional[ChangeListener] = None) -> None:
        self._verify = verify
        self._on_change = on_change
        self._statuses: Dict[str, SignatureStatus] = {}

    def status(self, review_id: str) -> Optional[SignatureStatus]:
        return self._statuses.get(str(review_id))

    def snapshot(self) -> Dict[str, SignatureStatus]:
        return dict(self._statuses)

    def _set(self, review_id: str, status: SignatureStatus) -> None:
        self._statuses[review_id] = status
        if self._on_change is not None:
            self._on_change(review_id, status)

    async def refresh(self, reviews: Iterable[Mapping[str, Any]]) -> Dict[str, SignatureStatus]:
        """Mark every review, then verify the signed ones concurrently."""
        calls = []
        for review in reviews:
            review_id = str(review["id"])
            claim = signature_claim(dict(review))
            if claim is None:
                self._set(review_id, SignatureStatus.UNSIGNED)
                continue
            self._set(review_id, SignatureStatus.PENDING)
            wallet_address, signature = claim
            calls.append(self._resolve(review_id, review, wallet_address, signature))

        await asyncio.gather(*calls)
        return self.snapshot()

    async def _resolve(self, review_id: str, review: Mapping[str, Any], wallet_address: str, signature: str) -> None:
        try:
            message = ReviewMessage(
                user_id=review.get("user_id"),
                hotel_id=review.get("hotel_id"),
                rating=review.get("rating"),
                comment=review.get("comment"),
            )
            result = await self._verify(message, signature, wallet_address)
        except Exception:
            logger.warning("Verification of review %s failed", review_id, exc_info=True)
            self._set(review_id, SignatureStatus.INVALID)
            return
        self._set(review_id, SignatureStatus.VALID if result.valid else SignatureStatus.INVALID)
