"""Sign-then-submit orchestration for review drafts."""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Dict, Protocol, Set

from .exceptions import InvalidReviewDraft, SubmissionInProgress
from .signatures import SignedReview
from .signing import ReviewSigner

logger = logging.getLogger(__name__)


@dataclass
class ReviewDraft:
    draft_id: str
    user_id: str
    hotel_id: str
    rating: int = 5
    comment: str = ""


class ReviewStore(Protocol):
    async def create_review(
        self,
        user_id: str,
        hotel_id: str,
        rating: int,
        comment: str,
        signed: SignedReview,
    ) -> Dict[str, Any]:
        ...


class ReviewSubmitter:
    """Runs at most one sign-then-submit sequence per draft.

    The wallet prompt can take arbitrarily long, so a second ``submit`` for
    the same draft while the first is awaiting raises
    ``SubmissionInProgress`` rather than queueing a duplicate review.
    Signing problems degrade to an unsigned review; store errors propagate.
    """

    def __init__(self, signer: ReviewSigner, store: ReviewStore) -> None:
        self.signer = signer
        self.store = store
        self._in_flight: Set[str] = set()

    def is_submitting(self, draft_id: str) -> bool:
        return draft_id in self._in_flight

    async def submit(self, draft: ReviewDraft) -> Dict[str, Any]:
        _validate(draft)
        if draft.draft_id in self._in_flight:
            raise SubmissionInProgress(f"Review draft {draft.draft_id} is already being submitted")

        self._in_flight.add(draft.draft_id)
        try:
            signed = await self.signer.attempt_sign(draft.user_id, draft.hotel_id, draft.rating, draft.comment)
            review = await self.store.create_review(
                draft.user_id, draft.hotel_id, draft.rating, draft.comment, signed
            )
        finally:
            self._in_flight.discard(draft.draft_id)

        logger.info("Submitted review %s for hotel %s", review.get("id"), draft.hotel_id)
        return review


def _validate(draft: ReviewDraft) -> None:
    if not draft.comment or not draft.comment.strip():
        raise InvalidReviewDraft("Please write a review comment")
    if isinstance(draft.rating, bool) or not isinstance(draft.rating, int) or not 1 <= draft.rating <= 5:
        raise InvalidReviewDraft(f"Rating must be an integer from 1 to 5, got {draft.rating!r}")
