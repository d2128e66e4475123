"""Async HTTP clients for the reviews store and the signature verifier."""
from __future__ import annotations

from typing import Any, Dict, List, Optional
from urllib.parse import quote

import httpx

from .canonical import ReviewMessage
from .config import get_settings
from .exceptions import ServiceError
from .signatures import SignedReview
from .verification import VerificationResult


class _ServiceClient:
    """Shared plumbing: owns its ``httpx.AsyncClient`` unless one is injected."""

    def __init__(self, base_url: str, client: Optional[httpx.AsyncClient], timeout: Optional[float]) -> None:
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(
            base_url=base_url,
            timeout=timeout if timeout is not None else get_settings().http_timeout,
        )

    async def _send(self, method: str, url: str, **kwargs: Any) -> httpx.Response:
        try:
            return await self._client.request(method, url, **kwargs)
        except httpx.HTTPError as exc:
            raise ServiceError(f"{method} {url} failed: {exc}") from exc

    @staticmethod
    def _json(response: httpx.Response) -> Any:
        try:
            return response.json()
        except ValueError as exc:
            raise ServiceError(
                f"Non-JSON response ({response.status_code}) from {response.request.url}",
                response.status_code,
            ) from exc

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    async def __aenter__(self):
        return self

    async def __aexit__(self, *args) -> None:
        await self.aclose()


class VerifierClient(_ServiceClient):
    def __init__(
        self,
        base_url: Optional[str] = None,
        client: Optional[httpx.AsyncClient] = None,
        timeout: Optional[float] = None,
    ) -> None:
        super().__init__(base_url or get_settings().verifier_service_url, client, timeout)

    async def verify(self, message: ReviewMessage, signature: str, wallet_address: str) -> VerificationResult:
        """Call the verification endpoint.

        Raises:
            ServiceError: On transport failure, a non-200 answer, or a body
                without a ``valid`` flag.
        """
        response = await self._send(
            "POST",
            "/verify-review-signature",
            json={
                "message": message.canonical_dict(),
                "signature": signature,
                "wallet_address": wallet_address,
            },
        )
        body = self._json(response)
        if response.status_code != 200 or not isinstance(body, dict) or "valid" not in body:
            error = body.get("error") if isinstance(body, dict) else None
            raise ServiceError(f"Verification failed: {error or response.status_code}", response.status_code)
        return VerificationResult(
            valid=body["valid"] is True,
            recovered_address=body.get("recoveredAddress"),
            error=body.get("error"),
        )


class ReviewsClient(_ServiceClient):
    def __init__(
        self,
        base_url: Optional[str] = None,
        client: Optional[httpx.AsyncClient] = None,
        timeout: Optional[float] = None,
    ) -> None:
        super().__init__(base_url or get_settings().reviews_service_url, client, timeout)

    async def create_review(
        self,
        user_id: str,
        hotel_id: str,
        rating: int,
        comment: str,
        signed: SignedReview,
    ) -> Dict[str, Any]:
        payload: Dict[str, Any] = {
            "user_id": user_id,
            "hotel_id": hotel_id,
            "rating": rating,
            "comment": comment,
            **signed.as_columns(),
        }
        response = await self._send("POST", "/reviews", json=payload)
        body = self._json(response)
        if response.status_code != 201:
            detail = body.get("detail", body) if isinstance(body, dict) else body
            raise ServiceError(f"Failed to submit review: {detail}", response.status_code)
        return body

    async def list_hotel_reviews(self, hotel_id: str) -> List[Dict[str, Any]]:
        response = await self._send("GET", f"/reviews/hotel/{quote(hotel_id, safe='')}")
        body = self._json(response)
        if response.status_code != 200:
            raise ServiceError(f"Failed to load reviews: {body}", response.status_code)
        return body
