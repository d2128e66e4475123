"""Exception hierarchy for the review signature library."""
from typing import Optional


class RealStayError(Exception):
    """Base class for all library errors."""


class IncompleteSignatureError(RealStayError, ValueError):
    """A signature triple with some, but not all, of its fields present."""


class MalformedSignatureError(RealStayError):
    """Signature bytes that cannot be decoded or recovered."""


class WalletError(RealStayError):
    """A wallet request that did not produce a result."""


class WalletUnavailable(WalletError):
    """No compatible wallet, or no account exposed by it."""


class WalletRejected(WalletError):
    """The user declined the wallet prompt."""


class ServiceError(RealStayError):
    """A RealStay service answered with an error, or not at all."""

    def __init__(self, message: str, status_code: Optional[int] = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class InvalidReviewDraft(RealStayError, ValueError):
    pass


class SubmissionInProgress(RealStayError):
    """A sign-then-submit sequence is already running for this draft."""
