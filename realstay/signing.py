"""Best-effort wallet signing of reviews at submission time."""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable, Optional

from .canonical import ReviewMessage
from .exceptions import WalletRejected, WalletUnavailable
from .signatures import UNSIGNED, Signed, SignedReview
from .wallets import WalletSigner

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Notice:
    """A non-blocking message for the user (a toast in the web client)."""

    title: str
    description: str
    level: str = "info"


Notifier = Callable[[Notice], None]


def log_notice(notice: Notice) -> None:
    log = logger.warning if notice.level == "error" else logger.info
    log("%s: %s", notice.title, notice.description)


class ReviewSigner:
    """Attaches an optional wallet signature to a review.

    Signing never blocks a submission: a missing wallet, a refusal or any
    other wallet failure yields an unsigned review plus a notice.

    Args:
        wallet:  Injected wallet capability, or None when no wallet exists.
        notify:  Receiver for user-facing notices. Defaults to logging.
        account: Already-connected account, if the caller has one.
    """

    def __init__(
        self,
        wallet: Optional[WalletSigner] = None,
        notify: Optional[Notifier] = None,
        account: Optional[str] = None,
    ) -> None:
        self.wallet = wallet
        self._notify = notify or log_notice
        self._account = account

    @property
    def account(self) -> Optional[str]:
        return self._account

    async def connect(self) -> Optional[str]:
        """Ask the wallet for accounts and remember the first one."""
        if self.wallet is None:
            self._notify(Notice("Wallet not found", "Install a wallet to sign reviews (optional)."))
            return None
        try:
            accounts = await self.wallet.request_accounts()
        except WalletRejected as exc:
            self._notify(Notice("Wallet connect declined", str(exc)))
            return None
        except Exception as exc:
            logger.warning("Wallet connect failed", exc_info=True)
            self._notify(Notice("Wallet connect failed", str(exc) or "Could not connect wallet", level="error"))
            return None

        if not accounts:
            self._notify(Notice("Wallet connect failed", "The wallet exposed no accounts.", level="error"))
            return None
        self._account = accounts[0]
        self._notify(Notice("Wallet connected", self._account))
        return self._account

    async def attempt_sign(self, user_id: str, hotel_id: str, rating: int, comment: str) -> SignedReview:
        """Sign the canonical message for these fields, once, if a wallet is connected.

        Returns ``Signed`` on success and ``UNSIGNED`` otherwise; never raises
        for wallet or message problems.
        """
        if self.wallet is None or self._account is None:
            return UNSIGNED

        account = self._account
        try:
            message = ReviewMessage(user_id=user_id, hotel_id=hotel_id, rating=rating, comment=comment)
            digest = message.digest()
            signature = await self.wallet.sign_message(message.to_bytes(), account)
            return Signed(wallet_address=account, signature=signature, message_hash=digest)
        except WalletUnavailable as exc:
            logger.info("Wallet unavailable, submitting unsigned: %s", exc)
        except WalletRejected as exc:
            logger.info("Signature declined, submitting unsigned: %s", exc)
        except Exception:
            logger.warning("Sign failed, submitting unsigned", exc_info=True)

        self._notify(Notice("Signature skipped", "Continuing without wallet signature."))
        return UNSIGNED
