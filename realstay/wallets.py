"""Wallet capabilities consumed by the review signer.

The signer never reaches for a global wallet object; it is handed something
that satisfies ``WalletSigner``. Two implementations ship here:

- ``LocalAccountWallet`` keeps a secp256k1 key in process (scripts, tests).
- ``Eip1193Wallet`` drives any EIP-1193 style provider, e.g. a bridged
  browser wallet, through ``eth_requestAccounts`` and ``personal_sign``.
"""
from __future__ import annotations

from typing import Any, Dict, List, Optional, Protocol

from eth_account import Account
from eth_account.messages import encode_defunct

from .exceptions import WalletError, WalletRejected, WalletUnavailable


class WalletSigner(Protocol):
    """An account holder that can personal-sign arbitrary bytes."""

    async def request_accounts(self) -> List[str]:
        """Ask the wallet to expose its accounts; may prompt the user."""
        ...

    async def sign_message(self, message: bytes, account: str) -> str:
        """Personal-sign ``message`` with ``account``; returns a 0x hex signature."""
        ...


class EthereumProvider(Protocol):
    async def request(self, args: Dict[str, Any]) -> Any:
        ...


class LocalAccountWallet:
    """Wallet backed by a private key held by ``eth-account``."""

    def __init__(self, private_key: Optional[str] = None) -> None:
        self._account = Account.from_key(private_key) if private_key else Account.create()

    @property
    def address(self) -> str:
        return self._account.address

    async def request_accounts(self) -> List[str]:
        return [self._account.address]

    async def sign_message(self, message: bytes, account: str) -> str:
        if account.lower() != self._account.address.lower():
            raise WalletUnavailable(f"Account {account} is not held by this wallet")
        signed = self._account.sign_message(encode_defunct(primitive=message))
        return "0x" + bytes(signed.signature).hex()


# EIP-1193 provider error codes
USER_REJECTED_REQUEST = 4001
UNAUTHORIZED = 4100
DISCONNECTED = 4900
CHAIN_DISCONNECTED = 4901


class Eip1193Wallet:
    """Adapter from an EIP-1193 provider to ``WalletSigner``.

    Provider errors carrying ``code`` 4001 become ``WalletRejected``;
    unauthorized or disconnected codes become ``WalletUnavailable``; anything
    else is wrapped in ``WalletError``.
    """

    def __init__(self, provider: Optional[EthereumProvider]) -> None:
        self._provider = provider

    async def _request(self, method: str, params: Optional[List[Any]] = None) -> Any:
        if self._provider is None:
            raise WalletUnavailable("No wallet provider available")
        args: Dict[str, Any] = {"method": method}
        if params is not None:
            args["params"] = params
        try:
            return await self._provider.request(args)
        except Exception as exc:
            raise _translate_provider_error(method, exc) from exc

    async def request_accounts(self) -> List[str]:
        accounts = await self._request("eth_requestAccounts")
        return [str(account) for account in accounts or []]

    async def sign_message(self, message: bytes, account: str) -> str:
        # personal_sign takes hex data first, then the signing account.
        signature = await self._request("personal_sign", ["0x" + message.hex(), account])
        if not isinstance(signature, str) or not signature:
            raise WalletError(f"personal_sign returned no signature: {signature!r}")
        return signature


def _translate_provider_error(method: str, exc: Exception) -> WalletError:
    code = getattr(exc, "code", None)
    message = getattr(exc, "message", None) or str(exc) or exc.__class__.__name__
    if code == USER_REJECTED_REQUEST:
        return WalletRejected(f"{method} rejected by user: {message}")
    if code in (UNAUTHORIZED, DISCONNECTED, CHAIN_DISCONNECTED):
        return WalletUnavailable(f"{method} unavailable: {message}")
    return WalletError(f"{method} failed: {message}")
