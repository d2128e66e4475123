import asyncio
import os
from typing import Generator

import pytest
from fastapi.testclient import TestClient

os.environ.setdefault("DATABASE_URL", "sqlite:///./test.db")
os.environ.setdefault("RATE_LIMITING_ENABLED", "false")
os.environ.setdefault("METRICS_ENABLED", "false")

from realstay.config import reset_settings_cache  # noqa: E402

reset_settings_cache()

from realstay.database import Base, SessionLocal, engine  # noqa: E402
from realstay.wallets import LocalAccountWallet  # noqa: E402
from services.reviews.app import app as reviews_app  # noqa: E402
from services.verifier.app import app as verifier_app  # noqa: E402

# Well-known throwaway key from the eth-account documentation.
TEST_PRIVATE_KEY = "0x4c0883a69102937d6231471b5dbb6204fe5129617082792ae468d01a3f362318"


@pytest.fixture(autouse=True, scope="function")
def _create_test_database() -> Generator[None, None, None]:
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)


@pytest.fixture()
def db_session() -> Generator:
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture()
def wallet() -> LocalAccountWallet:
    return LocalAccountWallet(TEST_PRIVATE_KEY)


@pytest.fixture()
def sign(wallet):
    """Personal-sign raw bytes with the test wallet."""

    def _sign(message: bytes, signer: LocalAccountWallet = wallet) -> str:
        return asyncio.run(signer.sign_message(message, signer.address))

    return _sign


@pytest.fixture()
def reviews_client() -> Generator[TestClient, None, None]:
    with TestClient(reviews_app) as client:
        yield client


@pytest.fixture()
def verifier_client() -> Generator[TestClient, None, None]:
    with TestClient(verifier_app) as client:
        yield client
