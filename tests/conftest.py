"""Shared test fixtures: a mocked Mongo database and a dev-mode app."""
from __future__ import annotations

from collections import defaultdict
from datetime import datetime, timezone
from unittest.mock import MagicMock

import pytest
from bson import ObjectId

from enzo.app import create_app
from enzo.services.prices import TokenPrice, clear_price_cache

USER_ID = ObjectId("64b000000000000000000001")
CARD_ID = ObjectId("64c000000000000000000001")
OTHER_CARD_ID = ObjectId("64c000000000000000000002")
USER_CARD_ID = ObjectId("64d000000000000000000001")


@pytest.fixture(autouse=True)
def _fresh_price_cache():
    clear_price_cache()
    yield
    clear_price_cache()


@pytest.fixture()
def collections() -> defaultdict:
    return defaultdict(MagicMock)


@pytest.fixture()
def database(collections: defaultdict) -> MagicMock:
    db = MagicMock()
    db.__getitem__.side_effect = lambda name: collections[name]
    collections["users"].find_one.return_value = {
        "_id": USER_ID,
        "auth0_id": "dev|local",
        "email": "dev@local",
        "name": "Dev User",
    }
    return db


@pytest.fixture()
def app(monkeypatch: pytest.MonkeyPatch, database: MagicMock):
    monkeypatch.setenv("DISABLE_AUTH", "1")
    monkeypatch.delenv("ENZO_ADMIN_CLAIM", raising=False)
    monkeypatch.delenv("ENZO_ADMIN_VALUE", raising=False)
    application = create_app(database=database)
    application.config.update(TESTING=True)
    return application


@pytest.fixture()
def client(app):
    return app.test_client()


@pytest.fixture()
def sample_card() -> dict:
    return {
        "_id": CARD_ID,
        "name": "Nexo Card",
        "issuer": "Nexo",
        "card_tier": None,
        "annual_fee": 0,
        "rewards_rate": {"default": 2},
        "reward_token": "NEXO",
        "staking_required": 0,
        "benefits": ["No monthly fees"],
        "is_active": True,
        "created_at": datetime(2024, 5, 1, tzinfo=timezone.utc),
    }


@pytest.fixture()
def other_card() -> dict:
    return {
        "_id": OTHER_CARD_ID,
        "name": "Crypto.com Visa",
        "issuer": "Crypto.com",
        "annual_fee": 50,
        "rewards_rate": {"default": 3},
        "reward_token": "CRO",
        "staking_required": 400,
        "benefits": [],
        "is_active": True,
    }


@pytest.fixture()
def btc_price() -> TokenPrice:
    return TokenPrice(symbol="BTC", price_usd=50000.0, price_btc=1.0, change_24h=1.5)
