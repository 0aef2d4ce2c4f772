"""Database helpers and index management."""

import logging
import os
from typing import Any

from pymongo import ASCENDING, DESCENDING, MongoClient
from pymongo.errors import DuplicateKeyError, OperationFailure

logger = logging.getLogger(__name__)


def get_mongo_client() -> MongoClient:
    uri = os.environ.get("MONGODB_URI")
    if not uri:
        raise RuntimeError("MONGODB_URI must be set")
    return MongoClient(uri, tlsAllowInvalidCertificates=False)


def get_database(client: MongoClient):
    db_name = os.environ.get("MONGODB_DB")
    if db_name:
        return client[db_name]
    database = client.get_default_database()
    if database is None:
        raise RuntimeError("Database name must be provided via connection string or MONGODB_DB")
    return database


def _safe_create_index(coll, keys, **opts):
    """
    Create an index but be forgiving:
      - Ignore differing options / specs conflicts (codes 85, 86)
      - Skip if existing rows violate a unique index (code 11000)
    """
    try:
        return coll.create_index(keys, **opts)
    except DuplicateKeyError:
        logger.warning("Skipped creating index %s due to duplicate key", opts.get("name") or keys)
        return None
    except OperationFailure as exc:
        code = getattr(exc, "code", None)
        if code in (85, 86):
            # 85 IndexOptionsConflict, 86 IndexKeySpecsConflict
            logger.info("Ignored conflict for index %s (code %s)", opts.get("name") or keys, code)
            return None
        raise


def ensure_indexes(database: Any) -> None:
    users = database["users"]
    _safe_create_index(users, [("auth0_id", ASCENDING)], unique=True)
    # unique among users that have an email; missing or null emails never collide
    _safe_create_index(
        users,
        [("email", ASCENDING)],
        unique=True,
        name="email_unique_when_set",
        partialFilterExpression={"email": {"$type": "string"}},
    )

    cards = database["crypto_cards"]
    _safe_create_index(cards, [("is_active", ASCENDING), ("created_at", DESCENDING)])
    _safe_create_index(cards, [("issuer", ASCENDING)])
    _safe_create_index(cards, [("reward_token", ASCENDING)])

    # one portfolio row per user and card
    user_cards = database["user_cards"]
    _safe_create_index(
        user_cards,
        [("userId", ASCENDING), ("card_id", ASCENDING)],
        unique=True,
        name="userId_1_card_id_1",
    )
    _safe_create_index(user_cards, [("userId", ASCENDING), ("added_at", DESCENDING)])

    rewards = database["user_rewards"]
    _safe_create_index(rewards, [("userId", ASCENDING), ("earned_at", DESCENDING)])
    _safe_create_index(rewards, [("user_card_id", ASCENDING)])

    categories = database["spending_categories"]
    _safe_create_index(categories, [("name", ASCENDING)], unique=True)
