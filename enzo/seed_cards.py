"""Seed spending categories and a starter card catalog."""

import logging
from datetime import datetime, timezone

from enzo.core import configure_logging, ensure_indexes, get_database, get_mongo_client, load_environment

logger = logging.getLogger(__name__)

CATEGORIES = ["General", "Dining", "Groceries", "Travel", "Shopping", "Entertainment", "Bills", "Gas"]

STARTER_CARDS = [
    {
        "name": "Crypto.com Visa Ruby Steel",
        "issuer": "Crypto.com",
        "card_tier": "Ruby Steel",
        "annual_fee": 0.0,
        "rewards_rate": {"default": 1.0},
        "reward_token": "CRO",
        "staking_required": 400.0,
        "benefits": ["100% Spotify rebate", "Up to 2% back on spending"],
        "website_url": "https://crypto.com/cards",
    },
    {
        "name": "Nexo Card",
        "issuer": "Nexo",
        "annual_fee": 0.0,
        "rewards_rate": {"default": 2.0},
        "reward_token": "NEXO",
        "staking_required": 0.0,
        "benefits": ["No monthly fees", "Cashback in NEXO or BTC"],
        "website_url": "https://nexo.com/nexo-card",
    },
    {
        "name": "Wirex Card",
        "issuer": "Wirex",
        "annual_fee": 0.0,
        "rewards_rate": {"default": 0.5},
        "reward_token": "WXT",
        "staking_required": 0.0,
        "benefits": ["Cryptoback on every purchase"],
        "website_url": "https://wirexapp.com/card",
    },
]


def main():
    load_environment()
    configure_logging()

    database = get_database(get_mongo_client())
    ensure_indexes(database)

    for name in CATEGORIES:
        database.spending_categories.update_one({"name": name}, {"$setOnInsert": {"name": name}}, upsert=True)
    logger.info("Seeded %d spending categories", len(CATEGORIES))

    now = datetime.now(timezone.utc)
    for card in STARTER_CARDS:
        database.crypto_cards.update_one(
            {"name": card["name"], "issuer": card["issuer"]},
            {
                "$set": {**card, "updated_at": now},
                "$setOnInsert": {"is_active": True, "created_at": now},
            },
            upsert=True,
        )
    logger.info("Seeded %d catalog cards", len(STARTER_CARDS))


if __name__ == "__main__":
    main()
