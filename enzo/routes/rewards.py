"""Rewards ledger routes: log, list with live valuation, delete."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Dict

from flask import Blueprint, g, jsonify, request
from pymongo import ASCENDING, DESCENDING
from werkzeug.exceptions import BadRequest, NotFound

from enzo.core import format_reward_row, optional_text, parse_datetime, parse_float, validate_object_id
from enzo.services.prices import get_token_prices
from enzo.services.rewards import aggregate_rewards, reward_entry_from_doc, summarize_by_card

DEFAULT_CATEGORY = "General"


def register_reward_routes(bp: Blueprint, database) -> None:
    rewards = database["user_rewards"]
    user_cards = database["user_cards"]
    cards = database["crypto_cards"]
    categories = database["spending_categories"]

    @bp.get("/rewards")
    def list_rewards():
        user = g.current_user
        docs = list(rewards.find({"userId": user["_id"]}).sort("earned_at", DESCENDING))
        entries = [reward_entry_from_doc(doc) for doc in docs]

        prices = get_token_prices({entry.token for entry in entries})
        by_token, totals = aggregate_rewards(entries, prices)

        return jsonify(
            {
                "rewards": [format_reward_row(doc) for doc in docs],
                "byToken": [
                    agg.to_dict()
                    for agg in sorted(by_token.values(), key=lambda item: item.current_value, reverse=True)
                ],
                "byCard": summarize_by_card(entries),
                "totals": totals.to_dict(),
                "prices": {symbol: price.to_dict() for symbol, price in prices.items()},
            }
        )

    @bp.post("/rewards")
    def log_reward():
        user = g.current_user
        payload = request.get_json(silent=True) or {}

        raw_user_card_id = payload.get("user_card_id")
        if not raw_user_card_id:
            raise BadRequest("user_card_id is required")
        try:
            user_card_id = validate_object_id(raw_user_card_id)
        except NotFound:
            raise BadRequest("Invalid user_card_id format")
        user_card = user_cards.find_one({"_id": user_card_id, "userId": user["_id"]})
        if user_card is None:
            raise NotFound("Card not found in your portfolio")

        amount = parse_float(payload.get("amount"), "amount")
        if amount <= 0:
            raise BadRequest("amount must be greater than zero")

        usd_value = payload.get("usd_value_at_earn")
        usd_value_at_earn = None
        if usd_value is not None and not (isinstance(usd_value, str) and not usd_value.strip()):
            usd_value_at_earn = parse_float(usd_value, "usd_value_at_earn")
            if usd_value_at_earn < 0:
                raise BadRequest("usd_value_at_earn must not be negative")

        token = optional_text(payload.get("token"))
        if token is None:
            card = cards.find_one({"_id": user_card.get("card_id")}, {"reward_token": 1})
            token = optional_text(card.get("reward_token")) if card else None
        if token is None:
            raise BadRequest("token is required")

        document: Dict[str, Any] = {
            "userId": user["_id"],
            "user_card_id": user_card_id,
            "amount": amount,
            "token": token.upper(),
            "usd_value_at_earn": usd_value_at_earn,
            "category": optional_text(payload.get("category")) or DEFAULT_CATEGORY,
            "description": optional_text(payload.get("description")),
            "earned_at": parse_datetime(payload.get("earned_at"), "earned_at"),
            "created_at": datetime.now(timezone.utc),
        }
        result = rewards.insert_one(document)
        document["_id"] = result.inserted_id
        return jsonify(format_reward_row(document)), 201

    @bp.delete("/rewards/<reward_id>")
    def delete_reward(reward_id: str):
        result = rewards.delete_one({"_id": validate_object_id(reward_id), "userId": g.current_user["_id"]})
        if result.deleted_count == 0:
            raise NotFound("Reward not found")
        return ("", 204)

    @bp.get("/rewards/categories")
    def list_categories():
        names = [doc.get("name") for doc in categories.find({}, {"name": 1}).sort("name", ASCENDING) if doc.get("name")]
        return jsonify(names or [DEFAULT_CATEGORY])
