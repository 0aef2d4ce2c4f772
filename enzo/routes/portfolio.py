"""Routes for the signed-in user's saved cards ("My cards")."""

from datetime import datetime, timezone
from typing import Any, Dict, List

from flask import Blueprint, g, jsonify, request
from pymongo import DESCENDING
from pymongo.errors import DuplicateKeyError
from werkzeug.exceptions import BadRequest, Conflict, NotFound

from enzo.core import format_portfolio_card, optional_text, validate_object_id
from enzo.services.catalog import ACTIVE

DUPLICATE_CARD_MESSAGE = "You have already added this card to your portfolio"


def portfolio_pipeline(user_id, limit: int = 0) -> List[Dict[str, Any]]:
    pipeline: List[Dict[str, Any]] = [
        {"$match": {"userId": user_id}},
        {"$sort": {"added_at": DESCENDING}},
    ]
    if limit:
        pipeline.append({"$limit": limit})
    pipeline += [
        {
            "$lookup": {
                "from": "crypto_cards",
                "localField": "card_id",
                "foreignField": "_id",
                "as": "card",
            }
        },
        {"$unwind": {"path": "$card", "preserveNullAndEmptyArrays": True}},
    ]
    return pipeline


def register_portfolio_routes(bp: Blueprint, database) -> None:
    user_cards = database["user_cards"]
    cards = database["crypto_cards"]
    rewards = database["user_rewards"]

    def get_user_card_or_404(user_card_id: str) -> Dict[str, Any]:
        doc = user_cards.find_one({"_id": validate_object_id(user_card_id), "userId": g.current_user["_id"]})
        if doc is None:
            raise NotFound("Card not found in your portfolio")
        return doc

    def remove_user_card(doc: Dict[str, Any]) -> None:
        # ledger rows hang off the portfolio record
        rewards.delete_many({"userId": g.current_user["_id"], "user_card_id": doc["_id"]})
        user_cards.delete_one({"_id": doc["_id"], "userId": g.current_user["_id"]})

    @bp.get("/my-cards")
    def list_my_cards():
        rows = user_cards.aggregate(portfolio_pipeline(g.current_user["_id"]))
        return jsonify([format_portfolio_card(row, row.get("card")) for row in rows])

    @bp.post("/my-cards")
    def add_my_card():
        user = g.current_user
        payload = request.get_json(silent=True) or {}

        raw_card_id = payload.get("card_id")
        if not raw_card_id:
            raise BadRequest("card_id is required")
        try:
            card_id = validate_object_id(raw_card_id)
        except NotFound:
            raise BadRequest("Invalid card_id format")

        card = cards.find_one({"_id": card_id, **ACTIVE})
        if card is None:
            raise NotFound("Card not found")

        is_primary = payload.get("is_primary", False)
        if not isinstance(is_primary, bool):
            raise BadRequest("is_primary must be a boolean")

        document = {
            "userId": user["_id"],
            "card_id": card_id,
            "nickname": optional_text(payload.get("nickname")),
            "notes": optional_text(payload.get("notes")),
            "is_primary": is_primary,
            "added_at": datetime.now(timezone.utc),
        }
        try:
            result = user_cards.insert_one(document)
        except DuplicateKeyError as exc:
            raise Conflict(DUPLICATE_CARD_MESSAGE) from exc
        document["_id"] = result.inserted_id
        return jsonify(format_portfolio_card(document, card)), 201

    @bp.delete("/my-cards/<user_card_id>")
    def remove_my_card(user_card_id: str):
        remove_user_card(get_user_card_or_404(user_card_id))
        return ("", 204)

    @bp.get("/my-cards/by-card/<card_id>")
    def my_card_status(card_id: str):
        doc = user_cards.find_one({"userId": g.current_user["_id"], "card_id": validate_object_id(card_id)})
        return jsonify({"added": doc is not None, "id": str(doc["_id"]) if doc else None})

    @bp.delete("/my-cards/by-card/<card_id>")
    def remove_my_card_by_catalog_id(card_id: str):
        doc = user_cards.find_one({"userId": g.current_user["_id"], "card_id": validate_object_id(card_id)})
        if doc is None:
            raise NotFound("Card not found in your portfolio")
        remove_user_card(doc)
        return ("", 204)

    @bp.get("/dashboard")
    def dashboard():
        user = g.current_user
        recent = user_cards.aggregate(portfolio_pipeline(user["_id"], limit=3))
        return jsonify(
            {
                "name": user.get("name"),
                "cardsCount": user_cards.count_documents({"userId": user["_id"]}),
                "rewardsCount": rewards.count_documents({"userId": user["_id"]}),
                "totalCards": cards.count_documents(ACTIVE),
                "recentCards": [format_portfolio_card(row, row.get("card")) for row in recent],
            }
        )
