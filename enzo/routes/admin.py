"""Admin back-office: catalog card management."""

from datetime import datetime, timezone
from typing import Any, Dict, List

from flask import Blueprint, jsonify, request
from pymongo import DESCENDING
from werkzeug.exceptions import BadRequest, NotFound

from enzo.core import format_crypto_card, optional_text, parse_float, require_admin, validate_object_id

REQUIRED_FIELDS = ("name", "issuer", "reward_token")
NUMERIC_FIELDS = ("annual_fee", "staking_required")
TEXT_FIELDS = ("card_tier", "image_url", "website_url", "description")


def parse_benefits(value: Any) -> List[str]:
    """Benefits come either as a list or as one benefit per line."""
    if value is None:
        return []
    if isinstance(value, str):
        items = value.split("\n")
    elif isinstance(value, list):
        items = value
    else:
        raise BadRequest("benefits must be a list or newline separated text")
    return [str(item).strip() for item in items if str(item).strip()]


def prepare_card_payload(data: Dict[str, Any], partial: bool = False) -> Dict[str, Any]:
    """Validate an admin card form into a ``crypto_cards`` document.

    With ``partial`` only the fields present in ``data`` are returned, for
    PATCH requests.
    """
    payload: Dict[str, Any] = {}

    for field in REQUIRED_FIELDS:
        if partial and field not in data:
            continue
        value = data.get(field)
        if not isinstance(value, str) or not value.strip():
            raise BadRequest(f"{field} is required")
        payload[field] = value.strip()
    if "reward_token" in payload:
        payload["reward_token"] = payload["reward_token"].upper()

    for field in NUMERIC_FIELDS:
        if partial and field not in data:
            continue
        value = parse_float(data.get(field), field)
        if value < 0:
            raise BadRequest(f"{field} must not be negative")
        payload[field] = value

    if not partial or "default_rewards_rate" in data or "rewards_rate" in data:
        if "default_rewards_rate" in data:
            raw_rate = data["default_rewards_rate"]
        elif "rewards_rate" in data:
            if not isinstance(data["rewards_rate"], dict):
                raise BadRequest("rewards_rate must be an object")
            raw_rate = data["rewards_rate"].get("default")
        else:
            raw_rate = None
        # an update names the rate explicitly; only creation falls back to 1.0
        if partial and (raw_rate is None or (isinstance(raw_rate, str) and not raw_rate.strip())):
            raise BadRequest("default_rewards_rate is required")
        rate = parse_float(raw_rate, "default_rewards_rate", default=1.0)
        if rate < 0:
            raise BadRequest("default_rewards_rate must not be negative")
        payload["rewards_rate"] = {"default": rate}

    for field in TEXT_FIELDS:
        if partial and field not in data:
            continue
        payload[field] = optional_text(data.get(field))

    if not partial or "benefits" in data:
        payload["benefits"] = parse_benefits(data.get("benefits"))

    if not partial or "is_active" in data:
        is_active = data.get("is_active", True)
        if not isinstance(is_active, bool):
            raise BadRequest("is_active must be a boolean")
        payload["is_active"] = is_active

    return payload


def register_admin_routes(bp: Blueprint, database) -> None:
    cards = database["crypto_cards"]
    users = database["users"]

    @bp.get("/admin/stats")
    def admin_stats():
        require_admin()
        return jsonify(
            {
                "cardCount": cards.count_documents({}),
                "activeCardCount": cards.count_documents({"is_active": True}),
                "userCount": users.count_documents({}),
            }
        )

    @bp.get("/admin/cards")
    def admin_list_cards():
        require_admin()
        return jsonify([format_crypto_card(doc) for doc in cards.find({}).sort("created_at", DESCENDING)])

    @bp.post("/admin/cards")
    def admin_create_card():
        require_admin()
        payload = request.get_json(silent=True)
        if not isinstance(payload, dict):
            raise BadRequest("Invalid payload")

        document = prepare_card_payload(payload)
        now = datetime.now(timezone.utc)
        document["created_at"] = now
        document["updated_at"] = now
        result = cards.insert_one(document)
        document["_id"] = result.inserted_id
        return jsonify(format_crypto_card(document)), 201

    @bp.patch("/admin/cards/<card_id>")
    def admin_update_card(card_id: str):
        require_admin()
        object_id = validate_object_id(card_id)
        payload = request.get_json(silent=True)
        if not isinstance(payload, dict):
            raise BadRequest("Invalid payload")

        updates = prepare_card_payload(payload, partial=True)
        card = cards.find_one({"_id": object_id})
        if card is None:
            raise NotFound("Card not found")
        if not updates:
            return jsonify(format_crypto_card(card))

        updates["updated_at"] = datetime.now(timezone.utc)
        cards.update_one({"_id": object_id}, {"$set": updates})
        card.update(updates)
        return jsonify(format_crypto_card(card))

    @bp.delete("/admin/cards/<card_id>")
    def admin_delete_card(card_id: str):
        require_admin()
        result = cards.delete_one({"_id": validate_object_id(card_id)})
        if result.deleted_count == 0:
            raise NotFound("Card not found")
        return ("", 204)
