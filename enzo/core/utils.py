"""Shared helper utilities for routes."""

import math
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from bson import ObjectId
from bson.errors import InvalidId
from werkzeug.exceptions import BadRequest, NotFound


def validate_object_id(value: Any) -> ObjectId:
    if isinstance(value, ObjectId):
        return value
    # ObjectId(None) would mint a fresh id
    if not isinstance(value, str):
        raise NotFound("Resource not found")
    try:
        return ObjectId(value)
    except (InvalidId, TypeError) as exc:
        raise NotFound("Resource not found") from exc


def isoformat(value: Any) -> Optional[str]:
    if isinstance(value, datetime):
        if value.tzinfo is None:
            value = value.replace(tzinfo=timezone.utc)
        return value.isoformat().replace("+00:00", "Z")
    return value


def parse_float(value: Any, field: str, default: float = 0.0) -> float:
    """Parse a numeric form field; empty values fall back to ``default``."""
    if value is None or (isinstance(value, str) and not value.strip()):
        return default
    if isinstance(value, bool):
        raise BadRequest(f"{field} must be a number")
    try:
        parsed = float(value)
    except (TypeError, ValueError):
        raise BadRequest(f"{field} must be a number")
    if not math.isfinite(parsed):
        raise BadRequest(f"{field} must be a number")
    return parsed


def parse_datetime(value: Any, field: str) -> datetime:
    """Accept ISO dates (``2024-05-01``) or timestamps; empty means now."""
    if value is None or (isinstance(value, str) and not value.strip()):
        return datetime.now(timezone.utc)
    if not isinstance(value, str):
        raise BadRequest(f"{field} must be an ISO date")
    try:
        parsed = datetime.fromisoformat(value.strip().replace("Z", "+00:00"))
    except ValueError:
        raise BadRequest(f"{field} must be an ISO date")
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def optional_text(value: Any) -> Optional[str]:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def format_crypto_card(doc: Dict[str, Any]) -> Dict[str, Any]:
    rewards_rate = doc.get("rewards_rate") or {}
    return {
        "id": str(doc["_id"]) if doc.get("_id") else None,
        "name": doc.get("name"),
        "issuer": doc.get("issuer"),
        "card_tier": doc.get("card_tier"),
        "annual_fee": float(doc.get("annual_fee", 0.0) or 0.0),
        "rewards_rate": {"default": float(rewards_rate.get("default", 0.0) or 0.0)},
        "reward_token": doc.get("reward_token"),
        "staking_required": float(doc.get("staking_required", 0.0) or 0.0),
        "benefits": list(doc.get("benefits") or []),
        "image_url": doc.get("image_url"),
        "website_url": doc.get("website_url"),
        "description": doc.get("description"),
        "is_active": bool(doc.get("is_active", True)),
        "created_at": isoformat(doc.get("created_at")),
        "updated_at": isoformat(doc.get("updated_at")),
    }


def format_portfolio_card(doc: Dict[str, Any], card: Optional[Dict[str, Any]]) -> Dict[str, Any]:
    return {
        "id": str(doc["_id"]),
        "card_id": str(doc.get("card_id")) if doc.get("card_id") else None,
        "nickname": doc.get("nickname"),
        "notes": doc.get("notes"),
        "is_primary": bool(doc.get("is_primary", False)),
        "added_at": isoformat(doc.get("added_at")),
        "card": format_crypto_card(card) if card else None,
    }


def format_reward_row(doc: Dict[str, Any]) -> Dict[str, Any]:
    usd_value = doc.get("usd_value_at_earn")
    return {
        "id": str(doc["_id"]),
        "user_card_id": str(doc.get("user_card_id")) if doc.get("user_card_id") else None,
        "token": doc.get("token"),
        "amount": float(doc.get("amount", 0.0) or 0.0),
        "usd_value_at_earn": float(usd_value) if usd_value is not None else None,
        "category": doc.get("category") or "General",
        "description": doc.get("description"),
        "earned_at": isoformat(doc.get("earned_at")),
    }
