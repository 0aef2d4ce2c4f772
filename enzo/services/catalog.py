"""Query building for the public card catalog and the comparator."""

from __future__ import annotations

import re
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence, Tuple

from pymongo import ASCENDING, DESCENDING

MAX_COMPARE_CARDS = 4
RELATED_CARDS_LIMIT = 3

SORT_OPTIONS: Dict[str, List[Tuple[str, int]]] = {
    "newest": [("created_at", DESCENDING)],
    "rewards": [("rewards_rate.default", DESCENDING)],
    "fee-low": [("annual_fee", ASCENDING)],
    "fee-high": [("annual_fee", DESCENDING)],
}
SORT_ALIASES = {
    "highest-reward": "rewards",
    "lowest-fee": "fee-low",
    "highest-fee": "fee-high",
}
DEFAULT_SORT = "newest"

ACTIVE = {"is_active": True}


def build_catalog_query(params: Mapping[str, Any]) -> Tuple[Dict[str, Any], List[Tuple[str, int]]]:
    """Translate catalog filter parameters into a Mongo filter and sort.

    Recognised keys are ``search``, ``issuer``, ``token`` and ``sort``; empty
    values are ignored and filters combine with AND. Unknown sort values fall
    back to newest first.
    """
    query: Dict[str, Any] = dict(ACTIVE)

    issuer = params.get("issuer")
    if issuer:
        query["issuer"] = issuer

    token = params.get("token")
    if token:
        query["reward_token"] = token

    search = params.get("search")
    if search:
        pattern = {"$regex": re.escape(str(search)), "$options": "i"}
        query["$or"] = [{"name": pattern}, {"issuer": pattern}]

    sort_key = params.get("sort") or DEFAULT_SORT
    sort_key = SORT_ALIASES.get(sort_key, sort_key)
    sort = SORT_OPTIONS.get(sort_key, SORT_OPTIONS[DEFAULT_SORT])
    return query, sort


def related_cards_query(card: Mapping[str, Any]) -> Dict[str, Any]:
    """Other active cards sharing the issuer or the reward token."""
    return {
        **ACTIVE,
        "_id": {"$ne": card["_id"]},
        "$or": [{"issuer": card.get("issuer")}, {"reward_token": card.get("reward_token")}],
    }


def distinct_values(docs: Iterable[Mapping[str, Any]], field: str) -> List[str]:
    seen: List[str] = []
    for doc in docs:
        value = doc.get(field)
        if value and value not in seen:
            seen.append(value)
    return seen


def parse_compare_ids(raw: Optional[str]) -> List[str]:
    """Split ``?cards=a,b,c`` into at most four distinct ids, keeping order."""
    if not raw:
        return []
    ids: List[str] = []
    for part in raw.split(","):
        part = part.strip()
        if part and part not in ids:
            ids.append(part)
    return ids[:MAX_COMPARE_CARDS]


def order_like(ids: Sequence[str], docs: Iterable[Mapping[str, Any]]) -> List[Mapping[str, Any]]:
    by_id = {str(doc.get("_id")): doc for doc in docs}
    return [by_id[card_id] for card_id in ids if card_id in by_id]


def _default_rate(card: Mapping[str, Any]) -> float:
    return float((card.get("rewards_rate") or {}).get("default", 0) or 0)


def _benefit_count(card: Mapping[str, Any]) -> int:
    return len(card.get("benefits") or [])


def comparison_highlights(cards: Sequence[Mapping[str, Any]]) -> Dict[str, List[str]]:
    """Ids of the cards that win each comparison row.

    Ties mark every tied card. Nothing is highlighted with fewer than two
    cards, and the benefits row only when some card lists benefits.
    """
    rows: Dict[str, List[str]] = {
        "best_reward": [],
        "lowest_fee": [],
        "lowest_stake": [],
        "most_benefits": [],
    }
    if len(cards) < 2:
        return rows

    best_reward = max(_default_rate(card) for card in cards)
    lowest_fee = min(float(card.get("annual_fee", 0) or 0) for card in cards)
    lowest_stake = min(float(card.get("staking_required", 0) or 0) for card in cards)
    most_benefits = max(_benefit_count(card) for card in cards)

    for card in cards:
        card_id = str(card.get("_id"))
        if _default_rate(card) == best_reward:
            rows["best_reward"].append(card_id)
        if float(card.get("annual_fee", 0) or 0) == lowest_fee:
            rows["lowest_fee"].append(card_id)
        if float(card.get("staking_required", 0) or 0) == lowest_stake:
            rows["lowest_stake"].append(card_id)
        if most_benefits > 0 and _benefit_count(card) == most_benefits:
            rows["most_benefits"].append(card_id)
    return rows
