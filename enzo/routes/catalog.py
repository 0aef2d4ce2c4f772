"""Public catalog, card detail and comparison routes."""

from flask import Blueprint, jsonify, request
from pymongo import ASCENDING
from werkzeug.exceptions import NotFound

from enzo.core import format_crypto_card, validate_object_id
from enzo.services.catalog import (
    ACTIVE,
    RELATED_CARDS_LIMIT,
    build_catalog_query,
    comparison_highlights,
    distinct_values,
    order_like,
    parse_compare_ids,
    related_cards_query,
)


def register_catalog_routes(bp: Blueprint, database) -> None:
    cards = database["crypto_cards"]

    @bp.get("/cards")
    def list_cards():
        query, sort = build_catalog_query(request.args)
        rows = [format_crypto_card(doc) for doc in cards.find(query).sort(sort)]
        return jsonify({"cards": rows, "count": len(rows)})

    @bp.get("/cards/filters")
    def card_filters():
        docs = list(cards.find(ACTIVE, {"issuer": 1, "reward_token": 1}))
        return jsonify(
            {
                "issuers": distinct_values(docs, "issuer"),
                "tokens": distinct_values(docs, "reward_token"),
            }
        )

    @bp.get("/cards/<card_id>")
    def card_detail(card_id: str):
        card = cards.find_one({"_id": validate_object_id(card_id), **ACTIVE})
        if card is None:
            raise NotFound("Card not found")
        related = cards.find(related_cards_query(card)).limit(RELATED_CARDS_LIMIT)
        return jsonify(
            {
                "card": format_crypto_card(card),
                "related": [format_crypto_card(doc) for doc in related],
            }
        )

    @bp.get("/compare")
    def compare_cards():
        selected_ids = parse_compare_ids(request.args.get("cards"))

        options = cards.find(ACTIVE, {"name": 1, "issuer": 1, "reward_token": 1, "image_url": 1}).sort(
            "name", ASCENDING
        )
        available = [
            {
                "id": str(doc["_id"]),
                "name": doc.get("name"),
                "issuer": doc.get("issuer"),
                "reward_token": doc.get("reward_token"),
                "image_url": doc.get("image_url"),
            }
            for doc in options
        ]

        selected = []
        object_ids = []
        for card_id in selected_ids:
            try:
                object_ids.append(validate_object_id(card_id))
            except NotFound:
                continue
        if object_ids:
            docs = list(cards.find({"_id": {"$in": object_ids}, **ACTIVE}))
            selected = order_like(selected_ids, docs)

        return jsonify(
            {
                "selectedIds": selected_ids,
                "cards": [format_crypto_card(doc) for doc in selected],
                "highlights": comparison_highlights(selected),
                "available": available,
            }
        )
