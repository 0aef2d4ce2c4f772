"""Unit tests for catalog filtering, sorting and comparison."""
from __future__ import annotations

from bson import ObjectId
from pymongo import ASCENDING, DESCENDING

from enzo.services.catalog import (
    build_catalog_query,
    comparison_highlights,
    distinct_values,
    order_like,
    parse_compare_ids,
    related_cards_query,
)


class TestBuildCatalogQuery:
    def test_defaults_to_active_newest_first(self) -> None:
        query, sort = build_catalog_query({})
        assert query == {"is_active": True}
        assert sort == [("created_at", DESCENDING)]

    def test_filters_combine(self) -> None:
        query, _ = build_catalog_query({"issuer": "Nexo", "token": "NEXO", "search": "visa"})
        assert query["is_active"] is True
        assert query["issuer"] == "Nexo"
        assert query["reward_token"] == "NEXO"
        pattern = {"$regex": "visa", "$options": "i"}
        assert query["$or"] == [{"name": pattern}, {"issuer": pattern}]

    def test_search_is_escaped(self) -> None:
        query, _ = build_catalog_query({"search": "a.b(c"})
        assert query["$or"][0]["name"]["$regex"] == r"a\.b\(c"

    def test_empty_values_are_ignored(self) -> None:
        query, _ = build_catalog_query({"issuer": "", "token": "", "search": ""})
        assert query == {"is_active": True}

    def test_sort_options(self) -> None:
        assert build_catalog_query({"sort": "rewards"})[1] == [("rewards_rate.default", DESCENDING)]
        assert build_catalog_query({"sort": "fee-low"})[1] == [("annual_fee", ASCENDING)]
        assert build_catalog_query({"sort": "fee-high"})[1] == [("annual_fee", DESCENDING)]
        assert build_catalog_query({"sort": "sideways"})[1] == [("created_at", DESCENDING)]

    def test_sort_aliases(self) -> None:
        assert build_catalog_query({"sort": "highest-reward"})[1] == [("rewards_rate.default", DESCENDING)]
        assert build_catalog_query({"sort": "lowest-fee"})[1] == [("annual_fee", ASCENDING)]
        assert build_catalog_query({"sort": "highest-fee"})[1] == [("annual_fee", DESCENDING)]


class TestCompareIds:
    def test_caps_at_four_and_keeps_order(self) -> None:
        assert parse_compare_ids("e,d,,c,b,a") == ["e", "d", "c", "b"]

    def test_duplicates_dropped(self) -> None:
        assert parse_compare_ids("a,a,b") == ["a", "b"]

    def test_missing(self) -> None:
        assert parse_compare_ids(None) == []
        assert parse_compare_ids("") == []

    def test_order_like(self) -> None:
        first, second = ObjectId(), ObjectId()
        docs = [{"_id": first}, {"_id": second}]
        ordered = order_like([str(second), "missing", str(first)], docs)
        assert [doc["_id"] for doc in ordered] == [second, first]


class TestHighlights:
    def test_single_card_highlights_nothing(self, sample_card: dict) -> None:
        rows = comparison_highlights([sample_card])
        assert all(ids == [] for ids in rows.values())

    def test_best_values(self, sample_card: dict, other_card: dict) -> None:
        rows = comparison_highlights([sample_card, other_card])
        assert rows["best_reward"] == [str(other_card["_id"])]
        assert rows["lowest_fee"] == [str(sample_card["_id"])]
        assert rows["lowest_stake"] == [str(sample_card["_id"])]
        assert rows["most_benefits"] == [str(sample_card["_id"])]

    def test_no_benefits_highlight_when_none_listed(self, sample_card: dict, other_card: dict) -> None:
        sample_card["benefits"] = []
        rows = comparison_highlights([sample_card, other_card])
        assert rows["most_benefits"] == []

    def test_ties_mark_every_card(self, sample_card: dict, other_card: dict) -> None:
        other_card["annual_fee"] = 0
        rows = comparison_highlights([sample_card, other_card])
        assert len(rows["lowest_fee"]) == 2


def test_related_cards_query(sample_card: dict) -> None:
    query = related_cards_query(sample_card)
    assert query["_id"] == {"$ne": sample_card["_id"]}
    assert query["is_active"] is True
    assert query["$or"] == [{"issuer": "Nexo"}, {"reward_token": "NEXO"}]


def test_distinct_values_keeps_first_seen_order() -> None:
    docs = [{"issuer": "Nexo"}, {"issuer": "Wirex"}, {"issuer": "Nexo"}, {"issuer": None}]
    assert distinct_values(docs, "issuer") == ["Nexo", "Wirex"]
