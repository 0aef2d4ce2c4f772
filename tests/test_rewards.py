"""Unit tests for the rewards ledger valuation."""
from __future__ import annotations

import itertools
from datetime import datetime, timezone

import pytest
from bson import ObjectId

from enzo.services.prices import TokenPrice
from enzo.services.rewards import (
    RewardEntry,
    aggregate_rewards,
    reward_entry_from_doc,
    summarize_by_card,
)


def _price(symbol: str, usd: float) -> TokenPrice:
    return TokenPrice(symbol=symbol, price_usd=usd, price_btc=0.0, change_24h=0.0)


class TestAggregateRewards:
    def test_empty_ledger(self) -> None:
        by_token, totals = aggregate_rewards([], {})
        assert by_token == {}
        assert totals.current_value == 0
        assert totals.value_at_earn == 0
        assert totals.profit_loss == 0
        assert totals.profit_loss_percent == 0

    def test_groups_and_values_priced_token(self, btc_price: TokenPrice) -> None:
        entries = [
            RewardEntry(token="BTC", amount=0.001, usd_value_at_earn=40),
            RewardEntry(token="BTC", amount=0.002, usd_value_at_earn=80),
        ]
        by_token, totals = aggregate_rewards(entries, {"BTC": btc_price})

        btc = by_token["BTC"]
        assert btc.total_amount == pytest.approx(0.003)
        assert btc.total_usd_value_at_earn == pytest.approx(120)
        assert btc.current_value == pytest.approx(150)
        assert btc.profit_loss == pytest.approx(30)
        assert btc.entry_count == 2
        assert btc.priced is True
        assert totals.profit_loss_percent == pytest.approx(25)

    def test_unpriced_token_counts_as_zero(self) -> None:
        entries = [RewardEntry(token="ETH", amount=1, usd_value_at_earn=2000)]
        by_token, totals = aggregate_rewards(entries, {})

        eth = by_token["ETH"]
        assert eth.current_value == 0
        assert eth.profit_loss == pytest.approx(-2000)
        assert eth.priced is False
        assert totals.profit_loss == pytest.approx(-2000)
        assert totals.profit_loss_percent == pytest.approx(-100)

    def test_missing_earn_value_still_counts_amount(self) -> None:
        entries = [
            RewardEntry(token="CRO", amount=10, usd_value_at_earn=None),
            RewardEntry(token="CRO", amount=5, usd_value_at_earn=1),
        ]
        by_token, _ = aggregate_rewards(entries, {"CRO": _price("CRO", 0.1)})
        assert by_token["CRO"].total_amount == pytest.approx(15)
        assert by_token["CRO"].total_usd_value_at_earn == pytest.approx(1)
        assert by_token["CRO"].current_value == pytest.approx(1.5)

    def test_percent_is_zero_without_earn_values(self) -> None:
        entries = [RewardEntry(token="BTC", amount=1)]
        _, totals = aggregate_rewards(entries, {"BTC": _price("BTC", 60000)})
        assert totals.current_value == pytest.approx(60000)
        assert totals.value_at_earn == 0
        assert totals.profit_loss_percent == 0

    def test_tokens_are_case_sensitive(self) -> None:
        entries = [RewardEntry(token="BTC", amount=1), RewardEntry(token="btc", amount=1)]
        by_token, _ = aggregate_rewards(entries, {})
        assert set(by_token) == {"BTC", "btc"}

    def test_totals_span_tokens(self, btc_price: TokenPrice) -> None:
        entries = [
            RewardEntry(token="BTC", amount=0.001, usd_value_at_earn=40),
            RewardEntry(token="ETH", amount=1, usd_value_at_earn=2000),
        ]
        _, totals = aggregate_rewards(entries, {"BTC": btc_price})
        assert totals.current_value == pytest.approx(50)
        assert totals.value_at_earn == pytest.approx(2040)
        assert totals.profit_loss == pytest.approx(-1990)

    def test_order_independent(self, btc_price: TokenPrice) -> None:
        entries = [
            RewardEntry(token="BTC", amount=0.001, usd_value_at_earn=40),
            RewardEntry(token="ETH", amount=2, usd_value_at_earn=3000),
            RewardEntry(token="BTC", amount=0.002, usd_value_at_earn=80),
            RewardEntry(token="CRO", amount=100, usd_value_at_earn=None),
        ]
        prices = {"BTC": btc_price, "CRO": _price("CRO", 0.08)}
        base_tokens, base_totals = aggregate_rewards(entries, prices)

        for ordering in itertools.permutations(entries):
            by_token, totals = aggregate_rewards(list(ordering), prices)
            assert set(by_token) == set(base_tokens)
            for token, agg in by_token.items():
                expected = base_tokens[token]
                assert agg.total_amount == pytest.approx(expected.total_amount)
                assert agg.current_value == pytest.approx(expected.current_value)
                assert agg.profit_loss == pytest.approx(expected.profit_loss)
            assert totals.profit_loss == pytest.approx(base_totals.profit_loss)
            assert totals.profit_loss_percent == pytest.approx(base_totals.profit_loss_percent)


class TestLedgerHelpers:
    def test_entry_from_document(self) -> None:
        card_id = ObjectId()
        earned = datetime(2024, 3, 1, tzinfo=timezone.utc)
        entry = reward_entry_from_doc(
            {"token": "BTC", "amount": 0.5, "usd_value_at_earn": None, "earned_at": earned, "user_card_id": card_id}
        )
        assert entry == RewardEntry(
            token="BTC", amount=0.5, usd_value_at_earn=None, earned_at=earned, user_card_id=str(card_id)
        )

    def test_summarize_by_card(self) -> None:
        entries = [
            RewardEntry(token="BTC", amount=1, usd_value_at_earn=10, user_card_id="a"),
            RewardEntry(token="CRO", amount=1, usd_value_at_earn=None, user_card_id="a"),
            RewardEntry(token="ETH", amount=1, usd_value_at_earn=50, user_card_id="b"),
        ]
        rows = summarize_by_card(entries)
        assert rows == [
            {"user_card_id": "b", "entries": 1, "value_at_earn": 50.0},
            {"user_card_id": "a", "entries": 2, "value_at_earn": 10.0},
        ]
