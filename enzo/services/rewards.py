"""Valuation of the manually logged rewards ledger."""

from __future__ import annotations

from dataclasses import asdict, dataclass
from datetime import datetime
from typing import Any, Dict, Iterable, List, Mapping, Optional, Tuple

from enzo.services.prices import TokenPrice, calculate_current_value


@dataclass(frozen=True)
class RewardEntry:
    token: str
    amount: float
    usd_value_at_earn: Optional[float] = None
    earned_at: Optional[datetime] = None
    user_card_id: Optional[str] = None


@dataclass
class TokenAggregate:
    token: str
    total_amount: float = 0.0
    total_usd_value_at_earn: float = 0.0
    current_value: float = 0.0
    profit_loss: float = 0.0
    entry_count: int = 0
    # False means current_value is a stand-in zero, not a market value
    priced: bool = False

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass
class RewardTotals:
    current_value: float = 0.0
    value_at_earn: float = 0.0
    profit_loss: float = 0.0
    profit_loss_percent: float = 0.0

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


def reward_entry_from_doc(doc: Mapping[str, Any]) -> RewardEntry:
    usd_value = doc.get("usd_value_at_earn")
    card_id = doc.get("user_card_id")
    return RewardEntry(
        token=str(doc.get("token") or ""),
        amount=float(doc.get("amount", 0) or 0),
        usd_value_at_earn=float(usd_value) if usd_value is not None else None,
        earned_at=doc.get("earned_at"),
        user_card_id=str(card_id) if card_id is not None else None,
    )


def aggregate_rewards(
        entries: Iterable[RewardEntry],
        prices: Mapping[str, TokenPrice],
) -> Tuple[Dict[str, TokenAggregate], RewardTotals]:
    """Group ledger entries by token and value them at live prices.

    Tokens without a price are valued at zero, so their profit/loss is the
    negative of what was recorded at earn time.
    """
    by_token: Dict[str, TokenAggregate] = {}
    for entry in entries:
        group = by_token.get(entry.token)
        if group is None:
            group = by_token[entry.token] = TokenAggregate(token=entry.token)
        group.total_amount += entry.amount
        group.total_usd_value_at_earn += entry.usd_value_at_earn or 0.0
        group.entry_count += 1

    totals = RewardTotals()
    for token, group in by_token.items():
        price = prices.get(token)
        if price is not None:
            group.current_value = calculate_current_value(group.total_amount, price.price_usd)
            group.priced = True
        group.profit_loss = group.current_value - group.total_usd_value_at_earn
        totals.current_value += group.current_value
        totals.value_at_earn += group.total_usd_value_at_earn

    totals.profit_loss = totals.current_value - totals.value_at_earn
    if totals.value_at_earn > 0:
        totals.profit_loss_percent = totals.profit_loss / totals.value_at_earn * 100
    return by_token, totals


def summarize_by_card(entries: Iterable[RewardEntry]) -> List[Dict[str, Any]]:
    summary: Dict[str, Dict[str, Any]] = {}
    for entry in entries:
        key = entry.user_card_id or "unassigned"
        row = summary.setdefault(key, {"user_card_id": entry.user_card_id, "entries": 0, "value_at_earn": 0.0})
        row["entries"] += 1
        row["value_at_earn"] += entry.usd_value_at_earn or 0.0
    return sorted(summary.values(), key=lambda row: row["value_at_earn"], reverse=True)
