"""CoinGecko price lookups for reward tokens."""

from __future__ import annotations

import logging
import time
from dataclasses import asdict, dataclass
from typing import Any, Dict, Iterable, Optional, Tuple

import requests

from enzo.core.config import get_price_settings

logger = logging.getLogger(__name__)

# Ticker -> CoinGecko id. Supporting a new token means adding it here.
TOKEN_ID_MAP: Dict[str, str] = {
    "BTC": "bitcoin",
    "ETH": "ethereum",
    "CRO": "crypto-com-chain",
    "BNB": "binancecoin",
    "NEXO": "nexo",
    "PLU": "pluton",
    "WXT": "wirex",
    "XLM": "stellar",
    "DOGE": "dogecoin",
    "USDC": "usd-coin",
    "USDT": "tether",
    "SOL": "solana",
    "ADA": "cardano",
    "DOT": "polkadot",
    "MATIC": "matic-network",
    "AVAX": "avalanche-2",
    "LINK": "chainlink",
    "UNI": "uniswap",
    "ATOM": "cosmos",
    "LTC": "litecoin",
}

CACHE_TTL_SECONDS = 300

# provider id -> (fetched_at, (usd, btc, usd_24h_change))
PRICE_CACHE: Dict[str, Tuple[float, Tuple[float, float, float]]] = {}


@dataclass(frozen=True)
class TokenPrice:
    symbol: str
    price_usd: float
    price_btc: float
    change_24h: float

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


def get_token_id(symbol: str) -> Optional[str]:
    if not isinstance(symbol, str):
        return None
    return TOKEN_ID_MAP.get(symbol.strip().upper())


def clear_price_cache() -> None:
    PRICE_CACHE.clear()


def _is_fresh(fetched_at: float, now: float) -> bool:
    return now - fetched_at <= CACHE_TTL_SECONDS


def _prune_expired(now: float) -> None:
    for token_id in [key for key, (fetched_at, _) in PRICE_CACHE.items() if not _is_fresh(fetched_at, now)]:
        del PRICE_CACHE[token_id]


def _fetch_simple_prices(ids: Tuple[str, ...]) -> Optional[Dict[str, Any]]:
    """One request for every id; ``None`` when the provider cannot be used."""
    try:
        settings = get_price_settings()
        response = requests.get(
            f"{settings['base_url']}/simple/price",
            params={
                "ids": ",".join(ids),
                "vs_currencies": "usd,btc",
                "include_24hr_change": "true",
            },
            timeout=settings["timeout"],
        )
    except RuntimeError as exc:
        logger.warning("Price lookups are misconfigured: %s", exc)
        return None
    except requests.RequestException as exc:
        logger.warning("Failed to fetch token prices: %s", exc)
        return None

    if not response.ok:
        logger.warning("CoinGecko API error: HTTP %s", response.status_code)
        return None

    try:
        payload = response.json()
    except ValueError as exc:
        logger.warning("CoinGecko returned invalid JSON: %s", exc)
        return None
    if not isinstance(payload, dict):
        logger.warning("CoinGecko returned an unexpected payload type: %s", type(payload).__name__)
        return None
    return payload


def _parse_quotes(payload: Dict[str, Any], ids: Iterable[str]) -> Dict[str, Tuple[float, float, float]]:
    quotes: Dict[str, Tuple[float, float, float]] = {}
    for token_id in ids:
        quote = payload.get(token_id)
        if not isinstance(quote, dict):
            continue
        quotes[token_id] = (
            float(quote.get("usd") or 0),
            float(quote.get("btc") or 0),
            float(quote.get("usd_24h_change") or 0),
        )
    return quotes


def get_token_prices(symbols: Iterable[str]) -> Dict[str, TokenPrice]:
    """Return live prices keyed by uppercase ticker.

    Quotes are cached per provider id, so one request only asks for ids that
    are missing or stale. Unknown tickers and tickers missing from the
    provider response are left out. Any provider failure yields an empty
    mapping.
    """
    wanted: Dict[str, str] = {}
    for symbol in symbols:
        token_id = get_token_id(symbol)
        if token_id:
            wanted[symbol.strip().upper()] = token_id

    if not wanted:
        return {}

    now = time.monotonic()
    quotes: Dict[str, Tuple[float, float, float]] = {}
    missing = []
    for token_id in sorted(set(wanted.values())):
        hit = PRICE_CACHE.get(token_id)
        if hit is not None and _is_fresh(hit[0], now):
            quotes[token_id] = hit[1]
        else:
            missing.append(token_id)

    if missing:
        payload = _fetch_simple_prices(tuple(missing))
        if payload is None:
            return {}
        try:
            fetched = _parse_quotes(payload, missing)
        except (TypeError, ValueError) as exc:
            logger.warning("CoinGecko returned a malformed quote: %s", exc)
            return {}
        _prune_expired(now)
        for token_id, quote in fetched.items():
            PRICE_CACHE[token_id] = (now, quote)
        quotes.update(fetched)

    prices: Dict[str, TokenPrice] = {}
    for symbol, token_id in wanted.items():
        quote = quotes.get(token_id)
        if quote is None:
            continue
        price_usd, price_btc, change_24h = quote
        prices[symbol] = TokenPrice(
            symbol=symbol, price_usd=price_usd, price_btc=price_btc, change_24h=change_24h
        )
    return prices


def get_token_price(symbol: str) -> Optional[TokenPrice]:
    if not isinstance(symbol, str):
        return None
    return get_token_prices([symbol]).get(symbol.strip().upper())


def calculate_current_value(amount: float, current_price: float) -> float:
    return amount * current_price
