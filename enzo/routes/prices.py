"""Public token price lookups."""

from flask import Blueprint, jsonify, request
from werkzeug.exceptions import BadRequest

from enzo.services.prices import get_token_prices

MAX_SYMBOLS = 50


def register_price_routes(bp: Blueprint) -> None:
    @bp.get("/prices")
    def token_prices():
        raw = request.args.get("symbols", "")
        symbols = [part.strip().upper() for part in raw.split(",") if part.strip()]
        if len(symbols) > MAX_SYMBOLS:
            raise BadRequest(f"at most {MAX_SYMBOLS} symbols per request")
        prices = get_token_prices(symbols)
        return jsonify({symbol: price.to_dict() for symbol, price in prices.items()})
