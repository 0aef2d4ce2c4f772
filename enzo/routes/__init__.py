"""Blueprint factories for API routes."""

from flask import Blueprint

from .admin import register_admin_routes
from .auth import register_auth_routes
from .catalog import register_catalog_routes
from .portfolio import register_portfolio_routes
from .prices import register_price_routes
from .rewards import register_reward_routes


def create_public_blueprint(database) -> Blueprint:
    """Routes readable without signing in."""
    bp = Blueprint("public", __name__, url_prefix="/api")

    register_catalog_routes(bp, database)
    register_price_routes(bp)

    return bp


def create_api_blueprint(database) -> Blueprint:
    """Routes that require a verified user."""
    bp = Blueprint("api", __name__, url_prefix="/api")

    register_auth_routes(bp, database)
    register_portfolio_routes(bp, database)
    register_reward_routes(bp, database)
    register_admin_routes(bp, database)

    return bp
