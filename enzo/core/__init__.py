"""Core utilities for the Enzo server."""

from .authz import claim_policy, is_admin, require_admin
from .config import (
    configure_logging,
    env_flag,
    get_admin_settings,
    get_auth_settings,
    get_price_settings,
    load_environment,
)
from .database import ensure_indexes, get_database, get_mongo_client
from .security import decode_token
from .users import format_profile, get_or_create_user
from .utils import (
    format_crypto_card,
    format_portfolio_card,
    format_reward_row,
    isoformat,
    optional_text,
    parse_datetime,
    parse_float,
    validate_object_id,
)

__all__ = [
    "claim_policy",
    "is_admin",
    "require_admin",
    "configure_logging",
    "env_flag",
    "get_admin_settings",
    "get_auth_settings",
    "get_price_settings",
    "load_environment",
    "ensure_indexes",
    "get_database",
    "get_mongo_client",
    "decode_token",
    "format_profile",
    "get_or_create_user",
    "format_crypto_card",
    "format_portfolio_card",
    "format_reward_row",
    "isoformat",
    "optional_text",
    "parse_datetime",
    "parse_float",
    "validate_object_id",
]
