"""Configuration helpers for the Flask application."""

import logging
import os
from typing import Any, Dict

from dotenv import load_dotenv

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def load_environment() -> None:
    """Load environment variables from a .env file when available."""
    load_dotenv()


def env_flag(name: str, default: str = "0") -> bool:
    return os.environ.get(name, default).lower() in ("1", "true", "yes")


def configure_logging() -> None:
    level_name = os.environ.get("LOG_LEVEL", "INFO").upper()
    level = getattr(logging, level_name, logging.INFO)
    logging.basicConfig(level=level, format=LOG_FORMAT)


def get_auth_settings() -> Dict[str, str]:
    """Return Auth0 configuration derived from environment variables."""
    domain = os.environ.get("AUTH0_DOMAIN")
    audience = os.environ.get("AUTH0_AUDIENCE")
    if not domain or not audience:
        raise RuntimeError("AUTH0_DOMAIN and AUTH0_AUDIENCE must be set")
    issuer = f"https://{domain}/"
    return {
        "domain": domain,
        "audience": audience,
        "issuer": issuer,
        "jwks_url": f"{issuer}.well-known/jwks.json",
    }


def get_admin_settings() -> Dict[str, str]:
    """Token claim and value that grant access to the admin routes."""
    return {
        "claim": os.environ.get("ENZO_ADMIN_CLAIM", "permissions"),
        "value": os.environ.get("ENZO_ADMIN_VALUE", "admin:cards"),
    }


def get_price_settings() -> Dict[str, Any]:
    raw_timeout = os.environ.get("PRICE_TIMEOUT_SECONDS", "10")
    try:
        timeout = float(raw_timeout)
    except ValueError:
        raise RuntimeError("PRICE_TIMEOUT_SECONDS must be a number")
    if not timeout > 0:
        raise RuntimeError("PRICE_TIMEOUT_SECONDS must be positive")
    return {
        "base_url": os.environ.get("COINGECKO_BASE_URL", "https://api.coingecko.com/api/v3").rstrip("/"),
        "timeout": timeout,
    }
