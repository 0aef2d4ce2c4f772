"""Admin authorization policy.

Admin access is granted by a claim in the verified token rather than by a
list of addresses baked into the code, so membership changes happen in the
identity provider.
"""

from typing import Any, Callable, Dict, Optional

from flask import current_app, g
from werkzeug.exceptions import Forbidden, Unauthorized

AdminPolicy = Callable[[Dict[str, Any]], bool]


def claim_policy(claim: str, value: str) -> AdminPolicy:
    """Build a policy that passes when ``claim`` holds ``value``.

    The claim may be a single string or a list of strings, which covers both
    Auth0 ``permissions`` arrays and custom ``role`` claims.
    """

    def policy(payload: Dict[str, Any]) -> bool:
        granted = payload.get(claim)
        if isinstance(granted, str):
            return granted == value
        if isinstance(granted, (list, tuple, set)):
            return value in granted
        return False

    return policy


def is_admin(payload: Optional[Dict[str, Any]]) -> bool:
    if not payload:
        return False
    policy: AdminPolicy = current_app.config["ADMIN_POLICY"]
    return bool(policy(payload))


def require_admin() -> None:
    payload = getattr(g, "current_token", None)
    if payload is None:
        raise Unauthorized("Sign in required")
    if not is_admin(payload):
        raise Forbidden("Admin access required")
