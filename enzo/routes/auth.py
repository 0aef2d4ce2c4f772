"""Authentication and profile routes."""

from datetime import datetime, timezone
from typing import Any, Dict

from flask import Blueprint, current_app, g, jsonify, request
from werkzeug.exceptions import BadRequest

from enzo.core import decode_token, format_profile, get_or_create_user, is_admin


def dev_token_payload() -> Dict[str, Any]:
    admin = current_app.config["ADMIN_SETTINGS"]
    return {
        "sub": "dev|local",
        "email": "dev@local",
        "email_verified": True,
        "name": "Dev User",
        admin["claim"]: [admin["value"]],
    }


def register_auth_routes(bp: Blueprint, database) -> None:
    users = database["users"]

    @bp.before_request
    def authenticate_request():
        if request.method == "OPTIONS":
            return ("", 204)

        if current_app.config.get("DISABLE_AUTH"):
            payload = dev_token_payload()
        else:
            payload = decode_token(current_app.config["AUTH_SETTINGS"])

        g.current_token = payload
        g.current_user = get_or_create_user(users, payload)
        return None

    @bp.get("/me")
    def get_me():
        return jsonify(format_profile(g.current_user, is_admin(g.current_token)))

    @bp.patch("/me")
    def update_me():
        user = g.current_user
        payload = request.get_json(silent=True) or {}

        if "name" not in payload:
            return jsonify(format_profile(user, is_admin(g.current_token)))

        name = payload["name"]
        if name is not None and not isinstance(name, str):
            raise BadRequest("name must be a string")
        updates = {"name": name.strip() if isinstance(name, str) else None, "updated_at": datetime.now(timezone.utc)}
        users.update_one({"_id": user["_id"]}, {"$set": updates})
        user.update(updates)
        return jsonify(format_profile(user, is_admin(g.current_token)))
