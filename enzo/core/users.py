"""User helpers used across routes."""

from datetime import datetime, timezone
from typing import Any, Dict, Optional

from pymongo.collection import Collection
from pymongo.errors import DuplicateKeyError
from werkzeug.exceptions import Unauthorized


def get_or_create_user(users: Collection, payload: Dict[str, Any]) -> Dict[str, Any]:
    auth0_id = payload.get("sub")
    if not auth0_id:
        raise Unauthorized("Token missing subject")

    email = payload.get("email")
    if isinstance(email, str):
        email = email.strip().lower() or None
    name = payload.get("name") or (
        email.split("@")[0] if isinstance(email, str) and "@" in email else None
    )

    user_doc: Optional[Dict[str, Any]] = users.find_one({"auth0_id": auth0_id})
    if user_doc is None:
        now = datetime.now(timezone.utc)
        new_user: Dict[str, Any] = {
            "auth0_id": auth0_id,
            "name": name,
            "created_at": now,
            "updated_at": now,
        }
        if isinstance(email, str) and email:
            new_user["email"] = email
        try:
            result = users.insert_one(new_user)
        except DuplicateKeyError:
            user_doc = users.find_one({"auth0_id": auth0_id})
        else:
            new_user["_id"] = result.inserted_id
            user_doc = new_user
    else:
        updates: Dict[str, Any] = {}
        if isinstance(email, str) and email and user_doc.get("email") != email:
            updates["email"] = email
        if name and not user_doc.get("name"):
            updates["name"] = name
        if updates:
            updates["updated_at"] = datetime.now(timezone.utc)
            users.update_one({"_id": user_doc["_id"]}, {"$set": updates})
            user_doc.update(updates)

    if user_doc is None:
        raise Unauthorized("Unable to load profile")

    return user_doc


def format_profile(user: Dict[str, Any], is_admin: bool = False) -> Dict[str, Any]:
    return {
        "userId": str(user["_id"]),
        "email": user.get("email"),
        "name": user.get("name"),
        "isAdmin": is_admin,
    }
