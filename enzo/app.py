"""Flask application factory for the Enzo API."""

import os
from typing import Optional

from flask import Flask, jsonify
from flask_cors import CORS
from pymongo.errors import PyMongoError
from werkzeug.exceptions import BadRequest, Conflict, Forbidden, NotFound, Unauthorized

from enzo.core import (
    claim_policy,
    configure_logging,
    ensure_indexes,
    env_flag,
    get_admin_settings,
    get_auth_settings,
    get_database,
    get_mongo_client,
    load_environment,
)
from enzo.core.authz import AdminPolicy
from enzo.routes import create_api_blueprint, create_public_blueprint


def _error_response(kind: str, message: str, status: int):
    response = jsonify({"error": kind, "message": message})
    response.status_code = status
    return response


def create_app(database=None, admin_policy: Optional[AdminPolicy] = None) -> Flask:
    load_environment()
    configure_logging()
    app = Flask(__name__)

    # Local dev switch (set DISABLE_AUTH=1 in your .env)
    disable_auth = env_flag("DISABLE_AUTH")
    auth_settings = None if disable_auth else get_auth_settings()

    admin_settings = get_admin_settings()
    if admin_policy is None:
        admin_policy = claim_policy(admin_settings["claim"], admin_settings["value"])

    allowed_origin = os.environ.get("CLIENT_ORIGIN", "http://localhost:3000").rstrip("/")
    CORS(
        app,
        resources={r"/api/*": {"origins": [allowed_origin]}},
        supports_credentials=True,
        methods=["GET", "POST", "PATCH", "DELETE", "OPTIONS"],
        allow_headers=["Authorization", "Content-Type"],
        expose_headers=["Content-Type"],
    )

    mongo_client = None
    if database is None:
        mongo_client = get_mongo_client()
        database = get_database(mongo_client)
        ensure_indexes(database)

    app.config.update(
        AUTH_SETTINGS=auth_settings,
        ADMIN_SETTINGS=admin_settings,
        ADMIN_POLICY=admin_policy,
        MONGO_CLIENT=mongo_client,
        MONGO_DB=database,
        DISABLE_AUTH=disable_auth,
    )

    @app.get("/api/health")
    def health_check():
        return jsonify({"status": "ok"})

    @app.errorhandler(Unauthorized)
    def handle_unauthorized(error):
        return _error_response("unauthorized", error.description, 401)

    @app.errorhandler(BadRequest)
    def handle_bad_request(error):
        return _error_response("bad_request", error.description, 400)

    @app.errorhandler(Forbidden)
    def handle_forbidden(error):
        return _error_response("forbidden", error.description, 403)

    @app.errorhandler(NotFound)
    def handle_not_found(error):
        return _error_response("not_found", error.description, 404)

    @app.errorhandler(Conflict)
    def handle_conflict(error):
        return _error_response("conflict", error.description, 409)

    @app.errorhandler(PyMongoError)
    def handle_storage_error(error):
        app.logger.error("Storage error: %s", error)
        return _error_response("storage_error", "The database is unavailable, please try again later", 503)

    app.register_blueprint(create_public_blueprint(database))
    app.register_blueprint(create_api_blueprint(database))

    return app


if __name__ == "__main__":
    # Create and run the Flask app directly (use Flask CLI in production)
    app = create_app()
    port = int(os.environ.get("PORT", "8000"))
    debug = env_flag("FLASK_DEBUG", "1")
    app.run(host="0.0.0.0", port=port, debug=debug)
