"""
app.py — Flask application entry point.

This file contains only the HTTP layer: session handling, the OAuth
redirects, and JSON routes.  Search logic lives in search.py, MongoDB I/O in
db.py, and the upstream clients in unsplash.py and auth.py.

Route overview (all under /api)
-------------------------------
GET  /auth/google            Redirect to the Google consent screen.
GET  /auth/google/callback   Finish login, set the session, go to the client.
GET  /auth/user              Who is logged in (or null).
POST /logout                 Clear the session.
GET  /top-searches           Five most searched terms across all users.
POST /search                 Log a search and return Unsplash results.
GET  /search/history         The caller's 20 most recent searches.
GET  /health                 Liveness plus a MongoDB ping.

Run locally with ``python app.py``, or under a WSGI server with
``gunicorn "app:create_app()"``.
"""

import atexit
import logging
from datetime import datetime, timedelta, timezone

from flask import Blueprint, Flask, current_app, jsonify, redirect, request, session
from flask_cors import CORS
from werkzeug.exceptions import HTTPException

import config
from auth import GoogleIdentityProvider, new_state
from db import MongoStore
from errors import ServiceError
from search import SearchService
from unsplash import UnsplashClient

logger = logging.getLogger(__name__)

api = Blueprint("api", __name__, url_prefix="/api")


# ── Logging ───────────────────────────────────────────────────────────────────

def configure_logging() -> None:
    logging.basicConfig(
        filename=config.LOG_FILE or None,
        level=config.LOG_LEVEL.upper(),
        format="%(asctime)s  %(levelname)-8s  %(name)s: %(message)s",
    )


# ── App setup ─────────────────────────────────────────────────────────────────

def create_app(store=None, images=None, identity=None, settings: dict = None) -> Flask:
    """
    Build the Flask app around its collaborators.

    Anything not passed in is built from config; a store built here is
    connected now and closed at interpreter exit.
    """
    configure_logging()

    app = Flask(__name__)
    app.secret_key = config.SECRET_KEY
    app.config.update(
        CLIENT_URL=config.CLIENT_URL,
        SERVER_URL=config.SERVER_URL,
        PERMANENT_SESSION_LIFETIME=timedelta(seconds=config.SESSION_MAX_AGE),
        SESSION_COOKIE_HTTPONLY=True,
        SESSION_COOKIE_SAMESITE="Lax",
        SESSION_COOKIE_SECURE=config.SESSION_COOKIE_SECURE,
    )
    if settings:
        app.config.update(settings)

    # The client runs on its own origin and sends the session cookie.
    CORS(app, origins=[app.config["CLIENT_URL"]], supports_credentials=True)

    if store is None:
        store = MongoStore()
        store.connect()
        atexit.register(store.close)
    images = images or UnsplashClient()
    identity = identity or GoogleIdentityProvider()

    app.extensions["record_store"] = store
    app.extensions["identity_provider"] = identity
    app.extensions["search_service"] = SearchService(store, images)

    app.register_blueprint(api)
    logger.info("App created (client=%s).", app.config["CLIENT_URL"])
    return app


def _store() -> MongoStore:
    return current_app.extensions["record_store"]


def _service() -> SearchService:
    return current_app.extensions["search_service"]


def current_user():
    """The logged-in user for this request, or None."""
    user_id = session.get("user_id")
    if not user_id:
        return None
    user = _store().get_user(user_id)
    if user is None:
        # Session points at a user that no longer resolves.
        session.clear()
    return user


# ── Error handling ────────────────────────────────────────────────────────────

@api.errorhandler(ServiceError)
def handle_service_error(exc: ServiceError):
    return jsonify({"success": False, "error": exc.message}), exc.status_code


@api.errorhandler(Exception)
def handle_unexpected_error(exc: Exception):
    if isinstance(exc, HTTPException):
        return exc
    logger.exception("Unhandled error on %s %s: %s", request.method, request.path, exc)
    return jsonify({"success": False, "error": "Internal server error"}), 500


# ── Auth routes ───────────────────────────────────────────────────────────────

def _callback_url() -> str:
    return f"{current_app.config['SERVER_URL'].rstrip('/')}/api/auth/google/callback"


@api.route("/auth/google", methods=["GET"])
def google_login():
    state = new_state()
    session["oauth_state"] = state
    identity = current_app.extensions["identity_provider"]
    return redirect(identity.authorization_url(state, _callback_url()))


@api.route("/auth/google/callback", methods=["GET"])
def google_callback():
    """
    Finish the OAuth flow.

    Any failure (Google error, missing code, state mismatch, exchange or
    store failure) sends the browser to the client's login page.
    """
    client_url = current_app.config["CLIENT_URL"].rstrip("/")
    failure = redirect(f"{client_url}/login")

    expected_state = session.pop("oauth_state", None)
    if request.args.get("error"):
        logger.warning("Google returned an OAuth error: %s", request.args.get("error"))
        return failure
    code = request.args.get("code")
    state = request.args.get("state")
    if not code or not state or state != expected_state:
        logger.warning("OAuth callback rejected (code present=%s, state ok=%s).",
                       bool(code), bool(state) and state == expected_state)
        return failure

    try:
        info = current_app.extensions["identity_provider"].exchange_code(code, _callback_url())
        user = _store().upsert_user(info)
    except ServiceError as exc:
        logger.error("Login failed: %s", exc.message)
        return failure

    session.clear()
    session.permanent = True
    session["user_id"] = user.id
    return redirect(f"{client_url}/dashboard")


@api.route("/auth/user", methods=["GET"])
def auth_user():
    user = current_user()
    if user is None:
        return jsonify({"success": False, "user": None})
    return jsonify({"success": True, "user": user.to_public()})


@api.route("/logout", methods=["POST"])
def logout():
    session.clear()
    return jsonify({"success": True, "message": "Logged out successfully"})


# ── Search routes ─────────────────────────────────────────────────────────────

@api.route("/top-searches", methods=["GET"])
def top_searches():
    entries = _service().get_top_searches()
    return jsonify({"success": True, "data": [entry.to_dict() for entry in entries]})


@api.route("/search", methods=["POST"])
def search():
    """
    Log the search and return Unsplash results.

    Body: ``{"term": "<text>"}``.  The term is trimmed; a blank term is a 400
    and nothing is logged.
    """
    body = request.get_json(silent=True)
    term = body.get("term") if isinstance(body, dict) else None

    result = _service().record_and_search(current_user(), term)
    return jsonify({"success": True, "data": result.to_dict()})


@api.route("/search/history", methods=["GET"])
def search_history():
    records = _service().get_history(current_user())
    return jsonify({"success": True, "data": [record.to_dict() for record in records]})


@api.route("/health", methods=["GET"])
def health():
    return jsonify(
        {
            "status": "OK",
            "message": "Server is running",
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "database": "connected" if _store().ping() else "unavailable",
        }
    )


# ── Entry point ───────────────────────────────────────────────────────────────

if __name__ == "__main__":
    application = create_app()
    logger.info("Client URL: %s", config.CLIENT_URL)
    logger.info("Server URL: %s", config.SERVER_URL)
    application.run(host="0.0.0.0", port=config.PORT, debug=config.DEBUG)
