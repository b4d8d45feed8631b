"""
config.py — Central configuration for the image search API.

All sensitive values (MongoDB URI, Unsplash key, Google OAuth credentials,
session secret) are read from environment variables so credentials are never
hard-coded in source.  Copy .env.example to .env and fill in your own values
before running the app.
"""

import os
from dotenv import load_dotenv

load_dotenv()  # reads .env file if present (ignored in production where env vars are set directly)

# ── MongoDB ──────────────────────────────────────────────────────────────────
MONGO_URI: str = os.getenv("MONGO_URI", "mongodb://localhost:27017")
MONGO_DB: str = os.getenv("MONGO_DB", "image_search")
USERS_COLLECTION: str = os.getenv("USERS_COLLECTION", "users")
SEARCHES_COLLECTION: str = os.getenv("SEARCHES_COLLECTION", "searches")
MONGO_TIMEOUT_MS: int = int(os.getenv("MONGO_TIMEOUT_MS", "5000"))

# ── Unsplash ─────────────────────────────────────────────────────────────────
UNSPLASH_ACCESS_KEY: str = os.getenv("UNSPLASH_ACCESS_KEY", "")
UNSPLASH_API_URL: str = os.getenv("UNSPLASH_API_URL", "https://api.unsplash.com")

# Fixed page size for every search; results are never paginated further.
PER_PAGE: int = 20

# Request timeout (seconds) for Unsplash and Google calls
REQUEST_TIMEOUT: int = int(os.getenv("REQUEST_TIMEOUT", "10"))

# ── Google OAuth ─────────────────────────────────────────────────────────────
GOOGLE_CLIENT_ID: str = os.getenv("GOOGLE_CLIENT_ID", "")
GOOGLE_CLIENT_SECRET: str = os.getenv("GOOGLE_CLIENT_SECRET", "")

# SERVER_URL builds the OAuth callback; CLIENT_URL is where the browser lands
# after login and the only origin allowed by CORS.
SERVER_URL: str = os.getenv("SERVER_URL", "http://localhost:5000")
CLIENT_URL: str = os.getenv("CLIENT_URL", "http://localhost:3000")

# ── Search views ─────────────────────────────────────────────────────────────
HISTORY_LIMIT: int = 20
TOP_SEARCHES_LIMIT: int = 5

# ── Logging ──────────────────────────────────────────────────────────────────
# Empty LOG_FILE means log to stderr.
LOG_FILE: str = os.getenv("LOG_FILE", "")
LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")

# ── Flask ─────────────────────────────────────────────────────────────────────
SECRET_KEY: str = os.getenv("SESSION_SECRET", "change-this-in-production")
SESSION_MAX_AGE: int = int(os.getenv("SESSION_MAX_AGE", str(24 * 60 * 60)))
SESSION_COOKIE_SECURE: bool = os.getenv("SESSION_COOKIE_SECURE", "false").lower() == "true"
DEBUG: bool = os.getenv("FLASK_DEBUG", "false").lower() == "true"
PORT: int = int(os.getenv("PORT", "5000"))
