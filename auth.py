"""
auth.py — Google OAuth 2.0 identity provider.

Login is the standard authorization-code flow:

  1. ``authorization_url()`` builds the Google consent URL carrying a random
     ``state`` that the API layer also keeps in the session.
  2. Google redirects back with ``code`` and ``state``.
  3. ``exchange_code()`` trades the code for an access token and reads the
     user's OpenID profile (sub, name, email, picture).

Only identity is requested (``openid profile email``); the access token is
discarded once the profile has been read.
"""

import logging
import secrets
from urllib.parse import urlencode

import requests

from config import GOOGLE_CLIENT_ID, GOOGLE_CLIENT_SECRET, REQUEST_TIMEOUT
from errors import IdentityProviderError
from models import IdentityInfo

logger = logging.getLogger(__name__)

AUTHORIZE_URL = "https://accounts.google.com/o/oauth2/v2/auth"
TOKEN_URL = "https://oauth2.googleapis.com/token"
USERINFO_URL = "https://openidconnect.googleapis.com/v1/userinfo"
SCOPES = "openid profile email"


def new_state() -> str:
    """Random, URL-safe value tying a callback to the login that started it."""
    return secrets.token_urlsafe(32)


class GoogleIdentityProvider:
    """Identity via Google accounts."""

    def __init__(
        self,
        client_id: str = GOOGLE_CLIENT_ID,
        client_secret: str = GOOGLE_CLIENT_SECRET,
        timeout: int = REQUEST_TIMEOUT,
        session: requests.Session = None,
    ):
        self._client_id = client_id
        self._client_secret = client_secret
        self._timeout = timeout
        self._session = session or requests.Session()

    def authorization_url(self, state: str, redirect_uri: str) -> str:
        params = {
            "client_id": self._client_id,
            "response_type": "code",
            "scope": SCOPES,
            "redirect_uri": redirect_uri,
            "state": state,
            "prompt": "select_account",
        }
        return f"{AUTHORIZE_URL}?{urlencode(params)}"

    def exchange_code(self, code: str, redirect_uri: str) -> IdentityInfo:
        """
        Exchange an authorization code for the user's Google profile.

        Raises:
            IdentityProviderError: if Google is unreachable, rejects the code,
                or returns a profile without an account id or email.
        """
        data = {
            "client_id": self._client_id,
            "client_secret": self._client_secret,
            "grant_type": "authorization_code",
            "code": code,
            "redirect_uri": redirect_uri,
        }
        try:
            token_resp = self._session.post(
                TOKEN_URL, data=data, headers={"Accept": "application/json"}, timeout=self._timeout
            )
            if token_resp.status_code != 200:
                logger.error(
                    "Google token exchange failed: status=%d, body=%s",
                    token_resp.status_code,
                    token_resp.text,
                )
                raise IdentityProviderError("Google token exchange failed")

            access_token = token_resp.json().get("access_token")
            if not access_token:
                raise IdentityProviderError("Google token response missing access_token")

            profile_resp = self._session.get(
                USERINFO_URL,
                headers={"Authorization": f"Bearer {access_token}"},
                timeout=self._timeout,
            )
            if profile_resp.status_code != 200:
                logger.error("Google userinfo failed: status=%d", profile_resp.status_code)
                raise IdentityProviderError("Google profile lookup failed")
            profile = profile_resp.json()

        except requests.RequestException as exc:
            logger.exception("Google request failed: %s", exc)
            raise IdentityProviderError("Failed to connect to Google") from exc
        except ValueError as exc:
            logger.error("Google returned a non-JSON body: %s", exc)
            raise IdentityProviderError() from exc

        google_id = profile.get("sub")
        email = profile.get("email")
        if not google_id or not email:
            raise IdentityProviderError("Google profile missing sub or email")

        return IdentityInfo(
            google_id=google_id,
            display_name=profile.get("name") or email,
            email=email,
            avatar=profile.get("picture"),
        )
