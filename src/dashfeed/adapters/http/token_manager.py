"""OAuth access-token lifecycle for the Zoho Analytics API."""

from __future__ import annotations

import logging
import threading
import time
from typing import TYPE_CHECKING

import httpx

from dashfeed.core.exceptions import AuthError
from dashfeed.core.models import Credential


if TYPE_CHECKING:
    from dashfeed.config import Settings
    from dashfeed.core.ports import Clock


logger = logging.getLogger(__name__)

TOKEN_SAFETY_MARGIN = 60.0
DEFAULT_TOKEN_LIFETIME = 3600.0


class TokenLifecycleManager:
    """Obtains and caches a bearer token, refreshing it before it expires.

    The cached credential is handed out until ``safety_margin`` seconds
    before the lifetime the identity endpoint stated, so a caller never
    starts a request with a token about to lapse mid-flight. The cache
    lifetime is floored at ``safety_margin`` so a zero or tiny stated
    lifetime cannot cause back-to-back refreshes.

    Concurrent callers that find the cache cold share a single refresh.

    Example:
        >>> tokens = TokenLifecycleManager(Settings.from_env())
        >>> headers = {"Authorization": f"Zoho-oauthtoken {tokens.get_token().value}"}
    """

    def __init__(
        self,
        settings: Settings,
        client: httpx.Client | None = None,
        *,
        clock: Clock = time.monotonic,
        safety_margin: float = TOKEN_SAFETY_MARGIN,
    ) -> None:
        self._settings = settings
        self._client = client or httpx.Client(timeout=30.0)
        self._clock = clock
        self._safety_margin = safety_margin
        self._credential: Credential | None = None
        self._refresh_lock = threading.Lock()

    @property
    def token_url(self) -> str:
        """Identity endpoint used for refreshes."""
        return f"https://{self._settings.accounts_domain}/oauth/v2/token"

    def get_token(self) -> Credential:
        """Return a valid credential, refreshing it if needed.

        Raises:
            ConfigurationError: If client id, secret or refresh token is missing.
            AuthError: If the identity endpoint fails or answers without a token.
        """
        credential = self._credential
        if credential is not None and credential.is_valid(self._clock()):
            return credential

        with self._refresh_lock:
            # Another caller may have refreshed while we waited.
            credential = self._credential
            if credential is not None and credential.is_valid(self._clock()):
                return credential
            credential = self._refresh()
            self._credential = credential
            return credential

    def invalidate(self) -> None:
        """Drop the cached credential so the next call refreshes."""
        self._credential = None

    def _refresh(self) -> Credential:
        client_id = self._settings.require("ZOHO_CLIENT_ID")
        client_secret = self._settings.require("ZOHO_CLIENT_SECRET")
        refresh_token = self._settings.require("ZOHO_REFRESH_TOKEN")

        logger.debug("Refreshing Zoho access token via %s", self.token_url)
        try:
            response = self._client.post(
                self.token_url,
                data={
                    "refresh_token": refresh_token,
                    "client_id": client_id,
                    "client_secret": client_secret,
                    "grant_type": "refresh_token",
                },
            )
        except (httpx.HTTPError, httpx.InvalidURL) as e:
            raise AuthError(f"Zoho token request failed: {e}") from e

        if not response.is_success:
            raise AuthError(
                f"Zoho token request failed ({response.status_code}): {response.text}",
                status_code=response.status_code,
                body=response.text,
            )

        try:
            payload = response.json()
        except ValueError as e:
            raise AuthError(
                "Zoho token response is not valid JSON",
                status_code=response.status_code,
                body=response.text,
            ) from e

        access_token = payload.get("access_token") if isinstance(payload, dict) else None
        if not access_token:
            raise AuthError(
                "Zoho token response missing access_token",
                status_code=response.status_code,
                body=response.text,
            )

        expires_in = payload.get("expires_in")
        try:
            lifetime = float(expires_in) if expires_in is not None else DEFAULT_TOKEN_LIFETIME
        except (TypeError, ValueError):
            lifetime = DEFAULT_TOKEN_LIFETIME

        duration = max(lifetime - self._safety_margin, self._safety_margin)
        logger.info("Obtained Zoho access token (cached for %.0fs)", duration)
        return Credential(value=str(access_token), expires_at=self._clock() + duration)
