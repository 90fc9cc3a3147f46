# Copyright (c) 2025 Keshav
# Licensed under the GNU Affero General Public License v3.0
# See LICENSE file for details.
"""Bearer-token acquisition and caching for the metering platform.

Tokens are obtained with an OAuth2 password grant.  A cached token is
reused until it is within ``token_refresh_margin_seconds`` of expiry; a
lock guarantees that concurrent callers trigger at most one refresh.
"""

from __future__ import annotations

import datetime as dt
import logging
import threading

import httpx
from pydantic import BaseModel, Field

from energy_insights.config import MeteringSettings
from energy_insights.errors import UpstreamError

logger = logging.getLogger(__name__)


class AccessToken(BaseModel):
    """Token endpoint response plus the computed absolute expiry."""

    access_token: str
    expires_in: int = Field(default=3600, ge=0)
    token_type: str = "Bearer"
    scope: str = ""
    expires_at: dt.datetime | None = None


class TokenProvider:
    """Fetch and cache access tokens for the metering API.

    Parameters
    ----------
    settings:
        Metering connection settings.
    client:
        Optional pre-configured :class:`httpx.Client` (tests inject one
        backed by :class:`httpx.MockTransport`).
    """

    def __init__(
        self,
        settings: MeteringSettings,
        client: httpx.Client | None = None,
    ) -> None:
        self.settings = settings
        self._client = client or httpx.Client(timeout=settings.timeout_seconds)
        self._cached: AccessToken | None = None
        self._lock = threading.Lock()

    @staticmethod
    def _now() -> dt.datetime:
        return dt.datetime.now(dt.timezone.utc)

    def _is_fresh(self, token: AccessToken | None) -> bool:
        if token is None or token.expires_at is None:
            return False
        margin = dt.timedelta(seconds=self.settings.token_refresh_margin_seconds)
        return token.expires_at > self._now() + margin

    def get_access_token(self) -> str:
        """Return a valid bearer token, refreshing it when necessary."""
        with self._lock:
            if self._is_fresh(self._cached):
                logger.debug("Using cached access token")
                return self._cached.access_token  # type: ignore[union-attr]

            logger.info("Fetching new access token")
            self._cached = self.authenticate()
            return self._cached.access_token

    def authenticate(self) -> AccessToken:
        """Perform the password grant and return the parsed token."""
        s = self.settings
        form = {
            "client_id": s.client_id,
            "grant_type": s.grant_type,
            "client_secret": s.resolved_client_secret(),
            "scope": s.scope,
            "username": s.username,
            "password": s.resolved_password(),
        }

        try:
            response = self._client.post(s.auth_url, data=form)
        except httpx.HTTPError as exc:
            raise UpstreamError(f"Authentication request failed: {exc}") from exc

        if response.is_error:
            logger.error(
                "Authentication failed: %s - %s", response.status_code, response.text
            )
            raise UpstreamError(
                f"Authentication failed: {response.status_code}",
                status_code=response.status_code,
            )

        try:
            token = AccessToken.model_validate(response.json())
        except ValueError as exc:
            raise UpstreamError(f"Malformed authentication response: {exc}") from exc

        token = token.model_copy(
            update={"expires_at": self._now() + dt.timedelta(seconds=token.expires_in)}
        )
        logger.info("Authenticated with metering platform; token expires at %s", token.expires_at)
        return token

    def validate_token(self) -> bool:
        """Return ``True`` when a token can be obtained, never raising."""
        try:
            return bool(self.get_access_token())
        except UpstreamError as exc:
            logger.warning("Token validation failed: %s", exc)
            return False

    def close(self) -> None:
        self._client.close()
