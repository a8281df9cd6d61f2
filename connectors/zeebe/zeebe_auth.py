"""Camunda OAuth2 Authentication Provider.

Obtains bearer tokens for the Zeebe REST API with the OAuth2 client
credentials grant and refreshes them before they expire.
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import Optional

import aiohttp


logger = logging.getLogger(__name__)


@dataclass
class ZeebeAuthConfig:
    """Configuration for Camunda authentication.

    Attributes:
        client_id: OAuth client id
        client_secret: OAuth client secret
        oauth_url: Token endpoint
        audience: Token audience expected by the Zeebe gateway
    """
    client_id: str
    client_secret: str
    oauth_url: str = "https://login.cloud.camunda.io/oauth/token"
    audience: str = "zeebe.camunda.io"

    @property
    def token_endpoint(self) -> str:
        """Get the OAuth2 token endpoint."""
        return self.oauth_url


@dataclass
class ZeebeToken:
    """OAuth2 access token with expiration tracking."""
    access_token: str
    token_type: str
    expires_in: int
    obtained_at: datetime = field(default_factory=datetime.utcnow)

    @property
    def expires_at(self) -> datetime:
        return self.obtained_at + timedelta(seconds=self.expires_in)

    @property
    def is_expired(self) -> bool:
        """Check if token is expired (with 1-minute buffer)."""
        return datetime.utcnow() >= (self.expires_at - timedelta(minutes=1))

    @property
    def authorization_header(self) -> str:
        return f"{self.token_type} {self.access_token}"


class ZeebeAuthProvider:
    """Client credentials token provider.

    Usage:
        auth = ZeebeAuthProvider(ZeebeAuthConfig(client_id="...", client_secret="..."))
        if await auth.ensure_valid_token(session):
            headers["Authorization"] = auth.get_authorization_header()
    """

    def __init__(self, config: ZeebeAuthConfig):
        self.config = config
        self._token: Optional[ZeebeToken] = None
        self.last_error: Optional[str] = None

    async def _fetch_token(self, session: aiohttp.ClientSession) -> bool:
        """Fetch a new access token from the token endpoint."""
        data = {
            "grant_type": "client_credentials",
            "client_id": self.config.client_id,
            "client_secret": self.config.client_secret,
            "audience": self.config.audience,
        }

        try:
            async with session.post(
                self.config.token_endpoint,
                data=data,
                headers={"Content-Type": "application/x-www-form-urlencoded"},
            ) as response:
                if response.status != 200:
                    error_text = await response.text()
                    self.last_error = f"Token request failed: {response.status} - {error_text}"
                    logger.error(self.last_error)
                    return False

                token_data = await response.json()
        except aiohttp.ClientError as e:
            self.last_error = f"Token request failed: {e}"
            logger.error(self.last_error)
            return False

        self._token = ZeebeToken(
            access_token=token_data["access_token"],
            token_type=token_data.get("token_type", "Bearer"),
            expires_in=int(token_data.get("expires_in", 3600)),
        )
        self.last_error = None
        logger.debug(f"Obtained access token valid for {self._token.expires_in}s")
        return True

    def get_token(self) -> Optional[ZeebeToken]:
        """Get the current token if it is still valid."""
        if self._token and not self._token.is_expired:
            return self._token
        return None

    def get_authorization_header(self) -> Optional[str]:
        # Freshly fetched short-lived tokens are already inside the expiry buffer
        return self._token.authorization_header if self._token else None

    async def ensure_valid_token(self, session: aiohttp.ClientSession, force: bool = False) -> bool:
        """Ensure a non-expired token is available, fetching one if needed.

        Args:
            session: HTTP session used for the token request
            force: Fetch a new token even if the current one looks valid

        Returns:
            True if a valid token is available
        """
        if not force and self.get_token() is not None:
            return True
        return await self._fetch_token(session)

    def invalidate(self) -> None:
        """Drop the cached token."""
        self._token = None
