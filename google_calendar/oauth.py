"""Google OAuth 2.0 token handling for the calendar client."""
import logging
import time
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Optional
from urllib.parse import urlencode

import requests

logger = logging.getLogger(__name__)


class NotAuthenticatedError(Exception):
    """Raised when no OAuth tokens are available."""


@dataclass
class OAuthTokens:
    """OAuth tokens from Google."""
    access_token: str
    refresh_token: str
    expires_at: float  # Unix timestamp in seconds


class TokenStorage(ABC):
    """Persistence for OAuth tokens."""

    @abstractmethod
    def get_tokens(self) -> Optional[OAuthTokens]:
        """Return the stored tokens, if any."""

    @abstractmethod
    def save_tokens(self, tokens: OAuthTokens) -> None:
        """Persist new tokens."""

    @abstractmethod
    def clear_tokens(self) -> None:
        """Forget the stored tokens."""


class InMemoryTokenStorage(TokenStorage):
    """Token storage that lives for the duration of one process."""

    def __init__(self, tokens: Optional[OAuthTokens] = None):
        self._tokens = tokens

    def get_tokens(self) -> Optional[OAuthTokens]:
        return self._tokens

    def save_tokens(self, tokens: OAuthTokens) -> None:
        self._tokens = tokens

    def clear_tokens(self) -> None:
        self._tokens = None


class OAuthService:
    """
    Service for Google OAuth 2.0 authentication.

    Uses the authorization code flow for desktop apps with manual code entry.
    """

    AUTH_URL = 'https://accounts.google.com/o/oauth2/v2/auth'
    TOKEN_URL = 'https://oauth2.googleapis.com/token'
    # Loopback redirect; Google shows the code in the browser URL
    REDIRECT_URI = 'http://127.0.0.1'
    SCOPES = [
        'https://www.googleapis.com/auth/calendar.readonly',
        'https://www.googleapis.com/auth/calendar.events.readonly',
    ]
    REFRESH_BUFFER_SECONDS = 5 * 60

    def __init__(
        self,
        client_id: str,
        client_secret: str,
        storage: TokenStorage,
        timeout: int = 30
    ):
        """
        Initialize the OAuth service.

        Args:
            client_id: OAuth client ID
            client_secret: OAuth client secret
            storage: Token persistence
            timeout: HTTP request timeout in seconds (default: 30)
        """
        self.client_id = client_id
        self.client_secret = client_secret
        self.storage = storage
        self.timeout = timeout

    def is_authenticated(self) -> bool:
        tokens = self.storage.get_tokens()
        return tokens is not None and bool(tokens.access_token or tokens.refresh_token)

    def get_access_token(self) -> str:
        """
        Get a valid access token, refreshing it when close to expiry.

        Raises:
            NotAuthenticatedError: If no tokens are stored
            requests.HTTPError: If the refresh request fails
        """
        tokens = self.storage.get_tokens()
        if not tokens:
            raise NotAuthenticatedError(
                'Not authenticated. Connect to Google Calendar first.'
            )

        if time.time() >= tokens.expires_at - self.REFRESH_BUFFER_SECONDS:
            logger.info("Access token expired or about to expire, refreshing")
            tokens = self._refresh_tokens(tokens.refresh_token)
            self.storage.save_tokens(tokens)

        return tokens.access_token

    def get_authorization_url(self) -> str:
        """Build the URL the user opens to grant calendar access."""
        params = {
            'client_id': self.client_id,
            'redirect_uri': self.REDIRECT_URI,
            'response_type': 'code',
            'scope': ' '.join(self.SCOPES),
            'access_type': 'offline',
            'prompt': 'consent',
        }
        return f"{self.AUTH_URL}?{urlencode(params)}"

    def exchange_code_for_tokens(self, code: str) -> OAuthTokens:
        """
        Exchange an authorization code for tokens and store them.

        Raises:
            requests.HTTPError: If Google rejects the code
        """
        data = self._post_token_request({
            'client_id': self.client_id,
            'client_secret': self.client_secret,
            'code': code,
            'grant_type': 'authorization_code',
            'redirect_uri': self.REDIRECT_URI,
        })

        tokens = OAuthTokens(
            access_token=data['access_token'],
            refresh_token=data.get('refresh_token', ''),
            expires_at=time.time() + data['expires_in']
        )
        self.storage.save_tokens(tokens)
        logger.info("Exchanged authorization code for tokens")
        return tokens

    def disconnect(self) -> None:
        self.storage.clear_tokens()
        logger.info("Cleared stored OAuth tokens")

    def _refresh_tokens(self, refresh_token: str) -> OAuthTokens:
        data = self._post_token_request({
            'client_id': self.client_id,
            'client_secret': self.client_secret,
            'refresh_token': refresh_token,
            'grant_type': 'refresh_token',
        })

        return OAuthTokens(
            access_token=data['access_token'],
            # Google only returns a new refresh token occasionally
            refresh_token=data.get('refresh_token') or refresh_token,
            expires_at=time.time() + data['expires_in']
        )

    def _post_token_request(self, params: dict) -> dict:
        response = requests.post(
            self.TOKEN_URL,
            data=params,
            timeout=self.timeout
        )
        try:
            response.raise_for_status()
        except requests.HTTPError as e:
            logger.error(f"Token request failed: {e}")
            raise
        return response.json()
