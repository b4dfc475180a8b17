"""
OpenSky OAuth2 token management.

OpenSky issues short-lived bearer tokens through a client-credentials grant.
AuthTokenCache keeps one token per process and refreshes it once it is
older than the validity window (25 minutes by default, a few minutes short
of the server-side expiry).

A failed refresh never raises. The caller gets an empty token and proceeds
unauthenticated, since /states/all still serves anonymous requests at a
lower rate limit.
"""

import logging
import threading
import time
from dataclasses import dataclass
from typing import Callable, Optional

import requests

from flightradar.config import config

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AuthToken:
    """Opaque bearer token and the clock reading when it was fetched."""
    value: str
    fetched_at: float


class AuthTokenCache:
    """
    Holds the OpenSky bearer token and refreshes it on demand.

    Refresh is single-flight: callers that arrive while a refresh is in
    progress block on the same lock and reuse its outcome instead of
    issuing their own grant request.
    """

    def __init__(
        self,
        token_url: str,
        client_id: Optional[str] = None,
        client_secret: Optional[str] = None,
        validity_seconds: float = 25 * 60,
        session: Optional[requests.Session] = None,
        clock: Callable[[], float] = time.monotonic,
        timeout: float = 30,
    ):
        self.token_url = token_url
        self.client_id = client_id
        self.client_secret = client_secret
        self.validity_seconds = validity_seconds
        self.session = session or requests.Session()
        self.timeout = timeout
        self._clock = clock

        self._token: Optional[AuthToken] = None
        self._lock = threading.Lock()
        # Bumped after every refresh attempt, successful or not
        self._generation = 0
        self._refresh_count = 0

        if self.has_credentials:
            logger.info('OpenSky token cache initialized with client credentials')
        else:
            logger.warning('OpenSky client credentials not configured (anonymous rate limits)')

    @classmethod
    def from_config(cls) -> 'AuthTokenCache':
        """Create token cache from application configuration."""
        return cls(
            token_url=config.opensky.token_url,
            client_id=config.opensky.client_id,
            client_secret=config.opensky.client_secret,
            validity_seconds=config.opensky.token_validity_seconds,
            timeout=config.opensky.request_timeout,
        )

    @property
    def has_credentials(self) -> bool:
        return bool(self.client_id and self.client_secret)

    @property
    def token(self) -> Optional[AuthToken]:
        return self._token

    def _is_valid(self, token: Optional[AuthToken]) -> bool:
        if token is None or not token.value:
            return False
        return self._clock() - token.fetched_at <= self.validity_seconds

    def ensure_valid_token(self) -> str:
        """
        Return a usable token, refreshing it first if absent or expired.

        Returns an empty string when no token could be obtained.
        """
        token = self._token
        if self._is_valid(token):
            return token.value

        if not self.has_credentials:
            return ''

        generation = self._generation
        with self._lock:
            if self._generation != generation:
                # Another caller refreshed while we waited for the lock
                token = self._token
                return token.value if token else ''

            token = self._token
            if self._is_valid(token):
                return token.value

            fetched_at = self._clock()
            value = self._fetch_token()
            self._token = AuthToken(value=value, fetched_at=fetched_at) if value else None
            self._generation += 1
            return value

    def invalidate(self) -> None:
        """Drop the current token so the next request refreshes it."""
        with self._lock:
            self._token = None
        logger.info('OpenSky auth token invalidated')

    def _fetch_token(self) -> str:
        """Perform the client-credentials grant. Returns '' on any failure."""
        self._refresh_count += 1
        try:
            response = self.session.post(
                self.token_url,
                data={
                    'grant_type': 'client_credentials',
                    'client_id': self.client_id,
                    'client_secret': self.client_secret,
                },
                timeout=self.timeout,
            )
        except requests.exceptions.RequestException as e:
            logger.error(f'Error fetching OpenSky token: {e}')
            return ''

        if not response.ok:
            logger.error(f'OpenSky auth failed: {response.status_code} - {response.reason}')
            return ''

        try:
            data = response.json()
        except ValueError:
            logger.error('OpenSky auth returned a non-JSON body')
            return ''

        token = data.get('access_token') if isinstance(data, dict) else None
        if not token:
            logger.error('No access token in OpenSky response')
            return ''

        logger.info('OpenSky auth token retrieved')
        return token

    @property
    def stats(self) -> dict:
        token = self._token
        return {
            'has_token': token is not None,
            'token_age_seconds': round(self._clock() - token.fetched_at, 1) if token else None,
            'refresh_count': self._refresh_count,
        }
