import time
import logging
import webbrowser
from typing import Callable, Optional
from urllib.parse import quote

import requests

from .config import AppConfig
from .callback import CallbackServer
from .enums import AuthState
from .errors import AuthorizationError, TokenStoreError, TransportError
from .token_store import FileTokenStore, TokenInfo, TokenStore
from .utils import read_json_response

logger = logging.getLogger(__name__)


class StravaAuth:
    """Owns the OAuth token: loads it, refreshes it, or runs the browser flow.

    The token is persisted through a :class:`TokenStore` (a JSON file at
    ``config.token_file`` unless another store is given).
    """
    AUTHORIZE_URL = "https://www.strava.com/oauth/authorize"
    TOKEN_URL = "https://www.strava.com/oauth/token"
    SCOPE = "read,activity:read_all"

    def __init__(
        self,
        config: AppConfig,
        token_store: TokenStore | None = None,
        present: Optional[Callable[[str], None]] = None,
        clock: Callable[[], float] = time.time,
    ) -> None:
        """Initialize the auth helper.

        Parameters
        ----------
        config: AppConfig
            Credentials, redirect URI and token file location.
        token_store: TokenStore | None
            Persistence for the token (defaults to FileTokenStore(config.token_file)).
        present: Callable[[str], None] | None
            Shows the authorization URL to the user; defaults to printing it
            (and opening a browser when ``config.open_browser`` is set).
        clock: Callable[[], float]
            Source of the current epoch time, used for expiry checks.
        """
        self.config = config
        self.token_store = token_store if token_store is not None else FileTokenStore(config.token_file)
        self.present = present or self._print_authorization_url
        self.clock = clock
        self.token: TokenInfo | None = None
        self.state = AuthState.NO_TOKEN

    def _set_state(self, state: AuthState) -> None:
        logger.info("Auth state %s -> %s", self.state.name, state.name)
        self.state = state

    def authorization_url(self) -> str:
        return (
            f"{self.AUTHORIZE_URL}?client_id={self.config.client_id}"
            f"&redirect_uri={quote(self.config.redirect_uri, safe='')}"
            f"&response_type=code&scope={self.SCOPE}"
        )

    def _print_authorization_url(self, url: str) -> None:
        print(f"Open this URL in your browser to authorize the application:\n{url}")
        if self.config.open_browser:
            webbrowser.open(url)

    def _request_token(self, payload: dict, action: str) -> TokenInfo:
        try:
            resp = requests.post(self.TOKEN_URL, data=payload, timeout=self.config.http_timeout)
        except requests.RequestException as exc:
            raise TransportError(f"{action}: failed to send token request: {exc}") from exc
        return TokenInfo.from_dict(read_json_response(resp, action))

    def exchange_code(self, code: str) -> TokenInfo:
        token = self._request_token({
            "client_id": self.config.client_id,
            "client_secret": self.config.client_secret,
            "code": code,
            "grant_type": "authorization_code",
        }, "token exchange")
        logger.info("Exchanged code for access token, expires_at=%s", token.expires_at)
        return token

    def refresh(self, refresh_token: str) -> TokenInfo:
        token = self._request_token({
            "client_id": self.config.client_id,
            "client_secret": self.config.client_secret,
            "refresh_token": refresh_token,
            "grant_type": "refresh_token",
        }, "token refresh")
        logger.info("Refreshed access token, new expires_at=%s", token.expires_at)
        return token

    def initialize(self) -> TokenInfo:
        """Bring the manager to AUTHORIZED or raise.

        A stored, unexpired token is used as is. A stored, expired token is
        refreshed; if that fails the error propagates, there is no fallback
        to the browser flow. Without a readable stored token the browser
        flow runs and blocks until the redirect arrives.
        """
        try:
            stored = self.token_store.load()
        except TokenStoreError as exc:
            logger.info("No usable stored token (%s); starting OAuth flow", exc)
            return self._authorize()

        if not stored.is_expired(self.clock()):
            self.token = stored
            self._set_state(AuthState.AUTHORIZED)
            return stored

        logger.info("Stored token expired at %s; refreshing", stored.expires_at)
        self._set_state(AuthState.REFRESHING)
        token = self.refresh(stored.refresh_token)
        self.token_store.save(token)
        self.token = token
        self._set_state(AuthState.AUTHORIZED)
        return token

    def _exchange_and_save(self, code: str) -> TokenInfo:
        token = self.exchange_code(code)
        self.token_store.save(token)
        return token

    def _authorize(self) -> TokenInfo:
        self._set_state(AuthState.AUTHORIZING)
        print("No valid token found. Starting OAuth flow...")
        with CallbackServer(self.config.callback_port, self.config.callback_path, self._exchange_and_save) as server:
            self.present(self.authorization_url())
            outcome = server.wait()

        if not outcome.ok:
            self._set_state(AuthState.NO_TOKEN)
            raise AuthorizationError(f"authorization failed: {outcome.error}")
        self.token = outcome.token
        self._set_state(AuthState.AUTHORIZED)
        return outcome.token
