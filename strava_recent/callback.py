"""Local HTTP listener that catches Strava's OAuth redirect.

The listener serves exactly one path. The first request on that path
produces a :class:`CallbackOutcome` that is handed to the waiting caller
through a one-slot queue; :class:`CallbackServer` is a context manager so
the listener is shut down however the wait ends.
"""
from __future__ import annotations

import logging
import queue
import threading
from dataclasses import dataclass
from http.server import BaseHTTPRequestHandler, HTTPServer
from typing import Callable
from urllib.parse import parse_qs, urlparse

from .errors import AuthorizationError
from .token_store import TokenInfo

logger = logging.getLogger(__name__)

SUCCESS_MESSAGE = "Authentication successful! You can close this window."


@dataclass(frozen=True)
class CallbackOutcome:
    """Result of the redirect: a token, or the reason there is none."""
    token: TokenInfo | None = None
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.token is not None


class OAuthHandler(BaseHTTPRequestHandler):
    server_version = "StravaRecent/1.0"
    server: "CallbackHTTPServer"

    def do_GET(self) -> None:
        parsed = urlparse(self.path)
        if parsed.path != self.server.callback_path:
            self._reply(404, "Not Found")
            return

        if self.server.resolved:
            self._reply(409, "Authorization already completed.")
            return
        self.server.resolved = True

        qs = parse_qs(parsed.query)
        code = qs.get("code", [""])[0]
        if not code:
            error = qs.get("error", [""])[0]
            logger.warning("Authorization redirect without code (error=%r)", error)
            self.server.outcomes.put(CallbackOutcome(error=f"authorization denied: {error or 'no code returned'}"))
            self._reply(400, f"Error: {error}")
            return

        try:
            token = self.server.on_code(code)
        except Exception as exc:
            logger.error("Exchanging authorization code failed: %s", exc)
            self.server.outcomes.put(CallbackOutcome(error=str(exc)))
            self._reply(500, f"Error exchanging code for token: {exc}")
            return

        self.server.outcomes.put(CallbackOutcome(token=token))
        self._reply(200, SUCCESS_MESSAGE)

    def _reply(self, status: int, message: str) -> None:
        body = message.encode("utf-8")
        try:
            self.send_response(status)
            self.send_header("Content-Type", "text/plain; charset=utf-8")
            self.send_header("Content-Length", str(len(body)))
            self.end_headers()
            self.wfile.write(body)
        except (BrokenPipeError, ConnectionResetError) as exc:
            logger.warning("Browser went away before the reply was sent: %s", exc)

    def log_message(self, format: str, *args) -> None:
        logger.debug("%s - %s", self.address_string(), format % args)


class CallbackHTTPServer(HTTPServer):
    """HTTPServer carrying the callback path, code handler and outcome slot.

    ``resolved`` flips on the first callback and stays set, so only one
    request on the callback path ever reaches ``on_code``.
    """

    def __init__(self, address: tuple[str, int], callback_path: str, on_code: Callable[[str], TokenInfo]) -> None:
        super().__init__(address, OAuthHandler)
        self.callback_path = callback_path
        self.on_code = on_code
        self.resolved = False
        self.outcomes: queue.Queue[CallbackOutcome] = queue.Queue(maxsize=1)


class CallbackServer:
    """Runs :class:`CallbackHTTPServer` on a background thread.

    ``on_code`` is called on the listener thread with the authorization code
    and must return a token or raise; whatever it does is reported through
    :meth:`wait`.
    """

    def __init__(self, port: int, callback_path: str, on_code: Callable[[str], TokenInfo], host: str = "") -> None:
        self.host = host
        self.port = port
        self.callback_path = callback_path
        self.on_code = on_code
        self._httpd: CallbackHTTPServer | None = None
        self._thread: threading.Thread | None = None

    @property
    def server_port(self) -> int:
        if self._httpd is None:
            raise RuntimeError("callback server is not running")
        return self._httpd.server_address[1]

    def __enter__(self) -> "CallbackServer":
        try:
            self._httpd = CallbackHTTPServer((self.host, self.port), self.callback_path, self.on_code)
        except OSError as exc:
            raise AuthorizationError(f"cannot listen for the OAuth callback on port {self.port}: {exc}") from exc
        self._thread = threading.Thread(target=self._httpd.serve_forever, name="oauth-callback", daemon=True)
        self._thread.start()
        logger.info("Listening for OAuth callback on port %s at %s", self.server_port, self.callback_path)
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def wait(self, timeout: float | None = None) -> CallbackOutcome:
        """Block until the callback handler reports an outcome.

        With the default ``timeout=None`` this waits indefinitely. A timeout
        only exists for embedding and tests; it raises ``queue.Empty``.
        """
        if self._httpd is None:
            raise RuntimeError("callback server is not running")
        return self._httpd.outcomes.get(timeout=timeout)

    def close(self) -> None:
        if self._httpd is None:
            return
        self._httpd.shutdown()
        self._httpd.server_close()
        if self._thread is not None:
            self._thread.join()
        logger.info("OAuth callback listener stopped")
        self._httpd = None
        self._thread = None
