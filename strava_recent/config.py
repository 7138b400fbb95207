from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from urllib.parse import urlparse

from dotenv import load_dotenv

from .errors import ConfigError

DEFAULT_REDIRECT_URI = "http://localhost:8080/callback"
DEFAULT_TOKEN_FILE = "strava_token.json"
DEFAULT_LOG_FILE = "strava_recent.log"
DEFAULT_ACTIVITY_LIMIT = 10
DEFAULT_HTTP_TIMEOUT = 30.0

_TRUTHY = {"1", "true", "yes", "on"}


@dataclass(frozen=True)
class AppConfig:
	"""Application configuration for the Strava client.

	Attributes
	----------
	client_id: str
		Strava application client id.
	client_secret: str
		Strava application client secret.
	redirect_uri: str
		Redirect target registered with the Strava application. The local
		callback listener binds to its port and serves its path.
	token_file: Path
		Where the OAuth token (access/refresh) is persisted.
	activity_limit: int
		Number of recent activities to fetch (``per_page``).
	log_file: Path
		Log file written by :func:`strava_recent.utils.configure_logging`.
	open_browser: bool
		Open the authorization URL in a browser in addition to printing it.
	http_timeout: float
		Timeout in seconds for calls to the Strava API.
	"""
	client_id: str
	client_secret: str
	redirect_uri: str = DEFAULT_REDIRECT_URI
	token_file: Path = Path(DEFAULT_TOKEN_FILE)
	activity_limit: int = DEFAULT_ACTIVITY_LIMIT
	log_file: Path = Path(DEFAULT_LOG_FILE)
	open_browser: bool = True
	http_timeout: float = DEFAULT_HTTP_TIMEOUT

	def __post_init__(self) -> None:
		if not self.client_id or not self.client_secret:
			raise ConfigError("Missing Strava credentials. Set CLIENT_ID and CLIENT_SECRET.")
		if not str(self.client_id).isdigit():
			raise ConfigError(f"CLIENT_ID must be numeric, got {self.client_id!r}")
		parsed = urlparse(self.redirect_uri)
		if parsed.scheme not in ("http", "https") or not parsed.hostname:
			raise ConfigError(f"REDIRECT_URI must be an http(s) URL, got {self.redirect_uri!r}")
		if self.activity_limit < 1:
			raise ConfigError("ACTIVITY_LIMIT must be a positive integer")
		if self.http_timeout <= 0:
			raise ConfigError("HTTP_TIMEOUT must be positive")

	@property
	def callback_port(self) -> int:
		parsed = urlparse(self.redirect_uri)
		if parsed.port is not None:
			return parsed.port
		return 443 if parsed.scheme == "https" else 80

	@property
	def callback_path(self) -> str:
		return urlparse(self.redirect_uri).path or "/"


def _int_setting(name: str, default: int) -> int:
	raw = os.getenv(name)
	if raw is None or raw == "":
		return default
	try:
		return int(raw)
	except ValueError:
		raise ConfigError(f"{name} must be an integer, got {raw!r}") from None


def _float_setting(name: str, default: float) -> float:
	raw = os.getenv(name)
	if raw is None or raw == "":
		return default
	try:
		return float(raw)
	except ValueError:
		raise ConfigError(f"{name} must be a number, got {raw!r}") from None


def load_config(env_file: str | Path | None = None) -> AppConfig:
	"""Build an :class:`AppConfig` from the environment (and ``.env`` if present).

	Raises :class:`ConfigError` when credentials are missing or a setting is
	malformed.
	"""
	load_dotenv(dotenv_path=env_file, encoding="utf-8")

	open_browser = os.getenv("OPEN_BROWSER")
	return AppConfig(
		client_id=(os.getenv("CLIENT_ID") or "").strip(),
		client_secret=(os.getenv("CLIENT_SECRET") or "").strip(),
		redirect_uri=os.getenv("REDIRECT_URI") or DEFAULT_REDIRECT_URI,
		token_file=Path(os.getenv("TOKEN_FILE") or DEFAULT_TOKEN_FILE),
		activity_limit=_int_setting("ACTIVITY_LIMIT", DEFAULT_ACTIVITY_LIMIT),
		log_file=Path(os.getenv("LOG_FILE") or DEFAULT_LOG_FILE),
		open_browser=True if open_browser is None else open_browser.strip().lower() in _TRUTHY,
		http_timeout=_float_setting("HTTP_TIMEOUT", DEFAULT_HTTP_TIMEOUT),
	)
