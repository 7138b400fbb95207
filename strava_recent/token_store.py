"""Token record and persistence strategies.

``TokenStore`` lets the token lifecycle swap persistence (a JSON file for
normal use, memory for tests) without changing the auth code.
"""
from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import asdict, dataclass, field
from pathlib import Path
from typing import Any
import json
import logging

from .errors import DecodeError, TokenStoreError

logger = logging.getLogger(__name__)

TOKEN_FIELDS = ("access_token", "refresh_token", "expires_at", "expires_in", "token_type", "athlete")


@dataclass(frozen=True)
class TokenInfo:
    """OAuth token as issued by Strava's token endpoint."""
    access_token: str
    refresh_token: str
    expires_at: int
    expires_in: int
    token_type: str
    athlete: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: Any) -> "TokenInfo":
        """Build a token from a decoded JSON object.

        All fields except ``athlete`` are mandatory; the refresh grant does
        not return the athlete profile, so it defaults to an empty mapping.
        Raises :class:`DecodeError` instead of producing a partial token.
        """
        if not isinstance(data, dict):
            raise DecodeError(f"token payload must be a JSON object, got {type(data).__name__}")
        missing = [k for k in TOKEN_FIELDS[:-1] if data.get(k) is None]
        if missing:
            raise DecodeError(f"token payload is missing {', '.join(missing)}")
        athlete = data.get("athlete") or {}
        if not isinstance(athlete, dict):
            raise DecodeError("token payload field 'athlete' must be a JSON object")
        try:
            return cls(
                access_token=str(data["access_token"]),
                refresh_token=str(data["refresh_token"]),
                expires_at=int(data["expires_at"]),
                expires_in=int(data["expires_in"]),
                token_type=str(data["token_type"]),
                athlete=athlete,
            )
        except (TypeError, ValueError) as exc:
            raise DecodeError(f"token payload has invalid field types: {exc}") from exc

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)

    def is_expired(self, now: float) -> bool:
        """True once ``expires_at`` lies strictly in the past."""
        return self.expires_at < now


class TokenStore(ABC):
    """Abstract base class for token persistence strategies."""

    @abstractmethod
    def load(self) -> TokenInfo:
        """Return the stored token or raise :class:`TokenStoreError`."""
        pass

    @abstractmethod
    def save(self, token: TokenInfo) -> None:
        """Persist token, replacing whatever was stored before."""
        pass


class FileTokenStore(TokenStore):
    """Token storage backed by a JSON file."""

    def __init__(self, file_path: Path | str) -> None:
        self.file_path = Path(file_path)

    def load(self) -> TokenInfo:
        try:
            with open(self.file_path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except FileNotFoundError as exc:
            raise TokenStoreError(f"no token file at {self.file_path}") from exc
        except (OSError, ValueError) as exc:
            raise TokenStoreError(f"cannot read token file {self.file_path}: {exc}") from exc
        try:
            token = TokenInfo.from_dict(data)
        except DecodeError as exc:
            raise TokenStoreError(f"malformed token file {self.file_path}: {exc}") from exc
        logger.debug("Loaded token from %s", self.file_path)
        return token

    def save(self, token: TokenInfo) -> None:
        try:
            self.file_path.parent.mkdir(parents=True, exist_ok=True)
            with open(self.file_path, "w", encoding="utf-8") as f:
                json.dump(token.to_dict(), f, indent=2)
                f.write("\n")
        except OSError as exc:
            raise TokenStoreError(f"cannot write token file {self.file_path}: {exc}") from exc
        logger.debug("Saved token to %s", self.file_path)


class InMemoryTokenStore(TokenStore):
    """Token storage in memory (lost on process exit)."""

    def __init__(self, token: TokenInfo | None = None) -> None:
        self._token = token

    def load(self) -> TokenInfo:
        if self._token is None:
            raise TokenStoreError("no token stored in memory")
        return self._token

    def save(self, token: TokenInfo) -> None:
        self._token = token
        logger.debug("Stored token in memory")
