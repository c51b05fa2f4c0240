"""User token validation for tool requests."""

from datetime import datetime, timezone
import hashlib
import hmac
from pathlib import Path
from typing import Protocol

import yaml
from pydantic import BaseModel, ValidationError

from flowplan.domain.constants import DEFAULT_TOKENS_FILE
from flowplan.domain.errors import RepositoryError


class TokenValidation(BaseModel):
    """Outcome of validating a user token."""

    valid: bool
    user_id: str | None = None
    error: str | None = None


class TokenAuthenticator(Protocol):
    def validate_token(self, token: str) -> TokenValidation:
        ...


class TokenRecord(BaseModel):
    user_id: str
    token_sha256: str
    expires_at: datetime | None = None

    def is_expired(self, now: datetime) -> bool:
        if self.expires_at is None:
            return False
        expires_at = self.expires_at
        if expires_at.tzinfo is None:
            expires_at = expires_at.replace(tzinfo=timezone.utc)
        return expires_at <= now


def hash_token(token: str) -> str:
    return hashlib.sha256(token.encode("utf-8")).hexdigest()


class TokenStore:
    """Token authenticator backed by a YAML file of hashed API tokens.

    Expected layout::

        tokens:
          - user_id: alice
            token_sha256: <hex digest>
            expires_at: 2027-01-01T00:00:00Z

    Plain tokens are never stored; lookups compare SHA-256 digests.
    """

    def __init__(self, path: Path | None = None):
        self.path = path or DEFAULT_TOKENS_FILE

    def validate_token(self, token: str, *, now: datetime | None = None) -> TokenValidation:
        if not token:
            return TokenValidation(valid=False, error="empty token")

        now = now or datetime.now(timezone.utc)
        digest = hash_token(token)
        for record in self._load_records():
            if hmac.compare_digest(record.token_sha256, digest):
                if record.is_expired(now):
                    return TokenValidation(valid=False, error="token expired")
                return TokenValidation(valid=True, user_id=record.user_id)

        return TokenValidation(valid=False, error="invalid token")

    def _load_records(self) -> list[TokenRecord]:
        try:
            raw = self.path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return []
        except (OSError, UnicodeDecodeError) as e:
            raise RepositoryError(f"Failed to read tokens file: {self.path}") from e

        try:
            data = yaml.safe_load(raw)
        except yaml.YAMLError as e:
            raise RepositoryError(f"Malformed YAML: {self.path}") from e

        if data is None:
            return []
        entries = data.get("tokens", []) if isinstance(data, dict) else None
        if not isinstance(entries, list):
            raise RepositoryError(f"'tokens' must be a list: {self.path}")

        try:
            return [TokenRecord(**entry) for entry in entries]
        except (TypeError, ValidationError) as e:
            raise RepositoryError(f"Invalid token entry in {self.path}: {e}") from e
