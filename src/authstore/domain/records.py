"""Immutable records handed back to the authentication framework."""

from dataclasses import dataclass
from datetime import datetime

from authstore.shared.time import utc_now


@dataclass(frozen=True)
class User:
    """A local user. Owns zero or more accounts and sessions."""

    id: str
    name: str | None
    email: str | None
    email_verified: datetime | None
    image: str | None
    created_at: datetime
    updated_at: datetime


@dataclass(frozen=True)
class Account:
    """An external OAuth identity linked to a local user."""

    id: str
    user_id: str
    provider_type: str
    provider_id: str
    provider_account_id: str
    refresh_token: str | None
    access_token: str | None
    access_token_expires: datetime | None
    created_at: datetime
    updated_at: datetime


@dataclass(frozen=True)
class Session:
    """A time-bounded proof of authentication for a user."""

    id: str
    user_id: str
    expires: datetime
    session_token: str
    access_token: str
    created_at: datetime
    updated_at: datetime

    def is_expired(self, now: datetime | None = None) -> bool:
        """Check if the session has expired."""
        return (now or utc_now()) > self.expires


@dataclass(frozen=True)
class VerificationRequest:
    """A single-use token confirming control of an identifier."""

    id: str
    identifier: str
    token: str
    expires: datetime
    created_at: datetime
    updated_at: datetime

    def is_expired(self, now: datetime | None = None) -> bool:
        """Check if the request has expired."""
        return (now or utc_now()) > self.expires


@dataclass(frozen=True)
class ExpiredCleanup:
    """Row counts removed by a garbage-collection pass."""

    sessions: int
    verification_requests: int

    @property
    def total(self) -> int:
        return self.sessions + self.verification_requests
