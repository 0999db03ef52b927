"""Tests for the stored entity records."""

from dataclasses import FrozenInstanceError
from datetime import timedelta

import pytest

from authstore.domain import ExpiredCleanup, Session, VerificationRequest
from authstore.shared import utc_now


def _session(expires) -> Session:
    now = utc_now()
    return Session(
        id="s1",
        user_id="u1",
        expires=expires,
        session_token="st",
        access_token="at",
        created_at=now,
        updated_at=now,
    )


class TestSession:
    """Test cases for Session."""

    def test_not_expired_before_expiry(self):
        assert not _session(utc_now() + timedelta(minutes=5)).is_expired()

    def test_expired_after_expiry(self):
        assert _session(utc_now() - timedelta(seconds=1)).is_expired()

    def test_expiry_against_explicit_clock(self):
        expires = utc_now()
        session = _session(expires)

        assert not session.is_expired(expires)
        assert session.is_expired(expires + timedelta(microseconds=1))

    def test_is_frozen(self):
        session = _session(utc_now())

        with pytest.raises(FrozenInstanceError):
            session.expires = utc_now()  # type: ignore[misc]


class TestVerificationRequest:
    """Test cases for VerificationRequest."""

    def test_expiry(self):
        now = utc_now()
        request = VerificationRequest(
            id="v1",
            identifier="a@example.com",
            token="t1",
            expires=now,
            created_at=now,
            updated_at=now,
        )

        assert not request.is_expired(now - timedelta(seconds=1))
        assert request.is_expired(now + timedelta(seconds=1))


class TestExpiredCleanup:
    def test_total(self):
        assert ExpiredCleanup(sessions=2, verification_requests=3).total == 5
