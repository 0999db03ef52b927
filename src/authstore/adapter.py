"""Abstract storage adapter interface for the authentication framework."""

from abc import ABC, abstractmethod
from datetime import datetime

from authstore.domain import (
    Account,
    ExpiredCleanup,
    Session,
    User,
    VerificationRequest,
)


class Adapter(ABC):
    """Storage operations the authentication framework delegates to.

    Every operation is atomic on its own. Lookups return ``None`` when
    nothing matches; update and delete-by-id operations raise
    ``NotFoundError`` instead. Deletes of sessions and verification
    requests are idempotent.
    """

    # Users

    @abstractmethod
    async def create_user(
        self,
        name: str | None = None,
        email: str | None = None,
        email_verified: datetime | None = None,
        image: str | None = None,
    ) -> User:
        """Create a user with a generated id.

        Raises
        ------
        ConstraintViolationError
            If the email is already in use
        """

    @abstractmethod
    async def get_user(self, user_id: str) -> User | None:
        """Find a user by id."""

    @abstractmethod
    async def get_user_by_email(self, email: str) -> User | None:
        """Find a user by email address."""

    @abstractmethod
    async def get_user_by_provider_account_id(
        self,
        provider_id: str,
        provider_account_id: str,
    ) -> User | None:
        """Find the user owning the account linked to a provider identity."""

    @abstractmethod
    async def update_user(self, user: User) -> User:
        """Write name, email, email_verified and image of an existing user.

        Raises
        ------
        NotFoundError
            If no user has ``user.id``
        ConstraintViolationError
            If the new email belongs to another user
        """

    @abstractmethod
    async def delete_user(self, user_id: str) -> None:
        """Delete a user together with its accounts and sessions.

        Raises
        ------
        NotFoundError
            If no user has ``user_id``
        """

    # Accounts

    @abstractmethod
    async def link_account(
        self,
        user_id: str,
        provider_type: str,
        provider_id: str,
        provider_account_id: str,
        refresh_token: str | None = None,
        access_token: str | None = None,
        access_token_expires: datetime | None = None,
    ) -> Account:
        """Link a provider identity to a user.

        Raises
        ------
        ConstraintViolationError
            If the provider identity is already linked to any user
        NotFoundError
            If the user does not exist
        """

    @abstractmethod
    async def unlink_account(self, provider_id: str, provider_account_id: str) -> None:
        """Remove the account linked to a provider identity.

        Raises
        ------
        NotFoundError
            If no account matches
        """

    @abstractmethod
    async def get_accounts_for_user(self, user_id: str) -> list[Account]:
        """List a user's linked accounts, oldest first."""

    # Sessions

    @abstractmethod
    async def create_session(
        self,
        user_id: str,
        expires: datetime | None = None,
    ) -> Session:
        """Create a session with generated session and access tokens.

        Parameters
        ----------
        user_id
            Owner of the session
        expires
            Expiry; defaults to now plus the session max age

        Raises
        ------
        NotFoundError
            If the user does not exist
        """

    @abstractmethod
    async def get_session(self, session_token: str) -> Session | None:
        """Find an unexpired session by its token.

        An expired session is deleted and reported as ``None``.
        """

    @abstractmethod
    async def update_session(self, session: Session, force: bool = False) -> Session:
        """Extend a session's expiry when it is due for refresh.

        Parameters
        ----------
        session
            Session to update, identified by ``session.id``
        force
            Write ``session.expires`` even when no refresh is due

        Returns
        -------
        The stored session, or ``session`` unchanged when nothing was written

        Raises
        ------
        NotFoundError
            If no session has ``session.id``, or the stored session has
            expired. An expired session is deleted, never extended.
        """

    @abstractmethod
    async def delete_session(self, session_token: str) -> None:
        """Delete a session by token. Deleting an absent session is a no-op."""

    # Verification requests

    @abstractmethod
    async def create_verification_request(
        self,
        identifier: str,
        token: str,
        expires: datetime,
    ) -> VerificationRequest:
        """Store a verification request.

        Raises
        ------
        ConstraintViolationError
            If the (identifier, token) pair already exists
        """

    @abstractmethod
    async def get_verification_request(
        self,
        identifier: str,
        token: str,
    ) -> VerificationRequest | None:
        """Find an unexpired verification request.

        An expired request is deleted and reported as ``None``.
        """

    @abstractmethod
    async def use_verification_request(
        self,
        identifier: str,
        token: str,
    ) -> VerificationRequest | None:
        """Consume a verification request.

        Returns
        -------
        The request if it was active and this call deleted it, otherwise None
        """

    @abstractmethod
    async def delete_verification_request(self, identifier: str, token: str) -> None:
        """Delete a verification request. Deleting an absent one is a no-op."""

    # Maintenance

    @abstractmethod
    async def delete_expired(self, now: datetime | None = None) -> ExpiredCleanup:
        """Remove sessions and verification requests that expired before ``now``."""
