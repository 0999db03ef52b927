"""SQLAlchemy implementation of the storage Adapter."""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from datetime import datetime, timedelta
from typing import Any

from sqlalchemy import Row, delete, select, update
from sqlalchemy.ext.asyncio import AsyncConnection, AsyncEngine

from authstore.adapter import Adapter
from authstore.domain import (
    Account,
    ExpiredCleanup,
    ModelMapping,
    SchemaVariant,
    Session,
    User,
    VerificationRequest,
)
from authstore.exceptions import NotFoundError
from authstore.infrastructure.persistence.sqlalchemy.errors import (
    translate_storage_errors,
)
from authstore.infrastructure.persistence.sqlalchemy.init_db import (
    create_schema,
    drop_schema,
)
from authstore.infrastructure.persistence.sqlalchemy.tables import AuthTables
from authstore.shared import (
    compound_id,
    ensure_tz_aware,
    ensure_tz_aware_or_none,
    generate_id,
    generate_token,
    hash_token,
    to_utc,
    utc_now,
)
from authstore_config import Settings

logger = logging.getLogger(__name__)

DEFAULT_SESSION_MAX_AGE = timedelta(days=30)
DEFAULT_SESSION_UPDATE_AGE = timedelta(days=1)


class SQLAlchemyAdapter(Adapter):
    """Adapter storing auth entities in four SQLAlchemy Core tables.

    Each operation runs in its own transaction on the injected engine.
    Uniqueness is enforced by the schema's unique constraints, never by
    check-then-insert.

    Deleting a user cascades to its accounts and sessions.
    """

    def __init__(
        self,
        engine: AsyncEngine,
        model_mapping: ModelMapping | None = None,
        variant: SchemaVariant = SchemaVariant.CURRENT,
        secret: str | None = None,
        session_max_age: timedelta = DEFAULT_SESSION_MAX_AGE,
        session_update_age: timedelta = DEFAULT_SESSION_UPDATE_AGE,
    ) -> None:
        self._engine = engine
        self._tables = AuthTables.build(model_mapping, variant)
        self._secret = secret
        self._session_max_age = session_max_age
        self._session_update_age = session_update_age

    @classmethod
    def from_settings(
        cls,
        engine: AsyncEngine,
        settings: Settings,
        model_mapping: ModelMapping | None = None,
    ) -> "SQLAlchemyAdapter":
        secret = settings.auth_secret.get_secret_value() if settings.auth_secret else None
        return cls(
            engine,
            model_mapping=model_mapping,
            variant=SchemaVariant(settings.schema_variant),
            secret=secret,
            session_max_age=settings.session_max_age,
            session_update_age=settings.session_update_age,
        )

    @property
    def engine(self) -> AsyncEngine:
        return self._engine

    @property
    def tables(self) -> AuthTables:
        return self._tables

    @property
    def variant(self) -> SchemaVariant:
        return self._tables.variant

    async def create_schema(self) -> None:
        await create_schema(self._engine, self._tables)

    async def drop_schema(self) -> None:
        await drop_schema(self._engine, self._tables)

    # Users

    async def create_user(
        self,
        name: str | None = None,
        email: str | None = None,
        email_verified: datetime | None = None,
        image: str | None = None,
    ) -> User:
        t = self._tables.user
        now = utc_now()
        values: dict[str, Any] = {
            "name": name,
            "email": email,
            "email_verified": to_utc(email_verified) if email_verified else None,
            "image": image,
            "created_at": now,
            "updated_at": now,
        }
        if self.variant == SchemaVariant.CURRENT:
            values["id"] = generate_id()

        async with self._transaction("User", "email") as conn:
            result = await conn.execute(t.insert().values(**values))
            user_id = str(result.inserted_primary_key[0])

        logger.info("Created user: %s", user_id)
        return User(
            id=user_id,
            name=name,
            email=email,
            email_verified=values["email_verified"],
            image=image,
            created_at=now,
            updated_at=now,
        )

    async def get_user(self, user_id: str) -> User | None:
        pk = self._parse_id(user_id)
        if pk is None:
            return None

        t = self._tables.user
        async with self._transaction("User") as conn:
            result = await conn.execute(select(t).where(t.c.id == pk))
            row = result.first()

        return self._to_user(row) if row else None

    async def get_user_by_email(self, email: str) -> User | None:
        t = self._tables.user
        async with self._transaction("User") as conn:
            result = await conn.execute(select(t).where(t.c.email == email))
            row = result.first()

        return self._to_user(row) if row else None

    async def get_user_by_provider_account_id(
        self,
        provider_id: str,
        provider_account_id: str,
    ) -> User | None:
        users = self._tables.user
        accounts = self._tables.account
        stmt = (
            select(users)
            .select_from(users.join(accounts, accounts.c.user_id == users.c.id))
            .where(
                accounts.c.provider_id == provider_id,
                accounts.c.provider_account_id == provider_account_id,
            )
        )
        async with self._transaction("User") as conn:
            result = await conn.execute(stmt)
            row = result.first()

        return self._to_user(row) if row else None

    async def update_user(self, user: User) -> User:
        pk = self._parse_id(user.id)
        if pk is None:
            raise NotFoundError("User", user.id)

        t = self._tables.user
        stmt = (
            update(t)
            .where(t.c.id == pk)
            .values(
                name=user.name,
                email=user.email,
                email_verified=to_utc(user.email_verified) if user.email_verified else None,
                image=user.image,
                updated_at=utc_now(),
            )
        )
        async with self._transaction("User", "email") as conn:
            result = await conn.execute(stmt)
            if result.rowcount == 0:
                raise NotFoundError("User", user.id)
            row = (await conn.execute(select(t).where(t.c.id == pk))).one()

        logger.debug("Updated user: %s", user.id)
        return self._to_user(row)

    async def delete_user(self, user_id: str) -> None:
        pk = self._parse_id(user_id)
        if pk is None:
            raise NotFoundError("User", user_id)

        t = self._tables
        async with self._transaction("User") as conn:
            sessions = await conn.execute(delete(t.session).where(t.session.c.user_id == pk))
            accounts = await conn.execute(delete(t.account).where(t.account.c.user_id == pk))
            result = await conn.execute(delete(t.user).where(t.user.c.id == pk))
            if result.rowcount == 0:
                raise NotFoundError("User", user_id)

        logger.info(
            "Deleted user %s with %d account(s) and %d session(s)",
            user_id,
            accounts.rowcount,
            sessions.rowcount,
        )

    # Accounts

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
        pk = self._parse_id(user_id)
        if pk is None:
            raise NotFoundError("User", user_id)

        t = self._tables.account
        now = utc_now()
        expires = to_utc(access_token_expires) if access_token_expires else None
        values: dict[str, Any] = {
            "user_id": pk,
            "provider_type": provider_type,
            "provider_id": provider_id,
            "provider_account_id": provider_account_id,
            "refresh_token": refresh_token,
            "access_token": access_token,
            "access_token_expires": expires,
            "created_at": now,
            "updated_at": now,
        }
        if self.variant == SchemaVariant.CURRENT:
            values["id"] = generate_id()
        else:
            values["compound_id"] = compound_id(provider_id, provider_account_id)

        async with self._transaction("Account", "(provider_id, provider_account_id)") as conn:
            await self._require_user(conn, pk, user_id)
            result = await conn.execute(t.insert().values(**values))
            account_id = str(result.inserted_primary_key[0])

        logger.info(
            "Linked %s account %s to user %s",
            provider_id,
            provider_account_id,
            user_id,
        )
        return Account(
            id=account_id,
            user_id=user_id,
            provider_type=provider_type,
            provider_id=provider_id,
            provider_account_id=provider_account_id,
            refresh_token=refresh_token,
            access_token=access_token,
            access_token_expires=expires,
            created_at=now,
            updated_at=now,
        )

    async def unlink_account(self, provider_id: str, provider_account_id: str) -> None:
        t = self._tables.account
        stmt = delete(t).where(
            t.c.provider_id == provider_id,
            t.c.provider_account_id == provider_account_id,
        )
        async with self._transaction("Account") as conn:
            result = await conn.execute(stmt)
            if result.rowcount == 0:
                raise NotFoundError("Account", f"{provider_id}:{provider_account_id}")

        logger.info("Unlinked %s account %s", provider_id, provider_account_id)

    async def get_accounts_for_user(self, user_id: str) -> list[Account]:
        pk = self._parse_id(user_id)
        if pk is None:
            return []

        t = self._tables.account
        stmt = select(t).where(t.c.user_id == pk).order_by(t.c.created_at, t.c.id)
        async with self._transaction("Account") as conn:
            result = await conn.execute(stmt)
            rows = result.all()

        return [self._to_account(row) for row in rows]

    # Sessions

    async def create_session(
        self,
        user_id: str,
        expires: datetime | None = None,
    ) -> Session:
        pk = self._parse_id(user_id)
        if pk is None:
            raise NotFoundError("User", user_id)

        t = self._tables.session
        now = utc_now()
        values: dict[str, Any] = {
            "user_id": pk,
            "expires": to_utc(expires) if expires else now + self._session_max_age,
            "session_token": generate_token(),
            "access_token": generate_token(),
            "created_at": now,
            "updated_at": now,
        }
        if self.variant == SchemaVariant.CURRENT:
            values["id"] = generate_id()

        async with self._transaction("Session", "session_token/access_token") as conn:
            await self._require_user(conn, pk, user_id)
            result = await conn.execute(t.insert().values(**values))
            session_id = str(result.inserted_primary_key[0])

        logger.debug("Created session %s for user %s", session_id, user_id)
        return Session(
            id=session_id,
            user_id=user_id,
            expires=values["expires"],
            session_token=values["session_token"],
            access_token=values["access_token"],
            created_at=now,
            updated_at=now,
        )

    async def get_session(self, session_token: str) -> Session | None:
        t = self._tables.session
        async with self._transaction("Session") as conn:
            result = await conn.execute(select(t).where(t.c.session_token == session_token))
            row = result.first()
            if row is None:
                return None

            session = self._to_session(row)
            if session.is_expired():
                await conn.execute(delete(t).where(t.c.id == row._mapping[t.c.id]))
                logger.debug("Removed expired session %s", session.id)
                return None

        return session

    async def update_session(self, session: Session, force: bool = False) -> Session:
        pk = self._parse_id(session.id)
        if pk is None:
            raise NotFoundError("Session", session.id)

        t = self._tables.session
        now = utc_now()
        async with self._transaction("Session") as conn:
            row = (await conn.execute(select(t).where(t.c.id == pk))).first()
            if row is None:
                raise NotFoundError("Session", session.id)

            stored = self._to_session(row)
            expired = stored.is_expired(now)
            if expired:
                # Expired sessions are removed, never revived
                await conn.execute(delete(t).where(t.c.id == pk))
            else:
                due_at = stored.expires - self._session_max_age + self._session_update_age
                if now > due_at:
                    expires = now + self._session_max_age
                elif force:
                    expires = to_utc(session.expires)
                else:
                    return session

                await conn.execute(
                    update(t).where(t.c.id == pk).values(expires=expires, updated_at=now),
                )
                row = (await conn.execute(select(t).where(t.c.id == pk))).one()

        if expired:
            logger.debug("Removed expired session %s", session.id)
            raise NotFoundError("Session", session.id)

        logger.debug("Extended session %s until %s", session.id, expires.isoformat())
        return self._to_session(row)

    async def delete_session(self, session_token: str) -> None:
        t = self._tables.session
        async with self._transaction("Session") as conn:
            await conn.execute(delete(t).where(t.c.session_token == session_token))

    # Verification requests

    async def create_verification_request(
        self,
        identifier: str,
        token: str,
        expires: datetime,
    ) -> VerificationRequest:
        t = self._tables.verification_request
        now = utc_now()
        values: dict[str, Any] = {
            "identifier": identifier,
            "token": hash_token(token, self._secret),
            "expires": to_utc(expires),
            "created_at": now,
            "updated_at": now,
        }
        if self.variant == SchemaVariant.CURRENT:
            values["id"] = generate_id()

        async with self._transaction("VerificationRequest", "(identifier, token)") as conn:
            result = await conn.execute(t.insert().values(**values))
            request_id = str(result.inserted_primary_key[0])

        logger.debug("Created verification request for %s", identifier)
        return VerificationRequest(
            id=request_id,
            identifier=identifier,
            token=values["token"],
            expires=values["expires"],
            created_at=now,
            updated_at=now,
        )

    async def get_verification_request(
        self,
        identifier: str,
        token: str,
    ) -> VerificationRequest | None:
        t = self._tables.verification_request
        async with self._transaction("VerificationRequest") as conn:
            row = await self._find_verification_row(conn, identifier, token)
            if row is None:
                return None

            request = self._to_verification_request(row)
            if request.is_expired():
                await conn.execute(delete(t).where(t.c.id == row._mapping[t.c.id]))
                logger.debug("Removed expired verification request for %s", identifier)
                return None

        return request

    async def use_verification_request(
        self,
        identifier: str,
        token: str,
    ) -> VerificationRequest | None:
        t = self._tables.verification_request
        async with self._transaction("VerificationRequest") as conn:
            row = await self._find_verification_row(conn, identifier, token)
            if row is None:
                return None

            result = await conn.execute(delete(t).where(t.c.id == row._mapping[t.c.id]))
            if result.rowcount != 1:
                # Consumed by a concurrent caller between our read and delete
                return None

        request = self._to_verification_request(row)
        if request.is_expired():
            return None

        logger.debug("Consumed verification request for %s", identifier)
        return request

    async def delete_verification_request(self, identifier: str, token: str) -> None:
        t = self._tables.verification_request
        stmt = delete(t).where(
            t.c.identifier == identifier,
            t.c.token == hash_token(token, self._secret),
        )
        async with self._transaction("VerificationRequest") as conn:
            await conn.execute(stmt)

    # Maintenance

    async def delete_expired(self, now: datetime | None = None) -> ExpiredCleanup:
        cutoff = to_utc(now) if now else utc_now()
        sessions = self._tables.session
        requests = self._tables.verification_request

        async with self._transaction("Session/VerificationRequest") as conn:
            session_result = await conn.execute(
                delete(sessions).where(sessions.c.expires < cutoff),
            )
            request_result = await conn.execute(
                delete(requests).where(requests.c.expires < cutoff),
            )

        cleanup = ExpiredCleanup(
            sessions=session_result.rowcount,
            verification_requests=request_result.rowcount,
        )
        if cleanup.total:
            logger.info(
                "Purged %d expired session(s) and %d verification request(s)",
                cleanup.sessions,
                cleanup.verification_requests,
            )
        return cleanup

    # Helpers

    @asynccontextmanager
    async def _transaction(
        self,
        entity: str,
        constraint: str = "",
    ) -> AsyncIterator[AsyncConnection]:
        async with translate_storage_errors(entity, constraint):
            async with self._engine.begin() as conn:
                yield conn

    def _parse_id(self, value: str) -> str | int | None:
        """Convert an external id to the stored primary key type.

        Returns None when the value cannot name a row in this variant.
        """
        if self.variant == SchemaVariant.CURRENT:
            return value
        try:
            return int(value)
        except (TypeError, ValueError):
            return None

    async def _require_user(self, conn: AsyncConnection, pk: str | int, user_id: str) -> None:
        t = self._tables.user
        result = await conn.execute(select(t.c.id).where(t.c.id == pk))
        if result.first() is None:
            raise NotFoundError("User", user_id)

    async def _find_verification_row(
        self,
        conn: AsyncConnection,
        identifier: str,
        token: str,
    ) -> Row | None:
        t = self._tables.verification_request
        stmt = select(t).where(
            t.c.identifier == identifier,
            t.c.token == hash_token(token, self._secret),
        )
        result = await conn.execute(stmt)
        return result.first()

    def _to_user(self, row: Row) -> User:
        t = self._tables.user
        m = row._mapping
        return User(
            id=str(m[t.c.id]),
            name=m[t.c.name],
            email=m[t.c.email],
            email_verified=ensure_tz_aware_or_none(m[t.c.email_verified]),
            image=m[t.c.image],
            created_at=ensure_tz_aware(m[t.c.created_at]),
            updated_at=ensure_tz_aware(m[t.c.updated_at]),
        )

    def _to_account(self, row: Row) -> Account:
        t = self._tables.account
        m = row._mapping
        return Account(
            id=str(m[t.c.id]),
            user_id=str(m[t.c.user_id]),
            provider_type=m[t.c.provider_type],
            provider_id=m[t.c.provider_id],
            provider_account_id=m[t.c.provider_account_id],
            refresh_token=m[t.c.refresh_token],
            access_token=m[t.c.access_token],
            access_token_expires=ensure_tz_aware_or_none(m[t.c.access_token_expires]),
            created_at=ensure_tz_aware(m[t.c.created_at]),
            updated_at=ensure_tz_aware(m[t.c.updated_at]),
        )

    def _to_session(self, row: Row) -> Session:
        t = self._tables.session
        m = row._mapping
        return Session(
            id=str(m[t.c.id]),
            user_id=str(m[t.c.user_id]),
            expires=ensure_tz_aware(m[t.c.expires]),
            session_token=m[t.c.session_token],
            access_token=m[t.c.access_token],
            created_at=ensure_tz_aware(m[t.c.created_at]),
            updated_at=ensure_tz_aware(m[t.c.updated_at]),
        )

    def _to_verification_request(self, row: Row) -> VerificationRequest:
        t = self._tables.verification_request
        m = row._mapping
        return VerificationRequest(
            id=str(m[t.c.id]),
            identifier=m[t.c.identifier],
            token=m[t.c.token],
            expires=ensure_tz_aware(m[t.c.expires]),
            created_at=ensure_tz_aware(m[t.c.created_at]),
            updated_at=ensure_tz_aware(m[t.c.updated_at]),
        )
