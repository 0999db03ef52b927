"""SQLAlchemy table definitions for the auth schema.

Tables are thin persistence mappings built per adapter on a private
MetaData, so several model mappings can coexist in one process and one
database. Column keys are always snake_case; the physical column names
follow the schema variant.
"""

from dataclasses import dataclass

from sqlalchemy import (
    Column,
    DateTime,
    ForeignKey,
    Integer,
    MetaData,
    String,
    Table,
    Text,
    UniqueConstraint,
)

from authstore.domain import ModelMapping, SchemaVariant
from authstore.shared.identifiers import ID_LENGTH


def _column_name(key: str, variant: SchemaVariant) -> str:
    if variant == SchemaVariant.LEGACY:
        return key
    head, *rest = key.split("_")
    return head + "".join(part.capitalize() for part in rest)


class _ColumnFactory:
    def __init__(self, variant: SchemaVariant):
        self._variant = variant

    def __call__(self, key: str, *args, **kwargs) -> Column:
        return Column(_column_name(key, self._variant), *args, key=key, **kwargs)

    def id(self) -> Column:
        if self._variant == SchemaVariant.LEGACY:
            return self("id", Integer, primary_key=True, autoincrement=True)
        return self("id", String(ID_LENGTH), primary_key=True)

    def user_fk(self, users: Table) -> Column:
        id_type = Integer if self._variant == SchemaVariant.LEGACY else String(ID_LENGTH)
        return self(
            "user_id",
            id_type,
            ForeignKey(users.c.id, ondelete="CASCADE"),
            nullable=False,
            index=True,
        )

    def timestamps(self) -> list[Column]:
        return [
            self("created_at", DateTime(timezone=True), nullable=False),
            self("updated_at", DateTime(timezone=True), nullable=False),
        ]


@dataclass(frozen=True)
class AuthTables:
    """The four tables of one model mapping."""

    metadata: MetaData
    variant: SchemaVariant
    mapping: ModelMapping
    user: Table
    account: Table
    session: Table
    verification_request: Table

    @classmethod
    def build(
        cls,
        mapping: ModelMapping | None = None,
        variant: SchemaVariant = SchemaVariant.CURRENT,
    ) -> "AuthTables":
        variant = SchemaVariant(variant)
        mapping = mapping or ModelMapping.default(variant)
        metadata = MetaData()
        col = _ColumnFactory(variant)
        # Integer ids must never be handed out twice
        table_kwargs = {"sqlite_autoincrement": True} if variant == SchemaVariant.LEGACY else {}

        user = Table(
            mapping.user,
            metadata,
            col.id(),
            col("name", String(255), nullable=True),
            col("email", String(255), unique=True, nullable=True),
            col("email_verified", DateTime(timezone=True), nullable=True),
            col("image", Text, nullable=True),
            *col.timestamps(),
            **table_kwargs,
        )

        provider_id = col("provider_id", String(255), nullable=False)
        provider_account_id = col("provider_account_id", String(255), nullable=False)
        account_columns = [
            col.id(),
            col.user_fk(user),
            col("provider_type", String(255), nullable=False),
            provider_id,
            provider_account_id,
            col("refresh_token", Text, nullable=True),
            col("access_token", Text, nullable=True),
            col("access_token_expires", DateTime(timezone=True), nullable=True),
            *col.timestamps(),
        ]
        if variant == SchemaVariant.LEGACY:
            account_columns.append(col("compound_id", String(64), unique=True, nullable=False))

        account = Table(
            mapping.account,
            metadata,
            *account_columns,
            UniqueConstraint(
                provider_id,
                provider_account_id,
                name=f"uq_{mapping.account}_provider_identity",
            ),
            **table_kwargs,
        )

        session = Table(
            mapping.session,
            metadata,
            col.id(),
            col.user_fk(user),
            col("expires", DateTime(timezone=True), nullable=False),
            col("session_token", String(255), unique=True, nullable=False),
            col("access_token", String(255), unique=True, nullable=False),
            *col.timestamps(),
            **table_kwargs,
        )

        identifier = col("identifier", String(255), nullable=False)
        token = col("token", String(255), unique=True, nullable=False)
        verification_request = Table(
            mapping.verification_request,
            metadata,
            col.id(),
            identifier,
            token,
            col("expires", DateTime(timezone=True), nullable=False),
            *col.timestamps(),
            UniqueConstraint(
                identifier,
                token,
                name=f"uq_{mapping.verification_request}_identifier_token",
            ),
            **table_kwargs,
        )

        return cls(
            metadata=metadata,
            variant=variant,
            mapping=mapping,
            user=user,
            account=account,
            session=session,
            verification_request=verification_request,
        )
