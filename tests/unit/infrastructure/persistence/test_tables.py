"""Tests for the auth table definitions."""

import pytest
from sqlalchemy import Integer, String, UniqueConstraint

from authstore import AuthTables, ModelMapping, SchemaVariant


def _unique_constraint_names(table) -> set[str]:
    return {
        c.name for c in table.constraints if isinstance(c, UniqueConstraint) and c.name
    }


class TestTableNames:
    """Tests for physical table naming."""

    def test_current_defaults(self):
        tables = AuthTables.build()

        assert tables.user.name == "user"
        assert tables.account.name == "account"
        assert tables.session.name == "session"
        assert tables.verification_request.name == "verificationrequest"

    def test_legacy_defaults(self):
        tables = AuthTables.build(variant=SchemaVariant.LEGACY)

        assert tables.user.name == "users"
        assert tables.account.name == "accounts"
        assert tables.session.name == "sessions"
        assert tables.verification_request.name == "verification_requests"

    def test_custom_mapping(self):
        mapping = ModelMapping.from_dict({"Session": "login_sessions"})

        tables = AuthTables.build(mapping)

        assert tables.session.name == "login_sessions"
        assert tables.user.name == "user"

    def test_each_build_has_its_own_metadata(self):
        first = AuthTables.build()
        second = AuthTables.build()

        assert first.metadata is not second.metadata


class TestColumns:
    """Column keys are stable, physical names follow the variant."""

    @pytest.mark.parametrize(
        ("variant", "expected"),
        [
            (SchemaVariant.CURRENT, "providerAccountId"),
            (SchemaVariant.LEGACY, "provider_account_id"),
        ],
    )
    def test_physical_column_names(self, variant, expected):
        tables = AuthTables.build(variant=variant)

        assert tables.account.c.provider_account_id.name == expected

    def test_current_column_names(self):
        tables = AuthTables.build()

        assert tables.user.c.email_verified.name == "emailVerified"
        assert tables.session.c.session_token.name == "sessionToken"
        assert tables.account.c.access_token_expires.name == "accessTokenExpires"
        assert tables.verification_request.c.created_at.name == "createdAt"
        assert tables.user.c.email.name == "email"

    def test_current_ids_are_strings(self):
        tables = AuthTables.build()

        assert isinstance(tables.user.c.id.type, String)
        assert isinstance(tables.session.c.user_id.type, String)

    def test_legacy_ids_are_integers(self):
        tables = AuthTables.build(variant=SchemaVariant.LEGACY)

        assert isinstance(tables.user.c.id.type, Integer)
        assert isinstance(tables.account.c.user_id.type, Integer)

    def test_compound_id_only_in_legacy(self):
        assert "compound_id" not in AuthTables.build().account.c
        assert "compound_id" in AuthTables.build(variant=SchemaVariant.LEGACY).account.c

    def test_foreign_keys_cascade(self):
        tables = AuthTables.build()

        for table in (tables.account, tables.session):
            (fk,) = table.c.user_id.foreign_keys
            assert fk.column is tables.user.c.id
            assert fk.ondelete == "CASCADE"


class TestConstraints:
    """Uniqueness lives in the schema."""

    def test_unique_columns(self):
        tables = AuthTables.build()

        assert tables.user.c.email.unique
        assert tables.session.c.session_token.unique
        assert tables.session.c.access_token.unique
        assert tables.verification_request.c.token.unique

    def test_named_composite_constraints(self):
        tables = AuthTables.build()

        assert "uq_account_provider_identity" in _unique_constraint_names(tables.account)
        assert "uq_verificationrequest_identifier_token" in _unique_constraint_names(
            tables.verification_request,
        )

    def test_constraint_names_follow_mapping(self):
        mapping = ModelMapping.from_dict({"Account": "linked"})

        tables = AuthTables.build(mapping)

        assert "uq_linked_provider_identity" in _unique_constraint_names(tables.account)
