"""Logical-to-physical table name mapping and schema variants."""

from dataclasses import dataclass, fields
from enum import Enum
from typing import Mapping


class SchemaVariant(str, Enum):
    """Physical schema flavour served by the adapter.

    CURRENT uses generated string ids and camelCase columns.
    LEGACY uses auto-increment integer ids and snake_case columns.
    """

    CURRENT = "current"
    LEGACY = "legacy"


# Logical entity name -> ModelMapping field
ENTITY_FIELDS: dict[str, str] = {
    "User": "user",
    "Account": "account",
    "Session": "session",
    "VerificationRequest": "verification_request",
}

_DEFAULT_NAMES: dict[SchemaVariant, dict[str, str]] = {
    SchemaVariant.CURRENT: {
        entity: entity.lower() for entity in ENTITY_FIELDS
    },
    SchemaVariant.LEGACY: {
        "User": "users",
        "Account": "accounts",
        "Session": "sessions",
        "VerificationRequest": "verification_requests",
    },
}


@dataclass(frozen=True)
class ModelMapping:
    """Physical table names for the four entity kinds.

    Only names are configurable; fields and constraints are fixed.
    """

    user: str
    account: str
    session: str
    verification_request: str

    def __post_init__(self) -> None:
        names = [getattr(self, f.name) for f in fields(self)]
        if any(not name for name in names):
            msg = "Table names cannot be empty"
            raise ValueError(msg)
        if len(set(names)) != len(names):
            msg = f"Table names must be distinct: {names}"
            raise ValueError(msg)

    @classmethod
    def default(cls, variant: SchemaVariant = SchemaVariant.CURRENT) -> "ModelMapping":
        return cls.from_dict({}, variant)

    @classmethod
    def from_dict(
        cls,
        mapping: Mapping[str, str],
        variant: SchemaVariant = SchemaVariant.CURRENT,
    ) -> "ModelMapping":
        """Build a mapping keyed by logical entity name.

        Entities missing from ``mapping`` keep the variant's default name.
        """
        unknown = set(mapping) - set(ENTITY_FIELDS)
        if unknown:
            msg = f"Unknown entity names in model mapping: {sorted(unknown)}"
            raise ValueError(msg)

        names = {**_DEFAULT_NAMES[SchemaVariant(variant)], **mapping}
        return cls(**{ENTITY_FIELDS[entity]: names[entity] for entity in ENTITY_FIELDS})

    def as_dict(self) -> dict[str, str]:
        return {entity: getattr(self, attr) for entity, attr in ENTITY_FIELDS.items()}
