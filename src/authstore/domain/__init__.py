"""Records and configuration types for the four stored entity kinds.

This domain handles:
- User, Account, Session and VerificationRequest records
- Logical-to-physical table naming (ModelMapping)
- Schema variant selection (SchemaVariant)
"""

from authstore.domain.model_mapping import ENTITY_FIELDS, ModelMapping, SchemaVariant
from authstore.domain.records import (
    Account,
    ExpiredCleanup,
    Session,
    User,
    VerificationRequest,
)

__all__ = [
    "ENTITY_FIELDS",
    "Account",
    "ExpiredCleanup",
    "ModelMapping",
    "SchemaVariant",
    "Session",
    "User",
    "VerificationRequest",
]
