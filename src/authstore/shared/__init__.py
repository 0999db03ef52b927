"""Shared helpers for time handling and identifier generation."""

from authstore.shared.identifiers import (
    compound_id,
    generate_id,
    generate_token,
    hash_token,
)
from authstore.shared.time import (
    ensure_tz_aware,
    ensure_tz_aware_or_none,
    to_utc,
    utc_now,
)

__all__ = [
    "compound_id",
    "ensure_tz_aware",
    "ensure_tz_aware_or_none",
    "generate_id",
    "generate_token",
    "hash_token",
    "to_utc",
    "utc_now",
]
