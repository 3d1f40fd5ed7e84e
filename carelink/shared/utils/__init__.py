"""Shared utilities for the carelink platform."""
from .pii import (
    configure_pii_salt,
    hash_pii,
    hash_student_id,
    hash_text_for_audit,
    is_pii_salt_configured,
)

__all__ = [
    "configure_pii_salt",
    "hash_pii",
    "hash_student_id",
    "hash_text_for_audit",
    "is_pii_salt_configured",
]
