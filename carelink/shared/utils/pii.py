"""PII handling for carelink log records.

Student identifiers only ever reach a log record as salted digests, and
message text only as an unsalted fingerprint. Services configure the salt
at startup; code embedding the analysis engine as a library may skip
that, in which case identifiers are dropped from logs instead of hashed.
"""
import hashlib
import logging
from typing import Optional

logger = logging.getLogger(__name__)

MIN_SALT_LENGTH = 32

_PII_SALT: Optional[str] = None
_unsalted_warning_logged = False


def configure_pii_salt(salt: str) -> None:
    """Set the deployment-wide salt for student identifier digests.

    Raises:
        ValueError: If salt is empty or shorter than MIN_SALT_LENGTH
    """
    global _PII_SALT, _unsalted_warning_logged
    if not salt or len(salt) < MIN_SALT_LENGTH:
        logger.critical(
            "PII_SALT_CONFIGURATION_FAILED",
            extra={"reason": "Salt too short or empty", "min_length": MIN_SALT_LENGTH}
        )
        raise ValueError(f"PII salt must be at least {MIN_SALT_LENGTH} characters")

    _PII_SALT = salt
    _unsalted_warning_logged = False
    logger.info("PII_SALT_CONFIGURED", extra={"salt_length": len(salt)})


def is_pii_salt_configured() -> bool:
    return _PII_SALT is not None


def hash_pii(value: str) -> str:
    """Salted SHA-256 hex digest of an identifier.

    Raises:
        RuntimeError: If the salt has not been configured
    """
    if _PII_SALT is None:
        raise RuntimeError("PII salt not configured. Call configure_pii_salt() first.")

    return hashlib.sha256(f"{_PII_SALT}{value}".encode()).hexdigest()


def hash_student_id(student_id: Optional[str]) -> Optional[str]:
    """Digest of a student id for log records, or None.

    Returns None when there is no id or no salt has been configured; the
    raw id is never returned. The missing salt is reported once.
    """
    global _unsalted_warning_logged
    if not student_id:
        return None

    if _PII_SALT is None:
        if not _unsalted_warning_logged:
            logger.warning(
                "PII_HASH_SKIPPED",
                extra={"reason": "Salt not configured", "action": "student ids omitted from logs"}
            )
            _unsalted_warning_logged = True
        return None

    return hash_pii(student_id)


def hash_text_for_audit(text: str) -> str:
    """Unsalted SHA-256 fingerprint of message text."""
    return hashlib.sha256(text.encode()).hexdigest()
