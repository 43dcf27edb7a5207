"""
Secret encryption primitives.
"""

from .crypto import (
    SecretRecord,
    derive_kek,
    decrypt_dek,
    decrypt_with_dek,
    decrypt_record,
    seal_secret,
    seal_secrets,
)

__all__ = [
    "SecretRecord",
    "derive_kek",
    "decrypt_dek",
    "decrypt_with_dek",
    "decrypt_record",
    "seal_secret",
    "seal_secrets",
]
