"""
Two-tier secret encryption used by Sailor secret resources.

Each secret is encrypted with its own data-encryption-key (DEK). The DEK is
encrypted with a key-encryption-key (KEK) derived from the connection's
secret key and access key. Both layers use AES-256-GCM with the nonce
prepended to the ciphertext, base64 encoded on the wire.
"""

import base64
import binascii
import logging
import os
from dataclasses import dataclass
from typing import Any, Dict, Mapping

from cryptography.exceptions import InvalidTag
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.ciphers.aead import AESGCM
from cryptography.hazmat.primitives.kdf.pbkdf2 import PBKDF2HMAC

from ..core.exceptions import SecretDecodeError


logger = logging.getLogger(__name__)

KEY_LENGTH = 32
NONCE_LENGTH = 12
KDF_ITERATIONS = 200_000

FIELD_ENCRYPTED_SECRET = "encryptedSecret"
FIELD_ENCRYPTED_DEK = "encryptedDEK"


@dataclass(frozen=True)
class SecretRecord:
    """
    Encrypted form of one secret as stored on disk or served remotely.

    Attributes:
        encrypted_secret: base64(nonce || AES-GCM(secret, DEK))
        encrypted_dek: base64(nonce || AES-GCM(DEK, KEK))
    """
    encrypted_secret: str
    encrypted_dek: str

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "SecretRecord":
        try:
            encrypted_secret = data[FIELD_ENCRYPTED_SECRET]
            encrypted_dek = data[FIELD_ENCRYPTED_DEK]
        except (KeyError, TypeError) as e:
            raise SecretDecodeError(f"secret record is missing field {e}") from e
        if not isinstance(encrypted_secret, str) or not isinstance(encrypted_dek, str):
            raise SecretDecodeError("secret record fields must be strings")
        return cls(encrypted_secret=encrypted_secret, encrypted_dek=encrypted_dek)

    def to_dict(self) -> Dict[str, str]:
        return {
            FIELD_ENCRYPTED_SECRET: self.encrypted_secret,
            FIELD_ENCRYPTED_DEK: self.encrypted_dek,
        }


def derive_kek(secret_key: str, access_key: str, iterations: int = KDF_ITERATIONS) -> bytes:
    """
    Derive the key-encryption-key from connection credentials.

    Args:
        secret_key: Connection secret key, used as the KDF password
        access_key: Connection access key, used as the KDF salt
        iterations: PBKDF2 iteration count

    Returns:
        32 byte key
    """
    if not secret_key or not access_key:
        raise SecretDecodeError("cannot derive key without secret key and access key")

    kdf = PBKDF2HMAC(
        algorithm=hashes.SHA256(),
        length=KEY_LENGTH,
        salt=access_key.encode("utf-8"),
        iterations=iterations,
    )
    return kdf.derive(secret_key.encode("utf-8"))


def _seal(plaintext: bytes, key: bytes) -> str:
    nonce = os.urandom(NONCE_LENGTH)
    ciphertext = AESGCM(key).encrypt(nonce, plaintext, None)
    return base64.b64encode(nonce + ciphertext).decode("ascii")


def _open(token: str, key: bytes, what: str) -> bytes:
    try:
        data = base64.b64decode(token, validate=True)
    except (binascii.Error, ValueError) as e:
        raise SecretDecodeError(f"{what} is not valid base64") from e

    if len(data) <= NONCE_LENGTH:
        raise SecretDecodeError(f"{what} is too short")

    nonce, ciphertext = data[:NONCE_LENGTH], data[NONCE_LENGTH:]
    try:
        return AESGCM(key).decrypt(nonce, ciphertext, None)
    except InvalidTag as e:
        raise SecretDecodeError(f"{what} failed authentication, wrong keys or tampered data") from e


def decrypt_dek(encrypted_dek: str, kek: bytes) -> bytes:
    """Decrypt a per-secret data-encryption-key with the KEK."""
    dek = _open(encrypted_dek, kek, "encrypted DEK")
    if len(dek) != KEY_LENGTH:
        raise SecretDecodeError("decrypted DEK has the wrong length")
    return dek


def decrypt_with_dek(encrypted_secret: str, dek: bytes) -> str:
    """Decrypt a secret payload with its data-encryption-key."""
    plaintext = _open(encrypted_secret, dek, "encrypted secret")
    try:
        return plaintext.decode("utf-8")
    except UnicodeDecodeError as e:
        raise SecretDecodeError("decrypted secret is not valid UTF-8") from e


def decrypt_record(record: SecretRecord, kek: bytes) -> str:
    """Decrypt one secret record to plaintext."""
    dek = decrypt_dek(record.encrypted_dek, kek)
    return decrypt_with_dek(record.encrypted_secret, dek)


def seal_secret(plaintext: str, kek: bytes) -> SecretRecord:
    """
    Encrypt a secret with a fresh DEK, wrapping the DEK with the KEK.

    Produces records in the format consumed by decrypt_record.
    """
    dek = AESGCM.generate_key(bit_length=KEY_LENGTH * 8)
    return SecretRecord(
        encrypted_secret=_seal(plaintext.encode("utf-8"), dek),
        encrypted_dek=_seal(dek, kek),
    )


def seal_secrets(secrets: Mapping[str, str], secret_key: str, access_key: str) -> Dict[str, Dict[str, str]]:
    """Encrypt a name to plaintext mapping into the wire format."""
    kek = derive_kek(secret_key, access_key)
    return {name: seal_secret(value, kek).to_dict() for name, value in secrets.items()}
