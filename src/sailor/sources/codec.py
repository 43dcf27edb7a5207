"""
Per-kind decoding of raw resource bytes.

Mounted config and misc files wrap their payload in an envelope
(`{"_content": "<text>"}`); remote and fallback payloads are plain.
Secrets are always a name to encrypted-record mapping and are decrypted
before anything is published.
"""

import json
import logging
import threading
from types import MappingProxyType
from typing import Any, Callable, Dict, Optional

from ..core.exceptions import DecodeError, SailorError, SecretDecodeError
from ..core.models import ConnectionContext, ResourceKind
from ..vault.crypto import SecretRecord, decrypt_record, derive_kek


logger = logging.getLogger(__name__)

ENVELOPE_FIELD = "_content"

Decoder = Callable[[Any], Any]


def unwrap_envelope(raw: bytes) -> str:
    """
    Return the text carried inside an envelope document.

    Raises:
        DecodeError: If the bytes are not an envelope
    """
    try:
        document = json.loads(raw)
    except (ValueError, UnicodeDecodeError) as e:
        raise DecodeError(f"envelope is not valid JSON: {e}") from e

    if not isinstance(document, dict) or ENVELOPE_FIELD not in document:
        raise DecodeError(f"envelope has no {ENVELOPE_FIELD} field")

    content = document[ENVELOPE_FIELD]
    if not isinstance(content, str):
        raise DecodeError(f"envelope field {ENVELOPE_FIELD} must be a string")
    return content


def _load_json(data, what: str) -> Any:
    try:
        return json.loads(data)
    except (ValueError, UnicodeDecodeError) as e:
        raise DecodeError(f"{what} is not valid JSON: {e}") from e


class ResourceCodec:
    """
    Turns raw bytes into the values published for each resource kind.

    Configuration and secret shapes are supplied by the caller through
    optional decoders (a dataclass constructor, a pydantic model's
    `model_validate`, ...). Without a decoder the parsed JSON document is
    published as is.
    """

    def __init__(
        self,
        connection: ConnectionContext,
        config_decoder: Optional[Decoder] = None,
        secret_decoder: Optional[Decoder] = None,
    ):
        self.connection = connection
        self.config_decoder = config_decoder
        self.secret_decoder = secret_decoder
        self._kek: Optional[bytes] = None
        self._kek_lock = threading.Lock()

    def decode(self, kind: ResourceKind, raw: bytes, enveloped: bool = False) -> Any:
        """
        Decode raw bytes for one resource kind.

        Args:
            kind: Resource kind the bytes belong to
            raw: Bytes read from the source
            enveloped: Whether config/misc bytes are wrapped in an envelope

        Returns:
            The decoded value (config object, secret mapping, or misc bytes)

        Raises:
            DecodeError: If the payload is malformed
        """
        if kind == ResourceKind.CONFIG:
            return self.decode_config(raw, enveloped)
        if kind == ResourceKind.SECRET:
            return self.decode_secrets(raw)
        if kind == ResourceKind.MISC:
            return self.decode_misc(raw, enveloped)
        raise DecodeError(f"unknown resource kind: {kind}")

    def decode_config(self, raw: bytes, enveloped: bool = False) -> Any:
        data = unwrap_envelope(raw) if enveloped else raw
        document = _load_json(data, "config")
        if self.config_decoder is None and not isinstance(document, dict):
            raise DecodeError(f"config must be a JSON object, got {type(document).__name__}")
        return self._apply(self.config_decoder, document, "config")

    def decode_misc(self, raw: bytes, enveloped: bool = False) -> bytes:
        if enveloped:
            return unwrap_envelope(raw).encode("utf-8")
        return bytes(raw)

    def decode_secrets(self, raw: bytes) -> Any:
        document = _load_json(raw, "secrets")
        if not isinstance(document, dict):
            raise DecodeError("secrets payload must be a JSON object")

        kek = self._get_kek()
        plaintext: Dict[str, str] = {}
        for name, record_data in document.items():
            record = SecretRecord.from_dict(record_data)
            try:
                plaintext[name] = decrypt_record(record, kek)
            except SecretDecodeError as e:
                raise SecretDecodeError(f"secret {name}: {e}", resource=name) from e

        if self.secret_decoder is None:
            return MappingProxyType(plaintext)
        return self._apply(self.secret_decoder, plaintext, "secrets")

    def _get_kek(self) -> bytes:
        # Credentials are immutable for the codec's lifetime
        with self._kek_lock:
            if self._kek is None:
                self._kek = derive_kek(self.connection.secret_key, self.connection.access_key)
            return self._kek

    @staticmethod
    def _apply(decoder: Optional[Decoder], document: Any, what: str) -> Any:
        if decoder is None:
            return document
        try:
            return decoder(document)
        except SailorError:
            raise
        except Exception as e:
            raise DecodeError(f"{what} decoder rejected the document: {e}") from e
