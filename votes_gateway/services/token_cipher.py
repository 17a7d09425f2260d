"""Serialization and optional encryption of credential records at rest."""

from __future__ import annotations

import base64
import hashlib
from typing import Optional

from cryptography.fernet import Fernet, InvalidToken
from pydantic import ValidationError

from votes_gateway.models import CredentialRecord


class CredentialCipher:
    """Turn credential records into store values and back.

    With a secret the JSON document is sealed with a Fernet key derived from
    it. Without one records are stored as plain JSON. Plain JSON values are
    always readable so records written before a secret was configured keep
    working.
    """

    SEALED_PREFIX = "fernet:"

    def __init__(self, *, secret: Optional[str] = None) -> None:
        self._fernet: Optional[Fernet] = None
        if secret:
            digest = hashlib.sha256(secret.encode("utf-8")).digest()
            self._fernet = Fernet(base64.urlsafe_b64encode(digest))

    @property
    def encrypts(self) -> bool:
        return self._fernet is not None

    def dumps(self, record: CredentialRecord) -> str:
        """Serialize every field of ``record`` into a store value."""
        document = record.model_dump_json()
        if self._fernet is None:
            return document
        token = self._fernet.encrypt(document.encode("utf-8")).decode("utf-8")
        return f"{self.SEALED_PREFIX}{token}"

    def loads(self, value: str | bytes) -> CredentialRecord:
        """Parse a store value. Raises ``ValueError`` for anything unreadable."""
        if isinstance(value, bytes):
            value = value.decode("utf-8")

        if value.startswith(self.SEALED_PREFIX):
            if self._fernet is None:
                raise ValueError("Sealed credential found but no secret is configured.")
            try:
                value = self._fernet.decrypt(
                    value[len(self.SEALED_PREFIX):].encode("utf-8")
                ).decode("utf-8")
            except InvalidToken as exc:
                raise ValueError(
                    "Failed to decrypt credential; invalid ciphertext provided."
                ) from exc

        try:
            return CredentialRecord.model_validate_json(value)
        except ValidationError as exc:
            raise ValueError(f"Stored credential is malformed: {exc}") from exc


__all__ = ["CredentialCipher"]
