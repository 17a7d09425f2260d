"""Service layer exports."""

from .credentials import CredentialManager, TokenState
from .ratings import RatingsService
from .token_cipher import CredentialCipher

__all__ = [
    "CredentialCipher",
    "CredentialManager",
    "RatingsService",
    "TokenState",
]
