"""Domain model exports."""

from .credentials import CredentialRecord
from .ratings import ItemType, RatingSubmission

__all__ = ["CredentialRecord", "ItemType", "RatingSubmission"]
