"""ORM models for the prospect directory."""

from prospect_kernel.models.company import Company
from prospect_kernel.models.contact import Contact

__all__ = ["Company", "Contact"]
