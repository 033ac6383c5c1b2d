"""
Profile model
"""

from dataclasses import dataclass
from typing import Optional

from .versioned_model import VersionedModel


@dataclass(repr=False)
class Profile(VersionedModel):
    """An account profile. `entity_id` is the account id."""

    display_name: Optional[str] = None
    email: Optional[str] = None
    birthday: Optional[str] = None
    phone: Optional[str] = None
    whatsapp: Optional[str] = None
    telegram: Optional[str] = None
    organization_id: Optional[str] = None

    def __repr__(self):
        return f"Profile(entity_id={self.entity_id!r}, display_name={self.display_name!r})"
