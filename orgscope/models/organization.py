"""
Organization model
"""

from dataclasses import dataclass

from .versioned_model import VersionedModel
from typing import Optional


@dataclass
class Organization(VersionedModel):
    """An organization model."""

    name: Optional[str] = None
    code: Optional[str] = None
    industry: Optional[str] = None
    # account id of the owner; the owner's seat lives in `Member` with role `owner`
    owner_id: Optional[str] = None
